import sys

from chipvm.app import main

sys.exit(main())
