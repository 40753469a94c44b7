import enum
import logging

import numpy as np

from pathlib import Path
from typing import List, Union

from chipvm.errors import RomTooLarge, RomUnreadable

logger = logging.getLogger(__name__)

# Constants
RAM_SIZE = 4096
REGISTER_COUNT = 16
KEY_COUNT = 16
GAME_START_ADDRESS = 512
INTERPRETER_END_ADDRESS = 80
DIGIT_SPRITE_HEIGHT = 5
STACK_CAPACITY = 12
SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
MAX_PROGRAM_SIZE = RAM_SIZE - GAME_START_ADDRESS

DIGIT_SPRITES = bytes.fromhex(
    "f0909090f0"  # 0
    "2060202070"  # 1
    "f010f080f0"  # 2
    "f010f010f0"  # 3
    "9090f01010"  # 4
    "f080f010f0"  # 5
    "f080f090f0"  # 6
    "f010204040"  # 7
    "f090f090f0"  # 8
    "f090f010f0"  # 9
    "f090f09090"  # A
    "e090e090e0"  # B
    "f0808080f0"  # C
    "e0909090e0"  # D
    "f080f080f0"  # E
    "f080f08080"  # F
)


class QuirksMode(enum.Enum):
    """
    The CHIP-8 variant whose behaviour the shift, bitwise and register dump / load opcodes follow.
    """
    CHIP8 = "chip8"
    SUPERCHIP = "superchip"
    XOCHIP = "xochip"


def load_rom(path: Union[str, Path]) -> bytes:
    """
    Read a program image from disk.
    :param path: The path of the program image.
    :return: The raw bytes of the program.
    """
    path = Path(path)
    logger.debug(f"Loading game at path {path}.")
    try:
        with path.open("rb") as file:
            return file.read()
    except OSError as error:
        raise RomUnreadable(f"Game could not be read from {path}: {error.strerror or error}.") from error


class Machine:
    """
    The architectural state of a CHIP-8 machine.  Holds no behaviour beyond its own lifecycle; instructions are executed against it by the engine.
    """
    def __init__(self, quirks: QuirksMode = QuirksMode.CHIP8, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        """
        Constructor.  Prefer Machine.create, which also loads a program.
        :param quirks: The variant to emulate, fixed for the lifetime of the machine.
        :param width: The width of the framebuffer in pixels.
        :param height: The height of the framebuffer in pixels.
        """
        self._quirks = quirks
        self.width = width
        self.height = height

        self.ram = bytearray(RAM_SIZE)
        self.registers = bytearray(REGISTER_COUNT)
        self.register_i = 0
        self.program_counter = GAME_START_ADDRESS
        self.stack: List[int] = []
        self.delay_timer = 0
        self.sound_timer = 0
        self.keys: List[bool] = [False] * KEY_COUNT
        self.pixels = np.zeros((width, height), dtype=bool)
        self.draw_flag = False

        self.load_digit_sprites()

    @classmethod
    def create(cls, program: bytes, quirks: QuirksMode = QuirksMode.CHIP8, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT) -> "Machine":
        """
        Build a fresh machine with the given program loaded at the start address.
        :param program: The raw bytes of the program.
        :param quirks: The variant to emulate.
        :param width: The width of the framebuffer in pixels.
        :param height: The height of the framebuffer in pixels.
        :return: The machine, ready to execute its first instruction.
        """
        machine = cls(quirks, width, height)
        machine.load_program(program)
        return machine

    @property
    def quirks(self) -> QuirksMode:
        return self._quirks

    @property
    def sound_active(self) -> bool:
        return self.sound_timer != 0

    def reset(self, program: bytes) -> None:
        """
        Reset all state except the quirks mode and load the given program.
        :param program: The raw bytes of the program.
        """
        self.check_program_size(program)
        self.ram = bytearray(RAM_SIZE)
        self.registers = bytearray(REGISTER_COUNT)
        self.register_i = 0
        self.program_counter = GAME_START_ADDRESS
        self.stack = []
        self.delay_timer = 0
        self.sound_timer = 0
        self.keys = [False] * KEY_COUNT
        self.pixels.fill(False)
        self.draw_flag = True

        self.load_digit_sprites()
        self.load_program(program)

    @staticmethod
    def check_program_size(program: bytes) -> None:
        if len(program) > MAX_PROGRAM_SIZE:
            raise RomTooLarge(f"Game is too big to fit in memory.  Size: {len(program)} bytes, maximum: {MAX_PROGRAM_SIZE} bytes.")

    def load_program(self, program: bytes) -> None:
        """
        Copy the program into memory at the start address.
        :param program: The raw bytes of the program.
        """
        self.check_program_size(program)
        self.ram[GAME_START_ADDRESS:GAME_START_ADDRESS + len(program)] = program
        logger.debug(f"Loaded {len(program)} bytes at {hex(GAME_START_ADDRESS)}.")

    def load_digit_sprites(self) -> None:
        """
        Load the sprites for the hexadecimal digits 0-f into memory.
        """
        self.ram[0:INTERPRETER_END_ADDRESS] = DIGIT_SPRITES

    def press_key(self, key: int, pressed: bool) -> None:
        self.keys[key] = pressed
        logger.debug(f"Key State Changed.  Key: {key}, Pressed: {pressed}.")

    def clear_screen(self) -> None:
        self.pixels.fill(False)
        self.draw_flag = True
