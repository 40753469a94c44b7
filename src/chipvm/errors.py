from typing import Optional


class ChipError(Exception):
    """
    Base class for every error raised by the emulator.
    """
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RomError(ChipError):
    """
    The program image could not be turned into a machine.
    """


class RomTooLarge(RomError):
    """
    The program image does not fit between the entry address and the end of memory.
    """


class RomUnreadable(RomError):
    """
    The program image could not be read from its source.
    """


class Fault(ChipError):
    """
    An execution-time error which ends the current session.
    """
    def __init__(self, message: str, address: Optional[int] = None, opcode: Optional[int] = None):
        """
        Constructor.
        :param message: Description of the fault.
        :param address: The address of the instruction which faulted, if known.
        :param opcode: The opcode which faulted, if known.
        """
        super().__init__(message)
        self.address = address
        self.opcode = opcode

    def __str__(self) -> str:
        if self.address is None or self.opcode is None:
            return self.message
        return f"{self.message} (opcode {self.opcode:04x} at {self.address:#05x})"


class StackOverflow(Fault):
    pass


class StackUnderflow(Fault):
    pass


class MemoryOutOfRange(Fault):
    pass
