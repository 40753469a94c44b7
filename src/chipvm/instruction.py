from typing import NamedTuple

UPPER_CHAR_MASK = 240
LOWER_CHAR_MASK = 15
ADDRESS_MASK = 4095


def get_upper_char(byte: int) -> int:
    """
    Get the upper character (first 4 bits) of the given byte.
    :param byte: The byte from which to extract the character.
    :return: The upper character.
    """
    return (byte & UPPER_CHAR_MASK) >> 4


def get_lower_char(byte: int) -> int:
    """
    Get the lower character (last 4 bits) of the given byte.
    :param byte: The byte from which to extract the character.
    :return: The lower character.
    """
    return byte & LOWER_CHAR_MASK


class Instruction(NamedTuple):
    """
    A decoded opcode.  Only lives for the step which fetched it.
    """
    opcode: int
    family: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int

    @classmethod
    def from_bytes(cls, opcode: bytes) -> "Instruction":
        """
        Decode the two big-endian bytes of an opcode.
        :param opcode: The two bytes of the opcode, as read from memory.
        :return: The decoded instruction.
        """
        high, low = opcode[0], opcode[1]
        return cls(
            opcode=(high << 8) | low,
            family=get_upper_char(high),
            x=get_lower_char(high),
            y=get_upper_char(low),
            n=get_lower_char(low),
            nn=low,
            nnn=((high << 8) | low) & ADDRESS_MASK,
        )

    def hex(self) -> str:
        return f"{self.opcode:04x}"
