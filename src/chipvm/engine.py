import logging
import random

from typing import Optional, Tuple

from chipvm.errors import MemoryOutOfRange, StackOverflow, StackUnderflow
from chipvm.instruction import Instruction
from chipvm.machine import DIGIT_SPRITE_HEIGHT, KEY_COUNT, STACK_CAPACITY, Machine, QuirksMode

logger = logging.getLogger(__name__)

# Constants
BYTE_MASK = 255
WORD_MASK = 65535
FLAG_REGISTER = 15
SPRITE_WIDTH = 8
TALL_SPRITE_SIZE = 16


class Engine:
    """
    Fetches, decodes and executes instructions against a machine.
    """
    def __init__(self, rng: Optional[random.Random] = None, tall_sprites: bool = False):
        """
        Constructor.
        :param rng: The random number generator used by the random opcode.  A freshly seeded one is used if not provided.
        :param tall_sprites: True if drawing a sprite with a height of 0 should draw a 16x16 sprite on XO-CHIP machines.
        """
        self.rng = rng if rng is not None else random.Random()
        self.tall_sprites = tall_sprites

    # region Execution
    def step(self, machine: Machine) -> None:
        """
        Fetches the current instruction and executes it.
        :param machine: The machine to run the instruction against.
        """
        address = machine.program_counter
        if address + 1 >= len(machine.ram):
            raise MemoryOutOfRange("Program counter ran past the end of memory.", address=address)

        instruction = Instruction.from_bytes(machine.ram[address:address + 2])
        self.run_opcode(machine, instruction)

    def decay_timers(self, machine: Machine) -> bool:
        """
        Count both timers down by one, stopping at 0.  Called once per 60Hz tick.
        :param machine: The machine whose timers to decrement.
        :return: True if the sound timer is still running, False otherwise.
        """
        if machine.delay_timer > 0:
            machine.delay_timer -= 1
        if machine.sound_timer > 0:
            machine.sound_timer -= 1
        return machine.sound_timer != 0

    def run_opcode(self, machine: Machine, instruction: Instruction) -> None:
        """
        Route the provided instruction to the correct method to execute it.  Increment the program counter to the next instruction first.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        machine.program_counter = (machine.program_counter + 2) & WORD_MASK
        family = instruction.family

        if family == 0:
            if instruction.opcode == 0x00e0:
                self.opcode_clear_screen(machine, instruction)
            elif instruction.opcode == 0x00ee:
                self.opcode_return_from_subroutine(machine, instruction)
            else:
                self.opcode_unrecognized(machine, instruction)
        elif family == 1:
            self.opcode_goto(machine, instruction)
        elif family == 2:
            self.opcode_call_subroutine(machine, instruction)
        elif family == 3:
            self.opcode_if_equal(machine, instruction)
        elif family == 4:
            self.opcode_if_not_equal(machine, instruction)
        elif family == 5:
            if instruction.n == 0:
                self.opcode_if_register_equal(machine, instruction)
            else:
                self.opcode_unrecognized(machine, instruction)
        elif family == 6:
            self.opcode_set_register_value(machine, instruction)
        elif family == 7:
            self.opcode_add_value(machine, instruction)
        elif family == 8:
            self.run_arithmetic_opcode(machine, instruction)
        elif family == 9:
            if instruction.n == 0:
                self.opcode_if_register_not_equal(machine, instruction)
            else:
                self.opcode_unrecognized(machine, instruction)
        elif family == 10:
            self.opcode_set_register_i(machine, instruction)
        elif family == 11:
            self.opcode_goto_addition(machine, instruction)
        elif family == 12:
            self.opcode_random_bitwise_and(machine, instruction)
        elif family == 13:
            self.opcode_draw_sprite(machine, instruction)
        elif family == 14:
            if instruction.nn == 0x9e:
                self.opcode_if_key_pressed(machine, instruction)
            elif instruction.nn == 0xa1:
                self.opcode_if_key_not_pressed(machine, instruction)
            else:
                self.opcode_unrecognized(machine, instruction)
        else:
            self.run_misc_opcode(machine, instruction)

    def run_arithmetic_opcode(self, machine: Machine, instruction: Instruction) -> None:
        """
        Second level of routing for the 8XYN family, keyed on the last character.
        """
        last_char = instruction.n

        if last_char == 0:
            self.opcode_set_register_value_other_register(machine, instruction)
        elif last_char == 1:
            self.opcode_set_register_bitwise_or(machine, instruction)
        elif last_char == 2:
            self.opcode_set_register_bitwise_and(machine, instruction)
        elif last_char == 3:
            self.opcode_set_register_bitwise_xor(machine, instruction)
        elif last_char == 4:
            self.opcode_add_other_register(machine, instruction)
        elif last_char == 5:
            self.opcode_subtract_from_first_register(machine, instruction)
        elif last_char == 6:
            self.opcode_bit_shift_right(machine, instruction)
        elif last_char == 7:
            self.opcode_subtract_from_second_register(machine, instruction)
        elif last_char == 14:
            self.opcode_bit_shift_left(machine, instruction)
        else:
            self.opcode_unrecognized(machine, instruction)

    def run_misc_opcode(self, machine: Machine, instruction: Instruction) -> None:
        """
        Second level of routing for the FXNN family, keyed on the last byte.
        """
        last_byte = instruction.nn

        if last_byte == 0x07:
            self.opcode_get_delay_timer(machine, instruction)
        elif last_byte == 0x0a:
            self.opcode_wait_for_key_press(machine, instruction)
        elif last_byte == 0x15:
            self.opcode_set_delay_timer(machine, instruction)
        elif last_byte == 0x18:
            self.opcode_set_sound_timer(machine, instruction)
        elif last_byte == 0x1e:
            self.opcode_register_i_addition(machine, instruction)
        elif last_byte == 0x29:
            self.opcode_set_register_i_to_hex_sprite_address(machine, instruction)
        elif last_byte == 0x33:
            self.opcode_binary_coded_decimal(machine, instruction)
        elif last_byte == 0x55:
            self.opcode_register_dump(machine, instruction)
        elif last_byte == 0x65:
            self.opcode_register_load(machine, instruction)
        else:
            self.opcode_unrecognized(machine, instruction)
    # endregion

    # region Helpers
    @staticmethod
    def bounded_subtract(minuend: int, subtrahend: int) -> Tuple[int, int]:
        """
        Subtract the subtrahend from the minuend, bounded by the confines of a byte.
        :param minuend: The integer from which to subtract.
        :param subtrahend: The integer to subtract.
        :return: The result of the subtraction and the not borrow (1 if there was no borrow, 0 otherwise).
        """
        difference_of_registers = minuend - subtrahend
        result = difference_of_registers % 256
        not_borrow = 1 if difference_of_registers >= 0 else 0
        return result, not_borrow

    @staticmethod
    def check_memory_range(machine: Machine, instruction: Instruction, width: int) -> None:
        """
        Make sure that the given number of bytes starting at register I all lie within memory.
        :param machine: The machine about to be accessed.
        :param instruction: The instruction making the access.
        :param width: The number of bytes to be accessed.
        """
        if machine.register_i + width > len(machine.ram):
            raise MemoryOutOfRange(
                f"Access of {width} bytes at {hex(machine.register_i)} runs past the end of memory.",
                address=machine.program_counter - 2,
                opcode=instruction.opcode,
            )
    # endregion

    # region Opcodes
    def opcode_unrecognized(self, machine: Machine, instruction: Instruction) -> None:
        """
        Ignore an opcode which is not part of the instruction set.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        logger.debug(f"Unimplemented / Invalid Opcode: {instruction.hex()}.  Ignoring.")

    def opcode_clear_screen(self, machine: Machine, instruction: Instruction) -> None:
        """
        Clear the screen.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        machine.clear_screen()
        logger.debug(f"Execute Opcode {instruction.hex()}: Clearing the screen.")

    def opcode_return_from_subroutine(self, machine: Machine, instruction: Instruction) -> None:
        """
        Return from the current subroutine.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        if len(machine.stack) == 0:
            raise StackUnderflow("Tried to return from a subroutine when the stack is empty.", address=machine.program_counter - 2, opcode=instruction.opcode)

        machine.program_counter = machine.stack.pop()
        logger.debug(f"Execute Opcode {instruction.hex()}: Return from subroutine, continue at {hex(machine.program_counter)}.")

    def opcode_goto(self, machine: Machine, instruction: Instruction) -> None:
        """
        Jump to the provided address.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        machine.program_counter = instruction.nnn
        logger.debug(f"Execute Opcode {instruction.hex()}: Jump to address {hex(instruction.nnn)}.")

    def opcode_call_subroutine(self, machine: Machine, instruction: Instruction) -> None:
        """
        Call the subroutine at the given address.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        if len(machine.stack) >= STACK_CAPACITY:
            raise StackOverflow(f"Tried to call a subroutine with {STACK_CAPACITY} calls already on the stack.", address=machine.program_counter - 2, opcode=instruction.opcode)

        machine.stack.append(machine.program_counter)
        machine.program_counter = instruction.nnn
        logger.debug(f"Execute Opcode {instruction.hex()}: Call subroutine at address {hex(instruction.nnn)}.")

    def opcode_if_equal(self, machine: Machine, instruction: Instruction) -> None:
        """
        Skip the next instruction if the value of the provided register is equal to the provided value.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        register_value = machine.registers[instruction.x]
        logger.debug(f"Execute Opcode {instruction.hex()}: Skip next instruction if register {instruction.x}'s value ({register_value}) is {instruction.nn}.")
        if register_value == instruction.nn:
            machine.program_counter += 2
            logger.debug("Instruction skipped.")

    def opcode_if_not_equal(self, machine: Machine, instruction: Instruction) -> None:
        """
        Skip the next instruction if the value of the provided register is not equal to the provided value.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        register_value = machine.registers[instruction.x]
        logger.debug(f"Execute Opcode {instruction.hex()}: Skip next instruction if register {instruction.x}'s value ({register_value}) is not {instruction.nn}.")
        if register_value != instruction.nn:
            machine.program_counter += 2
            logger.debug("Instruction skipped.")

    def opcode_if_register_equal(self, machine: Machine, instruction: Instruction) -> None:
        """
        Skip the next instruction if the values of the two provided registers are equal.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        first_register_value = machine.registers[instruction.x]
        second_register_value = machine.registers[instruction.y]
        logger.debug(f"Execute Opcode {instruction.hex()}: Skip next instruction if register {instruction.x}'s value ({first_register_value}) is equal to register {instruction.y}'s value ({second_register_value}).")
        if first_register_value == second_register_value:
            machine.program_counter += 2
            logger.debug("Instruction skipped.")

    def opcode_set_register_value(self, machine: Machine, instruction: Instruction) -> None:
        """
        Set the value of the provided register to the provided value.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        machine.registers[instruction.x] = instruction.nn
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register {instruction.x} to {instruction.nn}.")

    def opcode_add_value(self, machine: Machine, instruction: Instruction) -> None:
        """
        Adds the provided value to the value of the provided register.  The carry flag (register 15) is not set.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        machine.registers[instruction.x] = (machine.registers[instruction.x] + instruction.nn) & BYTE_MASK
        logger.debug(f"Execute Opcode {instruction.hex()}: Add {instruction.nn} to the value of register {instruction.x}.")

    def opcode_set_register_value_other_register(self, machine: Machine, instruction: Instruction) -> None:
        """
        Set the value of the first provided register to the value of the second provided register.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        machine.registers[instruction.x] = machine.registers[instruction.y]
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register {instruction.x} to register {instruction.y}'s value ({machine.registers[instruction.y]}).")

    def opcode_set_register_bitwise_or(self, machine: Machine, instruction: Instruction) -> None:
        """
        Sets the value of the first provided register to the bitwise or of itself and the value of the second provided register.
        Register 15 is reset on the original CHIP-8.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        first_register_value = machine.registers[instruction.x]
        second_register_value = machine.registers[instruction.y]
        result = first_register_value | second_register_value
        machine.registers[instruction.x] = result
        if machine.quirks is QuirksMode.CHIP8:
            machine.registers[FLAG_REGISTER] = 0
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register {instruction.x} to the bitwise or of itself and the value of register {instruction.y} ({first_register_value} | {second_register_value} = {result}).")

    def opcode_set_register_bitwise_and(self, machine: Machine, instruction: Instruction) -> None:
        """
        Sets the value of the first provided register to the bitwise and of itself and the value of the second provided register.
        Register 15 is reset on the original CHIP-8.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        first_register_value = machine.registers[instruction.x]
        second_register_value = machine.registers[instruction.y]
        result = first_register_value & second_register_value
        machine.registers[instruction.x] = result
        if machine.quirks is QuirksMode.CHIP8:
            machine.registers[FLAG_REGISTER] = 0
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register {instruction.x} to the bitwise and of itself and the value of register {instruction.y} ({first_register_value} & {second_register_value} = {result}).")

    def opcode_set_register_bitwise_xor(self, machine: Machine, instruction: Instruction) -> None:
        """
        Sets the value of the first provided register to the bitwise xor of itself and the value of the second provided register.
        Register 15 is reset on the original CHIP-8.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        first_register_value = machine.registers[instruction.x]
        second_register_value = machine.registers[instruction.y]
        result = first_register_value ^ second_register_value
        machine.registers[instruction.x] = result
        if machine.quirks is QuirksMode.CHIP8:
            machine.registers[FLAG_REGISTER] = 0
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register {instruction.x} to the bitwise xor of itself and the value of register {instruction.y} ({first_register_value} ^ {second_register_value} = {result}).")

    def opcode_add_other_register(self, machine: Machine, instruction: Instruction) -> None:
        """
        Sets the value of the first provided register to the sum of itself and the value of the second provided register.  The carry flag (register 15) is set.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        first_register_value = machine.registers[instruction.x]
        second_register_value = machine.registers[instruction.y]
        sum_of_registers = first_register_value + second_register_value
        result = sum_of_registers & BYTE_MASK
        carry = 1 if sum_of_registers > BYTE_MASK else 0
        machine.registers[instruction.x] = result
        machine.registers[FLAG_REGISTER] = carry
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register {instruction.x} to the sum of itself and the value of register {instruction.y} ({first_register_value} + {second_register_value} = {result}, carry = {carry}).")

    def opcode_subtract_from_first_register(self, machine: Machine, instruction: Instruction) -> None:
        """
        Sets the value of the first provided register to the difference of itself and the value of the second provided register.  The not borrow flag (register 15) is set.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        first_register_value = machine.registers[instruction.x]
        second_register_value = machine.registers[instruction.y]
        result, not_borrow = self.bounded_subtract(first_register_value, second_register_value)
        machine.registers[instruction.x] = result
        machine.registers[FLAG_REGISTER] = not_borrow
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register {instruction.x} to the difference of itself and the value of register {instruction.y} ({first_register_value} - {second_register_value} = {result}, not borrow = {not_borrow}).")

    def opcode_bit_shift_right(self, machine: Machine, instruction: Instruction) -> None:
        """
        Shift a register to the right by 1 and store it in the first provided register.  Set register 15 to the value of the least significant bit before the operation.
        The original CHIP-8 shifts the second provided register; later variants shift the first one in place.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        source_register = instruction.y if machine.quirks is QuirksMode.CHIP8 else instruction.x
        source_register_value = machine.registers[source_register]
        bit_shift = source_register_value >> 1
        least_significant_bit = source_register_value & 1
        machine.registers[instruction.x] = bit_shift
        machine.registers[FLAG_REGISTER] = least_significant_bit
        logger.debug(f"Execute Opcode {instruction.hex()}: Shift the value of register {source_register} to the right by 1 into register {instruction.x} ({source_register_value} >> 1 = {bit_shift}, previous least significant bit = {least_significant_bit}).")

    def opcode_subtract_from_second_register(self, machine: Machine, instruction: Instruction) -> None:
        """
        Sets the value of the second provided register to the difference of itself and the value of the first provided register.  The not borrow flag (register 15) is set.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        first_register_value = machine.registers[instruction.x]
        second_register_value = machine.registers[instruction.y]
        result, not_borrow = self.bounded_subtract(second_register_value, first_register_value)
        machine.registers[instruction.y] = result
        machine.registers[FLAG_REGISTER] = not_borrow
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register {instruction.y} to the difference of itself and the value of register {instruction.x} ({second_register_value} - {first_register_value} = {result}, not borrow = {not_borrow}).")

    def opcode_bit_shift_left(self, machine: Machine, instruction: Instruction) -> None:
        """
        Shift a register to the left by 1 and store it in the first provided register.  Set register 15 to the value of the most significant bit before the operation.
        The original CHIP-8 shifts the second provided register; later variants shift the first one in place.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        source_register = instruction.y if machine.quirks is QuirksMode.CHIP8 else instruction.x
        source_register_value = machine.registers[source_register]
        bit_shift = (source_register_value << 1) & BYTE_MASK
        most_significant_bit = source_register_value >> 7
        machine.registers[instruction.x] = bit_shift
        machine.registers[FLAG_REGISTER] = most_significant_bit
        logger.debug(f"Execute Opcode {instruction.hex()}: Shift the value of register {source_register} to the left by 1 into register {instruction.x} ({source_register_value} << 1 = {bit_shift}, previous most significant bit = {most_significant_bit}).")

    def opcode_if_register_not_equal(self, machine: Machine, instruction: Instruction) -> None:
        """
        Skip the next instruction if the values of the two provided registers are not equal.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        first_register_value = machine.registers[instruction.x]
        second_register_value = machine.registers[instruction.y]
        logger.debug(f"Execute Opcode {instruction.hex()}: Skip next instruction if register {instruction.x}'s value ({first_register_value}) is not equal to register {instruction.y}'s value ({second_register_value}).")
        if first_register_value != second_register_value:
            machine.program_counter += 2
            logger.debug("Instruction skipped.")

    def opcode_set_register_i(self, machine: Machine, instruction: Instruction) -> None:
        """
        Set the value of register I to the provided address.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        machine.register_i = instruction.nnn
        logger.debug(f"Execute Opcode {instruction.hex()}: Set register I to {hex(instruction.nnn)}.")

    def opcode_goto_addition(self, machine: Machine, instruction: Instruction) -> None:
        """
        Jump to the provided address plus the value of register 0.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        register_value = machine.registers[0]
        machine.program_counter = instruction.nnn + register_value
        logger.debug(f"Execute Opcode {instruction.hex()}: Jump to the provided address plus the value of register 0 ({hex(instruction.nnn)} + {hex(register_value)} = {hex(machine.program_counter)}).")

    def opcode_random_bitwise_and(self, machine: Machine, instruction: Instruction) -> None:
        """
        Set the value of the provided register to the bitwise and of the provided value and a random number [0, 255].
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        random_value = self.rng.randint(0, BYTE_MASK)
        result = instruction.nn & random_value
        machine.registers[instruction.x] = result
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register {instruction.x} to the bitwise and of the provided value and a random number [0, 255] ({instruction.nn} & {random_value} = {result}).")

    def opcode_draw_sprite(self, machine: Machine, instruction: Instruction) -> None:
        """
        Draws the sprite with the provided height found at the address denoted by the value of register I to the provided x and y coordinates.
        The starting coordinates wrap around the screen, but the sprite itself is clipped at the right and bottom edges.
        The collision flag (register 15) is set to 1 if a pixel was unset, 0 otherwise.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        height = instruction.n
        sprite_width = SPRITE_WIDTH
        if height == 0 and self.tall_sprites and machine.quirks is QuirksMode.XOCHIP:
            height = TALL_SPRITE_SIZE
            sprite_width = TALL_SPRITE_SIZE
        row_bytes = sprite_width // SPRITE_WIDTH
        self.check_memory_range(machine, instruction, height * row_bytes)

        x_start = machine.registers[instruction.x] % machine.width
        y_start = machine.registers[instruction.y] % machine.height
        pixel_unset = 0
        for row in range(height):
            y_coordinate = y_start + row
            if y_coordinate >= machine.height:
                break

            row_address = machine.register_i + row * row_bytes
            row_value = int.from_bytes(machine.ram[row_address:row_address + row_bytes], "big")
            for column in range(sprite_width):
                x_coordinate = x_start + column
                if x_coordinate >= machine.width:
                    break

                if not (row_value >> (sprite_width - 1 - column)) & 1:
                    continue
                if machine.pixels[x_coordinate, y_coordinate]:
                    pixel_unset = 1
                machine.pixels[x_coordinate, y_coordinate] ^= True

        machine.registers[FLAG_REGISTER] = pixel_unset
        machine.draw_flag = True
        logger.debug(f"Execute Opcode {instruction.hex()}: Drawing the sprite with a height of {height} and found at address {hex(machine.register_i)} to the screen at the x-coordinate from the value of register {instruction.x} and y-coordinate from the value of register {instruction.y} ({x_start}, {y_start}), pixel unset = {pixel_unset}.")

    def opcode_if_key_pressed(self, machine: Machine, instruction: Instruction) -> None:
        """
        Skip the next instruction if the key represented by the value of the provided register is pressed.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        key = machine.registers[instruction.x] % KEY_COUNT
        pressed = machine.keys[key]
        logger.debug(f"Execute Opcode {instruction.hex()}: Skip next instruction if the key represented by the value of register {instruction.x} ({key}) is pressed ({pressed}).")
        if pressed:
            machine.program_counter += 2
            logger.debug("Instruction skipped.")

    def opcode_if_key_not_pressed(self, machine: Machine, instruction: Instruction) -> None:
        """
        Skip the next instruction if the key represented by the value of the provided register is not pressed.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        key = machine.registers[instruction.x] % KEY_COUNT
        pressed = machine.keys[key]
        logger.debug(f"Execute Opcode {instruction.hex()}: Skip next instruction if the key represented by the value of register {instruction.x} ({key}) is not pressed ({pressed}).")
        if not pressed:
            machine.program_counter += 2
            logger.debug("Instruction skipped.")

    def opcode_get_delay_timer(self, machine: Machine, instruction: Instruction) -> None:
        """
        Set the value of the provided register to the value of the delay timer.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        machine.registers[instruction.x] = machine.delay_timer
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register {instruction.x} to the value of the delay timer ({machine.delay_timer}).")

    def opcode_wait_for_key_press(self, machine: Machine, instruction: Instruction) -> None:
        """
        Wait until a key is pressed, at which point it is stored in the provided register and execution may resume.
        While no key is pressed the program counter is wound back so the same instruction runs again on the next step; the timers keep running meanwhile.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        for key, pressed in enumerate(machine.keys):
            if pressed:
                machine.registers[instruction.x] = key
                logger.debug(f"Execute Opcode {instruction.hex()}: Storing the key {key} in register {instruction.x}.")
                return

        machine.program_counter -= 2
        logger.debug(f"Execute Opcode {instruction.hex()}: Waiting for a keypress to store in register {instruction.x}.")

    def opcode_set_delay_timer(self, machine: Machine, instruction: Instruction) -> None:
        """
        Set the value of the delay timer to the value of the provided register.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        register_value = machine.registers[instruction.x]
        machine.delay_timer = register_value
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of the delay timer to value of register {instruction.x} ({register_value}).")

    def opcode_set_sound_timer(self, machine: Machine, instruction: Instruction) -> None:
        """
        Set the value of the sound timer to the value of the provided register.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        register_value = machine.registers[instruction.x]
        machine.sound_timer = register_value
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of the sound timer to value of register {instruction.x} ({register_value}).")

    def opcode_register_i_addition(self, machine: Machine, instruction: Instruction) -> None:
        """
        Add the value of the provided register to register I.  Register 15 is not affected.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        register_value = machine.registers[instruction.x]
        register_i_value = machine.register_i
        machine.register_i = (register_i_value + register_value) & WORD_MASK
        logger.debug(f"Execute Opcode {instruction.hex()}: Add the value of register {instruction.x} to the value of register I ({register_i_value} + {register_value} = {machine.register_i}).")

    def opcode_set_register_i_to_hex_sprite_address(self, machine: Machine, instruction: Instruction) -> None:
        """
        Sets the value of register I to the address of the hexadecimal sprite represented by the value in the provided register.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        register_value = machine.registers[instruction.x]
        machine.register_i = register_value * DIGIT_SPRITE_HEIGHT
        logger.debug(f"Execute Opcode {instruction.hex()}: Set the value of register I to the address ({machine.register_i}) of the hexadecimal sprite represented by the value of register {instruction.x} ({register_value}).")

    def opcode_binary_coded_decimal(self, machine: Machine, instruction: Instruction) -> None:
        """
        Store the Binary Coded Decimal representation of the value of the provided register in memory, starting at the value of register I.
        Hundreds digit stored in memory at the location of the value of register I.
        Tens digit stored in memory at the location of the value of register I + 1.
        Units digit stored in memory at the location of the value of register I + 2.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        self.check_memory_range(machine, instruction, 3)
        register_value = machine.registers[instruction.x]
        hundreds = register_value // 100 % 10
        tens = register_value // 10 % 10
        units = register_value % 10
        machine.ram[machine.register_i] = hundreds
        machine.ram[machine.register_i + 1] = tens
        machine.ram[machine.register_i + 2] = units
        logger.debug(f"Execute Opcode {instruction.hex()}: Store the Binary Coded Decimal representation of the value of register {instruction.x} ({register_value}), starting at the value of register I ({hex(machine.register_i)}), ({hundreds}, {tens}, {units}).")

    def opcode_register_dump(self, machine: Machine, instruction: Instruction) -> None:
        """
        Store the values of all registers from register 0 to the provided register in memory, starting at the value of register I.
        The original CHIP-8 leaves register I pointing just past the last stored value; later variants leave it untouched.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        last_register = instruction.x
        self.check_memory_range(machine, instruction, last_register + 1)
        logger.debug(f"Execute Opcode {instruction.hex()}: Dumping the values of all registers from register 0 to register {last_register} into memory, starting at the value of register I ({hex(machine.register_i)}).")
        start = machine.register_i
        machine.ram[start:start + last_register + 1] = machine.registers[:last_register + 1]
        if machine.quirks is QuirksMode.CHIP8:
            machine.register_i = start + last_register + 1

    def opcode_register_load(self, machine: Machine, instruction: Instruction) -> None:
        """
        Load the values of all registers from register 0 to the provided register from memory, starting at the value of register I.
        The original CHIP-8 leaves register I pointing just past the last loaded value; later variants leave it untouched.
        :param machine: The machine to run the instruction against.
        :param instruction: The instruction to execute.
        """
        last_register = instruction.x
        self.check_memory_range(machine, instruction, last_register + 1)
        logger.debug(f"Execute Opcode {instruction.hex()}: Loading the values of all registers from register 0 to register {last_register} from memory, starting at the value of register I ({hex(machine.register_i)}).")
        start = machine.register_i
        machine.registers[:last_register + 1] = machine.ram[start:start + last_register + 1]
        if machine.quirks is QuirksMode.CHIP8:
            machine.register_i = start + last_register + 1
    # endregion
