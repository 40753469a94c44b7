import enum
import logging
import sys

import easygui
import pygame

from pathlib import Path
from typing import List, Optional

from chipvm.audio import VOLUME_STEP, Tone
from chipvm.config import TIMER_HZ, Config, parse_args
from chipvm.display import Display
from chipvm.engine import Engine
from chipvm.errors import Fault, RomError
from chipvm.machine import Machine, load_rom

logger = logging.getLogger(__name__)

# Constants
LERP_STEP = 0.1
GAMES_PATH = str(Path.cwd().joinpath("games", "*.ch8"))
GAME_FILE_TYPES = [["*.ch8", "*.chip8", "CHIP-8"]]

KEY_LOOKUP = {
    pygame.K_1: 1,
    pygame.K_q: 4,
    pygame.K_a: 7,
    pygame.K_z: 10,
    pygame.K_2: 2,
    pygame.K_w: 5,
    pygame.K_s: 8,
    pygame.K_x: 0,
    pygame.K_3: 3,
    pygame.K_e: 6,
    pygame.K_d: 9,
    pygame.K_c: 11,
    pygame.K_4: 12,
    pygame.K_r: 13,
    pygame.K_f: 14,
    pygame.K_v: 15,
}


class EmulatorState(enum.Enum):
    RUNNING = "running"
    PAUSED = "paused"
    QUIT = "quit"


def configure_logging(debug: bool) -> None:
    """
    Set up the logging.  Opcode tracing is only shown when asked for or when running under a debugger.
    :param debug: True if debug messages should be shown.
    """
    level = logging.DEBUG if debug or "pydevd" in sys.modules else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s]:  %(message)s", stream=sys.stdout)


def choose_rom() -> Optional[Path]:
    """
    Let the user pick a game with a file dialog.
    :return: The path of the chosen game, None if the dialog was cancelled.
    """
    file_name = easygui.fileopenbox(title="Select a Game", default=GAMES_PATH, filetypes=GAME_FILE_TYPES)
    if not file_name:
        return None
    return Path(file_name)


def is_reset_key(event) -> bool:
    if event.key in (pygame.K_ASTERISK, pygame.K_KP_MULTIPLY):
        return True
    return event.key == pygame.K_8 and bool(event.mod & pygame.KMOD_SHIFT)


class App:
    """
    Drives a machine at a fixed number of instructions per 60Hz tick and connects it to the window, the speaker and the keyboard.
    """
    def __init__(self, config: Config, machine: Machine, engine: Engine, display: Display, tone: Tone, program: bytes):
        """
        Constructor.
        :param config: The session config.
        :param machine: The machine to run, with the program already loaded.
        :param engine: The engine executing the instructions.
        :param display: Where the framebuffer is drawn.
        :param tone: The beep gated by the sound timer.
        :param program: The loaded program, kept so the machine can be reset.
        """
        self.config = config
        self.machine = machine
        self.engine = engine
        self.display = display
        self.tone = tone
        self.program = program
        self.state = EmulatorState.RUNNING

    def reset(self) -> None:
        """
        Restart the current game from scratch.
        """
        self.machine.reset(self.program)
        self.tone.stop()
        self.display.clear()
        logger.info("Machine reset.")

    def load_game(self) -> None:
        """
        Stop the current game and replace it with one picked by the user.  The current game keeps running if the pick fails.
        """
        self.tone.stop()
        path = choose_rom()
        if path is None:
            easygui.msgbox("Pick a game to play!  Press the L key to re-open the game picker.", "No Game Selected")
            return

        try:
            program = load_rom(path)
            self.machine.reset(program)
        except RomError as error:
            logger.error(str(error))
            easygui.msgbox(str(error), "Game Not Loaded")
            return

        self.program = program
        self.display.clear()
        self.display.set_title(path.stem)
        self.state = EmulatorState.RUNNING
        logger.info(f"Loaded game {path}.")

    def toggle_pause(self) -> None:
        if self.state is EmulatorState.RUNNING:
            self.state = EmulatorState.PAUSED
            self.tone.stop()
            logger.info("======= PAUSED =======")
        elif self.state is EmulatorState.PAUSED:
            self.state = EmulatorState.RUNNING
            logger.info("Resumed.")

    def handle_events(self) -> None:
        for event in pygame.event.get():
            self.handle_event(event)

    def handle_event(self, event) -> None:
        """
        React to a single pygame event: quitting, hotkeys and the CHIP-8 keypad.
        :param event: The event to handle.
        """
        if event.type == pygame.QUIT:
            self.state = EmulatorState.QUIT
            return

        if event.type not in (pygame.KEYDOWN, pygame.KEYUP):
            return

        pressed = event.type == pygame.KEYDOWN
        if pressed:
            if event.key == pygame.K_ESCAPE:
                self.state = EmulatorState.QUIT
                return
            elif event.key == pygame.K_SPACE:
                self.toggle_pause()
            elif is_reset_key(event):
                self.reset()
            elif event.key == pygame.K_l:
                self.load_game()
            elif event.key == pygame.K_j:
                self.display.change_lerp_rate(-LERP_STEP)
            elif event.key == pygame.K_k:
                self.display.change_lerp_rate(LERP_STEP)
            elif event.key == pygame.K_o:
                self.tone.change_volume(-VOLUME_STEP)
            elif event.key == pygame.K_p:
                self.tone.change_volume(VOLUME_STEP)

        # CHIP-8 Controls
        key = KEY_LOOKUP.get(event.key, None)
        if key is not None:
            self.machine.press_key(key, pressed)

    def run_tick(self) -> None:
        """
        Run one 60Hz tick: the instruction budget, the timers, the beep and the screen.
        """
        if self.state is EmulatorState.RUNNING:
            for _ in range(self.config.instructions_per_tick):
                self.engine.step(self.machine)
            self.engine.decay_timers(self.machine)
            self.tone.update(self.machine.sound_active)

        if self.machine.draw_flag or self.display.fading():
            self.display.draw(self.machine)
            self.machine.draw_flag = False

    def run(self) -> int:
        """
        Loop until the user quits or the machine faults.
        :return: The process exit status.
        """
        clock = pygame.time.Clock()
        try:
            while True:
                self.handle_events()
                if self.state is EmulatorState.QUIT:
                    return 0

                try:
                    self.run_tick()
                except Fault as fault:
                    logger.error(f"Machine fault, stopping: {fault}")
                    return 1

                clock.tick(TIMER_HZ)
        finally:
            self.tone.stop()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point: parse the command line, load the game and run it.
    :param argv: The command line arguments, excluding the program name.
    :return: The process exit status.
    """
    config = parse_args(argv)
    configure_logging(config.debug)

    path = config.rom
    picked = path is None
    if picked:
        path = choose_rom()
        if path is None:
            easygui.msgbox("Pick a game to play!", "No Game Selected")
            return 1

    try:
        program = load_rom(path)
        machine = Machine.create(program, config.quirks, config.width, config.height)
    except RomError as error:
        logger.error(str(error))
        if picked:
            easygui.msgbox(str(error), "Game Not Loaded")
        return 1
    logger.info(f"Loaded game {path} in {config.quirks.value} mode.")

    tone = Tone(config)
    pygame.init()
    try:
        display = Display(config)
        display.set_title(path.stem)
        app = App(config, machine, Engine(tall_sprites=config.tall_sprites), display, tone, program)
        return app.run()
    finally:
        pygame.quit()


if __name__ == "__main__":
    sys.exit(main())
