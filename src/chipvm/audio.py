import logging

import numpy as np
import pygame

from chipvm.config import MAX_VOLUME, Config

logger = logging.getLogger(__name__)

SOUND_BUFFER = 4096
VOLUME_STEP = 500


def square_wave(sample_rate: int, frequency: int, volume: int) -> np.ndarray:
    """
    Build one second of a square wave, to be played on a loop.
    :param sample_rate: Samples per second.
    :param frequency: Frequency of the tone in Hz.
    :param volume: Amplitude of the wave, 0 to 32767.
    :return: Signed 16 bit mono samples.
    """
    period = max(2, sample_rate // frequency)
    half_period = period // 2
    sample_indices = np.arange(sample_rate)
    high = (sample_indices // half_period) % 2 == 1
    return np.where(high, volume, -volume).astype(np.int16)


class Tone:
    """
    A continuous beep which plays while the sound timer of the machine is running.
    """
    def __init__(self, config: Config):
        """
        Constructor.  Opens the mixer.
        :param config: The session config, providing the frequency, sample rate and volume.
        """
        self.sample_rate = config.sample_rate
        self.frequency = config.tone_frequency
        self.volume = config.volume
        self.playing = False

        pygame.mixer.init(self.sample_rate, -16, 1, SOUND_BUFFER)
        self.sound_player = self.make_sound()

    def make_sound(self) -> pygame.mixer.Sound:
        return pygame.sndarray.make_sound(square_wave(self.sample_rate, self.frequency, self.volume))

    def update(self, active: bool) -> None:
        """
        Start or stop the beep.
        :param active: True if the beep should be heard, False otherwise.
        """
        if active and not self.playing:
            self.sound_player.play(-1)
            logger.debug("Starting sound.")
        elif not active and self.playing:
            self.sound_player.stop()
            logger.debug("Stopping sound.")
        self.playing = active

    def change_volume(self, delta: int) -> None:
        """
        Raise or lower the volume of the beep, rebuilding the wave.
        :param delta: The amount to change the amplitude by.
        """
        volume = min(MAX_VOLUME, max(0, self.volume + delta))
        if volume == self.volume:
            return

        self.volume = volume
        was_playing = self.playing
        self.update(False)
        self.sound_player = self.make_sound()
        self.update(was_playing)
        logger.info(f"Volume is now {self.volume}.")

    def stop(self) -> None:
        self.update(False)
