import logging

import numpy as np
import pygame

from typing import Tuple, Union

from chipvm.config import Config, clamp_lerp_rate
from chipvm.machine import Machine

logger = logging.getLogger(__name__)

WINDOW_TITLE = "chipvm"

Number = Union[float, np.ndarray]


def unpack_color(color: int) -> Tuple[int, int, int, int]:
    """
    Split a 0xRRGGBBAA color into its channels.
    :param color: The packed color.
    :return: The red, green, blue and alpha channels.
    """
    return (color >> 24) & 0xFF, (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF


def color_lerp(start: Number, end: Number, t: float) -> Number:
    """
    Linearly interpolate from start towards end.  Works on single channels and on whole arrays of them.
    :param start: The current value.
    :param end: The target value.
    :param t: How far to move towards the target, 0 staying put and 1 arriving.
    :return: The interpolated value.
    """
    return start + (end - start) * t


class Display:
    """
    Draws the framebuffer of a machine into a scaled pygame window.
    """
    def __init__(self, config: Config):
        """
        Constructor.  Opens the window.
        :param config: The session config, providing the size, scale, colors and fade rate.
        """
        self.width = config.width
        self.height = config.height
        self.scale = config.scale
        self.outlines = config.outlines
        self.lerp_rate = clamp_lerp_rate(config.color_lerp_rate)
        self.foreground = np.array(unpack_color(config.foreground)[:3], dtype=np.float64)
        self.background = np.array(unpack_color(config.background)[:3], dtype=np.float64)

        self.colors = np.empty((self.width, self.height, 3), dtype=np.float64)
        self.colors[:] = self.background

        pygame.display.set_caption(WINDOW_TITLE)
        self.screen = pygame.display.set_mode((self.width * self.scale, self.height * self.scale))
        self.inter_screen = pygame.Surface((self.width, self.height))
        self.clear()

    def set_title(self, title: str) -> None:
        pygame.display.set_caption(title)

    def change_lerp_rate(self, delta: float) -> None:
        self.lerp_rate = clamp_lerp_rate(round(self.lerp_rate + delta, 1))
        logger.info(f"Color lerp rate is now {self.lerp_rate}.")

    def clear(self) -> None:
        """
        Fill the window with the background color.
        """
        self.colors[:] = self.background
        self.settled = True
        self.screen.fill(tuple(int(channel) for channel in self.background))
        pygame.display.flip()

    def fading(self) -> bool:
        """
        Whether some pixel has not yet reached its target color, meaning the next frame must be drawn even if the framebuffer did not change.
        """
        return not self.settled

    def draw(self, machine: Machine) -> None:
        """
        Update the display from the framebuffer.  Each pixel fades towards the foreground or background color depending on whether it is lit.
        :param machine: The machine whose framebuffer to draw.
        """
        target = np.where(machine.pixels[..., np.newaxis], self.foreground, self.background)
        self.colors = color_lerp(self.colors, target, self.lerp_rate)
        arrived = np.abs(self.colors - target) < 1.0
        self.colors[arrived] = target[arrived]
        self.settled = bool(arrived.all())

        pygame.surfarray.blit_array(self.inter_screen, np.rint(self.colors).astype(np.uint8))
        pygame.transform.scale(self.inter_screen, (self.width * self.scale, self.height * self.scale), self.screen)

        if self.outlines:
            outline_color = tuple(int(channel) for channel in self.background)
            for x_coordinate, y_coordinate in np.argwhere(machine.pixels):
                rect = (int(x_coordinate) * self.scale, int(y_coordinate) * self.scale, self.scale, self.scale)
                pygame.draw.rect(self.screen, outline_color, rect, 1)

        pygame.display.flip()
