"""
Monochrome 64x32 framebuffer with XOR sprite drawing.
"""

import numpy as np
from PIL import Image

from .constants import DISPLAY_WIDTH, DISPLAY_HEIGHT, SPRITE_WIDTH


class Framebuffer:
    """
    32 rows x 64 columns of 1-bit pixels, stored as a uint8 array indexed [y, x].
    Only clear() and draw_sprite() mutate it.
    """

    def __init__(self):
        self.pixels = np.zeros((DISPLAY_HEIGHT, DISPLAY_WIDTH), dtype=np.uint8)

    def clear(self):
        self.pixels.fill(0)

    def draw_sprite(self, x: int, y: int, sprite) -> bool:
        """
        XOR an 8-pixel-wide sprite onto the screen with its top-left corner at (x, y).

        Each sprite byte is one row, MSB is the leftmost pixel. Rows and columns
        that fall off the right or bottom edge are clipped, not wrapped.
        Returns True if any set pixel was turned off.
        """
        sprite = np.asarray(sprite, dtype=np.uint8)
        rows = min(len(sprite), DISPLAY_HEIGHT - y)
        cols = min(SPRITE_WIDTH, DISPLAY_WIDTH - x)
        if rows <= 0 or cols <= 0:
            return False

        bits = np.unpackbits(sprite[:rows].reshape(-1, 1), axis=1)[:, :cols]
        region = self.pixels[y:y + rows, x:x + cols]
        collision = bool(np.any(region & bits))
        region ^= bits
        return collision

    def view(self) -> np.ndarray:
        """Read-only view of the pixel grid for renderers"""
        view = self.pixels.view()
        view.flags.writeable = False
        return view

    def as_text(self, on: str = '██', off: str = '  ') -> str:
        return '\n'.join(''.join(on if pixel else off for pixel in row) for row in self.pixels)

    def to_image(self, scale: int = 8) -> Image.Image:
        """Get display as a scaled grayscale image"""
        if scale < 1:
            raise ValueError(f"scale must be at least 1, got {scale}")
        scaled = np.repeat(np.repeat(self.pixels, scale, axis=0), scale, axis=1)
        return Image.fromarray((scaled * 255).astype(np.uint8))

    def save_png(self, path, scale: int = 8):
        self.to_image(scale).save(path, format='PNG')
