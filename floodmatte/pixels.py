from __future__ import annotations

from typing import NamedTuple, Sequence


class Pixel(NamedTuple):
    r: int
    g: int
    b: int
    a: int


TRANSPARENT = Pixel(0, 0, 0, 0)


def clamp_byte(value: float) -> int:
    """
    Clamp to [0, 255] with round-half-to-even, matching a clamped byte buffer write.
    """
    if value != value:  # NaN
        return 0
    return int(min(255, max(0, round(value))))


def pixel_index(x: int, y: int, width: int) -> int:
    return (y * width + x) * 4


def get_pixel(data: Sequence[int] | None, index: int) -> Pixel:
    """
    Read the RGBA pixel starting at `index`.

    Reads outside the buffer (including negative offsets and a missing buffer)
    return transparent black instead of raising.
    """
    if data is None or index < 0 or index + 3 >= len(data):
        return TRANSPARENT
    return Pixel(data[index], data[index + 1], data[index + 2], data[index + 3])


def set_pixel(data: bytearray, index: int, pixel: Sequence[float]) -> None:
    data[index] = clamp_byte(pixel[0])
    data[index + 1] = clamp_byte(pixel[1])
    data[index + 2] = clamp_byte(pixel[2])
    data[index + 3] = clamp_byte(pixel[3])


def set_pixel_alpha(data: bytearray, index: int, alpha: float) -> None:
    data[index + 3] = clamp_byte(alpha)
