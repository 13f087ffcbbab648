import logging
from typing import NamedTuple

from bmp_constants import FILE_HEADER_SIZE, INDEXED_BIT_DEPTHS, PALETTE_ENTRY_SIZE
from bmp_errors import InvalidPaletteError

logger = logging.getLogger(__name__)


class RGBA(NamedTuple):
    r: int
    g: int
    b: int
    a: int


def palette_size(header):
    # Zero means "all colors the bit depth can address"
    return header.colors_used or (1 << header.bpp)


def read_palette(source, header):
    """Read the color table of an indexed (<= 8 bpp) image."""
    if header.bpp not in INDEXED_BIT_DEPTHS:
        return []

    count = palette_size(header)
    start = FILE_HEADER_SIZE + header.header_size
    length = count * PALETTE_ENTRY_SIZE
    if start + length > source.size:
        raise InvalidPaletteError(
            f"Palette of {count} colors at offset {start} runs past end of file ({source.size} bytes)"
        )

    b = source.read_at(start, length)
    color_table = []
    for i in range(count):
        blue, green, red, reserved = b[i * 4:i * 4 + 4]
        color_table.append(RGBA(red, green, blue, reserved))

    logger.debug("Read %d palette entries at offset %d", count, start)
    return color_table
