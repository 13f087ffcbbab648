import logging

from bmp_constants import INDEXED_BIT_DEPTHS
from bmp_errors import InvalidPaletteError
from bmp_masks import extract_channel
from bmp_palette import RGBA
from endian import unpack_le

logger = logging.getLogger(__name__)


def row_stride(bpp, width):
    # Each row is padded to a multiple of 4 bytes
    return ((bpp * width + 31) // 32) * 4


def unpack_indices(row, bpp, width):
    """Unpack `width` palette indices, leftmost pixel in the high bits."""
    if bpp == 8:
        return list(row[:width])
    mask = (1 << bpp) - 1
    indices = []
    for col in range(width):
        bit = col * bpp
        shift = 8 - bpp - (bit % 8)
        indices.append((row[bit // 8] >> shift) & mask)
    return indices


def _decode_indexed_row(row, bpp, width, color_table):
    pixels = []
    for index in unpack_indices(row, bpp, width):
        if index >= len(color_table):
            raise InvalidPaletteError(
                f"Pixel index {index} outside palette of {len(color_table)} colors"
            )
        pixels.append(color_table[index])
    return pixels


def _decode_direct_row(row, bpp, width, masks):
    pixel_size = bpp // 8
    red, green, blue, alpha = masks.red, masks.green, masks.blue, masks.alpha
    r_shift, g_shift, b_shift, a_shift = masks.shifts
    pixels = []
    for col in range(width):
        packed = unpack_le(row, col * pixel_size, pixel_size)
        pixels.append(RGBA(
            extract_channel(packed, red, r_shift),
            extract_channel(packed, green, g_shift),
            extract_channel(packed, blue, b_shift),
            # Zero alpha mask: channel absent, alpha stays 0
            extract_channel(packed, alpha, a_shift) if alpha else 0,
        ))
    return pixels


def decode_pixels(source, header, pixel_offset, color_table=None, masks=None):
    """
    Decode the pixel array into a flat, bottom-left origin list of RGBA.

    Output row 0 is always the bottom of the image. Bottom-up files are read
    in file order; top-down files (negative height) start from the last row
    on disk and walk the stride backward.
    """
    bpp = header.bpp
    width = header.width
    height = header.abs_height
    stride = row_stride(bpp, width)
    top_down = header.is_top_down
    indexed = bpp in INDEXED_BIT_DEPTHS

    logger.debug(
        "Decoding %s pixels: stride=%d, rows=%d, %s",
        "indexed" if indexed else "direct", stride, height,
        "top-down" if top_down else "bottom-up",
    )

    pixel_data = []
    for row in range(height):
        file_row = height - 1 - row if top_down else row
        row_bytes = source.read_at(pixel_offset + file_row * stride, stride)

        if indexed:
            pixel_data.extend(_decode_indexed_row(row_bytes, bpp, width, color_table))
        else:
            pixel_data.extend(_decode_direct_row(row_bytes, bpp, width, masks))

    return pixel_data
