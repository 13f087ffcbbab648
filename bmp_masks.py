import logging
from dataclasses import dataclass
from typing import Optional

from bmp_constants import (
    BITFIELDS_MASKS_SIZE,
    FILE_HEADER_SIZE,
    Compression,
    HeaderVersion,
)
from endian import read_u32

logger = logging.getLogger(__name__)

# Default masks for BI_RGB direct-color pixels
MASKS_555 = (0x7C00, 0x03E0, 0x001F)
MASK_ALPHA_16 = 0x8000
MASKS_888 = (0x00FF0000, 0x0000FF00, 0x000000FF)
MASK_ALPHA_32 = 0xFF000000


def mask_shift(mask) -> Optional[int]:
    """Position of the lowest set bit, or None when the channel is absent."""
    if mask == 0:
        return None
    return (mask & -mask).bit_length() - 1


@dataclass(frozen=True)
class ChannelMasks:
    red: int
    green: int
    blue: int
    alpha: int = 0

    @property
    def shifts(self):
        return (
            mask_shift(self.red),
            mask_shift(self.green),
            mask_shift(self.blue),
            mask_shift(self.alpha),
        )


def extract_channel(packed, mask, shift):
    """
    (packed & mask) >> shift, widened or narrowed to the 0..255 range.

    An 8-bit mask passes through unchanged, so 24 and 32 bpp channels are
    exactly (packed & mask) >> shift.
    """
    if shift is None:
        return 0
    value = (packed & mask) >> shift
    max_value = mask >> shift
    if max_value == 0xFF:
        return value
    return value * 255 // max_value


def _header_alpha(header):
    # A V3+ header may carry its own alpha mask; it must not be overwritten
    if header.version >= HeaderVersion.V3 and header.alpha_mask:
        return header.alpha_mask
    return None


def _bitfields_masks(source, header):
    if header.version >= HeaderVersion.V2:
        return ChannelMasks(header.red_mask, header.green_mask, header.blue_mask, header.alpha_mask)

    # Plain 40-byte header: masks follow it in a 12-byte block
    b = source.read_at(FILE_HEADER_SIZE + header.header_size, BITFIELDS_MASKS_SIZE)
    header.red_mask = read_u32(b, 0)
    header.green_mask = read_u32(b, 4)
    header.blue_mask = read_u32(b, 8)
    return ChannelMasks(header.red_mask, header.green_mask, header.blue_mask, 0)


def resolve_masks(source, header):
    """
    Produce the final channel masks for a direct-color (16/24/32 bpp) image.

    Returns None for indexed images, which use the palette instead.
    """
    bpp = header.bpp
    if bpp == 24:
        masks = ChannelMasks(*MASKS_888)
    elif bpp in (16, 32):
        if header.compression == Compression.BI_BITFIELDS:
            masks = _bitfields_masks(source, header)
        elif bpp == 16:
            alpha = _header_alpha(header)
            masks = ChannelMasks(*MASKS_555, alpha=MASK_ALPHA_16 if alpha is None else alpha)
        else:
            alpha = _header_alpha(header)
            masks = ChannelMasks(*MASKS_888, alpha=MASK_ALPHA_32 if alpha is None else alpha)
    else:
        return None

    logger.debug(
        "Channel masks: R=0x%08X G=0x%08X B=0x%08X A=0x%08X",
        masks.red, masks.green, masks.blue, masks.alpha,
    )
    return masks
