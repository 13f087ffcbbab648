"""
BMP file header and versioned DIB (info) header parsing.

The DIB header comes in five layered versions, each a superset of the one
before it. Instead of a struct per version, one InfoHeader record is filled
by an ordered list of extension steps; every step whose version is covered
by the declared header size is applied, in order.
"""

import logging
from dataclasses import dataclass

from bmp_constants import (
    BMP_MAGIC,
    CORE_HEADER_SIZE,
    FILE_HEADER_SIZE,
    INFO_HEADER_SIZE_OFFSET,
    LCS_sRGB,
    SUPPORTED_BIT_DEPTHS,
    SUPPORTED_COMPRESSION,
    HeaderVersion,
)
from bmp_errors import (
    BadMagicError,
    InvalidDimensionsError,
    UnsupportedBitDepthError,
    UnsupportedColorSpaceError,
    UnsupportedCompressionError,
    UnsupportedHeaderVersionError,
)
from endian import read_i32, read_u16, read_u32

logger = logging.getLogger(__name__)


@dataclass
class FileHeader:
    magic: int
    file_size: int
    pixel_offset: int


@dataclass
class InfoHeader:
    header_size: int
    version: HeaderVersion
    width: int = 0
    height: int = 0
    planes: int = 0
    bpp: int = 0
    compression: int = 0
    image_size: int = 0
    x_resolution: int = 0
    y_resolution: int = 0
    colors_used: int = 0
    colors_important: int = 0
    # V2+
    red_mask: int = 0
    green_mask: int = 0
    blue_mask: int = 0
    # V3+
    alpha_mask: int = 0
    # V4+
    color_space: int = 0
    # V5
    intent: int = 0
    profile_data: int = 0
    profile_size: int = 0

    @property
    def is_top_down(self):
        # Negative height means rows are stored top row first
        return self.height < 0

    @property
    def abs_height(self):
        return abs(self.height)


def read_file_header(source):
    b = source.read_at(0, FILE_HEADER_SIZE)
    header = FileHeader(
        magic=read_u16(b, 0),
        file_size=read_u32(b, 2),
        pixel_offset=read_u32(b, 10),
    )
    logger.debug("File header: size=%d, pixel offset=%d", header.file_size, header.pixel_offset)
    return header


def validate_magic(header):
    if header.magic != BMP_MAGIC:
        raise BadMagicError(header.magic.to_bytes(2, 'little'))


def read_info_header_size(source):
    return read_u32(source.read_at(INFO_HEADER_SIZE_OFFSET, 4), 0)


def detect_version(header_size):
    if header_size == CORE_HEADER_SIZE:
        raise UnsupportedHeaderVersionError(
            header_size, "OS/2 BITMAPCOREHEADER (12 bytes) is not supported"
        )
    try:
        return HeaderVersion(header_size)
    except ValueError:
        raise UnsupportedHeaderVersionError(header_size) from None


# Extension steps, offsets relative to the start of the info header

def _extend_info(b, header):
    header.width = read_i32(b, 4)
    header.height = read_i32(b, 8)
    header.planes = read_u16(b, 12)
    header.bpp = read_u16(b, 14)
    header.compression = read_u32(b, 16)
    header.image_size = read_u32(b, 20)
    header.x_resolution = read_i32(b, 24)
    header.y_resolution = read_i32(b, 28)
    header.colors_used = read_u32(b, 32)
    header.colors_important = read_u32(b, 36)


def _extend_v2(b, header):
    header.red_mask = read_u32(b, 40)
    header.green_mask = read_u32(b, 44)
    header.blue_mask = read_u32(b, 48)


def _extend_v3(b, header):
    header.alpha_mask = read_u32(b, 52)


def _extend_v4(b, header):
    header.color_space = read_u32(b, 56)


def _extend_v5(b, header):
    header.intent = read_u32(b, 108)
    header.profile_data = read_u32(b, 112)
    header.profile_size = read_u32(b, 116)


EXTENSION_STEPS = (
    (HeaderVersion.INFO, _extend_info),
    (HeaderVersion.V2, _extend_v2),
    (HeaderVersion.V3, _extend_v3),
    (HeaderVersion.V4, _extend_v4),
    (HeaderVersion.V5, _extend_v5),
)


def parse_info_header(source, header_size=None):
    """
    Read the DIB header and return one fully populated InfoHeader.

    The declared size is validated before any other header byte is read, so
    an unknown size fails the same way whatever the rest of the file holds.

    Raises:
        UnsupportedHeaderVersionError: Size is not 40, 52, 56, 108 or 124.
        UnsupportedColorSpaceError: V4/V5 header that is not sRGB.
    """
    if header_size is None:
        header_size = read_info_header_size(source)
    version = detect_version(header_size)

    b = source.read_at(FILE_HEADER_SIZE, header_size)
    header = InfoHeader(header_size=header_size, version=version)
    for step_version, step in EXTENSION_STEPS:
        if version >= step_version:
            step(b, header)

    logger.debug(
        "Info header %s: %dx%d, %d bpp, compression=%d",
        version.name, header.width, header.height, header.bpp, header.compression,
    )

    if version >= HeaderVersion.V4 and header.color_space != LCS_sRGB:
        raise UnsupportedColorSpaceError(header.color_space)

    return header


def validate_compression(header):
    if header.compression not in SUPPORTED_COMPRESSION:
        raise UnsupportedCompressionError(header.compression)


def validate_geometry(header):
    # Runs after compression: BI_JPEG/BI_PNG files declare 0 bpp
    if header.bpp not in SUPPORTED_BIT_DEPTHS:
        raise UnsupportedBitDepthError(header.bpp)
    if header.width <= 0 or header.height == 0:
        raise InvalidDimensionsError(header.width, header.height)
