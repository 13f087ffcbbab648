### BMP format constants ###
from enum import IntEnum

BMP_MAGIC = 0x4D42  # "BM" read as a little-endian u16

FILE_HEADER_SIZE = 14       # BITMAPFILEHEADER
INFO_HEADER_SIZE_OFFSET = 14
CORE_HEADER_SIZE = 12       # OS/2 BITMAPCOREHEADER, detected but rejected
BITFIELDS_MASKS_SIZE = 12   # RGB masks appended after a 40-byte header
PALETTE_ENTRY_SIZE = 4      # B, G, R, reserved

LCS_sRGB = 0x73524742  # 'sRGB'

SUPPORTED_BIT_DEPTHS = (1, 2, 4, 8, 16, 24, 32)
INDEXED_BIT_DEPTHS = (1, 2, 4, 8)


class HeaderVersion(IntEnum):
    # Value is the declared DIB header size in bytes
    INFO = 40
    V2 = 52
    V3 = 56
    V4 = 108
    V5 = 124


class Compression(IntEnum):
    BI_RGB = 0
    BI_RLE8 = 1
    BI_RLE4 = 2
    BI_BITFIELDS = 3
    BI_JPEG = 4
    BI_PNG = 5
    BI_ALPHABITFIELDS = 6
    BI_CMYK = 11
    BI_CMYKRLE8 = 12
    BI_CMYKRLE4 = 13


SUPPORTED_COMPRESSION = (Compression.BI_RGB, Compression.BI_BITFIELDS)
