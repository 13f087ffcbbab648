import logging
from dataclasses import dataclass, field
from enum import Enum

from bmp_constants import Compression
from bmp_errors import BMPError
from bmp_header import (
    detect_version,
    parse_info_header,
    read_file_header,
    read_info_header_size,
    validate_compression,
    validate_geometry,
    validate_magic,
)
from bmp_masks import resolve_masks
from bmp_palette import RGBA, read_palette
from bmp_pixels import decode_pixels
from bmp_source import ByteSource

logger = logging.getLogger(__name__)


@dataclass
class Image:
    """Decoded RGBA8 pixels, row-major with a bottom-left origin."""

    width: int
    height: int
    pixels: list = field(default_factory=list)

    def pixel(self, x, y) -> RGBA:
        # y counts upward from the bottom row
        return self.pixels[y * self.width + x]

    def rows_top_down(self):
        """Yield rows from the top of the image down, for sinks that draw that way."""
        for y in range(self.height - 1, -1, -1):
            yield self.pixels[y * self.width:(y + 1) * self.width]


class DecodeStage(Enum):
    START = 0
    FILE_HEADER_READ = 1
    MAGIC_VALIDATED = 2
    INFO_HEADER_VERSION_DETECTED = 3
    INFO_HEADER_PARSED = 4
    COMPRESSION_VALIDATED = 5
    PALETTE_READ = 6
    PIXELS_DECODED = 7
    DONE = 8
    FAILED = 9


class BMPParser:
    def __init__(self, source):
        self.source = source
        self.metadata = {}      # Header information for display (width, height, etc.)
        self.color_table = []   # Palette (for indexed BMPs)
        self.image = None
        self.stage = DecodeStage.START
        self.error = None

    def load(self):
        """Decode the whole source; any failure aborts and is re-raised."""
        if self.stage is not DecodeStage.START:
            raise RuntimeError("BMPParser.load() can only run once")
        try:
            with ByteSource(self.source) as source:
                self.image = self._decode(source)
        except BMPError as e:
            logger.debug("Decode failed at %s: %s", self.stage.name, e)
            self.error = e
            self.stage = DecodeStage.FAILED
            self.image = None
            raise
        self._advance(DecodeStage.DONE)
        return self.image

    def _advance(self, stage):
        logger.debug("%s -> %s", self.stage.name, stage.name)
        self.stage = stage

    def _decode(self, source):
        # File header and signature
        file_header = read_file_header(source)
        self._advance(DecodeStage.FILE_HEADER_READ)
        validate_magic(file_header)
        self._advance(DecodeStage.MAGIC_VALIDATED)

        # Info header, dispatched on its declared size
        header_size = read_info_header_size(source)
        detect_version(header_size)
        self._advance(DecodeStage.INFO_HEADER_VERSION_DETECTED)
        header = parse_info_header(source, header_size)
        self._advance(DecodeStage.INFO_HEADER_PARSED)

        validate_compression(header)
        self._advance(DecodeStage.COMPRESSION_VALIDATED)
        validate_geometry(header)

        # Palette for indexed images, channel masks for direct ones
        self.color_table = read_palette(source, header)
        if self.color_table:
            self._advance(DecodeStage.PALETTE_READ)
        masks = resolve_masks(source, header)

        self._parse_metadata(file_header, header, masks)

        pixel_data = decode_pixels(source, header, file_header.pixel_offset, self.color_table, masks)
        self._advance(DecodeStage.PIXELS_DECODED)

        return Image(header.width, header.abs_height, pixel_data)

    def _parse_metadata(self, file_header, header, masks):
        self.metadata['file_size'] = file_header.file_size
        self.metadata['data_offset'] = file_header.pixel_offset
        self.metadata['header'] = header.version.name
        self.metadata['width'] = header.width
        self.metadata['height'] = header.height
        self.metadata['bpp'] = header.bpp
        self.metadata['compression'] = Compression(header.compression).name
        self.metadata['image_size'] = header.image_size
        self.metadata['resolution'] = (header.x_resolution, header.y_resolution)
        self.metadata['top_down'] = header.is_top_down
        if self.color_table:
            self.metadata['palette_colors'] = len(self.color_table)
        if masks is not None:
            self.metadata['masks'] = tuple(f"0x{m:08X}" for m in (masks.red, masks.green, masks.blue, masks.alpha))


def decode(source):
    """Decode a BMP from a path, a bytes-like buffer or a seekable binary stream."""
    return BMPParser(source).load()
