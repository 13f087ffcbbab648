"""End-to-end tests for bmp_parser: decode() and the BMPParser pipeline."""

import io

import pytest

from bmp_builder import BLACK, BLUE, GREEN, RED, WHITE, build_bmp
from bmp_errors import (
    BadMagicError,
    BMPReadError,
    InvalidDimensionsError,
    InvalidPaletteError,
    UnsupportedBitDepthError,
    UnsupportedCompressionError,
    UnsupportedHeaderVersionError,
)
from bmp_palette import RGBA
from bmp_parser import BMPParser, DecodeStage, Image, decode

RGB_2X2 = [
    b'\x00\x00\xff\x00\xff\x00',  # bottom row: red, green
    b'\xff\x00\x00\xff\xff\xff',  # top row: blue, white
]


class _PipeStream(io.RawIOBase):
    """Readable but not seekable, like a pipe or socket."""

    def __init__(self, data):
        self._data = io.BytesIO(data)

    def readable(self):
        return True

    def readinto(self, buffer):
        chunk = self._data.read(len(buffer))
        buffer[:len(chunk)] = chunk
        return len(chunk)

    def seek(self, offset, whence=io.SEEK_SET):
        raise io.UnsupportedOperation('seek')


def _indexed_4x4():
    return build_bmp(4, 4, 8, [b'\x00' * 4] * 4, palette=[RED, GREEN, BLUE, BLACK])


class TestScenarios:
    def test_indexed_all_zero(self):
        image = decode(_indexed_4x4())
        assert (image.width, image.height) == (4, 4)
        assert len(image.pixels) == 16
        assert all(p == RGBA(255, 0, 0, 0) for p in image.pixels)

    def test_24_bit_2x2(self):
        image = decode(build_bmp(2, 2, 24, RGB_2X2))
        assert image.pixel(0, 0) == RGBA(255, 0, 0, 0)
        assert image.pixel(1, 0) == RGBA(0, 255, 0, 0)
        assert image.pixel(0, 1) == RGBA(0, 0, 255, 0)
        assert image.pixel(1, 1) == RGBA(255, 255, 255, 0)

    def test_rows_top_down(self):
        image = decode(build_bmp(2, 2, 24, RGB_2X2))
        rows = list(image.rows_top_down())
        assert rows[0] == [RGBA(0, 0, 255, 0), RGBA(255, 255, 255, 0)]
        assert rows[1] == [RGBA(255, 0, 0, 0), RGBA(0, 255, 0, 0)]


class TestPixelCount:
    @pytest.mark.parametrize('bpp', [1, 2, 4, 8, 16, 24, 32])
    def test_width_times_height(self, bpp):
        width, height = 5, 3
        row = b'\x00' * ((bpp * width + 7) // 8)
        palette = [BLACK, WHITE] if bpp <= 8 else []
        image = decode(build_bmp(width, height, bpp, [row] * height, palette=palette))
        assert len(image.pixels) == width * height


class TestRowOrigin:
    def _rows(self):
        return [bytes((0, 0, v)) for v in (10, 20, 30, 40)]

    def test_negative_height_mirrors(self):
        bottom_up = decode(build_bmp(1, 4, 24, self._rows()))
        top_down = decode(build_bmp(1, -4, 24, self._rows()))
        assert top_down.height == 4
        assert top_down.pixels == list(reversed(bottom_up.pixels))

    def test_bottom_up_first_row_is_bottom(self):
        image = decode(build_bmp(1, 4, 24, self._rows()))
        assert [p.r for p in image.pixels] == [10, 20, 30, 40]

    def test_top_down_first_row_is_top(self):
        image = decode(build_bmp(1, -4, 24, self._rows()))
        assert [p.r for p in image.pixels] == [40, 30, 20, 10]

    def test_top_down_indexed(self):
        rows = [b'\x80', b'\x00']  # on-disk top row has pixel 0 set
        image = decode(build_bmp(2, -2, 1, rows, palette=[BLACK, WHITE]))
        assert image.pixel(0, 1) == RGBA(255, 255, 255, 0)
        assert image.pixel(0, 0) == RGBA(0, 0, 0, 0)


class TestIndexed:
    def test_one_bit_wide_row(self):
        image = decode(build_bmp(9, 1, 1, [bytes([0x80, 0x80])], palette=[BLACK, WHITE]))
        assert [p.r for p in image.pixels] == [255, 0, 0, 0, 0, 0, 0, 0, 255]

    def test_four_bit(self):
        palette = [BLACK, RED, GREEN, BLUE]
        image = decode(build_bmp(3, 1, 4, [bytes([0x12, 0x30])], palette=palette))
        assert image.pixels == [RGBA(255, 0, 0, 0), RGBA(0, 255, 0, 0), RGBA(0, 0, 255, 0)]

    def test_index_outside_palette(self):
        with pytest.raises(InvalidPaletteError):
            decode(build_bmp(1, 1, 8, [b'\x05'], palette=[BLACK, WHITE]))


class TestDirect:
    def test_16_bit_555(self):
        image = decode(build_bmp(2, 1, 16, [b'\x00\x7c\xff\xff']))
        assert image.pixel(0, 0) == RGBA(255, 0, 0, 0)
        assert image.pixel(1, 0) == RGBA(255, 255, 255, 255)

    def test_16_bit_565_bitfields(self):
        data = build_bmp(2, 1, 16, [b'\x00\xf8\xe0\x07'], compression=3,
                         extra_masks=(0xF800, 0x07E0, 0x001F))
        image = decode(data)
        assert image.pixel(0, 0) == RGBA(255, 0, 0, 0)
        assert image.pixel(1, 0) == RGBA(0, 255, 0, 0)

    def test_32_bit_bgra(self):
        image = decode(build_bmp(1, 1, 32, [b'\x10\x20\x30\x40']))
        assert image.pixel(0, 0) == RGBA(0x30, 0x20, 0x10, 0x40)

    def test_32_bit_v5_custom_masks(self):
        data = build_bmp(1, 1, 32, [b'\x44\x33\x22\x11'], header_size=124, compression=3,
                         masks=(0xFF000000, 0x00FF0000, 0x0000FF00), alpha_mask=0x000000FF)
        assert decode(data).pixel(0, 0) == RGBA(0x11, 0x22, 0x33, 0x44)

    def test_32_bit_bitfields_without_alpha(self):
        data = build_bmp(1, 1, 32, [b'\x10\x20\x30\x40'], compression=3,
                         extra_masks=(0xFF0000, 0xFF00, 0xFF))
        assert decode(data).pixel(0, 0) == RGBA(0x30, 0x20, 0x10, 0)


class TestFailures:
    def test_bad_magic(self):
        data = bytearray(_indexed_4x4())
        data[0:2] = b'XX'
        with pytest.raises(BadMagicError):
            decode(bytes(data))

    def test_unrecognized_header_size(self):
        data = bytearray(_indexed_4x4())
        data[14:18] = (200).to_bytes(4, 'little')
        with pytest.raises(UnsupportedHeaderVersionError):
            decode(bytes(data))

    def test_rle8(self):
        data = build_bmp(4, 4, 8, [b'\x00' * 4] * 4, palette=[RED, GREEN, BLUE, BLACK], compression=1)
        with pytest.raises(UnsupportedCompressionError):
            decode(data)

    @pytest.mark.parametrize('compression', [4, 5])
    def test_jpeg_png_with_zero_bpp(self, compression):
        # BI_JPEG/BI_PNG bitmaps declare a bit count of 0
        data = bytearray(build_bmp(2, 2, 24, RGB_2X2, compression=compression))
        data[28:30] = b'\x00\x00'
        parser = BMPParser(bytes(data))
        with pytest.raises(UnsupportedCompressionError) as exc:
            parser.load()
        assert exc.value.compression == compression
        assert parser.stage is DecodeStage.FAILED

    def test_rle_with_zero_width(self):
        with pytest.raises(UnsupportedCompressionError):
            decode(build_bmp(0, 2, 8, [], compression=1))

    def test_bad_geometry_after_compression(self):
        with pytest.raises(UnsupportedBitDepthError):
            decode(build_bmp(1, 1, 3, [b'\x00']))
        with pytest.raises(InvalidDimensionsError):
            decode(build_bmp(0, 2, 24, []))

    def test_truncated_pixels(self):
        with pytest.raises(BMPReadError):
            decode(build_bmp(2, 2, 24, RGB_2X2)[:-3])

    def test_missing_file(self, tmp_path):
        with pytest.raises(BMPReadError):
            decode(tmp_path / 'missing.bmp')


class TestParserState:
    def test_done_after_success(self):
        parser = BMPParser(_indexed_4x4())
        image = parser.load()
        assert parser.stage is DecodeStage.DONE
        assert parser.image is image
        assert parser.error is None

    def test_failed_keeps_no_image(self):
        parser = BMPParser(b'XX' + _indexed_4x4()[2:])
        with pytest.raises(BadMagicError) as exc:
            parser.load()
        assert parser.stage is DecodeStage.FAILED
        assert parser.error is exc.value
        assert parser.image is None

    def test_load_once(self):
        parser = BMPParser(_indexed_4x4())
        parser.load()
        with pytest.raises(RuntimeError):
            parser.load()

    def test_metadata(self):
        parser = BMPParser(_indexed_4x4())
        parser.load()
        assert parser.metadata['width'] == 4
        assert parser.metadata['bpp'] == 8
        assert parser.metadata['header'] == 'INFO'
        assert parser.metadata['compression'] == 'BI_RGB'
        assert parser.metadata['palette_colors'] == 4
        assert len(parser.color_table) == 4


class TestSources:
    def test_path(self, tmp_path):
        path = tmp_path / 'image.bmp'
        path.write_bytes(build_bmp(2, 2, 24, RGB_2X2))
        assert decode(str(path)).pixel(1, 1) == RGBA(255, 255, 255, 0)
        assert decode(path).width == 2

    def test_stream_left_open(self):
        stream = io.BytesIO(build_bmp(2, 2, 24, RGB_2X2))
        image = decode(stream)
        assert isinstance(image, Image)
        assert not stream.closed

    def test_unseekable_stream(self):
        parser = BMPParser(_PipeStream(_indexed_4x4()))
        with pytest.raises(BMPReadError):
            parser.load()
        assert parser.stage is DecodeStage.FAILED

    def test_bytearray(self):
        assert decode(bytearray(_indexed_4x4())).height == 4
