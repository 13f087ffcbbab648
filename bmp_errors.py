### BMP decoding exception classes ###
class BMPError(Exception):
    """Base class for every BMP decoding failure."""
    pass


class BMPReadError(BMPError):
    """Source unreadable, truncated, or a read past end of file"""
    def __init__(self, offset, size, message=""):
        self.offset = offset
        self.size = size
        self.message = message or f"Cannot read {size} bytes at offset {offset}"
        super().__init__(self.message)


class BadMagicError(BMPError):
    """First two bytes are not the 'BM' signature"""
    def __init__(self, magic):
        self.magic = magic
        super().__init__(f"Not a BMP file (magic {magic!r})")


class UnsupportedHeaderVersionError(BMPError):
    """Declared info header size is not a recognized DIB header"""
    def __init__(self, header_size, message=""):
        self.header_size = header_size
        self.message = message or f"Unsupported info header size: {header_size}"
        super().__init__(self.message)


class UnsupportedCompressionError(BMPError):
    """Compression mode other than BI_RGB or BI_BITFIELDS"""
    def __init__(self, compression):
        self.compression = compression
        super().__init__(f"Unsupported compression mode: {compression}")


class UnsupportedColorSpaceError(BMPError):
    """V4/V5 header declares a color space other than sRGB"""
    def __init__(self, color_space):
        self.color_space = color_space
        super().__init__(f"Unsupported color space: 0x{color_space:08X}")


class InvalidPaletteError(BMPError):
    """Palette is larger than the file or a pixel indexes past it"""
    pass


class UnsupportedBitDepthError(BMPError):
    def __init__(self, bpp):
        self.bpp = bpp
        super().__init__(f"Unsupported bpp: {bpp}")


class InvalidDimensionsError(BMPError):
    def __init__(self, width, height):
        self.width = width
        self.height = height
        super().__init__(f"Invalid image dimensions: {width} x {height}")
