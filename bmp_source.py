import io
import os

from bmp_errors import BMPReadError


class ByteSource:
    """Seekable, read-only view of a BMP held in a file, a buffer or a stream."""

    def __init__(self, source):
        self._owns_stream = False
        if isinstance(source, (bytes, bytearray, memoryview)):
            self.stream = io.BytesIO(bytes(source))
        elif isinstance(source, (str, os.PathLike)):
            try:
                self.stream = open(source, "rb")
            except OSError as e:
                raise BMPReadError(0, 0, f"Cannot open {source}: {e}") from e
            self._owns_stream = True
        else:
            # Any binary stream that supports seek/read
            self.stream = source

        # Total size, used to bound palette and pixel reads
        try:
            self.stream.seek(0, io.SEEK_END)
            self.size = self.stream.tell()
        except OSError as e:
            self.close()
            raise BMPReadError(0, 0, f"Source is not seekable: {e}") from e

    def read_at(self, offset, size):
        """Read exactly `size` bytes at `offset` or raise BMPReadError."""
        if offset < 0 or offset + size > self.size:
            raise BMPReadError(offset, size)
        try:
            self.stream.seek(offset)
            data = self.stream.read(size)
        except OSError as e:
            raise BMPReadError(offset, size, str(e)) from e
        if len(data) != size:
            raise BMPReadError(offset, size)
        return data

    def close(self):
        if self._owns_stream:
            self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
