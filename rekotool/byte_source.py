"""
Adaptive Byte Source
Presents an open file to the Rekognition client without an extra buffer copy.
"""

import io
import os
from typing import Dict, List, Optional, Union


# Largest single buffer the tool will materialize.
MAX_BUFFER_LENGTH = 0x7FFFFFC7

# First buffer used when the stream cannot tell its own length.
INITIAL_BUFFER_SIZE = 512


class StreamTooLargeError(OSError):
    """Raised when a stream is longer than a single buffer can hold."""


class TruncatedStreamError(EOFError):
    """Raised when a stream ends before its reported length was read."""


class BufferPool:
    """
    Process-wide pool of reusable byte buffers.

    Buffers are bucketed by power-of-two capacity so that a buffer returned
    by one file can be rented again by the next one.
    Files are processed one at a time, so the pool is not locked.
    """

    def __init__(self, max_per_bucket: int = 4):
        self.max_per_bucket = max_per_bucket
        self._buckets: Dict[int, List[bytearray]] = {}

    @staticmethod
    def _bucket_size(minimum: int) -> int:
        size = INITIAL_BUFFER_SIZE
        while size < minimum:
            size *= 2
        return min(size, max(minimum, MAX_BUFFER_LENGTH))

    def rent(self, minimum: int) -> bytearray:
        """
        Get a buffer of at least `minimum` bytes.

        Args:
            minimum: Smallest acceptable capacity

        Returns:
            A bytearray whose length is the capacity of the buffer
        """
        size = self._bucket_size(minimum)
        bucket = self._buckets.get(size)
        if bucket:
            return bucket.pop()
        return bytearray(size)

    def give_back(self, buffer: bytearray) -> None:
        """Return a rented buffer; extra buffers beyond the bucket cap are dropped."""
        bucket = self._buckets.setdefault(len(buffer), [])
        if len(bucket) < self.max_per_bucket:
            bucket.append(buffer)


shared_pool = BufferPool()


def _stream_length(stream) -> Optional[int]:
    """Best-effort total length of a stream, or None when it cannot be known."""
    try:
        return os.fstat(stream.fileno()).st_size
    except (AttributeError, OSError, io.UnsupportedOperation):
        pass

    try:
        if not stream.seekable():
            return None
        position = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        stream.seek(position, io.SEEK_SET)
        return end
    except (AttributeError, OSError, io.UnsupportedOperation):
        return None


class AdaptiveByteSource(io.RawIOBase):
    """
    Wraps one readable byte stream for the lifetime of one file.

    What it does:
    - Delegates read, seek and tell to the wrapped stream
    - Reports the stream length, or None when it is unknown
    - Materializes the remaining bytes as one buffer with readall()
    - Closes the wrapped stream on close() unless leave_open is set

    The wrapped stream is read lazily: nothing is buffered until readall()
    is called by the code building the Rekognition request.
    """

    def __init__(self, stream, leave_open: bool = False, pool: Optional[BufferPool] = None):
        super().__init__()
        if stream is None:
            raise ValueError("stream is required")
        self._stream = stream
        self.leave_open = leave_open
        self._pool = pool if pool is not None else shared_pool

    @property
    def stream(self):
        return self._stream

    def _ensure_open(self) -> None:
        if self.closed:
            raise ValueError("I/O operation on closed byte source")

    def readable(self) -> bool:
        return self._stream.readable()

    def seekable(self) -> bool:
        return self._stream.seekable()

    def writable(self) -> bool:
        return False

    def readinto(self, buffer) -> int:
        self._ensure_open()
        readinto = getattr(self._stream, "readinto", None)
        if readinto is not None:
            return readinto(buffer)
        data = self._stream.read(len(buffer))
        n = len(data)
        buffer[:n] = data
        return n

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._ensure_open()
        return self._stream.seek(offset, whence)

    def tell(self) -> int:
        self._ensure_open()
        return self._stream.tell()

    @property
    def length(self) -> Optional[int]:
        """Total length of the wrapped stream in bytes, None when unknown."""
        self._ensure_open()
        return _stream_length(self._stream)

    def readall(self) -> Union[bytes, bytearray]:
        """
        Read every remaining byte of the stream into a single buffer.

        Returns:
            The bytes from the current position to the end of the stream,
            filled in place so no second copy is made

        Raises:
            StreamTooLargeError: If the stream is longer than MAX_BUFFER_LENGTH
            TruncatedStreamError: If the stream ends before its reported length
        """
        self._ensure_open()
        length = self.length

        if length is not None and length > MAX_BUFFER_LENGTH:
            raise StreamTooLargeError(
                f"Stream is too long ({length} bytes); at most {MAX_BUFFER_LENGTH} bytes are supported"
            )

        # Some sources (procfs, pipes) report 0 even when there is content.
        if not length:
            return self._read_unknown_length()

        try:
            position = self.tell()
        except (OSError, io.UnsupportedOperation):
            position = 0
        remaining = max(length - position, 0)
        if remaining == 0:
            return b""

        buffer = bytearray(remaining)
        view = memoryview(buffer)
        index = 0
        while index < remaining:
            n = self.readinto(view[index:])
            if not n:
                raise TruncatedStreamError("Unable to read beyond the end of the stream")
            index += n
        return buffer

    def _read_unknown_length(self) -> bytes:
        buffer = self._pool.rent(INITIAL_BUFFER_SIZE)
        try:
            bytes_read = 0
            while True:
                if bytes_read == len(buffer):
                    new_length = len(buffer) * 2
                    if new_length > MAX_BUFFER_LENGTH:
                        new_length = max(MAX_BUFFER_LENGTH, len(buffer) + 1)
                    grown = self._pool.rent(new_length)
                    grown[:bytes_read] = memoryview(buffer)[:bytes_read]
                    self._pool.give_back(buffer)
                    buffer = grown

                n = self.readinto(memoryview(buffer)[bytes_read:])
                if not n:
                    return bytes(memoryview(buffer)[:bytes_read])
                bytes_read += n
        finally:
            self._pool.give_back(buffer)

    def close(self) -> None:
        if self.closed:
            return
        try:
            if not self.leave_open:
                self._stream.close()
        finally:
            super().close()
