from dataclasses import dataclass
from datetime import timedelta
from typing import BinaryIO, Optional

from .errors import Error, IoError, PositionalError

# Upper bound for a single discard read while skipping
SKIP_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class ReadPosition:
    byte_offset: int = 0
    duration_ns: int = 0

    @property
    def duration(self) -> timedelta:
        return timedelta(microseconds=self.duration_ns // 1000)


class PositionTrackingReader:
    """Sequential reader that counts consumed bytes and elapsed playback time.

    Only ``read(n)`` is required from the source; seeking is never used.
    End of input is reported as a return value, every other I/O failure is
    raised as a PositionalError.
    """

    def __init__(self, source: BinaryIO):
        self.source = source
        self.byte_offset = 0
        self.duration_ns = 0

    def _read(self, size: int) -> bytes:
        try:
            chunk = self.source.read(size)
        except OSError as e:
            raise self.positional_error(IoError.from_os_error(e)) from e
        if chunk is None:
            # non-blocking source without data is not supported
            raise self.positional_error(IoError("source returned no data (non-blocking read)"))
        self.byte_offset += len(chunk)
        return chunk

    def read_exact_or_eof(self, size: int) -> Optional[bytes]:
        """Read exactly ``size`` bytes, or return None if input ends first."""
        buf = bytearray()
        while len(buf) < size:
            chunk = self._read(size - len(buf))
            if not chunk:
                return None
            buf += chunk
        return bytes(buf)

    def skip_exact_or_eof(self, size: int) -> bool:
        """Discard ``size`` bytes. Returns False if input ends first."""
        remaining = size
        while remaining > 0:
            chunk = self._read(min(remaining, SKIP_CHUNK_SIZE))
            if not chunk:
                return False
            remaining -= len(chunk)
        return True

    def position(self) -> ReadPosition:
        return ReadPosition(byte_offset=self.byte_offset, duration_ns=self.duration_ns)

    def add_duration(self, duration_ns: int):
        assert duration_ns >= 0
        self.duration_ns += duration_ns

    def positional_error(self, source: Error) -> PositionalError:
        return PositionalError(source, self.position())
