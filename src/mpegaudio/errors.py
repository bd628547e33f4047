from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .reader import ReadPosition


class Error(Exception):
    """Parse failure without position information."""


class IoError(Error):
    """I/O failure of the underlying byte source."""

    def __init__(self, message: str, unexpected_eof: bool = False):
        super().__init__(message)
        self.unexpected_eof = unexpected_eof

    @classmethod
    def from_os_error(cls, err: OSError) -> "IoError":
        return cls(str(err) or err.__class__.__name__)

    @classmethod
    def end_of_input(cls) -> "IoError":
        return cls("unexpected end of input", unexpected_eof=True)


class FrameError(Error):
    def __str__(self):
        return f"frame error: {self.args[0]}"


class PositionalError(Exception):
    """Error enriched with the read position at the point of failure."""

    def __init__(self, source: Error, position: "ReadPosition"):
        self.source = source
        self.position = position
        super().__init__(
            f"{source} at position {position.duration_ns / 1_000_000:.3f} ms "
            f"(byte offset = {position.byte_offset} / 0x{position.byte_offset:X})"
        )

    def is_unexpected_eof(self) -> bool:
        return isinstance(self.source, IoError) and self.source.unexpected_eof


class UnrecognizedFrameHeaderError(PositionalError):
    """Four bytes that are neither a frame header nor a tag signature."""

    def __init__(self, header_bytes: bytes, position: "ReadPosition", source: Optional[Error] = None):
        self.header_bytes = header_bytes
        if source is None:
            source = FrameError(f"unrecognized frame header {header_bytes.hex()}")
        super().__init__(source, position)
