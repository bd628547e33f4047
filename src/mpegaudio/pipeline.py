import io
import logging
from pathlib import Path
from typing import BinaryIO, Iterator, Tuple, Union

from .aggregator import read_header
from .errors import IoError, PositionalError
from .header import Header, ParseMode
from .reader import PositionTrackingReader, ReadPosition

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".mp1", ".mp2", ".mp3")


def read_from_source(source: BinaryIO, parse_mode: ParseMode = ParseMode.PREFER_VBR_HEADERS,
                     strict: bool = False) -> Header:
    """Read the header of an MPEG audio stream from a binary source.

    Args:
        source: Any object with a blocking ``read(n)``; seeking is not needed
        parse_mode: Use Xing/VBRI summaries or aggregate all frames
        strict: Treat data that is neither a frame nor a tag as an error
            (before the first frame) or as the end of the stream (after it)

    Returns:
        The Header of the stream

    Raises:
        PositionalError: If the stream cannot be parsed
    """
    return read_header(PositionTrackingReader(source), parse_mode, strict=strict)


def read_from_bytes(data: bytes, parse_mode: ParseMode = ParseMode.PREFER_VBR_HEADERS,
                    strict: bool = False) -> Header:
    return read_from_source(io.BytesIO(data), parse_mode, strict=strict)


def read_from_file(file: BinaryIO, parse_mode: ParseMode = ParseMode.PREFER_VBR_HEADERS,
                   strict: bool = False) -> Header:
    """Read from an open binary file, starting at its current position."""
    return read_from_source(file, parse_mode, strict=strict)


def read_from_path(path: Union[str, Path], parse_mode: ParseMode = ParseMode.PREFER_VBR_HEADERS,
                   strict: bool = False) -> Header:
    """Read the header of an MPEG audio file.

    Raises:
        PositionalError: If the file cannot be opened (position zero) or parsed
    """
    try:
        f = open(path, "rb")
    except OSError as e:
        raise PositionalError(IoError.from_os_error(e), ReadPosition()) from e
    with f:
        header = read_from_file(f, parse_mode, strict=strict)
    logger.info("Read %s: %s, %d samples, %d ns", Path(path).name, header.source.name,
                header.total_sample_count, header.total_duration_ns)
    return header


def iter_audio_files(root: Union[str, Path]) -> Iterator[Path]:
    for p in sorted(Path(root).rglob("*")):
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS:
            yield p


def scan_directory(root: Union[str, Path], parse_mode: ParseMode = ParseMode.PREFER_VBR_HEADERS,
                   strict: bool = False) -> Iterator[Tuple[Path, Union[Header, PositionalError]]]:
    """Read every .mp1/.mp2/.mp3 file below ``root``.

    Files that fail to parse are yielded together with their error so that
    one broken file does not stop the scan.
    """
    for path in iter_audio_files(root):
        try:
            yield path, read_from_path(path, parse_mode, strict=strict)
        except PositionalError as e:
            logger.warning("Failed to read %s: %s", path, e)
            yield path, e
