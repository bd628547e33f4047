import logging
import struct
from typing import Optional

from .errors import UnrecognizedFrameHeaderError
from .frame import FRAME_HEADER_SIZE, is_header_word_synced, maybe_valid_header_word
from .reader import PositionTrackingReader

logger = logging.getLogger(__name__)

# Tag sizes, including the 4 bytes already consumed by the scan window
ID3V1_FRAME_SIZE = 128
ID3V2_HEADER_SIZE = 10
ID3V2_FOOTER_SIZE = 10
ID3V2_FLAG_FOOTER = 0b0001_0000
APEV2_HEADER_SIZE = 32


def _syncsafe_int(data: bytes) -> int:
    # 7 usable bits per byte
    value = 0
    for b in data:
        value = (value << 7) | (b & 0x7F)
    return value


def skip_metadata(reader: PositionTrackingReader, header_bytes: bytes) -> bool:
    """Skip a tag container whose first 4 bytes have already been consumed.

    Returns True if ``header_bytes`` start a recognized tag (ID3v1, ID3v2,
    APEv2). A tag cut short by the end of input still counts as consumed.
    """
    if header_bytes[:3] == b"ID3":
        rest = reader.read_exact_or_eof(ID3V2_HEADER_SIZE - FRAME_HEADER_SIZE)
        if rest is None:
            return True
        flags = rest[1]
        tag_size = _syncsafe_int(rest[2:6])
        if flags & ID3V2_FLAG_FOOTER:
            tag_size += ID3V2_FOOTER_SIZE
        logger.debug("Skipping ID3v2 tag (%d bytes) at offset %d", tag_size, reader.byte_offset)
        reader.skip_exact_or_eof(tag_size)
        return True
    if header_bytes[:3] == b"TAG":
        logger.debug("Skipping ID3v1 tag at offset %d", reader.byte_offset - FRAME_HEADER_SIZE)
        reader.skip_exact_or_eof(ID3V1_FRAME_SIZE - FRAME_HEADER_SIZE)
        return True
    if header_bytes == b"APET":
        rest = reader.read_exact_or_eof(APEV2_HEADER_SIZE - FRAME_HEADER_SIZE)
        if rest is None:
            return True
        if rest[:4] != b"AGEX":
            return False
        (tag_size,) = struct.unpack_from("<I", rest, 8)
        logger.debug("Skipping APEv2 tag (%d bytes) at offset %d", tag_size, reader.byte_offset)
        reader.skip_exact_or_eof(tag_size)
        return True
    return False


def next_header_word(reader: PositionTrackingReader, strict: bool = False) -> Optional[int]:
    """Find the next candidate frame header word.

    A 4-byte window is shifted forward one byte at a time. Tags found before
    any audio has been read are skipped and the scan restarts behind them;
    a tag after audio marks trailing metadata and ends the stream (None).
    None is also returned on end of input.

    With ``strict`` a full window that is neither synced nor a tag raises
    UnrecognizedFrameHeaderError instead of being slid over.
    """
    window_start = reader.byte_offset
    word = 0
    while True:
        while not is_header_word_synced(word):
            if reader.byte_offset - window_start >= FRAME_HEADER_SIZE:
                header_bytes = struct.pack(">I", word)
                if skip_metadata(reader, header_bytes):
                    if reader.duration_ns == 0:
                        window_start = reader.byte_offset
                        word = 0
                        continue
                    logger.debug("Trailing metadata at offset %d, ignoring remaining input",
                                 reader.byte_offset)
                    return None
                if strict:
                    raise UnrecognizedFrameHeaderError(header_bytes, reader.position())
            byte = reader.read_exact_or_eof(1)
            if byte is None:
                return None
            word = ((word << 8) | byte[0]) & 0xFFFFFFFF

        if maybe_valid_header_word(word):
            skipped = reader.byte_offset - window_start - FRAME_HEADER_SIZE
            if skipped > 0:
                logger.debug("Resynchronized after %d bytes at offset %d", skipped,
                             reader.byte_offset - FRAME_HEADER_SIZE)
            return word

        # sync pattern inside payload data, shift in one more byte
        byte = reader.read_exact_or_eof(1)
        if byte is None:
            return None
        word = ((word << 8) | byte[0]) & 0xFFFFFFFF
