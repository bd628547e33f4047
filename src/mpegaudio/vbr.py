"""Xing/Info and VBRI headers embedded in the first frame of a VBR stream.

Both are written by encoders into an otherwise silent frame placed before
the audio frames. They summarize the whole stream (frame and byte counts),
which allows the duration to be computed without scanning every frame.
"""
import logging
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .frame import NANOS_PER_SECOND, FrameHeader
from .reader import PositionTrackingReader

logger = logging.getLogger(__name__)

# "Xing"/"Info" tag + 4-byte flags word, also enough to recognize "VBRI"
XING_HEADER_MIN_SIZE = 8
# "VBRI" + version, delay, quality, bytes, frames, TOC entries, TOC scale,
# TOC entry size, frames per TOC entry
VBRI_HEADER_SIZE = 26
VBRI_FIELDS = ">HHHIIHHHH"

XING_FLAG_FRAMES = 0b0001
XING_FLAG_BYTES = 0b0010
XING_FLAG_TOC = 0b0100
XING_FLAG_QUALITY = 0b1000
XING_TOC_SIZE = 100


class VbrSource(Enum):
    XING = "xing"
    VBRI = "vbri"


@dataclass(frozen=True)
class VbrHeader:
    source: VbrSource
    total_frames: Optional[int] = None
    total_bytes: Optional[int] = None
    quality: Optional[int] = None
    toc_size: int = 0


@dataclass
class VbrProbe:
    """Outcome of inspecting a frame for a VBR header.

    ``vbr_header`` is None for ordinary audio frames. ``consumed`` counts the
    frame bytes read so far, header word and side information included.
    ``complete`` is False if the input ended inside the frame.
    """
    vbr_header: Optional[VbrHeader]
    consumed: int
    complete: bool = True


def summary_totals(vbr_header: VbrHeader, frame: FrameHeader) -> Optional[Tuple[int, int]]:
    """Total sample count and duration (ns) stated by a VBR header.

    Only integer arithmetic is used so that results are reproducible.
    Returns None if the header does not state a frame count.
    """
    if not vbr_header.total_frames:
        return None
    total_sample_count = vbr_header.total_frames * frame.sample_count
    seconds = total_sample_count // frame.sample_rate_hz
    nanoseconds = total_sample_count * NANOS_PER_SECOND // frame.sample_rate_hz - seconds * NANOS_PER_SECOND
    assert 0 <= nanoseconds < NANOS_PER_SECOND
    return total_sample_count, seconds * NANOS_PER_SECOND + nanoseconds


def _read_xing(reader: PositionTrackingReader, flags: int, consumed: int) -> VbrProbe:
    fields = {}
    for flag, name in ((XING_FLAG_FRAMES, "total_frames"), (XING_FLAG_BYTES, "total_bytes")):
        if flags & flag:
            data = reader.read_exact_or_eof(4)
            if data is None:
                return VbrProbe(None, consumed, complete=False)
            consumed += 4
            (fields[name],) = struct.unpack(">I", data)
    toc_size = 0
    if flags & XING_FLAG_TOC:
        if not reader.skip_exact_or_eof(XING_TOC_SIZE):
            return VbrProbe(None, consumed, complete=False)
        consumed += XING_TOC_SIZE
        toc_size = XING_TOC_SIZE
    if flags & XING_FLAG_QUALITY:
        data = reader.read_exact_or_eof(4)
        if data is None:
            return VbrProbe(None, consumed, complete=False)
        consumed += 4
        (fields["quality"],) = struct.unpack(">I", data)
    return VbrProbe(VbrHeader(VbrSource.XING, toc_size=toc_size, **fields), consumed)


def _read_vbri(reader: PositionTrackingReader, head: bytes, consumed: int) -> VbrProbe:
    rest = reader.read_exact_or_eof(VBRI_HEADER_SIZE - XING_HEADER_MIN_SIZE)
    if rest is None:
        return VbrProbe(None, consumed, complete=False)
    consumed += len(rest)
    (_version, _delay, quality, total_bytes, total_frames,
     toc_entries, _toc_scale, toc_entry_size, _frames_per_entry) = struct.unpack(VBRI_FIELDS, head[4:] + rest)
    toc_size = toc_entries * toc_entry_size
    if not reader.skip_exact_or_eof(toc_size):
        return VbrProbe(None, consumed, complete=False)
    consumed += toc_size
    return VbrProbe(VbrHeader(VbrSource.VBRI, total_frames=total_frames, total_bytes=total_bytes,
                              quality=quality, toc_size=toc_size), consumed)


def read_vbr_header(reader: PositionTrackingReader, frame: FrameHeader, consumed: int) -> VbrProbe:
    """Look for a Xing/Info or VBRI header right after the side information.

    The reader must be positioned behind the side information of ``frame``,
    with ``consumed`` bytes of the frame already read. Frames too small to
    carry a VBR header are left untouched.
    """
    if not frame.fits(consumed + XING_HEADER_MIN_SIZE):
        return VbrProbe(None, consumed)
    head = reader.read_exact_or_eof(XING_HEADER_MIN_SIZE)
    if head is None:
        return VbrProbe(None, consumed, complete=False)
    consumed += XING_HEADER_MIN_SIZE

    tag = head[:4]
    if tag in (b"Xing", b"Info"):
        (flags,) = struct.unpack_from(">I", head, 4)
        probe = _read_xing(reader, flags & 0xFF, consumed)
    elif tag == b"VBRI" and frame.fits(consumed - XING_HEADER_MIN_SIZE + VBRI_HEADER_SIZE):
        probe = _read_vbri(reader, head, consumed)
    else:
        return VbrProbe(None, consumed)

    if probe.vbr_header is not None:
        logger.debug("Found %s header: %s", tag.decode("ascii"), probe.vbr_header)
    return probe
