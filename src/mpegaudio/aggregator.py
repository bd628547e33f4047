import logging
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

from .errors import IoError, UnrecognizedFrameHeaderError
from .frame import FRAME_HEADER_SIZE, FrameHeader, decode
from .header import Header, HeaderSource, ParseMode
from .reader import PositionTrackingReader
from .scanner import next_header_word
from .vbr import VbrSource, read_vbr_header, summary_totals

logger = logging.getLogger(__name__)

T = TypeVar("T")

_VBR_SOURCES = {VbrSource.XING: HeaderSource.XING_HEADER, VbrSource.VBRI: HeaderSource.VBRI_HEADER}


class ConsistencyTracker(Generic[T]):
    """Common value of a per-frame property.

    Unknown until the first observation, then known until two frames
    disagree. Once inconsistent it stays None for the rest of the stream.
    """

    def __init__(self):
        self.value: Optional[T] = None
        self.consistent = True

    def observe(self, value: T):
        if not self.consistent:
            return
        if self.value is None:
            self.value = value
        elif self.value != value:
            self.consistent = False
            self.value = None


def _min(current: Optional[int], value: int) -> int:
    return value if current is None else min(current, value)


def _max(current: Optional[int], value: int) -> int:
    return value if current is None else max(current, value)


@dataclass
class StreamStats:
    """Running totals over all audio frames of a stream."""
    version: ConsistencyTracker = field(default_factory=ConsistencyTracker)
    layer: ConsistencyTracker = field(default_factory=ConsistencyTracker)
    mode: ConsistencyTracker = field(default_factory=ConsistencyTracker)
    frame_count: int = 0
    sample_count: int = 0
    duration_ns: int = 0
    min_channel_count: Optional[int] = None
    max_channel_count: Optional[int] = None
    min_sample_rate_hz: Optional[int] = None
    max_sample_rate_hz: Optional[int] = None
    min_bitrate_bps: Optional[int] = None
    max_bitrate_bps: Optional[int] = None
    # sample count weighted sums
    accmul_sample_rate_hz: int = 0
    accmul_bitrate_bps: int = 0

    def add_frame(self, frame: FrameHeader) -> int:
        """Fold an audio frame into the totals and return its duration in ns."""
        self.version.observe(frame.version)
        self.layer.observe(frame.layer)
        self.mode.observe(frame.mode)

        samples = frame.sample_count
        self.frame_count += 1
        self.sample_count += samples

        channels = frame.channel_count
        self.min_channel_count = _min(self.min_channel_count, channels)
        self.max_channel_count = _max(self.max_channel_count, channels)

        self.min_sample_rate_hz = _min(self.min_sample_rate_hz, frame.sample_rate_hz)
        self.max_sample_rate_hz = _max(self.max_sample_rate_hz, frame.sample_rate_hz)
        self.accmul_sample_rate_hz += frame.sample_rate_hz * samples

        # free format frames have no bitrate
        if frame.bitrate_bps is not None:
            self.min_bitrate_bps = _min(self.min_bitrate_bps, frame.bitrate_bps)
            self.max_bitrate_bps = _max(self.max_bitrate_bps, frame.bitrate_bps)
            self.accmul_bitrate_bps += frame.bitrate_bps * samples

        frame_duration_ns = frame.duration_ns
        self.duration_ns += frame_duration_ns
        return frame_duration_ns

    def finish(self) -> Header:
        avg_sample_rate_hz = None
        avg_bitrate_bps = None
        if self.sample_count > 0:
            avg_sample_rate_hz = self.accmul_sample_rate_hz // self.sample_count
            avg_bitrate_bps = self.accmul_bitrate_bps // self.sample_count
        return Header(
            source=HeaderSource.MPEG_FRAME_HEADERS,
            version=self.version.value,
            layer=self.layer.value,
            mode=self.mode.value,
            min_channel_count=self.min_channel_count or 0,
            max_channel_count=self.max_channel_count or 0,
            min_sample_rate_hz=self.min_sample_rate_hz or 0,
            max_sample_rate_hz=self.max_sample_rate_hz or 0,
            total_sample_count=self.sample_count,
            total_duration_ns=self.duration_ns,
            avg_sample_rate_hz=avg_sample_rate_hz,
            avg_bitrate_bps=avg_bitrate_bps,
            min_bitrate_bps=self.min_bitrate_bps,
            max_bitrate_bps=self.max_bitrate_bps,
            total_frame_count=self.frame_count,
        )


def _vbr_summary(source: HeaderSource, frame: FrameHeader, total_frames: int,
                 total_sample_count: int, total_duration_ns: int) -> Header:
    return Header(
        source=source,
        version=frame.version,
        layer=frame.layer,
        mode=frame.mode,
        min_channel_count=frame.channel_count,
        max_channel_count=frame.channel_count,
        min_sample_rate_hz=frame.sample_rate_hz,
        max_sample_rate_hz=frame.sample_rate_hz,
        total_sample_count=total_sample_count,
        total_duration_ns=total_duration_ns,
        avg_sample_rate_hz=frame.sample_rate_hz,
        avg_bitrate_bps=frame.bitrate_bps,
        min_bitrate_bps=frame.bitrate_bps,
        max_bitrate_bps=frame.bitrate_bps,
        total_frame_count=total_frames,
    )


def _end_of_input_in_frame(reader: PositionTrackingReader, stats: StreamStats):
    # a cut-off last frame is expected, a stream without any complete frame is not
    if stats.sample_count == 0:
        raise reader.positional_error(IoError.end_of_input())
    logger.debug("Stream truncated inside a frame at offset %d", reader.byte_offset)


def read_header(reader: PositionTrackingReader, parse_mode: ParseMode = ParseMode.PREFER_VBR_HEADERS,
                strict: bool = False) -> Header:
    """Scan a stream frame by frame and aggregate its properties.

    Args:
        reader: Reader positioned at the start of the stream
        parse_mode: Whether a Xing/VBRI summary may end the scan early
        strict: Reject bytes that are neither a frame header nor a tag
            instead of resynchronizing over them

    Returns:
        The aggregated Header

    Raises:
        PositionalError: On I/O failures, on end of input inside a frame
            before any audio frame was parsed, and (strict only) on
            unrecognized data before the first audio frame
    """
    stats = StreamStats()
    # frames of unknown size cannot be followed by a strict header check
    resync = False

    while True:
        try:
            word = next_header_word(reader, strict=strict and not resync)
        except UnrecognizedFrameHeaderError:
            if stats.sample_count > 0:
                logger.debug("Unrecognized data after last frame at offset %d", reader.byte_offset)
                break
            raise
        if word is None:
            break

        frame = decode(word)
        assert frame is not None
        resync = frame.frame_size is None

        side_info_size = frame.side_information_size
        if frame.frame_size is not None:
            side_info_size = min(side_info_size, frame.frame_size - FRAME_HEADER_SIZE)
        if not reader.skip_exact_or_eof(side_info_size):
            _end_of_input_in_frame(reader, stats)
            break
        consumed = FRAME_HEADER_SIZE + side_info_size

        is_audio_frame = True
        if stats.sample_count == 0:
            probe = read_vbr_header(reader, frame, consumed)
            consumed = probe.consumed
            if not probe.complete:
                _end_of_input_in_frame(reader, stats)
                break
            vbr_header = probe.vbr_header
            if vbr_header is not None:
                # no audio data in VBR header frames
                is_audio_frame = False
                totals = summary_totals(vbr_header, frame)
                if totals is not None and parse_mode is ParseMode.PREFER_VBR_HEADERS:
                    total_sample_count, total_duration_ns = totals
                    return _vbr_summary(_VBR_SOURCES[vbr_header.source], frame,
                                        vbr_header.total_frames, total_sample_count, total_duration_ns)

        if frame.frame_size is not None and frame.frame_size > consumed:
            if not reader.skip_exact_or_eof(frame.frame_size - consumed):
                _end_of_input_in_frame(reader, stats)
                break

        if is_audio_frame:
            reader.add_duration(stats.add_frame(frame))

    assert stats.duration_ns == reader.duration_ns
    return stats.finish()
