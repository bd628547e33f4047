from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import List, Optional

from .frame import Layer, Mode, Version


class ParseMode(Enum):
    """Which sources are considered when parsing metadata.

    PREFER_VBR_HEADERS returns the summary of the first valid Xing/VBRI
    header and stops reading. This is fast, but only as accurate as the
    encoder's summary. Without such a header all frames are aggregated.

    IGNORE_VBR_HEADERS skips Xing/VBRI headers and always aggregates all
    MPEG audio frames.
    """
    PREFER_VBR_HEADERS = "prefer_vbr_headers"
    IGNORE_VBR_HEADERS = "ignore_vbr_headers"


class HeaderSource(Enum):
    XING_HEADER = "xing_header"
    VBRI_HEADER = "vbri_header"
    MPEG_FRAME_HEADERS = "mpeg_frame_headers"


@dataclass(frozen=True)
class Header:
    """Properties of an MPEG audio stream.

    Built either from a Xing/VBRI header or aggregated from all MPEG frame
    headers. version, layer and mode are None if unknown or inconsistent
    across frames. Sample counts are per channel.
    """
    source: HeaderSource
    version: Optional[Version]
    layer: Optional[Layer]
    mode: Optional[Mode]
    min_channel_count: int
    max_channel_count: int
    min_sample_rate_hz: int
    max_sample_rate_hz: int
    total_sample_count: int
    total_duration_ns: int
    avg_sample_rate_hz: Optional[int]
    avg_bitrate_bps: Optional[int]
    min_bitrate_bps: Optional[int] = None
    max_bitrate_bps: Optional[int] = None
    total_frame_count: int = 0

    @property
    def total_duration(self) -> timedelta:
        return timedelta(microseconds=self.total_duration_ns // 1000)

    @property
    def total_seconds(self) -> float:
        return self.total_duration_ns / 1e9

    def summary_lines(self) -> List[str]:
        def opt(value):
            return "n/a" if value is None else str(value)

        duration = self.total_duration_ns
        minutes, seconds = divmod(duration // 1_000_000_000, 60)
        millis = duration // 1_000_000 % 1000
        lines = [
            f"Source: {self.source.name.lower().replace('_', ' ')}",
            f"Version: {opt(self.version)}",
            f"Layer: {opt(self.layer)}",
            f"Mode: {opt(self.mode)}",
            f"Duration: {minutes}:{seconds:02d}.{millis:03d} ({duration} ns)",
            f"Samples: {self.total_sample_count} in {self.total_frame_count} frames",
        ]
        if self.min_channel_count == self.max_channel_count:
            lines.append(f"Channels: {self.min_channel_count}")
        else:
            lines.append(f"Channels: {self.min_channel_count}..{self.max_channel_count}")
        if self.min_sample_rate_hz == self.max_sample_rate_hz:
            lines.append(f"Sample rate: {self.min_sample_rate_hz} Hz")
        else:
            lines.append(f"Sample rate: {self.min_sample_rate_hz}..{self.max_sample_rate_hz} Hz "
                         f"(avg {self.avg_sample_rate_hz} Hz)")
        if self.avg_bitrate_bps is None:
            lines.append("Bitrate: n/a")
        elif self.min_bitrate_bps == self.max_bitrate_bps:
            lines.append(f"Bitrate: {self.avg_bitrate_bps // 1000} kbps")
        else:
            lines.append(f"Bitrate: {self.avg_bitrate_bps // 1000} kbps avg "
                         f"({opt(self.min_bitrate_bps)}..{opt(self.max_bitrate_bps)} bps)")
        return lines
