"""Cross-check a parsed Header against a full decode.

Decoding goes through pydub, which needs ffmpeg on the PATH. Decoders drop
encoder delay and padding announced by LAME/Xing tags, so a small negative
delta is normal for VBR files.
"""
import logging
from typing import Optional

from .header import Header

logger = logging.getLogger(__name__)


def decoded_sample_count(path: str) -> Optional[int]:
    """Per-channel sample count of the decoded file, or None if decoding is unavailable."""
    try:
        from pydub import AudioSegment
    except Exception:
        return None
    try:
        seg = AudioSegment.from_file(path)
    except Exception as e:
        logger.warning("Decoding %s failed: %s", path, e)
        return None
    return int(seg.frame_count())


def compare_with_decoder(path: str, header: Header):
    decoded = decoded_sample_count(path)
    if decoded is None:
        return None
    delta = header.total_sample_count - decoded
    rate = header.avg_sample_rate_hz or header.max_sample_rate_hz
    delta_ms = delta * 1000 / rate if rate else None
    return {
        "header_samples": header.total_sample_count,
        "decoded_samples": decoded,
        "delta_samples": delta,
        "delta_ms": delta_ms,
    }
