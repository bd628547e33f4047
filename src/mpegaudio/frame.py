from dataclasses import dataclass
from enum import Enum
from typing import Optional

FRAME_HEADER_SIZE = 4
NANOS_PER_SECOND = 1_000_000_000

HEADER_WORD_SYNC_MASK = 0xFFE00000


class Version(Enum):
    MPEG1 = 0
    MPEG2 = 1
    MPEG25 = 2

    def __str__(self):
        return {Version.MPEG1: "MPEG-1", Version.MPEG2: "MPEG-2", Version.MPEG25: "MPEG-2.5"}[self]


class Layer(Enum):
    LAYER1 = 0
    LAYER2 = 1
    LAYER3 = 2

    def __str__(self):
        return "Layer " + ("I", "II", "III")[self.value]


class Mode(Enum):
    STEREO = 0
    JOINT_STEREO = 1
    DUAL_CHANNEL = 2
    MONO = 3

    def __str__(self):
        return self.name.lower().replace("_", " ")


# Indexed by version bits (header word bits 19-20); 0b01 is reserved
_VERSION_BITS = {0b00: Version.MPEG25, 0b01: None, 0b10: Version.MPEG2, 0b11: Version.MPEG1}
# Indexed by layer bits (header word bits 17-18); 0b00 is reserved
_LAYER_BITS = {0b00: None, 0b01: Layer.LAYER3, 0b10: Layer.LAYER2, 0b11: Layer.LAYER1}

# [version][layer][bitrate index], index 0 = free format
BIT_RATES_KBPS = (
    (
        (0, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448),  # MPEG-1 Layer I
        (0, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384),     # MPEG-1 Layer II
        (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320),      # MPEG-1 Layer III
    ),
    (
        (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256),     # MPEG-2 Layer I
        (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),          # MPEG-2 Layer II
        (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),          # MPEG-2 Layer III
    ),
    (
        (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256),     # MPEG-2.5 Layer I
        (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),          # MPEG-2.5 Layer II
        (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),          # MPEG-2.5 Layer III
    ),
)

# [version][sample rate index]
SAMPLE_RATES_HZ = (
    (44100, 48000, 32000),
    (22050, 24000, 16000),
    (11025, 12000, 8000),
)

# [version][layer]
SAMPLE_COUNTS = (
    (384, 1152, 1152),
    (384, 1152, 576),
    (384, 1152, 576),
)

# [version][mode]
SIDE_INFORMATION_SIZES = (
    (32, 32, 32, 17),
    (17, 17, 17, 9),
    (17, 17, 17, 9),
)

BITRATE_BITS_MASK = 0b1111
SAMPLE_RATE_BITS_MASK = 0b11
EMPHASIS_RESERVED = 0b10


def is_header_word_synced(word: int) -> bool:
    return word & HEADER_WORD_SYNC_MASK == HEADER_WORD_SYNC_MASK


def version_from_header_word(word: int) -> Optional[Version]:
    return _VERSION_BITS[(word >> 19) & 0b11]


def layer_from_header_word(word: int) -> Optional[Layer]:
    return _LAYER_BITS[(word >> 17) & 0b11]


def mode_from_header_word(word: int) -> Mode:
    return Mode((word >> 6) & 0b11)


def bitrate_bits_from_header_word(word: int) -> Optional[int]:
    bits = (word >> 12) & BITRATE_BITS_MASK
    return None if bits == BITRATE_BITS_MASK else bits


def sample_rate_bits_from_header_word(word: int) -> Optional[int]:
    bits = (word >> 10) & SAMPLE_RATE_BITS_MASK
    return None if bits == SAMPLE_RATE_BITS_MASK else bits


def padding_from_header_word(word: int) -> int:
    return (word >> 9) & 0b1


def maybe_valid_header_word(word: int) -> bool:
    """Cheap filter against reserved field values.

    The sync pattern alone matches far too often inside audio payload, so
    candidates are checked before a full decode.
    """
    if (version_from_header_word(word) is None
            or layer_from_header_word(word) is None
            or bitrate_bits_from_header_word(word) is None
            or sample_rate_bits_from_header_word(word) is None):
        return False
    return word & 0b11 != EMPHASIS_RESERVED


def samples_per_frame(version: Version, layer: Layer) -> int:
    return SAMPLE_COUNTS[version.value][layer.value]


def side_information_size(version: Version, mode: Mode) -> int:
    return SIDE_INFORMATION_SIZES[version.value][mode.value]


def frame_size_bytes(layer: Layer, bitrate_bps: int, sample_rate_hz: int, sample_count: int, padding: int) -> int:
    # Truncation order is significant, durations are compared bit-exactly
    if layer is Layer.LAYER1:
        return (12000 * (bitrate_bps // 1000) // sample_rate_hz + padding) * 4
    return sample_count * (bitrate_bps // 8) // sample_rate_hz + padding


def duration_ns(sample_count: int, sample_rate_hz: int) -> int:
    return sample_count * NANOS_PER_SECOND // sample_rate_hz


@dataclass(frozen=True)
class FrameHeader:
    version: Version
    layer: Layer
    mode: Mode
    sample_count: int
    sample_rate_hz: int
    bitrate_bps: Optional[int]  # None: free format
    frame_size: Optional[int]   # None: unknown, next frame must be resynced

    @property
    def channel_count(self) -> int:
        return 1 if self.mode is Mode.MONO else 2

    @property
    def side_information_size(self) -> int:
        return side_information_size(self.version, self.mode)

    @property
    def duration_ns(self) -> int:
        return duration_ns(self.sample_count, self.sample_rate_hz)

    def fits(self, payload_size: int) -> bool:
        """Whether ``payload_size`` bytes (header included) fit into this frame.

        Frames of unknown size are assumed to be large enough.
        """
        return self.frame_size is None or payload_size <= self.frame_size


def decode(word: int) -> Optional[FrameHeader]:
    """Decode a 32-bit header word, or None if it is not a usable header."""
    if not is_header_word_synced(word) or not maybe_valid_header_word(word):
        return None
    version = version_from_header_word(word)
    layer = layer_from_header_word(word)
    mode = mode_from_header_word(word)
    sample_rate_hz = SAMPLE_RATES_HZ[version.value][sample_rate_bits_from_header_word(word)]
    bitrate_bps = 1000 * BIT_RATES_KBPS[version.value][layer.value][bitrate_bits_from_header_word(word)]
    sample_count = samples_per_frame(version, layer)

    frame_size = None
    if bitrate_bps > 0:
        frame_size = frame_size_bytes(layer, bitrate_bps, sample_rate_hz, sample_count,
                                      padding_from_header_word(word)) or None

    return FrameHeader(
        version=version,
        layer=layer,
        mode=mode,
        sample_count=sample_count,
        sample_rate_hz=sample_rate_hz,
        bitrate_bps=bitrate_bps or None,
        frame_size=frame_size,
    )
