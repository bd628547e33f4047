import sys
import unittest
from pathlib import Path

# Add src and tests directories to path for imports
TESTS_DIR = Path(__file__).resolve().parent
BASE_DIR = TESTS_DIR.parent
for p in (BASE_DIR, TESTS_DIR):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from mpegaudio.frame import (
    BIT_RATES_KBPS,
    SAMPLE_COUNTS,
    SAMPLE_RATES_HZ,
    FrameHeader,
    Layer,
    Mode,
    Version,
    decode,
    is_header_word_synced,
    maybe_valid_header_word,
)
from streams import FRAME_DURATION_NS_44K, MPEG1_L3_128K, header_word


class TestSync(unittest.TestCase):

    def test_sync_mask(self):
        self.assertTrue(is_header_word_synced(0xFFE00000))
        self.assertTrue(is_header_word_synced(MPEG1_L3_128K))
        self.assertFalse(is_header_word_synced(0xFFC00000))
        self.assertFalse(is_header_word_synced(0x7FE00000))
        self.assertFalse(is_header_word_synced(0))

    def test_reserved_fields_rejected(self):
        self.assertTrue(maybe_valid_header_word(header_word()))
        cases = {
            "version": header_word(version_bits=0b01),
            "layer": header_word(layer_bits=0b00),
            "bitrate": header_word(bitrate_index=0xF),
            "sample_rate": header_word(sample_rate_index=0b11),
            "emphasis": header_word(emphasis=0b10),
        }
        for name, word in cases.items():
            with self.subTest(field=name):
                self.assertFalse(maybe_valid_header_word(word))
                self.assertIsNone(decode(word))

    def test_other_emphasis_values_accepted(self):
        for emphasis in (0b00, 0b01, 0b11):
            with self.subTest(emphasis=emphasis):
                self.assertTrue(maybe_valid_header_word(header_word(emphasis=emphasis)))

    def test_unsynced_word_not_decoded(self):
        self.assertIsNone(decode(MPEG1_L3_128K & 0x7FFFFFFF))


class TestDecode(unittest.TestCase):

    def test_mpeg1_layer3_128k(self):
        fh = decode(MPEG1_L3_128K)
        self.assertEqual(fh, FrameHeader(
            version=Version.MPEG1, layer=Layer.LAYER3, mode=Mode.STEREO,
            sample_count=1152, sample_rate_hz=44100, bitrate_bps=128000, frame_size=417))
        self.assertEqual(fh.channel_count, 2)
        self.assertEqual(fh.side_information_size, 32)
        self.assertEqual(fh.duration_ns, FRAME_DURATION_NS_44K)

    def test_padding_adds_one_slot(self):
        self.assertEqual(decode(header_word(padding=1)).frame_size, 418)

    def test_frame_sizes(self):
        cases = [
            # (word, bitrate_bps, sample_rate_hz, sample_count, frame_size)
            (header_word(bitrate_index=14, sample_rate_index=1), 320000, 48000, 1152, 960),
            (header_word(version_bits=0b10, bitrate_index=8), 64000, 22050, 576, 208),
            (header_word(version_bits=0b00, bitrate_index=1, sample_rate_index=2), 8000, 8000, 576, 72),
            (header_word(layer_bits=0b10, bitrate_index=10, sample_rate_index=1), 192000, 48000, 1152, 576),
            (header_word(layer_bits=0b11, bitrate_index=12), 384000, 44100, 384, 416),
            (header_word(layer_bits=0b11, bitrate_index=12, padding=1), 384000, 44100, 384, 420),
            (header_word(layer_bits=0b11, bitrate_index=1, sample_rate_index=1), 32000, 48000, 384, 32),
        ]
        for word, bitrate, rate, samples, size in cases:
            with self.subTest(word=hex(word)):
                fh = decode(word)
                self.assertEqual(fh.bitrate_bps, bitrate)
                self.assertEqual(fh.sample_rate_hz, rate)
                self.assertEqual(fh.sample_count, samples)
                self.assertEqual(fh.frame_size, size)

    def test_free_format_has_unknown_size(self):
        for padding in (0, 1):
            with self.subTest(padding=padding):
                fh = decode(header_word(bitrate_index=0, padding=padding))
                self.assertIsNone(fh.bitrate_bps)
                self.assertIsNone(fh.frame_size)
                self.assertTrue(fh.fits(10_000))

    def test_side_information_sizes(self):
        self.assertEqual(decode(header_word(mode=3)).side_information_size, 17)
        self.assertEqual(decode(header_word(version_bits=0b10, mode=1)).side_information_size, 17)
        self.assertEqual(decode(header_word(version_bits=0b10, mode=3)).side_information_size, 9)
        self.assertEqual(decode(header_word(version_bits=0b00, mode=3)).side_information_size, 9)

    def test_modes_and_channels(self):
        expected = [(Mode.STEREO, 2), (Mode.JOINT_STEREO, 2), (Mode.DUAL_CHANNEL, 2), (Mode.MONO, 1)]
        for bits, (mode, channels) in enumerate(expected):
            fh = decode(header_word(mode=bits))
            self.assertIs(fh.mode, mode)
            self.assertEqual(fh.channel_count, channels)

    def test_decoded_fields_stay_within_tables(self):
        rates = {r for row in SAMPLE_RATES_HZ for r in row}
        bitrates = {1000 * b for v in BIT_RATES_KBPS for layer in v for b in layer if b}
        counts = {c for row in SAMPLE_COUNTS for c in row}
        decoded = 0
        for version_bits in range(4):
            for layer_bits in range(4):
                for bitrate_index in range(16):
                    for sample_rate_index in range(4):
                        for padding in range(2):
                            word = header_word(version_bits, layer_bits, bitrate_index,
                                               sample_rate_index, padding)
                            fh = decode(word)
                            if fh is None:
                                continue
                            decoded += 1
                            self.assertIn(fh.sample_rate_hz, rates)
                            self.assertIn(fh.sample_count, counts)
                            if fh.bitrate_bps is not None:
                                self.assertIn(fh.bitrate_bps, bitrates)
                            if fh.frame_size is not None:
                                self.assertGreaterEqual(fh.frame_size, 4)
        # 3 versions * 3 layers * 15 bitrates * 3 rates * 2 paddings
        self.assertEqual(decoded, 810)


if __name__ == '__main__':
    unittest.main(verbosity=2)
