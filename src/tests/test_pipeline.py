import os
import sys
import tempfile
import unittest
from datetime import timedelta
from pathlib import Path

# Add src and tests directories to path for imports
TESTS_DIR = Path(__file__).resolve().parent
BASE_DIR = TESTS_DIR.parent
for p in (BASE_DIR, TESTS_DIR):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from mpegaudio.errors import IoError, PositionalError
from mpegaudio.header import HeaderSource, ParseMode
from mpegaudio.pipeline import read_from_bytes, read_from_file, read_from_path, scan_directory
from streams import FRAME_DURATION_NS_44K, frame, frames, header_word, id3v1, id3v2, xing_frame


def _write(path: str, data: bytes):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)


class TestReadFromPath(unittest.TestCase):
    """Reading files from disk."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_read_file(self):
        path = os.path.join(self.tmpdir.name, "song.mp3")
        _write(path, id3v2(200) + frames(10) + id3v1())
        header = read_from_path(path)
        self.assertEqual(header.total_sample_count, 11520)
        self.assertEqual(header.total_duration_ns, 10 * FRAME_DURATION_NS_44K)
        self.assertEqual(read_from_path(Path(path)), header)

    def test_parse_mode_is_passed_on(self):
        path = os.path.join(self.tmpdir.name, "vbr.mp3")
        _write(path, xing_frame(total_frames=10) + frames(10))
        self.assertEqual(read_from_path(path).source, HeaderSource.XING_HEADER)
        self.assertEqual(read_from_path(path, ParseMode.IGNORE_VBR_HEADERS).source,
                         HeaderSource.MPEG_FRAME_HEADERS)

    def test_missing_file(self):
        path = os.path.join(self.tmpdir.name, "missing.mp3")
        with self.assertRaises(PositionalError) as ctx:
            read_from_path(path)
        err = ctx.exception
        self.assertIsInstance(err.source, IoError)
        self.assertEqual(err.position.byte_offset, 0)
        self.assertIsInstance(err.__cause__, FileNotFoundError)

    def test_read_from_open_file_at_current_position(self):
        path = os.path.join(self.tmpdir.name, "song.mp3")
        _write(path, frames(3))
        with open(path, "rb") as f:
            f.read(len(frame()))
            header = read_from_file(f)
            self.assertFalse(f.closed)
        self.assertEqual(header.total_frame_count, 2)


class TestScanDirectory(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        root = self.tmpdir.name
        _write(os.path.join(root, "a.mp3"), frames(3))
        _write(os.path.join(root, "b.mp2"), frame()[:200])
        _write(os.path.join(root, "c.txt"), frames(3))
        _write(os.path.join(root, "sub", "d.MP3"), frames(5))

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_scan(self):
        with self.assertLogs("mpegaudio.pipeline", level="WARNING") as logs:
            results = list(scan_directory(self.tmpdir.name))
        names = [p.name for p, _ in results]
        self.assertEqual(names, ["a.mp3", "b.mp2", "d.MP3"])

        a, b, d = (r for _, r in results)
        self.assertEqual(a.total_frame_count, 3)
        self.assertIsInstance(b, PositionalError)
        self.assertTrue(b.is_unexpected_eof())
        self.assertEqual(d.total_frame_count, 5)
        self.assertTrue(any("b.mp2" in line for line in logs.output))

    def test_empty_directory(self):
        with tempfile.TemporaryDirectory() as empty:
            self.assertEqual(list(scan_directory(empty)), [])


class TestSummary(unittest.TestCase):

    def test_cbr_summary(self):
        header = read_from_bytes(frames(10))
        self.assertEqual(header.summary_lines(), [
            "Source: mpeg frame headers",
            "Version: MPEG-1",
            "Layer: Layer III",
            "Mode: stereo",
            "Duration: 0:00.261 (261224480 ns)",
            "Samples: 11520 in 10 frames",
            "Channels: 2",
            "Sample rate: 44100 Hz",
            "Bitrate: 128 kbps",
        ])
        self.assertEqual(header.total_duration, timedelta(microseconds=261_224))
        self.assertAlmostEqual(header.total_seconds, 0.26122448)

    def test_mixed_summary(self):
        mono = header_word(bitrate_index=5, sample_rate_index=1, mode=3)
        lines = read_from_bytes(frames(2) + frame(mono)).summary_lines()
        self.assertIn("Mode: n/a", lines)
        self.assertIn("Channels: 1..2", lines)
        self.assertIn("Sample rate: 44100..48000 Hz (avg 45400 Hz)", lines)
        self.assertIn("Bitrate: 106 kbps avg (64000..128000 bps)", lines)

    def test_empty_summary(self):
        lines = read_from_bytes(b"").summary_lines()
        self.assertIn("Version: n/a", lines)
        self.assertIn("Duration: 0:00.000 (0 ns)", lines)
        self.assertIn("Bitrate: n/a", lines)


if __name__ == '__main__':
    unittest.main(verbosity=2)
