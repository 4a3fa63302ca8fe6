"""
Unit tests for Module 1: Video I/O

Tests cover:
- VideoSource reading and metadata
- VideoSink writing
- Error handling and edge cases
"""

import unittest
import numpy as np
import tempfile
import os
import shutil
import cv2

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from module1_video_io import (
    VideoSource,
    VideoSink,
    VideoMetadata,
    VideoIOError,
    SourceUnavailableError,
    SinkUnavailableError,
    codec_to_fourcc,
)


class TestVideoIO(unittest.TestCase):
    """Test suite for VideoSource and VideoSink"""

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        """Clean up test fixtures"""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def create_test_video(
        self,
        filename: str,
        num_frames: int = 10,
        width: int = 64,
        height: int = 48,
        fps: int = 30
    ) -> str:
        """
        Create a test video file with synthetic frames.

        Returns:
            path: Full path to created video
        """
        path = os.path.join(self.temp_dir, filename)
        fourcc = cv2.VideoWriter_fourcc(*'mp4v')
        writer = cv2.VideoWriter(path, fourcc, fps, (width, height))

        for i in range(num_frames):
            frame = np.zeros((height, width, 3), dtype=np.uint8)
            frame[:, :, 0] = (i * 25) % 256
            frame[:, :, 1] = 128
            frame[:, :, 2] = 255 - (i * 25) % 256

            writer.write(frame)

        writer.release()
        return path

    # =========================================================================
    # Tests for VideoSource
    # =========================================================================

    def test_source_metadata(self):
        """Test that metadata reflects the opened video"""
        video_path = self.create_test_video("meta.mp4", num_frames=5)

        with VideoSource(video_path) as source:
            metadata = source.metadata

        self.assertIsInstance(metadata, VideoMetadata)
        self.assertAlmostEqual(metadata.fps, 30, places=1)
        self.assertEqual(metadata.width, 64)
        self.assertEqual(metadata.height, 48)
        self.assertEqual(metadata.num_frames, 5)
        self.assertAlmostEqual(metadata.duration, 5 / 30, places=2)

    def test_source_reads_every_frame(self):
        """Test that iterating the source yields every frame once"""
        video_path = self.create_test_video("iter.mp4", num_frames=7)

        with VideoSource(video_path) as source:
            frames = list(source)
            self.assertEqual(source.frames_read, 7)

        self.assertEqual(len(frames), 7)
        for frame in frames:
            self.assertEqual(frame.shape, (48, 64, 3))
            self.assertEqual(frame.dtype, np.uint8)

    def test_source_read_returns_none_at_end(self):
        """Test end-of-stream signalling"""
        video_path = self.create_test_video("end.mp4", num_frames=2)

        with VideoSource(video_path) as source:
            self.assertIsNotNone(source.read())
            self.assertIsNotNone(source.read())
            self.assertIsNone(source.read())
            self.assertIsNone(source.read())

    def test_source_rgb_order(self):
        """Test that frames are converted from OpenCV's BGR to RGB"""
        path = os.path.join(self.temp_dir, "red.mp4")
        writer = cv2.VideoWriter(path, cv2.VideoWriter_fourcc(*'mp4v'), 10, (64, 48))
        bgr_red = np.zeros((48, 64, 3), dtype=np.uint8)
        bgr_red[:, :, 2] = 255
        for _ in range(3):
            writer.write(bgr_red)
        writer.release()

        with VideoSource(path) as source:
            frame = source.read()

        # Red lands in channel 0 after conversion
        self.assertGreater(frame[:, :, 0].mean(), 200)
        self.assertLess(frame[:, :, 2].mean(), 50)

    def test_source_file_not_found(self):
        """Test that SourceUnavailableError is raised for a missing file"""
        missing = os.path.join(self.temp_dir, "nonexistent_video.mp4")

        with self.assertRaises(SourceUnavailableError) as context:
            VideoSource(missing)

        self.assertEqual(context.exception.path, missing)
        self.assertIn(missing, str(context.exception))

    def test_source_invalid_file(self):
        """Test that SourceUnavailableError is raised for an undecodable file"""
        invalid_path = os.path.join(self.temp_dir, "invalid.mp4")
        with open(invalid_path, 'w') as f:
            f.write("This is not a video file")

        with self.assertRaises(SourceUnavailableError):
            VideoSource(invalid_path)

    def test_source_release_is_idempotent(self):
        """Test that releasing twice is harmless"""
        video_path = self.create_test_video("release.mp4", num_frames=2)

        source = VideoSource(video_path)
        source.release()
        source.release()

        self.assertIsNone(source.read())

    # =========================================================================
    # Tests for VideoSink
    # =========================================================================

    def test_sink_basic(self):
        """Test basic video writing and reading back"""
        output_path = os.path.join(self.temp_dir, "output_basic.mp4")

        with VideoSink(output_path, fps=30, frame_size=(64, 48)) as sink:
            for i in range(10):
                frame = np.zeros((48, 64, 3), dtype=np.uint8)
                frame[:, :, i % 3] = 255
                sink.write(frame)
            self.assertEqual(sink.frames_written, 10)

        self.assertTrue(os.path.exists(output_path))
        self.assertGreater(os.path.getsize(output_path), 0)

        with VideoSource(output_path) as source:
            self.assertEqual(len(list(source)), 10)

    def test_sink_creates_output_directory(self):
        """Test that missing parent directories are created"""
        output_path = os.path.join(self.temp_dir, "nested", "dir", "out.mp4")

        with VideoSink(output_path, fps=25, frame_size=(64, 48)) as sink:
            sink.write(np.zeros((48, 64, 3), dtype=np.uint8))

        self.assertTrue(os.path.exists(output_path))

    def test_sink_rejects_wrong_frame_size(self):
        """Test that frames must match the declared size"""
        output_path = os.path.join(self.temp_dir, "wrong_size.mp4")

        with VideoSink(output_path, fps=30, frame_size=(64, 48)) as sink:
            with self.assertRaises(ValueError) as context:
                sink.write(np.zeros((48, 32, 3), dtype=np.uint8))

        self.assertIn("shape mismatch", str(context.exception))

    def test_sink_rejects_wrong_dtype(self):
        """Test that frames must be uint8"""
        output_path = os.path.join(self.temp_dir, "wrong_dtype.mp4")

        with VideoSink(output_path, fps=30, frame_size=(64, 48)) as sink:
            with self.assertRaises(ValueError):
                sink.write(np.zeros((48, 64, 3), dtype=np.float32))

    def test_sink_write_after_release(self):
        """Test that writing to a released sink raises VideoIOError"""
        output_path = os.path.join(self.temp_dir, "released.mp4")

        sink = VideoSink(output_path, fps=30, frame_size=(64, 48))
        sink.write(np.zeros((48, 64, 3), dtype=np.uint8))
        sink.release()

        with self.assertRaises(VideoIOError) as context:
            sink.write(np.zeros((48, 64, 3), dtype=np.uint8))

        self.assertIn("already released", str(context.exception))
        self.assertEqual(sink.frames_written, 1)

    def test_sink_invalid_fps(self):
        """Test that ValueError is raised for invalid FPS"""
        output_path = os.path.join(self.temp_dir, "output_invalid_fps.mp4")

        with self.assertRaises(ValueError):
            VideoSink(output_path, fps=0, frame_size=(64, 48))

        with self.assertRaises(ValueError):
            VideoSink(output_path, fps=-10, frame_size=(64, 48))

    def test_sink_unavailable(self):
        """Test that SinkUnavailableError is raised when the file can't be created"""
        blocker = os.path.join(self.temp_dir, "not_a_directory")
        with open(blocker, 'w') as f:
            f.write("file in the way")

        output_path = os.path.join(blocker, "out.mp4")

        with self.assertRaises(SinkUnavailableError) as context:
            VideoSink(output_path, fps=30, frame_size=(64, 48))

        self.assertEqual(context.exception.path, output_path)

    def test_codec_mapping(self):
        """Test codec name to fourcc resolution"""
        self.assertEqual(codec_to_fourcc("mp4v"), cv2.VideoWriter_fourcc(*'mp4v'))
        self.assertEqual(codec_to_fourcc("libx264"), cv2.VideoWriter_fourcc(*'mp4v'))
        self.assertEqual(codec_to_fourcc("AVC1"), cv2.VideoWriter_fourcc(*'avc1'))
        self.assertEqual(codec_to_fourcc("unknown"), cv2.VideoWriter_fourcc(*'mp4v'))


if __name__ == '__main__':
    unittest.main()
