"""Tests for transport segment encoding."""

import unittest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from reliability.segment import (
    ACK_SEGMENT_SIZE,
    END_SEGMENT_SIZE,
    START_SEGMENT_SIZE,
    AckSegment,
    DataSegment,
    EndSegment,
    SegmentDecodeError,
    SegmentKind,
    StartSegment,
    decode_segment,
    describe,
    next_seq,
)


class TestSegmentEncoding(unittest.TestCase):
    """Test the wire layout of each segment kind."""

    def test_start_segment(self):
        """Test START carries the message length big-endian."""
        segment = StartSegment(0, dest_port=0x0B, src_port=0x0A, message_len=5)

        self.assertEqual(segment.encode(), bytes.fromhex("07000b0a070005"))
        self.assertEqual(segment.length, START_SEGMENT_SIZE)

    def test_start_segment_large_length(self):
        segment = StartSegment(0, 0x0B, 0x0A, message_len=0x1234)

        self.assertEqual(segment.encode()[5:7], b"\x12\x34")

    def test_data_segment(self):
        """Test DATA carries its offset and chunk."""
        segment = DataSegment(1, 0x0B, 0x0A, offset=0, chunk=b"HELLO")

        self.assertEqual(segment.encode(), bytes.fromhex("0c010b0a0d0000") + b"HELLO")
        self.assertEqual(segment.length, 12)

    def test_data_segment_offset(self):
        segment = DataSegment(0, 0x0B, 0x0A, offset=21, chunk=b"x")

        self.assertEqual(segment.encode()[5:7], b"\x00\x15")

    def test_end_segment(self):
        segment = EndSegment(0, 0x0B, 0x0A)

        self.assertEqual(segment.encode(), bytes.fromhex("05000b0a09"))
        self.assertEqual(segment.length, END_SEGMENT_SIZE)

    def test_ack_segment(self):
        segment = AckSegment(1, dest_port=0x0A, src_port=0x0B)

        self.assertEqual(segment.encode(), bytes.fromhex("05010a0b0a"))
        self.assertEqual(segment.length, ACK_SEGMENT_SIZE)

    def test_kind_values(self):
        """Test the kind identifiers."""
        self.assertEqual(SegmentKind.START, 0x07)
        self.assertEqual(SegmentKind.END, 0x09)
        self.assertEqual(SegmentKind.ACK, 0x0A)
        self.assertEqual(SegmentKind.DATA, 0x0D)


class TestSegmentDecoding(unittest.TestCase):
    """Test decoding packet payloads into segments."""

    def test_decode_each_kind(self):
        """Test every kind decodes back to an equal segment."""
        segments = [
            StartSegment(0, 0x0B, 0x0A, message_len=300),
            DataSegment(1, 0x0B, 0x0A, offset=42, chunk=b"payload"),
            EndSegment(1, 0x0B, 0x0A),
            AckSegment(0, 0x0A, 0x0B),
        ]
        for segment in segments:
            self.assertEqual(decode_segment(segment.encode()), segment)

    def test_decode_data_trusts_length(self):
        """Test bytes after the announced length are not part of the chunk."""
        data = DataSegment(1, 0x0B, 0x0A, offset=0, chunk=b"abc").encode() + b"\x00\x00"

        self.assertEqual(decode_segment(data).chunk, b"abc")

    def test_decode_too_short(self):
        with self.assertRaises(SegmentDecodeError):
            decode_segment(b"\x05\x00\x0b")

    def test_decode_start_missing_length(self):
        with self.assertRaises(SegmentDecodeError):
            decode_segment(bytes.fromhex("07000b0a07"))

    def test_decode_unknown_kind(self):
        with self.assertRaises(SegmentDecodeError):
            decode_segment(bytes.fromhex("05000b0a42"))


class TestSegmentHelpers(unittest.TestCase):
    """Test sequence and logging helpers."""

    def test_next_seq(self):
        self.assertEqual(next_seq(0), 1)
        self.assertEqual(next_seq(1), 0)

    def test_describe(self):
        self.assertEqual(
            describe(StartSegment(0, 0x0B, 0x0A, message_len=5)),
            "START(seq=0, msg_len=5)",
        )
        self.assertEqual(
            describe(DataSegment(1, 0x0B, 0x0A, offset=0, chunk=b"HELLO")),
            "DATA(seq=1, offset=0, 5 bytes)",
        )
        self.assertEqual(describe(AckSegment(1, 0x0A, 0x0B)), "ACK(seq=1)")


if __name__ == "__main__":
    unittest.main()
