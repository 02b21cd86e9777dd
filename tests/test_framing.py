"""Tests for framing encode/decode functions and the link layer."""

import unittest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.results import LinkResult
from framing.frame import FRAME_SIZE, max_frame_payload
from framing.codec import (
    encode_frame,
    encode_frame_sections,
    decode_frame,
    FrameDecodeError,
)
from framing.link import LinkLayer
from transport.memory import InMemoryRadio, InMemoryRadioBus


class TestFrameEncoding(unittest.TestCase):
    """Test frame encoding."""

    def test_frame_is_fixed_size(self):
        """Every encoded frame is exactly FRAME_SIZE bytes."""
        for payload in (b"", b"x", b"hello", b"y" * 31):
            self.assertEqual(len(encode_frame(payload)), FRAME_SIZE)

    def test_length_byte_and_padding(self):
        """Test length byte, payload placement and zero padding."""
        frame = encode_frame(b"\x01\x02\x03")

        self.assertEqual(frame[0], 3)
        self.assertEqual(frame[1:4], b"\x01\x02\x03")
        self.assertEqual(frame[4:], bytes(FRAME_SIZE - 4))

    def test_empty_payload(self):
        """Test an empty payload encodes as an all-zero frame."""
        self.assertEqual(encode_frame(b""), bytes(FRAME_SIZE))

    def test_max_payload(self):
        """A 31-byte payload fills the 32-byte frame."""
        payload = bytes(range(31))
        frame = encode_frame(payload)

        self.assertEqual(max_frame_payload(FRAME_SIZE), 31)
        self.assertEqual(frame[0], 31)
        self.assertEqual(frame[1:], payload)

    def test_oversized_payload_truncated(self):
        """Test payloads larger than the frame are truncated, not rejected."""
        payload = bytes(range(40))

        with self.assertLogs("framing.codec", level="WARNING"):
            frame = encode_frame(payload)

        self.assertEqual(len(frame), FRAME_SIZE)
        self.assertEqual(frame[0], 31)
        self.assertEqual(decode_frame(frame), payload[:31])

    def test_sections_concatenated_in_order(self):
        """Test discontiguous sections are written back to back."""
        frame = encode_frame_sections([b"\x08\x0b\x0a", b"HELLO"])

        self.assertEqual(frame[0], 8)
        self.assertEqual(frame[1:9], b"\x08\x0b\x0aHELLO")
        self.assertEqual(frame, encode_frame(b"\x08\x0b\x0aHELLO"))

    def test_custom_frame_size(self):
        """Test a non-default frame width."""
        frame = encode_frame(b"abc", frame_size=16)

        self.assertEqual(len(frame), 16)
        self.assertEqual(decode_frame(frame, frame_size=16), b"abc")


class TestFrameDecoding(unittest.TestCase):
    """Test frame decoding."""

    def test_decode_returns_payload(self):
        """Test decode returns exactly the announced bytes."""
        self.assertEqual(decode_frame(encode_frame(b"HELLO")), b"HELLO")

    def test_decode_wrong_size(self):
        """Test a buffer of the wrong size is rejected."""
        with self.assertRaises(FrameDecodeError):
            decode_frame(b"\x03abc", frame_size=FRAME_SIZE)

    def test_decode_empty(self):
        """Test an empty buffer is rejected."""
        with self.assertRaises(FrameDecodeError):
            decode_frame(b"")

    def test_decode_trusts_length_byte(self):
        """Test padding after the announced length is ignored."""
        frame = bytearray(encode_frame(b"abc"))
        frame[10] = 0x55

        self.assertEqual(decode_frame(bytes(frame)), b"abc")

    def test_decode_clamps_length_byte(self):
        """Test an impossible length byte is clamped to the frame."""
        frame = bytes([0xFF]) + b"z" * (FRAME_SIZE - 1)

        self.assertEqual(decode_frame(frame), b"z" * (FRAME_SIZE - 1))


class TestLinkLayer(unittest.TestCase):
    """Test LinkLayer over in-memory radios."""

    def setUp(self):
        self.bus = InMemoryRadioBus()
        self.radio_a = InMemoryRadio(0xA, self.bus)
        self.radio_b = InMemoryRadio(0xB, self.bus)
        self.link_a = LinkLayer(self.radio_a)
        self.link_b = LinkLayer(self.radio_b)

    def test_send_receive(self):
        """Test a payload crosses the link unchanged."""
        self.assertEqual(self.link_a.send(0xB, b"ping"), LinkResult.SUCCESS)

        reception = self.link_b.receive(timeout=1.0)

        self.assertEqual(reception.result, LinkResult.SUCCESS)
        self.assertEqual(reception.payload, b"ping")
        self.assertEqual(reception.source_address, 0xA)

    def test_send_sections(self):
        """Test sending a list of sections."""
        self.link_a.send(0xB, [b"head", b"body"])

        self.assertEqual(self.link_b.receive(timeout=1.0).payload, b"headbody")

    def test_frames_on_the_bus_are_fixed_size(self):
        """Test the radio only ever sees full frames."""
        self.link_a.send(0xB, b"x")

        _, _, frame = self.bus.history[0]
        self.assertEqual(len(frame), FRAME_SIZE)

    def test_receive_timeout(self):
        """Test receive reports TIMEOUT when nothing arrives."""
        self.assertEqual(self.link_b.receive(timeout=0.05).result, LinkResult.TIMEOUT)

    def test_malformed_frame_is_error(self):
        """Test a raw frame of the wrong size is reported as ERROR."""
        self.bus.inject(0xA, 0xB, b"\x02hi")

        self.assertEqual(self.link_b.receive(timeout=1.0).result, LinkResult.ERROR)

    def test_send_failure_is_error(self):
        """Test a radio refusing the frame is reported as ERROR."""

        class Refusing(InMemoryRadio):
            def send(self, address, frame):
                return False

        refusing = LinkLayer(Refusing(0xD, self.bus))
        self.assertEqual(refusing.send(0xB, b"x"), LinkResult.ERROR)

    def test_max_payload_follows_frame_size(self):
        """Test the link payload capacity is frame size minus one."""
        link = LinkLayer(InMemoryRadio(0xC, self.bus, frame_size=16))

        self.assertEqual(link.max_payload, 15)
        self.assertEqual(self.link_a.max_payload, 31)


if __name__ == "__main__":
    unittest.main()
