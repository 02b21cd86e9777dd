"""Tests for chunking utilities."""

import unittest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.chunking import iter_chunks


class TestChunkingUtilities(unittest.TestCase):
    """Test chunking utility functions."""

    def test_iter_chunks_offsets(self):
        """Test chunks carry their offset into the data."""
        chunks = list(iter_chunks(b"abcdefgh", 3))

        self.assertEqual(chunks, [(0, b"abc"), (3, b"def"), (6, b"gh")])

    def test_iter_chunks_exact_multiple(self):
        """Test no trailing empty chunk for an exact multiple."""
        chunks = list(iter_chunks(b"x" * 42, 21))

        self.assertEqual(len(chunks), 2)
        self.assertEqual([offset for offset, _ in chunks], [0, 21])
        self.assertTrue(all(len(chunk) == 21 for _, chunk in chunks))

    def test_iter_chunks_empty(self):
        """Test empty data yields nothing."""
        self.assertEqual(list(iter_chunks(b"", 21)), [])

    def test_iter_chunks_rejects_bad_size(self):
        """Test a non-positive chunk size is an error."""
        with self.assertRaises(ValueError):
            list(iter_chunks(b"abc", 0))


if __name__ == "__main__":
    unittest.main()
