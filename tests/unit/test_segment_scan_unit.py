# tests/unit/test_segment_scan_unit.py

import random
import unittest

import numpy as np

from heatmap.heatmap_types import GRANULARITY, Segment
from heatmap.segment_scan import (
    as_uint8_array,
    calculate_length_and_segments,
    constant_chunk_flags,
)


def reference_segments(data, granularity):
    """Plain-Python chunk walk used to cross-check the scanner."""
    out = []
    start = None
    for pos in range(0, len(data), granularity):
        chunk = data[pos:pos + granularity]
        constant = all(b == chunk[0] for b in chunk)
        if not constant and start is None:
            start = pos
        elif constant and start is not None:
            out.append((start, pos - start))
            start = None
    if start is not None:
        out.append((start, len(data) - start))
    return out


class TestConstantChunkFlags(unittest.TestCase):
    def test_full_and_partial_chunks(self):
        data = b"aaaa" + b"abcd" + b"zzzz" + b"ab"
        flags = constant_chunk_flags(data, 4)
        self.assertListEqual(flags.tolist(), [True, False, True, False])

    def test_partial_constant_tail(self):
        flags = constant_chunk_flags(b"abcd" + b"zz", 4)
        self.assertListEqual(flags.tolist(), [False, True])

    def test_empty(self):
        self.assertEqual(constant_chunk_flags(b"", 4).size, 0)

    def test_invalid_granularity(self):
        with self.assertRaises(ValueError):
            constant_chunk_flags(b"abc", 0)
        with self.assertRaises(ValueError):
            calculate_length_and_segments(b"abc", -1)


class TestAsUint8Array(unittest.TestCase):
    def test_bytes_view(self):
        arr = as_uint8_array(b"\x00\x01\xff")
        self.assertEqual(arr.dtype, np.uint8)
        self.assertListEqual(arr.tolist(), [0, 1, 255])

    def test_list_and_ndarray(self):
        self.assertListEqual(as_uint8_array([1, 2, 3]).tolist(), [1, 2, 3])
        src = np.arange(4, dtype=np.uint8)
        view = as_uint8_array(src)
        self.assertTrue(np.shares_memory(view, src))
        self.assertListEqual(view.tolist(), [0, 1, 2, 3])

    def test_multidimensional_array_is_flattened(self):
        src = np.arange(12, dtype=np.uint8).reshape(3, 4)
        arr = as_uint8_array(src)
        self.assertEqual(arr.shape, (12,))
        self.assertListEqual(arr.tolist(), list(range(12)))

    def test_wider_dtype_is_read_as_bytes(self):
        src = np.array([0x0102, 0xFFFF], dtype="<u2")
        arr = as_uint8_array(src)
        self.assertEqual(arr.dtype, np.uint8)
        self.assertListEqual(arr.tolist(), [0x02, 0x01, 0xFF, 0xFF])

    def test_non_contiguous_array(self):
        src = np.arange(16, dtype=np.uint8)[::2]
        self.assertListEqual(as_uint8_array(src).tolist(), list(range(0, 16, 2)))


class TestCalculateLengthAndSegments(unittest.TestCase):
    def test_all_constant(self):
        total, segs = calculate_length_and_segments(b"\x41" * 1000, GRANULARITY)
        self.assertEqual(total, 0)
        self.assertEqual(segs, [])

    def test_empty_buffer(self):
        self.assertEqual(calculate_length_and_segments(b"", GRANULARITY), (0, []))

    def test_no_constant_chunks(self):
        data = bytes(range(200))
        total, segs = calculate_length_and_segments(data, GRANULARITY)
        self.assertEqual(segs, [Segment(0, 200)])
        self.assertEqual(total, 200)

    def test_shorter_than_one_chunk(self):
        self.assertEqual(calculate_length_and_segments(b"\x07" * 10, GRANULARITY), (0, []))
        total, segs = calculate_length_and_segments(b"\x07" * 9 + b"\x08", GRANULARITY)
        self.assertEqual(segs, [Segment(0, 10)])
        self.assertEqual(total, 10)

    def test_small_granularity(self):
        data = b"aaaa" + b"abcd" + b"abcd" + b"zzzz" + b"ab"
        total, segs = calculate_length_and_segments(data, 4)
        self.assertEqual(segs, [Segment(4, 8), Segment(16, 2)])
        self.assertEqual(total, 10)

    def test_zeros_random_ff(self):
        """128 x 0x00, 64 interesting bytes, 64 x 0xFF -> one segment (128, 64)."""
        data = b"\x00" * 128 + bytes(range(64)) + b"\xff" * 64
        total, segs = calculate_length_and_segments(data, GRANULARITY)
        self.assertEqual(segs, [Segment(offset=128, length=64)])
        self.assertEqual(total, 64)

    def test_single_interesting_byte_marks_whole_chunk(self):
        data = bytearray(b"\x00" * 256)
        data[130] = 1
        total, segs = calculate_length_and_segments(bytes(data), GRANULARITY)
        self.assertEqual(segs, [Segment(128, 64)])
        self.assertEqual(total, 64)

    def test_segments_split_by_constant_chunk(self):
        interesting = bytes(range(64))
        data = interesting + b"\x00" * 64 + interesting * 2 + b"\x01" * 64 + interesting
        total, segs = calculate_length_and_segments(data, GRANULARITY)
        self.assertEqual(segs, [Segment(0, 64), Segment(128, 128), Segment(320, 64)])
        self.assertEqual(total, 256)

    def test_accepts_buffer_types(self):
        data = b"\x00" * 64 + bytes(range(64))
        expected = calculate_length_and_segments(data, GRANULARITY)
        for variant in (bytearray(data), memoryview(data), list(data), np.frombuffer(data, dtype=np.uint8)):
            self.assertEqual(calculate_length_and_segments(variant, GRANULARITY), expected)

    def test_two_dimensional_input_scans_bytes(self):
        """Rows of a 2-D array are not chunks; the scan runs over the flat bytes."""
        data = b"\x00" * 128 + bytes(range(64)) + b"\xff" * 64
        grid = np.frombuffer(data, dtype=np.uint8).reshape(8, 32)
        total, segs = calculate_length_and_segments(grid, GRANULARITY)
        self.assertEqual(segs, [Segment(128, 64)])
        self.assertEqual(total, 64)

    def test_wide_dtype_input_scans_bytes(self):
        # 32 uint32 zeros (128 bytes) followed by 16 distinct words (64 bytes).
        words = np.concatenate([np.zeros(32, dtype="<u4"),
                                np.arange(1, 17, dtype="<u4") * 0x01010101 + 0x00FF0000])
        total, segs = calculate_length_and_segments(words, GRANULARITY)
        self.assertEqual(segs, [Segment(128, 64)])
        self.assertEqual(total, 64)

    def test_does_not_mutate_input(self):
        data = bytearray(b"\x05" * 100 + bytes(range(100)))
        before = bytes(data)
        calculate_length_and_segments(data, GRANULARITY)
        self.assertEqual(bytes(data), before)

    def test_random_buffers_match_reference_and_invariants(self):
        r = random.Random(20221)
        for _ in range(200):
            granularity = r.choice([1, 3, 8, 64])
            n = r.randrange(1, 2000)
            const = r.randrange(256)
            data = bytearray([const] * n)
            for _ in range(r.randrange(5)):
                start = r.randrange(n)
                for i in range(start, min(n, start + r.randrange(1, 150))):
                    data[i] = r.randrange(256)
            data = bytes(data)

            total, segs = calculate_length_and_segments(data, granularity)
            self.assertEqual([(s.offset, s.length) for s in segs], reference_segments(data, granularity))
            self.assertEqual(total, sum(s.length for s in segs))
            self.assertLessEqual(total, n)
            prev_end = -1
            for s in segs:
                self.assertGreater(s.length, 0)
                self.assertEqual(s.offset % granularity, 0)
                self.assertGreater(s.offset, prev_end)  # sorted, never touching
                self.assertLessEqual(s.end, n)
                prev_end = s.end


if __name__ == "__main__":
    unittest.main()
