import struct
import unittest

from png2webp.exceptions import ContainerParseError, ContainerWriteError
from png2webp.riff import DataChunk, ListChunk, iter_chunks, padded, read_riff

from helpers import make_webp, riff_chunk


class DataChunkTests(unittest.TestCase):
    def test_even_payload_has_no_pad_byte(self):
        chunk = DataChunk(b'VP8X', b'\x01\x02\x03\x04')
        self.assertEqual(chunk.to_bytes(), b'VP8X\x04\x00\x00\x00\x01\x02\x03\x04')
        self.assertEqual(chunk.size, 12)

    def test_odd_payload_gets_one_zero_pad_byte(self):
        chunk = DataChunk(b'EXIF', b'abc')
        self.assertEqual(chunk.to_bytes(), b'EXIF\x03\x00\x00\x00abc\x00')
        self.assertEqual(chunk.size, 12)

    def test_empty_payload(self):
        self.assertEqual(DataChunk(b'XMP ', b'').to_bytes(), b'XMP \x00\x00\x00\x00')

    def test_fourcc_must_be_four_bytes(self):
        with self.assertRaises(ContainerWriteError):
            DataChunk(b'VP8', b'').to_bytes()

    def test_padded(self):
        self.assertEqual([padded(n) for n in range(5)], [0, 2, 2, 4, 4])


class ListChunkTests(unittest.TestCase):
    def test_length_counts_form_type_and_padded_children(self):
        root = ListChunk(b'RIFF', b'WEBP', (DataChunk(b'AAAA', b'x'), DataChunk(b'BBBB', b'yy')))
        data = root.to_bytes()
        self.assertEqual(struct.unpack('<I', data[4:8])[0], 4 + 10 + 10)
        self.assertEqual(len(data), 8 + 4 + 10 + 10)
        self.assertEqual(root.payload_size, 24)
        self.assertEqual(data[8:12], b'WEBP')

    def test_find_returns_first_match(self):
        first = DataChunk(b'VP8L', b'1')
        root = ListChunk(b'RIFF', b'WEBP', (DataChunk(b'VP8X', b''), first, DataChunk(b'VP8 ', b'2')))
        self.assertIs(root.find(b'VP8 ', b'VP8L'), first)
        self.assertIsNone(root.find(b'ALPH'))


class ReadRiffTests(unittest.TestCase):
    def test_reads_children_and_skips_padding(self):
        data = make_webp(riff_chunk(b'VP8L', b'abc'), riff_chunk(b'EXIF', b'de'))
        root = read_riff(data, form_type=b'WEBP')
        self.assertEqual(root.children, (DataChunk(b'VP8L', b'abc'), DataChunk(b'EXIF', b'de')))

    def test_round_trip_through_writer(self):
        data = make_webp(riff_chunk(b'VP8L', b'abcde'), riff_chunk(b'EXIF', b'MM'))
        self.assertEqual(read_riff(data).to_bytes(), data)

    def test_rejects_non_riff(self):
        with self.assertRaises(ContainerParseError):
            read_riff(b'\x89PNG\r\n\x1a\n' + b'\x00' * 8)

    def test_rejects_wrong_form_type(self):
        data = b'RIFF' + struct.pack('<I', 4) + b'WAVE'
        with self.assertRaises(ContainerParseError):
            read_riff(data, form_type=b'WEBP')

    def test_rejects_length_past_end(self):
        data = make_webp(riff_chunk(b'VP8L', b'abcd'))
        with self.assertRaises(ContainerParseError):
            read_riff(data[:-1])

    def test_rejects_truncated_chunk(self):
        body = b'WEBP' + b'VP8L' + struct.pack('<I', 100) + b'short'
        data = b'RIFF' + struct.pack('<I', len(body)) + body
        with self.assertRaises(ContainerParseError):
            read_riff(data)

    def test_iter_chunks_rejects_partial_header(self):
        with self.assertRaises(ContainerParseError):
            list(iter_chunks(b'VP8L\x01'))


if __name__ == "__main__":
    unittest.main()
