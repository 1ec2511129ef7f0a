import unittest

from datetime import datetime

from atmfjstc.lib.zip_stream.header import (
    ZipLocalHeader, ZipCompressionMethod, ZipEntryFlags, HEADER_SIZE, LOCAL_ENTRY_SIGNATURE, DIRECTORY_SIGNATURE,
)
from atmfjstc.lib.zip_stream.errors import MalformedZipHeaderError

from zip_samples import make_header


class FromBytesTest(unittest.TestCase):
    def test_field_offsets(self):
        data = bytes.fromhex(
            '504b0304'  # signature
            '1400'      # version
            '0008'      # flags
            '0800'      # compression method
            '2165'      # file time
            '5a4e'      # file date
            '78563412'  # crc
            '0a000000'  # compressed size
            '0c000000'  # uncompressed size
            '0500'      # name length
            '0300'      # extra length
        )

        header = ZipLocalHeader.from_bytes(data)

        self.assertEqual(header.signature, LOCAL_ENTRY_SIGNATURE)
        self.assertEqual(header.version, 20)
        self.assertEqual(header.flags, 0x0800)
        self.assertEqual(header.compression_method, ZipCompressionMethod.DEFLATE)
        self.assertEqual(header.file_time, 0x6521)
        self.assertEqual(header.file_date, 0x4e5a)
        self.assertEqual(header.crc, 0x12345678)
        self.assertEqual(header.compressed_size, 10)
        self.assertEqual(header.uncompressed_size, 12)
        self.assertEqual(header.name_length, 5)
        self.assertEqual(header.extra_length, 3)

    def test_to_bytes_inverts_from_bytes(self):
        header = make_header(crc=0xdeadbeef, compressed_size=7, uncompressed_size=7, name_length=3)

        data = header.to_bytes()

        self.assertEqual(len(data), HEADER_SIZE)
        self.assertEqual(ZipLocalHeader.from_bytes(data), header)

    def test_wrong_length(self):
        with self.assertRaises(ValueError):
            ZipLocalHeader.from_bytes(b'PK\x03\x04')


class ValidateTest(unittest.TestCase):
    def test_local_entry(self):
        self.assertTrue(make_header(compressed_size=5, uncompressed_size=5).validate())

    def test_deflate_sizes_may_differ(self):
        header = make_header(compression_method=ZipCompressionMethod.DEFLATE, compressed_size=5, uncompressed_size=60)

        self.assertTrue(header.validate())

    def test_directory_marker(self):
        header = make_header(signature=DIRECTORY_SIGNATURE)

        self.assertFalse(header.validate())
        self.assertTrue(header.is_directory_marker)

    def test_directory_marker_skips_other_checks(self):
        self.assertFalse(make_header(signature=DIRECTORY_SIGNATURE, compression_method=99).validate())

    def test_bad_signature(self):
        with self.assertRaisesRegex(MalformedZipHeaderError, 'signature 0xdeadbeef'):
            make_header(signature=0xDEADBEEF).validate()

    def test_unsupported_compression_method(self):
        with self.assertRaisesRegex(MalformedZipHeaderError, 'compression method 99'):
            make_header(compression_method=99).validate()

    def test_name_too_long(self):
        with self.assertRaisesRegex(MalformedZipHeaderError, 'name length 513'):
            make_header(name_length=513).validate()

    def test_name_at_limit(self):
        self.assertTrue(make_header(name_length=512).validate())

    def test_stored_size_mismatch(self):
        with self.assertRaises(MalformedZipHeaderError) as cm:
            make_header(compressed_size=5, uncompressed_size=6).validate()

        self.assertIn('stored entry', cm.exception.reason)


class DescribeTest(unittest.TestCase):
    def test_describe(self):
        text = make_header(crc=0xabc, compressed_size=3, uncompressed_size=3, name_length=5).describe()

        self.assertEqual(text.splitlines(), [
            "ZIP local header:",
            "Signature: 0x04034b50",
            "Version: 20",
            "Flags: 0x0000",
            "Compression method: 0x0000",
            "CRC: 0x00000abc",
            "Compressed size: 3",
            "Uncompressed size: 3",
            "File name length: 5",
            "Extra field length: 0",
        ])

    def test_modification_time(self):
        header = make_header(file_time=(13 << 11) | (45 << 5) | 15, file_date=(43 << 9) | (7 << 5) | 26)

        self.assertEqual(header.modification_time, datetime(2023, 7, 26, 13, 45, 30))

    def test_modification_time_invalid(self):
        self.assertIsNone(make_header(file_time=0, file_date=0).modification_time)

    def test_method_and_flags(self):
        header = make_header(compression_method=8, flags=0x0808)

        self.assertIs(header.method, ZipCompressionMethod.DEFLATE)
        self.assertIn(ZipEntryFlags.UTF8, header.entry_flags)
        self.assertIn(ZipEntryFlags.DEFERRED_CRC32, header.entry_flags)


if __name__ == '__main__':
    unittest.main()
