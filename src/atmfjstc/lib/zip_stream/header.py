"""
The binary model for ZIP local entry headers.

A local header is a packed, little-endian, 30-byte record::

    offset  size  field
    0       4     signature
    4       2     version
    6       2     flags
    8       2     compression method
    10      2     file time (MS-DOS format)
    12      2     file date (MS-DOS format)
    14      4     CRC-32
    18      4     compressed size
    22      4     uncompressed size
    26      2     name length
    28      2     extra field length

It is immediately followed by the entry name, the extra field and finally the (possibly compressed) content.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum, IntFlag
from typing import Optional, Tuple, Union

from atmfjstc.lib.ez_repr import EZRepr

from atmfjstc.lib.zip_stream.errors import MalformedZipHeaderError


LOCAL_ENTRY_SIGNATURE = 0x04034b50
DIRECTORY_SIGNATURE = 0x02014b50

HEADER_SIZE = 30
MAX_NAME_LENGTH = 512


_HEADER_LAYOUT: Tuple[Tuple[str, int, int], ...] = (
    ('signature', 0, 4),
    ('version', 4, 2),
    ('flags', 6, 2),
    ('compression_method', 8, 2),
    ('file_time', 10, 2),
    ('file_date', 12, 2),
    ('crc', 14, 4),
    ('compressed_size', 18, 4),
    ('uncompressed_size', 22, 4),
    ('name_length', 26, 2),
    ('extra_length', 28, 2),
)


class ZipCompressionMethod(IntEnum):
    STORE = 0
    DEFLATE = 8


SUPPORTED_COMPRESSION_METHODS = frozenset(ZipCompressionMethod)


class ZipEntryFlags(IntFlag):
    ENCRYPTED = 1 << 0
    DEFLATE_MAX_COMPRESSION = 1 << 1
    DEFLATE_FAST_COMPRESSION = 1 << 2
    DEFERRED_CRC32 = 1 << 3
    ENHANCED_DEFLATE = 1 << 4
    PATCHED_DATA = 1 << 5
    STRONG_ENCRYPTION = 1 << 6
    UTF8 = 1 << 11
    ENHANCED_COMPRESSION = 1 << 12
    LOCAL_HEADER_MASKED = 1 << 13


@dataclass(frozen=True, repr=False)
class ZipLocalHeader(EZRepr):
    """
    The decoded fields of a ZIP local header (or of the first 30 bytes of a central directory record, which is how the
    end of the local entries is detected).

    Only the signature, compression method, sizes and name length are validated. The version, flags, timestamp and
    CRC are carried along as-is.
    """

    signature: int
    version: int
    flags: int
    compression_method: int
    file_time: int
    file_date: int
    crc: int
    compressed_size: int
    uncompressed_size: int
    name_length: int
    extra_length: int

    @staticmethod
    def from_bytes(data: bytes) -> 'ZipLocalHeader':
        """
        Decodes a header from exactly `HEADER_SIZE` bytes of raw data. The data is not validated.
        """
        if len(data) != HEADER_SIZE:
            raise ValueError(f"A ZIP local header is {HEADER_SIZE} bytes long, got {len(data)}")

        return ZipLocalHeader(**{
            name: int.from_bytes(data[offset:offset + size], byteorder='little', signed=False)
            for name, offset, size in _HEADER_LAYOUT
        })

    def to_bytes(self) -> bytes:
        return b''.join(
            getattr(self, name).to_bytes(size, byteorder='little', signed=False)
            for name, _, size in _HEADER_LAYOUT
        )

    @property
    def is_directory_marker(self) -> bool:
        return self.signature == DIRECTORY_SIGNATURE

    @property
    def entry_flags(self) -> ZipEntryFlags:
        return ZipEntryFlags(self.flags)

    @property
    def method(self) -> Union[ZipCompressionMethod, int]:
        try:
            return ZipCompressionMethod(self.compression_method)
        except ValueError:
            return self.compression_method

    @property
    def modification_time(self) -> Optional[datetime]:
        """
        The MS-DOS date and time fields combined into a naive `datetime`, or None if they do not form a valid date.
        """
        try:
            return datetime(
                year=1980 + (self.file_date >> 9),
                month=(self.file_date >> 5) & 0x0f,
                day=self.file_date & 0x1f,
                hour=self.file_time >> 11,
                minute=(self.file_time >> 5) & 0x3f,
                second=min((self.file_time & 0x1f) * 2, 59),
            )
        except ValueError:
            return None

    def validate(self) -> bool:
        """
        Checks whether the header describes an entry this library can read.

        Returns:
            True if this is a regular local entry header, False if it is the start of the central directory, which
            marks the end of the local entries. The latter is not an error.

        Raises:
            MalformedZipHeaderError: If the signature is unknown, the compression method is unsupported, the name is
                too long, or a stored entry has different compressed and uncompressed sizes.
        """
        if self.signature != LOCAL_ENTRY_SIGNATURE:
            if self.signature == DIRECTORY_SIGNATURE:
                return False

            raise MalformedZipHeaderError(f"invalid signature 0x{self.signature:08x}")

        if self.compression_method not in SUPPORTED_COMPRESSION_METHODS:
            raise MalformedZipHeaderError(f"unsupported compression method {self.compression_method}")

        if self.name_length > MAX_NAME_LENGTH:
            raise MalformedZipHeaderError(
                f"name length {self.name_length} exceeds the maximum of {MAX_NAME_LENGTH}"
            )

        if (self.compression_method == ZipCompressionMethod.STORE) and \
                (self.compressed_size != self.uncompressed_size):
            raise MalformedZipHeaderError(
                f"stored entry has compressed size {self.compressed_size} != uncompressed size "
                f"{self.uncompressed_size}"
            )

        return True

    def describe(self) -> str:
        return '\n'.join([
            "ZIP local header:",
            f"Signature: 0x{self.signature:08x}",
            f"Version: {self.version}",
            f"Flags: 0x{self.flags:04x}",
            f"Compression method: 0x{self.compression_method:04x}",
            f"CRC: 0x{self.crc:08x}",
            f"Compressed size: {self.compressed_size}",
            f"Uncompressed size: {self.uncompressed_size}",
            f"File name length: {self.name_length}",
            f"Extra field length: {self.extra_length}",
        ])
