import zlib

from io import BytesIO, RawIOBase
from typing import Optional

from atmfjstc.lib.zip_stream.header import (
    ZipLocalHeader, ZipCompressionMethod, LOCAL_ENTRY_SIGNATURE, DIRECTORY_SIGNATURE,
)


def deflate_raw(data: bytes) -> bytes:
    compressor = zlib.compressobj(9, zlib.DEFLATED, -zlib.MAX_WBITS)

    return compressor.compress(data) + compressor.flush()


def make_header(**kwargs) -> ZipLocalHeader:
    fields = dict(
        signature=LOCAL_ENTRY_SIGNATURE,
        version=20,
        flags=0,
        compression_method=ZipCompressionMethod.STORE,
        file_time=0,
        file_date=0,
        crc=0,
        compressed_size=0,
        uncompressed_size=0,
        name_length=0,
        extra_length=0,
    )
    fields.update(kwargs)

    return ZipLocalHeader(**fields)


def make_entry(
    name: str, content: bytes, method: int = ZipCompressionMethod.STORE, extra: bytes = b'',
    raw_name: Optional[bytes] = None,
) -> bytes:
    name_bytes = name.encode('utf-8') if raw_name is None else raw_name
    data = deflate_raw(content) if method == ZipCompressionMethod.DEFLATE else content

    header = make_header(
        compression_method=method,
        crc=zlib.crc32(content),
        compressed_size=len(data),
        uncompressed_size=len(content),
        name_length=len(name_bytes),
        extra_length=len(extra),
    )

    return header.to_bytes() + name_bytes + extra + data


def make_directory_marker() -> bytes:
    # Only the first 30 bytes of a central directory record are laid out like a local header
    return make_header(signature=DIRECTORY_SIGNATURE, version=0x031e).to_bytes() + b'\xaa' * 16


def make_two_entry_archive() -> bytes:
    return make_entry('a.txt', b'hi') + \
        make_entry('b.bin', b'world!', method=ZipCompressionMethod.DEFLATE) + \
        make_directory_marker()


class CountingBytesIO(BytesIO):
    read_calls: int = 0

    def read(self, size=-1):
        self.read_calls += 1

        return super().read(size)


class NonSeekableStream(RawIOBase):
    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False
