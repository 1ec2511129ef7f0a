"""
Decoders turn the raw content of a compressed entry into the original data.

A decoder is any callable that takes the compressed bytes and returns the decompressed bytes. If the data cannot be
decoded, it must raise `ZipDecodeError`; the reader will report this as a `ZipEntryDataCorruptError` for the entry.
"""

import zlib

from typing import Callable, Mapping, Union

from atmfjstc.lib.zip_stream.errors import ZipDecodeError
from atmfjstc.lib.zip_stream.header import ZipCompressionMethod


Decoder = Callable[[bytes], bytes]
DecoderMap = Mapping[Union[ZipCompressionMethod, int], Decoder]


def inflate_raw(data: bytes) -> bytes:
    """
    Decompresses a raw DEFLATE stream, i.e. one with no zlib or gzip wrapper, as found in ZIP entries.

    Raises:
        ZipDecodeError: If the data is not a valid DEFLATE stream, or ends before the final block.
    """
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)

    try:
        result = decompressor.decompress(data)
        result += decompressor.flush()
    except zlib.error as e:
        raise ZipDecodeError(f"Invalid DEFLATE data: {e}") from e

    if not decompressor.eof:
        raise ZipDecodeError("DEFLATE stream ends in the middle of a compressed block")

    return result


DEFAULT_DECODERS: DecoderMap = {
    ZipCompressionMethod.DEFLATE: inflate_raw,
}
