from dataclasses import dataclass
from typing import Union

from atmfjstc.lib.ez_repr import EZRepr

from atmfjstc.lib.zip_stream.header import ZipLocalHeader, ZipCompressionMethod, HEADER_SIZE


@dataclass(frozen=True, repr=False)
class ZipStreamEntry(EZRepr):
    """
    An entry found while reading a ZIP stream.

    Objects of this type are inert data containers and own none of the entry's content. The `data_offset` is only
    meaningful relative to the source of the `ZipStreamReader` that produced the entry, so the content can only be
    retrieved through that reader (see `ZipStreamReader.seek_and_decompress`).

    Attributes:
        header: The entry's local header, already validated.
        name: The entry name, decoded as UTF-8.
        data_offset: The absolute offset, in bytes, at which the entry's content starts in the source.
    """

    header: ZipLocalHeader
    name: str
    data_offset: int

    @property
    def size(self) -> int:
        return self.header.uncompressed_size

    @property
    def compressed_size(self) -> int:
        return self.header.compressed_size

    @property
    def compression_method(self) -> Union[ZipCompressionMethod, int]:
        return self.header.method

    @property
    def entry_size(self) -> int:
        """
        The combined size of the header, name and extra field, i.e. everything before the content.
        """
        return HEADER_SIZE + self.header.name_length + self.header.extra_length

    @property
    def is_directory(self) -> bool:
        return self.name.endswith('/')

    def __str__(self) -> str:
        return f"ZIP entry: name {self.name}, size: {self.size}, data offset: {self.data_offset}"
