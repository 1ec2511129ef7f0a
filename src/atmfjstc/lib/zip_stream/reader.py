import logging

from typing import AnyStr, BinaryIO, ContextManager, Iterator, Optional, Union
from os import PathLike, SEEK_SET
from io import IOBase

from atmfjstc.lib.binary_utils.BinaryReader import BinaryReader, BinaryReaderFormatError
from atmfjstc.lib.file_utils.fileobj import FileObjSliceReader, preserve_fileobj_pos

from atmfjstc.lib.zip_stream.header import ZipLocalHeader, ZipCompressionMethod, HEADER_SIZE
from atmfjstc.lib.zip_stream.entry import ZipStreamEntry
from atmfjstc.lib.zip_stream.consumers import ZipEntryProcessor, ZipEntryCollector
from atmfjstc.lib.zip_stream.decoders import DecoderMap, DEFAULT_DECODERS
from atmfjstc.lib.zip_stream.errors import (
    TruncatedZipStreamError, MalformedZipEntryNameError, ZipEntryDataCorruptError, ZipDecodeError,
)


_log = logging.getLogger(__name__)


class ZipStreamReader(ContextManager['ZipStreamReader']):
    """
    This class reads the local entries of a ZIP archive sequentially, from the start of the file to the central
    directory.

    Entries are obtained one at a time with `next_entry` (or `iter_entries`). After each entry, and before asking for
    the next one, its content must be either read with `decompress` or passed over with `skip_content`. Otherwise, the
    content would be parsed as the next header.

    Most callers will want one of the two higher-level traversals instead:

    - `process_entries`, which lets a `ZipEntryProcessor` choose which entries to decompress as they are found;
    - `collect_entries`, which skips all content and hands the entries to a `ZipEntryCollector`, so that the content
      can be read later and in any order with `seek_and_decompress`.

    A `ZipStreamReader` can be closed manually or used as a context manager::

        with ZipStreamReader("file.zip") as reader:
            extractor = InMemoryExtractor()
            reader.process_entries(extractor)

    Only stored and deflated entries are supported. The reader does not verify CRCs and does not look at the central
    directory. Any error aborts the traversal.
    """

    _fileobj: BinaryIO
    _fileobj_owned: bool = False

    _reader: BinaryReader
    _decoders: DecoderMap

    _current_offset: int = 0
    _finished: bool = False

    def __init__(self, path_or_fileobj: Union[PathLike, AnyStr, BinaryIO], decoders: Optional[DecoderMap] = None):
        """
        Opens a ZIP archive for reading.

        Args:
            path_or_fileobj: Either a filename, or an open, seekable binary file object containing the archive.
            decoders: A mapping from compression method to the `Decoder` used for entries compressed with it. Defaults
                to `DEFAULT_DECODERS`.

        If a file object is passed, the archive is read from its current position, and all offsets are absolute
        positions in that file object. It is not closed when the context ends, only when `close` is called.
        """

        if isinstance(path_or_fileobj, IOBase):
            if not path_or_fileobj.seekable():
                raise ValueError("File object must be seekable")

            self._fileobj = path_or_fileobj
        else:
            self._fileobj = open(path_or_fileobj, 'rb')
            self._fileobj_owned = True

        self._reader = BinaryReader(self._fileobj, big_endian=False)
        self._decoders = DEFAULT_DECODERS if decoders is None else decoders
        self._current_offset = self._reader.tell()

    @property
    def current_offset(self) -> int:
        """
        The position up to which the archive has been consumed by the sequential traversal.
        """
        return self._current_offset

    @property
    def finished(self) -> bool:
        """
        Whether the end of the local entries has been reached.
        """
        return self._finished

    def next_entry(self) -> Optional[ZipStreamEntry]:
        """
        Reads the header, name and extra field of the next entry.

        When this returns, the source is positioned at the start of the entry's content.

        Returns:
            The entry, or None if the start of the central directory has been reached. In the latter case the source is
            left positioned at the start of the central directory, and all further calls return None without reading.

        Raises:
            TruncatedZipStreamError: If the data ends before a complete header, name or extra field.
            MalformedZipHeaderError: If the header fails validation.
            MalformedZipEntryNameError: If the name is not valid UTF-8.
        """

        if self._finished:
            return None

        header_start = self._reader.tell()

        header = ZipLocalHeader.from_bytes(self._read_amount(HEADER_SIZE, 'ZIP local header'))

        if not header.validate():
            self._reader.seek(header_start, SEEK_SET)
            self._finished = True

            _log.debug("Reached ZIP central directory at offset %d", header_start)

            return None

        raw_name = self._read_amount(header.name_length, 'ZIP entry name')
        try:
            name = raw_name.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedZipEntryNameError(raw_name) from e

        self._skip_bytes(header.extra_length, 'ZIP extra field')

        self._current_offset += HEADER_SIZE + header.name_length + header.extra_length

        entry = ZipStreamEntry(header=header, name=name, data_offset=self._current_offset)

        _log.debug("Found %s", entry)

        return entry

    def iter_entries(self) -> Iterator[ZipStreamEntry]:
        """
        Yields the remaining entries, as per `next_entry`.

        The content of each entry must still be consumed or skipped before advancing the iterator.
        """
        while True:
            entry = self.next_entry()
            if entry is None:
                return

            yield entry

    def skip_content(self, entry: ZipStreamEntry):
        """
        Passes over the content of the current entry without reading it.
        """
        if entry.compressed_size > 0:
            self._skip_bytes(entry.compressed_size, f"content of ZIP entry '{entry.name}'")
            self._current_offset += entry.compressed_size

            _log.debug("Skipped %d bytes of content for '%s'", entry.compressed_size, entry.name)

    def decompress(self, entry: ZipStreamEntry) -> bytes:
        """
        Reads and decompresses the content of the current entry.

        This must be called instead of, not in addition to, `skip_content`. An entry with an uncompressed size of 0
        yields empty data and the source is not touched at all.

        Raises:
            TruncatedZipStreamError: If the data ends before the full content of the entry.
            ZipEntryDataCorruptError: If the content cannot be decoded.
        """

        if entry.size == 0:
            return b''

        raw_data = self._read_amount(entry.compressed_size, f"content of ZIP entry '{entry.name}'")
        self._current_offset += entry.compressed_size

        return self._decode(entry, raw_data)

    def seek_and_decompress(self, entry: ZipStreamEntry) -> bytes:
        """
        Reads and decompresses the content of any entry previously obtained from this reader, regardless of where the
        sequential traversal currently is.

        The content is read through a separate window over the source, and the position of the sequential traversal is
        restored afterwards, so `next_entry` etc. can be freely used after this.

        Raises:
            TruncatedZipStreamError: If the content of the entry extends past the end of the data.
            ZipEntryDataCorruptError: If the content cannot be decoded.
        """

        if self._fileobj.closed:
            raise ValueError("Cannot read entries because the underlying file object has been closed")

        if entry.size == 0:
            return b''

        _log.debug("Reading %d bytes of content for '%s' at offset %d", entry.compressed_size, entry.name,
                   entry.data_offset)

        with preserve_fileobj_pos(self._fileobj):
            try:
                window = FileObjSliceReader(self._fileobj, entry.data_offset, entry.compressed_size)
            except ValueError as e:
                raise TruncatedZipStreamError(self._reader.name()) from e

            raw_data = window.read()

        return self._decode(entry, raw_data)

    def process_entries(self, processor: ZipEntryProcessor):
        """
        Goes through all the remaining entries, decompressing those the processor accepts and skipping the rest.

        For each entry with a non-zero uncompressed size, the processor's `offer` method is called with the name and
        size. If it returns True, the content is decompressed and passed to `accept`. Empty entries are not offered.
        """
        for entry in self.iter_entries():
            if entry.size == 0:
                self.skip_content(entry)
                continue

            if processor.offer(entry.name, entry.size):
                processor.accept(self.decompress(entry))
            else:
                self.skip_content(entry)

    def collect_entries(self, collector: ZipEntryCollector):
        """
        Goes through all the remaining entries, skipping their content and passing each non-empty one to the
        collector's `defer` method.

        The content of the collected entries can be retrieved afterwards with `seek_and_decompress`.
        """
        for entry in self.iter_entries():
            self.skip_content(entry)

            if entry.size > 0:
                collector.defer(entry)

    def close(self):
        """
        Closes the underlying file object.

        Note that this method closes the file object regardless of whether it was opened by the reader or received
        from elsewhere!
        """

        if self._fileobj is not None:
            self._fileobj.close()

    def __enter__(self) -> 'ZipStreamReader':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if (not self._fileobj_owned) or (self._fileobj is None) or self._fileobj.closed:
            return

        self._fileobj.close()

    def _read_amount(self, n_bytes: int, meaning: str) -> bytes:
        try:
            return self._reader.read_amount(n_bytes, meaning)
        except BinaryReaderFormatError as e:
            raise TruncatedZipStreamError(self._reader.name()) from e

    def _skip_bytes(self, n_bytes: int, meaning: str):
        try:
            self._reader.skip_bytes(n_bytes, meaning)
        except BinaryReaderFormatError as e:
            raise TruncatedZipStreamError(self._reader.name()) from e

    def _decode(self, entry: ZipStreamEntry, raw_data: bytes) -> bytes:
        if entry.header.compression_method == ZipCompressionMethod.STORE:
            return raw_data

        decoder = self._decoders.get(entry.header.compression_method)
        if decoder is None:
            raise NotImplementedError(f"No decoder configured for compression method {entry.compression_method!r}")

        try:
            return decoder(raw_data)
        except ZipDecodeError as e:
            raise ZipEntryDataCorruptError(entry.name) from e


def open_zip_stream(
    path: Union[PathLike, AnyStr], size_hint: Optional[int] = None, decoders: Optional[DecoderMap] = None
) -> ZipStreamReader:
    """
    Opens the ZIP archive at the given path for sequential reading.

    Args:
        path: The path to the archive.
        size_hint: The size of the archive, if known to the caller. It is currently only informative.
        decoders: See `ZipStreamReader`.

    Returns:
        A `ZipStreamReader` positioned at the start of the file.
    """

    _log.debug("Opening ZIP archive %r (declared size: %s)", path, size_hint)

    return ZipStreamReader(path, decoders=decoders)
