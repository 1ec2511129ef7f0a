"""
This package provides a forward-only reader for the local entries of ZIP archives.

Unlike the built-in `zipfile` module, which starts from the central directory at the end of the archive, this reader
walks the local entries from the start of the file, one after the other. For each entry, the caller can choose to
decompress the content right away, or skip it and retrieve it later by seeking directly to it.

The main class of interest is `ZipStreamReader`. To extract some entries as we go::

    with open_zip_stream('path/to/file.zip') as reader:
        extractor = InMemoryExtractor(wanted={'README.txt'})
        reader.process_entries(extractor)

    print(extractor.contents['README.txt'])

or, to list the entries first and read their content afterwards::

    with open_zip_stream('path/to/file.zip') as reader:
        collector = EntryListCollector()
        reader.collect_entries(collector)

        for entry in collector.entries:
            data = reader.seek_and_decompress(entry)

Only stored and deflated entries are supported, and CRCs are not verified. Anything unexpected in the archive causes
the traversal to fail with a `ZipStreamError`.
"""

from atmfjstc.lib.zip_stream.header import (
    ZipLocalHeader, ZipCompressionMethod, ZipEntryFlags, HEADER_SIZE, MAX_NAME_LENGTH, LOCAL_ENTRY_SIGNATURE,
    DIRECTORY_SIGNATURE,
)
from atmfjstc.lib.zip_stream.entry import ZipStreamEntry
from atmfjstc.lib.zip_stream.consumers import (
    ZipEntryProcessor, ZipEntryCollector, InMemoryExtractor, EntryListCollector,
)
from atmfjstc.lib.zip_stream.decoders import Decoder, DecoderMap, DEFAULT_DECODERS, inflate_raw
from atmfjstc.lib.zip_stream.reader import ZipStreamReader, open_zip_stream
from atmfjstc.lib.zip_stream.errors import (
    ZipStreamError, TruncatedZipStreamError, MalformedZipHeaderError, MalformedZipEntryNameError,
    ZipEntryDataCorruptError, ZipDecodeError,
)


__version__ = '1.0.0'
