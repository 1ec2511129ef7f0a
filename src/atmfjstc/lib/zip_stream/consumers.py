"""
The interfaces through which `ZipStreamReader` hands entries over to the caller.

There are two, one for each traversal mode:

- `ZipEntryProcessor`, used by `ZipStreamReader.process_entries`, decides for each entry whether its content should be
  decompressed right away, and receives that content.
- `ZipEntryCollector`, used by `ZipStreamReader.collect_entries`, just receives entry descriptors, so that their
  content can be retrieved later with `ZipStreamReader.seek_and_decompress`.
"""

from abc import ABCMeta, abstractmethod
from typing import Collection, Dict, List, Optional

from atmfjstc.lib.zip_stream.entry import ZipStreamEntry


class ZipEntryProcessor(metaclass=ABCMeta):
    @abstractmethod
    def offer(self, name: str, declared_size: int) -> bool:
        """
        Called for each non-empty entry, before its content is read.

        Args:
            name: The entry name.
            declared_size: The uncompressed size of the content, as declared in the entry header.

        Returns:
            True if the content should be decompressed and passed to `accept`, False if it should be skipped.
        """
        raise NotImplementedError

    @abstractmethod
    def accept(self, data: bytes):
        """
        Receives the decompressed content of the entry most recently offered and accepted.
        """
        raise NotImplementedError


class ZipEntryCollector(metaclass=ABCMeta):
    @abstractmethod
    def defer(self, entry: ZipStreamEntry):
        """
        Receives a non-empty entry whose content was skipped.
        """
        raise NotImplementedError


class InMemoryExtractor(ZipEntryProcessor):
    """
    Processor that keeps the content of the wanted entries in memory.

    After processing, `contents` maps entry names to their data, in the order the entries occur in the archive.
    """

    contents: Dict[str, bytes]

    _wanted: Optional[Collection[str]]
    _current_name: Optional[str] = None

    def __init__(self, wanted: Optional[Collection[str]] = None):
        """
        Constructor.

        Args:
            wanted: The names of the entries to extract. If None, all entries are extracted.
        """
        self.contents = dict()
        self._wanted = wanted

    def offer(self, name: str, declared_size: int) -> bool:
        if (self._wanted is not None) and (name not in self._wanted):
            return False

        self._current_name = name

        return True

    def accept(self, data: bytes):
        if self._current_name is None:
            raise RuntimeError("Received data without a preceding accepted offer")

        self.contents[self._current_name] = data
        self._current_name = None


class EntryListCollector(ZipEntryCollector):
    entries: List[ZipStreamEntry]

    def __init__(self):
        self.entries = []

    def defer(self, entry: ZipStreamEntry):
        self.entries.append(entry)
