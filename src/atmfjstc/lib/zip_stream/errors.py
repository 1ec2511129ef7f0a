from typing import Optional


class ZipStreamError(Exception):
    """
    Base class for all errors raised while reading a ZIP stream.
    """


class TruncatedZipStreamError(ZipStreamError):
    source_name: Optional[str]

    def __init__(self, source_name: Optional[str]):
        self.source_name = source_name

        quoted_name = f" '{source_name}'" if source_name is not None else ''
        super().__init__(f"ZIP archive{quoted_name} ends unexpectedly")


class MalformedZipHeaderError(ZipStreamError):
    reason: str

    def __init__(self, reason: str):
        self.reason = reason

        super().__init__(f"Malformed ZIP local header: {reason}")


class MalformedZipEntryNameError(ZipStreamError):
    raw_name: bytes

    def __init__(self, raw_name: bytes):
        self.raw_name = raw_name

        super().__init__(f"ZIP entry name is not valid UTF-8: {raw_name!r}")


class ZipEntryDataCorruptError(ZipStreamError):
    entry_name: str

    def __init__(self, entry_name: str):
        self.entry_name = entry_name

        super().__init__(f"Data for ZIP entry '{entry_name}' is corrupt")


class ZipDecodeError(Exception):
    """
    Raised by decoders to signal that the compressed data they were given cannot be decoded.
    """
