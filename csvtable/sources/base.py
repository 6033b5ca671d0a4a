"""
Readable byte sources handed to CsvReader.

**Conceptual**: Acquisition is kept apart from parsing. A source only knows
how to open something (a local file, an HTTP response) and what encoding the
transport claimed, if any. Decoding and parsing stay in CsvReader.

Whoever opens a ByteSource closes it. ByteSource is a context manager for
exactly that purpose:

    >>> with open_path("data/prices.csv") as source:
    ...     table = reader.read(source.stream, encoding=source.encoding)
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from csvtable.data.errors import CsvIOError

logger = logging.getLogger(__name__)


@dataclass
class ByteSource:
    """
    An open binary stream plus what is known about its text encoding.

    Attributes:
        stream: Readable binary file-like object.
        encoding: Encoding reported by the transport (e.g. an HTTP charset),
                 or None if it reported nothing.
        origin: Path or URL the stream came from, used in error messages.
    """
    stream: BinaryIO
    encoding: Optional[str] = None
    origin: str = ""

    def close(self) -> None:
        self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def open_path(path: Path | str) -> ByteSource:
    """
    Open a local file for binary reading.

    Args:
        path: File path, string or pathlib.Path.

    Returns:
        ByteSource over the file; encoding is always None.

    Raises:
        CsvIOError: If the file does not exist or cannot be opened.
    """
    path = Path(path)
    try:
        stream = open(path, "rb")
    except OSError as e:
        raise CsvIOError(f"Failed to open CSV file {path}: {e}") from e
    logger.debug("Opened CSV file %s", path)
    return ByteSource(stream=stream, encoding=None, origin=str(path))
