"""
CSV serializer: Table into encoded bytes.

**Conceptual**: CsvWriter renders a Table with its own row delimiter and
encoding, then writes the bytes to a binary stream. The table's delimiter is
swapped only for the duration of the render and is restored on every exit
path, including failures. The output stream is always closed after a write
attempt, whether or not it succeeded.

Example:
    >>> writer = CsvWriter(encoding="utf-8", delimiter="\\n")
    >>> writer.write_path(table, "out/prices.csv")
"""

import codecs
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from csvtable.config.settings import Settings
from csvtable.data.errors import CsvIOError
from csvtable.data.table import DEFAULT_DELIMITER, Table

logger = logging.getLogger(__name__)


@contextmanager
def substituted_delimiter(table: Table, delimiter: str) -> Iterator[Table]:
    """
    Temporarily set table.delimiter, restoring the original on exit.

    Example:
        >>> with substituted_delimiter(table, "\\n"):
        ...     text = table.render()
        >>> table.delimiter
        '\\r\\n'
    """
    original = table.delimiter
    if original == delimiter:
        yield table
        return
    table.delimiter = delimiter
    try:
        yield table
    finally:
        table.delimiter = original


class CsvWriter:
    """
    Writes Table objects to binary streams.

    Attributes:
        encoding: Codec used to encode the rendered text.
        delimiter: Row delimiter written between rows.
    """

    def __init__(self, encoding: str = "utf-8", delimiter: str = DEFAULT_DELIMITER):
        """
        Raises:
            LookupError: If encoding is not a known codec.
            ValueError: If delimiter is empty.
        """
        codecs.lookup(encoding)
        if not delimiter:
            raise ValueError("Row delimiter must be a non-empty string")
        self.encoding = encoding
        self.delimiter = delimiter

    @classmethod
    def from_settings(cls, settings: Settings) -> "CsvWriter":
        return cls(encoding=settings.csv.encoding, delimiter=settings.csv.delimiter)

    def get_delimiter(self) -> str:
        return self.delimiter

    def set_delimiter(self, delimiter: str) -> None:
        if not delimiter:
            raise ValueError("Row delimiter must be a non-empty string")
        self.delimiter = delimiter

    def to_bytes(self, table: Table) -> bytes:
        """
        Render a table with this writer's delimiter and encode it.

        Raises:
            CsvIOError: If a field cannot be represented in the encoding.
        """
        with substituted_delimiter(table, self.delimiter):
            text = table.render()
        try:
            return text.encode(self.encoding)
        except UnicodeEncodeError as e:
            raise CsvIOError(
                f"Failed to encode CSV data as {self.encoding}: {e}"
            ) from e

    def write(self, table: Table, stream: BinaryIO) -> None:
        """
        Write a table to a binary stream and close the stream.

        Args:
            table: Table to serialize. Its delimiter is unchanged afterwards.
            stream: Writable binary stream. Closed on return, even on failure.

        Raises:
            CsvIOError: If encoding or writing fails. The stream may have
                       been partially written.
        """
        try:
            data = self.to_bytes(table)
            try:
                stream.write(data)
                stream.flush()
            except (OSError, ValueError) as e:
                # ValueError: the stream was already closed
                raise CsvIOError(f"Failed to write CSV data: {e}") from e
        except BaseException:
            # A close failure here must not replace the original error
            try:
                stream.close()
            except (OSError, ValueError):
                logger.warning(
                    "Failed to close CSV output stream after a write error",
                    exc_info=True,
                )
            raise

        try:
            stream.close()
        except (OSError, ValueError) as e:
            raise CsvIOError(f"Failed to close CSV output stream: {e}") from e
        logger.debug(
            "Wrote %d bytes (%d rows x %d columns) as %s",
            len(data),
            table.row_count,
            table.column_count,
            self.encoding,
        )

    def write_path(self, table: Table, path: Path | str) -> None:
        """
        Write a table to a file, creating parent directories as needed.

        Raises:
            CsvIOError: If the file cannot be created or written.
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            stream = open(path, "wb")
        except OSError as e:
            raise CsvIOError(f"Failed to open {path} for writing: {e}") from e
        self.write(table, stream)
