"""
CSV parser: byte streams and text into Table.

**Conceptual**: CsvReader decodes a whole byte stream into text, splits it
into lines on the configured row delimiter, and tokenizes each line with
split_line(). The first line fixes the column count. When the reader is
titled the first line becomes the titles, otherwise it is data row 0.

**Row length**: Lines shorter than the first leave their trailing fields
empty. Lines longer than the first fail with FieldOutOfBoundsError, raised by
Table's bounds check; no separate validation pass runs beforehand.

**Empty input**: Text with no lines (empty, or only row delimiters) parses to
None rather than raising.

Example:
    >>> reader = CsvReader(titled=True)
    >>> table = reader.parse("Date,Close\\r\\n2013-04-15,10.5")
    >>> table.get_field(0, "Close")
    '10.5'
"""

import codecs
import logging
from pathlib import Path
from typing import BinaryIO, List, Optional

from csvtable.config.settings import CsvSettings, HttpSettings, Settings
from csvtable.data.errors import CsvIOError
from csvtable.data.quoting import split_line
from csvtable.data.table import DEFAULT_DELIMITER, Table
from csvtable.sources.base import open_path
from csvtable.sources.http_source import HttpSource

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 10000


class CsvReader:
    """
    Reads CSV text into Table objects.

    Attributes:
        encoding: Codec used to decode byte input.
        delimiter: Row delimiter separating lines.
        titled: Whether the first line holds column titles.
        buffer_size: Bytes requested per read call.
        http_settings: Defaults for read_url() (timeout, proxy, content type).
    """

    def __init__(
        self,
        encoding: str = "utf-8",
        titled: bool = False,
        delimiter: str = DEFAULT_DELIMITER,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        http_settings: Optional[HttpSettings] = None,
    ):
        """
        Raises:
            LookupError: If encoding is not a known codec.
            ValueError: If delimiter is empty or buffer_size is not positive.
        """
        codecs.lookup(encoding)
        if not delimiter:
            raise ValueError("Row delimiter must be a non-empty string")
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got: {buffer_size}")
        self.encoding = encoding
        self.titled = titled
        self.delimiter = delimiter
        self.buffer_size = buffer_size
        self.http_settings = http_settings

    @classmethod
    def from_settings(cls, settings: Settings) -> "CsvReader":
        """Build a reader from loaded Settings (see csvtable.config.settings)."""
        csv_settings: CsvSettings = settings.csv
        return cls(
            encoding=csv_settings.encoding,
            titled=csv_settings.titled,
            delimiter=csv_settings.delimiter,
            buffer_size=csv_settings.buffer_size,
            http_settings=settings.http,
        )

    def get_delimiter(self) -> str:
        return self.delimiter

    def set_delimiter(self, delimiter: str) -> None:
        if not delimiter:
            raise ValueError("Row delimiter must be a non-empty string")
        self.delimiter = delimiter

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def split_lines(self, text: str) -> List[str]:
        """
        Split text into lines on the row delimiter, dropping trailing empty
        lines.

        Example:
            >>> CsvReader().split_lines("a,b\\r\\nc,d\\r\\n")
            ['a,b', 'c,d']
        """
        lines = text.split(self.delimiter)
        while lines and lines[-1] == "":
            lines.pop()
        return lines

    def parse(self, text: str, titled: Optional[bool] = None) -> Optional[Table]:
        """
        Parse a complete CSV text into a Table.

        Args:
            text: Whole CSV content.
            titled: Overrides the reader's titled flag for this call.

        Returns:
            The parsed Table, or None if the text holds no lines.

        Raises:
            FieldOutOfBoundsError: If a line has more fields than the first.
        """
        if titled is None:
            titled = self.titled

        lines = self.split_lines(text)
        if not lines:
            logger.debug("No CSV lines found in %d characters of text", len(text))
            return None

        first = split_line(lines[0])
        data_rows = len(lines) - 1 if titled else len(lines)
        table = Table(len(first), data_rows, titled=titled)
        table.delimiter = self.delimiter

        if titled:
            table.set_titles(first)
            row = 0
        else:
            for column, value in enumerate(first):
                table.set_field(0, column, value)
            row = 1

        for line in lines[1:]:
            for column, value in enumerate(split_line(line)):
                table.set_field(row, column, value)
            row += 1

        logger.debug(
            "Parsed CSV table: %d rows x %d columns (titled=%s)",
            table.row_count,
            table.column_count,
            titled,
        )
        return table

    # ------------------------------------------------------------------
    # Byte streams
    # ------------------------------------------------------------------

    def decode(self, stream: BinaryIO, encoding: Optional[str] = None) -> str:
        """
        Read a binary stream to its end and decode it.

        The stream is read in buffer_size chunks through an incremental
        decoder, so multi-byte characters split across chunks decode
        correctly. The stream is not closed.

        Raises:
            CsvIOError: If reading fails or the bytes are not valid in the
                       chosen encoding.
        """
        encoding = encoding or self.encoding
        decoder = codecs.getincrementaldecoder(encoding)()
        parts = []
        try:
            while True:
                chunk = stream.read(self.buffer_size)
                if not chunk:
                    break
                parts.append(decoder.decode(chunk))
            parts.append(decoder.decode(b"", final=True))
        except UnicodeDecodeError as e:
            raise CsvIOError(f"Failed to decode CSV data as {encoding}: {e}") from e
        except OSError as e:
            raise CsvIOError(f"Failed to read CSV data: {e}") from e
        return "".join(parts)

    def read(
        self,
        stream: BinaryIO,
        encoding: Optional[str] = None,
        titled: Optional[bool] = None,
    ) -> Optional[Table]:
        """
        Read a binary stream and parse it.

        Args:
            stream: Readable binary stream. The caller keeps ownership.
            encoding: Overrides the reader's encoding for this call.
            titled: Overrides the reader's titled flag for this call.

        Returns:
            The parsed Table, or None for empty input.

        Raises:
            CsvIOError: If the stream cannot be read or decoded.
        """
        return self.parse(self.decode(stream, encoding), titled)

    def read_path(
        self,
        path: Path | str,
        encoding: Optional[str] = None,
        titled: Optional[bool] = None,
    ) -> Optional[Table]:
        """
        Read and parse a local CSV file.

        Raises:
            CsvIOError: If the file cannot be opened, read or decoded.
        """
        with open_path(path) as source:
            return self.read(source.stream, encoding, titled)

    def read_url(
        self,
        url: str,
        proxy: Optional[str] = None,
        timeout: Optional[float] = None,
        source: Optional[HttpSource] = None,
    ) -> Optional[Table]:
        """
        Fetch a CSV resource over HTTP and parse it.

        The charset declared by the response, when present, takes precedence
        over the reader's encoding.

        Args:
            url: http(s) URL of the CSV resource.
            proxy: Proxy URL (see csvtable.sources.http_source.proxy_url).
            timeout: Timeout in seconds.
            source: HttpSource to fetch with. When omitted, a temporary one is
                   built from http_settings and closed afterwards.

        Raises:
            HttpSourceError: If the request fails.
            UnexpectedContentTypeError: If the response is not the expected type.
            CsvIOError: If the body cannot be decoded.
        """
        if source is not None:
            return self._read_from(source, url, proxy, timeout)
        with HttpSource(self.http_settings) as http:
            return self._read_from(http, url, proxy, timeout)

    def _read_from(
        self,
        http: HttpSource,
        url: str,
        proxy: Optional[str],
        timeout: Optional[float],
    ) -> Optional[Table]:
        with http.open(url, proxy=proxy, timeout=timeout) as byte_source:
            return self.read(byte_source.stream, encoding=byte_source.encoding)
