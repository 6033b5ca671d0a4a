"""
The in-memory CSV data set.

**Conceptual**: A Table is a fixed-size matrix of text fields with an optional
row of column titles. Dimensions are decided at construction and never change;
titles and cell contents stay mutable. Every accessor is bounds-checked so a
malformed write fails loudly instead of silently growing a row.

**Invariants**:
  - Every row holds exactly column_count strings (never None).
  - A titled table holds exactly column_count titles, and its title index is
    rebuilt from them on every set_titles() call (last occurrence wins when a
    title repeats).
  - An untitled table rejects every title operation with UntitledTableError.

Tables are not thread-safe; callers sharing one across threads must lock.

Example:
    >>> table = Table(columns=2, rows=1, titled=True)
    >>> table.set_titles(["Date", "Close"])
    >>> table.set_field(0, "Close", "10.5")
    >>> table.get_field(0, 1)
    '10.5'
    >>> table.render()
    'Date,Close\\r\\n,10.5'
"""

from typing import Dict, Iterator, List, Optional, Sequence, Union

from csvtable.data.errors import (
    FieldOutOfBoundsError,
    TitleCountError,
    TitleNotFoundError,
    UntitledTableError,
)
from csvtable.data.quoting import join_line

DEFAULT_DELIMITER = "\r\n"

# Returned by index_of() for a title that is not present
NOT_FOUND = -1

Column = Union[int, str]


class Table:
    """
    Fixed-size matrix of CSV fields with optional column titles.

    Attributes:
        delimiter: Row delimiter used by render() when none is passed.
                  Defaults to CRLF.
    """

    def __init__(self, columns: int, rows: int, titled: bool = False):
        """
        Allocate an all-empty table.

        Args:
            columns: Number of columns (non-negative).
            rows: Number of data rows, excluding the title row (non-negative).
            titled: Whether the table carries a row of column titles.

        Raises:
            ValueError: If either dimension is negative.
        """
        if columns < 0 or rows < 0:
            raise ValueError(
                f"Table dimensions must be non-negative, got columns={columns}, rows={rows}"
            )
        self._columns = columns
        self._rows = rows
        self._titled = titled
        self._cells = [[""] * columns for _ in range(rows)]
        self._titles: Optional[List[str]] = [""] * columns if titled else None
        self._index: Dict[str, int] = {}
        self.delimiter = DEFAULT_DELIMITER

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[Optional[str]]],
        titles: Optional[Sequence[str]] = None,
    ) -> "Table":
        """
        Build a table from nested sequences.

        The column count is the length of titles when given, otherwise the
        width of the first row. Every row is written through set_field(), so a
        row wider than that raises FieldOutOfBoundsError.

        Example:
            >>> Table.from_rows([["a", "b"], ["c", "d"]]).to_lists()
            [['a', 'b'], ['c', 'd']]
        """
        if titles is not None:
            columns = len(titles)
        else:
            columns = len(rows[0]) if rows else 0
        table = cls(columns, len(rows), titled=titles is not None)
        if titles is not None:
            table.set_titles(titles)
        for r, values in enumerate(rows):
            for c, value in enumerate(values):
                table.set_field(r, c, value)
        return table

    @property
    def row_count(self) -> int:
        return self._rows

    @property
    def column_count(self) -> int:
        return self._columns

    @property
    def titled(self) -> bool:
        return self._titled

    # ------------------------------------------------------------------
    # Titles
    # ------------------------------------------------------------------

    def _require_titles(self) -> None:
        if not self._titled:
            raise UntitledTableError("The current CSV data contains no titles.")

    def get_titles(self) -> List[str]:
        """
        Return a copy of the column titles.

        Raises:
            UntitledTableError: If the table was built with titled=False.
        """
        self._require_titles()
        return list(self._titles)

    def set_titles(self, titles: Sequence[str]) -> None:
        """
        Replace the column titles and rebuild the title index.

        Duplicate titles are allowed; lookups resolve to the last column that
        carries the title.

        Raises:
            UntitledTableError: If the table was built with titled=False.
            TitleCountError: If len(titles) differs from column_count. The
                            current titles are left untouched.
        """
        self._require_titles()
        if len(titles) != self._columns:
            raise TitleCountError(
                f"The length of input title list ({len(titles)}) is not compatible "
                f"with the column count ({self._columns})."
            )
        new_titles = ["" if title is None else str(title) for title in titles]
        self._titles = new_titles
        self._index = {title: i for i, title in enumerate(new_titles)}

    def index_of(self, title: str) -> int:
        """
        Return the column index of a title, or -1 if it is not present.

        Raises:
            UntitledTableError: If the table was built with titled=False.
        """
        self._require_titles()
        return self._index.get(title, NOT_FOUND)

    # ------------------------------------------------------------------
    # Fields
    # ------------------------------------------------------------------

    def _resolve_column(self, column: Column) -> int:
        if isinstance(column, str):
            index = self.index_of(column)
            if index == NOT_FOUND:
                raise TitleNotFoundError(
                    f'There is no such title "{column}" in current CSV data.'
                )
            return index
        return column

    def _check_bounds(self, row: int, column: int) -> None:
        if row < 0 or row >= self._rows or column < 0 or column >= self._columns:
            raise FieldOutOfBoundsError(
                f"The requested field (row, column) = ({row}, {column}) is out of "
                f"the bounds of ({self._rows}, {self._columns})"
            )

    def get_field(self, row: int, column: Column) -> str:
        """
        Return one field, addressing the column by index or by title.

        Args:
            row: Data row index in [0, row_count).
            column: Column index in [0, column_count), or a column title.

        Raises:
            FieldOutOfBoundsError: If row or column index is out of range.
            TitleNotFoundError: If column is a title the table does not carry.
            UntitledTableError: If column is a title and the table is untitled.
        """
        index = self._resolve_column(column)
        self._check_bounds(row, index)
        return self._cells[row][index]

    def set_field(self, row: int, column: Column, value: Optional[str]) -> None:
        """
        Store one field, addressing the column by index or by title.

        None is stored as an empty string; other non-string values are stored
        as str(value). Raises the same errors as get_field().
        """
        index = self._resolve_column(column)
        self._check_bounds(row, index)
        self._cells[row][index] = "" if value is None else str(value)

    def row(self, index: int) -> List[str]:
        """Return a copy of one data row."""
        if index < 0 or index >= self._rows:
            raise FieldOutOfBoundsError(
                f"The requested row {index} is out of the bounds of {self._rows} rows"
            )
        return list(self._cells[index])

    def rows(self) -> Iterator[List[str]]:
        """Iterate over copies of the data rows, top to bottom."""
        for cells in self._cells:
            yield list(cells)

    def to_lists(self) -> List[List[str]]:
        """Return a deep copy of the cell matrix (titles excluded)."""
        return [list(cells) for cells in self._cells]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def get_delimiter(self) -> str:
        return self.delimiter

    def set_delimiter(self, delimiter: str) -> None:
        self.delimiter = delimiter

    def render(self, delimiter: Optional[str] = None) -> str:
        """
        Serialize the table to CSV text.

        The title row (if any) comes first, then every data row. Fields are
        quoted per quote_field(), lines are joined by the delimiter, and no
        delimiter follows the last line.

        Args:
            delimiter: Row delimiter to use. Defaults to self.delimiter.

        Returns:
            The complete CSV text.
        """
        if delimiter is None:
            delimiter = self.delimiter
        lines = []
        if self._titled:
            lines.append(join_line(self._titles))
        lines.extend(join_line(cells) for cells in self._cells)
        return delimiter.join(lines)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (
            f"Table(columns={self._columns}, rows={self._rows}, titled={self._titled})"
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return (
            self._columns == other._columns
            and self._rows == other._rows
            and self._titled == other._titled
            and self._titles == other._titles
            and self._cells == other._cells
        )

    __hash__ = None
