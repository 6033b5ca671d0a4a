"""
Exceptions raised by the CSV data model, reader and writer.

**Conceptual**: Every failure in this package derives from CsvError, so callers
can catch one base class. Each concrete error also subclasses the builtin
exception closest in meaning (IndexError, KeyError, ValueError, OSError), so
code written against plain Python conventions keeps working.

Contract violations (untitled access, wrong title count, out-of-range index,
unknown title) are raised at the point of violation and never recovered
internally. I/O failures propagate to whoever called read/write.
"""


class CsvError(Exception):
    """Base exception for all csvtable errors."""
    pass


class UntitledTableError(CsvError, RuntimeError):
    """
    Raised when a title operation is used on a table built without titles.

    **Recovery**: Construct the Table (or configure the CsvReader) with
    titled=True, or address columns by index instead.
    """
    pass


class TitleCountError(CsvError, ValueError):
    """Raised when a titles sequence does not match the table's column count."""
    pass


class FieldOutOfBoundsError(CsvError, IndexError):
    """
    Raised when a row or column index falls outside the table dimensions.

    Also surfaces while parsing when a line yields more fields than the first
    line of the text did.
    """
    pass


class TitleNotFoundError(CsvError, KeyError):
    """Raised when a field is addressed by a title the table does not carry."""

    def __str__(self):
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else ""


class CsvIOError(CsvError, OSError):
    """
    Raised when the underlying byte stream cannot be read, written, decoded
    or encoded.

    The original exception is always chained (raise ... from e).
    """
    pass
