"""
Tests for CsvReader (csvtable/data/reader.py).

This module tests:
  - Line splitting and parsing (titled and untitled).
  - Empty input producing no table.
  - Row length mismatches (short rows padded, long rows rejected).
  - Decoding byte streams in chunks, including split multi-byte characters.
  - Reading from paths and URLs (HTTP mocked).
  - Round-trip of plain untitled tables through render/parse.

All file tests use the tmp_path fixture.
"""

import io
from unittest.mock import Mock, patch

import pytest

from csvtable.config.settings import CsvSettings, HttpSettings, Settings
from csvtable.data.errors import CsvIOError, FieldOutOfBoundsError
from csvtable.data.reader import CsvReader
from csvtable.data.table import Table
from csvtable.sources.http_source import HttpSource, HttpSourceError


class ClosingTracker(io.BytesIO):
    """BytesIO that records whether close() was called."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.was_closed = False

    def close(self):
        self.was_closed = True
        super().close()


# ============================================================================
# parse
# ============================================================================

def test_parse_untitled():
    table = CsvReader().parse("a,b\r\nc,d\r\n")
    assert table.row_count == 2
    assert table.column_count == 2
    assert table.titled is False
    assert table.to_lists() == [["a", "b"], ["c", "d"]]


def test_parse_titled():
    table = CsvReader(titled=True).parse(
        "Date,Close\r\n2013-04-15,10.5\r\n2013-04-16,11.0"
    )
    assert table.get_titles() == ["Date", "Close"]
    assert table.row_count == 2
    assert table.get_field(1, "Close") == "11.0"


def test_parse_titled_override_per_call():
    reader = CsvReader(titled=False)
    table = reader.parse("x,y\r\n1,2", titled=True)
    assert table.titled
    assert table.row_count == 1


def test_parse_titles_only():
    table = CsvReader(titled=True).parse("x,y\r\n")
    assert table.get_titles() == ["x", "y"]
    assert table.row_count == 0


@pytest.mark.parametrize("text", ["", "\r\n", "\r\n\r\n"])
def test_parse_empty_text_returns_none(text):
    assert CsvReader().parse(text) is None
    assert CsvReader(titled=True).parse(text) is None


def test_parse_uses_configured_delimiter():
    reader = CsvReader(delimiter="\n")
    table = reader.parse("a,b\nc,d\n")
    assert table.to_lists() == [["a", "b"], ["c", "d"]]
    assert table.delimiter == "\n"


def test_parse_crlf_text_with_lf_reader_keeps_carriage_returns():
    table = CsvReader(delimiter="\n").parse("a,b\r\nc,d")
    assert table.get_field(0, 1) == "b\r"


def test_parse_short_row_leaves_empty_fields():
    table = CsvReader().parse("a,b,c\r\nd")
    assert table.to_lists() == [["a", "b", "c"], ["d", "", ""]]


def test_parse_long_row_fails_bounds_check():
    with pytest.raises(FieldOutOfBoundsError):
        CsvReader().parse("a,b\r\nc,d,e")


def test_parse_blank_middle_line_is_a_row():
    table = CsvReader().parse("a\r\n\r\nb")
    assert table.to_lists() == [["a"], [""], ["b"]]


def test_parse_quoted_fields():
    table = CsvReader().parse('"He said ""hi"", ok",x\r\n"a,b",y')
    assert table.to_lists() == [['He said "hi", ok', "x"], ["a,b", "y"]]


def test_parse_quoted_titles():
    table = CsvReader(titled=True).parse('"Close, adj",Date\r\n1,2')
    assert table.index_of("Close, adj") == 0


@pytest.mark.parametrize(
    "rows",
    [
        [["a", "b"], ["c", "d"]],
        [["2013-04-15", "10.5", "1200"], ["2013-04-16", "", "900"]],
        [["only"]],
    ],
)
def test_plain_untitled_tables_round_trip(rows):
    original = Table.from_rows(rows)
    assert CsvReader().parse(original.render()) == original


def test_plain_titled_table_round_trips():
    original = Table.from_rows([["1", "2"]], titles=["x", "y"])
    assert CsvReader(titled=True).parse(original.render()) == original


def test_single_column_table_with_empty_last_row_loses_that_row():
    # Trailing empty lines are dropped, so an empty final field in a
    # one-column table cannot be told apart from a trailing delimiter
    original = Table.from_rows([["a"], [""]])
    assert original.render() == "a\r\n"
    parsed = CsvReader().parse(original.render())
    assert parsed.row_count == 1
    assert parsed.to_lists() == [["a"]]
    assert parsed != original


# ============================================================================
# Construction and settings
# ============================================================================

def test_reader_rejects_bad_configuration():
    with pytest.raises(LookupError):
        CsvReader(encoding="no-such-codec")
    with pytest.raises(ValueError):
        CsvReader(delimiter="")
    with pytest.raises(ValueError):
        CsvReader(buffer_size=0)


def test_reader_from_settings():
    settings = Settings(
        csv=CsvSettings(encoding="latin-1", delimiter="\n", titled=True, buffer_size=3),
        http=HttpSettings(timeout_seconds=2),
    )
    reader = CsvReader.from_settings(settings)
    assert reader.encoding == "latin-1"
    assert reader.delimiter == "\n"
    assert reader.titled is True
    assert reader.buffer_size == 3
    assert reader.http_settings.timeout_seconds == 2


def test_set_delimiter_rejects_empty():
    reader = CsvReader()
    reader.set_delimiter("\n")
    assert reader.get_delimiter() == "\n"
    with pytest.raises(ValueError):
        reader.set_delimiter("")


# ============================================================================
# Byte streams
# ============================================================================

def test_read_stream_small_buffer_with_multibyte_characters():
    text = "名前,値\r\n東京,1"
    reader = CsvReader(titled=True, buffer_size=1)
    table = reader.read(io.BytesIO(text.encode("utf-8")))
    assert table.get_titles() == ["名前", "値"]
    assert table.get_field(0, "名前") == "東京"


def test_read_stream_with_encoding_override():
    data = "Städte,x\r\nKöln,1".encode("latin-1")
    table = CsvReader(titled=True).read(io.BytesIO(data), encoding="latin-1")
    assert table.get_titles() == ["Städte", "x"]


def test_read_does_not_close_caller_stream():
    stream = ClosingTracker(b"a,b")
    CsvReader().read(stream)
    assert stream.was_closed is False


def test_read_invalid_bytes_raises_csv_io_error():
    with pytest.raises(CsvIOError):
        CsvReader(encoding="utf-8").read(io.BytesIO(b"\xff\xfe,\xfa"))


def test_read_stream_failure_raises_csv_io_error():
    stream = Mock()
    stream.read.side_effect = OSError("disk gone")
    with pytest.raises(CsvIOError) as exc_info:
        CsvReader().read(stream)
    assert "disk gone" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, OSError)


def test_read_path(tmp_path):
    path = tmp_path / "prices.csv"
    path.write_bytes(b"Date,Close\r\n2013-04-15,10.5\r\n")
    table = CsvReader(titled=True).read_path(path)
    assert table.get_field(0, "Date") == "2013-04-15"


def test_read_path_missing_file(tmp_path):
    with pytest.raises(CsvIOError):
        CsvReader().read_path(tmp_path / "missing.csv")


def test_read_path_empty_file(tmp_path):
    path = tmp_path / "empty.csv"
    path.write_bytes(b"")
    assert CsvReader().read_path(path) is None


# ============================================================================
# URLs
# ============================================================================

def make_response(body: bytes, content_type: str = "text/csv", status_code: int = 200):
    response = Mock()
    response.status_code = status_code
    response.headers = {"Content-Type": content_type}
    response.content = body
    return response


@patch("csvtable.sources.http_source.requests.Session.get")
def test_read_url_uses_response_charset(mock_get):
    mock_get.return_value = make_response(
        "名称,收盘\r\n上证,10.5".encode("gb2312"),
        content_type="text/csv; charset=gb2312",
    )
    reader = CsvReader(encoding="utf-8", titled=True)
    table = reader.read_url("http://example.com/table.csv")
    assert table.get_titles() == ["名称", "收盘"]
    assert table.get_field(0, "收盘") == "10.5"


@patch("csvtable.sources.http_source.requests.Session.get")
def test_read_url_falls_back_to_reader_encoding(mock_get):
    mock_get.return_value = make_response("Köln,1".encode("latin-1"))
    table = CsvReader(encoding="latin-1").read_url("http://example.com/t.csv")
    assert table.get_field(0, 0) == "Köln"


@patch("csvtable.sources.http_source.requests.Session.get")
def test_read_url_passes_proxy_and_timeout(mock_get):
    mock_get.return_value = make_response(b"a,b")
    CsvReader().read_url(
        "http://example.com/t.csv", proxy="http://10.3.135.203:808", timeout=5
    )
    kwargs = mock_get.call_args.kwargs
    assert kwargs["timeout"] == 5
    assert kwargs["proxies"] == {
        "http": "http://10.3.135.203:808",
        "https": "http://10.3.135.203:808",
    }


@patch("csvtable.sources.http_source.requests.Session.get")
def test_read_url_uses_reader_http_settings(mock_get):
    mock_get.return_value = make_response(b"a,b", content_type="text/plain")
    reader = CsvReader(http_settings=HttpSettings(timeout_seconds=3, expected_content_type=None))
    table = reader.read_url("http://example.com/t.csv")
    assert table.to_lists() == [["a", "b"]]
    assert mock_get.call_args.kwargs["timeout"] == 3


def test_read_url_with_injected_source():
    source = HttpSource(HttpSettings())
    with patch.object(source.session, "get", return_value=make_response(b"x,y")):
        table = CsvReader().read_url("http://example.com/t.csv", source=source)
    assert table.to_lists() == [["x", "y"]]


@patch("csvtable.sources.http_source.requests.Session.get")
def test_read_url_http_error_is_csv_io_error(mock_get):
    mock_get.return_value = make_response(b"", status_code=500)
    with pytest.raises(CsvIOError):
        CsvReader().read_url("http://example.com/t.csv")
    with pytest.raises(HttpSourceError):
        CsvReader().read_url("http://example.com/t.csv")
