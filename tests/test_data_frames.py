"""
Tests for pandas interop (csvtable/data/frames.py).
"""

import pandas as pd

from csvtable.data.frames import dataframe_to_table, table_to_dataframe
from csvtable.data.table import Table


def test_table_to_dataframe_titled():
    table = Table.from_rows(
        [["2013-04-15", "10.5"], ["2013-04-16", "11.0"]],
        titles=["Date", "Close"],
    )
    df = table_to_dataframe(table)
    assert list(df.columns) == ["Date", "Close"]
    assert df.shape == (2, 2)
    assert df.loc[1, "Close"] == "11.0"
    assert df["Close"].dtype == object


def test_table_to_dataframe_untitled_uses_positions():
    df = table_to_dataframe(Table.from_rows([["a", "b"]]))
    assert list(df.columns) == [0, 1]
    assert df.loc[0, 1] == "b"


def test_table_to_dataframe_empty():
    df = table_to_dataframe(Table(2, 0, titled=True))
    assert df.shape == (0, 2)


def test_dataframe_to_table_stringifies_and_blanks_missing():
    df = pd.DataFrame({
        "Date": ["2013-04-15", "2013-04-16"],
        "Close": [10.5, float("nan")],
        "Volume": [1200, None],
    })
    table = dataframe_to_table(df)
    assert table.get_titles() == ["Date", "Close", "Volume"]
    assert table.get_field(0, "Close") == "10.5"
    assert table.get_field(1, "Close") == ""
    assert table.get_field(1, "Volume") == ""


def test_dataframe_to_table_untitled():
    df = pd.DataFrame([["a", "b"], ["c", "d"]])
    table = dataframe_to_table(df, titled=False)
    assert not table.titled
    assert table.to_lists() == [["a", "b"], ["c", "d"]]


def test_dataframe_round_trip():
    table = Table.from_rows([["x", "1"], ["y", ""]], titles=["name", "value"])
    assert dataframe_to_table(table_to_dataframe(table)) == table


def test_dataframe_to_table_list_cells_are_stringified():
    df = pd.DataFrame({"a": [[1, 2], None]})
    table = dataframe_to_table(df)
    assert table.get_field(0, "a") == "[1, 2]"
    assert table.get_field(1, "a") == ""
