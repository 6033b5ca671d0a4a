"""
Conversion between Table and pandas DataFrame.

**Conceptual**: Tables hold text only. These helpers move a table into pandas
for analysis and back again for writing, without any type coercion: every
DataFrame produced here has object dtype, and every value going into a Table
is stringified (missing values become empty strings).

Example:
    >>> table = CsvReader(titled=True).read_path("data/prices.csv")
    >>> df = table_to_dataframe(table)
    >>> df["Close"].astype(float).mean()
"""

import pandas as pd

from csvtable.data.table import Table


def table_to_dataframe(table: Table) -> pd.DataFrame:
    """
    Copy a table's cells into a DataFrame.

    Columns are the table's titles when titled (duplicates kept as-is),
    otherwise positional integers 0..column_count-1.
    """
    if table.titled:
        columns = table.get_titles()
    else:
        columns = list(range(table.column_count))
    return pd.DataFrame(table.to_lists(), columns=columns, dtype=object)


def dataframe_to_table(df: pd.DataFrame, titled: bool = True) -> Table:
    """
    Build a Table from a DataFrame.

    Args:
        df: Source frame. The index is ignored.
        titled: If True, the column labels become the table titles.

    Returns:
        A Table of df's shape with every value converted by str();
        NaN and None become "".
    """
    n_rows, n_columns = df.shape
    table = Table(n_columns, n_rows, titled=titled)
    if titled:
        table.set_titles([str(label) for label in df.columns])
    for r, values in enumerate(df.itertuples(index=False, name=None)):
        for c, value in enumerate(values):
            table.set_field(r, c, _field_text(value))
    return table


def _field_text(value) -> str:
    # pd.isna() is element-wise for list-like cells
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return ""
    return str(value)
