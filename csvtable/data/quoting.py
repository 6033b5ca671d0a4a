"""
Field quoting and line tokenization for the CSV text format.

**Format rules**:
  - Fields within a row are separated by a literal comma.
  - A literal double quote inside a field is written as two double quotes.
  - A field is wrapped in double quotes if and only if it contains a comma
    (after the quote doubling has been applied).

**Tokenizer behaviour**: split_line() reassembles at most one embedded comma
per quoted field. A quoted field holding several commas, or a quoted field
that is the last token of its line, comes back with its quoting partly intact.
Files written by this package that avoid those two shapes read back exactly.

Example:
    >>> quote_field('He said "hi", ok')
    '"He said ""hi"", ok"'
    >>> split_line('"He said ""hi"", ok",x')
    ['He said "hi", ok', 'x']
"""

from typing import Iterable, List, Optional

FIELD_SEPARATOR = ","
QUOTE = '"'
ESCAPED_QUOTE = QUOTE + QUOTE


def quote_field(value: Optional[str]) -> str:
    """
    Escape one field for output.

    Args:
        value: Field text. None is treated as an empty field.

    Returns:
        The field with every quote doubled, wrapped in quotes if it contains
        a comma.
    """
    if value is None:
        return ""
    text = value
    if QUOTE in text:
        text = text.replace(QUOTE, ESCAPED_QUOTE)
    if FIELD_SEPARATOR in text:
        text = f"{QUOTE}{text}{QUOTE}"
    return text


def unquote_field(text: str) -> str:
    """
    Reverse quote_field() for a single, already isolated field.

    A quoted field always contains a comma, so the surrounding quotes are only
    stripped when one is present. Doubled quotes collapse afterwards.
    """
    if (
        FIELD_SEPARATOR in text
        and len(text) >= 2
        and text.startswith(QUOTE)
        and text.endswith(QUOTE)
    ):
        text = text[1:-1]
    return text.replace(ESCAPED_QUOTE, QUOTE)


def split_line(line: str) -> List[str]:
    """
    Tokenize one line of CSV text into fields.

    **Functionally**:
      - Splits on every comma, keeping empty tokens.
      - A token starting with a quote that is not the last token is merged
        with the token after it: the leading quote of the first and the final
        character of the second are dropped and the comma is put back.
      - Doubled quotes in a merged field collapse to one.

    Args:
        line: One row of text, without its row delimiter.

    Returns:
        List of field strings (at least one; an empty line gives [""]).
    """
    tokens = line.split(FIELD_SEPARATOR)
    fields = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.startswith(QUOTE) and i + 1 < len(tokens):
            following = tokens[i + 1]
            token = token[1:] + FIELD_SEPARATOR + following[:-1]
            token = token.replace(ESCAPED_QUOTE, QUOTE)
            i += 1
        fields.append(token)
        i += 1
    return fields


def join_line(fields: Iterable[Optional[str]]) -> str:
    """Quote each field and join them into one line of text."""
    return FIELD_SEPARATOR.join(quote_field(field) for field in fields)
