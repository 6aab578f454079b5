"""Delimited line tokenizing."""


def parse_delimited_line(line: str, delimiter: str = ",") -> list[str]:
    """Split one export line into fields.

    Delimiters inside a double-quoted span are kept as literal content. Quote
    characters only toggle the quoted state, so one layer of enclosing quotes
    is stripped from every field:

    - ``'"A, B",5,"C"'`` -> ``["A, B", "5", "C"]``
    - ``'a,,b'`` -> ``["a", "", "b"]``

    Malformed quoting never raises; an unterminated quote makes the rest of
    the line part of the current field.

    Args:
        line: Raw line without its trailing newline
        delimiter: Single-character field separator

    Returns:
        List of field strings
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    fields.append("".join(current))
    return fields
