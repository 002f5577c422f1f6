"""Generic tab-separated table parser for the game TXT files.

The parser only tokenizes: the first non-blank line is the header, every
following non-blank line becomes a row dict keyed by header column. Rows that
are shorter than the header are padded with empty strings (the source files
routinely drop trailing empty columns). No type coercion happens here; domain
parsers use ``parse_number`` / ``parse_boolean`` which default instead of
raising.
"""

from __future__ import annotations

import re
from typing import Dict, Iterator, List, Mapping, Tuple

from .errors import HeaderMissingError

Row = Dict[str, str]

_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")


class TsvTable:
    """Parsed table; iterating always restarts from the first row."""

    __slots__ = ("headers", "_lines")

    def __init__(self, headers: Tuple[str, ...], lines: List[List[str]]):
        self.headers = headers
        self._lines = lines

    def __iter__(self) -> Iterator[Row]:
        width = len(self.headers)
        for fields in self._lines:
            if len(fields) < width:
                fields = fields + [""] * (width - len(fields))
            yield {h: fields[i].strip() for i, h in enumerate(self.headers)}

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"TsvTable(columns={len(self.headers)}, rows={len(self._lines)})"


def _split_lines(text: str) -> List[str]:
    # newline only; other characters str.splitlines breaks on may sit inside a field
    return [line[:-1] if line.endswith("\r") else line for line in text.lstrip("\ufeff").split("\n")]


def parse_tsv(text: str) -> TsvTable:
    lines = [line for line in _split_lines(text) if line.strip()]
    if not lines:
        return TsvTable((), [])
    headers = tuple(h.strip() for h in lines[0].split("\t"))
    return TsvTable(headers, [line.split("\t") for line in lines[1:]])


def get_tsv_headers(text: str) -> Tuple[str, ...]:
    for line in _split_lines(text):
        if line.strip():
            return tuple(h.strip() for h in line.split("\t"))
    return ()


def require_headers(table: TsvTable, *names: str, source: str) -> None:
    """Raise ``HeaderMissingError`` if the table lacks a header or any named column."""
    if not table.headers:
        raise HeaderMissingError(f"{source}: no header line", context={"source": source})
    missing = [n for n in names if n not in table.headers]
    if missing:
        raise HeaderMissingError(
            f"{source}: missing columns {', '.join(missing)}",
            context={"source": source, "missing": missing},
        )


def parse_number(value: str | None) -> int:
    if not value:
        return 0
    m = _INT_PREFIX_RE.match(value)
    return int(m.group(1)) if m else 0


def parse_boolean(value: str | None) -> bool:
    if not value:
        return False
    return value == "1" or value.lower() == "true"


def collect_column_values(row: Mapping[str, str], prefix: str, count: int) -> Tuple[str, ...]:
    values = []
    for i in range(1, count + 1):
        value = (row.get(f"{prefix}{i}") or "").strip()
        if value:
            values.append(value)
    return tuple(values)


__all__ = [
    "Row",
    "TsvTable",
    "parse_tsv",
    "get_tsv_headers",
    "require_headers",
    "parse_number",
    "parse_boolean",
    "collect_column_values",
]
