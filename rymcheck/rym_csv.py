"""RateYourMusic CSV export -> AlbumRecord list.

Only the columns needed for matching are read:
  0: RYM album id
  1, 2: artist first / last name (joined into one contributor)
  5: title
  6: release year
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import List

from rymcheck.errors import InputFormatError
from rymcheck.types import AlbumRecord

HEADER_MIN_COLUMNS = 12
ROW_MIN_COLUMNS = 7
_BOM = b"\xef\xbb\xbf"


def _to_year(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def parse_rym_csv(data: bytes | str) -> List[AlbumRecord]:
    if isinstance(data, bytes):
        if data.startswith(_BOM):
            data = data[len(_BOM):]
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InputFormatError(f"CSV is not valid UTF-8: {e}") from e
    elif data.startswith("\ufeff"):
        data = data[1:]

    # Rows may have a variable number of fields
    try:
        rows = [[c.strip() for c in row] for row in csv.reader(io.StringIO(data))]
    except csv.Error as e:
        raise InputFormatError(f"malformed CSV: {e}") from e
    if not rows:
        raise InputFormatError("empty CSV")

    header = rows[0]
    if len(header) < HEADER_MIN_COLUMNS:
        raise InputFormatError(
            f"header has {len(header)} columns, expected at least {HEADER_MIN_COLUMNS}",
            row=0, expected=HEADER_MIN_COLUMNS, actual=len(header),
        )

    out: List[AlbumRecord] = []
    for i, cols in enumerate(rows[1:], start=1):
        if not any(cols):
            continue
        if len(cols) < ROW_MIN_COLUMNS:
            raise InputFormatError(
                f"row {i} has {len(cols)} columns, expected at least {ROW_MIN_COLUMNS}",
                row=i, expected=ROW_MIN_COLUMNS, actual=len(cols),
            )
        out.append(AlbumRecord(
            external_id=cols[0],
            artist=" ".join([cols[1], cols[2]]).strip(),
            title=cols[5],
            year=_to_year(cols[6]),
        ))
    return out


def read_rym_csv(path: str | Path) -> List[AlbumRecord]:
    p = Path(path).expanduser()
    with p.open("rb") as f:
        return parse_rym_csv(f.read())
