# File: beacon_ingest/scripts/read_table.py
from __future__ import annotations

import csv
import re
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import pandas as pd

from beacon_ingest.scripts.errors import IoError, ParseError

_PARSER_LINE_RE = re.compile(r"(?:line|row) (\d+)")


def _row_cells(values: Iterable[object], width: int | None = None) -> List[str]:
    """Cells of one line as strings, cut back to the number of fields the line supplied."""
    values = list(values)
    if width is not None:
        del values[width:]
    while values and pd.isna(values[-1]):
        values.pop()
    return ["" if pd.isna(v) else str(v) for v in values]


def _csv_widths(path: Path, has_header: bool) -> List[int]:
    # pandas pads short lines to the table width; csv keeps each record's own field count.
    with open(path, "r", encoding="utf-8", newline="") as f:
        widths = [len(record) for record in csv.reader(f) if record]
    return widths[1:] if has_header else widths


def _frame_rows(df: pd.DataFrame, widths: Sequence[int] | None = None) -> List[List[str]]:
    rows = list(df.itertuples(index=False, name=None))
    if widths is None:
        return [_row_cells(values) for values in rows]
    return [_row_cells(values, width) for values, width in zip(rows, widths)]



def _read_frame(path: Path, has_header: bool, sheet: str | None) -> pd.DataFrame:
    header = 0 if has_header else None
    # dtype=str with NA filtering off keeps every cell as the literal text (ZIP-style leading zeros, "NA").
    if path.suffix.lower() in (".xlsx", ".xlsm"):
        return pd.read_excel(
            path,
            sheet_name=sheet if sheet is not None else 0,
            header=header,
            dtype=str,
            engine="openpyxl",
            keep_default_na=False,
            na_filter=False,
        )
    return pd.read_csv(
        path,
        header=header,
        dtype=str,
        encoding="utf-8",
        index_col=False,
        keep_default_na=False,
        na_filter=False,
    )


def read_table(path: str | Path, has_header: bool, sheet: str | None = None) -> Tuple[List[str], List[List[str]]]:
    """Read a CSV or XLSX table into (header names, rows of string cells) in file order."""
    src = Path(path)
    if not src.exists():
        raise IoError(f"Table not found: {src}")

    try:
        df = _read_frame(src, has_header, sheet)
    except pd.errors.EmptyDataError:
        return [], []
    except pd.errors.ParserError as exc:
        match = _PARSER_LINE_RE.search(str(exc))
        raise ParseError(f"Malformed table: {exc}", path=str(src), row=int(match.group(1)) if match else None) from exc
    except UnicodeDecodeError as exc:
        raise ParseError(f"Table is not valid UTF-8: {exc}", path=str(src)) from exc
    except (ValueError, KeyError) as exc:
        # read_excel: unknown sheet or unreadable workbook
        raise ParseError(f"Unreadable workbook: {exc}", path=str(src)) from exc
    except OSError as exc:
        raise IoError(f"Cannot read {src}: {exc}") from exc

    widths = None
    if src.suffix.lower() not in (".xlsx", ".xlsm"):
        try:
            widths = _csv_widths(src, has_header)
        except csv.Error as exc:
            raise ParseError(f"Malformed table: {exc}", path=str(src)) from exc
        except OSError as exc:
            raise IoError(f"Cannot read {src}: {exc}") from exc
        if len(widths) != len(df):
            raise ParseError(f"Found {len(widths)} records but parsed {len(df)} rows", path=str(src))

    header_names = [str(c) for c in df.columns] if has_header else []
    return header_names, _frame_rows(df, widths)


def parse_table(path: str | Path, has_header: bool, sheet: str | None = None) -> List[List[str]]:
    _, rows = read_table(path, has_header, sheet)
    return rows


def parse_csv(path: str | Path, has_header: bool) -> List[List[str]]:
    """Rows of a UTF-8 CSV file; the header row, if any, is consumed and not returned."""
    _, rows = read_table(path, has_header)
    return rows
