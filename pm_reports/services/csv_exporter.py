import enum
import io
import math
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


def export_csv(rows: Sequence[Dict[str, Any]]) -> Optional[str]:
    """
    Serialize homogeneous rows to CSV text.

    The header is the key set of the first row. Quoting is RFC 4180
    minimal quoting: fields with commas, quotes or newlines are quoted and
    embedded quotes are doubled. Returns None for an empty sequence
    (nothing to export).
    """
    if not rows:
        return None

    headers = list(rows[0].keys())
    df = pd.DataFrame(
        [{key: _plain(row.get(key)) for key in headers} for row in rows],
        columns=headers,
    )

    stream = io.StringIO()
    df.to_csv(stream, index=False, lineterminator="\n")
    return stream.getvalue()


def column_types(rows: Sequence[Dict[str, Any]]) -> Dict[str, type]:
    """Python type of every column, taken from the first row."""
    if not rows:
        return {}
    return {key: type(_plain(value)) for key, value in rows[0].items()}


def _infer(text: str) -> Any:
    # Only numbers that print back to the exact same text, so "007" stays a string
    for cast in (int, float):
        try:
            value = cast(text)
        except ValueError:
            continue
        if str(value) == text and (cast is int or math.isfinite(value)):
            return value
    return text


def _convert(text: str, dtype: Optional[type]) -> Any:
    if dtype is str:
        return text
    if text == "":
        return text
    if dtype is bool:
        return text == "True"
    if dtype in (int, float):
        return dtype(text)
    return _infer(text)


def parse_csv(text: str, dtypes: Optional[Dict[str, type]] = None) -> List[Dict[str, Any]]:
    """
    Read exported CSV text back into row dicts.

    Every cell is read as text first. Columns listed in `dtypes` (see
    `column_types`) are converted to that type; other columns become
    int/float only when the text is exactly how Python prints the number.
    Empty fields stay empty strings.
    """
    if not text or not text.strip():
        return []

    df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    dtypes = dtypes or {}
    return [
        {key: _convert(value, dtypes.get(key)) for key, value in record.items()}
        for record in df.to_dict(orient="records")
    ]


def report_filename(report_type, on: date) -> str:
    return f"{_plain(report_type)}_report_{on.isoformat()}.csv"
