"""JSON-safe conversion of rows read from target databases."""

from typing import Any, Dict, List, Sequence

from fastapi.encoders import jsonable_encoder
from sqlalchemy.engine import Result


def unique_labels(labels: Sequence[str]) -> List[str]:
    """Suffix repeated column labels so no value is lost when rows become dicts.

    ``["name", "name", "id"]`` becomes ``["name", "name_1", "id"]``.
    """
    taken = set()
    unique = []
    for label in labels:
        candidate = label
        suffix = 0
        while candidate in taken:
            suffix += 1
            candidate = f"{label}_{suffix}"
        taken.add(candidate)
        unique.append(candidate)
    return unique


def jsonable_rows(result: Result) -> List[Dict[str, Any]]:
    """Fetch every row of ``result`` as a JSON-safe dict (binary columns as hex)."""
    labels = unique_labels([str(key) for key in result.keys()])
    return [
        jsonable_encoder(dict(zip(labels, tuple(row))), custom_encoder={bytes: lambda value: value.hex()})
        for row in result.fetchall()
    ]
