from __future__ import annotations

from typing import Any, Iterable, Mapping

from ragclient.domain import ChartBucket

FALLBACK_LABEL = "Item"


def category_of(record: Mapping[str, Any]) -> str:
    """Return the chart category for a record.

    Prefers a ``Type``/``type`` column, then the first column, then ``Item``.
    """

    for key in ("Type", "type"):
        if key in record:
            return str(record[key])
    for value in record.values():
        return str(value)
    return FALLBACK_LABEL


def aggregate(dataset: Iterable[Mapping[str, Any]]) -> list[ChartBucket]:
    counts: dict[str, int] = {}
    for record in dataset:
        label = category_of(record)
        counts[label] = counts.get(label, 0) + 1
    return [ChartBucket(label=label, count=count) for label, count in counts.items()]
