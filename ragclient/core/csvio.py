from __future__ import annotations

from typing import Any, Mapping, Sequence

import pandas as pd


def encode_records_to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """Encode records as CSV text using the first record's keys as the header.

    Keys missing from later records become empty cells; extra keys are dropped.
    Returns an empty string for an empty dataset.
    """

    if not rows:
        return ""
    columns = list(rows[0].keys())
    df = pd.DataFrame([dict(row) for row in rows], columns=columns, dtype=object)
    return df.to_csv(index=False, lineterminator="\n", na_rep="")
