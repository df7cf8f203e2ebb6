from __future__ import annotations

import sqlite3

import pandas as pd

PERCENTILE_FUNCTION = "fb_percentile_cont"


class PercentileCont:
    """
    Continuous percentile aggregate: ``fb_percentile_cont(value, fraction)``.

    Interpolates linearly between the closest ranks, the same way
    PostgreSQL's ``percentile_cont`` does. NULL values are ignored and an
    empty group yields NULL.
    """

    def __init__(self) -> None:
        self._values: list[float] = []
        self._fraction: float | None = None

    def step(self, value: float | None, fraction: float) -> None:
        if value is None:
            return
        self._values.append(float(value))
        self._fraction = float(fraction)

    def finalize(self) -> float | None:
        if not self._values or self._fraction is None:
            return None
        return float(pd.Series(self._values, dtype="float64").quantile(self._fraction))


def register_sqlite_functions(dbapi_connection: sqlite3.Connection) -> None:
    dbapi_connection.create_aggregate(PERCENTILE_FUNCTION, 2, PercentileCont)
