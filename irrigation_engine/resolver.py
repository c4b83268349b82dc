"""Select between remotely published and locally estimated ET₀."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from .errors import InvalidInput
from .et_model import calculate_et0, calculate_et0_frame
from .results import ET0Result, RemoteET0
from .weather import WeatherReading

__all__ = ["resolve_et0", "resolve_et0_frame", "REMOTE_FORMULA"]

_LOGGER = logging.getLogger(__name__)

STAGE = "resolver"
REMOTE_FORMULA = "ET0 published by remote meteorological service"


def resolve_et0(reading: WeatherReading) -> ET0Result:
    """Return ET₀ for ``reading`` tagged with the source that produced it.

    A finite ``remote_et0_mm_day`` is returned unchanged as
    :class:`~irrigation_engine.results.RemoteET0`. Otherwise the value is
    estimated with :func:`~irrigation_engine.et_model.calculate_et0`.
    """

    if reading.has_remote_et0:
        value = float(reading.remote_et0_mm_day)
        if value < 0:
            raise InvalidInput(
                f"remote ET0 must be non-negative, got {value}",
                stage=STAGE,
                field="remote_et0_mm_day",
            )
        _LOGGER.debug("Using remote ET0 %.3f mm/day", value)
        return RemoteET0(
            stage="et0",
            value=value,
            unit="mm/day",
            formula=REMOTE_FORMULA,
            inputs={"remote_et0_mm_day": value},
        )

    if reading.remote_et0_mm_day is not None:
        _LOGGER.debug(
            "Remote ET0 %r is not usable; estimating locally", reading.remote_et0_mm_day
        )
    else:
        _LOGGER.debug("No remote ET0 available; estimating locally")
    return calculate_et0(reading)


def resolve_et0_frame(frame: pd.DataFrame) -> pd.DataFrame:
    """Vectorized :func:`resolve_et0` over daily weather rows.

    Rows with a finite ``remote_et0_mm_day`` use that value; the remaining
    rows are estimated with :func:`~irrigation_engine.et_model.calculate_et0_frame`.
    The result carries ``et0_mm_day``, ``source`` and ``clamped`` columns.
    """

    if "remote_et0_mm_day" in frame.columns:
        remote = pd.to_numeric(frame["remote_et0_mm_day"], errors="coerce").astype(float)
    else:
        remote = pd.Series(np.nan, index=frame.index)
    use_remote = pd.Series(np.isfinite(remote.to_numpy()), index=frame.index)

    if (remote[use_remote] < 0).any():
        raise InvalidInput(
            "remote ET0 must be non-negative", stage=STAGE, field="remote_et0_mm_day"
        )

    result = pd.DataFrame(
        {
            "et0_mm_day": remote.where(use_remote),
            "source": np.where(use_remote, "remote", "local"),
            "clamped": False,
        },
        index=frame.index,
    )

    local_rows = frame.loc[~use_remote]
    if not local_rows.empty:
        local = calculate_et0_frame(local_rows)
        result.loc[local.index, "et0_mm_day"] = local["et0_mm_day"]
        result.loc[local.index, "clamped"] = local["clamped"]
    _LOGGER.debug(
        "Resolved %d remote and %d local ET0 values",
        int(use_remote.sum()),
        len(local_rows),
    )
    return result
