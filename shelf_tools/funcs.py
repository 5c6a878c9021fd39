from __future__ import annotations
from pathlib import Path
import pandas as pd
import xarray as xr

from .constants import BAD_VALUES, VALID_POSITION_STATUS

# -----------------------------------------------------------------------------
# Generic utilities
# -----------------------------------------------------------------------------

BATHY_COLUMNS = ["Date", "Time", "Latitude", "Longitude", "Depth"]
CELL_COLUMNS = ["Interval", "Layer", "Sv_mean", "Date_S", "Time_S", "Date_E", "Time_E"]


def _read_csv(path: str | Path) -> pd.DataFrame:
    """Read a CSV export, stripping the padding around column names."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Missing file: {path}")

    df = pd.read_csv(path, skipinitialspace=True)
    df.columns = df.columns.str.strip()
    return df


def _match_columns(df: pd.DataFrame, wanted: list[str]) -> pd.DataFrame:
    """Rename columns to the expected spelling ignoring case, fail if any is missing."""
    lookup = {c.lower().replace(" ", "").replace("_", ""): c for c in df.columns}
    renames = {}
    missing = []
    for name in wanted:
        key = name.lower().replace("_", "")
        if name in df.columns:
            continue
        if key in lookup:
            renames[lookup[key]] = name
        else:
            missing.append(name)

    if missing:
        raise KeyError(f"Missing required columns: {', '.join(missing)}")

    return df.rename(columns=renames)


def _combine_datetime(date: pd.Series, time: pd.Series, date_format: str | None = None) -> pd.Series:
    """Build timestamps from separate date and time-of-day columns."""
    date = pd.to_datetime(date.astype(str).str.strip(), format=date_format, errors="coerce")
    return date + pd.to_timedelta(time.astype(str).str.strip(), errors="coerce")


def _drop_rows(df: pd.DataFrame, bad: pd.Series, reason: str) -> pd.DataFrame:
    n_bad = int(bad.sum())
    if n_bad:
        print(f"⚠️ Dropped {n_bad} of {len(df)} rows: {reason}")
    return df.loc[~bad]


# -----------------------------------------------------------------------------
# Bathymetry (ship track)
# -----------------------------------------------------------------------------

def read_bathymetry(path: str | Path) -> pd.DataFrame:
    """Read the underway bathymetry log and add a ``time`` column.

    Parameters
    ----------
    path : str or Path
        CSV with ``Date``, ``Time``, ``Latitude``, ``Longitude``, ``Depth`` and
        optionally ``PositionStatus`` columns.
    """
    df = _read_csv(path)
    wanted = BATHY_COLUMNS + (["PositionStatus"] if _has_status(df) else [])
    df = _match_columns(df, wanted)
    df["time"] = _combine_datetime(df["Date"], df["Time"])
    return df


def _has_status(df: pd.DataFrame) -> bool:
    return any(c.lower().replace(" ", "").replace("_", "") == "positionstatus" for c in df.columns)


def clean_bathymetry(df: pd.DataFrame) -> pd.DataFrame:
    """
    Remove invalid points from the ship track.

    Drops, in order:

    - points whose position status is not a valid fix
    - points where latitude, longitude or depth is a sentinel or missing
    - points with a non-positive depth
    - points without a usable date or time

    Returns
    -------
    pandas.DataFrame
        Cleaned copy sorted by time with a fresh index.
    """
    if "PositionStatus" in df.columns:
        bad_status = ~df["PositionStatus"].isin(VALID_POSITION_STATUS)
        df = _drop_rows(df, bad_status, "invalid position status")
    else:
        print("⚠️ No PositionStatus column, keeping all fixes")

    cols = ["Latitude", "Longitude", "Depth"]
    values = df[cols].apply(pd.to_numeric, errors="coerce")
    bad_values = values.isin(BAD_VALUES).any(axis=1) | values.isna().any(axis=1)
    df = _drop_rows(df, bad_values, f"sentinel or missing values {BAD_VALUES}")

    depth = pd.to_numeric(df["Depth"])
    df = _drop_rows(df, depth <= 0, "non-positive depth")

    df = _drop_rows(df, df["time"].isna(), "missing time")

    df = df.copy()
    df[cols] = df[cols].astype(float)
    return df.sort_values("time", kind="stable").reset_index(drop=True)


def load_bathymetry(path: str | Path) -> pd.DataFrame:
    """Read and clean the bathymetry log."""
    return clean_bathymetry(read_bathymetry(path))


# -----------------------------------------------------------------------------
# Backscatter (echosounder cell export)
# -----------------------------------------------------------------------------

def read_backscatter(path: str | Path) -> pd.DataFrame:
    """Read an export-by-cells backscatter file.

    Dates are ``YYYYMMDD`` and times ``HH:MM:SS.ffff``. Adds ``time_start``,
    ``time_end`` and (when ``Date_M``/``Time_M`` exist) ``time_mid`` columns.
    """
    df = _match_columns(_read_csv(path), CELL_COLUMNS)

    df["time_start"] = _combine_datetime(df["Date_S"], df["Time_S"], "%Y%m%d")
    df["time_end"] = _combine_datetime(df["Date_E"], df["Time_E"], "%Y%m%d")
    if {"Date_M", "Time_M"} <= set(df.columns):
        df["time_mid"] = _combine_datetime(df["Date_M"], df["Time_M"], "%Y%m%d")
    else:
        df["time_mid"] = df["time_start"] + (df["time_end"] - df["time_start"]) / 2
    return df


def clean_backscatter(df: pd.DataFrame) -> pd.DataFrame:
    """
    Remove empty or unpositioned cells from the backscatter export.

    Cells with ``Sv_mean`` equal to a sentinel, missing or above 0 dB are
    dropped, as are cells whose mid position is a sentinel (when the
    ``Lat_M``/``Lon_M`` columns are present).
    """
    sv = pd.to_numeric(df["Sv_mean"], errors="coerce")
    bad_sv = sv.isin(BAD_VALUES) | sv.isna() | (sv > 0)
    df = _drop_rows(df, bad_sv, "empty cells (Sv_mean)")

    pos_cols = [c for c in ("Lat_M", "Lon_M") if c in df.columns]
    if pos_cols:
        bad_pos = df[pos_cols].isin(BAD_VALUES).any(axis=1)
        df = _drop_rows(df, bad_pos, "cells without a position")

    df = df.copy()
    df["Sv_mean"] = df["Sv_mean"].astype(float)
    return df.sort_values(["Interval", "Layer"], kind="stable").reset_index(drop=True)


def load_backscatter(path: str | Path) -> pd.DataFrame:
    """Read and clean the backscatter cells."""
    return clean_backscatter(read_backscatter(path))


def backscatter_grid(df: pd.DataFrame) -> xr.DataArray:
    """Pivot the cells to a (Layer, Interval) grid of Sv for echogram plots.

    A ``depth`` coordinate (layer mid depth) is attached when the export has
    ``Layer_depth_min``/``Layer_depth_max``.
    """
    table = df.pivot_table(index="Layer", columns="Interval", values="Sv_mean", aggfunc="mean")

    grid = xr.DataArray(
        table.values,
        dims=("Layer", "Interval"),
        coords={"Layer": table.index.values, "Interval": table.columns.values},
        name="Sv",
        attrs={"units": "dB re 1 m-1", "long_name": "Mean volume backscattering strength"},
    )

    if {"Layer_depth_min", "Layer_depth_max"} <= set(df.columns):
        mid = (df["Layer_depth_min"] + df["Layer_depth_max"]) / 2
        layer_depth = mid.groupby(df["Layer"]).mean().reindex(table.index)
        grid = grid.assign_coords(depth=("Layer", layer_depth.values.astype(float)))
        grid.depth.attrs = {"units": "m", "positive": "down"}

    if "time_mid" in df.columns:
        times = df.groupby("Interval")["time_mid"].min().reindex(table.columns)
        grid = grid.assign_coords(time=("Interval", times.values))

    return grid
