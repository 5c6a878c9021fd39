import numpy as np
import pandas as pd
import xarray as xr
from xhistogram.xarray import histogram

from .constants import SHELF_BREAK_DEPTH, RESAMPLE_STEP, BIN_WIDTH
from .calcs import along_track_distance, db_to_linear, linear_to_db, mean_sv


SIDES = ("onshore", "offshore")


def add_distance(bathymetry):
    """
    Add the cumulative along-track distance to the ship track.

    Parameters
    ----------
    bathymetry : pandas.DataFrame
        Cleaned track, sorted by time, with ``Latitude`` and ``Longitude``.

    Returns
    -------
    pandas.DataFrame
        Copy with a ``distance`` column in km.
    """
    out = bathymetry.copy()
    out["distance"] = along_track_distance(out["Latitude"], out["Longitude"])
    return out


def interval_table(backscatter):
    """One row per backscatter interval with its start, end and mid time."""
    table = (
        backscatter.groupby("Interval")
        .agg(
            time_start=("time_start", "min"),
            time_end=("time_end", "max"),
            time_mid=("time_mid", "min"),
        )
        .reset_index()
        .sort_values("time_start", kind="stable")
        .reset_index(drop=True)
    )
    return table


def assign_intervals(bathymetry, backscatter):
    """
    Associate each bathymetry point with the backscatter interval it falls in.

    The interval starting most recently before each point is looked up and
    kept only if the point is no later than that interval's end. Points
    outside every interval are dropped.

    Raises
    ------
    ValueError
        If no point falls inside any interval.
    """
    intervals = interval_table(backscatter)
    intervals["time_start"] = intervals["time_start"].astype("datetime64[ns]")

    points = bathymetry.copy()
    points["time"] = points["time"].astype("datetime64[ns]")
    points = points.sort_values("time", kind="stable")

    merged = pd.merge_asof(
        points,
        intervals[["Interval", "time_start", "time_end"]],
        left_on="time",
        right_on="time_start",
        direction="backward",
    )

    inside = merged["time_end"].notna() & (merged["time"] <= merged["time_end"])
    n_out = int((~inside).sum())
    if n_out:
        print(f"⚠️ {n_out} of {len(merged)} bathymetry points fall outside the backscatter intervals")

    merged = merged.loc[inside].reset_index(drop=True)
    if merged.empty:
        raise ValueError("No bathymetry points fall inside the backscatter intervals, check the time ranges")

    merged["Interval"] = merged["Interval"].astype(int)
    return merged.drop(columns=["time_start", "time_end"])


def average_by_interval(bathymetry, backscatter):
    """
    Average both datasets onto the backscatter intervals.

    ``bathymetry`` must already carry an ``Interval`` column (see
    :func:`assign_intervals`). Position, distance and depth are plain means;
    Sv is averaged over all the interval's layers in the linear domain.

    Returns
    -------
    pandas.DataFrame
        One row per interval present in both datasets, sorted by distance.
    """
    track = bathymetry.groupby("Interval").agg(
        time=("time", "mean"),
        Latitude=("Latitude", "mean"),
        Longitude=("Longitude", "mean"),
        distance=("distance", "mean"),
        Depth=("Depth", "mean"),
        n_points=("Depth", "size"),
    )
    sv = backscatter.groupby("Interval")["Sv_mean"].apply(mean_sv).rename("Sv")

    out = track.join(sv, how="inner").reset_index()
    return out.sort_values("distance", kind="stable").reset_index(drop=True)


# -----------------------------------------------------------------------------
# Shelf break
# -----------------------------------------------------------------------------

def find_shelf_break(df, depth=SHELF_BREAK_DEPTH):
    """Index label of the row whose depth is closest to ``depth`` (first on ties)."""
    if df.empty:
        raise ValueError("Cannot find the shelf break of an empty transect")
    return (df["Depth"] - depth).abs().idxmin()


def distance_from_shelf_break(df, depth=SHELF_BREAK_DEPTH):
    """
    Signed distance (km) of each row from the shelf break.

    Onshore is negative and offshore positive. Distance increases along the
    track, so if the first point is deeper than the shelf break the ship
    started offshore and the sign is flipped.
    """
    out = df.copy()
    idx = find_shelf_break(out, depth)

    dist = out["distance"] - out.loc[idx, "distance"]
    if out["Depth"].iloc[0] > depth:
        dist = -dist

    out["dist_to_break"] = dist
    return out


# -----------------------------------------------------------------------------
# Resampling
# -----------------------------------------------------------------------------

def resample_side(df, side, step=RESAMPLE_STEP):
    """
    Linearly resample one side of the shelf break onto an even distance grid.

    Parameters
    ----------
    df : pandas.DataFrame
        Transect with ``dist_to_break``, ``Depth`` and ``Sv`` (dB).
    side : str
        ``"onshore"`` (dist <= 0) or ``"offshore"`` (dist >= 0).
    step : float
        Grid spacing in km. The grid starts at the break and stops at the last
        point on that side, there is no extrapolation.

    Returns
    -------
    xarray.Dataset
        ``depth`` and ``Sv`` along ``dist_to_break``, sorted ascending.

    Notes
    -----
    Sv is converted to linear units before interpolating and back to dB
    afterwards.
    """
    if side not in SIDES:
        raise ValueError(f"Unknown side '{side}', expected one of {SIDES}")
    if step <= 0:
        raise ValueError("step must be positive")

    sign = -1 if side == "onshore" else 1
    sub = df[sign * df["dist_to_break"] >= 0]
    if sub.empty:
        raise ValueError(f"No {side} points to resample")

    # work in distance away from the break so the grid always grows from 0
    frame = pd.DataFrame({
        "dist": sub["dist_to_break"].abs().to_numpy(dtype=float),
        "depth": sub["Depth"].to_numpy(dtype=float),
        "sv_lin": db_to_linear(sub["Sv"].to_numpy()),
    }).groupby("dist", sort=True).mean()

    ds = xr.Dataset.from_dataframe(frame)

    n_steps = int(np.floor(frame.index.max() / step + 1e-9))
    grid = np.minimum(np.arange(n_steps + 1) * step, frame.index.max())

    if len(frame) == 1:
        resampled = ds.reindex(dist=grid)
    else:
        resampled = ds.interp(dist=grid)

    out = xr.Dataset(
        {
            "depth": ("dist_to_break", resampled["depth"].values),
            "Sv": ("dist_to_break", linear_to_db(resampled["sv_lin"].values)),
            "side": ("dist_to_break", np.full(grid.size, side, dtype=object)),
        },
        coords={"dist_to_break": sign * grid},
    )
    return out.sortby("dist_to_break")


def resample_transect(df, step=RESAMPLE_STEP):
    """
    Resample both sides of the shelf break independently and join them.

    The shelf break itself (distance 0) appears once, taken from the offshore
    side.
    """
    onshore = resample_side(df, "onshore", step)
    offshore = resample_side(df, "offshore", step)
    onshore = onshore.isel(dist_to_break=onshore.dist_to_break.values < 0)

    ds = xr.concat([onshore, offshore], dim="dist_to_break").sortby("dist_to_break")

    ds.dist_to_break.attrs = dict(
        long_name="Distance from the shelf break, negative onshore",
        units="km",
    )
    ds["depth"].attrs = dict(
        standard_name="sea_floor_depth_below_sea_surface",
        long_name="Bottom depth",
        units="m",
    )
    ds["Sv"].attrs = dict(
        long_name="Mean volume backscattering strength",
        units="dB re 1 m-1",
    )
    ds.attrs = dict(
        shelf_break_depth=SHELF_BREAK_DEPTH,
        resample_step_km=step,
    )
    return ds


def bin_along_track(df, bin_width=BIN_WIDTH):
    """
    Average depth and Sv in distance bins either side of the shelf break.

    Bin edges are multiples of ``bin_width`` so the break falls on an edge.
    Empty bins are NaN.
    """
    if df.empty:
        raise ValueError("Cannot bin an empty transect")

    lo = np.floor(df["dist_to_break"].min() / bin_width) * bin_width
    hi = np.ceil(df["dist_to_break"].max() / bin_width) * bin_width
    bins = np.arange(lo, hi + bin_width, bin_width)

    dist = xr.DataArray(df["dist_to_break"].to_numpy(dtype=float), dims="Interval", name="dist_to_break")
    depth = xr.DataArray(df["Depth"].to_numpy(dtype=float), dims="Interval")
    sv_lin = xr.DataArray(db_to_linear(df["Sv"].to_numpy()), dims="Interval")

    count = histogram(dist, bins=[bins], dim=["Interval"])
    depth_sum = histogram(dist, bins=[bins], dim=["Interval"], weights=depth)
    sv_sum = histogram(dist, bins=[bins], dim=["Interval"], weights=sv_lin)

    filled = count > 0
    depth_mean = (depth_sum / count.where(filled)).rename("depth")
    sv_mean = (sv_sum / count.where(filled)).rename("Sv")
    sv_mean = sv_mean.copy(data=linear_to_db(sv_mean.values))

    binned = xr.Dataset({"depth": depth_mean, "Sv": sv_mean, "count": count.rename("count")})
    binned["depth"].attrs = dict(long_name="Bin mean bottom depth", units="m")
    binned["Sv"].attrs = dict(long_name="Bin mean volume backscattering strength", units="dB re 1 m-1")
    return binned


def build_transect(bathymetry, backscatter, depth=SHELF_BREAK_DEPTH):
    """
    Align cleaned bathymetry and backscatter into one per-interval transect.

    Steps: along-track distance, interval lookup, per-interval averages and
    distance from the shelf break.
    """
    if bathymetry.empty:
        raise ValueError("No bathymetry left after cleaning")
    if backscatter.empty:
        raise ValueError("No backscatter cells left after cleaning")

    track = add_distance(bathymetry)
    track = assign_intervals(track, backscatter)
    averaged = average_by_interval(track, backscatter)
    if averaged.empty:
        raise ValueError("No interval has both bathymetry and backscatter")

    return distance_from_shelf_break(averaged, depth)
