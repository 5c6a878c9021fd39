from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

T0 = pd.Timestamp("2019-07-15 12:00:00")


def make_track(depths: list[float], start=T0, dt_s: int = 30, lat0=38.5, dlat=-0.01) -> pd.DataFrame:
    """Ship track heading due south, one point every ``dt_s`` seconds."""
    n = len(depths)
    times = [start + pd.Timedelta(seconds=dt_s * i) for i in range(n)]
    return pd.DataFrame({
        "Date": [t.strftime("%Y-%m-%d") for t in times],
        "Time": [t.strftime("%H:%M:%S") for t in times],
        "Latitude": lat0 + dlat * np.arange(n),
        "Longitude": np.full(n, -73.0),
        "Depth": np.asarray(depths, dtype=float),
        "PositionStatus": np.ones(n, dtype=int),
        "time": pd.to_datetime(times),
    })


def make_cells(n_intervals: int, n_layers: int = 3, start=T0, length_s: int = 60,
               sv: float = -70.0) -> pd.DataFrame:
    """Export-by-cells table: interval ``i`` covers [start + i*length, start + (i+1)*length)."""
    rows = []
    for i in range(n_intervals):
        t_s = start + pd.Timedelta(seconds=length_s * i)
        t_e = t_s + pd.Timedelta(seconds=length_s - 1)
        t_m = t_s + pd.Timedelta(seconds=length_s // 2)
        for layer in range(1, n_layers + 1):
            rows.append({
                "Interval": i + 1,
                "Layer": layer,
                "Sv_mean": sv,
                "Layer_depth_min": 10.0 * (layer - 1),
                "Layer_depth_max": 10.0 * layer,
                "Date_S": int(t_s.strftime("%Y%m%d")),
                "Time_S": t_s.strftime(" %H:%M:%S.0000"),
                "Date_E": int(t_e.strftime("%Y%m%d")),
                "Time_E": t_e.strftime(" %H:%M:%S.0000"),
                "Date_M": int(t_m.strftime("%Y%m%d")),
                "Time_M": t_m.strftime(" %H:%M:%S.0000"),
                "Lat_M": 38.5,
                "Lon_M": -73.0,
                "time_start": t_s,
                "time_end": t_e,
                "time_mid": t_m,
            })
    return pd.DataFrame(rows)


@pytest.fixture()
def track() -> pd.DataFrame:
    # shallow to deep: crosses 200 m at the fifth point
    return make_track([60, 80, 110, 150, 195, 260, 400, 700])


@pytest.fixture()
def cells() -> pd.DataFrame:
    return make_cells(4)


@pytest.fixture()
def data_dir(tmp_path: Path, track: pd.DataFrame, cells: pd.DataFrame) -> Path:
    """Input directory with the two CSV exports written the way the instruments write them."""
    data = tmp_path / "data"
    data.mkdir()
    track.drop(columns=["time"]).to_csv(data / "bathymetry.csv", index=False)

    raw = cells.drop(columns=["time_start", "time_end", "time_mid"])
    # the cell export pads its header and values with spaces
    raw.columns = [f" {c}" for c in raw.columns]
    raw.to_csv(data / "backscatter_cells.csv", index=False)
    return data
