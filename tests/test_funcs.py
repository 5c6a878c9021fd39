from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from shelf_tools.directories_and_paths import get_filepath
from shelf_tools.transect_funcs import build_transect
from shelf_tools.funcs import (
    backscatter_grid,
    clean_backscatter,
    clean_bathymetry,
    load_backscatter,
    load_bathymetry,
    read_backscatter,
    read_bathymetry,
)


def test_clean_bathymetry_drops_invalid_status(track: pd.DataFrame) -> None:
    track.loc[1, "PositionStatus"] = 0
    track.loc[2, "PositionStatus"] = 6
    track.loc[3, "PositionStatus"] = 2
    out = clean_bathymetry(track)
    assert len(out) == len(track) - 2
    assert set(out["PositionStatus"]) == {1, 2}


def test_clean_bathymetry_drops_sentinels_and_missing(track: pd.DataFrame) -> None:
    track.loc[0, "Depth"] = 999
    track.loc[2, "Latitude"] = -999
    track.loc[4, "Longitude"] = np.nan
    track.loc[6, "Depth"] = -5
    out = clean_bathymetry(track)
    assert len(out) == len(track) - 4
    assert not out[["Latitude", "Longitude", "Depth"]].isin([999, -999]).any().any()
    assert (out["Depth"] > 0).all()


def test_clean_bathymetry_sorts_by_time(track: pd.DataFrame) -> None:
    shuffled = track.iloc[::-1]
    out = clean_bathymetry(shuffled)
    assert out["time"].is_monotonic_increasing
    assert list(out.index) == list(range(len(out)))


def test_clean_bathymetry_without_status_keeps_rows(track: pd.DataFrame) -> None:
    out = clean_bathymetry(track.drop(columns=["PositionStatus"]))
    assert len(out) == len(track)


def test_read_bathymetry_builds_time(data_dir: Path) -> None:
    df = read_bathymetry(data_dir / "bathymetry.csv")
    assert df["time"].iloc[0] == pd.Timestamp("2019-07-15 12:00:00")
    assert df["time"].iloc[1] == pd.Timestamp("2019-07-15 12:00:30")


def test_read_bathymetry_tolerates_column_case(tmp_path: Path, track: pd.DataFrame) -> None:
    raw = track.drop(columns=["time"]).rename(columns=str.lower)
    raw.to_csv(tmp_path / "lower.csv", index=False)
    df = read_bathymetry(tmp_path / "lower.csv")
    assert {"Latitude", "Longitude", "Depth", "PositionStatus"} <= set(df.columns)


def test_read_bathymetry_missing_column(tmp_path: Path, track: pd.DataFrame) -> None:
    track.drop(columns=["time", "Depth"]).to_csv(tmp_path / "nodepth.csv", index=False)
    with pytest.raises(KeyError, match="Depth"):
        read_bathymetry(tmp_path / "nodepth.csv")


def test_read_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_bathymetry(tmp_path / "nope.csv")


def test_read_backscatter_parses_padded_export(data_dir: Path, cells: pd.DataFrame) -> None:
    df = read_backscatter(data_dir / "backscatter_cells.csv")
    assert "Interval" in df.columns
    assert df["time_start"].iloc[0] == pd.Timestamp("2019-07-15 12:00:00")
    assert df["time_end"].iloc[0] == pd.Timestamp("2019-07-15 12:00:59")
    assert df["time_mid"].iloc[0] == pd.Timestamp("2019-07-15 12:00:30")
    assert len(df) == len(cells)


def test_clean_backscatter_drops_empty_and_unpositioned_cells(cells: pd.DataFrame) -> None:
    cells.loc[0, "Sv_mean"] = -999
    cells.loc[1, "Sv_mean"] = 5.0
    cells.loc[2, "Lat_M"] = 999
    cells.loc[3, "Lon_M"] = 999
    out = clean_backscatter(cells)
    assert len(out) == len(cells) - 4
    assert (out["Sv_mean"] < 0).all()
    assert not out[["Lat_M", "Lon_M"]].isin([999]).any().any()


def test_load_functions_read_and_clean(data_dir: Path) -> None:
    bathy = load_bathymetry(data_dir / "bathymetry.csv")
    cells = load_backscatter(data_dir / "backscatter_cells.csv")
    assert len(bathy) == 8
    assert len(cells) == 12
    assert cells[["Interval", "Layer"]].iloc[:3].values.tolist() == [[1, 1], [1, 2], [1, 3]]


def test_backscatter_grid_shape_and_depth(cells: pd.DataFrame) -> None:
    cells.loc[(cells["Interval"] == 2) & (cells["Layer"] == 3), "Sv_mean"] = -999
    grid = backscatter_grid(clean_backscatter(cells))
    assert grid.dims == ("Layer", "Interval")
    assert grid.shape == (3, 4)
    np.testing.assert_allclose(grid["depth"].values, [5, 15, 25])
    assert np.isnan(grid.sel(Layer=3, Interval=2))
    assert float(grid.sel(Layer=1, Interval=1)) == -70


def test_get_filepath(data_dir: Path) -> None:
    assert get_filepath("bathymetry", data_dir) == data_dir / "bathymetry.csv"
    with pytest.raises(SystemExit):
        get_filepath("ctd", data_dir)
    with pytest.raises(SystemExit):
        get_filepath("bathymetry", data_dir / "missing")


def test_clean_bathymetry_drops_points_without_time(track: pd.DataFrame) -> None:
    track.loc[2, "time"] = pd.NaT
    out = clean_bathymetry(track)
    assert len(out) == len(track) - 1
    assert out["time"].notna().all()


def test_load_bathymetry_blank_time_still_aligns(tmp_path: Path, track: pd.DataFrame, cells: pd.DataFrame) -> None:
    raw = track.drop(columns=["time"])
    raw.loc[3, "Time"] = ""
    raw.loc[5, "Date"] = ""
    raw.to_csv(tmp_path / "bathymetry.csv", index=False)

    bathy = load_bathymetry(tmp_path / "bathymetry.csv")
    assert len(bathy) == len(track) - 2
    assert bathy["time"].notna().all()

    transect = build_transect(bathy, cells)
    assert list(transect["Interval"]) == [1, 2, 3, 4]
