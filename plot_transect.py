"""
Plot bottom depth and backscatter against distance from the shelf break.

Reads the resampled transect written by write_transect.py. With --binned the
per-interval table is also binned along track and overlaid. A second figure
shows the interval positions coloured by Sv.
"""
import argparse
from pathlib import Path

import pandas as pd
import xarray as xr
import matplotlib.pyplot as plt

from shelf_tools.plots import PlotConfig, plot_depth_profile, plot_sv_profile, plot_track_positions
from shelf_tools.transect_funcs import bin_along_track
from shelf_tools.directories_and_paths import OUTPUT_PATH
from shelf_tools.constants import BIN_WIDTH


def parse_args():
    parser = argparse.ArgumentParser(description="Plot the aligned transect.")
    parser.add_argument("--output", default=OUTPUT_PATH, help="Directory holding the transect outputs")
    parser.add_argument("--binned", action="store_true", help="Overlay along-track bin averages")
    parser.add_argument("--bin-width", type=float, default=BIN_WIDTH, help="Bin width in km")
    parser.add_argument("--show", action="store_true", help="Show the figure as well as saving it")
    return parser.parse_args()


def make_transect_figure(resampled, binned=None, config=None):
    """Two stacked panels: bottom depth on top, Sv below, sharing the distance axis."""
    config = config or PlotConfig()
    fig, (ax_depth, ax_sv) = plt.subplots(2, 1, figsize=config.figsize, sharex=True)

    plot_depth_profile(ax_depth, resampled, config, linewidth=2, label="resampled")
    plot_sv_profile(ax_sv, resampled, config, linewidth=2, label="resampled")

    if binned is not None:
        binned = binned.rename({"dist_to_break_bin": "dist_to_break"})
        ax_depth.plot(binned.dist_to_break, binned.depth, "o", color="gray", alpha=0.7, label="binned")
        ax_sv.plot(binned.dist_to_break, binned.Sv, "o", color="gray", alpha=0.7, label="binned")

    ax_depth.set_xlabel("")
    ax_depth.set_title(f"Shelf break crossing ({resampled.attrs.get('shelf_break_depth', '')} m isobath)")
    ax_depth.legend()
    ax_sv.legend()

    plt.tight_layout()
    return fig


def make_position_figure(intervals, config=None):
    """Interval positions coloured by Sv, shelf break starred."""
    config = config or PlotConfig(figsize=(7, 7))
    fig, ax = plt.subplots(figsize=config.figsize)
    points = plot_track_positions(ax, intervals, config)
    fig.colorbar(points, ax=ax, label="Sv (dB re 1 m$^{-1}$)", shrink=0.8)
    ax.legend(loc="upper right")
    ax.set_title("Interval positions")
    plt.tight_layout()
    return fig


def main():
    args = parse_args()
    output_dir = Path(args.output)

    nc_file = output_dir / "transect_resampled.nc"
    if not nc_file.exists():
        raise FileNotFoundError(f"{nc_file} not found, run write_transect.py first")
    resampled = xr.open_dataset(nc_file)

    intervals = pd.read_csv(output_dir / "transect_intervals.csv")
    binned = None
    if args.binned:
        binned = bin_along_track(intervals, args.bin_width)

    fig = make_transect_figure(resampled, binned)

    output_file = output_dir / "transect.png"
    fig.savefig(output_file, dpi=300, bbox_inches="tight")
    print(f"✅ Saved figure: {output_file}")

    fig = make_position_figure(intervals)
    positions_file = output_dir / "transect_positions.png"
    fig.savefig(positions_file, dpi=300, bbox_inches="tight")
    print(f"✅ Saved figure: {positions_file}")

    if args.show:
        plt.show()


if __name__ == "__main__":
    main()
