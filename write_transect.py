import os
import argparse
from pathlib import Path

from shelf_tools.funcs import load_bathymetry, load_backscatter
from shelf_tools.transect_funcs import build_transect, resample_transect, find_shelf_break
from shelf_tools.directories_and_paths import DATA_PATH, OUTPUT_PATH, get_filepath, get_output_dir
from shelf_tools.constants import SHELF_BREAK_DEPTH, RESAMPLE_STEP
from shelf_tools.plots import lat_label, lon_label


def parse_args():
    parser = argparse.ArgumentParser(description="Align bathymetry and backscatter across the shelf break.")
    parser.add_argument("--data", default=DATA_PATH, help="Directory holding the input CSVs")
    parser.add_argument("--output", default=OUTPUT_PATH, help="Directory for the outputs")
    parser.add_argument("--step", type=float, default=RESAMPLE_STEP, help="Resampling step in km")
    parser.add_argument("--break-depth", type=float, default=SHELF_BREAK_DEPTH,
                        help="Depth of the isobath used as the shelf break (m)")
    return parser.parse_args()


def write_transect(bathymetry, backscatter, output_dir, step=RESAMPLE_STEP, depth=SHELF_BREAK_DEPTH):
    """
    Align the two datasets and write the per-interval table and the
    resampled transect.

    Parameters
    ----------
    bathymetry  : pandas.DataFrame
                  cleaned ship track.
    backscatter : pandas.DataFrame
                  cleaned backscatter cells.
    output_dir  : Path
                  directory to write into.
    step        : float
                  resampling step (km).
    depth       : float
                  shelf break isobath (m).

    Returns:
    --------
    csv_out, nc_out : paths of the written files.
    """
    output_dir = Path(output_dir)

    # --- align onto the backscatter intervals ---
    transect = build_transect(bathymetry, backscatter, depth)
    brk = transect.loc[find_shelf_break(transect, depth)]
    print(f"Shelf break at interval {int(brk['Interval'])}: "
          f"{brk['Depth']:.1f} m, {lat_label(brk['Latitude'], 4)} {lon_label(brk['Longitude'], 4)}")

    # --- resample both sides of the break ---
    resampled = resample_transect(transect, step)
    resampled.attrs["shelf_break_depth"] = depth
    resampled.attrs["shelf_break_latitude"] = float(brk["Latitude"])
    resampled.attrs["shelf_break_longitude"] = float(brk["Longitude"])

    # --- save ---
    csv_out = output_dir / "transect_intervals.csv"
    transect.to_csv(csv_out, index=False)
    print(f"Wrote {csv_out}")

    nc_out = output_dir / "transect_resampled.nc"
    if nc_out.exists():
        os.remove(nc_out)
    resampled["side"] = resampled["side"].astype(str)
    resampled.to_netcdf(nc_out)
    print(f"Wrote {nc_out}")

    return csv_out, nc_out


def main():
    """
    Top level function: clean both datasets, align them across the shelf
    break and write the outputs.
    """
    args = parse_args()

    bathymetry = load_bathymetry(get_filepath("bathymetry", args.data))
    backscatter = load_backscatter(get_filepath("backscatter", args.data))
    print(f"{len(bathymetry)} bathymetry points, {len(backscatter)} backscatter cells after cleaning")

    write_transect(bathymetry, backscatter, get_output_dir(args.output), args.step, args.break_depth)


if __name__ == "__main__":
    main()
