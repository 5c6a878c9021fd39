"""
Map of the ship track over the shelf break.

Plots the cleaned bathymetry track as a red line on an ocean basemap with
1 degree graticules and a kilometre scale bar, and saves it as a png.
"""
import argparse
from pathlib import Path

import matplotlib.pyplot as plt
import cartopy.crs as ccrs

from shelf_tools.funcs import load_bathymetry
from shelf_tools.plots import MapConfig, setup_map, add_scale_bar, nice_scale_length
from shelf_tools.directories_and_paths import DATA_PATH, OUTPUT_PATH, get_filepath, get_output_dir
from shelf_tools.constants import map_centre


def parse_args():
    parser = argparse.ArgumentParser(description="Map the cleaned ship track.")
    parser.add_argument("--data", default=DATA_PATH, help="Directory holding the input CSVs")
    parser.add_argument("--output", default=OUTPUT_PATH, help="Directory for the figure")
    parser.add_argument("--fit", action="store_true", help="Fit the map extent to the track instead of the default view")
    parser.add_argument("--show", action="store_true", help="Show the figure as well as saving it")
    return parser.parse_args()


def track_extent(track, pad=0.5):
    """Extent (lon_min, lon_max, lat_min, lat_max) around the track with a padding in degrees."""
    return (
        float(track["Longitude"].min()) - pad,
        float(track["Longitude"].max()) + pad,
        float(track["Latitude"].min()) - pad,
        float(track["Latitude"].max()) + pad,
    )


def make_map(track, config=None):
    """Draw the track map and return the figure."""
    config = config or MapConfig()

    projection = ccrs.Mercator(central_longitude=map_centre[0])
    fig = plt.figure(figsize=config.figsize, dpi=config.dpi)
    ax = fig.add_subplot(1, 1, 1, projection=projection)

    setup_map(ax, config)

    ax.plot(
        track["Longitude"].values,
        track["Latitude"].values,
        color=config.track_color,
        linewidth=config.track_width,
        transform=ccrs.PlateCarree(),
        zorder=4,
        label="Ship track",
    )

    scale = config.scale_km or nice_scale_length(config.extent)
    add_scale_bar(ax, scale)
    ax.legend(loc="upper right")
    return fig


def main():
    args = parse_args()
    track = load_bathymetry(get_filepath("bathymetry", args.data))

    config = MapConfig(extent=track_extent(track)) if args.fit else MapConfig()
    fig = make_map(track, config)

    output_file = Path(get_output_dir(args.output)) / "track_map.png"
    fig.savefig(output_file, bbox_inches="tight")
    print(f"✅ Saved figure: {output_file}")

    if args.show:
        plt.show()


if __name__ == "__main__":
    main()
