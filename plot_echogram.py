import argparse
from pathlib import Path

import matplotlib.pyplot as plt

from shelf_tools.funcs import load_backscatter, backscatter_grid
from shelf_tools.plots import PlotConfig, plot_echogram
from shelf_tools.directories_and_paths import DATA_PATH, OUTPUT_PATH, get_filepath, get_output_dir


def parse_args():
    parser = argparse.ArgumentParser(description="Plot an echogram of the cleaned backscatter cells.")
    parser.add_argument("--data", default=DATA_PATH, help="Directory holding the input CSVs")
    parser.add_argument("--output", default=OUTPUT_PATH, help="Directory for the figure")
    parser.add_argument("--show", action="store_true", help="Show the figure as well as saving it")
    return parser.parse_args()


def make_echogram(backscatter, config=None):
    """Build the echogram figure from cleaned cells."""
    config = config or PlotConfig(figsize=(12, 5))
    grid = backscatter_grid(backscatter)

    fig, ax = plt.subplots(figsize=config.figsize)
    mesh = plot_echogram(ax, grid, config)
    fig.colorbar(mesh, ax=ax, label="Sv (dB re 1 m$^{-1}$)")
    ax.set_title("Mean volume backscattering strength")
    plt.tight_layout()
    return fig


def main():
    args = parse_args()
    backscatter = load_backscatter(get_filepath("backscatter", args.data))

    fig = make_echogram(backscatter)

    output_file = Path(get_output_dir(args.output)) / "echogram.png"
    fig.savefig(output_file, dpi=300, bbox_inches="tight")
    print(f"✅ Saved figure: {output_file}")

    if args.show:
        plt.show()


if __name__ == "__main__":
    main()
