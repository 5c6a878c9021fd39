import os
import sys
from pathlib import Path

"""directories used often"""

# paths
DATA_PATH = os.environ.get("SHELF_DATA_PATH", "data/")
OUTPUT_PATH = os.environ.get("SHELF_OUTPUT_PATH", "output/")


def get_filepath(dataset, data_path=DATA_PATH):
    """Build the correct file path for the given dataset."""
    dataset_map = {
        "bathymetry": "bathymetry.csv",
        "backscatter": "backscatter_cells.csv",
    }
    if dataset not in dataset_map:
        sys.exit(f"Invalid dataset: {dataset}")

    path = Path(data_path) / dataset_map[dataset]
    if not path.exists():
        sys.exit(f"Stopped - Could not find file {path}")

    return path


def get_output_dir(output_path=OUTPUT_PATH):
    """Return the output directory, creating it if needed."""
    path = Path(output_path)
    path.mkdir(parents=True, exist_ok=True)
    return path
