from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import cartopy.crs as ccrs
import cartopy.feature as cfeature

from .calcs import haversine
from .constants import SV_RANGE, map_extent


@dataclass
class PlotConfig:
    """Configuration for transect and echogram figures."""
    figsize: Tuple[float, float] = (10, 8)
    dpi: int = 200
    sv_cmap: str = "viridis"
    vlim: Tuple[float, float] = SV_RANGE
    depth_color: str = "k"
    sv_color: str = "seagreen"
    break_color: str = "palevioletred"


@dataclass
class MapConfig:
    """Configuration for the ship track map."""
    extent: Tuple[float, float, float, float] = map_extent
    figsize: Tuple[float, float] = (8, 8)
    dpi: int = 200
    track_color: str = "red"
    track_width: float = 3
    scale_km: Optional[float] = None   # picked from the extent when None
    graticule_step: float = 1.0


def lon_label(x, dp=1):
    """format a longitude in degrees E/W"""
    x = ((x + 180) % 360) - 180
    hemisphere = "W" if x < 0 else "E"
    return f"{abs(x):.{dp}f}°{hemisphere}"


def lat_label(y, dp=1):
    """format a latitude in degrees N/S"""
    hemisphere = "S" if y < 0 else "N"
    return f"{abs(y):.{dp}f}°{hemisphere}"


def pretty_labels(ax, both="all", dp=1):
    """Replace plain degree ticks on a lon/lat axis with E/W and N/S labels.

    ``both`` picks the axis to relabel: "all", "lon" (x) or "lat" (y).
    """
    if both == "all" or both == "lon":
        lon_ticks = ax.get_xticks()
        ax.set_xticks(lon_ticks)
        ax.set_xticklabels([lon_label(x, dp) for x in lon_ticks], size=12)

    if both == "all" or both == "lat":
        ax.locator_params(axis='y', nbins=6)
        lat_ticks = ax.get_yticks()
        ax.set_yticks(lat_ticks)
        ax.set_yticklabels([lat_label(y, dp) for y in lat_ticks], size=12)


def plot_echogram(ax, grid, config=None):
    """
    Plot a (Layer, Interval) Sv grid as an echogram.

    Uses the layer ``depth`` coordinate on the y axis when present (depth
    increasing downwards), otherwise the layer index.
    """
    config = config or PlotConfig()
    y = grid["depth"] if "depth" in grid.coords else grid["Layer"]

    mesh = ax.pcolormesh(
        grid["Interval"].values,
        y.values,
        grid.values,
        cmap=config.sv_cmap,
        vmin=config.vlim[0],
        vmax=config.vlim[1],
        shading="auto",
    )
    ax.invert_yaxis()
    ax.set_xlabel("Interval")
    ax.set_ylabel("Depth (m)" if "depth" in grid.coords else "Layer")
    ax.set_facecolor("lightgrey")
    return mesh


def _mark_break(ax, config):
    ax.axvline(0, color=config.break_color, linestyle="--", linewidth=1.5, label="shelf break")


def plot_depth_profile(ax, transect, config=None, **kwargs):
    """Bottom depth against distance from the shelf break."""
    config = config or PlotConfig()
    ax.plot(
        transect["dist_to_break"],
        transect["depth"],
        color=kwargs.pop("color", config.depth_color),
        **kwargs,
    )
    _mark_break(ax, config)
    if not ax.yaxis_inverted():
        ax.invert_yaxis()
    ax.set_ylabel("Bottom depth (m)")
    ax.set_xlabel("Distance from shelf break (km)")
    ax.grid(True, linestyle="--", alpha=0.2)


def plot_sv_profile(ax, transect, config=None, **kwargs):
    """Water-column Sv against distance from the shelf break."""
    config = config or PlotConfig()
    ax.plot(
        transect["dist_to_break"],
        transect["Sv"],
        color=kwargs.pop("color", config.sv_color),
        **kwargs,
    )
    _mark_break(ax, config)
    ax.set_ylabel("Sv (dB re 1 m$^{-1}$)")
    ax.set_xlabel("Distance from shelf break (km)")
    ax.grid(True, linestyle="--", alpha=0.2)


def nice_scale_length(extent):
    """Pick a round scale bar length of roughly a fifth of the map width (km)."""
    lon_min, lon_max, lat_min, lat_max = extent
    lat_mid = (lat_min + lat_max) / 2
    width = float(haversine(lat_mid, lon_min, lat_mid, lon_max))
    target = width / 5
    magnitude = 10 ** np.floor(np.log10(target))
    for factor in (5, 2, 1):
        if factor * magnitude <= target:
            return factor * magnitude
    return magnitude


def add_scale_bar(ax, length_km, location=(0.05, 0.05), linewidth=3):
    """
    Draw a scale bar on a PlateCarree-extent cartopy map.

    Parameters
    ----------
    ax : cartopy GeoAxes
    length_km : float
        Length of the bar in kilometres.
    location : tuple
        Left end of the bar in axis fraction.
    """
    lon_min, lon_max, lat_min, lat_max = ax.get_extent(crs=ccrs.PlateCarree())
    lon0 = lon_min + location[0] * (lon_max - lon_min)
    lat0 = lat_min + location[1] * (lat_max - lat_min)

    # degrees of longitude per km at this latitude
    km_per_deg = float(haversine(lat0, lon0, lat0, lon0 + 1))
    lon1 = lon0 + length_km / km_per_deg

    ax.plot([lon0, lon1], [lat0, lat0], color="k", linewidth=linewidth,
            transform=ccrs.PlateCarree(), solid_capstyle="butt", zorder=5)
    ax.text((lon0 + lon1) / 2, lat0 + 0.01 * (lat_max - lat_min), f"{length_km:g} km",
            ha="center", va="bottom", transform=ccrs.PlateCarree(), zorder=5)
    return lon1


def setup_map(ax, config=None):
    """Configure map axis with ocean, land, coastlines and labelled graticules."""
    config = config or MapConfig()
    ax.set_extent(config.extent, crs=ccrs.PlateCarree())
    ax.add_feature(cfeature.OCEAN, facecolor="lightsteelblue", zorder=0)
    ax.add_feature(cfeature.LAND, facecolor="lightgray", zorder=1)
    ax.coastlines(resolution="50m", zorder=2)

    lon_min, lon_max, lat_min, lat_max = config.extent
    step = config.graticule_step
    gl = ax.gridlines(
        draw_labels=True,
        x_inline=False,
        y_inline=False,
        xlocs=np.arange(np.floor(lon_min), np.ceil(lon_max) + step, step),
        ylocs=np.arange(np.floor(lat_min), np.ceil(lat_max) + step, step),
        linestyle="--",
        linewidth=0.6,
    )
    gl.top_labels = False
    gl.right_labels = False
    gl.xlabel_style = {"size": 8}
    gl.ylabel_style = {"size": 8}
    return gl


def plot_track_positions(ax, intervals, config=None):
    """
    Interval mean positions on plain lon/lat axes, coloured by Sv, with the
    shelf break highlighted.
    """
    config = config or PlotConfig()
    points = ax.scatter(
        intervals["Longitude"],
        intervals["Latitude"],
        c=intervals["Sv"],
        cmap=config.sv_cmap,
        vmin=config.vlim[0],
        vmax=config.vlim[1],
        s=20,
    )
    at_break = intervals.loc[intervals["dist_to_break"].abs().idxmin()]
    ax.plot(at_break["Longitude"], at_break["Latitude"], marker="*", markersize=14,
            color=config.break_color, linestyle="none", label="shelf break")
    ax.set_aspect(1 / np.cos(np.radians(intervals["Latitude"].mean())))
    pretty_labels(ax, dp=2)
    ax.grid(True, linestyle="--", alpha=0.2)
    return points
