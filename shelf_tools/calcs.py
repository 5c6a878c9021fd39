import numpy as np
from .constants import EARTH_RADIUS


def haversine(lat1, lon1, lat2, lon2):
    """great-circle distance in km between points given in degrees"""
    phi1, phi2 = np.radians(lat1), np.radians(lat2)
    dphi = np.radians(np.asarray(lat2) - np.asarray(lat1))
    dlambda = np.radians(np.asarray(lon2) - np.asarray(lon1))

    a = np.sin(dphi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlambda / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return EARTH_RADIUS * c


def along_track_distance(lat, lon):
    """
    Cumulative distance (km) along a ship track.

    Parameters
    ----------
    lat, lon : array-like
        Positions in decimal degrees, in the order they were sampled.

    Returns
    -------
    numpy.ndarray
        Distance from the first point, same length as ``lat``. The first
        value is 0. A step touching a missing position contributes nothing.
    """
    lat = np.asarray(lat, dtype=float)
    lon = np.asarray(lon, dtype=float)
    if lat.shape != lon.shape:
        raise ValueError("lat and lon must have the same shape")
    if lat.size == 0:
        return np.empty(0)

    steps = haversine(lat[:-1], lon[:-1], lat[1:], lon[1:])
    steps = np.nan_to_num(steps, nan=0.0)

    return np.concatenate([[0.0], np.cumsum(steps)])


def db_to_linear(sv):
    """convert backscatter from dB to linear units"""
    return 10 ** (np.asarray(sv, dtype=float) / 10)


def linear_to_db(sv_lin):
    """convert backscatter from linear units to dB, non-positive values become NaN"""
    sv_lin = np.asarray(sv_lin, dtype=float)
    out = np.full(sv_lin.shape, np.nan)
    positive = sv_lin > 0
    out[positive] = 10 * np.log10(sv_lin[positive])
    if out.ndim == 0:
        return float(out)
    return out


def mean_sv(sv):
    """
    Average backscatter values given in dB.

    Sv is logarithmic, so the mean is taken in the linear domain and converted
    back. NaNs are ignored; an all-NaN input gives NaN.
    """
    sv_lin = db_to_linear(sv)
    if np.all(np.isnan(sv_lin)):
        return np.nan
    return linear_to_db(np.nanmean(sv_lin))
