#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
General tools that complement the API.

"""
import numpy as np


EARTH_RADIUS = 6371e3   # metres


def haversine(lon, lat, *, fill=0):
    """Great-circle distances between adjacent points on a sphere.

    Parameters
    ----------
    lon, lat: numpy arrays or lists
        Positional coordinates in decimal *degrees*.
    fill: scalar
        An appropriate missing value for the start.

    Returns
    -------
    numpy array
        Distance(s) between adjacent points in metres.

    Examples
    --------
        >>> dist = haversine([-77.037852, -77.043934], [38.898556, 38.897147])
        >>> '{:.1f} metres'.format(dist[-1])  # ignoring the leading zero
        '549.2 metres'

    References
    ----------
    http://www.movable-type.co.uk/scripts/latlong.html
    """
    lon = np.radians(np.asarray(lon, dtype='float64'))
    lat = np.radians(np.asarray(lat, dtype='float64'))
    if lon.size == 0:
        return np.array([], dtype='float64')

    dlon, dlat = np.diff(lon), np.diff(lat)

    a = (np.sin(dlat / 2)**2
         + np.cos(lat[:-1])
         * np.cos(lat[1:])
         * np.sin(dlon / 2)**2)

    c = 2 * np.arcsin(np.sqrt(a)) * EARTH_RADIUS

    return np.concatenate(([fill], c))


def track_distance(lon, lat):
    """Cumulative distance along a track, in metres, starting at zero."""
    return np.nancumsum(haversine(lon, lat))
