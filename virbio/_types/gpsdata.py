#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
GPS points, one row each, and the post-processing that turns a raw VIRB
log into points for an annotation timeline.

Columns
-------
latitude, longitude : degrees
altitude : metres
speed2d, speed3d : metres/second
heading : degrees
fix : GPS fix quality (2: 2D, 3: 3D), NaN if the device doesn't report it
dop : dilution of precision, NaN if the device doesn't report it
time : seconds since the device started logging
timestamp : seconds since the start of the recording session (>= 0)
datetime : absolute time (UTC), once `set_datetimes` has been called
duration : seconds until the next point, once `set_durations` has been called

"""
import numpy as np
import pandas as pd

from virbio import tools
from virbio._types.base import TelemetryFrame, derived_column


DEFAULT_MIN_FIX = 3       # 3D lock
DEFAULT_DOWNSAMPLE = 10   # VIRB logs GPS at 10Hz --> 1 point per second

NUMERIC_COLUMNS = ('latitude', 'longitude', 'altitude', 'speed2d', 'speed3d',
                   'heading', 'fix', 'dop', 'time', 'timestamp')


class GpsPoints(TelemetryFrame):
    _metadata = ['t0']

    @classmethod
    def from_messages(cls, gps_metadata, *, start=0):
        """Build from `GpsMetadata` messages.

        Parameters
        ----------
        gps_metadata : iterable of GpsMetadata
        start : float, optional
            Device time (seconds) of the start of the recording session.
            Points logged before it get a timestamp of zero.
        """
        records = ({'latitude': point.latitude,
                    'longitude': point.longitude,
                    'altitude': point.altitude,
                    'speed2d': point.speed,
                    'speed3d': point.speed3d,
                    'heading': point.heading,
                    'fix': getattr(point, 'fix', None),
                    'dop': getattr(point, 'dop', None),
                    'time': point.time}
                   for point in gps_metadata)

        data = pd.DataFrame.from_records(list(records),
                                         columns=list(NUMERIC_COLUMNS))
        data = cls(data.astype('float64'))
        data['timestamp'] = (data['time'] - start).clip(lower=0)
        data['datetime'] = pd.NaT
        data['duration'] = np.nan
        data.t0 = None
        return data

    def prune(self, min_fix=DEFAULT_MIN_FIX, max_dop=None):
        """Drop points with poor satellite lock.

        Points without a reported fix (or dop) are kept. Order is preserved.
        """
        keep = self['fix'].isna() | (self['fix'] >= min_fix)
        if max_dop is not None:
            keep &= self['dop'].isna() | (self['dop'] <= max_dop)
        return self[keep]

    def downsample(self, factor=DEFAULT_DOWNSAMPLE):
        """Keep every `factor`-th point, starting with the first.

        No averaging and no regard for time: irregular logging intervals
        stay irregular.
        """
        if factor < 1:
            raise ValueError('downsample factor must be at least 1')
        return self.iloc[::factor].copy()

    def set_durations(self, end):
        """Time from each point to the next, the last point running to `end`.

        Parameters
        ----------
        end : float
            End of the recording session in session seconds, i.e. the
            session's duration.
        """
        data = self.copy()
        if not len(data):
            return data

        timestamps = data['timestamp']
        following = timestamps.shift(-1)
        following.iloc[-1] = end
        # Negative for out of order points or a clock that went backwards.
        data['duration'] = (following - timestamps).clip(lower=0)
        return data

    def set_datetimes(self, t0, start=None):
        """Absolute time for each point, with `t0` the session start.

        Pass `start` (device seconds) to re-base the timestamps first.
        """
        data = self.copy()
        data.t0 = t0
        if start is not None:
            data['timestamp'] = (data['time'] - start).clip(lower=0)
        data['datetime'] = pd.Timestamp(t0) + pd.to_timedelta(
            data['timestamp'], unit='s')
        return data

    @derived_column(needs=('longitude', 'latitude'), name='distance_m')
    def distance(self):
        """Cumulative distance along the track."""
        return tools.track_distance(self['longitude'].values,
                                    self['latitude'].values)
