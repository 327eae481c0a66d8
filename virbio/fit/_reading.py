#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Translate the `_protocol` module functionality to be consistent with
this package's API.

"""
from bisect import bisect_right
from collections import Counter
from datetime import timedelta

import pandas as pd

from virbio.fit._messages import (
    CameraEvent, GpsMetadata, SENSOR_KINDS, TimestampCorrelation, project,
    sensor_kind)
from virbio.fit._profile import GLOBAL_MESG_NUMS, MESG_NUMS_BY_NAME
from virbio.fit._protocol import read_fit
from virbio.fit._sessions import extract_sessions
from virbio._types import GpsPoints, SensorFrame
from virbio._util.exceptions import MissingTimestampCorrelation


CALIBRATIONS = (MESG_NUMS_BY_NAME['three_d_sensor_calibration'],
                MESG_NUMS_BY_NAME['one_d_sensor_calibration'])


def in_range(message, index_range):
    return index_range is None or message.index in index_range


def preceding(messages, index):
    """The last of `messages` (sorted by index) at or before `index`."""
    position = bisect_right([message.index for message in messages], index)
    return messages[position - 1] if position else None


class FitData:
    """Every data message of a *.fit file, with the queries VIRB data needs.

    Parameters
    ----------
    messages : list of DataMessage
        In file order.
    header : FitHeader, optional
    path : str, optional
        Where the messages were read from.
    """
    def __init__(self, messages, header=None, path=None):
        self.messages = messages
        self.header = header
        self.path = path

    def __len__(self):
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)

    def __repr__(self):
        return 'FitData({!r}, {:d} data messages)'.format(self.path, len(self))

    def filter(self, global_mesg_num=None, index_range=None):
        """Data messages by global message number and/or index range."""
        return [message for message in self.messages
                if (global_mesg_num is None or
                    message.global_mesg_num == global_mesg_num) and
                in_range(message, index_range)]

    def _views(self, view_cls, index_range=None):
        return [view_cls(message) for message in
                self.filter(view_cls.global_mesg_num, index_range)]

    def camera_events(self, index_range=None):
        return self._views(CameraEvent, index_range)

    def gps(self, index_range=None):
        """`GpsMetadata` messages, i.e. the raw 10Hz GPS log."""
        return self._views(GpsMetadata, index_range)

    def timestamp_correlations(self):
        return self._views(TimestampCorrelation)

    def calibrations(self, sensor_type=None):
        """`SensorCalibration` messages (3D and 1D), in file order."""
        views = [project(message) for message in self.messages
                 if message.global_mesg_num in CALIBRATIONS]
        if sensor_type is None:
            return views
        return [view for view in views if view.sensor_type == sensor_type]

    def utc_base(self, index=None):
        """The UTC datetime at which the device's relative time was zero.

        Parameters
        ----------
        index : int, optional
            Use the timestamp_correlation message nearest before this data
            message index, falling back to the first one in the file.

        Raises
        ------
        MissingTimestampCorrelation
        """
        correlations = self.timestamp_correlations()
        if not correlations:
            raise MissingTimestampCorrelation()
        correlation = None
        if index is not None:
            correlation = preceding(correlations, index)
        return (correlation or correlations[0]).utc_base

    def t0(self, start=0, offset_hours=0, index=None):
        """Absolute datetime of device time `start`, shifted by some hours."""
        return (self.utc_base(index) +
                timedelta(seconds=start, hours=offset_hours))

    def gps_points(self, index_range=None, start=0):
        return GpsPoints.from_messages(self.gps(index_range), start=start)

    def sensor(self, kind, index_range=None, time_range=None):
        """Sensor samples, calibrated where a calibration message allows.

        Parameters
        ----------
        kind : str
            'accelerometer', 'gyroscope', 'magnetometer' or 'barometer' (or
            'acc', 'gyr', 'mag', 'bar').
        index_range : range, optional
        time_range : (float, float), optional
            Device time (seconds) bounds, start inclusive, end exclusive.

        Returns
        -------
        SensorFrame

        Raises
        ------
        ValueError
            For an unknown `kind`.
        """
        kind = sensor_kind(kind)
        mesg_num, sensor_type = SENSOR_KINDS[kind]

        data = [project(message)
                for message in self.filter(mesg_num, index_range)]
        calibrations = self.calibrations(sensor_type)

        def calibrate_with(message):
            return preceding(calibrations, message.index)

        frame = SensorFrame.from_messages(kind, data, calibrate_with)
        if time_range is not None:
            frame = frame.between(*time_range)
        return frame

    def sessions(self):
        """Recording sessions (`FitSession`), in file order."""
        return extract_sessions(self.camera_events())

    def summary(self):
        """Data message counts, by global message number.

        Returns
        -------
        DataFrame
            Columns global, name, count; sorted by global.
        """
        counts = Counter(message.global_mesg_num for message in self.messages)
        return pd.DataFrame(
            [(num, GLOBAL_MESG_NUMS.get(num, 'unknown'), count)
             for num, count in sorted(counts.items())],
            columns=['global', 'name', 'count'])


def read(source, keep=None):
    """Read a *.fit file.

    Parameters
    ----------
    source : str or file-like
        Path to the fit file, or an open binary file.
    keep : container of int, optional
        Global message numbers to hold on to. All messages by default.

    Returns
    -------
    FitData

    Raises
    ------
    FitDecodeError
        The whole file is rejected; there is no partial output.
    OSError
        If the file can't be opened.
    """
    header, messages = read_fit(source, keep)
    path = source if isinstance(source, str) else getattr(source, 'name', None)
    return FitData(messages, header=header, path=path)
