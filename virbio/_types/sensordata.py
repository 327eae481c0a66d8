#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Samples from the VIRB's motion and pressure sensors, one row per sample.

Three-axis sensors (accelerometer, gyroscope, magnetometer) give columns
time, x, y, z; the barometer gives time, pressure. ``time`` is in seconds
since the device started logging.

"""
import numpy as np

from virbio._types.base import TelemetryFrame


THREE_AXIS_COLUMNS = ('time', 'x', 'y', 'z')
ONE_AXIS_COLUMNS = ('time', 'pressure')


class SensorFrame(TelemetryFrame):
    _metadata = ['kind', 'calibrated']

    @classmethod
    def from_messages(cls, kind, sensor_data, calibrate_with=None):
        """Build from `SensorData` messages of a single kind.

        Parameters
        ----------
        kind : str
            e.g. 'accelerometer'.
        sensor_data : iterable of SensorData
        calibrate_with : callable, optional
            Maps a SensorData message to the SensorCalibration that applies
            to it, or None. Messages without one are kept raw.

        Returns
        -------
        SensorFrame
        """
        one_axis = kind == 'barometer'
        columns = ONE_AXIS_COLUMNS if one_axis else THREE_AXIS_COLUMNS

        chunks, calibrated = [], []
        for message in sensor_data:
            times = message.sample_times
            x, y, z = message.samples()
            if not one_axis:
                n = min(len(times), len(x), len(y), len(z))
                y, z = y[:n], z[:n]
            else:
                n = min(len(times), len(x))
            if not n:
                continue
            times, x = times[:n], x[:n]

            calibration = calibrate_with(message) if calibrate_with else None
            calibrated.append(calibration is not None)

            if one_axis:
                values = (np.asarray(x, dtype='float64') if calibration is None
                          else calibration.calibrate(x))
                chunks.append(np.column_stack((times, values)))
            else:
                values = (np.array([x, y, z], dtype='float64')
                          if calibration is None
                          else calibration.calibrate(x, y, z))
                chunks.append(np.column_stack((times, values.T)))

        rows = np.concatenate(chunks) if chunks else None
        return cls.from_rows(rows, columns, kind=kind,
                             calibrated=bool(calibrated) and all(calibrated))
