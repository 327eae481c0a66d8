#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Typed views over the data messages VIRB cameras write.

Every attribute is looked up by field definition number, never by position,
since a definition can list its fields in any order (or leave some out).
Scale and offset from the profile are applied; invalid values are None.

"""
from datetime import timedelta

import numpy as np

from virbio.fit._profile import MESG_NUMS_BY_NAME, TIMESTAMP, TYPES_INFO
from virbio._util.misc import as_list, fit_datetime, semicircles_to_degrees


class fit_field:
    """A descriptor that reads one field of the wrapped data message."""
    def __init__(self, number, *, scaled=True, default=None):
        self.number = number
        self.scaled = scaled
        self.default = default

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        message = obj.message
        getter = message.scaled if self.scaled else message.valid
        return getter(self.number, self.default)


class MessageView:
    __slots__ = ('message',)

    global_mesg_num = None

    def __init__(self, message):
        self.message = message

    @property
    def index(self):
        """Position of the message among the file's data messages."""
        return self.message.index

    def __repr__(self):
        return '{}(index={:d})'.format(type(self).__name__, self.index)


class TimedView(MessageView):
    __slots__ = tuple()

    timestamp = fit_field(TIMESTAMP, default=0)
    timestamp_ms = fit_field(0, default=0)

    @property
    def time(self):
        """Seconds since the device started logging."""
        return self.timestamp + self.timestamp_ms / 1000


class CameraEvent(TimedView):
    __slots__ = tuple()

    global_mesg_num = MESG_NUMS_BY_NAME['camera_event']

    event_type = fit_field(1)
    uuid = fit_field(2)
    orientation = fit_field(3)

    @property
    def event_name(self):
        return TYPES_INFO['camera_event_type'].get(self.event_type, 'unknown')

    @property
    def orientation_name(self):
        """e.g. 'camera_orientation_90', or None if not logged."""
        if self.orientation is None:
            return None
        names = TYPES_INFO['camera_orientation']
        return names.get(self.orientation, 'unknown')

    def __repr__(self):
        return 'CameraEvent({!r}, {!r}, time={:.3f})'.format(
            self.event_name, self.uuid, self.time)


class GpsMetadata(TimedView):
    __slots__ = tuple()

    global_mesg_num = MESG_NUMS_BY_NAME['gps_metadata']

    position_lat = fit_field(1)
    position_long = fit_field(2)
    altitude = fit_field(3)
    speed = fit_field(4)
    heading = fit_field(5)
    utc_timestamp = fit_field(6)
    velocity = fit_field(7)

    @property
    def latitude(self):
        return semicircles_to_degrees(self.position_lat)

    @property
    def longitude(self):
        return semicircles_to_degrees(self.position_long)

    @property
    def speed3d(self):
        """The FIT velocity vector is [x, y, z]; this is its magnitude."""
        velocity = self.velocity
        if velocity is None:
            return None
        return float(np.linalg.norm(as_list(velocity)))

    @property
    def utc(self):
        if self.utc_timestamp is None:
            return None
        return fit_datetime(self.utc_timestamp)


class TimestampCorrelation(MessageView):
    """Logged once the GPS has a fix, pairing UTC with the device clock.

    Every other VIRB timestamp counts from when the device started logging;
    this is the only way to get them to UTC.
    """
    __slots__ = tuple()

    global_mesg_num = MESG_NUMS_BY_NAME['timestamp_correlation']

    timestamp = fit_field(TIMESTAMP, default=0)
    fractional_timestamp = fit_field(0)
    system_timestamp = fit_field(1, default=0)
    fractional_system_timestamp = fit_field(2)
    local_timestamp = fit_field(3)
    timestamp_ms = fit_field(4)
    system_timestamp_ms = fit_field(5)

    @property
    def utc_time(self):
        """UTC time of the correlation, in FIT epoch seconds."""
        return self.timestamp + _fraction(self.fractional_timestamp,
                                          self.timestamp_ms)

    @property
    def system_time(self):
        """Device time of the correlation, in seconds."""
        return self.system_timestamp + _fraction(
            self.fractional_system_timestamp, self.system_timestamp_ms)

    @property
    def utc_base(self):
        """The UTC datetime at which device time was zero."""
        return (fit_datetime(self.utc_time) -
                timedelta(seconds=self.system_time))


class SensorCalibration(TimedView):
    """Both three_d_sensor_calibration and one_d_sensor_calibration.

    Calibrated value = (raw - level_shift - offset_cal)
                       * calibration_factor / calibration_divisor

    rotated by the orientation matrix for three-axis sensors.
    """
    __slots__ = tuple()

    timestamp_ms = 0    # calibration messages have no ms field

    sensor_type = fit_field(0)
    calibration_factor = fit_field(1, default=1)
    calibration_divisor = fit_field(2, default=1)
    level_shift = fit_field(3, default=0)
    offset_cal = fit_field(4, default=0)
    orientation_matrix = fit_field(5)

    @property
    def global_mesg_num(self):
        return self.message.global_mesg_num

    @property
    def sensor_name(self):
        return TYPES_INFO['sensor_type'].get(self.sensor_type, 'unknown')

    @property
    def is_3d(self):
        return (self.message.global_mesg_num ==
                MESG_NUMS_BY_NAME['three_d_sensor_calibration'])

    @property
    def matrix(self):
        values = as_list(self.orientation_matrix)
        if len(values) != 9:
            return np.identity(3)
        return np.array(values, dtype='float64').reshape(3, 3)

    def calibrate(self, x, y=None, z=None):
        """Calibrate raw sensor counts.

        Returns
        -------
        numpy array
            Shape (3, n) for three-axis sensors, (n,) otherwise.
        """
        factor = self.calibration_factor / (self.calibration_divisor or 1)

        if not self.is_3d:
            raw = np.asarray(as_list(x), dtype='float64')
            offset = as_list(self.offset_cal)[0] if self.offset_cal else 0
            return (raw - self.level_shift - offset) * factor

        raw = np.array([as_list(x), as_list(y), as_list(z)], dtype='float64')
        offsets = np.zeros(3)
        offsets[:len(as_list(self.offset_cal))] = as_list(self.offset_cal)[:3]
        scaled = (raw - self.level_shift - offsets[:, np.newaxis]) * factor
        return self.matrix @ scaled


class SensorData(TimedView):
    """Accelerometer, gyroscope, magnetometer and barometer samples.

    One message holds several samples; `sample_time_offset` gives the
    millisecond offset of each from the message timestamp.
    """
    __slots__ = tuple()

    sample_time_offset = fit_field(1)
    x = fit_field(2)
    y = fit_field(3)
    z = fit_field(4)

    @property
    def global_mesg_num(self):
        return self.message.global_mesg_num

    @property
    def kind(self):
        return SENSOR_KIND_BY_MESG_NUM[self.message.global_mesg_num]

    @property
    def sample_times(self):
        """Seconds since the device started logging, per sample."""
        offsets = as_list(self.sample_time_offset) or [0]
        return [self.time + offset / 1000 for offset in offsets]

    def samples(self):
        """Raw values as lists; y and z are empty for one-axis sensors."""
        return as_list(self.x), as_list(self.y), as_list(self.z)


def _fraction(fractional, milliseconds):
    if fractional is not None:
        return fractional
    if milliseconds is not None:
        return milliseconds / 1000
    return 0


# Sensor kind: (data message, calibration sensor_type)
SENSOR_KINDS = {
    'accelerometer': (MESG_NUMS_BY_NAME['accelerometer_data'], 0),
    'gyroscope': (MESG_NUMS_BY_NAME['gyroscope_data'], 1),
    'magnetometer': (MESG_NUMS_BY_NAME['magnetometer_data'], 2),
    'barometer': (MESG_NUMS_BY_NAME['barometer_data'], 3),
}

SENSOR_ALIASES = {
    'acc': 'accelerometer',
    'gyr': 'gyroscope',
    'mag': 'magnetometer',
    'bar': 'barometer',
}

SENSOR_KIND_BY_MESG_NUM = {num: kind
                           for kind, (num, _) in SENSOR_KINDS.items()}

PROJECTIONS = {
    CameraEvent.global_mesg_num: CameraEvent,
    GpsMetadata.global_mesg_num: GpsMetadata,
    TimestampCorrelation.global_mesg_num: TimestampCorrelation,
    MESG_NUMS_BY_NAME['three_d_sensor_calibration']: SensorCalibration,
    MESG_NUMS_BY_NAME['one_d_sensor_calibration']: SensorCalibration,
}
PROJECTIONS.update((num, SensorData) for num in SENSOR_KIND_BY_MESG_NUM)


def sensor_kind(name):
    """Normalise a sensor name, e.g. 'acc' --> 'accelerometer'."""
    kind = SENSOR_ALIASES.get(name, name)
    if kind not in SENSOR_KINDS:
        raise ValueError(
            'unknown VIRB sensor {!r}; valid choices are {}'.format(
                name, ', '.join(sorted(SENSOR_KINDS))))
    return kind


def project(message):
    """Typed view of a data message, or the message itself if unknown."""
    view_cls = PROJECTIONS.get(message.global_mesg_num)
    return message if view_cls is None else view_cls(message)
