#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from datetime import timedelta

import numpy as np
import pytest

from virbio import fit
from virbio._util.exceptions import MissingTimestampCorrelation
from virbio._util.misc import FIT_EPOCH


UINT16, SINT32, UINT32 = 0x84, 0x85, 0x86

ACCELEROMETER_FIELDS = [(253, 4, UINT32), (0, 2, UINT16), (1, 2, UINT16),
                        (2, 2, UINT16), (3, 2, UINT16), (4, 2, UINT16)]


def calibration(builder, local, factor):
    identity = [65535, 0, 0, 0, 65535, 0, 0, 0, 65535]
    return [builder.definition(local, 167, [(0, 1, 0x00), (1, 4, UINT32),
                                            (2, 4, UINT32), (3, 4, UINT32),
                                            (4, 12, SINT32),
                                            (5, 36, SINT32)]),
            builder.data(local, '<BIII3i9i', 0, factor, 1, 0, 0, 0, 0,
                         *identity)]


def accelerometer(builder, local, timestamp, x):
    return builder.data(local, '<IH4H', timestamp, 0, 0, x, x, x)


@pytest.fixture
def fitdata(builder):
    source = builder.file(
        *builder.correlation(0, 10**9, 100),
        *builder.camera_events(1, [(110, 0, 0, 'clip-a'),
                                   (120, 0, 1, 'clip-b'),
                                   (130, 0, 2, 'clip-b')]),
        builder.definition(2, 165, ACCELEROMETER_FIELDS),
        accelerometer(builder, 2, 105, 1),
        *calibration(builder, 3, 2),
        accelerometer(builder, 2, 115, 1),
        *calibration(builder, 3, 3),
        accelerometer(builder, 2, 125, 1),
        *builder.correlation(0, 10**9 + 200, 290))
    return fit.read(source)


def test_queries(fitdata):
    assert len(fitdata) == 10
    assert [event.uuid for event in fitdata.camera_events()] == [
        'clip-a', 'clip-b', 'clip-b']
    assert fitdata.camera_events(range(2, 3))[0].uuid == 'clip-b'
    assert len(fitdata.filter(165)) == 3
    assert len(fitdata.calibrations()) == 2
    assert fitdata.gps() == []


def test_summary(fitdata):
    summary = fitdata.summary()
    assert list(summary.columns) == ['global', 'name', 'count']
    assert summary['global'].tolist() == [161, 162, 165, 167]
    assert summary['count'].tolist() == [3, 2, 3, 2]
    assert summary.set_index('global').loc[162, 'name'] == (
        'timestamp_correlation')


def test_utc_base_uses_preceding_correlation(fitdata):
    assert fitdata.utc_base() == FIT_EPOCH + timedelta(seconds=10**9 - 100)
    assert fitdata.utc_base(index=9) == (
        FIT_EPOCH + timedelta(seconds=10**9 - 90))
    assert fitdata.t0(start=110, offset_hours=2) == (
        FIT_EPOCH + timedelta(seconds=10**9 + 10, hours=2))


def test_missing_correlation(builder):
    fitdata = fit.read(builder.file(*builder.camera_events(
        0, [(1, 0, 0, 'clip-a')])))
    with pytest.raises(MissingTimestampCorrelation):
        fitdata.utc_base()


def test_sensor_calibrated_by_preceding_calibration(fitdata):
    samples = fitdata.sensor('acc')
    assert samples.kind == 'accelerometer'
    assert list(samples.columns) == ['time', 'x', 'y', 'z']
    assert samples['time'].tolist() == [105, 115, 125]
    # No calibration before the first sample: raw.
    assert np.allclose(samples['x'], [1, 2, 3])
    assert not samples.calibrated


def test_sensor_time_range(fitdata):
    samples = fitdata.sensor('accelerometer', time_range=(110, 120))
    assert samples['time'].tolist() == [115]


def test_sensor_kind_not_logged(fitdata):
    samples = fitdata.sensor('gyr')
    assert samples.empty
    assert samples.kind == 'gyroscope'


def test_unknown_sensor(fitdata):
    with pytest.raises(ValueError):
        fitdata.sensor('thermometer')


def test_sessions(fitdata):
    session, = fitdata.sessions()
    assert session.uuids == ['clip-a', 'clip-b']
    assert session.complete
    assert session.start == 110
    assert session.index_range == range(1, 4)
