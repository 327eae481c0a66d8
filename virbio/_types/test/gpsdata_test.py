#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from collections import namedtuple
from datetime import datetime, timedelta
import math

import numpy as np
import pytest
import pytz

from virbio._types import GpsPoints
from virbio._util.exceptions import RequiredColumnError


Point = namedtuple('Point', 'latitude longitude altitude speed speed3d '
                            'heading time fix dop')


def points(times, fixes=None, dops=None):
    fixes = fixes or [None] * len(times)
    dops = dops or [None] * len(times)
    return [Point(50 + i / 1000, 8.0, 100.0, 1.0, 1.0, 90.0, time, fix, dop)
            for i, (time, fix, dop) in enumerate(zip(times, fixes, dops))]


def test_from_messages():
    data = GpsPoints.from_messages(points([9.5, 10.0, 11.0]), start=10)
    assert data['timestamp'].tolist() == [0, 0, 1]
    assert data['fix'].isna().all()
    assert data.t0 is None


def test_empty():
    data = GpsPoints.from_messages([])
    assert data.empty
    assert data.downsample(10).empty
    assert data.set_durations(5).empty


def test_prune_keeps_order():
    data = GpsPoints.from_messages(points(range(6), fixes=[3, 2, 3, 0, 3, 3],
                                          dops=[1, 1, 1, 1, 5, 1]))
    assert data.prune()['time'].tolist() == [0, 2, 4, 5]
    assert data.prune(min_fix=2)['time'].tolist() == [0, 1, 2, 4, 5]
    assert data.prune(max_dop=2)['time'].tolist() == [0, 2, 5]


def test_prune_keeps_points_without_fix():
    data = GpsPoints.from_messages(points(range(4)))
    assert len(data.prune()) == 4


@pytest.mark.parametrize('length, factor', [(0, 10), (1, 10), (25, 10),
                                            (30, 10), (7, 1), (7, 3)])
def test_downsample_length(length, factor):
    data = GpsPoints.from_messages(points(range(length)))
    assert len(data.downsample(factor)) == math.ceil(length / factor)


def test_downsample_picks_every_nth():
    data = GpsPoints.from_messages(points(range(25)))
    assert data.downsample(10)['time'].tolist() == [0, 10, 20]
    with pytest.raises(ValueError):
        data.downsample(0)


def test_durations():
    data = GpsPoints.from_messages(points([0, 1, 3, 6])).set_durations(10)
    assert data['duration'].tolist() == [1, 2, 3, 4]
    assert data['duration'].sum() == 10


def test_durations_never_negative():
    data = GpsPoints.from_messages(points([0, 5, 3, 6])).set_durations(4)
    durations = data['duration']
    assert (durations >= 0).all()
    assert durations.tolist() == [5, 0, 3, 0]


def test_datetimes():
    t0 = datetime(2019, 3, 25, 12, tzinfo=pytz.utc)
    data = GpsPoints.from_messages(points([100, 101.5]), start=100)
    data = data.set_datetimes(t0)
    assert data.t0 == t0
    assert data['datetime'].tolist() == [t0, t0 + timedelta(seconds=1.5)]

    rebased = data.set_datetimes(t0, start=101)
    assert rebased['timestamp'].tolist() == [0, 0.5]


def test_metadata_survives_filtering():
    t0 = datetime(2019, 3, 25, 12, tzinfo=pytz.utc)
    data = GpsPoints.from_messages(points(range(20))).set_datetimes(t0)
    assert data.downsample(10).prune().t0 == t0


def test_distance():
    data = GpsPoints.from_messages(points(range(3)))
    distance = data.distance()
    assert distance.name == 'distance_m'
    assert distance.iloc[0] == 0
    # 0.001 degrees of latitude is about 111 metres.
    assert np.allclose(np.diff(distance), 111.2, atol=0.1)

    with pytest.raises(RequiredColumnError):
        GpsPoints.from_messages([]).drop(columns='latitude').distance()
