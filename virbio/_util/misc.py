#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
General utilities to be used internally.

"""
from datetime import datetime, timedelta

import pytz


FIT_EPOCH = datetime(year=1989, month=12, day=31, tzinfo=pytz.utc)

SEMICIRCLES_PER_DEGREE = 2**31 / 180


def as_list(value):
    """Array fields holding a single value decode as scalars."""
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def semicircles_to_degrees(semicircles):
    """Positional data conversion for *.fit files

    https://github.com/kuperov/fit/blob/master/R/fit.R
    """
    if semicircles is None:
        return None
    return (semicircles / SEMICIRCLES_PER_DEGREE + 180) % 360 - 180


def fit_datetime(seconds):
    """FIT date_time values count seconds from 1989-12-31T00:00:00 UTC."""
    return FIT_EPOCH + timedelta(seconds=seconds)
