#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from functools import wraps

from pandas import DataFrame, Series

from virbio._util import exceptions


__all__ = ('TelemetryFrame', 'derived_column')  # using * import elsewhere


class TelemetryFrame(DataFrame):
    """Rows of time stamped telemetry, one per sample or point.

    Attributes named in `_metadata` survive slicing, filtering and copying.
    """
    _metadata = []

    @property
    def _constructor(self):
        return self.__class__

    def __finalize__(self, other, method=None, **kwargs):
        """Propagate metadata from other to self."""
        for name in self._metadata:
            object.__setattr__(self, name, getattr(other, name, None))
        return self

    @classmethod
    def from_rows(cls, rows, columns, **metadata):
        """Float64 frame from a 2D array (or None for no rows)."""
        data = cls(DataFrame(rows, columns=list(columns), dtype='float64'))
        for name, value in metadata.items():
            setattr(data, name, value)
        return data

    def between(self, start, end, column='time'):
        """Rows with start <= `column` < end, in their original order."""
        return self[(self[column] >= start) & (self[column] < end)]


def derived_column(needs: tuple, name=None):
    """Decorator for methods that compute a new column from existing ones.

    Parameters
    ----------
    needs : tuple
        A tuple of column names.
    name : str, optional
        The name for the returned Series object.

    Returns
    -------
    Series
        Indexed like the frame, so it can be joined straight back on.

    Raises
    ------
    RequiredColumnError
        If a column specified in `needs` is not present.
    """
    def real_decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            for need in needs:
                if need not in self:
                    raise exceptions.RequiredColumnError(need)

            out = func(self, *args, **kwargs)
            return Series(out, index=self.index, name=name)
        return wrapper
    return real_decorator
