#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FIT base types.

Every field in a FIT data message is made up of one or more values of a
single base type. The base type byte in a field definition is a bit field:

=====  =========================
Bit    Description
=====  =========================
  7    Endian ability
                0: single byte
                1: multi byte
 5-6   Reserved
 0-4   Base type number
=====  =========================

"""
from enum import IntEnum
from math import isnan
import struct

from virbio._util.exceptions import InvalidBaseType, Truncated


class BaseType(IntEnum):
    ENUM = 0x00
    SINT8 = 0x01
    UINT8 = 0x02
    SINT16 = 0x83
    UINT16 = 0x84
    SINT32 = 0x85
    UINT32 = 0x86
    STRING = 0x07
    FLOAT32 = 0x88
    FLOAT64 = 0x89
    UINT8Z = 0x0A
    UINT16Z = 0x8B
    UINT32Z = 0x8C
    BYTE = 0x0D
    SINT64 = 0x8E
    UINT64 = 0x8F
    UINT64Z = 0x90

    @classmethod
    def lookup(cls, identifier):
        """Resolve a base type byte, tolerating a missing endian flag."""
        try:
            return cls(identifier)
        except ValueError:
            pass
        type_num = identifier & 0x1F
        for base_type in cls:
            if base_type.type_num == type_num:
                return base_type
        raise InvalidBaseType(identifier)

    @property
    def type_num(self):
        return self.value & 0x1F

    @property
    def fmt(self):
        return _FORMATS[self]

    @property
    def size(self):
        return struct.calcsize('<' + self.fmt)

    @property
    def invalid(self):
        return _INVALID[self]

    @property
    def is_string(self):
        return self is BaseType.STRING

    def is_invalid(self, value):
        """Check for the "invalid" sentinel of this type.

        Arrays are only invalid when every element is.
        """
        if isinstance(value, list):
            return all(self.is_invalid(v) for v in value)
        if value is None:
            return True
        if self in (BaseType.FLOAT32, BaseType.FLOAT64):
            return isnan(value)
        if self is BaseType.STRING:
            return value == ''
        return value == self.invalid


_FORMATS = {
    BaseType.ENUM: 'B',
    BaseType.SINT8: 'b',
    BaseType.UINT8: 'B',
    BaseType.SINT16: 'h',
    BaseType.UINT16: 'H',
    BaseType.SINT32: 'i',
    BaseType.UINT32: 'I',
    BaseType.STRING: 's',
    BaseType.FLOAT32: 'f',
    BaseType.FLOAT64: 'd',
    BaseType.UINT8Z: 'B',
    BaseType.UINT16Z: 'H',
    BaseType.UINT32Z: 'I',
    BaseType.BYTE: 'B',
    BaseType.SINT64: 'q',
    BaseType.UINT64: 'Q',
    BaseType.UINT64Z: 'Q',
}

_INVALID = {
    BaseType.ENUM: 0xFF,
    BaseType.SINT8: 0x7F,
    BaseType.UINT8: 0xFF,
    BaseType.SINT16: 0x7FFF,
    BaseType.UINT16: 0xFFFF,
    BaseType.SINT32: 0x7FFFFFFF,
    BaseType.UINT32: 0xFFFFFFFF,
    BaseType.STRING: '',
    BaseType.FLOAT32: float('nan'),
    BaseType.FLOAT64: float('nan'),
    BaseType.UINT8Z: 0x00,
    BaseType.UINT16Z: 0x0000,
    BaseType.UINT32Z: 0x00000000,
    BaseType.BYTE: 0xFF,
    BaseType.SINT64: 0x7FFFFFFFFFFFFFFF,
    BaseType.UINT64: 0xFFFFFFFFFFFFFFFF,
    BaseType.UINT64Z: 0x0000000000000000,
}


def decode_string(raw):
    """Up to the first null byte; non-ASCII bytes are dropped."""
    return raw.split(b'\x00')[0].decode('ascii', 'ignore')


def decode_numeric(base_type, raw, endian):
    n_values = len(raw) // base_type.size
    fmt = '{}{}{}'.format(endian, n_values, base_type.fmt)
    values = list(struct.unpack(fmt, raw[:n_values * base_type.size]))
    return values[0] if n_values == 1 else values


def decode(base_type, raw, endian='<'):
    """Decode the bytes of one field.

    Parameters
    ----------
    base_type : BaseType
    raw : bytes
        The whole field, i.e. ``size`` bytes from the field definition.
    endian : str
        ``'<'`` or ``'>'``, as taken from the definition message
        architecture byte. Single byte types ignore it.

    Returns
    -------
    int, float, str or list
        Fields holding more than one value (arrays) come back as lists.
    """
    if not raw:
        return []   # zero-size field
    if len(raw) < base_type.size:
        raise Truncated(base_type.size, len(raw))

    if base_type.is_string:
        return decode_string(raw)
    else:
        return decode_numeric(base_type, raw, endian)
