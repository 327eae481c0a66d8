#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Build *.fit files in memory, record by record, for the tests.

"""
import io
import struct

import pytest


class FitBuilder:
    """Bytes for the parts of a *.fit file.

    Field tuples are (number, size, base type id); developer field tuples are
    (number, size, developer data index).
    """

    @staticmethod
    def header(data_size, header_size=14, signature=b'.FIT',
               protocol=0x10, profile=2132):
        out = struct.pack('<2BHI4s', header_size, protocol, profile,
                          data_size, signature)
        if header_size == 14:
            out += b'\x00\x00'   # header crc, never checked
        return out

    @staticmethod
    def definition(local, global_mesg_num, fields, dev_fields=None,
                   big_endian=False):
        header_byte = 0x40 | local
        if dev_fields is not None:
            header_byte |= 0x20
        endian = '>' if big_endian else '<'

        out = struct.pack('<3B', header_byte, 0, int(big_endian))
        out += struct.pack(endian + 'HB', global_mesg_num, len(fields))
        for field in fields:
            out += struct.pack('<3B', *field)
        if dev_fields is not None:
            out += struct.pack('<B', len(dev_fields))
            for field in dev_fields:
                out += struct.pack('<3B', *field)
        return out

    @staticmethod
    def data(local, fmt, *values):
        return struct.pack('<B', local) + struct.pack(fmt, *values)

    @staticmethod
    def compressed(local, time_offset, fmt, *values):
        header_byte = 0x80 | (local << 5) | time_offset
        return struct.pack('<B', header_byte) + struct.pack(fmt, *values)

    @classmethod
    def file(cls, *records, header_size=14):
        body = b''.join(records)
        return io.BytesIO(cls.header(len(body), header_size) + body +
                          b'\x00\x00')

    # VIRB messages
    # -------------
    @classmethod
    def camera_events(cls, local, events):
        """events: [(timestamp, timestamp_ms, event_type, uuid), ...]"""
        records = [cls.definition(local, 161, [(253, 4, 0x86), (0, 2, 0x84),
                                               (1, 1, 0x00), (2, 16, 0x07)])]
        for timestamp, ms, event_type, uuid in events:
            records.append(cls.data(local, '<IHB16s', timestamp, ms,
                                    event_type, uuid.encode('ascii')))
        return records

    @classmethod
    def correlation(cls, local, utc_timestamp, system_timestamp):
        return [cls.definition(local, 162, [(253, 4, 0x86), (1, 4, 0x86)]),
                cls.data(local, '<II', utc_timestamp, system_timestamp)]

    @classmethod
    def gps(cls, local, points):
        """points: [(timestamp, timestamp_ms, lat_semicircles), ...]"""
        records = [cls.definition(local, 160, [(253, 4, 0x86), (0, 2, 0x84),
                                               (1, 4, 0x85), (2, 4, 0x85)])]
        for timestamp, ms, lat in points:
            records.append(cls.data(local, '<IHii', timestamp, ms, lat, 0))
        return records


@pytest.fixture
def builder():
    return FitBuilder
