#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Implement the Flexible and Interoperable data Transfer (FIT) protocol.

Decode only. The file layout is:

    +--------+--------+--------+-----+--------+-----+
    | header | record | record | ... | record | CRC |
    +--------+--------+--------+-----+--------+-----+

where each record is either a definition message, describing the layout of
the data messages that follow for a local message number, or a data message.
The layouts live in the stream itself, so records can only be read in order
and a single bad record loses every record after it.

"""
from contextlib import contextmanager
import logging
from struct import unpack

from virbio.fit._basetypes import BaseType, decode
from virbio.fit._profile import (
    GLOBAL_MESG_NUMS, MESG_NUMS_BY_NAME, MESSAGE_TYPES)
from virbio._util.exceptions import (
    InvalidHeader, Truncated, UndefinedLocalMessage, UnknownFieldDescription)


log = logging.getLogger(__name__)

EMPTY_DICT = {}    # single instance to save some memory

HEADER_SIZE_NO_CRC = 12
PROTOCOL_VERSION_MAJOR = 2    # newest major version understood

FIELD_DESCRIPTION = MESG_NUMS_BY_NAME['field_description']


class FitHeader:
    """From the FIT SDK release 20.03.00

    =====  ==========================  =====================================
    Byte   Description                 Notes
    =====  ==========================  =====================================
      0    Header size                 12 (legacy) or 14
      1    Protocol version
     2-3   Profile version             little endian
     4-7   Data size                   little endian, excludes header + CRC
     8-11  Data type                   ASCII ".FIT"
    12-13  CRC                         optional, not validated here
    =====  ==========================  =====================================
    """
    __slots__ = ('header_size', 'protocol_version', 'profile_version',
                 'data_size', 'crc')

    def __init__(self, header_size, protocol, profile, data_size, crc=None):
        self.header_size = header_size
        self.data_size = data_size
        self.crc = crc
        self.set_version_info(protocol, profile)

    def set_version_info(self, prot, prof):
        """Decode version info the same way the FIT SDK does."""
        self.protocol_version = float(
            '{:d}.{:d}'.format(prot >> 4, prot & ((1 << 4) - 1)))
        self.profile_version = float(
            '{:d}.{:02d}'.format(prof // 100, prof % 100))

    def __repr__(self):
        return ('FitHeader(header_size={0.header_size}, '
                'protocol={0.protocol_version}, '
                'profile={0.profile_version}, '
                'data_size={0.data_size})'.format(self))


class FieldDescription:
    """The meaning of a developer field, from a field_description message.

    Developer fields carry no profile entry: their name, type, scale, offset
    and units are declared by a field_description (global message 206) data
    message that has to appear *before* any definition that uses them.
    """
    __slots__ = ('developer_data_index', 'field_number', 'base_type', 'name',
                 'scale', 'offset', 'units', 'native_mesg_num',
                 'native_field_num')

    def __init__(self, developer_data_index, field_number, base_type,
                 name=None, scale=None, offset=None, units=None,
                 native_mesg_num=None, native_field_num=None):
        self.developer_data_index = developer_data_index
        self.field_number = field_number
        self.base_type = base_type
        self.name = name
        self.scale = scale
        self.offset = offset
        self.units = units
        self.native_mesg_num = native_mesg_num
        self.native_field_num = native_field_num

    @classmethod
    def from_message(cls, message):
        """Build from a decoded field_description data message."""
        get = message.valid
        return cls(developer_data_index=get(0),
                   field_number=get(1),
                   base_type=BaseType.lookup(get(2, BaseType.BYTE)),
                   name=get(3),
                   scale=get(6),
                   offset=get(7),
                   units=get(8),
                   native_mesg_num=get(14),
                   native_field_num=get(15))

    @property
    def key(self):
        return self.field_number, self.developer_data_index

    def as_profile_entry(self):
        """Same shape as the MESSAGE_TYPES entries, for FieldDefinition."""
        entry = {'field_name': self.name or 'unknown'}
        if self.scale:
            entry['scale'] = self.scale
        if self.offset:
            entry['offset'] = self.offset
        if self.units:
            entry['units'] = self.units
        return entry


class FieldDescriptionRegistry:
    """Developer field descriptions seen so far in one file.

    Grows as the file is read; a lookup only ever sees the descriptions that
    came earlier in the stream.
    """
    def __init__(self):
        self._descriptions = {}

    def add(self, description):
        log.debug('developer field %d (index %d) described as %r',
                  description.field_number, description.developer_data_index,
                  description.name)
        self._descriptions[description.key] = description

    def resolve(self, field_number, developer_data_index):
        try:
            return self._descriptions[field_number, developer_data_index]
        except KeyError:
            raise UnknownFieldDescription(field_number, developer_data_index)

    def __contains__(self, key):
        return key in self._descriptions

    def __len__(self):
        return len(self._descriptions)


class FitFile:
    """A file-like object specific to *.fit files.

    One instance holds all of the state of one decode pass.

    Attributes
    ----------
    bytes_left : int
        Bytes of the data section left to be read. Initialised to its proper
        value when the file header is read.
    header : FitHeader
        Set when the file header is read.
    local_messages : dict
        The active definition message for each local message number.
    field_descriptions : FieldDescriptionRegistry
        Developer field descriptions read so far.
    data_count : int
        Number of data messages read so far.
    reader : _io.BufferedReader
        Open file to be read.
    """
    def __init__(self, reader):
        """Initialise a new FitFile instance.

        Parameters
        ----------
        reader : _io.BufferedReader
            Returned value of the ``open`` builtin, or any binary file-like
            object.
        """
        self.reader = reader
        self.bytes_left = 0
        self.header = None
        self.crc = None
        self.local_messages = {}   # i.e. definition messages, by number
        self.field_descriptions = FieldDescriptionRegistry()
        self.data_count = 0

    def read(self, size):
        """Read from an open file, keeping track of bytes left."""
        data = self.reader.read(size)
        if len(data) < size:
            raise Truncated(size, len(data))
        self.bytes_left -= size
        return data

    def skip_bytes(self, size):
        self.read(size)

    def next_index(self):
        index, self.data_count = self.data_count, self.data_count + 1
        return index


class FitMessageHeader:
    """From the FIT SDK release 20.03.00

    The record header is a one byte bit field. There are actually two types of
    record header: normal header and compressed timestamp header. The header
    type is indicated in the most significant bit (msb) of the record header.
    """
    __slots__ = ('_message_cls', 'local_message_type', 'time_offset',
                 'has_developer_data')

    def message_cls(self, fitfile):
        return self._message_cls(self, fitfile)   # partial'd, kinda


class NormalHeader(FitMessageHeader):
    """From the FIT SDK release 20.03.00

    Normal Header Bit Field Description
    -----------------------------------

    =====  =============  ========================
    Bit        Value      Description
    =====  =============  ========================
      7          0        Normal header
      6        0 or 1     Message type:
                            1: definition message
                            0: data message
      5        0 or 1     Developer data flag
                          (definition messages)
      4          0        Reserved
     0-3        0-15      Local message type
    =====  =============  ========================
    """
    __slots__ = tuple()

    def __init__(self, header_byte):
        is_definition = bool(header_byte & 0x40)
        self._message_cls = DefinitionMessage if is_definition else DataMessage
        self.has_developer_data = is_definition and bool(header_byte & 0x20)
        self.local_message_type = header_byte & 0xF    # bits 0-3
        self.time_offset = None


class CompressedTimestampHeader(FitMessageHeader):
    """From the FIT SDK release 20.03.00

    =====  =============  ========================
    Bit        Value      Description
    =====  =============  ========================
      7          1        Compressed timestamp
     5-6        0-3       Local message type
     0-4        0-31      Time offset (seconds)
    =====  =============  ========================

    NOTE: this type of record header is used for a *data message only*.
    """
    __slots__ = tuple()

    def __init__(self, header_byte):
        self._message_cls = DataMessage
        self.has_developer_data = False
        self.local_message_type = (header_byte >> 5) & 0x3   # bits 5-6
        self.time_offset = header_byte & 0x1F                # bits 0-4


class DefinitionMessage:
    """From the FIT SDK release 20.03.00

    Definition Message Contents
    ---------------------------

    ======  =======================  =============  ===========================
    Byte    Description                 Length      Value
    (bytes)
    ======  =======================  =============  ===========================
      0     Reserved                       1         0
      1     Architecture                   1         0 or 1
                                                       0: little endian
                                                       1: big endian
     2-3    Global message number          2         Unique to each message
      4     Fields                         1         Number of fields in the
                                                     data message
      5     Field definition(s)            3         See FieldDefinition
     ...                              (per field)
      .     Developer fields               1         Only with the developer
                                                     data flag set
      .     Developer field                3         See
            definition(s)             (per field)    DeveloperFieldDefinition
    ======  =======================  =============  ===========================

    A new definition for a local message number replaces the old one.
    """
    __slots__ = ('header', 'global_mesg_num', 'name', 'endian',
                 'field_defs', 'dev_field_defs')

    def __init__(self, header, fitfile):
        self.header = header

        __, big_endian = unpack('<2B', fitfile.read(2))   # ignore reserved
        self.endian = '>' if big_endian else '<'

        # This message's own architecture applies from here on.
        self.global_mesg_num, field_count = unpack(
            self.endian + 'HB', fitfile.read(3))
        self.name = GLOBAL_MESG_NUMS.get(self.global_mesg_num, 'unknown')
        message_type = MESSAGE_TYPES.get(self.name, EMPTY_DICT)

        self.field_defs = [FieldDefinition.from_fitfile(fitfile, message_type)
                           for _ in range(field_count)]

        self.dev_field_defs = []
        if header.has_developer_data:
            dev_field_count, = unpack('<B', fitfile.read(1))
            self.dev_field_defs = [
                DeveloperFieldDefinition.from_fitfile(fitfile)
                for _ in range(dev_field_count)]

        log.debug('local message %d defined as %s (%d) with %d field(s)',
                  header.local_message_type, self.name, self.global_mesg_num,
                  len(self.field_defs) + len(self.dev_field_defs))

        # Save this local message.
        fitfile.local_messages[header.local_message_type] = self

    @property
    def size(self):
        """Bytes taken by each data message using this definition."""
        return sum(field_def.size
                   for field_def in self.field_defs + self.dev_field_defs)


class FieldDefinition:
    """From the FIT SDK release 20.03.00

    Field Definition Contents
    -------------------------

    ======  =================  ===============================================
     Byte    Name               Description
    ======  =================  ===============================================
      0     Field definition   Defined in the global FIT profile for the
            number             specified FIT message.
      1     Size               Size (in bytes) of the specified FIT message's
                               field.
      2     Base type          Base type of the specified FIT message's field.
    ======  =================  ===============================================

    """
    __slots__ = ('number', 'size', 'base_type', 'data')

    def __init__(self, number, size, base_type, data=EMPTY_DICT):
        if size == 0 or size % base_type.size:
            log.warning('field %d: size %d does not fit base type %s, '
                        'reading it as bytes', number, size, base_type.name)
            base_type = BaseType.BYTE
        self.number = number
        self.size = size
        self.base_type = base_type
        self.data = data

    @classmethod
    def from_fitfile(cls, fitfile, message_type=EMPTY_DICT):
        # NOTE: reading single bytes, so no need to apply endianness here.
        number, size, base_type_num = unpack('<3B', fitfile.read(3))
        return cls(number, size, BaseType.lookup(base_type_num),
                   message_type.get(number, EMPTY_DICT))

    @property
    def name(self):
        return self.data.get('field_name', 'unknown')

    @property
    def units(self):
        return self.data.get('units', '')

    def read(self, fitfile, endian):
        """Parse data for this field definition from the file."""
        return decode(self.base_type, fitfile.read(self.size), endian)


class DeveloperFieldDefinition(FieldDefinition):
    """From the FIT SDK release 20.03.00

    ======  ====================  ============================================
     Byte    Name                  Description
    ======  ====================  ============================================
      0     Field number          Maps to the field_definition_number of a
                                  field_description message.
      1     Size                  Size (in bytes) of the field.
      2     Developer data index  Maps to the developer_data_index of a
                                  developer_data_id message.
    ======  ====================  ============================================

    The base type comes from the matching field description, which must have
    been read already.
    """
    __slots__ = ('developer_data_index', 'description')

    def __init__(self, number, size, developer_data_index, description):
        self.developer_data_index = developer_data_index
        self.description = description
        super().__init__(number, size, description.base_type,
                         description.as_profile_entry())

    @classmethod
    def from_fitfile(cls, fitfile):
        number, size, developer_data_index = unpack('<3B', fitfile.read(3))
        description = fitfile.field_descriptions.resolve(
            number, developer_data_index)
        return cls(number, size, developer_data_index, description)


class DataMessage:
    """The useful part of a *.fit file.

    The header identifies an associated definition message. We pull the
    field definitions from that message and use them to parse data from
    the fitfile. Values are kept as read; see `valid` and `decode` for
    the cleaned up versions.
    """
    __slots__ = ('header', 'global_mesg_num', 'name', 'field_defs',
                 'field_values', 'dev_field_defs', 'dev_field_values',
                 'index')

    def __init__(self, header, fitfile):
        self.header = header

        def_message = fitfile.local_messages.get(header.local_message_type)
        if def_message is None:
            raise UndefinedLocalMessage(header.local_message_type)

        self.global_mesg_num = def_message.global_mesg_num
        self.name = def_message.name

        endian = def_message.endian
        self.field_defs = def_message.field_defs
        self.field_values = [field.read(fitfile, endian)
                             for field in self.field_defs]
        self.dev_field_defs = def_message.dev_field_defs
        self.dev_field_values = [field.read(fitfile, endian)
                                 for field in self.dev_field_defs]

        self.index = fitfile.next_index()

    @property
    def time_offset(self):
        """Seconds from a compressed timestamp header, else None."""
        return self.header.time_offset

    def get(self, number, default=None):
        """Raw value of an ordinary field by its definition number."""
        for field_def, value in zip(self.field_defs, self.field_values):
            if field_def.number == number:
                return value
        return default

    def valid(self, number, default=None):
        """Like `get`, but invalid values give `default`."""
        for field_def, value in zip(self.field_defs, self.field_values):
            if field_def.number == number:
                if field_def.base_type.is_invalid(value):
                    return default
                return value
        return default

    def scaled(self, number, default=None):
        """Like `valid`, with the profile scale and offset applied."""
        for field_def, value in zip(self.field_defs, self.field_values):
            if field_def.number == number:
                if field_def.base_type.is_invalid(value):
                    return default
                return apply_scale_offset(field_def, value)
        return default

    def developer_fields(self):
        """{name: value} for developer fields, scale and offset applied."""
        return {field_def.name: apply_scale_offset(field_def, value)
                for field_def, value in zip(self.dev_field_defs,
                                            self.dev_field_values)}

    def fields(self):
        """[(number, name, value, units), ...] for the ordinary fields.

        Scale and offset applied, invalid values left out.
        """
        return [(field_def.number, field_def.name,
                 apply_scale_offset(field_def, value), field_def.units)
                for field_def, value in zip(self.field_defs, self.field_values)
                if not field_def.base_type.is_invalid(value)]

    def decode(self):
        """Decode like the FitCSVTool.

        Invalid values are left out.

        Returns
        -------
        [(name, value, units), (name, value, units), ...]
        """
        defs_values = zip(self.field_defs + self.dev_field_defs,
                          self.field_values + self.dev_field_values)
        return [(field_def.name, apply_scale_offset(field_def, value),
                 field_def.units)
                for field_def, value in defs_values
                if not field_def.base_type.is_invalid(value)]

    def __repr__(self):
        return 'DataMessage({!r}, global={:d}, index={:d})'.format(
            self.name, self.global_mesg_num, self.index)


def read_file_header(fitfile):
    """Read the *.fit file header, modifying `fitfile` in place.

    Attributes set on `fitfile`:
        + header
        + bytes_left

    The file object is also advanced to the start of the first message header.
    """
    try:
        header_data = fitfile.read(HEADER_SIZE_NO_CRC)
    except Truncated:
        raise InvalidHeader('file is too short for a fit header')

    if header_data[8:12] != b'.FIT':
        raise InvalidHeader()

    # Larger fields are explicitly little endian from SDK.
    header_size, protocol, profile, data_size = unpack('<2BHI4x', header_data)
    if protocol >> 4 > PROTOCOL_VERSION_MAJOR:
        raise InvalidHeader('unsupported protocol version %d.%d' %
                            (protocol >> 4, protocol & 0x0F))

    crc = None
    extra_header = header_size - HEADER_SIZE_NO_CRC
    if extra_header:
        if extra_header < 2:
            raise InvalidHeader('irregular file header size (%d)' %
                                header_size)
        try:
            crc, = unpack('<H', fitfile.read(2))
            fitfile.skip_bytes(extra_header - 2)
        except Truncated:
            raise InvalidHeader('file is too short for its declared header')

    fitfile.header = FitHeader(header_size, protocol, profile, data_size, crc)
    fitfile.bytes_left = data_size
    return fitfile.header


def read_fit_message(fitfile):
    """Parse a message (header + contents)."""
    header_byte, = unpack('<B', fitfile.read(1))
    # A value of 0 in bit 7 indicates that this is a normal header.
    header_cls = (CompressedTimestampHeader if (header_byte & 0x80) else
                  NormalHeader)
    header = header_cls(header_byte)

    message = header.message_cls(fitfile)

    if (isinstance(message, DataMessage) and
            message.global_mesg_num == FIELD_DESCRIPTION):
        fitfile.field_descriptions.add(FieldDescription.from_message(message))

    return message


def read_crc(fitfile):
    """Consume the trailing CRC, if there is one. It is not checked."""
    raw = fitfile.reader.read(2)
    fitfile.crc = unpack('<H', raw)[0] if len(raw) == 2 else None
    return fitfile.crc


@contextmanager
def open_fit(source):
    """Open a path, or wrap an already open binary file object."""
    if hasattr(source, 'read'):
        yield FitFile(source)
        return

    reader = open(source, 'rb')
    try:
        yield FitFile(reader)
    finally:
        reader.close()


def apply_scale_offset(field_def, field_value):
    """From the FIT SDK release 20.03.00

    The FIT SDK supports applying a scale or offset to binary fields. This
    allows efficient representation of values within a particular range and
    provides a convenient method for representing floating point values in
    integer systems. A scale or offset may be specified in the FIT profile for
    binary fields (sint/uint etc.) only. When specified, the binary quantity
    is divided by the scale factor and then the offset is subtracted, yielding
    a floating point quantity.
    """
    scale = field_def.data.get('scale', 1)
    offset = field_def.data.get('offset', 0)
    if (scale == 1 and offset == 0) or isinstance(field_value, str):
        return field_value
    if isinstance(field_value, list):
        return [value / scale - offset for value in field_value]
    return field_value / scale - offset


def gen_fit_messages(source):
    """Generator function for iterating over *.fit file messages.

    Parameters
    ----------
    source : str or file-like
        Path to the ANT/Garmin fit file, or an open binary file.

    Yields
    ------
    DefinitionMessage or DataMessage
        Parsed messages from `source`, in file order.

    Raises
    ------
    FitDecodeError
        On the first record that cannot be read. Nothing after it can be.
    """
    with open_fit(source) as fitfile:
        yield from _gen_messages(fitfile)


def _gen_messages(fitfile):
    read_file_header(fitfile)       # inplace changes

    while fitfile.bytes_left > 0:
        yield read_fit_message(fitfile)

    read_crc(fitfile)


def read_fit(source, keep=None):
    """Read a whole *.fit file.

    Parameters
    ----------
    source : str or file-like
    keep : container of int, optional
        Global message numbers of the data messages to return. All of them
        are decoded regardless (the stream can't be skipped through), only
        the returned list is filtered.

    Returns
    -------
    (FitHeader, [DataMessage, ...])
    """
    with open_fit(source) as fitfile:
        messages = [message for message in _gen_messages(fitfile)
                    if isinstance(message, DataMessage) and
                    (keep is None or message.global_mesg_num in keep)]
        return fitfile.header, messages


def read_messages(source):
    """All data messages of a *.fit file, or an exception; never a part."""
    __, messages = read_fit(source)
    return messages
