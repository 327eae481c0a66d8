#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exceptions for this package.

"""


class VirbIOError(Exception):
    """Base exception."""
    _default_message = ''

    def __init__(self, message=None):
        super().__init__(message if message else self._default_message)


class RequiredColumnError(VirbIOError):
    def __init__(self, column):
        super().__init__('{!r} column not found'.format(column))


# Exceptions specific to the fit subpackage
# -----------------------------------------
class FitDecodeError(VirbIOError):
    """Fatal for the file being decoded; record boundaries are lost."""


class InvalidHeader(FitDecodeError):
    _default_message = "this doesn't look like a fit file!"


class Truncated(FitDecodeError):
    def __init__(self, wanted, got):
        message = 'wanted %d bytes but only %d remain' % (wanted, got)
        super().__init__(message)
        self.wanted, self.got = wanted, got


class InvalidBaseType(FitDecodeError):
    def __init__(self, identifier):
        super().__init__('invalid base type (0x%02X)' % identifier)
        self.identifier = identifier


class UnknownFieldDescription(FitDecodeError):
    def __init__(self, field_number, developer_data_index):
        message = ('no field description for developer field %d '
                   '(developer data index %d)' % (field_number,
                                                  developer_data_index))
        super().__init__(message)
        self.field_number = field_number
        self.developer_data_index = developer_data_index


class UndefinedLocalMessage(FitDecodeError):
    def __init__(self, local_message_type):
        super().__init__('invalid local message type (%d)' %
                         local_message_type)
        self.local_message_type = local_message_type


# Exceptions specific to the virb subpackage
# ------------------------------------------
class SessionError(VirbIOError):
    """Recoverable: batch callers skip the session and carry on."""


class NoSuchSession(SessionError):
    _default_message = 'no recording session could be determined'


class MissingVideo(SessionError):
    _default_message = 'no video clips found for recording session'


class MissingTimestampCorrelation(SessionError):
    _default_message = 'no timestamp_correlation message in fit file'
