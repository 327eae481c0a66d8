"""
Decode the Flexible and Interoperable data Transfer (FIT) protocol [1]_.

Only as much of the protocol as Garmin VIRB action cameras need: every record
of a file is decoded (developer fields included), but only the messages the
camera writes get names, scaling and a typed view (see `_messages`).

The reading internals---i.e. the protocol implementation---are in the
`_protocol` module, with the base types in `_basetypes`. The slice of the
"Profile.xlsx" file from the FIT SDK that is needed is in `_profile`.


.. [1] https://www.thisisant.com/resources/fit

"""
from virbio.fit._reading import FitData, read
from virbio.fit._protocol import gen_fit_messages, read_messages
from virbio.fit._messages import (
    CameraEvent, GpsMetadata, SensorCalibration, SensorData,
    TimestampCorrelation, project)
from virbio.fit._sessions import FitSession, extract_sessions
