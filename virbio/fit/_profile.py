#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
The slice of the FIT SDK profile (Profile.xlsx) that VIRB cameras need.

MESSAGE_TYPES is keyed by message name, then by field definition number, the
same shape as the full profile. Fields without scale or offset leave those
keys out.

"""

GLOBAL_MESG_NUMS = {
    0: 'file_id',
    18: 'session',
    19: 'lap',
    20: 'record',
    21: 'event',
    23: 'device_info',
    34: 'activity',
    49: 'file_creator',
    160: 'gps_metadata',
    161: 'camera_event',
    162: 'timestamp_correlation',
    164: 'gyroscope_data',
    165: 'accelerometer_data',
    167: 'three_d_sensor_calibration',
    169: 'video_frame',
    206: 'field_description',
    207: 'developer_data_id',
    208: 'magnetometer_data',
    209: 'barometer_data',
    210: 'one_d_sensor_calibration',
}

MESG_NUMS_BY_NAME = {name: num for num, name in GLOBAL_MESG_NUMS.items()}

TIMESTAMP = 253    # field number shared by every message that has one

_TIMESTAMP_FIELD = {'field_name': 'timestamp', 'units': 's'}

_SENSOR_DATA_COMMON = {
    TIMESTAMP: _TIMESTAMP_FIELD,
    0: {'field_name': 'timestamp_ms', 'units': 'ms'},
    1: {'field_name': 'sample_time_offset', 'units': 'ms'},
}

MESSAGE_TYPES = {
    'file_id': {
        0: {'field_name': 'type'},
        1: {'field_name': 'manufacturer'},
        2: {'field_name': 'product'},
        3: {'field_name': 'serial_number'},
        4: {'field_name': 'time_created'},
        5: {'field_name': 'number'},
        8: {'field_name': 'product_name'},
    },
    'gps_metadata': {
        TIMESTAMP: _TIMESTAMP_FIELD,
        0: {'field_name': 'timestamp_ms', 'units': 'ms'},
        1: {'field_name': 'position_lat', 'units': 'semicircles'},
        2: {'field_name': 'position_long', 'units': 'semicircles'},
        3: {'field_name': 'enhanced_altitude', 'scale': 5, 'offset': 500,
            'units': 'm'},
        4: {'field_name': 'enhanced_speed', 'scale': 1000, 'units': 'm/s'},
        5: {'field_name': 'heading', 'scale': 100, 'units': 'degrees'},
        6: {'field_name': 'utc_timestamp', 'units': 's'},
        7: {'field_name': 'velocity', 'scale': 100, 'units': 'm/s'},
    },
    'camera_event': {
        TIMESTAMP: _TIMESTAMP_FIELD,
        0: {'field_name': 'timestamp_ms', 'units': 'ms'},
        1: {'field_name': 'camera_event_type'},
        2: {'field_name': 'camera_file_uuid'},
        3: {'field_name': 'camera_orientation'},
    },
    'timestamp_correlation': {
        TIMESTAMP: _TIMESTAMP_FIELD,
        0: {'field_name': 'fractional_timestamp', 'scale': 32768,
            'units': 's'},
        1: {'field_name': 'system_timestamp', 'units': 's'},
        2: {'field_name': 'fractional_system_timestamp', 'scale': 32768,
            'units': 's'},
        3: {'field_name': 'local_timestamp', 'units': 's'},
        4: {'field_name': 'timestamp_ms', 'units': 'ms'},
        5: {'field_name': 'system_timestamp_ms', 'units': 'ms'},
    },
    'gyroscope_data': {
        **_SENSOR_DATA_COMMON,
        2: {'field_name': 'gyro_x', 'units': 'counts'},
        3: {'field_name': 'gyro_y', 'units': 'counts'},
        4: {'field_name': 'gyro_z', 'units': 'counts'},
        5: {'field_name': 'calibrated_gyro_x', 'units': 'deg/s'},
        6: {'field_name': 'calibrated_gyro_y', 'units': 'deg/s'},
        7: {'field_name': 'calibrated_gyro_z', 'units': 'deg/s'},
    },
    'accelerometer_data': {
        **_SENSOR_DATA_COMMON,
        2: {'field_name': 'accel_x', 'units': 'counts'},
        3: {'field_name': 'accel_y', 'units': 'counts'},
        4: {'field_name': 'accel_z', 'units': 'counts'},
        5: {'field_name': 'calibrated_accel_x', 'units': 'g'},
        6: {'field_name': 'calibrated_accel_y', 'units': 'g'},
        7: {'field_name': 'calibrated_accel_z', 'units': 'g'},
    },
    'magnetometer_data': {
        **_SENSOR_DATA_COMMON,
        2: {'field_name': 'mag_x', 'units': 'counts'},
        3: {'field_name': 'mag_y', 'units': 'counts'},
        4: {'field_name': 'mag_z', 'units': 'counts'},
        5: {'field_name': 'calibrated_mag_x', 'units': 'G'},
        6: {'field_name': 'calibrated_mag_y', 'units': 'G'},
        7: {'field_name': 'calibrated_mag_z', 'units': 'G'},
    },
    'barometer_data': {
        **_SENSOR_DATA_COMMON,
        2: {'field_name': 'baro_pres', 'units': 'Pa'},
    },
    'three_d_sensor_calibration': {
        TIMESTAMP: _TIMESTAMP_FIELD,
        0: {'field_name': 'sensor_type'},
        1: {'field_name': 'calibration_factor'},
        2: {'field_name': 'calibration_divisor', 'units': 'counts'},
        3: {'field_name': 'level_shift'},
        4: {'field_name': 'offset_cal'},
        5: {'field_name': 'orientation_matrix', 'scale': 65535},
    },
    'one_d_sensor_calibration': {
        TIMESTAMP: _TIMESTAMP_FIELD,
        0: {'field_name': 'sensor_type'},
        1: {'field_name': 'calibration_factor'},
        2: {'field_name': 'calibration_divisor', 'units': 'counts'},
        3: {'field_name': 'level_shift'},
        4: {'field_name': 'offset_cal'},
    },
    'field_description': {
        0: {'field_name': 'developer_data_index'},
        1: {'field_name': 'field_definition_number'},
        2: {'field_name': 'fit_base_type_id'},
        3: {'field_name': 'field_name'},
        4: {'field_name': 'array'},
        5: {'field_name': 'components'},
        6: {'field_name': 'scale'},
        7: {'field_name': 'offset'},
        8: {'field_name': 'units'},
        9: {'field_name': 'bits'},
        10: {'field_name': 'accumulate'},
        13: {'field_name': 'fit_base_unit_id'},
        14: {'field_name': 'native_mesg_num'},
        15: {'field_name': 'native_field_num'},
    },
    'developer_data_id': {
        0: {'field_name': 'developer_id'},
        1: {'field_name': 'application_id'},
        2: {'field_name': 'manufacturer_id'},
        3: {'field_name': 'developer_data_index'},
        4: {'field_name': 'application_version'},
    },
}

TYPES_INFO = {
    'camera_event_type': {
        0: 'video_start',
        1: 'video_split',
        2: 'video_end',
        3: 'photo_taken',
        4: 'video_second_stream_start',
        5: 'video_second_stream_split',
        6: 'video_second_stream_end',
        7: 'video_split_start',
        8: 'video_second_stream_split_start',
        11: 'video_pause',
        12: 'video_second_stream_pause',
        13: 'video_resume',
        14: 'video_second_stream_resume',
    },
    'camera_orientation': {
        0: 'camera_orientation_0',
        1: 'camera_orientation_90',
        2: 'camera_orientation_180',
        3: 'camera_orientation_270',
    },
    'sensor_type': {
        0: 'accelerometer',
        1: 'gyroscope',
        2: 'compass',
        3: 'barometer',
    },
}

VIDEO_START = 0
VIDEO_END = 2
