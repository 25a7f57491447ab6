"""  This module contains things like the definitions of the point formats dimensions,
the mapping between dimension names and their type and the bit masks
of the composed (bit field) dimensions
"""
from collections import namedtuple

import numpy as np

from .. import errors


def _point_format_to_dtype(point_format, dimensions):
    """build the numpy.dtype for a point format

    Parameters:
    ----------
    point_format : iterable of str
        The dimensions names of the point format
    dimensions : dict
        The dictionary of dimensions
    Returns
    -------
    numpy.dtype
        The dtype for the input point format
    """
    return np.dtype([dimensions[dim_name] for dim_name in point_format])


def _build_point_formats_dtypes(point_format_dimensions, dimensions_dict):
    """Builds the dict mapping point format id to numpy.dtype
    In the dtypes, bit fields are still packed, and need to be unpacked each time
    you want to access them
    """
    return {
        fmt_id: _point_format_to_dtype(point_fmt, dimensions_dict)
        for fmt_id, point_fmt in point_format_dimensions.items()
    }


# Types are explicitly little-endian, LAS files are
DIMENSIONS = {
    "X": ("X", "<i4"),
    "Y": ("Y", "<i4"),
    "Z": ("Z", "<i4"),
    "intensity": ("intensity", "<u2"),
    "bit_fields": ("bit_fields", "u1"),
    "raw_classification": ("raw_classification", "u1"),
    "scan_angle_rank": ("scan_angle_rank", "i1"),
    "user_data": ("user_data", "u1"),
    "point_source_id": ("point_source_id", "<u2"),
    "gps_time": ("gps_time", "<f8"),
    "red": ("red", "<u2"),
    "green": ("green", "<u2"),
    "blue": ("blue", "<u2"),
}

POINT_FORMAT_0 = (
    "X",
    "Y",
    "Z",
    "intensity",
    "bit_fields",
    "raw_classification",
    "scan_angle_rank",
    "user_data",
    "point_source_id",
)

COLOR_FIELDS_NAMES = ("red", "green", "blue")

POINT_FORMAT_DIMENSIONS = {
    0: POINT_FORMAT_0,
    1: POINT_FORMAT_0 + ("gps_time",),
    2: POINT_FORMAT_0 + COLOR_FIELDS_NAMES,
    3: POINT_FORMAT_0 + ("gps_time",) + COLOR_FIELDS_NAMES,
}

# sub fields of the 'bit_fields' dimension
RETURN_NUMBER_MASK = 0b00000111
NUMBER_OF_RETURNS_MASK = 0b00111000
SCAN_DIRECTION_FLAG_MASK = 0b01000000
EDGE_OF_FLIGHT_LINE_MASK = 0b10000000

# sub fields of the 'raw_classification' dimension
CLASSIFICATION_MASK = 0b00000111
SYNTHETIC_MASK = 0b00100000
KEY_POINT_MASK = 0b01000000
WITHHELD_MASK = 0b10000000

SubField = namedtuple("SubField", ("name", "mask", "type"))
COMPOSED_FIELDS = {
    "bit_fields": [
        SubField("return_number", RETURN_NUMBER_MASK, "u1"),
        SubField("number_of_returns", NUMBER_OF_RETURNS_MASK, "u1"),
        SubField("scan_direction_flag", SCAN_DIRECTION_FLAG_MASK, "bool"),
        SubField("edge_of_flight_line", EDGE_OF_FLIGHT_LINE_MASK, "bool"),
    ],
    "raw_classification": [
        SubField("classification", CLASSIFICATION_MASK, "u1"),
        SubField("synthetic", SYNTHETIC_MASK, "bool"),
        SubField("key_point", KEY_POINT_MASK, "bool"),
        SubField("withheld", WITHHELD_MASK, "bool"),
    ],
}

# This Dict maps point_format_ids to their numpy.dtype
# the sub fields are still packed in their composed dimension
ALL_POINT_FORMATS_DTYPE = _build_point_formats_dtypes(POINT_FORMAT_DIMENSIONS, DIMENSIONS)


def supported_point_formats():
    """Returns a set of all the point formats supported in laskit"""
    return set(POINT_FORMAT_DIMENSIONS.keys())


def get_dtype_of_format_id(point_format_id, point_size=None):
    """Returns the numpy.dtype of a point format

    When point_size is bigger than the size of the standard dimensions,
    the dtype is padded so that it matches the record length
    (the trailing bytes are carried but not interpreted)

    Raises
    ------
    errors.PointFormatNotSupported
        If the point format is not in 0..3
    errors.IncompatibleDataFormat
        If the point_size is smaller than the point format requires
    """
    try:
        dtype = ALL_POINT_FORMATS_DTYPE[point_format_id]
    except KeyError:
        raise errors.PointFormatNotSupported(point_format_id) from None

    if point_size is None or point_size == dtype.itemsize:
        return dtype

    if point_size < dtype.itemsize:
        raise errors.IncompatibleDataFormat(
            "Point record length ({}) is smaller than the size of "
            "point format {} ({})".format(point_size, point_format_id, dtype.itemsize)
        )
    return np.dtype(
        {
            "names": dtype.names,
            "formats": [dtype.fields[name][0] for name in dtype.names],
            "offsets": [dtype.fields[name][1] for name in dtype.names],
            "itemsize": point_size,
        }
    )


def size_of_point_format_id(point_format_id):
    return get_dtype_of_format_id(point_format_id).itemsize


def dimension_offset(point_format_id, dim_name):
    """Byte offset of the dimension from the start of a point record"""
    return get_dtype_of_format_id(point_format_id).fields[dim_name][1]


def has_gps_time(point_format_id):
    return "gps_time" in get_dtype_of_format_id(point_format_id).names


def has_rgb(point_format_id):
    return "red" in get_dtype_of_format_id(point_format_id).names
