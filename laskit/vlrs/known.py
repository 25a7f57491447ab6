""" The VLRs whose record data laskit knows how to interpret

Only the GeoTIFF VLRs of the 'LASF_Projection' user are interpreted,
they are kept as raw bytes in the VLR and decoded on demand.
"""
import logging
import struct
from collections import namedtuple

from .. import geotiff, lasio

logger = logging.getLogger(__name__)

PROJECTION_USER_ID = "LASF_Projection"
GEO_KEY_DIRECTORY_RECORD_ID = 34735
GEO_DOUBLE_PARAMS_RECORD_ID = 34736
GEO_ASCII_PARAMS_RECORD_ID = 34737

GeoKeysHeader = namedtuple(
    "GeoKeysHeader",
    ("key_directory_version", "key_revision", "minor_revision", "number_of_keys"),
)
GeoKeyEntry = namedtuple(
    "GeoKeyEntry", ("id", "tiff_tag_location", "count", "value_offset")
)

_GEO_KEY_STRUCT = struct.Struct("<4H")


class GeoKeyDirectory:
    """The content of the GeoKeyDirectoryTag VLR (record id 34735)

    >>> data = struct.pack("<8H", 1, 1, 0, 1, 1024, 0, 1, 1)
    >>> directory = GeoKeyDirectory.from_record_data(data)
    >>> directory.keys[0].id, directory.key_names()
    (1024, ['GTModelTypeGeoKey'])
    """

    def __init__(self, keys_header=None, keys=None):
        self.keys = list(keys) if keys is not None else []
        if keys_header is None:
            keys_header = GeoKeysHeader(1, 1, 0, len(self.keys))
        self.keys_header = keys_header

    @classmethod
    def from_record_data(cls, record_data):
        header_size = _GEO_KEY_STRUCT.size
        if len(record_data) < header_size:
            raise ValueError(
                "GeoKeyDirectory record data is too short ({} bytes)".format(len(record_data))
            )
        keys_header = GeoKeysHeader(*_GEO_KEY_STRUCT.unpack_from(record_data, 0))

        keys_data = record_data[header_size:]
        num_keys = len(keys_data) // _GEO_KEY_STRUCT.size
        if num_keys != keys_header.number_of_keys:
            logger.warning(
                "GeoKeyDirectory announces {} keys, record data holds {}".format(
                    keys_header.number_of_keys, num_keys
                )
            )
            keys_header = keys_header._replace(number_of_keys=num_keys)
        keys = [
            GeoKeyEntry(*values)
            for values in _GEO_KEY_STRUCT.iter_unpack(
                keys_data[: num_keys * _GEO_KEY_STRUCT.size]
            )
        ]
        return cls(keys_header, keys)

    def record_data_bytes(self):
        return _GEO_KEY_STRUCT.pack(*self.keys_header) + b"".join(
            _GEO_KEY_STRUCT.pack(*key) for key in self.keys
        )

    def key_names(self):
        return [geotiff.tag_name(key.id) for key in self.keys]

    def __repr__(self):
        return "<{}({} geo_keys)>".format(self.__class__.__name__, len(self.keys))

    def __str__(self):
        return "\n".join(
            "{}: location {}, count {}, value {}".format(
                geotiff.tag_name(key.id), key.tiff_tag_location, key.count, key.value_offset
            )
            for key in self.keys
        )


def parse_uint16s(record_data):
    """Returns the record data as a list of little-endian uint16,
    a trailing odd byte is ignored
    """
    num = len(record_data) // 2
    return list(struct.unpack_from("<{}H".format(num), record_data))


def parse_doubles(record_data):
    """Returns the record data as a list of little-endian doubles,
    trailing bytes that do not form a double are ignored
    """
    num = len(record_data) // 8
    return list(struct.unpack_from("<{}d".format(num), record_data))


def describe_record_data(record_id, record_data):
    """Renders the record data for display: uint16 values for the
    GeoKeyDirectoryTag, doubles for the GeoDoubleParamsTag and text
    for everything else
    """
    if record_id == GEO_KEY_DIRECTORY_RECORD_ID:
        return str(parse_uint16s(record_data))
    if record_id == GEO_DOUBLE_PARAMS_RECORD_ID:
        return str(parse_doubles(record_data))
    return lasio.to_display(record_data.decode("latin-1")).strip()


def parse_ascii_params(record_data):
    """Returns the null separated strings of the GeoAsciiParamsTag"""
    return [s.decode("latin-1") for s in record_data.rstrip(lasio.NULL_BYTE).split(lasio.NULL_BYTE)]
