import datetime
import logging
import uuid
from collections import namedtuple

import numpy as np

from . import errors, lasio
from .point import dims

logger = logging.getLogger(__name__)

LAS_FILE_SIGNATURE = b'LASF'
WRITTEN_VERSION = (1, 3)
WRITTEN_HEADER_SIZE = 235
WRITTEN_NUM_RETURNS = 5
DEFAULT_SYSTEM_IDENTIFIER = 'laskit'
DEFAULT_GENERATING_SOFTWARE = 'laskit'
DEFAULT_SCALES = (0.01, 0.01, 0.001)

HeaderField = namedtuple('HeaderField', ('name', 'type', 'num'))

# num=None marks the number of points by return,
# its length depends on the file version
LAS_HEADER_FIELDS = (
    HeaderField('file_signature', 'str', 4),
    HeaderField('file_source_id', 'uint16', 1),
    HeaderField('global_encoding', 'uint16', 1),
    HeaderField('project_id1', 'uint32', 1),
    HeaderField('project_id2', 'uint16', 1),
    HeaderField('project_id3', 'uint16', 1),
    HeaderField('project_id4', 'bytes', 8),
    HeaderField('version_major', 'uint8', 1),
    HeaderField('version_minor', 'uint8', 1),
    HeaderField('system_identifier', 'str', 32),
    HeaderField('generating_software', 'str', 32),
    HeaderField('file_creation_day', 'uint16', 1),
    HeaderField('file_creation_year', 'uint16', 1),
    HeaderField('header_size', 'uint16', 1),
    HeaderField('offset_to_points', 'uint32', 1),
    HeaderField('number_of_vlrs', 'uint32', 1),
    HeaderField('point_format', 'uint8', 1),
    HeaderField('point_record_length', 'uint16', 1),
    HeaderField('number_of_points', 'uint32', 1),
    HeaderField('number_of_points_by_return', 'uint32', None),
    HeaderField('x_scale_factor', 'double', 1),
    HeaderField('y_scale_factor', 'double', 1),
    HeaderField('z_scale_factor', 'double', 1),
    HeaderField('x_offset', 'double', 1),
    HeaderField('y_offset', 'double', 1),
    HeaderField('z_offset', 'double', 1),
    HeaderField('max_x', 'double', 1),
    HeaderField('min_x', 'double', 1),
    HeaderField('max_y', 'double', 1),
    HeaderField('min_y', 'double', 1),
    HeaderField('max_z', 'double', 1),
    HeaderField('min_z', 'double', 1),
)

ADDITIONAL_LAS_1_3_FIELDS = (
    HeaderField('waveform_data_start', 'uint64', 1),
)

OFFSET_TO_VERSION_MAJOR = 24
MIN_HEADER_SIZE = 227


def field_length(field, num_returns=WRITTEN_NUM_RETURNS):
    num = num_returns if field.num is None else field.num
    return lasio.type_lengths.get(field.type, 1) * num


def num_returns_for_version(version_major, version_minor):
    """Number of entries in the 'number of points by return' array"""
    if version_major == 1 and version_minor > 3:
        return 7
    return 5


def has_waveform_field(version_major, version_minor):
    return version_major == 1 and version_minor == 3


def header_span(version_major, version_minor):
    """Returns the number of bytes the header fields of this version take"""
    size = sum(
        field_length(field, num_returns_for_version(version_major, version_minor))
        for field in LAS_HEADER_FIELDS
    )
    if has_waveform_field(version_major, version_minor):
        size += sum(field_length(field) for field in ADDITIONAL_LAS_1_3_FIELDS)
    return size


class LasHeader:
    """The public header block of a LAS file

    Fields are named after their meaning in the file, x, y, z
    triplets are also available as numpy arrays through
    :attr:`scales`, :attr:`offsets`, :attr:`mins` and :attr:`maxs`.

    >>> header = LasHeader()
    >>> header.version
    '1.3'
    >>> header.point_record_length
    20
    """

    def __init__(self, point_format=0):
        self.file_signature = LAS_FILE_SIGNATURE.decode()
        self.file_source_id = 0
        self.global_encoding = 0
        self.project_id1 = 0
        self.project_id2 = 0
        self.project_id3 = 0
        self.project_id4 = b'\x00' * 8
        self.version_major, self.version_minor = WRITTEN_VERSION
        self.system_identifier = DEFAULT_SYSTEM_IDENTIFIER
        self.generating_software = DEFAULT_GENERATING_SOFTWARE
        self.file_creation_day = 0
        self.file_creation_year = 0
        self.header_size = WRITTEN_HEADER_SIZE
        self.offset_to_points = WRITTEN_HEADER_SIZE
        self.number_of_vlrs = 0
        self.point_format = point_format
        self.point_record_length = dims.size_of_point_format_id(point_format)
        self.number_of_points = 0
        self.number_of_points_by_return = [0] * WRITTEN_NUM_RETURNS
        self.x_scale_factor, self.y_scale_factor, self.z_scale_factor = DEFAULT_SCALES
        self.x_offset = 0.0
        self.y_offset = 0.0
        self.z_offset = 0.0
        self.max_x = 0.0
        self.min_x = 0.0
        self.max_y = 0.0
        self.min_y = 0.0
        self.max_z = 0.0
        self.min_z = 0.0
        self.waveform_data_start = 0
        self.date = datetime.date.today()

    @property
    def version(self):
        return "{}.{}".format(self.version_major, self.version_minor)

    @version.setter
    def version(self, new_version):
        self.version_major, self.version_minor = map(int, str(new_version).split("."))

    @property
    def date(self):
        """Returns the creation date stored in the header

        Returns
        -------
        datetime.date or None if the stored day/year do not form a valid date
        """
        try:
            return datetime.date(self.file_creation_year, 1, 1) + datetime.timedelta(
                self.file_creation_day - 1
            )
        except (ValueError, OverflowError):
            return None

    @date.setter
    def date(self, date):
        self.file_creation_year = date.year
        self.file_creation_day = date.timetuple().tm_yday

    @property
    def uuid(self):
        """The project GUID, made of the four project_id fields"""
        guid_bytes = (
            self.project_id1.to_bytes(4, 'little')
            + self.project_id2.to_bytes(2, 'little')
            + self.project_id3.to_bytes(2, 'little')
            + bytes(self.project_id4)
        )
        return uuid.UUID(bytes_le=guid_bytes)

    @uuid.setter
    def uuid(self, new_uuid):
        guid_bytes = new_uuid.bytes_le
        self.project_id1 = int.from_bytes(guid_bytes[0:4], 'little')
        self.project_id2 = int.from_bytes(guid_bytes[4:6], 'little')
        self.project_id3 = int.from_bytes(guid_bytes[6:8], 'little')
        self.project_id4 = guid_bytes[8:16]

    @property
    def point_size(self):
        return self.point_record_length

    @property
    def mins(self):
        """Returns de minimum values of x, y, z as a numpy array"""
        return np.array([self.min_x, self.min_y, self.min_z])

    @mins.setter
    def mins(self, value):
        self.min_x, self.min_y, self.min_z = value

    @property
    def maxs(self):
        """Returns de maximum values of x, y, z as a numpy array"""
        return np.array([self.max_x, self.max_y, self.max_z])

    @maxs.setter
    def maxs(self, value):
        self.max_x, self.max_y, self.max_z = value

    @property
    def scales(self):
        """Returns the scaling values of x, y, z as a numpy array"""
        return np.array([self.x_scale_factor, self.y_scale_factor, self.z_scale_factor])

    @scales.setter
    def scales(self, value):
        self.x_scale_factor, self.y_scale_factor, self.z_scale_factor = value

    @property
    def offsets(self):
        """Returns the offsets values of x, y, z as a numpy array"""
        return np.array([self.x_offset, self.y_offset, self.z_offset])

    @offsets.setter
    def offsets(self, value):
        self.x_offset, self.y_offset, self.z_offset = value

    def reset_bounds(self):
        """Sets the bounds to values any point will replace"""
        self.mins = [np.finfo("f8").max] * 3
        self.maxs = [np.finfo("f8").min] * 3

    def partial_reset(self):
        """Prepares a header to describe a file that is being built"""
        self.version_major, self.version_minor = WRITTEN_VERSION
        self.system_identifier = DEFAULT_SYSTEM_IDENTIFIER
        self.generating_software = DEFAULT_GENERATING_SOFTWARE
        self.number_of_vlrs = 0
        self.number_of_points = 0
        self.number_of_points_by_return = [0] * WRITTEN_NUM_RETURNS
        self.reset_bounds()

    def update(self, point):
        """Updates the bounds and counts with a newly added point

        Parameters
        ----------
        point: laskit.point.record.PointData
        """
        self.min_x = min(self.min_x, point.x)
        self.max_x = max(self.max_x, point.x)
        self.min_y = min(self.min_y, point.y)
        self.max_y = max(self.max_y, point.y)
        self.min_z = min(self.min_z, point.z)
        self.max_z = max(self.max_z, point.z)

        return_number = point.bit_field.return_number
        if 1 <= return_number <= len(self.number_of_points_by_return):
            self.number_of_points_by_return[return_number - 1] += 1
        else:
            logger.warning(
                "Return number {} is not counted (counted returns: 1 to {})".format(
                    return_number, len(self.number_of_points_by_return)
                )
            )
        self.number_of_points += 1

    @classmethod
    def read_from(cls, buffer):
        """Decodes the header at the start of the buffer

        Raises
        ------
        errors.InvalidSignature
            if the buffer does not start with 'LASF'
        errors.LaskitError
            if the buffer is too small to hold the header
        """
        signature = lasio.read_bytes(buffer, 0, len(LAS_FILE_SIGNATURE))
        if signature != LAS_FILE_SIGNATURE:
            raise errors.InvalidSignature(
                "File Signature ({}) is not {}".format(signature, LAS_FILE_SIGNATURE)
            )

        if len(buffer) < MIN_HEADER_SIZE:
            raise errors.LaskitError(
                "Buffer too small to contain a header ({} bytes)".format(len(buffer))
            )

        version_major, version_minor = lasio.read(
            buffer, OFFSET_TO_VERSION_MAJOR, 'uint8', num=2
        )
        expected_size = header_span(version_major, version_minor)
        if len(buffer) < expected_size:
            raise errors.LaskitError(
                "Buffer too small to contain a {}.{} header: expected {} bytes, got {}".format(
                    version_major, version_minor, expected_size, len(buffer)
                )
            )

        header = cls.__new__(cls)
        num_returns = num_returns_for_version(version_major, version_minor)
        offset = 0
        for field in LAS_HEADER_FIELDS:
            setattr(header, field.name, _read_field(buffer, offset, field, num_returns))
            offset += field_length(field, num_returns)

        header.waveform_data_start = 0
        if has_waveform_field(version_major, version_minor):
            for field in ADDITIONAL_LAS_1_3_FIELDS:
                setattr(header, field.name, _read_field(buffer, offset, field, num_returns))
                offset += field_length(field)

        header.number_of_points_by_return = list(header.number_of_points_by_return)
        logger.debug("Read {} header ({} bytes)".format(header.version, offset))
        return header

    def write_to(self, buffer, offset=0):
        """Encodes the header in the buffer as a 1.3 header.

        The version, header size and creation date of this header
        are updated to what is written.

        Returns
        -------
        int
            number of bytes written
        """
        self.version_major, self.version_minor = WRITTEN_VERSION
        self.header_size = WRITTEN_HEADER_SIZE
        self.date = datetime.date.today()

        start = offset
        for field in LAS_HEADER_FIELDS + ADDITIONAL_LAS_1_3_FIELDS:
            if field.num is None:
                value = self._return_counts_to_write()
            else:
                value = getattr(self, field.name)
            offset += _write_field(buffer, offset, field, value)

        assert offset - start == WRITTEN_HEADER_SIZE
        return offset - start

    def _return_counts_to_write(self):
        counts = list(self.number_of_points_by_return)
        if any(counts[WRITTEN_NUM_RETURNS:]):
            logger.warning(
                "Received return numbers up to {}, truncating to {} for header.".format(
                    len(counts), WRITTEN_NUM_RETURNS
                )
            )
        counts = counts[:WRITTEN_NUM_RETURNS]
        return counts + [0] * (WRITTEN_NUM_RETURNS - len(counts))

    def __copy__(self):
        new = self.__class__.__new__(self.__class__)
        new.__dict__.update(self.__dict__)
        new.number_of_points_by_return = list(self.number_of_points_by_return)
        return new

    def __eq__(self, other):
        if not isinstance(other, LasHeader):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __repr__(self):
        return "<LasHeader({})>".format(self.version)

    def __str__(self):
        lines = [
            "File Signature: {}".format(self.file_signature),
            "File Source ID: {}".format(self.file_source_id),
            "Global Encoding: {}".format(self.global_encoding),
            "Project ID1: {}".format(self.project_id1),
            "Project ID2: {}".format(self.project_id2),
            "Project ID3: {}".format(self.project_id3),
            "Project ID4: {}".format(list(self.project_id4)),
            "Version: {}".format(self.version),
            "System ID: {}".format(lasio.to_display(self.system_identifier).strip()),
            "Generating Software: {}".format(
                lasio.to_display(self.generating_software).strip()
            ),
            "File Creation Day: {}".format(self.file_creation_day),
            "File Creation Year: {}".format(self.file_creation_year),
            "Header Size: {}".format(self.header_size),
            "Offset to Points: {}".format(self.offset_to_points),
            "Number of VLRs: {}".format(self.number_of_vlrs),
            "Point Format: {}".format(self.point_format),
            "Point Record Length: {}".format(self.point_record_length),
            "Num. of Points: {}".format(self.number_of_points),
            "Num. Points by Return: {}".format(list(self.number_of_points_by_return)),
            "X Scale Factor: {:.4f}".format(self.x_scale_factor),
            "Y Scale Factor: {:.4f}".format(self.y_scale_factor),
            "Z Scale Factor: {:.4f}".format(self.z_scale_factor),
            "X Offset: {:.4f}".format(self.x_offset),
            "Y Offset: {:.4f}".format(self.y_offset),
            "Z Offset: {:.4f}".format(self.z_offset),
            "Min. X: {:.4f}".format(self.min_x),
            "Max. X: {:.4f}".format(self.max_x),
            "Min. Y: {:.4f}".format(self.min_y),
            "Max. Y: {:.4f}".format(self.max_y),
            "Min. Z: {:.4f}".format(self.min_z),
            "Max. Z: {:.4f}".format(self.max_z),
        ]
        if self.version_major == 1 and self.version_minor >= 3:
            lines.append("Waveform Data Start: {}".format(self.waveform_data_start))
        return "\n".join(lines)


def _read_field(buffer, offset, field, num_returns):
    if field.type == 'str':
        return lasio.read_str(buffer, offset, field.num)
    if field.type == 'bytes':
        return lasio.read_bytes(buffer, offset, field.num)
    num = num_returns if field.num is None else field.num
    return lasio.read(buffer, offset, field.type, num=num)


def _write_field(buffer, offset, field, value):
    if field.type == 'str':
        return lasio.write_str(buffer, offset, value, field.num)
    if field.type == 'bytes':
        value = bytes(value)[:field.num]
        return lasio.write_bytes(buffer, offset, value + b'\x00' * (field.num - len(value)))
    num = WRITTEN_NUM_RETURNS if field.num is None else field.num
    return lasio.write(buffer, offset, value, field.type, num=num)
