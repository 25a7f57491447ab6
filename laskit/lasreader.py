import logging
import os
from pathlib import Path

from . import errors
from .header import LasHeader
from .point import record
from .vlrs.vlrlist import VLRList

logger = logging.getLogger(__name__)

LAS_EXTENSION = ".las"


def _raise_read_only(*args, **kwargs):
    raise errors.ReadOnlyViolation("This file has been opened in read-only mode")


class LasReader:
    """Read handle of a LAS file

    The whole file is decoded when the reader is created:
    header, then vlrs, then points. Either everything is decoded
    or an exception is raised.

    Parameters
    ----------
    source: str or pathlib.Path or file object
        a filename (must end with '.las') or a binary stream
    """

    def __init__(self, source):
        if isinstance(source, (str, Path)):
            if os.path.splitext(str(source))[1].lower() != LAS_EXTENSION:
                raise errors.WrongFileExtension(
                    "The file extension of '{}' is not '{}'".format(source, LAS_EXTENSION)
                )
            self.filename = str(source)
            with open(source, mode="rb") as f:
                buffer = f.read()
        else:
            self.filename = None
            buffer = source.read()
        self._decode(buffer)

    @classmethod
    def from_buffer(cls, buffer):
        """Decodes LAS content that is already in memory"""
        reader = cls.__new__(cls)
        reader.filename = None
        reader._decode(buffer)
        return reader

    def _decode(self, buffer):
        self.file_size = len(buffer)
        header = LasHeader.read_from(buffer)

        vlrs = VLRList.read_from(buffer, header.header_size, header.number_of_vlrs)
        vlrs_end = header.header_size + vlrs.size_in_bytes()
        if vlrs_end > header.offset_to_points:
            raise errors.LaskitError(
                "The vlrs end at offset {}, after the start of the points ({})".format(
                    vlrs_end, header.offset_to_points
                )
            )
        if vlrs_end < header.offset_to_points:
            logger.warning(
                "There are {} bytes between the vlrs and the points, they are ignored".format(
                    header.offset_to_points - vlrs_end
                )
            )

        points = record.PackedPointRecord.from_buffer(
            buffer,
            header.offset_to_points,
            header.point_format,
            header.number_of_points,
            header.scales,
            header.offsets,
            point_size=header.point_record_length,
        )
        logger.debug(
            "Read {} points of format {}".format(len(points), header.point_format)
        )

        self.header = header
        self.vlrs = vlrs
        self.points = points

    @property
    def version(self):
        return self.header.version

    @property
    def size(self):
        """Size of the file in megabytes"""
        return self.file_size / 1_000_000.0

    @property
    def x(self):
        return self.points.x

    @property
    def y(self):
        return self.points.y

    @property
    def z(self):
        return self.points.z

    @property
    def intensity(self):
        return self.points.array["intensity"]

    @property
    def return_number(self):
        return self.points.sub_field("return_number")

    @property
    def classification(self):
        return self.points.sub_field("classification")

    @property
    def gps_time(self):
        """GPS times of the points, empty when the point format has none"""
        return self.points.gps_time

    @property
    def rgb(self):
        """(n, 3) array of colors, empty when the point format has none"""
        return self.points.rgb

    def get_xyz_data(self, index):
        point = self.points.point_at(index)
        return record.XYZData(point.x, point.y, point.z)

    def get_xyzi_data(self, index):
        point = self.points.point_at(index)
        return record.XYZIData(point.x, point.y, point.z, point.intensity)

    add_header = _raise_read_only
    add_vlr = _raise_read_only
    add_point_record = _raise_read_only
    write = _raise_read_only

    def __getitem__(self, index):
        """Returns the PointRecord0/1/2/3 at index"""
        return self.points[index]

    def __iter__(self):
        return iter(self.points)

    def __len__(self):
        return len(self.points)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass

    def __repr__(self):
        return "<LasReader({}, point fmt: {}, {} points, {} vlrs)>".format(
            self.version, self.header.point_format, len(self), len(self.vlrs)
        )

    def __str__(self):
        return str(self.header)
