import logging
import math
from copy import copy
from pathlib import Path

from . import errors, lasio
from .header import WRITTEN_HEADER_SIZE, LasHeader
from .point import dims, record
from .vlrs.vlrlist import VLRList

logger = logging.getLogger(__name__)


class LasWriter:
    """Builds a LAS file in memory and writes it in one go

    >>> import io
    >>> dest = io.BytesIO()
    >>> with LasWriter(dest) as writer:
    ...     writer.add_point_record(record.PointRecord0(record.PointData(1.0, 2.0, 3.0)))
    >>> len(dest.getvalue())
    255

    Parameters
    ----------
    destination: str or pathlib.Path or file object
        where the file is written
    header: laskit.header.LasHeader, optional
        the header to start from, it is copied. A point format 0
        header is used when none is given
    recompute_offsets: bool
        whether the x, y, z offsets are derived from the minimum
        bounds of the points when writing
    """

    def __init__(self, destination, header=None, recompute_offsets=True):
        self.destination = destination
        self.recompute_offsets = recompute_offsets
        self.vlrs = VLRList()
        self.done = False
        self._points = []
        self._gps_times = []
        self._rgb_data = []
        self.header = None
        self.add_header(header if header is not None else LasHeader())

    def _raise_if_done(self):
        if self.done:
            raise errors.LaskitError("The file has already been written")

    def add_header(self, header):
        """Sets the header of the file, the header is copied.

        The copy is prepared to describe the file being built:
        version 1.3, no vlrs, no points, bounds that the first point replaces.
        """
        self._raise_if_done()
        if self._points:
            raise errors.LaskitError("The header must be set before adding points")

        # raises if the point format is not supported
        point_size = dims.size_of_point_format_id(header.point_format)

        self.header = copy(header)
        self.header.partial_reset()
        self.header.point_record_length = point_size
        self.header.number_of_vlrs = len(self.vlrs)

    def add_vlr(self, vlr):
        self._raise_if_done()
        self.vlrs.append(vlr)
        self.header.number_of_vlrs += 1

    def add_point_record(self, point_record):
        """Adds a point record (PointRecord0, 1, 2 or 3) to the file,
        it must match the point format of the header.

        Raises
        ------
        errors.IncompatibleDataFormat
            if the record is not of the header's point format
        """
        self._raise_if_done()
        expected_class = record.record_class_for_format(self.header.point_format)
        if not isinstance(point_record, expected_class):
            raise errors.IncompatibleDataFormat(
                "Cannot add a {} to a file of point format {}".format(
                    type(point_record).__name__, self.header.point_format
                )
            )

        point = point_record.point.copy()
        self._points.append(point)
        self.header.update(point)
        if expected_class.has_gps_time:
            self._gps_times.append(point_record.gps_time)
        if expected_class.has_rgb:
            self._rgb_data.append(point_record.rgb_data)

    def __len__(self):
        return len(self._points)

    def _computed_offsets(self):
        return [
            math.floor(self.header.min_x / 1000.0) * 1000.0,
            math.floor(self.header.min_y / 1000.0) * 1000.0,
            float(math.floor(self.header.min_z)),
        ]

    def encode(self):
        """Returns the bytes of the file.

        The header is updated with what is written
        (offsets, bounds of the quantized points, sizes, creation date)

        Raises
        ------
        OverflowError
            if a coordinate does not fit in the file with the header's scales,
            the header is left untouched
        """
        offsets = self.header.offsets
        if self.recompute_offsets and self._points:
            offsets = self._computed_offsets()

        point_format = self.header.point_format
        points = record.PackedPointRecord.from_points(
            self._points,
            point_format,
            self.header.scales,
            offsets,
            gps_times=self._gps_times if dims.has_gps_time(point_format) else None,
            rgb_data=self._rgb_data if dims.has_rgb(point_format) else None,
        )

        self.header.offsets = offsets
        if len(points) > 0:
            xs, ys, zs = points.x, points.y, points.z
            self.header.mins = [float(xs.min()), float(ys.min()), float(zs.min())]
            self.header.maxs = [float(xs.max()), float(ys.max()), float(zs.max())]
        self.header.point_record_length = dims.size_of_point_format_id(point_format)
        self.header.number_of_vlrs = len(self.vlrs)
        self.header.offset_to_points = WRITTEN_HEADER_SIZE + self.vlrs.size_in_bytes()

        buffer = bytearray(
            self.header.offset_to_points + len(points) * self.header.point_record_length
        )
        offset = self.header.write_to(buffer, 0)
        offset += self.vlrs.write_to(buffer, offset)
        offset += lasio.write_bytes(buffer, offset, points.raw_bytes())
        assert offset == len(buffer)
        return bytes(buffer)

    def write(self):
        """Writes the file to the destination, the writer cannot be
        modified afterwards
        """
        self._raise_if_done()
        data = self.encode()
        if isinstance(self.destination, (str, Path)):
            with open(self.destination, mode="wb") as f:
                f.write(data)
        else:
            self.destination.write(data)
        self.done = True
        logger.debug(
            "Wrote {} bytes ({} points, {} vlrs)".format(
                len(data), self.header.number_of_points, len(self.vlrs)
            )
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None and not self.done:
            self.write()

    def __repr__(self):
        return "<LasWriter(point fmt: {}, {} points, {} vlrs)>".format(
            self.header.point_format, len(self), len(self.vlrs)
        )
