""" Contains the classes that manages Las point records

A single point is a PointRecord0, 1, 2 or 3 (one class per point format,
each carrying only the fields of its format).
Many points are stored in a PackedPointRecord, a thin wrapper around
a numpy structured array laid out exactly like the records in the file.
"""
import logging
from collections import namedtuple

import numpy as np

from . import dims, packing
from .fields import ClassificationBitField, ReturnBitField
from .. import errors, lasio

logger = logging.getLogger(__name__)

# quotients that are this close to an integer are float noise
# coming from a previous dequantization, they snap to that integer
QUANTIZATION_TOLERANCE = 1e-6

RGBData = namedtuple("RGBData", ("red", "green", "blue"))
RGBData.__str__ = lambda self: "red: {}, green: {}, blue: {}".format(*self)

XYZData = namedtuple("XYZData", ("x", "y", "z"))
XYZIData = namedtuple("XYZIData", ("x", "y", "z", "intensity"))


def scale_dimension(array_dim, scale, offset):
    return (array_dim * scale) + offset


def unscale_dimension(array_dim, scale, offset):
    """Quantizes real coordinates to the raw integers stored in the file,
    rounding toward zero

    Raises
    ------
    OverflowError
        if a quantized value does not fit in a signed 32 bit integer
    """
    quotient = (np.asarray(array_dim, dtype=np.float64) - offset) / scale
    nearest = np.round(quotient)
    with np.errstate(invalid="ignore"):
        quotient = np.where(
            np.abs(quotient - nearest) < QUANTIZATION_TOLERANCE, nearest, quotient
        )
    raw = np.trunc(quotient)

    iinfo = np.iinfo(np.int32)
    if raw.size > 0 and not (
        np.all(np.isfinite(raw)) and raw.max() <= iinfo.max and raw.min() >= iinfo.min
    ):
        raise OverflowError(
            "Values given do not fit after applying offset ({}) and scale ({})".format(
                offset, scale
            )
        )
    return raw.astype(np.int32)


def raise_not_enough_bytes_error(expected_bytes_len, buffer_len, point_size):
    raise errors.LaskitError(
        "The file does not contain enough bytes to store the expected number of points\n"
        "expected {} bytes, got {} bytes ({} bytes missing == {} points)".format(
            expected_bytes_len,
            buffer_len,
            expected_bytes_len - buffer_len,
            (expected_bytes_len - buffer_len) / point_size,
        )
    )


class PointData:
    """The fields shared by all the point formats

    x, y, z are in real world units, bit_field and class_field are the
    return information and classification bytes
    """

    def __init__(
        self,
        x=0.0,
        y=0.0,
        z=0.0,
        intensity=0,
        bit_field=0,
        class_field=0,
        scan_angle=0,
        user_data=0,
        point_source_id=0,
    ):
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)
        self.intensity = int(intensity)
        self.bit_field = ReturnBitField(int(bit_field))
        self.class_field = ClassificationBitField(int(class_field))
        self.scan_angle = int(scan_angle)
        self.user_data = int(user_data)
        self.point_source_id = int(point_source_id)

    def copy(self):
        """Returns an independent copy, bit fields included"""
        return PointData(*self._as_tuple())

    def _as_tuple(self):
        return (
            self.x,
            self.y,
            self.z,
            self.intensity,
            self.bit_field.value,
            self.class_field.value,
            self.scan_angle,
            self.user_data,
            self.point_source_id,
        )

    def __eq__(self, other):
        if not isinstance(other, PointData):
            return NotImplemented
        return self._as_tuple() == other._as_tuple()

    def __repr__(self):
        return "<PointData(x={:.4f}, y={:.4f}, z={:.4f})>".format(self.x, self.y, self.z)

    def __str__(self):
        return (
            "x={:.4f}, y={:.4f}, z={:.4f}, intensity={}, bit field={}, "
            "class field={}, scan angle={}, user data={}, point source ID={}".format(
                self.x,
                self.y,
                self.z,
                self.intensity,
                self.bit_field,
                self.class_field,
                self.scan_angle,
                self.user_data,
                self.point_source_id,
            )
        )


class PointRecord:
    """Base of the per point format records"""

    format_id = None
    has_gps_time = False
    has_rgb = False

    def __init__(self, point):
        self.point = point

    def _extensions(self):
        return ()

    def __eq__(self, other):
        if not isinstance(other, PointRecord):
            return NotImplemented
        return (
            self.format_id == other.format_id
            and self.point == other.point
            and self._extensions() == other._extensions()
        )

    def __repr__(self):
        return "<{}({!r})>".format(self.__class__.__name__, self.point)

    def __str__(self):
        return str(self.point)


class PointRecord0(PointRecord):
    format_id = 0


class PointRecord1(PointRecord):
    format_id = 1
    has_gps_time = True

    def __init__(self, point, gps_time):
        super().__init__(point)
        self.gps_time = float(gps_time)

    def _extensions(self):
        return (self.gps_time,)

    def __str__(self):
        return "{}, GPS time={:.6f}".format(self.point, self.gps_time)


class PointRecord2(PointRecord):
    format_id = 2
    has_rgb = True

    def __init__(self, point, rgb_data):
        super().__init__(point)
        self.rgb_data = RGBData(*rgb_data)

    def _extensions(self):
        return (self.rgb_data,)

    def __str__(self):
        return "{}, RGB={}".format(self.point, self.rgb_data)


class PointRecord3(PointRecord):
    format_id = 3
    has_gps_time = True
    has_rgb = True

    def __init__(self, point, gps_time, rgb_data):
        super().__init__(point)
        self.gps_time = float(gps_time)
        self.rgb_data = RGBData(*rgb_data)

    def _extensions(self):
        return self.gps_time, self.rgb_data

    def __str__(self):
        return "{}, GPS time={:.6f}, RGB={}".format(self.point, self.gps_time, self.rgb_data)


POINT_RECORD_CLASSES = {
    0: PointRecord0,
    1: PointRecord1,
    2: PointRecord2,
    3: PointRecord3,
}


def record_class_for_format(point_format_id):
    try:
        return POINT_RECORD_CLASSES[point_format_id]
    except KeyError:
        raise errors.PointFormatNotSupported(point_format_id) from None


def make_record(point_format_id, point, gps_time=None, rgb_data=None):
    """Builds the record matching the point format from its parts"""
    record_class = record_class_for_format(point_format_id)
    args = [point]
    if record_class.has_gps_time:
        args.append(gps_time)
    if record_class.has_rgb:
        args.append(rgb_data)
    return record_class(*args)


class PackedPointRecord:
    """Wraps the numpy structured array containing the raw point records,
    together with the scales and offsets needed to get real coordinates
    """

    def __init__(self, data, point_format_id, scales, offsets):
        self._array = data
        self.point_format_id = point_format_id
        self.scales = np.asarray(scales, dtype=np.float64)
        self.offsets = np.asarray(offsets, dtype=np.float64)

    @property
    def array(self):
        return self._array

    @property
    def point_size(self):
        return self._array.dtype.itemsize

    @property
    def x(self):
        """Returns the scaled x positions of the points as doubles"""
        return scale_dimension(self._array["X"], self.scales[0], self.offsets[0])

    @property
    def y(self):
        """Returns the scaled y positions of the points as doubles"""
        return scale_dimension(self._array["Y"], self.scales[1], self.offsets[1])

    @property
    def z(self):
        """Returns the scaled z positions of the points as doubles"""
        return scale_dimension(self._array["Z"], self.scales[2], self.offsets[2])

    @property
    def gps_time(self):
        if not dims.has_gps_time(self.point_format_id):
            return np.zeros(0, np.float64)
        return self._array["gps_time"]

    @property
    def rgb(self):
        """Returns a (n, 3) array of the red, green, blue channels"""
        if not dims.has_rgb(self.point_format_id):
            return np.zeros((0, 3), np.uint16)
        return np.stack(
            [self._array[name] for name in dims.COLOR_FIELDS_NAMES], axis=-1
        )

    @property
    def red(self):
        return self.rgb[:, 0]

    @property
    def green(self):
        return self.rgb[:, 1]

    @property
    def blue(self):
        return self.rgb[:, 2]

    def sub_field(self, name):
        """Returns the values of a bit field's sub field for all the points

        >>> packed = PackedPointRecord.from_points(
        ...     [PointData(class_field=0b1000_0010)], 0, [0.01] * 3, [0.0] * 3
        ... )
        >>> packed.sub_field("classification"), packed.sub_field("withheld")
        (array([2], dtype=uint8), array([ True]))
        """
        for composed_name, sub_fields in dims.COMPOSED_FIELDS.items():
            for sub_field in sub_fields:
                if sub_field.name == name:
                    return packing.unpack(
                        self._array[composed_name], sub_field.mask, dtype=sub_field.type
                    )
        raise ValueError("'{}' is not a sub field of the point records".format(name))

    def raw_bytes(self):
        return self._array.tobytes()

    def point_at(self, index):
        """Returns the PointData (base fields) of the point at index"""
        raw = self._array[index]
        return PointData(
            x=scale_dimension(raw["X"], self.scales[0], self.offsets[0]),
            y=scale_dimension(raw["Y"], self.scales[1], self.offsets[1]),
            z=scale_dimension(raw["Z"], self.scales[2], self.offsets[2]),
            intensity=raw["intensity"],
            bit_field=raw["bit_fields"],
            class_field=raw["raw_classification"],
            scan_angle=raw["scan_angle_rank"],
            user_data=raw["user_data"],
            point_source_id=raw["point_source_id"],
        )

    def __getitem__(self, index):
        """Returns the PointRecordN of the point at index"""
        if not isinstance(index, (int, np.integer)):
            raise TypeError("Points can only be indexed with integers")
        point = self.point_at(index)
        raw = self._array[index]
        gps_time, rgb_data = None, None
        if dims.has_gps_time(self.point_format_id):
            gps_time = raw["gps_time"]
        if dims.has_rgb(self.point_format_id):
            rgb_data = RGBData(*(int(raw[name]) for name in dims.COLOR_FIELDS_NAMES))
        return make_record(self.point_format_id, point, gps_time, rgb_data)

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def __len__(self):
        return len(self._array)

    def __repr__(self):
        return "<PackedPointRecord(fmt: {}, len: {})>".format(
            self.point_format_id, len(self)
        )

    @classmethod
    def empty(cls, point_format_id, scales, offsets):
        data = np.zeros(0, dims.get_dtype_of_format_id(point_format_id))
        return cls(data, point_format_id, scales, offsets)

    @classmethod
    def from_buffer(
        cls, buffer, offset, point_format_id, count, scales, offsets, point_size=None
    ):
        """Decodes `count` point records of the buffer starting at `offset`

        The records are copied, the returned PackedPointRecord
        does not reference the buffer
        """
        dtype = dims.get_dtype_of_format_id(point_format_id, point_size)
        standard_size = dims.size_of_point_format_id(point_format_id)
        if dtype.itemsize > standard_size:
            logger.warning(
                "Point record length ({}) is bigger than point format {} ({}), "
                "the {} extra bytes of each point are ignored".format(
                    dtype.itemsize,
                    point_format_id,
                    standard_size,
                    dtype.itemsize - standard_size,
                )
            )
        expected_end = offset + count * dtype.itemsize
        if len(buffer) < expected_end:
            raise_not_enough_bytes_error(expected_end, len(buffer), dtype.itemsize)
        if count == 0:
            return cls(np.zeros(0, dtype), point_format_id, scales, offsets)
        data = np.frombuffer(buffer, dtype=dtype, count=count, offset=offset).copy()
        return cls(data, point_format_id, scales, offsets)

    @classmethod
    def from_points(
        cls, points, point_format_id, scales, offsets, gps_times=None, rgb_data=None
    ):
        """Builds the packed records of a list of PointData and, when the
        point format has them, their parallel gps times / colors

        Raises
        ------
        OverflowError
            If a coordinate does not fit in the file after quantization
        """
        dtype = dims.get_dtype_of_format_id(point_format_id)
        data = np.zeros(len(points), dtype)
        scales = np.asarray(scales, dtype=np.float64)
        offsets = np.asarray(offsets, dtype=np.float64)

        for i, (coord_name, dim_name) in enumerate((("x", "X"), ("y", "Y"), ("z", "Z"))):
            coords = np.array([getattr(p, coord_name) for p in points], np.float64)
            data[dim_name] = unscale_dimension(coords, scales[i], offsets[i])

        data["intensity"] = [p.intensity for p in points]
        data["bit_fields"] = [p.bit_field.value for p in points]
        data["raw_classification"] = [p.class_field.value for p in points]
        data["scan_angle_rank"] = [p.scan_angle for p in points]
        data["user_data"] = [p.user_data for p in points]
        data["point_source_id"] = [p.point_source_id for p in points]

        if dims.has_gps_time(point_format_id):
            data["gps_time"] = _parallel_array(gps_times, len(points), "gps times")
        if dims.has_rgb(point_format_id):
            colors = _parallel_array(rgb_data, len(points), "rgb data")
            colors = np.array(colors, dtype=np.uint16).reshape(-1, 3)
            for i, name in enumerate(dims.COLOR_FIELDS_NAMES):
                data[name] = colors[:, i]

        return cls(data, point_format_id, scales, offsets)

    @classmethod
    def from_records(cls, records, point_format_id, scales, offsets):
        """Same as from_points but the parts are taken from PointRecordN instances"""
        record_class = record_class_for_format(point_format_id)
        for record in records:
            if not isinstance(record, record_class):
                raise errors.IncompatibleDataFormat(
                    "Expected {} records for point format {}, got {}".format(
                        record_class.__name__, point_format_id, type(record).__name__
                    )
                )
        return cls.from_points(
            [r.point for r in records],
            point_format_id,
            scales,
            offsets,
            gps_times=[r.gps_time for r in records] if record_class.has_gps_time else None,
            rgb_data=[r.rgb_data for r in records] if record_class.has_rgb else None,
        )


def _parallel_array(values, expected_len, name):
    if values is None:
        values = []
    if len(values) != expected_len:
        raise errors.IncompatibleDataFormat(
            "There are {} points but {} {}".format(expected_len, len(values), name)
        )
    return values


def decode_point(buffer, offset, header):
    """Decodes the fields shared by all point formats of the record at offset

    Coordinates are dequantized with the header's scales and offsets
    """
    point_format = dims.ALL_POINT_FORMATS_DTYPE[0]

    def field(name, data_type):
        return lasio.read(buffer, offset + point_format.fields[name][1], data_type)

    return PointData(
        x=scale_dimension(field("X", "int32"), header.x_scale_factor, header.x_offset),
        y=scale_dimension(field("Y", "int32"), header.y_scale_factor, header.y_offset),
        z=scale_dimension(field("Z", "int32"), header.z_scale_factor, header.z_offset),
        intensity=field("intensity", "uint16"),
        bit_field=field("bit_fields", "uint8"),
        class_field=field("raw_classification", "uint8"),
        scan_angle=field("scan_angle_rank", "int8"),
        user_data=field("user_data", "uint8"),
        point_source_id=field("point_source_id", "uint16"),
    )


def decode_extension(buffer, offset, point_format_id):
    """Decodes the format specific fields of the record at offset

    Returns
    -------
    tuple
        (gps_time or None, RGBData or None)
    """
    gps_time, rgb_data = None, None
    if dims.has_gps_time(point_format_id):
        gps_time = lasio.read(
            buffer, offset + dims.dimension_offset(point_format_id, "gps_time"), "double"
        )
    if dims.has_rgb(point_format_id):
        rgb_data = RGBData(
            *lasio.read(
                buffer, offset + dims.dimension_offset(point_format_id, "red"), "uint16", num=3
            )
        )
    return gps_time, rgb_data


def encode_point(record, buffer, offset, header):
    """Encodes the record in the buffer, quantizing its coordinates
    with the header's scales and offsets

    Returns
    -------
    int
        number of bytes written
    """
    packed = PackedPointRecord.from_records(
        [record], header.point_format, header.scales, header.offsets
    )
    return lasio.write_bytes(buffer, offset, packed.raw_bytes())
