import numpy as np
import pytest

from laskit import errors
from laskit.header import LasHeader
from laskit.point import dims, packing, record
from laskit.point.fields import (
    ClassificationBitField,
    ClassificationName,
    ReturnBitField,
)


@pytest.mark.parametrize("value", range(256))
def test_return_bit_field_components(value):
    field = ReturnBitField(value)

    assert 0 <= field.return_number <= 7
    assert 0 <= field.number_of_returns <= 7
    recomposed = (
        field.return_number
        | field.number_of_returns << 3
        | int(field.scan_direction_flag) << 6
        | int(field.edge_of_flight_line) << 7
    )
    assert recomposed == value


@pytest.mark.parametrize("value", range(256))
def test_classification_bit_field_components(value):
    field = ClassificationBitField(value)

    assert 0 <= field.classification <= 7
    assert field.synthetic == bool(value & 0b0010_0000)
    assert field.key_point == bool(value & 0b0100_0000)
    assert field.withheld == bool(value & 0b1000_0000)


def test_bit_field_setters_keep_other_bits():
    field = ReturnBitField()
    field.return_number = 3
    field.number_of_returns = 5
    field.edge_of_flight_line = True
    assert field.value == 0b1010_1011

    field.number_of_returns = 1
    assert field.return_number == 3
    assert field.edge_of_flight_line
    assert field.value == 0b1000_1011


def test_bit_field_value_must_fit_in_a_byte():
    with pytest.raises(ValueError):
        ReturnBitField(256)
    with pytest.raises(ValueError):
        ClassificationBitField(-1)


def test_sub_field_overflow():
    field = ReturnBitField()
    with pytest.raises(OverflowError):
        field.return_number = 8


def test_classification_name():
    field = ClassificationBitField(0b1000_0010)
    assert field.classification_name == ClassificationName.GROUND
    assert field.withheld
    assert "GROUND" in repr(field)


def test_packing_arrays():
    composed = np.array([0, 0b1111_1111], np.uint8)
    packed = packing.pack(composed, np.array([5, 0]), dims.RETURN_NUMBER_MASK)
    assert list(packed) == [5, 0b1111_1000]
    assert list(packing.unpack(packed, dims.RETURN_NUMBER_MASK)) == [5, 0]


def test_packing_negative_value():
    with pytest.raises(OverflowError):
        packing.pack(0, -1, dims.RETURN_NUMBER_MASK)


def test_unscale_truncates_toward_zero():
    raw = record.unscale_dimension(np.array([1.019, -1.019, 0.3]), 0.01, 0.0)
    assert list(raw) == [101, -101, 30]


def test_unscale_snaps_float_noise():
    values = record.scale_dimension(np.arange(-500, 500, dtype=np.int32), 0.001, 0.0)
    assert np.all(record.unscale_dimension(values, 0.001, 0.0) == np.arange(-500, 500))


def test_unscale_overflow():
    with pytest.raises(OverflowError):
        record.unscale_dimension(np.array([1e9]), 0.01, 0.0)
    with pytest.raises(OverflowError):
        record.unscale_dimension(np.array([-1e9]), 0.01, 0.0)


def test_quantization_is_within_scale_resolution():
    values = np.linspace(-1000.0, 1000.0, 977)
    raw = record.unscale_dimension(values, 0.01, 10.0)
    assert np.all(np.abs(record.scale_dimension(raw, 0.01, 10.0) - values) < 0.01)


def test_format_3_point_is_decoded_and_encoded_back():
    header = LasHeader(point_format=3)
    header.scales = [0.01, 0.01, 0.001]
    header.offsets = [0.0, 0.0, 0.0]

    buffer = bytearray(34)
    buffer[0:12] = np.array([100, 200, 300], "<i4").tobytes()
    buffer[20:28] = np.array([1234.5], "<f8").tobytes()
    buffer[28:34] = np.array([1, 2, 3], "<u2").tobytes()

    point = record.decode_point(buffer, 0, header)
    assert point.x == pytest.approx(1.00)
    assert point.y == pytest.approx(2.00)
    assert point.z == pytest.approx(0.30)

    gps_time, rgb = record.decode_extension(buffer, 0, 3)
    assert gps_time == 1234.5
    assert rgb == record.RGBData(1, 2, 3)

    out = bytearray(34)
    point_record = record.PointRecord3(point, gps_time, rgb)
    assert record.encode_point(point_record, out, 0, header) == 34
    assert out == buffer


@pytest.mark.parametrize(
    "point_format, gps_offset, rgb_offset", [(0, None, None), (1, 20, None), (2, None, 20), (3, 20, 28)]
)
def test_extension_offsets(point_format, gps_offset, rgb_offset):
    if gps_offset is not None:
        assert dims.dimension_offset(point_format, "gps_time") == gps_offset
    else:
        assert not dims.has_gps_time(point_format)
    if rgb_offset is not None:
        assert dims.dimension_offset(point_format, "red") == rgb_offset
    else:
        assert not dims.has_rgb(point_format)


def test_decode_extension_of_format_0():
    assert record.decode_extension(bytearray(20), 0, 0) == (None, None)


def test_unsupported_point_format():
    with pytest.raises(errors.PointFormatNotSupported):
        dims.get_dtype_of_format_id(6)
    with pytest.raises(errors.PointFormatNotSupported):
        record.record_class_for_format(4)


def test_record_length_smaller_than_format():
    with pytest.raises(errors.IncompatibleDataFormat):
        dims.get_dtype_of_format_id(3, point_size=30)


def test_record_length_bigger_than_format():
    dtype = dims.get_dtype_of_format_id(1, point_size=32)
    assert dtype.itemsize == 32
    assert dtype.fields["gps_time"][1] == 20


def test_packed_records_from_points():
    points = [record.PointData(1.5, 2.5, 3.5, intensity=9), record.PointData(-1.0, 0.0, 7.25)]
    packed = record.PackedPointRecord.from_points(
        points, 1, [0.5, 0.5, 0.25], [0.0, 0.0, 0.0], gps_times=[1.0, 2.0]
    )

    assert len(packed) == 2
    assert list(packed.array["X"]) == [3, -2]
    assert list(packed.z) == [3.5, 7.25]
    assert list(packed.gps_time) == [1.0, 2.0]
    assert packed.rgb.shape == (0, 3)
    assert packed[0] == record.PointRecord1(points[0], 1.0)


def test_packed_records_need_parallel_arrays():
    with pytest.raises(errors.IncompatibleDataFormat):
        record.PackedPointRecord.from_points(
            [record.PointData()], 2, [0.01] * 3, [0.0] * 3, rgb_data=[]
        )


def test_packed_records_from_wrong_records():
    with pytest.raises(errors.IncompatibleDataFormat):
        record.PackedPointRecord.from_records(
            [record.PointRecord0(record.PointData())], 1, [0.01] * 3, [0.0] * 3
        )


def test_packed_records_from_buffer_too_small():
    with pytest.raises(errors.LaskitError):
        record.PackedPointRecord.from_buffer(
            bytearray(50), 0, 0, 3, [0.01] * 3, [0.0] * 3
        )


def test_point_index_out_of_range():
    packed = record.PackedPointRecord.empty(0, [0.01] * 3, [0.0] * 3)
    assert len(packed) == 0
    with pytest.raises(IndexError):
        _ = packed[0]


def test_record_equality():
    point = record.PointData(1.0, 2.0, 3.0)
    assert record.PointRecord2(point, (1, 2, 3)) == record.PointRecord2(
        record.PointData(1.0, 2.0, 3.0), record.RGBData(1, 2, 3)
    )
    assert record.PointRecord2(point, (1, 2, 3)) != record.PointRecord2(point, (1, 2, 4))
    assert record.PointRecord0(point) != record.PointRecord1(point, 0.0)


def test_point_report():
    point_record = record.PointRecord3(record.PointData(1.0, 2.0, 3.0), 4.5, (1, 2, 3))
    report = str(point_record)
    assert "x=1.0000" in report
    assert "GPS time=4.500000" in report
    assert "red: 1, green: 2, blue: 3" in report
