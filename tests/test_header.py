import copy
import datetime
import uuid

import numpy as np
import pytest

from laskit import errors, lasio
from laskit.header import LasHeader, header_span
from laskit.point.record import PointData
from tests import test_common

las = test_common.las
las_bytes = test_common.las_bytes
point_format = test_common.point_format


def encode_header(header):
    buffer = bytearray(235)
    header.write_to(buffer)
    return buffer


def test_default_header():
    header = LasHeader()
    assert header.version == "1.3"
    assert header.point_record_length == 20
    assert header.number_of_points_by_return == [0] * 5
    assert list(header.scales) == [0.01, 0.01, 0.001]


@pytest.mark.parametrize("point_format, size", [(0, 20), (1, 28), (2, 26), (3, 34)])
def test_point_record_length_follows_format(point_format, size):
    assert LasHeader(point_format=point_format).point_record_length == size


def test_written_header_size():
    header = LasHeader()
    buffer = bytearray(300)
    assert header.write_to(buffer) == 235
    assert lasio.read(buffer, 94, "uint16") == 235
    assert buffer[:4] == b"LASF"
    assert buffer[24:26] == b"\x01\x03"


def test_header_read_back():
    header = LasHeader(point_format=3)
    header.file_source_id = 12
    header.global_encoding = 1
    header.number_of_points = 50
    header.number_of_points_by_return = [10, 20, 5, 10, 5]
    header.offsets = [100.0, 200.0, 300.0]
    header.mins = [1.0, 2.0, 3.0]
    header.maxs = [4.0, 5.0, 6.0]
    header.waveform_data_start = 1234

    header_read = LasHeader.read_from(encode_header(header))

    assert header_read == header
    assert header_read.waveform_data_start == 1234
    assert header_read.number_of_points_by_return == [10, 20, 5, 10, 5]
    assert np.all(header_read.maxs == [4.0, 5.0, 6.0])


def test_write_forces_version_and_date():
    header = LasHeader()
    header.version = "1.2"
    header.header_size = 227
    header.file_creation_year = 1999

    header_read = LasHeader.read_from(encode_header(header))

    assert header_read.version == "1.3"
    assert header_read.header_size == 235
    assert header_read.date == datetime.date.today()


def test_only_5_return_counts_are_written():
    header = LasHeader()
    header.number_of_points_by_return = [1, 2, 3, 4, 5, 6, 7]

    header_read = LasHeader.read_from(encode_header(header))

    assert header_read.number_of_points_by_return == [1, 2, 3, 4, 5]


def test_invalid_signature():
    buffer = encode_header(LasHeader())
    buffer[:4] = b"ABCD"
    with pytest.raises(errors.InvalidSignature):
        LasHeader.read_from(buffer)


def test_buffer_too_small():
    buffer = encode_header(LasHeader())
    with pytest.raises(errors.LaskitError):
        LasHeader.read_from(buffer[:200])
    with pytest.raises(errors.LaskitError):
        LasHeader.read_from(buffer[:230])


def test_1_2_header_has_no_waveform_start():
    buffer = encode_header(LasHeader())
    buffer[25] = 2
    lasio.write(buffer, 227, 987, "uint64")

    header = LasHeader.read_from(buffer[:227])

    assert header.version == "1.2"
    assert header.waveform_data_start == 0
    assert header_span(1, 2) == 227


def test_1_4_header_has_7_return_counts():
    assert header_span(1, 4) == 235
    buffer = bytearray(235)
    buffer[:4] = b"LASF"
    buffer[24:26] = b"\x01\x04"
    lasio.write(buffer, 111, (1, 2, 3, 4, 5, 6, 7), "uint32", num=7)

    header = LasHeader.read_from(buffer)

    assert header.number_of_points_by_return == [1, 2, 3, 4, 5, 6, 7]
    assert header.waveform_data_start == 0


def test_text_fields_are_padded():
    header = LasHeader()
    header.system_identifier = "A" * 40
    header.generating_software = "gen"

    buffer = encode_header(header)

    assert buffer[26:58] == b"A" * 32
    assert buffer[58:90] == b"gen" + b"\x00" * 29
    assert LasHeader.read_from(buffer).generating_software == "gen"


def test_update_with_points():
    header = LasHeader()
    header.partial_reset()
    assert header.number_of_points == 0
    assert header.min_x == np.finfo("f8").max
    assert header.max_x == np.finfo("f8").min

    point = PointData(1.0, -2.0, 3.0)
    point.bit_field.return_number = 2
    header.update(point)
    header.update(PointData(5.0, 2.0, -3.0, bit_field=1))

    assert header.number_of_points == 2
    assert list(header.mins) == [1.0, -2.0, -3.0]
    assert list(header.maxs) == [5.0, 2.0, 3.0]
    assert header.number_of_points_by_return == [1, 1, 0, 0, 0]


def test_update_skips_return_number_out_of_range(caplog):
    header = LasHeader()
    header.partial_reset()

    header.update(PointData(bit_field=0))
    header.update(PointData(bit_field=7))

    assert header.number_of_points == 2
    assert header.number_of_points_by_return == [0] * 5
    assert "Return number" in caplog.text


def test_header_copy():
    header = LasHeader(point_format=1)
    header_copy = copy.copy(header)

    header_copy.number_of_points_by_return[0] = 10
    header_copy.point_format = 0

    assert header.number_of_points_by_return[0] == 0
    assert header.point_format == 1


def test_set_uuid():
    header = LasHeader()
    u = uuid.uuid4()
    header.uuid = u

    header_read = LasHeader.read_from(encode_header(header))

    assert header_read.uuid == u


def test_set_offsets():
    header = LasHeader()
    header.offsets = [0.5, 0.6, 0.7]

    assert 0.5 == header.x_offset
    assert 0.6 == header.y_offset
    assert 0.7 == header.z_offset
    assert [0.5, 0.6, 0.7] == list(header.offsets)


def test_header_report(las):
    report = str(las.header)
    assert "File Signature: LASF" in report
    assert "Version: 1.3" in report
    assert "Num. of Points: 4" in report
    assert "Waveform Data Start: 0" in report



def test_unsupported_point_format():
    with pytest.raises(errors.PointFormatNotSupported):
        LasHeader(point_format=6)
