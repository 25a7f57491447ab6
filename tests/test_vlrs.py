import struct

import pytest

import laskit
from laskit import errors, lasio
from laskit.vlrs import VLR, VLR_HEADER_SIZE, VLRList
from laskit.vlrs.known import GeoKeyDirectory, describe_record_data, parse_ascii_params
from tests import test_common

las = test_common.las
las_bytes = test_common.las_bytes
point_format = test_common.point_format


def test_record_length_follows_data():
    vlr = VLR("user", 1, "desc")
    assert vlr.record_length_after_header == 0
    vlr.record_data = b"12345"
    assert vlr.record_length_after_header == 5
    assert vlr.size_in_bytes() == VLR_HEADER_SIZE + 5


def test_record_data_too_long():
    with pytest.raises(OverflowError):
        VLR("user", 1, record_data=b"\x00" * 65536)


def test_vlr_layout():
    vlr = VLR("LASF_Projection", 34736, "doubles", struct.pack("<2d", 1.5, 2.5), reserved=0xAABB)
    buffer = bytearray(vlr.size_in_bytes())

    assert vlr.write_to(buffer, 0) == 54 + 16
    assert buffer[0:2] == b"\xbb\xaa"
    assert buffer[2:18] == b"LASF_Projection\x00"
    assert buffer[18:20] == struct.pack("<H", 34736)
    assert buffer[20:22] == struct.pack("<H", 16)
    assert buffer[22:54] == b"doubles" + b"\x00" * 25
    assert VLR.read_from(buffer, 0) == vlr


def test_vlr_list_framing():
    vlrs = VLRList(test_common.make_vlrs())
    offset = 10
    buffer = bytearray(offset + vlrs.size_in_bytes())

    written = vlrs.write_to(buffer, offset)

    assert written == sum(54 + len(v.record_data) for v in vlrs)
    assert VLRList.read_from(buffer, offset, len(vlrs)) == vlrs


def test_long_ids_are_truncated():
    vlr = VLR("a" * 20, 3, "d" * 40, b"data")
    buffer = bytearray(vlr.size_in_bytes())
    vlr.write_to(buffer, 0)

    vlr_read = VLR.read_from(buffer, 0)

    assert vlr_read.user_id == "a" * 16
    assert vlr_read.description == "d" * 32
    assert vlr_read.record_data == b"data"


def test_vlr_data_past_buffer():
    vlr = VLR("user", 1, record_data=b"0123456789")
    buffer = bytearray(vlr.size_in_bytes())
    vlr.write_to(buffer, 0)
    with pytest.raises(errors.LaskitError):
        VLR.read_from(buffer[:-3], 0)


def test_get_by_id():
    vlrs = VLRList(test_common.make_vlrs())

    assert vlrs.get_by_id("LASF_Projection", (34735,)) == [vlrs[0]]
    assert vlrs.get_by_id("a user") == [vlrs[1]]
    assert vlrs.get_by_id(record_ids=(17,)) == [vlrs[1]]
    assert vlrs.get_by_id("LASF_Projection", (17,)) == []
    assert vlrs.index("a user", 17) == 1
    with pytest.raises(ValueError):
        vlrs.index("a user", 18)


def test_vlrs_are_read_back(las):
    assert las.vlrs == test_common.make_vlrs()
    assert las.header.number_of_vlrs == 2


def test_vlr_report():
    doubles = VLR("LASF_Projection", 34736, "", struct.pack("<2d", 1.5, 2.5))
    assert "Data: [1.5, 2.5]" in str(doubles)

    keys = VLR("LASF_Projection", 34735, "", struct.pack("<4H", 1, 1, 0, 0))
    assert "Data: [1, 1, 0, 0]" in str(keys)

    text = VLR("user", 1, "some\x00text", b"hello\x00world  ")
    report = str(text)
    assert "Data: hello world" in report
    assert "Description: some text" in report


def test_describe_record_data_ignores_trailing_bytes():
    assert describe_record_data(34735, b"\x01\x00\x02") == "[1]"
    assert describe_record_data(34736, b"") == "[]"


def test_geo_key_directory():
    data = struct.pack("<12H", 1, 1, 0, 2, 1024, 0, 1, 1, 3072, 0, 1, 32611)
    vlrs = VLRList([VLR("LASF_Projection", 34735, "", data)])

    directory = vlrs.geo_key_directory()

    assert directory.keys_header.number_of_keys == 2
    assert directory.key_names() == ["GTModelTypeGeoKey", "ProjectedCSTypeGeoKey"]
    assert directory.keys[1].value_offset == 32611
    assert directory.record_data_bytes() == data
    assert "ProjectedCSTypeGeoKey: location 0, count 1, value 32611" in str(directory)


def test_geo_key_directory_with_wrong_key_count(caplog):
    data = struct.pack("<8H", 1, 1, 0, 3, 1024, 0, 1, 1)
    directory = GeoKeyDirectory.from_record_data(data)
    assert directory.keys_header.number_of_keys == 1
    assert "announces 3 keys" in caplog.text


def test_no_geo_key_directory():
    assert VLRList().geo_key_directory() is None


def test_ascii_params():
    assert parse_ascii_params(b"WGS 84|\x00NAD83\x00") == ["WGS 84|", "NAD83"]


def test_vlr_list_equality():
    vlrs = test_common.make_vlrs()
    assert VLRList(vlrs) == vlrs
    assert VLRList(vlrs) == VLRList(vlrs)
    assert VLRList(vlrs) != vlrs[:1]
    assert laskit.VLR is VLR


def test_vlrs_survive_writing():
    vlrs = [VLR("LASF_Projection", 34736, "", struct.pack("<3d", 1.0, 2.0, 3.0))]

    las = test_common.write_then_read_again(test_common.make_header(0), vlrs, [])

    assert las.vlrs == vlrs
    assert las.header.offset_to_points == 235 + 54 + 24


def test_buffer_ends_inside_vlr_header():
    header = test_common.make_header(0)
    data = bytearray(test_common.write_to_bytes(header, [], []))
    lasio.write(data, 100, 1, "uint32")
    data += b"\x00" * 10

    with pytest.raises(errors.LaskitError):
        laskit.read(bytes(data))
    with pytest.raises(errors.LaskitError):
        VLR.read_from(bytes(data), 235)
