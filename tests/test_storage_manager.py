import struct

import pytest

from cctvstream.frame import GOP, Frame, GopStartFlag, Header, ImageFormat
from cctvstream.items import GopCodec, JsonCodec, JsonItem
from cctvstream.storage_file import StorageError
from cctvstream.storage_manager import StorageManager

TEST_IP = "127.0.1.2"
SMALL = 64 * 1024

SNOWDEER = {"id": 1, "name": "snowdeer", "age": 45}
JIGISEONG = {"id": 2, "name": "jigiseong", "age": 30}
JIGGYJIGGY = {"id": 3, "name": "jiggyjiggy", "age": 30}


def _manager(tmp_path, codec=None):
    return StorageManager(TEST_IP, codec or JsonCodec(), root=tmp_path, max_file_size=SMALL, poll_interval=0)


def _read_record(data, position):
    (size,) = struct.unpack_from("<I", data, position)
    return size, data[position + 4 : position + 4 + size]


def test_file_is_created_at_expected_path(tmp_path):
    manager = _manager(tmp_path)
    assert manager.path == tmp_path / TEST_IP / "json.dat"
    assert manager.path.stat().st_size == SMALL


def test_one_json_save(tmp_path):
    manager = _manager(tmp_path)
    manager.save(SNOWDEER)
    assert manager.get_next() == SNOWDEER


def test_three_json_save_file_layout(tmp_path):
    manager = _manager(tmp_path)
    for obj in (SNOWDEER, JIGISEONG, JIGGYJIGGY):
        manager.save(obj)

    data = manager.path.read_bytes()
    size1, raw1 = _read_record(data, 12)
    size2, raw2 = _read_record(data, 12 + 4 + size1)
    _, raw3 = _read_record(data, 12 + 39 + 40)

    assert JsonItem.from_payload(raw1).data == SNOWDEER
    assert JsonItem.from_payload(raw2).data == JIGISEONG
    assert JsonItem.from_payload(raw3).data == JIGGYJIGGY


def test_n_json_save_reader_trails_last_item(tmp_path):
    manager = _manager(tmp_path)
    objects = [{"id": i, "name": f"user{i}", "age": 30 + (i % 10)} for i in range(40)]
    results = []
    for obj in objects:
        manager.save(obj)
        results.append(manager.get_next())
    assert results[0] == objects[0]
    assert results[1] is None
    assert results[2:] == objects[1:-1]


def test_get_next_on_empty_storage_returns_none(tmp_path):
    manager = _manager(tmp_path)
    assert manager.get_next() is None


def test_reopen_starts_at_last_item(tmp_path):
    writer = _manager(tmp_path)
    writer.save(SNOWDEER)
    writer.save(JIGISEONG)

    reader = _manager(tmp_path)
    assert reader.get_next() is None
    writer.save(JIGGYJIGGY)
    assert reader.get_next() == JIGISEONG


def test_gop_storage_round_trip(tmp_path):
    header = Header(
        frame_id=7,
        body_size=3,
        image_width=1280,
        image_height=720,
        image_format=ImageFormat.H264,
        timestamp="20241125_123456.789",
        gop_start_flag=GopStartFlag.TRUE,
        gop_size=1,
    )
    gop = GOP([Frame(header, b"\x01\x02\x03")])
    manager = _manager(tmp_path, GopCodec())
    assert manager.path.name == "h264.dat"
    manager.save(gop)
    assert manager.get_next() == gop


def test_oversized_item_raises(tmp_path):
    manager = StorageManager(TEST_IP, JsonCodec(), root=tmp_path, max_file_size=64, poll_interval=0)
    with pytest.raises(StorageError):
        manager.save({"payload": "x" * 200})