import pytest

from cctvstream.frame import (
    GOP,
    HEADER_SIZE,
    Frame,
    FrameError,
    GopStartFlag,
    Header,
    ImageFormat,
)

TIMESTAMP = "20241122_123456.789"


def make_header(**overrides):
    fields = dict(
        frame_id=1001,
        body_size=2002,
        image_width=1280,
        image_height=720,
        image_format=ImageFormat.RAW,
        timestamp=TIMESTAMP,
    )
    fields.update(overrides)
    return Header(**fields)


def make_image(size=2002):
    return bytes((i * 2) % 256 for i in range(size))


def test_header_size_is_forty():
    assert HEADER_SIZE == 40
    assert len(make_header().to_bytes()) == 40


def test_header_serialization_deserialization():
    origin = make_header()
    header = Header.from_bytes(origin.to_bytes())
    assert header.frame_id == 1001
    assert header.body_size == 2002
    assert header.image_width == 1280
    assert header.image_height == 720
    assert header.image_format == ImageFormat.RAW
    assert header.timestamp == TIMESTAMP
    assert header == origin


def test_header_wire_layout():
    data = make_header(gop_start_flag=GopStartFlag.TRUE, gop_size=7, image_format=ImageFormat.H264).to_bytes()
    assert data[0:4] == b"\x00\x00\x03\xe9"
    assert data[4:8] == b"\x00\x00\x07\xd2"
    assert data[8:10] == b"\x05\x00"
    assert data[10:12] == b"\x02\xd0"
    assert data[12] == 1
    assert data[13:16] == b"\x00\x00\x00"
    assert data[16:35] == TIMESTAMP.encode("ascii")
    assert data[35] == 0
    assert data[36] == 1
    assert data[37] == 7
    assert data[38:40] == b"\x00\x00"


def test_header_short_timestamp_round_trip():
    header = make_header(timestamp="2024")
    assert Header.from_bytes(header.to_bytes()).timestamp == "2024"


def test_header_timestamp_too_long():
    with pytest.raises(FrameError):
        make_header(timestamp=TIMESTAMP + "0").to_bytes()


def test_header_field_out_of_range():
    with pytest.raises(FrameError):
        make_header(image_width=70000).to_bytes()


@pytest.mark.parametrize("size", [0, 39, 41])
def test_header_from_bytes_wrong_size(size):
    with pytest.raises(FrameError):
        Header.from_bytes(bytes(size))


def test_header_decodes_gop_flag_as_enum():
    header = Header.from_bytes(make_header(gop_start_flag=GopStartFlag.TRUE, gop_size=3).to_bytes())
    assert header.gop_start_flag is GopStartFlag.TRUE
    assert header.gop_size == 3


def test_frame_composited_header_body():
    header = Header.from_bytes(make_header().to_bytes())
    image = make_image()
    frame = Frame(header, image)
    assert frame.header.frame_id == 1001
    assert frame.header.body_size == 2002
    assert frame.header.image_width == 1280
    assert frame.header.image_height == 720
    assert frame.header.image_format == ImageFormat.RAW
    assert frame.header.timestamp == TIMESTAMP
    assert len(frame.body) == 2002
    assert frame.body == image


def test_frame_serialization_deserialization():
    image = make_image()
    origin = Frame(make_header(), image)
    data = origin.to_bytes()
    assert len(data) == 40 + 2002
    frame = Frame.from_bytes(data)
    assert frame.header.frame_id == 1001
    assert frame.header.body_size == 2002
    assert frame.header.image_width == 1280
    assert frame.header.image_height == 720
    assert frame.header.image_format == ImageFormat.RAW
    assert frame.header.timestamp == TIMESTAMP
    assert frame.body == image
    assert frame == origin


def test_frame_size_uses_header_body_size():
    assert Frame(make_header(), make_image()).size() == 2042


def test_frame_from_bytes_ignores_trailing_data():
    first = Frame(make_header(frame_id=1, body_size=3), b"abc")
    second = Frame(make_header(frame_id=2, body_size=2), b"xy")
    data = first.to_bytes() + second.to_bytes()
    decoded = Frame.from_bytes(data)
    assert decoded == first
    assert Frame.from_bytes(data[decoded.size():]) == second


def test_frame_from_bytes_short_header():
    with pytest.raises(FrameError):
        Frame.from_bytes(bytes(10))


def test_frame_from_bytes_short_body():
    data = Frame(make_header(body_size=5), b"12345").to_bytes()
    with pytest.raises(FrameError):
        Frame.from_bytes(data[:-1])


def test_frame_with_empty_body():
    frame = Frame.from_bytes(Frame(make_header(body_size=0), b"").to_bytes())
    assert frame.body == b""
    assert frame.size() == 40


def _gop_frames(count, declared=None):
    declared = count if declared is None else declared
    frames = [Frame(make_header(frame_id=0, body_size=1, gop_start_flag=GopStartFlag.TRUE, gop_size=declared), b"a")]
    frames += [Frame(make_header(frame_id=i, body_size=1), b"b") for i in range(1, count)]
    return frames


def test_gop_keeps_frames_in_order():
    frames = _gop_frames(4)
    gop = GOP(frames)
    assert gop.frames() == frames
    assert [f.header.frame_id for f in gop] == [0, 1, 2, 3]
    assert len(gop) == 4


def test_gop_frames_returns_copy():
    gop = GOP(_gop_frames(2))
    gop.frames().clear()
    assert len(gop.frames()) == 2


def test_gop_requires_start_flag():
    frames = [Frame(make_header(gop_size=1, body_size=0), b"")]
    with pytest.raises(FrameError, match="Invalid GOP start flag"):
        GOP(frames)


def test_gop_size_mismatch():
    with pytest.raises(FrameError, match="Mismatch"):
        GOP(_gop_frames(3, declared=4))


def test_gop_empty():
    with pytest.raises(FrameError):
        GOP([])


def test_gop_equality():
    first = GOP(_gop_frames(2))
    second = GOP(_gop_frames(2))
    longer = GOP(_gop_frames(3))
    assert first.frames() == second.frames()
    assert (first == second) is True
    assert (first == longer) is False