import pytest

from cctvstream.cctv import JsonStreamBuffer
from cctvstream.frame import GOP, Frame, GopStartFlag, Header
from cctvstream.viewer import (
    JsonServer,
    VideoServer,
    encode_gop,
    encode_json_message,
    json_server_main,
    video_server_main,
)

TIMESTAMP = "20241122_123456.789"


class FakeStorage:
    def __init__(self, items):
        self.items = list(items)
        self.calls = 0

    def get_next(self):
        index = min(self.calls, len(self.items) - 1)
        self.calls += 1
        return self.items[index]


class FakeConn:
    def __init__(self, fail_after):
        self.fail_after = fail_after
        self.sent = []

    def sendall(self, data):
        if len(self.sent) >= self.fail_after:
            raise BrokenPipeError("client went away")
        self.sent.append(bytes(data))


def make_gop():
    first = Frame(
        Header(frame_id=1001, body_size=3, timestamp=TIMESTAMP,
               gop_start_flag=GopStartFlag.TRUE, gop_size=2),
        b"abc",
    )
    second = Frame(Header(frame_id=1002, body_size=2, timestamp=TIMESTAMP), b"de")
    return GOP([first, second])


def test_encode_json_message_is_compact_sorted_and_delimited():
    assert encode_json_message({"name": "snowdeer", "id": 1}) == b'{"id":1,"name":"snowdeer"}|'


def test_encoded_json_parses_back():
    documents = [{"frameId": 32, "objects": []}, {"id": 2}]
    stream = JsonStreamBuffer()
    received = []
    for document in documents:
        received.extend(stream.feed(encode_json_message(document)))
    assert received == documents


def test_encode_gop_round_trips():
    gop = make_gop()
    data = encode_gop(gop)
    frames = []
    while data:
        frame = Frame.from_bytes(data)
        frames.append(frame)
        data = data[frame.size():]
    assert GOP(frames) == gop


def test_json_server_streams_until_send_fails():
    storage = FakeStorage([{"id": 1}, None, {"id": 2}])
    conn = FakeConn(fail_after=2)
    with JsonServer(0, storage, host="127.0.0.1") as server:
        server.handle_connection(conn)
    assert conn.sent == [encode_json_message({"id": 1}), encode_json_message({"id": 2})]


def test_video_server_sends_frames_of_each_gop():
    gop = make_gop()
    storage = FakeStorage([None, gop])
    conn = FakeConn(fail_after=2)
    with VideoServer(0, storage, host="127.0.0.1") as server:
        server.handle_connection(conn)
    assert b"".join(conn.sent) == encode_gop(gop)
    assert [Frame.from_bytes(chunk) for chunk in conn.sent] == gop.frames()


def test_servers_bind_requested_address():
    with JsonServer(0, FakeStorage([None]), host="127.0.0.1") as server:
        assert server.host == "127.0.0.1"
        assert server.port > 0


def test_json_server_main_rejects_bad_port():
    with pytest.raises(SystemExit):
        json_server_main(["--port", "notaport"])


def test_video_server_main_rejects_bad_port():
    with pytest.raises(SystemExit):
        video_server_main(["--port", "notaport"])