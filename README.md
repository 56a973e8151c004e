# cctvstream

`cctvstream` takes video frames and object-detection data from CCTV cameras,
keeps them on disk, and streams them on to viewers.

It has two sides:

* **Camera side (clients, `cctvstream.cctv`).** `VideoClient` connects to a
  camera, reads frames and groups them into GOPs. Frames that arrive outside
  a GOP are dropped. `JsonClient` reads `|`-terminated JSON documents in
  50-byte chunks. Documents that cannot be parsed are logged and dropped.
  Both clients save what they receive through a `StorageManager`.
* **Viewer side (servers, `cctvstream.viewer`).** `VideoServer` and
  `JsonServer` serve one client at a time. Each one streams stored data to
  the client until the client disconnects. The video server sends encoded
  frames. The JSON server sends compact JSON with sorted keys, each document
  followed by `|`.

Every component logs to standard output through `cctvstream.logger.Logger`.

## Installation

```
pip install cctvstream
```

To run the tests:

```
pip install "cctvstream[test]"
pytest
```

## Commands

Each command runs until it is interrupted.

```
cctvstream-video-client [--host IP:VIDEO_PORT:JSON_PORT] [--storage-root DIR]
cctvstream-json-client  [--host IP:VIDEO_PORT:JSON_PORT] [--storage-root DIR]
cctvstream-video-server [--port 12345] [--bind ADDR] [--camera-ip IP] [--storage-root DIR] [--certs-root DIR]
cctvstream-json-server  [--port 54321] [--bind ADDR] [--camera-ip IP] [--storage-root DIR] [--certs-root DIR]
```

Defaults:

* `--host` is `192.168.50.14:12345:54321`.
* `--camera-ip` is `192.168.50.14`.
* `--storage-root` is `storage`.

The clients connect over TLS and do not verify the server's certificate.

The servers load a PEM certificate and key from
`<certs-root>/viewer/certs/server.cert` and
`<certs-root>/viewer/certs/server.key`. `cctvstream.tls.default_cert_paths`
returns these paths.

## Formats

**Frames** (`cctvstream.frame`). A frame is a 40-byte `Header` followed by
the body. The header holds these fields, with integers in network byte order:

* `frame_id`
* `body_size`
* `image_width` and `image_height`
* `image_format` (`ImageFormat.RAW` or `ImageFormat.H264`)
* a timestamp of at most 19 bytes
* `gop_start_flag`
* `gop_size`

A `GOP` must start with a frame whose start flag is set, and that frame's
`gop_size` must equal the number of frames. Malformed input raises
`FrameError`.

**Storage file** (`cctvstream.storage_file`). A `StorageFile` has a fixed
size, 100 MiB by default, and is filled with `0xFF` bytes when it is created.

* It begins with a 12-byte header of three little-endian offsets: the first
  item, the last item, and the padding point.
* Each record in the data area is a 4-byte little-endian size followed by
  its payload.
* When a record would run past the end of the file, writing wraps to the
  start. The first-item offset then moves past any records that get
  overwritten.

`StorageError` is raised when the file cannot be read or written as needed.

**Items** (`cctvstream.items`).

* `JsonItem` stores compact UTF-8 JSON.
* `H264Item` stores the encoded frames of a GOP, one after another.
* `JsonCodec` and `GopCodec` convert data to items and back.

## Library use

```python
from cctvstream.frame import GOP, Frame, GopStartFlag, Header
from cctvstream.items import GopCodec, JsonCodec
from cctvstream.storage_manager import StorageManager

header = Header(frame_id=1, body_size=3, image_width=1280, image_height=720,
                timestamp="20241122_123456.789",
                gop_start_flag=GopStartFlag.TRUE, gop_size=1)
frame = Frame(header, b"\x00\x01\x02")
assert Frame.from_bytes(frame.to_bytes()) == frame

videos = StorageManager("127.0.0.1", GopCodec(), root="storage",
                        max_file_size=1024 * 1024)
videos.save(GOP([frame]))

detections = StorageManager("127.0.0.1", JsonCodec(), root="storage",
                            max_file_size=1024 * 1024, poll_interval=0.1)
detections.save({"frameId": 32, "timestamp": "20241126_114616.057", "objects": []})
item = detections.get_next()   # next stored item, or None after poll_interval
```

Each manager keeps its data in `<root>/<ip>/json.dat` or
`<root>/<ip>/h264.dat`. A new manager starts reading at the last item that was
in the file when the manager was created.

`cctvstream.detection.DetectionFrame` and `DetectedObject` convert detection
documents to and from plain dictionaries:

```python
from cctvstream.detection import DetectionFrame

frame = DetectionFrame.from_json({
    "frameId": 32,
    "timestamp": "20241126_114616.057",
    "objects": [{"className": "cardboard", "height": 618, "width": 1258, "x": -29, "y": 0}],
})
assert frame.to_json()["objects"][0]["className"] == "cardboard"
```

`cctvstream.cipher.ChaCha20` takes a 32-byte key and either a 12-byte nonce
or a 16-byte counter-plus-nonce. The same `process` call encrypts and
decrypts:

```python
from cctvstream.cipher import ChaCha20

cipher = ChaCha20(ChaCha20.load_key_from_file("keyfile.bin"))
nonce = bytes(12)
ciphertext = cipher.process(nonce, b"Hello World!")
assert cipher.process(nonce, ciphertext) == b"Hello World!"
```

`ChaCha20CipherAdapter` offers the same cipher through the `Ciphable`
`encrypt`/`decrypt` interface.

`cctvstream.hosts.Host.parse("ip:video_port:json_port")` reads a camera
address.

## What it does not do

* It does not decode or display video. Frames are stored and relayed as
  opaque bytes.
* It does not create certificates or keys.
* The network streams are not encrypted with ChaCha20. Only TLS protects
  them.
* There is no discovery and no support for several cameras at once. Each
  command handles one camera, given on the command line.