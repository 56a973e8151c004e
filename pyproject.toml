[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cctvstream"
version = "0.1.0"
description = "Receive H.264 frame groups and object-detection JSON from CCTV cameras, keep them in a ring-buffer file and stream them to viewers over TLS."
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = [
    "cctv",
    "h264",
    "gop",
    "video",
    "streaming",
    "tls",
    "chacha20",
    "ring-buffer",
    "object-detection",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video",
    "Topic :: System :: Networking",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
cctvstream-json-client = "cctvstream.cctv:json_client_main"
cctvstream-video-client = "cctvstream.cctv:video_client_main"
cctvstream-json-server = "cctvstream.viewer:json_server_main"
cctvstream-video-server = "cctvstream.viewer:video_server_main"

[tool.hatch.build.targets.wheel]
packages = ["cctvstream"]

[tool.pytest.ini_options]
addopts = "-ra"
