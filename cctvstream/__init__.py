"""Receive CCTV video frames and detection data, store them in a ring-buffer file and relay them over TLS."""

__version__ = "0.1.0"