"""Build synthetic NCM containers by running the format in reverse."""

import base64
import json
import struct
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad

from ncm_parser.crypto import build_key_box, mask
from ncm_parser.keys import (
    CORE_KEY,
    KEY_MASK,
    KEY_PREFIX,
    MAGIC,
    META_JSON_PREFIX,
    META_KEY,
    META_MASK,
    META_PREFIX,
)
from ncm_parser.stream import AudioDecryptor

RC4_KEY = b"123456789012345678901234567890123456789012345678901234567890E7fT49x7dof9OKCgg9cdvhEuezy3iZCL1nFvBFd1T4uSktAJKmwZXsijPbijliionVUXXg9plTbXEclAE9Lb"
PNG_IMAGE = bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A]) + b"\x00\x00\x00\x0dIHDR" + bytes(40)
JPEG_IMAGE = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + bytes(40) + b"\xff\xd9"
MP3_AUDIO = b"\xff\xfb\x90\x64" + bytes(range(256)) * 40
FLAC_AUDIO = (
    b"fLaC"
    # last metadata block, STREAMINFO, 34 bytes
    + bytes([0x80, 0x00, 0x00, 0x22])
    + (4096).to_bytes(2, "big") * 2
    + bytes(6)
    # 44100 Hz, 2 channels, 16 bits, 0 samples
    + ((44100 << 44) | (1 << 41) | (15 << 36)).to_bytes(8, "big")
    + bytes(16)
    + b"\xff\xf8" + bytes(200)
)
SAMPLE_METADATA = {
    "musicId": 1234567,
    "musicName": "夜曲 Nocturne",
    "artist": [["Alice", 11], ["Bob", 12]],
    "albumId": 89,
    "album": "Night Album",
    "albumPicDocId": "109951163",
    "albumPic": "https://p1.music.126.net/abc/109951163.jpg",
    "bitrate": 320000,
    "mp3DocId": "d41d8cd98f00b204e9800998ecf8427e",
    "duration": 226000,
    "mvId": 0,
    "alias": ["Nocturne"],
    "transNames": [],
    "format": "mp3",
}


def aes_ecb_encrypt(key: bytes, data: bytes) -> bytes:
    return AES.new(key, AES.MODE_ECB).encrypt(pad(data, AES.block_size))


def make_key_chunk(key: bytes, prefix: bytes = KEY_PREFIX) -> bytes:
    return mask(aes_ecb_encrypt(CORE_KEY, prefix + key), KEY_MASK)


def make_meta_chunk(text: str, json_prefix: bytes = META_JSON_PREFIX) -> bytes:
    return make_meta_chunk_raw(json_prefix + text.encode("utf-8"))


def make_meta_chunk_raw(plain: bytes) -> bytes:
    encoded = base64.b64encode(aes_ecb_encrypt(META_KEY, plain))
    return mask(META_PREFIX + encoded, META_MASK)


def encrypt_audio(key: bytes, audio: bytes) -> bytes:
    return AudioDecryptor(build_key_box(key)).decrypt(audio)


def build_ncm(key: bytes = RC4_KEY,
              metadata: dict | str | None = None,
              image: bytes = JPEG_IMAGE,
              audio: bytes = MP3_AUDIO,
              key_chunk: bytes | None = None,
              meta_chunk: bytes | None = None,
              crc: bytes = b"\x12\x34\x56\x78") -> bytes:
    if key_chunk is None:
        key_chunk = make_key_chunk(key)
    if meta_chunk is None:
        if metadata is None:
            meta_chunk = b""
        else:
            text = metadata if isinstance(metadata, str) else json.dumps(metadata, ensure_ascii=False)
            meta_chunk = make_meta_chunk(text)
    return b"".join([
        MAGIC, b"\x01\x70",
        struct.pack("<I", len(key_chunk)), key_chunk,
        struct.pack("<I", len(meta_chunk)), meta_chunk,
        crc, b"\x00" * 5,
        struct.pack("<I", len(image)), image,
        encrypt_audio(key, audio),
    ])


class TrickleReader:
    """File object returning at most ``step`` bytes per read."""

    def __init__(self, data: bytes, step: int = 3):
        self._data = data
        self._pos = 0
        self.step = step
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self._data)
        size = min(size, self.step)
        chunk = self._data[self._pos:self._pos + size]
        self._pos += len(chunk)
        return chunk

    def close(self) -> None:
        self.closed = True
