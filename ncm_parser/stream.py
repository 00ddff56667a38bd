"""Position indexed keystream applied to the audio payload.

The keystream byte at offset ``n`` depends only on ``n`` and the key box, so
it repeats every 256 bytes and any chunking of the payload decrypts the same.
"""

from typing import Iterable, Iterator

from .crypto import xor_bytes


def keystream_period(key_box: bytes) -> bytes:
    """Keystream bytes for offsets 0..255."""
    if len(key_box) != 256:
        raise ValueError(f"Key box must have 256 entries, got {len(key_box)}")
    stream = bytearray(256)
    for n in range(256):
        j = (n + 1) & 0xFF
        first = key_box[j]
        second = key_box[(j + first) & 0xFF]
        stream[n] = key_box[(first + second) & 0xFF]
    return bytes(stream)


class AudioDecryptor:
    """Decrypts one audio payload, tracking the absolute offset reached."""

    def __init__(self, key_box: bytes, position: int = 0):
        self._stream = keystream_period(key_box)
        self.position = position

    def keystream(self, offset: int, length: int) -> bytes:
        shift = offset & 0xFF
        pattern = self._stream[shift:] + self._stream[:shift]
        return (pattern * (length // 256 + 1))[:length]

    def decrypt_at(self, data: bytes, offset: int) -> bytes:
        return xor_bytes(data, self.keystream(offset, len(data)))

    def decrypt(self, data: bytes) -> bytes:
        out = self.decrypt_at(data, self.position)
        self.position += len(data)
        return out

    def iter_decrypt(self, chunks: Iterable[bytes]) -> Iterator[bytes]:
        for chunk in chunks:
            yield self.decrypt(chunk)
