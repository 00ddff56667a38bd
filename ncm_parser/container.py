"""Structural parsing of the NCM container.

Layout, all integers little endian::

    8 bytes   magic "CTENFDAM"
    2 bytes   reserved
    u32 + n   key chunk
    u32 + n   metadata chunk
    4 bytes   checksum (kept, not verified)
    5 bytes   reserved
    u32 + n   cover image chunk
    rest      audio payload

Only structural problems are reported here; nothing is decrypted.
"""

import logging
from dataclasses import dataclass

from .cursor import ByteCursor
from .errors import FormatError
from .keys import CRC_SIZE, HEADER_GAP, IMAGE_GAP, MAGIC

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Chunk:
    offset: int
    data: bytes

    def __len__(self) -> int:
        return len(self.data)

    def __bytes__(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class Header:
    key_chunk: Chunk
    meta_chunk: Chunk
    crc: bytes
    image_chunk: Chunk
    audio_offset: int

    magic = MAGIC


@dataclass(frozen=True)
class Container(Header):
    audio_chunk: Chunk


def _read_chunk(cursor: ByteCursor) -> Chunk:
    length = cursor.read_u32()
    offset = cursor.tell()
    return Chunk(offset, cursor.read_exact(length))


def parse_header(cursor: ByteCursor) -> Header:
    """Read everything before the audio payload."""
    if cursor.read_exact(len(MAGIC)) != MAGIC:
        raise FormatError("Not netease protected file")
    cursor.skip(HEADER_GAP)
    key_chunk = _read_chunk(cursor)
    meta_chunk = _read_chunk(cursor)
    crc = cursor.read_exact(CRC_SIZE)
    cursor.skip(IMAGE_GAP)
    image_chunk = _read_chunk(cursor)
    logger.debug("key %d bytes, metadata %d bytes, image %d bytes, audio at %d",
                 len(key_chunk), len(meta_chunk), len(image_chunk), cursor.tell())
    return Header(key_chunk, meta_chunk, crc, image_chunk, cursor.tell())


def parse_container(cursor: ByteCursor) -> Container:
    header = parse_header(cursor)
    audio = Chunk(header.audio_offset, cursor.read_all())
    return Container(
        key_chunk=header.key_chunk,
        meta_chunk=header.meta_chunk,
        crc=header.crc,
        image_chunk=header.image_chunk,
        audio_offset=header.audio_offset,
        audio_chunk=audio,
    )
