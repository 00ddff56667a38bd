"""Parsed NCM files and their artifacts.

Every artifact has a validated accessor that runs the full unveiling and raises
an :class:`~ncm_parser.errors.UnveilError` subclass on failure, and an
``_unchecked`` accessor that returns the raw chunk bytes untouched. A failure on
one artifact never prevents reading another.
"""

import logging
import os
from typing import BinaryIO, Iterator

from .container import Container, Header, parse_container, parse_header
from .crypto import build_key_box, unveil_key, unveil_metadata
from .cursor import BUFFER_SIZE, BufferCursor, ReaderCursor
from .metadata import NeteaseMusicMetadata
from .stream import AudioDecryptor

logger = logging.getLogger(__name__)


class _Artifacts:
    """Accessors shared by buffered and streamed files."""

    header: Header

    def get_key_unchecked(self) -> bytes:
        return self.header.key_chunk.data

    def get_key(self) -> bytes:
        return unveil_key(self.header.key_chunk.data)

    def get_key_box(self) -> bytes:
        return build_key_box(self.get_key())

    def get_metadata_unchecked(self) -> bytes:
        return self.header.meta_chunk.data

    def get_metadata(self) -> str:
        return unveil_metadata(self.header.meta_chunk.data)

    def get_parsed_metadata(self) -> NeteaseMusicMetadata | None:
        """Metadata as a record, or ``None`` if the file has none."""
        text = self.get_metadata()
        if not text:
            return None
        return NeteaseMusicMetadata.from_json(text)

    def get_image_unchecked(self) -> bytes:
        return self.header.image_chunk.data

    def get_image(self) -> bytes:
        # the cover is stored in the clear
        return self.header.image_chunk.data


class NCMFile(_Artifacts):
    """A fully parsed container held in memory."""

    def __init__(self, container: Container):
        self.container = container

    @property
    def header(self) -> Header:
        return self.container

    def get_music_unchecked(self) -> bytes:
        return self.container.audio_chunk.data

    def get_music(self) -> bytes:
        decryptor = AudioDecryptor(self.get_key_box())
        return decryptor.decrypt(self.container.audio_chunk.data)

    def iter_music(self, buffer_size: int = BUFFER_SIZE) -> Iterator[bytes]:
        decryptor = AudioDecryptor(self.get_key_box())
        cursor = BufferCursor(self.container.audio_chunk.data)
        return decryptor.iter_decrypt(cursor.iter_remaining(buffer_size))


class NCMStream(_Artifacts):
    """A container whose audio payload is still unread.

    The audio can be decrypted once, chunk by chunk, with :meth:`iter_music`.
    Use it as a context manager to release the underlying file.
    """

    def __init__(self, reader: BinaryIO, close: bool = False):
        self._reader = reader
        self._close = close
        self._cursor = ReaderCursor(reader)
        self._consumed = False
        try:
            self.header = parse_header(self._cursor)
        except Exception:
            self.close()
            raise

    def _take_audio(self, buffer_size: int) -> Iterator[bytes]:
        if self._consumed:
            raise RuntimeError("Audio payload has already been read")
        self._consumed = True
        return self._cursor.iter_remaining(buffer_size)

    def iter_music_unchecked(self, buffer_size: int = BUFFER_SIZE) -> Iterator[bytes]:
        return self._take_audio(buffer_size)

    def iter_music(self, buffer_size: int = BUFFER_SIZE) -> Iterator[bytes]:
        decryptor = AudioDecryptor(self.get_key_box())
        return decryptor.iter_decrypt(self._take_audio(buffer_size))

    def close(self) -> None:
        if self._close:
            self._reader.close()

    def __enter__(self) -> "NCMStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def from_bytes(data: bytes) -> NCMFile:
    """Parse a container already held in memory."""
    return NCMFile(parse_container(BufferCursor(data)))


def from_reader(reader: BinaryIO) -> NCMFile:
    """Parse a container read incrementally from a binary file object."""
    return NCMFile(parse_container(ReaderCursor(reader)))


def open_stream(reader: BinaryIO, close: bool = False) -> NCMStream:
    return NCMStream(reader, close=close)


def open_file(path: str | os.PathLike) -> NCMStream:
    """Open ``path`` for streaming; the file is closed if parsing fails."""
    stream = NCMStream(open(path, "rb"), close=True)
    logger.debug("opened %s, audio starts at %d", path, stream.header.audio_offset)
    return stream
