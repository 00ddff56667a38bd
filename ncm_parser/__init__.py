"""Parser for NetEase Cloud Music ``.ncm`` files::

    ncm = from_bytes(Path("song.ncm").read_bytes())
    audio = ncm.get_music()
    cover = ncm.get_image()
    meta = ncm.get_metadata()

For large files, :func:`open_file` parses the header only and decrypts the
audio chunk by chunk with ``iter_music()``.
"""

from .container import Chunk, Container, Header
from .errors import (
    Base64DecodeError,
    EmptyKey,
    FormatError,
    InvalidUtf8,
    KeyUnveilFailed,
    MetadataDecryptFailed,
    MetadataPrefixMismatch,
    MetadataTooShort,
    MissingKey,
    NCMError,
    ParseMetadataFailed,
    TruncatedInput,
    UnveilError,
)
from .metadata import NeteaseMusicMetadata
from .ncm import NCMFile, NCMStream, from_bytes, from_reader, open_file, open_stream
from .stream import AudioDecryptor

__version__ = "0.3.0"

__all__ = [
    "AudioDecryptor",
    "Base64DecodeError",
    "Chunk",
    "Container",
    "EmptyKey",
    "FormatError",
    "Header",
    "InvalidUtf8",
    "KeyUnveilFailed",
    "MetadataDecryptFailed",
    "MetadataPrefixMismatch",
    "MetadataTooShort",
    "MissingKey",
    "NCMError",
    "NCMFile",
    "NCMStream",
    "NeteaseMusicMetadata",
    "ParseMetadataFailed",
    "TruncatedInput",
    "UnveilError",
    "from_bytes",
    "from_reader",
    "open_file",
    "open_stream",
]
