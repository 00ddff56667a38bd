"""Unveiling of the key and metadata chunks, and the key box construction."""

import base64
import binascii
import logging

from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

from .errors import (
    Base64DecodeError,
    EmptyKey,
    InvalidUtf8,
    KeyUnveilFailed,
    MetadataDecryptFailed,
    MetadataPrefixMismatch,
    MetadataTooShort,
    MissingKey,
)
from .keys import (
    CORE_KEY,
    KEY_MASK,
    KEY_PREFIX,
    META_JSON_PREFIX,
    META_KEY,
    META_MASK,
    META_PREFIX,
)

logger = logging.getLogger(__name__)


def xor_bytes(data: bytes, mask: bytes) -> bytes:
    """XOR two equally long byte strings using integer arithmetic."""
    value = int.from_bytes(data, "little") ^ int.from_bytes(mask, "little")
    return value.to_bytes(len(data), "little")


def mask(data: bytes, value: int) -> bytes:
    """XOR every byte with ``value``. Applying it twice is a no-op."""
    return bytes(data).translate(bytes(b ^ value for b in range(256)))


def aes_ecb_decrypt(key: bytes, data: bytes) -> bytes:
    cipher = AES.new(key, AES.MODE_ECB)
    return unpad(cipher.decrypt(data), AES.block_size)


def unveil_key(key_chunk: bytes) -> bytes:
    """Recover the stream cipher key from the key chunk."""
    if not key_chunk:
        raise MissingKey("Key chunk is empty")
    try:
        plain = aes_ecb_decrypt(CORE_KEY, mask(key_chunk, KEY_MASK))
    except ValueError as exc:
        raise KeyUnveilFailed(f"Cannot decrypt key chunk: {exc}") from exc
    if not plain.startswith(KEY_PREFIX):
        raise KeyUnveilFailed("Decrypted key does not start with %r" % KEY_PREFIX)
    return plain[len(KEY_PREFIX):]


def build_key_box(key: bytes) -> bytes:
    """Build the 256 entry permutation used by the audio cipher."""
    if not key:
        raise EmptyKey("Cannot build key box from an empty key")
    key_len = len(key)
    box = bytearray(range(256))
    last_byte = 0
    for i in range(256):
        swap = box[i]
        c = (swap + last_byte + key[i % key_len]) & 0xFF
        box[i] = box[c]
        box[c] = swap
        last_byte = c
    return bytes(box)


def _b64decode(data: bytes) -> bytes:
    # some clients drop the trailing '=' padding
    data = data.rstrip(b"=")
    data += b"=" * (-len(data) % 4)
    return base64.b64decode(data, validate=True)


def unveil_metadata(meta_chunk: bytes) -> str:
    """Recover the JSON text from the metadata chunk.

    An empty chunk means the file carries no metadata and yields ``""``.
    """
    if not meta_chunk:
        return ""
    data = mask(meta_chunk, META_MASK)
    if len(data) < len(META_PREFIX):
        raise MetadataTooShort(
            f"Metadata chunk has {len(data)} bytes, prefix needs {len(META_PREFIX)}")
    if not data.startswith(META_PREFIX):
        raise MetadataPrefixMismatch(
            "Metadata chunk does not start with %r" % META_PREFIX)
    data = data[len(META_PREFIX):]
    try:
        data = _b64decode(data)
    except binascii.Error as exc:
        raise Base64DecodeError(f"Metadata is not valid base64: {exc}") from exc
    try:
        data = aes_ecb_decrypt(META_KEY, data)
    except ValueError as exc:
        raise MetadataDecryptFailed(f"Cannot decrypt metadata: {exc}") from exc
    if not data.startswith(META_JSON_PREFIX):
        raise MetadataPrefixMismatch(
            "Decrypted metadata does not start with %r" % META_JSON_PREFIX)
    try:
        text = data[len(META_JSON_PREFIX):].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidUtf8(f"Metadata is not UTF-8: {exc}") from exc
    logger.debug("metadata unveiled, %d characters", len(text))
    return text
