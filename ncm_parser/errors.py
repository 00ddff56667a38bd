"""Exceptions raised while parsing and unveiling NCM files."""


class NCMError(ValueError):
    """Base class of every NCM failure."""


class FormatError(NCMError):
    """The input does not start with the NCM magic."""


class TruncatedInput(NCMError):
    """Fewer bytes are available than a declared length requires."""

    def __init__(self, wanted: int, available: int, offset: int):
        super().__init__(
            f"Unexpected EOF at offset {offset}: wanted {wanted} bytes, got {available}")
        self.wanted = wanted
        self.available = available
        self.offset = offset


class UnveilError(NCMError):
    """One artifact could not be recovered; the others may still be."""


class MissingKey(UnveilError):
    pass


class EmptyKey(UnveilError):
    pass


class KeyUnveilFailed(UnveilError):
    pass


class MetadataTooShort(UnveilError):
    pass


class Base64DecodeError(UnveilError):
    pass


class MetadataDecryptFailed(UnveilError):
    pass


class MetadataPrefixMismatch(UnveilError):
    pass


class InvalidUtf8(UnveilError):
    pass


class ParseMetadataFailed(UnveilError):
    """The metadata text is not a JSON object."""
