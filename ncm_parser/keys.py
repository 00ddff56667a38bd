"""Fixed keys, masks and prefixes of the NCM container."""

MAGIC = b"CTENFDAM"

CORE_KEY = bytes(
    [0x68, 0x7A, 0x48, 0x52, 0x41, 0x6D, 0x73, 0x6F,
     0x35, 0x6B, 0x49, 0x6E, 0x62, 0x61, 0x78, 0x57])
META_KEY = bytes(
    [0x23, 0x31, 0x34, 0x6C, 0x6A, 0x6B, 0x5F, 0x21,
     0x5C, 0x5D, 0x26, 0x30, 0x55, 0x3C, 0x27, 0x28])

KEY_MASK = 0x64
META_MASK = 0x63

KEY_PREFIX = b"neteasecloudmusic"
META_PREFIX = b"163 key(Don't modify):"
META_JSON_PREFIX = b"music:"

# gap after the magic, then checksum and gap before the image length
HEADER_GAP = 2
CRC_SIZE = 4
IMAGE_GAP = 5
