"""Typed view of the metadata JSON.

Field names follow what NetEase clients write; they are not documented
anywhere, so every field is optional.
"""

import json

from .errors import ParseMetadataFailed


class NeteaseMusicMetadata:
    def __init__(self, raw: dict | None):
        raw = raw or {}
        self.raw = raw
        self.music_id = raw.get("musicId", 0)
        self.name = raw.get("musicName", "")
        self.album_id = raw.get("albumId", 0)
        self.album = raw.get("album", "")
        self.album_pic_doc_id = raw.get("albumPicDocId", "")
        self.album_pic_url = raw.get("albumPic", "")
        self.artists: list[tuple[str, int]] = []
        for a in raw.get("artist", []):
            if isinstance(a, list) and a:
                self.artists.append((str(a[0]), a[1] if len(a) > 1 else 0))
        self.format = raw.get("format", "")
        self.bitrate = raw.get("bitrate", 0)
        self.duration = raw.get("duration", 0)
        self.mp3_doc_id = raw.get("mp3DocId", "")
        self.mv_id = raw.get("mvId", 0)
        self.alias = list(raw.get("alias", []))
        self.trans_names = list(raw.get("transNames", []))

    @classmethod
    def from_json(cls, text: str) -> "NeteaseMusicMetadata":
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseMetadataFailed(f"Metadata is not JSON: {exc}") from exc
        if not isinstance(raw, dict):
            raise ParseMetadataFailed(
                f"Metadata must be a JSON object, got {type(raw).__name__}")
        return cls(raw)

    @property
    def artist(self) -> str:
        return "/".join(name for name, _ in self.artists)

    def __repr__(self) -> str:
        return (f"NeteaseMusicMetadata(name={self.name!r}, artist={self.artist!r}, "
                f"album={self.album!r}, format={self.format!r})")
