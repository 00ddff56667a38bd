"""Write the artifacts of an NCM file to disk and tag the audio."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from mutagen.flac import FLAC, Picture
from mutagen.id3 import APIC, ID3, ID3NoHeaderError, TALB, TIT2, TPE1

from .cursor import BUFFER_SIZE
from .errors import UnveilError
from .metadata import NeteaseMusicMetadata
from .ncm import open_file

logger = logging.getLogger(__name__)

PNG_MAGIC = bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A])


@dataclass
class DumpResult:
    source: Path
    audio_path: Path | None = None
    image_path: Path | None = None
    metadata_path: Path | None = None
    metadata: NeteaseMusicMetadata | None = None
    errors: list[UnveilError] = field(default_factory=list)


AUDIO_FORMATS = ("mp3", "flac")


def guess_audio_format(head: bytes, metadata: NeteaseMusicMetadata | None = None) -> str:
    """Sniff the decrypted header; fall back to the metadata ``format``."""
    if head[:4] == b"fLaC":
        return "flac"
    if head[:3] == b"ID3" or (len(head) > 1 and head[0] == 0xFF and head[1] & 0xE0 == 0xE0):
        return "mp3"
    fmt = metadata.format if metadata else None
    if isinstance(fmt, str) and fmt.lower() in AUDIO_FORMATS:
        return fmt.lower()
    return "mp3"


def guess_image_mime(image: bytes) -> str:
    return "image/png" if image.startswith(PNG_MAGIC) else "image/jpeg"


def guess_image_ext(image: bytes) -> str:
    return "png" if image.startswith(PNG_MAGIC) else "jpg"


def dump(path: str | os.PathLike,
         output_dir: str | os.PathLike | None = None,
         with_music: bool = True,
         with_image: bool = False,
         with_metadata: bool = False,
         fix_tags: bool = True,
         buffer_size: int = BUFFER_SIZE) -> DumpResult:
    """Decode ``path`` into files next to it or inside ``output_dir``.

    A broken metadata chunk is recorded in ``DumpResult.errors`` and does not
    stop the audio and image from being written. A broken key does stop the
    audio.
    """
    source = Path(path)
    out_path = source
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        out_path = Path(output_dir) / source.name
    result = DumpResult(source)

    with open_file(source) as ncm:
        meta_text = ""
        try:
            meta_text = ncm.get_metadata()
            result.metadata = ncm.get_parsed_metadata()
        except UnveilError as exc:
            logger.debug("metadata of %s unavailable: %s", source, exc)
            result.errors.append(exc)

        image = ncm.get_image()
        if with_image and image:
            result.image_path = out_path.with_suffix("." + guess_image_ext(image))
            result.image_path.write_bytes(image)

        if with_metadata and meta_text:
            result.metadata_path = out_path.with_suffix(".json")
            result.metadata_path.write_text(meta_text, encoding="utf-8")

        if with_music:
            output = None
            try:
                for chunk in ncm.iter_music(buffer_size):
                    if output is None:
                        fmt = guess_audio_format(chunk, result.metadata)
                        result.audio_path = out_path.with_suffix("." + fmt)
                        output = open(result.audio_path, "wb")
                    output.write(chunk)
            except BaseException:
                if output:
                    output.close()
                    result.audio_path.unlink(missing_ok=True)
                    result.audio_path = None
                raise
            if output:
                output.close()
            if result.audio_path and fix_tags and result.metadata:
                fix_metadata(result.audio_path, result.metadata, image)

    return result


def fix_metadata(audio_path: Path, metadata: NeteaseMusicMetadata, image: bytes = b"") -> None:
    fmt = audio_path.suffix.lstrip(".").lower()
    if fmt == "mp3":
        try:
            audio = ID3(str(audio_path))
        except ID3NoHeaderError:
            audio = ID3()
        audio.delall("APIC")
        audio.add(TIT2(encoding=3, text=metadata.name))
        audio.add(TALB(encoding=3, text=metadata.album))
        audio.add(TPE1(encoding=3, text=metadata.artist))
        if image:
            audio.add(APIC(encoding=3, mime=guess_image_mime(image), type=3, desc="Cover", data=image))
        audio.save(str(audio_path))
    elif fmt == "flac":
        audio = FLAC(str(audio_path))
        audio["title"] = metadata.name
        audio["album"] = metadata.album
        audio["artist"] = metadata.artist
        if image:
            pic = Picture()
            pic.data = image
            pic.type = 3
            pic.mime = guess_image_mime(image)
            audio.clear_pictures()
            audio.add_picture(pic)
        audio.save()
    else:
        logger.debug("no tag writer for %s", audio_path)
