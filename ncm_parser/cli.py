"""Command line front end: ``ncmdump [files...] [-d DIR] [-f LIST] [-o OUT]``."""

import argparse
import concurrent.futures
import logging
from pathlib import Path

from mutagen import MutagenError

from .dump import DumpResult, dump

NO_OUTPUT = "No output when enabling '--no-music' only."


def process_file(path: Path, output_dir: Path | None, args: argparse.Namespace) -> DumpResult:
    return dump(
        path,
        str(output_dir) if output_dir else None,
        with_music=not args.no_music,
        with_image=args.cover,
        with_metadata=args.metadata,
        fix_tags=not args.no_tags,
    )


def read_filelist(path: str | Path) -> list[Path]:
    """Paths listed one per line, in UTF-8 or GBK."""
    raw = Path(path).read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        text = raw.decode("gbk")
    return [Path(line) for line in text.splitlines() if line.strip()]


def scan_directory(source: Path, recursive: bool, output: Path | None) -> list[tuple[Path, Path | None]]:
    entries = source.rglob("*.ncm") if recursive else source.glob("*.ncm")
    jobs = []
    for entry in sorted(entries):
        dest = output / entry.relative_to(source).parent if output else entry.parent
        jobs.append((entry, dest))
    return jobs


def collect(args: argparse.Namespace) -> list[tuple[Path, Path | None]]:
    output = Path(args.output) if args.output else None
    jobs = []
    paths = [Path(f) for f in args.files]
    for filelist in args.filelist:
        try:
            paths.extend(read_filelist(filelist))
        except (OSError, UnicodeDecodeError) as exc:
            if not args.skip_errors:
                raise
            print(f"[Error] {exc} '{filelist}'")
    if args.directory:
        paths.append(Path(args.directory))

    for path in paths:
        if path.is_dir():
            jobs.extend(scan_directory(path, args.recursive, output))
        elif path.is_file() and path.suffix == ".ncm":
            jobs.append((path, output or path.parent))
        elif not path.exists():
            if not args.skip_errors:
                raise FileNotFoundError(f"No such file or directory: '{path}'")
            print(f"[Error] No such file or directory '{path}'")
        else:
            logging.info("Skipping '%s': not an .ncm file", path)
    return jobs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ncmdump", description="Convert NCM files")
    parser.add_argument("files", nargs="*", help="Input files or folders")
    parser.add_argument("-d", "--directory", help="Process folder")
    parser.add_argument("-f", "--filelist", action="append", default=[],
                        help="Text file listing input files or folders, one per line")
    parser.add_argument("-r", "--recursive", action="store_true", help="Recursive mode")
    parser.add_argument("-o", "--output", help="Output folder")
    parser.add_argument("--no-music", action="store_true", help="Do not write the audio")
    parser.add_argument("--cover", action="store_true", help="Write the cover image")
    parser.add_argument("--metadata", action="store_true", help="Write the metadata JSON")
    parser.add_argument("--no-tags", action="store_true", help="Do not tag the audio")
    parser.add_argument("-t", "--threads", type=int, default=0,
                        help="Number of parallel conversions, 0 for auto")
    parser.add_argument("-s", "--skip-errors", action="store_true",
                        help="Report errors and keep going instead of stopping")
    parser.add_argument("-q", "--quiet", action="store_true", help="Hide info and warning logs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print debug info")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.no_music and not (args.cover or args.metadata):
        parser.error(NO_OUTPUT)
    if args.threads < 0:
        parser.error("--threads must not be negative")
    levels = [logging.INFO, logging.ERROR, logging.DEBUG, logging.DEBUG]
    logging.basicConfig(level=levels[args.quiet + args.verbose * 2], format="%(message)s")

    try:
        jobs = collect(args)
    except (OSError, ValueError) as exc:
        print(f"[Error] {exc}")
        return 1

    failed = 0
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=args.threads or None)
    try:
        futures = [(path, executor.submit(process_file, path, dest, args)) for path, dest in jobs]
        for i, (path, future) in enumerate(futures, 1):
            try:
                result = future.result()
            except (OSError, ValueError, MutagenError) as exc:
                print(f"[{i}/{len(futures)}] [Error] {exc} '{path}'")
                failed += 1
                if not args.skip_errors:
                    break
                continue
            for err in result.errors:
                logging.warning("[Warn] %s '%s'", err, path)
            written = result.audio_path or result.image_path or result.metadata_path
            print(f"[{i}/{len(futures)}] [Done] '{path}' -> '{written}'")
    finally:
        executor.shutdown(wait=True, cancel_futures=True)
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
