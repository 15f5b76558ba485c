from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from mtreewriter.constants import COMPRESS_GZIP, COMPRESS_NONE, COMPRESS_ZSTD, DEFAULT_READ_CHUNK
from mtreewriter.digests import supported_keywords
from mtreewriter.entry import FileType, entry_from_path
from mtreewriter.errors import MtreeError
from mtreewriter.keywords import DEFAULT_KEYWORDS
from mtreewriter.sink import open_sink
from mtreewriter.writer import MtreeWriter


def _arc_name(*parts: str) -> str:
    """Join walk components into a manifest name with '/' separators.

    Empty and '.' segments drop out and '..' is refused. Only the native
    separator splits, so a backslash stays part of a POSIX file name.
    Nothing left over names the root, '.'.
    """
    segs: List[str] = []
    for part in parts:
        for seg in part.replace(os.sep, "/").split("/"):
            if seg in ("", "."):
                continue
            if seg == "..":
                raise ValueError(f"'..' not allowed in manifest name: {part}")
            segs.append(seg)
    return "/".join(segs) or "."


def _iter_tree(inputs: Iterable[str]) -> Iterator[Tuple[str, str]]:
    """Yield ``(fs_path, arc_path)`` for every input, directories first.

    Directories are walked in sorted order; symlinks are listed but never
    followed.
    """
    for raw in inputs:
        p = Path(raw)
        base = p.name or p.resolve().name
        yield str(p), _arc_name(base)
        if p.is_symlink() or not p.is_dir():
            continue
        for root, dirnames, filenames in os.walk(str(p)):
            dirnames.sort()
            for name in sorted(dirnames + filenames):
                full = os.path.join(root, name)
                rel = os.path.relpath(full, start=str(p))
                yield full, _arc_name(base, rel)
            # prune symlink directories to avoid walking into them
            dirnames[:] = [d for d in dirnames if not os.path.islink(os.path.join(root, d))]


def _stream_content(w: MtreeWriter, fs_path: str) -> int:
    consumed = 0
    with open(fs_path, "rb") as rf:
        while True:
            chunk = rf.read(DEFAULT_READ_CHUNK)
            if not chunk:
                break
            consumed += w.write_data(chunk)
    return consumed


def _keyword_options(enable: Optional[List[str]], disable: Optional[List[str]]) -> List[Tuple[str, Optional[str]]]:
    opts: List[Tuple[str, Optional[str]]] = []
    for k in enable or []:
        opts.append((k, "1"))
    for k in disable or []:
        opts.append((k, None))
    return opts


def cmd_create(
    output: str,
    inputs: List[str],
    *,
    enable: Optional[List[str]] = None,
    disable: Optional[List[str]] = None,
    compression: str = COMPRESS_NONE,
    quiet: bool = False,
) -> bool:
    """Write an mtree specification describing filesystem paths.

    Args:
        output: Destination path, or ``-`` for standard output.
        inputs: Files and directories to describe.
        enable: Keywords to switch on in addition to the defaults.
        disable: Keywords to switch off.
        compression: Stream compression: "none", "gzip" or "zstd".
        quiet: Suppress per-entry progress lines.
    """
    # Keep stdout clean when the manifest itself goes there
    progress = sys.stderr if output == "-" else sys.stdout
    counts = {"files": 0, "dirs": 0, "links": 0, "other": 0}
    hashed = 0
    t0 = time.time()

    with open_sink(output, compression) as sink:
        with MtreeWriter(sink) as w:
            for key in w.set_options(_keyword_options(enable, disable)):
                print(f"Warning: keyword '{key}' is not supported; ignored", file=sys.stderr)
            for fs_path, arc in _iter_tree(inputs):
                entry = entry_from_path(fs_path, arc)
                w.write_header(entry)
                if entry.filetype == FileType.REGULAR:
                    got = _stream_content(w, fs_path)
                    hashed += got
                    if got != entry.size:
                        print(f"Warning: {fs_path} changed size while reading ({got} of {entry.size} bytes)", file=sys.stderr)
                    counts["files"] += 1
                elif entry.filetype == FileType.DIRECTORY:
                    counts["dirs"] += 1
                elif entry.filetype == FileType.SYMLINK:
                    counts["links"] += 1
                else:
                    counts["other"] += 1
                w.finish_entry()
                if not quiet:
                    print(f"     adding: {arc}", file=progress)
            w.finish()

    dt = max(0.000001, time.time() - t0)
    mib = hashed / (1024.0 * 1024.0)
    print(
        f"Done: {counts['files']} files, {counts['dirs']} dirs, {counts['links']} links, "
        f"{counts['other']} other; {mib:.2f} MiB read in {dt:.1f}s; "
        f"{sink.bytes_in} manifest bytes",
        file=progress,
    )
    return True


def cmd_keywords() -> bool:
    """List the keywords this installation supports; defaults are starred."""
    for kw in sorted(supported_keywords(), key=lambda k: k.value):
        mark = "*" if kw in DEFAULT_KEYWORDS else " "
        print(f"{mark} {kw.value}")
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="mtreewriter",
        description="Write mtree specifications for files and directories",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_create = sub.add_parser("create", help="Describe paths as an mtree specification")
    ap_create.add_argument("output", help="Output path ('-' for stdout)")
    ap_create.add_argument("inputs", nargs="+", help="Input files/directories")
    ap_create.add_argument("-k", "--keyword", dest="enable", action="append", metavar="KEY", help="Enable a keyword (repeatable; 'all' for every keyword)")
    ap_create.add_argument("-K", "--no-keyword", dest="disable", action="append", metavar="KEY", help="Disable a keyword (repeatable)")
    ap_create.add_argument(
        "--compress",
        choices=[COMPRESS_NONE, COMPRESS_GZIP, COMPRESS_ZSTD],
        default=COMPRESS_NONE,
        help="Compress the output stream (zstd needs the zstandard package)",
    )
    ap_create.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    sub.add_parser("keywords", help="List supported keywords (* = enabled by default)")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "create":
            cmd_create(
                args.output,
                args.inputs,
                enable=args.enable,
                disable=args.disable,
                compression=args.compress,
                quiet=args.quiet,
            )
        elif args.cmd == "keywords":
            cmd_keywords()
        else:
            raise RuntimeError("Unknown command")
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (MtreeError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
