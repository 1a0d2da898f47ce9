"""
File discovery and in-place rewriting.

Files are handled strictly one at a time. An in-place edit goes through a
temporary file in the target's directory which is either promoted with
os.replace or removed before the next file is touched.
"""

from __future__ import annotations

import enum
import logging
import os
import shutil
import tempfile
from typing import BinaryIO, Iterator, Optional, Sequence, TextIO

from .errors import OutputWriteError, SourceReadError
from .models import FileReport, RunOptions, RunSummary, TransformOptions
from .normalize import decode_source, encode_source, transform_text
from .rules import BACKUP_SUFFIX, BEGIN_MARKER, END_MARKER, SOURCE_EXTENSIONS


logger = logging.getLogger(__name__)


class InputSource(enum.Enum):
    STDIN = "stdin"
    PATHS = "paths"


def resolve_input_source(paths: Sequence[str]) -> InputSource:
    return InputSource.PATHS if paths else InputSource.STDIN


def has_source_extension(path: str) -> bool:
    _, ext = os.path.splitext(path)
    return ext[1:].lower() in SOURCE_EXTENSIONS


def is_variant_file(path: str) -> bool:
    """True for names with an extra dotted qualifier, e.g. ``view.ios.m``."""
    stem, _ = os.path.splitext(os.path.basename(path))
    return "." in stem.lstrip(".")


def _walk_error(e: OSError) -> None:
    raise SourceReadError(f"cannot list directory: {e.strerror or e}", path=e.filename) from e


def iter_candidate_files(paths: Sequence[str]) -> Iterator[str]:
    for target in paths:
        if os.path.isfile(target):
            yield target
            continue

        if not os.path.isdir(target):
            raise SourceReadError("no such file or directory", path=target)

        for dirpath, dirnames, filenames in os.walk(target, onerror=_walk_error):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for filename in sorted(filenames):
                yield os.path.join(dirpath, filename)


def _read_bytes(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise SourceReadError(f"cannot open for reading: {e.strerror or e}", path=path) from e


def _replace_in_place(path: str, data: bytes, backup: bool) -> Optional[str]:
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    backup_path = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=directory,
            prefix=".{}.".format(os.path.basename(path)),
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())

        shutil.copymode(path, tmp_path)

        if backup:
            backup_path = path + BACKUP_SUFFIX
            shutil.copy2(path, backup_path)

        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        raise OutputWriteError(f"cannot write transformed output: {e.strerror or e}", path=path) from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)

    return backup_path


def process_file(path: str, options: RunOptions, out: TextIO) -> FileReport:
    # a symlink is judged and rewritten through its target so the link survives
    target = os.path.realpath(path) if os.path.islink(path) else path

    if not (has_source_extension(path) and has_source_extension(target)):
        logger.info("skipping %s: extension not in %s", path, ",".join(sorted(SOURCE_EXTENSIONS)))
        return FileReport(path=path, action="skipped-extension")

    if options.skip_variants and (is_variant_file(path) or is_variant_file(target)):
        logger.info("skipping %s: variant file", path)
        return FileReport(path=path, action="skipped-variant")

    raw = _read_bytes(target)
    source = decode_source(raw)
    if source is None:
        logger.info("skipping %s: not a text file", path)
        return FileReport(path=path, action="skipped-binary")

    text, stats = transform_text(source.text, options)
    logger.debug("%s: encoding=%s lines=%d changed=%d", path, source.encoding, stats.lines, stats.lines_changed)

    report = FileReport(
        path=path,
        action="previewed",
        encoding=source.encoding,
        lines=stats.lines,
        lines_changed=stats.lines_changed,
    )

    if options.preview:
        out.write(BEGIN_MARKER.format(path=path) + "\n")
        out.write(text)
        out.write(END_MARKER.format(path=path) + "\n")
        return report

    data = encode_source(text, source.encoding)
    if data == raw:
        logger.debug("%s: already normalized", path)
        report.action = "unchanged"
        return report

    logger.info("rewriting %s (%d of %d lines changed)", path, stats.lines_changed, stats.lines)
    report.backup = _replace_in_place(target, data, options.backup)
    report.action = "rewritten"
    return report


def process_paths(paths: Sequence[str], options: RunOptions, out: TextIO) -> RunSummary:
    summary = RunSummary()
    for path in iter_candidate_files(paths):
        summary.add(process_file(path, options, out))
    return summary


def process_stream(instream: BinaryIO, outstream: BinaryIO, options: TransformOptions) -> None:
    """Filter raw bytes from ``instream`` to ``outstream``, keeping their encoding."""
    raw = instream.read()
    source = decode_source(raw)
    if source is None:
        logger.info("standard input is not text, copying it unchanged")
        outstream.write(raw)
        return

    text, stats = transform_text(source.text, options)
    logger.debug("<stdin>: encoding=%s lines=%d changed=%d", source.encoding, stats.lines, stats.lines_changed)
    outstream.write(encode_source(text, source.encoding))
