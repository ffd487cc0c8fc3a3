"""Gathering the text of a file or directory tree into a single log file."""

from __future__ import annotations

import secrets
import string
import tempfile
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Union

from logrt.file_handler import ExtractionError, process_item

OUTPUT_DIR_NAME = "log_rt"
_SUFFIX_ALPHABET = string.ascii_letters + string.digits
_SUFFIX_LENGTH = 6


@dataclass(frozen=True)
class FileProcessed:
    """An item has been picked up for processing."""

    name: str


@dataclass(frozen=True)
class AnalysisFailed:
    """The analysis stopped with an error."""

    message: str


@dataclass(frozen=True)
class Completed:
    """The analysis finished and wrote its log."""

    log_path: Path
    elapsed_ms: int


Update = Union[FileProcessed, AnalysisFailed, Completed]
Notify = Callable[[Update], object]


class AnalysisError(Exception):
    """Raised when an input cannot be analysed."""


def _name_callback(notify: Notify | None) -> Callable[[str], object] | None:
    if notify is None:
        return None
    return lambda name: notify(FileProcessed(name))


def process_dir(
    input_path: str | PathLike[str],
    lines: list[str],
    notify: Notify | None = None,
) -> list[str]:
    """Collect the text of every file below ``input_path`` into ``lines``."""
    on_name = _name_callback(notify)
    root = Path(input_path)
    try:
        entries = sorted(root.iterdir())
    except OSError:
        return lines
    for entry in entries:
        if entry.is_file():
            process_item(entry, entry.name, lines, 0, on_name)
        elif entry.is_dir():
            process_dir(entry, lines, notify)
    return lines


def split_lines(chunks: Iterable[str]) -> list[str]:
    """Split text chunks into their non-empty lines (``\\n`` or ``\\r\\n`` endings)."""
    result = []
    for chunk in chunks:
        for line in chunk.split("\n"):
            if line.endswith("\r"):
                line = line[:-1]
            if line:
                result.append(line)
    return result


def default_output_dir() -> Path:
    """The directory generated logs go to by default."""
    return Path(tempfile.gettempdir()) / OUTPUT_DIR_NAME


def _random_suffix() -> str:
    return "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))


def process_input_path(
    input_path: str | PathLike[str],
    notify: Notify | None = None,
    sorted_output: bool = True,
    output_dir: str | PathLike[str] | None = None,
) -> Path:
    """Extract the text of ``input_path`` and write it to a new log file.

    With ``sorted_output`` the text is split into non-empty lines and sorted.
    Returns the path of the log written.
    """
    path = Path(input_path)
    lines: list[str] = []
    try:
        if path.is_dir():
            process_dir(path, lines, notify)
        else:
            process_item(path, path.name, lines, 0, _name_callback(notify))
    except ExtractionError as exc:
        raise AnalysisError(str(exc)) from exc

    if sorted_output:
        lines = sorted(split_lines(lines))

    target_dir = Path(output_dir) if output_dir is not None else default_output_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / f"{path.stem}_{_random_suffix()}.log"
    with log_path.open("w", encoding="utf-8", newline="\n") as output:
        for line in lines:
            output.write(line)
            output.write("\n")
    return log_path


def run_analysis(
    input_path: str | PathLike[str],
    notify: Notify | None = None,
    sorted_output: bool = True,
    output_dir: str | PathLike[str] | None = None,
) -> Completed | AnalysisFailed:
    """Run an analysis, report its outcome through ``notify`` and return it."""
    started = time.monotonic()
    outcome: Completed | AnalysisFailed
    try:
        log_path = process_input_path(input_path, notify, sorted_output, output_dir)
    except (AnalysisError, OSError) as exc:
        outcome = AnalysisFailed(f"Analysis failed: {exc}")
    else:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        outcome = Completed(log_path, elapsed_ms)
    if notify is not None:
        notify(outcome)
    return outcome