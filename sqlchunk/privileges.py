"""
Comment out statements that need the SUPER privilege so that chunk files can
be imported by an ordinary user, e.g. on a managed database service.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .classifier import ends_statement, is_comment_or_blank
from .exceptions import ConfigurationError
from .utils import find_chunk_files

SUPER_PATTERNS = [
    (re.compile(r"SET\s+(?:GLOBAL|@@GLOBAL)", re.IGNORECASE), "SET GLOBAL"),
    (re.compile(r"SET\s+(?:SESSION\s+)?sql_log_bin\b", re.IGNORECASE), "sql_log_bin"),
    (
        re.compile(r"^\s*(?:INSTALL|UNINSTALL)\s+(?:PLUGIN|SONAME)", re.IGNORECASE),
        "PLUGIN management",
    ),
    (
        re.compile(r"CREATE\s+USER.+IDENTIFIED\s+WITH\s+'auth_socket'", re.IGNORECASE),
        "CREATE USER with auth_socket",
    ),
]

REMOVED_MARKER = "-- The following statement requiring SUPER privileges was removed:"
END_MARKER = "-- End of removed statement"


@dataclass
class StripResult:
    lines: list[str]
    total: int = 0
    removed: int = 0
    reasons: list[str] = field(default_factory=list)


@dataclass
class FileStripResult:
    source: Path
    destination: Path
    total: int
    removed: int


def super_reason(line: str) -> Optional[str]:
    for pattern, reason in SUPER_PATTERNS:
        if pattern.search(line):
            return reason
    return None


def strip_super_statements(lines: list[str], verbose: bool = False) -> StripResult:
    """
    Replace statements needing SUPER with comment markers.

    A removed statement runs from its matching line until a line ending with
    a semicolon. Blank and comment lines are always kept as they are.
    """
    result = StripResult(lines=[])
    reason = None
    for line in lines:
        result.total += 1
        if is_comment_or_blank(line):
            result.lines.append(line)
            continue
        if reason is None:
            reason = super_reason(line)
            if reason is not None:
                result.reasons.append(reason)
                result.lines.append(REMOVED_MARKER)
                result.lines.append(f"-- {line}")
        if reason is None:
            result.lines.append(line)
            continue
        if verbose:
            print(f"  - Removing line ({reason}): {line}")
        result.removed += 1
        if ends_statement(line):
            result.lines.append(END_MARKER)
            reason = None
    return result


def strip_file(
    source: Path,
    destination: Path,
    dry_run: bool = False,
    verbose: bool = False,
    encoding: str = "utf-8",
) -> FileStripResult:
    if verbose:
        print(f"Processing file: {source}")
    with source.open("r", encoding=encoding, errors="replace") as fp:
        lines = [line.rstrip("\n") for line in fp]
    result = strip_super_statements(lines, verbose)
    if not dry_run:
        with destination.open("w", encoding=encoding) as fp:
            for line in result.lines:
                fp.write(line + "\n")
    return FileStripResult(source, destination, result.total, result.removed)


def strip_directory(
    chunks_dir: Path,
    output_dir: Path,
    dry_run: bool = False,
    verbose: bool = False,
) -> list[FileStripResult]:
    if not chunks_dir.is_dir():
        raise ConfigurationError(f"Chunks directory '{chunks_dir}' does not exist.")
    chunk_files = find_chunk_files(chunks_dir)
    if not chunk_files:
        raise ConfigurationError(f"No chunk files found in '{chunks_dir}'")
    if output_dir.resolve() == chunks_dir.resolve():
        raise ConfigurationError("Output directory must differ from the chunks directory.")
    print(f"Found {len(chunk_files)} chunk files in {chunks_dir}")
    if not dry_run and not output_dir.is_dir():
        print(f"Creating output directory: {output_dir}")
        output_dir.mkdir(parents=True)

    results = []
    for i, chunk_file in enumerate(chunk_files, start=1):
        print(f"[{i}/{len(chunk_files)}] ", end="")
        result = strip_file(chunk_file, output_dir / chunk_file.name, dry_run, verbose)
        if dry_run:
            if result.removed > 0:
                print(
                    f"Would process {chunk_file} and remove {result.removed} "
                    f"out of {result.total} lines"
                )
            else:
                print(f"Would process {chunk_file} (no SUPER privilege lines found)")
        elif result.removed > 0:
            print(
                f"Processed {chunk_file} -> {result.destination} "
                f"(removed {result.removed} out of {result.total} lines)"
            )
        else:
            print(f"Processed {chunk_file} -> {result.destination}")
        results.append(result)
    return results
