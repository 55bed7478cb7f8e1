import re
from pathlib import Path

from .exceptions import ConfigurationError

CHUNK_NAME_RE = re.compile(r"^chunk_(\d+)\.sql$")

SESSION_HEADER = [
    "SET foreign_key_checks=0;",
    "SET unique_checks=0;",
    "SET autocommit=0;",
    "START TRANSACTION;",
]

# these need SUPER, see privileges.strip_super_statements
SERVER_TUNING = [
    "SET GLOBAL max_allowed_packet=1073741824;",
    "SET GLOBAL innodb_flush_log_at_trx_commit=2;",
    "SET sql_log_bin=0;",
]

SESSION_FOOTER = [
    "COMMIT;",
    "SET foreign_key_checks=1;",
    "SET unique_checks=1;",
    "SET autocommit=1;",
]


def header_lines(server_tuning: bool = False) -> list[str]:
    lines = list(SESSION_HEADER)
    if server_tuning:
        lines += SERVER_TUNING
    return lines + [""]


def footer_lines() -> list[str]:
    return [""] + SESSION_FOOTER


def chunk_path(directory: Path, index: int) -> Path:
    return directory / f"chunk_{index:02d}.sql"


def chunk_index(path: Path) -> int:
    match = CHUNK_NAME_RE.match(path.name)
    if match is None:
        raise ValueError(f"Not a chunk file: {path.name}")
    return int(match.group(1))


def find_chunk_files(directory: Path) -> list[Path]:
    """
    Get the chunk files of a directory in chunk order.

    Sorting is numeric so that chunk_100.sql comes after chunk_99.sql.
    """
    files = [
        entry
        for entry in directory.iterdir()
        if entry.is_file() and CHUNK_NAME_RE.match(entry.name)
    ]
    return sorted(files, key=chunk_index)


def select_chunk_range(files: list[Path], from_chunk: int, to_chunk: int) -> list[Path]:
    """
    Pick the chunks whose file index lies in the inclusive range. A
    `to_chunk` of 0 means the highest index present.

    Selection is by the number in the file name, not by list position.
    """
    if not files:
        raise ConfigurationError("No chunk files found")
    first = chunk_index(files[0])
    last = chunk_index(files[-1])
    if to_chunk == 0:
        to_chunk = last
    if from_chunk < 1 or from_chunk > last:
        raise ConfigurationError(
            f"From chunk ({from_chunk}) is out of range ({first}-{last})"
        )
    if to_chunk < from_chunk:
        raise ConfigurationError(
            f"To chunk ({to_chunk}) is out of range ({from_chunk}-{last})"
        )
    selected = [path for path in files if from_chunk <= chunk_index(path) <= to_chunk]
    if not selected:
        raise ConfigurationError(
            f"No chunk files between chunk {from_chunk} and chunk {to_chunk}"
        )
    return selected
