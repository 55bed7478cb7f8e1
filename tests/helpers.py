from pathlib import Path

from sqlchunk.utils import footer_lines, header_lines


def read_lines(path: Path) -> list[str]:
    return path.read_text().splitlines()


def chunk_body(path: Path, server_tuning: bool = False) -> list[str]:
    lines = read_lines(path)
    header = header_lines(server_tuning)
    footer = footer_lines()
    assert lines[: len(header)] == header
    assert lines[-len(footer) :] == footer
    return lines[len(header) : -len(footer)]


def body_statements(path: Path) -> list[str]:
    return [
        line
        for line in chunk_body(path)
        if line.upper().startswith(("INSERT INTO", "REPLACE INTO"))
    ]
