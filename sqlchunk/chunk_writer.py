from pathlib import Path
from typing import Optional, TextIO

from .utils import chunk_path, footer_lines, header_lines


class ChunkWriter:
    """
    Owns the open chunk file, the per-chunk statement counter and the chunk
    index.

    A chunk that reaches `chunk_size` statements is marked sealed and the
    next chunk is only opened when another statement arrives. Pass-through
    lines seen in between are held back and written after the next header,
    or before the last footer if no statement follows. That way an input
    with an exact multiple of `chunk_size` statements never produces a
    trailing chunk with no statements in it.
    """

    def __init__(
        self,
        output_dir: Path,
        chunk_size: int,
        server_tuning: bool = False,
        encoding: str = "utf-8",
        debug: bool = False,
    ):
        self.output_dir = output_dir
        self.chunk_size = chunk_size
        self.header = header_lines(server_tuning)
        self.footer = footer_lines()
        self.encoding = encoding
        self.debug = debug
        self.index = 0
        self.count = 0
        self.total = 0
        self.sealed = False
        self.paths: list[Path] = []
        self.pending: list[str] = []
        self.fp: Optional[TextIO] = None

    def __enter__(self) -> "ChunkWriter":
        self.open_new_chunk()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _write_lines(self, lines: list[str]) -> None:
        for line in lines:
            self.fp.write(line + "\n")

    def open_new_chunk(self) -> Path:
        self.index += 1
        path = chunk_path(self.output_dir, self.index)
        if self.debug:
            print(f"[DEBUG] Starting new chunk: {path}")
        self.fp = path.open("w", encoding=self.encoding)
        self.paths.append(path)
        self._write_lines(self.header)
        self.sealed = False
        if self.pending:
            self._write_lines(self.pending)
            self.pending = []
        return path

    def rotate(self) -> None:
        self._write_lines(self.footer)
        self.fp.close()
        if self.debug:
            print(f"[DEBUG] Completed chunk {self.index} with {self.count} statements")
        self.count = 0
        self.open_new_chunk()

    def write_statement(self, text: str) -> None:
        if self.sealed:
            self.rotate()
        self._write_lines(text.split("\n"))
        self.count += 1
        self.total += 1

    def maybe_rotate(self) -> bool:
        if self.count >= self.chunk_size:
            self.sealed = True
        return self.sealed

    def write_passthrough(self, lines: list[str]) -> None:
        if self.sealed:
            self.pending.extend(lines)
        else:
            self._write_lines(lines)

    def finalize(self) -> None:
        if self.fp is None or self.fp.closed:
            return
        if self.pending:
            self._write_lines(self.pending)
            self.pending = []
        self._write_lines(self.footer)
        self.fp.close()
        if self.debug:
            print(f"[DEBUG] Added footer to final chunk {self.index}")

    def close(self) -> None:
        if self.fp is not None and not self.fp.closed:
            self.fp.close()

    def discard(self) -> None:
        self.close()
        for path in self.paths:
            path.unlink(missing_ok=True)
        self.paths = []


class StructureWriter:
    """
    Collects CREATE TABLE blocks into a single file, each followed by a blank
    line, wrapped in the same header and footer as the chunks.
    """

    def __init__(self, path: Path, server_tuning: bool = False, encoding: str = "utf-8"):
        self.path = path
        self.count = 0
        self.fp = path.open("w", encoding=encoding)
        for line in header_lines(server_tuning):
            self.fp.write(line + "\n")

    def __enter__(self) -> "StructureWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.fp.closed:
            self.fp.close()

    def write_block(self, lines: list[str]) -> None:
        for line in lines:
            self.fp.write(line + "\n")
        self.fp.write("\n")
        self.count += 1

    def finalize(self) -> None:
        for line in footer_lines():
            self.fp.write(line + "\n")
        self.fp.close()
