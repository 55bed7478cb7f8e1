"""
Split a mysqldump file into chunk files that can each be imported on their
own.

The input is read once, line by line. INSERT and REPLACE statements are
accumulated until their terminating line and written to the current chunk;
every `chunk_size` statements the chunk is sealed and a new one is started.
Each chunk is wrapped in a header that disables foreign key and unique
checks and opens a transaction, and a footer that commits and restores the
session settings.
"""

import os
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from .chunk_writer import ChunkWriter, StructureWriter
from .classifier import classify
from .exceptions import ConfigurationError, NoStatementsError
from .rewriter import to_replace_into
from .types import ParserMode, SourceStatement, SplitResult, SplitterConfig
from .utils import find_chunk_files

StatementCallback = Callable[[int], None]


@dataclass
class SplitterState:
    mode: ParserMode = "idle"
    statement: Optional[SourceStatement] = None
    line_number: int = 0
    dropped: int = 0
    warnings: list[str] = field(default_factory=list)


def estimate_statement_count(path: Path, encoding: str = "utf-8") -> int:
    """
    Count the lines mentioning INSERT INTO or REPLACE INTO.

    This is only an estimate for progress reporting: it also counts matches
    inside row data and comments, so it can disagree with what `split_dump`
    actually writes.
    """
    total = 0
    with path.open("r", encoding=encoding, errors="replace") as fp:
        for line in fp:
            lowered = line.lower()
            if "insert into" in lowered or "replace into" in lowered:
                total += 1
    return total


def validate_config(config: SplitterConfig) -> None:
    if config.chunk_size < 1:
        raise ConfigurationError(
            f"Chunk size must be a positive integer, got {config.chunk_size}"
        )
    if not config.input_path.is_file():
        raise ConfigurationError(f"Input file '{config.input_path}' does not exist.")
    if not os.access(config.input_path, os.R_OK):
        raise ConfigurationError(f"Input file '{config.input_path}' is not readable.")
    try:
        config.output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(
            f"Cannot create output directory '{config.output_dir}': {e}"
        ) from e
    if not os.access(config.output_dir, os.W_OK):
        raise ConfigurationError(
            f"Output directory '{config.output_dir}' is not writable."
        )
    if config.structure_path is not None:
        parent = config.structure_path.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot create directory for structure file '{config.structure_path}': {e}"
            ) from e
        if not os.access(parent, os.W_OK):
            raise ConfigurationError(f"Directory '{parent}' is not writable.")


def complete_statement(
    state: SplitterState,
    config: SplitterConfig,
    writer: ChunkWriter,
    structure: Optional[StructureWriter],
    on_statement: Optional[StatementCallback] = None,
) -> None:
    statement = state.statement
    state.statement = None
    state.mode = "idle"
    if statement.counted:
        text = statement.text
        if config.replace_into:
            text = to_replace_into(text)
        writer.write_statement(text)
        if writer.maybe_rotate() and config.debug:
            print(f"[DEBUG] Chunk {writer.index} is full at line {state.line_number}")
        if on_statement is not None:
            on_statement(writer.total)
    elif statement.classification == "CREATE_TABLE" and structure is not None:
        if config.debug:
            print(
                f"[DEBUG] Extracted CREATE TABLE from lines "
                f"{statement.start_line}-{state.line_number}"
            )
        structure.write_block(statement.lines)
    else:
        writer.write_passthrough(statement.lines)


def process_line(
    line: str,
    state: SplitterState,
    config: SplitterConfig,
    writer: ChunkWriter,
    structure: Optional[StructureWriter],
    on_statement: Optional[StatementCallback] = None,
) -> None:
    action = classify(line, state.mode, config.keep_unrecognized)
    if action.kind == "start":
        state.statement = SourceStatement(
            action.classification, state.line_number, [line]
        )
        if config.debug:
            print(
                f"[DEBUG] Found {action.classification} start at line "
                f"{state.line_number}: {line[:50]}..."
            )
        if action.complete:
            complete_statement(state, config, writer, structure, on_statement)
        else:
            state.mode = "inside-statement"
    elif action.kind == "continue":
        state.statement.lines.append(line)
    elif action.kind == "end":
        state.statement.lines.append(line)
        complete_statement(state, config, writer, structure, on_statement)
    elif action.kind == "passthrough":
        writer.write_passthrough([line])
    else:
        state.dropped += 1


def split_dump(
    config: SplitterConfig,
    on_statement: Optional[StatementCallback] = None,
) -> SplitResult:
    """
    Split `config.input_path` into chunk files under `config.output_dir`.

    `on_statement` is called with the running total after every INSERT or
    REPLACE statement is written.

    Raises ConfigurationError before reading anything if the paths or the
    chunk size are unusable, and NoStatementsError after a full scan if no
    INSERT or REPLACE statement was found, in which case every chunk file
    written by this run has been removed.
    """
    validate_config(config)
    state = SplitterState()

    stale = find_chunk_files(config.output_dir)
    if stale:
        state.warnings.append(
            f"Output directory '{config.output_dir}' already contains "
            f"{len(stale)} chunk files; they may be overwritten or left behind."
        )

    with ExitStack() as stack:
        structure = None
        if config.structure_path is not None:
            structure = stack.enter_context(
                StructureWriter(
                    config.structure_path, config.server_tuning, config.encoding
                )
            )
        writer = stack.enter_context(
            ChunkWriter(
                config.output_dir,
                config.chunk_size,
                config.server_tuning,
                config.encoding,
                config.debug,
            )
        )
        inp = stack.enter_context(
            config.input_path.open("r", encoding=config.encoding, errors="replace")
        )
        for raw in inp:
            state.line_number += 1
            if config.debug and state.line_number % 1000 == 0:
                print(f"[DEBUG] Processing line {state.line_number}")
            process_line(
                raw.rstrip("\n"), state, config, writer, structure, on_statement
            )

        if state.mode == "inside-statement":
            statement = state.statement
            state.warnings.append(
                f"File ended while processing a {statement.classification} statement "
                f"started at line {statement.start_line}. The last statement might be "
                "incomplete."
            )
            complete_statement(state, config, writer, structure, on_statement)

        if writer.total == 0:
            writer.discard()
            if structure is not None:
                structure.finalize()
            raise NoStatementsError(
                "No INSERT statements were processed. Removed empty chunks."
            )
        writer.finalize()
        if structure is not None:
            structure.finalize()

    if config.debug:
        print(
            f"[DEBUG] Final statistics: {writer.total} statements, {writer.index} chunks, "
            f"{state.line_number} lines, {state.dropped} lines dropped"
        )
    return SplitResult(
        statements=writer.total,
        chunks=list(writer.paths),
        lines_read=state.line_number,
        structure_path=config.structure_path,
        structure_statements=structure.count if structure is not None else 0,
        warnings=state.warnings,
    )
