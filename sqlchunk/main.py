import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from tqdm import tqdm

from .exceptions import ImportFailedError, SqlChunkError
from .importer import import_chunks
from .privileges import strip_directory
from .splitter import estimate_statement_count, split_dump, validate_config
from .types import ImportConfig, SplitterConfig

load_dotenv()


@click.group()
def cli():
    pass


@cli.command()
@click.option(
    "-i",
    "--input",
    "input_path",
    default="dump.sql",
    show_default=True,
    type=click.Path(path_type=Path),
    help="Input SQL file to process",
)
@click.option(
    "-o",
    "--output",
    "output_dir",
    default="./chunks",
    show_default=True,
    envvar="SQLCHUNK_OUTPUT_DIR",
    type=click.Path(path_type=Path),
    help="Output directory for chunks",
)
@click.option(
    "-c",
    "--chunk-size",
    default=200,
    show_default=True,
    envvar="SQLCHUNK_CHUNK_SIZE",
    type=int,
    help="Number of INSERT statements per chunk",
)
@click.option(
    "-r",
    "--replace-into",
    is_flag=True,
    default=False,
    help="Convert INSERT INTO statements to REPLACE INTO",
)
@click.option(
    "-s",
    "--structure",
    "structure_path",
    default=None,
    type=click.Path(path_type=Path),
    help="Extract CREATE TABLE statements into this file instead of the chunks",
)
@click.option(
    "--keep-unrecognized",
    is_flag=True,
    default=False,
    help="Copy lines that are not INSERT, DDL, LOCK TABLES or comments into the chunks",
)
@click.option(
    "--server-tuning",
    is_flag=True,
    default=False,
    help="Add SET GLOBAL tuning statements to each chunk header (requires SUPER)",
)
@click.option("-d", "--debug", is_flag=True, default=False, help="Verbose output")
def split(
    input_path: Path,
    output_dir: Path,
    chunk_size: int,
    replace_into: bool,
    structure_path: Optional[Path],
    keep_unrecognized: bool,
    server_tuning: bool,
    debug: bool,
) -> None:
    """
    Split a SQL dump into chunk files that can each be imported on their own.
    """
    config = SplitterConfig(
        input_path=input_path,
        output_dir=output_dir,
        chunk_size=chunk_size,
        replace_into=replace_into,
        structure_path=structure_path,
        keep_unrecognized=keep_unrecognized,
        server_tuning=server_tuning,
        debug=debug,
    )
    try:
        validate_config(config)
    except SqlChunkError as e:
        raise SystemExit(f"Error: {e}") from None
    print(f"Chunk size: {chunk_size} INSERT statements per chunk")
    print(f"Output directory: {output_dir}")
    if debug:
        print("Debug mode: ENABLED")
    print("Counting INSERT statements (may take a moment for large files)...")
    try:
        estimated = estimate_statement_count(input_path)
    except OSError as e:
        raise SystemExit(f"Error: Cannot read input file '{input_path}': {e}") from None
    print(f"Found approximately {estimated} INSERT statements")

    progress = tqdm(total=estimated, unit="stmt", disable=debug)

    def on_statement(total: int) -> None:
        # the estimate can be low, let tqdm grow past it
        if total > progress.total:
            progress.total = total
        progress.update(1)

    try:
        result = split_dump(config, on_statement)
    except SqlChunkError as e:
        raise SystemExit(str(e)) from None
    finally:
        progress.close()

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    print(
        f"Finished processing {result.statements} INSERT statements "
        f"into {len(result.chunks)} chunks"
    )
    if result.structure_path is not None:
        print(
            f"Extracted {result.structure_statements} CREATE TABLE statements "
            f"to {result.structure_path}"
        )
    print(f"Done! Chunks are available in {output_dir}/")


@cli.command()
@click.argument(
    "input_path",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
)
def count(input_path: Path) -> None:
    """
    Estimate the number of INSERT/REPLACE statements in a dump.
    """
    try:
        print(estimate_statement_count(input_path))
    except OSError as e:
        raise SystemExit(f"Error: Cannot read input file '{input_path}': {e}") from None


@cli.command()
@click.option(
    "-p",
    "--path",
    "chunks_dir",
    default="./chunks",
    show_default=True,
    type=click.Path(path_type=Path),
    help="Directory containing chunk files",
)
@click.option(
    "-o",
    "--output",
    "output_dir",
    default="./chunks_nosuperprivs",
    show_default=True,
    type=click.Path(path_type=Path),
    help="Directory for processed files",
)
@click.option(
    "-d",
    "--dry-run",
    is_flag=True,
    default=False,
    help="Show what would be changed without writing files",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show removed lines")
def strip_super(chunks_dir: Path, output_dir: Path, dry_run: bool, verbose: bool) -> None:
    """
    Comment out statements that require the SUPER privilege.
    """
    try:
        strip_directory(chunks_dir, output_dir, dry_run, verbose)
    except SqlChunkError as e:
        raise SystemExit(f"Error: {e}") from None
    if dry_run:
        print("Dry run completed. No files were modified.")
    else:
        print(f"All chunks processed successfully! Modified files are in {output_dir}")


@cli.command("import")
@click.option(
    "-p",
    "--path",
    "chunks_dir",
    default="./chunks",
    show_default=True,
    type=click.Path(path_type=Path),
    help="Directory containing chunk files",
)
@click.option("-n", "--database", envvar="MYSQL_DATABASE", default="", help="Database name")
@click.option("-u", "--user", envvar="MYSQL_USER", default="root", show_default=True)
@click.option("-w", "--password", envvar="MYSQL_PASSWORD", default=None, help="Database password")
@click.option("-h", "--host", envvar="MYSQL_HOST", default=None, help="Database host [defaults to local socket]")
@click.option("-P", "--port", envvar="MYSQL_PORT", default=None, type=int)
@click.option("-f", "--from", "from_chunk", default=1, show_default=True, help="Start importing from chunk number")
@click.option("-t", "--to", "to_chunk", default=0, help="Stop importing at chunk number [defaults to the last chunk]")
@click.option("-m", "--max-packet", default=2073741824, show_default=True, help="Max allowed packet size in bytes")
@click.option("-s", "--sleep", "sleep_seconds", default=3.0, show_default=True, help="Sleep time between chunks in seconds")
@click.option(
    "--move-imported",
    "completed_dir",
    default=None,
    type=click.Path(path_type=Path),
    help="Move successfully imported chunks to this directory",
)
@click.option(
    "--client",
    envvar="MYSQL_CLIENT",
    default="mysql",
    show_default=True,
    help="Client executable, e.g. mariadb",
)
@click.option("-d", "--dry-run", is_flag=True, default=False, help="Show what would be imported")
def import_(
    chunks_dir: Path,
    database: str,
    user: str,
    password: Optional[str],
    host: Optional[str],
    port: Optional[int],
    from_chunk: int,
    to_chunk: int,
    max_packet: int,
    sleep_seconds: float,
    completed_dir: Optional[Path],
    client: str,
    dry_run: bool,
) -> None:
    """
    Import chunk files with the mysql client, one at a time.
    """
    config = ImportConfig(
        chunks_dir=chunks_dir,
        database=database,
        user=user,
        password=password,
        host=host,
        port=port,
        from_chunk=from_chunk,
        to_chunk=to_chunk,
        max_packet=max_packet,
        sleep_seconds=sleep_seconds,
        completed_dir=completed_dir,
        dry_run=dry_run,
        client=client,
    )
    try:
        import_chunks(config)
    except ImportFailedError as e:
        print(f"Error importing chunk {e.chunk_number}", file=sys.stderr)
        raise SystemExit(
            f"{e}\nYou may want to retry from this chunk with --from {e.chunk_number}"
        ) from None
    except SqlChunkError as e:
        raise SystemExit(f"Error: {e}") from None
    if dry_run:
        print("Dry run completed. No data was imported.")
    else:
        print("All chunks imported successfully!")


if __name__ == "__main__":
    cli()
