"""
Feed chunk files to the mysql command line client one at a time.

The client is treated as a black box: each chunk is passed on stdin and a
non-zero exit status stops the run. The password travels in MYSQL_PWD so it
never shows up in the process list.
"""

import os
import shutil
import subprocess
import sys
import time
from pathlib import Path

from .exceptions import ConfigurationError, ImportFailedError
from .types import ImportConfig
from .utils import chunk_index, find_chunk_files, select_chunk_range

SUPER_PRIVILEGE_QUERY = (
    "SELECT COUNT(*) FROM information_schema.user_privileges "
    "WHERE GRANTEE LIKE CONCAT('''', SUBSTRING_INDEX(CURRENT_USER(), '@', 1), '''@%') "
    "AND PRIVILEGE_TYPE = 'SUPER'"
)


def connection_args(config: ImportConfig) -> list[str]:
    args = []
    if config.host:
        args += ["-h", config.host]
    if config.port:
        args += ["-P", str(config.port)]
    return args + ["-u", config.user]


def build_command(config: ImportConfig) -> list[str]:
    cmd = [config.client] + connection_args(config)
    cmd.append(f"--max_allowed_packet={config.max_packet}")
    if config.database:
        cmd.append(config.database)
    return cmd


def client_env(config: ImportConfig) -> dict[str, str]:
    env = os.environ.copy()
    if config.password:
        env["MYSQL_PWD"] = config.password
    return env


def has_super_privilege(config: ImportConfig) -> bool:
    """
    Ask the server whether the current user holds SUPER. A client error
    counts as no.
    """
    cmd = [config.client] + connection_args(config) + ["-N", "-B", "-e", SUPER_PRIVILEGE_QUERY]
    proc = subprocess.run(cmd, capture_output=True, text=True, env=client_env(config))
    if proc.returncode != 0:
        return False
    try:
        return int(proc.stdout.strip() or 0) > 0
    except ValueError:
        return False


def describe_connection(config: ImportConfig) -> str:
    if not config.host:
        return "local socket"
    if config.port:
        return f"host '{config.host}:{config.port}'"
    return f"host '{config.host}'"


def prepare_completed_dir(config: ImportConfig) -> None:
    if config.completed_dir is None or config.dry_run:
        return
    if not config.completed_dir.is_dir():
        print(f"Creating directory for completed chunks: {config.completed_dir}")
        try:
            config.completed_dir.mkdir(parents=True)
        except OSError as e:
            raise ConfigurationError(
                f"Failed to create directory '{config.completed_dir}': {e}"
            ) from e
    if not os.access(config.completed_dir, os.W_OK):
        raise ConfigurationError(
            f"Directory '{config.completed_dir}' is not writable."
        )


def import_chunks(config: ImportConfig) -> list[Path]:
    """
    Import the selected range of chunks and return the files imported.

    Raises ImportFailedError on the first chunk the client rejects; its
    `chunk_number` is where to resume with `from_chunk`.
    """
    if not config.chunks_dir.is_dir():
        raise ConfigurationError(
            f"Chunks directory '{config.chunks_dir}' does not exist."
        )
    chunk_files = find_chunk_files(config.chunks_dir)
    if not chunk_files:
        raise ConfigurationError(f"No chunk files found in '{config.chunks_dir}'")
    print(f"Found {len(chunk_files)} chunk files in {config.chunks_dir}")
    selected = select_chunk_range(chunk_files, config.from_chunk, config.to_chunk)
    prepare_completed_dir(config)

    if not config.dry_run:
        if has_super_privilege(config):
            print("User has SUPER privileges - all statements will be executed")
        else:
            print(
                "Warning: User does not have SUPER privileges - some statements might fail\n"
                "  Consider running `sqlchunk strip-super` on the chunks first",
                file=sys.stderr,
            )

    print(
        f"Preparing to import chunks {chunk_index(selected[0])} to "
        f"{chunk_index(selected[-1])} into database '{config.database}' "
        f"on {describe_connection(config)} as user '{config.user}'"
    )
    cmd = build_command(config)
    env = client_env(config)
    imported = []
    for position, chunk_file in enumerate(selected):
        number = chunk_index(chunk_file)
        print(f"Importing chunk {number}: {chunk_file.name}")
        if config.dry_run:
            print(f"  Would execute: {' '.join(cmd)} < {chunk_file}")
            if config.completed_dir is not None:
                print(
                    f"  Would move {chunk_file.name} to {config.completed_dir} "
                    "after successful import"
                )
            continue

        with chunk_file.open("rb") as stdin:
            proc = subprocess.run(
                cmd, stdin=stdin, capture_output=True, text=True, env=env
            )
        if proc.returncode != 0:
            raise ImportFailedError(number, proc.returncode, proc.stderr)
        print(f"  Successfully imported chunk {number}")
        imported.append(chunk_file)

        if config.completed_dir is not None:
            print(f"  Moving {chunk_file.name} to {config.completed_dir}")
            shutil.move(str(chunk_file), str(config.completed_dir / chunk_file.name))

        if position < len(selected) - 1 and config.sleep_seconds > 0:
            print(f"  Sleeping for {config.sleep_seconds} seconds...")
            time.sleep(config.sleep_seconds)
    return imported
