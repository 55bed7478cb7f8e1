import pytest
from click.testing import CliRunner

from sqlchunk import importer
from sqlchunk.main import cli

from .helpers import body_statements


@pytest.fixture
def runner():
    return CliRunner()


def inserts(n: int) -> str:
    return "".join(f"INSERT INTO t VALUES ({i});\n" for i in range(n))


def test_split(runner, tmp_path, write_dump):
    dump = write_dump(inserts(7))
    output_dir = tmp_path / "chunks"
    result = runner.invoke(
        cli, ["split", "-i", str(dump), "-o", str(output_dir), "-c", "3", "-r"]
    )
    assert result.exit_code == 0, result.output
    assert "Found approximately 7 INSERT statements" in result.output
    assert "Finished processing 7 INSERT statements into 3 chunks" in result.output
    statements = body_statements(output_dir / "chunk_03.sql")
    assert statements == ["REPLACE INTO t VALUES (6);"]


def test_split_chunk_size_from_env(runner, tmp_path, write_dump):
    dump = write_dump(inserts(4))
    output_dir = tmp_path / "chunks"
    result = runner.invoke(
        cli,
        ["split", "-i", str(dump)],
        env={"SQLCHUNK_CHUNK_SIZE": "2", "SQLCHUNK_OUTPUT_DIR": str(output_dir)},
    )
    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in output_dir.iterdir()) == ["chunk_01.sql", "chunk_02.sql"]


def test_split_structure(runner, tmp_path, write_dump):
    dump = write_dump("CREATE TABLE t (\n  id int\n);\n" + inserts(1))
    structure = tmp_path / "structure.sql"
    result = runner.invoke(
        cli,
        ["split", "-i", str(dump), "-o", str(tmp_path / "chunks"), "-s", str(structure)],
    )
    assert result.exit_code == 0, result.output
    assert f"Extracted 1 CREATE TABLE statements to {structure}" in result.output
    assert "CREATE TABLE t (" in structure.read_text()


def test_split_missing_input(runner, tmp_path):
    result = runner.invoke(cli, ["split", "-i", str(tmp_path / "nope.sql")])
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_split_no_statements(runner, tmp_path, write_dump):
    dump = write_dump("-- nothing\n")
    output_dir = tmp_path / "chunks"
    result = runner.invoke(cli, ["split", "-i", str(dump), "-o", str(output_dir)])
    assert result.exit_code == 1
    assert "No INSERT statements were processed" in result.output
    assert list(output_dir.glob("chunk_*.sql")) == []


def test_split_invalid_chunk_size(runner, tmp_path, write_dump, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("input must not be read before the config is valid")

    monkeypatch.setattr("sqlchunk.main.estimate_statement_count", fail)
    dump = write_dump(inserts(1))
    result = runner.invoke(cli, ["split", "-i", str(dump), "-c", "0"])
    assert result.exit_code == 1
    assert "Chunk size must be a positive integer" in result.output
    assert "Counting INSERT statements" not in result.output


def test_count(runner, write_dump):
    result = runner.invoke(cli, ["count", str(write_dump(inserts(5)))])
    assert result.exit_code == 0
    assert result.output.strip() == "5"


def test_strip_super(runner, tmp_path, write_dump):
    dump = write_dump(inserts(2))
    chunks = tmp_path / "chunks"
    runner.invoke(cli, ["split", "-i", str(dump), "-o", str(chunks), "--server-tuning"])
    output_dir = tmp_path / "clean"
    result = runner.invoke(cli, ["strip-super", "-p", str(chunks), "-o", str(output_dir)])
    assert result.exit_code == 0, result.output
    assert "removed 3 out of" in result.output
    assert "\nSET GLOBAL" not in (output_dir / "chunk_01.sql").read_text()


def test_import_dry_run(runner, tmp_path, write_dump, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("client must not run in dry run")

    monkeypatch.setattr(importer.subprocess, "run", fail)
    chunks = tmp_path / "chunks"
    runner.invoke(cli, ["split", "-i", str(write_dump(inserts(4))), "-o", str(chunks), "-c", "2"])
    result = runner.invoke(
        cli,
        ["import", "-p", str(chunks), "-n", "shop", "-w", "s3cret", "--dry-run"],
    )
    assert result.exit_code == 0, result.output
    assert "Would execute: mysql -u root --max_allowed_packet=2073741824 shop" in result.output
    assert "s3cret" not in result.output
    assert "Dry run completed" in result.output


def test_import_bad_range(runner, tmp_path, write_dump):
    chunks = tmp_path / "chunks"
    runner.invoke(cli, ["split", "-i", str(write_dump(inserts(1))), "-o", str(chunks)])
    result = runner.invoke(cli, ["import", "-p", str(chunks), "-n", "shop", "-f", "2"])
    assert result.exit_code == 1
    assert "out of range" in result.output


def test_import_client_option(runner, tmp_path, write_dump):
    chunks = tmp_path / "chunks"
    runner.invoke(cli, ["split", "-i", str(write_dump(inserts(1))), "-o", str(chunks)])
    result = runner.invoke(
        cli, ["import", "-p", str(chunks), "-n", "shop", "--client", "mariadb", "--dry-run"]
    )
    assert result.exit_code == 0, result.output
    assert "Would execute: mariadb -u root --max_allowed_packet=2073741824 shop" in result.output
