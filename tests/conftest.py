import pytest


@pytest.fixture
def write_dump(tmp_path):
    def write(text: str, name: str = "dump.sql"):
        path = tmp_path / name
        path.write_text(text)
        return path

    return write
