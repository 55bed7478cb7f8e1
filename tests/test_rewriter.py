import pytest

from sqlchunk.rewriter import to_replace_into


@pytest.mark.parametrize("text, expected", [
    ("INSERT INTO t VALUES (1);", "REPLACE INTO t VALUES (1);"),
    ("insert into t VALUES (1);", "REPLACE INTO t VALUES (1);"),
    ("  INSERT   INTO t VALUES (1);", "  REPLACE INTO t VALUES (1);"),
    ("REPLACE INTO t VALUES (1);", "REPLACE INTO t VALUES (1);"),
    (
        "INSERT INTO t VALUES ('INSERT INTO x');",
        "REPLACE INTO t VALUES ('INSERT INTO x');",
    ),
    (
        "INSERT INTO t VALUES\n(1,'INSERT INTO'),\n(2,'b');",
        "REPLACE INTO t VALUES\n(1,'INSERT INTO'),\n(2,'b');",
    ),
])
def test_to_replace_into(text, expected):
    assert to_replace_into(text) == expected


def test_to_replace_into_is_idempotent():
    text = "INSERT INTO t VALUES (1);"
    once = to_replace_into(text)
    assert to_replace_into(once) == once
