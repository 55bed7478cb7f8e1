import pytest

from sqlchunk.classifier import classify, ends_statement, line_classification


@pytest.mark.parametrize("line, expected", [
    ("INSERT INTO `t` VALUES (1);", "INSERT"),
    ("  insert   into t VALUES (1);", "INSERT"),
    ("REPLACE INTO `t` VALUES (1);", "REPLACE"),
    ("LOCK TABLES `t` WRITE;", "LOCK_TABLES"),
    ("UNLOCK TABLES;", "UNLOCK_TABLES"),
    ("CREATE TABLE `t` (", "CREATE_TABLE"),
    ("create temporary table t (", "CREATE_TABLE"),
    ("CREATE DATABASE IF NOT EXISTS `db`;", "OTHER_DDL"),
    ("DROP TABLE IF EXISTS `t`;", "OTHER_DDL"),
    ("ALTER TABLE `t` DISABLE KEYS;", "OTHER_DDL"),
    ("", "COMMENT_OR_BLANK"),
    ("   ", "COMMENT_OR_BLANK"),
    ("-- Dumping data for table `t`", "COMMENT_OR_BLANK"),
    ("# comment", "COMMENT_OR_BLANK"),
    ("/*!40101 SET NAMES utf8mb4 */;", "UNRECOGNIZED"),
    ("INSERTED INTO t", "UNRECOGNIZED"),
    ("SELECT 1;", "UNRECOGNIZED"),
])
def test_line_classification(line, expected):
    assert line_classification(line) == expected


@pytest.mark.parametrize("line, expected", [
    ("INSERT INTO t VALUES (1);", True),
    ("(3,'c');   ", True),
    ("INSERT INTO t VALUES", False),
    ("(1,'a;b'),", False),
    ("", False),
])
def test_ends_statement(line, expected):
    assert ends_statement(line) == expected


def test_single_line_insert_is_complete():
    action = classify("INSERT INTO t VALUES (1);", "idle")
    assert action.kind == "start"
    assert action.classification == "INSERT"
    assert action.complete


def test_multi_line_insert_starts_statement():
    action = classify("INSERT INTO t VALUES", "idle")
    assert action.kind == "start"
    assert not action.complete


@pytest.mark.parametrize("line, kind", [
    ("(1,'a'),", "continue"),
    ("-- not a terminator", "continue"),
    ("", "continue"),
    ("INSERT INTO t VALUES (2);", "end"),
    ("(2,'b');", "end"),
])
def test_inside_statement(line, kind):
    action = classify(line, "inside-statement")
    assert action.kind == kind
    assert action.classification is None


@pytest.mark.parametrize("line", [
    "LOCK TABLES `t` WRITE;",
    "UNLOCK TABLES;",
    "-- comment",
    "",
])
def test_passthrough_when_idle(line):
    assert classify(line, "idle").kind == "passthrough"


def test_unrecognized_policy():
    line = "/*!40101 SET NAMES utf8mb4 */;"
    assert classify(line, "idle").kind == "drop"
    action = classify(line, "idle", keep_unrecognized=True)
    assert action.kind == "passthrough"
    assert action.classification == "UNRECOGNIZED"
