from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional

Classification = Literal[
    "INSERT",
    "REPLACE",
    "CREATE_TABLE",
    "LOCK_TABLES",
    "UNLOCK_TABLES",
    "OTHER_DDL",
    "COMMENT_OR_BLANK",
    "UNRECOGNIZED",
]

ParserMode = Literal["idle", "inside-statement"]

ActionKind = Literal["start", "continue", "end", "passthrough", "drop"]

COUNTED: tuple[Classification, ...] = ("INSERT", "REPLACE")


@dataclass
class Action:
    kind: ActionKind
    # None for lines continuing an open statement
    classification: Optional[Classification]
    # set on "start" when the opening line is also the last one
    complete: bool = False


@dataclass
class SourceStatement:
    classification: Classification
    start_line: int
    lines: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def counted(self) -> bool:
        return self.classification in COUNTED


@dataclass
class SplitterConfig:
    input_path: Path
    output_dir: Path
    chunk_size: int = 200
    replace_into: bool = False
    structure_path: Optional[Path] = None
    keep_unrecognized: bool = False
    server_tuning: bool = False
    debug: bool = False
    encoding: str = "utf-8"


@dataclass
class SplitResult:
    statements: int
    chunks: list[Path]
    lines_read: int
    structure_path: Optional[Path] = None
    structure_statements: int = 0
    warnings: list[str] = field(default_factory=list)


@dataclass
class ImportConfig:
    chunks_dir: Path
    database: str
    user: str = "root"
    password: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    from_chunk: int = 1
    to_chunk: int = 0
    max_packet: int = 2073741824
    sleep_seconds: float = 3
    completed_dir: Optional[Path] = None
    dry_run: bool = False
    client: str = "mysql"
