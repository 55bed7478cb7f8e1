from .splitter import estimate_statement_count, split_dump
from .types import SplitResult, SplitterConfig

__all__ = [
    "SplitResult",
    "SplitterConfig",
    "estimate_statement_count",
    "split_dump",
]
