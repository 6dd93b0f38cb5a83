from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

COUNT_WIDTH = 5
LINE_NUMBER_WIDTH = 5

# gcov sentinels
NOT_INSTRUMENTED = "-".rjust(COUNT_WIDTH)
NEVER_EXECUTED = "#" * COUNT_WIDTH


@dataclass(frozen=True)
class CoverageLineRecord:
    execution_count: str
    line_number: int
    text: str

    @property
    def instrumented(self) -> bool:
        return self.execution_count != NOT_INSTRUMENTED

    @property
    def executed(self) -> bool:
        return self.instrumented and self.execution_count != NEVER_EXECUTED

    def to_gcov_line(self) -> str:
        return f"{self.execution_count.rjust(COUNT_WIDTH)}:{str(self.line_number).rjust(LINE_NUMBER_WIDTH)}:{self.text}"


@dataclass
class CoverageFile:
    source_path: str
    records: List[CoverageLineRecord] = field(default_factory=list)

    @property
    def executable_lines(self) -> int:
        return sum(1 for r in self.records if r.instrumented)

    @property
    def executed_lines(self) -> int:
        return sum(1 for r in self.records if r.executed)

    def to_json_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CoverageTarget:
    """A build target whose coverage can be reported on its own."""

    name: str
    product_type: str
    object_root: Path
    executable_path: Optional[Path] = None
    profdata_path: Optional[Path] = None
