from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

UNBUFFERED_IO_ENV = {"NSUnbufferedIO": "YES"}


@dataclass(frozen=True)
class CommandSpec:
    arguments: List[str]
    env: Dict[str, str] = field(default_factory=dict)
    # Drop the inherited environment; only `env` (plus the unbuffered marker) reaches the child.
    unsetenv_others: bool = False

    def command_line(self, formatter: Optional[str] = None) -> str:
        parts = list(self.arguments)
        if formatter:
            parts += ["|", formatter]
        return " ".join(parts)

    def child_env(self, inherited: Dict[str, str]) -> Dict[str, str]:
        env: Dict[str, str] = {} if self.unsetenv_others else dict(inherited)
        env.update(UNBUFFERED_IO_ENV)
        env.update(self.env)
        return env

    def to_json_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ExecutionOutcome:
    command: List[str]
    exit_code: int
    output: List[str]

    def to_json_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
