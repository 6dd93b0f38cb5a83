"""
Task registry.

Tasks register a named action here when they are defined; callers invoke them
by (optionally namespaced) name, e.g. `test` or `build:archive`. The registry
also keeps the directories that `clean`/`clobber` remove.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

TaskAction = Callable[[], None]
PathLike = Union[str, Path]


@dataclass
class TaskDefinition:
    """A named, invokable unit."""
    name: str
    action: TaskAction
    description: Optional[str] = None

    def invoke(self) -> None:
        self.action()


@dataclass
class TaskRegistry:
    tasks: Dict[str, TaskDefinition] = field(default_factory=dict)
    clean_paths: List[Path] = field(default_factory=list)
    clobber_paths: List[Path] = field(default_factory=list)

    def register(
        self,
        name: str,
        action: TaskAction,
        *,
        description: Optional[str] = None,
        namespace: Optional[str] = None,
    ) -> TaskDefinition:
        """Register (or override) a task and return its definition."""
        full_name = f"{namespace}:{name}" if namespace else str(name)
        definition = TaskDefinition(name=full_name, action=action, description=description)
        self.tasks[full_name] = definition
        return definition

    def get(self, name: str) -> Optional[TaskDefinition]:
        return self.tasks.get(name)

    def names(self) -> List[str]:
        return list(self.tasks)

    def invoke(self, name: str) -> None:
        definition = self.get(name)
        if definition is None:
            raise KeyError(f"Task '{name}' is not registered.")
        definition.invoke()

    def add_clean(self, path: PathLike) -> None:
        p = Path(path)
        if p not in self.clean_paths:
            self.clean_paths.append(p)

    def add_clobber(self, path: PathLike) -> None:
        p = Path(path)
        if p not in self.clobber_paths:
            self.clobber_paths.append(p)

    def clean(self) -> List[Path]:
        return _remove_all(self.clean_paths)

    def clobber(self) -> List[Path]:
        return _remove_all(self.clean_paths + self.clobber_paths)


def _remove_all(paths: List[Path]) -> List[Path]:
    removed: List[Path] = []
    for p in paths:
        if p.is_dir():
            shutil.rmtree(p)
            removed.append(p)
        elif p.exists():
            p.unlink()
            removed.append(p)
    return removed


_default_registry = TaskRegistry()


def default_registry() -> TaskRegistry:
    return _default_registry


def register_task(name: str, action: TaskAction, **kwargs) -> TaskDefinition:
    return _default_registry.register(name, action, **kwargs)


def get_task(name: str) -> Optional[TaskDefinition]:
    return _default_registry.get(name)


def list_tasks() -> Dict[str, TaskDefinition]:
    return dict(_default_registry.tasks)


def invoke_task(name: str) -> None:
    _default_registry.invoke(name)
