from __future__ import annotations

import secrets
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from .models import COUNT_WIDTH, LINE_NUMBER_WIDTH, CoverageFile

TokenFactory = Callable[[], str]


def random_token() -> str:
    return secrets.token_urlsafe(6)


def gcov_header(source_path: str) -> str:
    return f"{'-' * COUNT_WIDTH}:{'0'.rjust(LINE_NUMBER_WIDTH)}:Source:{source_path}"


def render_gcov(coverage_file: CoverageFile) -> List[str]:
    return [gcov_header(coverage_file.source_path)] + [r.to_gcov_line() for r in coverage_file.records]


def gcov_path(output_dir: Path, executable_path: Path, *, token_factory: Optional[TokenFactory] = None) -> Path:
    token = (token_factory or random_token)()
    return output_dir / f"{token}-{Path(executable_path).name}.gcov"


def write_gcov_file(
    coverage_file: CoverageFile,
    output_dir: Path,
    executable_path: Path,
    *,
    token_factory: Optional[TokenFactory] = None,
) -> Path:
    """Write one source's coverage as a gcov text file and return its path.

    The random token keeps sources from different targets that share an
    executable name from overwriting each other.
    """

    path = gcov_path(output_dir, executable_path, token_factory=token_factory)
    with path.open("w", encoding="utf-8") as fh:
        for line in render_gcov(coverage_file):
            fh.write(line + "\n")
        fh.flush()
    return path


def write_gcov_files(
    coverage_files: Iterable[CoverageFile],
    output_dir: Path,
    executable_path: Path,
    *,
    token_factory: Optional[TokenFactory] = None,
) -> List[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)
    return [
        write_gcov_file(f, output_dir, executable_path, token_factory=token_factory)
        for f in coverage_files
    ]
