from __future__ import annotations

import logging
import re
from typing import List, Optional

from ..core.utils import get_logger
from .models import COUNT_WIDTH, NEVER_EXECUTED, NOT_INSTRUMENTED, CoverageFile, CoverageLineRecord

# `/abs/path/Foo.swift:` or `"/abs/path/Foo.swift":`
_SOURCE_HEADER_RE = re.compile(r"""^(['"]?)((?:/[^/]+)*)\1:$""")
# `<count or blank>|<line>|<text>`; counts of 1000 and up print compact, e.g. `1.23k`
_RECORD_RE = re.compile(r"^\s*([0-9][0-9.]*[kMGTPEZY]?|\s*)\|\s*([0-9]+)\|(.*)$")


def normalize_execution_count(count: str) -> str:
    """Map an llvm-cov count column onto the gcov count column."""
    stripped = count.strip()
    if not stripped:
        return NOT_INSTRUMENTED
    if stripped == "0":
        return NEVER_EXECUTED
    return stripped.rjust(COUNT_WIDTH)


def parse_llvm_cov_show(text: str, *, logger: Optional[logging.Logger] = None) -> List[CoverageFile]:
    """Parse `llvm-cov show` annotated source into one CoverageFile per source.

    Records seen before any source header are dropped, as is every line that is
    neither a header nor a record (summary banners, blank lines, region markers).
    """

    log = get_logger(logger)
    files: List[CoverageFile] = []
    current: Optional[CoverageFile] = None

    for line in text.splitlines():
        header = _SOURCE_HEADER_RE.match(line)
        if header and header.group(2):
            current = CoverageFile(source_path=header.group(2))
            files.append(current)
            continue

        record = _RECORD_RE.match(line)
        if record is None:
            if line.strip():
                log.debug(f"Ignoring llvm-cov line: {line!r}")
            continue
        if current is None:
            continue

        count, number, source = record.groups()
        current.records.append(
            CoverageLineRecord(
                execution_count=normalize_execution_count(count),
                line_number=int(number),
                text=source,
            )
        )

    return files
