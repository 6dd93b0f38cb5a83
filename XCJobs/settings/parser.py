from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence

from ..core.utils import get_logger
from ..execution import capture_output

BuildSettingsTable = Dict[str, Dict[str, str]]
CaptureFn = Callable[[List[str]], str]

_TARGET_HEADER_RE = re.compile(r"Build settings for action test and target (.+):")


def parse_build_settings(text: str, *, logger: Optional[logging.Logger] = None) -> BuildSettingsTable:
    """Parse `xcodebuild -showBuildSettings` output into {target: {key: value}}.

    A header line opens a target block; `KEY = value` lines belong to the most
    recently opened block. Lines before the first header, and lines without `=`,
    are dropped. A repeated key within a block keeps its last value.
    """

    log = get_logger(logger)
    settings: BuildSettingsTable = {}
    current: Optional[str] = None

    for line in text.splitlines():
        header = _TARGET_HEADER_RE.search(line)
        if header:
            current = header.group(1)
            settings.setdefault(current, {})
            continue

        if current is None:
            continue

        key, sep, value = line.partition("=")
        if not sep:
            if line.strip():
                log.debug(f"Ignoring build settings line without '=': {line!r}")
            continue
        settings[current][key.strip()] = value.strip()

    return settings


def build_settings_command(options: Sequence[str], *, tool: str = "xcodebuild") -> List[str]:
    return [tool, "test", *options, "-showBuildSettings"]


def load_build_settings(
    options: Sequence[str],
    *,
    tool: str = "xcodebuild",
    capture: Optional[CaptureFn] = None,
    logger: Optional[logging.Logger] = None,
) -> BuildSettingsTable:
    """Run the settings dump for the test action and parse it.

    Only a failure to launch the tool propagates; a non-zero exit yields whatever
    text was printed.
    """

    command = build_settings_command(options, tool=tool)
    text = capture(command) if capture is not None else capture_output(command, logger=logger)
    return parse_build_settings(text, logger=logger)
