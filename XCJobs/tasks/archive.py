from __future__ import annotations

import logging
import os
import subprocess
from typing import List, Optional

from ..core.utils import get_logger
from ..execution import ExecutionError


def archive_zip_commands(scheme: str) -> List[List[str]]:
    archive = f"{scheme}.xcarchive"
    return [
        ["zip", "-ryq", "dSYMs.zip", os.path.join(archive, "dSYMs")],
        ["zip", "-ryq", f"{archive}.zip", archive],
    ]


def package_archive(build_dir: str, scheme: str, *, logger: Optional[logging.Logger] = None) -> List[str]:
    """Zip the archive's dSYMs and the archive itself inside `build_dir`.

    Returns the paths of the two zip files.
    """

    log = get_logger(logger)
    for command in archive_zip_commands(scheme):
        log.info(f"(cd {build_dir}; {' '.join(command)})")
        proc = subprocess.run(command, cwd=build_dir, check=False)
        if proc.returncode != 0:
            raise ExecutionError(f"zip failed (exited with status: {proc.returncode})")
    return [os.path.join(build_dir, "dSYMs.zip"), os.path.join(build_dir, f"{scheme}.xcarchive.zip")]
