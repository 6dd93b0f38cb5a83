from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, IO, Iterator, List, Optional, Sequence

from ..core.utils import get_logger
from ..execution import capture_output
from ..settings import BuildSettingsTable, load_build_settings
from .gcov import TokenFactory, write_gcov_files
from .llvm_cov import parse_llvm_cov_show
from .models import CoverageTarget

PRODUCT_TYPE_UNIT_TEST = "com.apple.product-type.bundle.unit-test"
PRODUCT_TYPE_FRAMEWORK = "com.apple.product-type.framework"
PRODUCT_TYPE_APPLICATION = "com.apple.product-type.application"
SUPPORTED_PRODUCT_TYPES = (PRODUCT_TYPE_FRAMEWORK, PRODUCT_TYPE_APPLICATION)

PROFDATA_NAME = "Coverage.profdata"
DEVICE_SDK_PREFIX = "iphoneos"

CaptureFn = Callable[[List[str]], str]
SettingsLoader = Callable[[Sequence[str]], BuildSettingsTable]


class ConfigurationError(RuntimeError):
    pass


def select_coverage_targets(settings: BuildSettingsTable) -> Dict[str, Dict[str, str]]:
    """Drop unit-test bundles; they have no coverage artifact of their own."""
    return {
        name: values
        for name, values in settings.items()
        if values.get("PRODUCT_TYPE") != PRODUCT_TYPE_UNIT_TEST
    }


def executable_name(settings: Dict[str, str], sdk: str) -> str:
    """Name (or relative path) of the compiled artifact to search for.

    Device builds of every architecture put the binary inside the bundle, so the
    bundle-relative EXECUTABLE_PATH is used there; otherwise EXECUTABLE_NAME.
    """

    product_type = settings.get("PRODUCT_TYPE")
    if product_type not in SUPPORTED_PRODUCT_TYPES:
        raise ConfigurationError(f"Product type (PRODUCT_TYPE) '{product_type}' is unsupported")

    if str(sdk).startswith(DEVICE_SDK_PREFIX) and settings.get("ONLY_ACTIVE_ARCH") == "NO":
        return settings.get("EXECUTABLE_PATH", "")
    return settings.get("EXECUTABLE_NAME", "")


def find_first_file(root: Path, name: str) -> Optional[Path]:
    """First regular file under `root` whose path ends with `name`.

    The walk order is whatever the filesystem returns, so with several matches
    the pick is environment-dependent.
    """

    if not name or not root.is_dir():
        return None
    suffix = "/" + name.strip("/")
    for candidate in root.rglob(Path(name).name):
        if candidate.is_file() and candidate.as_posix().endswith(suffix):
            return candidate
    return None


def llvm_cov_command(subcommand: str, profdata: Path, executable: Path) -> List[str]:
    return ["xcrun", "llvm-cov", subcommand, "-instr-profile", str(profdata), str(executable), "-use-color=0"]


class CoverageReportGenerator:
    """Turn an instrumented test run into per-source gcov files.

    Per non-test target: locate the binary and Coverage.profdata under OBJROOT,
    print `llvm-cov report`, parse `llvm-cov show` and write one gcov file per
    source next to the profdata.
    """

    def __init__(
        self,
        *,
        settings_loader: Optional[SettingsLoader] = None,
        capture: Optional[CaptureFn] = None,
        token_factory: Optional[TokenFactory] = None,
        stream: Optional[IO[str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._logger = get_logger(logger)
        self._capture = capture or (lambda command: capture_output(command, logger=self._logger))
        self._settings_loader = settings_loader or (
            lambda options: load_build_settings(options, capture=self._capture, logger=self._logger)
        )
        self._token_factory = token_factory
        self._stream = stream

    @property
    def stream(self) -> IO[str]:
        return self._stream if self._stream is not None else sys.stdout

    def generate(self, options: Sequence[str], sdk: str) -> List[Path]:
        settings = self._settings_loader(list(options))
        written: List[Path] = []
        for target in self.resolve_targets(settings, sdk):
            if target.executable_path is None or target.profdata_path is None:
                self._logger.warning(
                    f"Skipping coverage for {target.name}: "
                    f"executable={target.executable_path} profdata={target.profdata_path}"
                )
                continue
            self.show_coverage(target.profdata_path, target.executable_path)
            written += self.generate_gcov_files(target.profdata_path, target.executable_path)
        return written

    def resolve_targets(self, settings: BuildSettingsTable, sdk: str) -> Iterator[CoverageTarget]:
        """Yield targets one at a time; an unsupported product type raises when reached."""
        for name, values in select_coverage_targets(settings).items():
            name_to_find = executable_name(values, sdk)
            object_root = Path(values.get("OBJROOT") or "")
            executable = profdata = None
            if values.get("OBJROOT"):
                executable = find_first_file(object_root, name_to_find)
                profdata = find_first_file(object_root, PROFDATA_NAME)
            yield CoverageTarget(
                name=name,
                product_type=str(values.get("PRODUCT_TYPE")),
                object_root=object_root,
                executable_path=executable,
                profdata_path=profdata,
            )

    def show_coverage(self, profdata: Path, executable: Path) -> None:
        command = llvm_cov_command("report", profdata, executable)
        self._echo(" ".join(command))
        for line in self._capture(command).splitlines():
            self._echo(line)

    def generate_gcov_files(self, profdata: Path, executable: Path) -> List[Path]:
        self._echo("Generate gcov file...")
        text = self._capture(llvm_cov_command("show", profdata, executable))
        coverage_files = parse_llvm_cov_show(text, logger=self._logger)
        written = write_gcov_files(
            coverage_files,
            profdata.parent,
            executable,
            token_factory=self._token_factory,
        )
        for f in coverage_files:
            self._logger.info(f"{f.source_path}: {f.executed_lines}/{f.executable_lines} lines executed")
        return written

    def _echo(self, line: str) -> None:
        print(line, file=self.stream, flush=True)
