from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from XCJobs.execution import ExecutionError
from XCJobs.tasks import package_archive
from XCJobs.tasks.archive import archive_zip_commands


def test_zip_commands():
    assert archive_zip_commands("App") == [
        ["zip", "-ryq", "dSYMs.zip", "App.xcarchive/dSYMs"],
        ["zip", "-ryq", "App.xcarchive.zip", "App.xcarchive"],
    ]


@pytest.mark.skipif(shutil.which("zip") is None, reason="zip not found")
def test_package_archive_writes_both_zips(tmp_path: Path):
    dsyms = tmp_path / "App.xcarchive" / "dSYMs"
    dsyms.mkdir(parents=True)
    (dsyms / "App.app.dSYM").write_text("dsym", encoding="utf-8")

    written = package_archive(str(tmp_path), "App")

    assert [Path(p).name for p in written] == ["dSYMs.zip", "App.xcarchive.zip"]
    assert all(Path(p).is_file() for p in written)


@pytest.mark.skipif(shutil.which("zip") is None, reason="zip not found")
def test_package_archive_fails_without_archive(tmp_path: Path):
    with pytest.raises(ExecutionError, match="zip failed"):
        package_archive(str(tmp_path), "Missing")
