from __future__ import annotations

import argparse
import json
from pathlib import Path

import pytest

from XCJobs.cli import build_parser, create_task, key_value_type, load_config, main, task_attributes
from XCJobs.coverage import ConfigurationError
from XCJobs.tasks import Export, TaskRegistry, Test


def _assert_default(parser, option: str, expected) -> None:
    action = parser._option_string_actions.get(option)
    assert action is not None, f"Missing option {option}"
    assert action.default == expected, f"Default for {option} expected {expected!r}, got {action.default!r}"


def test_top_level_defaults():
    parser = build_parser()
    _assert_default(parser, "--log-level", "INFO")
    _assert_default(parser, "--log-dir", None)
    _assert_default(parser, "--config", None)


def test_test_action_flags_become_task_attributes():
    args = build_parser().parse_args(
        [
            "test",
            "--workspace", "App",
            "--scheme", "App",
            "--coverage",
            "--destination", "platform=iOS Simulator,name=iPhone 15",
            "--only-testing", "AppTests/FooTests",
            "--build-setting", "SWIFT_VERSION=5.0",
        ]
    )
    attributes = task_attributes(args)

    assert attributes == {
        "workspace": "App",
        "scheme": "App",
        "coverage": True,
        "destinations": ["platform=iOS Simulator,name=iPhone 15"],
        "only_testing": ["AppTests/FooTests"],
        "build_settings": {"SWIFT_VERSION": "5.0"},
    }


def test_flags_override_config_file(tmp_path: Path):
    config = tmp_path / "xcjobs.json"
    config.write_text(json.dumps({"scheme": "FromFile", "configuration": "Debug"}), encoding="utf-8")

    args = build_parser().parse_args(["build", "--scheme", "FromFlag", "--config", str(config)])
    attributes = task_attributes(args, load_config(args.config))

    assert attributes["scheme"] == "FromFlag"
    assert attributes["configuration"] == "Debug"


def test_create_task_builds_the_requested_action():
    task = create_task("test", {"scheme": "App", "destinations": ["d1"]}, registry=TaskRegistry())
    assert isinstance(task, Test)
    assert task.destinations == ["d1"]

    export = create_task("export", {"build_dir": "build", "scheme": "App"}, registry=TaskRegistry())
    assert isinstance(export, Export)
    assert export.qualified_name == "build:export"


def test_key_value_type():
    assert key_value_type("A=b=c") == ("A", "b=c")
    with pytest.raises(argparse.ArgumentTypeError):
        key_value_type("novalue")


def test_load_config_rejects_non_object(tmp_path: Path):
    config = tmp_path / "bad.json"
    config.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(str(config))


def test_main_reports_configuration_errors():
    assert main(["test"]) == 1
    assert main(["build", "--scheme", "App", "--target", "App"]) == 1
