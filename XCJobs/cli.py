"""
Command line front-end: build one xcodebuild task from flags (and an optional
JSON config file) and invoke it.

    python -m XCJobs test --workspace App --scheme App --coverage \
        --destination "platform=iOS Simulator,name=iPhone 15"
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from .core.utils import setup_logging
from .coverage import ConfigurationError
from .execution import ExecutionError
from .tasks import (
    Archive,
    Build,
    BuildForTesting,
    Export,
    ProvisioningProfileError,
    TaskRegistry,
    Test,
    TestWithoutBuilding,
    Xcodebuild,
)

ACTIONS: Dict[str, Type[Xcodebuild]] = {
    "test": Test,
    "build": Build,
    "test-without-building": TestWithoutBuilding,
    "build-for-testing": BuildForTesting,
    "archive": Archive,
    "export": Export,
}

# argparse dest -> task attribute, for flags whose names differ from the attribute.
_RENAMED = {
    "destination": "destinations",
    "build_setting": "build_settings",
    "build_option": "build_options",
}
_NON_TASK_ARGS = {"action", "config", "log_level", "log_dir"}


def key_value_type(text: str) -> Tuple[str, str]:
    key, sep, value = str(text).partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    return key.strip(), value


def add_logging_args(parser: Any) -> argparse.ArgumentParser:
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-dir", type=str, default=None)
    parser.add_argument("--config", type=str, default=None, help="JSON file of task attributes; flags override it.")
    return parser


def add_project_args(parser: Any) -> argparse.ArgumentParser:
    parser.add_argument("--project", type=str, default=None)
    parser.add_argument("--target", type=str, default=None)
    parser.add_argument("--workspace", type=str, default=None)
    parser.add_argument("--scheme", type=str, default=None)
    parser.add_argument("--sdk", type=str, default=None)
    parser.add_argument("--configuration", type=str, default=None)
    parser.add_argument("--build-dir", type=str, default=None)
    parser.add_argument("--formatter", type=str, default=None, help="e.g. 'xcpretty -c'")
    parser.add_argument("--hide-shell-script-environment", action="store_true", default=None)
    parser.add_argument("--unsetenv-others", action="store_true", default=None)
    return parser


def add_signing_args(parser: Any) -> argparse.ArgumentParser:
    parser.add_argument("--signing-identity", type=str, default=None)
    parser.add_argument("--provisioning-profile", type=str, default=None)
    return parser


def add_build_args(parser: Any) -> argparse.ArgumentParser:
    parser.add_argument("--destination", action="append", default=None)
    parser.add_argument(
        "--build-setting",
        action="append",
        type=key_value_type,
        default=None,
        help="Build setting override, KEY=VALUE (repeatable).",
    )
    parser.add_argument(
        "--build-option",
        action="append",
        nargs=2,
        metavar=("OPTION", "VALUE"),
        default=None,
        help="Extra xcodebuild option and its value (repeatable).",
    )
    return parser


def add_test_args(parser: Any) -> argparse.ArgumentParser:
    parser.add_argument("--coverage", action="store_true", default=None)
    parser.add_argument("--only-testing", action="append", default=None)
    parser.add_argument("--skip-testing", action="append", default=None)
    return parser


def add_archive_args(parser: Any) -> argparse.ArgumentParser:
    parser.add_argument("--archive-path", type=str, default=None)
    return parser


def add_export_args(parser: Any) -> argparse.ArgumentParser:
    parser.add_argument("--archive-path", type=str, default=None)
    parser.add_argument("--build-dir", type=str, default=None)
    parser.add_argument("--scheme", type=str, default=None)
    parser.add_argument("--export-format", type=str, default=None)
    parser.add_argument("--export-path", type=str, default=None)
    parser.add_argument("--export-provisioning-profile", type=str, default=None)
    parser.add_argument("--export-signing-identity", type=str, default=None)
    parser.add_argument("--export-installer-identity", type=str, default=None)
    parser.add_argument("--export-with-original-signing-identity", action="store_true", default=None)
    parser.add_argument("--options-plist", type=str, default=None)
    parser.add_argument("--formatter", type=str, default=None)
    return parser


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xcjobs", description="Run xcodebuild tasks.")
    add_logging_args(parser)
    sub = parser.add_subparsers(dest="action", required=True)

    for action in ("test", "test-without-building"):
        p = sub.add_parser(action)
        add_project_args(p)
        add_build_args(p)
        add_test_args(p)
        if action == "test-without-building":
            add_signing_args(p)

    for action in ("build", "build-for-testing"):
        p = sub.add_parser(action)
        add_project_args(p)
        add_build_args(p)
        add_signing_args(p)
        if action == "build-for-testing":
            add_test_args(p)

    p = sub.add_parser("archive")
    add_project_args(p)
    add_build_args(p)
    add_signing_args(p)
    add_archive_args(p)

    p = sub.add_parser("export")
    add_export_args(p)
    return parser


def load_config(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Unable to read config file: {path} ({exc})") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config file must contain a JSON object: {path}")
    return payload


def task_attributes(args: argparse.Namespace, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merge config-file attributes with flags; flags that were given win."""
    attributes: Dict[str, Any] = dict(config or {})
    for dest, value in vars(args).items():
        if dest in _NON_TASK_ARGS or value is None:
            continue
        key = _RENAMED.get(dest, dest)
        if key in ("build_settings", "build_options"):
            value = {k: v for k, v in value}
        attributes[key] = value
    return attributes


def create_task(
    action: str,
    attributes: Dict[str, Any],
    *,
    registry: Optional[TaskRegistry] = None,
    logger: Optional[logging.Logger] = None,
    **kwargs: Any,
) -> Xcodebuild:
    task_cls = ACTIONS[action]
    return task_cls(registry=registry if registry is not None else TaskRegistry(), logger=logger, **kwargs, **attributes)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = setup_logging(args.action, log_dir=args.log_dir, level=args.log_level)

    registry = TaskRegistry()
    try:
        attributes = task_attributes(args, load_config(args.config))
        task = create_task(args.action, attributes, registry=registry, logger=logger)
        registry.invoke(task.qualified_name)
    except (ConfigurationError, ExecutionError, ProvisioningProfileError) as exc:
        logger.error(str(exc))
        return 1
    return 0
