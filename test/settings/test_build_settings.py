from __future__ import annotations

from typing import List

from XCJobs.settings import build_settings_command, load_build_settings, parse_build_settings

SETTINGS_TEXT = """\
Command line invocation:
    /usr/bin/xcodebuild test -scheme App -showBuildSettings
STRAY_KEY = ignored

Build settings for action test and target App:
    EXECUTABLE_NAME = App
    OBJROOT = /tmp/DerivedData/App/Build/Intermediates
    PRODUCT_TYPE = com.apple.product-type.application
    ONLY_ACTIVE_ARCH = YES
    ONLY_ACTIVE_ARCH = NO

Build settings for action test and target AppTests:
    EXECUTABLE_NAME = AppTests
    OTHER_SWIFT_FLAGS = -D DEBUG=1
    PRODUCT_TYPE = com.apple.product-type.bundle.unit-test
"""


def test_parse_two_target_blocks():
    settings = parse_build_settings(SETTINGS_TEXT)

    assert list(settings) == ["App", "AppTests"]
    assert settings["App"]["EXECUTABLE_NAME"] == "App"
    assert settings["App"]["PRODUCT_TYPE"] == "com.apple.product-type.application"
    assert "EXECUTABLE_NAME" in settings["AppTests"]
    assert settings["AppTests"]["EXECUTABLE_NAME"] == "AppTests"
    assert "OBJROOT" not in settings["AppTests"]


def test_lines_before_first_header_are_ignored():
    settings = parse_build_settings(SETTINGS_TEXT)
    assert all("STRAY_KEY" not in block for block in settings.values())


def test_duplicate_key_keeps_last_value():
    settings = parse_build_settings(SETTINGS_TEXT)
    assert settings["App"]["ONLY_ACTIVE_ARCH"] == "NO"


def test_value_is_split_on_first_equals_only():
    settings = parse_build_settings(SETTINGS_TEXT)
    assert settings["AppTests"]["OTHER_SWIFT_FLAGS"] == "-D DEBUG=1"


def test_empty_text_yields_empty_table():
    assert parse_build_settings("") == {}


def test_load_runs_show_build_settings_with_given_options():
    seen: List[List[str]] = []

    def capture(command: List[str]) -> str:
        seen.append(command)
        return SETTINGS_TEXT

    settings = load_build_settings(["-scheme", "App", "-sdk", "iphonesimulator"], capture=capture)

    assert seen == [["xcodebuild", "test", "-scheme", "App", "-sdk", "iphonesimulator", "-showBuildSettings"]]
    assert set(settings) == {"App", "AppTests"}


def test_build_settings_command_shape():
    assert build_settings_command(["-scheme", "S"]) == ["xcodebuild", "test", "-scheme", "S", "-showBuildSettings"]
