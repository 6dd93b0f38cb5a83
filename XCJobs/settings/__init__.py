"""xcodebuild build settings introspection."""

from .parser import BuildSettingsTable, build_settings_command, load_build_settings, parse_build_settings

__all__ = ["BuildSettingsTable", "build_settings_command", "load_build_settings", "parse_build_settings"]
