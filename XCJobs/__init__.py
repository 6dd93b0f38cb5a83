"""XCJobs: xcodebuild task automation.

Runs xcodebuild actions with live output (optionally through a formatter such
as xcpretty) and turns llvm-cov output of instrumented test runs into gcov files.
"""

from .coverage import ConfigurationError, CoverageReportGenerator
from .execution import CommandRunner, CommandSpec, ExecutionError, ExecutionOutcome
from .tasks import Archive, Build, BuildForTesting, Export, Test, TestWithoutBuilding

__all__ = [
    "Archive",
    "Build",
    "BuildForTesting",
    "CommandRunner",
    "CommandSpec",
    "ConfigurationError",
    "CoverageReportGenerator",
    "ExecutionError",
    "ExecutionOutcome",
    "Export",
    "Test",
    "TestWithoutBuilding",
]

__version__ = "0.1.0"
