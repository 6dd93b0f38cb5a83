from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List, Optional

from ..core.utils import get_logger, with_default_extension
from ..coverage import ConfigurationError, CoverageReportGenerator
from ..execution import CommandRunner, CommandSpec, ExecutionOutcome
from ..execution.runner import AfterAction, BeforeAction
from .archive import package_archive
from .provisioning import extract_provisioning_profile
from .registry import TaskRegistry, default_registry

RunnerFactory = Callable[..., CommandRunner]
CoverageFactory = Callable[..., CoverageReportGenerator]

XCODEBUILD = "xcodebuild"

# Attributes accepted by `configure`; list/dict valued ones go through the add_* methods.
_LIST_ATTRIBUTES = {
    "destinations": "add_destination",
    "only_testing": "add_only_testing",
    "skip_testing": "add_skip_testing",
}
_MAPPING_ATTRIBUTES = {
    "build_options": "add_build_option",
    "build_settings": "add_build_setting",
}


class Xcodebuild:
    """Base for tasks that wrap one `xcodebuild` action.

    Attributes map onto xcodebuild flags (see `options`). Subclasses validate their
    attributes in `validate`, which runs when the task is defined, and do their
    work in `invoke`, which the registry calls.
    """

    # Keeps pytest from collecting `Test` and `TestWithoutBuilding` when imported into test modules.
    __test__ = False

    default_name: str = "xcodebuild"
    default_description: Optional[str] = None
    namespace: Optional[str] = None
    action: str = ""

    def __init__(
        self,
        name: Optional[str] = None,
        *,
        description: Optional[str] = None,
        registry: Optional[TaskRegistry] = None,
        runner_factory: Optional[RunnerFactory] = None,
        logger: Optional[logging.Logger] = None,
        **attributes: Any,
    ):
        self.name = str(name or self.default_name)
        self.description = description or self.default_description

        self._project: Optional[str] = None
        self.target: Optional[str] = None
        self._workspace: Optional[str] = None
        self.scheme: Optional[str] = None
        self._sdk: Optional[str] = None
        self.configuration: Optional[str] = None
        self.signing_identity: Optional[str] = None
        self._provisioning_profile: Optional[str] = None
        self._provisioning_profile_path = None
        self._provisioning_profile_uuid: Optional[str] = None
        self._provisioning_profile_name: Optional[str] = None
        self.build_dir: Optional[str] = None
        self.coverage: bool = False
        self.formatter: Optional[str] = None
        self.hide_shell_script_environment: bool = False
        self.unsetenv_others: bool = False

        self._destinations: List[str] = []
        self._only_testings: List[str] = []
        self._skip_testings: List[str] = []
        self._build_options: Dict[str, str] = {}
        self._build_settings: Dict[str, str] = {}

        self._before_action: Optional[BeforeAction] = None
        self._after_action: Optional[AfterAction] = None

        self._registry = registry if registry is not None else default_registry()
        self._runner_factory = runner_factory or CommandRunner
        self._logger = get_logger(logger)

        self.setup()
        self.configure(**attributes)
        self.define()

    def setup(self) -> None:
        """Subclass defaults applied before user attributes."""

    def configure(self, **attributes: Any) -> "Xcodebuild":
        for key, value in attributes.items():
            if value is None:
                continue
            if key in _LIST_ATTRIBUTES:
                for item in value:
                    getattr(self, _LIST_ATTRIBUTES[key])(item)
            elif key in _MAPPING_ATTRIBUTES:
                for k, v in dict(value).items():
                    getattr(self, _MAPPING_ATTRIBUTES[key])(k, v)
            elif key.startswith("_") or not hasattr(self, key) or callable(getattr(self, key)):
                raise ConfigurationError(f"Unknown attribute '{key}' for {type(self).__name__}")
            else:
                setattr(self, key, value)
        return self

    # --- attributes -------------------------------------------------------

    @property
    def project(self) -> Optional[str]:
        return with_default_extension(self._project, ".xcodeproj")

    @project.setter
    def project(self, value: Optional[str]) -> None:
        self._project = value

    @property
    def workspace(self) -> Optional[str]:
        return with_default_extension(self._workspace, ".xcworkspace")

    @workspace.setter
    def workspace(self, value: Optional[str]) -> None:
        self._workspace = value

    @property
    def sdk(self) -> Optional[str]:
        return self._sdk

    @sdk.setter
    def sdk(self, value: Optional[str]) -> None:
        self._sdk = value

    @property
    def coverage_enabled(self) -> bool:
        return bool(self.coverage)

    @property
    def provisioning_profile(self) -> Optional[str]:
        return self._provisioning_profile

    @provisioning_profile.setter
    def provisioning_profile(self, value: Optional[str]) -> None:
        self._provisioning_profile = value
        if value:
            path, uuid, name = extract_provisioning_profile(value)
        else:
            path, uuid, name = None, None, None
        self._provisioning_profile_path = path
        self._provisioning_profile_uuid = uuid
        self._provisioning_profile_name = name

    @property
    def provisioning_profile_uuid(self) -> Optional[str]:
        return self._provisioning_profile_uuid

    @property
    def provisioning_profile_name(self) -> Optional[str]:
        return self._provisioning_profile_name

    @property
    def destinations(self) -> List[str]:
        return list(self._destinations)

    def add_destination(self, destination: str) -> None:
        self._destinations.append(destination)

    def add_only_testing(self, only_testing: str) -> None:
        self._only_testings.append(only_testing)

    def add_skip_testing(self, skip_testing: str) -> None:
        self._skip_testings.append(skip_testing)

    def add_build_option(self, option: str, value: str) -> None:
        self._build_options[option] = value

    def add_build_setting(self, setting: str, value: str) -> None:
        self._build_settings[setting] = value

    def before_action(self, fn: BeforeAction) -> BeforeAction:
        self._before_action = fn
        return fn

    def after_action(self, fn: AfterAction) -> AfterAction:
        self._after_action = fn
        return fn

    # --- definition -------------------------------------------------------

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}:{self.name}" if self.namespace else self.name

    def validate(self) -> None:
        if self.scheme and self.target:
            raise ConfigurationError("cannot specify both a scheme and targets")

    def define(self) -> None:
        self.validate()
        self._registry.register(self.name, self.invoke, description=self.description, namespace=self.namespace)

    def invoke(self) -> None:
        self.run(self.command())

    def command(self) -> List[str]:
        return [XCODEBUILD, self.action, *self.options()]

    def options(self) -> List[str]:
        opts: List[str] = []
        if self.project:
            opts += ["-project", self.project]
        if self.target:
            opts += ["-target", self.target]
        if self.workspace:
            opts += ["-workspace", self.workspace]
        if self.scheme:
            opts += ["-scheme", self.scheme]
        if self.sdk:
            opts += ["-sdk", self.sdk]
        if self.configuration:
            opts += ["-configuration", self.configuration]
        if self.coverage_enabled:
            opts += ["-enableCodeCoverage", "YES"]
        if self.build_dir:
            opts += ["-derivedDataPath", self.build_dir]
        if self.hide_shell_script_environment:
            opts += ["-hideShellScriptEnvironment"]

        for destination in self._destinations:
            opts += ["-destination", destination]
        for only_testing in self._only_testings:
            opts.append(f"-only-testing:{only_testing}")
        for skip_testing in self._skip_testings:
            opts.append(f"-skip-testing:{skip_testing}")

        for option, value in self._build_options.items():
            opts += [option, value]
        for setting, value in self._build_settings.items():
            opts.append(f"{setting}={value}")
        return opts

    def run(self, cmd: List[str]) -> ExecutionOutcome:
        runner = self._runner_factory(
            self.formatter,
            before_action=self._before_action,
            after_action=self._after_action,
            logger=self._logger,
        )
        return runner.execute(CommandSpec(arguments=list(cmd), unsetenv_others=bool(self.unsetenv_others)))

    def _add_signing_settings(self) -> None:
        if self.build_dir:
            self.add_build_setting("CONFIGURATION_TEMP_DIR", os.path.join(self.build_dir, "temp"))
        if self.signing_identity:
            self.add_build_setting("CODE_SIGN_IDENTITY", self.signing_identity)
        if self.provisioning_profile_uuid:
            self.add_build_setting("PROVISIONING_PROFILE", self.provisioning_profile_uuid)


class Test(Xcodebuild):
    default_name = "test"
    default_description = "test application"
    action = "test"

    def __init__(self, name: Optional[str] = None, *, coverage_factory: Optional[CoverageFactory] = None, **kwargs: Any):
        self._coverage_factory = coverage_factory or CoverageReportGenerator
        super().__init__(name, **kwargs)

    @property
    def sdk(self) -> Optional[str]:
        return self._sdk or "iphonesimulator"

    @sdk.setter
    def sdk(self, value: Optional[str]) -> None:
        self._sdk = value

    def validate(self) -> None:
        if not self.scheme:
            raise ConfigurationError("test action requires specifying a scheme")
        super().validate()

    def invoke(self) -> None:
        self.add_build_setting("GCC_SYMBOLS_PRIVATE_EXTERN", "NO")
        options = self.options()
        self.run([XCODEBUILD, self.action, *options])
        if self.coverage_enabled:
            self.coverage_report(options)

    def coverage_report(self, options: List[str]) -> None:
        generator = self._coverage_factory(logger=self._logger)
        generator.generate(options, self.sdk)


class Build(Xcodebuild):
    default_name = "build"
    default_description = "build application"
    action = "build"

    def validate(self) -> None:
        if self.build_dir and not self.scheme:
            raise ConfigurationError("the scheme is required when specifying build_dir")
        super().validate()

    def define(self) -> None:
        super().define()
        if self.build_dir:
            self._registry.add_clean(self.build_dir)
            self._registry.add_clobber(self.build_dir)

    def invoke(self) -> None:
        self._add_signing_settings()
        self.run(self.command())


class TestWithoutBuilding(Build):
    default_name = "test-without-building"
    default_description = "test without building"
    action = "test-without-building"


class BuildForTesting(Build):
    default_name = "build-for-testing"
    default_description = "build for testing"
    action = "build-for-testing"


class Archive(Xcodebuild):
    default_name = "archive"
    default_description = "make xcarchive"
    namespace = "build"
    action = "archive"

    def setup(self) -> None:
        self._archive_path: Optional[str] = None

    @property
    def archive_path(self) -> Optional[str]:
        if self._archive_path:
            return self._archive_path
        if self.build_dir and self.scheme:
            return os.path.join(self.build_dir, self.scheme)
        return None

    @archive_path.setter
    def archive_path(self, value: Optional[str]) -> None:
        self._archive_path = value

    def validate(self) -> None:
        if not self.scheme:
            raise ConfigurationError("archive action requires specifying a scheme")
        super().validate()

    def define(self) -> None:
        super().define()
        if self.build_dir:
            self._registry.add_clean(self.build_dir)
            self._registry.add_clobber(self.build_dir)

    def options(self) -> List[str]:
        opts = super().options()
        if self.archive_path:
            opts += ["-archivePath", self.archive_path]
        return opts

    def invoke(self) -> None:
        self._add_signing_settings()
        self.run(self.command())
        if self.build_dir and self.scheme:
            package_archive(self.build_dir, self.scheme, logger=self._logger)


class Export(Xcodebuild):
    default_name = "export"
    default_description = "export from an archive"
    namespace = "build"

    def setup(self) -> None:
        self.unsetenv_others = True
        self._archive_path: Optional[str] = None
        self.export_format: Optional[str] = "IPA"
        self.export_path: Optional[str] = None
        self._export_provisioning_profile: Optional[str] = None
        self.export_signing_identity: Optional[str] = None
        self.export_installer_identity: Optional[str] = None
        self.export_with_original_signing_identity: bool = False
        self.options_plist: Optional[str] = None

    @property
    def archive_path(self) -> Optional[str]:
        if self._archive_path:
            return self._archive_path
        if self.build_dir and self.scheme:
            return os.path.join(self.build_dir, self.scheme)
        return None

    @archive_path.setter
    def archive_path(self, value: Optional[str]) -> None:
        self._archive_path = value

    @property
    def export_provisioning_profile(self) -> Optional[str]:
        return self._export_provisioning_profile

    @export_provisioning_profile.setter
    def export_provisioning_profile(self, value: Optional[str]) -> None:
        if not value:
            self._export_provisioning_profile = None
            return
        _path, _uuid, name = extract_provisioning_profile(value)
        self._export_provisioning_profile = name or value

    def command(self) -> List[str]:
        return [XCODEBUILD, "-exportArchive", *self.options()]

    def options(self) -> List[str]:
        opts: List[str] = []
        if self.options_plist:
            opts += ["-exportOptionsPlist", self.options_plist]
        if self.archive_path:
            opts += ["-archivePath", self.archive_path]
        if self.export_format:
            opts += ["-exportFormat", self.export_format]
        if self.export_path:
            opts += ["-exportPath", self.export_path]
        if self.export_provisioning_profile:
            opts += ["-exportProvisioningProfile", self.export_provisioning_profile]
        if self.export_signing_identity:
            opts += ["-exportSigningIdentity", self.export_signing_identity]
        if self.export_installer_identity:
            opts += ["-exportInstallerIdentity", self.export_installer_identity]
        if self.export_with_original_signing_identity:
            opts += ["-exportWithOriginalSigningIdentity"]
        return opts

    def validate(self) -> None:
        # Export carries no scheme/target constraints.
        return None
