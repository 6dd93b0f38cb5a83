"""xcodebuild tasks and the registry they are defined in."""

from ..coverage import ConfigurationError
from .archive import package_archive
from .provisioning import ProvisioningProfileError, extract_provisioning_profile
from .registry import (
	TaskDefinition,
	TaskRegistry,
	default_registry,
	get_task,
	invoke_task,
	list_tasks,
	register_task,
)
from .xcodebuild import Archive, Build, BuildForTesting, Export, Test, TestWithoutBuilding, Xcodebuild

__all__ = [
	"Archive",
	"Build",
	"BuildForTesting",
	"ConfigurationError",
	"Export",
	"ProvisioningProfileError",
	"TaskDefinition",
	"TaskRegistry",
	"Test",
	"TestWithoutBuilding",
	"Xcodebuild",
	"default_registry",
	"extract_provisioning_profile",
	"get_task",
	"invoke_task",
	"list_tasks",
	"package_archive",
	"register_task",
]
