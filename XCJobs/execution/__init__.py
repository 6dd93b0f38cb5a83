"""Build tool process execution."""

from .models import CommandSpec, ExecutionOutcome, UNBUFFERED_IO_ENV
from .runner import CommandRunner, ExecutionError, capture_output

__all__ = [
	"CommandRunner",
	"CommandSpec",
	"ExecutionError",
	"ExecutionOutcome",
	"UNBUFFERED_IO_ENV",
	"capture_output",
]
