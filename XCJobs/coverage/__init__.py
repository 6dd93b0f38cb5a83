"""llvm-cov parsing and gcov report generation."""

from .gcov import render_gcov, write_gcov_file, write_gcov_files
from .llvm_cov import normalize_execution_count, parse_llvm_cov_show
from .models import NEVER_EXECUTED, NOT_INSTRUMENTED, CoverageFile, CoverageLineRecord, CoverageTarget
from .report import ConfigurationError, CoverageReportGenerator, select_coverage_targets

__all__ = [
	"ConfigurationError",
	"CoverageFile",
	"CoverageLineRecord",
	"CoverageReportGenerator",
	"CoverageTarget",
	"NEVER_EXECUTED",
	"NOT_INSTRUMENTED",
	"normalize_execution_count",
	"parse_llvm_cov_show",
	"render_gcov",
	"select_coverage_targets",
	"write_gcov_file",
	"write_gcov_files",
]
