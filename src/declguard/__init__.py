"""declguard - backward-compatibility gate for library declarations.

Compares the declaration trees of two library versions, classifies every
difference as breaking or informational, and suppresses reviewed changes
listed in an ignore file.

Example:
    >>> import declguard as dg
    >>> result = dg.compare_files("api-1.0.json", "api.json", ignore="ignore.json")
    >>> for issue in result.breaking_issues:
    ...     print(issue.describe())
"""

from declguard.api import compare, compare_files
from declguard.compat import (
    CheckerConfig,
    CheckResult,
    CompatibilityChecker,
    IgnoreRule,
    IgnoreRuleError,
    IgnoreRuleMatcher,
    Issue,
    IssueCategory,
    IssueSink,
)
from declguard.config import ConfigError, RunConfig, load_run_config
from declguard.declarations import (
    DeclarationKind,
    DeclarationLoadError,
    DeclarationNode,
    TypeDescriptor,
    flatten,
    load_declarations,
)
from declguard.errors import DeclguardError
from declguard.logging import configure_logging, get_logger

# Version: Single source of truth from pyproject.toml
try:
    from importlib.metadata import version, PackageNotFoundError

    __version__ = version("declguard")
except PackageNotFoundError:
    # Package not installed (development mode)
    __version__ = "0.0.0.dev"

__all__ = [
    # API
    "compare",
    "compare_files",
    # Checking
    "CheckerConfig",
    "CheckResult",
    "CompatibilityChecker",
    "IgnoreRule",
    "IgnoreRuleMatcher",
    "Issue",
    "IssueCategory",
    "IssueSink",
    # Declarations
    "DeclarationKind",
    "DeclarationNode",
    "TypeDescriptor",
    "flatten",
    "load_declarations",
    # Configuration
    "RunConfig",
    "load_run_config",
    "configure_logging",
    "get_logger",
    # Errors
    "ConfigError",
    "DeclarationLoadError",
    "DeclguardError",
    "IgnoreRuleError",
    # Version
    "__version__",
]
