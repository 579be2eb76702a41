"""Validation of persisted config files against the option catalog.

Three independent checks are run and every violation is collected into a
ValidationReport instead of stopping at the first one:

- line format: every line is empty or ``identifier = value``
- domain: every key is a known option and every value fits its option
- dependencies: every active option has all of its dependencies enabled
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import structlog

from conftool.catalog import SWITCH_NO, SWITCH_YES, Catalog
from conftool.errors import InvalidValueError
from conftool.graph.dependency_graph import DependencyGraph
from conftool.kvfile import parse_lines
from conftool.planner import validate_value

logger = structlog.get_logger(__name__)

LINE_FORMAT = re.compile(r"^\s*([A-Za-z0-9_-]+\s*=.*)?$")


@dataclass(frozen=True)
class LineFormatIssue:
    """A config file line that is neither empty nor ``identifier = value``."""

    lineno: int
    line: str


@dataclass
class ValidationReport:
    """Report containing validation results for a config file.

    Attributes:
        format_errors: Malformed lines with their 1-based line numbers
        unknown_options: Keys the catalog does not declare
        invalid_values: Option name mapped to the reason its value is invalid
        unset_dependencies: Dependency listed with a value other than ``y``,
            mapped to the options requiring it
        unlisted_dependencies: Dependency missing from the file, mapped to
            the options requiring it
    """

    format_errors: list[LineFormatIssue] = field(default_factory=list)
    unknown_options: list[str] = field(default_factory=list)
    invalid_values: dict[str, str] = field(default_factory=dict)
    unset_dependencies: dict[str, list[str]] = field(default_factory=dict)
    unlisted_dependencies: dict[str, list[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        """Whether the config passed every check."""
        return not (
            self.format_errors
            or self.unknown_options
            or self.invalid_values
            or self.unset_dependencies
            or self.unlisted_dependencies
        )

    def add_format_error(self, lineno: int, line: str) -> None:
        self.format_errors.append(LineFormatIssue(lineno, line))
        logger.warning("config_syntax_error", lineno=lineno, line=line)

    def add_unknown_option(self, option: str) -> None:
        self.unknown_options.append(option)
        logger.warning("unknown_option", option=option)

    def add_invalid_value(self, option: str, reason: str) -> None:
        self.invalid_values[option] = reason
        logger.warning("invalid_value", option=option, reason=reason)

    def add_missing_dependency(self, dependency: str, required_by: str, listed: bool) -> None:
        """Record that ``required_by`` needs ``dependency`` enabled.

        Args:
            dependency: The dependency that is not enabled
            required_by: The option requiring it
            listed: True if the dependency appears in the config with a
                value other than ``y``, False if it is absent
        """
        target = self.unset_dependencies if listed else self.unlisted_dependencies
        requirers = target.setdefault(dependency, [])
        if required_by not in requirers:
            requirers.append(required_by)

    def errors(self) -> list[str]:
        """Human-readable messages for every violation, grouped by check."""
        messages = [f"Syntax error on line {issue.lineno}: {issue.line}" for issue in self.format_errors]
        messages.extend(f'Unknown config option "{option}"' for option in self.unknown_options)
        messages.extend(self.invalid_values.values())
        messages.extend(
            f'Dependency "{dep}" not set, required by {", ".join(requirers)}'
            for dep, requirers in self.unset_dependencies.items()
        )
        messages.extend(
            f'Dependency "{dep}" not listed, required by {", ".join(requirers)}'
            for dep, requirers in self.unlisted_dependencies.items()
        )
        return messages

    def summary(self) -> str:
        """Generate a human-readable summary of the validation report."""
        lines = []
        lines.append(f"Validation Status: {'PASS' if self.is_valid else 'FAIL'}")
        lines.append(f"Syntax Errors: {len(self.format_errors)}")
        lines.append(f"Unknown Options: {len(self.unknown_options)}")
        lines.append(f"Invalid Values: {len(self.invalid_values)}")
        lines.append(
            f"Missing Dependencies: {len(self.unset_dependencies) + len(self.unlisted_dependencies)}",
        )

        errors = self.errors()
        if errors:
            lines.append("\nErrors:")
            lines.extend(f"  - {error}" for error in errors)

        return "\n".join(lines)


def check_line_format(lines: Sequence[str], report: ValidationReport) -> None:
    """Record every line that is neither empty nor ``identifier = value``."""
    for lineno, line in enumerate(lines, 1):
        if not LINE_FORMAT.match(line):
            report.add_format_error(lineno, line)


def check_values(values: Mapping[str, str], catalog: Catalog, report: ValidationReport) -> None:
    """Record unknown keys and values that do not fit their option."""
    for option, value in values.items():
        entry = catalog.get(option)
        if entry is None:
            report.add_unknown_option(option)
            continue
        try:
            validate_value(option, value, entry)
        except InvalidValueError as e:
            report.add_invalid_value(option, e.message)


def check_dependencies(
    values: Mapping[str, str],
    catalog: Catalog,
    graph: DependencyGraph,
    report: ValidationReport,
) -> None:
    """Record dependencies of active options that are not enabled.

    An option is active unless it is a switch set to ``n``. Keys unknown to
    the catalog are skipped; check_values() reports them.
    """
    for option, value in values.items():
        entry = catalog.get(option)
        if entry is None or option not in graph:
            continue
        if entry.is_switch and value == SWITCH_NO:
            continue

        for dep in graph.dependencies_of(option):
            if dep not in values:
                report.add_missing_dependency(dep, option, listed=False)
            elif values[dep] != SWITCH_YES:
                report.add_missing_dependency(dep, option, listed=True)


def validate_config(
    lines: Sequence[str],
    catalog: Catalog,
    graph: DependencyGraph,
) -> ValidationReport:
    """Validate the raw lines of a config file.

    Malformed lines are reported and left out of the domain and dependency
    checks, which run on the remaining lines.

    Args:
        lines: Raw config file lines without terminators
        catalog: Option catalog
        graph: Sealed dependency graph built from ``catalog``

    Returns:
        ValidationReport containing all violations
    """
    logger.info("starting_config_validation", line_count=len(lines))

    report = ValidationReport()
    check_line_format(lines, report)

    malformed = {issue.lineno for issue in report.format_errors}
    values = parse_lines(line for lineno, line in enumerate(lines, 1) if lineno not in malformed)

    check_values(values, catalog, report)
    check_dependencies(values, catalog, graph, report)

    logger.info(
        "config_validation_complete",
        is_valid=report.is_valid,
        error_count=len(report.errors()),
    )
    return report
