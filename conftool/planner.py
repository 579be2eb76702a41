"""Cascading option changes.

Enabling an option requires every option it depends on to be enabled too;
disabling one invalidates every option that depends on it. The functions in
this module compute the resulting config values. They never modify the
mapping they are given: each returns a new one, with updated options kept in
place and new options appended.
"""

import re
from collections.abc import Mapping

import structlog

from conftool.catalog import SWITCH_NO, SWITCH_VALUES, SWITCH_YES, Catalog, CatalogEntry, EntryType
from conftool.errors import InvalidOptionError, InvalidValueError, NotASwitchError
from conftool.graph.dependency_graph import DependencyGraph

logger = structlog.get_logger(__name__)

INTEGER_VALUE = re.compile(r"^[0-9]+$")

# Characters str.splitlines() treats as line boundaries.
LINE_BREAK = re.compile(r"[\n\r\v\f\x1c\x1d\x1e\x85\u2028\u2029]")


def _lookup(option: str, catalog: Catalog) -> CatalogEntry:
    entry = catalog.get(option)
    if entry is None:
        raise InvalidOptionError(option)
    return entry


def validate_value(option: str, value: str, entry: CatalogEntry) -> None:
    """Check a raw value against an option's type and choices.

    Args:
        option: Option name, used in the error message
        value: Trimmed raw value
        entry: Catalog entry declaring the option

    Raises:
        InvalidValueError: If the value does not fit
    """
    if LINE_BREAK.search(value):
        raise InvalidValueError(option, value, "single-line option")
    if entry.entrytype is EntryType.SWITCH and value not in SWITCH_VALUES:
        raise InvalidValueError(option, value, "switch")
    if entry.entrytype is EntryType.INTEGER and not INTEGER_VALUE.match(value):
        raise InvalidValueError(option, value, "integer")
    if entry.choices is not None and value not in entry.choices:
        raise InvalidValueError(option, value, f"choice ({', '.join(entry.choices)}) of option")


def plan_enable_dependencies(
    option: str,
    values: Mapping[str, str],
    catalog: Catalog,
    graph: DependencyGraph,
) -> dict[str, str]:
    """Enable every option that ``option`` depends on.

    Args:
        option: Option whose dependencies must be active
        values: Current config values
        catalog: Option catalog
        graph: Sealed dependency graph built from ``catalog``

    Returns:
        New config values with every transitive dependency set to ``y``

    Raises:
        InvalidOptionError: If the graph does not know ``option``
    """
    if option not in graph:
        raise InvalidOptionError(option)

    planned = dict(values)
    deps = graph.dependencies_of(option)
    for dep in deps:
        planned[dep] = SWITCH_YES

    logger.debug("dependencies_enabled", option=option, dependencies=deps)
    return planned


def plan_disable_dependents(
    option: str,
    values: Mapping[str, str],
    catalog: Catalog,
    graph: DependencyGraph,
) -> dict[str, str]:
    """Disable every option that depends on ``option``.

    Switch dependents are set to ``n`` so that they stay listed as disabled.
    Other dependents are removed, since a concrete value is meaningless once
    a dependency is off.

    Args:
        option: Option being disabled
        values: Current config values
        catalog: Option catalog
        graph: Sealed dependency graph built from ``catalog``

    Returns:
        New config values

    Raises:
        InvalidOptionError: If the graph does not know ``option``
    """
    if option not in graph:
        raise InvalidOptionError(option)

    planned = dict(values)
    disabled: list[str] = []
    removed: list[str] = []
    for dependent in graph.dependent_vertices(option):
        if _lookup(dependent, catalog).is_switch:
            planned[dependent] = SWITCH_NO
            disabled.append(dependent)
        elif planned.pop(dependent, None) is not None:
            removed.append(dependent)

    logger.debug("dependents_disabled", option=option, disabled=disabled, removed=removed)
    return planned


def set_switch(
    option: str,
    desired: bool,
    values: Mapping[str, str],
    catalog: Catalog,
) -> dict[str, str]:
    """Set a switch option to ``y`` or ``n`` without touching other options.

    Args:
        option: Switch option to set
        desired: True for ``y``, False for ``n``
        values: Current config values
        catalog: Option catalog

    Returns:
        New config values

    Raises:
        InvalidOptionError: If the catalog does not declare ``option``
        NotASwitchError: If ``option`` is not a switch
    """
    entry = _lookup(option, catalog)
    if not entry.is_switch:
        raise NotASwitchError(option, "enable" if desired else "disable")

    planned = dict(values)
    planned[option] = SWITCH_YES if desired else SWITCH_NO
    return planned


def set_value(
    option: str,
    raw: str,
    values: Mapping[str, str],
    catalog: Catalog,
    graph: DependencyGraph,
) -> dict[str, str]:
    """Assign a value to any option, cascading to related options.

    Setting a switch to ``n`` disables its dependents. Any other assignment
    makes the option active, so its dependencies are enabled.

    Args:
        option: Option to set
        raw: Value as given by the user; surrounding whitespace is ignored
        values: Current config values
        catalog: Option catalog
        graph: Sealed dependency graph built from ``catalog``

    Returns:
        New config values

    Raises:
        InvalidOptionError: If the catalog does not declare ``option``
        InvalidValueError: If the value does not fit the option
    """
    entry = _lookup(option, catalog)
    value = raw.strip()
    validate_value(option, value, entry)

    if entry.is_switch and value == SWITCH_NO:
        planned = plan_disable_dependents(option, values, catalog, graph)
    else:
        planned = plan_enable_dependencies(option, values, catalog, graph)

    planned[option] = value
    logger.info("option_set", option=option, value=value)
    return planned


def enable(
    option: str,
    values: Mapping[str, str],
    catalog: Catalog,
    graph: DependencyGraph,
) -> dict[str, str]:
    """Enable a switch option together with everything it depends on."""
    planned = plan_enable_dependencies(option, values, catalog, graph)
    planned = set_switch(option, True, planned, catalog)
    logger.info("option_enabled", option=option)
    return planned


def disable(
    option: str,
    values: Mapping[str, str],
    catalog: Catalog,
    graph: DependencyGraph,
) -> dict[str, str]:
    """Disable a switch option together with everything depending on it."""
    planned = plan_disable_dependents(option, values, catalog, graph)
    planned = set_switch(option, False, planned, catalog)
    logger.info("option_disabled", option=option)
    return planned
