"""Default config generation."""

import structlog

from conftool.catalog import Catalog
from conftool.errors import ConsistencyError
from conftool.graph.dependency_graph import DependencyGraph

logger = structlog.get_logger(__name__)


def generate_defconfig(catalog: Catalog, graph: DependencyGraph) -> dict[str, str]:
    """Build a config holding the default value of every usable option.

    An option is included only if all of its dependencies are switches that
    are enabled by default.

    Args:
        catalog: Option catalog
        graph: Sealed dependency graph built from ``catalog``

    Returns:
        Config values in catalog order

    Raises:
        ConsistencyError: If an option depends on a non-switch option
    """
    values: dict[str, str] = {}

    for entry in catalog.entries:
        logger.debug("checking_dependencies", option=entry.name)

        disabled_by: str | None = None
        for dep in graph.dependencies_of(entry.name):
            dep_entry = catalog.get(dep)
            if dep_entry is None or not dep_entry.is_switch:
                msg = (
                    f"Option {entry.name} depends on non-switch option {dep} "
                    "which is not supported"
                )
                raise ConsistencyError(msg)
            if disabled_by is None and not dep_entry.is_enabled_by_default():
                disabled_by = dep

        if disabled_by is not None:
            logger.debug("option_skipped", option=entry.name, disabled_dependency=disabled_by)
            continue

        values[entry.name] = entry.default_value()
        logger.debug("default_chosen", option=entry.name, value=values[entry.name])

    logger.info("defconfig_generated", option_count=len(values), total_options=len(catalog))
    return values
