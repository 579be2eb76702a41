"""Human-readable descriptions of catalog entries and their dependencies."""

from conftool.catalog import CatalogEntry, EntryType
from conftool.graph.dependency_graph import DependencyGraph


def describe_entry(entry: CatalogEntry) -> str:
    """Format a catalog entry for ``list --show`` and ``list --all``.

    Example:
        >>> print(describe_entry(entry))
        CONFIG_PORT:
          depends: CONFIG_NET
          type: integer
          choices: Any integer
          help: Port to listen on
    """
    if entry.choices is not None:
        choices = ", ".join(entry.choices)
    elif entry.entrytype is EntryType.SWITCH:
        choices = "y, n"
    else:
        choices = f"Any {entry.entrytype.value}"

    return "\n".join(
        [
            f"{entry.name}:",
            f"  depends: {', '.join(entry.depends)}",
            f"  type: {entry.entrytype.value}",
            f"  choices: {choices}",
            f"  help: {entry.help}",
        ],
    )


def describe_dependencies(option: str, graph: DependencyGraph) -> str:
    """Format every direct and indirect dependency of an option.

    Raises:
        UnknownNodeError: If the graph does not know ``option``
    """
    deps = graph.dependencies_of(option)
    lines = [f"{option}:"]
    if deps:
        lines.extend(f"  {dep}" for dep in deps)
    else:
        lines.append("  None")
    return "\n".join(lines)
