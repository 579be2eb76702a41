"""Exception hierarchy for conftool.

Every failure raised by the graph engine, the planner, the catalog loader and
the config file reader derives from ConftoolError, so the command-line layer
can report them uniformly. Batch checks do not raise; they collect their
findings in a ValidationReport instead.
"""


class ConftoolError(Exception):
    """Base class for all conftool errors."""

    def __init__(self, message: str):
        """Initialize the exception with a descriptive message.

        Args:
            message: Description of the error
        """
        super().__init__(message)
        self.message = message


class StructuralCatalogError(ConftoolError):
    """The dependency structure declared by the catalog is inconsistent."""


class DuplicateNodeError(StructuralCatalogError):
    """An option was inserted into the graph twice."""

    def __init__(self, node: str):
        super().__init__(f"Option {node!r} already in graph")
        self.node = node


class SelfDependencyError(StructuralCatalogError):
    """An option lists itself among its dependencies."""

    def __init__(self, node: str):
        super().__init__(f"Option {node!r} cannot depend on itself")
        self.node = node


class DuplicateDependencyError(StructuralCatalogError):
    """An option lists the same dependency more than once."""

    def __init__(self, node: str, duplicates: list[str]):
        super().__init__(
            f"Dependencies of {node!r} contain duplicates: {', '.join(duplicates)}",
        )
        self.node = node
        self.duplicates = duplicates


class IncompleteGraphError(StructuralCatalogError):
    """Sealing failed because some dependencies were never inserted."""

    def __init__(self, missing: dict[str, list[str]]):
        """Initialize with the unresolved references.

        Args:
            missing: Mapping of never-inserted option names to the options
                that depend on them
        """
        details = "; ".join(
            f"{name} (required by {', '.join(requirers)})" for name, requirers in missing.items()
        )
        super().__init__(f"Graph is incomplete, undefined dependencies: {details}")
        self.missing = missing


class CycleDetectedError(StructuralCatalogError):
    """Sealing failed because the dependencies form a cycle.

    A cycle means no option on it can ever be enabled before the others,
    so the catalog is rejected rather than traversed partially.
    """

    def __init__(self, cycle: list[str]):
        super().__init__(f"Cycle detected in dependency graph: {' -> '.join(cycle)}")
        self.cycle = cycle


class GraphStateError(ConftoolError):
    """An operation was attempted in the wrong graph lifecycle state."""


class UnknownNodeError(ConftoolError, LookupError):
    """The graph has no node with the requested name."""

    def __init__(self, node: str):
        super().__init__(f"No option matches {node!r}")
        self.node = node


class InvalidOptionError(ConftoolError, LookupError):
    """The option named by a command is not declared in the catalog."""

    def __init__(self, option: str):
        super().__init__(f'Invalid config option "{option}"')
        self.option = option


class DomainError(ConftoolError, ValueError):
    """A value does not fit the type or choices of its option."""


class InvalidValueError(DomainError):
    """A value was rejected by its option's domain."""

    def __init__(self, option: str, value: str, reason: str):
        super().__init__(f'Invalid value "{value}" for {reason} "{option}"')
        self.option = option
        self.value = value


class NotASwitchError(DomainError):
    """A switch-only operation was applied to a non-switch option."""

    def __init__(self, option: str, action: str):
        super().__init__(f'Cannot {action} non-switch option "{option}"')
        self.option = option
        self.action = action


class FormatError(ConftoolError):
    """Text input is malformed."""


class LineFormatError(FormatError):
    """A config file line is not of the form ``key = value``."""

    def __init__(self, lineno: int, line: str):
        super().__init__(f"Syntax error on line {lineno}: {line}")
        self.lineno = lineno
        self.line = line


class ConsistencyError(ConftoolError):
    """Option values or declarations contradict the dependency rules."""


class CatalogError(ConftoolError):
    """The catalog document could not be read or is invalid."""


__all__ = [
    "CatalogError",
    "ConftoolError",
    "ConsistencyError",
    "CycleDetectedError",
    "DomainError",
    "DuplicateDependencyError",
    "DuplicateNodeError",
    "FormatError",
    "GraphStateError",
    "IncompleteGraphError",
    "InvalidOptionError",
    "InvalidValueError",
    "LineFormatError",
    "NotASwitchError",
    "SelfDependencyError",
    "StructuralCatalogError",
    "UnknownNodeError",
]
