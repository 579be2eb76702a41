"""Option catalog models and loading.

The catalog is the document declaring every configuration option: its name,
its direct dependencies, its type, an optional set of allowed values, a
default and a help text. This module parses it with Pydantic and builds the
sealed dependency graph from the declared dependencies.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import (
    BaseModel,
    Field,
    PrivateAttr,
    StrictInt,
    StrictStr,
    ValidationError,
    model_validator,
)

from conftool.errors import CatalogError, NotASwitchError
from conftool.graph.dependency_graph import DependencyGraph

logger = structlog.get_logger(__name__)

# Switch literals as written to the config file
SWITCH_YES = "y"
SWITCH_NO = "n"
SWITCH_VALUES = (SWITCH_YES, SWITCH_NO)

OPTION_NAME_PATTERN = r"^[A-Za-z0-9_-]+$"


class EntryType(str, Enum):
    """Type of value an option holds."""

    SWITCH = "switch"
    STRING = "string"
    INTEGER = "integer"


class CatalogEntry(BaseModel):
    """A single configuration option declared by the catalog.

    Attributes:
        name: Unique option identifier
        depends: Direct dependencies in declaration order
        entrytype: Type of the option's value
        choices: Optional set of allowed values
        default: Default value (``y``/``n`` for switches, an integer for
            integers, a string for strings)
        help: Help text shown by ``list``
    """

    name: str = Field(
        description="Option identifier",
        pattern=OPTION_NAME_PATTERN,
    )
    depends: list[str] = Field(
        default_factory=list,
        description="Direct dependencies",
    )
    entrytype: EntryType = Field(description="Value type")
    choices: list[str] | None = Field(
        default=None,
        description="Allowed values",
    )
    default: StrictStr | StrictInt = Field(description="Default value")
    help: str = Field(default="", description="Help text")

    model_config = {"str_strip_whitespace": True}

    @model_validator(mode="after")
    def validate_default(self) -> "CatalogEntry":
        """Check that the default is consistent with the type and choices.

        Returns:
            The validated entry

        Raises:
            ValueError: If the default does not fit the entry type or choices
        """
        if self.entrytype is EntryType.SWITCH:
            if self.default not in SWITCH_VALUES:
                msg = f"Invalid switch default {self.default!r} for {self.name!r}"
                raise ValueError(msg)
        elif self.entrytype is EntryType.INTEGER:
            if not isinstance(self.default, int) or self.default < 0:
                msg = f"Integer option {self.name!r} needs a non-negative integer default"
                raise ValueError(msg)
        elif not isinstance(self.default, str):
            msg = f"String option {self.name!r} needs a string default"
            raise ValueError(msg)

        if self.choices is not None and self.default_value() not in self.choices:
            msg = f"Default {self.default!r} of {self.name!r} is not one of its choices"
            raise ValueError(msg)

        return self

    @property
    def is_switch(self) -> bool:
        """Check if the option is a y/n switch."""
        return self.entrytype is EntryType.SWITCH

    def is_enabled_by_default(self) -> bool:
        """Check if a switch option defaults to enabled.

        Raises:
            NotASwitchError: If the option is not a switch
        """
        if not self.is_switch:
            raise NotASwitchError(self.name, "query default state of")
        return self.default == SWITCH_YES

    def default_value(self) -> str:
        """Return the default as it is written to a config file."""
        return str(self.default)


class Catalog(BaseModel):
    """Ordered collection of catalog entries.

    Structural consistency (unique names, no self or duplicate dependencies,
    no dangling references, no cycles) is enforced by build_graph().

    Example:
        >>> catalog = Catalog.from_file(".conftool.json")
        >>> graph = catalog.build_graph()
        >>> graph.dependencies_of("CONFIG_NET")
    """

    entries: list[CatalogEntry] = Field(default_factory=list)

    _by_name: dict[str, CatalogEntry] = PrivateAttr(default_factory=dict)

    def model_post_init(self, context: Any, /) -> None:
        for entry in self.entries:
            self._by_name.setdefault(entry.name, entry)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, name: str) -> CatalogEntry | None:
        """Look up an entry by option name.

        Args:
            name: Option identifier

        Returns:
            The entry, or None if the catalog does not declare it
        """
        return self._by_name.get(name)

    def names(self) -> list[str]:
        """Option names in catalog order."""
        return [entry.name for entry in self.entries]

    def build_graph(self) -> DependencyGraph:
        """Build and seal the dependency graph declared by this catalog.

        Entries are inserted in catalog order; dependencies may refer to
        entries declared later.

        Returns:
            A sealed DependencyGraph

        Raises:
            StructuralCatalogError: If the declared dependencies are
                inconsistent (duplicates, self-dependencies, undefined
                options or cycles)
        """
        graph = DependencyGraph()
        for entry in self.entries:
            graph.insert(entry.name, entry.depends)
        graph.seal()
        return graph

    @classmethod
    def from_file(cls, path: str | Path) -> "Catalog":
        """Load a catalog document from disk.

        Files ending in ``.json`` are parsed as JSON, anything else as YAML.
        The document must be a mapping with an ``entries`` list.

        Args:
            path: Path to the catalog document

        Returns:
            Parsed and validated Catalog instance

        Raises:
            FileNotFoundError: If the file does not exist
            CatalogError: If the document cannot be parsed or is invalid
        """
        catalog_path = Path(path)

        if not catalog_path.exists():
            msg = f"Specification {catalog_path} does not exist"
            raise FileNotFoundError(msg)

        logger.info("loading_catalog", path=str(catalog_path))

        try:
            with catalog_path.open(encoding="utf-8") as f:
                if catalog_path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as e:
            logger.exception("catalog_parse_error", error=str(e), path=str(catalog_path))
            msg = f"Invalid catalog document {catalog_path}: {e}"
            raise CatalogError(msg) from e

        if not isinstance(data, dict):
            msg = f"Catalog document {catalog_path} must be a mapping with an 'entries' list"
            raise CatalogError(msg)

        try:
            catalog = cls(**data)
        except ValidationError as e:
            msg = f"Invalid catalog document {catalog_path}: {e}"
            raise CatalogError(msg) from e

        logger.info("catalog_loaded", path=str(catalog_path), option_count=len(catalog))
        return catalog
