"""conftool: config file dependency management.

Options are declared in a catalog together with the options they depend on.
conftool keeps a ``key = value`` config file consistent with those
dependencies when options are enabled, disabled or set, validates existing
config files and generates default ones.
"""

from conftool.catalog import Catalog, CatalogEntry, EntryType
from conftool.graph import DependencyGraph, GraphState

__version__ = "0.2.0"

__all__ = ["Catalog", "CatalogEntry", "DependencyGraph", "EntryType", "GraphState", "__version__"]
