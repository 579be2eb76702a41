"""Graph module for option dependency management.

This module provides the two-phase dependency graph used to resolve which
options an option depends on, and which options depend on it.
"""

from conftool.graph.dependency_graph import DependencyGraph, GraphState

__all__ = ["DependencyGraph", "GraphState"]
