"""Target graph model and the traversal that drives overlay visitors."""

from lint_overlay.graph.build_graph import (
    BuildGraph,
    CycleError,
    ManifestError,
    load_build_graph,
    parse_build_graph,
)
from lint_overlay.graph.traversal import TraversalResult, traverse

__all__ = [
    "BuildGraph",
    "CycleError",
    "ManifestError",
    "TraversalResult",
    "load_build_graph",
    "parse_build_graph",
    "traverse",
]
