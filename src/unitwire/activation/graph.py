"""Import graph — hard ordering edges between units.

Built as a NetworkX DiGraph with an edge ``imported -> importer``.
Cycles are fatal.  Topological order breaks ties by discovery order so a
run is deterministic for a given manifest.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import networkx as nx

from unitwire.errors import GraphError

if TYPE_CHECKING:
    from unitwire.units.model import ConfigurationUnit

type _Graph = nx.DiGraph


def build_import_graph(units: Sequence[ConfigurationUnit]) -> _Graph:
    """Build the import graph.

    Raises:
        GraphError: If an import names an unknown unit or the graph has a cycle.
    """
    g: _Graph = nx.DiGraph()
    for position, unit in enumerate(units):
        g.add_node(unit.name, position=position)
    for unit in units:
        for imported in unit.imports:
            if imported not in g:
                msg = f"Unit '{unit.name}' imports unknown unit '{imported}'"
                raise GraphError(msg, unit=unit.name, missing_import=imported)
            g.add_edge(imported, unit.name)

    try:
        cycle = nx.find_cycle(g)
    except nx.NetworkXNoCycle:
        return g
    path = [edge[0] for edge in cycle] + [cycle[0][0]]
    msg = "Import cycle: " + " -> ".join(path)
    raise GraphError(msg, cycle=path)


def activation_order(g: _Graph) -> list[str]:
    """Topological order of unit names, ties broken by discovery position."""
    return list(nx.lexicographical_topological_sort(g, key=lambda n: g.nodes[n]["position"]))
