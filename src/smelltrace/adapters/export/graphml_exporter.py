# Licensed under the Apache License, Version 2.0
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import networkx as nx

from ...domain.errors import ExportError
from ...ports.exporter import GraphExporterPort
from ...services.graph import Graph

logger = logging.getLogger(__name__)

_SCALARS = (str, int, float, bool)


def to_networkx(graph: Graph) -> nx.MultiDiGraph:
    """
    Copy a tracking graph into a networkx MultiDiGraph.

    Every node and edge gets a `label` attribute. Mapping-valued properties
    (characteristics, component attributes) are spread into one attribute per
    key, lists become their string form and None values are left out, since
    GraphML only stores scalars.
    """
    out = nx.MultiDiGraph()
    for idx in graph.nodes():
        payload = graph.node(idx)
        out.add_node(idx, label=payload.label, **_flatten(payload.properties()))
    for e in graph.edges():
        out.add_edge(e.source, e.target, key=e.id, label=e.label, **_flatten(e.properties))
    return out


class GraphMLExporter(GraphExporterPort):
    """Writes a tracking graph as GraphML through networkx."""

    @property
    def suffix(self) -> str:
        return ".graphml"

    def export(self, graph: Graph, out: Path) -> Path:
        out = Path(out)
        try:
            out.parent.mkdir(parents=True, exist_ok=True)
            nx.write_graphml(to_networkx(graph), out)
        except OSError as e:
            raise ExportError(f"Could not write GraphML to {out}: {e}") from e
        logger.debug("Wrote %d nodes to %s", len(graph), out)
        return out


def _flatten(props: Mapping[str, Any]) -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in props.items():
        if key == "label":
            continue
        if isinstance(value, Mapping):
            for k, v in value.items():
                if v is not None and k not in props:
                    flat[str(k)] = v if isinstance(v, _SCALARS) else str(v)
        elif value is None:
            continue
        elif isinstance(value, _SCALARS):
            flat[key] = value
        else:
            flat[key] = str(value)
    return flat
