# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Iterator, Optional

from ..domain.errors import InvariantViolation


class Node:
    """
    Base of the closed set of node payloads stored in a Graph.
    Subclasses are dataclasses and set `label`.
    """

    label: ClassVar[str] = "node"

    def properties(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}  # type: ignore[arg-type]


@dataclass
class Edge:
    id: int
    kind: Enum
    source: int
    target: int
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return str(self.kind.value)

    def get(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


class Graph:
    """
    Attributed directed multigraph kept as an arena.

    - Nodes are addressed by the integer index returned from `add_node`;
      indices are never reused, removed slots stay empty.
    - Adjacency is kept per node and per edge kind in both directions, so
      walking one kind of edge never scans the others.
    - Edges carry a mutable property dict (version stamps, scores...).
    """

    def __init__(self) -> None:
        self._nodes: list[Optional[Node]] = []
        self._edges: dict[int, Edge] = {}
        self._out: dict[int, dict[Enum, list[int]]] = {}
        self._in: dict[int, dict[Enum, list[int]]] = {}
        self._next_edge_id = 0

    # --- nodes --------------------------------------------------------------

    def add_node(self, payload: Node) -> int:
        self._nodes.append(payload)
        idx = len(self._nodes) - 1
        self._out[idx] = {}
        self._in[idx] = {}
        return idx

    def remove_node(self, idx: int) -> None:
        self.node(idx)
        for e in self.out_edges(idx) + self.in_edges(idx):
            self.remove_edge(e.id)
        self._nodes[idx] = None
        del self._out[idx]
        del self._in[idx]

    def node(self, idx: int) -> Node:
        payload = self._nodes[idx] if 0 <= idx < len(self._nodes) else None
        if payload is None:
            raise InvariantViolation(f"No node at index {idx}")
        return payload

    def __contains__(self, idx: object) -> bool:
        return isinstance(idx, int) and 0 <= idx < len(self._nodes) and self._nodes[idx] is not None

    def __len__(self) -> int:
        return sum(1 for n in self._nodes if n is not None)

    def nodes(self, label: Optional[str] = None) -> Iterator[int]:
        for idx, payload in enumerate(self._nodes):
            if payload is None:
                continue
            if label is None or payload.label == label:
                yield idx

    def vertices(self, label: str) -> list[int]:
        return list(self.nodes(label))

    def vertices_where(self, label: str, **props: Any) -> list[int]:
        """Nodes with `label` whose properties equal every given value."""
        out = []
        for idx in self.nodes(label):
            payload = self.node(idx)
            if all(getattr(payload, k, _MISSING) == v for k, v in props.items()):
                out.append(idx)
        return out

    def get(self, idx: int, key: str, default: Any = None) -> Any:
        return getattr(self.node(idx), key, default)

    def set(self, idx: int, key: str, value: Any) -> None:
        payload = self.node(idx)
        if not hasattr(payload, key):
            raise KeyError(f"{payload.label} has no property {key!r}")
        setattr(payload, key, value)

    # --- edges --------------------------------------------------------------

    def add_edge(self, kind: Enum, source: int, target: int, **props: Any) -> int:
        self.node(source)
        self.node(target)
        eid = self._next_edge_id
        self._next_edge_id += 1
        self._edges[eid] = Edge(eid, kind, source, target, dict(props))
        self._out[source].setdefault(kind, []).append(eid)
        self._in[target].setdefault(kind, []).append(eid)
        return eid

    def remove_edge(self, eid: int) -> None:
        e = self._edges.pop(eid)
        self._out[e.source][e.kind].remove(eid)
        self._in[e.target][e.kind].remove(eid)

    def edge(self, eid: int) -> Edge:
        return self._edges[eid]

    def edges(self, kind: Optional[Enum] = None) -> Iterator[Edge]:
        for e in self._edges.values():
            if kind is None or e.kind == kind:
                yield e

    def out_edges(self, idx: int, *kinds: Enum) -> list[Edge]:
        return self._adjacent(self._out, idx, kinds)

    def in_edges(self, idx: int, *kinds: Enum) -> list[Edge]:
        return self._adjacent(self._in, idx, kinds)

    def _adjacent(
        self, table: dict[int, dict[Enum, list[int]]], idx: int, kinds: tuple[Enum, ...]
    ) -> list[Edge]:
        by_kind = table.get(idx)
        if by_kind is None:
            raise InvariantViolation(f"No node at index {idx}")
        selected = kinds or tuple(by_kind)
        return [self._edges[eid] for k in selected for eid in by_kind.get(k, ())]


_MISSING = object()
