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

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Mapping, Optional

from .graph import Graph, Node


class CondensedEdge(Enum):
    HAS_SNAPSHOT = "hasCharacteristic"
    AFFECTS = "affects"
    HAS_COMPONENT_SNAPSHOT = "hasComponentCharacteristic"


@dataclass
class DynastyNode(Node):
    label: ClassVar[str] = "smell"

    unique_smell_id: int
    smell_type: str
    first_appeared: str
    first_appeared_index: int
    last_detected: Optional[str] = None
    last_detected_index: Optional[int] = None
    age: int = 0


@dataclass
class SnapshotNode(Node):
    label: ClassVar[str] = "characteristic"

    characteristics: dict[str, Any] = field(default_factory=dict)


@dataclass
class ComponentNode(Node):
    label: ClassVar[str] = "component"

    name: str
    component_type: str


@dataclass
class ComponentSnapshotNode(Node):
    label: ClassVar[str] = "componentCharacteristic"

    attributes: dict[str, Any] = field(default_factory=dict)


class CondensedGraph(Graph):
    """
    Append-only summary of the tracked dynasties.

    Dynasties are keyed by their unique smell id and components by name; both
    lookups are indexed so folding a version does not scan the graph.
    """

    def __init__(self) -> None:
        super().__init__()
        self._dynasties: dict[int, int] = {}
        self._components: dict[str, int] = {}

    def dynasty(self, unique_smell_id: int) -> Optional[int]:
        return self._dynasties.get(unique_smell_id)

    def dynasties(self) -> list[int]:
        return [self._dynasties[k] for k in sorted(self._dynasties)]

    def add_dynasty(
        self, unique_smell_id: int, smell_type: str, version: str, version_index: int
    ) -> int:
        idx = self.add_node(
            DynastyNode(unique_smell_id, smell_type, version, version_index)
        )
        self._dynasties[unique_smell_id] = idx
        return idx

    def component(self, name: str) -> Optional[int]:
        return self._components.get(name)

    def add_component(self, name: str, component_type: str) -> int:
        idx = self.add_node(ComponentNode(name, component_type))
        self._components[name] = idx
        return idx

    def add_snapshot(
        self,
        dynasty: int,
        characteristics: Mapping[str, Any],
        version: str,
        version_index: int,
        smell_id: int,
    ) -> int:
        snap = self.add_node(SnapshotNode(dict(characteristics)))
        self.add_edge(
            CondensedEdge.HAS_SNAPSHOT,
            dynasty,
            snap,
            version=version,
            version_index=version_index,
            smell_id=smell_id,
        )
        return snap

    def add_affects(self, dynasty: int, component: int, version: str, version_index: int) -> int:
        return self.add_edge(
            CondensedEdge.AFFECTS,
            dynasty,
            component,
            version=version,
            version_index=version_index,
        )

    def component_snapshot(self, component: int, version: str) -> Optional[int]:
        for e in self.out_edges(component, CondensedEdge.HAS_COMPONENT_SNAPSHOT):
            if e.get("version") == version:
                return e.target
        return None

    def ensure_component_snapshot(
        self,
        component: int,
        attributes: Mapping[str, Any],
        version: str,
        version_index: int,
    ) -> int:
        """Return the component's snapshot for `version`, creating it only once."""
        existing = self.component_snapshot(component, version)
        if existing is not None:
            return existing
        snap = self.add_node(ComponentSnapshotNode(dict(attributes)))
        self.add_edge(
            CondensedEdge.HAS_COMPONENT_SNAPSHOT,
            component,
            snap,
            version=version,
            version_index=version_index,
        )
        return snap

    def snapshots(self, dynasty: int) -> list[tuple[dict[str, Any], SnapshotNode]]:
        """(edge stamps, snapshot) pairs of a dynasty in insertion order."""
        out = []
        for e in self.out_edges(dynasty, CondensedEdge.HAS_SNAPSHOT):
            snap = self.node(e.target)
            assert isinstance(snap, SnapshotNode)
            out.append((dict(e.properties), snap))
        return out

    def affected(self, dynasty: int, version: str) -> list[ComponentNode]:
        comps = []
        for e in self.out_edges(dynasty, CondensedEdge.AFFECTS):
            if e.get("version") == version:
                comp = self.node(e.target)
                assert isinstance(comp, ComponentNode)
                comps.append(comp)
        return sorted(comps, key=lambda c: c.name)
