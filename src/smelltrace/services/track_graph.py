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
from typing import Any, ClassVar, Optional

from ..domain.errors import InvariantViolation
from ..domain.smell import Smell
from .graph import Edge, Graph, Node


class TrackEdge(Enum):
    IS_CURRENT = "latestVersion"
    SUCCEEDED_BY = "succeededBy"
    ORIGINATES = "startedIn"
    CLOSES = "end"


class Succession(Enum):
    """Tag of a SUCCEEDED_BY edge."""

    EVOLVED = "evolvedFrom"
    REAPPEARED = "reappeared"


@dataclass
class FrontierNode(Node):
    label: ClassVar[str] = "tail"


@dataclass
class InstanceNode(Node):
    """
    One smell occurrence in one version.

    The node owns `smell` until it is processed and off the frontier; after
    `release()` only the scalar stamps and the flattened summary remain.
    """

    label: ClassVar[str] = "smell"

    version: str
    version_index: int
    smell_id: int
    smell: Optional[Smell] = None
    processed: bool = False
    smell_type: Optional[str] = None
    characteristics: dict[str, Any] = field(default_factory=dict)
    affected_elements: list[str] = field(default_factory=list)

    @property
    def released(self) -> bool:
        return self.smell is None

    def flatten(self) -> None:
        """Copy the scalar view of the payload onto the node."""
        if self.smell is None:
            return
        self.smell_type = self.smell.type.value
        self.characteristics = dict(self.smell.characteristics)
        self.affected_elements = sorted(self.smell.affected_names)

    def release(self) -> None:
        self.flatten()
        self.smell = None

    def properties(self) -> dict[str, Any]:
        props = super().properties()
        props.pop("smell")
        return props


@dataclass(frozen=True)
class DynastyStartNode(Node):
    label: ClassVar[str] = "head"

    unique_smell_id: int
    version: str
    version_index: int


@dataclass(frozen=True)
class DynastyEndNode(Node):
    label: ClassVar[str] = "end"

    version: str
    version_index: Optional[int]


class TrackGraph(Graph):
    """
    Bookkeeping graph of the tracker.

    Edges point from newer to older: Frontier -> current Instance,
    newer Instance -> older Instance, DynastyStart -> first Instance,
    DynastyEnd -> last Instance.
    """

    def __init__(self) -> None:
        super().__init__()
        self._frontier: Optional[int] = self.add_node(FrontierNode())

    @property
    def frontier(self) -> Optional[int]:
        return self._frontier

    def instance(self, idx: int) -> InstanceNode:
        payload = self.node(idx)
        if not isinstance(payload, InstanceNode):
            raise InvariantViolation(f"Node {idx} is a {payload.label}, not an instance")
        return payload

    def instances(self) -> list[int]:
        return self.vertices(InstanceNode.label)

    # --- frontier -----------------------------------------------------------

    def current(self) -> list[int]:
        """Instances on the frontier, in the order they were attached."""
        if self._frontier is None:
            return []
        return [e.target for e in self.out_edges(self._frontier, TrackEdge.IS_CURRENT)]

    def is_current(self, idx: int) -> bool:
        return any(
            e.source == self._frontier for e in self.in_edges(idx, TrackEdge.IS_CURRENT)
        )

    def attach(self, idx: int) -> None:
        if self._frontier is None:
            raise InvariantViolation("Track graph has no frontier (already finalized)")
        if self.is_current(idx):
            raise InvariantViolation(f"Instance {idx} is already on the frontier")
        self.add_edge(TrackEdge.IS_CURRENT, self._frontier, idx)

    def detach(self, idx: int) -> None:
        edges = self.in_edges(idx, TrackEdge.IS_CURRENT)
        if not edges:
            raise InvariantViolation(f"Instance {idx} is not on the frontier")
        for e in edges:
            self.remove_edge(e.id)

    def drop_frontier(self) -> None:
        if self._frontier is not None:
            self.remove_node(self._frontier)
            self._frontier = None

    # --- dynasty structure --------------------------------------------------

    def add_instance(self, smell: Smell, version: str, version_index: int) -> int:
        return self.add_node(InstanceNode(version, version_index, smell.id, smell))

    def start_dynasty(self, idx: int, unique_smell_id: int) -> int:
        inst = self.instance(idx)
        head = self.add_node(
            DynastyStartNode(unique_smell_id, inst.version, inst.version_index)
        )
        self.add_edge(TrackEdge.ORIGINATES, head, idx)
        return head

    def succeed(
        self, newer: int, older: int, succession: Succession, similarity: float
    ) -> Edge:
        eid = self.add_edge(
            TrackEdge.SUCCEEDED_BY,
            newer,
            older,
            succession=succession.value,
            similarity=similarity,
        )
        return self.edge(eid)

    def close(self, idx: int, version: str, version_index: Optional[int]) -> int:
        end = self.add_node(DynastyEndNode(version, version_index))
        self.add_edge(TrackEdge.CLOSES, end, idx)
        return end

    def predecessor(self, idx: int) -> Optional[int]:
        edges = self.out_edges(idx, TrackEdge.SUCCEEDED_BY)
        if len(edges) > 1:
            raise InvariantViolation(f"Instance {idx} succeeds {len(edges)} instances")
        return edges[0].target if edges else None

    def origin(self, idx: int) -> int:
        """
        Walk SUCCEEDED_BY edges back from `idx` to the DynastyStart of its dynasty.

        Raises:
            InvariantViolation: if the walk ends without reaching a DynastyStart.
        """
        current: Optional[int] = idx
        seen = set()
        while current is not None:
            if current in seen:
                raise InvariantViolation(f"Succession cycle through instance {current}")
            seen.add(current)
            heads = self.in_edges(current, TrackEdge.ORIGINATES)
            if heads:
                return heads[0].source
            current = self.predecessor(current)
        raise InvariantViolation(f"Instance {idx} has no dynasty origin")

    def unique_smell_id(self, idx: int) -> int:
        head = self.node(self.origin(idx))
        assert isinstance(head, DynastyStartNode)
        return head.unique_smell_id
