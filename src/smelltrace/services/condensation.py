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

import logging

from ..domain.errors import InvariantViolation
from .condensed_graph import CondensedGraph, DynastyNode
from .track_graph import TrackGraph

logger = logging.getLogger(__name__)


class Condenser:
    """
    Folds Instance nodes of a track graph into the condensed graph, once each.

    Each fold adds one snapshot to the instance's dynasty, links the dynasty to
    every affected component for that version and makes sure each component has
    exactly one snapshot per version.
    """

    def __init__(self, track: TrackGraph, condensed: CondensedGraph) -> None:
        self._track = track
        self._condensed = condensed

    def condense(self, instance: int) -> bool:
        """
        Fold `instance` into the condensed graph.

        Returns:
            True if the instance was folded, False if it had already been processed.

        Raises:
            InvariantViolation: if the instance has no dynasty origin or its
            payload was released before it was processed.
        """
        node = self._track.instance(instance)
        if node.processed:
            return False
        smell = node.smell
        if smell is None:
            raise InvariantViolation(
                f"Instance {instance} ({node.version}) was released before being condensed"
            )

        uid = self._track.unique_smell_id(instance)
        g = self._condensed

        dynasty = g.dynasty(uid)
        if dynasty is None:
            dynasty = g.add_dynasty(uid, smell.type.value, node.version, node.version_index)
            logger.debug("Condensed dynasty #%d created at %s", uid, node.version)

        g.add_snapshot(
            dynasty, smell.characteristics, node.version, node.version_index, smell.id
        )

        for element in sorted(smell.affected_elements, key=lambda e: e.name):
            component = g.component(element.name)
            if component is None:
                component = g.add_component(element.name, smell.level.value)
            g.add_affects(dynasty, component, node.version, node.version_index)
            g.ensure_component_snapshot(
                component, element.attributes, node.version, node.version_index
            )

        summary = g.node(dynasty)
        assert isinstance(summary, DynastyNode)
        summary.age += 1
        summary.last_detected = node.version
        summary.last_detected_index = node.version_index

        node.processed = True
        return True
