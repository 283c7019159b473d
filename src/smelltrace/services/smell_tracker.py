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
from typing import Iterable, Optional

from ..adapters.similarity.jaccard import JaccardScorer
from ..config import TrackerConfig
from ..domain.errors import InvariantViolation, TrackerStateError
from ..domain.smell import Smell
from ..domain.version import Version
from .condensation import Condenser
from .condensed_graph import CondensedGraph
from .similarity_linker import SimilarityLinker
from .track_graph import DynastyEndNode, Succession, TrackGraph

logger = logging.getLogger(__name__)

NA = "NA"
SIMILARITY_DIGITS = 2


class SmellTracker:
    """
    Tracks smells incrementally, one version at a time.

    - `track()` must be called once per version, in increasing version index.
    - Matched smells extend the dynasty of their predecessor; unmatched new
      smells start a dynasty with the next unique smell id.
    - With `track_non_consecutive=False` only smells of the previous version are
      candidates and unmatched ones close their dynasty; with True every open
      dynasty stays a candidate, so a smell can reappear after a gap.
    - After each call the touched instances are folded into the condensed
      graph and payloads no longer needed are released.
    """

    def __init__(
        self,
        linker: Optional[SimilarityLinker] = None,
        track_non_consecutive: bool = False,
    ) -> None:
        self._linker = linker or SimilarityLinker(JaccardScorer())
        self._non_consecutive = bool(track_non_consecutive)
        self._track = TrackGraph()
        self._condensed = CondensedGraph()
        self._condenser = Condenser(self._track, self._condensed)
        self._next_uid = 1
        self._latest_version: Optional[str] = None
        self._latest_index: Optional[int] = None
        self._finalized = False
        # instances still holding their smell payload
        self._held: set[int] = set()

    @classmethod
    def from_config(cls, config: TrackerConfig) -> SmellTracker:
        config.validate()
        linker = SimilarityLinker(
            JaccardScorer(config.affected_weight),
            config.similarity_threshold,
            max_workers=config.max_workers,
        )
        return cls(linker, config.track_non_consecutive_versions)

    # --- accessors ----------------------------------------------------------

    @property
    def linker(self) -> SimilarityLinker:
        return self._linker

    @property
    def track_graph(self) -> TrackGraph:
        return self._track

    @property
    def condensed_graph(self) -> CondensedGraph:
        return self._condensed

    @property
    def tracks_non_consecutive(self) -> bool:
        return self._non_consecutive

    def current_version(self) -> str:
        return self._latest_version if self._latest_version is not None else NA

    def current_version_index(self) -> Optional[int]:
        return self._latest_index

    def smells_linked(self) -> int:
        """Number of links accepted by the most recent `track` call."""
        return len(self._linker.last_match())

    def dynasties_started(self) -> int:
        return self._next_uid - 1

    def closed_dynasties(self) -> int:
        return len(self._track.vertices(DynastyEndNode.label))

    # --- tracking -----------------------------------------------------------

    def track(self, smells: Iterable[Smell], version: Version) -> None:
        """
        Link the smells of `version` to the dynasties tracked so far.

        Raises:
            TrackerStateError: if the tracker was finalized or `version` does not
                come strictly after the previously tracked one.
            ScorerContractError: if the scorer misbehaves (graph left untouched).
            InvariantViolation: if the track graph is inconsistent.
        """
        self._check_order(version)
        new_smells = self._supported(smells)
        g = self._track

        pool = [
            idx
            for idx in g.current()
            if self._non_consecutive or g.instance(idx).version == self._latest_version
        ]
        by_smell = {}
        for idx in pool:
            smell = g.instance(idx).smell
            if smell is None:
                raise InvariantViolation(f"Frontier instance {idx} lost its smell payload")
            by_smell[smell] = idx

        matches = self._linker.best_match(list(by_smell), new_smells)

        touched: list[int] = []
        unmatched_old = dict(by_smell)
        unmatched_new = {id(s): s for s in new_smells}
        for link in matches:
            predecessor = unmatched_old.pop(link.old, None)
            if predecessor is None:
                raise InvariantViolation(
                    f"Match references {link.old!r}, which is not an open candidate"
                )
            unmatched_new.pop(id(link.new), None)

            successor = g.add_instance(link.new, version.label, version.index)
            self._held.add(successor)
            g.detach(predecessor)
            succession = (
                Succession.EVOLVED
                if g.instance(predecessor).version == self._latest_version
                else Succession.REAPPEARED
            )
            g.succeed(successor, predecessor, succession, round(link.score, SIMILARITY_DIGITS))
            g.attach(successor)
            touched.append(successor)
            logger.debug(
                "%s smell %d %s instance %d (score %.2f)",
                version.label,
                link.new.id,
                succession.value,
                predecessor,
                link.score,
            )

        closed = 0
        if not self._non_consecutive:
            for idx in unmatched_old.values():
                g.close(idx, version.label, version.index)
                g.detach(idx)
                closed += 1

        for smell in unmatched_new.values():
            touched.append(self._start_dynasty(smell, version))

        self._latest_version = version.label
        self._latest_index = version.index

        for idx in touched:
            self._condenser.condense(idx)
        self._reclaim()

        logger.info(
            "Tracked version %s: %d linked, %d new, %d closed",
            version.label,
            len(matches),
            len(unmatched_new),
            closed,
        )

    def finalize(self) -> TrackGraph:
        """
        Close every open dynasty and return the finished track graph.

        Every instance is left with its flattened scalars (type, characteristics,
        affected element names). The tracker cannot be used afterwards.
        """
        if self._finalized:
            raise TrackerStateError("Tracker already finalized")
        g = self._track
        version = self.current_version()
        for idx in g.current():
            g.close(idx, version, self._latest_index)
        g.drop_frontier()
        for idx in g.instances():
            g.instance(idx).flatten()
        self._finalized = True
        logger.info(
            "Finalized track graph: %d dynasties, %d instances",
            self.dynasties_started(),
            len(g.instances()),
        )
        return g

    # --- helpers ------------------------------------------------------------

    def _check_order(self, version: Version) -> None:
        if self._finalized:
            raise TrackerStateError("track() called after finalize()")
        if self._latest_index is not None and version.index <= self._latest_index:
            raise TrackerStateError(
                f"Version {version.label} (index {version.index}) does not follow "
                f"{self._latest_version} (index {self._latest_index})"
            )

    def _supported(self, smells: Iterable[Smell]) -> list[Smell]:
        kept = []
        for smell in smells:
            if smell.type.supported:
                kept.append(smell)
            else:
                logger.warning(
                    "Smell type '%s' ignored (id %d): no tracking model for it",
                    smell.type.value,
                    smell.id,
                )
        return kept

    def _start_dynasty(self, smell: Smell, version: Version) -> int:
        g = self._track
        idx = g.add_instance(smell, version.label, version.index)
        self._held.add(idx)
        uid = self._next_uid
        self._next_uid += 1
        g.start_dynasty(idx, uid)
        g.attach(idx)
        logger.debug("%s smell %d starts dynasty #%d", version.label, smell.id, uid)
        return idx

    def _reclaim(self) -> None:
        g = self._track
        current = set(g.current())
        for idx in sorted(self._held - current):
            node = g.instance(idx)
            if node.processed:
                node.release()
                self._held.discard(idx)
