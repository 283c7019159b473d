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
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence

from ..domain.errors import ConfigurationError, ScorerContractError
from ..domain.smell import Smell
from ..ports.similarity import SimilarityPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkScore:
    """A candidate link between a smell of an older version and one of the new version."""

    old: Smell
    new: Smell
    score: float


class SimilarityLinker:
    """
    Selects, for two smell lists, a best injective matching.

    Every (old, new) pair is scored; pairs below `threshold` are dropped and the
    rest are accepted greedily by descending score, skipping any pair whose old
    or new side is already matched. Equal scores are ordered by
    (old id, new id, old position, new position) so the result is deterministic.

    Notes:
      * Scoring is independent per pair and may run on a thread pool
        (`max_workers` > 1). Selection always runs on the calling thread.
      * The linker remembers the last result and the full unfiltered score list.
    """

    def __init__(
        self,
        scorer: SimilarityPort,
        threshold: float = 0.5,
        *,
        max_workers: Optional[int] = None,
    ) -> None:
        if math.isnan(threshold) or not 0.0 <= threshold <= 1.0:
            raise ConfigurationError(f"threshold must be within [0, 1], got {threshold}")
        self._scorer = scorer
        self._threshold = float(threshold)
        self._max_workers = max_workers
        self._last: list[LinkScore] = []
        self._unfiltered: list[LinkScore] = []

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def scorer(self) -> SimilarityPort:
        return self._scorer

    def best_match(
        self, old_smells: Sequence[Smell], new_smells: Sequence[Smell]
    ) -> list[LinkScore]:
        """
        Return the accepted links ordered by descending score.

        Raises:
            ScorerContractError: if the scorer yields NaN or a value outside [0, 1].
        """
        old_smells = list(old_smells)
        new_smells = list(new_smells)
        pairs = [(i, j) for i in range(len(old_smells)) for j in range(len(new_smells))]
        scores = self._score_pairs(old_smells, new_smells, pairs)

        unfiltered = [
            LinkScore(old_smells[i], new_smells[j], s) for (i, j), s in zip(pairs, scores)
        ]
        candidates = [
            (i, j, s) for (i, j), s in zip(pairs, scores) if s >= self._threshold
        ]
        candidates.sort(
            key=lambda c: (-c[2], old_smells[c[0]].id, new_smells[c[1]].id, c[0], c[1])
        )

        taken_old: set[int] = set()
        taken_new: set[int] = set()
        result: list[LinkScore] = []
        for i, j, s in candidates:
            if i in taken_old or j in taken_new:
                continue
            taken_old.add(i)
            taken_new.add(j)
            result.append(LinkScore(old_smells[i], new_smells[j], s))

        logger.debug(
            "Linked %d pairs out of %d scored (%d above threshold %.2f)",
            len(result),
            len(unfiltered),
            len(candidates),
            self._threshold,
        )
        self._last = result
        self._unfiltered = unfiltered
        return list(result)

    def last_match(self) -> list[LinkScore]:
        """Result of the most recent `best_match` call; empty before any call."""
        return list(self._last)

    def unfiltered_match(self) -> list[LinkScore]:
        """Every pair scored by the most recent call, including those below threshold."""
        return list(self._unfiltered)

    # --- helpers ------------------------------------------------------------

    def _score_pairs(
        self,
        old_smells: list[Smell],
        new_smells: list[Smell],
        pairs: list[tuple[int, int]],
    ) -> list[float]:
        def one(pair: tuple[int, int]) -> float:
            old, new = old_smells[pair[0]], new_smells[pair[1]]
            return _checked(self._scorer.score(old, new), old, new)

        if self._max_workers and self._max_workers > 1 and len(pairs) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                return list(pool.map(one, pairs))
        return [one(p) for p in pairs]


def _checked(score: float, old: Smell, new: Smell) -> float:
    try:
        value = float(score)
    except (TypeError, ValueError) as e:
        raise ScorerContractError(f"Scorer returned a non-number for {old!r}, {new!r}") from e
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise ScorerContractError(
            f"Scorer returned {value!r} for {old!r}, {new!r}; expected a value in [0, 1]"
        )
    return value
