# Licensed under the Apache License, Version 2.0
from __future__ import annotations

from typing import AbstractSet

from ...domain.smell import Smell
from ...ports.similarity import SimilarityPort


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    """Jaccard index of two sets; two empty sets are identical."""
    if not a and not b:
        return 1.0
    union = len(a | b)
    return len(a & b) / union


class JaccardScorer(SimilarityPort):
    """
    Jaccard similarity over the names of the elements a smell touches.

    The score blends the affected-element index with the smell-element index:
        affected_weight * J(affected) + (1 - affected_weight) * J(smell elements)
    Smells of different types never match (score 0.0).
    """

    def __init__(self, affected_weight: float = 1.0) -> None:
        self._weight = float(affected_weight)

    def name(self) -> str:
        return "jaccard" if self._weight == 1.0 else f"jaccard(w={self._weight:g})"

    def score(self, old: Smell, new: Smell) -> float:
        if old.type is not new.type:
            return 0.0
        s = self._weight * jaccard(old.affected_names, new.affected_names)
        if self._weight < 1.0:
            s += (1.0 - self._weight) * jaccard(old.element_names, new.element_names)
        # blending can overshoot 1.0 by an ulp
        return min(s, 1.0)
