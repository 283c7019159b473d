# Licensed under the Apache License, Version 2.0
from __future__ import annotations

from typing import Protocol

from ..domain.smell import Smell


class SimilarityPort(Protocol):
    """
    Pairwise smell similarity policy.
    Implementers must return a float in [0, 1] and be symmetric in their arguments.
    """

    def name(self) -> str: ...

    def score(self, old: Smell, new: Smell) -> float:
        """Similarity of two smells detected in different versions."""
        ...
