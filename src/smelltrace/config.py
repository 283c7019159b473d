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

import math
import os
from dataclasses import dataclass
from typing import Optional

from .domain.errors import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class TrackerConfig:
    """
    Knobs of a tracking run.

    affected_weight blends the two Jaccard features of the default scorer:
    1.0 compares affected-element names only, 0.0 compares smell-element names only.
    """

    similarity_threshold: float = 0.5
    track_non_consecutive_versions: bool = False
    affected_weight: float = 1.0
    max_workers: Optional[int] = None

    def validate(self) -> TrackerConfig:
        if not _unit_interval(self.similarity_threshold):
            raise ConfigurationError(
                f"similarity threshold must be within [0, 1], got {self.similarity_threshold}"
            )
        if not _unit_interval(self.affected_weight):
            raise ConfigurationError(
                f"affected weight must be within [0, 1], got {self.affected_weight}"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError(
                f"max_workers must be a positive integer, got {self.max_workers}"
            )
        return self

    @classmethod
    def from_env(cls) -> TrackerConfig:
        """Read defaults from SMELLTRACE_* environment variables."""
        try:
            threshold = float(os.getenv("SMELLTRACE_THRESHOLD", "0.5"))
            weight = float(os.getenv("SMELLTRACE_AFFECTED_WEIGHT", "1.0"))
            workers_raw = os.getenv("SMELLTRACE_WORKERS")
            workers = int(workers_raw) if workers_raw else None
        except ValueError as e:
            raise ConfigurationError(f"Invalid SMELLTRACE_* value: {e}") from e
        non_consecutive = (
            os.getenv("SMELLTRACE_NON_CONSECUTIVE", "").strip().lower() in _TRUTHY
        )
        return cls(
            similarity_threshold=threshold,
            track_non_consecutive_versions=non_consecutive,
            affected_weight=weight,
            max_workers=workers,
        ).validate()


def _unit_interval(value: float) -> bool:
    return not math.isnan(value) and 0.0 <= value <= 1.0
