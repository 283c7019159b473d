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

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..services.graph import Graph


class GraphExporterPort(ABC):
    """Abstract interface for writing a tracking graph to an interchange format."""

    @abstractmethod
    def export(self, graph: Graph, out: Path) -> Path:
        """Write `graph` to `out` and return the path written."""
        raise NotImplementedError

    @property
    @abstractmethod
    def suffix(self) -> str:
        """File suffix of the format, including the dot."""
        raise NotImplementedError
