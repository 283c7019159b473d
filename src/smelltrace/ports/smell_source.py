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

from abc import ABC, abstractmethod
from typing import Iterator

from ..domain.smell import Smell
from ..domain.version import Version


class SmellSourcePort(ABC):
    """Abstract interface for the upstream detection output."""

    @abstractmethod
    def versions(self) -> Iterator[tuple[Version, list[Smell]]]:
        """Yield (version, smells) pairs in increasing version index."""
        raise NotImplementedError

    @property
    @abstractmethod
    def project(self) -> str:
        """Name of the analysed project."""
        raise NotImplementedError
