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

from dataclasses import dataclass
from typing import Any, Mapping

from .errors import InvalidSmellError


@dataclass(frozen=True)
class Version:
    """
    One analysed version of the system.

    `index` is the position of the version in the ordered sequence (1 for the
    first version analysed, 2 for the second...), not a parsed version number.
    """

    label: str
    index: int
    date: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Version:
        try:
            return cls(str(data["version"]), int(data["index"]), str(data.get("date") or ""))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidSmellError(f"Version record requires version/index: {e}") from e

    def __str__(self) -> str:
        return self.label
