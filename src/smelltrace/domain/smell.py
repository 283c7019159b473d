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
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from .errors import InvalidSmellError


class SmellType(Enum):
    """
    Kinds of architectural smells, keyed by the label the detection pipeline writes.

    Only some kinds are modelled for tracking; the others are still recognised so
    they can be reported and skipped explicitly.
    """

    CYCLIC_DEPENDENCY = "cyclicDep"
    UNSTABLE_DEPENDENCY = "unstableDep"
    HUB_LIKE = "hublikeDep"
    INTERFACE_POLLUTING = "ixpDep"
    MULTIPLE_SMELLS = "multipleAS"

    @property
    def supported(self) -> bool:
        if self in (
            SmellType.CYCLIC_DEPENDENCY,
            SmellType.UNSTABLE_DEPENDENCY,
            SmellType.HUB_LIKE,
        ):
            return True
        if self in (SmellType.INTERFACE_POLLUTING, SmellType.MULTIPLE_SMELLS):
            return False
        raise AssertionError(f"unhandled smell type {self!r}")

    @classmethod
    def from_label(cls, label: str) -> Optional[SmellType]:
        """Return the type for a pipeline label, or None if the label is unknown."""
        for t in cls:
            if t.value == label:
                return t
        return None

    def __str__(self) -> str:
        return self.value


class Level(Enum):
    CLASS = "class"
    PACKAGE = "package"

    @classmethod
    def from_label(cls, label: str) -> Level:
        try:
            return cls(str(label).lower())
        except ValueError as e:
            raise InvalidSmellError(f"Unknown smell level: {label!r}") from e

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Element:
    """A named graph element (class or package). Attributes are carried, not compared."""

    name: str
    attributes: Mapping[str, Any] = field(
        default_factory=dict, compare=False, hash=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @classmethod
    def from_record(cls, record: Any) -> Element:
        # Accept either a bare name or {"name": ..., <attributes>}
        if isinstance(record, str):
            return cls(record)
        if isinstance(record, Mapping) and "name" in record:
            attrs = {k: v for k, v in record.items() if k != "name"}
            return cls(str(record["name"]), attrs)
        raise InvalidSmellError(f"Element record needs a name: {record!r}")


@dataclass(frozen=True, eq=False)
class Smell:
    """
    One detected smell occurrence in one version.

    The model does not know its version: callers scope it. Equality is identity,
    so two detections with the same upstream id in different versions never
    collide when used as dictionary keys.
    """

    id: int
    type: SmellType
    level: Level
    smell_elements: frozenset[Element] = frozenset()
    affected_elements: frozenset[Element] = frozenset()
    characteristics: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "smell_elements", frozenset(self.smell_elements))
        object.__setattr__(self, "affected_elements", frozenset(self.affected_elements))
        object.__setattr__(
            self, "characteristics", MappingProxyType(dict(self.characteristics))
        )

    @property
    def affected_names(self) -> frozenset[str]:
        return frozenset(e.name for e in self.affected_elements)

    @property
    def element_names(self) -> frozenset[str]:
        return frozenset(e.name for e in self.smell_elements)

    def __repr__(self) -> str:
        return f"Smell(id={self.id}, type={self.type.value}, affected={sorted(self.affected_names)})"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Smell:
        """
        Build a smell from a detection record:

            {"id": 3, "type": "cyclicDep", "level": "package",
             "smellElements": [...], "affectedElements": [...],
             "characteristics": {...}}

        Raises:
            InvalidSmellError: on missing fields or an unknown type label.
        """
        try:
            smell_id = int(data["id"])
            type_label = str(data["type"])
            level = Level.from_label(data["level"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidSmellError(f"Smell record requires id/type/level: {e}") from e

        smell_type = SmellType.from_label(type_label)
        if smell_type is None:
            raise InvalidSmellError(f"Unknown smell type: {type_label!r}")

        characteristics = data.get("characteristics") or {}
        if not isinstance(characteristics, Mapping):
            raise InvalidSmellError(
                f"Smell {smell_id}: characteristics must be an object, "
                f"got {type(characteristics).__name__}"
            )

        return cls(
            id=smell_id,
            type=smell_type,
            level=level,
            smell_elements=_elements(data.get("smellElements") or ()),
            affected_elements=_elements(data.get("affectedElements") or ()),
            characteristics=dict(characteristics),
        )


def _elements(records: Any) -> frozenset[Element]:
    if isinstance(records, (str, Mapping)) or not isinstance(records, Iterable):
        raise InvalidSmellError(f"Element list expected, got {records!r}")
    return frozenset(Element.from_record(r) for r in records)
