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

import csv
import json
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional

from ..domain.version import Version
from .condensed_graph import CondensedGraph, DynastyNode, SnapshotNode

NA = "NA"

DYNASTY_COLUMNS = [
    "project",
    "uniqueSmellID",
    "smellType",
    "firstAppeared",
    "firstAppearedIndex",
    "lastDetected",
    "lastDetectedIndex",
    "age",
]
VERSION_COLUMNS = [
    "version",
    "versionIndex",
    "versionDate",
    "smellIdInVersion",
    "affectedElement",
    "componentType",
]
CHARACTERISTIC_PREFIX = "characteristic."


class ReportService:
    """
    Flattens the condensed graph into smell-characteristics records.

    Notes:
      - One record per (dynasty, version, affected element); a snapshot with no
        affected element still yields one record with `NA` in that column.
      - Characteristic columns are the sorted union of every snapshot's keys;
        a snapshot lacking one gets `NA`. A key that clashes with a fixed
        column is written as `characteristic.<key>`.
      - JSON (default): one array of records. NDJSON: one record per line.
        CSV: header plus one row per record, stable column order.
    """

    def __init__(
        self,
        condensed: CondensedGraph,
        project: str = "",
        versions: Optional[Mapping[str, Version]] = None,
    ) -> None:
        self._graph = condensed
        self._project = project
        self._versions = dict(versions or {})

    def characteristic_keys(self) -> list[str]:
        keys: set[str] = set()
        for idx in self._graph.vertices(SnapshotNode.label):
            snap = self._graph.node(idx)
            assert isinstance(snap, SnapshotNode)
            keys.update(snap.characteristics)
        return sorted(keys)

    def header(self) -> list[str]:
        return DYNASTY_COLUMNS + VERSION_COLUMNS + [
            _column(k) for k in self.characteristic_keys()
        ]

    def records(self) -> Iterator[dict[str, Any]]:
        g = self._graph
        keys = self.characteristic_keys()
        for idx in g.dynasties():
            dynasty = g.node(idx)
            assert isinstance(dynasty, DynastyNode)
            common = {
                "project": self._project,
                "uniqueSmellID": dynasty.unique_smell_id,
                "smellType": dynasty.smell_type,
                "firstAppeared": dynasty.first_appeared,
                "firstAppearedIndex": dynasty.first_appeared_index,
                "lastDetected": dynasty.last_detected,
                "lastDetectedIndex": dynasty.last_detected_index,
                "age": dynasty.age,
            }
            for stamps, snap in g.snapshots(idx):
                label = stamps["version"]
                version = self._versions.get(label)
                per_version = {
                    "version": label,
                    "versionIndex": stamps["version_index"],
                    "versionDate": version.date if version and version.date else NA,
                    "smellIdInVersion": stamps["smell_id"],
                }
                chars = {_column(k): snap.characteristics.get(k, NA) for k in keys}
                components = g.affected(idx, label) or [None]
                for comp in components:
                    yield {
                        **common,
                        **per_version,
                        "affectedElement": comp.name if comp else NA,
                        "componentType": comp.component_type if comp else NA,
                        **chars,
                    }

    def write(self, out: Path, fmt: str = "json") -> Path:
        """
        Write the smell-characteristics report to `out` in the specified format.

        Returns:
            The path written.

        Raises:
            ValueError: if an unsupported format is requested.
        """
        fmt = (fmt or "json").lower()
        if fmt not in ("json", "ndjson", "csv"):
            raise ValueError(f"Unsupported format: {fmt}")

        records: List[dict[str, Any]] = list(self.records())
        out.parent.mkdir(parents=True, exist_ok=True)

        if fmt == "json":
            out.write_text(
                json.dumps(records, ensure_ascii=False, indent=2, default=str),
                encoding="utf-8",
            )
            return out

        if fmt == "ndjson":
            lines = (json.dumps(r, ensure_ascii=False, default=str) for r in records)
            text = "\n".join(lines)
            out.write_text(text + ("\n" if text else ""), encoding="utf-8")
            return out

        with open(out, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=self.header())
            writer.writeheader()
            for rec in records:
                writer.writerow(rec)
        return out


def _column(key: str) -> str:
    if key in DYNASTY_COLUMNS or key in VERSION_COLUMNS:
        return CHARACTERISTIC_PREFIX + key
    return key
