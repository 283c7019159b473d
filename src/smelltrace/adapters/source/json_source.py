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

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Mapping

from ...domain.errors import InvalidSmellError
from ...domain.smell import Smell, SmellType
from ...domain.version import Version
from ...ports.smell_source import SmellSourcePort

logger = logging.getLogger(__name__)


class JsonSmellSource(SmellSourcePort):
    """
    Reads detected smells from JSON.

    `path` is either one document holding every version:

        {"project": "antlr", "versions": [{"version": "2.7.1", "index": 1,
          "date": "2000-10-01", "smells": [...]}, ...]}

    or a directory of `*.json` files, each holding one version object (the
    project name then defaults to the directory name). Versions are yielded in
    index order. Every smell record is parsed up front, so a malformed document
    fails on construction. Smells with an unknown type label are logged and
    skipped.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._project, self._versions = self._load()

    @property
    def project(self) -> str:
        return self._project

    def __len__(self) -> int:
        return len(self._versions)

    def versions(self) -> Iterator[tuple[Version, list[Smell]]]:
        for version, smells in self._versions:
            yield version, list(smells)

    def version_map(self) -> dict[str, Version]:
        return {v.label: v for v, _ in self._versions}

    # --- helpers ------------------------------------------------------------

    def _load(self) -> tuple[str, list[tuple[Version, list[Smell]]]]:
        if self._path.is_dir():
            records = [_read(p) for p in sorted(self._path.glob("*.json"))]
            project = self._path.name
        else:
            doc = _read(self._path)
            records = doc.get("versions")
            if not isinstance(records, list):
                raise InvalidSmellError(f"{self._path}: expected a 'versions' list")
            project = str(doc.get("project") or self._path.stem)

        parsed = []
        for r in records:
            if not isinstance(r, Mapping):
                raise InvalidSmellError(f"{self._path}: version records must be objects")
            parsed.append((Version.from_dict(r), r))
        parsed.sort(key=lambda p: p[0].index)

        indices = [v.index for v, _ in parsed]
        if len(set(indices)) != len(indices):
            raise InvalidSmellError(f"{self._path}: duplicate version indices")
        labels = [v.label for v, _ in parsed]
        if len(set(labels)) != len(labels):
            raise InvalidSmellError(f"{self._path}: duplicate version labels")

        return project, [(v, self._smells(v, r.get("smells") or [])) for v, r in parsed]

    def _smells(self, version: Version, records: Any) -> list[Smell]:
        if not isinstance(records, list):
            raise InvalidSmellError(f"Version {version.label}: 'smells' must be a list")
        smells = []
        for rec in records:
            if not isinstance(rec, Mapping):
                raise InvalidSmellError(
                    f"Version {version.label}: smell records must be objects, got {rec!r}"
                )
            label = rec.get("type")
            if SmellType.from_label(str(label)) is None:
                logger.warning(
                    "Version %s: smell type %r ignored, no model exists for it",
                    version.label,
                    label,
                )
                continue
            try:
                smells.append(Smell.from_dict(rec))
            except InvalidSmellError as e:
                raise InvalidSmellError(f"Version {version.label}: {e}") from e
        return smells


def _read(path: Path) -> Mapping[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidSmellError(f"{path}: invalid JSON ({e})") from e
    if not isinstance(data, Mapping):
        raise InvalidSmellError(f"{path}: expected a JSON object")
    return data
