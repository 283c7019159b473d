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

import logging
from pathlib import Path
from typing import Optional

import typer

from ..adapters.export.graphml_exporter import GraphMLExporter
from ..adapters.source.json_source import JsonSmellSource
from ..config import TrackerConfig
from ..domain.errors import ConfigurationError, ExportError, InvalidSmellError
from ..logging_config import setup_logging
from ..services import ReportService, SmellTracker

setup_logging()

app = typer.Typer(help="smelltrace CLI - Track architectural smells across versions")

FORMATS: set[str] = {"json", "ndjson", "csv"}

logger = logging.getLogger(__name__)


# ------------------------------
# Helpers
# ------------------------------


def _parse_fmt(fmt: str) -> str:
    """
    Normalise and validate --fmt.
    Raises Typer BadParameter if the format is unknown.
    """
    value = (fmt or "json").strip().lower()
    if value not in FORMATS:
        raise typer.BadParameter(
            f"Unknown format: {fmt}. Valid options: {', '.join(sorted(FORMATS))}"
        )
    return value


def _load(path: Path) -> JsonSmellSource:
    try:
        return JsonSmellSource(path)
    except InvalidSmellError as e:
        raise typer.BadParameter(str(e), param_hint="--input")


def _wire(
    threshold: Optional[float], non_consecutive: Optional[bool]
) -> tuple[SmellTracker, TrackerConfig]:
    """
    Minimal composition root:
      TrackerConfig (env defaults, CLI overrides) -> SimilarityLinker + JaccardScorer
    """
    try:
        env = TrackerConfig.from_env()
        config = TrackerConfig(
            similarity_threshold=env.similarity_threshold if threshold is None else threshold,
            track_non_consecutive_versions=(
                env.track_non_consecutive_versions
                if non_consecutive is None
                else non_consecutive
            ),
            affected_weight=env.affected_weight,
            max_workers=env.max_workers,
        ).validate()
    except ConfigurationError as e:
        raise typer.BadParameter(str(e))
    return SmellTracker.from_config(config), config


# ------------------------------
# CLI Commands
# ------------------------------


@app.command()
def track(
    source_path: Path = typer.Option(
        ...,
        "--input",
        exists=True,
        file_okay=True,
        dir_okay=True,
        resolve_path=True,
        help="JSON document or directory of per-version JSON files",
    ),
    out: Path = typer.Option(
        Path("."),
        "--out",
        "--output",
        help="Directory receiving the report and graph exports",
        resolve_path=True,
    ),
    threshold: Optional[float] = typer.Option(
        None, "--threshold", help="Minimum similarity to link two smells (0-1)"
    ),
    non_consecutive: Optional[bool] = typer.Option(
        None,
        "--non-consecutive/--consecutive",
        help="Keep unmatched dynasties open so smells can reappear after a gap",
    ),
    fmt: str = typer.Option("json", "--fmt", help="Report format: json, ndjson, csv"),
    graphml: bool = typer.Option(
        True, "--graphml/--no-graphml", help="Also export the track and condensed graphs"
    ),
    quiet: bool = typer.Option(False, "--quiet", help="Suppress the final summary line."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """
    Track every version of the input and write the smell-characteristics report.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    fmt = _parse_fmt(fmt)
    tracker, config = _wire(threshold, non_consecutive)
    source = _load(source_path)

    linked = 0
    for version, smells in source.versions():
        tracker.track(smells, version)
        linked += tracker.smells_linked()

    report = ReportService(
        tracker.condensed_graph, project=source.project, versions=source.version_map()
    )
    written = report.write(Path(out) / f"smell-characteristics.{fmt}", fmt=fmt)

    track_graph = tracker.finalize()
    if graphml:
        exporter = GraphMLExporter()
        for name, graph in (("trackgraph", track_graph), ("condensed", tracker.condensed_graph)):
            try:
                exporter.export(graph, Path(out) / f"{name}{exporter.suffix}")
            except ExportError as e:
                logger.error("Graph export failed: %s", e)

    if not quiet:
        typer.echo(
            f"Tracked {len(source)} versions of {source.project}; "
            f"{tracker.dynasties_started()} dynasties, {linked} links "
            f"(threshold {config.similarity_threshold:g}); report: {written}"
        )


@app.command()
def versions(
    source_path: Path = typer.Option(
        ...,
        "--input",
        exists=True,
        file_okay=True,
        dir_okay=True,
        resolve_path=True,
        help="JSON document or directory of per-version JSON files",
    ),
):
    """
    List the versions found in the input with their smell counts.
    """
    source = _load(source_path)
    for version, smells in source.versions():
        supported = sum(1 for s in smells if s.type.supported)
        typer.echo(
            f"{version.index}\t{version.label}\t{version.date or '-'}\t"
            f"{len(smells)} smells ({supported} trackable)"
        )
