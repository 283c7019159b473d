import csv
import json
from pathlib import Path

import pytest

from smelltrace.adapters.source.json_source import JsonSmellSource
from smelltrace.services import ReportService, SmellTracker
from smelltrace.services.report_service import DYNASTY_COLUMNS, VERSION_COLUMNS


def _tracked(path: Path) -> tuple[SmellTracker, JsonSmellSource]:
    source = JsonSmellSource(path)
    tracker = SmellTracker()
    for version, smells in source.versions():
        tracker.track(smells, version)
    return tracker, source


def _report(path: Path) -> ReportService:
    tracker, source = _tracked(path)
    return ReportService(
        tracker.condensed_graph, project=source.project, versions=source.version_map()
    )


def test_one_record_per_dynasty_version_component(smell_document: Path):
    records = list(_report(smell_document).records())

    assert [(r["uniqueSmellID"], r["version"], r["affectedElement"]) for r in records] == [
        (1, "1.0", "org.a"),
        (1, "1.0", "org.b"),
        (1, "1.1", "org.a"),
        (1, "1.1", "org.b"),
        (1, "1.1", "org.c"),
    ]
    first = records[0]
    assert first["project"] == "demo"
    assert first["smellType"] == "cyclicDep"
    assert first["age"] == 2
    assert (first["firstAppeared"], first["lastDetected"]) == ("1.0", "1.1")
    assert first["versionDate"] == "2020-01-01"
    assert first["componentType"] == "package"
    assert first["shape"] == "chain"
    assert records[-1]["shape"] == "NA"
    assert records[-1]["smellIdInVersion"] == 4


def test_header_has_sorted_characteristics(smell_document: Path):
    header = _report(smell_document).header()
    assert header[0] == "project"
    assert header[-2:] == ["shape", "size"]


def test_write_csv(tmp_path: Path, smell_document: Path):
    out = _report(smell_document).write(tmp_path / "out" / "report.csv", fmt="csv")
    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 5
    assert rows[2]["affectedElement"] == "org.a"
    assert rows[2]["versionIndex"] == "2"


def test_write_json_and_ndjson(tmp_path: Path, smell_document: Path):
    rep = _report(smell_document)
    data = json.loads(rep.write(tmp_path / "r.json").read_text(encoding="utf-8"))
    assert len(data) == 5
    lines = rep.write(tmp_path / "r.ndjson", fmt="NDJSON").read_text(encoding="utf-8")
    assert len(lines.splitlines()) == 5


def test_empty_graph_writes_empty_report(tmp_path: Path):
    rep = ReportService(SmellTracker().condensed_graph)
    assert json.loads(rep.write(tmp_path / "e.json").read_text(encoding="utf-8")) == []
    assert rep.write(tmp_path / "e.ndjson", fmt="ndjson").read_text(encoding="utf-8") == ""


def test_rejects_unsupported_format(tmp_path: Path):
    rep = ReportService(SmellTracker().condensed_graph)
    with pytest.raises(ValueError) as excinfo:
        rep.write(tmp_path / "x.xml", fmt="xml")
    assert "unsupported" in str(excinfo.value).lower()


def test_characteristics_never_overwrite_fixed_columns(make_smell, make_version):
    tracker = SmellTracker()
    tracker.track(
        [make_smell(1, ["org.a"], characteristics={"age": 99, "version": "x", "size": 1})],
        make_version(1),
    )
    rep = ReportService(tracker.condensed_graph, project="p")

    (record,) = rep.records()
    assert record["age"] == 1
    assert record["version"] == "v1"
    assert record["characteristic.age"] == 99
    assert record["characteristic.version"] == "x"
    assert record["size"] == 1
    assert rep.header() == DYNASTY_COLUMNS + VERSION_COLUMNS + [
        "characteristic.age",
        "size",
        "characteristic.version",
    ]
