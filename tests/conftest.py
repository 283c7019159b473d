import json

import pytest

from smelltrace.domain import Element, Level, Smell, SmellType, Version


def _smell(
    smell_id,
    affected,
    smell_type=SmellType.CYCLIC_DEPENDENCY,
    level=Level.PACKAGE,
    elements=(),
    characteristics=None,
):
    return Smell(
        id=smell_id,
        type=smell_type,
        level=level,
        smell_elements=frozenset(e if isinstance(e, Element) else Element(e) for e in elements),
        affected_elements=frozenset(
            a if isinstance(a, Element) else Element(a) for a in affected
        ),
        characteristics=characteristics or {"size": len(affected)},
    )


def _version(index, label=None, date=""):
    return Version(label or f"v{index}", index, date)


@pytest.fixture
def make_smell():
    return _smell


@pytest.fixture
def make_version():
    return _version


SAMPLE_VERSIONS = [
    {
        "version": "1.0",
        "index": 1,
        "date": "2020-01-01",
        "smells": [
            {
                "id": 1,
                "type": "cyclicDep",
                "level": "package",
                "smellElements": ["cd-1"],
                "affectedElements": [{"name": "org.a", "loc": 100}, {"name": "org.b"}],
                "characteristics": {"size": 2, "shape": "chain"},
            },
            {
                "id": 2,
                "type": "ixpDep",
                "level": "class",
                "affectedElements": ["org.a.Api"],
            },
            {"id": 3, "type": "mysteryDep", "level": "class"},
        ],
    },
    {
        "version": "1.1",
        "index": 2,
        "date": "2020-06-01",
        "smells": [
            {
                "id": 4,
                "type": "cyclicDep",
                "level": "package",
                "smellElements": ["cd-4"],
                "affectedElements": ["org.a", "org.b", "org.c"],
                "characteristics": {"size": 3},
            }
        ],
    },
    {"version": "2.0", "index": 3, "date": "2021-01-01", "smells": []},
]


@pytest.fixture
def smell_document(tmp_path):
    """A single JSON document with three versions of project 'demo'."""
    path = tmp_path / "smells.json"
    path.write_text(
        json.dumps({"project": "demo", "versions": SAMPLE_VERSIONS}), encoding="utf-8"
    )
    return path


@pytest.fixture
def sample_versions():
    return json.loads(json.dumps(SAMPLE_VERSIONS))
