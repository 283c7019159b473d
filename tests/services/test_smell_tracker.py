import math
import random

import pytest

from smelltrace.adapters.similarity.jaccard import JaccardScorer
from smelltrace.config import TrackerConfig
from smelltrace.domain import ScorerContractError, SmellType, TrackerStateError
from smelltrace.services import SimilarityLinker, SmellTracker
from smelltrace.services.condensed_graph import CondensedEdge, DynastyNode
from smelltrace.services.track_graph import (
    DynastyEndNode,
    DynastyStartNode,
    TrackEdge,
)


def _dynasty(tracker, uid):
    g = tracker.condensed_graph
    node = g.node(g.dynasty(uid))
    assert isinstance(node, DynastyNode)
    return node


def _successions(tracker):
    return list(tracker.track_graph.edges(TrackEdge.SUCCEEDED_BY))


def test_consecutive_scenario(make_smell, make_version):
    tracker = SmellTracker(SimilarityLinker(JaccardScorer(), threshold=0.5))

    tracker.track([make_smell(1, ["X"])], make_version(1))
    d1 = _dynasty(tracker, 1)
    assert d1.age == 1
    assert _successions(tracker) == []

    tracker.track([make_smell(1, ["X", "Y"])], make_version(2))
    (edge,) = _successions(tracker)
    assert edge.get("succession") == "evolvedFrom"
    assert edge.get("similarity") == 0.5
    assert tracker.smells_linked() == 1
    assert d1.age == 2

    tracker.track([make_smell(4, ["Z"])], make_version(3))
    assert tracker.smells_linked() == 0
    g = tracker.track_graph
    (end,) = g.vertices(DynastyEndNode.label)
    assert g.node(end).version == "v3"
    (closes,) = g.out_edges(end, TrackEdge.CLOSES)
    assert g.instance(closes.target).version == "v2"

    assert (d1.first_appeared, d1.last_detected, d1.age) == ("v1", "v2", 2)
    assert (d1.first_appeared_index, d1.last_detected_index) == (1, 2)
    assert _dynasty(tracker, 2).first_appeared == "v3"
    assert tracker.current_version() == "v3"
    assert tracker.current_version_index() == 3
    assert tracker.closed_dynasties() == 1


def test_non_consecutive_scenario_reappears(make_smell, make_version):
    tracker = SmellTracker(track_non_consecutive=True)

    tracker.track([make_smell(1, ["A"]), make_smell(2, ["B"])], make_version(1))
    tracker.track([make_smell(1, ["A"])], make_version(2))

    g = tracker.track_graph
    assert g.vertices(DynastyEndNode.label) == []
    assert len(g.current()) == 2  # dynasty #2 stays open

    tracker.track([make_smell(5, ["B"])], make_version(3))

    tags = {
        (g.instance(e.source).version, g.instance(e.target).version): e.get("succession")
        for e in _successions(tracker)
    }
    assert tags == {("v2", "v1"): "evolvedFrom", ("v3", "v1"): "reappeared"}
    assert tracker.dynasties_started() == 2
    assert _dynasty(tracker, 2).age == 2
    assert _dynasty(tracker, 2).last_detected == "v3"


def test_consecutive_mode_does_not_reach_back(make_smell, make_version):
    tracker = SmellTracker()
    tracker.track([make_smell(1, ["A"])], make_version(1))
    tracker.track([], make_version(2))
    tracker.track([make_smell(1, ["A"])], make_version(3))

    assert _successions(tracker) == []
    assert tracker.dynasties_started() == 2
    assert tracker.track_graph.current() != []


def test_counts_reconcile_and_ids_are_contiguous(make_smell, make_version):
    rng = random.Random(7)
    names = [f"pkg{i}" for i in range(12)]
    tracker = SmellTracker(SimilarityLinker(JaccardScorer(), threshold=0.4))
    g = tracker.track_graph

    for index in range(1, 9):
        smells = [
            make_smell(i, rng.sample(names, rng.randint(1, 4)))
            for i in range(rng.randint(0, 6))
        ]
        starts_before = len(g.vertices(DynastyStartNode.label))
        links_before = len(_successions(tracker))

        tracker.track(smells, make_version(index))

        started = len(g.vertices(DynastyStartNode.label)) - starts_before
        linked = len(_successions(tracker)) - links_before
        assert linked == tracker.smells_linked()
        assert len(smells) == linked + started

    uids = sorted(g.node(h).unique_smell_id for h in g.vertices(DynastyStartNode.label))
    assert uids == list(range(1, tracker.dynasties_started() + 1))

    cg = tracker.condensed_graph
    for d in cg.dynasties():
        node = cg.node(d)
        snapshots = cg.out_edges(d, CondensedEdge.HAS_SNAPSHOT)
        assert node.age == len(snapshots)
        assert len({e.get("version") for e in snapshots}) == node.age


def test_at_most_one_frontier_instance_per_dynasty(make_smell, make_version):
    tracker = SmellTracker(track_non_consecutive=True)
    tracker.track([make_smell(1, ["A"]), make_smell(2, ["A", "B"])], make_version(1))
    tracker.track([make_smell(1, ["A"]), make_smell(2, ["A", "B"])], make_version(2))
    tracker.track([make_smell(1, ["A", "B"])], make_version(3))

    g = tracker.track_graph
    uids = [g.unique_smell_id(i) for i in g.current()]
    assert len(uids) == len(set(uids))


def test_payloads_released_off_frontier(make_smell, make_version):
    tracker = SmellTracker()
    tracker.track([make_smell(1, ["X"])], make_version(1))
    g = tracker.track_graph
    (first,) = g.instances()
    assert not g.instance(first).released  # still current

    tracker.track([make_smell(1, ["X"])], make_version(2))
    node = g.instance(first)
    assert node.processed and node.released
    assert node.smell_type == "cyclicDep"
    assert node.affected_elements == ["X"]
    for idx in g.current():
        assert not g.instance(idx).released


def test_out_of_order_version_is_rejected(make_smell, make_version):
    tracker = SmellTracker()
    tracker.track([make_smell(1, ["X"])], make_version(2))
    with pytest.raises(TrackerStateError):
        tracker.track([make_smell(1, ["X"])], make_version(2))
    with pytest.raises(TrackerStateError):
        tracker.track([make_smell(1, ["X"])], make_version(1))
    assert tracker.current_version() == "v2"


def test_unsupported_smells_are_skipped(make_smell, make_version, caplog):
    tracker = SmellTracker()
    smells = [
        make_smell(1, ["X"]),
        make_smell(2, ["Y"], smell_type=SmellType.INTERFACE_POLLUTING),
    ]
    with caplog.at_level("WARNING"):
        tracker.track(smells, make_version(1))

    assert tracker.dynasties_started() == 1
    assert "ixpDep" in caplog.text


def test_scorer_failure_leaves_graph_untouched(make_smell, make_version):
    class NaNScorer:
        def name(self):
            return "nan"

        def score(self, old, new):
            return math.nan

    tracker = SmellTracker(SimilarityLinker(NaNScorer()))
    tracker.track([make_smell(1, ["X"])], make_version(1))
    size = len(tracker.track_graph)

    with pytest.raises(ScorerContractError):
        tracker.track([make_smell(1, ["X"])], make_version(2))

    assert len(tracker.track_graph) == size
    assert tracker.current_version() == "v1"


def test_from_config(make_smell, make_version):
    tracker = SmellTracker.from_config(
        TrackerConfig(similarity_threshold=0.9, track_non_consecutive_versions=True)
    )
    assert tracker.tracks_non_consecutive
    assert tracker.linker.threshold == 0.9

    tracker.track([make_smell(1, ["X"])], make_version(1))
    tracker.track([make_smell(1, ["X", "Y"])], make_version(2))
    assert tracker.smells_linked() == 0
    assert tracker.dynasties_started() == 2


def test_current_version_before_tracking():
    tracker = SmellTracker()
    assert tracker.current_version() == "NA"
    assert tracker.current_version_index() is None
    assert tracker.smells_linked() == 0
