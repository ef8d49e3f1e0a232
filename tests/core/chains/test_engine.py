"""Tests for AttackChainEngine: construction, per-track detection, rendering."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

import pytest

from kubechains.core.attacktrack import AttackStep, AttackTrack
from kubechains.core.chains import (
    AttackChainEngine,
    ControlsLookup,
    EngineConfig,
    UnresolvedControlPolicy,
)
from kubechains.core.posture import ControlRecord, RelevantLabel
from kubechains.exceptions import (
    ConfigurationError,
    ControlResolutionError,
    DetectionInputError,
    EngineConstructionError,
)
from tests.helpers import VULN_STEP, WORKLOAD, finding, step, summary, track, vulnerable_track

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(catalog) -> AttackChainEngine:
    return AttackChainEngine([vulnerable_track()], catalog)


def _detect_shape(engine, s, findings):
    lookup = engine.build_controls_lookup(s, findings)
    result = engine.detect_single_attack_track(engine.attack_tracks[0], lookup)
    return None if result is None else result.root.shape()


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_empty_track_list(self, catalog) -> None:
        with pytest.raises(EngineConstructionError, match="at least one attack track"):
            AttackChainEngine([], catalog)

    def test_track_without_root(self, catalog) -> None:
        with pytest.raises(EngineConstructionError, match="Invalid attack track 'broken'"):
            AttackChainEngine([vulnerable_track(), AttackTrack(name="broken")], catalog)

    def test_empty_step_name(self, catalog) -> None:
        t = track("attackchain1", step("A", AttackStep(name="")))
        with pytest.raises(EngineConstructionError, match="step with no name"):
            AttackChainEngine([t], catalog)

    def test_cyclic_track(self, catalog) -> None:
        a = AttackStep(name="A")
        object.__setattr__(a, "sub_steps", (AttackStep(name="B", sub_steps=(a,)),))
        with pytest.raises(EngineConstructionError, match="cycle"):
            AttackChainEngine([AttackTrack(name="cyclic", root=a)], catalog)

    def test_duplicate_track_names(self, catalog) -> None:
        with pytest.raises(EngineConstructionError, match="Duplicate attack track name 'attackchain1'"):
            AttackChainEngine([vulnerable_track(), vulnerable_track()], catalog)

    def test_invalid_config(self, catalog) -> None:
        with pytest.raises(ConfigurationError):
            AttackChainEngine([vulnerable_track()], catalog, EngineConfig(vulnerability_tags="x"))

    def test_defaults(self, engine) -> None:
        assert engine.config == EngineConfig()
        assert [t.name for t in engine.attack_tracks] == ["attackchain1"]

    def test_tracks_copied(self, catalog) -> None:
        tracks = [vulnerable_track()]
        engine = AttackChainEngine(tracks, catalog)
        tracks.append(vulnerable_track("attackchain2"))
        assert len(engine.attack_tracks) == 1


# ---------------------------------------------------------------------------
# Per-track detection
# ---------------------------------------------------------------------------


class TestDetectSingleAttackTrack:
    def test_relevant_vulnerability(self, engine) -> None:
        s = summary(failed=["control1", "control2"], warning=["control3", "control4"])
        assert _detect_shape(engine, s, [finding(label=RelevantLabel.YES)]) == (
            "A", ((VULN_STEP, (("C", ()),)),),
        )

    def test_critical_without_relevancy_data(self, engine) -> None:
        s = summary(failed=["control1", "control2"], warning=["control3", "control4"])
        f = finding(has_relevancy_data=False, total_count=1, relevant_count=0)
        assert _detect_shape(engine, s, [f]) == ("A", ((VULN_STEP, (("C", ()),)),))

    def test_irrelevant_vulnerability(self, engine) -> None:
        s = summary(failed=["control1", "control2"], warning=["control3", "control4"])
        assert _detect_shape(engine, s, [finding(label=RelevantLabel.NO)]) is None

    def test_posture_only_branch(self, engine) -> None:
        s = summary(failed=["control1", "control2"], warning=["control6"])
        assert _detect_shape(engine, s, [finding(label=RelevantLabel.NO)]) == (
            "A", (("E", (("B", ()),)),),
        )

    def test_both_branches(self, engine) -> None:
        s = summary(failed=["control1", "control2", "control6"], warning=["control3", "control4"])
        assert _detect_shape(engine, s, [finding(label=RelevantLabel.YES)]) == (
            "A", ((VULN_STEP, (("C", ()),)), ("E", (("B", ()),))),
        )

    def test_none_track(self, engine) -> None:
        with pytest.raises(DetectionInputError):
            engine.detect_single_attack_track(None, ControlsLookup())

    def test_none_lookup(self, engine) -> None:
        with pytest.raises(DetectionInputError):
            engine.detect_single_attack_track(vulnerable_track(), None)

    def test_track_without_live_category_skips_path_algorithm(self, catalog) -> None:
        class RecordingPaths:
            def __init__(self) -> None:
                self.calls = 0

            def enumerate_paths(self, track, lookup):
                self.calls += 1
                return []

            def rebuild_pruned_tree(self, track, lookup, paths):
                raise AssertionError("not reached")

        paths = RecordingPaths()
        engine = AttackChainEngine([vulnerable_track()], catalog, path_algorithm=paths)
        lookup = ControlsLookup()
        lookup.add("other", "A", ControlRecord(control_id="c1"))
        assert engine.detect_single_attack_track(vulnerable_track(), lookup) is None
        assert paths.calls == 0

    def test_injected_path_algorithm_used(self, catalog) -> None:
        class NoPaths:
            def enumerate_paths(self, track, lookup):
                return []

            def rebuild_pruned_tree(self, track, lookup, paths):
                raise AssertionError("not reached")

        engine = AttackChainEngine([vulnerable_track()], catalog, path_algorithm=NoPaths())
        s = summary(failed=["control1", "control2", "control6"])
        assert engine.detect(s, now=NOW) == []


# ---------------------------------------------------------------------------
# Whole-workload detection
# ---------------------------------------------------------------------------


class TestDetectAllAttackTracks:
    def test_two_tracks_in_template_order(self, catalog) -> None:
        track1 = track(
            "attackchain1",
            step("A", step(VULN_STEP, step("C"), step("D"), vuln=True), step("E")),
        )
        track2 = track("attackchain2", step("A", step("B", step("C"), step("D")), step("E")))
        engine = AttackChainEngine([track1, track2], catalog)
        s = summary(failed=["control1", "control2", "control6"], warning=["control3", "control4"])

        pruned = engine.detect_all_attack_tracks(s, [finding()])

        assert [p.name for p in pruned] == ["attackchain1", "attackchain2"]
        assert pruned[0].root.shape() == ("A", ((VULN_STEP, (("C", ()),)), ("E", ())))
        assert pruned[1].root.shape() == ("A", (("B", (("C", ()),)), ("E", ())))

    def test_dead_sibling_dropped_under_vulnerable_branch(self, catalog) -> None:
        t = track("attackchain1", step("A", step("B", step("C", vuln=True), step("D")), step("E")))
        engine = AttackChainEngine([t], catalog)
        s = summary(failed=["control1", "control2", "control6"])

        (pruned,) = engine.detect_all_attack_tracks(s, [finding()])

        assert pruned.root.shape() == ("A", (("B", (("C", ()),)), ("E", ())))

    def test_unsupported_kind(self, engine) -> None:
        s = summary(failed=["control1", "control2", "control6"], attributes=dict(WORKLOAD, kind="ConfigMap"))
        assert engine.detect_all_attack_tracks(s) == []

    def test_kind_case_insensitive(self, engine) -> None:
        s = summary(failed=["control1", "control2", "control6"], attributes=dict(WORKLOAD, kind="pod"))
        assert len(engine.detect_all_attack_tracks(s)) == 1

    def test_no_controls(self, engine) -> None:
        assert engine.detect_all_attack_tracks(summary()) == []


class TestDetect:
    def test_rendered_chain(self, catalog) -> None:
        engine = AttackChainEngine(
            [vulnerable_track()], catalog, EngineConfig(customer_guid="tenant-1")
        )
        s = summary(failed=["control1", "control2", "control6"], warning=["control3", "control4"])

        chains = engine.detect(s, [finding()], now=NOW)

        assert len(chains) == 1
        chain = chains[0]
        assert chain.name == "attackchain1"
        assert chain.customer_guid == "tenant-1"
        assert chain.first_seen == NOW
        root = chain.root
        assert root.control_ids == ["control1"]
        vuln_node, e_node = root.next_nodes
        assert vuln_node.control_ids == []
        assert [v.names for v in vuln_node.vulnerabilities] == [("CVE-1", "CVE-2", "CVE-3")]
        assert vuln_node.vulnerabilities[0].container_name == "nginx"
        assert vuln_node.next_nodes[0].control_ids == ["control3", "control4"]
        assert e_node.control_ids == ["control6"]
        assert e_node.next_nodes[0].control_ids == ["control2"]

    def test_ids_stable_across_runs(self, engine) -> None:
        s = summary(failed=["control1", "control2", "control6"])
        first = engine.detect(s, now=NOW)
        second = engine.detect(s, now=NOW)
        assert [c.to_dict() for c in first] == [c.to_dict() for c in second]

    def test_strict_policy(self, catalog) -> None:
        engine = AttackChainEngine(
            [vulnerable_track()], catalog,
            EngineConfig(unresolved_controls=UnresolvedControlPolicy.FAIL),
        )
        with pytest.raises(ControlResolutionError):
            engine.detect(summary(failed=["control1", "C-9999"]))

    def test_lenient_policy(self, engine) -> None:
        s = summary(failed=["control1", "control2", "control6", "C-9999"])
        assert len(engine.detect(s, now=NOW)) == 1

    def test_inputs_not_mutated(self, engine) -> None:
        s = summary(failed=["control1", "control2", "control6"])
        f = finding()
        engine.detect(s, [f], now=NOW)
        assert s.failed_controls == ("control1", "control2", "control6")
        assert f.cve_names == ("CVE-1", "CVE-2", "CVE-3")


class TestDetectForWorkloads:
    def test_findings_paired_by_designator(self, engine) -> None:
        web = dict(WORKLOAD, name="web")
        summaries = [
            summary(failed=["control1"], warning=["control3"], attributes=web),
            summary(failed=["control1"], warning=["control3"]),
        ]
        findings = [finding(attributes=dict(web, cluster="MINIKUBESECURITY1"))]

        chains = engine.detect_for_workloads(summaries, findings, now=NOW)

        assert [c.resource.name for c in chains] == ["web"]

    def test_shared_timestamp(self, engine) -> None:
        summaries = [
            summary(failed=["control1", "control2", "control6"], attributes=dict(WORKLOAD, name=n))
            for n in ("a", "b")
        ]
        chains = engine.detect_for_workloads(summaries)
        assert len(chains) == 2
        assert chains[0].first_seen == chains[1].first_seen


def test_concurrent_detection_matches_serial(engine) -> None:
    workloads = [
        summary(
            failed=["control1", "control2", "control6"],
            warning=["control3", "control4"],
            attributes=dict(WORKLOAD, name=f"pod-{i}"),
        )
        for i in range(32)
    ]

    def run(s):
        f = finding(attributes=dict(WORKLOAD, name=s.designator.name))
        return [c.to_dict() for c in engine.detect(s, [f], now=NOW)]

    serial = [run(s) for s in workloads]
    with ThreadPoolExecutor(max_workers=8) as pool:
        parallel = list(pool.map(run, workloads))

    assert parallel == serial
