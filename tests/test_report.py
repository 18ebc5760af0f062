import pytest

from landscape_sync.names import LANDSCAPE, REGISTRY
from landscape_sync.reconcile import (
    DATE_MISMATCH,
    DATE_MISSING_ON_OTHER_SIDE,
    IGNORED_REPO_INCORRECT,
    MISSING_IN_LANDSCAPE,
    MISSING_IN_REGISTRY,
    REPO_MISMATCH,
    REPO_MISSING_ON_OTHER_SIDE,
    STATUS_COUNT_MISMATCH,
    STATUS_MISSING,
    Mismatch,
    ReconcileResult,
)
from landscape_sync.report import build_report, describe, render_report


@pytest.mark.parametrize(
    "mismatch, line",
    [
        (Mismatch(MISSING_IN_REGISTRY, "bar", "presence", LANDSCAPE), "error: missing in registry projects: 'bar'"),
        (Mismatch(MISSING_IN_LANDSCAPE, "foo", "presence", REGISTRY), "error: missing in landscape: 'foo'"),
        (
            Mismatch(IGNORED_REPO_INCORRECT, "x", "repo", LANDSCAPE, ("org/c", "org/a")),
            "error: ignored landscape repo is incorrect 'x' 'org/c' <=> 'org/a'",
        ),
        (
            Mismatch(REPO_MISSING_ON_OTHER_SIDE, "foo", "repo", REGISTRY, ("org/foo",)),
            "error: registry repo missing in landscape 'foo' 'org/foo'",
        ),
        (
            Mismatch(REPO_MISMATCH, "foo", "repo", LANDSCAPE, ("org/foo", "org/foo-core")),
            "error: landscape repo not equal to registry repo 'foo' 'org/foo' <=> 'org/foo-core'",
        ),
        (
            Mismatch(DATE_MISSING_ON_OTHER_SIDE, "foo", "incubating", REGISTRY, ("2021-01-01",)),
            "error: registry incubating date missing in landscape 'foo' '2021-01-01'",
        ),
        (
            Mismatch(DATE_MISMATCH, "foo", "join", LANDSCAPE, ("2020-01-01", "2020-01-02")),
            "error: landscape join date not equal to registry join date 'foo' '2020-01-01' <=> '2020-01-02'",
        ),
        (
            Mismatch(STATUS_MISSING, "foo", "status", LANDSCAPE, ("graduated", "incubating")),
            "error: registry is missing graduated 'foo', but is present in incubating",
        ),
        (
            Mismatch(STATUS_MISSING, "foo", "status", REGISTRY, ("sandbox", "")),
            "error: landscape is missing sandbox 'foo'",
        ),
        (
            Mismatch(STATUS_COUNT_MISMATCH, "sandbox", "status", "", (3, 4)),
            "error: sandbox: 3 landscape projects, 4 registry projects",
        ),
    ],
)
def test_describe(mismatch, line):
    assert describe(mismatch) == line


def test_describe_rejects_unknown_kinds():
    with pytest.raises(ValueError):
        describe(Mismatch("bogus", "foo", "repo"))


def test_render_groups_phases_and_closes_with_status_summary():
    result = ReconcileResult(
        mismatches=[
            Mismatch(MISSING_IN_LANDSCAPE, "foo", "presence", REGISTRY),
            Mismatch(REPO_MISMATCH, "bar", "repo", LANDSCAPE, ("org/a", "org/b")),
            Mismatch(REPO_MISMATCH, "baz", "repo", LANDSCAPE, ("org/c", "org/d")),
            Mismatch(STATUS_COUNT_MISMATCH, "sandbox", "status", "", (2, 3)),
        ],
        status_counts={"sandbox": (2, 3), "graduated": (5, 5)},
    )
    assert render_report(result) == [
        "error: missing in landscape: 'foo'",
        "error: missing projects mismatches detected: 1",
        "error: landscape repo not equal to registry repo 'bar' 'org/a' <=> 'org/b'",
        "error: landscape repo not equal to registry repo 'baz' 'org/c' <=> 'org/d'",
        "error: repos mismatches detected: 2",
        "graduated: 5 projects",
        "error: sandbox: 2 landscape projects, 3 registry projects",
    ]


def test_report_without_drift():
    report = build_report(ReconcileResult([], {"graduated": (5, 5), "incubating": (2, 2)}))
    assert report.drift_detected is False
    assert report.text == "graduated: 5 projects\nincubating: 2 projects\n"


def test_empty_report_text():
    report = build_report(ReconcileResult([], {}))
    assert report.lines == []
    assert report.text == ""
