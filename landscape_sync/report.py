from typing import List, NamedTuple

from landscape_sync.reconcile import (
    DATE_MISMATCH,
    DATE_MISSING_ON_OTHER_SIDE,
    IGNORED_REPO_INCORRECT,
    MISSING_IN_LANDSCAPE,
    MISSING_IN_REGISTRY,
    PHASES,
    REPO_MISMATCH,
    REPO_MISSING_ON_OTHER_SIDE,
    STATUS_COUNT_MISMATCH,
    STATUS_MISSING,
    Mismatch,
    ReconcileResult,
    other_side,
)

PHASE_LABELS = {
    "presence": "missing projects",
    "repo": "repos",
    "join": "join dates",
    "incubating": "incubating dates",
    "graduated": "graduated dates",
    "status": "status",
}


class Report(NamedTuple):
    lines: List[str]
    drift_detected: bool

    @property
    def text(self) -> str:
        return "\n".join(self.lines) + "\n" if self.lines else ""


def describe(m: Mismatch) -> str:
    other = other_side(m.side) if m.side else ""
    if m.kind == MISSING_IN_REGISTRY:
        return f"error: missing in registry projects: '{m.name}'"
    if m.kind == MISSING_IN_LANDSCAPE:
        return f"error: missing in landscape: '{m.name}'"
    if m.kind == IGNORED_REPO_INCORRECT:
        repo, expected = m.values
        return f"error: ignored {m.side} repo is incorrect '{m.name}' '{repo}' <=> '{expected}'"
    if m.kind == REPO_MISSING_ON_OTHER_SIDE:
        return f"error: {m.side} repo missing in {other} '{m.name}' '{m.values[0]}'"
    if m.kind == REPO_MISMATCH:
        own, theirs = m.values
        return f"error: {m.side} repo not equal to {other} repo '{m.name}' '{own}' <=> '{theirs}'"
    if m.kind == DATE_MISSING_ON_OTHER_SIDE:
        return f"error: {m.side} {m.phase} date missing in {other} '{m.name}' '{m.values[0]}'"
    if m.kind == DATE_MISMATCH:
        own, theirs = m.values
        return (
            f"error: {m.side} {m.phase} date not equal to {other} {m.phase} date "
            f"'{m.name}' '{own}' <=> '{theirs}'"
        )
    if m.kind == STATUS_MISSING:
        status, held = m.values
        line = f"error: {other} is missing {status} '{m.name}'"
        if held:
            line += f", but is present in {held}"
        return line
    if m.kind == STATUS_COUNT_MISMATCH:
        count_l, count_r = m.values
        return f"error: {m.name}: {count_l} landscape projects, {count_r} registry projects"
    raise ValueError(f"unknown mismatch kind '{m.kind}'")


def render_report(result: ReconcileResult) -> List[str]:
    """
    Mismatch lines grouped by phase, each group closed by its total, then one summary
    line per status.
    """
    lines: List[str] = []
    for phase in PHASES:
        found = [m for m in result.by_phase(phase) if m.kind != STATUS_COUNT_MISMATCH]
        if not found:
            continue
        lines.extend(describe(m) for m in found)
        lines.append(f"error: {PHASE_LABELS[phase]} mismatches detected: {len(found)}")

    count_mismatches = {m.name: m for m in result.mismatches if m.kind == STATUS_COUNT_MISMATCH}
    for status in sorted(result.status_counts):
        if status in count_mismatches:
            lines.append(describe(count_mismatches[status]))
            continue
        count_l, _ = result.status_counts[status]
        lines.append(f"{status}: {count_l} projects")
    return lines


def build_report(result: ReconcileResult) -> Report:
    return Report(render_report(result), result.drift_detected)
