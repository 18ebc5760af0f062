from typing import Any, Dict, List, NamedTuple, Set, Tuple

from landscape_sync.exemptions import DATE_FIELDS, Exemptions
from landscape_sync.indexer import CatalogIndex
from landscape_sync.names import LANDSCAPE, REGISTRY

MISSING_IN_REGISTRY = "missing_in_registry"
MISSING_IN_LANDSCAPE = "missing_in_landscape"
IGNORED_REPO_INCORRECT = "ignored_repo_incorrect"
REPO_MISSING_ON_OTHER_SIDE = "repo_missing_on_other_side"
REPO_MISMATCH = "repo_mismatch"
DATE_MISSING_ON_OTHER_SIDE = "date_missing_on_other_side"
DATE_MISMATCH = "date_mismatch"
STATUS_MISSING = "status_missing"
STATUS_COUNT_MISMATCH = "status_count_mismatch"

PRESENCE = "presence"
REPO = "repo"
STATUS = "status"
PHASES = (PRESENCE, REPO) + DATE_FIELDS + (STATUS,)


def other_side(side: str) -> str:
    return REGISTRY if side == LANDSCAPE else LANDSCAPE


class Mismatch(NamedTuple):
    """
    One disagreement between the catalogs.

    ``side`` is the catalog the offending value was observed in, ``values`` holds the
    conflicting values in kind-specific order (see report.describe).
    """

    kind: str
    name: str
    phase: str
    side: str = ""
    values: Tuple[Any, ...] = ()


class ReconcileResult(NamedTuple):
    mismatches: List[Mismatch]
    # status -> (landscape count, registry count), ignored projects excluded
    status_counts: Dict[str, Tuple[int, int]]

    @property
    def drift_detected(self) -> bool:
        return bool(self.mismatches)

    def by_phase(self, phase: str) -> List[Mismatch]:
        return [m for m in self.mismatches if m.phase == phase]


class PhaseLog:
    """
    Collects a phase's mismatches, reporting each key at most once. The key is the
    project name unless the caller narrows it, e.g. to (name, side).
    """

    def __init__(self) -> None:
        self.mismatches: List[Mismatch] = []
        self._reported: Set[Any] = set()

    def reported(self, key: Any) -> bool:
        return key in self._reported

    def emit(self, mismatch: Mismatch, key: Any = None) -> bool:
        key = mismatch.name if key is None else key
        if key in self._reported:
            return False
        self._reported.add(key)
        self.mismatches.append(mismatch)
        return True


class Reconciler:
    def __init__(self, exemptions: Exemptions) -> None:
        self.exemptions = exemptions

    def reconcile(self, registry: CatalogIndex, landscape: CatalogIndex) -> ReconcileResult:
        mismatches: List[Mismatch] = []
        mismatches.extend(self.check_presence(registry, landscape))
        mismatches.extend(self.check_repos(registry, landscape))
        for field in DATE_FIELDS:
            mismatches.extend(self.check_dates(field, registry, landscape))
        status_mismatches, status_counts = self.check_statuses(registry, landscape)
        mismatches.extend(status_mismatches)
        return ReconcileResult(mismatches, status_counts)

    def check_presence(self, registry: CatalogIndex, landscape: CatalogIndex) -> List[Mismatch]:
        log = PhaseLog()
        for name in sorted(landscape.unresolved):
            if name in registry.disabled or self.exemptions.ignores_missing(name):
                continue
            log.emit(Mismatch(MISSING_IN_REGISTRY, name, PRESENCE, LANDSCAPE))
        for name in sorted(registry.names - landscape.names):
            log.emit(Mismatch(MISSING_IN_LANDSCAPE, name, PRESENCE, REGISTRY))
        return log.mismatches

    def check_repos(self, registry: CatalogIndex, landscape: CatalogIndex) -> List[Mismatch]:
        log = PhaseLog()
        repos = {LANDSCAPE: landscape.field(REPO), REGISTRY: registry.field(REPO)}
        for side in (LANDSCAPE, REGISTRY):
            own, other = repos[side], repos[other_side(side)]
            for name in sorted(own):
                repo = own[name]
                pair = self.exemptions.repo_pair(name)
                if pair is not None:
                    # Only the expected value counts, never what the other catalog holds.
                    # Each side is checked on its own.
                    expected = pair[0] if side == LANDSCAPE else pair[1]
                    if repo != expected:
                        log.emit(Mismatch(IGNORED_REPO_INCORRECT, name, REPO, side, (repo, expected)), key=(name, side))
                    continue
                if log.reported(name):
                    continue
                if name not in other:
                    log.emit(Mismatch(REPO_MISSING_ON_OTHER_SIDE, name, REPO, side, (repo,)))
                elif repo != other[name]:
                    log.emit(Mismatch(REPO_MISMATCH, name, REPO, side, (repo, other[name])))
        return log.mismatches

    def check_dates(self, field: str, registry: CatalogIndex, landscape: CatalogIndex) -> List[Mismatch]:
        log = PhaseLog()
        dates = {LANDSCAPE: landscape.field(field), REGISTRY: registry.field(field)}
        for side in (LANDSCAPE, REGISTRY):
            own, other = dates[side], dates[other_side(side)]
            for name in sorted(own):
                if log.reported(name) or self.exemptions.ignores_date(field, name):
                    continue
                if name not in other:
                    log.emit(Mismatch(DATE_MISSING_ON_OTHER_SIDE, name, field, side, (own[name],)))
                elif own[name] != other[name]:
                    log.emit(Mismatch(DATE_MISMATCH, name, field, side, (own[name], other[name])))
        return log.mismatches

    def check_statuses(
        self, registry: CatalogIndex, landscape: CatalogIndex
    ) -> Tuple[List[Mismatch], Dict[str, Tuple[int, int]]]:
        log = PhaseLog()
        groups = {LANDSCAPE: landscape.status_groups, REGISTRY: registry.status_groups}
        for side in (LANDSCAPE, REGISTRY):
            own, other = groups[side], groups[other_side(side)]
            for status in sorted(own):
                for name in sorted(own[status]):
                    if self.exemptions.ignores_status(name) or log.reported(name):
                        continue
                    if name in other.get(status, ()):
                        continue
                    held = next((s for s in sorted(other) if s != status and name in other[s]), "")
                    log.emit(Mismatch(STATUS_MISSING, name, STATUS, side, (status, held)))

        counts: Dict[str, Tuple[int, int]] = {}
        count_mismatches: List[Mismatch] = []
        for status in sorted(set(groups[LANDSCAPE]) | set(groups[REGISTRY])):
            count_l = self._count(groups[LANDSCAPE].get(status, set()))
            count_r = self._count(groups[REGISTRY].get(status, set()))
            counts[status] = (count_l, count_r)
            if count_l != count_r:
                count_mismatches.append(Mismatch(STATUS_COUNT_MISMATCH, status, STATUS, "", (count_l, count_r)))
        return log.mismatches + count_mismatches, counts

    def _count(self, names: Set[str]) -> int:
        return sum(1 for name in names if not self.exemptions.ignores_status(name))
