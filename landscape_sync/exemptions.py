import os
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, NamedTuple, Optional, Tuple

import yaml

from landscape_sync.names import fold

DEFAULT_EXEMPTIONS_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "exemptions.yaml")

DATE_FIELDS = ("join", "incubating", "graduated")

SET_KEYS = (
    "skip",
    "ignore_missing",
    "ignore_join_date",
    "ignore_incubating_date",
    "ignore_graduated_date",
    "ignore_status",
)


class Exemptions(NamedTuple):
    """
    Accepted discrepancies, keyed by folded project name. Built once per run and never
    mutated; every query is total and absence means "not exempted".
    """

    skip: FrozenSet[str] = frozenset()
    ignore_missing: FrozenSet[str] = frozenset()
    ignore_repo: Mapping[str, Tuple[str, str]] = MappingProxyType({})
    ignore_join_date: FrozenSet[str] = frozenset()
    ignore_incubating_date: FrozenSet[str] = frozenset()
    ignore_graduated_date: FrozenSet[str] = frozenset()
    ignore_status: FrozenSet[str] = frozenset()
    renames: Mapping[str, str] = MappingProxyType({})

    def is_skipped(self, name: str) -> bool:
        return fold(name) in self.skip

    def ignores_missing(self, name: str) -> bool:
        return fold(name) in self.ignore_missing

    def repo_pair(self, name: str) -> Optional[Tuple[str, str]]:
        return self.ignore_repo.get(fold(name))

    def ignores_date(self, field: str, name: str) -> bool:
        if field not in DATE_FIELDS:
            raise ValueError(f"unknown date field '{field}'")
        return fold(name) in getattr(self, f"ignore_{field}_date")

    def ignores_status(self, name: str) -> bool:
        return fold(name) in self.ignore_status


def _folded(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{where}: expected a name, got {value!r}")
    return fold(value)


def make_exemptions(
    renames: Optional[Mapping[str, str]] = None,
    ignore_repo: Optional[Mapping[str, Iterable[str]]] = None,
    **sets: Iterable[str],
) -> Exemptions:
    unknown = sorted(set(sets) - set(SET_KEYS))
    if unknown:
        raise ValueError(f"unknown exemption keys: {', '.join(unknown)}")
    pairs: Dict[str, Tuple[str, str]] = {}
    for name, pair in (ignore_repo or {}).items():
        if isinstance(pair, (str, dict)):
            raise ValueError(f"ignore_repo '{name}' must be a list of 2 repos (landscape, registry)")
        values = [_folded(v, f"ignore_repo '{name}'") for v in (pair or [])]
        if len(values) != 2:
            raise ValueError(f"ignore_repo '{name}' needs exactly 2 repos (landscape, registry), got {len(values)}")
        pairs[_folded(name, "ignore_repo")] = (values[0], values[1])
    frozen: Dict[str, FrozenSet[str]] = {}
    for key in SET_KEYS:
        names = sets.get(key) or []
        if isinstance(names, (str, dict)):
            raise ValueError(f"'{key}' must be a list of project names")
        frozen[key] = frozenset(_folded(n, key) for n in names)
    folded_renames: Dict[str, str] = {}
    for old, new in (renames or {}).items():
        old, new = _folded(old, "renames"), _folded(new, "renames")
        if old != new:
            folded_renames[old] = new
    chained = sorted(v for v in folded_renames.values() if v in folded_renames)
    if chained:
        raise ValueError(f"rename targets must not be renamed again: {', '.join(chained)}")
    return Exemptions(
        ignore_repo=MappingProxyType(pairs),
        renames=MappingProxyType(folded_renames),
        **frozen,
    )


def load_exemptions(path: Optional[str] = None) -> Exemptions:
    """
    Load exemptions from a YAML file (the packaged defaults when no path is given).
    Every top-level key is optional; unknown keys are rejected so typos don't silently
    disable an exemption.
    """
    path = path or DEFAULT_EXEMPTIONS_PATH
    with open(path, "r", encoding="utf-8") as f:
        try:
            data: Any = yaml.safe_load(f) or {}
        except yaml.YAMLError as err:
            raise ValueError(f"{path}: invalid YAML: {err}") from err
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    data = dict(data)
    renames = data.pop("renames", None) or {}
    ignore_repo = data.pop("ignore_repo", None) or {}
    if not isinstance(renames, dict) or not isinstance(ignore_repo, dict):
        raise ValueError(f"{path}: 'renames' and 'ignore_repo' must be mappings")
    try:
        return make_exemptions(renames=renames, ignore_repo=ignore_repo, **data)
    except ValueError as err:
        raise ValueError(f"{path}: {err}") from err
