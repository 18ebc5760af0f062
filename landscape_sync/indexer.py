from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Set

from landscape_sync.exemptions import Exemptions
from landscape_sync.names import LANDSCAPE, REGISTRY, Canonicalizer, fold

FIELDS = ("repo", "join", "incubating", "graduated")
GITHUB_PREFIX = "https://github.com/"
DATE_LENGTH = len("2006-01-02")


class ProjectRecord(NamedTuple):
    key: str
    name: str
    repo: str
    join_date: str
    incubating_date: str
    graduated_date: str
    status: str
    disabled: bool


class LandscapeItem(NamedTuple):
    name: str
    repo_url: str
    status: str
    accepted: str
    incubating: str
    graduated: str


class CatalogIndex:
    """
    Canonical-name keyed view of one catalog.

    Field maps hold the first non-blank value seen for each name. Status groups map a
    folded status to the names listed under it.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.names: Set[str] = set()
        self.fields: Dict[str, Dict[str, str]] = {field: {} for field in FIELDS}
        self.status_groups: Dict[str, Set[str]] = {}
        # registry only: projects marked disabled, by short key and canonical name
        self.disabled: Set[str] = set()
        # landscape only: project-like entries with no registry counterpart
        self.unresolved: Set[str] = set()

    def field(self, field: str) -> Dict[str, str]:
        return self.fields[field]

    def get(self, field: str, name: str) -> str:
        return self.fields[field].get(name, "")

    def set_first(self, field: str, name: str, value: str) -> bool:
        values = self.fields[field]
        if not value or name in values:
            return False
        values[name] = value
        return True

    def add_status(self, name: str, status: str) -> None:
        status = fold(status)
        if status:
            self.status_groups.setdefault(status, set()).add(name)

    def statuses_of(self, name: str) -> List[str]:
        return sorted(s for s, members in self.status_groups.items() if name in members)

    def record(self, name: str) -> Dict[str, Optional[str]]:
        statuses = self.statuses_of(name)
        return {
            "repo": self.fields["repo"].get(name),
            "join_date": self.fields["join"].get(name),
            "incubating_date": self.fields["incubating"].get(name),
            "graduated_date": self.fields["graduated"].get(name),
            "status": statuses[0] if statuses else None,
        }

    def records(self) -> Dict[str, Dict[str, Optional[str]]]:
        return {name: self.record(name) for name in sorted(self.names)}

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __len__(self) -> int:
        return len(self.names)


def truncate_date(value: Any) -> str:
    # Free text such as "2020-01-01T00:00:00Z" keeps only its YYYY-MM-DD prefix.
    # YAML may also hand us date/datetime objects, whose str() starts the same way.
    if value is None:
        return ""
    text = str(value).strip()
    return text[:DATE_LENGTH]


def normalize_repo(value: Any) -> str:
    repo = fold(str(value or ""))
    if repo.startswith(GITHUB_PREFIX):
        repo = repo[len(GITHUB_PREFIX):]
    return repo


def registry_records(document: Dict[str, Any]) -> List[ProjectRecord]:
    records: List[ProjectRecord] = []
    projects: Dict[str, Any] = document.get("projects") or {}
    for key, data in projects.items():
        if not isinstance(data, dict):
            # Skip malformed entries but continue
            continue
        records.append(
            ProjectRecord(
                key=str(key),
                name=str(data.get("name") or key),
                repo=str(data.get("main_repo") or ""),
                join_date=truncate_date(data.get("join_date")),
                incubating_date=truncate_date(data.get("incubating_date")),
                graduated_date=truncate_date(data.get("graduated_date")),
                status=str(data.get("status") or ""),
                disabled=bool(data.get("disabled")),
            )
        )
    records.sort(key=lambda r: fold(r.key))
    return records


def landscape_items(document: Dict[str, Any]) -> Iterator[LandscapeItem]:
    """Flatten landscape -> subcategories -> items, in document order."""
    for cat in document.get("landscape") or []:
        for sub in (cat or {}).get("subcategories") or []:
            for item in (sub or {}).get("items") or []:
                if not isinstance(item, dict):
                    continue
                extra = item.get("extra") or {}
                if not isinstance(extra, dict):
                    extra = {}
                yield LandscapeItem(
                    name=str(item.get("name") or ""),
                    repo_url=str(item.get("repo_url") or ""),
                    status=str(item.get("project") or ""),
                    accepted=truncate_date(extra.get("accepted")),
                    incubating=truncate_date(extra.get("incubating")),
                    graduated=truncate_date(extra.get("graduated")),
                )


def build_registry_index(
    document: Dict[str, Any], canonicalizer: Canonicalizer, exemptions: Exemptions
) -> CatalogIndex:
    index = CatalogIndex(REGISTRY)
    for record in registry_records(document):
        key = fold(record.key)
        if exemptions.is_skipped(key) or exemptions.is_skipped(record.name):
            continue
        if record.disabled:
            index.disabled.add(key)
            index.disabled.add(canonicalizer.canonicalize(record.name, REGISTRY))
            continue
        name = canonicalizer.register(key, record.name)
        index.names.add(name)
        index.set_first("repo", name, fold(record.repo))
        index.set_first("join", name, record.join_date)
        index.set_first("incubating", name, record.incubating_date)
        index.set_first("graduated", name, record.graduated_date)
        index.add_status(name, record.status)
    return index


def build_landscape_index(document: Dict[str, Any], canonicalizer: Canonicalizer) -> CatalogIndex:
    """
    Index landscape items against the names the registry index registered.

    Must run after build_registry_index so the canonicalizer knows every registry name
    and alias.
    """
    index = CatalogIndex(LANDSCAPE)
    for item in landscape_items(document):
        name = canonicalizer.canonicalize(item.name, LANDSCAPE)
        if not name:
            continue
        status = fold(item.status)
        if not canonicalizer.is_known(name):
            if item.accepted or status:
                index.unresolved.add(name)
            continue
        index.names.add(name)
        index.set_first("repo", name, normalize_repo(item.repo_url))
        index.set_first("join", name, item.accepted)
        join = index.get("join", name)
        if item.incubating > join:
            index.set_first("incubating", name, item.incubating)
        incubating = index.get("incubating", name)
        if item.graduated > join and item.graduated > incubating:
            index.set_first("graduated", name, item.graduated)
        index.add_status(name, status)
    return index
