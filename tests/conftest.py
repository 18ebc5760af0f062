from typing import Any, Dict, Optional

import pytest

from landscape_sync.exemptions import make_exemptions
from landscape_sync.indexer import build_landscape_index, build_registry_index
from landscape_sync.names import Canonicalizer


def project(
    name: str,
    status: str = "Incubating",
    repo: Optional[str] = None,
    join_date: Any = "2020-01-01",
    incubating_date: Any = None,
    graduated_date: Any = None,
    disabled: bool = False,
) -> Dict[str, Any]:
    """One entry of DevStats projects.yaml."""
    data: Dict[str, Any] = {
        "name": name,
        "status": status,
        "main_repo": repo if repo is not None else f"org/{name.lower()}",
        "join_date": join_date,
    }
    if incubating_date is not None:
        data["incubating_date"] = incubating_date
    if graduated_date is not None:
        data["graduated_date"] = graduated_date
    if disabled:
        data["disabled"] = True
    return data


def item(
    name: str,
    status: str = "incubating",
    repo_url: Optional[str] = None,
    accepted: Any = "2020-01-01",
    incubating: Any = None,
    graduated: Any = None,
) -> Dict[str, Any]:
    """One landscape.yml item."""
    extra: Dict[str, Any] = {}
    if accepted is not None:
        extra["accepted"] = accepted
    if incubating is not None:
        extra["incubating"] = incubating
    if graduated is not None:
        extra["graduated"] = graduated
    data: Dict[str, Any] = {
        "item": None,
        "name": name,
        "homepage_url": f"https://{name.lower()}.io",
        "repo_url": repo_url if repo_url is not None else f"https://github.com/org/{name.lower()}",
        "logo": f"{name.lower()}.svg",
        "project": status,
    }
    if extra:
        data["extra"] = extra
    return data


def registry_doc(**projects: Dict[str, Any]) -> Dict[str, Any]:
    return {"projects": dict(projects)}


def landscape_doc(*items: Dict[str, Any], **subcategories: list) -> Dict[str, Any]:
    """Items go into one subcategory; extra keyword lists become further subcategories."""
    subs = [{"subcategory": None, "name": "Scheduling & Orchestration", "items": list(items)}]
    for sub_name, sub_items in subcategories.items():
        subs.append({"subcategory": None, "name": sub_name, "items": list(sub_items)})
    return {
        "landscape": [
            {"category": None, "name": "Orchestration & Management", "subcategories": subs},
        ]
    }


@pytest.fixture
def empty_exemptions():
    return make_exemptions()


@pytest.fixture
def build_indices():
    """Index a registry and a landscape document the way a run does."""

    def build(registry: Dict[str, Any], landscape: Dict[str, Any], exemptions=None):
        exemptions = exemptions if exemptions is not None else make_exemptions()
        canonicalizer = Canonicalizer(exemptions.renames)
        registry_index = build_registry_index(registry, canonicalizer, exemptions)
        landscape_index = build_landscape_index(landscape, canonicalizer)
        return registry_index, landscape_index

    return build
