import sys
from typing import Any, Dict, NamedTuple, Optional
from urllib.parse import urlparse

import requests
import yaml

REMOTE = "remote"
LOCAL = "local"

RAW_LANDSCAPE_URL = "https://raw.githubusercontent.com/cncf/landscape/master/landscape.yml"
RAW_PROJECTS_URL = "https://raw.githubusercontent.com/cncf/devstats/master/projects.yaml"
FETCH_TIMEOUT_SECONDS = 60


class SourceError(Exception):
    """A catalog could not be fetched, read or parsed. Fatal for the run."""


class Source(NamedTuple):
    kind: str
    location: str

    @classmethod
    def remote(cls, url: str) -> "Source":
        return cls(REMOTE, url)

    @classmethod
    def local(cls, path: str) -> "Source":
        return cls(LOCAL, path)

    def __str__(self) -> str:
        return self.location


def parse_source(value: str) -> Source:
    value = (value or "").strip()
    if not value:
        raise ValueError("empty source location")
    if urlparse(value).scheme in ("http", "https"):
        return Source.remote(value)
    return Source.local(value)


def read_source(source: Source, session: Optional[requests.Session] = None) -> str:
    if source.kind == LOCAL:
        try:
            with open(source.location, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as err:
            raise SourceError(f"unable to read file '{source.location}': {err}") from err
    if source.kind != REMOTE:
        raise SourceError(f"unknown source kind '{source.kind}' for '{source.location}'")
    getter = session.get if session is not None else requests.get
    try:
        resp = getter(source.location, timeout=FETCH_TIMEOUT_SECONDS)
        resp.raise_for_status()
    except requests.HTTPError as http_err:
        # Show the server's payload for easier debugging
        if http_err.response is not None and http_err.response.text:
            print(http_err.response.text[:2000], file=sys.stderr)
        raise SourceError(f"GET '{source.location}' -> {http_err}") from http_err
    except requests.RequestException as err:
        raise SourceError(f"GET '{source.location}' -> {err}") from err
    return resp.text


def load_document(source: Source, required_key: str, session: Optional[requests.Session] = None) -> Dict[str, Any]:
    """
    Read a source and parse it as YAML. The document must be a mapping holding
    ``required_key``, otherwise it is not the catalog we were pointed at.
    """
    text = read_source(source, session=session)
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise SourceError(f"unable to parse YAML from '{source.location}': {err}") from err
    if not isinstance(data, dict) or required_key not in data:
        raise SourceError(f"'{source.location}' is not a catalog document: missing top-level '{required_key}'")
    return data


def load_landscape(source: Source, session: Optional[requests.Session] = None) -> Dict[str, Any]:
    data = load_document(source, "landscape", session=session)
    if not isinstance(data["landscape"], list):
        raise SourceError(f"'{source.location}': 'landscape' must be a list of categories")
    return data


def load_registry(source: Source, session: Optional[requests.Session] = None) -> Dict[str, Any]:
    data = load_document(source, "projects", session=session)
    if not isinstance(data["projects"], dict):
        raise SourceError(f"'{source.location}': 'projects' must be a mapping of project key to project")
    return data
