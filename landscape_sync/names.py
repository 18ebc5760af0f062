from typing import Dict, Iterator, Mapping, Optional, Set, Tuple

REGISTRY = "registry"
LANDSCAPE = "landscape"


def fold(name: str) -> str:
    return (name or "").strip().lower()


class AliasTable:
    """
    Two-way mapping between the short and full spellings of a project.
    Registering (a, b) makes a resolve to b and b resolve to a.
    """

    def __init__(self) -> None:
        self._pairs: Dict[str, str] = {}

    def register(self, a: str, b: str) -> None:
        a, b = fold(a), fold(b)
        if not a or not b or a == b:
            return
        for name in (a, b):
            old = self._pairs.pop(name, None)
            if old is not None and self._pairs.get(old) == name:
                del self._pairs[old]
        self._pairs[a] = b
        self._pairs[b] = a

    def lookup(self, name: str) -> Optional[str]:
        return self._pairs.get(fold(name))

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(sorted(self._pairs.items()))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and fold(name) in self._pairs

    def __len__(self) -> int:
        return len(self._pairs)


class Canonicalizer:
    """
    Resolves project names from either catalog to the canonical (landscape spelled) name.

    Registry full names go through the static rename table first. Names that are not
    canonical themselves are resolved through the alias table when their counterpart is.
    """

    def __init__(self, renames: Optional[Mapping[str, str]] = None) -> None:
        self.renames: Dict[str, str] = {
            fold(k): fold(v) for k, v in (renames or {}).items() if fold(k) != fold(v)
        }
        chained = sorted(v for v in self.renames.values() if v in self.renames)
        if chained:
            raise ValueError(f"rename targets must not be renamed again: {', '.join(chained)}")
        self.aliases = AliasTable()
        self.names: Set[str] = set()

    def register(self, key: str, full_name: str) -> str:
        short = fold(key)
        full = self._rename(fold(full_name) or short)
        self.names.add(full)
        self.aliases.register(short, full)
        return full

    def canonicalize(self, name: str, source: str = LANDSCAPE) -> str:
        folded = fold(name)
        if source == REGISTRY:
            folded = self._rename(folded)
        if folded in self.names:
            return folded
        mapped = self.aliases.lookup(folded)
        if mapped is not None and mapped in self.names:
            return mapped
        return folded

    def is_known(self, name: str) -> bool:
        return name in self.names

    def _rename(self, folded: str) -> str:
        return self.renames.get(folded, folded)
