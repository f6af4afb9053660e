"""Author alias consolidation.

Merge directives come in three spellings, all normalised to :class:`AliasGroup`:

- ``alias1,alias2=>Canonical`` groups several raw names under an explicit name;
- ``Alias=Canonical`` maps a single raw name;
- ``Name1,Name2,Name3`` merges every listed name into the first one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from contribstats.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AliasGroup:
    canonical: str
    aliases: frozenset[str] = field(default_factory=frozenset)


def _split_names(text: str, directive: str) -> list[str]:
    names = [name.strip() for name in text.split(",")]
    if any(not name for name in names):
        raise ConfigurationError(f"Empty author name in merge directive {directive!r}")
    return names


def _single_name(text: str, directive: str) -> str:
    name = text.strip()
    if not name:
        raise ConfigurationError(f"Missing canonical name in merge directive {directive!r}")
    if "," in name or "=" in name:
        raise ConfigurationError(f"Canonical name must be a single author in {directive!r}")
    return name


def parse_directive(text: str) -> AliasGroup:
    """Parse one merge directive into an :class:`AliasGroup`."""
    directive = text.strip()
    if not directive:
        raise ConfigurationError("Empty merge directive")

    if "=>" in directive:
        if directive.count("=>") > 1:
            raise ConfigurationError(f"More than one '=>' in merge directive {directive!r}")
        left, right = directive.split("=>")
        aliases = _split_names(left, directive)
        canonical = _single_name(right, directive)
    elif "=" in directive:
        if directive.count("=") > 1:
            raise ConfigurationError(f"More than one '=' in merge directive {directive!r}")
        left, right = directive.split("=")
        aliases = _split_names(left, directive)
        canonical = _single_name(right, directive)
    elif "," in directive:
        names = _split_names(directive, directive)
        canonical, aliases = names[0], names[1:]
    else:
        raise ConfigurationError(
            f"Cannot parse merge directive {directive!r} "
            "(expected 'a,b=>Name', 'Alias=Name' or 'Name,Alias,...')"
        )

    return AliasGroup(canonical=canonical, aliases=frozenset(a for a in aliases if a != canonical))


def load_directives(path: str | Path) -> list[str]:
    """Read merge directives from *path*, one per line; ``#`` starts a comment."""
    path = Path(path)
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read merge file {path}: {exc}") from exc

    directives: list[str] = []
    for lineno, line in enumerate(lines, start=1):
        stripped = line.split("#", 1)[0].strip()
        if not stripped:
            continue
        try:
            parse_directive(stripped)
        except ConfigurationError as exc:
            raise ConfigurationError(f"{path}:{lineno}: {exc}") from exc
        directives.append(stripped)
    return directives


def _flatten(mapping: dict[str, str]) -> dict[str, str]:
    """Follow alias chains (a -> b -> c) so every value is a final canonical name."""
    flat: dict[str, str] = {}
    for name in mapping:
        seen = [name]
        target = mapping[name]
        while target in mapping and mapping[target] != target:
            if target in seen:
                chain = " -> ".join(seen + [target])
                raise ConfigurationError(f"Circular author merge: {chain}")
            seen.append(target)
            target = mapping[target]
        flat[name] = target
    return flat


class AliasTable:
    """Read-only mapping from raw author names to canonical contributor names."""

    def __init__(self, mapping: Mapping[str, str] | None = None, ignore_case: bool = True) -> None:
        exact = dict(mapping or {})
        self._exact = MappingProxyType(exact)
        self._folded = MappingProxyType({raw.casefold(): canonical for raw, canonical in exact.items()})
        self.ignore_case = ignore_case

    @classmethod
    def from_groups(cls, groups: Iterable[AliasGroup], ignore_case: bool = True) -> "AliasTable":
        """Build a table from *groups*; a later group wins when two claim the same alias."""
        explicit: dict[str, str] = {}
        canonicals: list[str] = []
        for group in groups:
            for alias in sorted(group.aliases):
                if alias in explicit and explicit[alias] != group.canonical:
                    logger.info("Alias %r moved from %r to %r", alias, explicit[alias], group.canonical)
                # re-insert so case-folded lookups also honour the latest directive
                explicit.pop(alias, None)
                explicit[alias] = group.canonical
            canonicals.append(group.canonical)

        for canonical in canonicals:
            explicit.setdefault(canonical, canonical)
        return cls(_flatten(explicit), ignore_case=ignore_case)

    @classmethod
    def from_directives(cls, directives: Iterable[str], ignore_case: bool = True) -> "AliasTable":
        return cls.from_groups((parse_directive(d) for d in directives), ignore_case=ignore_case)

    def resolve(self, raw_author: str) -> str:
        """Return the canonical name for *raw_author*, or *raw_author* itself."""
        canonical = self._exact.get(raw_author)
        if canonical is not None:
            return canonical
        if self.ignore_case:
            return self._folded.get(raw_author.casefold(), raw_author)
        return raw_author

    def groups(self) -> dict[str, list[str]]:
        """Canonical name -> sorted aliases (the canonical name itself excluded)."""
        result: dict[str, list[str]] = {}
        for raw, canonical in self._exact.items():
            result.setdefault(canonical, [])
            if raw != canonical:
                result[canonical].append(raw)
        return {name: sorted(aliases) for name, aliases in result.items()}

    def __contains__(self, raw_author: object) -> bool:
        return raw_author in self._exact

    def __len__(self) -> int:
        return len(self._exact)

    def __repr__(self) -> str:
        return f"AliasTable({len(self)} names, ignore_case={self.ignore_case})"
