"""
Tag Registry.

Maps annotation names to the tag kind that parses them and names the
annotations that act as nested-parameter markers inside hash notation.
A registry is immutable: it is built once and passed explicitly to the
normalizer and the hash-notation parser. Changing a binding produces a
new registry.
"""

from collections.abc import Iterable, Mapping
from functools import lru_cache
from types import MappingProxyType
from typing import Optional

from docexport.models.base import TagKind


DEFAULT_TAG_KINDS: dict[str, TagKind] = {
    # Variable-carrying annotations
    "param": TagKind.VARIABLE,
    "type": TagKind.VARIABLE,
    "var": TagKind.VARIABLE,
    "property": TagKind.VARIABLE,
    "property-read": TagKind.VARIABLE,
    "property-write": TagKind.VARIABLE,
    "global": TagKind.VARIABLE,
    # Typed annotations
    "return": TagKind.TYPED,
    "throws": TagKind.TYPED,
    # Cross references
    "see": TagKind.REFERENCE,
    "uses": TagKind.REFERENCE,
    "used-by": TagKind.REFERENCE,
    "link": TagKind.REFERENCE,
    "covers": TagKind.REFERENCE,
    # Versioned annotations
    "since": TagKind.VERSION,
    "deprecated": TagKind.VERSION,
    "version": TagKind.VERSION,
}

# Annotations that introduce one entry of a hash-notation block
DEFAULT_HASH_MARKERS = frozenset({"type"})


class TagRegistry:
    """Immutable registry of annotation kinds.

    Usage:
        registry = TagRegistry.default()
        registry.kind_for("param")      # TagKind.VARIABLE
        registry.is_hash_marker("type") # True

        # Bind an extra annotation without touching the original
        custom = registry.with_overrides(kinds={"option": TagKind.VARIABLE})
    """

    __slots__ = ("_kinds", "_hash_markers", "_default_kind")

    def __init__(
        self,
        kinds: Optional[Mapping[str, TagKind]] = None,
        hash_markers: Iterable[str] = DEFAULT_HASH_MARKERS,
        default_kind: TagKind = TagKind.PLAIN,
    ) -> None:
        """Initialize the registry.

        Args:
            kinds: Annotation name -> tag kind bindings
            hash_markers: Annotation names that mark hash-notation entries
            default_kind: Kind used for names without a binding

        Raises:
            ValueError: If a hash marker is not bound to the variable kind
        """
        bound = {name.lower(): TagKind(kind) for name, kind in (kinds or {}).items()}
        markers = frozenset(name.lower() for name in hash_markers)

        for marker in markers:
            bound.setdefault(marker, TagKind.VARIABLE)
            if bound[marker] != TagKind.VARIABLE:
                raise ValueError(f"Hash marker '@{marker}' must be a variable tag")

        self._kinds = MappingProxyType(bound)
        self._hash_markers = markers
        self._default_kind = TagKind(default_kind)

    @classmethod
    def default(cls) -> "TagRegistry":
        """Create a registry with the standard annotation bindings."""
        return cls(DEFAULT_TAG_KINDS, DEFAULT_HASH_MARKERS)

    @property
    def hash_markers(self) -> frozenset[str]:
        """Annotation names that mark hash-notation entries."""
        return self._hash_markers

    @property
    def default_kind(self) -> TagKind:
        """Kind used for unregistered annotation names."""
        return self._default_kind

    def kind_for(self, name: str) -> TagKind:
        """Get the tag kind bound to an annotation name.

        Args:
            name: Annotation name, with or without the leading ``@``

        Returns:
            Bound kind, or the default kind for unknown names
        """
        return self._kinds.get(name.lstrip("@").lower(), self._default_kind)

    def is_hash_marker(self, name: str) -> bool:
        """Check if an annotation introduces a hash-notation entry."""
        return name.lstrip("@").lower() in self._hash_markers

    def names(self) -> list[str]:
        """List all explicitly bound annotation names."""
        return sorted(self._kinds)

    def with_overrides(
        self,
        kinds: Optional[Mapping[str, TagKind]] = None,
        hash_markers: Optional[Iterable[str]] = None,
    ) -> "TagRegistry":
        """Return a new registry with extra or replaced bindings.

        Args:
            kinds: Bindings to add or replace
            hash_markers: Replacement set of hash markers

        Returns:
            New registry; this one is left unchanged
        """
        merged = dict(self._kinds)
        merged.update({name.lower(): kind for name, kind in (kinds or {}).items()})
        markers = self._hash_markers if hash_markers is None else hash_markers
        return TagRegistry(merged, markers, self._default_kind)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lstrip("@").lower() in self._kinds

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagRegistry):
            return NotImplemented
        return (
            dict(self._kinds) == dict(other._kinds)
            and self._hash_markers == other._hash_markers
            and self._default_kind == other._default_kind
        )

    def __hash__(self) -> int:
        return hash((frozenset(self._kinds.items()), self._hash_markers, self._default_kind))

    def __repr__(self) -> str:
        return f"TagRegistry({len(self._kinds)} tags, markers={sorted(self._hash_markers)})"


@lru_cache(maxsize=1)
def default_registry() -> TagRegistry:
    """Get the process-wide default registry (built once)."""
    return TagRegistry.default()
