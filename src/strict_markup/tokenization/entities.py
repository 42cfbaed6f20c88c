"""Entity reference resolution for the markup tokenizer.

Only names present in the configured whitelist resolve; anything else is
rejected instead of being passed through as raw text.
"""

from typing import Dict, Mapping, Optional

from strict_markup.shared.config import DEFAULT_ENTITIES


class EntityResolver:
    """Lookup table turning ``&name;`` references into literal text."""

    def __init__(self, entities: Optional[Mapping[str, str]] = None) -> None:
        self._table: Dict[str, str] = dict(
            DEFAULT_ENTITIES if entities is None else entities
        )
        self.max_length = max((len(name) for name in self._table), default=0)

    def __contains__(self, name: str) -> bool:
        return name in self._table

    def __len__(self) -> int:
        return len(self._table)

    def resolve(self, name: str) -> Optional[str]:
        """Return the literal text for ``name``, or None when it is unknown."""
        return self._table.get(name)

    def accepts_prefix(self, partial: str) -> bool:
        """Check whether ``partial`` could still grow into a known name."""
        return len(partial) <= self.max_length

    @property
    def names(self) -> Mapping[str, str]:
        return dict(self._table)
