"""Positional annotations carried by a polymer.

Truncation products, disulfide bonds and splice sites are plain 1-based
ranges with a text label. They are immutable: transformations that move
them build new instances.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class TruncationProduct:
    """Annotated proteolysis product (signal peptide, propeptide, chain, ...).

    A ``None`` begin means the product starts at the first residue; a
    ``None`` end means it runs to the last residue.
    """

    begin: Optional[int]
    end: Optional[int]
    type: str = ""

    def resolved_bounds(self, sequence_length: int) -> Tuple[int, int]:
        """Concrete 1-based bounds on a sequence of ``sequence_length``."""
        begin = 1 if self.begin is None else self.begin
        end = sequence_length if self.end is None else self.end
        return begin, end

    def with_bounds(self, begin: Optional[int], end: Optional[int], type: Optional[str] = None) -> "TruncationProduct":
        return TruncationProduct(begin, end, self.type if type is None else type)


@dataclass(frozen=True)
class DisulfideBond:
    """Disulfide bond between two cysteines (``begin == end`` for an intrachain site)."""

    begin: int
    end: int
    description: str = ""

    @classmethod
    def at(cls, position: int, description: str = "") -> "DisulfideBond":
        return cls(position, position, description)


@dataclass(frozen=True)
class SpliceSite:
    """Splice junction annotated on the sequence."""

    begin: int
    end: int
    description: str = ""

    @classmethod
    def at(cls, position: int, description: str = "") -> "SpliceSite":
        return cls(position, position, description)
