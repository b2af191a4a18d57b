"""Decoy generation for target-decoy searches on whole polymers.

Two methods are available:

1. **Reverse** (default): sequence read back to front, initiator
   methionine pinned at position 1
2. **Slide**: reproducible composition-preserving shuffle

Both methods carry every positional annotation (modifications, sequence
variants, truncation products, disulfide bonds, splice sites) onto the
decoy sequence.

Example
-------
>>> from alphaproteoform.biopolymer.polymer import Protein
>>> decoys = generate_decoys([Protein("MPEPTIDE", "P1")], decoy_type="reverse")
>>> decoys[0].base_sequence, decoys[0].accession
('MEDITPEP', 'DECOY_P1')
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Union

from ..biopolymer.polymer import BioPolymer
from ..constants import DEFAULT_DECOY_IDENTIFIER, DEFAULT_NUM_SLIDES
from ..modifications import count_modifications
from .reverse import generate_reverse_decoy
from .slide import generate_slide_decoy

logger = logging.getLogger(__name__)


class DecoyType(Enum):
    """Decoy generation methods."""
    NONE = "none"
    REVERSE = "reverse"
    SLIDE = "slide"


@dataclass
class DecoyParams:
    """Parameters for decoy generation."""

    decoy_type: DecoyType = DecoyType.REVERSE

    # Prefix of decoy accessions, names and annotation descriptions
    decoy_identifier: str = DEFAULT_DECOY_IDENTIFIER

    # Slide distance for DecoyType.SLIDE
    num_slides: int = DEFAULT_NUM_SLIDES

    def __post_init__(self):
        if not self.decoy_identifier:
            raise ValueError("decoy_identifier must not be empty")
        if self.num_slides < 1:
            raise ValueError(f"num_slides must be positive, got {self.num_slides}")

    @classmethod
    def for_decoy_type(cls, decoy_type: Union[str, DecoyType], **kwargs) -> 'DecoyParams':
        """Create parameters for a decoy type given as enum or name.

        Args:
            decoy_type: DecoyType or its value ("none", "reverse", "slide")

        Returns:
            DecoyParams with the remaining fields from kwargs or defaults
        """
        if not isinstance(decoy_type, DecoyType):
            try:
                decoy_type = DecoyType(str(decoy_type).lower())
            except ValueError:
                raise ValueError(
                    f"Unknown decoy type: {decoy_type}. "
                    f"Must be 'none', 'reverse', or 'slide'"
                ) from None
        return cls(decoy_type=decoy_type, **kwargs)


def generate_decoys(
    polymers: Optional[Iterable[BioPolymer]],
    decoy_type: Union[str, DecoyType] = DecoyType.REVERSE,
    decoy_identifier: str = DEFAULT_DECOY_IDENTIFIER,
    num_slides: int = DEFAULT_NUM_SLIDES,
) -> List[BioPolymer]:
    """Generate one decoy per target polymer.

    Parameters
    ----------
    polymers : iterable of BioPolymer or None
        Target polymers; they are never modified
    decoy_type : str or DecoyType
        'reverse' (default), 'slide' or 'none'
    decoy_identifier : str
        Prefix for decoy accessions and annotation descriptions
    num_slides : int
        Slide distance for 'slide'

    Returns
    -------
    decoys : List[BioPolymer]
        Decoys sorted by accession; empty for 'none' or None input

    Raises
    ------
    ValueError
        If decoy_type is not recognized
    """
    params = DecoyParams.for_decoy_type(decoy_type, decoy_identifier=decoy_identifier, num_slides=num_slides)

    if polymers is None or params.decoy_type == DecoyType.NONE:
        return []

    targets = list(polymers)
    logger.info(f"Generating {len(targets):,} decoys (method: {params.decoy_type.value})...")

    if params.decoy_type == DecoyType.REVERSE:
        decoys = [generate_reverse_decoy(p, params.decoy_identifier) for p in targets]
    else:
        decoys = [generate_slide_decoy(p, params.decoy_identifier, params.num_slides) for p in targets]

    decoys.sort(key=lambda p: p.accession)

    n_variants = sum(len(d.sequence_variations) for d in decoys)
    n_mods = sum(count_modifications(d.one_based_modifications) for d in decoys)
    logger.info(
        f"✓ Generated {len(decoys):,} decoys "
        f"({n_variants:,} sequence variants, {n_mods:,} modifications)"
    )

    return decoys
