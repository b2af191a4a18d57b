"""Proteins and nucleic acids with positional annotations.

A ``BioPolymer`` is a sequence plus everything positioned on it:
modifications, a catalog of sequence variants not yet applied, variants
already applied to the sequence, truncation products, disulfide bonds and
splice sites. The consensus instance is built once from parsed input;
variant-bearing and decoy instances are always new objects.

Variant instances point back to their consensus through ``consensus``.
The consensus itself stores ``None`` there and exposes itself through the
``consensus_variant`` property.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterable, List, Optional, Tuple

from ..constants import INITIATOR_RESIDUE
from ..modifications import ModificationMap, copy_modification_map
from .annotations import DisulfideBond, SpliceSite, TruncationProduct
from .sequence_variation import SequenceVariation


# =============================================================================
# Variant Naming
# =============================================================================

def combine_simple_strings(variations: Optional[Iterable[SequenceVariation]]) -> str:
    if not variations:
        return ""
    return "_".join(v.simple_string() for v in variations)


def combine_descriptions(variations: Optional[Iterable[SequenceVariation]]) -> str:
    if not variations:
        return ""
    return ", variant:".join(v.description for v in variations)


def get_variant_accession(
    consensus_accession: str,
    applied_variations: Optional[List[SequenceVariation]],
) -> str:
    """Accession of a variant polymer.

    Examples
    --------
    >>> sv = SequenceVariation(4, 4, "P", "V")
    >>> get_variant_accession("P12345", [sv])
    'P12345_P4V'
    """
    if not applied_variations:
        return consensus_accession
    return f"{consensus_accession}_{combine_simple_strings(applied_variations)}"


def get_variant_name(
    name: Optional[str],
    applied_variations: Optional[List[SequenceVariation]],
) -> Optional[str]:
    """Display name of a variant polymer.

    Examples
    --------
    >>> sv = SequenceVariation(4, 4, "P", "V", "missense")
    >>> get_variant_name("Peptidase", [sv])
    'Peptidase variant:missense'
    """
    if name is None and not applied_variations:
        return None
    tag = f" variant:{combine_descriptions(applied_variations)}" if applied_variations else ""
    return f"{name or ''}{tag}"


# =============================================================================
# Polymers
# =============================================================================

@dataclass(eq=False)
class BioPolymer:
    """Sequence with positional annotations.

    Subclasses set ``initiator_residue``: the residue that decoy generation
    keeps at position 1 (None for polymers without one).
    """

    base_sequence: str
    accession: str
    organism: str = ""
    name: Optional[str] = None
    full_name: Optional[str] = None
    gene_names: List[Tuple[str, str]] = field(default_factory=list)
    one_based_modifications: ModificationMap = field(default_factory=dict)
    sequence_variations: List[SequenceVariation] = field(default_factory=list)
    applied_sequence_variations: List[SequenceVariation] = field(default_factory=list)
    truncation_products: List[TruncationProduct] = field(default_factory=list)
    disulfide_bonds: List[DisulfideBond] = field(default_factory=list)
    splice_sites: List[SpliceSite] = field(default_factory=list)
    is_decoy: bool = False
    is_contaminant: bool = False
    sample_name_for_variants: Optional[str] = None
    database_file_path: Optional[str] = None
    consensus: Optional["BioPolymer"] = field(default=None, repr=False)

    initiator_residue: ClassVar[Optional[str]] = None

    @property
    def length(self) -> int:
        return len(self.base_sequence)

    def __len__(self) -> int:
        return len(self.base_sequence)

    @property
    def consensus_variant(self) -> "BioPolymer":
        """The non-variant polymer this one derives from (itself for a consensus)."""
        return self.consensus if self.consensus is not None else self

    @property
    def is_consensus(self) -> bool:
        return self.consensus is None

    @property
    def starts_with_initiator(self) -> bool:
        return self.initiator_residue is not None and self.base_sequence.startswith(self.initiator_residue)

    def create_variant(
        self,
        variant_sequence: str,
        applied_sequence_variations: Optional[List[SequenceVariation]],
        truncation_products: Optional[List[TruncationProduct]],
        one_based_modifications: Optional[ModificationMap],
        sample_name_for_variants: Optional[str] = None,
        disulfide_bonds: Optional[List[DisulfideBond]] = None,
        splice_sites: Optional[List[SpliceSite]] = None,
    ) -> "BioPolymer":
        """Build a variant polymer of the same type that refers to the consensus.

        Parameters
        ----------
        variant_sequence : str
            Sequence with the variants applied
        applied_sequence_variations : list of SequenceVariation
            Applied variants in ``variant_sequence`` coordinates
        truncation_products : list of TruncationProduct
            Products in ``variant_sequence`` coordinates
        one_based_modifications : dict
            Modifications in ``variant_sequence`` coordinates
        sample_name_for_variants : str, optional
            Sample whose genotype produced this variant
        disulfide_bonds, splice_sites : list, optional
            Remapped annotations; default to this polymer's

        Returns
        -------
        BioPolymer
            New instance of ``type(self)``
        """
        consensus = self.consensus_variant
        applied = list(applied_sequence_variations or [])
        return type(self)(
            base_sequence=variant_sequence,
            accession=get_variant_accession(consensus.accession, applied),
            organism=consensus.organism,
            name=get_variant_name(consensus.name, applied),
            full_name=get_variant_name(consensus.full_name, applied),
            gene_names=list(consensus.gene_names),
            one_based_modifications=copy_modification_map(one_based_modifications),
            sequence_variations=list(consensus.sequence_variations),
            applied_sequence_variations=applied,
            truncation_products=list(truncation_products or []),
            disulfide_bonds=list(self.disulfide_bonds if disulfide_bonds is None else disulfide_bonds),
            splice_sites=list(self.splice_sites if splice_sites is None else splice_sites),
            is_decoy=self.is_decoy,
            is_contaminant=self.is_contaminant,
            sample_name_for_variants=sample_name_for_variants,
            database_file_path=self.database_file_path,
            consensus=consensus,
        )

    def add_truncation_products(self, products: Iterable[TruncationProduct]) -> int:
        """Append truncation products during construction, skipping duplicates.

        Returns the number of products added.
        """
        added = 0
        for product in products:
            if product in self.truncation_products:
                continue
            self.truncation_products.append(product)
            added += 1
        return added

    def get_variant_biopolymers(self, params=None) -> List["BioPolymer"]:
        """All proteoforms of this polymer, consensus first.

        See ``alphaproteoform.variants.expansion.get_variant_biopolymers``.
        """
        from ..variants.expansion import get_variant_biopolymers
        return get_variant_biopolymers(self, params)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(accession={self.accession!r}, base_sequence={self.base_sequence!r})"


@dataclass(eq=False, repr=False)
class Protein(BioPolymer):
    """Protein; decoys keep a leading initiator methionine in place."""

    initiator_residue: ClassVar[Optional[str]] = INITIATOR_RESIDUE


@dataclass(eq=False, repr=False)
class RNA(BioPolymer):
    """Nucleic acid; no residue is pinned during decoy generation."""

    initiator_residue: ClassVar[Optional[str]] = None
