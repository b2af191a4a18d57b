"""Reverse decoys with every annotation moved onto the reversed sequence.

The decoy sequence is the target read back to front. Proteins that start
with the initiator methionine keep it at position 1 and reverse the rest:

    MPEPTIDE -> MEDITPEP
    APEPTIDE -> EDITPEPA

Position rules for a sequence of length L
------------------------------------------
- Residue-level annotations (modifications, disulfide bonds, splice
  sites): p -> L - p + 1, or with a pinned initiator 1 -> 1 and
  p -> L - p + 2
- Truncation products: [b, e] -> [L - e + 1, L - b + 1]
- Nucleic-acid sequence variants: span reversal, reversed strings,
  modification keys L - k + 1
- Protein sequence variants: the branch table in
  ``reverse_protein_variation`` (stop gain, start loss, initiator gain,
  pinned initiator)

Decoy annotation descriptions carry the decoy identifier so they never
collide with target annotations.
"""

import logging
from typing import List, Optional

from ..biopolymer.annotations import TruncationProduct
from ..biopolymer.polymer import BioPolymer
from ..biopolymer.sequence_variation import SequenceVariation
from ..constants import DEFAULT_DECOY_IDENTIFIER, STOP_CODON
from ..modifications import ModificationMap
from .indexing import reverse_position_map

logger = logging.getLogger(__name__)


def tag_decoy(text: Optional[str], decoy_identifier: str) -> Optional[str]:
    """Prefix a description, name or accession with the decoy identifier."""
    if text is None:
        return None
    return f"{decoy_identifier}{text}"


def reverse_sequence(sequence: str, initiator: Optional[str]) -> str:
    """Reverse a sequence, keeping a leading initiator in place.

    Examples
    --------
    >>> reverse_sequence("MPEPTIDE", "M")
    'MEDITPEP'
    >>> reverse_sequence("AUGCUA", None)
    'AUCGUA'
    """
    if initiator is not None and sequence.startswith(initiator):
        return initiator + sequence[:0:-1]
    return sequence[::-1]


# =============================================================================
# Residue-Level Annotations
# =============================================================================

def remap_modifications(mods: ModificationMap, position_map) -> ModificationMap:
    """Move modifications through a 1-based position map.

    The modification objects themselves are carried over, in new lists.
    Positions outside the map are dropped.
    """
    remapped: ModificationMap = {}
    length = len(position_map) - 1
    for position, mod_list in mods.items():
        if position < 1 or position > length:
            logger.debug(f"Dropping modifications at position {position} outside 1..{length}")
            continue
        remapped.setdefault(int(position_map[position]), []).extend(mod_list)
    return remapped


def remap_sites(sites: list, position_map, decoy_identifier: str, label: str = "") -> list:
    """Move disulfide bonds or splice sites through a position map."""
    length = len(position_map) - 1
    remapped = []
    for site in sites:
        if not (1 <= site.begin <= length and 1 <= site.end <= length):
            continue
        begin = int(position_map[site.begin])
        end = int(position_map[site.end])
        remapped.append(type(site)(
            min(begin, end), max(begin, end), tag_decoy(f"{label}{site.description}", decoy_identifier)
        ))
    return remapped


def reverse_truncation_products(
    products: List[TruncationProduct],
    length: int,
    decoy_identifier: str,
) -> List[TruncationProduct]:
    """Reverse truncation product spans: [b, e] -> [L - e + 1, L - b + 1].

    An open end becomes an open begin and vice versa.

    Examples
    --------
    >>> [(p.begin, p.end) for p in reverse_truncation_products(
    ...     [TruncationProduct(1, 5, "chain"), TruncationProduct(9, 10, "chain")], 10, "DECOY_")]
    [(6, 10), (1, 2)]
    """
    reversed_products = []
    for p in products:
        begin = None if p.end is None else length - p.end + 1
        end = None if p.begin is None else length - p.begin + 1
        reversed_products.append(TruncationProduct(begin, end, tag_decoy(p.type, decoy_identifier)))
    return reversed_products


# =============================================================================
# Sequence Variants
# =============================================================================

def build_decoy_variation(
    sv: SequenceVariation,
    begin: int,
    end: int,
    original: str,
    variant: str,
    mods: ModificationMap,
    decoy_identifier: str,
) -> Optional[SequenceVariation]:
    """Decoy counterpart of ``sv``, or None when it is not a valid edit.

    Variant-scoped modifications are not checked against the span.
    """
    try:
        return SequenceVariation(
            begin, end, original, variant,
            tag_decoy(f"VARIANT: {sv.description}", decoy_identifier),
            sv.variant_call,
            mods,
            check_modification_sites=False,
        )
    except ValueError as e:
        logger.debug(f"Dropping decoy of variant {sv.simple_string()}: {e}")
        return None


def reverse_nucleic_acid_variation(
    sv: SequenceVariation,
    length: int,
    decoy_identifier: str,
) -> Optional[SequenceVariation]:
    """Reverse a variant on a polymer without a pinned initiator.

    The span [b, e] becomes [L - e + 1, L - b + 1], both sequences are
    reversed and modification keys k become L - k + 1.
    """
    mods: ModificationMap = {}
    for key, mod_list in sv.one_based_modifications.items():
        new_key = length - key + 1
        if new_key < 1:
            continue
        mods.setdefault(new_key, []).extend(mod_list)

    return build_decoy_variation(
        sv,
        length - sv.end + 1,
        length - sv.begin + 1,
        sv.original_sequence[::-1],
        sv.variant_sequence[::-1],
        mods,
        decoy_identifier,
    )


def reverse_protein_variation(
    sv: SequenceVariation,
    polymer: BioPolymer,
    decoy_identifier: str,
) -> Optional[SequenceVariation]:
    """Reverse a protein sequence variant.

    Parameters
    ----------
    sv : SequenceVariation
        Variant on the target protein
    polymer : BioPolymer
        Target protein (supplies L and the initiator rule)
    decoy_identifier : str
        Prefix for the decoy variant description

    Returns
    -------
    SequenceVariation or None
        Decoy variant, or None when the reversed edit is not a real edit

    Notes
    -----
    Coordinates (L = protein length):

    - stop gain: same span; original reversed; variant reversed with the
      stop kept last ("AB*" -> "BA*")
    - single residue at position 1 gaining or losing the initiator: same
      span and sequences (position 1 is pinned)
    - start loss over a longer span ("MA" -> "A"): [L - e + 2, L], with
      the initiator dropped from the reversed original
      (the decoy of "MA" -> "A" is "A" -> "A", which is not an edit, so
      a decoy can carry fewer sequence variants than its target)
    - initiator kept in a longer span ("MA" -> "MI"): [L - e + 2, L], the
      initiator dropped from both reversed sequences
    - protein starting with the initiator: [L - e + 2, L - b + 2]
    - otherwise: [L - e + 1, L - b + 1]

    Modification keys, with V = L + len(variant) - len(original):

    - stop gain: V - k + 1, and the modification also stays at k when
      k is the variant begin
    - k == 1: stays at 1 when position 1 remains in place (variant
      starts with the initiator, or the protein does and the variant is
      downstream), otherwise L
    - protein starting with the initiator: V - k + 2
    - otherwise: V - k + 1
    """
    initiator = polymer.initiator_residue
    length = polymer.length
    starts_with_initiator = polymer.starts_with_initiator
    variant_length = length + sv.length_change
    original_reversed = sv.original_sequence[::-1]
    variant_reversed = sv.variant_sequence[::-1]

    original_has_initiator = sv.original_sequence.startswith(initiator)
    variant_has_initiator = sv.variant_sequence.startswith(initiator)

    mods: ModificationMap = {}
    for key, mod_list in sv.one_based_modifications.items():
        if sv.is_stop_gain:
            if key == sv.begin:
                mods.setdefault(key, []).extend(mod_list)
            new_key = variant_length - key + 1
        elif key == 1:
            pinned = variant_has_initiator or (starts_with_initiator and sv.begin > 1)
            new_key = 1 if pinned else length
        elif starts_with_initiator:
            new_key = variant_length - key + 2
        else:
            new_key = variant_length - key + 1
        if new_key < 1:
            logger.debug(f"Dropping variant modification at {key} of {sv.simple_string()}")
            continue
        mods.setdefault(new_key, []).extend(mod_list)

    if sv.is_stop_gain:
        begin, end = sv.begin, sv.end
        original = original_reversed
        variant = sv.variant_sequence[:-1][::-1] + STOP_CODON
    elif sv.begin == 1 and sv.end == 1 and (original_has_initiator or variant_has_initiator):
        begin, end = sv.begin, sv.end
        original, variant = sv.original_sequence, sv.variant_sequence
    elif sv.begin == 1 and original_has_initiator and not variant_has_initiator:
        begin, end = length - sv.end + 2, length
        original, variant = original_reversed[:-1], variant_reversed
    elif sv.begin == 1 and original_has_initiator and variant_has_initiator:
        begin, end = length - sv.end + 2, length
        original, variant = original_reversed[:-1], variant_reversed[:-1]
    elif starts_with_initiator:
        begin, end = length - sv.end + 2, length - sv.begin + 2
        original, variant = original_reversed, variant_reversed
    else:
        begin, end = length - sv.end + 1, length - sv.begin + 1
        original, variant = original_reversed, variant_reversed

    return build_decoy_variation(sv, begin, end, original, variant, mods, decoy_identifier)


def reverse_variations(
    variations: List[SequenceVariation],
    polymer: BioPolymer,
    decoy_identifier: str,
) -> List[SequenceVariation]:
    """Reverse every variant, dropping those without a decoy counterpart."""
    reversed_variations = []
    for sv in variations:
        if polymer.initiator_residue is not None:
            decoy = reverse_protein_variation(sv, polymer, decoy_identifier)
        else:
            decoy = reverse_nucleic_acid_variation(sv, polymer.length, decoy_identifier)
        if decoy is not None:
            reversed_variations.append(decoy)
    return reversed_variations


# =============================================================================
# Reverse Decoy
# =============================================================================

def generate_reverse_decoy(
    polymer: BioPolymer,
    decoy_identifier: str = DEFAULT_DECOY_IDENTIFIER,
) -> BioPolymer:
    """Reverse decoy of one polymer.

    Parameters
    ----------
    polymer : BioPolymer
        Target polymer (consensus or variant-bearing)
    decoy_identifier : str
        Prefix for accession, names and annotation descriptions

    Returns
    -------
    BioPolymer
        New decoy polymer of the same type

    Examples
    --------
    >>> from alphaproteoform.biopolymer.polymer import Protein
    >>> decoy = generate_reverse_decoy(Protein("MPEPTIDE", "P1"))
    >>> decoy.base_sequence, decoy.accession, decoy.is_decoy
    ('MEDITPEP', 'DECOY_P1', True)
    """
    length = polymer.length
    position_map = reverse_position_map(length, polymer.starts_with_initiator)

    return type(polymer)(
        base_sequence=reverse_sequence(polymer.base_sequence, polymer.initiator_residue),
        accession=tag_decoy(polymer.accession, decoy_identifier),
        organism=polymer.organism,
        name=tag_decoy(polymer.name, decoy_identifier),
        full_name=tag_decoy(polymer.full_name, decoy_identifier),
        gene_names=list(polymer.gene_names),
        one_based_modifications=remap_modifications(polymer.one_based_modifications, position_map),
        sequence_variations=reverse_variations(polymer.sequence_variations, polymer, decoy_identifier),
        applied_sequence_variations=reverse_variations(
            polymer.applied_sequence_variations, polymer, decoy_identifier
        ),
        truncation_products=reverse_truncation_products(polymer.truncation_products, length, decoy_identifier),
        disulfide_bonds=remap_sites(polymer.disulfide_bonds, position_map, decoy_identifier, "DISULFIDE BOND: "),
        splice_sites=remap_sites(polymer.splice_sites, position_map, decoy_identifier, "SPLICE SITE: "),
        is_decoy=True,
        is_contaminant=polymer.is_contaminant,
        sample_name_for_variants=polymer.sample_name_for_variants,
        database_file_path=polymer.database_file_path,
    )
