"""Slide decoys: a reproducible composition-preserving shuffle.

Each residue moves ``num_slides`` positions along a reflective walk
(``get_old_slided_index``), so the decoy has the target's composition and
length but not its order. The same input always gives the same decoy.
Proteins starting with the initiator methionine keep it at position 1.

All positional annotations move with their residue through the inverse
permutation. Sequence variants keep their span length; their original
sequence becomes the decoy residues under the moved span and their
variant sequence is slid on its own.
"""

import logging
from typing import List, Optional

import numpy as np

from ..biopolymer.annotations import TruncationProduct
from ..biopolymer.polymer import BioPolymer
from ..biopolymer.sequence_variation import SequenceVariation
from ..constants import DEFAULT_DECOY_IDENTIFIER, DEFAULT_NUM_SLIDES, STOP_CODON
from ..modifications import ModificationMap
from .indexing import slide_sequence
from .reverse import build_decoy_variation, remap_modifications, remap_sites, tag_decoy

logger = logging.getLogger(__name__)


def one_based_position_map(new_indices: np.ndarray) -> np.ndarray:
    """Turn a 0-based source -> decoy permutation into a 1-based position map."""
    position_map = np.zeros(new_indices.shape[0] + 1, dtype=np.int64)
    position_map[1:] = new_indices + 1
    return position_map


def slide_truncation_products(
    products: List[TruncationProduct],
    position_map: np.ndarray,
    decoy_identifier: str,
) -> List[TruncationProduct]:
    """Move truncation product bounds through the slide; open bounds stay open."""
    length = len(position_map) - 1
    slid = []
    for p in products:
        begin = p.begin if p.begin is None or not 1 <= p.begin <= length else int(position_map[p.begin])
        end = p.end if p.end is None or not 1 <= p.end <= length else int(position_map[p.end])
        if begin is not None and end is not None and begin > end:
            begin, end = end, begin
        slid.append(TruncationProduct(begin, end, tag_decoy(p.type, decoy_identifier)))
    return slid


def slide_variant_sequence(variant_sequence: str, num_slides: int, initiator_preserved: bool):
    """Slide a variant's own sequence; a trailing stop stays last.

    Returns
    -------
    slided : str
    new_indices : np.ndarray
        Offset within the slid body -> offset in the result
    """
    stop_gain = variant_sequence.endswith(STOP_CODON)
    body = variant_sequence[:-1] if stop_gain else variant_sequence
    slided, _, new_indices = slide_sequence(body, num_slides, initiator_preserved)
    if stop_gain:
        slided += STOP_CODON
    return slided, new_indices


def slide_variation(
    sv: SequenceVariation,
    decoy_sequence: str,
    position_map: np.ndarray,
    num_slides: int,
    initiator: Optional[str],
    decoy_identifier: str,
) -> Optional[SequenceVariation]:
    """Move one variant onto the slid sequence.

    Parameters
    ----------
    sv : SequenceVariation
        Target variant
    decoy_sequence : str
        Slid sequence
    position_map : np.ndarray
        1-based target position -> decoy position
    num_slides : int
        Slide distance
    initiator : str or None
        Residue pinned at position 1 of the target
    decoy_identifier : str

    Returns
    -------
    SequenceVariation or None
        None when the moved span runs past the sequence end or the edit
        is not real on the decoy
    """
    length = len(decoy_sequence)
    if sv.begin > length:
        logger.debug(f"Dropping slide decoy of {sv.simple_string()}: begins past the sequence end")
        return None

    begin = int(position_map[sv.begin])
    end = begin + (sv.end - sv.begin)
    if end > length:
        logger.debug(f"Dropping slide decoy of {sv.simple_string()}: span runs past the sequence end")
        return None

    original = decoy_sequence[begin - 1:end] if sv.original_sequence else ""
    pin_initiator = (
        initiator is not None
        and sv.begin == 1
        and decoy_sequence.startswith(initiator)
        and sv.variant_sequence.startswith(initiator)
    )
    variant, variant_new_indices = slide_variant_sequence(sv.variant_sequence, num_slides, pin_initiator)

    mods: ModificationMap = {}
    for key, mod_list in sv.one_based_modifications.items():
        if key < 1:
            continue
        if key < sv.begin:
            new_key = int(position_map[key]) if key <= length else key
        else:
            offset = key - sv.begin
            if offset < variant_new_indices.shape[0]:
                offset = int(variant_new_indices[offset])
            new_key = begin + offset
        mods.setdefault(new_key, []).extend(mod_list)

    return build_decoy_variation(sv, begin, end, original, variant, mods, decoy_identifier)


def slide_variations(
    variations: List[SequenceVariation],
    decoy_sequence: str,
    position_map: np.ndarray,
    num_slides: int,
    initiator: Optional[str],
    decoy_identifier: str,
) -> List[SequenceVariation]:
    slid = []
    for sv in variations:
        decoy = slide_variation(sv, decoy_sequence, position_map, num_slides, initiator, decoy_identifier)
        if decoy is not None:
            slid.append(decoy)
    return slid


# =============================================================================
# Slide Decoy
# =============================================================================

def generate_slide_decoy(
    polymer: BioPolymer,
    decoy_identifier: str = DEFAULT_DECOY_IDENTIFIER,
    num_slides: int = DEFAULT_NUM_SLIDES,
) -> BioPolymer:
    """Slide decoy of one polymer.

    Parameters
    ----------
    polymer : BioPolymer
        Target polymer
    decoy_identifier : str
        Prefix for accession, names and annotation descriptions
    num_slides : int
        Slide distance (bumped by one when it is a multiple of the slid
        length)

    Returns
    -------
    BioPolymer
        New decoy polymer of the same type with the same composition

    Examples
    --------
    >>> from alphaproteoform.biopolymer.polymer import Protein
    >>> decoy = generate_slide_decoy(Protein("MPEPTIDEK", "P1"))
    >>> decoy.base_sequence[0], sorted(decoy.base_sequence) == sorted("MPEPTIDEK")
    ('M', True)
    """
    initiator_preserved = polymer.starts_with_initiator
    slided, _, new_indices = slide_sequence(polymer.base_sequence, num_slides, initiator_preserved)
    position_map = one_based_position_map(new_indices)
    initiator = polymer.initiator_residue

    return type(polymer)(
        base_sequence=slided,
        accession=tag_decoy(polymer.accession, decoy_identifier),
        organism=polymer.organism,
        name=tag_decoy(polymer.name, decoy_identifier),
        full_name=tag_decoy(polymer.full_name, decoy_identifier),
        gene_names=list(polymer.gene_names),
        one_based_modifications=remap_modifications(polymer.one_based_modifications, position_map),
        sequence_variations=slide_variations(
            polymer.sequence_variations, slided, position_map, num_slides, initiator, decoy_identifier
        ),
        applied_sequence_variations=slide_variations(
            polymer.applied_sequence_variations, slided, position_map, num_slides, initiator, decoy_identifier
        ),
        truncation_products=slide_truncation_products(polymer.truncation_products, position_map, decoy_identifier),
        disulfide_bonds=remap_sites(polymer.disulfide_bonds, position_map, decoy_identifier, "DISULFIDE BOND: "),
        splice_sites=remap_sites(polymer.splice_sites, position_map, decoy_identifier, "SPLICE SITE: "),
        is_decoy=True,
        is_contaminant=polymer.is_contaminant,
        sample_name_for_variants=polymer.sample_name_for_variants,
        database_file_path=polymer.database_file_path,
    )
