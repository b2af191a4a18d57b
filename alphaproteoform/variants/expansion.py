"""Proteoform expansion entry points.

``get_variant_biopolymers`` chooses how a polymer's variant catalog is
expanded:

- every variant carries genotype calls: genotype-driven application
  (``apply_variants``), one proteoform per observed haplotype
- otherwise (annotated variants without sample data): all combinations of
  the catalog up to the per-isoform budget
  (``apply_all_variant_combinations``)

The consensus polymer is always returned first.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from itertools import combinations
from typing import Iterator, List, Optional, Sequence

from ..biopolymer.polymer import BioPolymer
from ..biopolymer.sequence_variation import SequenceVariation
from ..constants import (
    NUCLEOTIDE_SUBSTITUTION_TYPE,
    PUTATIVE_SUBSTITUTION_DESCRIPTION,
    SUBSTITUTION_SEPARATOR,
)
from .application import (
    PolymerT,
    VariantApplicationParams,
    apply_single_variant,
    apply_variants,
    deduplicate_by_sequence,
    filter_resolvable_variants,
)

logger = logging.getLogger(__name__)


def get_variant_biopolymers(
    polymer: PolymerT,
    params: Optional[VariantApplicationParams] = None,
) -> List[PolymerT]:
    """All proteoforms of a polymer, consensus first.

    Parameters
    ----------
    polymer : BioPolymer
        Consensus polymer with its variant catalog
    params : VariantApplicationParams, optional
        Budgets (defaults: 4 variants per isoform, depth 1, 100 isoforms)

    Returns
    -------
    List[BioPolymer]
        Consensus followed by each distinct variant proteoform

    Examples
    --------
    >>> from alphaproteoform.biopolymer.polymer import Protein
    >>> vcf = "1\\t100\\t.\\tC\\tG\\t.\\tPASS\\tANN=G|missense\\tGT:AD:DP\\t1/1:0,30:30"
    >>> protein = Protein("MPEPTIDE", "P1", sequence_variations=[
    ...     SequenceVariation(4, 4, "P", "V", "missense", vcf)])
    >>> [p.base_sequence for p in get_variant_biopolymers(protein)]
    ['MPEPTIDE', 'MPEVTIDE']
    """
    params = params or VariantApplicationParams()
    polymer = convert_nucleotide_substitution_modifications(polymer)
    variations = polymer.sequence_variations

    lacks_genotypes = any(
        v.variant_call is None or not v.variant_call.has_genotypes for v in variations
    )
    if variations and lacks_genotypes and all(v.are_valid() for v in variations):
        proteoforms = list(apply_all_variant_combinations(
            polymer,
            variations,
            params.max_sequence_variants_per_isoform,
            params.max_sequence_variant_isoforms,
        ))
    else:
        proteoforms = apply_variants(polymer, variations, params)

    result = deduplicate_by_sequence([polymer] + proteoforms)
    result = result[:params.max_sequence_variant_isoforms]
    logger.debug(f"✓ {polymer.accession}: {len(result)} proteoforms (including consensus)")
    return result


def apply_all_variant_combinations(
    polymer: PolymerT,
    variations: Sequence[SequenceVariation],
    max_variants_per_isoform: int,
    max_isoforms: int,
) -> Iterator[PolymerT]:
    """Yield the polymer, then every combination of its variants.

    Combinations are enumerated by increasing size (1 up to
    ``max_variants_per_isoform``) in index order; each is applied from the
    most downstream variant to the most upstream. Enumeration stops after
    ``max_isoforms`` polymers have been yielded. Variants whose coordinates
    lie outside the consensus sequence are left out.

    Parameters
    ----------
    polymer : BioPolymer
        Polymer to expand (yielded first)
    variations : sequence of SequenceVariation
        Variants to combine
    max_variants_per_isoform : int
        Largest combination size
    max_isoforms : int
        Maximum number of polymers yielded

    Yields
    ------
    BioPolymer
    """
    variations = filter_resolvable_variants(polymer, variations)

    count = 0
    yield polymer
    count += 1
    if count >= max_isoforms:
        return

    largest = min(len(variations), max_variants_per_isoform)
    for size in range(1, largest + 1):
        for combo in combinations(variations, size):
            result = polymer
            try:
                for variant in sorted(combo, key=lambda v: v.begin, reverse=True):
                    result = apply_single_variant(variant, result)
            except ValueError as e:
                logger.debug(f"Skipping combination {[v.simple_string() for v in combo]}: {e}")
                continue
            yield result
            count += 1
            if count >= max_isoforms:
                return


# =============================================================================
# Coordinate Helpers
# =============================================================================

def restore_modification_index(polymer: BioPolymer, variant_index: int) -> int:
    """Map a position on a variant polymer back to consensus coordinates.

    Examples
    --------
    >>> from alphaproteoform.biopolymer.polymer import Protein
    >>> consensus = Protein("MPEPTIDE", "P1")
    >>> variant = apply_single_variant(SequenceVariation(2, 2, "P", "PGG"), consensus)
    >>> restore_modification_index(variant, 7)
    5
    """
    return variant_index - sum(
        v.length_change
        for v in polymer.applied_sequence_variations
        if v.end < variant_index
    )


def is_sequence_variant_modification(applied_variant: Optional[SequenceVariation], variant_index: int) -> bool:
    """True when ``variant_index`` lies inside an applied variant's span."""
    return applied_variant is not None and applied_variant.includes_position(variant_index)


# =============================================================================
# Substitution Modifications
# =============================================================================

def convert_nucleotide_substitution_modifications(polymer: PolymerT) -> PolymerT:
    """Turn substitution pseudo-modifications into point variants.

    A modification whose type contains "nucleotide substitution" and whose
    id reads "X->Y" becomes ``SequenceVariation(k, k, "X", "Y")`` and is
    removed from the modification map.

    Parameters
    ----------
    polymer : BioPolymer

    Returns
    -------
    BioPolymer
        The polymer itself when there is nothing to convert, otherwise a
        copy with the converted variants and remaining modifications
    """
    converted = []
    remaining = {}
    for position, mod_list in polymer.one_based_modifications.items():
        kept = []
        for mod in mod_list:
            if NUCLEOTIDE_SUBSTITUTION_TYPE in mod.modification_type and SUBSTITUTION_SEPARATOR in mod.original_id:
                residues = [r for r in mod.original_id.split(SUBSTITUTION_SEPARATOR) if r]
                if len(residues) == 2:
                    converted.append((position, residues[0], residues[1]))
                    continue
            kept.append(mod)
        if kept:
            remaining[position] = kept

    if not converted:
        return polymer

    variations = list(polymer.sequence_variations)
    for position, original, substituted in converted:
        try:
            variant = SequenceVariation(position, position, original, substituted, PUTATIVE_SUBSTITUTION_DESCRIPTION)
        except ValueError as e:
            logger.debug(f"Skipping substitution {original}->{substituted} at {position}: {e}")
            continue
        if variant not in variations:
            variations.append(variant)

    logger.debug(f"{polymer.accession}: converted {len(converted)} substitution modifications to variants")
    return replace(polymer, one_based_modifications=remaining, sequence_variations=variations)
