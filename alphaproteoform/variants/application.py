"""Apply genotype-called sequence variants to a polymer.

Expands a consensus polymer plus its catalog of VCF-derived variants into
the proteoforms each sample actually carries.

Algorithm
---------
1. Deduplicate variants by ``simple_string()`` and keep those with
   genotype calls.
2. Sort by descending begin position, so that applying a downstream
   variant never moves the coordinates of a variant still to be applied.
3. For each sample, grow a list of in-progress sequences ("tracks"):
   - homozygous alternate with enough alternate reads: apply to every track
   - heterozygous, more heterozygous variants than the budget: collapse to
     at most two tracks (reference, and one accumulating alternates)
   - heterozygous within budget: every track branches into a reference
     copy and an alternate copy
   - insufficient depth: keep the reference
4. Pool all samples' tracks and keep one polymer per distinct sequence.

Each application is done by ``apply_single_variant``, which splices the
sequence and re-expresses every annotation (applied variants, truncation
products, modifications, disulfide bonds, splice sites) in the new
coordinates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

from ..biopolymer.annotations import TruncationProduct
from ..biopolymer.polymer import BioPolymer
from ..biopolymer.sequence_variation import SequenceVariation
from ..biopolymer.variant_call import Zygosity
from ..constants import (
    DEFAULT_MAX_SEQUENCE_VARIANT_ISOFORMS,
    DEFAULT_MAX_SEQUENCE_VARIANTS_PER_ISOFORM,
    DEFAULT_MIN_ALLELE_DEPTH,
    STOP_CODON,
)
from ..modifications import ModificationMap

logger = logging.getLogger(__name__)

PolymerT = TypeVar("PolymerT", bound=BioPolymer)


@dataclass
class VariantApplicationParams:
    """Budgets for variant application.

    Parameters
    ----------
    max_sequence_variants_per_isoform : int
        Heterozygous variants per sample that may branch combinatorially.
        Beyond this, the sample collapses to at most two tracks.
    min_allele_depth : int
        Reads required before an allele counts as observed
    max_sequence_variant_isoforms : int
        Maximum proteoforms returned for one polymer; extra proteoforms are
        dropped from the end of the list
    """

    max_sequence_variants_per_isoform: int = DEFAULT_MAX_SEQUENCE_VARIANTS_PER_ISOFORM
    min_allele_depth: int = DEFAULT_MIN_ALLELE_DEPTH
    max_sequence_variant_isoforms: int = DEFAULT_MAX_SEQUENCE_VARIANT_ISOFORMS

    def __post_init__(self):
        if self.max_sequence_variants_per_isoform < 0:
            raise ValueError(
                f"max_sequence_variants_per_isoform must be >= 0, got {self.max_sequence_variants_per_isoform}"
            )
        if self.min_allele_depth < 0:
            raise ValueError(f"min_allele_depth must be >= 0, got {self.min_allele_depth}")
        if self.max_sequence_variant_isoforms < 1:
            raise ValueError(
                f"max_sequence_variant_isoforms must be >= 1, got {self.max_sequence_variant_isoforms}"
            )


# =============================================================================
# Index Adjustment
# =============================================================================

def _shift_position(position: int, variant: SequenceVariation, new_length: int) -> Optional[int]:
    """Position after the edit, or None if the residue was substituted or cut off."""
    if position < variant.begin:
        return position if position <= new_length else None
    if position > variant.end and position + variant.length_change <= new_length:
        return position + variant.length_change
    return None


def is_within_sequence(variant: SequenceVariation, length: int) -> bool:
    """Whether the variant's coordinates resolve against a sequence of ``length``.

    An insertion may sit directly after the last residue; any replaced
    residue must exist.
    """
    if variant.begin > length + 1:
        return False
    return not (variant.original_sequence and variant.end > length)


def filter_resolvable_variants(
    polymer: BioPolymer,
    variations: Iterable[SequenceVariation],
) -> List[SequenceVariation]:
    """Drop variants whose coordinates lie outside the consensus sequence."""
    length = polymer.consensus_variant.length
    kept = []
    for v in variations:
        if is_within_sequence(v, length):
            kept.append(v)
        else:
            logger.debug(f"Dropping {v.simple_string()} on {polymer.accession}: coordinates out of range 1..{length}")
    return kept


def adjust_sequence_variation_indices(
    variant: SequenceVariation,
    new_sequence: str,
    applied_variations: Iterable[SequenceVariation],
) -> List[SequenceVariation]:
    """Re-express previously applied variants after applying ``variant``.

    Upstream variants are kept. Variants included by or partially
    overlapping ``variant`` are dropped. Downstream variants shift by the
    length change; their end is clamped to the new sequence and they are
    dropped when their begin falls past it (cut off by a stop gain).
    """
    new_length = len(new_sequence)
    delta = variant.length_change
    adjusted = []
    for v in applied_variations:
        if variant.intersects(v):
            continue
        if v.end < variant.begin:
            adjusted.append(v)
            continue

        begin = v.begin + delta
        if begin > new_length:
            continue
        end = max(begin, min(v.end + delta, new_length))
        mods: ModificationMap = {}
        for position, mod_list in v.one_based_modifications.items():
            new_position = _shift_position(position, variant, new_length)
            if new_position is None:
                continue
            mods.setdefault(new_position, []).extend(mod_list)
        try:
            adjusted.append(SequenceVariation(
                begin, end, v.original_sequence, v.variant_sequence,
                v.description, v.variant_call, mods,
            ))
        except ValueError as e:
            logger.debug(f"Dropping applied variant {v.simple_string()} after {variant.simple_string()}: {e}")
    return adjusted


def adjust_truncation_product_indices(
    variant: SequenceVariation,
    new_sequence: str,
    polymer: BioPolymer,
    truncation_products: Optional[Iterable[TruncationProduct]],
) -> List[TruncationProduct]:
    """Re-express truncation products after applying ``variant``.

    Parameters
    ----------
    variant : SequenceVariation
        Variant being applied (consensus coordinates)
    new_sequence : str
        Sequence after the edit
    polymer : BioPolymer
        Polymer the variant is applied to
    truncation_products : iterable of TruncationProduct
        Products in ``polymer`` coordinates

    Returns
    -------
    List[TruncationProduct]
        Products in ``new_sequence`` coordinates

    Notes
    -----
    - Entirely before the variant: unchanged
    - Spanning the variant with both cleavage sites intact (begin before
      the variant or at position 1-2, end after it or at the sequence end):
      end shifts by the length change, or becomes the new end after a
      stop gain
    - Entirely after the variant without a stop gain: both bounds shift
    - Anything else lost a cleavage site and is dropped

    Open bounds are resolved for the comparisons and stay open.
    """
    products: List[TruncationProduct] = []
    if not truncation_products:
        return products

    new_length = len(new_sequence)
    consensus_length = polymer.consensus_variant.length
    delta = variant.length_change
    stop_gained = variant.variant_sequence.endswith(STOP_CODON)

    for p in truncation_products:
        begin, end = p.resolved_bounds(polymer.length)

        if variant.begin > end:
            products.append(p)

        elif (begin < variant.begin or begin in (1, 2)) and (
            end > variant.end or p.end is None or end == consensus_length
        ):
            if stop_gained:
                new_end = new_length
            elif end + delta <= new_length:
                new_end = end + delta
            else:
                continue
            products.append(p.with_bounds(p.begin, None if p.end is None else new_end))

        elif (
            begin > variant.end
            and not stop_gained
            and begin + delta <= new_length
            and end + delta <= new_length
        ):
            products.append(p.with_bounds(
                begin + delta, None if p.end is None else end + delta
            ))

    return products


def adjust_modification_indices(
    variant: SequenceVariation,
    new_sequence: str,
    polymer: BioPolymer,
) -> ModificationMap:
    """Re-express the polymer's modifications after applying ``variant``.

    Modifications before the variant are kept, those after its original end
    shift by the length change, and those inside the edited span or cut off
    by a stop gain are dropped. The variant's own modifications are then
    appended at their positions.
    """
    new_length = len(new_sequence)
    mods: ModificationMap = {}

    for position, mod_list in polymer.one_based_modifications.items():
        new_position = _shift_position(position, variant, new_length)
        if new_position is None:
            continue
        mods.setdefault(new_position, []).extend(mod_list)

    # Variant modifications are already in post-edit coordinates
    for position, mod_list in variant.one_based_modifications.items():
        if position > new_length:
            continue
        mods.setdefault(position, []).extend(mod_list)

    return mods


def adjust_site_indices(variant: SequenceVariation, new_sequence: str, sites: Sequence) -> list:
    """Re-express disulfide bonds or splice sites after applying ``variant``.

    A site is dropped when either of its positions is substituted or cut
    off.
    """
    new_length = len(new_sequence)
    adjusted = []
    for site in sites:
        begin = _shift_position(site.begin, variant, new_length)
        end = _shift_position(site.end, variant, new_length)
        if begin is None or end is None:
            continue
        adjusted.append(site if (begin, end) == (site.begin, site.end) else replace(site, begin=begin, end=end))
    return adjusted


# =============================================================================
# Single Variant Application
# =============================================================================

def apply_single_variant(
    variant: SequenceVariation,
    polymer: PolymerT,
    sample_name: Optional[str] = None,
) -> PolymerT:
    """Apply one variant to a polymer.

    Parameters
    ----------
    variant : SequenceVariation
        Variant in consensus coordinates
    polymer : BioPolymer
        Consensus or partially variant polymer
    sample_name : str, optional
        Sample recorded on the resulting polymer

    Returns
    -------
    BioPolymer
        New polymer of the same type with the variant applied

    Examples
    --------
    >>> from alphaproteoform.biopolymer.polymer import Protein
    >>> protein = Protein("MPEPTIDE", "P1")
    >>> apply_single_variant(SequenceVariation(4, 4, "P", "V"), protein).base_sequence
    'MPEVTIDE'

    Notes
    -----
    When the variant partially overlaps a previously applied variant, the
    sequence after the variant is taken from the consensus and only the
    applied variants upstream of it are kept. A stop codon in the spliced
    sequence truncates it.

    Raises
    ------
    ValueError
        If the variant lies outside the consensus sequence
    """
    consensus_length = polymer.consensus_variant.length
    if not is_within_sequence(variant, consensus_length):
        raise ValueError(
            f"Variant {variant.simple_string()} lies outside 1..{consensus_length} of {polymer.accession}"
        )

    sequence = polymer.base_sequence
    seq_before = sequence[:variant.begin - 1]
    after_index = variant.begin + len(variant.original_sequence) - 1

    conflicting = any(
        variant.intersects(v) and not variant.includes(v)
        for v in polymer.applied_sequence_variations
    )
    if conflicting:
        seq_after = polymer.consensus_variant.base_sequence[after_index:] if len(sequence) > after_index else ""
        prior = [v for v in polymer.applied_sequence_variations if v.end < variant.begin]
    else:
        seq_after = sequence[after_index:]
        prior = [v for v in polymer.applied_sequence_variations if not variant.includes(v)]

    new_sequence = (seq_before + variant.variant_sequence + seq_after).split(STOP_CODON)[0]

    new_end = max(variant.begin, min(variant.new_span_end, len(new_sequence)))
    applied_variant = SequenceVariation(
        variant.begin,
        new_end,
        variant.original_sequence,
        variant.variant_sequence,
        variant.description,
        variant.variant_call,
        variant.one_based_modifications,
        check_modification_sites=False,
    )
    applied = [applied_variant] + adjust_sequence_variation_indices(variant, new_sequence, prior)

    return polymer.create_variant(
        new_sequence,
        applied,
        adjust_truncation_product_indices(variant, new_sequence, polymer, polymer.truncation_products),
        adjust_modification_indices(variant, new_sequence, polymer),
        sample_name,
        disulfide_bonds=adjust_site_indices(variant, new_sequence, polymer.disulfide_bonds),
        splice_sites=adjust_site_indices(variant, new_sequence, polymer.splice_sites),
    )


def _apply_or_keep(variant: SequenceVariation, polymer: PolymerT, sample_name: Optional[str]) -> PolymerT:
    try:
        return apply_single_variant(variant, polymer, sample_name)
    except ValueError as e:
        logger.debug(f"Could not apply {variant.simple_string()} to {polymer.accession}: {e}")
        return polymer


def deduplicate_by_sequence(polymers: Iterable[PolymerT]) -> List[PolymerT]:
    """Keep the first polymer for each distinct sequence, preserving order."""
    seen = set()
    unique = []
    for p in polymers:
        if p.base_sequence in seen:
            continue
        seen.add(p.base_sequence)
        unique.append(p)
    return unique


# =============================================================================
# Genotype-Driven Application
# =============================================================================

def _is_deep(depth: Optional[int], min_allele_depth: int) -> bool:
    return depth is not None and depth >= min_allele_depth


def _genotype_calls(variant: SequenceVariation, individual: str) -> Optional[Tuple[List[str], Zygosity]]:
    record = variant.variant_call
    genotype = record.genotypes.get(individual)
    if genotype is None:
        return None
    return genotype, record.zygosity.get(individual, Zygosity.UNKNOWN)


def apply_variants(
    polymer: PolymerT,
    sequence_variations: Iterable[SequenceVariation],
    params: Optional[VariantApplicationParams] = None,
) -> List[PolymerT]:
    """Expand a polymer into the proteoforms called by its samples' genotypes.

    Parameters
    ----------
    polymer : BioPolymer
        Consensus polymer
    sequence_variations : iterable of SequenceVariation
        Candidate variants; those without genotype calls or with
        coordinates outside the consensus sequence are ignored
    params : VariantApplicationParams, optional
        Combinatorics budget, minimum allele depth and isoform cap

    Returns
    -------
    List[BioPolymer]
        One polymer per distinct resulting sequence, in sample order. When
        nothing is applicable, a single consensus-equivalent copy.

    Examples
    --------
    >>> from alphaproteoform.biopolymer.polymer import Protein
    >>> vcf = "1\\t100\\t.\\tC\\tG\\t.\\tPASS\\tANN=G|missense\\tGT:AD:DP\\t1/1:0,30:30"
    >>> sv = SequenceVariation(4, 4, "P", "V", "missense", vcf)
    >>> protein = Protein("MPEPTIDE", "P1", sequence_variations=[sv])
    >>> [p.base_sequence for p in apply_variants(protein, [sv])]
    ['MPEVTIDE']
    """
    params = params or VariantApplicationParams()
    budget = params.max_sequence_variants_per_isoform

    unique = {}
    for v in filter_resolvable_variants(polymer, sequence_variations):
        unique.setdefault(v.simple_string(), v)
    to_apply = [v for v in unique.values() if v.variant_call is not None and v.variant_call.has_genotypes]
    to_apply.sort(key=lambda v: v.begin, reverse=True)

    base = polymer.create_variant(
        polymer.base_sequence,
        polymer.applied_sequence_variations,
        polymer.truncation_products,
        polymer.one_based_modifications,
    )
    if not to_apply:
        return [base]

    individuals = sorted({k for v in to_apply for k in v.variant_call.genotypes}, key=int)
    logger.debug(
        f"Applying {len(to_apply)} variants to {polymer.accession} for {len(individuals)} samples"
    )

    proteoforms: List[PolymerT] = []
    for individual in individuals:
        tracks = [base]
        heterozygous_count = sum(
            1 for v in to_apply
            if v.variant_call.zygosity.get(individual) == Zygosity.HETEROZYGOUS
        )
        too_many_heterozygous = heterozygous_count > budget

        for variant in to_apply:
            calls = _genotype_calls(variant, individual)
            if calls is None:
                logger.debug(f"No genotype for sample {individual} on {variant.simple_string()}, skipping")
                continue
            genotype, zygosity = calls
            record = variant.variant_call
            allele = str(record.allele_index)
            if allele not in genotype:
                continue

            homozygous_alt = zygosity == Zygosity.HOMOZYGOUS and all(t == allele for t in genotype)
            heterozygous = zygosity == Zygosity.HETEROZYGOUS
            deep_ref = _is_deep(record.allele_depth(individual, 0), params.min_allele_depth)
            deep_alt = _is_deep(record.allele_depth(individual, record.allele_index), params.min_allele_depth)

            if homozygous_alt and deep_alt:
                tracks = [_apply_or_keep(variant, t, individual) for t in tracks]

            elif heterozygous and too_many_heterozygous:
                # tracks[0] stays reference; tracks[1] accumulates alternates
                if deep_alt and deep_ref:
                    if budget > 0 and len(tracks) == 1:
                        tracks.append(_apply_or_keep(variant, tracks[0], individual))
                    elif budget > 0:
                        tracks[1] = _apply_or_keep(variant, tracks[1], individual)
                elif deep_alt and budget > 0:
                    tracks = [_apply_or_keep(variant, t, individual) for t in tracks]

            elif heterozygous and deep_alt:
                branched = []
                for track in tracks:
                    if budget > 0 and deep_ref:
                        if "0" in genotype:
                            branched.append(track)
                        branched.append(_apply_or_keep(variant, track, individual))
                    elif budget > 0:
                        branched.append(_apply_or_keep(variant, track, individual))
                    elif "0" in genotype:
                        branched.append(track)
                tracks = branched

        proteoforms.extend(tracks)

    unique_proteoforms = deduplicate_by_sequence(proteoforms)
    if len(unique_proteoforms) > params.max_sequence_variant_isoforms:
        logger.debug(
            f"{polymer.accession}: truncating {len(unique_proteoforms)} proteoforms "
            f"to {params.max_sequence_variant_isoforms}"
        )
        unique_proteoforms = unique_proteoforms[:params.max_sequence_variant_isoforms]

    logger.debug(f"✓ {polymer.accession}: {len(unique_proteoforms)} proteoforms")
    return unique_proteoforms
