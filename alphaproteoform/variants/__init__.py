"""Sequence variant application.

Turns a consensus polymer and its variant catalog into variant-bearing
proteoforms, one per observed haplotype (genotype-driven) or one per
combination of catalog variants (no genotype data).
"""

from .application import (
    VariantApplicationParams,
    apply_variants,
    apply_single_variant,
    adjust_sequence_variation_indices,
    adjust_truncation_product_indices,
    adjust_modification_indices,
    adjust_site_indices,
    deduplicate_by_sequence,
)

from .expansion import (
    get_variant_biopolymers,
    apply_all_variant_combinations,
    restore_modification_index,
    is_sequence_variant_modification,
    convert_nucleotide_substitution_modifications,
)

__all__ = [
    # Genotype-driven application
    'VariantApplicationParams',
    'apply_variants',
    'apply_single_variant',

    # Coordinate adjustment
    'adjust_sequence_variation_indices',
    'adjust_truncation_product_indices',
    'adjust_modification_indices',
    'adjust_site_indices',
    'deduplicate_by_sequence',

    # Expansion
    'get_variant_biopolymers',
    'apply_all_variant_combinations',
    'restore_modification_index',
    'is_sequence_variant_modification',
    'convert_nucleotide_substitution_modifications',
]
