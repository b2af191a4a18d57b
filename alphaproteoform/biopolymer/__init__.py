"""Annotated sequence model.

Polymers (Protein, RNA) carry modifications, a catalog of sequence
variants, applied variants, truncation products, disulfide bonds and
splice sites, all in 1-based coordinates. Sequence variants may carry the
VCF record they were called from.
"""

from .annotations import (
    TruncationProduct,
    DisulfideBond,
    SpliceSite,
)

from .variant_call import (
    Zygosity,
    VariantCallRecord,
    parse_snpeff_allele,
    parse_allele_depths,
    parse_genotype,
)

from .sequence_variation import (
    SequenceVariation,
)

from .polymer import (
    BioPolymer,
    Protein,
    RNA,
    get_variant_accession,
    get_variant_name,
)

__all__ = [
    # Annotations
    'TruncationProduct',
    'DisulfideBond',
    'SpliceSite',

    # Genotype records
    'Zygosity',
    'VariantCallRecord',
    'parse_snpeff_allele',
    'parse_allele_depths',
    'parse_genotype',

    # Sequence variants
    'SequenceVariation',

    # Polymers
    'BioPolymer',
    'Protein',
    'RNA',
    'get_variant_accession',
    'get_variant_name',
]
