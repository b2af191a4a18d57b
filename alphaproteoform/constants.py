"""Constants for proteoform construction and decoy generation.

This module collects the residue markers, genotype-record layout, default
budgets and modification masses used throughout AlphaProteoform. Values
that users commonly override (decoy identifier, combinatorics caps) are
mirrored as defaults on the params dataclasses in ``variants.application``
and ``decoys.generator``.

Key Features
------------
- Initiator methionine and stop-codon markers
- VCF column layout (fixed columns, first sample column)
- Default combinatorics budget and isoform cap for variant application
- Default decoy identifier and slide distance
- Common modification masses (Carbamidomethyl, Oxidation, Acetyl, ...)

Sources
-------
- VCF 4.2 specification: https://samtools.github.io/hts-specs/VCFv4.2.pdf
- SnpEff ANN field: https://pcingola.github.io/SnpEff/adds/VCFannotationformat_v1.0.pdf
- Unimod modification masses: https://www.unimod.org/modifications_list.php
"""

# =============================================================================
# Residue Markers
# =============================================================================

# Translation start residue. Protein decoys keep it at position 1.
INITIATOR_RESIDUE = "M"

# Stop-gained variants end with this marker; everything after it is discarded
STOP_CODON = "*"

# =============================================================================
# Variant Call Format Layout
# =============================================================================

# CHROM POS ID REF ALT QUAL FILTER INFO FORMAT SAMPLE...
MIN_VCF_FIELDS = 10

# Index of the first sample column (also the number of fixed columns)
VCF_SAMPLE_COLUMN_OFFSET = 9

# Column indices of the fixed fields that a genotype record reads
VCF_REF_COLUMN = 3
VCF_ALT_COLUMN = 4
VCF_INFO_COLUMN = 7
VCF_FORMAT_COLUMN = 8

# Allowed genotype allele tokens ('.' is a missing call)
VALID_GENOTYPE_TOKENS = frozenset({"0", "1", "2", "3", "."})

# INFO keys carrying SnpEff functional annotations
SNPEFF_INFO_KEYS = ("ANN=", "EFF=")

# =============================================================================
# Variant Application Defaults
# =============================================================================

# Heterozygous variants per sample before branching collapses to two tracks
DEFAULT_MAX_SEQUENCE_VARIANTS_PER_ISOFORM = 4

# Minimum reads supporting an allele before it is considered observed
DEFAULT_MIN_ALLELE_DEPTH = 1

# Hard cap on proteoforms returned for one polymer
DEFAULT_MAX_SEQUENCE_VARIANT_ISOFORMS = 100

# Modification type that encodes a putative amino acid substitution ("X->Y")
NUCLEOTIDE_SUBSTITUTION_TYPE = "nucleotide substitution"
SUBSTITUTION_SEPARATOR = "->"
PUTATIVE_SUBSTITUTION_DESCRIPTION = "Putative GPTMD Substitution"

# =============================================================================
# Decoy Defaults
# =============================================================================

# Prefix for decoy accessions, names and annotation descriptions
DEFAULT_DECOY_IDENTIFIER = "DECOY_"

# Reflective-walk distance for slide decoys
DEFAULT_NUM_SLIDES = 20

# =============================================================================
# Common Modification Masses
# =============================================================================

# Carbamidomethylation of Cysteine (Unimod:4)
# C2H3NO: 57.021464 Da
CARBAMIDOMETHYL_MASS = 57.021464

# Oxidation of Methionine (Unimod:35)
# O: 15.994915 Da
OXIDATION_MASS = 15.994915

# Acetylation (Protein N-term, Unimod:1)
# C2H2O: 42.010565 Da
ACETYL_MASS = 42.010565

# Phosphorylation (Unimod:21)
# HPO3: 79.966331 Da
PHOSPHO_MASS = 79.966331

# Deamidation (Unimod:7)
# NH -> O: 0.984016 Da
DEAMIDATION_MASS = 0.984016
