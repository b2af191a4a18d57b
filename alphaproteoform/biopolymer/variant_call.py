"""Genotype data attached to a sequence variant.

A ``VariantCallRecord`` holds the per-sample genotype information of one
VCF data line: allele tokens (GT), per-allele read depths (AD), derived
zygosity, and the index of the alternate allele that the owning
``SequenceVariation`` represents.

Example VCF line with a SnpEff annotation::

    1  50000000  .  A  G  .  PASS  ANN=G||||||||||||||||  GT:AD:DP  1/1:30,30:30

- REF = A, ALT = G
- ANN allele G is the first ALT allele, so ``allele_index == 1``
- Sample 0: GT 1/1 (homozygous alternate), AD 30,30, DP 30

Records built from truncated lines (fewer than 10 tab-separated fields)
carry no genotype data. They are not an error: the record simply does not
describe any sample.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Dict, List, Optional

from ..constants import (
    MIN_VCF_FIELDS,
    SNPEFF_INFO_KEYS,
    VALID_GENOTYPE_TOKENS,
    VCF_ALT_COLUMN,
    VCF_FORMAT_COLUMN,
    VCF_INFO_COLUMN,
    VCF_REF_COLUMN,
    VCF_SAMPLE_COLUMN_OFFSET,
)

logger = logging.getLogger(__name__)

_GENOTYPE_SEPARATORS = re.compile(r"[/|]")


class Zygosity(Enum):
    """Per-sample zygosity derived from the GT allele tokens."""
    HOMOZYGOUS = "Homozygous"
    HETEROZYGOUS = "Heterozygous"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Field Parsing Helpers
# =============================================================================

def parse_snpeff_allele(info: Optional[str]) -> Optional[str]:
    """Extract the annotated allele from a SnpEff INFO field.

    Parameters
    ----------
    info : str or None
        INFO column, e.g. "DP=30;ANN=G|missense_variant|MODERATE|..."

    Returns
    -------
    str or None
        Allele of the first ANN/EFF annotation, None when absent

    Examples
    --------
    >>> parse_snpeff_allele("ANN=G||||||||||||||||")
    'G'
    >>> parse_snpeff_allele("DP=30") is None
    True
    """
    if not info:
        return None
    for token in info.split(";"):
        token = token.strip()
        for key in SNPEFF_INFO_KEYS:
            if token.startswith(key):
                annotation = token[len(key):].split(",")[0]
                allele = annotation.split("|")[0]
                return allele or None
    return None


def parse_allele_depths(ad_string: Optional[str]) -> List[str]:
    """Split an AD value into tokens, or [] when any token is malformed.

    Tokens must be '.' or non-negative integers.
    """
    if ad_string is None or not ad_string.strip():
        return []
    tokens = [t.strip() for t in ad_string.split(",") if t.strip()]
    for token in tokens:
        if token == ".":
            continue
        if not token.isdigit():
            return []
    return tokens


def parse_genotype(gt_string: Optional[str]) -> List[str]:
    """Split a GT value on '/' or '|', or [] when a token is not a valid allele."""
    if gt_string is None:
        return []
    tokens = [t.strip() for t in _GENOTYPE_SEPARATORS.split(gt_string) if t.strip()]
    if any(t not in VALID_GENOTYPE_TOKENS for t in tokens):
        return []
    return tokens


def zygosity_from_genotype(gt_tokens: List[str]) -> Zygosity:
    """Homozygous for one distinct called allele, heterozygous for several."""
    called = {t for t in gt_tokens if t != "."}
    if not called:
        return Zygosity.UNKNOWN
    if len(called) == 1:
        return Zygosity.HOMOZYGOUS
    return Zygosity.HETEROZYGOUS


# =============================================================================
# Variant Call Record
# =============================================================================

class VariantCallRecord:
    """Parsed genotype data of one VCF data line.

    Parameters
    ----------
    description : str
        The raw tab-delimited VCF line. Kept verbatim; records compare
        equal when their lines are equal.

    Attributes
    ----------
    fields : List[str]
        Tab-separated fields of the line
    reference_allele, alternate_allele, info, format : str or None
        Fixed columns (None for a truncated line)
    allele_index : int
        1-based index of the annotated allele within ALT, -1 when there
        is no annotation or the annotated allele is not listed
    genotypes : Dict[str, List[str]]
        Sample key ("0", "1", ...) -> GT allele tokens
    allele_depths : Dict[str, List[str]]
        Sample key -> AD tokens (reference first)
    zygosity : Dict[str, Zygosity]
        Sample key -> derived zygosity
    """

    def __init__(self, description: str):
        self.description = description if description is not None else ""
        self.fields = self.description.split("\t")

        self.reference_allele: Optional[str] = None
        self.alternate_allele: Optional[str] = None
        self.info: Optional[str] = None
        self.format: Optional[str] = None
        self.allele: Optional[str] = None
        self.allele_index = -1

        self.genotypes: Dict[str, List[str]] = {}
        self.allele_depths: Dict[str, List[str]] = {}
        self.read_depths: Dict[str, Optional[int]] = {}
        self.zygosity: Dict[str, Zygosity] = {}

        if len(self.fields) < MIN_VCF_FIELDS:
            return

        self.reference_allele = self.fields[VCF_REF_COLUMN]
        self.alternate_allele = self.fields[VCF_ALT_COLUMN]
        self.info = self.fields[VCF_INFO_COLUMN]
        self.format = self.fields[VCF_FORMAT_COLUMN].strip()
        self.allele = parse_snpeff_allele(self.info)
        if self.allele is not None:
            alternates = self.alternate_allele.split(",")
            self.allele_index = alternates.index(self.allele) + 1 if self.allele in alternates else -1

        format_keys = self.format.split(":")
        for individual, sample_column in enumerate(self.fields[VCF_SAMPLE_COLUMN_OFFSET:]):
            key = str(individual)
            values = sample_column.strip().split(":")
            if len(values) != len(format_keys):
                logger.debug(
                    f"Skipping sample {key}: genotype '{sample_column}' does not match format '{self.format}'"
                )
                continue
            sample_fields = dict(zip(format_keys, values))

            gt_tokens = parse_genotype(sample_fields.get("GT"))
            if not gt_tokens:
                continue

            self.genotypes[key] = gt_tokens
            self.allele_depths[key] = parse_allele_depths(sample_fields.get("AD"))
            dp = sample_fields.get("DP", "").strip()
            self.read_depths[key] = int(dp) if dp.isdigit() else None
            self.zygosity[key] = zygosity_from_genotype(gt_tokens)

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    @property
    def samples(self) -> List[str]:
        """Sample keys with genotype data, in column order."""
        return sorted(self.genotypes, key=int)

    @property
    def homozygous(self) -> Dict[str, bool]:
        return {k: z == Zygosity.HOMOZYGOUS for k, z in self.zygosity.items()}

    @property
    def heterozygous(self) -> Dict[str, bool]:
        return {k: z == Zygosity.HETEROZYGOUS for k, z in self.zygosity.items()}

    @property
    def has_genotypes(self) -> bool:
        return len(self.genotypes) > 0

    @property
    def fixed_columns(self) -> List[str]:
        """The nine columns preceding the samples ([] for a truncated line)."""
        if len(self.fields) < MIN_VCF_FIELDS:
            return []
        return self.fields[:VCF_SAMPLE_COLUMN_OFFSET]

    def sample_column(self, sample: str) -> Optional[str]:
        index = VCF_SAMPLE_COLUMN_OFFSET + int(sample)
        if index >= len(self.fields):
            return None
        return self.fields[index]

    def single_sample_line(self, sample: str) -> Optional[str]:
        """The fixed columns joined with one sample column."""
        column = self.sample_column(sample)
        if column is None or not self.fixed_columns:
            return None
        return "\t".join(self.fixed_columns + [column])

    def allele_depth(self, sample: str, allele_index: int) -> Optional[int]:
        """Read depth of one allele for a sample, None when not reported."""
        tokens = self.allele_depths.get(sample, [])
        if allele_index < 0 or allele_index >= len(tokens):
            return None
        token = tokens[allele_index]
        return int(token) if token.isdigit() else None

    def depth(self, sample: str) -> int:
        """Total depth: sum of AD when reported, else DP, else 0."""
        tokens = self.allele_depths.get(sample)
        if tokens:
            return sum(int(t) for t in tokens if t.isdigit())
        dp = self.read_depths.get(sample)
        return dp if dp is not None else 0

    # -------------------------------------------------------------------------
    # Value semantics
    # -------------------------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, VariantCallRecord):
            return NotImplemented
        return self.description == other.description

    def __hash__(self):
        return hash(self.description)

    def __str__(self) -> str:
        return self.description

    def __repr__(self) -> str:
        return f"VariantCallRecord({self.description!r})"
