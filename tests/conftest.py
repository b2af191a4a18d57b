"""Pytest configuration for AlphaProteoform tests.

This module provides common fixtures and configuration for all tests.
Everything is built in memory; no test touches the filesystem.
"""

import pytest


def build_vcf_line(*samples, ref="C", alt="G", annotated_allele="G", fmt="GT:AD:DP"):
    """Tab-delimited VCF data line with a SnpEff annotation and sample columns."""
    info = f"DP=60;ANN={annotated_allele}|missense_variant|MODERATE" if annotated_allele else "DP=60"
    fixed = ["1", "12345", ".", ref, alt, "50", "PASS", info, fmt]
    return "\t".join(fixed + list(samples))


@pytest.fixture
def vcf_line():
    """Factory for VCF data lines: vcf_line("1/1:0,30:30", "0/1:15,15:30")."""
    return build_vcf_line


@pytest.fixture
def mpeptide():
    """Protein starting with the initiator methionine."""
    from alphaproteoform.biopolymer.polymer import Protein
    return Protein("MPEPTIDE", "P1")


@pytest.fixture
def apeptide():
    """Protein without an initiator methionine."""
    from alphaproteoform.biopolymer.polymer import Protein
    return Protein("APEPTIDE", "P2")


@pytest.fixture
def short_rna():
    """Short nucleic acid for reversal tests."""
    from alphaproteoform.biopolymer.polymer import RNA
    return RNA("AUGCUA", "R1")


@pytest.fixture
def rna_ten():
    """Ten-residue nucleic acid for variant reversal tests."""
    from alphaproteoform.biopolymer.polymer import RNA
    return RNA("AUGCGAUCGU", "R2")


@pytest.fixture
def oxidation():
    from alphaproteoform.modifications import COMMON_MODIFICATIONS
    return COMMON_MODIFICATIONS["Oxidation"]


@pytest.fixture
def phospho():
    from alphaproteoform.modifications import COMMON_MODIFICATIONS
    return COMMON_MODIFICATIONS["Phosphorylation"]


@pytest.fixture
def acetyl():
    from alphaproteoform.modifications import COMMON_MODIFICATIONS
    return COMMON_MODIFICATIONS["Acetylation"]


@pytest.fixture
def carbamidomethyl():
    from alphaproteoform.modifications import COMMON_MODIFICATIONS
    return COMMON_MODIFICATIONS["Carbamidomethyl"]
