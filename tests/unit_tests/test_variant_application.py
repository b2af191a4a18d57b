"""Unit tests for variant application and coordinate adjustment."""

import logging

import pytest

from alphaproteoform.biopolymer.annotations import DisulfideBond, SpliceSite, TruncationProduct
from alphaproteoform.biopolymer.polymer import Protein
from alphaproteoform.biopolymer.sequence_variation import SequenceVariation
from alphaproteoform.variants.application import (
    VariantApplicationParams,
    adjust_truncation_product_indices,
    apply_single_variant,
    apply_variants,
    deduplicate_by_sequence,
)


def sequences(polymers):
    return [p.base_sequence for p in polymers]


class TestVariantApplicationParams:
    """Test parameter validation."""

    def test_defaults(self):
        """Test default budgets."""
        params = VariantApplicationParams()
        assert params.max_sequence_variants_per_isoform == 4
        assert params.min_allele_depth == 1
        assert params.max_sequence_variant_isoforms == 100

    def test_invalid(self):
        """Test negative budgets are rejected."""
        with pytest.raises(ValueError):
            VariantApplicationParams(min_allele_depth=-1)
        with pytest.raises(ValueError):
            VariantApplicationParams(max_sequence_variants_per_isoform=-1)
        with pytest.raises(ValueError):
            VariantApplicationParams(max_sequence_variant_isoforms=0)


class TestApplySingleVariant:
    """Test splicing one variant into a polymer."""

    def test_substitution(self, mpeptide):
        """Test a point substitution."""
        variant = apply_single_variant(SequenceVariation(4, 4, "P", "V", "missense"), mpeptide)
        assert variant.base_sequence == "MPEVTIDE"
        assert variant.accession == "P1_P4V"
        applied = variant.applied_sequence_variations[0]
        assert (applied.begin, applied.end) == (4, 4)
        assert variant.consensus is mpeptide
        assert mpeptide.base_sequence == "MPEPTIDE"

    def test_insertion_shifts_modifications(self, oxidation, phospho, acetyl):
        """Test downstream modifications shift and edited ones are dropped."""
        protein = Protein("MPEPTIDE", "P1", one_based_modifications={1: [acetyl], 2: [oxidation], 5: [phospho]})
        variant = apply_single_variant(SequenceVariation(2, 2, "P", "PGG"), protein)

        assert variant.base_sequence == "MPGGEPTIDE"
        assert variant.one_based_modifications == {1: [acetyl], 7: [phospho]}
        assert variant.base_sequence[7 - 1] == "T"
        applied = variant.applied_sequence_variations[0]
        assert (applied.begin, applied.end) == (2, 4)

    def test_deletion(self, phospho):
        """Test a deletion shifts downstream modifications back."""
        protein = Protein("MPEPTIDE", "P1", one_based_modifications={6: [phospho]})
        variant = apply_single_variant(SequenceVariation(3, 4, "EP", ""), protein)

        assert variant.base_sequence == "MPTIDE"
        assert variant.one_based_modifications == {4: [phospho]}
        applied = variant.applied_sequence_variations[0]
        assert (applied.begin, applied.end) == (3, 3)

    def test_deletion_keeps_last_residue_modification(self, oxidation):
        """Test a modification on the last residue survives an upstream deletion."""
        protein = Protein("MPEPTIDE", "P1", one_based_modifications={8: [oxidation]})
        variant = apply_single_variant(SequenceVariation(3, 4, "EP", ""), protein)
        assert variant.one_based_modifications == {6: [oxidation]}

    def test_insertion_after_last_residue(self, mpeptide):
        """Test an insertion directly after the sequence end is applied."""
        variant = apply_single_variant(SequenceVariation(9, 9, "", "K"), mpeptide)
        assert variant.base_sequence == "MPEPTIDEK"

    def test_out_of_range_rejected(self, mpeptide):
        """Test a variant past the sequence end is not appended."""
        with pytest.raises(ValueError, match="outside 1..8"):
            apply_single_variant(SequenceVariation(20, 20, "K", "R"), mpeptide)
        with pytest.raises(ValueError, match="outside 1..8"):
            apply_single_variant(SequenceVariation(8, 9, "EK", "E"), mpeptide)

    def test_stop_gain_truncates(self, oxidation, phospho):
        """Test a stop gain cuts the sequence and everything after it."""
        protein = Protein(
            "MPEPTIDE", "P1",
            one_based_modifications={2: [oxidation], 7: [phospho]},
            truncation_products=[
                TruncationProduct(1, 3, "signal"),
                TruncationProduct(2, 8, "chain"),
                TruncationProduct(6, 8, "peptide"),
            ],
        )
        variant = apply_single_variant(SequenceVariation(5, 5, "T", "T*"), protein)

        assert variant.base_sequence == "MPEPT"
        assert variant.one_based_modifications == {2: [oxidation]}
        assert [(p.begin, p.end) for p in variant.truncation_products] == [(1, 3), (2, 5)]
        applied = variant.applied_sequence_variations[0]
        assert (applied.begin, applied.end) == (5, 5)

    def test_variant_modifications_added(self, phospho):
        """Test modifications on the variant allele are carried over."""
        sv = SequenceVariation(4, 4, "P", "S", one_based_modifications={4: [phospho]})
        variant = apply_single_variant(sv, Protein("MPEPTIDE", "P1"))
        assert variant.base_sequence == "MPESTIDE"
        assert variant.one_based_modifications == {4: [phospho]}

    def test_sites_remapped(self):
        """Test disulfide bonds and splice sites move with their residues."""
        protein = Protein(
            "MPEPTIDE", "P1",
            disulfide_bonds=[DisulfideBond(1, 6, "a"), DisulfideBond(2, 6, "b")],
            splice_sites=[SpliceSite.at(7, "s")],
        )
        variant = apply_single_variant(SequenceVariation(2, 2, "P", "PGG"), protein)
        assert variant.disulfide_bonds == [DisulfideBond(1, 8, "a")]
        assert variant.splice_sites == [SpliceSite(9, 9, "s")]

    def test_prior_variant_shifted(self):
        """Test previously applied downstream variants move with an insertion."""
        first = apply_single_variant(SequenceVariation(6, 6, "I", "L"), Protein("MPEPTIDE", "P1"))
        second = apply_single_variant(SequenceVariation(2, 2, "P", "PGG"), first)

        assert second.base_sequence == "MPGGEPTLDE"
        assert [(v.begin, v.end) for v in second.applied_sequence_variations] == [(2, 4), (8, 8)]
        assert second.consensus.accession == "P1"

    def test_prior_variant_upstream_modification_kept(self, oxidation):
        """Test a prior variant's modification upstream of the new edit stays in place."""
        deletion = SequenceVariation(8, 8, "E", "", one_based_modifications={1: [oxidation]})
        first = apply_single_variant(deletion, Protein("MPEPTIDEK", "P1"))
        second = apply_single_variant(SequenceVariation(5, 5, "T", "TGG"), first)

        assert second.base_sequence == "MPEPTGGIDK"
        assert second.one_based_modifications == {1: [oxidation]}
        shifted = second.applied_sequence_variations[1]
        assert shifted.simple_string() == "E10"
        assert shifted.one_based_modifications == {1: [oxidation]}

    def test_prior_variant_upstream_kept(self):
        """Test previously applied upstream variants are unchanged."""
        first = apply_single_variant(SequenceVariation(2, 2, "P", "A"), Protein("MPEPTIDE", "P1"))
        second = apply_single_variant(SequenceVariation(6, 6, "I", "L"), first)
        assert second.base_sequence == "MAEPTLDE"
        assert [v.simple_string() for v in second.applied_sequence_variations] == ["I6L", "P2A"]

    def test_incomplete_overlap(self):
        """Test a partially overlapping variant takes its tail from the consensus."""
        first = apply_single_variant(SequenceVariation(4, 5, "PT", "VS"), Protein("MPEPTIDE", "P1"))
        assert first.base_sequence == "MPEVSIDE"

        second = apply_single_variant(SequenceVariation(5, 6, "TI", "KK"), first)

        assert second.base_sequence == "MPEVKKDE"
        assert [v.simple_string() for v in second.applied_sequence_variations] == ["TI5-6KK"]


class TestTruncationProductAdjustment:
    """Test truncation product re-indexing."""

    def test_insertion(self, mpeptide):
        """Test spanning and downstream products after an insertion."""
        products = [
            TruncationProduct(1, 1, "initiator"),
            TruncationProduct(2, 8, "chain"),
            TruncationProduct(6, 8, "peptide"),
            TruncationProduct(None, None, "full"),
        ]
        adjusted = adjust_truncation_product_indices(
            SequenceVariation(4, 4, "P", "PGG"), "MPEPGGTIDE", mpeptide, products
        )
        assert [(p.begin, p.end) for p in adjusted] == [(1, 1), (2, 10), (8, 10), (None, None)]
        assert [p.type for p in adjusted] == ["initiator", "chain", "peptide", "full"]

    def test_lost_cleavage_site(self, mpeptide):
        """Test products starting inside the edit are dropped."""
        adjusted = adjust_truncation_product_indices(
            SequenceVariation(4, 5, "PT", "V"), "MPEVIDE", mpeptide, [TruncationProduct(5, 8, "peptide")]
        )
        assert adjusted == []

    def test_empty(self, mpeptide):
        """Test missing products give an empty list."""
        assert adjust_truncation_product_indices(SequenceVariation(4, 4, "P", "V"), "MPEVTIDE", mpeptide, None) == []


class TestApplyVariants:
    """Test genotype-driven proteoform expansion."""

    def test_homozygous_alternate(self, mpeptide, vcf_line):
        """Test a homozygous alternate replaces the reference."""
        sv = SequenceVariation(4, 4, "P", "V", "missense", vcf_line("1/1:0,30:30"))
        result = apply_variants(mpeptide, [sv])
        assert sequences(result) == ["MPEVTIDE"]
        assert result[0].sample_name_for_variants == "0"

    def test_heterozygous_branches(self, mpeptide, vcf_line):
        """Test a heterozygous variant gives reference and alternate."""
        sv = SequenceVariation(4, 4, "P", "V", "missense", vcf_line("0/1:15,15:30"))
        assert sequences(apply_variants(mpeptide, [sv])) == ["MPEPTIDE", "MPEVTIDE"]

    def test_two_heterozygous_combinatorics(self, mpeptide, vcf_line):
        """Test heterozygous variants within budget branch combinatorially."""
        line = vcf_line("0/1:15,15:30")
        variants = [
            SequenceVariation(4, 4, "P", "V", "a", line),
            SequenceVariation(6, 6, "I", "L", "b", line),
        ]
        assert sequences(apply_variants(mpeptide, variants)) == [
            "MPEPTIDE", "MPEVTIDE", "MPEPTLDE", "MPEVTLDE",
        ]

    def test_over_budget_collapses_to_two_tracks(self, mpeptide, vcf_line):
        """Test more heterozygous variants than the budget give reference plus all-alternate."""
        line = vcf_line("0/1:15,15:30")
        variants = [
            SequenceVariation(4, 4, "P", "V", "a", line),
            SequenceVariation(6, 6, "I", "L", "b", line),
        ]
        params = VariantApplicationParams(max_sequence_variants_per_isoform=1)
        assert sequences(apply_variants(mpeptide, variants, params)) == ["MPEPTIDE", "MPEVTLDE"]

    def test_zero_budget(self, mpeptide, vcf_line):
        """Test a zero budget never applies heterozygous variants."""
        sv = SequenceVariation(4, 4, "P", "V", "missense", vcf_line("0/1:15,15:30"))
        params = VariantApplicationParams(max_sequence_variants_per_isoform=0)
        assert sequences(apply_variants(mpeptide, [sv], params)) == ["MPEPTIDE"]

    def test_insufficient_depth(self, mpeptide, vcf_line):
        """Test shallow alternates keep the reference."""
        sv = SequenceVariation(4, 4, "P", "V", "missense", vcf_line("1/1:0,30:30"))
        params = VariantApplicationParams(min_allele_depth=50)
        assert sequences(apply_variants(mpeptide, [sv], params)) == ["MPEPTIDE"]

    def test_shallow_reference(self, mpeptide, vcf_line):
        """Test a heterozygous call without reference reads keeps only the alternate."""
        sv = SequenceVariation(4, 4, "P", "V", "missense", vcf_line("0/1:0,30:30"))
        assert sequences(apply_variants(mpeptide, [sv])) == ["MPEVTIDE"]

    def test_reference_genotype(self, mpeptide, vcf_line):
        """Test samples without the allele keep the reference."""
        sv = SequenceVariation(4, 4, "P", "V", "missense", vcf_line("0/0:30,0:30"))
        assert sequences(apply_variants(mpeptide, [sv])) == ["MPEPTIDE"]

    def test_multiple_individuals(self, mpeptide, vcf_line):
        """Test proteoforms of all samples are pooled in sample order."""
        sv = SequenceVariation(4, 4, "P", "V", "missense", vcf_line("1/1:0,30:30", "0/0:30,0:30"))
        assert sequences(apply_variants(mpeptide, [sv])) == ["MPEVTIDE", "MPEPTIDE"]

    def test_missing_sample(self, mpeptide, vcf_line):
        """Test a variant without data for a sample is skipped for that sample."""
        a = SequenceVariation(4, 4, "P", "V", "a", vcf_line("0/0:30,0:30", "1/1:0,30:30"))
        b = SequenceVariation(6, 6, "I", "L", "b", vcf_line("1/1:0,30:30"))
        assert sequences(apply_variants(mpeptide, [a, b])) == ["MPEPTLDE", "MPEVTIDE"]

    def test_out_of_range_skipped(self, mpeptide, vcf_line, caplog):
        """Test a variant past the sequence end is skipped with a debug record."""
        far = SequenceVariation(20, 20, "K", "R", "far", vcf_line("1/1:0,30:30"))
        near = SequenceVariation(4, 4, "P", "V", "near", vcf_line("1/1:0,30:30"))
        with caplog.at_level(logging.DEBUG, logger="alphaproteoform.variants.application"):
            result = apply_variants(mpeptide, [far, near])
        assert sequences(result) == ["MPEVTIDE"]
        assert "K20R" in caplog.text and "out of range" in caplog.text

    def test_no_genotype_data(self, mpeptide):
        """Test variants without genotypes give a consensus-equivalent copy."""
        result = apply_variants(mpeptide, [SequenceVariation(4, 4, "P", "V")])
        assert sequences(result) == ["MPEPTIDE"]
        assert result[0] is not mpeptide
        assert result[0].consensus is mpeptide

    def test_duplicate_variants(self, mpeptide, vcf_line):
        """Test variants are deduplicated by their simple string."""
        line = vcf_line("0/1:15,15:30")
        variants = [SequenceVariation(4, 4, "P", "V", "a", line), SequenceVariation(4, 4, "P", "V", "b", line)]
        assert sequences(apply_variants(mpeptide, variants)) == ["MPEPTIDE", "MPEVTIDE"]

    def test_isoform_cap(self, mpeptide, vcf_line):
        """Test output is truncated to the isoform cap."""
        line = vcf_line("0/1:15,15:30")
        variants = [
            SequenceVariation(4, 4, "P", "V", "a", line),
            SequenceVariation(6, 6, "I", "L", "b", line),
        ]
        params = VariantApplicationParams(max_sequence_variant_isoforms=2)
        assert sequences(apply_variants(mpeptide, variants, params)) == ["MPEPTIDE", "MPEVTIDE"]

    def test_consensus_not_mutated(self, mpeptide, vcf_line):
        """Test the consensus polymer is never modified."""
        sv = SequenceVariation(4, 4, "P", "V", "missense", vcf_line("1/1:0,30:30"))
        apply_variants(mpeptide, [sv])
        assert mpeptide.base_sequence == "MPEPTIDE"
        assert mpeptide.applied_sequence_variations == []


class TestDeduplicateBySequence:
    """Test sequence-level deduplication."""

    def test_first_wins(self):
        """Test the first polymer per sequence is kept in order."""
        a, b, c = Protein("MPEPTIDE", "A"), Protein("MPEVTIDE", "B"), Protein("MPEPTIDE", "C")
        assert deduplicate_by_sequence([a, b, c]) == [a, b]
