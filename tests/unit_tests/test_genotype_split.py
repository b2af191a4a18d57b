"""Unit tests for per-sample genotype splitting and merging of equivalent variants."""

from alphaproteoform.biopolymer.sequence_variation import SequenceVariation


class TestSplitPerGenotype:
    """Test splitting a multi-sample variant."""

    def test_homozygous_and_heterozygous(self, vcf_line):
        """Test one alternate entry per carrying sample."""
        line = vcf_line("1/1:0,30:30", "0/1:15,15:30", "0/0:30,0:30")
        sv = SequenceVariation(4, 4, "P", "V", "missense", line)

        split = sv.split_per_genotype()

        assert [v.description for v in split] == [
            "missense | Sample=0 Zygosity=Homozygous Depth=30 Mode=HomozygousAlt",
            "missense | Sample=1 Zygosity=Heterozygous Depth=30 Mode=HeterozygousAlt",
        ]
        assert all(v.variant_sequence == "V" for v in split)
        assert all((v.begin, v.end, v.original_sequence) == (4, 4, "P") for v in split)

    def test_single_sample_records(self, vcf_line):
        """Test each produced variant carries only its own sample column."""
        line = vcf_line("1/1:0,30:30", "0/1:15,15:30")
        split = SequenceVariation(4, 4, "P", "V", "missense", line).split_per_genotype()

        heterozygous = split[1].variant_call
        assert heterozygous.samples == ["0"]
        assert heterozygous.genotypes == {"0": ["0", "1"]}
        assert heterozygous.fixed_columns == line.split("\t")[:9]

    def test_reference_entries_are_not_edits(self, vcf_line):
        """Test requested reference entries are left out as no-op edits."""
        line = vcf_line("0/1:15,15:30", "0/0:30,0:30")
        sv = SequenceVariation(4, 4, "P", "V", "missense", line)

        split = sv.split_per_genotype(
            include_reference_for_heterozygous=True,
            emit_reference_for_homozygous_ref=True,
        )

        assert len(split) == 1
        assert split[0].description.endswith("Mode=HeterozygousAlt")

    def test_min_depth(self, vcf_line):
        """Test shallow samples are skipped."""
        line = vcf_line("1/1:0,30:30", "0/1:5,5:10")
        split = SequenceVariation(4, 4, "P", "V", "missense", line).split_per_genotype(min_depth=20)
        assert len(split) == 1
        assert "Sample=0" in split[0].description

    def test_alternate_index_mismatch(self, vcf_line):
        """Test samples calling a different alternate allele."""
        line = vcf_line("0/2:10,0,20:30", alt="G,T", annotated_allele="G")
        sv = SequenceVariation(4, 4, "P", "V", "missense", line)

        assert sv.split_per_genotype() == []

        kept = sv.split_per_genotype(skip_if_alt_index_mismatch=False)
        assert len(kept) == 1
        assert kept[0].description.endswith("Mode=MixedAltIndex(StoredAltOnly)")

    def test_modifications_copied(self, vcf_line, oxidation):
        """Test each produced variant gets its own modification map."""
        line = vcf_line("1/1:0,30:30", "0/1:15,15:30")
        sv = SequenceVariation(4, 4, "P", "V", "missense", line, {4: [oxidation]})

        split = sv.split_per_genotype()

        assert all(v.one_based_modifications == {4: [oxidation]} for v in split)
        assert split[0].one_based_modifications is not split[1].one_based_modifications
        assert split[0].one_based_modifications[4] is not sv.one_based_modifications[4]

    def test_without_genotypes(self):
        """Test variants without genotype data split into nothing."""
        assert SequenceVariation(4, 4, "P", "V").split_per_genotype() == []
        truncated = SequenceVariation(4, 4, "P", "V", "", "1\t100\t.\tC\tG")
        assert truncated.split_per_genotype() == []


class TestCombineEquivalent:
    """Test merging variants that describe the same edit."""

    def test_none(self):
        """Test None input gives an empty list."""
        assert SequenceVariation.combine_equivalent(None) == []

    def test_single_member_kept(self):
        """Test a unique variant is returned unchanged."""
        sv = SequenceVariation(4, 4, "P", "V", "missense")
        assert SequenceVariation.combine_equivalent([sv])[0] is sv

    def test_descriptions_combined(self):
        """Test distinct descriptions are listed."""
        a = SequenceVariation(4, 4, "P", "V", "sample 0")
        b = SequenceVariation(4, 4, "P", "V", "sample 1")
        combined = SequenceVariation.combine_equivalent([a, b])
        assert len(combined) == 1
        assert combined[0].description == "Combined(2): sample 0 | sample 1"

    def test_repeated_description(self):
        """Test identical descriptions are not combined."""
        a = SequenceVariation(4, 4, "P", "V", "missense")
        b = SequenceVariation(4, 4, "P", "V", "missense")
        assert SequenceVariation.combine_equivalent([a, b])[0].description == "missense"

    def test_description_overflow(self):
        """Test descriptions beyond three are summarised."""
        variants = [SequenceVariation(4, 4, "P", "V", f"d{i}") for i in range(5)]
        combined = SequenceVariation.combine_equivalent(variants)
        assert combined[0].description == "Combined(5): d0 | d1 | d2 (+2 more)"

    def test_modifications_unioned(self, oxidation, phospho):
        """Test modification maps are unioned by identifier."""
        a = SequenceVariation(4, 4, "P", "V", "a", one_based_modifications={4: [oxidation]})
        b = SequenceVariation(4, 4, "P", "V", "b", one_based_modifications={4: [oxidation, phospho]})
        combined = SequenceVariation.combine_equivalent([a, b])
        assert combined[0].one_based_modifications == {4: [oxidation, phospho]}

    def test_first_record_kept(self, vcf_line):
        """Test the first available genotype record is kept."""
        line = vcf_line("1/1:0,30:30")
        a = SequenceVariation(4, 4, "P", "V", "a")
        b = SequenceVariation(4, 4, "P", "V", "b", line)
        c = SequenceVariation(4, 4, "P", "V", "c", vcf_line("0/1:15,15:30"))
        combined = SequenceVariation.combine_equivalent([a, b, c])
        assert combined[0].variant_call.description == line

    def test_sorted_output(self):
        """Test output is ordered by position and sequences."""
        variants = [
            SequenceVariation(5, 5, "T", "S"),
            SequenceVariation(4, 4, "P", "V"),
            SequenceVariation(4, 4, "P", "A"),
        ]
        combined = SequenceVariation.combine_equivalent(variants)
        assert [v.simple_string() for v in combined] == ["P4A", "P4V", "T5S"]
