"""Sequence variants and the modifications scoped to them.

A ``SequenceVariation`` replaces ``original_sequence`` at 1-based positions
``begin..end`` of a polymer with ``variant_sequence``. Modifications that
only exist on the variant allele are stored on the variation itself, keyed
by position in the coordinate space *after* the edit: a modification may
sit upstream of the edit or inside the new span
``begin..begin + len(variant_sequence) - 1``, but never past it, and never
at or after ``begin`` when the edit is a deletion or a stop gain.

Edit kinds
----------
- Substitution: ``"P" -> "V"`` (equal length)
- Insertion: ``"" -> "GG"`` or ``"A" -> "AGG"``
- Deletion: ``"AAA" -> ""``
- Stop gain: ``"E" -> "E*"`` (everything after the ``*`` is discarded)

Key Features
------------
- Construction-time validation with stable error messages
- Result-style ``try_add_modification`` and batch ``add_modifications``
- Per-sample splitting of multi-sample genotype records
- Merging of equivalent per-sample variants
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ..constants import STOP_CODON
from ..modifications import (
    Modification,
    ModificationMap,
    copy_modification_map,
    merge_modification_maps,
    modification_multiset,
)
from .variant_call import VariantCallRecord, Zygosity

logger = logging.getLogger(__name__)

INVALID_COORDINATES_MESSAGE = "SequenceVariation coordinates are invalid."
INVALID_MODIFICATIONS_MESSAGE = (
    "SequenceVariation contains modification positions that are invalid after applying the variation"
)

# try_add_modification failure reasons
NULL_MODIFICATION = "Modification is null."
NON_POSITIVE_POSITION = "Position must be > 0."
TERMINATION_POSITION = "Position invalid for a termination or deletion at/after the begin coordinate."
BEYOND_VARIANT_SPAN = "Position beyond the new variant span."

# split_per_genotype description modes
MODE_HOMOZYGOUS_REF = "HomozygousRef"
MODE_HOMOZYGOUS_ALT = "HomozygousAlt"
MODE_HETEROZYGOUS_REF = "HeterozygousRef"
MODE_HETEROZYGOUS_ALT = "HeterozygousAlt"
MODE_MIXED_ALT_INDEX = "MixedAltIndex(StoredAltOnly)"

# Descriptions listed verbatim in a combined variant before summarising
MAX_LISTED_DESCRIPTIONS = 3


class SequenceVariation:
    """A sequence edit at 1-based positions ``begin..end``.

    Parameters
    ----------
    begin : int
        First replaced position (1-based)
    end : int, optional
        Last replaced position. Defaults to ``begin + len(original) - 1``,
        or ``begin`` for an insertion with an empty original.
    original_sequence : str
        Residues replaced (may be empty for an insertion)
    variant_sequence : str
        Replacement residues (empty for a deletion, ending in '*' for a
        stop gain)
    description : str
        Free-text label
    variant_call : VariantCallRecord or str, optional
        Genotype data; a raw VCF line is parsed
    one_based_modifications : dict, optional
        Position -> modifications on the variant allele
    check_modification_sites : bool
        Validate modification positions against the edit (default True)

    Raises
    ------
    ValueError
        If the coordinates or edit are invalid, or a modification sits at
        an illegal position

    Examples
    --------
    >>> sv = SequenceVariation(70, 70, "S", "N", "missense")
    >>> sv.simple_string()
    'S70N'
    >>> SequenceVariation(369, 373, "AHMPC", "VHMPY").simple_string()
    'AHMPC369-373VHMPY'
    """

    def __init__(
        self,
        begin: int,
        end: Optional[int] = None,
        original_sequence: Optional[str] = "",
        variant_sequence: Optional[str] = "",
        description: Optional[str] = "",
        variant_call: Union[VariantCallRecord, str, None] = None,
        one_based_modifications: Optional[ModificationMap] = None,
        check_modification_sites: bool = True,
    ):
        self.original_sequence = original_sequence or ""
        self.variant_sequence = variant_sequence or ""
        if end is None:
            end = begin + len(self.original_sequence) - 1 if self.original_sequence else begin
        self.begin = begin
        self.end = end
        self.description = description or ""
        if isinstance(variant_call, str):
            variant_call = VariantCallRecord(variant_call)
        self.variant_call: Optional[VariantCallRecord] = variant_call
        self.one_based_modifications: ModificationMap = copy_modification_map(one_based_modifications)

        if not self.are_valid():
            raise ValueError(INVALID_COORDINATES_MESSAGE)

        if check_modification_sites:
            invalid = list(self.get_invalid_modification_positions())
            if invalid:
                raise ValueError(
                    f"{INVALID_MODIFICATIONS_MESSAGE}: {', '.join(str(p) for p in invalid)}"
                )

    # =========================================================================
    # Edit Semantics
    # =========================================================================

    def are_valid(self) -> bool:
        """Coordinates are 1-based and ordered, and the edit changes something."""
        if self.begin < 1 or self.end < self.begin:
            return False
        return self.original_sequence != self.variant_sequence

    @property
    def is_stop_gain(self) -> bool:
        return self.variant_sequence.endswith(STOP_CODON)

    @property
    def is_deletion(self) -> bool:
        return len(self.variant_sequence) == 0

    @property
    def is_termination(self) -> bool:
        """Residues at and after ``begin`` cease to exist on the variant allele."""
        return self.is_stop_gain or self.is_deletion

    @property
    def length_change(self) -> int:
        return len(self.variant_sequence) - len(self.original_sequence)

    @property
    def new_span_end(self) -> int:
        """Last position of the replacement on the edited sequence."""
        return self.begin + len(self.variant_sequence) - 1

    def simple_string(self) -> str:
        """Compact token, e.g. 'S70N' or 'AHMPC369-373VHMPY'."""
        if self.end > self.begin:
            position = f"{self.begin}-{self.end}"
        else:
            position = str(self.begin)
        return f"{self.original_sequence}{position}{self.variant_sequence}"

    # =========================================================================
    # Span Relations
    # =========================================================================

    def intersects(self, other: Union["SequenceVariation", int]) -> bool:
        """Inclusive overlap of spans (or a position inside this span)."""
        if isinstance(other, int):
            return self.includes_position(other)
        return other.end >= self.begin and other.begin <= self.end

    def includes(self, other: Union["SequenceVariation", int]) -> bool:
        """This span fully contains the other span (or position)."""
        if isinstance(other, int):
            return self.includes_position(other)
        return self.begin <= other.begin and self.end >= other.end

    def includes_position(self, position: int) -> bool:
        return self.begin <= position <= self.end

    # =========================================================================
    # Site-Modification Engine
    # =========================================================================

    def _position_error(self, position: int) -> Optional[str]:
        if position <= 0:
            return NON_POSITIVE_POSITION
        if self.is_termination and position >= self.begin:
            return TERMINATION_POSITION
        if position > self.new_span_end:
            return BEYOND_VARIANT_SPAN
        return None

    def try_add_modification(
        self, position: int, modification: Optional[Modification]
    ) -> Tuple[bool, Optional[str]]:
        """Attach a modification if its position is legal for this edit.

        Parameters
        ----------
        position : int
            1-based position on the edited sequence
        modification : Modification
            Modification to append at ``position``

        Returns
        -------
        ok : bool
            True when the modification was attached
        reason : str or None
            Failure reason when not attached

        Examples
        --------
        >>> sv = SequenceVariation(10, 12, "AAA", "")
        >>> sv.try_add_modification(11, Modification("Oxidation"))
        (False, 'Position invalid for a termination or deletion at/after the begin coordinate.')
        """
        if modification is None:
            return False, NULL_MODIFICATION
        reason = self._position_error(position)
        if reason is not None:
            return False, reason
        self.one_based_modifications.setdefault(position, []).append(modification)
        return True, None

    def add_modifications(
        self,
        batch: Optional[Iterable[Tuple[int, Optional[Modification]]]],
        throw_on_first_invalid: bool = False,
    ) -> Tuple[int, List[Tuple[int, str]]]:
        """Attach several modifications in order.

        Entries that succeed before a failure stay attached. With
        ``throw_on_first_invalid`` the first failure raises; otherwise
        failures are collected and processing continues.

        Parameters
        ----------
        batch : iterable of (int, Modification)
            Position / modification pairs
        throw_on_first_invalid : bool
            Raise on the first rejected entry

        Returns
        -------
        added : int
            Number of modifications attached
        skipped : List[Tuple[int, str]]
            Rejected (position, reason) pairs

        Raises
        ------
        ValueError
            "Invalid modification at position <p>: <reason>" when
            ``throw_on_first_invalid`` is set
        """
        added = 0
        skipped: List[Tuple[int, str]] = []
        if batch is None:
            return added, skipped

        for position, modification in batch:
            ok, reason = self.try_add_modification(position, modification)
            if ok:
                added += 1
                continue
            if throw_on_first_invalid:
                raise ValueError(f"Invalid modification at position {position}: {reason}")
            skipped.append((position, reason))

        return added, skipped

    def get_invalid_modification_positions(self) -> Iterator[int]:
        """Yield every attached modification position that is illegal for this edit.

        Used to audit maps that were filled without validation; continues
        past each offending position.
        """
        for position in list(self.one_based_modifications):
            if self._position_error(position) is not None:
                yield position

    # =========================================================================
    # Genotype Splitting
    # =========================================================================

    def split_per_genotype(
        self,
        min_depth: int = 0,
        include_reference_for_heterozygous: bool = False,
        emit_reference_for_homozygous_ref: bool = False,
        skip_if_alt_index_mismatch: bool = True,
    ) -> List["SequenceVariation"]:
        """Split a multi-sample variant into one variant per sample and allele.

        Each produced variant carries a single-sample genotype record and a
        description tagged with sample, zygosity, depth and mode, e.g.
        ``"missense | Sample=0 Zygosity=Heterozygous Depth=40 Mode=HeterozygousAlt"``.

        Parameters
        ----------
        min_depth : int
            Samples whose total depth is below this are skipped
        include_reference_for_heterozygous : bool
            Also request a reference entry for heterozygous samples
        emit_reference_for_homozygous_ref : bool
            Request a reference entry for 0/0 samples
        skip_if_alt_index_mismatch : bool
            Skip samples calling an alternate allele other than this one

        Returns
        -------
        List[SequenceVariation]
            Per-sample variants. Empty for a truncated record or one
            without genotypes.

        Notes
        -----
        A reference entry repeats the original sequence as the variant,
        which is not a real edit; such candidates fail construction and
        are left out, so only alternate entries are produced.
        """
        record = self.variant_call
        if record is None or not record.has_genotypes or not record.fixed_columns:
            return []

        stored_alt_index = record.allele_index
        result: List[SequenceVariation] = []

        for sample in record.samples:
            gt_tokens = record.genotypes[sample]
            depth = record.depth(sample)
            if depth < min_depth:
                continue

            zygosity = record.zygosity.get(sample, Zygosity.UNKNOWN)
            alleles = [int(t) for t in gt_tokens if t != "."]
            if not alleles:
                continue

            all_ref = all(a == 0 for a in alleles)
            all_stored_alt = stored_alt_index > 0 and all(a == stored_alt_index for a in alleles)
            different_alt = stored_alt_index > 0 and any(a > 0 and a != stored_alt_index for a in alleles)
            if different_alt and skip_if_alt_index_mismatch:
                continue

            single_sample_line = record.single_sample_line(sample)

            def try_add(variant_sequence: str, mode: str):
                description = f"{self.description} | Sample={sample} Zygosity={zygosity} Depth={depth} Mode={mode}"
                try:
                    result.append(SequenceVariation(
                        self.begin,
                        self.end,
                        self.original_sequence,
                        variant_sequence,
                        description,
                        single_sample_line,
                        self.one_based_modifications,
                    ))
                except ValueError as e:
                    logger.debug(f"Skipping {mode} candidate for sample {sample} of {self.simple_string()}: {e}")

            if all_ref:
                if emit_reference_for_homozygous_ref:
                    try_add(self.original_sequence, MODE_HOMOZYGOUS_REF)
            elif all_stored_alt:
                try_add(self.variant_sequence, MODE_HOMOZYGOUS_ALT)
            elif different_alt:
                try_add(self.variant_sequence, MODE_MIXED_ALT_INDEX)
            else:
                if include_reference_for_heterozygous:
                    try_add(self.original_sequence, MODE_HETEROZYGOUS_REF)
                try_add(self.variant_sequence, MODE_HETEROZYGOUS_ALT)

        logger.debug(f"Split {self.simple_string()} into {len(result)} per-sample variants")
        return result

    @staticmethod
    def combine_equivalent(
        variations: Optional[Iterable["SequenceVariation"]],
    ) -> List["SequenceVariation"]:
        """Merge variants describing the same edit.

        Variants with equal begin, end, original and variant sequence are
        merged into one: modification maps are unioned (a modification
        identifier appears once per position), the first available genotype
        record is kept, and distinct descriptions are combined as
        ``"Combined(n): a | b | c (+k more)"``.

        Parameters
        ----------
        variations : iterable of SequenceVariation or None

        Returns
        -------
        List[SequenceVariation]
            Sorted by begin, end, original and variant sequence

        Examples
        --------
        >>> a = SequenceVariation(4, 4, "P", "V", "sample 0")
        >>> b = SequenceVariation(4, 4, "P", "V", "sample 1")
        >>> [v.description for v in SequenceVariation.combine_equivalent([a, b])]
        ['Combined(2): sample 0 | sample 1']
        """
        if variations is None:
            return []

        groups: Dict[Tuple[int, int, str, str], List[SequenceVariation]] = defaultdict(list)
        for v in variations:
            if v is None:
                continue
            groups[(v.begin, v.end, v.original_sequence, v.variant_sequence)].append(v)

        result: List[SequenceVariation] = []
        for key in sorted(groups):
            members = groups[key]
            if len(members) == 1:
                result.append(members[0])
                continue

            descriptions = list(dict.fromkeys(m.description for m in members if m.description))
            if len(descriptions) <= 1:
                description = descriptions[0] if descriptions else ""
            else:
                listed = " | ".join(descriptions[:MAX_LISTED_DESCRIPTIONS])
                description = f"Combined({len(descriptions)}): {listed}"
                if len(descriptions) > MAX_LISTED_DESCRIPTIONS:
                    description += f" (+{len(descriptions) - MAX_LISTED_DESCRIPTIONS} more)"

            merged: ModificationMap = {}
            for m in members:
                merged = merge_modification_maps(merged, m.one_based_modifications, deduplicate=True)

            record = next((m.variant_call for m in members if m.variant_call is not None), None)
            begin, end, original, variant = key
            try:
                result.append(SequenceVariation(begin, end, original, variant, description, record, merged))
            except ValueError as e:
                logger.debug(f"Skipping combined variant {original}{begin}{variant}: {e}")

        return result

    # =========================================================================
    # Value Semantics
    # =========================================================================

    def _edit_key(self) -> Tuple[int, int, str, str]:
        return self.begin, self.end, self.original_sequence, self.variant_sequence

    def __eq__(self, other):
        if not isinstance(other, SequenceVariation):
            return NotImplemented
        return (
            self._edit_key() == other._edit_key()
            and modification_multiset(self.one_based_modifications)
            == modification_multiset(other.one_based_modifications)
        )

    def __hash__(self):
        return hash(self._edit_key())

    def __repr__(self) -> str:
        return (
            f"SequenceVariation({self.begin}, {self.end}, {self.original_sequence!r}, "
            f"{self.variant_sequence!r}, {self.description!r})"
        )

    def __str__(self) -> str:
        return self.simple_string()
