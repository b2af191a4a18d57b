"""Modification value type and position-keyed modification maps.

Polymers and sequence variants carry modifications as a mapping from a
1-based residue position to the list of modifications possible at that
residue. This module defines the modification value type and the small set
of map operations the variant and decoy engines share.

Key Features
------------
- Frozen ``Modification`` with motif-qualified identifiers
- Location restrictions normalised to a closed vocabulary
- Copy / merge helpers that never mutate their inputs
- Multiset view used for order-independent equality

Examples
--------
>>> ox = Modification("Oxidation", "Common Variable", target="M")
>>> ox.id_with_motif
'Oxidation on M'
>>> mods = {1: [ox]}
>>> copied = copy_modification_map(mods)
>>> copied[1] is mods[1], copied[1][0] is ox
(False, True)
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional

from .constants import (
    ACETYL_MASS,
    CARBAMIDOMETHYL_MASS,
    DEAMIDATION_MASS,
    OXIDATION_MASS,
    PHOSPHO_MASS,
)

ModificationMap = Dict[int, List["Modification"]]


# =============================================================================
# Location Restrictions
# =============================================================================

UNASSIGNED_LOCATION = "Unassigned."

VALID_LOCATION_RESTRICTIONS = frozenset({
    "N-terminal.",
    "C-terminal.",
    "Peptide N-terminal.",
    "Peptide C-terminal.",
    "Anywhere.",
    "3'-terminal.",
    "5'-terminal.",
    "Oligo 3'-terminal.",
    "Oligo 5'-terminal.",
})


def normalize_location_restriction(location: Optional[str]) -> str:
    """Map a location restriction onto the known vocabulary.

    Parameters
    ----------
    location : str or None
        Raw restriction, e.g. "N-terminal." or "Anywhere."

    Returns
    -------
    str
        The restriction itself when recognised, otherwise "Unassigned."
    """
    if location in VALID_LOCATION_RESTRICTIONS:
        return location
    return UNASSIGNED_LOCATION


# =============================================================================
# Modification Value Type
# =============================================================================

@dataclass(frozen=True)
class Modification:
    """A modification that may occur at a residue.

    Opaque to the transformations: only its identity (``id_with_motif``)
    is compared, and the same object is carried to every new position a
    transformation maps it to.

    Parameters
    ----------
    original_id : str
        Modification name, e.g. "Phosphorylation"
    modification_type : str
        Category, e.g. "Common Biological" or "nucleotide substitution"
    target : str, optional
        Target residue motif, e.g. "S"
    location_restriction : str
        One of VALID_LOCATION_RESTRICTIONS; anything else is stored as
        "Unassigned."
    monoisotopic_mass : float, optional
        Mass shift in Da
    """

    original_id: str
    modification_type: str = ""
    target: Optional[str] = None
    location_restriction: str = "Anywhere."
    monoisotopic_mass: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(
            self,
            "location_restriction",
            normalize_location_restriction(self.location_restriction),
        )

    @property
    def id_with_motif(self) -> str:
        """Identifier qualified by target motif, e.g. 'Oxidation on M'."""
        if " on " in self.original_id:
            return self.original_id
        if " of " in self.original_id:
            return self.original_id.replace(" of ", " on ")
        if self.target:
            return f"{self.original_id} on {self.target}"
        return self.original_id

    def __str__(self) -> str:
        return self.id_with_motif


# =============================================================================
# Modification Map Operations
# =============================================================================

def copy_modification_map(mods: Optional[ModificationMap]) -> ModificationMap:
    """Copy a modification map into new lists holding the same objects.

    Parameters
    ----------
    mods : dict or None
        Position -> list of modifications

    Returns
    -------
    dict
        New dict with new lists; ``{}`` for None
    """
    if not mods:
        return {}
    return {position: list(mod_list) for position, mod_list in mods.items()}


def merge_modification_maps(
    target: Optional[ModificationMap],
    source: Optional[ModificationMap],
    deduplicate: bool = False,
) -> ModificationMap:
    """Merge two modification maps into a new map.

    Lists at shared positions are concatenated (target first). With
    ``deduplicate``, a modification whose ``id_with_motif`` is already
    present at a position is not added again.

    Parameters
    ----------
    target : dict or None
        Map whose entries come first
    source : dict or None
        Map appended to ``target``
    deduplicate : bool
        Collapse repeated identifiers at the same position

    Returns
    -------
    dict
        New merged map; neither input is modified

    Examples
    --------
    >>> ox = Modification("Oxidation", target="M")
    >>> merge_modification_maps({3: [ox]}, {3: [ox]}, deduplicate=True)[3] == [ox]
    True
    """
    merged = copy_modification_map(target)
    if not source:
        return merged

    for position, mod_list in source.items():
        existing = merged.setdefault(position, [])
        seen = {m.id_with_motif for m in existing}
        for mod in mod_list:
            if mod is None:
                continue
            if deduplicate:
                if mod.id_with_motif in seen:
                    continue
                seen.add(mod.id_with_motif)
            existing.append(mod)
    return merged


def modification_multiset(mods: Optional[ModificationMap]) -> Dict[int, Counter]:
    """Order-independent, count-sensitive view of a modification map.

    Positions whose list is empty are omitted so that ``{5: []}`` and
    ``{}`` compare equal.
    """
    if not mods:
        return {}
    return {
        position: Counter(m.id_with_motif for m in mod_list if m is not None)
        for position, mod_list in mods.items()
        if mod_list
    }


def count_modifications(mods: Optional[ModificationMap]) -> int:
    """Total number of modification objects in a map."""
    if not mods:
        return 0
    return sum(len(mod_list) for mod_list in mods.values())


# =============================================================================
# Stock Modifications
# =============================================================================

COMMON_MODIFICATIONS = {
    "Carbamidomethyl": Modification(
        "Carbamidomethyl", "Common Fixed", target="C",
        monoisotopic_mass=CARBAMIDOMETHYL_MASS,
    ),
    "Oxidation": Modification(
        "Oxidation", "Common Variable", target="M",
        monoisotopic_mass=OXIDATION_MASS,
    ),
    "Acetylation": Modification(
        "Acetylation", "Common Biological", target="X",
        location_restriction="N-terminal.", monoisotopic_mass=ACETYL_MASS,
    ),
    "Phosphorylation": Modification(
        "Phosphorylation", "Common Biological", target="S",
        monoisotopic_mass=PHOSPHO_MASS,
    ),
    "Deamidation": Modification(
        "Deamidation", "Common Artifact", target="N",
        monoisotopic_mass=DEAMIDATION_MASS,
    ),
}
