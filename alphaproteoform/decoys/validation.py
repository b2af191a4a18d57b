"""Checks for degenerate reversal decoys.

A sequence that reads the same from both ends reverses onto itself, so its
reverse decoy competes with the target for every spectrum. The palindrome
degree counts matching residue pairs from the outside in.
"""

import logging
from typing import Iterable, List, Optional, Tuple

import numpy as np
import numba

from .indexing import encode_sequence_to_ord

logger = logging.getLogger(__name__)


@numba.jit(nopython=True, cache=True)
def palindrome_degree(sequence_ord: np.ndarray, degree_cutoff: int) -> int:
    """Count matching outer residue pairs (Numba-compiled).

    Parameters
    ----------
    sequence_ord : np.ndarray (uint8)
        Sequence as ord() values
    degree_cutoff : int
        Stop counting once this degree is reached; <= 0 counts until the
        first mismatch

    Returns
    -------
    degree : int
        Matching pairs ``seq[i] == seq[n-1-i]`` before the first mismatch,
        saturated at ``degree_cutoff``. The middle residue of an odd-length
        sequence is never counted.
    """
    n = sequence_ord.shape[0]
    degree = 0
    for i in range(n // 2):
        if sequence_ord[i] != sequence_ord[n - 1 - i]:
            break
        degree += 1
        if degree_cutoff > 0 and degree >= degree_cutoff:
            break
    return degree


def is_palindromic(sequence: Optional[str], degree_cutoff: Optional[int] = None) -> Tuple[bool, int]:
    """Whether a sequence is palindromic enough to make its reverse decoy degenerate.

    Parameters
    ----------
    sequence : str or None
        Residue sequence
    degree_cutoff : int, optional
        Required number of matching outer pairs. Without a cutoff the
        whole sequence must be a palindrome.

    Returns
    -------
    palindromic : bool
    degree : int
        Matching outer pairs, saturated at ``degree_cutoff``

    Examples
    --------
    >>> is_palindromic("AABBAA", degree_cutoff=3)
    (True, 3)
    >>> is_palindromic("ABCDEFCBA")
    (False, 3)
    >>> is_palindromic("")
    (False, 0)
    """
    if not sequence:
        return False, 0

    cutoff = degree_cutoff if degree_cutoff is not None else 0
    degree = int(palindrome_degree(encode_sequence_to_ord(sequence), cutoff))

    if degree_cutoff is not None:
        return degree >= degree_cutoff, degree
    return degree == len(sequence) // 2, degree


def find_palindromic_sequences(polymers: Iterable, degree_cutoff: Optional[int] = None) -> List[str]:
    """Accessions of polymers whose sequence is palindromic.

    Parameters
    ----------
    polymers : iterable of BioPolymer
    degree_cutoff : int, optional
        Passed to ``is_palindromic``

    Returns
    -------
    List[str]
        Accessions in input order
    """
    flagged = []
    for polymer in polymers:
        palindromic, degree = is_palindromic(polymer.base_sequence, degree_cutoff)
        if palindromic:
            logger.debug(f"{polymer.accession} is palindromic (degree {degree})")
            flagged.append(polymer.accession)
    if flagged:
        logger.warning(f"{len(flagged):,} sequences reverse onto themselves; their decoys are degenerate")
    return flagged
