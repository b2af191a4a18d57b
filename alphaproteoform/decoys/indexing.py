"""Position arithmetic for decoy generation (Numba-compiled).

Decoys are built by permuting residues. Every annotation then has to move
with its residue, so both decoy types are expressed as index maps:

- ``reverse_position_map``: 1-based position -> 1-based decoy position
- ``slide_old_indices``: 0-based decoy index -> 0-based source index
- ``invert_permutation``: the inverse, source index -> decoy index

Maps are plain int64 arrays so that remapping a whole annotation set is a
lookup per position.

Examples
--------
>>> reverse_position_map(5, False)[1:]
array([5, 4, 3, 2, 1])
>>> reverse_position_map(5, True)[1:]  # initiator pinned at position 1
array([1, 5, 4, 3, 2])
"""

import numpy as np
import numba


# =============================================================================
# Helper Functions
# =============================================================================

def encode_sequence_to_ord(sequence: str) -> np.ndarray:
    """Encode a residue string to an ord() array for Numba processing.

    Parameters
    ----------
    sequence : str
        Residue sequence (one character per residue)

    Returns
    -------
    sequence_ord : np.ndarray (uint8)
        Array of ord() values for each residue

    Examples
    --------
    >>> encode_sequence_to_ord("AUGC")
    array([65, 85, 71, 67], dtype=uint8)
    """
    return np.array([ord(c) for c in sequence], dtype=np.uint8)


def decode_ord_to_sequence(sequence_ord: np.ndarray) -> str:
    """Inverse of ``encode_sequence_to_ord``."""
    return "".join(chr(c) for c in sequence_ord)


# =============================================================================
# Reverse Decoys
# =============================================================================

@numba.jit(nopython=True, cache=True)
def reverse_position_map(length: int, initiator_preserved: bool) -> np.ndarray:
    """1-based position map of a reversed sequence.

    Parameters
    ----------
    length : int
        Sequence length L
    initiator_preserved : bool
        Position 1 stays in place and the remainder is reversed

    Returns
    -------
    position_map : np.ndarray (int64), shape (L + 1,)
        ``position_map[p]`` is the decoy position of residue ``p``;
        index 0 is unused

    Notes
    -----
    Without initiator: p -> L - p + 1.
    With initiator: 1 -> 1, p -> L - p + 2 for p > 1.
    """
    position_map = np.zeros(length + 1, dtype=np.int64)
    for p in range(1, length + 1):
        if initiator_preserved:
            if p == 1:
                position_map[p] = 1
            else:
                position_map[p] = length - p + 2
        else:
            position_map[p] = length - p + 1
    return position_map


# =============================================================================
# Slide Decoys
# =============================================================================

@numba.jit(nopython=True, cache=True)
def get_old_slided_index(i: int, num_slides: int, length: int, initiator_preserved: bool) -> int:
    """Source index of decoy index ``i`` under the reflective slide.

    Even indices walk ``num_slides`` forward and odd indices backward,
    reflecting off both sequence ends. For a given length the walk is a
    bijection on ``0..length-1``.
    """
    if length <= 1 or (i == 0 and initiator_preserved):
        return i

    if initiator_preserved:
        i -= 1
        length -= 1

    forward = i % 2 == 0
    old_index = i + num_slides if forward else i - num_slides

    while True:
        if old_index < 0:
            forward = True
        elif old_index >= length:
            forward = False
        else:
            return old_index + 1 if initiator_preserved else old_index

        if forward:
            old_index = -old_index - 1
        else:
            old_index = 2 * length - old_index - 1


def effective_num_slides(num_slides: int, length: int, initiator_preserved: bool) -> int:
    """Bump the slide distance by one when it is a multiple of the slid length.

    Sliding by a multiple of the length would leave residues in place.
    """
    slid_length = length - 1 if initiator_preserved else length
    if slid_length > 0 and num_slides % slid_length == 0:
        return num_slides + 1
    return num_slides


@numba.jit(nopython=True, cache=True)
def slide_old_indices(length: int, num_slides: int, initiator_preserved: bool) -> np.ndarray:
    """0-based source index for every decoy index."""
    old_indices = np.empty(length, dtype=np.int64)
    for i in range(length):
        old_indices[i] = get_old_slided_index(i, num_slides, length, initiator_preserved)
    return old_indices


@numba.jit(nopython=True, cache=True)
def invert_permutation(permutation: np.ndarray) -> np.ndarray:
    """Inverse of a permutation array: ``inverse[permutation[i]] == i``."""
    inverse = np.empty(permutation.shape[0], dtype=np.int64)
    for i in range(permutation.shape[0]):
        inverse[permutation[i]] = i
    return inverse


@numba.jit(nopython=True, cache=True)
def apply_permutation(sequence_ord: np.ndarray, old_indices: np.ndarray) -> np.ndarray:
    """Gather residues: ``result[i] = sequence_ord[old_indices[i]]``."""
    result = np.empty(sequence_ord.shape[0], dtype=np.uint8)
    for i in range(sequence_ord.shape[0]):
        result[i] = sequence_ord[old_indices[i]]
    return result


def slide_sequence(sequence: str, num_slides: int, initiator_preserved: bool):
    """Slide a sequence and return it with its position maps.

    Parameters
    ----------
    sequence : str
        Sequence to slide
    num_slides : int
        Requested slide distance (bumped when it would be a no-op)
    initiator_preserved : bool
        Keep the first residue in place

    Returns
    -------
    slided : str
        Slid sequence
    old_indices : np.ndarray (int64)
        Decoy index -> source index
    new_indices : np.ndarray (int64)
        Source index -> decoy index

    Examples
    --------
    >>> slided, old, new = slide_sequence("ABCDEFG", 20, False)
    >>> sorted(slided) == sorted("ABCDEFG")
    True
    """
    length = len(sequence)
    if length == 0:
        empty = np.empty(0, dtype=np.int64)
        return sequence, empty, empty
    num_slides = effective_num_slides(num_slides, length, initiator_preserved)
    old_indices = slide_old_indices(length, num_slides, initiator_preserved)
    slided_ord = apply_permutation(encode_sequence_to_ord(sequence), old_indices)
    return decode_ord_to_sequence(slided_ord), old_indices, invert_permutation(old_indices)
