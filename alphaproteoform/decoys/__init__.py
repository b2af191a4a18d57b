"""Decoy polymers for target-decoy searches.

Reverse and slide decoys of whole polymers with all positional
annotations carried over, plus a palindrome check for degenerate reverse
decoys.
"""

from .generator import (
    DecoyType,
    DecoyParams,
    generate_decoys,
)

from .reverse import (
    generate_reverse_decoy,
    reverse_sequence,
)

from .slide import (
    generate_slide_decoy,
)

from .indexing import (
    reverse_position_map,
    slide_sequence,
)

from .validation import (
    is_palindromic,
    find_palindromic_sequences,
)

__all__ = [
    # Decoy generation
    'DecoyType',
    'DecoyParams',
    'generate_decoys',
    'generate_reverse_decoy',
    'generate_slide_decoy',
    'reverse_sequence',

    # Position maps (Numba)
    'reverse_position_map',
    'slide_sequence',

    # Validation
    'is_palindromic',
    'find_palindromic_sequences',
]
