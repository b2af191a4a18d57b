"""AlphaProteoform - Sequence variant application and decoy generation for proteoforms.

Models proteins and nucleic acids with positional annotations (modifications,
sequence variants, truncation products, disulfide bonds, splice sites) and
keeps every 1-based coordinate exact while sequences are edited:

- variants: genotype-aware application of sequence variants
- decoys: reverse and slide decoys with remapped annotations
- biopolymer: the annotated sequence model and VCF genotype records
"""

__version__ = "0.1.0"

# Import main submodules for convenient access
from alphaproteoform import constants
from alphaproteoform import modifications
from alphaproteoform import biopolymer
from alphaproteoform import variants
from alphaproteoform import decoys

__all__ = [
    "constants",
    "modifications",
    "biopolymer",
    "variants",
    "decoys",
]
