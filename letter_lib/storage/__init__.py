"""On-disk sample storage.

Exports:
    SampleStore: Per-letter append-only PNG store.
    sample_filename: File name for a (letter, sequence) pair.
    parse_sequence_number: Inverse of sample_filename.
    encode_png: Lossless PNG encoding of a raster.
"""

from .sample_store import SampleStore, encode_png, parse_sequence_number, sample_filename

__all__ = ['SampleStore', 'sample_filename', 'parse_sequence_number', 'encode_png']
