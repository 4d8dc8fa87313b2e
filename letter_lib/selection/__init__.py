"""Prompt selection.

Exports:
    WordCatalog: Static table of prompt words tagged with rare letters.
    WordEntry: One catalog word.
    SelectionEngine: Chooses the next letter or word to request.
    SelectionMode: Letter or word prompts.
"""

from .catalog import COMMON_WORDS, RARE_LETTER_WORDS, WordCatalog, WordEntry
from .engine import SelectionEngine, SelectionMode

__all__ = [
    'WordCatalog', 'WordEntry', 'RARE_LETTER_WORDS', 'COMMON_WORDS',
    'SelectionEngine', 'SelectionMode',
]
