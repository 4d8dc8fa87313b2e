"""Word catalog for word-mode prompts.

The catalog is a static table: words grouped by the rare letter they were
chosen to surface, plus a list of common words covering the remaining
letters. Each entry is tagged with the rare letters it contains so the
selection engine can prioritize words that hit several needed letters at
once.

The catalog pattern provides:
    - Validation of every entry (uppercase ASCII letters only)
    - One entry per distinct word, in a stable order
    - Lookup of words containing any of a set of letters

Example usage::

    from letter_lib.selection.catalog import WordCatalog

    catalog = WordCatalog.default()
    catalog.words_containing({'Q', 'Z'})[:3]
    # ('QUEEN', 'QUIET', 'QUICK')

    custom = WordCatalog.from_dict({'Q': ['QUIZ']}, common_words=['HELLO'])
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Mapping, Tuple

# Words grouped by the rare letter they surface
RARE_LETTER_WORDS: Dict[str, List[str]] = {
    'Q': ['QUEEN', 'QUIET', 'QUICK', 'QUAKE', 'QUEST', 'QUOTE', 'QUIRK', 'QUILT', 'SQUAD', 'EQUAL'],
    'X': ['XEROX', 'EXTRA', 'MIXED', 'PIXEL', 'TOXIC', 'BOXER', 'EXACT', 'OXIDE', 'RELAX', 'NEXUS'],
    'Z': ['ZEBRA', 'ZONES', 'CRAZY', 'FROZE', 'PIZZA', 'PRIZE', 'BLAZE', 'FUZZY', 'HAZEL', 'RAZOR'],
    'J': ['JOKER', 'JUDGE', 'JELLY', 'JUICE', 'MAJOR', 'ENJOY', 'JENGA', 'JUMBO', 'JOINT', 'JETTY'],
    'V': ['VOICE', 'VIVID', 'RIVER', 'ABOVE', 'HEAVY', 'VALVE', 'VENOM', 'COVER', 'GROVE', 'BRAVE'],
    'K': ['KNIFE', 'KITTY', 'KAYAK', 'KIOSK', 'KNOCK', 'ANKLE', 'BRAKE', 'CHALK', 'FLASK', 'SPARK'],
    'W': ['WATER', 'WORLD', 'WRIST', 'SWEET', 'TOWER', 'CROWN', 'LOWER', 'POWER', 'SWIFT', 'WHEAT'],
    'Y': ['YOUTH', 'YOUNG', 'YELLOW', 'YEAST', 'EARLY', 'HAPPY', 'SHINY', 'EMPTY', 'STYLE', 'PARTY'],
}

# Common words for when rare letters are well represented
COMMON_WORDS: List[str] = [
    'APPLE', 'BREAD', 'CHAIR', 'DANCE', 'EAGLE',
    'FRESH', 'GRAPE', 'HOUSE', 'LIGHT', 'MOUSE',
    'NIGHT', 'OCEAN', 'PIANO', 'RADIO', 'STONE',
    'TIGER', 'UNDER', 'BEACH', 'CLOCK', 'DREAM',
    'FLAME', 'GHOST', 'HEART', 'IMAGE', 'LASER',
    'MAGIC', 'NORTH', 'ORBIT', 'PEARL', 'SPORT',
    'TRUCK', 'ABOUT', 'BROWN', 'DRIVE', 'EIGHT',
    # Rich in F, M, B, D, P, G, H
    'FAMILY', 'FIELD', 'FOUND', 'FIFTY', 'FABLE',
    'MEMBER', 'MIGHT', 'MONTH', 'METAL', 'MARCH',
    'BADGE', 'BLOCK', 'BOARD', 'BELOW', 'BENCH',
    'DEPTH', 'DOUBT', 'DRAFT', 'DAILY', 'MEDAL',
    'PHASE', 'PLUMB', 'PRIDE', 'PROOF', 'PUPIL',
    'GLOBE', 'GUARD', 'GAUGE', 'GRIND', 'GRAND',
    'HUMOR', 'HOTEL', 'HONEY', 'HEDGE', 'HABIT',
]

_WORD_RE = re.compile(r'^[A-Z]+$')


def validate_word(word: str) -> str:
    """Return ``word`` if it is a non-empty uppercase ASCII word.

    Raises:
        ValueError: If the word has any other character or is empty.
    """
    if not isinstance(word, str) or not _WORD_RE.match(word):
        raise ValueError(f"Catalog words must be uppercase ASCII letters, got {word!r}")
    return word


@dataclass(frozen=True)
class WordEntry:
    """A catalog word tagged with the rare letters it contains."""
    word: str
    rare_letters: FrozenSet[str]

    @property
    def letters(self) -> FrozenSet[str]:
        return frozenset(self.word)

    def score(self, letters: Iterable[str]) -> int:
        """Number of distinct ``letters`` that appear in the word."""
        return sum(1 for letter in set(letters) if letter in self.word)


class WordCatalog:
    """Immutable collection of prompt words.

    Attributes:
        rare_letters: Letters the catalog has dedicated word lists for.
        entries: All entries, common words first, then each rare list.
    """

    def __init__(self, rare_letter_words: Mapping[str, Iterable[str]],
                 common_words: Iterable[str]):
        for letter in rare_letter_words:
            if len(letter) != 1:
                raise ValueError(f"Rare letter keys must be single letters, got {letter!r}")
            validate_word(letter)
        self.rare_letters: FrozenSet[str] = frozenset(rare_letter_words)

        ordered: List[str] = [validate_word(w) for w in common_words]
        for words in rare_letter_words.values():
            ordered.extend(validate_word(w) for w in words)

        seen = set()
        entries = []
        for word in ordered:
            if word in seen:
                continue
            seen.add(word)
            entries.append(WordEntry(word, frozenset(self.rare_letters & set(word))))
        if not entries:
            raise ValueError("Word catalog must contain at least one word")
        self.entries: Tuple[WordEntry, ...] = tuple(entries)

    @classmethod
    def default(cls) -> WordCatalog:
        """The built-in catalog."""
        return cls(RARE_LETTER_WORDS, COMMON_WORDS)

    @classmethod
    def from_dict(cls, rare_letter_words: Mapping[str, Iterable[str]],
                  common_words: Iterable[str] = ()) -> WordCatalog:
        return cls(rare_letter_words, common_words)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __contains__(self, word: str) -> bool:
        return any(e.word == word for e in self.entries)

    @property
    def words(self) -> Tuple[str, ...]:
        return tuple(e.word for e in self.entries)

    def words_for(self, rare_letter: str) -> Tuple[str, ...]:
        """Words tagged with ``rare_letter``."""
        return tuple(e.word for e in self.entries if rare_letter in e.rare_letters)

    def entries_containing(self, letters: Iterable[str]) -> Tuple[WordEntry, ...]:
        """Entries containing at least one of ``letters``."""
        wanted = set(letters)
        return tuple(e for e in self.entries if wanted & e.letters)

    def words_containing(self, letters: Iterable[str]) -> Tuple[str, ...]:
        return tuple(e.word for e in self.entries_containing(letters))
