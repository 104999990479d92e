"""
Word dictionary backed by a symbol trie.

Each word is stored as a sequence of `Char` symbols and maps to a
`WordEntry` holding its part of speech and meaning.  Entries are loaded
from a delimited source file with one ``word,pos,meaning`` row per line.
"""

from __future__ import annotations

import argparse
import csv
import logging
import os
from dataclasses import asdict, dataclass
from typing import Iterable, Sequence

from seqtrie import Symbol, Traversal, Trie

logger = logging.getLogger("seqtrie.dictionary")

DEFAULT_SOURCE = "source.csv"


@dataclass(frozen=True, eq=False)
class Char(Symbol):
    """A single textual character used as a trie symbol."""

    char: str

    def __post_init__(self) -> None:
        if not isinstance(self.char, str) or len(self.char) != 1:
            raise ValueError(f"Char expects exactly one character, got {self.char!r}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Char):
            return NotImplemented
        return self.char == other.char

    def __hash__(self) -> int:
        return hash(self.char)

    def __str__(self) -> str:
        return self.char


def to_symbols(text: str) -> list[Char]:
    return [Char(c) for c in text]


def from_symbols(symbols: Iterable[Char]) -> str:
    return "".join(str(s) for s in symbols)


@dataclass
class WordEntry:
    """Metadata stored for one word."""

    word: str
    pos: str
    meaning: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    def __str__(self) -> str:
        return f"[{self.word}; part of speech: {self.pos}; meaning: {self.meaning}]"


def normalize(word: str) -> str:
    return word.strip().lower()


class Dictionary:
    """Word -> `WordEntry` lookups over a `Trie` of `Char` symbols."""

    def __init__(
        self,
        traversal: Traversal | str = Traversal.INCREMENTAL,
        overwrite_allowed: bool = True,
    ) -> None:
        self.trie: Trie = Trie(
            traversal=traversal,
            overwrite_allowed=overwrite_allowed,
            symbol_type=Char,
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, path: str) -> int:
        """Add every well-formed row of *path*; return how many were added.

        Rows need at least three fields.  Short or blank-word rows are
        skipped with a warning.
        """
        if not os.path.exists(path):
            raise FileNotFoundError(path)
        added = 0
        with open(path, "r", encoding="utf-8", newline="") as f:
            for lineno, row in enumerate(csv.reader(f), start=1):
                if not row:
                    continue
                if len(row) < 3 or not row[0].strip():
                    logger.warning("Skipping malformed row %d in %s: %r", lineno, path, row)
                    continue
                word, pos, meaning = (field.strip() for field in row[:3])
                self.add(WordEntry(word, pos, meaning))
                added += 1
        logger.info("Loaded %d entries from %s", added, path)
        return added

    def add_all(self, entries: Iterable[WordEntry]) -> None:
        self.trie.put_all((self._key(e.word), e) for e in entries)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def add(self, entry: WordEntry) -> WordEntry | None:
        return self.trie.put(self._key(entry.word), entry)

    def lookup(self, word: str) -> WordEntry | None:
        return self.trie.get(self._key(word))

    def remove(self, word: str) -> WordEntry | None:
        return self.trie.remove(self._key(word))

    def entries_by_pos(self, pos: str) -> list[WordEntry]:
        """All entries whose part of speech matches *pos*, ignoring case."""
        wanted = pos.strip().lower()
        matches: list[WordEntry] = []

        def collect(path) -> bool:
            entry = path[-1].payload
            if entry.pos.lower() == wanted:
                matches.append(entry)
            return True

        self.trie.dft(collect)
        return sorted(matches, key=lambda e: e.word)

    def complete(self, prefix: str, limit: int | None = None) -> list[str]:
        """Stored words starting with *prefix*, sorted."""
        words = sorted(from_symbols(k) for k in self.trie.keys_with_prefix(self._key(prefix)))
        return words if limit is None else words[:limit]

    def words(self) -> list[str]:
        return sorted(from_symbols(k) for k in self.trie.key_set())

    def __len__(self) -> int:
        return len(self.trie)

    def __contains__(self, word: str) -> bool:
        return self.trie.contains_key(self._key(word))

    @staticmethod
    def _key(word: str) -> list[Char]:
        return to_symbols(normalize(word))


# ------------------------------------------------------------------
# Command-line demo
# ------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Look up words in a CSV dictionary.")
    parser.add_argument("words", nargs="*", default=["walk", "sky", "lie"],
                        help="words to look up")
    parser.add_argument("--source", default=DEFAULT_SOURCE,
                        help="CSV file with word,pos,meaning rows")
    parser.add_argument("--pos", default="noun",
                        help="list every entry with this part of speech")
    parser.add_argument("--traversal", choices=[t.value for t in Traversal],
                        default=Traversal.INCREMENTAL.value)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    dictionary = Dictionary(traversal=args.traversal)
    try:
        dictionary.load(args.source)
    except FileNotFoundError:
        logger.error("Dictionary source %s not found", args.source)
        return 1

    for word in args.words:
        print(dictionary.lookup(word))

    print(f"\n\n{args.pos.capitalize()}s in the dictionary:")
    for entry in dictionary.entries_by_pos(args.pos):
        print(entry)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
