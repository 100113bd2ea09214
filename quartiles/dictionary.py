from __future__ import annotations

import logging
import os
import pickle
from collections.abc import Iterable, Iterator
from pathlib import Path

logger = logging.getLogger("quartiles")

CACHE_FORMAT = "quartiles-dictionary"
CACHE_VERSION = 2


class InvalidDictionaryData(ValueError):
    """The binary dictionary cache could not be decoded."""


class TrieNode:
    __slots__ = ("children", "is_word")

    def __init__(self):
        self.children: dict[str, TrieNode] = {}
        self.is_word: bool = False


class Trie:
    def __init__(self):
        self.root = TrieNode()
        self.size = 0

    def insert(self, word: str):
        node = self.root
        for ch in word:
            if ch not in node.children:
                node.children[ch] = TrieNode()
            node = node.children[ch]
        if not node.is_word:
            node.is_word = True
            self.size += 1

    def find(self, prefix: str) -> TrieNode | None:
        node = self.root
        for ch in prefix:
            node = node.children.get(ch)
            if node is None:
                return None
        return node

    def words(self) -> Iterator[str]:
        stack: list[tuple[TrieNode, str]] = [(self.root, "")]
        while stack:
            node, text = stack.pop()
            if node.is_word:
                yield text
            for ch, child in node.children.items():
                stack.append((child, text + ch))


class Dictionary:
    """A set of words stored in a prefix tree.

    Membership and prefix queries are case-sensitive. Once loaded, a
    dictionary is only read, so one instance can be shared by any number
    of solvers.
    """

    def __init__(self, words: Iterable[str] = ()):
        self._trie = Trie()
        self.populate(words)

    def __len__(self) -> int:
        return self._trie.size

    def __iter__(self) -> Iterator[str]:
        return self._trie.words()

    def __eq__(self, other):
        if not isinstance(other, Dictionary):
            return NotImplemented
        return len(self) == len(other) and set(self) == set(other)

    def __repr__(self):
        return f"Dictionary({len(self)} words)"

    def is_empty(self) -> bool:
        return self._trie.size == 0

    def contains(self, word: str) -> bool:
        node = self._trie.find(word)
        return node is not None and node.is_word

    __contains__ = contains

    def contains_prefix(self, prefix: str) -> bool:
        """True if some stored word starts with ``prefix`` (or equals it)."""
        if self.is_empty():
            return False
        return self._trie.find(prefix) is not None

    def populate(self, words: Iterable[str]):
        for word in words:
            self._trie.insert(word)

    @classmethod
    def read_from_file(cls, path: str | os.PathLike) -> Dictionary:
        """Build a dictionary from a UTF-8 word list, one word per line."""
        dictionary = cls()
        with open(path, "r", encoding="utf-8") as f:
            dictionary.populate(word for word in (line.strip() for line in f) if word)
        logger.debug("Read text dictionary %s (%d words)", path, len(dictionary))
        return dictionary

    @classmethod
    def deserialize_from_file(cls, path: str | os.PathLike) -> Dictionary:
        """Load a dictionary from a binary cache written by ``serialize_to_file``.

        Raises ``InvalidDictionaryData`` if the bytes are not a cache of the
        current format. I/O failures propagate as ``OSError``.
        """
        with open(path, "rb") as f:
            content = f.read()
        try:
            payload = pickle.loads(content)
        except Exception as e:
            raise InvalidDictionaryData(f"{path}: {e}") from e
        if (
            not isinstance(payload, dict)
            or payload.get("format") != CACHE_FORMAT
            or payload.get("version") != CACHE_VERSION
            or not isinstance(payload.get("words"), list)
            or not isinstance(payload.get("size"), int)
        ):
            raise InvalidDictionaryData(f"{path}: not a version {CACHE_VERSION} dictionary cache")
        words = payload["words"]
        if not all(isinstance(word, str) and word for word in words):
            raise InvalidDictionaryData(f"{path}: malformed word list")
        dictionary = cls(words)
        if len(dictionary) != payload["size"]:
            raise InvalidDictionaryData(
                f"{path}: expected {payload['size']} words, found {len(dictionary)}"
            )
        logger.debug("Read binary dictionary %s (%d words)", path, len(dictionary))
        return dictionary

    def serialize_to_file(self, path: str | os.PathLike):
        path = Path(path)
        payload = {
            "format": CACHE_FORMAT,
            "version": CACHE_VERSION,
            "size": self._trie.size,
            # Flat, so neither pickling nor loading depends on the trie depth
            "words": list(self._trie.words()),
        }
        # A partially written cache must never replace the live one
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            with open(tmp_path, "wb") as f:
                pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
        logger.debug("Wrote binary dictionary %s", path)

    @classmethod
    def open(cls, directory: str | os.PathLike, name: str) -> Dictionary:
        """Open the dictionary ``name`` from ``directory``.

        ``<name>.dict`` is used when it is newer than ``<name>.txt`` (or the
        text list is absent). Otherwise the text list is parsed and a fresh
        binary cache is written, best-effort: a failed write is logged and
        the text-derived dictionary is still returned.
        """
        directory = Path(directory)
        dict_path = directory / f"{name}.dict"
        txt_path = directory / f"{name}.txt"

        if _cache_is_fresh(dict_path, txt_path):
            return cls.deserialize_from_file(dict_path)

        if dict_path.exists():
            logger.info("Binary dictionary %s is stale, rebuilding from %s", dict_path, txt_path)
        dictionary = cls.read_from_file(txt_path)
        try:
            dictionary.serialize_to_file(dict_path)
        except OSError as e:
            logger.warning("Failed to write binary dictionary %s: %s", dict_path, e)
        return dictionary


def _cache_is_fresh(dict_path: Path, txt_path: Path) -> bool:
    try:
        cache_mtime = dict_path.stat().st_mtime_ns
    except FileNotFoundError:
        return False
    try:
        text_mtime = txt_path.stat().st_mtime_ns
    except FileNotFoundError:
        return True
    return cache_mtime > text_mtime
