"""
Trie (Prefix Tree) keyed by sequences of arbitrary hashable symbols.

Techniques used:
  - One node per symbol: every edge carries exactly one symbol, so chains
    are created symbol by symbol on insert and pruned node by node on
    delete.
  - Parent back-references: a node knows its parent, which lets `remove`
    walk upward from the terminal node and detach the longest dead chain
    in a single step.
  - Forest of roots: there is no sentinel root node; each distinct first
    symbol owns an independent root entry.
  - Two interchangeable lookup strategies (`Traversal.INCREMENTAL` and
    `Traversal.RECURSIVE`) that return identical chains.
  - Iterative enumeration: the depth-first walk behind `key_set`,
    `values`, `entry_set` and `contains_value` keeps an explicit stack, so
    deep keys never hit the interpreter's recursion limit.

Complexity (n = key length, N = number of nodes):
  get / put / remove / contains_key   — O(n)
  key_set / values / entry_set        — O(N)
  contains_value                      — O(N) worst case, stops at first match

The container is not thread-safe; callers sharing one instance across
threads must serialise access themselves.
"""

from __future__ import annotations

import abc
import enum
import itertools
import logging
from collections.abc import Hashable, Iterable, Iterator, Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

logger = logging.getLogger("seqtrie")

__all__ = [
    "InvalidElementError",
    "NullInputError",
    "Symbol",
    "Traversal",
    "Trie",
    "TrieError",
    "TrieNode",
    "TypeMismatchError",
    "validate_key",
]


# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------


class TrieError(Exception):
    """Base class for key validation failures."""


class NullInputError(TrieError, TypeError):
    """The key itself is ``None``."""


class InvalidElementError(TrieError, ValueError):
    """The key contains a ``None`` element."""


class TypeMismatchError(TrieError, TypeError):
    """The key is not a sequence, or an element is not a usable symbol."""


# ------------------------------------------------------------------
# Symbols and validation
# ------------------------------------------------------------------


class Symbol(abc.ABC):
    """Optional base class for symbol types.

    A symbol only needs an equality relation and a hash consistent with
    it.  Subclassing makes that contract explicit and lets a trie be
    restricted to one symbol family via ``Trie(symbol_type=...)``.
    """

    @abc.abstractmethod
    def __eq__(self, other: object) -> bool: ...

    @abc.abstractmethod
    def __hash__(self) -> int: ...


def validate_key(key: Any, symbol_type: type = Hashable) -> tuple:
    """Check *key* and return it as a tuple of symbols.

    Raises :class:`NullInputError` for ``None``, :class:`InvalidElementError`
    when an element is ``None`` and :class:`TypeMismatchError` when *key* is
    not a sequence or an element is not a hashable *symbol_type* instance.
    An empty sequence is valid.
    """
    if key is None:
        raise NullInputError("Key cannot be None.")
    if not isinstance(key, Sequence):
        raise TypeMismatchError(f"Key must be a sequence, got {type(key).__name__}.")
    for element in key:
        if element is None:
            raise InvalidElementError("Key symbols cannot be None.")
        if not isinstance(element, symbol_type):
            raise TypeMismatchError(
                f"Symbol {element!r} is not an instance of {symbol_type.__name__}."
            )
        try:
            hash(element)
        except TypeError as exc:
            raise TypeMismatchError(f"Symbol {element!r} is not hashable.") from exc
    return tuple(key)


class Traversal(enum.Enum):
    """Point-lookup strategy.  Both produce identical chains."""

    INCREMENTAL = "incremental"
    RECURSIVE = "recursive"


# ------------------------------------------------------------------
# Nodes
# ------------------------------------------------------------------


@dataclass(eq=False)
class TrieNode:
    """A vertex bound to one symbol, optionally carrying a payload.

    A node is valid iff it terminates a stored key; only valid nodes carry
    a payload.  Children are owned through ``children`` (keyed by their own
    symbol); ``parent`` is a plain back-reference and is ``None`` for root
    entries.
    """

    id: int
    symbol: Hashable
    parent: Optional[TrieNode] = field(default=None, repr=False)
    children: dict[Hashable, TrieNode] = field(default_factory=dict, repr=False)
    payload: Any = None
    valid: bool = False

    def set_payload(self, value: Any) -> None:
        self.payload = value
        self.valid = True

    def clear_payload(self) -> Any:
        """Mark the node invalid and return the payload it carried."""
        value = self.payload
        self.payload = None
        self.valid = False
        return value

    def child(self, symbol: Hashable) -> TrieNode | None:
        return self.children.get(symbol)

    def has_child(self, symbol: Hashable) -> bool:
        return symbol in self.children

    def add_child(self, symbol: Hashable, node: TrieNode) -> None:
        if symbol is None:
            raise ValueError("Child symbol cannot be None.")
        if node is None:
            raise ValueError("Child node cannot be None.")
        if node.symbol != symbol:
            raise ValueError(f"Child node is bound to {node.symbol!r}, not {symbol!r}.")
        self.children[symbol] = node

    def remove_child(self, symbol: Hashable) -> None:
        self.children.pop(symbol, None)

    @property
    def child_count(self) -> int:
        return len(self.children)

    def iter_children(self) -> Iterator[TrieNode]:
        return iter(self.children.values())

    def child_symbols(self) -> set:
        return set(self.children)

    @property
    def is_root(self) -> bool:
        return self.parent is None


Visitor = Callable[[tuple[TrieNode, ...]], Any]


# ------------------------------------------------------------------
# Container
# ------------------------------------------------------------------


class Trie(MutableMapping):
    """A prefix tree mapping symbol sequences to arbitrary values.

    >>> t = Trie()
    >>> t.put(("c", "a", "t"), 1)
    1
    >>> t.put("car", 2)
    2
    >>> t.get(("c", "a", "r"))
    2
    >>> t.remove("car")
    2
    >>> sorted(t.key_set())
    [('c', 'a', 't')]
    """

    def __init__(
        self,
        traversal: Traversal | str = Traversal.INCREMENTAL,
        overwrite_allowed: bool = True,
        symbol_type: type = Hashable,
    ) -> None:
        self._roots: dict[Hashable, TrieNode] = {}
        self._size = 0
        self._ids = itertools.count(1)
        self._traversal = Traversal(traversal)
        self.overwrite_allowed = overwrite_allowed
        self.symbol_type = symbol_type

    @property
    def traversal(self) -> Traversal:
        return self._traversal

    @traversal.setter
    def traversal(self, value: Traversal | str) -> None:
        self._traversal = Traversal(value)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def size(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    def contains_key(self, key: Sequence) -> bool:
        """Return ``True`` if *key* is stored.  Empty keys are never stored."""
        return self._find_valid(key) is not None

    def contains_value(self, value: Any) -> bool:
        """Return ``True`` if any stored key maps to a payload equal to *value*."""

        def differs(path: tuple[TrieNode, ...]) -> bool:
            return path[-1].payload != value

        return not self.dft(differs)

    def get(self, key: Sequence, default: Any = None) -> Any:
        """Return the payload stored under *key*, or *default* if absent."""
        node = self._find_valid(key)
        if node is None:
            return default
        return node.payload

    def put(self, key: Sequence, value: Any) -> Any:
        """Store *value* under *key* and return *value*.

        An empty key is a no-op that returns ``None``.  When *key* is already
        stored, the payload is replaced only if ``overwrite_allowed`` is set.
        ``size()`` grows only when a previously absent key becomes present.
        """
        symbols = validate_key(key, self.symbol_type)
        if not symbols:
            return None
        chain = self._dfs(symbols, self._traversal)
        if not chain:
            self._roots[symbols[0]] = self._new_chain(None, symbols, 0, value)
            self._size += 1
        elif len(chain) == len(symbols):
            last = chain[-1]
            if not last.valid:
                last.set_payload(value)
                self._size += 1
            elif self.overwrite_allowed:
                last.set_payload(value)
        else:
            last = chain[-1]
            start = len(chain)
            last.add_child(symbols[start], self._new_chain(last, symbols, start, value))
            self._size += 1
        return value

    def remove(self, key: Sequence) -> Any:
        """Remove *key* and return its payload, or ``None`` if it was absent.

        The terminal node is kept while it still has children.  Otherwise the
        longest trailing run of invalid, single-child ancestors is detached
        together with it.
        """
        node = self._find_valid(key)
        if node is None:
            return None
        value = node.clear_payload()
        self._size -= 1
        if node.child_count:
            return value

        # Climb until the parent is a branch point or a stored key.
        current, parent = node, node.parent
        while parent is not None:
            if parent.child_count > 1 or parent.valid:
                break
            current, parent = parent, parent.parent

        if parent is None:
            del self._roots[current.symbol]
        else:
            parent.remove_child(current.symbol)
        logger.debug("Pruned chain starting at node %d (%r)", current.id, current.symbol)
        return value

    def put_all(self, other: Mapping | Iterable[tuple[Sequence, Any]] | None) -> None:
        """Apply :meth:`put` to every pair of *other*.  No rollback on failure."""
        if other is None:
            return
        pairs = other.items() if isinstance(other, Mapping) else other
        for key, value in pairs:
            self.put(key, value)

    def clear(self) -> None:
        """Discard every node and reset the counters."""
        self._roots = {}
        self._size = 0
        self._ids = itertools.count(1)
        logger.debug("Trie cleared")

    def key_set(self) -> set[tuple]:
        """Snapshot of every stored key, as tuples of symbols."""
        keys: set[tuple] = set()

        def collect(path: tuple[TrieNode, ...]) -> bool:
            keys.add(tuple(node.symbol for node in path))
            return True

        self.dft(collect)
        return keys

    def values(self) -> list:
        """Snapshot of every stored payload (one per key, order unspecified)."""
        values: list = []

        def collect(path: tuple[TrieNode, ...]) -> bool:
            values.append(path[-1].payload)
            return True

        self.dft(collect)
        return values

    def entry_set(self) -> list[tuple[tuple, Any]]:
        """Snapshot of every ``(key, payload)`` pair (order unspecified)."""
        return self.items_with_prefix(())

    def keys_with_prefix(self, prefix: Sequence) -> list[tuple]:
        """Every stored key that starts with *prefix* (itself included)."""
        return [key for key, _ in self.items_with_prefix(prefix)]

    def items_with_prefix(self, prefix: Sequence) -> list[tuple[tuple, Any]]:
        """Every ``(key, payload)`` pair whose key starts with *prefix*."""
        entries: list[tuple[tuple, Any]] = []

        def collect(path: tuple[TrieNode, ...]) -> bool:
            entries.append((tuple(node.symbol for node in path), path[-1].payload))
            return True

        self.dft(collect, prefix)
        return entries

    def dfs(self, key: Sequence, traversal: Traversal | str | None = None) -> list[TrieNode]:
        """Return the longest chain of nodes matching a prefix of *key*.

        *traversal* overrides the stored strategy for this call only.
        """
        symbols = validate_key(key, self.symbol_type)
        mode = self._traversal if traversal is None else Traversal(traversal)
        return self._dfs(symbols, mode)

    def dft(self, visitor: Visitor, prefix: Sequence = ()) -> bool:
        """Walk the forest depth-first, calling *visitor* on every valid node.

        *visitor* receives the path of nodes from the root entry to the
        current node.  A falsy return stops the whole walk at once.  With a
        non-empty *prefix* only the sub-tree below that exact chain is
        visited.  Returns ``False`` if the visitor stopped the walk.
        """
        symbols = validate_key(prefix, self.symbol_type)
        if symbols:
            chain = self._dfs(symbols, self._traversal)
            if len(chain) != len(symbols):
                return True
            path = chain[:-1]
            stack: list[Iterator[TrieNode]] = [iter((chain[-1],))]
        else:
            path = []
            stack = [iter(self._roots.values())]
        base = len(path)

        while stack:
            node = next(stack[-1], None)
            if node is None:
                stack.pop()
                if len(path) > base:
                    path.pop()
                continue
            path.append(node)
            if node.valid and not visitor(tuple(path)):
                return False
            stack.append(node.iter_children())
        return True

    # ------------------------------------------------------------------
    # Mapping protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: Sequence) -> Any:
        node = self._find_valid(key)
        if node is None:
            raise KeyError(key)
        return node.payload

    def __setitem__(self, key: Sequence, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: Sequence) -> None:
        if self._find_valid(key) is None:
            raise KeyError(key)
        self.remove(key)

    def __contains__(self, key: object) -> bool:
        return self.contains_key(key)

    def __iter__(self) -> Iterator[tuple]:
        return iter(self.key_set())

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(size={self._size}, "
            f"traversal={self._traversal.value!r}, "
            f"overwrite_allowed={self.overwrite_allowed})"
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _find_valid(self, key: Sequence) -> TrieNode | None:
        """Return the valid node terminating *key*, or None."""
        symbols = validate_key(key, self.symbol_type)
        if not symbols:
            return None
        chain = self._dfs(symbols, self._traversal)
        if len(chain) != len(symbols) or not chain[-1].valid:
            return None
        return chain[-1]

    def _dfs(self, symbols: tuple, mode: Traversal) -> list[TrieNode]:
        if not symbols:
            return []
        if mode is Traversal.RECURSIVE:
            chain: list[TrieNode] = []
            self._dfs_recursive(symbols, 0, self._roots.get(symbols[0]), chain)
            return chain
        return self._dfs_incremental(symbols)

    def _dfs_incremental(self, symbols: tuple) -> list[TrieNode]:
        chain: list[TrieNode] = []
        node = self._roots.get(symbols[0])
        if node is None:
            return chain
        chain.append(node)
        for symbol in symbols[1:]:
            node = node.child(symbol)
            if node is None:
                break
            chain.append(node)
        return chain

    def _dfs_recursive(
        self, symbols: tuple, index: int, node: TrieNode | None, chain: list[TrieNode]
    ) -> None:
        if node is None:
            return
        chain.append(node)
        index += 1
        if index >= len(symbols):
            return
        self._dfs_recursive(symbols, index, node.child(symbols[index]), chain)

    def _new_node(self, parent: TrieNode | None, symbol: Hashable) -> TrieNode:
        return TrieNode(id=next(self._ids), symbol=symbol, parent=parent)

    def _new_chain(
        self, parent: TrieNode | None, symbols: tuple, start: int, value: Any
    ) -> TrieNode:
        """Build nodes for ``symbols[start:]`` and return the first one.

        The payload goes on the last node; the caller links the first node
        into *parent* (or the root set).
        """
        head = node = self._new_node(parent, symbols[start])
        for symbol in symbols[start + 1 :]:
            child = self._new_node(node, symbol)
            node.add_child(symbol, child)
            node = child
        node.set_payload(value)
        return head
