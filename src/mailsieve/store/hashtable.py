# =============================================================================
# Probing Hash Table
# =============================================================================
# An exact-match key -> value store using open addressing with quadratic
# probing. Every frequency table in mailsieve is backed by one of these.
#
# Layout:
#   - A fixed-size list of slots. Each slot is empty (None), a tombstone
#     (left behind by remove()), or an occupied _Entry.
#   - Capacity is always prime. With a prime capacity and a load factor of
#     at most 0.5, the quadratic probe sequence is guaranteed to find a free
#     slot for any new key.
#
# Probe sequence:
#   index_0 = hash(key) mod capacity
#   index_i = (index_0 + i^2) mod capacity
#
# When occupied / capacity exceeds the load factor after an insert, the whole
# table is rehashed synchronously into a table of the next prime >= 2x the
# old capacity. Tombstones are dropped during the rehash.
# =============================================================================

import logging
from collections.abc import Hashable, Iterator, MutableMapping
from dataclasses import dataclass
from typing import Any


logger = logging.getLogger(__name__)


# Default size for new tables (prime)
DEFAULT_CAPACITY = 101

# Rehash once occupied / capacity goes above this
DEFAULT_LOAD_FACTOR = 0.5


def is_prime(value: int) -> bool:
    """Returns True if value is a prime number."""
    if value < 2:
        return False
    if value < 4:
        return True
    if value % 2 == 0:
        return False

    divisor = 3
    while divisor * divisor <= value:
        if value % divisor == 0:
            return False
        divisor += 2
    return True


def next_prime(value: int) -> int:
    """
    Round a requested table size up to the next prime.

    Args:
        value: Requested size.

    Returns:
        The smallest prime >= value (and >= 2).

    Example:
        >>> next_prime(100)
        101
        >>> next_prime(202)
        211
    """
    candidate = max(value, 2)
    while not is_prime(candidate):
        candidate += 1
    return candidate


@dataclass(slots=True)
class _Entry:
    """An occupied slot: one key-value mapping."""
    key: Any
    value: Any


class _Tombstone:
    """Marker for a slot whose entry was removed."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<tombstone>"


TOMBSTONE = _Tombstone()


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of walking the probe sequence for a key.

    Attributes:
        index: Slot where the key lives (found=True) or where it should be
               inserted (found=False). -1 if lookup found nothing to point at.
        found: True if the key is stored at `index`.
        tombstone_seen: True if a tombstone was passed on the way.
    """
    index: int
    found: bool
    tombstone_seen: bool = False


class ProbingHashTable(MutableMapping):
    """
    Open-addressing hash table with quadratic probing.

    Keys must be hashable and not None (strings must also be non-empty).
    Values must not be None.

    Usage:
        >>> table = ProbingHashTable()
        >>> table.put("viagra", 1)
        >>> table.put("viagra", 2)
        1
        >>> table.get("viagra")
        2
        >>> table.remove("viagra")
        2
        >>> "viagra" in table
        False

    Iteration walks the slots in table order (not insertion order) and is
    only valid while the table is not being modified.

    Attributes:
        load_factor: Occupancy ratio that triggers a rehash.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        load_factor: float = DEFAULT_LOAD_FACTOR,
    ) -> None:
        """
        Initialize an empty table.

        Args:
            capacity: Requested initial size, rounded up to a prime.
            load_factor: Rehash threshold, between 0.0 and 1.0.
        """
        if not 0.0 < load_factor <= 1.0:
            raise ValueError(f"Load factor must be in (0, 1], got {load_factor}")

        self.load_factor = load_factor
        self._slots: list[Any] = [None] * next_prime(capacity)
        self._size = 0

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        """Number of slots in the table (always prime)."""
        return len(self._slots)

    def size(self) -> int:
        """Number of key-value mappings."""
        return self._size

    def is_empty(self) -> bool:
        """Returns True if the table holds no mappings."""
        return self._size == 0

    # -------------------------------------------------------------------------
    # Core operations
    # -------------------------------------------------------------------------

    def put(self, key: Hashable, value: Any) -> Any:
        """
        Map key to value, replacing any existing value.

        Args:
            key: Lookup key.
            value: Value to store.

        Returns:
            The previous value for key, or None if key was new.

        Raises:
            InvalidKeyError: If key is None or an empty string, or value is None.
            TableFullError: If the probe sequence is exhausted.
        """
        self._check_key(key)
        if value is None:
            raise InvalidKeyError("Value cannot be None.")

        probe = self._probe_for_insert(key)
        slot = self._slots[probe.index]

        if probe.found:
            previous = slot.value
            slot.value = value
            return previous

        self._slots[probe.index] = _Entry(key, value)
        self._size += 1

        if self._size / len(self._slots) > self.load_factor:
            self._rehash()

        return None

    def get(self, key: Hashable, default: Any = None) -> Any:
        """
        Look up the value for key.

        Returns:
            The stored value, or default if key is not present.
        """
        self._check_key(key)
        probe = self._probe_for_key(key)
        if not probe.found:
            return default
        return self._slots[probe.index].value

    def contains_key(self, key: Hashable) -> bool:
        """Returns True if key is present."""
        self._check_key(key)
        return self._probe_for_key(key).found

    def contains_value(self, value: Any) -> bool:
        """Returns True if any mapping has the given value."""
        if value is None:
            raise InvalidKeyError("Value cannot be None.")
        return any(entry.value == value for entry in self._entries())

    def remove(self, key: Hashable) -> Any:
        """
        Remove key from the table.

        The slot is replaced with a tombstone so probe chains that pass
        through it stay intact.

        Returns:
            The removed value, or None if key was not present.
        """
        self._check_key(key)
        probe = self._probe_for_key(key)
        if not probe.found:
            return None

        previous = self._slots[probe.index].value
        self._slots[probe.index] = TOMBSTONE
        self._size -= 1
        return previous

    def clear(self) -> None:
        """Remove every mapping (capacity is kept)."""
        self._slots = [None] * len(self._slots)
        self._size = 0

    # -------------------------------------------------------------------------
    # MutableMapping protocol
    # -------------------------------------------------------------------------

    def __getitem__(self, key: Hashable) -> Any:
        self._check_key(key)
        probe = self._probe_for_key(key)
        if not probe.found:
            raise KeyError(key)
        return self._slots[probe.index].value

    def __setitem__(self, key: Hashable, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: Hashable) -> None:
        self._check_key(key)
        if not self._probe_for_key(key).found:
            raise KeyError(key)
        self.remove(key)

    def __contains__(self, key: object) -> bool:
        return self.contains_key(key)

    def __iter__(self) -> Iterator[Any]:
        for entry in self._entries():
            yield entry.key

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"ProbingHashTable(size={self._size}, capacity={self.capacity})"

    # -------------------------------------------------------------------------
    # Probing
    # -------------------------------------------------------------------------

    def _index(self, key: Hashable) -> int:
        """Home slot for key."""
        return hash(key) % len(self._slots)

    def _probe_for_insert(self, key: Hashable) -> ProbeResult:
        """
        Find where key lives, or where it should go.

        Tombstones do not stop the walk: the first one is remembered and
        probing continues, since the key may still be stored further along
        the chain. An exact match anywhere in the chain wins over the
        remembered tombstone. If an empty slot ends the chain first, the
        remembered tombstone (if any) is reused.

        Raises:
            TableFullError: If every probe position is occupied by other keys.
        """
        capacity = len(self._slots)
        home = self._index(key)
        first_tombstone = -1

        for attempt in range(capacity):
            index = (home + attempt * attempt) % capacity
            slot = self._slots[index]

            if slot is None:
                if first_tombstone >= 0:
                    return ProbeResult(first_tombstone, found=False, tombstone_seen=True)
                return ProbeResult(index, found=False)

            if slot is TOMBSTONE:
                if first_tombstone < 0:
                    first_tombstone = index
                continue

            if slot.key == key:
                return ProbeResult(index, found=True, tombstone_seen=first_tombstone >= 0)

        # Chain exhausted without an empty slot; a tombstone is still usable
        if first_tombstone >= 0:
            return ProbeResult(first_tombstone, found=False, tombstone_seen=True)

        raise TableFullError(f"Hash table is full (capacity {capacity}).")

    def _probe_for_key(self, key: Hashable) -> ProbeResult:
        """Walk the probe sequence looking for key only."""
        capacity = len(self._slots)
        home = self._index(key)
        tombstone_seen = False

        for attempt in range(capacity):
            index = (home + attempt * attempt) % capacity
            slot = self._slots[index]

            if slot is None:
                break
            if slot is TOMBSTONE:
                tombstone_seen = True
                continue
            if slot.key == key:
                return ProbeResult(index, found=True, tombstone_seen=tombstone_seen)

        return ProbeResult(-1, found=False, tombstone_seen=tombstone_seen)

    def _rehash(self) -> None:
        """Grow to the next prime >= 2x capacity and reinsert every entry."""
        old_slots = self._slots
        new_capacity = next_prime(2 * len(old_slots))
        logger.debug(
            f"Rehashing {self._size} entries: {len(old_slots)} -> {new_capacity} slots"
        )

        self._slots = [None] * new_capacity
        self._size = 0

        for slot in old_slots:
            if slot is None or slot is TOMBSTONE:
                continue
            probe = self._probe_for_insert(slot.key)
            self._slots[probe.index] = slot
            self._size += 1

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _entries(self) -> Iterator[_Entry]:
        """Yield occupied slots in table order."""
        for slot in self._slots:
            if slot is not None and slot is not TOMBSTONE:
                yield slot

    @staticmethod
    def _check_key(key: object) -> None:
        """Reject None and empty-string keys."""
        if key is None:
            raise InvalidKeyError("Key cannot be None.")
        if isinstance(key, str) and not key:
            raise InvalidKeyError("Key cannot be empty.")


# =============================================================================
# Exceptions
# =============================================================================

class StoreError(Exception):
    """Base exception for hash table contract violations."""
    pass


class InvalidKeyError(StoreError, ValueError):
    """Raised when a None or empty key is used."""
    pass


class TableFullError(StoreError, RuntimeError):
    """Raised when the probe sequence is exhausted without a free slot."""
    pass
