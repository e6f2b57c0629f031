# =============================================================================
# Store Module
# =============================================================================
# The storage primitive behind every token table: an open-addressing hash
# table with quadratic probing, tombstones and prime capacities.
# =============================================================================

from mailsieve.store.hashtable import (
    ProbingHashTable,
    ProbeResult,
    StoreError,
    InvalidKeyError,
    TableFullError,
    next_prime,
)

__all__ = [
    "ProbingHashTable",
    "ProbeResult",
    "StoreError",
    "InvalidKeyError",
    "TableFullError",
    "next_prime",
]
