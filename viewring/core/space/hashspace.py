import hashlib


class HashSpace:
    """
    The 128-bit circular token space shared by base tables and views.

    A partition key is hashed to a token in [0, 2^128). Base rows and view
    rows are placed with the same hash function, the only difference being
    the partition key each one is hashed from.
    """
    BITS = 128
    MAX = 1 << BITS

    @classmethod
    def hash(cls, key: bytes) -> int:
        """Hash a partition key to a deterministic 128-bit token."""
        return int.from_bytes(hashlib.md5(key).digest(), "big")
