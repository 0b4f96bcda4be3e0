"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Streaming content digests.

Files are read through a fixed 8 KB buffer, so memory use does not depend
on file size. The digest is only used as an equality key for grouping.
"""

import hashlib

import xxhash

from studysweep.core.interfaces import Hasher, HashAlgorithm, HashAccumulator

HASH_BUFFER_SIZE = 8192


# Use the same way to implement and use any other hashing algorithm
class XXHashAlgorithmImpl(HashAlgorithm):
    """XXH3 128-bit: 32 hex characters."""
    @staticmethod
    def new() -> HashAccumulator:
        return xxhash.xxh3_128()


class Blake2bAlgorithmImpl(HashAlgorithm):
    """BLAKE2b-256 for callers that want a cryptographic digest."""
    @staticmethod
    def new() -> HashAccumulator:
        return hashlib.blake2b(digest_size=32)


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    """

    def __init__(self, algorithm: HashAlgorithm = None, buffer_size: int = HASH_BUFFER_SIZE):
        self.algorithm = algorithm or XXHashAlgorithmImpl()
        self.buffer_size = buffer_size

    def compute_digest(self, path: str) -> str:
        """
        Hex digest of the whole file.

        Raises:
            OSError: file vanished, is unreadable, etc. Callers decide whether
            that is fatal.
        """
        accumulator = self.algorithm.new()
        with open(path, 'rb') as f:
            while True:
                chunk = f.read(self.buffer_size)
                if not chunk:
                    break
                accumulator.update(chunk)
        return accumulator.hexdigest()
