# SPDX-License-Identifier: MIT
import zlib

from numpy.random import Generator, PCG64, SeedSequence

def make_rng(seed: int, stream_tag: str) -> Generator:
    """
    Create an independent RNG stream from a common integer seed and a tag.
    The tag is hashed with CRC32 so streams are stable across processes.
    """
    ss = SeedSequence(seed, spawn_key=[zlib.crc32(stream_tag.encode("utf-8")) & 0xffffffff])
    return Generator(PCG64(ss))
