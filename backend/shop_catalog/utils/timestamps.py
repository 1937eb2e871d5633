"""Epoch-millisecond timestamps used on the wire and in the store."""

import time


def now_ms() -> int:
    return int(time.time() * 1000)


# Largest value a signed 64-bit integer column can hold
MAX_EPOCH_MS = 2**63 - 1


def in_range(value: int) -> bool:
    return 0 <= value <= MAX_EPOCH_MS
