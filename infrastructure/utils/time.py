import time


def now_ms() -> int:
    """Current UTC time as a millisecond epoch."""
    return int(time.time() * 1000)
