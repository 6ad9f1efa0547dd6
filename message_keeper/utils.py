"""
Utility functions for the message keeper client.
"""

import random


def random_substring(line: str, rng: random.Random) -> str:
    """
    Pick a random non-empty substring of ``line``.

    The start is uniform over the line and the length is uniform over what
    remains after it, so short substrings near the end are favoured.

    Args:
        line: Non-empty text
        rng: Source of randomness

    Returns:
        line[start:end] with 0 <= start < end <= len(line)
    """
    if not line:
        raise ValueError("line must not be empty")
    start = rng.randrange(len(line))
    end = 1 + start + rng.randrange(len(line) - start)
    return line[start:end]
