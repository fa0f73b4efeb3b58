"""Power-of-two helpers used for sizing buffers."""

_MAXINT_HEAD_BIT = 1 << 62


def is_power_of_two(n: int) -> bool:
    """Report whether ``n`` is a power of two (zero counts as one)."""
    return n & (n - 1) == 0


def ceil_to_power_of_two(n: int) -> int:
    """Return the least power of two greater than or equal to ``n``, at least 2."""
    if n & _MAXINT_HEAD_BIT and n > _MAXINT_HEAD_BIT:
        raise ValueError("argument is too large")
    if n <= 2:
        return 2
    return 1 << (n - 1).bit_length()


def floor_to_power_of_two(n: int) -> int:
    """Return the greatest power of two less than or equal to ``n``, at least 2."""
    if n <= 2:
        return 2
    return 1 << (n.bit_length() - 1)