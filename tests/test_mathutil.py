import pytest

from reactornet.mathutil import (
    ceil_to_power_of_two,
    floor_to_power_of_two,
    is_power_of_two,
)


@pytest.mark.parametrize("n", [1, 2, 4, 64, 1 << 20, 1 << 40])
def test_powers_are_detected(n):
    assert is_power_of_two(n) is True


@pytest.mark.parametrize("n", [3, 6, 100, (1 << 20) + 1])
def test_non_powers_are_rejected(n):
    assert is_power_of_two(n) is False


@pytest.mark.parametrize("n", [-5, 0, 1, 2])
def test_small_values_clamp_to_two(n):
    assert ceil_to_power_of_two(n) == 2
    assert floor_to_power_of_two(n) == 2


def test_ceil_invariants():
    for n in range(3, 5000):
        p = ceil_to_power_of_two(n)
        assert is_power_of_two(p)
        assert p >= n
        assert p // 2 < n


def test_floor_invariants():
    for n in range(3, 5000):
        p = floor_to_power_of_two(n)
        assert is_power_of_two(p)
        assert p <= n
        assert p * 2 > n


def test_exact_powers_are_fixed_points():
    for shift in range(2, 40):
        n = 1 << shift
        assert ceil_to_power_of_two(n) == n
        assert floor_to_power_of_two(n) == n


def test_ceil_rejects_too_large():
    with pytest.raises(ValueError):
        ceil_to_power_of_two((1 << 62) + 1)