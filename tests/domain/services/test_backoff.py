"""Tests for ExponentialBackoff."""

import pytest

from chatfleet.domain.services import ExponentialBackoff


class TestExponentialBackoff:
    """ExponentialBackoff tests."""

    def test_delays_grow_until_capped(self) -> None:
        backoff = ExponentialBackoff(initial=1.0, maximum=5.0, multiplier=2.0)

        delays = [backoff.next_delay() for _ in range(5)]

        assert delays == [1.0, 2.0, 4.0, 5.0, 5.0]
        assert backoff.attempts == 5

    def test_reset(self) -> None:
        backoff = ExponentialBackoff(initial=0.5, maximum=10.0)
        backoff.next_delay()
        backoff.next_delay()

        backoff.reset()

        assert backoff.attempts == 0
        assert backoff.next_delay() == 0.5

    def test_constant_with_multiplier_one(self) -> None:
        backoff = ExponentialBackoff(initial=3.0, maximum=60.0, multiplier=1.0)

        assert [backoff.next_delay() for _ in range(3)] == [3.0, 3.0, 3.0]

    @pytest.mark.parametrize(
        "kwargs",
        [{"initial": -1.0}, {"maximum": -1.0}, {"multiplier": 0.5}],
    )
    def test_invalid_arguments(self, kwargs: dict[str, float]) -> None:
        with pytest.raises(ValueError):
            ExponentialBackoff(**kwargs)
