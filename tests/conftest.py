import pytest

from uor_prism.ring import Ring


@pytest.fixture
def q0() -> Ring:
    return Ring(quantum=0)


@pytest.fixture
def q1() -> Ring:
    return Ring(quantum=1)


@pytest.fixture
def verified_q0() -> Ring:
    ring = Ring(quantum=0)
    assert ring.verify().verified
    return ring


class BrokenRing(Ring):
    """A ring whose neg is wrong at 7, for exercising failure paths."""

    def neg(self, n):
        if self.normalize(n) == self.to_bytes(7):
            return self.to_bytes(0)
        return super().neg(n)


@pytest.fixture
def broken_ring() -> Ring:
    return BrokenRing(quantum=0)
