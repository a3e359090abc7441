import pytest

from storefront.errors import RateLimitError
from storefront.utils.rate_limit import SlidingWindowLimiter


class Ticker:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def ticker():
    return Ticker()


def test_allows_up_to_the_limit(ticker):
    limiter = SlidingWindowLimiter(60, 3, clock=ticker)
    for _ in range(3):
        limiter.hit("1.2.3.4")
    with pytest.raises(RateLimitError):
        limiter.hit("1.2.3.4")


def test_keys_are_independent(ticker):
    limiter = SlidingWindowLimiter(60, 1, clock=ticker)
    limiter.hit("1.1.1.1")
    limiter.hit("2.2.2.2")
    with pytest.raises(RateLimitError):
        limiter.hit("1.1.1.1")


def test_window_slides(ticker):
    limiter = SlidingWindowLimiter(60, 2, clock=ticker)
    limiter.hit("ip")
    ticker.now += 30
    limiter.hit("ip")
    ticker.now += 30
    # the first hit has left the window, the second has not
    limiter.hit("ip")
    with pytest.raises(RateLimitError):
        limiter.hit("ip")


def test_rejected_hits_are_not_counted(ticker):
    limiter = SlidingWindowLimiter(10, 1, clock=ticker)
    limiter.hit("ip")
    for _ in range(5):
        with pytest.raises(RateLimitError):
            limiter.hit("ip")
    ticker.now += 10
    limiter.hit("ip")


def test_reset(ticker):
    limiter = SlidingWindowLimiter(60, 1, clock=ticker)
    limiter.hit("ip")
    limiter.reset()
    limiter.hit("ip")


def test_idle_clients_are_forgotten(ticker):
    limiter = SlidingWindowLimiter(60, 5, clock=ticker)
    for n in range(100):
        limiter.hit(f"10.0.0.{n}")
    assert limiter.tracked_keys() == 100

    ticker.now += 61
    limiter.hit("10.0.1.1")
    assert limiter.tracked_keys() == 1


def test_active_clients_survive_a_sweep(ticker):
    limiter = SlidingWindowLimiter(60, 2, clock=ticker)
    limiter.hit("old")
    ticker.now += 50
    limiter.hit("busy")
    ticker.now += 20
    limiter.hit("new")

    assert limiter.tracked_keys() == 2
    limiter.hit("busy")
    with pytest.raises(RateLimitError):
        limiter.hit("busy")
