import threading

import pytest

from radialwalk.pacing import Pacer, RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.slept = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.slept.append(seconds)
        self.now += seconds


def test_pacer_uses_injected_sleep():
    slept = []
    pacer = Pacer(delay=1.0, sleep=slept.append)
    assert pacer.pause() is True
    assert slept == [1.0]


def test_pacer_reports_cancel_after_sleep():
    cancel = threading.Event()
    cancel.set()
    pacer = Pacer(delay=1.0, sleep=lambda s: None)
    assert pacer.pause(cancel) is False


def test_pacer_wait_is_interrupted_by_cancel():
    cancel = threading.Event()
    cancel.set()
    # Real wait on an already-set event returns immediately
    assert Pacer(delay=30.0).pause(cancel) is False


def test_zero_delay_does_not_sleep():
    slept = []
    assert Pacer(delay=0, sleep=slept.append).pause() is True
    assert slept == []


def test_rate_limiter_allows_burst_then_waits():
    clock = FakeClock()
    limiter = RateLimiter(rate=2.0, burst=2, clock=clock, sleep=clock.sleep)
    assert limiter.acquire() == 0.0
    assert limiter.acquire() == 0.0
    waited = limiter.acquire()
    assert waited == pytest.approx(0.5)


def test_rate_limiter_refills_over_time():
    clock = FakeClock()
    limiter = RateLimiter(rate=1.0, burst=1, clock=clock, sleep=clock.sleep)
    assert limiter.try_acquire() is True
    assert limiter.try_acquire() is False
    clock.now += 1.0
    assert limiter.try_acquire() is True


def test_rate_limiter_never_exceeds_burst():
    clock = FakeClock()
    limiter = RateLimiter(rate=1.0, burst=2, clock=clock, sleep=clock.sleep)
    clock.now += 100
    assert limiter.try_acquire()
    assert limiter.try_acquire()
    assert not limiter.try_acquire()


@pytest.mark.parametrize("rate, burst", [(0, 1), (-1, 1), (1, 0)])
def test_rate_limiter_rejects_bad_settings(rate, burst):
    with pytest.raises(ValueError):
        RateLimiter(rate=rate, burst=burst)
