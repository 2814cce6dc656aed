from utils.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_allows_up_to_the_limit():
    limiter = RateLimiter(3, 60, clock=FakeClock())

    results = [limiter.hit("1.2.3.4") for _ in range(4)]

    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]


def test_clients_are_counted_separately():
    limiter = RateLimiter(1, 60, clock=FakeClock())

    assert limiter.hit("a").allowed
    assert limiter.hit("b").allowed
    assert not limiter.hit("a").allowed


def test_window_slides():
    clock = FakeClock()
    limiter = RateLimiter(2, 60, clock=clock)

    limiter.hit("a")
    clock.now += 30
    limiter.hit("a")
    rejected = limiter.hit("a")
    assert not rejected.allowed
    assert rejected.retry_after == 30

    # first hit leaves the window, second is still inside it
    clock.now += 30
    assert limiter.hit("a").allowed
    assert not limiter.hit("a").allowed


def test_rejected_hits_do_not_extend_the_window():
    clock = FakeClock()
    limiter = RateLimiter(1, 60, clock=clock)

    limiter.hit("a")
    for _ in range(5):
        clock.now += 10
        limiter.hit("a")

    clock.now += 10
    assert limiter.hit("a").allowed


def test_idle_clients_are_swept():
    clock = FakeClock()
    limiter = RateLimiter(5, 60, clock=clock)

    limiter.hit("idle")
    clock.now += 61
    limiter.hit("active")

    assert list(limiter.hits) == ["active"]


def test_reset():
    limiter = RateLimiter(1, 60, clock=FakeClock())
    limiter.hit("a")
    limiter.hit("b")

    limiter.reset("a")
    assert limiter.hit("a").allowed
    assert not limiter.hit("b").allowed

    limiter.reset()
    assert limiter.hits == {}


def test_sweep_defaults_to_the_clock():
    clock = FakeClock()
    limiter = RateLimiter(5, 60, clock=clock)
    limiter.hit("a")

    clock.now += 61
    limiter.sweep()

    assert limiter.hits == {}
    assert limiter.last_sweep == clock.now
