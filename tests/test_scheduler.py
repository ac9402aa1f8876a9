"""Tests for phase-aligned poll pacing"""

import pytest
from httpstime.timing.scheduler import PollScheduler


class TestNextDelay:
    """Test delay computation"""

    @pytest.mark.parametrize("dt,now,expected", [
        (500, 1_700_000_000_010, 490),
        (250, 1_700_000_000_510, 740),
        (0, 1_700_000_000_000, 0),
        (999, 1_700_000_000_000, 999),
        (0, 1_700_000_000_999, 1),
    ])
    def test_delay(self, dt, now, expected):
        assert PollScheduler.next_delay(dt, now) == expected

    def test_delay_range(self):
        """Test every phase combination lands in [0, 1000]"""
        for dt in range(0, 1000, 37):
            for ms in range(0, 1000, 41):
                delay = PollScheduler.next_delay(dt, 1_700_000_000_000 + ms)
                assert 0 <= delay <= 1000
                assert (ms + delay) % 1000 == dt


class TestWait:
    """Test sleeping through the injected clock"""

    def test_wait_sleeps_computed_delay(self):
        slept = []
        scheduler = PollScheduler(clock=lambda: 1_700_000_000_510, sleep=slept.append)

        delay = scheduler.wait(250)

        assert delay == 740
        assert slept == [0.74]

    def test_wait_zero(self):
        slept = []
        scheduler = PollScheduler(clock=lambda: 1_700_000_000_300, sleep=slept.append)

        assert scheduler.wait(300) == 0
        assert slept == [0.0]
