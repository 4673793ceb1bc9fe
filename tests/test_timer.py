from unittest import mock

from lunara.timer import HostTimer


def test_unstarted_timer_reads_zero():
    assert HostTimer().ms() == 0.0


def test_elapsed_uses_clock_difference():
    timer = HostTimer()
    with mock.patch("lunara.timer.time.perf_counter_ns", side_effect=[1_000_000, 3_500_000]):
        timer.start()
        timer.stop()
    assert timer.ms() == 2.5


def test_real_clock_is_monotonic():
    timer = HostTimer()
    timer.start()
    timer.stop()
    assert timer.ms() >= 0.0