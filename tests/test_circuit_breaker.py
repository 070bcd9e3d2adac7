"""Tests for CircuitBreaker in editor_bridge.py."""

import time

from editor_bridge import CircuitBreaker, EditorConnectionError


def _opened(threshold=1, cooldown=0.1):
    cb = CircuitBreaker(failure_threshold=threshold, recovery_timeout=cooldown)
    for _ in range(threshold):
        cb.record_failure()
    return cb


class TestTransitions:
    def test_starts_closed(self):
        cb = CircuitBreaker()
        assert cb.state == CircuitBreaker.CLOSED
        assert cb.allow_request()

    def test_opens_at_threshold(self):
        cb = CircuitBreaker(failure_threshold=3, recovery_timeout=10.0)
        cb.record_failure()
        cb.record_failure()
        assert cb.state == CircuitBreaker.CLOSED
        cb.record_failure()
        assert cb.state == CircuitBreaker.OPEN
        assert not cb.allow_request()

    def test_success_clears_failure_streak(self):
        cb = CircuitBreaker(failure_threshold=2)
        cb.record_failure()
        cb.record_success()
        cb.record_failure()
        assert cb.state == CircuitBreaker.CLOSED

    def test_half_open_after_cooldown(self):
        cb = _opened()
        time.sleep(0.15)
        assert cb.state == CircuitBreaker.HALF_OPEN


class TestTrialRequest:
    def test_single_trial_while_half_open(self):
        cb = _opened()
        time.sleep(0.15)
        assert cb.allow_request()
        # the trial is still in flight: everything else fails fast
        assert not cb.allow_request()
        assert not cb.allow_request()

    def test_trial_success_closes(self):
        cb = _opened()
        time.sleep(0.15)
        cb.allow_request()
        cb.record_success()
        assert cb.state == CircuitBreaker.CLOSED
        assert cb.allow_request()
        assert cb.allow_request()

    def test_trial_failure_reopens_below_threshold(self):
        cb = _opened(threshold=1)
        cb.failure_threshold = 5
        time.sleep(0.15)
        cb.allow_request()
        cb.record_failure()
        assert cb.state == CircuitBreaker.OPEN

    def test_lost_trial_frees_slot_after_cooldown(self):
        cb = _opened()
        time.sleep(0.15)
        assert cb.allow_request()
        time.sleep(0.15)
        assert cb.allow_request()


class TestReporting:
    def test_fail_fast_error_names_refused_message(self):
        cb = _opened(cooldown=30.0)
        error = cb.fail_fast_error("scene", "set-property")
        assert isinstance(error, EditorConnectionError)
        assert "Circuit breaker OPEN" in str(error)
        assert "scene/set-property" in str(error)

    def test_snapshot_closed(self):
        assert CircuitBreaker().snapshot() == {"state": "closed", "consecutive_failures": 0, "retry_in_s": 0.0}

    def test_snapshot_open(self):
        snap = _opened(threshold=2, cooldown=30.0).snapshot()
        assert snap["state"] == "open"
        assert snap["consecutive_failures"] == 2
        assert 29.0 < snap["retry_in_s"] <= 30.0
