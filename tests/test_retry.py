import pytest

from stuntpitch.services.common.retry import backoff_delays, is_retryable, retry_on_overload


class StatusError(Exception):
    def __init__(self, status_code):
        super().__init__(f"status {status_code}")
        self.status_code = status_code


def test_default_delays_double():
    assert backoff_delays(3, 2.0) == [2.0, 4.0, 8.0]
    assert backoff_delays(0, 2.0) == []


def test_only_rate_limit_and_overload_are_retryable():
    assert is_retryable(StatusError(429))
    assert is_retryable(StatusError(529))
    assert not is_retryable(StatusError(500))
    assert not is_retryable(ValueError("bad"))


def test_overload_is_retried_until_success():
    slept = []
    attempts = []

    @retry_on_overload(max_retries=3, base_seconds=2.0, sleep=slept.append)
    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise StatusError(529)
        return "ok"

    assert flaky() == "ok"
    assert slept == [2.0, 4.0]


def test_gives_up_after_max_retries():
    slept = []

    @retry_on_overload(max_retries=3, base_seconds=1.0, sleep=slept.append)
    def always_busy():
        raise StatusError(429)

    with pytest.raises(StatusError):
        always_busy()
    assert slept == [1.0, 2.0, 4.0]


def test_other_errors_propagate_immediately():
    slept = []

    @retry_on_overload(max_retries=3, base_seconds=1.0, sleep=slept.append)
    def broken():
        raise StatusError(400)

    with pytest.raises(StatusError):
        broken()
    assert slept == []
