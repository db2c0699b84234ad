from unittest.mock import MagicMock

import pytest
import requests

from lib.errors import BitwardenAPIError, ErrorKind
from lib.retry import retrying, status_of, with_retry


def _api_error(status):
    return BitwardenAPIError("boom", status_code=status)


def test_success_on_first_attempt_does_not_sleep():
    sleep = MagicMock()
    assert with_retry(lambda: "ok", sleep=sleep) == "ok"
    sleep.assert_not_called()


@pytest.mark.parametrize("status", [400, 401, 403, 404])
def test_non_retryable_status_fails_after_one_attempt(status):
    op = MagicMock(side_effect=_api_error(status))
    sleep = MagicMock()
    with pytest.raises(BitwardenAPIError):
        with_retry(op, max_attempts=5, sleep=sleep)
    assert op.call_count == 1
    sleep.assert_not_called()


def test_server_errors_back_off_exponentially():
    op = MagicMock(side_effect=[_api_error(500), _api_error(500), "ok"])
    sleep = MagicMock()

    assert with_retry(op, max_attempts=3, initial_delay=1, sleep=sleep) == "ok"
    assert op.call_count == 3
    assert [c.args[0] for c in sleep.call_args_list] == [1, 2]


def test_rate_limit_is_retried():
    op = MagicMock(side_effect=[_api_error(429), "ok"])
    assert with_retry(op, initial_delay=0.5, sleep=MagicMock()) == "ok"


def test_last_error_is_reraised_after_max_attempts():
    errors = [_api_error(502), _api_error(503)]
    op = MagicMock(side_effect=errors)
    with pytest.raises(BitwardenAPIError) as exc_info:
        with_retry(op, max_attempts=2, sleep=MagicMock())
    assert exc_info.value is errors[1]


def test_transport_error_is_retried():
    transport = BitwardenAPIError("reset", kind=ErrorKind.OTHER)
    op = MagicMock(side_effect=[transport, "ok"])
    assert with_retry(op, sleep=MagicMock()) == "ok"


@pytest.mark.parametrize("attempts", [0, -1])
def test_max_attempts_must_be_positive(attempts):
    with pytest.raises(ValueError):
        with_retry(lambda: None, max_attempts=attempts)


def test_status_of_reads_requests_http_error():
    response = MagicMock(status_code=404)
    assert status_of(requests.HTTPError(response=response)) == 404
    assert status_of(RuntimeError()) is None


def test_decorator_form(mocker):
    sleep = mocker.patch("lib.retry.time.sleep")
    calls = []

    @retrying(max_attempts=2, initial_delay=0.25)
    def flaky(value):
        calls.append(value)
        if len(calls) == 1:
            raise _api_error(500)
        return value * 2

    assert flaky(21) == 42
    assert calls == [21, 21]
    sleep.assert_called_once_with(0.25)
    assert flaky.__name__ == "flaky"
