from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from conftest import make_response, make_session

from gtm_cli.utils.errors import API_ERROR, NOT_FOUND, RATE_LIMITED, HttpError
from gtm_cli.utils.http import request, with_retry


def test_with_retry_returns_first_success_without_sleeping() -> None:
    sleep = MagicMock()
    fn = MagicMock(return_value={"ok": True})

    assert with_retry(fn, sleep=sleep) == {"ok": True}
    assert fn.call_count == 1
    sleep.assert_not_called()


def test_with_retry_gives_up_after_max_retries_and_reraises_last_error() -> None:
    sleep = MagicMock()
    errors = [HttpError(f"fail {i}", API_ERROR, 500) for i in range(4)]
    fn = MagicMock(side_effect=errors)

    with pytest.raises(HttpError) as exc_info:
        with_retry(fn, max_retries=3, sleep=sleep)

    assert exc_info.value is errors[-1]
    assert fn.call_count == 4
    assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0, 4.0]


def test_with_retry_uses_initial_delay_for_backoff() -> None:
    sleep = MagicMock()
    fn = MagicMock(side_effect=[requests.ConnectionError("down"), requests.Timeout("slow"), "done"])

    assert with_retry(fn, initial_delay_s=0.5, sleep=sleep) == "done"
    assert [c.args[0] for c in sleep.call_args_list] == [0.5, 1.0]


def test_with_retry_honours_retry_after() -> None:
    sleep = MagicMock()
    fn = MagicMock(
        side_effect=[HttpError("Rate limit exceeded", RATE_LIMITED, 429, retry_after=5), {"ok": 1}]
    )

    assert with_retry(fn, sleep=sleep) == {"ok": 1}
    sleep.assert_called_once_with(5.0)


def test_with_retry_zero_retry_after_falls_back_to_backoff() -> None:
    sleep = MagicMock()
    fn = MagicMock(
        side_effect=[HttpError("Rate limit exceeded", RATE_LIMITED, 429, retry_after=0), "ok"]
    )

    with_retry(fn, sleep=sleep)

    sleep.assert_called_once_with(1.0)


def test_with_retry_retries_non_transient_errors_too() -> None:
    sleep = MagicMock()
    fn = MagicMock(side_effect=[HttpError("missing", NOT_FOUND, 404), "found"])

    assert with_retry(fn, sleep=sleep) == "found"
    assert fn.call_count == 2


def test_with_retry_zero_retries_means_single_attempt() -> None:
    sleep = MagicMock()
    fn = MagicMock(side_effect=ValueError("bad"))

    with pytest.raises(ValueError):
        with_retry(fn, max_retries=0, sleep=sleep)

    assert fn.call_count == 1
    sleep.assert_not_called()


def test_with_retry_negative_retry_after_header_backs_off_and_recovers() -> None:
    session = make_session(
        make_response(429, {}, headers={"Retry-After": "-1"}),
        make_response(200, {"ok": True}),
    )
    sleep = MagicMock()

    result = with_retry(lambda: request("https://api.example.test/x", session=session), sleep=sleep)

    assert result == {"ok": True}
    sleep.assert_called_once_with(1.0)


def test_with_retry_reraises_rate_limit_error_unchanged_after_negative_retry_after() -> None:
    session = make_session(*[make_response(429, {}, headers={"Retry-After": "-5"}) for _ in range(3)])
    sleep = MagicMock()

    with pytest.raises(HttpError) as exc_info:
        with_retry(
            lambda: request("https://api.example.test/x", session=session),
            max_retries=2,
            sleep=sleep,
        )

    assert exc_info.value.code == RATE_LIMITED
    assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]
