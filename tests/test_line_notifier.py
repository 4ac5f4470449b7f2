"""Tests for LINE push delivery."""

from unittest.mock import Mock

import pytest
import requests

from config.settings import LineSettings
from slipbot.api.exceptions import MessageTooLongError, NotificationDeliveryError
from slipbot.models import ExchangeName, ExecutionResult
from slipbot.notify import LineNotifier


def ok_response():
    response = Mock()
    response.status_code = 200
    return response


def error_response(status_code):
    response = Mock()
    response.status_code = status_code
    response.raise_for_status.side_effect = requests.HTTPError(
        f"{status_code} Server Error", response=response
    )
    return response


@pytest.fixture
def settings():
    return LineSettings(
        channel_access_token="token-abcdefghijkl",
        user_id="U123",
        timeout_seconds=5,
        retry_delay_seconds=2,
        max_retries=1,
    )


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def notifier(settings, session, sleeps):
    return LineNotifier(settings, session=session, sleep=sleeps.append)


RESULTS = [
    ExecutionResult(ExchangeName.MAX, True),
    ExecutionResult(ExchangeName.BITO, False),
]


class TestLineNotifier:
    def test_sends_formatted_summary(self, notifier, session, sleeps):
        session.post.return_value = ok_response()

        message = notifier.send_summary(RESULTS)

        assert message == "Max Success, Bito failed"
        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args == (LineNotifier.PUSH_ENDPOINT,)
        assert kwargs["json"] == {
            "to": "U123",
            "messages": [{"type": "text", "text": "Max Success, Bito failed"}],
        }
        assert kwargs["headers"]["Authorization"] == "Bearer token-abcdefghijkl"
        assert kwargs["timeout"] == 5
        assert sleeps == []

    def test_retries_once_then_succeeds(self, notifier, session, sleeps):
        session.post.side_effect = [requests.ConnectionError("down"), ok_response()]

        notifier.send_summary(RESULTS)

        assert session.post.call_count == 2
        assert sleeps == [2]

    def test_http_error_is_retried(self, notifier, session, sleeps):
        session.post.side_effect = [error_response(500), ok_response()]

        notifier.send_summary(RESULTS)

        assert session.post.call_count == 2

    def test_gives_up_after_retry(self, notifier, session, sleeps):
        session.post.side_effect = requests.Timeout("slow")

        with pytest.raises(NotificationDeliveryError) as exc_info:
            notifier.send_summary(RESULTS)

        assert session.post.call_count == 2
        assert sleeps == [2]
        assert isinstance(exc_info.value.__cause__, requests.Timeout)

    def test_no_retry_configured(self, settings, session, sleeps):
        notifier = LineNotifier(
            settings.model_copy(update={"max_retries": 0}), session=session, sleep=sleeps.append
        )
        session.post.side_effect = requests.ConnectionError("down")

        with pytest.raises(NotificationDeliveryError):
            notifier.send_summary(RESULTS)
        assert session.post.call_count == 1
        assert sleeps == []

    def test_too_long_is_not_sent(self, notifier, session):
        with pytest.raises(MessageTooLongError) as exc_info:
            notifier.send_summary([ExecutionResult(ExchangeName.MAX, True)] * 2000)

        assert exc_info.value.length > 5000
        session.post.assert_not_called()

    def test_too_long_is_a_delivery_error(self):
        assert issubclass(MessageTooLongError, NotificationDeliveryError)
