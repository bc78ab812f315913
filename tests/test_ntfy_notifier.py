from unittest.mock import MagicMock, patch

import pytest
import requests

from zhs_courtwatch import ntfy_notifier
from zhs_courtwatch.errors import NotificationDeliveryError
from zhs_courtwatch.models import TimeInterval


def test_build_result_string():
    matches = {
        1: [TimeInterval.from_label("16:00 - 17:00"), TimeInterval.from_label("18:00 - 19:00")],
        4: [TimeInterval.from_label("09:30 - 10:30")],
    }

    message = ntfy_notifier.build_result_string(matches)

    assert message == "Court 1:\n16:00 - 17:00\n18:00 - 19:00\nCourt 4:\n09:30 - 10:30\n"


def test_build_result_string_nothing_available():
    assert ntfy_notifier.build_result_string({}) == "Sorry, nothing available"


@patch("zhs_courtwatch.ntfy_notifier.requests.post")
@patch("zhs_courtwatch.ntfy_notifier.config")
def test_send_ntfy_message_success(mock_config, mock_post):
    mock_config.NTFY_BASE_URL = "https://ntfy.example"
    mock_config.NTFY_TOPIC = "courts"
    mock_config.NOTIFY_ATTEMPTS = 3

    mock_response = MagicMock()
    mock_response.raise_for_status.return_value = None
    mock_post.return_value = mock_response

    ntfy_notifier.send_ntfy_message("Court 1:\n16:00 - 17:00\n")

    mock_post.assert_called_once()
    args, kwargs = mock_post.call_args
    assert args[0] == "https://ntfy.example/courts"
    assert kwargs["data"] == b"Court 1:\n16:00 - 17:00\n"


@patch("zhs_courtwatch.ntfy_notifier.time.sleep")
@patch("zhs_courtwatch.ntfy_notifier.requests.post")
@patch("zhs_courtwatch.ntfy_notifier.config")
def test_send_ntfy_message_retries_then_succeeds(mock_config, mock_post, mock_sleep):
    mock_config.NTFY_BASE_URL = "https://ntfy.example"
    mock_config.NTFY_TOPIC = "courts"
    mock_config.NOTIFY_ATTEMPTS = 3
    mock_config.NOTIFY_BACKOFF_SECONDS = 2

    mock_post.side_effect = [requests.exceptions.ConnectionError("Network error"), MagicMock()]

    ntfy_notifier.send_ntfy_message("Test message")

    assert mock_post.call_count == 2
    mock_sleep.assert_called_once_with(2)


@patch("zhs_courtwatch.ntfy_notifier.time.sleep")
@patch("zhs_courtwatch.ntfy_notifier.requests.post")
@patch("zhs_courtwatch.ntfy_notifier.config")
def test_send_ntfy_message_failure(mock_config, mock_post, mock_sleep):
    mock_config.NTFY_BASE_URL = "https://ntfy.example"
    mock_config.NTFY_TOPIC = "courts"
    mock_config.NOTIFY_ATTEMPTS = 3
    mock_config.NOTIFY_BACKOFF_SECONDS = 1

    mock_post.side_effect = requests.exceptions.RequestException("Network error")

    with pytest.raises(NotificationDeliveryError):
        ntfy_notifier.send_ntfy_message("Test message")

    assert mock_post.call_count == 3
    assert [c[0][0] for c in mock_sleep.call_args_list] == [1, 2]


@patch("zhs_courtwatch.ntfy_notifier.time.sleep")
@patch("zhs_courtwatch.ntfy_notifier.requests.post")
@patch("zhs_courtwatch.ntfy_notifier.config")
def test_send_ntfy_message_http_error(mock_config, mock_post, mock_sleep):
    mock_config.NTFY_BASE_URL = "https://ntfy.example"
    mock_config.NTFY_TOPIC = "courts"
    mock_config.NOTIFY_ATTEMPTS = 1

    mock_response = MagicMock()
    mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("429 Too Many Requests")
    mock_post.return_value = mock_response

    with pytest.raises(NotificationDeliveryError):
        ntfy_notifier.send_ntfy_message("Test message")

    mock_sleep.assert_not_called()
