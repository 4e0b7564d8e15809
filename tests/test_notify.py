import requests

from content_ingest.services.notify import (
    NullNotifier,
    TelegramNotifier,
    WebhookNotifier,
    build_notifier,
)

from conftest import FakeResponse, FakeSession


def test_webhook_posts_single_text_field() -> None:
    session = FakeSession(FakeResponse(200))

    assert WebhookNotifier("https://hooks.example.com/x", session=session).send("hello") is True

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "https://hooks.example.com/x")
    assert kwargs["json"] == {"text": "hello"}


def test_webhook_failure_is_swallowed(caplog) -> None:
    session = FakeSession(requests.ConnectionError("no route"))

    assert WebhookNotifier("https://hooks.example.com/x", session=session).send("hello") is False
    assert "Notification failed" in caplog.text


def test_webhook_error_status_is_swallowed() -> None:
    session = FakeSession(FakeResponse(500, reason="oops"))

    assert WebhookNotifier("https://hooks.example.com/x", session=session).send("hello") is False


def test_telegram_payload() -> None:
    session = FakeSession(FakeResponse(200))

    TelegramNotifier("TOKEN", "42", session=session).send("x" * 5000)

    _, url, kwargs = session.calls[0]
    assert url == "https://api.telegram.org/botTOKEN/sendMessage"
    assert kwargs["json"]["chat_id"] == "42"
    assert len(kwargs["json"]["text"]) == 4096


def test_build_notifier_selection(settings) -> None:
    assert isinstance(build_notifier(settings), NullNotifier)

    settings.telegram_enabled = True
    settings.telegram_bot_token = "t"
    settings.telegram_chat_id = "c"
    assert isinstance(build_notifier(settings), TelegramNotifier)

    settings.notify_webhook_url = "https://hooks.example.com/x"
    assert isinstance(build_notifier(settings), WebhookNotifier)


def test_null_notifier_is_silent() -> None:
    assert NullNotifier().send("anything") is False
