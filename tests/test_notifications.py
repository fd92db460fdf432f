from dataclasses import replace
from datetime import datetime, timezone
import threading

import pytest
import requests

import app.services.notifications as notifications
from app.core.config import settings

TICKET = {"id": 7, "full_name": "Ana <b>", "email": "ana@x.com", "approval_codes": ["0042", "1337"]}
RAFFLE = {"name": "Car Raffle"}


@pytest.fixture
def resend_configured(monkeypatch):
    monkeypatch.setattr(notifications.resend, "default_http_client", notifications.resend.default_http_client)
    monkeypatch.setattr(
        notifications, "settings", replace(settings, resend_api_key="re_test", email_timeout_seconds=1)
    )


def test_render_lists_every_code_and_escapes_names():
    subject, html = notifications.render_approval_email(
        TICKET, RAFFLE, ["0042", "1337"], sent_on=datetime(2024, 5, 1, tzinfo=timezone.utc)
    )
    assert subject == "Your purchase has been confirmed!"
    assert "0042" in html and "1337" in html
    assert "Ticket(s) purchased (2)" in html
    assert "Ana &lt;b&gt;" in html
    assert "Car Raffle" in html
    assert "Wednesday, May 01, 2024" in html


def test_render_resent_subject():
    subject, _ = notifications.render_approval_email(TICKET, RAFFLE, TICKET["approval_codes"], resent=True)
    assert "resent" in subject


def test_send_email_skipped_without_api_key(monkeypatch):
    monkeypatch.setattr(notifications, "settings", replace(settings, resend_api_key=""))
    calls = []
    monkeypatch.setattr(notifications.resend.Emails, "send", lambda params: calls.append(params))

    assert notifications.send_email("ana@x.com", "hi", "<p>hi</p>") is False
    assert calls == []


def test_send_email_uses_resend(monkeypatch, resend_configured):
    calls = []
    monkeypatch.setattr(notifications.resend.Emails, "send", lambda params: calls.append(params))

    assert notifications.send_email("ana@x.com", "hi", "<p>hi</p>") is True
    assert calls[0]["to"] == ["ana@x.com"]
    assert calls[0]["subject"] == "hi"


def test_dispatch_does_not_raise_on_provider_error(monkeypatch, resend_configured):
    def boom(params):
        raise RuntimeError("provider down")

    monkeypatch.setattr(notifications.resend.Emails, "send", boom)

    future = notifications.dispatch_approval_email(TICKET, RAFFLE, TICKET["approval_codes"])

    assert isinstance(future.exception(timeout=5), RuntimeError)


def test_dispatch_returns_before_send_finishes(monkeypatch, resend_configured):
    release = threading.Event()
    monkeypatch.setattr(notifications.resend.Emails, "send", lambda params: release.wait(5))

    future = notifications.dispatch_approval_email(TICKET, RAFFLE, TICKET["approval_codes"])

    assert not future.done()
    release.set()
    assert future.result(timeout=5) is True


def test_resent_email_surfaces_errors(monkeypatch, resend_configured):
    def boom(params):
        raise RuntimeError("bad request")

    monkeypatch.setattr(notifications.resend.Emails, "send", boom)

    with pytest.raises(notifications.EmailDeliveryError):
        notifications.send_resent_email(TICKET, RAFFLE)


def test_resent_email_requires_configuration(monkeypatch):
    monkeypatch.setattr(notifications, "settings", replace(settings, resend_api_key=""))
    with pytest.raises(notifications.EmailDeliveryError):
        notifications.send_resent_email(TICKET, RAFFLE)


@pytest.fixture
def hung_provider(monkeypatch):
    """The provider accepts the connection and never answers; requests honors its timeout."""
    monkeypatch.setattr(notifications.resend, "default_http_client", notifications.resend.default_http_client)
    monkeypatch.setattr(
        notifications, "settings", replace(settings, resend_api_key="re_test", email_timeout_seconds=0.05)
    )
    release = threading.Event()
    timeouts = []

    def hang(method, url, timeout=None, **kwargs):
        timeouts.append(timeout)
        release.wait(timeout)
        raise requests.exceptions.ReadTimeout(f"Read timed out. (read timeout={timeout})")

    monkeypatch.setattr(requests, "request", hang)
    yield timeouts
    release.set()


def test_hung_provider_does_not_hold_mail_workers(hung_provider):
    futures = [
        notifications.dispatch_approval_email(TICKET, RAFFLE, TICKET["approval_codes"])
        for _ in range(settings.email_workers * 2)
    ]

    for future in futures:
        assert future.exception(timeout=5) is not None
    assert hung_provider == [0.05] * len(futures)


def test_resent_email_times_out(hung_provider):
    with pytest.raises(notifications.EmailDeliveryError, match="timed out"):
        notifications.send_resent_email(TICKET, RAFFLE)
    assert hung_provider == [0.05]


def test_resent_email_not_queued_behind_approval_emails(monkeypatch, resend_configured):
    release = threading.Event()
    sent = []

    def send(params):
        if "resent" not in params["subject"]:
            release.wait(5)
        sent.append(params["subject"])

    monkeypatch.setattr(notifications.resend.Emails, "send", send)
    try:
        futures = [
            notifications.dispatch_approval_email(TICKET, RAFFLE, TICKET["approval_codes"])
            for _ in range(settings.email_workers)
        ]
        notifications.send_resent_email(TICKET, RAFFLE)
        assert sent == ["Your approved tickets (resent)"]
    finally:
        release.set()
    for future in futures:
        assert future.result(timeout=5) is True
