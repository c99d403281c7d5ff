from __future__ import annotations

import logging
from pathlib import Path

import pytest

from conftest import TEMPLATE_ID, USER_ID, FakeTransport
from config.settings import Settings
from domain.errors import TemplateNotFoundError, TransportRejectedError
from domain.models import Identifier, SendResult
from infrastructure.email.graph_client import GraphMailTransport
from infrastructure.email.log_transport import LoggingTransport
from infrastructure.templates.resolvers import HttpTemplateResolver, StaticTemplateResolver
from interface_adapters.controllers.notification_controller import NotificationController, NotificationRequest
import main


def _settings(tmp_path: Path, **kw) -> Settings:
    base = dict(
        EMAIL_PROVIDER="log",
        TEMPLATE_API_BASE="",
        TEMPLATE_MAP=f"Welcome_Email={TEMPLATE_ID}",
        ATTACHMENTS_DIR=str(tmp_path),
    )
    base.update(kw)
    return Settings(**base)


class TestWiring:
    def test_log_provider(self, tmp_path: Path) -> None:
        ctl = NotificationController(_settings(tmp_path))
        assert isinstance(ctl.transport, LoggingTransport)
        assert isinstance(ctl.template_resolver, StaticTemplateResolver)

    def test_graph_provider_and_http_templates(self, tmp_path: Path) -> None:
        ctl = NotificationController(
            _settings(tmp_path, EMAIL_PROVIDER="graph", TEMPLATE_API_BASE="https://tpl.example.com")
        )
        assert isinstance(ctl.transport, GraphMailTransport)
        assert isinstance(ctl.template_resolver, HttpTemplateResolver)

    def test_unknown_provider(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            NotificationController(_settings(tmp_path, EMAIL_PROVIDER="smtp"))


class TestSend:
    def test_request_is_forwarded(self, tmp_path: Path) -> None:
        (tmp_path / "a.pdf").write_bytes(b"PDF")
        transport = FakeTransport()
        ctl = NotificationController(_settings(tmp_path), transport=transport)

        results = ctl.send(
            NotificationRequest(
                to=[USER_ID],
                subject="Hi",
                body="Hello",
                template="Welcome_Email",
                attachments=["a.pdf"],
            )
        )

        cfg = transport.sent[0]
        assert results == [SendResult(USER_ID, True)]
        assert cfg.save_as_interaction is False
        assert cfg.template_id == Identifier(TEMPLATE_ID, "Template")
        assert [(a.filename, a.content) for a in cfg.attachments] == [("a.pdf", b"PDF")]

    def test_related_user_suppresses(self, tmp_path: Path) -> None:
        transport = FakeTransport()
        ctl = NotificationController(_settings(tmp_path), transport=transport)
        ctl.send(NotificationRequest(to=["user@example.com"], related_to=USER_ID))
        assert transport.sent[0].save_as_interaction is False

    def test_errors_are_reraised(self, tmp_path: Path) -> None:
        ctl = NotificationController(_settings(tmp_path))
        with pytest.raises(TransportRejectedError):
            ctl.send(NotificationRequest(to=[]))
        with pytest.raises(TemplateNotFoundError):
            ctl.send(NotificationRequest(to=["a@x.com"], template="Missing"))

    def test_dry_run_logs(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        ctl = NotificationController(_settings(tmp_path))
        with caplog.at_level(logging.INFO):
            results = ctl.send(NotificationRequest(to=["a@x.com"], subject="Hi"))
        assert results == [SendResult("a@x.com", True)]
        assert "[DRY-RUN] principal=a@x.com" in caplog.text


class TestCli:
    def test_exit_codes(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.setattr(main, "Settings", lambda: _settings(tmp_path))
        assert main.main(["--to", "a@x.com", "--subject", "Hi", "--body", "Hello"]) == 0
        assert "a@x.com: OK" in capsys.readouterr().out
        assert main.main(["--to", "a@x.com", "--template", "Missing"]) == 2

    def test_failure_traceback_logged_once(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setattr(main, "Settings", lambda: _settings(tmp_path))
        with caplog.at_level(logging.INFO):
            assert main.main(["--to", "a@x.com", "--template", "Missing"]) == 2
        errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
        assert [r.name for r in errors] == [
            "interface_adapters.controllers.notification_controller",
            "main",
        ]
        assert [r.exc_info is not None for r in errors] == [False, True]
