"""Configuración de pytest: raíz del repo en el path y dobles de los puertos."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

root_path = Path(__file__).parent.parent
if str(root_path) not in sys.path:
    sys.path.insert(0, str(root_path))

from domain.errors import TemplateNotFoundError  # noqa: E402
from domain.identifiers import IdentifierClassifier  # noqa: E402
from domain.models import EmailConfiguration, Identifier, SendResult  # noqa: E402

USER_ID = "005000000000001"
USER_ID_18 = "005000000000001AAA"
CONTACT_ID = "003000000000001"
TEMPLATE_ID = "00X000000000001"


class FakeTransport:
    def __init__(self, results: list[SendResult] | None = None) -> None:
        self.results = results
        self.sent: list[EmailConfiguration] = []

    def send(self, configuration: EmailConfiguration) -> list[SendResult]:
        self.sent.append(configuration)
        if self.results is not None:
            return self.results
        return [SendResult(recipient=v, success=True) for v in configuration.recipient_values()]


class FakeTemplateResolver:
    def __init__(self, mapping: dict[str, Identifier] | None = None) -> None:
        self.mapping = mapping or {}
        self.calls: list[str] = []

    def resolve_by_name(self, name: str) -> Identifier:
        self.calls.append(name)
        if name not in self.mapping:
            raise TemplateNotFoundError(name)
        return self.mapping[name]


@pytest.fixture
def classifier() -> IdentifierClassifier:
    return IdentifierClassifier()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def resolver() -> FakeTemplateResolver:
    return FakeTemplateResolver({"Welcome_Email": Identifier(TEMPLATE_ID, "Template")})
