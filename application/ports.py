# application/ports.py
from __future__ import annotations
from typing import Protocol

from domain.models import EmailConfiguration, Identifier, SendResult


class TemplateResolver(Protocol):
    def resolve_by_name(self, name: str) -> Identifier:
        """Lanza TemplateNotFoundError si no hay ninguna plantilla con ese nombre."""
        ...


class MessageTransport(Protocol):
    def send(self, configuration: EmailConfiguration) -> list[SendResult]:
        """Un SendResult por destinatario; puede lanzar TransportRejectedError."""
        ...
