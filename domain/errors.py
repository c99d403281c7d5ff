# domain/errors.py
from __future__ import annotations


class NotificationError(Exception):
    """Base de los errores propios del envío de notificaciones."""


class TemplateNotFoundError(NotificationError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"No se encontró plantilla '{name}'")
        self.name = name


class TransportRejectedError(NotificationError):
    """El proveedor rechaza la configuración completa (sin destinatarios, dirección inválida…)."""
