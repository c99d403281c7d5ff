# application/services/message_builder.py
from __future__ import annotations
import logging
import mimetypes
from typing import Any, Iterable, Optional, Sequence, Union

from application.ports import MessageTransport, TemplateResolver
from domain.errors import TemplateNotFoundError
from domain.identifiers import IdentifierClassifier
from domain.models import (
    Address,
    Attachment,
    AttachmentSource,
    EmailConfiguration,
    Identifier,
    SendResult,
)

logger = logging.getLogger(__name__)

AddressInput = Union[str, Identifier]


class MessageBuilder:
    """
    Builder fluido para un email de un único destinatario.

    Regla del proveedor: si el destino (primer destinatario o registro
    relacionado) es un usuario interno, no se puede guardar el envío como
    actividad. La supresión es una disyunción acumulada: una vez detectado un
    usuario, ninguna llamada posterior la revierte.

    Limitación conocida: de la lista de destinatarios solo se clasifica el
    primero; listas con tipos mezclados no se tratan de forma completa.
    """

    def __init__(
        self,
        *,
        transport: MessageTransport,
        classifier: IdentifierClassifier,
        template_resolver: Optional[TemplateResolver] = None,
    ) -> None:
        self.transport = transport
        self.classifier = classifier
        self.template_resolver = template_resolver

        self._to: tuple[Address, ...] = ()
        self._cc: tuple[Address, ...] = ()
        self._plain_body: Optional[str] = None
        self._html_body: Optional[str] = None
        self._subject: Optional[str] = None
        self._related: Optional[Address] = None
        self._merge_context: Optional[Address] = None
        self._template_id: Optional[Identifier] = None
        self._attachments: tuple[Attachment, ...] = ()
        self._user_detected = False

    # ───────── estado derivado ─────────
    @property
    def save_as_interaction(self) -> bool:
        return not self._user_detected

    def _detect(self, address: Address, origin: str) -> None:
        if address.is_user and not self._user_detected:
            logger.debug("Destino %s es usuario interno (%s): no se guarda como actividad", address.value, origin)
        self._user_detected = self._user_detected or address.is_user

    def _addresses(self, addresses: Union[AddressInput, Sequence[AddressInput], None]) -> tuple[Address, ...]:
        if addresses is None:
            return ()
        if isinstance(addresses, (str, Identifier)):
            addresses = [addresses]
        return tuple(self.classifier.address(a) for a in addresses if a is not None)

    # ───────── destinatarios ─────────
    def to(self, addresses: Union[AddressInput, Sequence[AddressInput]]) -> "MessageBuilder":
        self._to = self._addresses(addresses)
        if self._to:
            self._detect(self._to[0], "to")
        return self

    def cc_to(self, addresses: Union[AddressInput, Sequence[AddressInput]]) -> "MessageBuilder":
        self._cc = self._addresses(addresses)
        return self

    def related_to(self, record_id: Optional[AddressInput]) -> "MessageBuilder":
        self._related = None if record_id is None else self.classifier.address(record_id)
        if self._related is not None:
            self._detect(self._related, "related_to")
        return self

    def using_merge_context(self, record_id: Optional[AddressInput]) -> "MessageBuilder":
        self._merge_context = None if record_id is None else self.classifier.address(record_id)
        return self

    # ───────── contenido ─────────
    def with_body(self, text: Optional[str]) -> "MessageBuilder":
        self._plain_body = text
        return self

    def with_rich_text_body(self, html: Optional[str]) -> "MessageBuilder":
        self._html_body = html
        return self

    def with_subject(self, text: Optional[str]) -> "MessageBuilder":
        self._subject = text
        return self

    def with_attachments(self, sources: Optional[Iterable[AttachmentSource]]) -> "MessageBuilder":
        items = list(sources or [])
        if not items:
            return self
        self._attachments = tuple(
            Attachment(
                filename=s.name,
                content=s.binary_body,
                content_type=mimetypes.guess_type(s.name)[0] or "application/octet-stream",
            )
            for s in items
        )
        return self

    def using_template(self, name_or_id: Any) -> "MessageBuilder":
        if name_or_id is None or not str(name_or_id).strip():
            return self
        if self.classifier.is_identifier(name_or_id):
            self._template_id = self.classifier.identifier(name_or_id)
            return self
        name = str(name_or_id).strip()
        if self.template_resolver is None:
            raise TemplateNotFoundError(name)
        # Sin capturar: un fallo de resolución llega tal cual al llamador
        self._template_id = self.template_resolver.resolve_by_name(name)
        return self

    # ───────── envío ─────────
    def build(self) -> EmailConfiguration:
        return EmailConfiguration(
            to_addresses=self._to,
            cc_addresses=self._cc,
            plain_body=self._plain_body,
            html_body=self._html_body,
            subject=self._subject,
            related_record=self._related,
            merge_context=self._merge_context,
            template_id=self._template_id,
            attachments=self._attachments,
            save_as_interaction=self.save_as_interaction,
        )

    def send(self) -> list[SendResult]:
        configuration = self.build()
        logger.info(
            "Enviando email a %s (save_as_interaction=%s)",
            ", ".join(configuration.recipient_values()) or "-",
            configuration.save_as_interaction,
        )
        return self.transport.send(configuration)
