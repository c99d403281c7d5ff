# infrastructure/email/log_transport.py
from __future__ import annotations
import logging

from domain.errors import TransportRejectedError
from domain.models import EmailConfiguration, SendResult

logger = logging.getLogger(__name__)


class LoggingTransport:
    """Modo 'dry-run' (EMAIL_PROVIDER=log): no envía, solo registra la configuración."""

    def send(self, configuration: EmailConfiguration) -> list[SendResult]:
        if not configuration.to_addresses:
            raise TransportRejectedError("Sin destinatarios")
        logger.info(
            "[DRY-RUN] principal=%s to=%s cc=%s asunto=%r plantilla=%s relacionado=%s adjuntos=%d save_as_interaction=%s",
            configuration.primary_recipient().value,
            configuration.recipient_values(),
            [a.value for a in configuration.cc_addresses],
            configuration.subject,
            configuration.template_id.value if configuration.template_id else "-",
            configuration.related_record.value if configuration.related_record else "-",
            len(configuration.attachments),
            configuration.save_as_interaction,
        )
        return [SendResult(recipient=v, success=True) for v in configuration.recipient_values()]
