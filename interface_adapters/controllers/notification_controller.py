# interface_adapters/controllers/notification_controller.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Optional

from config.settings import Settings
from application.ports import MessageTransport, TemplateResolver
from application.services.message_builder import MessageBuilder
from domain.identifiers import IdentifierClassifier
from domain.models import SendResult
from infrastructure.filesystem.storage import AttachmentStorage
from infrastructure.templates.resolvers import HttpTemplateResolver, StaticTemplateResolver

from infrastructure.email.graph_client import GraphMailClient, GraphMailTransport
from infrastructure.email.log_transport import LoggingTransport

logger = logging.getLogger(__name__)


@dataclass
class NotificationRequest:
    to: list[str]
    subject: Optional[str] = None
    body: Optional[str] = None
    html_body: Optional[str] = None
    cc: list[str] = field(default_factory=list)
    related_to: Optional[str] = None
    merge_context: Optional[str] = None
    template: Optional[str] = None
    attachments: list[str] = field(default_factory=list)  # rutas relativas a ATTACHMENTS_DIR


class NotificationController:
    def __init__(
        self,
        settings: Settings,
        *,
        transport: MessageTransport | None = None,
        template_resolver: TemplateResolver | None = None,
    ) -> None:
        self.settings = settings
        self.classifier = IdentifierClassifier(settings.key_prefixes())
        self.storage = AttachmentStorage(base=settings.attachments_dir_path())
        self.transport = transport or self._build_transport()
        self.template_resolver = template_resolver or self._build_resolver()

    def _build_transport(self) -> MessageTransport:
        st = self.settings
        if st.EMAIL_PROVIDER == "graph":
            client = GraphMailClient(
                tenant_id=st.GRAPH_TENANT_ID,
                client_id=st.GRAPH_CLIENT_ID,
                client_secret=st.GRAPH_CLIENT_SECRET,
                user_id=st.GRAPH_USER_ID,
                base=st.GRAPH_BASE,
                timeout=st.GRAPH_TIMEOUT,
            )
            return GraphMailTransport(client, address_book=st.address_book())
        if st.EMAIL_PROVIDER == "log":
            return LoggingTransport()
        raise ValueError(f"EMAIL_PROVIDER no soportado: {st.EMAIL_PROVIDER!r}")

    def _build_resolver(self) -> TemplateResolver:
        st = self.settings
        if st.TEMPLATE_API_BASE:
            return HttpTemplateResolver(
                base=st.TEMPLATE_API_BASE,
                classifier=self.classifier,
                token=st.TEMPLATE_API_TOKEN,
                timeout=st.TEMPLATE_API_TIMEOUT,
            )
        return StaticTemplateResolver(st.template_map(), self.classifier)

    def new_message(self) -> MessageBuilder:
        return MessageBuilder(
            transport=self.transport,
            classifier=self.classifier,
            template_resolver=self.template_resolver,
        )

    def send(self, request: NotificationRequest) -> list[SendResult]:
        try:
            builder = (
                self.new_message()
                .to(request.to)
                .cc_to(request.cc)
                .with_subject(request.subject)
                .with_body(request.body)
                .with_rich_text_body(request.html_body)
                .using_template(request.template)
                .with_attachments(self.storage.load(request.attachments))
            )
            if request.related_to:
                builder.related_to(request.related_to)
            if request.merge_context:
                builder.using_merge_context(request.merge_context)
            results = builder.send()
        except Exception as exc:
            logger.error("No se pudo enviar la notificación a %s: %s", ", ".join(request.to) or "-", exc)
            raise

        for res in results:
            if res.success:
                logger.info("Enviado a %s", res.recipient)
            else:
                logger.warning("Fallo enviando a %s: %s", res.recipient, res.error or "-")
        return results
