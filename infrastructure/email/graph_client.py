# infrastructure/email/graph_client.py
from __future__ import annotations
import logging
import base64
import re
from typing import List, Dict, Any, Mapping, Optional, Tuple
import requests
import msal
import time

from domain.errors import TransportRejectedError
from domain.models import Address, EmailConfiguration, SendResult, TypedRef

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class GraphMailClient:
    def __init__(
        self,
        *,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        user_id: str,
        base: str = "https://graph.microsoft.com/v1.0",
        timeout: int = 30,
    ) -> None:
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.user_id = user_id
        self.base = base.rstrip("/")
        self.timeout = timeout
        self._token: Optional[str] = None
        self._token_expires_at: float = 0.0

    # ───────── auth ─────────
    def _acquire_token(self) -> str:
        """
        Obtiene un access_token de MSAL y controla la caducidad.
        Reutiliza el token si le queda más de 60 s de vida.
        """
        now = time.time()
        if self._token and (self._token_expires_at - 60) > now:
            return self._token

        app = msal.ConfidentialClientApplication(
            client_id=self.client_id,
            client_credential=self.client_secret,
            authority=f"https://login.microsoftonline.com/{self.tenant_id}",
        )

        result = app.acquire_token_silent(scopes=["https://graph.microsoft.com/.default"], account=None)
        if not result:
            result = app.acquire_token_for_client(scopes=["https://graph.microsoft.com/.default"])

        if "access_token" not in result:
            raise RuntimeError(f"MSAL token error: {result}")

        self._token = result["access_token"]
        self._token_expires_at = now + float(result.get("expires_in", 3600))
        return self._token

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._acquire_token()}", "Content-Type": "application/json"}

    # ───────── HTTP ─────────
    def _post(self, url: str, json: Dict[str, Any]) -> requests.Response:
        """Devuelve el Response (Graph puede responder 202 sin cuerpo)."""
        r = requests.post(url, headers=self._headers(), json=json, timeout=self.timeout)
        if r.status_code == 401:
            # Token caducado → forzamos refresh y reintentamos UNA vez
            self._token = None
            self._token_expires_at = 0.0
            r = requests.post(url, headers=self._headers(), json=json, timeout=self.timeout)
        if r.status_code == 400:
            raise TransportRejectedError(f"Graph rechazó el mensaje: {r.text or '<empty>'}")
        r.raise_for_status()
        return r

    def send_message(self, message: Dict[str, Any], *, save_to_sent_items: bool) -> None:
        url = f"{self.base}/users/{self.user_id}/sendMail"
        r = self._post(url, json={"message": message, "saveToSentItems": save_to_sent_items})
        # OK típico: 202 Accepted sin cuerpo
        if r.status_code not in (200, 202):
            logger.warning("send_mail status=%s body=%s", r.status_code, r.text or "<empty>")


class GraphMailTransport:
    """
    Adapta una EmailConfiguration a /sendMail de Graph.
    saveToSentItems refleja save_as_interaction.
    """

    def __init__(self, client: GraphMailClient, address_book: Mapping[str, str] | None = None) -> None:
        self.client = client
        self.address_book = dict(address_book or {})

    def _resolve(self, address: Address) -> Optional[str]:
        if isinstance(address, TypedRef):
            value = address.value
            return self.address_book.get(value) or self.address_book.get(value[:15])
        return address.value

    def _resolve_all(self, addresses: Tuple[Address, ...]) -> List[Tuple[Address, Optional[str]]]:
        """Empareja cada destino con su email (None si es tipado y no está en la agenda)."""
        out: List[Tuple[Address, Optional[str]]] = []
        for a in addresses:
            email = self._resolve(a)
            if email and not _EMAIL_RE.match(email):
                raise TransportRejectedError(f"Dirección mal formada: {email!r}")
            out.append((a, email))
        return out

    def build_message(self, configuration: EmailConfiguration, to: List[str], cc: List[str]) -> Dict[str, Any]:
        if configuration.html_body:
            body = {"contentType": "HTML", "content": configuration.html_body}
        else:
            body = {"contentType": "Text", "content": configuration.plain_body or ""}

        headers = []
        if configuration.template_id:
            headers.append({"name": "X-Template-Id", "value": configuration.template_id.value})
        if configuration.related_record:
            headers.append({"name": "X-Related-Record-Id", "value": configuration.related_record.value})
        if configuration.merge_context:
            headers.append({"name": "X-Merge-Context-Id", "value": configuration.merge_context.value})

        msg: Dict[str, Any] = {
            "subject": configuration.subject or "",
            "body": body,
            "toRecipients": [{"emailAddress": {"address": a}} for a in to],
            "ccRecipients": [{"emailAddress": {"address": a}} for a in cc],
            "attachments": [
                {
                    "@odata.type": "#microsoft.graph.fileAttachment",
                    "name": att.filename,
                    "contentType": att.content_type or "application/octet-stream",
                    "contentBytes": base64.b64encode(att.content).decode("ascii"),
                }
                for att in configuration.attachments
            ],
        }
        if headers:
            msg["internetMessageHeaders"] = headers
        return msg

    def send(self, configuration: EmailConfiguration) -> List[SendResult]:
        if not configuration.to_addresses:
            raise TransportRejectedError("Sin destinatarios")

        to = self._resolve_all(configuration.to_addresses)
        cc = []
        for a, email in self._resolve_all(configuration.cc_addresses):
            if email:
                cc.append(email)
            else:
                logger.warning("CC sin dirección, se omite: %s", a.value)

        deliverable = [email for _, email in to if email]
        if deliverable:
            message = self.build_message(configuration, deliverable, cc)
            self.client.send_message(message, save_to_sent_items=configuration.save_as_interaction)
            logger.info("Email enviado vía Graph a %s", ", ".join(deliverable))
        else:
            logger.warning("Ningún destinatario resoluble; no se envía nada")

        return [
            SendResult(recipient=a.value, success=True) if email
            else SendResult(recipient=a.value, success=False, error="Destinatario sin dirección de email")
            for a, email in to
        ]
