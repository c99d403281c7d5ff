# infrastructure/templates/resolvers.py
from __future__ import annotations
import logging
from typing import Any, Dict, Mapping, Optional
import requests

from domain.errors import TemplateNotFoundError
from domain.identifiers import IdentifierClassifier
from domain.models import Identifier

logger = logging.getLogger(__name__)


class StaticTemplateResolver:
    """Nombre → id desde Settings.TEMPLATE_MAP."""

    def __init__(self, mapping: Mapping[str, str], classifier: IdentifierClassifier) -> None:
        self.mapping = dict(mapping)
        self.classifier = classifier

    def resolve_by_name(self, name: str) -> Identifier:
        raw = self.mapping.get(name)
        if not raw or not self.classifier.is_identifier(raw):
            raise TemplateNotFoundError(name)
        return self.classifier.identifier(raw)


class HttpTemplateResolver:
    """
    Consulta el catálogo remoto: GET {base}/templates?name=<nombre>.
    Acepta {"id": ...} o {"value": [{"id": ...}, ...]} y cachea los aciertos
    durante la vida de la instancia.
    """

    def __init__(
        self,
        *,
        base: str,
        classifier: IdentifierClassifier,
        token: str = "",
        timeout: int = 10,
    ) -> None:
        self.base = base.rstrip("/")
        self.classifier = classifier
        self.token = token
        self.timeout = timeout
        self._cache: Dict[str, Identifier] = {}

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    @staticmethod
    def _extract_id(data: Any) -> Optional[str]:
        if not isinstance(data, dict):
            return None
        if data.get("id"):
            return data["id"]
        items = data.get("value") or []
        return next((it.get("id") for it in items if isinstance(it, dict) and it.get("id")), None)

    def resolve_by_name(self, name: str) -> Identifier:
        if name in self._cache:
            return self._cache[name]

        r = requests.get(
            f"{self.base}/templates",
            headers=self._headers(),
            params={"name": name},
            timeout=self.timeout,
        )
        if r.status_code == 404:
            raise TemplateNotFoundError(name)
        r.raise_for_status()

        raw = self._extract_id(r.json())
        if not raw or not self.classifier.is_identifier(raw):
            raise TemplateNotFoundError(name)

        ident = self.classifier.identifier(raw)
        self._cache[name] = ident
        logger.info("Plantilla '%s' resuelta a %s", name, ident.value)
        return ident
