# config/settings.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import os
from dotenv import load_dotenv

load_dotenv()


def _pairs(raw: str) -> dict[str, str]:
    # "clave=valor,clave2=valor2" → dict (se ignoran entradas sin '=')
    out: dict[str, str] = {}
    for chunk in (raw or "").split(","):
        key, sep, value = chunk.partition("=")
        if sep and key.strip() and value.strip():
            out[key.strip()] = value.strip()
    return out


@dataclass(frozen=True)
class Settings:
    EMAIL_PROVIDER: str = os.getenv("EMAIL_PROVIDER", "graph").lower()  # graph | log

    # GRAPH
    GRAPH_TENANT_ID: str = os.getenv("GRAPH_TENANT_ID", "")
    GRAPH_CLIENT_ID: str = os.getenv("GRAPH_CLIENT_ID", "")
    GRAPH_CLIENT_SECRET: str = os.getenv("GRAPH_CLIENT_SECRET", "")
    GRAPH_USER_ID: str = os.getenv("GRAPH_USER_ID", "")
    GRAPH_BASE: str = os.getenv("GRAPH_BASE", "https://graph.microsoft.com/v1.0")
    GRAPH_TIMEOUT: int = int(os.getenv("GRAPH_TIMEOUT", 30))

    # Identificadores: prefijo de 3 caracteres -> tipo
    ID_KEY_PREFIXES: str = os.getenv(
        "ID_KEY_PREFIXES",
        "005=User,00X=Template,003=Contact,00Q=Lead,001=Account,500=Case,006=Opportunity",
    )
    # Resolución de destinatarios tipados: "<id>=<email>,..."
    ADDRESS_BOOK: str = os.getenv("ADDRESS_BOOK", "")

    # Plantillas: catálogo remoto o, si no hay, mapa estático "nombre=id,..."
    TEMPLATE_API_BASE: str = os.getenv("TEMPLATE_API_BASE", "")
    TEMPLATE_API_TOKEN: str = os.getenv("TEMPLATE_API_TOKEN", "")
    TEMPLATE_API_TIMEOUT: int = int(os.getenv("TEMPLATE_API_TIMEOUT", 10))
    TEMPLATE_MAP: str = os.getenv("TEMPLATE_MAP", "")

    ATTACHMENTS_DIR: str = os.getenv("ATTACHMENTS_DIR", ".")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # ───────── helpers ─────────
    def key_prefixes(self) -> dict[str, str]:
        return _pairs(self.ID_KEY_PREFIXES)

    def address_book(self) -> dict[str, str]:
        return _pairs(self.ADDRESS_BOOK)

    def template_map(self) -> dict[str, str]:
        return _pairs(self.TEMPLATE_MAP)

    def attachments_dir_path(self) -> Path:
        return Path(self.ATTACHMENTS_DIR).resolve()
