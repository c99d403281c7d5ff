# domain/identifiers.py
from __future__ import annotations
import re
from typing import Any, Mapping

from domain.models import Address, Identifier, PlainAddress, TypedRef, NOT_APPLICABLE

_ID_RE = re.compile(r"^[A-Za-z0-9]{15}(?:[A-Za-z0-9]{3})?$")
_SUFFIX_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ012345"


def default_key_prefixes() -> dict[str, str]:
    return {
        "005": "User",
        "00X": "Template",
        "003": "Contact",
        "00Q": "Lead",
        "001": "Account",
        "500": "Case",
        "006": "Opportunity",
    }


def case_safe_suffix(short_id: str) -> str:
    """
    Sufijo de 3 caracteres de los identificadores de 18: cada bloque de 5
    caracteres aporta una máscara con las posiciones en mayúscula.
    """
    out = []
    for i in range(0, 15, 5):
        flags = 0
        for j, ch in enumerate(short_id[i:i + 5]):
            if "A" <= ch <= "Z":
                flags |= 1 << j
        out.append(_SUFFIX_ALPHABET[flags])
    return "".join(out)


class IdentifierClassifier:
    """
    Decide si un token opaco es un identificador tipado y de qué tipo.
    El registro prefijo -> tipo se inyecta (viene de Settings.key_prefixes()).
    """

    def __init__(self, key_prefixes: Mapping[str, str] | None = None) -> None:
        self.key_prefixes = dict(key_prefixes if key_prefixes is not None else default_key_prefixes())

    def is_identifier(self, token: Any) -> bool:
        if isinstance(token, Identifier):
            return True
        if not isinstance(token, str):
            return False
        s = token.strip()
        if not _ID_RE.match(s):
            return False
        if len(s) == 18:
            return case_safe_suffix(s[:15]) == s[15:].upper()
        return True

    def classify(self, token: Any) -> str:
        if isinstance(token, Identifier):
            return token.type_tag
        if not self.is_identifier(token):
            return NOT_APPLICABLE
        return self.key_prefixes.get(token.strip()[:3], NOT_APPLICABLE)

    def identifier(self, token: Any) -> Identifier:
        if isinstance(token, Identifier):
            return token
        if not self.is_identifier(token):
            raise ValueError(f"Identificador mal formado: {token!r}")
        s = token.strip()
        return Identifier(value=s, type_tag=self.classify(s))

    def address(self, token: Any) -> Address:
        # Se clasifica una sola vez, al construir la variante
        if self.is_identifier(token):
            return TypedRef(self.identifier(token))
        if not isinstance(token, str):
            raise TypeError(f"Destino no soportado: {token!r}")
        return PlainAddress(token.strip())
