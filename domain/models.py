# domain/models.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Protocol, Union

USER_TAG = "User"
NOT_APPLICABLE = ""


@dataclass(frozen=True)
class Identifier:
    value: str
    type_tag: str = NOT_APPLICABLE

    @property
    def is_user(self) -> bool:
        return self.type_tag == USER_TAG


@dataclass(frozen=True)
class PlainAddress:
    """Dirección literal (email); nunca es un usuario interno."""
    value: str

    @property
    def is_user(self) -> bool:
        return False


@dataclass(frozen=True)
class TypedRef:
    """Referencia a un registro tipado (usuario, contacto, lead…)."""
    identifier: Identifier

    @property
    def value(self) -> str:
        return self.identifier.value

    @property
    def is_user(self) -> bool:
        return self.identifier.is_user


Address = Union[PlainAddress, TypedRef]


@dataclass(frozen=True)
class Attachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class AttachmentSource(Protocol):
    name: str
    binary_body: bytes


@dataclass(frozen=True)
class EmailConfiguration:
    to_addresses: tuple[Address, ...] = ()
    cc_addresses: tuple[Address, ...] = ()
    plain_body: Optional[str] = None
    html_body: Optional[str] = None
    subject: Optional[str] = None
    related_record: Optional[Address] = None
    merge_context: Optional[Address] = None
    template_id: Optional[Identifier] = None
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)
    save_as_interaction: bool = True

    def primary_recipient(self) -> Optional[Address]:
        return self.to_addresses[0] if self.to_addresses else None

    def recipient_values(self) -> list[str]:
        return [a.value for a in self.to_addresses]


@dataclass(frozen=True)
class SendResult:
    recipient: str
    success: bool
    error: Optional[str] = None
