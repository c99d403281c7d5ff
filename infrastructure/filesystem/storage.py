# infrastructure/filesystem/storage.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable


@dataclass(frozen=True)
class FileAttachment:
    name: str
    binary_body: bytes


class AttachmentStorage:
    def __init__(self, base: Path) -> None:
        self.base = base.resolve()

    def load(self, names: Iterable[str]) -> list[FileAttachment]:
        out: list[FileAttachment] = []
        for name in names:
            fp = Path(name)
            if not fp.is_absolute():
                fp = self.base / fp
            out.append(FileAttachment(name=fp.name, binary_body=fp.read_bytes()))
        return out
