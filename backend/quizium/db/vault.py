from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol

from quizium.models.document import Document

logger = logging.getLogger(__name__)


class DocumentStoreError(Exception):
    """Raised when a note cannot be listed, read or written."""


class DocumentNotFoundError(DocumentStoreError):
    pass


class DocumentStore(Protocol):
    async def list_documents(self) -> list[Document]: ...

    async def read_text(self, doc: Document) -> str: ...

    async def write_text(self, doc: Document, text: str) -> None: ...


# newline="" keeps the note's own line endings in both directions
def _read_file(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _write_file(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)


class VaultStore:
    """Markdown notes stored as files under a root directory."""

    def __init__(self, root: Path, pattern: str = "**/*.md") -> None:
        self.root = root
        self.pattern = pattern

    def _resolve(self, doc: Document) -> Path:
        path = (self.root / doc.path).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise DocumentNotFoundError(f"Document outside vault: {doc.path}")
        return path

    def _list_sync(self) -> list[Document]:
        if not self.root.is_dir():
            return []
        paths = sorted(p for p in self.root.glob(self.pattern) if p.is_file())
        return [
            Document(path=p.relative_to(self.root).as_posix(), title=p.stem)
            for p in paths
        ]

    async def list_documents(self) -> list[Document]:
        return await asyncio.to_thread(self._list_sync)

    async def read_text(self, doc: Document) -> str:
        path = self._resolve(doc)
        try:
            return await asyncio.to_thread(_read_file, path)
        except FileNotFoundError as e:
            raise DocumentNotFoundError(f"Document not found: {doc.path}") from e
        except OSError as e:
            logger.error("Failed to read %s: %s", doc.path, e)
            raise DocumentStoreError(str(e)) from e
        except UnicodeDecodeError as e:
            logger.error("Note %s is not valid UTF-8: %s", doc.path, e)
            raise DocumentStoreError(f"Document is not valid UTF-8: {doc.path}") from e

    async def write_text(self, doc: Document, text: str) -> None:
        path = self._resolve(doc)
        if not path.exists():
            raise DocumentNotFoundError(f"Document not found: {doc.path}")
        try:
            await asyncio.to_thread(_write_file, path, text)
        except OSError as e:
            logger.error("Failed to write %s: %s", doc.path, e)
            raise DocumentStoreError(str(e)) from e
