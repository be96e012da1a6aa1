"""Loads a directory of markdown / text files as Documents (one per file)."""

from __future__ import annotations

import asyncio
from pathlib import Path

from observability.logger import get_logger
from schemas.documents import Document

log = get_logger(__name__)


def collect_documents(root: str | Path, patterns: tuple[str, ...] = ("*.md", "*.txt")) -> list[Document]:
    """Scan ``root`` recursively and collect every matching, non-empty file."""
    base = Path(root)
    if not base.is_dir():
        log.warning("loader.markdown.missing_dir", root=str(base))
        return []

    paths: set[Path] = set()
    for pattern in patterns:
        paths.update(base.rglob(pattern))

    docs: list[Document] = []
    for path in sorted(paths):
        if not path.is_file():
            continue
        content = path.read_text(encoding="utf-8").strip()
        if not content:
            log.warning("loader.markdown.empty_file", path=str(path))
            continue

        relative = path.relative_to(base)
        docs.append(
            Document(
                id=relative.with_suffix("").as_posix(),
                content=content,
                metadata={
                    "type": path.parent.name if path.parent != base else "document",
                    "source": str(path),
                    "filename": path.name,
                },
            )
        )

    return docs


class MarkdownDirectoryLoader:
    """Implements DocumentSource over a directory tree. No chunking is applied."""

    def __init__(self, root: str | Path, patterns: tuple[str, ...] = ("*.md", "*.txt")) -> None:
        self.root = Path(root)
        self.patterns = patterns

    async def load_and_chunk(self) -> list[Document]:
        docs = await asyncio.to_thread(collect_documents, self.root, self.patterns)
        log.info("loader.markdown.loaded", root=str(self.root), documents=len(docs))
        return docs
