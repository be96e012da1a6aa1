"""Demo entry point: ingest a small corpus and stream a grounded answer."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from config.settings import get_settings
from observability.logger import setup_logging
from pipeline.factory import build_pipeline
from pipeline.rag import RAGPipeline
from providers.local_embeddings import LocalEmbeddings
from providers.markdown_loader import MarkdownDirectoryLoader
from schemas.documents import Document

console = Console()

SAMPLE_DOCUMENTS: list[Document] = [
    Document(
        id="f1/regulations-2022",
        content=(
            "Formula 1 rules changed significantly in 2022, reintroducing ground effect "
            "aerodynamics to make close racing easier."
        ),
        metadata={"type": "regulations"},
    ),
    Document(
        id="f1/champion-2023",
        content=(
            "Max Verstappen, driving for Red Bull Racing, won the Formula 1 drivers' "
            "championship in 2023 with a record 19 race wins."
        ),
        metadata={"type": "results"},
    ),
    Document(
        id="f1/cost-cap",
        content=(
            "The Formula 1 budget cap limits how much each team may spend per season "
            "on car performance."
        ),
        metadata={"type": "regulations"},
    ),
]

# Bag-of-words hashing scores far below hosted embedding models
_OFFLINE_THRESHOLD = 0.2


def build_sources_table(pipeline_docs: list[Document]) -> Table:
    table = Table(title="Sources", show_lines=True)
    table.add_column("#", style="dim", width=3)
    table.add_column("Document", style="cyan")
    table.add_column("Similarity", justify="right")
    table.add_column("Preview", max_width=60)

    for i, doc in enumerate(pipeline_docs, 1):
        score = f"{doc.similarity:.3f}" if doc.similarity is not None else "-"
        table.add_row(str(i), doc.id, score, doc.content[:80])
    return table


async def run_demo(question: str) -> None:
    settings = get_settings()
    setup_logging(level=settings.log_level, fmt="console")

    data_dir = Path(settings.rag_data_dir)
    loader = MarkdownDirectoryLoader(data_dir) if data_dir.is_dir() else None

    if settings.is_offline:
        settings = settings.model_copy(update={
            "llm_provider": "dummy",
            "embedding_provider": "local",
            "retriever_similarity_threshold": _OFFLINE_THRESHOLD,
        })
        console.print("[yellow]No API keys configured, running offline (DummyLLM + local embeddings).[/yellow]")
    elif settings.embedding_provider == "openai" and not settings.openai_api_key:
        settings = settings.model_copy(update={
            "embedding_provider": "local",
            "retriever_similarity_threshold": _OFFLINE_THRESHOLD,
        })
        console.print("[yellow]No OpenAI key for embeddings, using local hashing embeddings.[/yellow]")

    pipeline: RAGPipeline = build_pipeline(settings, data_loader=loader)

    if loader is not None:
        count = await pipeline.ingest_data()
        console.print(f"Indexed {count} documents from {data_dir}")
    else:
        count = await pipeline.add_documents([doc.model_copy(deep=True) for doc in SAMPLE_DOCUMENTS])
        console.print(f"Indexed {count} sample documents")

    console.print(Panel(question, title="Question", border_style="cyan"))

    console.print("[bold]Answer:[/bold] ", end="")
    async for chunk in pipeline.query_stream(question):
        console.print(chunk, end="", highlight=False)
    console.print("\n")

    sources = await pipeline.retriever.retrieve(question)
    if sources:
        console.print(build_sources_table(sources))
    else:
        console.print("[dim]No document passed the similarity threshold.[/dim]")

    if isinstance(pipeline.retriever.embedder, LocalEmbeddings):
        console.print("[dim]Scores come from hashed bag-of-words vectors.[/dim]")


def main() -> None:
    question = " ".join(sys.argv[1:]) or "Who won the Formula 1 championship in 2023?"
    try:
        asyncio.run(run_demo(question))
    except KeyboardInterrupt:
        console.print("\n[yellow]Demo interrupted.[/yellow]")
        sys.exit(0)


if __name__ == "__main__":
    main()
