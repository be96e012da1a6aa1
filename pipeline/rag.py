"""RAG pipeline: retrieves grounded context and hands it to the generator."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from typing import TYPE_CHECKING

from config.prompts.registry import prompt_template as load_prompt_template
from observability.logger import get_logger
from observability.tracer import QueryTracer
from pipeline.retriever import Retriever
from schemas.config import RetrieverConfig
from schemas.documents import Document
from schemas.generation import GenerationMetadata, RAGResponse

if TYPE_CHECKING:
    from protocols.data_source import DocumentSource
    from protocols.embeddings import EmbeddingProvider
    from protocols.llm import Generator
    from protocols.vector_store import VectorStore

log = get_logger(__name__)

NO_CONTEXT_ANSWER = (
    "I couldn't find any specific information related to your query "
    "in my current knowledge base."
)
NO_CONTEXT_REASON = "no_context"


class RAGPipeline:
    """Retrieval-Augmented Generation pipeline.

    Per query: embed -> search -> filter -> build prompt -> generate. When nothing
    survives the threshold filter the generator is never called and a fixed
    answer is returned instead.

    The pipeline owns its Retriever. Store, embedder and generator are shared
    references and may outlive it.
    """

    def __init__(
        self,
        vector_store: VectorStore,
        embedder: EmbeddingProvider,
        generator: Generator,
        *,
        data_loader: DocumentSource | None = None,
        retriever_top_k: int | None = None,
        retriever_similarity_threshold: float | None = None,
        prompt_template: Callable[[str, str], str] | None = None,
        prompt_version: str = "v1",
    ) -> None:
        self.vector_store = vector_store
        self.generator = generator
        self.data_loader = data_loader
        self.retriever = Retriever(
            store=vector_store,
            embedder=embedder,
            config=RetrieverConfig.build(
                top_k=retriever_top_k,
                similarity_threshold=retriever_similarity_threshold,
            ),
        )
        self.prompt_template = prompt_template or load_prompt_template("rag_answer", prompt_version)

        log.info(
            "rag.pipeline.init",
            generator=getattr(generator, "provider_name", type(generator).__name__),
            embedder=getattr(embedder, "name", type(embedder).__name__),
            has_data_loader=data_loader is not None,
        )

    async def ingest_data(self) -> int:
        """Load documents from the configured source and add them to the store."""
        if self.data_loader is None:
            log.warning("rag.ingest.skipped", reason="no data loader configured")
            return 0

        log.info("rag.ingest.start", source=type(self.data_loader).__name__)
        documents = await self.data_loader.load_and_chunk()
        count = await self.add_documents(documents)
        log.info("rag.ingest.done", documents=count)
        return count

    async def add_documents(self, documents: list[Document]) -> int:
        """Add pre-processed documents directly to the vector store."""
        if not documents:
            return 0
        await self.vector_store.add_documents(documents)
        log.info("rag.documents.added", count=len(documents))
        return len(documents)

    def build_prompt(self, documents: list[Document], query: str) -> str:
        context = self.retriever.format_context(documents)
        return self.prompt_template(context, query)

    async def query(self, query: str) -> RAGResponse:
        """Answer a query from the retrieved context."""
        tracer = QueryTracer(query)
        log.info("rag.query.start", run_id=tracer.run_id, query=query[:80])

        try:
            relevant = await self.retriever.retrieve(query, tracer)
        except Exception as e:
            log.error("rag.query.retrieve_failed", run_id=tracer.run_id, error=str(e))
            tracer.finish("failed")
            raise

        if not relevant:
            log.warning("rag.query.no_context", run_id=tracer.run_id, query=query[:80])
            return RAGResponse(
                text=NO_CONTEXT_ANSWER,
                source_documents=[],
                metadata=GenerationMetadata(finish_reason=NO_CONTEXT_REASON),
                trace=tracer.finish(NO_CONTEXT_REASON),
            )

        tracer.start_step("prompt_building")
        prompt = self.build_prompt(relevant, query)
        tracer.end_step("prompt_building")
        log.debug("rag.query.prompt", run_id=tracer.run_id, prompt_preview=prompt[:200])

        tracer.start_step("generating")
        try:
            result = await self.generator.generate(prompt)
        except Exception as e:
            log.error("rag.query.generate_failed", run_id=tracer.run_id, error=str(e))
            tracer.finish("failed")
            raise
        tracer.end_step("generating")

        return RAGResponse(
            text=result.text,
            source_documents=relevant,
            metadata=result.metadata,
            trace=tracer.finish("answered"),
        )

    async def query_stream(self, query: str) -> AsyncIterator[str]:
        """Answer a query as a stream of text chunks.

        Closing this iterator early also closes the generator's stream. The trace
        is always finished: ``streamed``, ``no_context``, ``failed`` or ``abandoned``.
        """
        tracer = QueryTracer(query)
        log.info("rag.stream.start", run_id=tracer.run_id, query=query[:80])

        try:
            relevant = await self.retriever.retrieve(query, tracer)
        except Exception as e:
            log.error("rag.stream.retrieve_failed", run_id=tracer.run_id, error=str(e))
            tracer.finish("failed")
            raise

        if not relevant:
            log.warning("rag.query.no_context", run_id=tracer.run_id, query=query[:80])
            tracer.finish(NO_CONTEXT_REASON)
            yield NO_CONTEXT_ANSWER
            return

        tracer.start_step("prompt_building")
        prompt = self.build_prompt(relevant, query)
        tracer.end_step("prompt_building")

        tracer.start_step("generating")
        stream = self.generator.generate_stream(prompt)
        # Stays "abandoned" when the consumer closes us mid-stream (GeneratorExit)
        outcome = "abandoned"
        try:
            async for chunk in stream:
                yield chunk
            outcome = "streamed"
        except Exception as e:
            log.error("rag.stream.generate_failed", run_id=tracer.run_id, error=str(e))
            outcome = "failed"
            raise
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
            tracer.end_step("generating")
            tracer.finish(outcome)
