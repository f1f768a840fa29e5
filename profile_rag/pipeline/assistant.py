import asyncio

from profile_rag.config import Settings, get_settings
from profile_rag.exceptions import IndexInitializationError, InputValidationError
from profile_rag.ingestion.chunker import IdFactory, flatten
from profile_rag.ingestion.loader import load_knowledge_base
from profile_rag.logger import get_logger
from profile_rag.models import (
    ArticleRequest,
    AssistantResponse,
    JsonValue,
    SearchOutcome,
    SynthesisResult,
)
from profile_rag.pipeline.generator import Synthesizer
from profile_rag.pipeline.prompts import build_topic_prompt
from profile_rag.pipeline.providers import build_generation_provider
from profile_rag.storage.factory import build_index_provider
from profile_rag.storage.index import IndexAdapter

log = get_logger()


class ProfileAssistant:
    """
    Request-level orchestrator:
    - seeds the index from the knowledge base, once per process
    - validates the question / article fields
    - retrieves, then hands the ranked chunks to the synthesizer
    """

    def __init__(
        self,
        index: IndexAdapter,
        synthesizer: Synthesizer,
        knowledge_base: JsonValue,
        settings: Settings | None = None,
        id_factory: IdFactory | None = None,
    ):
        self.index = index
        self.synthesizer = synthesizer
        self.knowledge_base = knowledge_base
        self.settings = settings or get_settings()
        self.id_factory = id_factory

        self._init_task: asyncio.Task | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ProfileAssistant":
        settings = settings or get_settings()
        log.debug(
            "Building ProfileAssistant with settings: %s",
            settings.model_dump(exclude={"groq_api_key", "upstash_token"}),
        )

        knowledge_base = load_knowledge_base(settings.knowledge_base_path)
        index = IndexAdapter(build_index_provider(settings))
        synthesizer = Synthesizer(build_generation_provider(settings), settings)
        return cls(index, synthesizer, knowledge_base, settings=settings)

    # ---------------------------------------------------------------------------------
    # INDEX SEEDING
    # ---------------------------------------------------------------------------------

    async def _seed_index(self) -> int:
        chunks = flatten(self.knowledge_base, id_factory=self.id_factory)
        log.info("Knowledge base flattened into %d chunks", len(chunks))
        count = await self.index.ingest(chunks)
        log.info("Index seeded with %d records", count)
        return count

    async def ensure_index(self) -> int:
        """
        Single-flight seeding: every caller awaits the same task, so the
        knowledge base is upserted at most once. A failed attempt is dropped
        so the next request tries again.
        """
        if self._init_task is None:
            self._init_task = asyncio.create_task(self._seed_index())
        task = self._init_task

        try:
            # shield: one cancelled request must not cancel seeding for everyone
            return await asyncio.shield(task)
        except Exception as exc:
            if self._init_task is task:
                self._init_task = None
            log.error("Index initialization failed: %s", exc)
            raise IndexInitializationError("Index initialization failed", details={"error": str(exc)}) from exc

    @property
    def initialized(self) -> bool:
        task = self._init_task
        return task is not None and task.done() and not task.cancelled() and task.exception() is None

    # ---------------------------------------------------------------------------------
    # REQUESTS
    # ---------------------------------------------------------------------------------

    def _limit(self, limit: int | None) -> int:
        return self.settings.default_top_k if limit is None else limit

    @staticmethod
    def _respond(question: str, result: SynthesisResult, outcome: SearchOutcome) -> AssistantResponse:
        return AssistantResponse(
            question=question,
            answer=result.answer,
            confidence=result.confidence,
            evidence=result.evidence,
            matches=outcome.hits,
            degraded=outcome.degraded,
        )

    async def ask(self, question: str, limit: int | None = None) -> AssistantResponse:
        question = (question or "").strip()
        if not question:
            raise InputValidationError("Question must not be empty.", field="question")

        await self.ensure_index()

        outcome = await self.index.search(question, self._limit(limit))
        if outcome.degraded:
            log.warning("Retrieval degraded for %r: %s", question, outcome.reason)

        result = await self.synthesizer.answer_question(question, outcome.hits)
        log.info(
            "ask() question=%r matches=%d confidence=%s",
            question,
            len(outcome.hits),
            result.confidence.value,
        )
        return self._respond(question, result, outcome)

    async def write_article(self, request: ArticleRequest, limit: int | None = None) -> AssistantResponse:
        if request.is_blank():
            raise InputValidationError("At least one field is required.", field="article")

        topic = build_topic_prompt(request)

        await self.ensure_index()

        outcome = await self.index.search(topic, self._limit(limit))
        if outcome.degraded:
            log.warning("Retrieval degraded for article topic: %s", outcome.reason)

        result = await self.synthesizer.generate_article(topic, outcome.hits)
        log.info(
            "write_article() matches=%d confidence=%s article_chars=%d",
            len(outcome.hits),
            result.confidence.value,
            len(result.answer),
        )
        return self._respond(topic, result, outcome)

    async def close(self):
        log.debug("ProfileAssistant.close() called.")
        await self.index.provider.close()
        await self.synthesizer.provider.close()
