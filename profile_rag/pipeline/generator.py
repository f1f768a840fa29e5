from typing import List

from profile_rag.config import Settings, get_settings
from profile_rag.logger import get_logger
from profile_rag.models import Confidence, RetrievedChunk, SynthesisResult
from profile_rag.pipeline import prompts
from profile_rag.pipeline.providers import ChatMessage, GenerationProvider
from profile_rag.retrieval.confidence import classify, evidence_paths

log = get_logger()


class Synthesizer:
    """
    Turns ranked chunks into a grounded answer or a narrative article.

    Both modes share the confidence policy and the top-3 evidence; they differ
    in prompt, sampling temperature, output length, and in what happens when
    nothing was retrieved (answers refuse up front, articles still get written).
    """

    def __init__(
        self,
        provider: GenerationProvider,
        settings: Settings | None = None,
        model: str | None = None,
    ):
        self.provider = provider
        self.settings = settings or get_settings()
        self.model = model or provider.model

    async def _generate(
        self,
        messages: List[ChatMessage],
        temperature: float,
        max_tokens: int,
        confidence: Confidence,
        evidence: List[str],
        empty_text: str,
        error_text: str,
    ) -> SynthesisResult:
        try:
            text = await self.provider.complete(
                messages=messages,
                model=self.model,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as exc:
            # evidence survives so the caller can still show what was found
            log.error("Generation provider error (%s): %s", self.model, exc)
            return SynthesisResult(answer=error_text, confidence=Confidence.LOW, evidence=evidence)

        if not text or not text.strip():
            log.warning("Generation provider returned no content (%s)", self.model)
            text = empty_text

        return SynthesisResult(answer=text, confidence=confidence, evidence=evidence)

    async def answer_question(self, question: str, ranked: List[RetrievedChunk]) -> SynthesisResult:
        if not ranked:
            log.info("No retrieved chunks for %r; skipping the model call.", question)
            return SynthesisResult(answer=prompts.NO_MATCH_ANSWER, confidence=Confidence.LOW, evidence=[])

        confidence, top = classify(ranked)
        evidence = evidence_paths(top)
        context = prompts.build_context_block(top)

        messages = [
            {"role": "system", "content": prompts.ANSWER_SYSTEM_PROMPT},
            {"role": "user", "content": prompts.answer_user_message(question, context)},
        ]
        log.debug("answer_question: confidence=%s evidence=%s", confidence.value, evidence)

        return await self._generate(
            messages,
            temperature=self.settings.answer_temperature,
            max_tokens=self.settings.answer_max_tokens,
            confidence=confidence,
            evidence=evidence,
            empty_text=prompts.EMPTY_ANSWER,
            error_text=prompts.ANSWER_ERROR,
        )

    async def generate_article(self, topic: str, ranked: List[RetrievedChunk]) -> SynthesisResult:
        confidence, top = classify(ranked)
        evidence = evidence_paths(top)

        if top:
            context = prompts.build_context_block(top)
            system_prompt = prompts.ARTICLE_SYSTEM_PROMPT + prompts.ARTICLE_CONTEXT_RULE
        else:
            context = prompts.NO_CONTEXT
            system_prompt = prompts.ARTICLE_SYSTEM_PROMPT

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompts.article_user_message(topic, context)},
        ]
        log.debug("generate_article: confidence=%s evidence=%s", confidence.value, evidence)

        return await self._generate(
            messages,
            temperature=self.settings.article_temperature,
            max_tokens=self.settings.article_max_tokens,
            confidence=confidence,
            evidence=evidence,
            empty_text=prompts.EMPTY_ARTICLE,
            error_text=prompts.ARTICLE_ERROR,
        )
