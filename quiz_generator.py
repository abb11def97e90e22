"""
Quiz generation pipeline.

generate_quiz() walks one URL through fetch -> prompt -> completion -> parse ->
save, reporting each phase to an optional status callback. Any failure ends the
attempt with a single user-facing message; nothing is retried.
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from errors import ArticleTooShort, InvalidUrl, PersistError, QuizGenerationError, RequestTimeout
from history import load_history
from llm_client import CompletionClient
from models import ArticleContent, QuizDraft, QuizRecord
from prompt_builder import build_prompt
from quiz_assembler import assemble
from response_parser import parse_quiz_response
from storage import KeyValueStore
from wiki_fetcher import WikipediaFetcher, title_from_url

logger = logging.getLogger(__name__)

GENERATION_TIMEOUT = 15.0


class Phase(str, Enum):
    IDLE = "idle"
    FETCHING_ARTICLE = "fetching_article"
    BUILDING_PROMPT = "building_prompt"
    AWAITING_COMPLETION = "awaiting_completion"
    PARSING_RESPONSE = "parsing_response"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


PHASE_ORDER = [
    Phase.IDLE,
    Phase.FETCHING_ARTICLE,
    Phase.BUILDING_PROMPT,
    Phase.AWAITING_COMPLETION,
    Phase.PARSING_RESPONSE,
    Phase.PERSISTING,
    Phase.DONE,
]

STATUS_MESSAGES = {
    Phase.FETCHING_ARTICLE: "Fetching Wikipedia article...",
    Phase.BUILDING_PROMPT: "Preparing prompt...",
    Phase.AWAITING_COMPLETION: "Generating quiz questions...",
    Phase.PARSING_RESPONSE: "Reading quiz...",
    Phase.PERSISTING: "Saving quiz...",
    Phase.DONE: "Complete!",
}

StatusCallback = Callable[[Phase, str], None]


@dataclass
class GenerationOutcome:
    url: str
    phase: Phase
    record: Optional[QuizRecord] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.phase is Phase.DONE


class _Run:
    """Phase bookkeeping for a single generate_quiz() call."""

    def __init__(self, url: str, on_status: Optional[StatusCallback]):
        self.url = url
        self.phase = Phase.IDLE
        self.on_status = on_status

    def advance(self, phase: Phase) -> None:
        if PHASE_ORDER.index(phase) != PHASE_ORDER.index(self.phase) + 1:
            raise RuntimeError(f"Illegal transition {self.phase.value} -> {phase.value}")
        self.phase = phase
        self._notify(STATUS_MESSAGES[phase])

    def fail(self, exc: QuizGenerationError, record: Optional[QuizRecord] = None) -> GenerationOutcome:
        failed_in = self.phase
        message = str(exc)
        if failed_in is Phase.FETCHING_ARTICLE and not isinstance(exc, (InvalidUrl, ArticleTooShort)):
            message = (
                f"Wikipedia fetch failed: {message.rstrip('.')}. "
                "Try using the mobile link or check your internet connection."
            )
        logger.warning("Quiz generation for %s failed during %s: %s", self.url, failed_in.value, exc)
        self.phase = Phase.FAILED
        self._notify(message)
        return GenerationOutcome(
            url=self.url, phase=Phase.FAILED, record=record, error=message, error_kind=exc.kind
        )

    def _notify(self, message: str) -> None:
        if self.on_status is not None:
            self.on_status(self.phase, message)


class QuizGenerationOrchestrator:
    def __init__(
        self,
        fetcher: WikipediaFetcher,
        completion_client: CompletionClient,
        store: KeyValueStore,
        timeout: float = GENERATION_TIMEOUT,
    ):
        self.fetcher = fetcher
        self.completion_client = completion_client
        self.store = store
        self.timeout = timeout

    async def generate_quiz(self, url: str, on_status: Optional[StatusCallback] = None) -> GenerationOutcome:
        url = (url or "").strip()
        run = _Run(url, on_status)
        try:
            title_from_url(url)
        except InvalidUrl as exc:
            return run.fail(exc)

        try:
            article, draft = await asyncio.wait_for(self._pipeline(run), timeout=self.timeout)
        except asyncio.TimeoutError:
            return run.fail(RequestTimeout())
        except QuizGenerationError as exc:
            return run.fail(exc)
        except Exception:
            logger.exception("Unexpected error generating quiz for %s", url)
            return run.fail(QuizGenerationError())

        run.advance(Phase.PERSISTING)
        try:
            record = await assemble(draft, article, url, self.store)
        except PersistError as exc:
            return run.fail(exc, record=exc.record)

        run.advance(Phase.DONE)
        return GenerationOutcome(url=url, phase=Phase.DONE, record=record)

    async def _pipeline(self, run: _Run) -> Tuple[ArticleContent, QuizDraft]:
        run.advance(Phase.FETCHING_ARTICLE)
        article = await self.fetcher.fetch(run.url)

        run.advance(Phase.BUILDING_PROMPT)
        prompt = build_prompt(article)

        run.advance(Phase.AWAITING_COMPLETION)
        raw = await self.completion_client.complete(prompt)

        run.advance(Phase.PARSING_RESPONSE)
        draft = parse_quiz_response(raw, article)
        logger.info("Parsed %d questions for %r", len(draft.quiz), draft.title)
        return article, draft

    async def load_history(self) -> List[QuizRecord]:
        return await load_history(self.store)
