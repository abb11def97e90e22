import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from errors import PersistError
from models import ArticleContent, QuizDraft, QuizRecord
from storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

QUIZ_KEY_PREFIX = "quiz:"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def quiz_key(quiz_id: int) -> str:
    return f"{QUIZ_KEY_PREFIX}{quiz_id}"


def build_record(
    draft: QuizDraft,
    article: ArticleContent,
    source_url: str,
    now: Optional[datetime] = None,
) -> QuizRecord:
    """
    Stamp a parsed quiz with its id, source URL and generation time.

    The id is the creation time in epoch milliseconds, so two quizzes built in
    the same millisecond share an id.
    """
    now = now or datetime.now(timezone.utc)
    quiz_id = (now - EPOCH) // timedelta(milliseconds=1)

    return QuizRecord(
        id=quiz_id,
        url=source_url,
        timestamp=now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        **{**draft.model_dump(), "title": draft.title or article.title},
    )


async def assemble(
    draft: QuizDraft,
    article: ArticleContent,
    source_url: str,
    store: KeyValueStore,
) -> QuizRecord:
    record = build_record(draft, article, source_url)
    try:
        await store.set(quiz_key(record.id), record.model_dump_json())
    except StorageError as e:
        logger.error("Failed to save quiz %s: %s", record.id, e)
        raise PersistError(record=record) from e
    logger.info("Saved quiz %s (%d questions) for %s", record.id, len(record.quiz), source_url)
    return record
