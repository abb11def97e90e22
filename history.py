"""
Quiz history, read back from the key-value store.
Handles listing saved quizzes, looking one up by id, and simple statistics.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from pydantic import ValidationError

from models import QuizRecord
from quiz_assembler import QUIZ_KEY_PREFIX, quiz_key
from storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


async def load_history(store: KeyValueStore) -> List[QuizRecord]:
    """
    Load every saved quiz, newest first.

    An entry that cannot be read or parsed is logged and skipped; the rest of
    the history is still returned.
    """
    records = []
    for key in await store.list(QUIZ_KEY_PREFIX):
        try:
            value = await store.get(key)
            if value:
                records.append(QuizRecord.model_validate_json(value))
        except (StorageError, ValidationError) as e:
            logger.warning("Error loading quiz %s: %s", key, e)
    return sorted(records, key=lambda r: r.id, reverse=True)


async def get_quiz(store: KeyValueStore, quiz_id: int) -> Optional[QuizRecord]:
    """
    Look up a saved quiz.

    Args:
        store: Key-value store holding the history
        quiz_id: Quiz id (creation time in epoch milliseconds)

    Returns:
        The quiz if found and readable, None otherwise
    """
    value = await store.get(quiz_key(quiz_id))
    if not value:
        return None
    try:
        return QuizRecord.model_validate_json(value)
    except ValidationError as e:
        logger.warning("Error loading quiz %s: %s", quiz_id, e)
        return None


def history_stats(records: List[QuizRecord], now: Optional[datetime] = None) -> dict:
    """
    Get history statistics.

    Args:
        records: Quizzes as returned by load_history
        now: Reference time, defaults to the current UTC time

    Returns:
        Dictionary with the total count and the count from the last 7 days
    """
    now = now or datetime.now(timezone.utc)
    cutoff_ms = int((now - timedelta(days=7)).timestamp() * 1000)
    return {
        "total": len(records),
        "recent_week": sum(1 for r in records if r.id >= cutoff_ms),
    }
