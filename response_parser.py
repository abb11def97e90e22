"""
Turn a model's free-text reply into a validated QuizDraft.

The model is asked for bare JSON but often wraps it in a markdown fence or adds
commentary around it, so parsing runs in stages:

    strip_code_fences -> extract_json_object -> json.loads -> validation/defaults
"""
import json
import logging
import re
from typing import Any, List, Optional

from pydantic import ValidationError

from errors import InvalidSchema, MalformedResponse
from models import ArticleContent, KeyEntities, QuizDraft, QuizQuestion

logger = logging.getLogger(__name__)

SUMMARY_FALLBACK_CHARS = 200

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def extract_json_object(text: str) -> str:
    """Slice `text` down to the span between the first '{' and the last '}'."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedResponse()
    return text[start : end + 1]


def _reconcile_answer(answer: str, options: List[str]) -> Optional[str]:
    if answer in options:
        return answer
    wanted = answer.strip().casefold()
    for option in options:
        if option.strip().casefold() == wanted:
            return option
    return None


def _clean_questions(items: List[Any]) -> List[QuizQuestion]:
    questions = []
    for i, item in enumerate(items):
        if isinstance(item, dict) and isinstance(item.get("difficulty"), str):
            item = {**item, "difficulty": item["difficulty"].strip().lower()}
        try:
            question = QuizQuestion.model_validate(item)
        except ValidationError as e:
            logger.warning("Dropping malformed question %d: %s", i, e.errors()[0].get("msg"))
            continue

        answer = _reconcile_answer(question.answer, question.options)
        if answer is None:
            logger.warning("Dropping question %d: answer %r is not one of its options", i, question.answer)
            continue
        questions.append(question.model_copy(update={"answer": answer}))
    return questions


def parse_quiz_response(raw: str, article: ArticleContent) -> QuizDraft:
    text = extract_json_object(strip_code_fences(raw))
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Parse error: %s", e)
        logger.debug("Unparseable content: %s", text)
        raise MalformedResponse() from e

    if not isinstance(data, dict) or not data.get("title") or not isinstance(data.get("quiz"), list):
        raise InvalidSchema()

    entities = data.get("key_entities")
    if not isinstance(entities, dict):
        entities = {}

    try:
        return QuizDraft(
            title=data["title"],
            summary=data.get("summary") or article.extract[:SUMMARY_FALLBACK_CHARS] + "...",
            key_entities=KeyEntities(
                people=entities.get("people") or [],
                organizations=entities.get("organizations") or [],
                locations=entities.get("locations") or [],
            ),
            sections=data.get("sections") or [],
            quiz=_clean_questions(data.get("quiz") or []),
            related_topics=data.get("related_topics") or [],
        )
    except ValidationError as e:
        raise InvalidSchema(f"Invalid quiz format received: {e.error_count()} invalid field(s)") from e
