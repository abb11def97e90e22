"""Shared fixtures for the test suite."""
import json
import os
import sys
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Keep tests off the real database and API keys.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")

from models import ArticleContent  # noqa: E402
from storage import MemoryKeyValueStore  # noqa: E402

TURING_EXTRACT = (
    "Alan Mathison Turing was an English mathematician, computer scientist, logician, "
    "cryptanalyst, philosopher and theoretical biologist. He was highly influential in the "
    "development of theoretical computer science, providing a formalisation of the concepts "
    "of algorithm and computation with the Turing machine."
)

QUIZ_PAYLOAD = {
    "title": "Alan Turing",
    "summary": "Turing was a pioneer of computer science.",
    "key_entities": {
        "people": ["Alan Turing"],
        "organizations": ["Bletchley Park"],
        "locations": ["England"],
    },
    "sections": ["Early life", "Cryptanalysis"],
    "quiz": [
        {
            "question": "What machine formalised the concept of computation?",
            "options": ["Turing machine", "Enigma", "Colossus", "Bombe"],
            "answer": "Turing machine",
            "difficulty": "easy",
            "explanation": "The article credits the Turing machine.",
        }
    ],
    "related_topics": ["Enigma machine"],
}


def wiki_page(extract=TURING_EXTRACT, title="Alan Turing", shortdesc="English computer scientist (1912–1954)"):
    page = {"pageid": 1208, "ns": 0, "title": title, "extract": extract}
    if shortdesc is not None:
        page["pageprops"] = {"wikibase-shortdesc": shortdesc}
    return {"batchcomplete": "", "query": {"pages": {"1208": page}}}


def jsonp_get(payload, callback=None):
    """Build a requests.get stand-in that answers with a JSONP script."""

    def _get(url, params=None, headers=None, timeout=None):
        resp = MagicMock()
        name = callback or params["callback"]
        resp.text = f"/**/{name}({json.dumps(payload)})"
        return resp

    return _get


@pytest.fixture
def article():
    return ArticleContent(
        title="Alan Turing",
        extract=TURING_EXTRACT,
        description="English computer scientist (1912–1954)",
    )


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def quiz_payload():
    return json.loads(json.dumps(QUIZ_PAYLOAD))
