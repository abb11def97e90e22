import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from database import init_db
from errors import InvalidUrl, QuizGenerationError
from history import get_quiz, history_stats, load_history
from llm_client import CompletionClient, get_completion_client
from models import GenerateBody, ScoreBody
from quiz_generator import QuizGenerationOrchestrator
from scoring import score_quiz
from storage import KeyValueStore, get_store
from wiki_fetcher import WikipediaFetcher

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="AI Wiki Quiz Generator API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_STATUS = {
    "InvalidUrl": 400,
    "Timeout": 504,
    "ProviderError": 502,
    "EmptyResponse": 502,
    "MalformedResponse": 502,
    "InvalidSchema": 502,
    "GenerationError": 500,
}


@lru_cache(maxsize=1)
def get_kv_store() -> KeyValueStore:
    return get_store(settings.storage_backend)


@lru_cache(maxsize=1)
def get_fetcher() -> WikipediaFetcher:
    return WikipediaFetcher(settings.wikipedia_api_url, timeout=settings.wikipedia_timeout)


@lru_cache(maxsize=1)
def _completion_client() -> CompletionClient:
    return get_completion_client(settings)


def get_orchestrator(
    store: KeyValueStore = Depends(get_kv_store),
    fetcher: WikipediaFetcher = Depends(get_fetcher),
) -> QuizGenerationOrchestrator:
    try:
        client = _completion_client()
    except RuntimeError as e:
        logger.error("Completion client unavailable: %s", e)
        raise HTTPException(status_code=503, detail=str(e))
    return QuizGenerationOrchestrator(fetcher, client, store, timeout=settings.quiz_generation_timeout)


@app.on_event("startup")
def on_startup():
    if settings.storage_backend == "sql":
        init_db()


@app.get("/")
def root():
    """API root endpoint with basic information."""
    return {
        "name": "AI Wiki Quiz Generator API",
        "version": "1.0.0",
        "endpoints": ["/generate_quiz", "/history", "/history/stats", "/quiz/{id}", "/quiz/{id}/score", "/preview"]
    }


@app.post("/preview")
async def preview_url(body: GenerateBody, fetcher: WikipediaFetcher = Depends(get_fetcher)):
    """
    Preview a Wikipedia URL by fetching just the title and short description.
    Useful for URL validation before generating quiz.
    """
    url = body.url.strip()
    try:
        article = await fetcher.fetch(url)
    except InvalidUrl as e:
        raise HTTPException(status_code=400, detail=str(e))
    except QuizGenerationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {
        "url": url,
        "title": article.title,
        "description": article.description,
        "valid": True
    }


@app.post("/generate_quiz")
async def generate_quiz_endpoint(
    body: GenerateBody,
    orchestrator: QuizGenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Generate a quiz from a Wikipedia URL and save it to history.
    If the quiz was generated but could not be saved, it is still returned with saved=false.
    """
    outcome = await orchestrator.generate_quiz(body.url)
    if outcome.record is None:
        raise HTTPException(status_code=ERROR_STATUS.get(outcome.error_kind, 422), detail=outcome.error)

    result = outcome.record.model_dump()
    result["saved"] = outcome.ok
    if not outcome.ok:
        result["error"] = outcome.error
    return result


@app.get("/history")
async def history(store: KeyValueStore = Depends(get_kv_store)):
    """Get list of all generated quizzes, newest first."""
    records = await load_history(store)
    return [
        {
            "id": r.id,
            "url": r.url,
            "title": r.title,
            "timestamp": r.timestamp,
            "question_count": len(r.quiz),
        }
        for r in records
    ]


@app.get("/history/stats")
async def stats(store: KeyValueStore = Depends(get_kv_store)):
    """Get history statistics."""
    return history_stats(await load_history(store))


@app.get("/quiz/{quiz_id}")
async def quiz_detail(quiz_id: int, store: KeyValueStore = Depends(get_kv_store)):
    """Get full quiz details by ID."""
    record = await get_quiz(store, quiz_id)
    if not record:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return record.model_dump()


@app.post("/quiz/{quiz_id}/score")
async def score(quiz_id: int, body: ScoreBody, store: KeyValueStore = Depends(get_kv_store)):
    """Score a set of selected answers (question index -> option) against a saved quiz."""
    record = await get_quiz(store, quiz_id)
    if not record:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return score_quiz(record, body.answers).model_dump()
