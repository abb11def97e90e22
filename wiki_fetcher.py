import asyncio
import logging
from typing import Any, Optional
from urllib.parse import unquote

import requests

from errors import ArticleNotFound, ArticleTooShort, InvalidUrl, NetworkError, RequestTimeout
from jsonp import CallbackRegistry, Subscription
from models import ArticleContent

logger = logging.getLogger(__name__)

WIKIPEDIA_API_URL = "https://en.wikipedia.org/w/api.php"
ARTICLE_PATH_MARKER = "/wiki/"
WIKI_URL_MARKER = "wikipedia.org" + ARTICLE_PATH_MARKER
MIN_EXTRACT_LENGTH = 50

HEADERS = {
    "User-Agent": "AIWikiQuizGenerator/1.0 (python-requests)",
    "Accept": "application/javascript, application/json;q=0.9, */*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def title_from_url(url: str) -> str:
    """
    Pull the article title out of a Wikipedia URL.

    "https://en.wikipedia.org/wiki/Alan_Turing" -> "Alan_Turing"
    """
    url = (url or "").strip()
    if not url:
        raise InvalidUrl("Please enter a Wikipedia URL")
    if WIKI_URL_MARKER not in url:
        raise InvalidUrl()

    path = url.split(ARTICLE_PATH_MARKER, 1)[1]
    path = path.split("#", 1)[0].split("?", 1)[0]
    title = unquote(path)
    if not title.strip():
        raise InvalidUrl("Wikipedia URL does not name an article")
    return title


def _article_from_payload(payload: Any) -> ArticleContent:
    query = payload.get("query") if isinstance(payload, dict) else None
    pages = query.get("pages") if isinstance(query, dict) else None
    if not pages:
        raise ArticleNotFound("Article not found")

    page_id, page = next(iter(pages.items()))
    if page_id == "-1" or "missing" in page:
        raise ArticleNotFound()

    pageprops = page.get("pageprops") or {}
    article = ArticleContent(
        title=page.get("title") or "",
        extract=page.get("extract") or "",
        description=pageprops.get("wikibase-shortdesc") or "",
    )
    if len(article.extract) < MIN_EXTRACT_LENGTH:
        raise ArticleTooShort()
    return article


class WikipediaFetcher:
    """Fetches article intros from the MediaWiki API through a JSONP callback."""

    def __init__(
        self,
        api_url: str = WIKIPEDIA_API_URL,
        timeout: float = 10.0,
        callbacks: Optional[CallbackRegistry] = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.callbacks = callbacks if callbacks is not None else CallbackRegistry()

    async def fetch(self, url: str) -> ArticleContent:
        title = title_from_url(url)
        logger.info("Fetching Wikipedia article %s", title)

        with self.callbacks.subscribe() as subscription:
            try:
                payload = await asyncio.wait_for(
                    self._request(title, subscription), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                raise RequestTimeout() from None

        article = _article_from_payload(payload)
        logger.info("Fetched %r (%d chars)", article.title, len(article.extract))
        return article

    async def _request(self, title: str, subscription: Subscription) -> Any:
        script = await asyncio.to_thread(self._load_script, title, subscription.name)
        try:
            self.callbacks.dispatch(script)
        except ValueError as e:
            raise NetworkError() from e
        return await subscription.future

    def _load_script(self, title: str, callback: str) -> str:
        params = {
            "action": "query",
            "format": "json",
            "prop": "extracts|pageprops",
            "exintro": 1,
            "explaintext": 1,
            "titles": title,
            "callback": callback,
        }
        try:
            resp = requests.get(self.api_url, params=params, headers=HEADERS, timeout=self.timeout)
            resp.raise_for_status()
        except requests.Timeout as e:
            raise RequestTimeout() from e
        except requests.RequestException as e:
            logger.warning("Wikipedia request for %s failed: %s", title, e)
            raise NetworkError() from e
        return resp.text
