"""
Errors raised while generating a quiz.

Every failure of a generation attempt is a QuizGenerationError; the `kind`
attribute names the failure for API responses and logs.
"""
from typing import Optional


class QuizGenerationError(Exception):
    kind = "GenerationError"
    default_message = "Quiz generation failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidUrl(QuizGenerationError):
    kind = "InvalidUrl"
    default_message = "Please enter a valid Wikipedia URL (e.g., https://en.wikipedia.org/wiki/Article_Name)"


class ArticleNotFound(QuizGenerationError):
    kind = "ArticleNotFound"
    default_message = "Article not found. Please check the URL."


class ArticleTooShort(ArticleNotFound):
    default_message = "Article content is too short or empty. Please try a different article."


class NetworkError(QuizGenerationError):
    kind = "NetworkError"
    default_message = "Failed to load Wikipedia data. Network error or blocked request."


class RequestTimeout(QuizGenerationError):
    kind = "Timeout"
    default_message = "Request timed out. Please try again."


class ProviderError(QuizGenerationError):
    kind = "ProviderError"
    default_message = "API error occurred"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResponse(QuizGenerationError):
    kind = "EmptyResponse"
    default_message = "No content received from API"


class MalformedResponse(QuizGenerationError):
    kind = "MalformedResponse"
    default_message = "Failed to parse quiz data. Please try again."


class InvalidSchema(QuizGenerationError):
    kind = "InvalidSchema"
    default_message = "Invalid quiz format received"


class PersistError(QuizGenerationError):
    kind = "PersistError"
    default_message = "Quiz was generated but could not be saved to history."

    def __init__(self, message: Optional[str] = None, record=None):
        super().__init__(message)
        self.record = record
