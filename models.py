from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional

Difficulty = Literal["easy", "medium", "hard"]


class ArticleContent(BaseModel):
    title: str
    extract: str
    description: str = ""


class QuizQuestion(BaseModel):
    question: str
    options: List[str] = Field(min_length=2)
    answer: str
    difficulty: Difficulty
    explanation: str = ""


class KeyEntities(BaseModel):
    people: List[str] = []
    organizations: List[str] = []
    locations: List[str] = []


class QuizDraft(BaseModel):
    """Quiz content as parsed from the model's reply, before it gets an id."""
    title: str
    summary: str
    key_entities: KeyEntities = Field(default_factory=KeyEntities)
    sections: List[str] = []
    quiz: List[QuizQuestion] = []
    related_topics: List[str] = []


class QuizRecord(QuizDraft):
    id: int
    url: str
    summary: str = ""
    timestamp: str


class ScoredQuestion(BaseModel):
    index: int
    selected: Optional[str] = None
    answer: str
    correct: bool


class ScoreResult(BaseModel):
    correct: int
    total: int
    percentage: int
    results: List[ScoredQuestion] = []


class GenerateBody(BaseModel):
    url: str


class ScoreBody(BaseModel):
    answers: Dict[int, str] = {}
