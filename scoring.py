from typing import Mapping

from models import QuizRecord, ScoredQuestion, ScoreResult


def score_quiz(record: QuizRecord, answers: Mapping[int, str]) -> ScoreResult:
    """Score selected options (keyed by question index) against a quiz."""
    results = [
        ScoredQuestion(
            index=i,
            selected=answers.get(i),
            answer=q.answer,
            correct=answers.get(i) == q.answer,
        )
        for i, q in enumerate(record.quiz)
    ]
    correct = sum(1 for r in results if r.correct)
    total = len(results)
    # Round half up.
    percentage = (correct * 200 + total) // (total * 2) if total else 0
    return ScoreResult(correct=correct, total=total, percentage=percentage, results=results)
