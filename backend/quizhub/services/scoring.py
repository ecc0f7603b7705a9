"""
Scoring of submitted quiz answers.

Pure functions only: no database access, no clock. A question is answered
correctly when the set of selected options is exactly the set of correct
options. There is no partial credit, and answers to questions the quiz does
not contain score zero instead of being rejected.
"""
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union
from pydantic import BaseModel


AnswerLike = Union[Mapping[str, Any], BaseModel]


def _as_dict(answer: AnswerLike) -> Dict[str, Any]:
    if isinstance(answer, BaseModel):
        return answer.model_dump()
    return dict(answer)


def is_correct_selection(selected_option_ids: Iterable[str], correct_option_ids: Iterable[str]) -> bool:
    return set(selected_option_ids) == set(correct_option_ids)


def evaluate(
    quiz: Mapping[str, Any],
    submitted_answers: Iterable[AnswerLike],
) -> Tuple[List[Dict[str, Any]], int]:
    """Evaluate ``submitted_answers`` against ``quiz``.

    Returns the evaluated answers, in submission order, and the total score.
    Each evaluated answer has ``questionId``, ``selectedOptionIds``,
    ``isCorrect`` and ``scoreAwarded``.
    """
    questions = {q["questionId"]: q for q in quiz.get("questions", [])}

    evaluated = []
    total_score = 0
    for raw in submitted_answers:
        answer = _as_dict(raw)
        selected = list(answer.get("selectedOptionIds") or [])
        question = questions.get(answer.get("questionId"))

        if question is None:
            is_correct = False
            score_awarded = 0
        else:
            is_correct = is_correct_selection(selected, question.get("correctOptionIds") or [])
            score_awarded = question["score"] if is_correct else 0

        total_score += score_awarded
        evaluated.append({
            "questionId": answer.get("questionId"),
            "selectedOptionIds": selected,
            "isCorrect": is_correct,
            "scoreAwarded": score_awarded,
        })

    return evaluated, total_score
