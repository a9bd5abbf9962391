"""
Dimension Scorers

Scoring functions for the two dimensions of a pathway recommendation.
Each scorer produces an unrounded score between 0 and 100 for one pathway.
All logic is deterministic and side-effect free; scorers never raise.
"""

from typing import Dict, List

from .constants import MAX_ANSWER_VALUE, MIN_SCORE, MAX_SCORE
from .contracts import (
    InterestQuestionRecord,
    InterestResponseRecord,
    PathwayWeightRecord,
)


def _clamp(value: float) -> float:
    return max(MIN_SCORE, min(MAX_SCORE, value))


def score_academic(
    pathway_id: str,
    scores_by_subject: Dict[str, float],
    weights: List[PathwayWeightRecord],
) -> float:
    """
    Weighted average of the student's subject scores for one pathway.

    Subjects the student has no result for, and subjects weighted 0, are
    left out of both numerator and denominator; they do not count as a 0
    score. A pathway with nothing to average scores 0.

    Args:
        pathway_id: Pathway being scored
        scores_by_subject: subject_id -> score (0-100)
        weights: Full pathway weight table

    Returns:
        Academic score (0-100)
    """
    weighted_total = 0.0
    total_weight = 0.0

    for weight in weights:
        if weight.pathway_id != pathway_id:
            continue
        score = scores_by_subject.get(weight.subject_id)
        if score is None:
            continue
        weighted_total += score * weight.weight_value
        total_weight += weight.weight_value

    if total_weight <= 0:
        return 0.0
    return _clamp(weighted_total / total_weight)


def score_interest(
    key: str,
    responses: List[InterestResponseRecord],
    questions_by_id: Dict[str, InterestQuestionRecord],
) -> float:
    """
    Normalised weighted questionnaire score for one pathway.

    Each answer is weighted by its question's weight for `key` (0 when the
    question does not mention the pathway) and measured against the best
    possible answer, so a student answering the maximum on every weighted
    question scores 100.

    Args:
        key: Pathway key used in question weight mappings (name by default)
        responses: Student's questionnaire answers
        questions_by_id: question_id -> question

    Returns:
        Interest score (0-100)
    """
    answered_total = 0.0
    max_total = 0.0

    for response in responses:
        question = questions_by_id.get(response.question_id)
        if question is None:
            continue
        weight = question.pathway_weights.get(key, 0.0)
        answered_total += response.answer_value * weight
        max_total += MAX_ANSWER_VALUE * weight

    if max_total <= 0:
        return 0.0
    return _clamp((answered_total / max_total) * 100)
