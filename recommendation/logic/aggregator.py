"""
Score Aggregator

Runs both dimension scorers across the whole pathway catalog.
The academic and interest passes are independent of each other.
"""

from typing import Dict, List

from .adapter import pathway_key
from .constants import InterestWeightKeying
from .contracts import (
    InterestQuestionRecord,
    InterestResponseRecord,
    PathwayRecord,
    PathwayScore,
    PathwayWeightRecord,
    ResultRecord,
    StudentSnapshot,
)
from .dimension_scorers import score_academic, score_interest


def aggregate_academic_scores(
    results: List[ResultRecord],
    weights: List[PathwayWeightRecord],
    pathways: List[PathwayRecord],
) -> Dict[str, float]:
    """
    Compute one academic score per pathway.

    Returns:
        Dict mapping pathway_id to academic score
    """
    scores_by_subject: Dict[str, float] = {}
    for result in results:
        # first row wins if a subject was somehow stored twice
        scores_by_subject.setdefault(result.subject_id, result.score)

    return {
        pathway.id: score_academic(pathway.id, scores_by_subject, weights)
        for pathway in pathways
    }


def aggregate_interest_scores(
    responses: List[InterestResponseRecord],
    questions: List[InterestQuestionRecord],
    pathways: List[PathwayRecord],
    keying: InterestWeightKeying = InterestWeightKeying.NAME,
) -> Dict[str, float]:
    """
    Compute one interest score per pathway.

    Returns:
        Dict mapping pathway_id to interest score
    """
    questions_by_id: Dict[str, InterestQuestionRecord] = {}
    for question in questions:
        questions_by_id.setdefault(question.id, question)

    return {
        pathway.id: score_interest(pathway_key(pathway, keying), responses, questions_by_id)
        for pathway in pathways
    }


def aggregate_scores(
    snapshot: StudentSnapshot,
    keying: InterestWeightKeying = InterestWeightKeying.NAME,
) -> List[PathwayScore]:
    """
    Score every catalog pathway for one student.

    Args:
        snapshot: Student records plus catalog
        keying: How question weights refer to pathways

    Returns:
        List of PathwayScore in catalog order
    """
    academic = aggregate_academic_scores(snapshot.results, snapshot.weights, snapshot.pathways)
    interest = aggregate_interest_scores(
        snapshot.responses, snapshot.questions, snapshot.pathways, keying
    )

    return [
        PathwayScore(
            pathway_id=pathway.id,
            academic_score=academic[pathway.id],
            interest_score=interest[pathway.id],
        )
        for pathway in snapshot.pathways
    ]
