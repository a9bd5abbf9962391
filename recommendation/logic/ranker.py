"""
Ranker

Orders recommendations for display and picks the top pathway.
Ties keep catalog order: the first pathway listed wins. The tie-break is
arbitrary but deterministic.
"""

from typing import List, Optional, Sequence, TypeVar

from .contracts import PathwayRecommendation

T = TypeVar("T")


def select_top(recommendations: Sequence[T]) -> Optional[T]:
    """
    Return the recommendation with the strictly greatest final_score.

    Args:
        recommendations: Rows in catalog order

    Returns:
        Top row, or None for an empty list
    """
    top = None
    for rec in recommendations:
        if top is None or rec.final_score > top.final_score:
            top = rec
    return top


def rank_recommendations(
    recommendations: List[PathwayRecommendation]
) -> List[PathwayRecommendation]:
    """
    Rank by final score (descending), assigning 1-based ranks.

    sorted() is stable, so equal scores stay in catalog order.
    """
    ranked = sorted(recommendations, key=lambda x: x.final_score, reverse=True)
    return [
        rec.model_copy(update={"rank": position})
        for position, rec in enumerate(ranked, 1)
    ]
