"""
Output Assembler

Blends per-pathway dimension scores into the persisted RecommendationRow
contract and builds the final RecommendationOutput.
"""

import math
import uuid
from typing import List, Optional

from .constants import (
    ACADEMIC_WEIGHT,
    INTEREST_WEIGHT,
    CONFIDENCE_SCALE,
    MIN_CONFIDENCE,
    MAX_CONFIDENCE,
    MIN_SCORE,
    MAX_SCORE,
    SCORE_DECIMALS,
    EXPLANATION_TEMPLATE,
    ENGINE_VERSION,
)
from .contracts import PathwayScore, RecommendationRow, RecommendationOutput


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round halves away from zero for non-negative values (2.5 -> 3).

    Python's round() uses banker's rounding; stored scores use half-up so a
    recomputation always reproduces the same figures users already saw.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def blend_final_score(academic_score: float, interest_score: float) -> float:
    final = academic_score * ACADEMIC_WEIGHT + interest_score * INTEREST_WEIGHT
    return max(MIN_SCORE, min(MAX_SCORE, final))


def calculate_confidence(final_score: float) -> int:
    """Optimistic linear scaling of the final score, capped at 100."""
    confidence = int(round_half_up(final_score * CONFIDENCE_SCALE))
    return max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, confidence))


def build_explanation(academic_score: float, interest_score: float) -> str:
    return EXPLANATION_TEMPLATE.format(
        academic=int(round_half_up(academic_score)),
        interest=int(round_half_up(interest_score)),
    )


def assemble_row(student_id: str, scored: PathwayScore) -> RecommendationRow:
    """
    Convert one PathwayScore into a RecommendationRow.

    Blending and confidence use the unrounded dimension scores; rounding is
    applied only to the stored figures.
    """
    final_score = blend_final_score(scored.academic_score, scored.interest_score)

    return RecommendationRow(
        student_id=student_id,
        pathway_id=scored.pathway_id,
        academic_score=round_half_up(scored.academic_score, SCORE_DECIMALS),
        interest_score=round_half_up(scored.interest_score, SCORE_DECIMALS),
        final_score=round_half_up(final_score, SCORE_DECIMALS),
        confidence=calculate_confidence(final_score),
        explanation=build_explanation(scored.academic_score, scored.interest_score),
    )


def assemble_rows(student_id: str, scores: List[PathwayScore]) -> List[RecommendationRow]:
    return [assemble_row(student_id, scored) for scored in scores]


def assemble_output(
    student_id: str,
    rows: List[RecommendationRow],
    top: Optional[RecommendationRow],
    pruned_pathway_ids: Optional[List[str]] = None,
    processing_time_ms: Optional[float] = None,
) -> RecommendationOutput:
    """
    Assemble the final RecommendationOutput.

    Args:
        student_id: Student the rows were computed for
        rows: Rows in catalog order
        top: Selected top recommendation
        pruned_pathway_ids: Orphaned pathway ids removed during this run
        processing_time_ms: Processing time in milliseconds

    Returns:
        Complete RecommendationOutput
    """
    return RecommendationOutput(
        request_id=str(uuid.uuid4()),
        student_id=student_id,
        recommendations=rows,
        top_recommendation=top,
        total_pathways=len(rows),
        pruned_pathway_ids=pruned_pathway_ids or [],
        processing_time_ms=processing_time_ms,
        engine_version=ENGINE_VERSION,
        warnings=_generate_warnings(rows),
    )


def _generate_warnings(rows: List[RecommendationRow]) -> List[str]:
    warnings = []

    if not rows:
        warnings.append("No pathways are configured. Ask an administrator to set up the pathway catalog.")
        return warnings

    if all(row.academic_score == 0 for row in rows):
        warnings.append("None of your results count towards any pathway. Academic scores are 0.")

    if all(row.interest_score == 0 for row in rows):
        warnings.append("None of your answers count towards any pathway. Interest scores are 0.")

    return warnings
