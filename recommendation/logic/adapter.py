"""
Data Adapter for the Pathway Scoring Engine

Transforms raw store rows (ORM mappings or plain dicts) into the engine's
contracts. Malformed upstream data is an integrity fault of the admin or
examiner input, so the adapter fails closed and logs the anomaly:
- negative / non-numeric weights count as 0
- non-numeric or out-of-range scores are excluded
- non-integer or out-of-range answers are excluded

This is a pure READ + TRANSFORM layer:
- NO scoring logic
- NO DB access
"""

import logging
import math
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .constants import (
    MIN_SCORE,
    MAX_SCORE,
    MIN_ANSWER_VALUE,
    MAX_ANSWER_VALUE,
    DEFAULT_WEIGHT_VALUE,
    InterestWeightKeying,
)
from .contracts import (
    PathwayRecord,
    PathwayWeightRecord,
    InterestQuestionRecord,
    InterestResponseRecord,
    ResultRecord,
    SubjectRecord,
)
from .errors import UnresolvedPathwayKey

logger = logging.getLogger(__name__)


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a stored numeric value to float.

    Accepts ints, floats, Decimals (Postgres NUMERIC) and numeric strings.
    Returns None for anything else, including booleans, NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def sanitize_weight(value: Any, context: str) -> float:
    """Return a usable non-negative weight; malformed weights become 0."""
    number = to_number(value)
    if number is None:
        logger.warning(f"Non-numeric weight {value!r} for {context}; treating as 0")
        return 0.0
    if number < 0:
        logger.warning(f"Negative weight {number} for {context}; treating as 0")
        return 0.0
    return number


# =============================================================================
# ROW -> CONTRACT
# =============================================================================

def to_result_record(row: Mapping[str, Any]) -> Optional[ResultRecord]:
    score = to_number(row.get("score"))
    if score is None or score < MIN_SCORE or score > MAX_SCORE:
        logger.warning(
            f"Excluding result for subject {row.get('subject_id')}: invalid score {row.get('score')!r}"
        )
        return None
    return ResultRecord(
        subject_id=str(row["subject_id"]),
        score=score,
        verified=bool(row.get("verified") or False),
    )


def to_weight_record(row: Mapping[str, Any]) -> PathwayWeightRecord:
    context = f"pathway {row.get('pathway_id')} / subject {row.get('subject_id')}"
    raw = row.get("weight_value", DEFAULT_WEIGHT_VALUE)
    return PathwayWeightRecord(
        pathway_id=str(row["pathway_id"]),
        subject_id=str(row["subject_id"]),
        weight_value=sanitize_weight(raw, context),
    )


def to_response_record(row: Mapping[str, Any]) -> Optional[InterestResponseRecord]:
    answer = to_number(row.get("answer_value"))
    if (
        answer is None
        or not answer.is_integer()
        or answer < MIN_ANSWER_VALUE
        or answer > MAX_ANSWER_VALUE
    ):
        logger.warning(
            f"Excluding response to question {row.get('question_id')}: invalid answer {row.get('answer_value')!r}"
        )
        return None
    return InterestResponseRecord(
        question_id=str(row["question_id"]),
        answer_value=int(answer),
    )


def to_question_record(row: Mapping[str, Any]) -> InterestQuestionRecord:
    question_id = str(row["id"])
    raw_weights = row.get("pathway_weights")
    weights: Dict[str, float] = {}

    if raw_weights is None:
        raw_weights = {}
    if not isinstance(raw_weights, Mapping):
        logger.warning(
            f"Question {question_id} has malformed pathway_weights {raw_weights!r}; ignoring"
        )
        raw_weights = {}

    for key, value in raw_weights.items():
        weights[str(key)] = sanitize_weight(value, f"question {question_id} / pathway '{key}'")

    return InterestQuestionRecord(
        id=question_id,
        question_text=row.get("question_text") or "",
        sort_order=int(row.get("sort_order") or 0),
        pathway_weights=weights,
    )


def to_pathway_record(row: Mapping[str, Any]) -> PathwayRecord:
    return PathwayRecord(
        id=str(row["id"]),
        name=row["name"],
        color=row.get("color") or "#3b82f6",
        description=row.get("description"),
    )


def to_subject_record(row: Mapping[str, Any]) -> SubjectRecord:
    return SubjectRecord(id=str(row["id"]), name=row["name"])


def to_result_records(rows: Iterable[Mapping[str, Any]]) -> List[ResultRecord]:
    records = (to_result_record(row) for row in rows)
    return [r for r in records if r is not None]


def to_response_records(rows: Iterable[Mapping[str, Any]]) -> List[InterestResponseRecord]:
    records = (to_response_record(row) for row in rows)
    return [r for r in records if r is not None]


# =============================================================================
# PATHWAY KEY RESOLUTION
# =============================================================================

def pathway_key(pathway: PathwayRecord, keying: InterestWeightKeying) -> str:
    """Key under which a question's pathway_weights mapping refers to `pathway`."""
    if keying == InterestWeightKeying.ID:
        return pathway.id
    return pathway.name


def resolve_weight_keys(
    questions: List[InterestQuestionRecord],
    pathways: List[PathwayRecord],
    keying: InterestWeightKeying = InterestWeightKeying.NAME,
) -> None:
    """
    Check question weight keys against the pathway catalog.

    In STRICT_NAME mode any key that names no pathway raises
    UnresolvedPathwayKey, so a renamed pathway is a visible fault instead of
    a silent zero. Other modes only log the unmatched keys.
    """
    known = {pathway_key(p, keying) for p in pathways}

    for question in questions:
        for key, weight in question.pathway_weights.items():
            if key in known:
                continue
            if keying == InterestWeightKeying.STRICT_NAME:
                raise UnresolvedPathwayKey(key, question_id=question.id)
            if weight > 0:
                logger.warning(
                    f"Question {question.id} weights unknown pathway key '{key}'; it contributes nothing"
                )
