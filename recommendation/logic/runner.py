"""
Engine Runner

Orchestrates the recommendation use cases on top of a RecommendationStore:
1. Compute and persist a student's recommendations
2. Read stored recommendations back for display
3. Feed the engine: questionnaire answers, examiner results, admin weights

This is a pure orchestration layer - NO scoring, NO SQL.
"""

import logging
from typing import List, Optional

from config import Config
from .constants import InterestWeightKeying
from .contracts import (
    InterestAnswer,
    InterestQuestionRecord,
    PathwayRecommendation,
    PathwayRecord,
    RecommendationOutput,
    ResultUpload,
    StoredRecommendations,
    SubjectRecord,
    WeightUpdate,
)
from .engine import RecommendationEngine
from .errors import InvalidConfiguration, InvalidSubmission
from .ranker import rank_recommendations, select_top
from .store import RecommendationStore

logger = logging.getLogger(__name__)


def configured_keying() -> InterestWeightKeying:
    try:
        return InterestWeightKeying(Config.INTEREST_WEIGHT_KEYING)
    except ValueError:
        allowed = ", ".join(k.value for k in InterestWeightKeying)
        raise InvalidConfiguration(
            f"INTEREST_WEIGHT_KEYING must be one of {allowed}, got '{Config.INTEREST_WEIGHT_KEYING}'."
        )


def run_recommendations(
    store: RecommendationStore,
    student_id: str,
    prune_orphans: Optional[bool] = None,
) -> RecommendationOutput:
    """
    Main entry point: run the full recommendation pipeline for one student.

    Args:
        store: Data store
        student_id: Student to score
        prune_orphans: Override Config.PRUNE_ORPHANED_RECOMMENDATIONS

    Returns:
        RecommendationOutput with one row per catalog pathway
    """
    logger.info(f"🚀 Starting recommendation pipeline for student: {student_id}")

    engine = RecommendationEngine(
        store,
        keying=configured_keying(),
        prune_orphans=Config.PRUNE_ORPHANED_RECOMMENDATIONS,
    )
    output = engine.recommend(student_id, prune_orphans=prune_orphans)

    top = output.top_recommendation
    logger.info(f"📊 Pathways scored: {output.total_pathways}")
    if top is not None:
        logger.info(f"🏆 Top pathway: {top.pathway_id} (final {top.final_score}, confidence {top.confidence})")
    if output.pruned_pathway_ids:
        logger.info(f"🧹 Pruned orphaned recommendations: {output.pruned_pathway_ids}")
    for warning in output.warnings:
        logger.warning(f"⚠️ {warning}")
    logger.info(f"✨ Recommendation pipeline complete ({output.processing_time_ms:.2f}ms)")

    return output


def get_stored_recommendations(
    store: RecommendationStore,
    student_id: str,
) -> StoredRecommendations:
    """
    Stored recommendations joined with the current catalog, ranked for display.

    Rows for pathways no longer in the catalog are left out.
    """
    rows_by_pathway = {
        row.pathway_id: row for row in store.list_recommendations_by_student(student_id)
    }

    joined: List[PathwayRecommendation] = []
    for pathway in store.list_pathways():
        row = rows_by_pathway.get(pathway.id)
        if row is None:
            continue
        joined.append(PathwayRecommendation(
            pathway_id=pathway.id,
            pathway_name=pathway.name,
            color=pathway.color,
            academic_score=row.academic_score,
            interest_score=row.interest_score,
            final_score=row.final_score,
            confidence=row.confidence,
            explanation=row.explanation,
        ))

    ranked = rank_recommendations(joined)
    top = select_top(ranked)

    return StoredRecommendations(
        student_id=student_id,
        recommendations=ranked,
        top_recommendation=top,
    )


# =============================================================================
# CATALOG
# =============================================================================

def list_pathways(store: RecommendationStore) -> List[PathwayRecord]:
    return store.list_pathways()


def list_subjects(store: RecommendationStore) -> List[SubjectRecord]:
    return store.list_subjects()


def list_questions(store: RecommendationStore) -> List[InterestQuestionRecord]:
    return store.list_interest_questions()


# =============================================================================
# WRITE PATHS
# =============================================================================

def _require_known(kind: str, ids: List[str], known: set) -> None:
    unknown = sorted(set(ids) - known)
    if unknown:
        raise InvalidSubmission(f"Unknown {kind}: {', '.join(unknown)}")


def submit_interest_responses(
    store: RecommendationStore,
    student_id: str,
    answers: List[InterestAnswer],
) -> int:
    """
    Save (or re-take) a student's questionnaire answers.

    Returns:
        Number of answers saved
    """
    if not answers:
        raise InvalidSubmission("No answers submitted.")

    known = {q.id for q in store.list_interest_questions()}
    _require_known("questions", [a.question_id for a in answers], known)

    store.upsert_interest_responses(student_id, answers)
    logger.info(f"📝 Saved {len(answers)} interest responses for student {student_id}")
    return len(answers)


def upload_results(store: RecommendationStore, uploads: List[ResultUpload]) -> int:
    """
    Examiner upload. Every uploaded score goes back to unverified.

    Returns:
        Number of results saved
    """
    if not uploads:
        raise InvalidSubmission("No results submitted.")

    known = {s.id for s in store.list_subjects()}
    _require_known("subjects", [u.subject_id for u in uploads], known)

    store.upsert_results(uploads)
    logger.info(f"📤 Saved {len(uploads)} results")
    return len(uploads)


def verify_results(
    store: RecommendationStore,
    student_id: str,
    subject_ids: Optional[List[str]] = None,
) -> int:
    """Mark a student's unverified results verified (all, or only `subject_ids`)."""
    count = store.verify_results(student_id, subject_ids)
    logger.info(f"✅ Verified {count} results for student {student_id}")
    return count


def update_pathway_weights(store: RecommendationStore, updates: List[WeightUpdate]) -> int:
    """Admin weight configuration, upserted on (pathway_id, subject_id)."""
    if not updates:
        raise InvalidSubmission("No weights submitted.")

    _require_known("pathways", [u.pathway_id for u in updates], {p.id for p in store.list_pathways()})
    _require_known("subjects", [u.subject_id for u in updates], {s.id for s in store.list_subjects()})

    store.upsert_pathway_weights(updates)
    logger.info(f"⚖️ Saved {len(updates)} pathway weights")
    return len(updates)
