"""
Recommendation API Routes

Exposes the pathway recommendation engine and the write paths that feed it.
Authentication is handled upstream; callers pass the student id.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from db import get_db
from .logic.contracts import InterestAnswer, ResultUpload, WeightUpdate
from .logic.errors import (
    RecommendationError,
    MissingAcademicData,
    MissingInterestData,
    PersistenceFailure,
    InvalidSubmission,
)
from .logic.store import SqlAlchemyStore
from .logic import runner


router = APIRouter(prefix="/recommendations", tags=["recommendations"])


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class InterestSubmission(BaseModel):
    """Request body for questionnaire submission."""
    answers: List[InterestAnswer] = Field(
        ...,
        description="One answer (1-5) per question",
        json_schema_extra={"example": [{"question_id": "q1", "answer_value": 4}]},
    )


class ResultsUpload(BaseModel):
    results: List[ResultUpload]


class VerifyRequest(BaseModel):
    subject_ids: Optional[List[str]] = Field(
        default=None,
        description="Subjects to verify; all unverified results when omitted",
    )


class WeightsUpdate(BaseModel):
    weights: List[WeightUpdate]


# =============================================================================
# ERROR MAPPING
# =============================================================================

def _status_for(error: RecommendationError) -> int:
    if isinstance(error, (MissingAcademicData, MissingInterestData)):
        return 409
    if isinstance(error, InvalidSubmission):
        return 422
    if isinstance(error, PersistenceFailure):
        return 503
    return 500


def _http_error(error: RecommendationError) -> HTTPException:
    return HTTPException(
        status_code=_status_for(error),
        detail={"code": error.code, "message": error.message},
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/health", summary="Recommendation engine health check")
def health_check():
    """Check if recommendation engine is operational."""
    return {"status": "ok", "engine": "pathway-recommendation", "version": "1.0.0"}


@router.get("/catalog/pathways", summary="List pathways")
def get_pathways(db: Session = Depends(get_db)):
    return {"pathways": [p.model_dump() for p in runner.list_pathways(SqlAlchemyStore(db))]}


@router.get("/catalog/subjects", summary="List subjects")
def get_subjects(db: Session = Depends(get_db)):
    return {"subjects": [s.model_dump() for s in runner.list_subjects(SqlAlchemyStore(db))]}


@router.get("/catalog/questions", summary="List interest questions in display order")
def get_questions(db: Session = Depends(get_db)):
    questions = runner.list_questions(SqlAlchemyStore(db))
    return {
        "questions": [
            {"id": q.id, "question_text": q.question_text, "sort_order": q.sort_order}
            for q in questions
        ]
    }


@router.put("/results", summary="Upload or update exam results (examiner)")
def put_results(payload: ResultsUpload, db: Session = Depends(get_db)):
    try:
        saved = runner.upload_results(SqlAlchemyStore(db), payload.results)
    except RecommendationError as e:
        raise _http_error(e)
    return {"saved": saved}


@router.post("/results/{student_id}/verify", summary="Verify a student's results (examiner)")
def post_verify_results(student_id: str, payload: VerifyRequest, db: Session = Depends(get_db)):
    try:
        verified = runner.verify_results(SqlAlchemyStore(db), student_id, payload.subject_ids)
    except RecommendationError as e:
        raise _http_error(e)
    return {"verified": verified}


@router.put("/weights", summary="Configure pathway subject weights (admin)")
def put_weights(payload: WeightsUpdate, db: Session = Depends(get_db)):
    try:
        saved = runner.update_pathway_weights(SqlAlchemyStore(db), payload.weights)
    except RecommendationError as e:
        raise _http_error(e)
    return {"saved": saved}


@router.put("/{student_id}/interest-responses", summary="Submit the interest assessment")
def put_interest_responses(student_id: str, payload: InterestSubmission, db: Session = Depends(get_db)):
    try:
        saved = runner.submit_interest_responses(SqlAlchemyStore(db), student_id, payload.answers)
    except RecommendationError as e:
        raise _http_error(e)
    return {"saved": saved}


@router.post("/{student_id}/compute", summary="Compute pathway recommendations")
def compute_recommendations(
    student_id: str,
    prune_orphans: Optional[bool] = Query(
        default=None,
        description="Delete rows for pathways removed from the catalog (defaults to server config)",
    ),
    db: Session = Depends(get_db),
):
    """
    Score every catalog pathway for a student and store the results.

    **Response:**
    - One recommendation per pathway (academic, interest and final score, confidence)
    - The top pathway (first in catalog order on ties)

    **Errors:**
    - 409 when results or questionnaire answers are missing
    - 503 when the recommendations could not be saved
    """
    try:
        output = runner.run_recommendations(SqlAlchemyStore(db), student_id, prune_orphans)
    except RecommendationError as e:
        raise _http_error(e)
    return output.model_dump()


@router.get("/{student_id}", summary="Get stored recommendations")
def get_student_recommendations(student_id: str, db: Session = Depends(get_db)):
    stored = runner.get_stored_recommendations(SqlAlchemyStore(db), student_id)
    return stored.model_dump()
