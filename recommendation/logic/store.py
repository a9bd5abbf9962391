"""
Recommendation Stores

The engine reads catalog and student records through a RecommendationStore
and writes recommendation rows back through it. Two implementations:

- InMemoryStore: plain dict-backed store for tests and embedding
- SqlAlchemyStore: relational store over the models in recommendation.models

Every read goes through the adapter, so both stores hand the engine the same
sanitised contracts.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, update, delete
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .adapter import (
    to_pathway_record,
    to_question_record,
    to_response_records,
    to_result_records,
    to_subject_record,
    to_weight_record,
)
from .contracts import (
    InterestAnswer,
    InterestQuestionRecord,
    InterestResponseRecord,
    PathwayRecord,
    PathwayWeightRecord,
    RecommendationRow,
    ResultRecord,
    ResultUpload,
    SubjectRecord,
    WeightUpdate,
)
from .errors import PersistenceFailure
from ..models import (
    InterestQuestion,
    InterestResponse,
    Pathway,
    PathwayWeight,
    Recommendation,
    Result,
    Subject,
)
from ..models._ids import new_id, utcnow

logger = logging.getLogger(__name__)


class RecommendationStore(ABC):
    """Read/write collaborator of the recommendation engine."""

    # --- catalog reads ---

    @abstractmethod
    def list_pathways(self) -> List[PathwayRecord]:
        ...

    @abstractmethod
    def list_subjects(self) -> List[SubjectRecord]:
        ...

    @abstractmethod
    def list_pathway_weights(self) -> List[PathwayWeightRecord]:
        ...

    @abstractmethod
    def list_interest_questions(self) -> List[InterestQuestionRecord]:
        ...

    # --- student reads ---

    @abstractmethod
    def list_results_by_student(self, student_id: str) -> List[ResultRecord]:
        ...

    @abstractmethod
    def list_interest_responses_by_student(self, student_id: str) -> List[InterestResponseRecord]:
        ...

    @abstractmethod
    def list_recommendations_by_student(self, student_id: str) -> List[RecommendationRow]:
        ...

    # --- writes ---

    @abstractmethod
    def upsert_recommendations(self, rows: List[RecommendationRow]) -> None:
        """Insert-or-update keyed on (student_id, pathway_id), as one batch."""

    @abstractmethod
    def delete_recommendations_except(self, student_id: str, pathway_ids: Iterable[str]) -> List[str]:
        """Delete the student's rows for pathways not in `pathway_ids`; return deleted ids."""

    @abstractmethod
    def upsert_interest_responses(self, student_id: str, answers: List[InterestAnswer]) -> None:
        ...

    @abstractmethod
    def upsert_results(self, uploads: List[ResultUpload]) -> None:
        ...

    @abstractmethod
    def verify_results(self, student_id: str, subject_ids: Optional[List[str]] = None) -> int:
        ...

    @abstractmethod
    def upsert_pathway_weights(self, updates: List[WeightUpdate]) -> None:
        ...

    def save_recommendations(
        self,
        student_id: str,
        rows: List[RecommendationRow],
        prune_orphans: bool = False,
    ) -> List[str]:
        """
        Persist a full recommendation set as one logical unit.

        Returns:
            Pathway ids of orphaned rows that were pruned
        """
        self.upsert_recommendations(rows)
        if not prune_orphans:
            return []
        return self.delete_recommendations_except(student_id, [row.pathway_id for row in rows])


# =============================================================================
# IN-MEMORY STORE
# =============================================================================

class InMemoryStore(RecommendationStore):
    """
    Dict-backed store. Catalog lists keep insertion order; questions are
    returned by sort_order. Rows are raw dicts, as a hosted table would
    return them, so the adapter's sanitising applies.
    """

    def __init__(
        self,
        pathways: Optional[List[Dict[str, Any]]] = None,
        subjects: Optional[List[Dict[str, Any]]] = None,
        weights: Optional[List[Dict[str, Any]]] = None,
        questions: Optional[List[Dict[str, Any]]] = None,
        results: Optional[List[Dict[str, Any]]] = None,
        responses: Optional[List[Dict[str, Any]]] = None,
    ):
        self.pathways = list(pathways or [])
        self.subjects = list(subjects or [])
        self.questions = list(questions or [])

        self.weights: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for row in weights or []:
            self.weights[(row["pathway_id"], row["subject_id"])] = dict(row)

        self.results: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for row in results or []:
            self.results[(row["student_id"], row["subject_id"])] = dict(row)

        self.responses: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for row in responses or []:
            self.responses[(row["student_id"], row["question_id"])] = dict(row)

        self.recommendations: Dict[Tuple[str, str], RecommendationRow] = {}

    def list_pathways(self) -> List[PathwayRecord]:
        return [to_pathway_record(row) for row in self.pathways]

    def list_subjects(self) -> List[SubjectRecord]:
        return [to_subject_record(row) for row in self.subjects]

    def list_pathway_weights(self) -> List[PathwayWeightRecord]:
        return [to_weight_record(row) for row in self.weights.values()]

    def list_interest_questions(self) -> List[InterestQuestionRecord]:
        ordered = sorted(self.questions, key=lambda q: q.get("sort_order") or 0)
        return [to_question_record(row) for row in ordered]

    def list_results_by_student(self, student_id: str) -> List[ResultRecord]:
        return to_result_records(
            row for (sid, _), row in self.results.items() if sid == student_id
        )

    def list_interest_responses_by_student(self, student_id: str) -> List[InterestResponseRecord]:
        return to_response_records(
            row for (sid, _), row in self.responses.items() if sid == student_id
        )

    def list_recommendations_by_student(self, student_id: str) -> List[RecommendationRow]:
        return [
            row.model_copy()
            for (sid, _), row in self.recommendations.items()
            if sid == student_id
        ]

    def upsert_recommendations(self, rows: List[RecommendationRow]) -> None:
        for row in rows:
            self.recommendations[(row.student_id, row.pathway_id)] = row.model_copy()

    def delete_recommendations_except(self, student_id: str, pathway_ids: Iterable[str]) -> List[str]:
        keep = set(pathway_ids)
        orphaned = [
            pid for (sid, pid) in self.recommendations
            if sid == student_id and pid not in keep
        ]
        for pid in orphaned:
            del self.recommendations[(student_id, pid)]
        return orphaned

    def upsert_interest_responses(self, student_id: str, answers: List[InterestAnswer]) -> None:
        for answer in answers:
            self.responses[(student_id, answer.question_id)] = {
                "student_id": student_id,
                "question_id": answer.question_id,
                "answer_value": answer.answer_value,
            }

    def upsert_results(self, uploads: List[ResultUpload]) -> None:
        for upload in uploads:
            self.results[(upload.student_id, upload.subject_id)] = {
                "student_id": upload.student_id,
                "subject_id": upload.subject_id,
                "score": upload.score,
                "examiner_id": upload.examiner_id,
                "verified": False,
            }

    def verify_results(self, student_id: str, subject_ids: Optional[List[str]] = None) -> int:
        count = 0
        for (sid, subject_id), row in self.results.items():
            if sid != student_id or row.get("verified"):
                continue
            if subject_ids is not None and subject_id not in subject_ids:
                continue
            row["verified"] = True
            count += 1
        return count

    def upsert_pathway_weights(self, updates: List[WeightUpdate]) -> None:
        for item in updates:
            self.weights[(item.pathway_id, item.subject_id)] = item.model_dump()


# =============================================================================
# SQLALCHEMY STORE
# =============================================================================

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlAlchemyStore(RecommendationStore):
    """
    Relational store bound to a request-scoped Session.

    Writes are flushed but not committed: the caller's session scope
    (db.get_db, the request dependency) commits on success and rolls back on any error, so a failed
    batch leaves nothing behind.
    """

    def __init__(self, db: Session):
        self.db = db

    # --- reads ---

    def _mappings(self, stmt) -> List[Dict[str, Any]]:
        return [dict(row._mapping) for row in self.db.execute(stmt)]

    def list_pathways(self) -> List[PathwayRecord]:
        stmt = select(
            Pathway.id, Pathway.name, Pathway.color, Pathway.description
        ).order_by(Pathway.name, Pathway.id)
        return [to_pathway_record(row) for row in self._mappings(stmt)]

    def list_subjects(self) -> List[SubjectRecord]:
        stmt = select(Subject.id, Subject.name).order_by(Subject.name)
        return [to_subject_record(row) for row in self._mappings(stmt)]

    def list_pathway_weights(self) -> List[PathwayWeightRecord]:
        stmt = select(PathwayWeight.pathway_id, PathwayWeight.subject_id, PathwayWeight.weight_value)
        return [to_weight_record(row) for row in self._mappings(stmt)]

    def list_interest_questions(self) -> List[InterestQuestionRecord]:
        stmt = select(
            InterestQuestion.id,
            InterestQuestion.question_text,
            InterestQuestion.sort_order,
            InterestQuestion.pathway_weights,
        ).order_by(InterestQuestion.sort_order, InterestQuestion.id)
        return [to_question_record(row) for row in self._mappings(stmt)]

    def list_results_by_student(self, student_id: str) -> List[ResultRecord]:
        stmt = select(Result.subject_id, Result.score, Result.verified).where(
            Result.student_id == student_id
        )
        return to_result_records(self._mappings(stmt))

    def list_interest_responses_by_student(self, student_id: str) -> List[InterestResponseRecord]:
        stmt = select(InterestResponse.question_id, InterestResponse.answer_value).where(
            InterestResponse.student_id == student_id
        )
        return to_response_records(self._mappings(stmt))

    def list_recommendations_by_student(self, student_id: str) -> List[RecommendationRow]:
        stmt = select(
            Recommendation.student_id,
            Recommendation.pathway_id,
            Recommendation.academic_score,
            Recommendation.interest_score,
            Recommendation.final_score,
            Recommendation.confidence,
            Recommendation.explanation,
        ).where(Recommendation.student_id == student_id)
        rows = self._mappings(stmt)
        for row in rows:
            row["explanation"] = row["explanation"] or ""
        return [RecommendationRow(**row) for row in rows]

    # --- writes ---

    @contextmanager
    def _write(self, action: str):
        try:
            yield
            self.db.flush()
        except SQLAlchemyError as exc:
            logger.exception(f"Store write failed while trying to {action}")
            self.db.rollback()
            raise PersistenceFailure() from exc

    def _upsert(self, model, rows: List[Dict[str, Any]], key_columns: List[str], update_columns: List[str]) -> None:
        if not rows:
            return

        insert = _UPSERT_INSERTS.get(self.db.get_bind().dialect.name)
        if insert is not None:
            stmt = insert(model).values(rows)
            stmt = stmt.on_conflict_do_update(
                index_elements=key_columns,
                set_={col: stmt.excluded[col] for col in update_columns},
            )
            self.db.execute(stmt)
            return

        # Generic fallback: select-then-write inside the same transaction
        for row in rows:
            filters = [getattr(model, col) == row[col] for col in key_columns]
            existing = self.db.execute(select(model).where(*filters)).scalar_one_or_none()
            if existing is None:
                self.db.add(model(**row))
            else:
                for col in update_columns:
                    setattr(existing, col, row[col])

    def upsert_recommendations(self, rows: List[RecommendationRow]) -> None:
        now = utcnow()
        values = [
            {"id": new_id(), "created_at": now, "updated_at": now, **row.model_dump()}
            for row in rows
        ]
        with self._write("upsert recommendations"):
            self._upsert(
                Recommendation,
                values,
                key_columns=["student_id", "pathway_id"],
                update_columns=[
                    "academic_score",
                    "interest_score",
                    "final_score",
                    "confidence",
                    "explanation",
                    "updated_at",
                ],
            )

    def delete_recommendations_except(self, student_id: str, pathway_ids: Iterable[str]) -> List[str]:
        keep = list(pathway_ids)
        with self._write("prune orphaned recommendations"):
            stmt = select(Recommendation.pathway_id).where(Recommendation.student_id == student_id)
            if keep:
                stmt = stmt.where(Recommendation.pathway_id.not_in(keep))
            orphaned = list(self.db.execute(stmt).scalars())
            if orphaned:
                self.db.execute(
                    delete(Recommendation)
                    .where(Recommendation.student_id == student_id)
                    .where(Recommendation.pathway_id.in_(orphaned))
                    .execution_options(synchronize_session=False)
                )
        return orphaned

    def upsert_interest_responses(self, student_id: str, answers: List[InterestAnswer]) -> None:
        now = utcnow()
        values = [
            {
                "id": new_id(),
                "student_id": student_id,
                "question_id": answer.question_id,
                "answer_value": answer.answer_value,
                "created_at": now,
            }
            for answer in answers
        ]
        with self._write("save interest responses"):
            self._upsert(
                InterestResponse,
                values,
                key_columns=["student_id", "question_id"],
                update_columns=["answer_value"],
            )

    def upsert_results(self, uploads: List[ResultUpload]) -> None:
        now = utcnow()
        values = [
            {
                "id": new_id(),
                "student_id": upload.student_id,
                "subject_id": upload.subject_id,
                "score": upload.score,
                "examiner_id": upload.examiner_id,
                "verified": False,
                "created_at": now,
                "updated_at": now,
            }
            for upload in uploads
        ]
        with self._write("save results"):
            self._upsert(
                Result,
                values,
                key_columns=["student_id", "subject_id"],
                update_columns=["score", "examiner_id", "verified", "updated_at"],
            )

    def verify_results(self, student_id: str, subject_ids: Optional[List[str]] = None) -> int:
        stmt = (
            update(Result)
            .where(Result.student_id == student_id)
            .where(Result.verified.is_(False))
            .values(verified=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if subject_ids is not None:
            stmt = stmt.where(Result.subject_id.in_(subject_ids))
        with self._write("verify results"):
            count = self.db.execute(stmt).rowcount
        return count

    def upsert_pathway_weights(self, updates: List[WeightUpdate]) -> None:
        values = [{"id": new_id(), **item.model_dump()} for item in updates]
        with self._write("save pathway weights"):
            self._upsert(
                PathwayWeight,
                values,
                key_columns=["pathway_id", "subject_id"],
                update_columns=["weight_value"],
            )
