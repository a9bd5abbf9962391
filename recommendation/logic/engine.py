"""
Recommendation Engine

Main orchestrator that combines the scoring components into a single pipeline.
This is the primary entry point for computing pathway recommendations.
"""

import time
from typing import List, Optional, Tuple

from .adapter import resolve_weight_keys
from .aggregator import aggregate_scores
from .constants import InterestWeightKeying
from .contracts import RecommendationOutput, RecommendationRow, StudentSnapshot
from .errors import MissingAcademicData, MissingInterestData
from .output_assembler import assemble_output, assemble_rows
from .ranker import select_top
from .store import RecommendationStore


def check_preconditions(snapshot: StudentSnapshot) -> None:
    """
    Refuse to score a student who has nothing to score.

    Results are checked first, so a student with neither results nor
    answers is told about the missing results.
    """
    if not snapshot.results:
        raise MissingAcademicData(student_id=snapshot.student_id)
    if not snapshot.responses:
        raise MissingInterestData(student_id=snapshot.student_id)


def compute_recommendations(
    snapshot: StudentSnapshot,
    keying: InterestWeightKeying = InterestWeightKeying.NAME,
) -> Tuple[List[RecommendationRow], Optional[RecommendationRow]]:
    """
    Pure scoring pass over a snapshot.

    Returns:
        (rows in catalog order, top row)
    """
    check_preconditions(snapshot)
    resolve_weight_keys(snapshot.questions, snapshot.pathways, keying)

    scores = aggregate_scores(snapshot, keying)
    rows = assemble_rows(snapshot.student_id, scores)
    return rows, select_top(rows)


class RecommendationEngine:
    """
    Computes and persists a student's recommendation set.

    Pipeline flow:
    1. Snapshot - Read student records and the full catalog from the store
    2. Preconditions - Results and questionnaire answers must exist
    3. Aggregation - Academic and interest score per pathway
    4. Composition - Blend, confidence, explanation, top selection
    5. Persistence - One batched upsert (plus optional orphan pruning)
    """

    def __init__(
        self,
        store: RecommendationStore,
        keying: InterestWeightKeying = InterestWeightKeying.NAME,
        prune_orphans: bool = False,
    ):
        """
        Args:
            store: Read/write collaborator
            keying: How question weights refer to pathways
            prune_orphans: Delete rows for pathways no longer in the catalog
        """
        self.store = store
        self.keying = InterestWeightKeying(keying)
        self.prune_orphans = prune_orphans

    def load_snapshot(self, student_id: str) -> StudentSnapshot:
        # catalog tables are small, so they are re-read on every run
        return StudentSnapshot(
            student_id=student_id,
            results=self.store.list_results_by_student(student_id),
            responses=self.store.list_interest_responses_by_student(student_id),
            pathways=self.store.list_pathways(),
            weights=self.store.list_pathway_weights(),
            questions=self.store.list_interest_questions(),
        )

    def recommend(
        self,
        student_id: str,
        prune_orphans: Optional[bool] = None,
    ) -> RecommendationOutput:
        """
        Compute, persist and return a student's recommendations.

        Raises:
            MissingAcademicData: student has no results
            MissingInterestData: student has not answered the questionnaire
            PersistenceFailure: the store rejected the batch; nothing was saved
        """
        start_time = time.perf_counter()
        prune = self.prune_orphans if prune_orphans is None else prune_orphans

        snapshot = self.load_snapshot(student_id)
        rows, top = compute_recommendations(snapshot, self.keying)

        pruned = self.store.save_recommendations(student_id, rows, prune_orphans=prune)

        processing_time = (time.perf_counter() - start_time) * 1000
        return assemble_output(
            student_id=student_id,
            rows=rows,
            top=top,
            pruned_pathway_ids=pruned,
            processing_time_ms=round(processing_time, 2),
        )

