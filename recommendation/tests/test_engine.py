"""
Tests for the recommendation composer: blending, preconditions, idempotence,
catalog coverage, tie-breaking, keying modes and orphan pruning.
"""

import pytest

from recommendation.logic import (
    InMemoryStore,
    InterestWeightKeying,
    MissingAcademicData,
    MissingInterestData,
    PersistenceFailure,
    RecommendationEngine,
    StudentSnapshot,
    UnresolvedPathwayKey,
    compute_recommendations,
)
from recommendation.logic.contracts import PathwayScore, RecommendationRow
from recommendation.logic.output_assembler import assemble_row, round_half_up
from recommendation.logic.ranker import select_top

STUDENT_ID = "s1"


def _rows_by_pathway(output):
    return {row.pathway_id: row for row in output.recommendations}


def test_final_score_blend_and_confidence():
    row = assemble_row(STUDENT_ID, PathwayScore(pathway_id="p", academic_score=70, interest_score=100))

    assert row.final_score == pytest.approx(79.0)
    assert row.confidence == 87
    assert row.explanation == "Academic: 70% | Interest: 100%"


def test_confidence_is_capped_at_100():
    row = assemble_row(STUDENT_ID, PathwayScore(pathway_id="p", academic_score=95, interest_score=100))

    assert row.final_score == pytest.approx(96.5)
    assert row.confidence == 100


def test_scores_are_rounded_half_up_to_two_decimals():
    row = assemble_row(
        STUDENT_ID,
        PathwayScore(pathway_id="p", academic_score=200 / 3, interest_score=60.0),
    )

    assert row.academic_score == pytest.approx(66.67)
    assert row.final_score == pytest.approx(64.67)
    assert row.confidence == 71
    assert row.explanation == "Academic: 67% | Interest: 60%"


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.125, 2) == pytest.approx(0.13)


def test_recommend_scores_whole_catalog(memory_store):
    output = RecommendationEngine(memory_store).recommend(STUDENT_ID)
    rows = _rows_by_pathway(output)

    assert [r.pathway_id for r in output.recommendations] == ["p-stem", "p-hum", "p-com"]
    assert output.total_pathways == 3

    assert rows["p-stem"].academic_score == pytest.approx(70.0)
    assert rows["p-stem"].interest_score == pytest.approx(100.0)
    assert rows["p-stem"].final_score == pytest.approx(79.0)
    assert rows["p-stem"].confidence == 87

    assert rows["p-hum"].academic_score == pytest.approx(66.67)
    assert rows["p-hum"].interest_score == pytest.approx(60.0)

    assert rows["p-com"].academic_score == pytest.approx(80.0)
    assert rows["p-com"].interest_score == pytest.approx(73.33)
    assert rows["p-com"].final_score == pytest.approx(78.0)
    assert rows["p-com"].confidence == 86

    assert output.top_recommendation.pathway_id == "p-stem"


def test_recommend_persists_one_row_per_pathway(memory_store, catalog):
    RecommendationEngine(memory_store).recommend(STUDENT_ID)

    stored = memory_store.list_recommendations_by_student(STUDENT_ID)
    assert {r.pathway_id for r in stored} == {p["id"] for p in catalog["pathways"]}


def test_missing_results_fail_before_scoring(catalog, student_records):
    store = InMemoryStore(**catalog, responses=student_records["responses"])

    with pytest.raises(MissingAcademicData):
        RecommendationEngine(store).recommend(STUDENT_ID)

    assert store.recommendations == {}


def test_missing_results_reported_even_without_answers(catalog):
    store = InMemoryStore(**catalog)

    with pytest.raises(MissingAcademicData) as excinfo:
        RecommendationEngine(store).recommend(STUDENT_ID)

    assert excinfo.value.student_id == STUDENT_ID
    assert "examiner" in excinfo.value.message


def test_missing_answers_fail_without_writing(catalog, student_records):
    store = InMemoryStore(**catalog, results=student_records["results"])

    with pytest.raises(MissingInterestData):
        RecommendationEngine(store).recommend(STUDENT_ID)

    assert store.recommendations == {}


def test_recompute_is_idempotent(memory_store):
    engine = RecommendationEngine(memory_store)

    first = engine.recommend(STUDENT_ID)
    stored_first = memory_store.list_recommendations_by_student(STUDENT_ID)
    second = engine.recommend(STUDENT_ID)
    stored_second = memory_store.list_recommendations_by_student(STUDENT_ID)

    assert [r.model_dump() for r in first.recommendations] == [r.model_dump() for r in second.recommendations]
    assert [r.model_dump() for r in stored_first] == [r.model_dump() for r in stored_second]
    assert len(stored_second) == 3


def test_recompute_overwrites_previous_rows(memory_store):
    engine = RecommendationEngine(memory_store)
    engine.recommend(STUDENT_ID)

    memory_store.results[(STUDENT_ID, "physics")]["score"] = 80
    engine.recommend(STUDENT_ID)

    stored = {r.pathway_id: r for r in memory_store.list_recommendations_by_student(STUDENT_ID)}
    assert stored["p-stem"].academic_score == pytest.approx(80.0)
    assert len(stored) == 3


def test_output_covers_exactly_the_catalog(catalog, student_records):
    catalog["pathways"].append({"id": "p-arts", "name": "Creative Arts"})
    store = InMemoryStore(**catalog, **student_records)

    output = RecommendationEngine(store).recommend(STUDENT_ID)

    assert {r.pathway_id for r in output.recommendations} == {p["id"] for p in catalog["pathways"]}
    arts = _rows_by_pathway(output)["p-arts"]
    assert arts.academic_score == 0.0
    assert arts.interest_score == 0.0
    assert arts.explanation == "Academic: 0% | Interest: 0%"


def test_empty_catalog_produces_no_rows_and_a_warning(student_records):
    store = InMemoryStore(**student_records)

    output = RecommendationEngine(store).recommend(STUDENT_ID)

    assert output.recommendations == []
    assert output.top_recommendation is None
    assert output.warnings


def _tied_snapshot(pathway_order):
    pathways = {
        "a": {"id": "a", "name": "Alpha"},
        "b": {"id": "b", "name": "Beta"},
    }
    return StudentSnapshot(
        student_id=STUDENT_ID,
        results=[{"subject_id": "math", "score": 60}],
        responses=[{"question_id": "q1", "answer_value": 3}],
        pathways=[pathways[key] for key in pathway_order],
        weights=[
            {"pathway_id": "a", "subject_id": "math", "weight_value": 1},
            {"pathway_id": "b", "subject_id": "math", "weight_value": 3},
        ],
        questions=[{"id": "q1", "pathway_weights": {"Alpha": 1, "Beta": 1}}],
    )


def test_tie_goes_to_first_pathway_in_catalog_order():
    rows, top = compute_recommendations(_tied_snapshot(["a", "b"]))
    assert rows[0].final_score == rows[1].final_score
    assert top.pathway_id == "a"

    _, again = compute_recommendations(_tied_snapshot(["a", "b"]))
    assert again.pathway_id == "a"

    _, reordered = compute_recommendations(_tied_snapshot(["b", "a"]))
    assert reordered.pathway_id == "b"


def test_select_top_requires_strictly_greater_score():
    rows = [
        RecommendationRow(student_id=STUDENT_ID, pathway_id=pid, academic_score=50,
                          interest_score=50, final_score=score, confidence=55)
        for pid, score in [("x", 50.0), ("y", 60.0), ("z", 60.0)]
    ]

    assert select_top(rows).pathway_id == "y"
    assert select_top([]) is None


def test_renamed_pathway_silently_loses_interest_by_default(catalog, student_records):
    catalog["pathways"][0]["name"] = "Science & Technology"
    store = InMemoryStore(**catalog, **student_records)

    output = RecommendationEngine(store).recommend(STUDENT_ID)

    assert _rows_by_pathway(output)["p-stem"].interest_score == 0.0


def test_strict_name_keying_rejects_unresolved_keys(catalog, student_records):
    catalog["pathways"][0]["name"] = "Science & Technology"
    store = InMemoryStore(**catalog, **student_records)
    engine = RecommendationEngine(store, keying=InterestWeightKeying.STRICT_NAME)

    with pytest.raises(UnresolvedPathwayKey) as excinfo:
        engine.recommend(STUDENT_ID)

    assert excinfo.value.key == "STEM"
    assert store.recommendations == {}


def test_strict_name_keying_matches_default_when_names_resolve(memory_store):
    default = RecommendationEngine(memory_store).recommend(STUDENT_ID)
    strict = RecommendationEngine(memory_store, keying="strict_name").recommend(STUDENT_ID)

    assert [r.model_dump() for r in default.recommendations] == [r.model_dump() for r in strict.recommendations]


def test_id_keying_reads_weights_by_pathway_id(catalog, student_records):
    catalog["questions"] = [
        {"id": "q1", "sort_order": 1, "pathway_weights": {"p-stem": 1}},
        {"id": "q2", "sort_order": 2, "pathway_weights": {"p-hum": 1, "p-com": 0.5}},
        {"id": "q3", "sort_order": 3, "pathway_weights": {"p-com": 1}},
    ]
    store = InMemoryStore(**catalog, **student_records)

    output = RecommendationEngine(store, keying=InterestWeightKeying.ID).recommend(STUDENT_ID)
    rows = _rows_by_pathway(output)

    assert rows["p-stem"].interest_score == pytest.approx(100.0)
    assert rows["p-com"].interest_score == pytest.approx(73.33)


def _store_with_orphan(memory_store):
    memory_store.upsert_recommendations([
        RecommendationRow(student_id=STUDENT_ID, pathway_id="p-retired", academic_score=10,
                          interest_score=10, final_score=10, confidence=11)
    ])
    return memory_store


def test_orphaned_rows_are_kept_by_default(memory_store):
    store = _store_with_orphan(memory_store)

    output = RecommendationEngine(store).recommend(STUDENT_ID)

    assert output.pruned_pathway_ids == []
    assert (STUDENT_ID, "p-retired") in store.recommendations


def test_orphaned_rows_are_pruned_on_request(memory_store):
    store = _store_with_orphan(memory_store)

    output = RecommendationEngine(store, prune_orphans=True).recommend(STUDENT_ID)

    assert output.pruned_pathway_ids == ["p-retired"]
    assert (STUDENT_ID, "p-retired") not in store.recommendations
    assert len(store.list_recommendations_by_student(STUDENT_ID)) == 3


class FailingStore(InMemoryStore):
    def upsert_recommendations(self, rows):
        raise PersistenceFailure()


def test_persistence_failure_propagates_and_writes_nothing(catalog, student_records):
    store = FailingStore(**catalog, **student_records)

    with pytest.raises(PersistenceFailure) as excinfo:
        RecommendationEngine(store).recommend(STUDENT_ID)

    assert excinfo.value.code == "persistence_failure"
    assert store.recommendations == {}
