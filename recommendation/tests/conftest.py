"""
Shared fixtures for the recommendation test suite.

Catalog used throughout (catalog order STEM, Humanities, Commerce):

    STEM        math x2, physics x1, english x0
    Humanities  english x2, history x1
    Commerce    math x1, accounting x2

Student s1 has math 80, physics 50, english 70, history 60 (no accounting)
and answers q1=5, q2=3, q3=4, which gives:

    STEM        academic 70.00  interest 100.00  final 79.00  confidence 87
    Humanities  academic 66.67  interest  60.00  final 64.67  confidence 71
    Commerce    academic 80.00  interest  73.33  final 78.00  confidence 86
"""

import os

# Tests always run against a private in-memory database
os.environ["DATABASE_URL"] = "sqlite://"

import pytest

from db import Base, engine, SessionLocal
from recommendation.models import (
    Pathway,
    Subject,
    PathwayWeight,
    InterestQuestion,
    InterestResponse,
    Result,
)
from recommendation.logic import InMemoryStore

STUDENT_ID = "s1"


@pytest.fixture
def catalog():
    return {
        "pathways": [
            {"id": "p-stem", "name": "STEM", "color": "#2563eb"},
            {"id": "p-hum", "name": "Humanities", "color": "#f97316"},
            {"id": "p-com", "name": "Commerce", "color": "#16a34a"},
        ],
        "subjects": [
            {"id": "math", "name": "Mathematics"},
            {"id": "physics", "name": "Physics"},
            {"id": "english", "name": "English"},
            {"id": "history", "name": "History"},
            {"id": "accounting", "name": "Accounting"},
        ],
        "weights": [
            {"pathway_id": "p-stem", "subject_id": "math", "weight_value": 2},
            {"pathway_id": "p-stem", "subject_id": "physics", "weight_value": 1},
            {"pathway_id": "p-stem", "subject_id": "english", "weight_value": 0},
            {"pathway_id": "p-hum", "subject_id": "english", "weight_value": 2},
            {"pathway_id": "p-hum", "subject_id": "history", "weight_value": 1},
            {"pathway_id": "p-com", "subject_id": "math", "weight_value": 1},
            {"pathway_id": "p-com", "subject_id": "accounting", "weight_value": 2},
        ],
        "questions": [
            {"id": "q1", "question_text": "I enjoy solving equations.", "sort_order": 1,
             "pathway_weights": {"STEM": 1}},
            {"id": "q2", "question_text": "I like reading about the past.", "sort_order": 2,
             "pathway_weights": {"Humanities": 1, "Commerce": 0.5}},
            {"id": "q3", "question_text": "I would like to run a business.", "sort_order": 3,
             "pathway_weights": {"Commerce": 1, "STEM": 0}},
        ],
    }


@pytest.fixture
def student_records():
    return {
        "results": [
            {"student_id": STUDENT_ID, "subject_id": "math", "score": 80, "verified": True},
            {"student_id": STUDENT_ID, "subject_id": "physics", "score": 50, "verified": True},
            {"student_id": STUDENT_ID, "subject_id": "english", "score": 70, "verified": False},
            {"student_id": STUDENT_ID, "subject_id": "history", "score": 60, "verified": False},
        ],
        "responses": [
            {"student_id": STUDENT_ID, "question_id": "q1", "answer_value": 5},
            {"student_id": STUDENT_ID, "question_id": "q2", "answer_value": 3},
            {"student_id": STUDENT_ID, "question_id": "q3", "answer_value": 4},
        ],
    }


@pytest.fixture
def memory_store(catalog, student_records):
    return InMemoryStore(**catalog, **student_records)


@pytest.fixture
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def seeded_db(tables, catalog, student_records):
    """Catalog and student s1 written to the SQLite database and committed."""
    db = SessionLocal()
    try:
        db.add_all(Pathway(**row) for row in catalog["pathways"])
        db.add_all(Subject(**row) for row in catalog["subjects"])
        db.flush()
        db.add_all(PathwayWeight(**row) for row in catalog["weights"])
        db.add_all(InterestQuestion(**row) for row in catalog["questions"])
        db.flush()
        db.add_all(Result(**row) for row in student_records["results"])
        db.add_all(InterestResponse(**row) for row in student_records["responses"])
        db.commit()
    finally:
        db.close()


@pytest.fixture
def db_session(seeded_db):
    db = SessionLocal()
    yield db
    db.rollback()
    db.close()
