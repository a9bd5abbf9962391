"""
Recommendation Errors

Each error kind carries a stable `code` and a user-facing `message` so the
presentation layer can map it without string matching.
"""


class RecommendationError(Exception):
    code = "recommendation_error"
    message = "Could not compute recommendation."

    def __init__(self, message: str = None, student_id: str = None):
        self.message = message or self.message
        self.student_id = student_id
        super().__init__(self.message)


class MissingAcademicData(RecommendationError):
    code = "missing_academic_data"
    message = "No academic results found. Please wait for your examiner to upload results."


class MissingInterestData(RecommendationError):
    code = "missing_interest_data"
    message = "Please complete the interest assessment first."


class PersistenceFailure(RecommendationError):
    code = "persistence_failure"
    message = "Could not save recommendation. Please try again or contact your administrator."


class UnresolvedPathwayKey(RecommendationError):
    code = "unresolved_pathway_key"
    message = "An interest question references a pathway that does not exist."

    def __init__(self, key: str, question_id: str = None):
        self.key = key
        self.question_id = question_id
        super().__init__(
            f"Interest question {question_id} weights unknown pathway '{key}'."
        )


class InvalidSubmission(RecommendationError):
    code = "invalid_submission"
    message = "The submitted data references unknown records."


class InvalidConfiguration(RecommendationError):
    code = "invalid_configuration"
    message = "The recommendation engine is misconfigured. Please contact your administrator."
