"""
Scoring Engine Constants

Defines the blend weights, scales, bounds and enums used by the pathway scoring engine.
All values are fixed policy: the formula is deterministic with no AI/ML components.
"""

from enum import Enum

# =============================================================================
# SCORE BLEND
# =============================================================================

# Academic performance counts roughly 2.3x self-reported interest
ACADEMIC_WEIGHT = 0.7
INTEREST_WEIGHT = 0.3

# Optimistic linear scaling of the final score. Not a calibrated confidence.
CONFIDENCE_SCALE = 1.1

# =============================================================================
# BOUNDS
# =============================================================================

MIN_SCORE = 0.0
MAX_SCORE = 100.0

MIN_CONFIDENCE = 0
MAX_CONFIDENCE = 100

# Likert scale used by the interest questionnaire
MIN_ANSWER_VALUE = 1
MAX_ANSWER_VALUE = 5

# Subject weight applied when an admin has not set one explicitly
DEFAULT_WEIGHT_VALUE = 1.0

# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

SCORE_DECIMALS = 2

EXPLANATION_TEMPLATE = "Academic: {academic}% | Interest: {interest}%"

ENGINE_VERSION = "1.0.0"

# =============================================================================
# ENUMS
# =============================================================================

class InterestWeightKeying(str, Enum):
    """How keys of a question's pathway_weights mapping are matched to pathways."""
    NAME = "name"                # keyed by pathway name, unknown names silently ignored
    ID = "id"                    # keyed by pathway id
    STRICT_NAME = "strict_name"  # keyed by name, every key must resolve to a pathway
