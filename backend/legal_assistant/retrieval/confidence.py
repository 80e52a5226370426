"""Confidence heuristic for a chat answer.

Derived only from how much grounding retrieval found; it is not a probability.
"""

MAX_CONFIDENCE = 95
GROUNDED_BASE = 70
PER_DOCUMENT = 10
DOCUMENT_BONUS_CAP = 30
RICH_CONTEXT_CHARS = 500
RICH_CONTEXT_BONUS = 10


def score(document_count: int, context_length: int) -> int:
    """Score in [0, 95]; zero when nothing was retrieved."""
    if document_count <= 0:
        return 0

    value = GROUNDED_BASE + min(document_count * PER_DOCUMENT, DOCUMENT_BONUS_CAP)
    if context_length > RICH_CONTEXT_CHARS:
        value += RICH_CONTEXT_BONUS
    return min(value, MAX_CONFIDENCE)
