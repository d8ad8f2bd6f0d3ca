"""Single-turn feedback signal extraction from user text."""

from typing import Literal, Optional

Sentiment = Literal["correct", "confusion"]

CORRECT_MARKERS = ("understood", "got it", "thanks", "clear")
CONFUSION_MARKERS = ("confused", "dont understand", "hard", "what?")


def classify_sentiment(text: str) -> Optional[Sentiment]:
    """
    Classify a message as ``correct``, ``confusion`` or no signal (None).

    ``correct`` markers are checked first and win when both kinds appear.
    "struggle" needs multi-turn history and is never returned here; it only
    arrives through explicit feedback.
    """
    lowered = text.lower()
    if any(marker in lowered for marker in CORRECT_MARKERS):
        return "correct"
    if any(marker in lowered for marker in CONFUSION_MARKERS):
        return "confusion"
    return None
