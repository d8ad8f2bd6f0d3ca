"""
Skill Update Rule

Deterministic bounded adjustment of a skill's mastery and confidence in
response to a feedback signal. Returns a new node; the input is not mutated.
"""

import logging
from datetime import datetime
from typing import Literal, Optional

from mentor.exceptions import InvalidSkillActionError
from mentor.models.skill_graph import SkillHistoryEntry, SkillNode, utcnow

logger = logging.getLogger("mentor.skill_updater")

SkillAction = Literal["correct", "confusion", "struggle"]
SKILL_ACTIONS: tuple[str, ...] = ("correct", "confusion", "struggle")

MASTERY_INCREMENT = 0.05
MASTERY_DECREMENT = 0.03
CONFIDENCE_BOOST = 0.02
CONFIDENCE_DROP_ON_CONFUSION = 0.01
CONFIDENCE_DROP_ON_STRUGGLE = 0.10

# action -> (mastery delta, confidence delta)
_TRANSITIONS: dict[str, tuple[float, float]] = {
    "correct": (MASTERY_INCREMENT, CONFIDENCE_BOOST),
    "confusion": (-MASTERY_DECREMENT, -CONFIDENCE_DROP_ON_CONFUSION),
    "struggle": (0.0, -CONFIDENCE_DROP_ON_STRUGGLE),
}


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def update_skill(
    node: SkillNode,
    action: SkillAction,
    reason: str,
    now: Optional[datetime] = None,
) -> SkillNode:
    """
    Apply one feedback signal to a skill.

    Args:
        node: Current skill state
        action: "correct", "confusion" or "struggle"
        reason: Free text recorded in the history entry
        now: Timestamp for the update (defaults to current UTC time)

    Returns:
        New SkillNode with clamped mastery/confidence, ``last_updated = now``
        and one appended history entry whose ``change`` is the mastery delta
        actually applied.

    Raises:
        InvalidSkillActionError: action is not one of the three signals
    """
    if not isinstance(action, str) or action not in _TRANSITIONS:
        raise InvalidSkillActionError(action, SKILL_ACTIONS)

    now = now or utcnow()
    mastery_delta, confidence_delta = _TRANSITIONS[action]

    if mastery_delta:
        new_mastery = clamp(node.mastery_probability + mastery_delta)
    else:
        new_mastery = node.mastery_probability
    new_confidence = clamp(node.confidence + confidence_delta)

    entry = SkillHistoryEntry(
        timestamp=now,
        change=new_mastery - node.mastery_probability,
        reason=reason,
    )

    updated = node.model_copy(
        update={
            "mastery_probability": new_mastery,
            "confidence": new_confidence,
            "last_updated": now,
            "history": [*node.history, entry],
        }
    )

    logger.info(
        f"Skill {node.id} {action}: mastery {node.mastery_probability:.2f} -> {new_mastery:.2f}, "
        f"confidence {node.confidence:.2f} -> {new_confidence:.2f}"
    )
    return updated
