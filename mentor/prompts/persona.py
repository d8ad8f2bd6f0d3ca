"""
Persona Synthesizer

Projects the skill state for the topics in play into a plain-text
calibration block for the mentor's system prompt.
"""

from typing import Iterable

from mentor.models.skill_graph import SkillCategory, SkillNode, UserSkillContext
from mentor.prompts.templates import PromptTemplate, bulleted


UNKNOWN_SKILL_FALLBACK = (
    "User skill level is unknown. Assume beginner level and explain concepts clearly."
)

PERSONA_TEMPLATE = PromptTemplate(
    """User Skill Context:
{skill_lines}

Teaching Strategy:
- For low mastery skills (< 0.5), provide step-by-step explanations and analogies.
- For intermediate skills (0.5 - 0.8), focus on structured explanations and best practices.
- For high mastery skills (> 0.8), be concise, discuss trade-offs, and edge cases.
- If confidence is low, verify understanding frequently.""",
    name="persona",
)


def format_skill_line(skill: SkillNode) -> str:
    return (
        f"{skill.name}: {skill.level} "
        f"(Mastery: {skill.mastery_probability:.2f}, Confidence: {skill.confidence:.2f})"
    )


def synthesize_persona(context: UserSkillContext, relevant_categories: Iterable[SkillCategory]) -> str:
    """
    Render the calibration block for the skills in the relevant categories.

    Only the category field is matched here. With no matching skill the fixed
    beginner fallback is returned.
    """
    wanted = set(relevant_categories)
    relevant = [skill for skill in context.skills.values() if skill.category in wanted]

    if not relevant:
        return UNKNOWN_SKILL_FALLBACK

    lines = bulleted(format_skill_line(skill) for skill in relevant)
    return PERSONA_TEMPLATE.render(skill_lines=lines)
