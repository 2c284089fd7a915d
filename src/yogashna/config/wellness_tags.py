"""Wellness focus and goal tag code mappings.

Maps display names used by the mobile client to the tag codes stored in
the database (the `code` column seeded by yogashna.db.seed).

Some goal names appear under several focuses ("Better Sleep", "Stress
Relief"), so goal lookup needs the focus as context.
"""

from __future__ import annotations

WELLNESS_FOCUS_TO_CODE: dict[str, str] = {
    "Health Support": "health_support",
    "Lifestyle & Habits": "lifestyle_habits",
    "Fitness & Flexibility": "fitness_flexibility",
    "Beginners & Mindfulness": "beginners_mindfulness",
    "Office Yoga": "office_yoga",
}

WELLNESS_FOCUS_FROM_CODE: dict[str, str] = {
    code: label for label, code in WELLNESS_FOCUS_TO_CODE.items()
}

# focus code -> goal display name -> goal code
WELLNESS_GOAL_MAPPINGS: dict[str, dict[str, str]] = {
    "health_support": {
        "Back Pain Relief": "reduce_back_pain",
        "Stress Relief": "stress_relief_health",
        "Diabetes Support": "diabetes_support",
        "PCOS Balance": "pcos_balance",
        "Thyroid Support": "thyroid_support",
        "Better Sleep": "better_sleep_health",
    },
    "lifestyle_habits": {
        "Daily Routine": "daily_routine",
        "Better Sleep": "better_sleep_lifestyle",
        "Mindful Living": "mindful_living",
        "Discipline & Consistency": "discipline_consistency",
        "Energy Boost": "energy_boost",
    },
    "fitness_flexibility": {
        "Weight Loss": "weight_loss",
        "Strength Building": "strength_building",
        "Flexibility": "flexibility",
        "Posture सुधार": "posture_improvement",
        "Core Stability": "core_stability",
    },
    "beginners_mindfulness": {
        "Beginner Friendly": "beginner_friendly",
        "Breathing Practice": "breathing_practice",
        "Calm Mind": "calm_mind",
        "Anxiety Relief": "anxiety_relief",
        "Focus & Clarity": "focus_clarity",
    },
    "office_yoga": {
        "Neck & Shoulder Relief": "neck_shoulder_relief",
        "Back Release": "back_release",
        "Desk Stretching": "desk_stretching",
        "Stress Relief": "stress_relief_office",
        "Energy at Work": "energy_at_work",
    },
}

WELLNESS_GOAL_CODE_TO_LABEL: dict[str, str] = {
    code: label
    for mapping in WELLNESS_GOAL_MAPPINGS.values()
    for label, code in mapping.items()
}


def get_wellness_focus_code(display_name: str | None) -> str | None:
    """Convert wellness focus display name to tag code."""
    if not display_name:
        return None
    return WELLNESS_FOCUS_TO_CODE.get(display_name)


def get_wellness_focus_label(code: str | None) -> str | None:
    if not code:
        return None
    return WELLNESS_FOCUS_FROM_CODE.get(code)


def get_wellness_goal_code(
    goal_display_name: str | None,
    wellness_focus_display_name: str | None,
) -> str | None:
    """Convert a goal display name to its tag code within a focus.

    Args:
        goal_display_name: Goal label from the client (e.g. "Better Sleep")
        wellness_focus_display_name: Focus label (e.g. "Health Support")

    Returns:
        Goal tag code, or None when either name is unknown
    """
    if not goal_display_name or not wellness_focus_display_name:
        return None

    focus_code = get_wellness_focus_code(wellness_focus_display_name)
    if not focus_code:
        return None

    return WELLNESS_GOAL_MAPPINGS.get(focus_code, {}).get(goal_display_name)


def get_wellness_goal_label(code: str | None) -> str | None:
    if not code:
        return None
    return WELLNESS_GOAL_CODE_TO_LABEL.get(code)
