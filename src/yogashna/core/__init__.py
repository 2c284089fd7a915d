"""Core business logic.

Modules:
- user_profile, enrollments, subscription_policy: account state and limits
- abhyasa_cycle, playlist_selection, program_library: practice playlists
- video_catalog, video_import, assets: content catalog
- practice_preferences, abhyasa_generator: personalized daily practice
- progress_tracking, achievements, mood_tracking: progress and badges
- favorites, continue_watching, safety_ack: per-user library state
"""

__all__ = [
    "abhyasa_cycle",
    "abhyasa_generator",
    "achievements",
    "assets",
    "continue_watching",
    "enrollments",
    "favorites",
    "mood_tracking",
    "playlist_selection",
    "practice_preferences",
    "program_library",
    "progress_tracking",
    "safety_ack",
    "subscription_policy",
    "user_profile",
    "video_catalog",
    "video_import",
]
