"""Route handlers for the Web API."""

from yogashna.web.routes.health import router as health_router
from yogashna.web.routes.profile import router as profile_router
from yogashna.web.routes.me import router as me_router
from yogashna.web.routes.abhyasa_cycle import router as abhyasa_cycle_router
from yogashna.web.routes.videos import router as videos_router
from yogashna.web.routes.video_assets import router as video_assets_router
from yogashna.web.routes.program_templates import router as program_templates_router
from yogashna.web.routes.practice import router as practice_router
from yogashna.web.routes.progress import router as progress_router
from yogashna.web.routes.library_state import router as library_state_router

__all__ = [
    "health_router",
    "profile_router",
    "me_router",
    "abhyasa_cycle_router",
    "videos_router",
    "video_assets_router",
    "program_templates_router",
    "practice_router",
    "progress_router",
    "library_state_router",
]
