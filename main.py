import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import get_settings
from core.database import create_db_and_tables
from core.exceptions import register_exception_handlers
from routes.auth import router as auth_router
from routes.profile import router as profile_router
from routes.users import router as users_router
from routes.projects import router as project_router
from routes.members import router as members_router
from routes.tasks import router as tasks_router
from routes.calendar import router as calendar_router
from routes.time_tracking import router as time_tracking_router

load_dotenv()
settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# =========================================
# 🏁 Lifespan (DB initialization)
# =========================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("✅ %s started.", app.title)
    yield
    logger.info("✅ %s shutting down.", app.title)


def build_app(title: str) -> FastAPI:
    app = FastAPI(
        lifespan=lifespan,
        title=title,
        docs_url=None if settings.IS_PRODUCTION else "/docs",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # =========================================
    # 🩺 Health Check
    # =========================================
    @app.get("/health")
    def health_check():
        return {"status": "ok", "message": f"{title} is running"}

    return app


# =========================================
#  🔐 Identity service: uvicorn main:auth_app --port 8080
# =========================================
auth_app = build_app("TaskPilot Identity Service")
auth_app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
auth_app.include_router(users_router, prefix="/auth", tags=["Users"])
auth_app.include_router(profile_router, prefix="/auth", tags=["Profile"])


# =========================================
#  📁 Project service: uvicorn main:project_app --port 8090
# =========================================
project_app = build_app("TaskPilot Project Service")
project_app.include_router(project_router, prefix="/projects", tags=["Projects"])
project_app.include_router(members_router, prefix="/projects", tags=["Project Members"])
project_app.include_router(tasks_router, prefix="/projects", tags=["Tasks"])
project_app.include_router(calendar_router, prefix="/projects", tags=["Calendar"])
project_app.include_router(time_tracking_router, prefix="/projects", tags=["Time Tracking"])
