import logging

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workspace_api.config import get_settings
from workspace_api.controllers.execution import router as execution_router
from workspace_api.controllers.files import router as files_router
from workspace_api.controllers.health import router as health_router
from workspace_api.errors import register_exception_handlers
from workspace_api.lifespan import lifespan
from workspace_api.middleware import HTTPLogMiddleware

settings = get_settings()

app = FastAPI(title="Workspace Execution API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.debug.request:
    logging.getLogger("workspace_api.http").setLevel(logging.DEBUG)
    app.add_middleware(HTTPLogMiddleware)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(files_router)
app.include_router(execution_router)
