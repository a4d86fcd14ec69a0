import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fieldmap.config import settings
from fieldmap.modules.fields import router as fields_router
from fieldmap.modules.geometry import router as geometry_router
from fieldmap.modules.plots import router as plots_router

logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)

app = FastAPI(title=settings.PROJECT_NAME, version=settings.PROJECT_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register Modules
app.include_router(geometry_router.router)
app.include_router(fields_router.router)
app.include_router(plots_router.router)


@app.get("/")
def root():
    return {"message": f"{settings.PROJECT_NAME} is online. Use /docs for Swagger UI"}


@app.get("/healthz")
def healthz():
    return {"ok": True}
