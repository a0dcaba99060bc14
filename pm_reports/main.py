import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pm_reports.core import config
from pm_reports.api import activity, dashboard, reports

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Project Dashboard Reports")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reports.router)
app.include_router(dashboard.router)
app.include_router(activity.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
