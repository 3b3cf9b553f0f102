import logging

from fastapi import FastAPI

from backend import config
from backend.routes.insights import router as insights_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)

app = FastAPI(title="KnowSphere Relevance")

app.include_router(insights_router, prefix="/api")

@app.get("/")
def root():
    return {"message": "KnowSphere relevance service is running"}
