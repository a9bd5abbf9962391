from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from config import Config
from db import Base, engine
from recommendation import models  # noqa: F401  registers tables on Base.metadata
from recommendation.routes import router as recommendation_router

logging.basicConfig(level=Config.LOG_LEVEL)
logging.info("App starting with DATABASE_URL")

app = FastAPI(title="Pathway Recommendation Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in Config.CORS_ORIGINS.split(",")],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)

app.include_router(recommendation_router)


@app.get("/", tags=["meta"])
def root():
    return {"service": "pathway-recommendation", "status": "ok"}
