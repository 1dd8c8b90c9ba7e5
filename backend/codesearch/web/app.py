"""Main FastAPI application."""

import logging

from fastapi import FastAPI, APIRouter
from fastapi.middleware.cors import CORSMiddleware

from .database import engine, Base
from .routes import indexing, projects, search

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="codesearch")

# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_router = APIRouter(prefix="/api")

api_router.include_router(projects.router)
api_router.include_router(indexing.router)
api_router.include_router(search.router)

app.include_router(api_router)


@app.on_event("startup")
def _create_tables() -> None:
    Base.metadata.create_all(bind=engine)
