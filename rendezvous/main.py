from contextlib import asynccontextmanager

from fastapi import FastAPI
from rendezvous.core.config import settings
from rendezvous.core.exceptions import register_exception_handlers
from rendezvous.core.redis import notifier
from rendezvous.db.session import init_db
from rendezvous.middleware.log_middleware import LogMiddleware

@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield
    await notifier.close()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

from fastapi.middleware.cors import CORSMiddleware

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LogMiddleware)
register_exception_handlers(app)

@app.get("/")
async def root():
    return {"message": "Welcome to RendezVous API"}

from rendezvous.api.api import api_router
app.include_router(api_router, prefix=settings.API_V1_STR)
