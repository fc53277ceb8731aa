import logging
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from config import settings
from api.errors import register_exception_handlers
from api.routes import auth, events, registrations, student, organizer, faculty, storage
from database.database import init_db
from services.scheduler import start_scheduler, stop_scheduler
from services.storage import MEDIA_URL_PREFIX

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database initialized")
    start_scheduler()
    try:
        yield
    finally:
        stop_scheduler()


app = FastAPI(title="Campus Events API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded posters
media_path = Path(settings.MEDIA_ROOT)
media_path.mkdir(parents=True, exist_ok=True)
app.mount(MEDIA_URL_PREFIX, StaticFiles(directory=str(media_path)), name="media")

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(events.router)
app.include_router(registrations.router)
app.include_router(student.router)
app.include_router(organizer.router)
app.include_router(faculty.router)
app.include_router(storage.router)


@app.get("/")
async def root():
    return {"message": "Campus Events API"}


@app.get("/health")
async def health():
    return {"status": "ok"}


def run():
    import uvicorn
    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    run()
