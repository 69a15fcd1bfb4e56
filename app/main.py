import logging
import os
from logging.handlers import RotatingFileHandler
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from app.core import config
from app.core.database import engine, Base, SessionLocal
from app.core.errors import (
    ForbiddenError,
    NotFoundError,
    StorageUnavailable,
    UploadError,
    ValidationError,
)
from app.api.routers import auth, proposals
from app.services.lifecycle import ProposalLifecycle
from app.services.store import RecordStore

# Configure Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("proposal_server")
handler = RotatingFileHandler(config.LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3)
formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
handler.setFormatter(formatter)
logger.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized.")

    db = SessionLocal()
    try:
        ProposalLifecycle(RecordStore(db)).expire_stale()
    except StorageUnavailable:
        logger.exception("Startup expiry sweep skipped.")
    finally:
        db.close()
    yield


app = FastAPI(title="Travel Proposals API", lifespan=lifespan)

# Mount routers
app.include_router(auth.router)
app.include_router(proposals.router)

os.makedirs(config.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=config.UPLOAD_DIR), name="uploads")

app.add_middleware(
    CORSMiddleware,  # type: ignore
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning(
        f"Validation failed on {request.method} {request.url.path}: "
        f"{exc.field}: {exc.message}"
    )
    return JSONResponse(
        status_code=400, content={"detail": exc.message, "field": exc.field}
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning(f"{exc.entity} {exc.entity_id} not found")
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(UploadError)
async def upload_error_handler(request: Request, exc: UploadError):
    logger.warning(f"Upload rejected: {exc}")
    return JSONResponse(
        status_code=400, content={"detail": exc.message, "fileName": exc.file_name}
    )


@app.exception_handler(ForbiddenError)
async def forbidden_handler(request: Request, exc: ForbiddenError):
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
    # Log the full error for server admins but show simple text to user
    logger.error(f"STORAGE ERROR on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        f"Malformed request {request.method} {request.url.path}: {exc.errors()}"
    )
    return JSONResponse(
        status_code=422, content={"detail": jsonable_encoder(exc.errors())}
    )


@app.get("/")
def read_root():
    return {"status": "ok", "service": "travel-proposals"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
