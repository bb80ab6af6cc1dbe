from fastapi import FastAPI, UploadFile, File, HTTPException
from . import __version__
from .config import Settings
from .errors import FatalError
from .logging import configure_logging
from .models import NormalizeResponse, HealthResponse
from .normalize import normalize_registry_bytes

configure_logging(Settings().log_level)

app = FastAPI(
    title="epp-repo-ids",
    description="Validated EPP Repository Identifier database from the IANA registry CSV",
    version=__version__,
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/normalize", response_model=NormalizeResponse)
async def normalize_registry(file: UploadFile = File(...)):
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    try:
        return normalize_registry_bytes(raw)
    except FatalError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
