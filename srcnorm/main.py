from fastapi import FastAPI, UploadFile, File, HTTPException
from pydantic import ValidationError

from .models import TransformOptions, TransformResponse, HealthResponse
from .normalize import transform_source_bytes
from .rules import DEFAULT_TAB_WIDTH
from .walker import has_source_extension

app = FastAPI(
    title="source-normalizer",
    description="Deterministic whitespace and brace-spacing cleanup for C-family sources",
    version="0.1.0",
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/transform", response_model=TransformResponse)
async def transform_source(
    file: UploadFile = File(...),
    expand: bool = False,
    unexpand: bool = False,
    tab_width: int = DEFAULT_TAB_WIDTH,
):
    if not file.filename or not has_source_extension(file.filename):
        raise HTTPException(status_code=422, detail="Only C-family source files are supported")

    try:
        options = TransformOptions(tab_width=tab_width, expand=expand, unexpand=unexpand)
    except ValidationError:
        raise HTTPException(status_code=422, detail="tab_width must be a positive integer")

    raw = await file.read()
    result = transform_source_bytes(raw, options)
    if result is None:
        raise HTTPException(status_code=422, detail="Binary files are not supported")
    return result
