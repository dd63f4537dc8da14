import io
import logging
import os
from typing import Any, Dict

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from tracker_parser.normalize import parse_to_normalized

from .parsers import DocumentReadError
from .version import APP_VERSION

app = FastAPI(title="KPI Tracker API")

logger = logging.getLogger(__name__)

serve_frontend = os.getenv("SERVE_FRONTEND", "0").lower() in {
    "1",
    "true",
    "yes",
    "on",
}

# CORS voor local dev (pas aan indien nodig)
if not serve_frontend:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173"],
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.get("/api/system/version")
def api_get_version() -> Dict[str, str]:
    return {"version": APP_VERSION}


@app.post("/api/uploads")
async def upload_report(file: UploadFile = File(...)) -> Dict[str, Any]:
    if not file.filename:
        raise HTTPException(400, "Missing filename")
    if not file.filename.lower().endswith(".pdf"):
        raise HTTPException(400, "Unsupported file type (use .pdf)")

    # volledig in het geheugen; het rapport wordt niet op schijf bewaard
    data = await file.read()
    try:
        parse_id, report = parse_to_normalized(io.BytesIO(data), file.filename)
    except DocumentReadError as exc:
        logger.warning("Kon %s niet lezen: %s", file.filename, exc)
        raise HTTPException(422, "Could not read PDF") from exc

    return {
        "parse_id": parse_id,
        "status": "ready",
        "report": report.model_dump(),
    }
