"""
HTTP service for the floorplan sandbox.

Routes:
- POST /api/analyze
  {"pages": [{"id": "page-1", "index": 1, "thumbnail": "data:image/png;base64,..."}],
   "classification": "residential", "customRoomTypes": [{"label": "Lab", "color": "#123456"}]}
  Returns: {"rooms": {"page-1": [RoomDetection, ...]}} (plus "fallback": true
  when no segmentation model is configured)
- POST /api/analysis
  {"pageIndex": 0, "classification": "commercial", "customRoomTypes": [...]}
  Returns: {"rooms": [RoomDetection, ...]} from the mock detector
"""

import logging
from typing import Any, List, Optional

from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import AnalysisConfig
from .inference import FloorplanAnalyzer
from .mock_detector import mock_analyze_rooms
from .models import ConstructionType, PageInput
from .room_types import sanitize_custom_types

log = logging.getLogger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


class PageIn(BaseModel):
    id: str
    index: int = Field(ge=0)
    thumbnail: str


class AnalyzeRequest(BaseModel):
    pages: List[PageIn] = []
    classification: Optional[ConstructionType] = None
    customRoomTypes: Optional[List[Any]] = None


class AnalysisRequest(BaseModel):
    pageIndex: int = Field(ge=0)
    classification: ConstructionType
    customRoomTypes: Optional[List[Any]] = None


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(messages)


def create_app(analyzer: Optional[FloorplanAnalyzer] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        analyzer: Analyzer to serve; built from the environment if None

    Returns:
        FastAPI app
    """
    if analyzer is None:
        analyzer = FloorplanAnalyzer.from_config(AnalysisConfig.from_env())

    app = FastAPI(title="Floorplan Sandbox", version="0.1.0")
    app.state.analyzer = analyzer

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": _format_validation_errors(exc)},
        )

    @app.post("/api/analyze")
    def analyze(req: AnalyzeRequest):
        if not req.pages:
            return JSONResponse(
                status_code=400,
                content={"error": "At least one page is required"},
            )

        pages = [PageInput(id=p.id, index=p.index, thumbnail=p.thumbnail) for p in req.pages]
        custom_types = sanitize_custom_types(req.customRoomTypes)

        try:
            result = analyzer.analyze_pages(pages, req.classification, custom_types)
        except Exception:
            log.exception("Analyze request failed")
            return JSONResponse(
                status_code=500,
                content={"error": "Unable to analyze floorplan pages"},
            )

        content = {"rooms": result.rooms_to_dict()}
        if result.fallback:
            content["fallback"] = True
        return JSONResponse(content=content, headers=NO_STORE)

    @app.post("/api/analysis")
    def analysis(req: AnalysisRequest):
        custom_types = sanitize_custom_types(req.customRoomTypes)
        rooms = mock_analyze_rooms(req.pageIndex, req.classification, custom_types)
        return {"rooms": [room.to_dict() for room in rooms]}

    return app


# `uvicorn floorplan_sandbox.service:app` reads .env from the working directory
load_dotenv(find_dotenv(usecwd=True))
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
