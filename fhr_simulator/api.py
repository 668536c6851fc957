# /fhr_simulator/api.py
import logging
import threading
from contextlib import contextmanager
from dataclasses import asdict
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .api_models import (
    AccelerationEventModel, CommandResponse, CorrectAnswerResponse, MarkerModel,
    OverlayStateModel, PointerEventParams, PointerEventResponse, StripResponse
)
from .chart_rendering import ChartDisplayList, render_png
from .config import SimulatorSettings, get_settings
from .grid_mapping import SurfaceSize
from .session import StripSession

logger = logging.getLogger(__name__)


def create_app(settings: Optional[SimulatorSettings] = None) -> FastAPI:
    """
    Local host for a single learner's strip.

    The app owns exactly one StripSession; a fresh strip is generated on
    start-up, the same way the page does on load. Handlers run in the
    worker threadpool, so every session access holds `app.state.session_lock`
    and no request ever sees a strip mid-regeneration.
    """
    settings = settings or get_settings()
    app = FastAPI(title="FHR Strip Simulator API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.session = StripSession.seeded(settings.seed)
    app.state.session_lock = threading.Lock()
    app.state.session.regenerate()

    @contextmanager
    def locked_session(request: Request):
        with request.app.state.session_lock:
            yield request.app.state.session

    def fhr_surface(width: Optional[float] = Query(None, gt=0), height: Optional[float] = Query(None, gt=0),
                    css_width: Optional[float] = Query(None, gt=0)) -> SurfaceSize:
        return SurfaceSize(width or settings.surface.width, height or settings.surface.fhr_height, css_width)

    def toco_surface(width: Optional[float] = Query(None, gt=0), height: Optional[float] = Query(None, gt=0),
                     css_width: Optional[float] = Query(None, gt=0)) -> SurfaceSize:
        return SurfaceSize(width or settings.surface.width, height or settings.surface.toco_height, css_width)

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    # --- Strip lifecycle ---
    @app.post("/strip/regenerate", response_model=CommandResponse)
    def regenerate_strip(request: Request):
        with locked_session(request) as session:
            return CommandResponse(dirty=session.regenerate())

    @app.get("/strip", response_model=StripResponse)
    def get_strip(request: Request):
        with locked_session(request) as session:
            overlays = session.overlays
            accelerations = None
            if overlays.show_accel_truth:
                accelerations = [AccelerationEventModel(**asdict(e)) for e in session.accelerations]
            return StripResponse(
                fhr_trace=session.fhr_trace.tolist(),
                toco_trace=session.toco_trace.tolist(),
                markers=[MarkerModel(x_norm=m.x_norm) for m in session.markers],
                overlays=OverlayStateModel(**asdict(overlays)),
                accelerations=accelerations,
                baseline=session.baseline if overlays.show_baseline else None,
            )

    @app.get("/strip/answer", response_model=CorrectAnswerResponse)
    def get_correct_answer(request: Request):
        with locked_session(request) as session:
            answer = session.get_correct_answer()
        if answer is None:
            raise HTTPException(status_code=404, detail="No strip has been generated")
        return CorrectAnswerResponse(**asdict(answer), range_text=answer.range_text)

    # --- Quiz checks ---
    @app.post("/strip/reveal/baseline", response_model=CommandResponse)
    def reveal_baseline(request: Request):
        with locked_session(request) as session:
            return CommandResponse(dirty=session.reveal_baseline(), text=f"{session.baseline} bpm")

    @app.post("/strip/reveal/accelerations", response_model=CommandResponse)
    def reveal_accelerations(request: Request):
        with locked_session(request) as session:
            return CommandResponse(dirty=session.reveal_acceleration_truth())

    @app.post("/strip/reveal/variability", response_model=CommandResponse)
    def reveal_variability(request: Request):
        with locked_session(request) as session:
            return CommandResponse(dirty=False, text=session.reveal_variability())

    @app.post("/strip/reveal/range", response_model=CommandResponse)
    def reveal_range(request: Request):
        with locked_session(request) as session:
            return CommandResponse(dirty=False, text=session.reveal_range())

    # --- Markers ---
    @app.post("/markers", response_model=CommandResponse)
    def add_marker(request: Request):
        with locked_session(request) as session:
            return CommandResponse(dirty=session.add_marker())

    @app.post("/pointer/down", response_model=PointerEventResponse)
    def pointer_down(params: PointerEventParams, request: Request):
        with locked_session(request) as session:
            result = session.pointer_down(params.x, params.y, params.width, params.height, is_touch=params.is_touch)
            return PointerEventResponse(**asdict(result), dragging_index=session.marker_model.dragging_index)

    @app.post("/pointer/move", response_model=PointerEventResponse)
    def pointer_move(params: PointerEventParams, request: Request):
        with locked_session(request) as session:
            result = session.pointer_move(params.x, params.width, is_touch=params.is_touch)
            return PointerEventResponse(**asdict(result), dragging_index=session.marker_model.dragging_index)

    @app.post("/pointer/up", response_model=PointerEventResponse)
    def pointer_up(request: Request):
        with locked_session(request) as session:
            result = session.pointer_up()
        return PointerEventResponse(**asdict(result), dragging_index=None)

    # --- Rendering ---
    @app.get("/render/fhr", response_model=ChartDisplayList)
    def render_fhr(request: Request, surface: SurfaceSize = Depends(fhr_surface)):
        with locked_session(request) as session:
            return session.render_fhr(surface)

    @app.get("/render/toco", response_model=ChartDisplayList)
    def render_toco(request: Request, surface: SurfaceSize = Depends(toco_surface)):
        with locked_session(request) as session:
            return session.render_toco(surface)

    @app.get("/render/fhr.png")
    def render_fhr_png(request: Request, surface: SurfaceSize = Depends(fhr_surface)):
        with locked_session(request) as session:
            chart = session.render_fhr(surface)
        return Response(content=render_png(chart), media_type="image/png")

    @app.get("/render/toco.png")
    def render_toco_png(request: Request, surface: SurfaceSize = Depends(toco_surface)):
        with locked_session(request) as session:
            chart = session.render_toco(surface)
        return Response(content=render_png(chart), media_type="image/png")

    logger.debug("Strip simulator app created (seed=%s)", settings.seed)
    return app
