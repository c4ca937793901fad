"""FastAPI front end for the quiz: full pages, HTMX partials and the metrics panel.

This is a single-user local app. One SessionController lives on ``app.state``
and is shared by every browser tab and client that talks to the server, so a
second tab sees (and can restart) the same quiz. Overlapping intents are
rejected by the controller and reported as an alert.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from .config import load_settings
from .controller import SessionController
from .errors import QuizError
from .template_helpers import register_template_filters
from .transport import ScoringClient
from .view import build_view

logger = logging.getLogger(__name__)

PACKAGE_ROOT = Path(__file__).resolve().parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent
TEMPLATES_DIR = PROJECT_ROOT / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
register_template_filters(templates.env)

ALERT_EVENT = "quiz-alert"


def build_controller() -> SessionController:
    settings = load_settings()
    client = ScoringClient(settings.service_url, timeout=settings.timeout)
    return SessionController(
        client,
        session_length=settings.session_length,
        bkt_parameters=settings.bkt_parameters,
    )


def get_controller(app: FastAPI) -> SessionController:
    """Return the app's single controller, creating it on first use (e.g. in tests)."""
    controller: SessionController | None = getattr(app.state, "controller", None)
    if controller is None:
        controller = build_controller()
        app.state.controller = controller
    return controller


@asynccontextmanager
async def lifespan(app: FastAPI):
    controller = get_controller(app)
    yield
    await controller.client.aclose()


app = FastAPI(title="Adaptive Quiz", lifespan=lifespan)


def _is_hx(request: Request) -> bool:
    return request.headers.get("HX-Request", "false").lower() == "true"


def _render(request: Request, notice: str | None = None) -> Response:
    controller = get_controller(request.app)
    view = build_view(controller, notice=notice)
    context = {"page_title": "Adaptive Quiz", "view": view}
    if _is_hx(request):
        response = templates.TemplateResponse(request, "partials/quiz.html", context)
        if notice:
            # Blocking notification on the client side.
            response.headers["HX-Trigger"] = json.dumps({ALERT_EVENT: notice})
        return response
    return templates.TemplateResponse(request, "index.html", context)


def _notice(prefix: str, exc: Exception) -> str:
    logger.warning("%s: %s", prefix, exc)
    return f"{prefix}: {exc}"


@app.get("/", response_class=HTMLResponse)
async def index(request: Request) -> Response:
    return _render(request)


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/start", response_class=HTMLResponse)
async def start(request: Request, mode: str = Form(...)) -> Response:
    controller = get_controller(request.app)
    try:
        await controller.start_session(mode)
    except (QuizError, ValueError) as exc:
        return _render(request, _notice("Error starting session", exc))
    return _render(request)


@app.post("/answer", response_class=HTMLResponse)
async def answer(request: Request, option: str = Form(...)) -> Response:
    controller = get_controller(request.app)
    try:
        await controller.select_answer(option)
    except QuizError as exc:
        return _render(request, _notice("Error submitting answer", exc))
    return _render(request)


@app.post("/advance", response_class=HTMLResponse)
async def advance(request: Request) -> Response:
    controller = get_controller(request.app)
    try:
        await controller.advance()
    except QuizError as exc:
        return _render(request, _notice("Error loading question", exc))
    return _render(request)


@app.post("/restart", response_class=HTMLResponse)
async def restart(request: Request) -> Response:
    get_controller(request.app).restart()
    return _render(request)


@app.get("/metrics", response_class=HTMLResponse)
async def metrics_panel(request: Request) -> Response:
    controller = get_controller(request.app)
    try:
        metrics = await controller.refresh_metrics()
    except QuizError as exc:
        notice = _notice("Error loading metrics", exc)
        return templates.TemplateResponse(request, "partials/metrics.html", {"metrics": None, "notice": notice})
    context = {
        "metrics": metrics,
        "notice": None,
        "chart_json": json.dumps({
            "labels": list(metrics.knowledge_series.labels),
            "values": list(metrics.knowledge_series.values),
        }),
    }
    return templates.TemplateResponse(request, "partials/metrics.html", context)


def main() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("adaptive_quiz.app:app", host="127.0.0.1", port=8000, reload=True)


if __name__ == "__main__":
    main()
