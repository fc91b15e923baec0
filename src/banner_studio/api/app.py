from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from banner_studio.config import settings
from banner_studio.errors import UnknownFilterError
from banner_studio.presets import ASPECT_RATIOS, EDIT_FILTERS, filter_instruction
from banner_studio.session import BannerSession
from banner_studio.storage import SessionStore

logger = logging.getLogger(__name__)

app = FastAPI(title="banner_studio")

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

app.state.store = SessionStore()


def _parse_bool(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _session(request: Request) -> BannerSession:
    store: SessionStore = request.app.state.store
    store.prune()
    return store.get_or_create(request.cookies.get(settings.session_cookie))


def _with_cookie(response: Response, session: BannerSession) -> Response:
    response.set_cookie(settings.session_cookie, session.session_id, httponly=True, samesite="lax")
    return response


def _back(session: BannerSession) -> Response:
    return _with_cookie(RedirectResponse(url="/", status_code=303), session)


@app.get("/", response_class=HTMLResponse)
def index(request: Request):
    session = _session(request)
    response = templates.TemplateResponse(
        request=request,
        name="index.html",
        context={
            "state": session.snapshot(),
            "aspect_ratios": ASPECT_RATIOS,
            "filters": list(EDIT_FILTERS),
        },
    )
    return _with_cookie(response, session)


@app.get("/state")
def state(request: Request):
    session = _session(request)
    return _with_cookie(JSONResponse(session.snapshot()), session)


@app.post("/thumbnail")
async def fetch_thumbnail(request: Request, youtube_url: str = Form("")):
    session = _session(request)
    await session.fetch_thumbnail(youtube_url.strip())
    return _back(session)


@app.post("/reference/clear")
def clear_reference(request: Request):
    session = _session(request)
    session.clear_reference_image()
    return _back(session)


@app.post("/person")
async def upload_person(request: Request, file: UploadFile | None = File(None)):
    session = _session(request)
    if file is None:
        return _back(session)
    content = await file.read()
    # the browser posts an empty part when no file was picked
    if not file.filename and not content:
        return _back(session)
    session.load_person_image(file.content_type, content)
    return _back(session)


@app.post("/person/clear")
def clear_person(request: Request):
    session = _session(request)
    session.clear_person_image()
    return _back(session)


@app.post("/generate")
async def generate(
    request: Request,
    prompt: str = Form(""),
    aspect_ratio: str = Form(ASPECT_RATIOS[0][1]),
    use_deep_research: str | None = Form(None),
):
    session = _session(request)
    await session.generate(prompt, aspect_ratio=aspect_ratio, use_deep_research=_parse_bool(use_deep_research))
    return _back(session)


@app.post("/edit")
async def edit(request: Request, edit_prompt: str = Form("")):
    session = _session(request)
    await session.edit(edit_prompt)
    return _back(session)


@app.post("/filters/{name}")
async def apply_filter(request: Request, name: str):
    try:
        filter_instruction(name)
    except UnknownFilterError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    session = _session(request)
    await session.apply_filter(name)
    return _back(session)


@app.get("/image")
def current_image(request: Request):
    session = _session(request)
    if session.result is None:
        raise HTTPException(status_code=404, detail="no image generated yet")
    return Response(content=session.result.to_bytes(), media_type=session.result.mime_type)


@app.get("/download")
def download_image(request: Request):
    session = _session(request)
    if session.result is None:
        raise HTTPException(status_code=404, detail="no image generated yet")
    filename = session.download_filename()
    return Response(
        content=session.result.to_bytes(),
        media_type=session.result.mime_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
