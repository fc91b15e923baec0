import pytest
from fastapi.testclient import TestClient

from banner_studio.api.app import app
from banner_studio.config import settings
from banner_studio.errors import ErrorKind, InvalidLinkError, MissingCredentialError, ServiceError
from banner_studio.images import EmbeddableImage
from banner_studio.storage import SessionStore
from banner_studio.thumbnails import extract_video_id

from conftest import FakeProvider

THUMB = EmbeddableImage.from_bytes(b"thumb-bytes", "image/jpeg")


async def fake_fetch(url):
    if not extract_video_id(url):
        raise InvalidLinkError()
    return THUMB


@pytest.fixture
def provider():
    return FakeProvider(image=EmbeddableImage.from_bytes(b"banner-bytes", "image/jpeg"))


@pytest.fixture
def client(provider):
    original = app.state.store
    app.state.store = SessionStore(provider_factory=lambda: provider, thumbnail_fetcher=fake_fetch)
    with TestClient(app, follow_redirects=False) as c:
        yield c
    app.state.store = original


def _state(client):
    resp = client.get("/state")
    assert resp.status_code == 200
    return resp.json()


def test_index_sets_session_cookie(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert settings.session_cookie in resp.cookies
    assert "Generate banner" in resp.text
    assert "Landscape" in resp.text


def test_generate_flow(client, provider):
    resp = client.post("/generate", data={"prompt": "a red kite over a beach", "aspect_ratio": "16:9"})
    assert resp.status_code == 303
    assert resp.headers["location"] == "/"

    state = _state(client)
    assert state["error"] is None
    assert state["result"] == EmbeddableImage.from_bytes(b"banner-bytes", "image/jpeg").data_url
    assert provider.compose_calls[0].use_deep_research is False
    assert provider.synthesize_calls == [(provider.composed, "16:9")]

    image = client.get("/image")
    assert image.content == b"banner-bytes"
    assert image.headers["content-type"] == "image/jpeg"

    download = client.get("/download")
    assert download.content == b"banner-bytes"
    assert "ai-banner-a_red_kite_over_a_be.jpeg" in download.headers["content-disposition"]
    assert download.headers["content-disposition"].startswith("attachment")


def test_generate_deep_research_checkbox(client, provider):
    client.post("/generate", data={"prompt": "x", "aspect_ratio": "1:1", "use_deep_research": "on"})
    assert provider.compose_calls[0].use_deep_research is True


def test_empty_prompt_does_nothing(client, provider):
    client.post("/generate", data={"prompt": "", "aspect_ratio": "16:9"})
    assert provider.compose_calls == []
    assert _state(client)["phase"] == "idle"


def test_missing_key_is_reported(client):
    def no_key():
        raise MissingCredentialError()

    app.state.store.provider_factory = no_key
    client.post("/generate", data={"prompt": "hello", "aspect_ratio": "16:9"})

    state = _state(client)
    assert state["error"] == "GEMINI_API_KEY environment variable not set."
    assert state["result"] is None


def test_edit_and_filter(client, provider):
    client.post("/generate", data={"prompt": "banner", "aspect_ratio": "16:9"})

    client.post("/edit", data={"edit_prompt": "make it night"})
    assert provider.edit_calls[-1][1] == "make it night"
    assert _state(client)["edit_prompt"] == ""

    resp = client.post("/filters/Cinematic")
    assert resp.status_code == 303
    assert "cinematic color grade" in provider.edit_calls[-1][1]


def test_unknown_filter_is_404(client):
    resp = client.post("/filters/sepia")
    assert resp.status_code == 404


def test_thumbnail_routes(client):
    client.post("/thumbnail", data={"youtube_url": "https://youtu.be/dQw4w9WgXcQ"})
    assert _state(client)["reference_image"] == THUMB.data_url

    client.post("/reference/clear")
    assert _state(client)["reference_image"] is None

    client.post("/thumbnail", data={"youtube_url": "not a link"})
    assert _state(client)["error"] == "Invalid YouTube URL. Please check the link and try again."


def test_person_upload_routes(client, png_bytes):
    client.post("/person", files={"file": ("me.png", png_bytes, "image/png")})
    assert _state(client)["person_image"] == EmbeddableImage.from_bytes(png_bytes, "image/png").data_url

    client.post("/person", files={"file": ("me.gif", b"GIF89a", "image/gif")})
    state = _state(client)
    assert state["error"] == "Please upload a valid image file (JPEG or PNG)."
    assert state["person_image"] is not None

    client.post("/person/clear")
    assert _state(client)["person_image"] is None


def test_image_routes_without_result(client):
    assert client.get("/image").status_code == 404
    assert client.get("/download").status_code == 404


def test_error_is_rendered_on_page(client):
    client.post("/thumbnail", data={"youtube_url": "nope"})
    page = client.get("/")
    assert "Invalid YouTube URL" in page.text


def test_failed_edit_keeps_result_controls(client, provider):
    client.post("/generate", data={"prompt": "banner", "aspect_ratio": "16:9"})
    provider.error = ServiceError(ErrorKind.OVERLOADED, "edit", "429 Too Many Requests")

    client.post("/edit", data={"edit_prompt": "make it night"})

    page = client.get("/").text
    assert "The service is currently overloaded" in page
    assert 'src="/image"' in page
    assert 'action="/edit"' in page
    assert 'value="make it night"' in page
    assert 'href="/download"' in page
    assert 'action="/filters/Noir"' in page
    assert client.get("/download").content == b"banner-bytes"


def test_person_form_without_file_is_ignored(client, png_bytes):
    client.post("/person", files={"file": ("me.png", png_bytes, "image/png")})

    resp = client.post("/person", files={"file": ("", b"", "application/octet-stream")})

    assert resp.status_code == 303
    state = _state(client)
    assert state["error"] is None
    assert state["person_image"] == EmbeddableImage.from_bytes(png_bytes, "image/png").data_url
