import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from bloginno.adapters.cloudinary_signer import CloudinarySigner
from bloginno.components.media import MediaStoreClient
from bloginno.core.ports.media import RemovalStatus
from bloginno.domain.entities import MediaFile
from bloginno.domain.errors import UploadFailed
from bloginno.rules.models import MediaKindLimits, MediaRules

SECURE_URL = "https://res.cloudinary.com/demo/image/upload/v1700000000/bloginno/cover.png"
PAYLOAD = MediaFile(filename="cover.png", content_type="image/png", data=b"0123456789")


class FakeMediaApi:
    """Minimal stand-in for the hosted media HTTP API."""

    def __init__(self):
        self.requests: list[dict] = []
        self.upload_response = web.json_response({"secure_url": SECURE_URL})
        self.destroy_result: dict | str = {"result": "ok"}
        self.upload_delay = 0.0

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/v1_1/demo/auto/upload", self.upload)
        app.router.add_post("/v1_1/demo/{kind}/destroy", self.destroy)
        return app

    async def upload(self, request: web.Request) -> web.StreamResponse:
        form = await request.post()
        file_field = form["file"]
        self.requests.append(
            {
                "path": request.path,
                "upload_preset": form["upload_preset"],
                "filename": file_field.filename,
                "content_type": file_field.content_type,
                "data": file_field.file.read(),
            }
        )
        if self.upload_delay:
            await asyncio.sleep(self.upload_delay)
        return self.upload_response

    async def destroy(self, request: web.Request) -> web.StreamResponse:
        form = await request.post()
        self.requests.append({"path": request.path, **dict(form)})
        if isinstance(self.destroy_result, str):
            return web.Response(status=502, text=self.destroy_result)
        return web.json_response(self.destroy_result)


def make_rules(base_url: str, **overrides) -> MediaRules:
    fields = dict(
        api_base=base_url,
        cloud_name="demo",
        upload_preset="bloginno_uploads",
        chunk_size_bytes=4,
        limits={"image": MediaKindLimits(mime_prefix="image/", max_upload_bytes=1024)},
    )
    fields.update(overrides)
    return MediaRules(**fields)


@pytest.fixture
def api():
    return FakeMediaApi()


@pytest.mark.asyncio
async def test_upload_streams_file_and_reports_progress(api):
    async with TestServer(api.app()) as server:
        client = MediaStoreClient(make_rules(str(server.make_url(""))))
        progress: list[float] = []

        url = await client.upload(PAYLOAD, "image", on_progress=progress.append)

    assert url == SECURE_URL
    (request,) = api.requests
    assert request["upload_preset"] == "bloginno_uploads"
    assert request["filename"] == "cover.png"
    assert request["content_type"] == "image/png"
    assert request["data"] == PAYLOAD.data
    assert progress[0] == 0.0
    assert progress[-1] == 100.0
    assert all(a <= b for a, b in zip(progress, progress[1:]))
    assert 40.0 in progress


@pytest.mark.asyncio
async def test_upload_error_status_raises(api):
    api.upload_response = web.json_response({"error": {"message": "bad preset"}}, status=400)

    async with TestServer(api.app()) as server:
        client = MediaStoreClient(make_rules(str(server.make_url(""))))
        with pytest.raises(UploadFailed) as exc:
            await client.upload(PAYLOAD, "image")

    assert exc.value.media_kind == "image"
    assert "HTTP 400" in exc.value.reason


@pytest.mark.asyncio
async def test_upload_without_secure_url_raises(api):
    api.upload_response = web.json_response({"public_id": "x"})

    async with TestServer(api.app()) as server:
        client = MediaStoreClient(make_rules(str(server.make_url(""))))
        with pytest.raises(UploadFailed, match="secure_url"):
            await client.upload(PAYLOAD, "image")


@pytest.mark.asyncio
async def test_stalled_upload_times_out(api):
    api.upload_delay = 0.5

    async with TestServer(api.app()) as server:
        client = MediaStoreClient(
            make_rules(str(server.make_url("")), upload_timeout_seconds=0.05)
        )
        with pytest.raises(UploadFailed, match="timed out"):
            await client.upload(PAYLOAD, "image")


@pytest.mark.asyncio
async def test_signed_remove_posts_to_destroy(api, clock):
    signer = CloudinarySigner("key", "secret")

    async with TestServer(api.app()) as server:
        client = MediaStoreClient(make_rules(str(server.make_url(""))), signer=signer, clock=clock)
        status = await client.remove("bloginno/cover", "video")

    assert status is RemovalStatus.DELETED
    (request,) = api.requests
    timestamp = str(int(clock.now_utc().timestamp()))
    assert request["path"] == "/v1_1/demo/video/destroy"
    assert request["public_id"] == "bloginno/cover"
    assert request["timestamp"] == timestamp
    assert request["api_key"] == "key"
    assert request["signature"] == signer.signature(
        {"public_id": "bloginno/cover", "timestamp": timestamp}
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "result,expected",
    [
        ({"result": "not found"}, RemovalStatus.DELETED),
        ({"result": "error"}, RemovalStatus.FAILED),
        ("bad gateway", RemovalStatus.FAILED),
    ],
)
async def test_remove_outcomes_never_raise(api, clock, result, expected):
    api.destroy_result = result

    async with TestServer(api.app()) as server:
        client = MediaStoreClient(
            make_rules(str(server.make_url(""))), signer=CloudinarySigner("k", "s"), clock=clock
        )
        assert await client.remove("x", "image") is expected


@pytest.mark.asyncio
async def test_unsigned_remove_is_skipped_without_request(api, caplog):
    async with TestServer(api.app()) as server:
        client = MediaStoreClient(make_rules(str(server.make_url(""))))
        with caplog.at_level("WARNING"):
            status = await client.remove("bloginno/cover", "image")
        assert await client.remove("", "image") is RemovalStatus.SKIPPED

    assert status is RemovalStatus.SKIPPED
    assert api.requests == []
    assert "no deletion signer configured" in caplog.text


def test_client_url_helpers():
    client = MediaStoreClient(make_rules("https://api.cloudinary.com/"))

    assert client.upload_endpoint == "https://api.cloudinary.com/v1_1/demo/auto/upload"
    assert client.destroy_endpoint("image") == "https://api.cloudinary.com/v1_1/demo/image/destroy"
    assert client.derive_object_id(SECURE_URL) == "bloginno/cover"
    assert client.derive_object_id("https://example.com/upload/v1/x.png") == ""
    assert client.image_url(SECURE_URL).count("w_800,q_auto,f_auto") == 1
