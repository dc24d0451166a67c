"""Tests for avatar catalogs."""

import httpx
import pytest

from studio.collaborators.avatar import (
    DEFAULT_AVATARS,
    AvatarModel,
    HttpAvatarCatalog,
    StaticAvatarCatalog,
)
from studio.exceptions import AvatarNotFoundError, AvatarResolutionError

AVATAR_PAYLOAD = {
    "id": "lecturer-1",
    "name": "Ms. Frizzle",
    "thumbnailUrl": "https://cdn.example/thumb.png",
    "modelUrl": "https://cdn.example/model.glb",
    "category": "creative",
    "gender": "female",
    "expressions": ["smile"],
    "animations": ["greeting"],
}


def http_catalog(handler, api_key: str | None = "catalog-key") -> HttpAvatarCatalog:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpAvatarCatalog("https://catalog.example/v1", api_key=api_key, client=client)


class TestAvatarModel:
    def test_from_camel_case_payload(self):
        model = AvatarModel.from_dict(AVATAR_PAYLOAD)

        assert model.thumbnail_url == "https://cdn.example/thumb.png"
        assert model.model_url == "https://cdn.example/model.glb"
        assert model.expressions == ("smile",)

    def test_name_defaults_to_id(self):
        assert AvatarModel.from_dict({"id": "bare"}).name == "bare"


class TestStaticAvatarCatalog:
    @pytest.mark.asyncio
    async def test_default_avatars(self):
        catalog = StaticAvatarCatalog()

        for avatar in DEFAULT_AVATARS:
            assert await catalog.resolve(avatar.id) == avatar

    @pytest.mark.asyncio
    async def test_not_found(self):
        with pytest.raises(AvatarNotFoundError):
            await StaticAvatarCatalog().resolve("ghost")

    @pytest.mark.asyncio
    async def test_cache(self):
        catalog = StaticAvatarCatalog()
        await catalog.resolve("casual-neutral")

        assert catalog.cached_ids == ["casual-neutral"]
        catalog.clear_cache()
        assert catalog.cached_ids == []


class TestHttpAvatarCatalog:
    """Tests for the HTTP catalog."""

    @pytest.mark.asyncio
    async def test_resolve(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=AVATAR_PAYLOAD)

        catalog = http_catalog(handler)

        model = await catalog.resolve("lecturer-1")

        assert model.name == "Ms. Frizzle"
        assert seen[0].url.path == "/v1/avatars/lecturer-1"
        assert seen[0].headers["Authorization"] == "Bearer catalog-key"
        await catalog.aclose()

    @pytest.mark.asyncio
    async def test_repeated_ids_served_from_cache(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=AVATAR_PAYLOAD)

        catalog = http_catalog(handler)
        await catalog.resolve("lecturer-1")
        await catalog.resolve("lecturer-1")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_no_auth_header_without_key(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=AVATAR_PAYLOAD)

        await http_catalog(handler, api_key=None).resolve("lecturer-1")

        assert "Authorization" not in seen[0].headers

    @pytest.mark.asyncio
    async def test_404(self):
        catalog = http_catalog(lambda request: httpx.Response(404))

        with pytest.raises(AvatarNotFoundError):
            await catalog.resolve("ghost")

    @pytest.mark.asyncio
    async def test_server_error(self):
        catalog = http_catalog(lambda request: httpx.Response(503))

        with pytest.raises(AvatarResolutionError) as exc_info:
            await catalog.resolve("lecturer-1")

        assert "503" in exc_info.value.message
        assert catalog.cached_ids == []

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(AvatarResolutionError):
            await http_catalog(handler).resolve("lecturer-1")
