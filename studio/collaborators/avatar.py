"""Avatar Catalog - Resolve avatar ids to model descriptors.

Catalogs are external collaborators. The orchestrator only needs
resolve(); results are cached per avatar id for the catalog's lifetime.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from studio.exceptions import AvatarNotFoundError, AvatarResolutionError
from studio.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AvatarModel:
    """Descriptor of a 3-D avatar."""

    id: str
    name: str
    thumbnail_url: str = ""
    model_url: str = ""
    category: str = "professional"  # professional, casual, creative
    gender: str = "neutral"  # male, female, neutral
    expressions: tuple[str, ...] = ()
    animations: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AvatarModel":
        """Create from a catalog API payload."""
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            thumbnail_url=data.get("thumbnailUrl", data.get("thumbnail_url", "")),
            model_url=data.get("modelUrl", data.get("model_url", "")),
            category=data.get("category", "professional"),
            gender=data.get("gender", "neutral"),
            expressions=tuple(data.get("expressions") or ()),
            animations=tuple(data.get("animations") or ()),
        )


class AvatarCatalog(Protocol):
    """Protocol for avatar catalogs.

    Usage:
        catalog = StaticAvatarCatalog(DEFAULT_AVATARS)
        model = await catalog.resolve("professional-female")
    """

    async def resolve(self, avatar_id: str) -> AvatarModel:
        """Resolve an avatar id.

        Raises:
            AvatarNotFoundError: No model exists for avatar_id
            AvatarResolutionError: Catalog could not be reached
        """
        ...


class BaseAvatarCatalog(ABC):
    """Base class adding the per-id cache.

    Subclasses implement _fetch().
    """

    def __init__(self) -> None:
        self._cache: dict[str, AvatarModel] = {}

    async def resolve(self, avatar_id: str) -> AvatarModel:
        """Resolve an avatar id, serving repeated ids from cache."""
        cached = self._cache.get(avatar_id)
        if cached is not None:
            return cached

        model = await self._fetch(avatar_id)
        self._cache[avatar_id] = model
        logger.debug("avatar_resolved", avatar_id=avatar_id, name=model.name)
        return model

    @abstractmethod
    async def _fetch(self, avatar_id: str) -> AvatarModel:
        """Load a model from the underlying source."""
        ...

    def clear_cache(self) -> None:
        """Forget all cached models."""
        self._cache.clear()

    @property
    def cached_ids(self) -> list[str]:
        """Avatar ids currently cached."""
        return list(self._cache)


_DEFAULT_EXPRESSIONS = ("neutral", "smile", "surprised", "thinking", "excited")
_DEFAULT_ANIMATIONS = ("greeting", "approval", "love", "enthusiasm", "joy", "idle")

DEFAULT_AVATARS: tuple[AvatarModel, ...] = (
    AvatarModel(
        id="professional-female",
        name="Sarah",
        category="professional",
        gender="female",
        expressions=_DEFAULT_EXPRESSIONS,
        animations=_DEFAULT_ANIMATIONS,
    ),
    AvatarModel(
        id="professional-male",
        name="Liam",
        category="professional",
        gender="male",
        expressions=_DEFAULT_EXPRESSIONS,
        animations=_DEFAULT_ANIMATIONS,
    ),
    AvatarModel(
        id="casual-neutral",
        name="Robin",
        category="casual",
        gender="neutral",
        expressions=_DEFAULT_EXPRESSIONS,
        animations=_DEFAULT_ANIMATIONS,
    ),
)


class StaticAvatarCatalog(BaseAvatarCatalog):
    """In-memory catalog for development and tests."""

    def __init__(self, avatars: tuple[AvatarModel, ...] | list[AvatarModel] = DEFAULT_AVATARS) -> None:
        super().__init__()
        self._avatars = {avatar.id: avatar for avatar in avatars}

    async def _fetch(self, avatar_id: str) -> AvatarModel:
        try:
            return self._avatars[avatar_id]
        except KeyError:
            raise AvatarNotFoundError(avatar_id) from None


class HttpAvatarCatalog(BaseAvatarCatalog):
    """Catalog backed by a Ready Player Me style REST API.

    GET {base_url}/avatars/{avatar_id} with a bearer token.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout_s: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__()
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._client = client

    async def _fetch(self, avatar_id: str) -> AvatarModel:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        url = f"{self._base_url}/avatars/{avatar_id}"
        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                    response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise AvatarResolutionError(avatar_id, str(e)) from e

        if response.status_code == 404:
            raise AvatarNotFoundError(avatar_id)
        if response.status_code != 200:
            raise AvatarResolutionError(
                avatar_id, f"catalog returned {response.status_code}"
            )

        return AvatarModel.from_dict(response.json())

    async def aclose(self) -> None:
        """Close an injected client."""
        if self._client is not None:
            await self._client.aclose()
