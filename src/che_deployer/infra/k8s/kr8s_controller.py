"""Kr8s-based implementation of KubernetesController.

Uses the kr8s library for native async Kubernetes operations.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

import kr8s
from kr8s.asyncio.objects import Secret
from loguru import logger

from .controller import ClusterAPIError, KubernetesController


class Kr8sController(KubernetesController):
    """Kubernetes controller using kr8s library.

    Note: The kr8s API client is NOT cached because it's tied to the event loop
    that was running when created. ``run_sync()`` creates a new event loop per
    call, so a fresh client is requested each time.
    """

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        return await kr8s.asyncio.api()

    async def _get_secret(self, name: str, namespace: str) -> Secret | None:
        try:
            api = await self._get_api()
            return await Secret.get(name, namespace=namespace, api=api)
        except kr8s.NotFoundError:
            return None
        except Exception as e:
            raise ClusterAPIError(f"Unable to read secret {namespace}/{name}: {e}") from e

    # =========================================================================
    # Secrets
    # =========================================================================

    async def secret_exists(self, name: str, namespace: str = "default") -> bool:
        """Check if a secret exists."""
        return await self._get_secret(name, namespace) is not None

    async def get_secret_value(
        self, name: str, key: str, namespace: str = "default"
    ) -> str | None:
        """Read and base64-decode one field of a secret."""
        secret = await self._get_secret(name, namespace)
        if secret is None:
            return None
        encoded = (secret.raw.get("data") or {}).get(key)
        if encoded is None:
            return None
        try:
            return base64.b64decode(encoded).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            logger.warning(f"Secret {namespace}/{name} field {key} is not valid base64: {exc}")
            return None

    # =========================================================================
    # API Discovery
    # =========================================================================

    async def api_group_exists(self, group: str) -> bool:
        """Check if an API group is registered on the cluster."""
        try:
            api = await self._get_api()
            async for version in api.api_versions():
                if "/" in version and version.split("/", 1)[0] == group:
                    return True
        except Exception as e:
            raise ClusterAPIError(f"Unable to list cluster API versions: {e}") from e
        return False
