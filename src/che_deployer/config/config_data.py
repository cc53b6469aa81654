"""Typed installation configuration."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CHE_IMAGE = "eclipse/che-server:nightly"
DEFAULT_DOMAIN = "192.168.99.100.nip.io"
DEFAULT_DEVFILE_REGISTRY_URL = "https://che-devfile-registry.openshift.io/"
DEFAULT_PLUGIN_REGISTRY_URL = "https://che-plugin-registry.openshift.io/v3"


class InstallationConfig(BaseModel):
    """Options for one install/upgrade run.

    Immutable once built; the pipeline never mutates it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    namespace: str = Field(default="che", description="Target Kubernetes namespace")
    release_name: str = Field(default="che", description="Helm release name")
    che_image: str = Field(default=DEFAULT_CHE_IMAGE, description="Che server image")
    domain: str = Field(default=DEFAULT_DOMAIN, description="Ingress domain")
    multiuser: bool = Field(default=False, description="Deploy in multi-user mode")
    tls: bool = Field(default=False, description="Enable TLS via cert-manager")
    devfile_registry_url: str = DEFAULT_DEVFILE_REGISTRY_URL
    plugin_registry_url: str = DEFAULT_PLUGIN_REGISTRY_URL
    templates: Path = Field(
        default=Path("templates"), description="Source tree holding kubernetes/helm/che"
    )
    cache_dir: Path = Field(
        default=Path(".cache"), description="Working directory the chart is staged in"
    )

    @field_validator("namespace", "release_name", "che_image", "domain")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("devfile_registry_url", "plugin_registry_url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"registry URL must start with http:// or https://: {value!r}")
        return value
