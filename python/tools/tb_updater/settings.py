#!/usr/bin/env python3
"""
Runtime settings for the updater, validated with Pydantic v2.

Upstream URLs, the scraping selector and transfer tuning all live here so
tests and alternative deployments can point the pipeline elsewhere.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .paths import config_path, default_home, expand_home, launcher_path
from .version import Version

RELEASES_URL = "https://www.thunderbird.net/en-US/thunderbird/releases/"
PRODUCT_DETAILS_URL = (
    "https://product-details.mozilla.org/1.0/thunderbird_versions.json"
)
ARCHIVE_URL_TEMPLATE = (
    "https://download-installer.cdn.mozilla.net/pub/thunderbird/releases/"
    "{version}/linux-x86_64/en-US/thunderbird-{version}.tar.bz2"
)

ReleaseSource = Literal["html", "json"]


class UpdaterSettings(BaseModel):
    """Configuration for the updater pipeline."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    release_source: ReleaseSource = Field(
        default="html", description="Strategy used to discover releases"
    )
    index_url: str = Field(default=RELEASES_URL, description="HTML release index")
    version_selector: str = Field(
        default="a.inline-link",
        min_length=1,
        description="CSS selector of anchors holding version numbers",
    )
    json_index_url: str = Field(
        default=PRODUCT_DETAILS_URL, description="JSON release index"
    )
    json_version_key: str = Field(
        default="LATEST_THUNDERBIRD_VERSION",
        description="Key of the latest version in the JSON index",
    )
    archive_url_template: str = Field(
        default=ARCHIVE_URL_TEMPLATE, description="Archive URL, {version} is filled in"
    )
    chunk_size: int = Field(
        default=64 * 1024, ge=1024, description="HTTP body chunk size in bytes"
    )
    queue_depth: int = Field(
        default=64, ge=1, description="Chunks buffered between download and extraction"
    )
    request_timeout: float = Field(
        default=60.0, gt=0, description="Socket connect and read timeout in seconds"
    )
    home: Path = Field(
        default_factory=default_home, description="Base directory for state files"
    )

    @field_validator("archive_url_template")
    @classmethod
    def validate_archive_template(cls, v: str) -> str:
        if "{version}" not in v:
            raise ValueError("archive_url_template must contain '{version}'")
        return v

    @property
    def config_path(self) -> Path:
        return config_path(self.home)

    @property
    def launcher_path(self) -> Path:
        return launcher_path(self.home)

    def archive_url(self, version: Version) -> str:
        return self.archive_url_template.format(version=version)

    def expand(self, path: str) -> Path:
        """Expand ``~`` in a user-supplied path against the configured home."""
        return expand_home(path, self.home)
