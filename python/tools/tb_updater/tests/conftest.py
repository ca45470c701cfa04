#!/usr/bin/env python3
"""
Shared fixtures: a synthetic home directory, archive builders and an
in-process stand-in for the Thunderbird release site and CDN.
"""

import bz2
import io
import tarfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from tb_updater.settings import UpdaterSettings


def make_tar_bz2(
    files: Dict[str, bytes],
    *,
    symlinks: Optional[Dict[str, str]] = None,
    hardlinks: Optional[Dict[str, str]] = None,
    modes: Optional[Dict[str, int]] = None,
) -> bytes:
    """
    Build a bzip2-compressed tar archive in memory.

    Links are written ahead of regular files, so a file may reuse a link's
    name or live under a linked directory.
    """
    raw = io.BytesIO()
    with tarfile.open(fileobj=raw, mode="w") as tar:
        for links, kind in ((symlinks, tarfile.SYMTYPE), (hardlinks, tarfile.LNKTYPE)):
            for name, target in (links or {}).items():
                info = tarfile.TarInfo(name)
                info.type = kind
                info.linkname = target
                tar.addfile(info)
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = (modes or {}).get(name, 0o644)
            tar.addfile(info, io.BytesIO(data))
    return bz2.compress(raw.getvalue())


def release_page(versions: List[str], css_class: str = "inline-link") -> str:
    anchors = "\n".join(
        f'<li><a class="{css_class}" href="/en-US/thunderbird/{v}/releasenotes/">{v}</a></li>'
        for v in versions
    )
    return f"""<!doctype html>
<html><body>
<nav><a class="nav-link" href="/download/">9.9.9</a></nav>
<ol class="releases">
{anchors}
</ol>
</body></html>"""


THUNDERBIRD_FILES = {
    "thunderbird/thunderbird": b"#!/bin/sh\necho thunderbird\n",
    "thunderbird/application.ini": b"[App]\nName=Thunderbird\n",
}


@pytest.fixture
def tb_archive() -> bytes:
    return make_tar_bz2(
        THUNDERBIRD_FILES, modes={"thunderbird/thunderbird": 0o755}
    )


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@dataclass
class FakeUpstream:
    """Configurable responses for the release index and the CDN."""

    index_html: str = ""
    index_status: int = 200
    product_details: str = "{}"
    archives: Dict[str, bytes] = field(default_factory=dict)
    archive_status: int = 200
    send_content_length: bool = True
    download_requests: List[str] = field(default_factory=list)
    server: Optional[TestServer] = None

    @property
    def base_url(self) -> str:
        assert self.server is not None
        return f"http://{self.server.host}:{self.server.port}"

    def settings(self, home: Path, **overrides) -> UpdaterSettings:
        values = dict(
            index_url=f"{self.base_url}/en-US/thunderbird/releases/",
            json_index_url=f"{self.base_url}/1.0/thunderbird_versions.json",
            archive_url_template=(
                f"{self.base_url}/pub/thunderbird/releases/"
                "{version}/linux-x86_64/en-US/thunderbird-{version}.tar.bz2"
            ),
            chunk_size=1024,
            queue_depth=4,
            request_timeout=10.0,
            home=home,
        )
        values.update(overrides)
        return UpdaterSettings(**values)

    async def _index(self, request: web.Request) -> web.Response:
        return web.Response(
            text=self.index_html, status=self.index_status, content_type="text/html"
        )

    async def _product_details(self, request: web.Request) -> web.Response:
        return web.Response(text=self.product_details, content_type="application/json")

    async def _archive(self, request: web.Request) -> web.StreamResponse:
        version = request.match_info["version"]
        self.download_requests.append(version)
        if self.archive_status != 200:
            return web.Response(status=self.archive_status)
        data = self.archives.get(version)
        if data is None:
            return web.Response(status=404)
        if self.send_content_length:
            return web.Response(body=data, content_type="application/x-bzip2")
        response = web.StreamResponse()
        response.content_type = "application/x-bzip2"
        response.enable_chunked_encoding()
        await response.prepare(request)
        for offset in range(0, len(data), 1000):
            await response.write(data[offset:offset + 1000])
        await response.write_eof()
        return response

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/en-US/thunderbird/releases/", self._index)
        app.router.add_get("/1.0/thunderbird_versions.json", self._product_details)
        app.router.add_get(
            "/pub/thunderbird/releases/{version}/linux-x86_64/en-US/{filename}",
            self._archive,
        )
        return app


@pytest_asyncio.fixture
async def upstream():
    fake = FakeUpstream()
    server = TestServer(fake.app())
    await server.start_server()
    fake.server = server
    yield fake
    await server.close()
