"""Async client for the GitHub repository contents API."""

import asyncio
import base64
import logging
from typing import Any, Optional
from urllib.parse import quote

import aiohttp

from ..config import Session
from .base import (
    BaseRemoteStore,
    FetchResult,
    FetchStatus,
    WriteResult,
    WriteStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_FILE_PATH = "linkhub-data.json"

# GitHub answers 409 for a stale sha and 422 when an existing file is written without one
CONFLICT_STATUSES = {409, 422}


class GitHubContentsClient(BaseRemoteStore):
    """Reads and writes one file in a repository through the contents API."""

    def __init__(
        self,
        session: Session,
        file_path: str = DEFAULT_FILE_PATH,
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout_seconds: float = 30,
    ):
        self.session = session
        self.file_path = file_path.lstrip("/")
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    @property
    def url(self) -> str:
        owner = quote(self.session.username, safe="")
        repo = quote(self.session.repo_name, safe="")
        path = quote(self.file_path, safe="/")
        return f"{self.api_base_url}/repos/{owner}/{repo}/contents/{path}"

    @property
    def headers(self) -> dict[str, str]:
        credentials = f"{self.session.username}:{self.session.token}".encode("utf-8")
        return {
            "Accept": "application/vnd.github.v3+json",
            "Content-Type": "application/json",
            "Authorization": "Basic " + base64.b64encode(credentials).decode("ascii"),
        }

    async def fetch_file(self) -> FetchResult:
        """GET the file. A 404 is reported as NOT_FOUND, anything else non-2xx as FAILED."""
        logger.debug(f"GET {self.url}")
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as http:
                async with http.get(self.url, headers=self.headers) as response:
                    if response.status == 404:
                        return FetchResult(status=FetchStatus.NOT_FOUND, http_status=404)
                    if response.status >= 300:
                        return FetchResult(
                            status=FetchStatus.FAILED,
                            http_status=response.status,
                            error=await self._error_message(response),
                        )

                    body = await response.json(content_type=None) or {}
                    if not isinstance(body, dict):
                        # A directory listing comes back as a JSON array
                        return FetchResult(
                            status=FetchStatus.FAILED,
                            http_status=response.status,
                            error=f"{self.file_path} is not a file",
                        )
                    if self._too_large(body):
                        return FetchResult(
                            status=FetchStatus.FAILED,
                            http_status=response.status,
                            error=(
                                f"{self.file_path} is too large for the contents API "
                                f"({body.get('size')} bytes)"
                            ),
                        )
                    return FetchResult(
                        status=FetchStatus.FOUND,
                        content=body.get("content", ""),
                        sha=body.get("sha"),
                        http_status=response.status,
                    )

        except asyncio.TimeoutError:
            return FetchResult(status=FetchStatus.FAILED, error="Request timed out")
        except aiohttp.ClientError as e:
            return FetchResult(status=FetchStatus.FAILED, error=str(e))
        except ValueError as e:
            return FetchResult(status=FetchStatus.FAILED, error=f"Invalid response: {e}")

    async def write_file(
        self,
        content: str,
        sha: Optional[str] = None,
        message: str = "Update LinkHub data",
    ) -> WriteResult:
        """PUT base64 content. Without ``sha`` GitHub creates the file."""
        logger.debug(f"PUT {self.url} (sha={sha})")
        payload: dict[str, Any] = {"message": message, "content": content}
        if sha is not None:
            payload["sha"] = sha

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as http:
                async with http.put(
                    self.url, headers=self.headers, json=payload
                ) as response:
                    if response.status >= 300:
                        status = (
                            WriteStatus.CONFLICT
                            if response.status in CONFLICT_STATUSES
                            else WriteStatus.FAILED
                        )
                        return WriteResult(
                            status=status,
                            http_status=response.status,
                            error=await self._error_message(response),
                        )

                    body = await response.json(content_type=None) or {}
                    new_sha = (body.get("content") or {}).get("sha")
                    return WriteResult(
                        status=WriteStatus.SUCCESS,
                        sha=new_sha,
                        http_status=response.status,
                    )

        except asyncio.TimeoutError:
            return WriteResult(status=WriteStatus.FAILED, error="Request timed out")
        except aiohttp.ClientError as e:
            return WriteResult(status=WriteStatus.FAILED, error=str(e))
        except ValueError as e:
            return WriteResult(status=WriteStatus.FAILED, error=f"Invalid response: {e}")

    @staticmethod
    def _too_large(body: dict[str, Any]) -> bool:
        """Files over 1 MB come back without their content."""
        if body.get("encoding", "base64") != "base64":
            return True
        return not body.get("content") and (body.get("size") or 0) > 0

    async def _error_message(self, response: aiohttp.ClientResponse) -> str:
        """Build 'GitHub API error: <status> <reason>', plus GitHub's own message if any."""
        message = f"GitHub API error: {response.status} {response.reason or ''}".rstrip()
        try:
            body = await response.json(content_type=None)
        except ValueError:
            return message
        if isinstance(body, dict) and body.get("message"):
            message = f"{message} ({body['message']})"
        return message
