"""Configuration management."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Load .env file from current working directory
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_SESSION_PATH = "~/.config/linkhub/session.yaml"


@dataclass
class Session:
    """GitHub credentials and the repository holding the link file."""

    username: str = ""
    token: str = ""
    repo_name: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.username and self.token and self.repo_name)

    @classmethod
    def load(cls, path: str | Path) -> "Session":
        """Load saved credentials.

        Environment variables take precedence over the saved file:
        - GITHUB_USERNAME, GITHUB_TOKEN, LINKHUB_REPO
        """
        path = Path(path).expanduser()
        data = {}
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

        return cls(
            username=os.environ.get("GITHUB_USERNAME") or data.get("username") or "",
            token=os.environ.get("GITHUB_TOKEN") or data.get("token") or "",
            repo_name=os.environ.get("LINKHUB_REPO") or data.get("repoName") or "",
        )

    def save(self, path: str | Path) -> None:
        """Overwrite the saved credentials with this session."""
        path = Path(path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {"username": self.username, "token": self.token, "repoName": self.repo_name}
        # The file holds a token
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False)
        # os.open only applies the mode when it creates the file
        path.chmod(0o600)
        logger.info(f"Saved session for {self.username}/{self.repo_name} to {path}")


@dataclass
class Config:
    """Application configuration."""

    session_path: Path
    file_path: str = "linkhub-data.json"
    api_base_url: str = "https://api.github.com"
    request_timeout_seconds: float = 30
    conflict_retries: int = 0
    secret_key: str = "linkhub-dev"

    @classmethod
    def from_yaml(cls, path: str | Path | None = None) -> "Config":
        """Load configuration from YAML file. A missing file means defaults.

        Environment variables take precedence over YAML values:
        - LINKHUB_SESSION_PATH: where credentials are saved
        - LINKHUB_FILE_PATH: path of the link file inside the repository
        - GITHUB_API_URL: API base URL (GitHub Enterprise)
        - LINKHUB_SECRET_KEY: Flask session signing key
        """
        data = {}
        if path and Path(path).exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

        session_path = os.environ.get("LINKHUB_SESSION_PATH") or data.get(
            "session_path", DEFAULT_SESSION_PATH
        )
        file_path = os.environ.get("LINKHUB_FILE_PATH") or data.get(
            "file_path", "linkhub-data.json"
        )
        api_base_url = os.environ.get("GITHUB_API_URL") or data.get(
            "api_base_url", "https://api.github.com"
        )

        conflict_retries = int(data.get("conflict_retries", 0))
        if conflict_retries < 0:
            raise ValueError("conflict_retries must be zero or positive")

        return cls(
            session_path=Path(session_path).expanduser(),
            file_path=str(file_path).lstrip("/"),
            api_base_url=api_base_url,
            request_timeout_seconds=data.get("request_timeout_seconds", 30),
            conflict_retries=conflict_retries,
            secret_key=os.environ.get("LINKHUB_SECRET_KEY")
            or data.get("secret_key", "linkhub-dev"),
        )

    def load_session(self) -> Session:
        return Session.load(self.session_path)
