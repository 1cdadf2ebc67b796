"""Flask application factory."""

import threading
from typing import Callable, Optional
from urllib.parse import urlparse

from flask import Flask

from ..config import Config, Session
from ..remote.base import BaseRemoteStore
from ..remote.client import GitHubContentsClient
from ..sync.engine import AppState, SyncEngine

StoreFactory = Callable[[Session], BaseRemoteStore]


def create_app(
    config_path: str = "config.yaml",
    store_factory: Optional[StoreFactory] = None,
) -> Flask:
    """Create and configure the Flask application.

    ``store_factory`` builds the remote store for a session; by default it
    is the GitHub contents client.
    """
    app = Flask(__name__, template_folder="templates")

    cfg = Config.from_yaml(config_path)
    app.secret_key = cfg.secret_key
    app.config["APP_CONFIG"] = cfg

    if store_factory is None:

        def store_factory(session: Session) -> BaseRemoteStore:
            return GitHubContentsClient(
                session,
                file_path=cfg.file_path,
                api_base_url=cfg.api_base_url,
                timeout_seconds=cfg.request_timeout_seconds,
            )

    def build_engine(session: Session) -> SyncEngine:
        return SyncEngine(
            AppState(session=session), store_factory(session), cfg.conflict_retries
        )

    app.config["BUILD_ENGINE"] = build_engine
    app.config["ENGINE_LOCK"] = threading.Lock()

    # Start logged in when a saved session exists
    session = cfg.load_session()
    app.config["ENGINE"] = build_engine(session) if session.is_complete else None

    # Register routes
    from . import routes

    app.register_blueprint(routes.bp)

    @app.template_filter("domain_display")
    def domain_display(url: str) -> str:
        """Host part of a URL without the www. prefix."""
        domain = urlparse(url).netloc or url
        if domain.startswith("www."):
            return domain[4:]
        return domain

    return app
