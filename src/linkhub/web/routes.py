"""Flask route handlers."""

import asyncio

from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)

from ..config import Session
from ..exceptions import AuthenticationRequired, LinkHubError, SyncBusyError
from ..intents import Intent, IntentAction, IntentDispatcher
from ..sync.engine import SyncEngine

bp = Blueprint("main", __name__)


def get_engine() -> SyncEngine | None:
    """Get the logged-in engine from app config."""
    return current_app.config["ENGINE"]


def engine_access():
    """Serialize engine use across the threads of the dev server."""
    return current_app.config["ENGINE_LOCK"]


def dispatch(engine: SyncEngine, intent: Intent):
    with engine_access():
        return asyncio.run(IntentDispatcher(engine).dispatch(intent))


def ensure_loaded(engine: SyncEngine) -> bool:
    """Load the list once per login. False means the user must log in again.

    Raises:
        SyncBusyError: another load or save is still running
    """
    with engine_access():
        if engine.state.loaded:
            return True
        try:
            asyncio.run(engine.load())
        except AuthenticationRequired as e:
            flash(str(e), "error")
            return False
    return True


@bp.errorhandler(SyncBusyError)
def busy(e: SyncBusyError):
    flash(f"{e}. Try again in a moment.", "error")
    return render_template("base.html"), 503


def link_fields() -> dict[str, str]:
    """Link fields from the add/edit form."""
    return {
        "title": request.form.get("title", ""),
        "url": request.form.get("url", ""),
        "tags": request.form.get("tags", ""),
        "notes": request.form.get("notes", ""),
    }


@bp.route("/")
def index():
    """Card list with search."""
    engine = get_engine()
    if engine is None or not ensure_loaded(engine):
        return redirect(url_for("main.login"))

    query = request.args.get("q", "")
    links = dispatch(engine, Intent(IntentAction.SEARCH, query=query))

    return render_template(
        "index.html",
        links=links,
        query=engine.state.query,
        total=len(engine.repository),
        all_tags=engine.repository.all_tags(),
    )


@bp.route("/tags/<path:tag>")
def tag_click(tag: str):
    """Clicking a tag puts it in the search box."""
    engine = get_engine()
    if engine is None:
        return redirect(url_for("main.login"))
    dispatch(engine, Intent(IntentAction.TAG_CLICK, query=tag))
    return redirect(url_for("main.index", q=engine.state.query))


@bp.route("/login", methods=["GET", "POST"])
def login():
    """Credential form; a successful login replaces the saved session."""
    if request.method == "GET":
        return render_template("login.html", form={})

    session = Session(
        username=request.form.get("username", "").strip(),
        token=request.form.get("token", "").strip(),
        repo_name=request.form.get("repo_name", "").strip(),
    )
    if not session.is_complete:
        flash("Username, token and repository are all required.", "error")
        return render_template("login.html", form=request.form), 400

    cfg = current_app.config["APP_CONFIG"]
    session.save(cfg.session_path)
    engine = current_app.config["BUILD_ENGINE"](session)
    current_app.config["ENGINE"] = engine

    if not ensure_loaded(engine):
        return render_template("login.html", form=request.form), 401
    return redirect(url_for("main.index"))


@bp.route("/links/new", methods=["GET", "POST"])
def new_link():
    """Add form."""
    engine = get_engine()
    if engine is None or not ensure_loaded(engine):
        return redirect(url_for("main.login"))

    if request.method == "GET":
        return render_template("form.html", link=None, form={})

    try:
        dispatch(engine, Intent(IntentAction.CREATE, fields=link_fields()))
    except ValueError as e:
        flash(str(e), "error")
        return render_template("form.html", link=None, form=request.form), 400
    except AuthenticationRequired as e:
        flash(str(e), "error")
        return redirect(url_for("main.login"))
    except LinkHubError as e:
        flash(str(e), "error")
    return redirect(url_for("main.index"))


@bp.route("/links/<link_id>/edit", methods=["GET", "POST"])
def edit_link(link_id: str):
    """Edit form."""
    engine = get_engine()
    if engine is None or not ensure_loaded(engine):
        return redirect(url_for("main.login"))

    link = engine.repository.get(link_id)
    if link is None:
        abort(404)

    if request.method == "GET":
        form = {
            "title": link.title,
            "url": link.url,
            "tags": ", ".join(link.tags),
            "notes": link.notes,
        }
        return render_template("form.html", link=link, form=form)

    try:
        dispatch(engine, Intent(IntentAction.EDIT, link_id=link_id, fields=link_fields()))
    except ValueError as e:
        flash(str(e), "error")
        return render_template("form.html", link=link, form=request.form), 400
    except AuthenticationRequired as e:
        flash(str(e), "error")
        return redirect(url_for("main.login"))
    except LinkHubError as e:
        flash(str(e), "error")
    return redirect(url_for("main.index"))


@bp.route("/links/<link_id>/delete", methods=["POST"])
def delete_link(link_id: str):
    """Delete a link; the page asks for confirmation first."""
    engine = get_engine()
    if engine is None or not ensure_loaded(engine):
        return redirect(url_for("main.login"))

    try:
        dispatch(engine, Intent(IntentAction.DELETE, link_id=link_id))
    except AuthenticationRequired as e:
        flash(str(e), "error")
        return redirect(url_for("main.login"))
    except LinkHubError as e:
        flash(str(e), "error")
    return redirect(url_for("main.index", q=engine.state.query))
