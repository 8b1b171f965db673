"""Shared dependencies: store access and template rendering."""

from starlette.requests import Request
from starlette.templating import Jinja2Templates
import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# ── Jinja2 templates ─────────────────────────────────────────────────────────
templates = Jinja2Templates(directory=os.path.join(BASE_DIR, "templates"))


# ── Store dependency ─────────────────────────────────────────────────────────
def get_store(request: Request):
    """Return the Notion store created at startup."""
    return request.app.state.store


# ── Template rendering ───────────────────────────────────────────────────────
def render(template_name: str, request: Request, status_code: int = 200, **context):
    """Render a Jinja2 template with a ``url_for(name, **path_params)`` helper."""

    def _url_for(__name: str, **kw):
        return str(request.url_for(__name, **kw))

    ctx = {"url_for": _url_for, **context}
    return templates.TemplateResponse(request, template_name, ctx, status_code=status_code)
