"""Jinja2 environment for HTML documents (export layout, e-mails)."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import settings


TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)
jinja_env.globals["app_name"] = settings.APP_NAME
jinja_env.globals["app_url"] = settings.APP_URL


def render_template(template_name: str, **context) -> str:
    return jinja_env.get_template(template_name).render(**context)
