import os
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape
from .errors import RenderError

TEMPLATES = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")
DOCS_URL = "https://godoc.org"

env = Environment(loader=FileSystemLoader(TEMPLATES), autoescape=select_autoescape(["html"]))

def render_page(import_path: str, repo: str, display: str, template: str="vanity.html") -> str:
    try:
        tpl = env.get_template(template)
        return tpl.render(import_path=import_path, repo=repo, display=display, docs_url=DOCS_URL)
    except TemplateError as e:
        raise RenderError(f"cannot render {template} for {import_path}: {e}") from e
