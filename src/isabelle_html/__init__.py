from isabelle_html.io.export import export_html, render_html  # noqa: F401
from isabelle_html.schemas import RenderConfig  # noqa: F401

__version__ = "0.1.0"
