import os
import re

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from markupsafe import Markup, escape

"""
EMAIL TEMPLATES

Each email is a pair of files under webforms/templates/email: NAME.html
(autoescaped) and NAME.txt (rendered verbatim).
"""

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates", "email")

_LINE_BREAK = re.compile(r"(\r\n|\n|\r)")


#Insert <br /> before every line break, keeping the break itself
def nl2br(value) -> Markup:
    return Markup(_LINE_BREAK.sub(r"<br />\1", str(escape(value))))


env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)
env.filters["nl2br"] = nl2br


#Render NAME.html and NAME.txt with the same context
def render_pair(name: str, **context) -> tuple[str, str]:
    html_body = env.get_template(f"{name}.html").render(**context)
    text_body = env.get_template(f"{name}.txt").render(**context)
    return html_body, text_body


NEWSLETTER_BENEFITS = (
    "Weekly insights on digital transformation and technology",
    "Exclusive resources and case studies",
    "Industry trends and best practices",
    "Special offers and early event access",
)
