"""
Bare HTML for the public share route. The full editor front-end is served
elsewhere; these pages only need to be readable and safe to embed content in.
"""
from html import escape
from urllib.parse import urlencode

_PAGE = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title}</title></head>
<body>{body}</body></html>"""


def render_error_page(title: str, message: str) -> str:
    body = f'<div class="box"><h3>{escape(title)}</h3><p>{escape(message)}</p><a href="/">Home</a></div>'
    return _PAGE.format(title=escape(title), body=body)


def render_password_page(token: str, raw: bool = False, rejected: bool = False) -> str:
    query = {"k": token}
    if raw:
        query["raw"] = "true"
    hint = '<p class="error">Wrong password, try again.</p>' if rejected else ""
    body = (
        '<div class="box"><h3>Protected file</h3>'
        f"{hint}"
        f'<form method="POST" action="/share?{escape(urlencode(query))}">'
        '<input type="password" name="password" placeholder="Password" autofocus required>'
        '<button type="submit">Unlock</button>'
        "</form></div>"
    )
    return _PAGE.format(title="Protected file", body=body)


def render_share_page(content: str, file_id: str, is_public: bool) -> str:
    badge = ' <span class="badge">read-only</span>' if is_public else ""
    body = (
        f"<header>{escape(file_id)}{badge}</header>"
        f'<pre><code class="language-{_language_for(file_id)}">{escape(content)}</code></pre>'
    )
    return _PAGE.format(title=escape(file_id), body=body)


def _language_for(file_id: str) -> str:
    for suffix, lang in ((".css", "css"), (".html", "html"), (".json", "json"),
                         (".md", "markdown"), (".py", "python")):
        if file_id.endswith(suffix):
            return lang
    return "javascript"
