"""Static HTML for the browser routes. Callers escape any dynamic text."""

_STYLE = """
  *{margin:0;padding:0;box-sizing:border-box}
  body{background:#0a0a0a;color:#f0f0f0;font-family:monospace;
       display:flex;align-items:center;justify-content:center;min-height:100vh}
  .box{text-align:center;padding:60px 40px}
  .num{font-size:120px;line-height:1;color:#e8ff47;opacity:.15}
  h1{font-size:34px;letter-spacing:3px;margin:12px 0 10px}
  p{color:#777;font-size:14px;max-width:420px;margin:0 auto 28px;line-height:1.7}
  a{display:inline-block;background:#e8ff47;color:#0a0a0a;padding:10px 26px;
    text-decoration:none;border-radius:2px}
"""


def _page(title: str, body: str) -> str:
    return (
        '<!DOCTYPE html><html lang="en"><head><meta charset="UTF-8">'
        '<meta name="viewport" content="width=device-width,initial-scale=1">'
        f"<title>{title} - SNIP</title><style>{_STYLE}</style></head>"
        f'<body><div class="box">{body}</div></body></html>'
    )


def home_page() -> str:
    return _page(
        "SNIP",
        "<h1>SNIP</h1>"
        "<p>Short links with click analytics. Create links with "
        "<code>POST /api/links</code>; see <a href=\"api/docs\">the API docs</a>.</p>",
    )


def error_page(status_code: int, title: str, message: str) -> str:
    return _page(
        title,
        f'<div class="num">{status_code}</div>'
        f"<h1>{title}</h1>"
        f"<p>{message}</p>"
        '<a href="/">Back to SNIP</a>',
    )
