"""Self-contained diagnostic page renderer.

Renders error pages with plain f-strings and no template engine, so a
broken install cannot prevent error reporting.

The page renders:
- A title and the exception message
- Traceback with source context, locals, and app-frame highlighting
- Request context (method, URI, masked headers, query)
- Environment (Python version, controller, config file presence)
- Editor-clickable file:line links (via STEEPLE_EDITOR env var)
"""

import html
import linecache
import os
import sys
import types
from pathlib import Path
from typing import Any

_EDITOR_PRESETS: dict[str, str] = {
    "vscode": "vscode://file/__FILE__:__LINE__",
    "cursor": "cursor://file/__FILE__:__LINE__",
    "sublime": "subl://open?url=file://__FILE__&line=__LINE__",
    "pycharm": "pycharm://open?file=__FILE__&line=__LINE__",
}

# Headers whose values are masked in the output
_SENSITIVE_HEADERS = frozenset({
    "authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "proxy-authorization",
})

_MASK = "••••••••"


def _editor_url(filepath: str, lineno: int) -> str | None:
    """Build a clickable editor URL from the STEEPLE_EDITOR env var.

    Accepts a preset name or a custom pattern with ``__FILE__`` and
    ``__LINE__`` placeholders. Returns ``None`` when unset.
    """
    pattern = os.environ.get("STEEPLE_EDITOR", "")
    if not pattern:
        return None
    pattern = _EDITOR_PRESETS.get(pattern.lower(), pattern)
    return pattern.replace("__FILE__", filepath).replace("__LINE__", str(lineno))


def _is_app_frame(filename: str) -> bool:
    """True if the frame is from the application (not stdlib/site-packages)."""
    if "site-packages" in filename or filename.startswith("<"):
        return False
    stdlib_prefix = os.path.dirname(os.__file__)
    return not filename.startswith(stdlib_prefix)


def _safe_repr(value: Any, limit: int = 200) -> str:
    try:
        text = repr(value)
    except Exception:
        return "<unrepresentable>"
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def _extract_frames(tb: types.TracebackType | None) -> list[dict[str, Any]]:
    """Walk a traceback and extract frame info with source context and locals."""
    frames: list[dict[str, Any]] = []
    while tb is not None:
        frame = tb.tb_frame
        lineno = tb.tb_lineno
        filename = frame.f_code.co_filename

        source_lines: list[tuple[int, str]] = []
        for i in range(max(1, lineno - 5), lineno + 6):
            line = linecache.getline(filename, i, frame.f_globals)
            if line:
                source_lines.append((i, line.rstrip()))

        local_vars = {
            name: _safe_repr(value)
            for name, value in frame.f_locals.items()
            if not (name.startswith("__") and name.endswith("__"))
        }

        frames.append({
            "filename": filename,
            "lineno": lineno,
            "func_name": frame.f_code.co_name,
            "source_lines": source_lines,
            "locals": local_vars,
            "is_app": _is_app_frame(filename),
        })
        tb = tb.tb_next
    return frames


def _extract_request_context(request: Any) -> dict[str, Any]:
    """Displayable request context; sensitive header values are masked."""
    ctx: dict[str, Any] = {
        "method": getattr(request, "method", "?"),
        "url": getattr(request, "url", None) or getattr(request, "path", "N/A"),
        "http_version": getattr(request, "http_version", "?"),
    }

    headers = getattr(request, "headers", None)
    if headers:
        ctx["headers"] = [
            (str(name), _MASK if str(name).lower() in _SENSITIVE_HEADERS else str(value))
            for name, value in headers.items()
        ]

    query = getattr(request, "query", None)
    if query:
        ctx["query"] = [(str(k), str(v)) for k, v in query.items()]

    client = getattr(request, "client", None)
    if client:
        ctx["client"] = f"{client[0]}:{client[1]}"
    return ctx


# ---------------------------------------------------------------------------
# Styling
# ---------------------------------------------------------------------------

_CSS = """\
* { margin: 0; padding: 0; box-sizing: border-box; }
body {
    font-family: ui-monospace, 'Cascadia Code', 'Source Code Pro', Menlo, Consolas, monospace;
    background: #1a1b26; color: #a9b1d6; line-height: 1.6; padding: 2rem; font-size: 14px;
}
.error-page { max-width: 1100px; margin: 0 auto; }
h1 { color: #f7768e; font-size: 1.4rem; margin-bottom: 0.5rem; }
h2 { color: #7aa2f7; font-size: 1.1rem; margin: 1.5rem 0 0.5rem; border-bottom: 1px solid #2f3549; padding-bottom: 0.3rem; }
.exc-message { color: #e0af68; font-size: 1rem; margin-bottom: 1rem; white-space: pre-wrap; word-break: break-word; }
.details { background: #24283b; border-radius: 6px; padding: 0.8rem; white-space: pre-wrap; word-wrap: break-word; }
.frame { margin: 0.5rem 0; border: 1px solid #2f3549; border-radius: 6px; overflow: hidden; }
.frame.app-frame { border-color: #7aa2f7; }
.frame-header { padding: 0.4rem 0.8rem; background: #24283b; font-size: 0.85rem; display: flex; justify-content: space-between; }
.frame-header a { color: #7dcfff; text-decoration: none; }
.frame-header .func { color: #bb9af7; }
.frame-header .app-badge { color: #9ece6a; font-size: 0.75rem; margin-left: 0.5rem; }
.source-line { display: flex; padding: 0 0.8rem; font-size: 0.82rem; }
.source-line .lineno { color: #565f89; min-width: 3.5rem; text-align: right; padding-right: 1rem; flex-shrink: 0; }
.source-line .code { white-space: pre; }
.source-line.error-line { background: rgba(247, 118, 142, 0.15); }
details.locals { padding: 0.3rem 0.8rem; font-size: 0.8rem; border-top: 1px solid #2f3549; }
details.locals summary { cursor: pointer; color: #565f89; }
.local-var, .request-line { display: flex; gap: 0.5rem; padding: 0.15rem 0; }
.local-var .name { color: #7dcfff; min-width: 120px; flex-shrink: 0; }
.local-var .value { white-space: pre-wrap; word-break: break-all; }
.panel { background: #24283b; border-radius: 6px; padding: 0.8rem; margin: 0.5rem 0; }
.request-line .label { color: #7aa2f7; min-width: 140px; flex-shrink: 0; }
.request-line .val { word-break: break-all; }
"""


def _esc(text: object) -> str:
    return html.escape(str(text), quote=True)


def _line(label: str, value: object) -> str:
    return (
        f'<div class="request-line"><span class="label">{_esc(label)}</span>'
        f'<span class="val">{_esc(value)}</span></div>'
    )


def _render_frame(frame: dict[str, Any]) -> str:
    filename = frame["filename"]
    lineno = frame["lineno"]

    location = f"{_esc(filename)}:{lineno}"
    editor_link = _editor_url(filename, lineno)
    if editor_link:
        location = f'<a href="{_esc(editor_link)}">{location}</a>'

    badge = ' <span class="app-badge">APP</span>' if frame["is_app"] else ""
    source = "".join(
        f'<div class="source-line{" error-line" if n == lineno else ""}">'
        f'<span class="lineno">{n}</span><span class="code">{_esc(code)}</span></div>'
        for n, code in frame["source_lines"]
    )
    local_vars = ""
    if frame["locals"]:
        items = "".join(
            f'<div class="local-var"><span class="name">{_esc(k)}</span>'
            f'<span class="value">{_esc(v)}</span></div>'
            for k, v in frame["locals"].items()
        )
        local_vars = f'<details class="locals"><summary>locals</summary>{items}</details>'

    css = "frame app-frame" if frame["is_app"] else "frame"
    return (
        f'<div class="{css}"><div class="frame-header"><span>{location}</span>'
        f'<span><span class="func">{_esc(frame["func_name"])}</span>{badge}</span></div>'
        f'<div class="source">{source}</div>{local_vars}</div>'
    )


def _render_request_panel(request: Any) -> str:
    ctx = _extract_request_context(request)
    parts = ['<div class="panel">']
    parts.append(_line("Request", f"{ctx['method']} {ctx['url']} HTTP/{ctx['http_version']}"))
    if "client" in ctx:
        parts.append(_line("Client", ctx["client"]))
    if "query" in ctx:
        parts.append(_line("Query", " ".join(f"{k}={v}" for k, v in ctx["query"])))
    for name, value in ctx.get("headers", []):
        parts.append(_line(name, value))
    parts.append("</div>")
    return "".join(parts)


def _qualified_name(exc: BaseException) -> str:
    exc_type = type(exc)
    module = exc_type.__module__ or ""
    if module and module != "builtins":
        return f"{module}.{exc_type.__name__}"
    return exc_type.__name__


def _page(title: str, sections: list[str]) -> str:
    body_html = "\n".join(sections)
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head>'
        '<meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>{_esc(title)}</title>"
        f"<style>{_CSS}</style>"
        "</head><body>"
        f'<div class="error-page">{body_html}</div>'
        "</body></html>"
    )


def _exception_sections(exc: BaseException) -> list[str]:
    sections: list[str] = []
    cause = exc.__cause__
    context = exc.__context__ if not exc.__suppress_context__ else None
    if cause is not None:
        sections.append(_line("Caused by", f"{_qualified_name(cause)}: {cause}"))
    elif context is not None:
        sections.append(_line("While handling", f"{_qualified_name(context)}: {context}"))

    frames = _extract_frames(exc.__traceback__)
    if frames:
        sections.append("<h2>Traceback</h2>")
        sections.extend(_render_frame(f) for f in frames)
    return sections


def render_startup_page(
    exc: BaseException,
    request: Any,
    *,
    app_name: str,
    config_path: Path,
) -> str:
    """Render the diagnostic page for a failure before dispatch.

    Args:
        exc: The exception raised while bootstrapping the request.
        request: The request being bootstrapped.
        app_name: Product name shown in the title.
        config_path: Site configuration file; its presence is reported.
    """
    qualified = _qualified_name(exc)
    title = f"Unhandled Exception while loading {app_name}"
    details = f"Type: {qualified}"
    frames = traceback_tail(exc)
    if frames is not None:
        details += f"\nFile: {frames[0]}\nLine: {frames[1]}"

    sections = [
        f"<h1>{_esc(title)}</h1>",
        f'<div class="exc-message">{_esc(exc)}</div>',
        "<h2>Details</h2>",
        f'<div class="details">{_esc(details)}</div>',
        *_exception_sections(exc),
        "<h2>Request</h2>",
        _render_request_panel(request),
        "<h2>Environment</h2>",
        '<div class="panel">',
        _line("Python Version", sys.version),
        _line("Script", sys.argv[0] if sys.argv and sys.argv[0] else "N/A"),
        _line("Request URI", getattr(request, "url", "N/A")),
        _line("Config Exists", "yes" if config_path.exists() else "no"),
        "</div>",
    ]
    return _page(f"{app_name} Debug", sections)


def render_debug_page(exc: BaseException, request: Any) -> str:
    """Render the traceback page for an exception raised by a script (debug mode)."""
    qualified = _qualified_name(exc)
    sections = [
        f"<h1>{_esc(qualified)}</h1>",
        f'<div class="exc-message">{_esc(exc)}</div>',
        *_exception_sections(exc),
        "<h2>Request</h2>",
        _render_request_panel(request),
        "<h2>Environment</h2>",
        '<div class="panel">',
        _line("Python", sys.version),
        "</div>",
    ]
    return _page(f"{qualified}: {str(exc)[:80]}", sections)


def traceback_tail(exc: BaseException) -> tuple[str, int] | None:
    """File and line where *exc* was raised (the innermost frame)."""
    tb = exc.__traceback__
    if tb is None:
        return None
    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb.tb_frame.f_code.co_filename, tb.tb_lineno
