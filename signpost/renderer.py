"""Markdown to HTML conversion with local image path rewriting."""

from __future__ import annotations

import html
import os
import re
from pathlib import Path
from typing import Callable, NamedTuple
from urllib.parse import unquote, urlsplit

from markdown_it import MarkdownIt
from mdit_py_plugins.dollarmath import dollarmath_plugin
from mdit_py_plugins.front_matter import front_matter_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

PLACEHOLDER_HTML = "<em>No README.md found</em>"
OPEN_COMMAND_URL = "signpost:open"

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
# `src` of raw `<img>` tags inside HTML blocks and inline HTML.
_HTML_IMG_SRC_RE = re.compile(
    r"""(<img\b[^>]*?\ssrc\s*=\s*)(?:(["'])(.*?)\2|([^\s"'>]+))""",
    re.IGNORECASE | re.DOTALL,
)

ResourceUri = Callable[[Path], str]


class ImageRef(NamedTuple):
    """An image reference, whatever markup it came from."""

    address: str
    title: str | None = None
    alt_text: str = ""


def default_resource_uri(path: Path) -> str:
    return path.as_uri()


def is_passthrough_address(address: str) -> bool:
    """True for addresses that must never be rewritten.

    Network and data addresses, any other URL scheme, protocol-relative
    addresses and bare fragments all pass through unchanged.
    """
    address = address.strip()
    if not address or address.startswith(("//", "#")):
        return True
    return bool(_SCHEME_RE.match(address))


def resolve_local_address(address: str, document_dir: Path) -> Path | None:
    """Map a relative (or absolute) local image address to a filesystem path."""
    raw_path = unquote(urlsplit(address.strip()).path)
    if not raw_path:
        return None
    target = Path(raw_path)
    if not target.is_absolute():
        target = document_dir / target
    return Path(os.path.normpath(target))


class MarkdownRenderer:
    """Converts README markdown to an HTML fragment for the preview surface."""

    def __init__(self) -> None:
        self._md = MarkdownIt(
            "commonmark",
            {"html": True},
        ).enable("table").enable("strikethrough")
        # READMEs often start with YAML metadata that should not render.
        self._md.use(front_matter_plugin)
        self._md.use(tasklists_plugin)
        # Parse $...$ / $$...$$ as math tokens before emphasis rules run so
        # TeX survives verbatim.
        self._md.use(dollarmath_plugin)

        default_html_block = self._md.renderer.rules["html_block"]
        default_html_inline = self._md.renderer.rules["html_inline"]

        def custom_image(tokens, idx, options, env):
            token = tokens[idx]
            title = token.attrGet("title")
            ref = ImageRef(
                address=str(token.attrGet("src") or ""),
                title=str(title) if title else None,
                alt_text=self._md.renderer.renderInlineAsText(token.children or [], options, env),
            )
            return self._image_html(self._rewrite_image(ref, env))

        def custom_html_block(tokens, idx, options, env):
            return self._rewrite_html_images(default_html_block(tokens, idx, options, env), env)

        def custom_html_inline(tokens, idx, options, env):
            return self._rewrite_html_images(default_html_inline(tokens, idx, options, env), env)

        def custom_math_inline(tokens, idx, options, env):
            return f"${html.escape(tokens[idx].content)}$"

        def custom_math_block(tokens, idx, options, env):
            math_body = (tokens[idx].content or "").strip("\n")
            return f'<div class="signpost-math-block">$$\n{html.escape(math_body)}\n$$</div>\n'

        self._md.renderer.rules["image"] = custom_image
        self._md.renderer.rules["html_block"] = custom_html_block
        self._md.renderer.rules["html_inline"] = custom_html_inline
        self._md.renderer.rules["math_inline"] = custom_math_inline
        self._md.renderer.rules["math_block"] = custom_math_block

    def render(
        self,
        markdown_text: str | None,
        document_path: Path | None,
        resource_uri: ResourceUri | None = None,
    ) -> str:
        """Render `markdown_text` read from `document_path`.

        Local image paths resolve against the document's own directory and
        are handed to `resource_uri` to become addresses the surface can load.
        Without a document the fixed placeholder is returned.
        """
        if document_path is None or markdown_text is None:
            return render_placeholder()
        env = {
            "document_dir": Path(document_path).absolute().parent,
            "resource_uri": resource_uri or default_resource_uri,
        }
        return self._md.render(markdown_text, env)

    @staticmethod
    def _rewrite_image(ref: ImageRef, env) -> ImageRef:
        if is_passthrough_address(ref.address):
            return ref
        target = resolve_local_address(ref.address, env["document_dir"])
        if target is None:
            return ref
        return ref._replace(address=env["resource_uri"](target))

    @staticmethod
    def _image_html(ref: ImageRef) -> str:
        parts = [f'<img src="{html.escape(ref.address)}" alt="{html.escape(ref.alt_text)}"']
        if ref.title:
            parts.append(f' title="{html.escape(ref.title)}"')
        parts.append(" />")
        return "".join(parts)

    def _rewrite_html_images(self, markup: str, env) -> str:
        if "<img" not in markup.lower():
            return markup

        def replace(match: re.Match[str]) -> str:
            quote = match.group(2)
            value = match.group(3) if quote else match.group(4)
            ref = ImageRef(address=html.unescape(value))
            rewritten = self._rewrite_image(ref, env)
            if rewritten is ref:
                return match.group(0)
            quote = quote or '"'
            return f"{match.group(1)}{quote}{html.escape(rewritten.address)}{quote}"

        return _HTML_IMG_SRC_RE.sub(replace, markup)


def render_placeholder() -> str:
    """Fixed body shown when no README was resolved."""
    return PLACEHOLDER_HTML


def compose_page(body: str, open_label: str | None = None, title: str = "README") -> str:
    """Wrap a rendered body into the full preview page.

    `open_label` adds the link that asks the host to open the document.
    """
    escaped_title = html.escape(title)
    open_html = ""
    if open_label:
        open_html = (
            f'<nav class="signpost-open-bar"><a class="signpost-open" href="{OPEN_COMMAND_URL}" '
            f'title="Open in editor">{html.escape(open_label)}</a></nav>\n'
        )
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>{escaped_title}</title>
  <style>
    :root {{
      color-scheme: light dark;
      --fg: #1f2937;
      --bg: #f9fafb;
      --code-bg: #e5e7eb;
      --border: #d1d5db;
      --link: #0b57d0;
    }}
    @media (prefers-color-scheme: dark) {{
      :root {{
        --fg: #e5e7eb;
        --bg: #111827;
        --code-bg: #1f2937;
        --border: #374151;
        --link: #8ab4f8;
      }}
    }}
    html, body {{
      margin: 0;
      padding: 0;
      background: var(--bg);
      color: var(--fg);
      font-family: "Noto Sans", "DejaVu Sans", sans-serif;
      line-height: 1.55;
      font-size: 15px;
    }}
    main {{
      padding: 10px;
    }}
    a {{
      color: var(--link);
    }}
    img {{
      max-width: 100%;
    }}
    pre, code {{
      font-family: "Noto Sans Mono", "DejaVu Sans Mono", monospace;
    }}
    code {{
      background: var(--code-bg);
      border-radius: 4px;
      padding: 0.1rem 0.35rem;
    }}
    pre {{
      background: var(--code-bg);
      border: 1px solid var(--border);
      border-radius: 6px;
      padding: 0.8rem;
      overflow: auto;
    }}
    pre > code {{
      background: transparent;
      padding: 0;
    }}
    table {{
      border-collapse: collapse;
    }}
    th, td {{
      border: 1px solid var(--border);
      padding: 0.4rem 0.6rem;
    }}
    .signpost-open-bar {{
      position: sticky;
      top: 0;
      padding: 6px 10px;
      background: var(--code-bg);
      border-bottom: 1px solid var(--border);
      font-size: 0.85rem;
    }}
    .signpost-math-block {{
      overflow-x: auto;
      white-space: pre;
    }}
  </style>
</head>
<body>
{open_html}<main>
{body}
</main>
</body>
</html>
"""
