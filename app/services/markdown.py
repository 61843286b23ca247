"""
Minimal Markdown to HTML renderer for article bodies.

Supports the subset the editor produces:
- blocks separated by a blank line
- `#`, `##`, `###` headings
- image blocks: ![alt](src)
- fenced code blocks: ```code```
- inline **bold**, *italic*, [links](url) and `code` inside paragraphs

Text is HTML-escaped before markup is applied, so raw HTML in a post is shown
literally rather than injected.
"""

import html
import re

EMPTY_HTML = '<p class="empty">No content</p>'

# URLs may contain one level of balanced parentheses, e.g. wiki/Foo_(bar)
URL_PATTERN = r"((?:[^()\s]|\([^()\s]*\))+)"
SCHEME_RE = re.compile(r"^([a-z][a-z0-9+.\-]*):")
SAFE_SCHEMES = {"http", "https", "mailto"}

HEADING_RE = re.compile(r"^(#{1,3})\s+(.*)$", re.MULTILINE)
IMAGE_RE = re.compile(r"!\[([^\]]*)\]\(" + URL_PATTERN + r"\)")
CODE_BLOCK_RE = re.compile(r"```(?:[\w+-]*\n)?(.*?)```", re.DOTALL)
BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
ITALIC_RE = re.compile(r"\*(.+?)\*")
LINK_RE = re.compile(r"\[([^\]]+)\]\(" + URL_PATTERN + r"\)")
INLINE_CODE_RE = re.compile(r"`([^`]+)`")


def _escape(text: str) -> str:
    return html.escape(text, quote=True)


# Renderers below receive text that has already been escaped
def _render_heading(match: re.Match) -> str:
    level = len(match.group(1))
    return f"<h{level}>{match.group(2).strip()}</h{level}>"


def _is_safe_url(url: str) -> bool:
    """Relative URLs and http, https or mailto only."""
    # Browsers ignore whitespace and control characters inside a scheme
    normalized = "".join(ch for ch in html.unescape(url) if ord(ch) > 32).lower()
    scheme = SCHEME_RE.match(normalized)
    return scheme is None or scheme.group(1) in SAFE_SCHEMES


def _render_image(match: re.Match) -> str:
    alt, src = match.group(1), match.group(2)
    if not _is_safe_url(src):
        return f"<p>{alt}</p>" if alt else ""
    return f'<figure><img src="{src}" alt="{alt}" loading="lazy" /></figure>'


def _render_link(match: re.Match) -> str:
    label, href = match.group(1), match.group(2)
    if not _is_safe_url(href):
        return label
    return f'<a href="{href}" target="_blank" rel="noopener noreferrer">{label}</a>'


def _render_code_block(match: re.Match) -> str:
    return f"<pre><code>{match.group(1).strip(chr(10))}</code></pre>"


def _render_inline(text: str) -> str:
    """Apply inline markup to already-escaped text."""
    # Pull inline code out first so its contents are not formatted
    code_spans: list[str] = []

    def stash_code(match: re.Match) -> str:
        code_spans.append(f"<code>{match.group(1)}</code>")
        return f"\x00{len(code_spans) - 1}\x00"

    text = INLINE_CODE_RE.sub(stash_code, text)
    text = BOLD_RE.sub(r"<strong>\1</strong>", text)
    text = ITALIC_RE.sub(r"<em>\1</em>", text)
    text = LINK_RE.sub(_render_link, text)
    text = re.sub(r"\x00(\d+)\x00", lambda m: code_spans[int(m.group(1))], text)
    return text


def render_block(block: str) -> str:
    """Render one blank-line-separated block."""
    trimmed = _escape(block.strip())
    if not trimmed:
        return ""

    if HEADING_RE.match(trimmed):
        return "".join(
            _render_heading(m) if (m := HEADING_RE.match(line)) else _render_inline(line)
            for line in trimmed.split("\n")
        )

    if IMAGE_RE.match(trimmed):
        return IMAGE_RE.sub(_render_image, trimmed)

    if trimmed.startswith("```"):
        if CODE_BLOCK_RE.search(trimmed):
            return CODE_BLOCK_RE.sub(_render_code_block, trimmed)
        # Unterminated fence: treat the rest of the block as code
        return f"<pre><code>{trimmed[3:].lstrip()}</code></pre>"

    return f"<p>{_render_inline(trimmed)}</p>"


def render_markdown(markdown: str | None) -> str:
    """Render a Markdown document to an HTML fragment."""
    if not markdown or not markdown.strip():
        return EMPTY_HTML

    return "".join(render_block(block) for block in _split_blocks(markdown))


def _split_blocks(markdown: str) -> list[str]:
    """
    Split on blank lines, keeping fenced code blocks whole even when they
    contain blank lines.
    """
    blocks: list[str] = []
    current: list[str] = []
    in_fence = False

    for line in markdown.replace("\r\n", "\n").split("\n"):
        if line.strip().startswith("```"):
            # A line like ```code``` opens and closes on the same line
            if not (line.strip().count("```") >= 2 and not in_fence):
                in_fence = not in_fence
        if not line.strip() and not in_fence:
            if current:
                blocks.append("\n".join(current))
                current = []
            continue
        current.append(line)

    if current:
        blocks.append("\n".join(current))
    return blocks
