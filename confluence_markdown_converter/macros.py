"""Rewrite Confluence storage-format structured macros into plain HTML.

The storage format embeds macros as ``<ac:structured-macro ac:name="...">``
elements carrying ``<ac:parameter>`` children and either a CDATA
``<ac:plain-text-body>`` or an HTML ``<ac:rich-text-body>``. Each supported
kind is rewritten in its own pass; the pass order matters because a panel or
expand body is matched lazily up to the first closing macro tag, so leaf
macros (code, noformat) have to be gone before the container kinds are matched.

Anything left over is replaced by an HTML comment and reported as a warning.
"""

import html
import logging
import re
from collections.abc import Callable
from typing import NamedTuple

logger = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE | re.DOTALL

PANEL_GLYPHS = {
    "info": "i",
    "note": "!",
    "warning": "!!",
    "tip": "*",
}

RICH_BODY_RE = re.compile(r"<ac:rich-text-body>(.*?)</ac:rich-text-body>", _FLAGS)
PLAIN_BODY_RE = re.compile(
    r"<ac:plain-text-body>\s*<!\[CDATA\[(.*?)\]\]>\s*</ac:plain-text-body>", _FLAGS
)
NAMESPACE_TAG_RES = (
    re.compile(r"<ac:[^>]*/>", re.IGNORECASE),
    re.compile(r"</?ac:[^>]*>", re.IGNORECASE),
    re.compile(r"<ri:[^>]*/>", re.IGNORECASE),
    re.compile(r"</?ri:[^>]*>", re.IGNORECASE),
)


class MacroResult(NamedTuple):
    html: str
    warnings: list[str]


def macro_pattern(name: str = r'[^"]*') -> re.Pattern[str]:
    """Match a whole structured macro, either self-closing or with content.

    Group 1 is the macro name, group 2 its inner markup (``None`` when the
    macro is self-closing).
    """
    return re.compile(
        r"<ac:structured-macro\b[^>]*?ac:name=\"(" + name + r")\"[^>]*?"
        r"(?:/>|(?<!/)>(.*?)</ac:structured-macro>)",
        _FLAGS,
    )


def parameter(content: str, name: str) -> str | None:
    match = re.search(
        r"<ac:parameter\b[^>]*?ac:name=\"" + re.escape(name) + r"\"[^>]*>(.*?)</ac:parameter>",
        content,
        _FLAGS,
    )
    return match.group(1).strip() if match else None


def plain_text_body(content: str) -> str:
    match = PLAIN_BODY_RE.search(content)
    return match.group(1) if match else ""


def rich_text_body(content: str) -> str | None:
    match = RICH_BODY_RE.search(content)
    return match.group(1) if match else None


def escape_code(text: str) -> str:
    return html.escape(text, quote=False)


def convert_code(name: str, content: str) -> str:
    language = parameter(content, "language") or ""
    return f'<pre><code class="language-{language}">{escape_code(plain_text_body(content))}</code></pre>'


def convert_noformat(name: str, content: str) -> str:
    return f"<pre><code>{escape_code(plain_text_body(content))}</code></pre>"


def convert_panel(name: str, content: str) -> str:
    kind = name.lower()
    body = rich_text_body(content)
    if body is None:
        body = content
    return (
        f"<blockquote><p><strong>[{PANEL_GLYPHS[kind]}] {kind.upper()}:</strong></p>"
        f"{body}</blockquote>"
    )


def convert_expand(name: str, content: str) -> str:
    title = parameter(content, "title") or "Details"
    body = rich_text_body(content) or ""
    return f"<details><summary>{title}</summary>{body}</details>"


def convert_jira(name: str, content: str) -> str | None:
    key = parameter(content, "key")
    if not key:
        return None
    return f"<code>{key}</code>"


def convert_anchor(name: str, content: str) -> str | None:
    anchor = parameter(content, "")
    if anchor is None:
        return None
    return f'<a id="{anchor}"></a>'


MacroHandler = Callable[[str, str], str | None]

# Handlers returning None leave the macro in place for the unsupported pass.
MACRO_PASSES: tuple[tuple[re.Pattern[str], MacroHandler], ...] = (
    (macro_pattern("code"), convert_code),
    (macro_pattern("noformat"), convert_noformat),
    (macro_pattern("info"), convert_panel),
    (macro_pattern("note"), convert_panel),
    (macro_pattern("warning"), convert_panel),
    (macro_pattern("tip"), convert_panel),
    (macro_pattern("expand"), convert_expand),
    (macro_pattern("jira"), convert_jira),
    (macro_pattern("anchor"), convert_anchor),
)

UNSUPPORTED_MACRO_RE = macro_pattern()


def apply_pass(html_text: str, pattern: re.Pattern[str], handler: MacroHandler) -> str:
    def replace(match: re.Match[str]) -> str:
        converted = handler(match.group(1), match.group(2) or "")
        return match.group(0) if converted is None else converted

    return pattern.sub(replace, html_text)


def preprocess_macros(html_text: str) -> MacroResult:
    """Replace structured macros with HTML equivalents.

    Returns the rewritten markup and one warning per unsupported macro, in
    document order.
    """
    for pattern, handler in MACRO_PASSES:
        html_text = apply_pass(html_text, pattern, handler)

    warnings: list[str] = []

    def remove_unsupported(match: re.Match[str]) -> str:
        name = match.group(1)
        logger.warning("Unsupported macro removed: %s", name)
        warnings.append(f"Unsupported macro removed: {name}")
        return f"<!-- Unsupported Confluence macro: {name} -->"

    html_text = UNSUPPORTED_MACRO_RE.sub(remove_unsupported, html_text)

    for tag_re in NAMESPACE_TAG_RES:
        html_text = tag_re.sub("", html_text)

    return MacroResult(html_text, warnings)
