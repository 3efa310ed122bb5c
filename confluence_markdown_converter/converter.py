"""Convert Confluence page bodies to Markdown.

The conversion runs in fixed stages: macro preprocessing, HTML cleanup,
markdownify conversion with the Confluence element rules, Markdown
post-processing, then front matter and the child page index.
"""

import logging
import re

from bs4 import BeautifulSoup
from bs4 import Tag
from markdownify import ASTERISK
from markdownify import ATX
from markdownify import MarkdownConverter

from confluence_markdown_converter.macros import preprocess_macros
from confluence_markdown_converter.models import ConversionOptions
from confluence_markdown_converter.models import ConversionResult
from confluence_markdown_converter.models import Page
from confluence_markdown_converter.models import PageRef
from confluence_markdown_converter.rules import CONFLUENCE_RULES
from confluence_markdown_converter.rules import ElementRule
from confluence_markdown_converter.rules import match_rule
from confluence_markdown_converter.utils.table_converter import TableConverter

logger = logging.getLogger(__name__)

HEADING_LINE_RE = re.compile(r"^#{1,6}\s")
FENCE_RE = re.compile(r"^\s*(```|~~~)")

CLEANUP_SUBSTITUTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r'<div class="confluence-information-macro[^"]*"[^>]*>', re.IGNORECASE), "<div>"),
    (re.compile(r"<td[^>]*>\s*<br\s*/?>\s*", re.IGNORECASE), "<td>"),
    (re.compile(r"\s*<br\s*/?>\s*</td>", re.IGNORECASE), "</td>"),
    (re.compile(r"<p(?:\s[^>]*)?>\s*</p>", re.IGNORECASE), ""),
    (re.compile(r"<p(?:\s[^>]*)?>\s*<br\s*/?>\s*</p>", re.IGNORECASE), ""),
)


def clean_html(html: str) -> str:
    """Normalise HTML quirks that confuse the Markdown conversion."""
    for pattern, replacement in CLEANUP_SUBSTITUTIONS:
        html = pattern.sub(replacement, html)
    return html


def _space_headings(markdown: str) -> str:
    lines: list[str] = []
    in_fence = False
    after_heading = False
    for line in markdown.split("\n"):
        is_heading = not in_fence and bool(HEADING_LINE_RE.match(line))
        if lines and lines[-1] and line and (is_heading or after_heading):
            lines.append("")
        lines.append(line)
        if FENCE_RE.match(line):
            in_fence = not in_fence
        after_heading = is_heading
    return "\n".join(lines)


def post_process(markdown: str) -> str:
    """Normalise whitespace and block spacing of converted Markdown."""
    markdown = re.sub(r"[ \t]+$", "", markdown, flags=re.MULTILINE)
    markdown = re.sub(r"\n[ \t]*\n", "\n\n", markdown)
    markdown = re.sub(r"\n{3,}", "\n\n", markdown)
    return _space_headings(markdown)


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_front_matter(page: Page) -> str:
    lines = [
        "---",
        f"title: {_quote(page.title)}",
        f"page_id: {_quote(page.id)}",
        f"space: {_quote(page.space_key)}",
    ]
    if page.labels:
        lines.append(f"labels: [{', '.join(_quote(label) for label in page.labels)}]")
    lines.append(f"source: {_quote(page.url)}")
    lines.extend(["---", "", ""])
    return "\n".join(lines)


def build_children_section(children: list[PageRef], rule: bool = True) -> str:
    lines = ["\n\n---\n\n## Child Pages\n" if rule else "\n\n## Child Pages\n"]
    lines.extend(f"- {child.title} (ID: {child.id})" for child in children)
    lines.append("")
    return "\n".join(lines)


class PageMarkdownConverter(TableConverter, MarkdownConverter):
    """markdownify converter with the Confluence element rules applied first."""

    class Options(MarkdownConverter.DefaultOptions):
        bullets = "-"
        heading_style = ATX
        strong_em_symbol = ASTERISK
        escape_misc = False

    def __init__(self, rules: tuple[ElementRule, ...] = CONFLUENCE_RULES, **options) -> None:  # noqa: ANN003
        super().__init__(**options)
        self.rules = rules

    def apply_rules(self, el: Tag, text: str) -> str | None:
        rule = match_rule(self.rules, el)
        if rule is None:
            return None
        logger.debug("Element <%s> converted by rule %s", el.name, rule.name)
        return rule.replace(el, text)

    def convert_a(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        if (md := self.apply_rules(el, text)) is not None:
            return md
        if el.get("id") and not el.get("href") and not text.strip():
            return f'<a id="{el["id"]}"></a>'
        return super().convert_a(el, text, parent_tags)

    def convert_img(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        if (md := self.apply_rules(el, text)) is not None:
            return md
        return super().convert_img(el, text, parent_tags)

    def convert_span(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        if (md := self.apply_rules(el, text)) is not None:
            return md
        return text

    def convert_div(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        if (md := self.apply_rules(el, text)) is not None:
            return md
        return super().convert_div(el, text, parent_tags)

    def convert_pre(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        if not text:
            return ""

        code_language = ""
        code = el.find("code")
        if isinstance(code, Tag):
            for class_name in code.get_attribute_list("class"):
                if class_name and class_name.startswith("language-"):
                    code_language = class_name.removeprefix("language-")
                    break

        return f"\n\n```{code_language}\n{text.rstrip()}\n```\n\n"

    def convert_summary(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        # Rendered by convert_details.
        return ""

    def convert_details(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        summary = el.find("summary")
        summary_text = summary.get_text().strip() if summary else "Details"
        return f"\n\n<details>\n<summary>{summary_text}</summary>\n\n{text.strip()}\n\n</details>\n\n"


class ConfluenceConverter:
    """Convert Confluence pages to Markdown.

    The options and rules are fixed at construction, so one instance can be
    shared for any number of conversions.
    """

    def __init__(
        self,
        options: ConversionOptions | None = None,
        rules: tuple[ElementRule, ...] = CONFLUENCE_RULES,
    ) -> None:
        self.options = options or ConversionOptions()
        self.rules = rules
        self.renderer = PageMarkdownConverter(rules=rules)

    def convert(self, page: Page) -> ConversionResult:
        warnings: list[str] = []
        html = page.body

        if self.options.convert_macros:
            html, macro_warnings = preprocess_macros(html)
            warnings.extend(macro_warnings)

        html = clean_html(html)
        markdown = post_process(self.to_markdown(html)).strip()

        if self.options.front_matter:
            markdown = build_front_matter(page) + markdown

        if self.options.include_children and page.children:
            markdown = markdown.rstrip() + build_children_section(
                page.children, rule=bool(markdown)
            )

        if warnings:
            logger.info("Converted page %s with %d warning(s)", page.id, len(warnings))

        return ConversionResult(
            markdown=markdown.strip() + "\n",
            title=page.title,
            page_id=page.id,
            warnings=warnings,
        )

    def to_markdown(self, html: str) -> str:
        try:
            return self.renderer.convert(html)
        except RecursionError:
            logger.warning("Markup nested too deeply to convert, kept as plain text")
            return BeautifulSoup(html, "html.parser").get_text("\n")


def convert_page(page: Page, options: ConversionOptions | None = None) -> ConversionResult:
    return ConfluenceConverter(options).convert(page)
