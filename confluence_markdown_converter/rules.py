"""Element rules for Confluence view-format markup.

Each rule pairs a filter with a replacement. The converter tries the rules in
order before its default handling of an element and the first matching rule
wins.
"""

from collections.abc import Callable
from dataclasses import dataclass

from bs4 import Tag


@dataclass(frozen=True)
class ElementRule:
    name: str
    filter: Callable[[Tag], bool]
    replacement: Callable[[Tag, str], str]

    def matches(self, el: Tag) -> bool:
        return self.filter(el)

    def replace(self, el: Tag, text: str) -> str:
        return self.replacement(el, text)


def has_class(el: Tag, class_name: str) -> bool:
    return class_name in el.get_attribute_list("class")


def attr(el: Tag, name: str) -> str:
    return str(el.get(name) or "")


def is_status(el: Tag) -> bool:
    return el.name == "span" and has_class(el, "status-macro")


def convert_status(el: Tag, text: str) -> str:
    return f"`{el.get_text().strip() or 'STATUS'}`"


def is_user_mention(el: Tag) -> bool:
    return el.name == "a" and (
        has_class(el, "confluence-userlink")
        or has_class(el, "user-mention")
        or el.has_attr("data-username")
    )


def convert_user_mention(el: Tag, text: str) -> str:
    return f"@{attr(el, 'data-username').strip() or el.get_text().strip() or 'user'}"


def is_emoticon(el: Tag) -> bool:
    return el.name == "img" and has_class(el, "emoticon")


def convert_emoticon(el: Tag, text: str) -> str:
    return attr(el, "alt") or attr(el, "data-emoji-fallback")


def is_page_link(el: Tag) -> bool:
    return el.name == "a" and attr(el, "data-linked-resource-type") == "page"


def convert_page_link(el: Tag, text: str) -> str:
    # Cross-page targets are not resolved, only the link text is kept.
    return f"[{text}]"


def is_attachment_image(el: Tag) -> bool:
    return el.name == "img" and attr(el, "data-linked-resource-type") == "attachment"


def convert_attachment_image(el: Tag, text: str) -> str:
    alt = attr(el, "alt") or "image"
    src = attr(el, "src") or attr(el, "data-image-src")
    return f"![{alt}]({src})"


def is_toc(el: Tag) -> bool:
    return el.name == "div" and has_class(el, "toc-macro")


def convert_toc(el: Tag, text: str) -> str:
    return "\n\n<!-- Table of Contents was here -->\n\n"


CONFLUENCE_RULES: tuple[ElementRule, ...] = (
    ElementRule("status", is_status, convert_status),
    ElementRule("user_mention", is_user_mention, convert_user_mention),
    ElementRule("emoticon", is_emoticon, convert_emoticon),
    ElementRule("page_link", is_page_link, convert_page_link),
    ElementRule("attachment_image", is_attachment_image, convert_attachment_image),
    ElementRule("toc", is_toc, convert_toc),
)


def match_rule(rules: tuple[ElementRule, ...], el: Tag) -> ElementRule | None:
    return next((rule for rule in rules if rule.matches(el)), None)
