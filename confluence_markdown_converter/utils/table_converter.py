from typing import cast

from bs4 import Tag
from markdownify import MarkdownConverter
from tabulate import tabulate


def _get_int_attr(cell: Tag, attr: str, default: str = "1") -> int:
    val = cell.get(attr, default)
    if isinstance(val, list):
        val = val[0] if val else default
    try:
        return max(int(str(val)), 1)
    except (ValueError, TypeError):
        return int(default)


def pad(rows: list[list[Tag]]) -> list[list[Tag]]:
    """Pad table rows so that rowspan and colspan cells keep columns aligned."""
    padded: list[list[Tag]] = []
    occ: dict[tuple[int, int], Tag] = {}
    for r, row in enumerate(rows):
        if not row:
            continue
        cur: list[Tag] = []
        c = 0
        for cell in row:
            while (r, c) in occ:
                cur.append(occ.pop((r, c)))
                c += 1
            rs = _get_int_attr(cell, "rowspan")
            cs = _get_int_attr(cell, "colspan")
            cur.append(cell)
            cur.extend(make_empty_cell() for _ in range(1, cs))
            for i in range(rs):
                for j in range(cs):
                    if i or j:
                        occ[(r + i, c + j)] = make_empty_cell()
            c += cs
        while (r, c) in occ:
            cur.append(occ.pop((r, c)))
            c += 1
        padded.append(cur)

    width = max((len(row) for row in padded), default=0)
    return [row + [make_empty_cell() for _ in range(width - len(row))] for row in padded]


def make_empty_cell() -> Tag:
    return Tag(name="td")


class TableConverter(MarkdownConverter):
    """Render HTML tables as pipe tables."""

    def convert_table(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        rows = [cast(list[Tag], tr.find_all(["td", "th"])) for tr in el.find_all("tr")]
        rows = [row for row in rows if row]
        if not rows:
            return ""

        converted = [
            [self.convert(str(cell)).strip().replace("|", "\\|") for cell in row]
            for row in pad(rows)
        ]

        if all(cell.name == "th" for cell in rows[0]):
            table = tabulate(converted[1:], headers=converted[0], tablefmt="pipe")
        else:
            table = tabulate(converted, headers=[""] * len(converted[0]), tablefmt="pipe")

        return f"\n\n{table}\n\n"

    def convert_th(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        return self.convert_td(el, text, parent_tags)

    def convert_tr(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        return text

    def convert_td(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        """Keep multi-line cell content on one line."""
        return text.strip().replace("\n", "<br/>").removesuffix("<br/>").removeprefix("<br/>")

    def convert_thead(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        return text

    def convert_tbody(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        return text

    def convert_ol(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        if "td" in parent_tags or "th" in parent_tags:
            return str(el)
        return super().convert_ol(el, text, parent_tags)

    def convert_ul(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        if "td" in parent_tags or "th" in parent_tags:
            return str(el)
        return super().convert_ul(el, text, parent_tags)

    def convert_p(self, el: Tag, text: str, parent_tags: set[str]) -> str:
        md = super().convert_p(el, text, parent_tags)
        if "td" in parent_tags or "th" in parent_tags:
            md = md.replace("\n", "") + "<br/>"
        return md
