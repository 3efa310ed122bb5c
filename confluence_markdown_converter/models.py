"""Page, option and result models shared by the fetch client and the converter."""

from typing import TypeAlias

import jmespath
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic.alias_generators import to_camel

JsonResponse: TypeAlias = dict

_refs_exp = jmespath.compile("[].{id: to_string(id), title: title}")
_children_exp = jmespath.compile("children.page.results")
_labels_exp = jmespath.compile("metadata.labels.results[].name")


class PageRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str

    @classmethod
    def list_from_json(cls, data: list[JsonResponse] | None) -> list["PageRef"]:
        return [cls(**ref) for ref in _refs_exp.search(data or []) or []]


class Page(BaseModel):
    """A Confluence page as consumed by the converter."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    body: str = ""
    space_key: str = ""
    version: int = Field(default=1, ge=1)
    ancestors: list[PageRef] = Field(default_factory=list)
    children: list[PageRef] = Field(default_factory=list)
    labels: list[str] = Field(default_factory=list)
    url: str = ""

    @classmethod
    def from_json(cls, data: JsonResponse, base_url: str) -> "Page":
        """Map a ``/content/{id}`` response expanded with storage body and metadata."""
        page_id = str(data.get("id", ""))
        links = data.get("_links", {})
        site = str(links.get("base") or base_url).rstrip("/")
        if webui := links.get("webui"):
            url = f"{site}{webui}"
        else:
            url = f"{site}/pages/viewpage.action?pageId={page_id}"

        return cls(
            id=page_id,
            title=data.get("title", ""),
            body=data.get("body", {}).get("storage", {}).get("value", "") or "",
            space_key=(data.get("space") or {}).get("key", ""),
            version=(data.get("version") or {}).get("number") or 1,
            ancestors=PageRef.list_from_json(data.get("ancestors")),
            children=PageRef.list_from_json(_children_exp.search(data)),
            labels=_labels_exp.search(data) or [],
            url=url,
        )


class ConversionOptions(BaseModel):
    """Toggles for the optional conversion stages.

    CamelCase keys (``frontMatter``) are accepted as well as snake_case ones.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    front_matter: bool = True
    include_children: bool = True
    convert_macros: bool = True


class ConversionResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    markdown: str
    title: str
    page_id: str
    warnings: list[str] = Field(default_factory=list)
