"""Secondary catalog response schemas for minifigure subsets.

The subsets endpoint returns its ``data`` either as a list of match groups
(``{"match_no": 0, "entries": [...]}``), as an already flattened list of
entries, or as a single ``{"entries": [...]}`` wrapper. All three are
normalized here into one flat list of :class:`SubsetEntry`.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator

log = logging.getLogger(__name__)

PART_ITEM_TYPE = "PART"
SUCCESS_CODE = 200


class SecondaryBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Secondary catalog %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class SecondaryItem(SecondaryBaseModel):
    no: str
    name: str | None = None
    type: str = PART_ITEM_TYPE
    category_id: int | None = None


class SubsetEntry(SecondaryBaseModel):
    item: SecondaryItem
    color_id: int | None = None
    quantity: int | None = None
    extra_quantity: int = 0
    is_alternate: bool = False
    is_counterpart: bool = False


class SubsetGroup(SecondaryBaseModel):
    match_no: int | None = None
    entries: list[SubsetEntry] = Field(default_factory=list)


def _subset_shape(value: Any) -> str:
    if isinstance(value, dict):
        return "group" if "entries" in value else "entry"
    return "group" if isinstance(value, SubsetGroup) else "entry"


SubsetElement = Annotated[
    Annotated[SubsetGroup, Tag("group")] | Annotated[SubsetEntry, Tag("entry")],
    Discriminator(_subset_shape),
]


class ResponseMeta(SecondaryBaseModel):
    code: int | None = None
    message: str | None = None
    description: str | None = None


class SubsetsResponse(SecondaryBaseModel):
    meta: ResponseMeta = Field(default_factory=ResponseMeta)
    data: list[SubsetElement] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def _unwrap_entries(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, dict) and "entries" in value:
            return value["entries"] or []
        return value

    @property
    def ok(self) -> bool:
        return self.meta.code in (None, SUCCESS_CODE)

    def entries(self) -> list[SubsetEntry]:
        flattened: list[SubsetEntry] = []
        for element in self.data:
            if isinstance(element, SubsetGroup):
                flattened.extend(element.entries)
            else:
                flattened.append(element)
        return flattened
