"""Primary catalog (Rebrickable-style) paginated response schemas."""

from __future__ import annotations

import logging
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger(__name__)


class PrimaryBaseModel(BaseModel):
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
            "Primary catalog %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class PrimaryPart(PrimaryBaseModel):
    part_num: str
    name: str | None = None
    part_cat_id: int | None = None


class PrimaryColor(PrimaryBaseModel):
    id: int
    name: str | None = None


class InventoryPart(PrimaryBaseModel):
    part: PrimaryPart
    color: PrimaryColor
    quantity: int
    is_spare: bool = False


class InventoryMinifig(PrimaryBaseModel):
    set_num: str
    set_name: str | None = None
    quantity: int = 1


class _Page(PrimaryBaseModel):
    count: int = 0
    next: str | None = None
    previous: str | None = None


class InventoryPartsPage(_Page):
    results: list[InventoryPart] = Field(default_factory=list)


class InventoryMinifigsPage(_Page):
    results: list[InventoryMinifig] = Field(default_factory=list)
