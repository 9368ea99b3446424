"""Global secondary indexes of the photo metadata table.

The frontend lists photos by category, by featured flag and by portfolio,
always newest first, so each access pattern gets its own index keyed by the
grouping attribute and sorted by creation time.
"""
from enum import Enum

from attrs import define, field
from attrs.validators import instance_of

import common.constants as constants


class IndexGrouping(str, Enum):
    CATEGORY = "category"
    FEATURED = "featured"
    PORTFOLIO = "portfolio"


@define(slots=True, frozen=True)
class IndexDefinition:
    grouping: IndexGrouping = field(validator=instance_of(IndexGrouping))
    sort_key: str = field(default=constants.CREATED_AT_ATTRIBUTE, init=False)

    @property
    def index_name(self) -> str:
        return f"{self.grouping.value.capitalize()}Index"

    @property
    def partition_key(self) -> str:
        return self.grouping.value


def index_topology() -> tuple[IndexDefinition, ...]:
    return tuple(IndexDefinition(grouping) for grouping in IndexGrouping)
