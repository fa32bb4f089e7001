"""Work item links attached to a checkin."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CheckinWorkItemAction(str, Enum):
    ASSOCIATE = "associate"
    RESOLVE = "resolve"


@dataclass(slots=True, frozen=True)
class WorkItemCheckinInfo:
    work_item_id: int
    title: str = ""
    action: CheckinWorkItemAction = CheckinWorkItemAction.ASSOCIATE
