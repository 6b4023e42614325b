import logging
from uuid import UUID

from ..core.constants import ActivityType
from ..models import ItemHistory, SprintHistory
from ..schemas import UserActivitiesResponse, UserActivity
from .history_service import (
    HistoryOperations,
    as_utc,
    decode_payload,
    item_summary,
    sprint_summary,
)


class ActivityService:
    """Merges a user's item and sprint ledgers into one timeline."""

    def __init__(self, history: HistoryOperations) -> None:
        self.history = history
        self._logger = logging.getLogger(__name__)

    async def get_activities(self, user_id: UUID, limit: int = 0) -> UserActivitiesResponse:
        """Newest-first activity for ``user_id``.

        Both streams are fetched in full: the newest N of each stream are
        not necessarily the newest N overall, so truncation happens only
        after the merge. ``total`` is the merged count before truncation;
        ``limit <= 0`` returns everything.
        """
        item_entries = await self.history.get_user_item_history(user_id)
        sprint_entries = await self.history.get_user_sprint_history(user_id)

        activities = [self._from_item_entry(entry) for entry in item_entries]
        activities.extend(self._from_sprint_entry(entry) for entry in sprint_entries)

        # sorted() is stable, so ties keep stream order then ledger order
        activities = sorted(activities, key=lambda activity: activity.timestamp, reverse=True)
        total = len(activities)

        if limit > 0:
            activities = activities[:limit]

        self._logger.debug(
            "Merged %d item and %d sprint entries for user %s",
            len(item_entries), len(sprint_entries), user_id
        )
        return UserActivitiesResponse(activities=activities, total=total, limit=limit)

    @staticmethod
    def _from_item_entry(entry: ItemHistory) -> UserActivity:
        return UserActivity(
            id=entry.id,
            type=ActivityType.ITEM.value,
            action=entry.action,
            timestamp=as_utc(entry.timestamp),
            field_changed=entry.field_changed,
            old_value=decode_payload(entry.old_value),
            new_value=decode_payload(entry.new_value),
            comment=entry.comment,
            item=item_summary(entry),
        )

    @staticmethod
    def _from_sprint_entry(entry: SprintHistory) -> UserActivity:
        return UserActivity(
            id=entry.id,
            type=ActivityType.SPRINT.value,
            action=entry.action,
            timestamp=as_utc(entry.timestamp),
            old_value=decode_payload(entry.old_value),
            new_value=decode_payload(entry.new_value),
            item=item_summary(entry),
            sprint=sprint_summary(entry),
        )

