"""
Tests for the backlog item store and its item ledger.
"""
import pytest
from uuid import uuid4

from sqlalchemy import func, select

from sprint_backlog.core.exceptions import (
    ErrorCategory,
    InvalidItemTypeError,
    InvalidPriorityError,
    InvalidStatusError,
    ItemNotFoundError,
    ProjectNotFoundError,
    ValidationFailedError,
)
from sprint_backlog.models import BacklogItem, ItemHistory
from sprint_backlog.repositories import BacklogFilters
from sprint_backlog.schemas import BacklogItemCreate, BacklogItemUpdate
from sprint_backlog.services.backlog_service import normalize_labels, parse_sprint_filter


class TestBacklogCreate:

    async def test_defaults_and_created_entry(self, backlog_service, make_item, user_id):
        item_id = await make_item("  Login page  ", description="  Allow sign in ")

        item = await backlog_service.get_by_id(item_id)
        assert item.title == "Login page"
        assert item.description == "Allow sign in"
        assert item.status == "New"
        assert item.labels == []
        assert item.created_by_id == user_id

        history = await backlog_service.get_history(item_id)
        assert len(history) == 1
        assert history[0].action == "Created"
        assert history[0].new_value["status"] == "New"

    async def test_positions_increase_within_project(self, backlog_service, make_item):
        first = await make_item("First")
        second = await make_item("Second")
        third = await make_item("Third")

        positions = [(await backlog_service.get_by_id(item_id)).position for item_id in (first, second, third)]
        assert positions == [1, 2, 3]

    @pytest.mark.parametrize("field, value, error", [
        ("type", "Feature", InvalidItemTypeError),
        ("priority", "Urgent", InvalidPriorityError),
        ("status", "Doing", InvalidStatusError),
    ])
    async def test_rejects_unknown_enum_values(self, backlog_service, project_id, user_id, field, value, error):
        data = {"project_id": project_id, "title": "Item", "type": "Task", "priority": "Low"}
        data[field] = value

        with pytest.raises(error) as exc_info:
            await backlog_service.create(BacklogItemCreate(**data), user_id)

        assert exc_info.value.category == ErrorCategory.VALIDATION
        items, total = await backlog_service.get_all(BacklogFilters(project_id=project_id))
        assert total == 0

    async def test_create_in_unknown_project(self, db, backlog_service, user_id):
        data = BacklogItemCreate(project_id=uuid4(), title="Orphan", type="Task", priority="Low")

        with pytest.raises(ProjectNotFoundError) as exc_info:
            await backlog_service.create(data, user_id)

        assert exc_info.value.category == ErrorCategory.NOT_FOUND
        assert await db.scalar(select(func.count()).select_from(BacklogItem)) == 0
        assert await db.scalar(select(func.count()).select_from(ItemHistory)) == 0

    async def test_labels_are_trimmed_and_unique(self, backlog_service, make_item):
        item_id = await make_item(labels=["api", " api ", "", "ui"])

        item = await backlog_service.get_by_id(item_id)
        assert item.labels == ["api", "ui"]


class TestBacklogUpdate:

    async def test_each_changed_field_is_recorded(self, backlog_service, make_item, user_id):
        item_id = await make_item("Login", priority="Low", story_points=3)

        item = await backlog_service.update(
            item_id,
            BacklogItemUpdate(title="Login v2", priority="Low", story_points=5, description="Details"),
            user_id
        )

        assert item.title == "Login v2"
        assert item.story_points == 5

        entries = {entry.field_changed: entry for entry in await backlog_service.get_history(item_id)
                   if entry.action != "Created"}
        assert set(entries) == {"title", "story_points", "description"}
        assert entries["title"].action == "Updated"
        assert entries["title"].old_value == "Login"
        assert entries["title"].new_value == "Login v2"
        assert entries["story_points"].old_value == 3
        assert entries["description"].action == "DescriptionUpdated"

    async def test_unchanged_update_writes_no_history(self, backlog_service, make_item, user_id):
        item_id = await make_item("Login", priority="High")

        await backlog_service.update(item_id, BacklogItemUpdate(title="Login", priority="High"), user_id)

        assert len(await backlog_service.get_history(item_id)) == 1

    async def test_invalid_enum_leaves_item_untouched(self, backlog_service, make_item, user_id):
        item_id = await make_item("Login")

        with pytest.raises(InvalidStatusError):
            await backlog_service.update(item_id, BacklogItemUpdate(title="Other", status="Bogus"), user_id)

        assert (await backlog_service.get_by_id(item_id)).title == "Login"

    async def test_required_fields_cannot_be_cleared(self, backlog_service, make_item, user_id):
        item_id = await make_item()

        with pytest.raises(ValidationFailedError):
            await backlog_service.update(item_id, BacklogItemUpdate(priority=None), user_id)

    async def test_update_unknown_item(self, backlog_service, user_id):
        with pytest.raises(ItemNotFoundError) as exc_info:
            await backlog_service.update(uuid4(), BacklogItemUpdate(title="x"), user_id)

        assert exc_info.value.category == ErrorCategory.NOT_FOUND


class TestStatusAndPriority:

    async def test_status_change_is_recorded(self, backlog_service, make_item, user_id):
        item_id = await make_item()

        item = await backlog_service.update_status(item_id, "In Progress", user_id)

        assert item.status == "In Progress"
        entry = (await backlog_service.get_history(item_id))[0]
        assert entry.action == "StatusChanged"
        assert entry.field_changed == "status"
        assert (entry.old_value, entry.new_value) == ("New", "In Progress")

    async def test_same_status_is_a_no_op(self, backlog_service, make_item, user_id):
        item_id = await make_item()

        await backlog_service.update_status(item_id, "New", user_id)

        assert len(await backlog_service.get_history(item_id)) == 1

    async def test_invalid_status(self, backlog_service, make_item, user_id):
        item_id = await make_item()

        with pytest.raises(InvalidStatusError):
            await backlog_service.update_status(item_id, "Finished", user_id)

    async def test_priority_change_is_recorded(self, backlog_service, make_item, user_id):
        item_id = await make_item(priority="Low")

        item = await backlog_service.update_priority(item_id, "Critical", user_id)

        assert item.priority == "Critical"
        entry = (await backlog_service.get_history(item_id))[0]
        assert entry.action == "PriorityChanged"
        assert (entry.old_value, entry.new_value) == ("Low", "Critical")

    async def test_invalid_priority(self, backlog_service, make_item, user_id):
        item_id = await make_item()

        with pytest.raises(InvalidPriorityError):
            await backlog_service.update_priority(item_id, "Whenever", user_id)


class TestLabelsAndComments:

    async def test_adding_existing_label_is_a_no_op(self, backlog_service, make_item, user_id):
        item_id = await make_item()

        await backlog_service.add_label(item_id, "api", user_id)
        item = await backlog_service.add_label(item_id, "api", user_id)

        assert item.labels == ["api"]
        actions = [entry.action for entry in await backlog_service.get_history(item_id)]
        assert actions.count("LabelAdded") == 1

    async def test_remove_label(self, backlog_service, make_item, user_id):
        item_id = await make_item(labels=["api", "ui"])

        item = await backlog_service.remove_label(item_id, "api", user_id)

        assert item.labels == ["ui"]
        entry = (await backlog_service.get_history(item_id))[0]
        assert entry.action == "LabelRemoved"
        assert entry.old_value == "api"

    async def test_removing_missing_label_writes_nothing(self, backlog_service, make_item, user_id):
        item_id = await make_item(labels=["ui"])

        item = await backlog_service.remove_label(item_id, "api", user_id)

        assert item.labels == ["ui"]
        assert len(await backlog_service.get_history(item_id)) == 1

    async def test_blank_label_rejected(self, backlog_service, make_item, user_id):
        item_id = await make_item()

        with pytest.raises(ValidationFailedError):
            await backlog_service.add_label(item_id, "   ", user_id)

    async def test_comment_is_history_only(self, backlog_service, make_item, user_id):
        item_id = await make_item()

        entry = await backlog_service.add_comment(item_id, "  Needs design review ", user_id)

        assert entry.comment == "Needs design review"
        history = await backlog_service.get_history(item_id)
        assert history[0].action == "CommentAdded"
        assert history[0].comment == "Needs design review"
        assert history[0].user.name == "Alice"

    async def test_blank_comment_rejected(self, backlog_service, make_item, user_id):
        item_id = await make_item()

        with pytest.raises(ValidationFailedError):
            await backlog_service.add_comment(item_id, "  ", user_id)

    async def test_comment_on_missing_item(self, backlog_service, user_id):
        with pytest.raises(ItemNotFoundError):
            await backlog_service.add_comment(uuid4(), "hello", user_id)


class TestBacklogDelete:

    async def test_delete_removes_item_and_history(self, backlog_service, make_item, user_id):
        item_id = await make_item()
        await backlog_service.add_comment(item_id, "bye", user_id)

        await backlog_service.delete(item_id, user_id)

        with pytest.raises(ItemNotFoundError):
            await backlog_service.get_by_id(item_id)
        assert await backlog_service.history.get_item_history(item_id) == []


class TestBacklogListing:

    async def test_filters(self, backlog_service, sprint_service, make_item, make_sprint, project_id, user_id):
        login = await make_item("Login form", type="Story", priority="High", labels=["auth"])
        crash = await make_item("Crash on save", type="Bug", priority="Critical", description="login token lost")
        docs = await make_item("Write docs", type="Task", priority="Low", labels=["docs"])
        sprint_id = await make_sprint()
        await sprint_service.add_item(sprint_id, crash, user_id)

        async def ids(**kwargs):
            items, total = await backlog_service.get_all(BacklogFilters(project_id=project_id, **kwargs))
            assert total == len(items)
            return {item.id for item in items}

        assert await ids(search="LOGIN") == {login, crash}
        assert await ids(types=["Bug", "Story"]) == {login, crash}
        assert await ids(priorities=["Low"]) == {docs}
        assert await ids(sprint_id=sprint_id) == {crash}
        assert await ids(unassigned_only=True) == {login, docs}
        assert await ids(labels=["auth", "missing"]) == {login}

    async def test_pagination_keeps_total(self, backlog_service, make_item, project_id):
        for idx in range(5):
            await make_item(f"Item {idx}")

        items, total = await backlog_service.get_all(BacklogFilters(project_id=project_id, page=2, limit=2))

        assert total == 5
        assert [item.title for item in items] == ["Item 2", "Item 3"]

    async def test_label_filter_is_exact(self, backlog_service, make_item, project_id):
        await make_item("Frontend", labels=["ui-kit"])

        items, total = await backlog_service.get_all(BacklogFilters(project_id=project_id, labels=["ui"]))

        assert total == 0


class TestHelpers:

    def test_parse_sprint_filter(self):
        sprint_id = uuid4()

        assert parse_sprint_filter(None) == (None, False)
        assert parse_sprint_filter("none") == (None, True)
        assert parse_sprint_filter(str(sprint_id)) == (sprint_id, False)
        with pytest.raises(ValidationFailedError):
            parse_sprint_filter("sprint-7")

    def test_normalize_labels(self):
        assert normalize_labels([" a", "b", "a ", ""]) == ["a", "b"]
