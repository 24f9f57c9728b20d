from __future__ import annotations

from datetime import date, datetime

import pytest

from workhub.core.enums import TaskPriority, TaskStatus
from workhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_missing_title_rejected_and_nothing_persisted(container, member, repos):
    with pytest.raises(ValidationError) as exc:
        container.task_service.create(actor_id=member.user_id, data={"description": "no title"})

    assert "title" in exc.value.errors
    assert repos.tasks.tasks == {}


def test_invalid_subtask_rejects_whole_task(container, member, repos):
    with pytest.raises(ValidationError):
        container.task_service.create(
            actor_id=member.user_id,
            data={"title": "Release", "subtasks": [{"title": "ok"}, {"title": ""}]},
        )

    assert repos.tasks.tasks == {}


def test_create_defaults_and_subtasks(container, member):
    detail = container.task_service.create(
        actor_id=member.user_id,
        data={
            "title": "Release",
            "tags": "ops, release ,ops",
            "due_date": "2026-03-10",
            "subtasks": [{"title": "tag build"}, {"title": "announce", "completed": True}],
        },
    )

    task = detail.task
    assert task.status == TaskStatus.PENDING
    assert task.priority == TaskPriority.MEDIUM
    assert task.assigned_to == member.user_id
    assert task.tags == ("ops", "release")
    assert task.due_date == date(2026, 3, 10)
    assert [s.status for s in detail.subtasks] == [TaskStatus.PENDING, TaskStatus.COMPLETED]


def test_invalid_enum_rejected(container, member):
    with pytest.raises(ValidationError):
        container.task_service.create(actor_id=member.user_id, data={"title": "x", "priority": "urgent"})


def test_outsider_cannot_view_private_task(container, member, outsider):
    task = container.task_service.create(actor_id=member.user_id, data={"title": "private"}).task

    with pytest.raises(AuthorizationError):
        container.task_service.get(actor_id=outsider.user_id, task_id=task.task_id)


def test_admin_can_modify_any_task(container, admin, member):
    task = container.task_service.create(actor_id=member.user_id, data={"title": "private"}).task

    updated = container.task_service.update_status(actor_id=admin.user_id, task_id=task.task_id, status="completed")

    assert updated.status == TaskStatus.COMPLETED


def test_assign_to_unknown_user_is_not_found(container, member):
    task = container.task_service.create(actor_id=member.user_id, data={"title": "x"}).task

    with pytest.raises(NotFoundError):
        container.task_service.assign(actor_id=member.user_id, task_id=task.task_id, user_id=999)


def test_toggle_subtask_flips_status(container, member):
    detail = container.task_service.create(actor_id=member.user_id, data={"title": "p", "subtasks": [{"title": "s"}]})
    sub = detail.subtasks[0]

    toggled = container.task_service.toggle_subtask(
        actor_id=member.user_id, task_id=detail.task.task_id, subtask_id=sub.task_id
    )
    assert toggled.status == TaskStatus.COMPLETED


def test_update_syncs_subtasks(container, member, repos):
    detail = container.task_service.create(
        actor_id=member.user_id, data={"title": "p", "subtasks": [{"title": "keep"}, {"title": "drop"}]}
    )
    keep = detail.subtasks[0]

    updated = container.task_service.update(
        actor_id=member.user_id,
        task_id=detail.task.task_id,
        data={"subtasks": [{"id": keep.task_id, "title": "kept", "completed": True}, {"title": "new"}]},
    )

    assert sorted(s.title for s in updated.subtasks) == ["kept", "new"]
    assert len(repos.tasks.tasks) == 3


def test_batch_update_reports_each_item(container, member, outsider):
    mine = container.task_service.create(actor_id=member.user_id, data={"title": "mine"}).task
    theirs = container.task_service.create(actor_id=outsider.user_id, data={"title": "theirs"}).task

    results = container.task_service.batch_update(
        actor_id=member.user_id,
        items=[
            {"id": mine.task_id, "status": "in_progress"},
            {"id": theirs.task_id, "status": "completed"},
            {"status": "completed"},
        ],
    )

    assert [r["success"] for r in results] == [True, False, False]


def test_batch_update_reports_non_numeric_id_per_item(container, member):
    task = container.task_service.create(actor_id=member.user_id, data={"title": "mine"}).task

    results = container.task_service.batch_update(
        actor_id=member.user_id,
        items=[{"id": "abc", "title": "x"}, {"id": str(task.task_id), "title": "renamed"}],
    )

    assert [r["success"] for r in results] == [False, True]
    assert "integer" in results[0]["error"]
    assert container.task_service.get(actor_id=member.user_id, task_id=task.task_id).task.title == "renamed"


def test_list_includes_organization_tasks(container, admin, member):
    org = container.organization_service.create(actor_id=admin.user_id, name="Acme")
    container.task_service.create(actor_id=admin.user_id, data={"title": "shared", "organization_id": org.organization_id})

    page = container.task_service.list_tasks(actor_id=member.user_id, params={})
    assert page.total_count == 0

    container.organization_service.join(actor_id=member.user_id, invite_code=org.invite_code)
    page = container.task_service.list_tasks(actor_id=member.user_id, params={})
    assert [t.title for t in page.items] == ["shared"]


def test_dashboard_groups_upcoming_and_overdue(container, member):
    service = container.task_service
    service.create(actor_id=member.user_id, data={"title": "late", "due_date": "2026-02-20"})
    service.create(actor_id=member.user_id, data={"title": "soon", "due_date": "2026-03-05"})
    service.create(actor_id=member.user_id, data={"title": "done", "due_date": "2026-02-01", "status": "completed"})

    board = service.dashboard(actor_id=member.user_id, now=datetime(2026, 3, 2, 12, 0))

    assert [t.title for t in board.overdue] == ["late"]
    assert [t.title for t in board.upcoming] == ["soon"]
    assert board.status_counts["completed"] == 1
    assert sum(board.priority_counts.values()) == 3


def test_calendar_groups_by_due_date(container, member):
    service = container.task_service
    service.create(actor_id=member.user_id, data={"title": "a", "due_date": "2026-03-03"})
    service.create(actor_id=member.user_id, data={"title": "b", "due_date": "2026-03-03"})
    service.create(actor_id=member.user_id, data={"title": "c", "due_date": "2026-04-01"})

    grouped = service.calendar(actor_id=member.user_id, start=date(2026, 3, 1), end=date(2026, 3, 31))

    assert list(grouped) == ["2026-03-03"]
    assert len(grouped["2026-03-03"]) == 2
