from workhub.core.enums import AccessLevel, Department, EditPermission, ManualCategory, ManualStatus
from workhub.manuals.model import Manual, Viewer
from workhub.manuals.policy import can_edit, can_view, is_accessible

AUTHOR = Viewer(user_id=1, department="dev")
TEAMMATE = Viewer(user_id=2, department="dev")
STRANGER = Viewer(user_id=3, department="sales")


def manual(**overrides) -> Manual:
    base = dict(
        manual_id=1,
        user_id=AUTHOR.user_id,
        title="Deploy",
        content="Steps",
        department=Department.DEV,
        category=ManualCategory.PROCEDURE,
        access_level=AccessLevel.ALL,
        edit_permission=EditPermission.AUTHOR,
        status=ManualStatus.PUBLISHED,
    )
    base.update(overrides)
    return Manual(**base)


def test_published_all_access_visible_to_everyone():
    m = manual()

    assert all(can_view(m, v) for v in (AUTHOR, TEAMMATE, STRANGER))


def test_department_access_limited_to_same_department():
    m = manual(access_level=AccessLevel.DEPARTMENT)

    assert is_accessible(m, TEAMMATE)
    assert not is_accessible(m, STRANGER)


def test_specific_access_only_author():
    m = manual(access_level=AccessLevel.SPECIFIC)

    assert can_view(m, AUTHOR)
    assert not can_view(m, TEAMMATE)


def test_draft_visible_only_to_author():
    m = manual(status=ManualStatus.DRAFT)

    assert can_view(m, AUTHOR)
    assert not can_view(m, TEAMMATE)
    assert not is_accessible(m, AUTHOR)


def test_department_edit_permission():
    m = manual(edit_permission=EditPermission.DEPARTMENT)

    assert can_edit(m, TEAMMATE)
    assert not can_edit(m, STRANGER)
    assert not can_edit(manual(), TEAMMATE)
