from __future__ import annotations

import pytest

from workhub.core.enums import AccessLevel, EditPermission, ManualStatus
from workhub.core.exceptions import AuthorizationError, ValidationError


def _data(**overrides):
    data = {"title": "Onboarding", "content": "Read this", "department": "dev", "category": "procedure"}
    data.update(overrides)
    return data


def test_create_applies_defaults(container, member):
    m = container.manual_service.create(actor_id=member.user_id, data=_data(tags="intro,dev"))

    assert m.access_level == AccessLevel.ALL
    assert m.edit_permission == EditPermission.AUTHOR
    assert m.status == ManualStatus.DRAFT
    assert m.tags == ("intro", "dev")


def test_invalid_category_rejected(container, member, repos):
    with pytest.raises(ValidationError):
        container.manual_service.create(actor_id=member.user_id, data=_data(category="faq"))

    assert repos.manuals.manuals == {}


def test_draft_hidden_from_others(container, member, outsider):
    m = container.manual_service.create(actor_id=member.user_id, data=_data())

    with pytest.raises(AuthorizationError):
        container.manual_service.get(actor_id=outsider.user_id, manual_id=m.manual_id)

    page = container.manual_service.list_manuals(actor_id=outsider.user_id, params={})
    assert page.total_count == 0


def test_department_manual_listed_for_same_department_only(container, admin, member, outsider):
    container.manual_service.create(
        actor_id=admin.user_id, data=_data(access_level="department", status="published")
    )

    assert container.manual_service.list_manuals(actor_id=member.user_id, params={}).total_count == 1
    assert container.manual_service.list_manuals(actor_id=outsider.user_id, params={}).total_count == 0


def test_only_permitted_users_edit(container, member, outsider):
    m = container.manual_service.create(actor_id=member.user_id, data=_data(status="published"))

    with pytest.raises(AuthorizationError):
        container.manual_service.update(actor_id=outsider.user_id, manual_id=m.manual_id, data={"title": "x"})

    updated = container.manual_service.update(actor_id=member.user_id, manual_id=m.manual_id, data={"title": "v2"})
    assert updated.title == "v2"


def test_my_manuals_filters_by_status(container, member):
    container.manual_service.create(actor_id=member.user_id, data=_data(title="a"))
    container.manual_service.create(actor_id=member.user_id, data=_data(title="b", status="published"))

    page = container.manual_service.my_manuals(actor_id=member.user_id, params={"status": "draft"})

    assert [m.title for m in page.items] == ["a"]


def test_search_falls_back_to_updated_at_desc(container, member):
    container.manual_service.create(actor_id=member.user_id, data=_data(title="first", status="published"))
    container.manual_service.create(actor_id=member.user_id, data=_data(title="second", status="published"))

    page = container.manual_service.search(actor_id=member.user_id, params={"order_by": "bogus", "order": "sideways"})

    assert [m.title for m in page.items] == ["second", "first"]
