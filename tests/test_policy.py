"""Access rules for every table, evaluated through the central policy."""

import pytest

from app.core import policy
from app.core.errors import AccessDenied, AuthenticationRequired
from app.core.session import Caller
from tests.conftest import USER_A, USER_B


@pytest.mark.parametrize("resource", ["profiles", "tutorials", "tutorial_likes", "tutorial_comments"])
def test_public_tables_are_readable_by_anyone(resource):
    assert policy.is_allowed(None, resource, "read")
    assert policy.is_allowed(USER_A, resource, "read", row_owner_id=USER_B)


def test_enrollments_are_readable_only_by_the_enrolled_user():
    assert policy.is_allowed(USER_A, "enrollments", "read", row_owner_id=USER_A)
    assert not policy.is_allowed(USER_B, "enrollments", "read", row_owner_id=USER_A)
    assert not policy.is_allowed(None, "enrollments", "read", row_owner_id=USER_A)


@pytest.mark.parametrize("resource", ["tutorials", "tutorial_likes", "tutorial_comments", "enrollments"])
def test_owned_rows_are_created_and_deleted_by_owner_only(resource):
    for action in ("create", "delete"):
        assert policy.is_allowed(USER_A, resource, action, row_owner_id=USER_A)
        assert not policy.is_allowed(USER_B, resource, action, row_owner_id=USER_A)
        assert not policy.is_allowed(None, resource, action, row_owner_id=USER_A)


def test_profiles_are_never_created_or_deleted_by_clients():
    assert not policy.is_allowed(USER_A, "profiles", "create", row_owner_id=USER_A)
    assert not policy.is_allowed(USER_A, "profiles", "delete", row_owner_id=USER_A)
    assert policy.is_allowed(USER_A, "profiles", "update", row_owner_id=USER_A)
    assert not policy.is_allowed(USER_B, "profiles", "update", row_owner_id=USER_A)


@pytest.mark.parametrize("resource", ["tutorial_likes", "tutorial_comments", "enrollments"])
def test_child_rows_cannot_be_updated(resource):
    assert not policy.is_allowed(USER_A, resource, "update", row_owner_id=USER_A)


def test_only_owner_updates_tutorial():
    assert policy.is_allowed(USER_A, "tutorials", "update", row_owner_id=USER_A)
    assert not policy.is_allowed(USER_B, "tutorials", "update", row_owner_id=USER_A)


def test_owner_rule_requires_a_known_row_owner():
    assert not policy.is_allowed(USER_A, "tutorials", "delete", row_owner_id=None)


def test_authorize_raises_401_for_anonymous_and_403_for_other_users():
    with pytest.raises(AuthenticationRequired):
        policy.authorize(Caller.anonymous(), "tutorials", "delete", row_owner_id=USER_A)
    with pytest.raises(AccessDenied) as exc_info:
        policy.authorize(Caller(user_id=USER_B, access_token="t"), "tutorials", "delete", row_owner_id=USER_A)
    assert exc_info.value.status_code == 403
    assert "tutorial" in exc_info.value.detail


def test_authorize_denies_system_actions_even_to_signed_in_users():
    with pytest.raises(AccessDenied):
        policy.authorize(Caller(user_id=USER_A, access_token="t"), "profiles", "create", row_owner_id=USER_A)


def test_caller_without_token_is_not_authenticated():
    assert not Caller(user_id=USER_A).is_authenticated
    assert not policy.is_allowed(None, "tutorials", "create", row_owner_id=USER_A)
    with pytest.raises(AuthenticationRequired):
        policy.authorize(Caller(user_id=USER_A), "tutorials", "create", row_owner_id=USER_A)


def test_unknown_rule_is_a_programming_error():
    with pytest.raises(ValueError):
        policy.is_allowed(USER_A, "tutorials", "publish")


def test_object_paths_are_owned_by_their_first_segment():
    caller = Caller(user_id=USER_A, access_token="t")
    assert policy.owns_object_path(caller, f"{USER_A}/1700000000000.png")
    assert not policy.owns_object_path(caller, f"{USER_B}/1700000000000.png")
    assert not policy.owns_object_path(Caller.anonymous(), f"{USER_A}/1.png")
    with pytest.raises(AccessDenied):
        policy.authorize_object_path(caller, f"{USER_B}/1.png")
    with pytest.raises(AuthenticationRequired):
        policy.authorize_object_path(Caller.anonymous(), f"{USER_A}/1.png")
