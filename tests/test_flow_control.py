"""
Unit tests for the list flow control decision.
"""
from types import SimpleNamespace

import pytest

from app.models.project import ProjectRole
from app.services.flow_control import decide


def make_list(name, enter=(), leave=(), list_id=None):
    return SimpleNamespace(
        id=list_id or name,
        name=name,
        required_role_to_enter=list(enter),
        required_role_to_leave=list(leave),
    )


class TestDecide:
    """Test decide() on plain list-like objects."""

    def test_allows_move_without_restrictions(self):
        decision = decide(make_list("To Do"), make_list("Done"), ProjectRole.MEMBER)

        assert decision.allowed
        assert decision.reason is None

    def test_allows_owner_to_leave_owner_only_list(self):
        source = make_list("Review", leave=["OWNER"])

        assert decide(source, make_list("Done"), ProjectRole.OWNER).allowed

    def test_denies_member_leaving_owner_only_list(self):
        source = make_list("Review", leave=["OWNER"])

        decision = decide(source, make_list("Done"), ProjectRole.MEMBER)

        assert not decision.allowed
        assert decision.reason == 'cannot leave list "Review"'

    def test_denies_member_entering_admin_only_list(self):
        target = make_list("Done", enter=["ADMIN"])

        decision = decide(make_list("To Do"), target, ProjectRole.MEMBER)

        assert not decision.allowed
        assert decision.reason == 'cannot enter list "Done"'

    def test_allows_admin_when_admin_or_owner_required(self):
        target = make_list("Done", enter=["ADMIN", "OWNER"])

        assert decide(make_list("To Do"), target, ProjectRole.ADMIN).allowed

    def test_leave_restriction_is_checked_before_enter(self):
        source = make_list("QA", leave=["OWNER"])
        target = make_list("Done", enter=["OWNER"])

        decision = decide(source, target, ProjectRole.MEMBER)

        assert decision.reason == 'cannot leave list "QA"'

    def test_enter_denied_after_leave_allowed(self):
        source = make_list("QA", leave=["MEMBER"])
        target = make_list("Done", enter=["OWNER"])

        decision = decide(source, target, ProjectRole.MEMBER)

        assert not decision.allowed
        assert decision.reason == 'cannot enter list "Done"'

    @pytest.mark.parametrize("role", list(ProjectRole))
    def test_all_roles_allowed_when_all_listed(self, role):
        roles = ["OWNER", "ADMIN", "MEMBER"]
        source = make_list("A", leave=roles)
        target = make_list("B", enter=roles)

        assert decide(source, target, role).allowed

    def test_membership_is_not_hierarchical(self):
        """OWNER outranks MEMBER but is not in the set, so the move is denied."""
        target = make_list("Done", enter=["MEMBER"])

        decision = decide(make_list("To Do"), target, ProjectRole.OWNER)

        assert not decision.allowed
        assert decision.reason == 'cannot enter list "Done"'

    def test_same_list_bypasses_restrictions(self):
        locked = make_list("Locked", enter=["OWNER"], leave=["OWNER"])

        assert decide(locked, locked, ProjectRole.MEMBER).allowed

    def test_same_list_by_id_bypasses_restrictions(self):
        first = make_list("Locked", enter=["OWNER"], leave=["OWNER"], list_id="list-1")
        second = make_list("Locked", enter=["OWNER"], leave=["OWNER"], list_id="list-1")

        assert decide(first, second, ProjectRole.MEMBER).allowed

    def test_accepts_role_as_plain_string(self):
        target = make_list("Done", enter=[ProjectRole.ADMIN])

        assert decide(make_list("To Do"), target, "ADMIN").allowed
        assert not decide(make_list("To Do"), target, "MEMBER").allowed

    def test_missing_restriction_attributes_mean_unrestricted(self):
        source = SimpleNamespace(id="a", name="A")
        target = SimpleNamespace(id="b", name="B", required_role_to_enter=None)

        assert decide(source, target, ProjectRole.MEMBER).allowed

    @pytest.mark.parametrize("role", list(ProjectRole))
    def test_decision_is_symmetric_for_unrestricted_lists(self, role):
        a = make_list("A")
        b = make_list("B")

        assert decide(a, b, role).allowed == decide(b, a, role).allowed
