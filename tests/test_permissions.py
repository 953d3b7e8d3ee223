from types import SimpleNamespace

import pytest

from portal.permissions import (
    Capability,
    OWNER_CAPABILITIES,
    STAFF_ADMIN_CAPABILITIES,
    STAFF_CAPABILITIES,
    resolve_capabilities,
)


def membership(role="staff", can_add_staff=False, status="active"):
    return SimpleNamespace(role=role, can_add_staff=can_add_staff, status=status)


@pytest.mark.staff
class TestResolveCapabilities:
    def test_owner_has_everything(self):
        assert resolve_capabilities(None, is_owner=True) == frozenset(Capability)

    def test_owner_role_membership(self):
        assert resolve_capabilities(membership(role="owner")) == OWNER_CAPABILITIES

    def test_staff_admin(self):
        caps = resolve_capabilities(membership(role="admin", can_add_staff=True))
        assert caps == STAFF_ADMIN_CAPABILITIES
        assert Capability.MANAGE_STAFF in caps
        assert Capability.GRANT_STAFF_ADMIN not in caps
        assert Capability.MANAGE_PLAN not in caps

    def test_can_add_staff_flag_alone_grants_staff_admin(self):
        assert resolve_capabilities(membership(can_add_staff=True)) == STAFF_ADMIN_CAPABILITIES

    def test_plain_staff(self):
        caps = resolve_capabilities(membership())
        assert caps == STAFF_CAPABILITIES
        assert Capability.EDIT_LOCATION not in caps

    def test_removed_or_pending_staff_has_nothing(self):
        assert resolve_capabilities(membership(status="removed")) == frozenset()
        assert resolve_capabilities(membership(status="pending")) == frozenset()

    def test_no_membership(self):
        assert resolve_capabilities(None) == frozenset()
