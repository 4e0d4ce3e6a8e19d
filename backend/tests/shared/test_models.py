"""Tests for shared/models.py."""

import pytest

from shared.models import Identity


class TestIdentity:
    def test_is_immutable(self):
        identity = Identity(id="user-1")
        with pytest.raises(Exception):  # Pydantic ValidationError
            identity.id = "user-2"

    def test_label_prefers_display_name(self):
        assert Identity(id="u", email="a@b.test", display_name="Ann").label == "Ann"
        assert Identity(id="u", email="a@b.test").label == "a@b.test"
        assert Identity(id="u").label == "u"

    def test_ignores_unknown_fields(self):
        identity = Identity(id="u", role="authenticated")
        assert not hasattr(identity, "role")
