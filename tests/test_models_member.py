"""Tests for the Member model."""

import pytest
from pydantic import ValidationError

from library_desk.models.member import Member


class TestMemberModel:
    """Test suite for the Member model."""

    def test_create_valid_member(self):
        member = Member(
            id="M-1",
            name="Jane Doe",
            email="jane.doe@example.com",
            contact="555-0100",
        )

        assert member.id == "M-1"
        assert member.name == "Jane Doe"
        assert str(member) == "Jane Doe (M-1)"

    @pytest.mark.parametrize("field", ["id", "name", "email", "contact"])
    def test_all_fields_required(self, field):
        data = {"id": "M-1", "name": "Jane Doe", "email": "jane@example.com", "contact": "555"}
        data[field] = " "
        with pytest.raises(ValidationError):
            Member(**data)

    def test_email_is_free_text(self):
        """Email is stored as entered; only emptiness is checked."""
        member = Member(id="M-1", name="Jane", email="front desk", contact="ext. 12")
        assert member.email == "front desk"

    def test_name_can_change_but_id_cannot(self):
        member = Member(id="M-1", name="Jane Doe", email="jane@example.com", contact="555")

        member.name = "Jane Smith"
        assert member.name == "Jane Smith"

        with pytest.raises(ValidationError):
            member.id = "M-2"
