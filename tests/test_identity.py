"""
Unit tests for signup, authentication and profile edits.
"""

import pytest
from unittest.mock import patch

from core.exceptions import (
    DuplicateUsernameError,
    InvalidCredentialsError,
    StorageUnavailableError,
    ValidationError,
)
from models.user import Client, Freelancer
from conftest import CLIENT_PROFILE, FREELANCER_PROFILE


class TestRegisterUser:
    """Signup."""

    def test_register_client(self, market):
        assert market.register_user(dict(CLIENT_PROFILE)) == "alice"

        user = market.get_user("alice")
        assert isinstance(user, Client)
        assert user.email == "alice@example.com"

    def test_register_freelancer_joins_directory(self, market):
        market.register_user(dict(FREELANCER_PROFILE))

        user = market.get_user("bob")
        assert isinstance(user, Freelancer)
        assert user.rating == 4.5
        assert [p.username for p in market.search_freelancers("")] == ["bob"]

    def test_client_not_in_directory(self, market):
        market.register_user(dict(CLIENT_PROFILE))
        assert market.search_freelancers(None) == []

    def test_password_is_hashed(self, market):
        market.register_user(dict(CLIENT_PROFILE))

        record = market.store.users.get("alice")
        assert "password" not in record
        assert record["password_hash"] != CLIENT_PROFILE["password"]
        assert "password_hash" not in market.get_user("alice").to_public_dict()

    def test_duplicate_username(self, market):
        market.register_user(dict(CLIENT_PROFILE))

        duplicate = dict(FREELANCER_PROFILE, username="alice")
        with pytest.raises(DuplicateUsernameError):
            market.register_user(duplicate)

        assert isinstance(market.get_user("alice"), Client)
        assert market.search_freelancers("") == []

    @pytest.mark.parametrize("field,value", [
        ("username", ""),
        ("username", "a b"),
        ("username", "ab"),
        ("password", "abc"),
        ("name", "  "),
        ("role", "admin"),
    ])
    def test_invalid_fields(self, market, field, value):
        with pytest.raises(ValidationError) as exc:
            market.register_user(dict(CLIENT_PROFILE, **{field: value}))

        assert exc.value.field == field
        assert market.get_user("alice") is None

    @pytest.mark.parametrize("rating", [-1, 5.5, "great"])
    def test_invalid_rating(self, market, rating):
        with pytest.raises(ValidationError) as exc:
            market.register_user(dict(FREELANCER_PROFILE, rating=rating))
        assert exc.value.field == "rating"


class TestAuthenticate:
    """Login."""

    def test_correct_secret(self, populated_market):
        assert populated_market.authenticate("alice", "alice-pw") == "alice"

    def test_wrong_secret(self, populated_market):
        with pytest.raises(InvalidCredentialsError):
            populated_market.authenticate("alice", "wrong")

    def test_unknown_user_same_error(self, populated_market):
        with pytest.raises(InvalidCredentialsError) as unknown:
            populated_market.authenticate("nobody", "alice-pw")
        with pytest.raises(InvalidCredentialsError) as wrong:
            populated_market.authenticate("alice", "wrong")

        assert unknown.value.message == wrong.value.message


class TestUpdateProfile:
    """Profile edits."""

    def test_update_client_contact(self, populated_market):
        user = populated_market.update_profile("alice", phone="555-9999")

        assert user.phone == "555-9999"
        assert populated_market.get_user("alice").phone == "555-9999"

    def test_freelancer_edit_refreshes_directory(self, populated_market):
        populated_market.update_profile("bob", specialization="Mobile Apps", rating=3.0)

        profile = populated_market.directory.get("bob")
        assert profile.specialization == "Mobile Apps"
        assert profile.rating == 3.0
        assert [p.username for p in populated_market.search_freelancers("mobile")] == ["bob"]

    def test_client_cannot_set_specialization(self, populated_market):
        with pytest.raises(ValidationError):
            populated_market.update_profile("alice", specialization="Anything")

    @pytest.mark.parametrize("field", ["username", "role", "password_hash"])
    def test_identity_fields_are_locked(self, populated_market, field):
        with pytest.raises(ValidationError):
            populated_market.update_profile("bob", **{field: "x"})

    def test_empty_name_rejected(self, populated_market):
        with pytest.raises(ValidationError):
            populated_market.update_profile("alice", name="")

    def test_unknown_user(self, populated_market):
        with pytest.raises(ValidationError):
            populated_market.update_profile("nobody", name="Someone")

    def test_password_survives_edit(self, populated_market):
        populated_market.update_profile("alice", name="Alice Renamed")
        assert populated_market.authenticate("alice", "alice-pw") == "alice"

    @pytest.mark.parametrize("field", ["email", "phone", "specialization"])
    def test_none_text_field_is_cleared(self, populated_market, field):
        user = populated_market.update_profile("bob", **{field: None})
        assert getattr(user, field) == ""

    def test_search_still_works_after_cleared_specialization(self, populated_market):
        populated_market.update_profile("bob", specialization=None)

        assert [p.username for p in populated_market.search_freelancers("writer")] == ["carol"]
        assert populated_market.directory.get("bob").specialization == ""

    @pytest.mark.parametrize("field,value", [
        ("name", 5),
        ("name", None),
        ("email", 5),
        ("specialization", ["web"]),
    ])
    def test_non_text_values_rejected(self, populated_market, field, value):
        with pytest.raises(ValidationError) as exc:
            populated_market.update_profile("bob", **{field: value})

        assert exc.value.field == field
        assert populated_market.get_user("bob").name == "Bob Builder"

    def test_text_is_stripped(self, populated_market):
        user = populated_market.update_profile("alice", name="  Alice Cooper  ")
        assert user.name == "Alice Cooper"


class TestStorageFailures:
    """A failed write leaves users and directory in step."""

    def test_directory_failure_stores_nothing(self, market):
        failure = StorageUnavailableError("freelancers", 3, "disk full")

        with patch.object(market.store.freelancers, "put", side_effect=failure):
            with pytest.raises(StorageUnavailableError):
                market.register_user(dict(FREELANCER_PROFILE))

        assert market.get_user("bob") is None
        assert market.search_freelancers("bob") == []

        # Retried signup succeeds and the freelancer is searchable
        assert market.register_user(dict(FREELANCER_PROFILE)) == "bob"
        assert [p.username for p in market.search_freelancers("bob")] == ["bob"]

    def test_user_failure_undoes_directory_entry(self, market):
        failure = StorageUnavailableError("users", 3, "disk full")

        with patch.object(market.store.users, "put", side_effect=failure):
            with pytest.raises(StorageUnavailableError):
                market.register_user(dict(FREELANCER_PROFILE))

        assert market.get_user("bob") is None
        assert market.directory.get("bob") is None

        assert market.register_user(dict(FREELANCER_PROFILE)) == "bob"
        assert market.directory.get("bob").rating == 4.5

    def test_stale_directory_profile_is_replaced(self, market):
        """A leftover profile from an incomplete signup is overwritten."""
        market.store.freelancers.put("bob", {"username": "bob", "name": "Old Bob"})

        market.register_user(dict(FREELANCER_PROFILE))

        assert market.directory.get("bob").name == "Bob Builder"

    def test_failed_edit_keeps_directory_profile(self, populated_market):
        failure = StorageUnavailableError("users", 3, "disk full")

        with patch.object(populated_market.store.users, "put", side_effect=failure):
            with pytest.raises(StorageUnavailableError):
                populated_market.update_profile("bob", specialization="Mobile Apps")

        assert populated_market.get_user("bob").specialization == "Web Development"
        assert populated_market.directory.get("bob").specialization == "Web Development"
