"""
Unit tests for the freelancer directory.
"""

import pytest

from core.store import Collection
from models.user import Freelancer
from services.directory_service import FreelancerDirectory


@pytest.fixture
def directory():
    return FreelancerDirectory(Collection("freelancers"))


def freelancer(username, name, specialization, rating=4.0):
    return Freelancer(username=username, name=name, specialization=specialization, rating=rating)


class TestRegister:

    def test_register_once(self, directory):
        bob = freelancer("bob", "Bob Builder", "Web Development")

        assert directory.register(bob) is True
        assert directory.register(bob) is False
        assert len(directory.all()) == 1

    def test_profile_has_no_password(self, directory):
        directory.register(freelancer("bob", "Bob Builder", "Web Development"))
        assert "password_hash" not in directory.get("bob").to_dict()

    def test_get_unknown(self, directory):
        assert directory.get("nobody") is None


class TestSearch:
    """Case-insensitive substring on name or specialization."""

    @pytest.fixture
    def filled(self, directory):
        directory.register(freelancer("bob", "Bob Builder", "Web Development"))
        directory.register(freelancer("carol", "Carol Writer", "Content Writing"))
        directory.register(freelancer("dan", "Dan Designer", "Logo Design"))
        return directory

    def test_blank_term_returns_all_in_registration_order(self, filled):
        assert [p.username for p in filled.search("")] == ["bob", "carol", "dan"]
        assert [p.username for p in filled.search("   ")] == ["bob", "carol", "dan"]
        assert [p.username for p in filled.search(None)] == ["bob", "carol", "dan"]

    def test_matches_specialization(self, filled):
        assert [p.username for p in filled.search("WEB")] == ["bob"]

    def test_matches_name(self, filled):
        assert [p.username for p in filled.search("carol")] == ["carol"]

    def test_matches_either_field(self, filled):
        """'design' hits Dan's name and specialization only once."""
        assert [p.username for p in filled.search("design")] == ["dan"]

    def test_common_substring_keeps_order(self, filled):
        assert [p.username for p in filled.search("er")] == ["bob", "carol", "dan"]

    def test_no_match(self, filled):
        assert filled.search("plumbing") == []
