"""
Tests for the Account Store and Session
"""

import pytest

from delora.shared.core.errors import DuplicateAccountError, InvalidCredentialsError, ValidationError
from delora.shared.domain.accounts import AccountStore, Session, get_initials
from delora.shared.domain.notifications import Severity

ACCOUNTS_KEY = "deloraAccounts"
CURRENT_USER_KEY = "deloraCurrentUser"


@pytest.fixture
def accounts(memory_store):
    return AccountStore.load(memory_store)


class TestRegister:
    """Tests for registration."""

    def test_register_normalizes_email_and_signs_in(self, accounts, memory_store):
        status = accounts.register("Ada", "Ada@Example.com", "secret1")

        assert status.severity is Severity.SUCCESS
        assert status.text == "Welcome to Delora, Ada!"
        assert list(accounts.directory()) == ["ada@example.com"]
        assert accounts.current_user == Session(name="Ada", email="ada@example.com")
        assert memory_store.get(ACCOUNTS_KEY, {}) == {
            "ada@example.com": {"name": "Ada", "email": "ada@example.com", "password": "secret1"}
        }
        assert memory_store.get(CURRENT_USER_KEY, None) == {"name": "Ada", "email": "ada@example.com"}

    def test_trims_name_and_email(self, accounts):
        accounts.register("  Ada  ", "  ada@example.com ", "secret1")

        assert accounts.current_user.name == "Ada"
        assert accounts.get_identity("ada@example.com") is not None

    @pytest.mark.parametrize("name, email, password", [
        ("", "ada@example.com", "secret1"),
        ("Ada", "   ", "secret1"),
        ("Ada", "ada@example.com", ""),
        (None, "ada@example.com", "secret1"),
    ])
    def test_missing_field(self, accounts, name, email, password):
        with pytest.raises(ValidationError, match="Please complete every field."):
            accounts.register(name, email, password)
        assert accounts.current_user is None
        assert accounts.directory() == {}

    def test_short_password(self, accounts, memory_store):
        with pytest.raises(ValidationError, match="at least 6 characters"):
            accounts.register("Ada", "ada@example.com", "12345")
        assert ACCOUNTS_KEY not in memory_store

    def test_configured_minimum_length(self, memory_store):
        accounts = AccountStore.load(memory_store, min_password_length=10)
        with pytest.raises(ValidationError, match="at least 10 characters"):
            accounts.register("Ada", "ada@example.com", "secret1")

    def test_duplicate_email(self, accounts):
        accounts.register("Ada", "ada@example.com", "secret1")
        accounts.sign_out()

        with pytest.raises(DuplicateAccountError, match="Try signing in"):
            accounts.register("Other Ada", " ADA@example.com", "secret2")

        assert accounts.current_user is None
        assert accounts.get_identity("ada@example.com").name == "Ada"

    def test_brand_name_in_welcome(self, memory_store):
        accounts = AccountStore.load(memory_store, brand_name="Maison")
        assert accounts.register("Ada", "a@b.c", "secret1").text == "Welcome to Maison, Ada!"


class TestSignIn:
    """Tests for sign-in."""

    def test_register_then_sign_in(self, accounts):
        accounts.register("Ada", "ada@example.com", "secret1")
        accounts.sign_out()

        status = accounts.sign_in("ADA@example.com ", "secret1")

        assert status.text == "Signed in as Ada."
        assert accounts.current_user == Session(name="Ada", email="ada@example.com")

    def test_wrong_password_keeps_session(self, accounts):
        accounts.register("Ada", "ada@example.com", "secret1")
        before = accounts.current_user

        with pytest.raises(InvalidCredentialsError):
            accounts.sign_in("ada@example.com", "wrong-password")

        assert accounts.current_user is before

    def test_unknown_email_and_wrong_password_look_the_same(self, accounts):
        accounts.register("Ada", "ada@example.com", "secret1")

        with pytest.raises(InvalidCredentialsError) as unknown:
            accounts.sign_in("nobody@example.com", "secret1")
        with pytest.raises(InvalidCredentialsError) as wrong:
            accounts.sign_in("ada@example.com", "secret2")

        assert unknown.value.message == wrong.value.message == "Incorrect email or password. Please try again."

    def test_password_is_not_trimmed(self, accounts):
        accounts.register("Ada", "ada@example.com", " secret1 ")
        accounts.sign_out()

        with pytest.raises(InvalidCredentialsError):
            accounts.sign_in("ada@example.com", "secret1")

    @pytest.mark.parametrize("email, password", [("", "secret1"), ("ada@example.com", "")])
    def test_missing_field(self, accounts, email, password):
        with pytest.raises(ValidationError, match="Enter both email and password"):
            accounts.sign_in(email, password)


class TestSignOut:
    """Tests for sign-out."""

    def test_removes_the_record(self, accounts, memory_store):
        accounts.register("Ada", "ada@example.com", "secret1")

        status = accounts.sign_out()

        assert status.text == "You have been signed out."
        assert accounts.current_user is None
        assert CURRENT_USER_KEY not in memory_store

    def test_without_session(self, accounts):
        status = accounts.sign_out()
        assert status.severity is Severity.SUCCESS
        assert accounts.is_signed_in is False


class TestRestore:
    """Tests for loading directory and session from persistence."""

    def test_round_trip(self, accounts, memory_store):
        accounts.register("Ada", "ada@example.com", "secret1")
        accounts.register("Grace", "grace@example.com", "hopper1")

        restored = AccountStore.load(memory_store)

        assert restored.directory() == accounts.directory()
        assert restored.current_user == Session(name="Grace", email="grace@example.com")

    def test_round_trip_through_duckdb(self, duckdb_store):
        AccountStore.load(duckdb_store).register("Ada", "ada@example.com", "secret1")

        restored = AccountStore.load(duckdb_store)

        assert restored.is_signed_in
        assert restored.get_identity("ada@example.com").password == "secret1"

    def test_keys_are_normalized(self, memory_store):
        memory_store.set(ACCOUNTS_KEY, {
            "Ada@Example.com": {"name": "Ada", "email": "Ada@Example.com", "password": "secret1"},
        })

        restored = AccountStore.load(memory_store)

        assert list(restored.directory()) == ["ada@example.com"]
        restored.sign_in("ada@example.com", "secret1")

    def test_session_without_identity_is_kept(self, memory_store):
        memory_store.set(CURRENT_USER_KEY, {"name": "Ghost", "email": "ghost@example.com"})

        restored = AccountStore.load(memory_store)

        assert restored.current_user == Session(name="Ghost", email="ghost@example.com")

    @pytest.mark.parametrize("record", [["not", "a", "session"], {"name": "No email"}, {"email": "  "}])
    def test_unreadable_session_is_discarded(self, memory_store, record):
        memory_store.set(CURRENT_USER_KEY, record)

        restored = AccountStore.load(memory_store)

        assert restored.current_user is None
        assert CURRENT_USER_KEY not in memory_store


class TestInitials:
    """Tests for the account button initials."""

    @pytest.mark.parametrize("name, expected", [
        ("Ada King Lovelace", "AK"),
        ("ada", "A"),
        ("  grace   hopper ", "GH"),
        ("", ""),
    ])
    def test_get_initials(self, name, expected):
        assert get_initials(name) == expected

    def test_falls_back_to_email(self, memory_store):
        memory_store.set(CURRENT_USER_KEY, {"name": "", "email": "zed@example.com"})
        assert AccountStore.load(memory_store).initials() == "Z"

    def test_signed_out(self, accounts):
        assert accounts.initials() == ""
