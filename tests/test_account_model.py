from bson import ObjectId

from membership.domain.models.account import MembershipAccount, UserAccount


def test_user_account_id_defaults_to_provider_key():
    account = UserAccount(provider_user_key="acct-1", username="jonas")

    assert account.id == "acct-1"
    assert account.to_document()["_id"] == "acct-1"


def test_object_id_keys_become_strings():
    object_id = ObjectId()

    account = UserAccount.from_document({"_id": object_id, "username": "jonas"})
    generic = MembershipAccount(provider_user_key=object_id, username="jonas")

    assert account.id == str(object_id)
    assert generic.provider_user_key == str(object_id)


def test_from_account_copies_all_fields():
    generic = MembershipAccount(
        provider_user_key="acct-1",
        username="jonas",
        email="jonas@example.com",
        is_approved=True,
        failed_password_window_attempt_count=2,
    )

    account = UserAccount.from_account(generic)

    assert account.id == "acct-1"
    assert account.email == "jonas@example.com"
    assert account.is_approved is True
    assert account.failed_password_window_attempt_count == 2


def test_copy_from_overwrites_fields_but_keeps_document_id():
    account = UserAccount(provider_user_key="acct-1", username="jonas", comment="old")
    changes = MembershipAccount(
        provider_user_key="acct-1", username="jonas", comment=None, is_online=True
    )

    account.copy_from(changes)

    assert account.id == "acct-1"
    assert account.comment is None
    assert account.is_online is True


def test_round_trip_through_stored_document():
    account = UserAccount(provider_user_key="acct-1", username="jonas")

    restored = UserAccount.from_document(account.to_document())

    assert restored == account
