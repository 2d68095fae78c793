import pytest

from app.features.submissions.schemas.submission import PreferencesIn, SubmissionIn
from app.features.submissions.services.submission_service import (
    SubmissionService,
    build_contact_patch,
    build_desired_preferences,
)
from app.platform.exceptions import MissingFieldsError, StoreError

JANE = {
    "first": "Jane",
    "last": "Doe",
    "email": "JANE@X.COM",
    "phone": "(555) 123-4567",
    "prefs": {"updates": True, "frequency": "weekly", "channels": ["email", "sms", "x"]},
    "source": "landing-page",
}


async def _submit(store, payload, ip="203.0.113.7", user_agent="pytest"):
    service = SubmissionService(store)
    return await service.process(
        SubmissionIn.model_validate(payload), raw_payload=payload, ip=ip, user_agent=user_agent
    )


@pytest.mark.asyncio
async def test_new_contact_end_to_end(memory_store):
    contact_id = await _submit(memory_store, JANE)

    contact = memory_store.contacts[contact_id]
    assert contact["email"] == "jane@x.com"
    assert contact["phone_e164"] == "+15551234567"
    assert contact["first_name"] == "Jane"
    assert contact["last_name"] == "Doe"

    prefs = memory_store.preferences[contact_id]
    assert prefs == {
        "contact_id": contact_id,
        "thrive_invites": False,
        "friday_reminders": False,
        "updates": True,
        "real_insights": False,
        "frequency": "weekly",
        "channels": ["email", "sms"],
    }

    assert len(memory_store.submissions) == 1
    logged = memory_store.submissions[0]
    assert logged["contact_id"] == contact_id
    assert logged["source"] == "landing-page"
    assert logged["ip"] == "203.0.113.7"
    assert logged["user_agent"] == "pytest"
    assert logged["payload"] is JANE


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["first", "last", "email", "phone"])
async def test_missing_required_field_rejects_everything(memory_store, missing):
    payload = {k: v for k, v in JANE.items() if k != missing}

    with pytest.raises(MissingFieldsError):
        await _submit(memory_store, payload)

    assert memory_store.calls == []


@pytest.mark.asyncio
async def test_whitespace_name_and_bad_phone_count_as_missing(memory_store):
    with pytest.raises(MissingFieldsError):
        await _submit(memory_store, {**JANE, "first": "   "})
    with pytest.raises(MissingFieldsError):
        await _submit(memory_store, {**JANE, "phone": "+44 20 7946 0958"})
    assert memory_store.contacts == {}


@pytest.mark.asyncio
async def test_identical_resubmission_is_idempotent(memory_store):
    first_id = await _submit(memory_store, JANE)
    second_id = await _submit(memory_store, JANE)

    assert first_id == second_id
    assert len(memory_store.contacts) == 1
    assert "update_contact" not in memory_store.calls
    assert memory_store.calls.count("create_contact") == 1
    assert len(memory_store.submissions) == 2


@pytest.mark.asyncio
async def test_populated_fields_are_never_overwritten(memory_store):
    contact_id = await _submit(memory_store, JANE)

    again = await _submit(memory_store, {**JANE, "first": "Janet", "email": "other@x.com"})

    assert again == contact_id
    assert memory_store.contacts[contact_id]["first_name"] == "Jane"
    assert memory_store.contacts[contact_id]["email"] == "jane@x.com"


@pytest.mark.asyncio
async def test_empty_fields_are_back_filled(memory_store):
    memory_store.contacts["c1"] = {
        "id": "c1",
        "email": "jane@x.com",
        "phone_e164": None,
        "first_name": "Jane",
        "last_name": "",
    }

    contact_id = await _submit(memory_store, JANE)

    assert contact_id == "c1"
    assert memory_store.contacts["c1"]["phone_e164"] == "+15551234567"
    assert memory_store.contacts["c1"]["last_name"] == "Doe"
    assert memory_store.calls.count("update_contact") == 1


@pytest.mark.asyncio
async def test_preferences_are_replaced_not_merged(memory_store):
    contact_id = await _submit(
        memory_store,
        {
            **JANE,
            "prefs": {
                "thrive_invites": True,
                "friday_reminders": True,
                "real_insights": True,
                "frequency": "monthly",
                "channels": ["app"],
            },
        },
    )

    await _submit(memory_store, {**JANE, "prefs": {"updates": True}})

    assert memory_store.preferences[contact_id] == {
        "contact_id": contact_id,
        "thrive_invites": False,
        "friday_reminders": False,
        "updates": True,
        "real_insights": False,
        "frequency": "invites_only",
        "channels": [],
    }
    assert memory_store.calls.count("insert_preferences") == 1
    assert memory_store.calls.count("update_preferences") == 1


@pytest.mark.asyncio
async def test_source_and_user_agent_defaults(memory_store):
    payload = {k: v for k, v in JANE.items() if k != "source"}

    await _submit(memory_store, payload, ip=None, user_agent=None)

    logged = memory_store.submissions[0]
    assert logged["source"] == "web"
    assert logged["user_agent"] == ""
    assert logged["ip"] is None


@pytest.mark.asyncio
async def test_store_failure_propagates_without_logging(memory_store):
    memory_store.fail_on = "get_preferences"

    with pytest.raises(StoreError):
        await _submit(memory_store, JANE)

    assert memory_store.submissions == []


@pytest.mark.asyncio
async def test_ambiguous_contact_match_is_an_error(memory_store):
    memory_store.contacts["a"] = {"id": "a", "email": "jane@x.com", "phone_e164": None,
                                  "first_name": "Jane", "last_name": "Doe"}
    memory_store.contacts["b"] = {"id": "b", "email": None, "phone_e164": "+15551234567",
                                  "first_name": "J", "last_name": "D"}

    with pytest.raises(StoreError):
        await _submit(memory_store, JANE)


def test_build_contact_patch_only_fills_blanks():
    existing = {"first_name": "Jane", "last_name": None, "email": "", "phone_e164": "+15551234567"}
    desired = {"first_name": "Janet", "last_name": "Doe", "email": "jane@x.com", "phone_e164": "+15550000000"}

    assert build_contact_patch(existing, desired) == {"last_name": "Doe", "email": "jane@x.com"}
    assert build_contact_patch(desired, desired) == {}


def test_build_desired_preferences_filters_and_defaults():
    prefs = PreferencesIn.model_validate(
        {"thrive_invites": 1, "updates": "", "frequency": "daily", "channels": ["sms", "sms", "fax", 3]}
    )

    desired = build_desired_preferences(prefs).to_row()

    assert desired == {
        "thrive_invites": True,
        "friday_reminders": False,
        "updates": False,
        "real_insights": False,
        "frequency": "invites_only",
        "channels": ["sms"],
    }


def test_non_list_channels_become_empty():
    assert PreferencesIn.model_validate({"channels": "email"}).channels == []
