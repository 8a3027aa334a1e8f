"""Tests for CallRecordService against a fake HubSpot."""

import pytest

from clipbook.calls import CallEvent, CallLogEntry, LastCall, display_duration
from clipbook.errors import RemoteApiError, ValidationError

from helpers import FIXED_NOW, call_record, search_page

CALLS = "/crm/v3/objects/calls"
CALLS_SEARCH = "/crm/v3/objects/calls/search"


def _jane(**overrides):
    data = dict(
        phone="(415) 555-0100",
        name="Jane Doe",
        disposition="Connected - Decision Maker",
        notes="Discussed pricing",
        duration=125,
    )
    data.update(overrides)
    return CallEvent(**data)


class TestLogCall:
    @pytest.mark.asyncio
    async def test_builds_normalized_call_object(self, service, fake_hubspot):
        logged = await service.log_call(_jane())

        assert logged.remote_call_id == "9001"
        created = fake_hubspot.created_call()
        assert created["properties"] == {
            "hs_timestamp": FIXED_NOW,
            "hs_call_title": "Clipbook Dialer — Jane Doe",
            "hs_call_body": "Discussed pricing\nDisposition: Connected - Decision Maker",
            "hs_call_duration": "125000",
            "hs_call_to_number": "+14155550100",
            "hs_call_direction": "OUTBOUND",
            "hs_call_status": "COMPLETED",
        }

    @pytest.mark.asyncio
    async def test_associates_resolved_contact(self, service, fake_hubspot):
        fake_hubspot.contact_responses["phone"] = (200, search_page({"id": "555", "properties": {}}))

        logged = await service.log_call(_jane())

        assert logged.contact_id == "555"
        assert fake_hubspot.created_call()["associations"] == [
            {
                "to": {"id": "555"},
                "types": [{"associationCategory": "HUBSPOT_DEFINED", "associationTypeId": 194}],
            }
        ]

    @pytest.mark.asyncio
    async def test_no_contact_means_no_association(self, service, fake_hubspot):
        logged = await service.log_call(_jane())

        assert logged.contact_id is None
        assert "associations" not in fake_hubspot.created_call()
        assert fake_hubspot.paths() == [
            "/crm/v3/objects/contacts/search",
            "/crm/v3/objects/contacts/search",
            CALLS,
        ]

    @pytest.mark.asyncio
    async def test_defaults_for_missing_optional_fields(self, service, fake_hubspot):
        await service.log_call(CallEvent(phone="4155550100", duration=None))

        props = fake_hubspot.created_call()["properties"]
        assert props["hs_call_title"] == "Clipbook Dialer — Unknown"
        assert props["hs_call_body"] == ""
        assert props["hs_call_duration"] == "0"
        assert props["hs_call_status"] == "NO_ANSWER"

    @pytest.mark.asyncio
    async def test_missing_phone_raises_before_any_remote_call(self, service, fake_hubspot):
        with pytest.raises(ValidationError, match="phone is required"):
            await service.log_call(_jane(phone=None))
        with pytest.raises(ValidationError):
            await service.log_call(_jane(phone=""))
        assert fake_hubspot.requests == []

    @pytest.mark.asyncio
    async def test_negative_duration_rejected(self, service, fake_hubspot):
        with pytest.raises(ValidationError):
            await service.log_call(_jane(duration=-1))
        assert fake_hubspot.requests == []

    @pytest.mark.asyncio
    async def test_create_failure_surfaces_remote_status_and_body(self, service, fake_hubspot):
        fake_hubspot.create_response = (400, {"status": "error", "message": "Property values were not valid"})

        with pytest.raises(RemoteApiError) as exc_info:
            await service.log_call(_jane())

        assert exc_info.value.status_code == 400
        assert exc_info.value.payload["message"] == "Property values were not valid"
        # no retry
        assert fake_hubspot.paths().count(CALLS) == 1


class TestGetLastCallForPhone:
    @pytest.mark.asyncio
    async def test_not_found(self, service, fake_hubspot):
        assert await service.get_last_call_for_phone("415-555-0100") == LastCall(found=False)

    @pytest.mark.asyncio
    async def test_returns_raw_summary(self, service, fake_hubspot):
        fake_hubspot.calls_search_response = (
            200,
            search_page(
                call_record(
                    "77",
                    hs_call_status="COMPLETED",
                    hs_call_title="Clipbook Dialer — Jane Doe",
                    hs_call_body="Discussed pricing\nDisposition: Connected",
                    hs_timestamp="2024-05-01T12:00:00.000Z",
                    hs_call_duration="125000",
                    hs_call_to_number="+14155550100",
                )
            ),
        )

        last = await service.get_last_call_for_phone("(415) 555-0100")

        assert last == LastCall(
            found=True,
            call_id="77",
            status="COMPLETED",
            title="Clipbook Dialer — Jane Doe",
            body="Discussed pricing\nDisposition: Connected",
            date="2024-05-01T12:00:00.000Z",
            duration="125000",
        )
        query = fake_hubspot.bodies_for(CALLS_SEARCH)[0]
        assert query["filterGroups"] == [
            {"filters": [{"propertyName": "hs_call_to_number", "operator": "EQ", "value": "+14155550100"}]}
        ]
        assert query["sorts"] == [{"propertyName": "hs_timestamp", "direction": "DESCENDING"}]
        assert query["limit"] == 1

    @pytest.mark.asyncio
    async def test_record_without_id_has_no_call_id(self, service, fake_hubspot):
        fake_hubspot.calls_search_response = (200, {"total": 1, "results": [{"properties": {"hs_call_status": "COMPLETED"}}]})

        last = await service.get_last_call_for_phone("4155550100")

        assert last.found is True
        assert last.call_id is None
        assert last.status == "COMPLETED"

    @pytest.mark.asyncio
    async def test_missing_phone(self, service, fake_hubspot):
        with pytest.raises(ValidationError, match="phone query param is required"):
            await service.get_last_call_for_phone(None)
        assert fake_hubspot.requests == []


class TestListCallLog:
    @pytest.mark.asyncio
    async def test_decodes_bodies_and_names(self, service, fake_hubspot):
        fake_hubspot.calls_search_response = (
            200,
            search_page(
                call_record(
                    "2",
                    hs_call_title="Clipbook Dialer — Jane Doe",
                    hs_call_body="Discussed pricing\nDisposition: Connected - DM\nCompany: Acme\nTitle: CEO\nLinkedIn: https://li/jane",
                    hs_call_status="COMPLETED",
                    hs_timestamp="2024-05-02T09:00:00.000Z",
                    hs_call_duration="125400",
                    hs_call_to_number="+14155550100",
                    hs_call_direction="OUTBOUND",
                ),
                call_record(
                    "1",
                    hs_call_title="Clipbook Dialer — Unknown",
                    hs_call_body=None,
                    hs_call_status="NO_ANSWER",
                    hs_timestamp="2024-05-01T09:00:00.000Z",
                ),
            ),
        )

        entries = await service.list_call_log()

        assert entries == [
            CallLogEntry(
                id="2",
                name="Jane Doe",
                phone="+14155550100",
                company="Acme",
                title="CEO",
                linkedin="https://li/jane",
                disp="Connected - DM",
                notes="Discussed pricing",
                duration=125,
                date="2024-05-02T09:00:00.000Z",
            ),
            CallLogEntry(
                id="1",
                name="Unknown",
                phone="",
                company="",
                title="",
                linkedin="",
                disp="NO_ANSWER",
                notes="",
                duration=0,
                date="2024-05-01T09:00:00.000Z",
            ),
        ]

    @pytest.mark.asyncio
    async def test_query_shape(self, service, fake_hubspot):
        await service.list_call_log()

        query = fake_hubspot.bodies_for(CALLS_SEARCH)[0]
        assert query["filterGroups"] == [
            {
                "filters": [
                    {"propertyName": "hs_call_direction", "operator": "EQ", "value": "OUTBOUND"},
                    {"propertyName": "hs_call_title", "operator": "CONTAINS_TOKEN", "value": "Clipbook Dialer"},
                ]
            }
        ]
        assert query["sorts"] == [{"propertyName": "hs_timestamp", "direction": "DESCENDING"}]
        assert query["limit"] == 100
        assert "hs_call_direction" in query["properties"]

    @pytest.mark.asyncio
    async def test_sorted_newest_first_and_capped(self, service, fake_hubspot):
        records = [
            call_record(str(i), hs_call_title="Clipbook Dialer — X", hs_timestamp=f"2024-01-01T00:{i % 60:02d}:{i // 60:02d}.000Z")
            for i in range(120)
        ]
        fake_hubspot.calls_search_response = (200, {"total": 120, "results": records})

        entries = await service.list_call_log()

        assert len(entries) == 100
        dates = [e.date for e in entries]
        assert dates == sorted(dates, reverse=True)

    @pytest.mark.asyncio
    async def test_record_without_id_has_no_entry_id(self, service, fake_hubspot):
        fake_hubspot.calls_search_response = (
            200,
            {"total": 1, "results": [{"properties": {"hs_call_title": "Clipbook Dialer — Jane Doe"}}]},
        )

        entries = await service.list_call_log()

        assert entries[0].id is None
        assert entries[0].name == "Jane Doe"

    @pytest.mark.asyncio
    async def test_remote_failure_raises(self, service, fake_hubspot):
        fake_hubspot.calls_search_response = (503, "upstream unavailable")
        with pytest.raises(RemoteApiError) as exc_info:
            await service.list_call_log()
        assert exc_info.value.status_code == 503
        assert exc_info.value.payload == "upstream unavailable"


@pytest.mark.parametrize(
    "ms,expected",
    [(None, 0), ("", 0), ("0", 0), ("125000", 125), ("1500", 2), ("2500", 3), ("1499", 1), (125400, 125), ("abc", 0)],
)
def test_display_duration(ms, expected):
    assert display_duration(ms) == expected
