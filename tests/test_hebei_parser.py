"""Unit tests for the Hebei response parser."""

import json
import logging
from datetime import datetime, timezone

import httpx
import pytest

from conftest import TEST_DAY, make_entry, make_payload, request_source_id
from epgsync.errors import ParseFailed, ProviderAPIError
from epgsync.providers.hebei import CHANNELS, PROGRAM_PATH, TENANT_ID
from epgsync.utils.timezone import UTC8_LOCATION

# -------------------------------------------------------------------
# PARSE
# -------------------------------------------------------------------


def test_parse_well_formed_day(hebei_provider, day_entries):
    raw = make_payload({TEST_DAY: day_entries})

    programs = hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)

    assert len(programs) == 3
    for program in programs:
        assert program.start_time < program.end_time
        assert program.original_timezone == UTC8_LOCATION
        assert program.channel_id == "hebei-tv"
        assert program.provider_id == "hebei"
    assert [program.title for program in programs] == ["早间新闻", "河北新闻联播", "电视剧"]


def test_parse_normalizes_to_absolute_instants(hebei_provider, day_entries):
    raw = make_payload({TEST_DAY: day_entries})

    first = hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)[0]

    assert first.start_time == datetime(2024, 1, 9, 22, 0, tzinfo=timezone.utc)
    assert first.end_time == datetime(2024, 1, 9, 23, 0, tzinfo=timezone.utc)
    assert first.to_dict()["start_time"] == "2024-01-09T22:00:00+00:00"


def test_parse_missing_date_key_returns_empty(hebei_provider, day_entries):
    raw = make_payload({"2024-01-11": day_entries})

    programs = hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)

    assert programs == []


def test_parse_ignores_other_dates(hebei_provider, day_entries):
    other = [make_entry("2024-01-11 06:00:00", "2024-01-11 07:00:00", "明日节目")]
    raw = make_payload({TEST_DAY: day_entries, "2024-01-11": other})

    programs = hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)

    assert len(programs) == 3
    assert "明日节目" not in [program.title for program in programs]


@pytest.mark.parametrize("data", [None, [], {TEST_DAY: []}, {TEST_DAY: None}])
def test_parse_empty_schedule(hebei_provider, data):
    programs = hebei_provider.parse_epg_response(make_payload(data), "462", "hebei-tv", TEST_DAY)

    assert programs == []


def test_parse_skips_bad_entry_keeps_siblings(hebei_provider, day_entries, caplog):
    day_entries[1]["startDateTime"] = "not-a-time"
    raw = make_payload({TEST_DAY: day_entries})

    with caplog.at_level(logging.WARNING, logger="epgsync.providers.hebei"):
        programs = hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)

    assert [program.title for program in programs] == ["早间新闻", "电视剧"]
    assert "invalid program time range" in caplog.text


def test_parse_skips_null_entry_keeps_siblings(hebei_provider, day_entries):
    day_entries[1] = None
    raw = make_payload({TEST_DAY: day_entries})

    programs = hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)

    assert [program.title for program in programs] == ["早间新闻", "电视剧"]


def test_parse_skips_unpadded_timestamps(hebei_provider, day_entries):
    day_entries[0]["startDateTime"] = "2024-1-10 6:0:0"
    raw = make_payload({TEST_DAY: day_entries})

    programs = hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)

    assert [program.title for program in programs] == ["河北新闻联播", "电视剧"]


def test_parse_skips_inverted_and_missing_times(hebei_provider, day_entries):
    day_entries.append(make_entry(f"{TEST_DAY} 10:00:00", f"{TEST_DAY} 09:00:00", "倒序"))
    day_entries.append({"name": "无时间"})
    raw = make_payload({TEST_DAY: day_entries})

    programs = hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)

    assert len(programs) == 3


def test_parse_accepts_capitalized_fields(hebei_provider):
    raw = json.dumps({
        "state": 200,
        "message": "ok",
        "success": True,
        "Data": {TEST_DAY: [{
            "startDateTime": f"{TEST_DAY} 20:00:00",
            "endDateTime": f"{TEST_DAY} 21:00:00",
            "Name": "晚间剧场",
        }]},
    }).encode("utf-8")

    programs = hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)

    assert [program.title for program in programs] == ["晚间剧场"]


def test_parse_upstream_rejection(hebei_provider):
    raw = make_payload(None, state=403, message="quota exceeded", success=False)

    with pytest.raises(ProviderAPIError) as exc_info:
        hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)

    assert "403" in str(exc_info.value)
    assert "quota exceeded" in str(exc_info.value)
    assert exc_info.value.code == "403"
    assert exc_info.value.upstream_message == "quota exceeded"


@pytest.mark.parametrize("raw", [b'{"state": 200, "data": {', b"<html>502</html>", b"", b"[1, 2]"])
def test_parse_malformed_payload(hebei_provider, raw):
    with pytest.raises(ParseFailed) as exc_info:
        hebei_provider.parse_epg_response(raw, "462", "hebei-tv", TEST_DAY)

    assert exc_info.value.provider_id == "hebei"
    assert "hebei" in str(exc_info.value)


# -------------------------------------------------------------------
# FETCH
# -------------------------------------------------------------------


@pytest.mark.asyncio
async def test_fetch_epg_sends_provider_request(make_provider, day_entries):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, content=make_payload({TEST_DAY: day_entries}))

    provider = make_provider(handler)
    programs = await provider.fetch_epg("114", "hebei-economy", datetime(2024, 1, 10).date())

    assert len(programs) == 3
    request = captured[0]
    assert request.method == "POST"
    assert request.url.path == PROGRAM_PATH
    assert request.headers["Tenantid"] == TENANT_ID
    assert request.headers["User-Agent"]
    assert json.loads(request.content) == {
        "day": TEST_DAY,
        "dayEnd": TEST_DAY,
        "sourceId": "114",
        "tenantId": TENANT_ID,
    }
    assert request_source_id(request) == "114"
    await provider.aclose()


def test_channel_catalog():
    assert len(CHANNELS) == 7
    assert CHANNELS[0].id == "462"
    assert len({channel.id for channel in CHANNELS}) == 7
