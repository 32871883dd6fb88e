"""
Hebei Radio & Television provider

Schedules are fetched per channel and day from the CMC live-show API. The
response groups entries by date string; timestamps are local Beijing time.
"""
from __future__ import annotations

import json
import logging
from datetime import date

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from epgsync.errors import EntryDateRangeError, ParseFailed, ProviderAPIError
from epgsync.models import Program, ProviderChannel
from epgsync.providers.base import BaseProvider
from epgsync.providers.registry import register
from epgsync.utils.http_client import HEADER_USER_AGENT
from epgsync.utils.timezone import UTC8_LOCATION, format_day, parse_local_datetime


logger = logging.getLogger(__name__)

TENANT_ID = "0d91d6cfb98f5b206ac1e752757fc5a9"
PROGRAM_PATH = "/spidercrms/api/live/liveShowSet/findNoPage"
SUCCESS_STATE = 200

CHANNELS: tuple[ProviderChannel, ...] = (
    ProviderChannel(name="河北卫视", id="462"),
    ProviderChannel(name="河北经济生活", id="114"),
    ProviderChannel(name="河北三农", id="118"),
    ProviderChannel(name="河北都市", id="62"),
    ProviderChannel(name="河北影视剧", id="334"),
    ProviderChannel(name="河北少儿科教", id="70"),
    ProviderChannel(name="河北文旅公共", id="338"),
)


class HebeiProgramEntry(BaseModel):
    """Single broadcast slot"""
    model_config = ConfigDict(extra="ignore")

    start_date_time: str | None = Field(None, validation_alias=AliasChoices("startDateTime", "StartDateTime"))
    end_date_time: str | None = Field(None, validation_alias=AliasChoices("endDateTime", "EndDateTime"))
    name: str | None = Field(None, validation_alias=AliasChoices("name", "Name"))


class HebeiProgramResponse(BaseModel):
    """Response envelope of the live-show endpoint"""
    model_config = ConfigDict(extra="ignore")

    state: int = Field(0, validation_alias=AliasChoices("state", "State"))
    message: str | None = Field(None, validation_alias=AliasChoices("message", "Message"))
    success: bool = Field(False, validation_alias=AliasChoices("success", "Success"))
    data: dict[str, list[HebeiProgramEntry | None] | None] | None = Field(
        None, validation_alias=AliasChoices("data", "Data")
    )

    @field_validator("data", mode="before")
    @classmethod
    def empty_list_as_empty_map(cls, value):
        """The API sends [] instead of {} when it has no schedule"""
        if isinstance(value, list) and not value:
            return {}
        return value


class HebeiProvider(BaseProvider):
    """Hebei provider; channel ids are CMC source ids"""

    SOURCE_TIMEZONE = UTC8_LOCATION
    display_name = "Hebei Radio & Television"

    def __init__(self, config, **kwargs) -> None:
        super().__init__(config, CHANNELS, **kwargs)

    async def fetch_epg(self, provider_channel_id: str, channel_id: str, day: date) -> list[Program]:
        formatted_day = format_day(day)
        headers = {
            HEADER_USER_AGENT: self.user_agent,
            "Content-Type": "application/json",
            "Tenantid": TENANT_ID,
        }
        body = json.dumps({
            "day": formatted_day,
            "dayEnd": formatted_day,
            "sourceId": provider_channel_id,
            "tenantId": TENANT_ID,
        }).encode("utf-8")

        raw = await self.post_with_headers(PROGRAM_PATH, body, headers)
        return self.parse_epg_response(raw, provider_channel_id, channel_id, formatted_day)

    def parse_epg_response(
        self,
        data: bytes,
        provider_channel_id: str,
        channel_id: str,
        day: str,
    ) -> list[Program]:
        """
        Decode a live-show response into programs for exactly one day

        Entries under other date keys are ignored. Entries with unusable
        timestamps, including null entries, are logged and skipped.

        Raises:
            ParseFailed: If the body does not match the response schema
            ProviderAPIError: If the upstream state is not 200
        """
        try:
            response = HebeiProgramResponse.model_validate_json(data)
        except ValidationError as exc:
            raise ParseFailed(self.id, exc) from exc

        if response.state != SUCCESS_STATE:
            raise ProviderAPIError(self.id, str(response.state), response.message or "")

        entries = (response.data or {}).get(day) or []
        programs: list[Program] = []

        for entry in entries:
            try:
                programs.append(self._build_program(entry, channel_id, day))
            except EntryDateRangeError as exc:
                logger.warning("[%s] %s (source %s)", self.id, exc, provider_channel_id)

        logger.debug(
            "[%s] Parsed %s/%s programs for channel %s on %s",
            self.id,
            len(programs),
            len(entries),
            channel_id,
            day,
        )
        return programs

    def _build_program(self, entry: HebeiProgramEntry | None, channel_id: str, day: str) -> Program:
        if entry is None:
            raise EntryDateRangeError(channel_id, day, "empty schedule entry")
        try:
            start_time = parse_local_datetime(entry.start_date_time or "", self.location)
            end_time = parse_local_datetime(entry.end_date_time or "", self.location)
        except ValueError as exc:
            raise EntryDateRangeError(channel_id, day, str(exc)) from exc

        if start_time >= end_time:
            raise EntryDateRangeError(
                channel_id,
                day,
                f"start {entry.start_date_time} is not before end {entry.end_date_time}",
            )

        return Program(
            channel_id=channel_id,
            title=entry.name or "",
            start_time=start_time,
            end_time=end_time,
            original_timezone=self.SOURCE_TIMEZONE,
            provider_id=self.id,
        )


register("hebei", HebeiProvider)
