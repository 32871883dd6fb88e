from datetime import date as date_type

from pydantic import BaseModel, Field, field_validator


class ChannelMappingRequest(BaseModel):
    """Single provider channel mapping"""
    provider_channel_id: str = Field(..., min_length=1, description="Channel ID used by the provider")
    channel_id: str = Field(..., min_length=1, description="Canonical channel ID for the results")


class FetchRequest(BaseModel):
    """EPG fetch request for one provider and one day"""
    provider: str = Field(..., description="Registered provider name (e.g., 'hebei')")
    date: date_type = Field(..., description="Calendar day in YYYY-MM-DD format")
    channels: list[ChannelMappingRequest] = Field(
        default_factory=list,
        description="Channels to fetch; every catalog channel when empty",
    )
    timeout: float | None = Field(None, gt=0, description="Optional batch deadline in seconds")

    @field_validator('provider')
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        """Provider names are case-insensitive"""
        return v.strip().lower()


class ProgramResponse(BaseModel):
    """Single program data"""
    channel_id: str
    title: str
    start_time: str = Field(..., description="ISO8601 UTC start time")
    end_time: str = Field(..., description="ISO8601 UTC end time")
    original_timezone: str
    provider_id: str


class ChannelFailureResponse(BaseModel):
    """Failed channel of a batch"""
    provider_channel_id: str
    channel_id: str
    error_type: str
    error: str


class FetchResponse(BaseModel):
    """EPG fetch response"""
    timestamp: str
    provider_id: str
    date: str
    channels_requested: int
    channels_succeeded: int
    total_programs: int
    programs: list[ProgramResponse]
    failures: list[ChannelFailureResponse]


class ProviderChannelResponse(BaseModel):
    name: str
    id: str


class ProviderInfoResponse(BaseModel):
    """Registered provider and its channel catalog"""
    id: str
    name: str
    source_timezone: str
    channels: list[ProviderChannelResponse]
