"""
TVHeadend API response models

This module defines pydantic models for the JSON envelopes returned by the
TVHeadend HTTP API. Only the fields the adapter reads are declared; anything
else in the payload is ignored. Missing and null fields fall back to their
defaults.
"""
from typing import Any, Generic, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class TvhModel(BaseModel):
    """Base class for all TVHeadend payload models"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Drop null values so that field defaults apply."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


EntryT = TypeVar("EntryT")


class GridResponse(TvhModel, Generic[EntryT]):
    """Envelope shared by grid and list endpoints: {entries: [...], total?}"""
    entries: list[EntryT] = Field(default_factory=list)
    total: int = Field(0, validation_alias=AliasChoices("total", "totalCount"))


class ChannelGridEntry(TvhModel):
    """Entry of api/channel/grid"""
    uuid: str = ""
    name: str = ""
    number: int | float = 0
    icon_public_url: str = ""


class EpgEventEntry(TvhModel):
    """Entry of api/epg/events/grid"""
    event_id: int = Field(0, alias="eventId")
    channel_uuid: str = Field("", alias="channelUuid")
    channel_icon: str = Field("", alias="channelIcon")
    title: str = ""
    subtitle: str = ""
    description: str = ""
    summary: str = ""
    start: int = 0
    stop: int = 0
    genre: list[int] = Field(default_factory=list)
    hd: int = 0
    rating_label: str = Field("", alias="ratingLabel")
    image: str = ""


class DvrEntry(TvhModel):
    """Entry of api/dvr/entry/grid_upcoming"""
    uuid: str = ""
    disp_title: str = ""
    disp_subtitle: str = ""
    disp_description: str = ""
    channel: str = ""
    start: int = 0
    stop: int = 0
    start_extra: int = 0
    stop_extra: int = 0
    pri: int = 0
    filename: str = ""
    rating_label: str = ""
    genre: list[int] = Field(default_factory=list)
    norerecord: bool = False
    noresched: bool = False
    enabled: bool = False
    duplicate: int = 0
    autorec: str = ""
    parent: str = ""
    first_aired: int = 0
    sched_status: str = ""


class AutorecEntry(TvhModel):
    """Entry of api/dvr/autorec/grid (a recording rule)"""
    uuid: str = ""
    name: str = ""
    channel: str = ""
    pri: int = 0
    comment: str = ""
    weekdays: list[int] = Field(default_factory=list)
    start_extra: int = 0
    stop_extra: int = 0


class DvrConfigEntry(TvhModel):
    """Entry of api/dvr/config/grid (a recording profile)"""
    uuid: str | None = None
    name: str | None = None


class ContentTypeEntry(TvhModel):
    """Entry of api/epg/content_type/list"""
    key: int = 0
    val: str = ""


class ChannelTagEntry(TvhModel):
    """Entry of api/channeltag/list"""
    key: str = ""
    val: str = ""


ChannelGridResponse = GridResponse[ChannelGridEntry]
EpgEventsResponse = GridResponse[EpgEventEntry]
DvrEntryResponse = GridResponse[DvrEntry]
AutorecResponse = GridResponse[AutorecEntry]
DvrConfigResponse = GridResponse[DvrConfigEntry]
ContentTypeResponse = GridResponse[ContentTypeEntry]
ChannelTagResponse = GridResponse[ChannelTagEntry]
