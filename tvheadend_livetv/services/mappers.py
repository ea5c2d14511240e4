"""
Response mappers

Translate TVHeadend API payloads into host entities. The functions here are
pure: fetching and failure handling live in LiveTvService.
"""
import logging
from datetime import datetime, timedelta
from typing import TypeVar

from tvheadend_livetv.config import TvheadendSettings
from tvheadend_livetv.errors import RecordingProfileError
from tvheadend_livetv.models import (
    AutorecEntry,
    ChannelGridEntry,
    ChannelGridResponse,
    ChannelTagResponse,
    ContentTypeResponse,
    DvrConfigResponse,
    DvrEntry,
    EpgEventEntry,
    EpgEventsResponse,
    GridResponse,
)
from tvheadend_livetv.schemas import (
    ChannelInfo,
    DayOfWeek,
    ProgramInfo,
    RecordingStatus,
    SeriesTimerInfo,
    TimerInfo,
)
from tvheadend_livetv.services.url_builder import AuthMode, build_url
from tvheadend_livetv.utils.genres import GenreCategory, categorize, describe_all
from tvheadend_livetv.utils.timezone import ensure_utc, from_unix_seconds, minutes_to_seconds, utc_now


logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=GridResponse)

IMAGE_CACHE_PREFIX = "imagecache/"

RECORDING_STATUS_MAP: dict[str, RecordingStatus] = {
    "scheduled": RecordingStatus.NEW,
    "recording": RecordingStatus.IN_PROGRESS,
    "completed": RecordingStatus.COMPLETED,
    "completedError": RecordingStatus.ERROR,
    "cancelled": RecordingStatus.CANCELLED,
    "conflictedOk": RecordingStatus.CONFLICTED_OK,
    "conflictedNotOk": RecordingStatus.CONFLICTED_NOT_OK,
}

TIMER_TAG_FLAGS = (
    ("norerecord", "NoReRecord"),
    ("noresched", "NoResched"),
    ("enabled", "Enabled"),
)


def parse_response(text: str, response_type: type[ResponseT]) -> ResponseT:
    """
    Deserialize a TVHeadend JSON envelope

    Raises:
        pydantic.ValidationError: If the payload does not match the envelope
    """
    return response_type.model_validate_json(text)


def format_channel_number(number: int | float) -> str:
    if isinstance(number, float) and number.is_integer():
        number = int(number)
    return str(number)


def map_channel(entry: ChannelGridEntry, config: TvheadendSettings) -> ChannelInfo:
    icon = entry.icon_public_url.strip()
    return ChannelInfo(
        id=entry.uuid,
        name=entry.name,
        number=format_channel_number(entry.number),
        image_url=build_url(config, icon.lstrip("/"), AuthMode.PARAMETER) if icon else None,
        has_image=bool(icon),
    )


def map_channels(response: ChannelGridResponse, config: TvheadendSettings) -> list[ChannelInfo]:
    return [map_channel(entry, config) for entry in response.entries]


def resolve_program_image(entry: EpgEventEntry, config: TvheadendSettings) -> str | None:
    """
    Pick the image for an EPG event

    Cached images are served by TVHeadend and need the auth token; other
    images are external URLs used as-is. Without an event image the channel
    icon is used.
    """
    image = entry.image.strip()
    if image:
        if image.startswith(IMAGE_CACHE_PREFIX):
            return build_url(config, image, AuthMode.PARAMETER)
        return image

    channel_icon = entry.channel_icon.strip()
    if channel_icon:
        return build_url(config, channel_icon, AuthMode.PARAMETER)

    return None


def map_program(entry: EpgEventEntry, config: TvheadendSettings) -> ProgramInfo:
    image_url = resolve_program_image(entry, config)
    categories = categorize(entry.genre)

    return ProgramInfo(
        id=str(entry.event_id),
        channel_id=entry.channel_uuid,
        name=entry.title,
        overview=entry.description,
        short_overview=entry.summary,
        start_date=from_unix_seconds(entry.start),
        end_date=from_unix_seconds(entry.stop),
        genres=describe_all(entry.genre),
        is_hd=entry.hd == 1,
        episode_title=entry.subtitle,
        official_rating=entry.rating_label,
        image_url=image_url,
        has_image=bool(image_url),
        is_movie=GenreCategory.MOVIE in categories,
        is_sports=GenreCategory.SPORTS in categories,
        is_news=GenreCategory.NEWS in categories,
        is_kids=GenreCategory.KIDS in categories,
        is_series=GenreCategory.SERIES in categories,
    )


def map_programs(
    response: EpgEventsResponse,
    channel_id: str,
    start_date: datetime,
    end_date: datetime,
    config: TvheadendSettings,
) -> list[ProgramInfo]:
    """
    Map EPG events for one channel

    Keeps events of exactly this channel that end no later than end_date.
    start_date is accepted for the host contract but is not used as a filter,
    so programs that ended before the window are returned as well.

    Args:
        response: Parsed api/epg/events/grid envelope
        channel_id: Channel UUID the events were requested for
        start_date: Start of the requested window (not applied)
        end_date: End of the requested window
        config: Current connection settings (for image URLs)

    Returns:
        Programs in upstream order
    """
    window_end = ensure_utc(end_date)
    return [
        map_program(entry, config)
        for entry in response.entries
        if entry.channel_uuid == channel_id and from_unix_seconds(entry.stop) <= window_end
    ]


def map_recording_status(sched_status: str) -> RecordingStatus:
    """Map TVHeadend sched_status; unknown values are reported as errors"""
    return RECORDING_STATUS_MAP.get(sched_status, RecordingStatus.ERROR)


def build_timer_tags(entry: DvrEntry) -> list[str]:
    return [tag for flag, tag in TIMER_TAG_FLAGS if getattr(entry, flag)]


def map_timer(entry: DvrEntry) -> TimerInfo:
    return TimerInfo(
        id=entry.uuid,
        name=entry.disp_title,
        overview=entry.disp_description,
        channel_id=entry.channel,
        start_date=from_unix_seconds(entry.start),
        end_date=from_unix_seconds(entry.stop),
        priority=entry.pri,
        pre_padding_seconds=minutes_to_seconds(entry.start_extra),
        post_padding_seconds=minutes_to_seconds(entry.stop_extra),
        recording_path=entry.filename,
        official_rating=entry.rating_label,
        community_rating=None,
        genres=describe_all(entry.genre),
        tags=build_timer_tags(entry),
        is_repeat=entry.duplicate > 0,
        series_timer_id=entry.autorec,
        show_id=entry.parent,
        original_air_date=from_unix_seconds(entry.first_aired) if entry.first_aired > 0 else None,
        episode_title=entry.disp_subtitle,
        status=map_recording_status(entry.sched_status),
    )


def map_timers(response: GridResponse[DvrEntry]) -> list[TimerInfo]:
    return [map_timer(entry) for entry in response.entries]


def map_weekdays(weekdays: list[int]) -> list[DayOfWeek]:
    """Map TVHeadend weekdays (1=Monday ... 7=Sunday), discarding out-of-range values"""
    return [DayOfWeek.from_iso(day) for day in weekdays if 1 <= day <= 7]


def map_series_timer(entry: AutorecEntry, now: datetime | None = None) -> SeriesTimerInfo:
    """
    Map a recording rule

    TVHeadend rules have no equivalent of record_new_only, record_any_time,
    record_any_channel or a start/end date, so those fields carry fixed
    placeholder values.
    """
    now = now or utc_now()
    return SeriesTimerInfo(
        id=entry.uuid,
        name=entry.name,
        channel_id=entry.channel,
        priority=entry.pri,
        overview=entry.comment,
        days=map_weekdays(entry.weekdays),
        pre_padding_seconds=minutes_to_seconds(entry.start_extra),
        post_padding_seconds=minutes_to_seconds(entry.stop_extra),
        record_new_only=False,
        record_any_time=True,
        record_any_channel=False,
        start_date=now,
        end_date=now + timedelta(hours=1),
    )


def map_series_timers(response: GridResponse[AutorecEntry]) -> list[SeriesTimerInfo]:
    now = utc_now()
    return [map_series_timer(entry, now) for entry in response.entries]


def map_content_types(response: ContentTypeResponse) -> dict[int, str]:
    return {entry.key: entry.val for entry in response.entries}


def map_channel_tags(response: ChannelTagResponse) -> dict[str, str]:
    return {entry.key: entry.val for entry in response.entries}


def find_recording_profile_uuid(response: DvrConfigResponse, profile_name: str) -> str:
    """
    Resolve a recording profile name to its UUID (case-insensitive)

    Raises:
        RecordingProfileError: If no profiles were returned or none matches
    """
    if not response.entries:
        raise RecordingProfileError("No recording profiles retrieved from TVHeadend.")

    wanted = profile_name.casefold()
    for profile in response.entries:
        if profile.name is not None and profile.name.casefold() == wanted and profile.uuid:
            logger.info("Recording profile '%s' mapped to UUID '%s'.", profile_name, profile.uuid)
            return profile.uuid

    raise RecordingProfileError(f"No matching recording profile found for '{profile_name}' in TVHeadend.")
