"""
Command builders

Translate host timer and series-timer requests into TVHeadend form payloads.
Validation happens here, before LiveTvService sends anything.
"""
import json
from dataclasses import dataclass

from tvheadend_livetv.config import TvheadendSettings
from tvheadend_livetv.errors import InvalidRequestError
from tvheadend_livetv.schemas import DayOfWeek, SeriesTimerInfo, TimerInfo
from tvheadend_livetv.utils.timezone import ensure_utc, seconds_to_minutes, to_unix_seconds


CREATE_TIMER_ENDPOINT = "api/dvr/entry/create"
CREATE_TIMER_BY_EVENT_ENDPOINT = "api/dvr/entry/create_by_event"
CANCEL_TIMER_ENDPOINT = "api/dvr/entry/cancel"
CREATE_SERIES_TIMER_ENDPOINT = "api/dvr/autorec/create"
CREATE_SERIES_TIMER_BY_SERIES_ENDPOINT = "api/dvr/autorec/create_by_series"
DELETE_IDNODE_ENDPOINT = "api/idnode/delete"
SAVE_IDNODE_ENDPOINT = "api/idnode/save"

ALL_WEEKDAYS = [day.iso_number for day in DayOfWeek]


@dataclass(slots=True, frozen=True)
class UpstreamCommand:
    """A ready-to-send write request"""
    endpoint: str
    form: dict[str, str]


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _require_id(identifier: str | None, label: str) -> str:
    if _is_blank(identifier):
        raise InvalidRequestError(f"{label} cannot be null or empty.")
    return identifier


def _encode(payload) -> str:
    return json.dumps(payload, separators=(",", ":"))


def _has_event_id(program_id: str | None) -> bool:
    return not _is_blank(program_id)


def validate_new_timer(info: TimerInfo) -> None:
    """
    Raises:
        InvalidRequestError: If the channel is missing or the dates are missing or not ordered
    """
    if _is_blank(info.channel_id):
        raise InvalidRequestError("Channel ID cannot be null or empty.")
    if info.start_date is None or info.end_date is None:
        raise InvalidRequestError("Invalid start or end date for the timer.")
    # naive dates are UTC, as in to_unix_seconds
    if ensure_utc(info.start_date) >= ensure_utc(info.end_date):
        raise InvalidRequestError("Invalid start or end date for the timer.")


def validate_new_series_timer(info: SeriesTimerInfo) -> None:
    if _is_blank(info.channel_id):
        raise InvalidRequestError("Channel ID cannot be null or empty.")
    if _is_blank(info.name):
        raise InvalidRequestError("Series name cannot be null or empty.")


def build_create_timer(info: TimerInfo, profile_uuid: str, config: TvheadendSettings) -> UpstreamCommand:
    """
    Build the create request for a single recording

    Requests carrying an EPG event id are scheduled from the event; all
    others from channel, start and stop.

    Args:
        info: Timer requested by the host (already validated)
        profile_uuid: Resolved recording profile UUID
        config: Current settings (priority)
    """
    if _has_event_id(info.program_id):
        return UpstreamCommand(
            endpoint=CREATE_TIMER_BY_EVENT_ENDPOINT,
            form={"config_uuid": profile_uuid, "event_id": info.program_id},
        )

    conf = {
        "channel": info.channel_id,
        "start": to_unix_seconds(info.start_date),
        "stop": to_unix_seconds(info.end_date),
        "start_extra": seconds_to_minutes(info.pre_padding_seconds),
        "stop_extra": seconds_to_minutes(info.post_padding_seconds),
        "disp_title": info.name,
        "disp_extratext": info.overview,
        "pri": config.priority,
        "config_name": profile_uuid,
    }
    return UpstreamCommand(endpoint=CREATE_TIMER_ENDPOINT, form={"conf": _encode(conf)})


def build_update_timer(info: TimerInfo) -> UpstreamCommand:
    """Only padding is changed; every other field is left as it is upstream."""
    timer_id = _require_id(info.id, "Timer ID")
    node = [{
        "uuid": timer_id,
        "start_extra": seconds_to_minutes(info.pre_padding_seconds),
        "stop_extra": seconds_to_minutes(info.post_padding_seconds),
    }]
    return UpstreamCommand(endpoint=SAVE_IDNODE_ENDPOINT, form={"node": _encode(node)})


def build_cancel_timer(timer_id: str | None) -> UpstreamCommand:
    timer_id = _require_id(timer_id, "Timer ID")
    return UpstreamCommand(endpoint=CANCEL_TIMER_ENDPOINT, form={"uuid": timer_id})


def encode_weekdays(days: list[DayOfWeek]) -> list[int]:
    """ISO weekday numbers for a rule; an empty day set means every day."""
    if not days:
        return list(ALL_WEEKDAYS)
    return sorted({day.iso_number for day in days})


def build_create_series_timer(
    info: SeriesTimerInfo,
    profile_uuid: str,
    config: TvheadendSettings,
) -> UpstreamCommand:
    """
    Build the create request for a recording rule

    With an EPG event id the rule follows the event's series link;
    otherwise it is created from title, channel and weekdays.
    """
    if _has_event_id(info.program_id):
        return UpstreamCommand(
            endpoint=CREATE_SERIES_TIMER_BY_SERIES_ENDPOINT,
            form={"config_uuid": profile_uuid, "event_id": info.program_id},
        )

    conf = {
        "channel": info.channel_id,
        "name": info.name,
        "title": info.name,
        "comment": info.overview,
        "record_any_time": info.record_any_time,
        "record_any_channel": info.record_any_channel,
        "record_new_only": info.record_new_only,
        "pri": config.priority,
        "start_extra": seconds_to_minutes(info.pre_padding_seconds),
        "stop_extra": seconds_to_minutes(info.post_padding_seconds),
        "weekdays": encode_weekdays(info.days),
        "config_uuid": profile_uuid,
    }
    return UpstreamCommand(endpoint=CREATE_SERIES_TIMER_ENDPOINT, form={"conf": _encode(conf)})


def build_update_series_timer(info: SeriesTimerInfo) -> UpstreamCommand:
    series_timer_id = _require_id(info.id, "Series Timer ID")
    node = [{
        "uuid": series_timer_id,
        "channel": info.channel_id,
        "record_any_time": info.record_any_time,
        "record_new_only": info.record_new_only,
        "start_extra": seconds_to_minutes(info.pre_padding_seconds),
        "stop_extra": seconds_to_minutes(info.post_padding_seconds),
    }]
    return UpstreamCommand(endpoint=SAVE_IDNODE_ENDPOINT, form={"node": _encode(node)})


def build_cancel_series_timer(series_timer_id: str | None) -> UpstreamCommand:
    series_timer_id = _require_id(series_timer_id, "Series timer ID")
    return UpstreamCommand(endpoint=DELETE_IDNODE_ENDPOINT, form={"uuid": series_timer_id})
