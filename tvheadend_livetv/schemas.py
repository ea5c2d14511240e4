from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field

from tvheadend_livetv.utils.timezone import utc_now


class RecordingStatus(str, Enum):
    """Recording state as understood by the host"""
    NEW = "New"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    CONFLICTED_OK = "ConflictedOk"
    CONFLICTED_NOT_OK = "ConflictedNotOk"
    ERROR = "Error"


class DayOfWeek(str, Enum):
    """Weekday, in ISO order (Monday first)"""
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def from_iso(cls, number: int) -> "DayOfWeek":
        """Map ISO weekday number (1=Monday ... 7=Sunday) to a DayOfWeek"""
        return list(cls)[number - 1]

    @property
    def iso_number(self) -> int:
        return list(DayOfWeek).index(self) + 1


class KeepUntil(str, Enum):
    UNTIL_DELETED = "UntilDeleted"
    UNTIL_SPACE_NEEDED = "UntilSpaceNeeded"
    UNTIL_WATCHED = "UntilWatched"
    UNTIL_DATE = "UntilDate"


class MediaProtocol(str, Enum):
    HTTP = "Http"


class MediaStreamType(str, Enum):
    VIDEO = "Video"
    AUDIO = "Audio"


class ServiceInfo(BaseModel):
    """Display name and home page of the Live-TV service"""
    name: str
    home_page_url: str


class ChannelInfo(BaseModel):
    """Live-TV channel"""
    id: str = Field(..., description="TVHeadend channel UUID")
    name: str = Field(..., description="Display name of the channel")
    number: str = Field(..., description="Logical channel number")
    image_url: str | None = Field(None, description="URL to channel icon")
    has_image: bool = False


class ProgramInfo(BaseModel):
    """EPG program"""
    id: str = Field(..., description="TVHeadend EPG event id")
    channel_id: str
    name: str
    overview: str = ""
    short_overview: str = ""
    start_date: datetime
    end_date: datetime
    genres: list[str] = Field(default_factory=list)
    is_hd: bool = False
    episode_title: str = ""
    official_rating: str = ""
    image_url: str | None = None
    has_image: bool = False
    is_movie: bool = False
    is_sports: bool = False
    is_news: bool = False
    is_kids: bool = False
    is_series: bool = False


class TimerInfo(BaseModel):
    """Single recording, as listed by the backend or requested by the host"""
    id: str = ""
    name: str = ""
    overview: str = ""
    channel_id: str = ""
    program_id: str | None = Field(None, description="EPG event id; selects the event-based create endpoint")
    series_timer_id: str = ""
    show_id: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    priority: int = 0
    pre_padding_seconds: int = 0
    post_padding_seconds: int = 0
    recording_path: str = ""
    official_rating: str = ""
    community_rating: float | None = None
    genres: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_repeat: bool = False
    original_air_date: datetime | None = None
    episode_title: str = ""
    status: RecordingStatus = RecordingStatus.NEW


class SeriesTimerInfo(BaseModel):
    """Recording rule"""
    id: str = ""
    name: str = ""
    overview: str = ""
    channel_id: str = ""
    program_id: str | None = Field(None, description="EPG event id; selects the series-link create endpoint")
    priority: int = 0
    days: list[DayOfWeek] = Field(default_factory=list)
    record_new_only: bool = False
    record_any_time: bool = True
    record_any_channel: bool = False
    start_date: datetime = Field(default_factory=utc_now)
    end_date: datetime = Field(default_factory=lambda: utc_now() + timedelta(hours=1))
    pre_padding_seconds: int = 0
    post_padding_seconds: int = 0
    keep_until: KeepUntil = KeepUntil.UNTIL_DELETED


class MediaStream(BaseModel):
    """Synthetic stream descriptor; the real layout is only known after probing"""
    type: MediaStreamType
    index: int = -1
    is_interlaced: bool = False
    real_frame_rate: float | None = None


class MediaSourceInfo(BaseModel):
    """Playable source for a live channel"""
    id: str
    path: str
    protocol: MediaProtocol = MediaProtocol.HTTP
    is_remote: bool = True
    supports_direct_play: bool = False
    supports_direct_stream: bool = False
    supports_transcoding: bool = True
    supports_probing: bool = False
    is_infinite_stream: bool = True
    ignore_dts: bool = False
    requires_opening: bool = True
    requires_closing: bool = True
    read_at_native_framerate: bool = False
    use_most_compatible_transcoding_profile: bool = True
    analyze_duration_ms: int = 0
    buffer_ms: int = 0
    fallback_max_streaming_bitrate: int = 0
    media_streams: list[MediaStream] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    """Standard error detail"""
    code: str = Field(..., description="Error code (e.g., 'UPSTREAM_ERROR', 'VALIDATION_ERROR')")
    message: str = Field(..., description="Human-readable error message")
    context: dict | None = Field(None, description="Additional context about the error")


class StandardErrorResponse(BaseModel):
    """Standardized error response for all endpoints"""
    status: str = Field("error", description="Status indicator")
    timestamp: str = Field(..., description="ISO8601 timestamp of error")
    error: ErrorDetail = Field(..., description="Error details")
