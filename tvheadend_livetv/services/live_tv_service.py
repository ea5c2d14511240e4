"""
Live-TV service

Single entry point of the adapter. Each operation reads the current
configuration, builds the request, sends it and maps the answer, under the
read policy (degrade to empty) or the write policy (log and re-raise).
"""
import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from urllib.parse import quote, urlencode

import httpx

from tvheadend_livetv.config import TvheadendSettings, get_settings
from tvheadend_livetv.errors import ConfigurationUnavailableError, InvalidRequestError
from tvheadend_livetv.models import (
    AutorecResponse,
    ChannelGridResponse,
    ChannelTagResponse,
    ContentTypeResponse,
    DvrConfigResponse,
    DvrEntryResponse,
    EpgEventsResponse,
)
from tvheadend_livetv.schemas import (
    ChannelInfo,
    DayOfWeek,
    KeepUntil,
    MediaSourceInfo,
    MediaStream,
    MediaStreamType,
    ProgramInfo,
    SeriesTimerInfo,
    ServiceInfo,
    TimerInfo,
)
from tvheadend_livetv.services import commands, mappers
from tvheadend_livetv.services.result_policies import read_or_empty, write_or_raise
from tvheadend_livetv.services.transport import ClientCache, get_text, post_form
from tvheadend_livetv.services.url_builder import AuthMode, build_url
from tvheadend_livetv.utils.masking import mask_sensitive_data


logger = logging.getLogger(__name__)

ConfigProvider = Callable[[], TvheadendSettings | None]


class LiveTvService:
    """
    TVHeadend implementation of the host's Live-TV provider contract.

    Owns one ClientCache; aclose() releases it exactly once.
    """

    name = "TvHeadendApi"
    home_page_url = "https://tvheadend.org"

    def __init__(
        self,
        config_provider: ConfigProvider = get_settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            config_provider: Returns the current settings; called on every operation
            transport: Optional httpx transport for all upstream clients
        """
        self._config_provider = config_provider
        self._clients = ClientCache(transport=transport)

    async def __aenter__(self) -> "LiveTvService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release every HTTP client. Further calls are no-ops."""
        if self._clients.closed:
            return
        await self._clients.aclose()
        logger.info("Live TV service closed")

    def service_info(self) -> ServiceInfo:
        return ServiceInfo(name=self.name, home_page_url=self.home_page_url)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _current_config(self) -> TvheadendSettings:
        """
        Raises:
            ConfigurationUnavailableError: If the provider has no usable settings
        """
        try:
            config = self._config_provider()
        except ConfigurationUnavailableError:
            raise
        except Exception as exc:
            raise ConfigurationUnavailableError("Plugin configuration is not available.") from exc

        if config is None:
            raise ConfigurationUnavailableError("Plugin configuration is not available.")
        return config

    async def _fetch(self, config: TvheadendSettings, endpoint: str, description: str) -> str:
        url = build_url(config, endpoint)
        masked_url = mask_sensitive_data(url, config)
        logger.info("Fetching %s from TVHeadend at %s...", description, masked_url)
        async with self._clients.lease(config) as client:
            return await get_text(client, url, masked_url)

    async def _send(
        self,
        config: TvheadendSettings,
        command: commands.UpstreamCommand,
        failure_message: str,
    ) -> None:
        url = build_url(config, command.endpoint)
        logger.info("Sending request to %s", mask_sensitive_data(url, config))
        async with self._clients.lease(config) as client:
            await post_form(client, url, command.form, failure_message)

    async def _resolve_profile(self, config: TvheadendSettings, profile_name: str) -> str:
        if not profile_name or not profile_name.strip():
            raise InvalidRequestError("Recording Profile name cannot be null or empty.")
        text = await self._fetch(config, "api/dvr/config/grid", "recording profiles")
        response = mappers.parse_response(text, DvrConfigResponse)
        return mappers.find_recording_profile_uuid(response, profile_name)

    # ------------------------------------------------------------------
    # Channels and guide
    # ------------------------------------------------------------------

    async def get_channels(self) -> list[ChannelInfo]:
        config = self._current_config()

        async def operation() -> list[ChannelInfo]:
            text = await self._fetch(config, "api/channel/grid", "channels")
            channels = mappers.map_channels(mappers.parse_response(text, ChannelGridResponse), config)
            if not channels:
                logger.warning("No channels retrieved from TVHeadend.")
                return []
            logger.info("Successfully retrieved %s channels from TVHeadend.", len(channels))
            return channels

        return await read_or_empty("channels", operation, list)

    async def get_programs(
        self,
        channel_id: str,
        start_date: datetime,
        end_date: datetime,
    ) -> list[ProgramInfo]:
        """
        Get EPG programs of a channel ending no later than end_date

        start_date is part of the host contract but is not applied as a filter.
        """
        config = self._current_config()

        async def operation() -> list[ProgramInfo]:
            if not channel_id or not channel_id.strip():
                raise InvalidRequestError("Channel ID cannot be null or empty.")

            query = urlencode({"channel": channel_id, "limit": config.epg_event_limit})
            logger.info(
                "Fetching EPG data for channel ID: %s, between %s and %s.",
                channel_id,
                start_date,
                end_date,
            )
            text = await self._fetch(config, f"api/epg/events/grid?{query}", "EPG events")
            response = mappers.parse_response(text, EpgEventsResponse)
            programs = mappers.map_programs(response, channel_id, start_date, end_date, config)
            logger.info("Successfully retrieved %s programs for channel ID: %s.", len(programs), channel_id)
            return programs

        return await read_or_empty(f"EPG data for channel ID {channel_id}", operation, list)

    async def get_content_types(self) -> dict[int, str]:
        config = self._current_config()

        async def operation() -> dict[int, str]:
            text = await self._fetch(config, "api/epg/content_type/list", "content types")
            content_types = mappers.map_content_types(mappers.parse_response(text, ContentTypeResponse))
            logger.info("Successfully retrieved %s content types from TVHeadend.", len(content_types))
            return content_types

        return await read_or_empty("content types", operation, dict)

    async def get_channel_tags(self) -> dict[str, str]:
        config = self._current_config()

        async def operation() -> dict[str, str]:
            text = await self._fetch(config, "api/channeltag/list", "channel tags")
            channel_tags = mappers.map_channel_tags(mappers.parse_response(text, ChannelTagResponse))
            logger.info("Successfully retrieved %s channel tags from TVHeadend.", len(channel_tags))
            return channel_tags

        return await read_or_empty("channel tags", operation, dict)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    async def get_timers(self) -> list[TimerInfo]:
        config = self._current_config()

        async def operation() -> list[TimerInfo]:
            text = await self._fetch(config, "api/dvr/entry/grid_upcoming", "timers")
            timers = mappers.map_timers(mappers.parse_response(text, DvrEntryResponse))
            if not timers:
                logger.info("No timers retrieved from TVHeadend.")
                return []
            logger.info("Successfully retrieved %s timers from TVHeadend.", len(timers))
            return timers

        return await read_or_empty("timers", operation, list)

    async def get_timer(self, timer_id: str) -> TimerInfo | None:
        for timer in await self.get_timers():
            if timer.id == timer_id:
                return timer
        return None

    async def create_timer(self, info: TimerInfo) -> None:
        config = self._current_config()

        async def operation() -> None:
            commands.validate_new_timer(info)
            profile_uuid = await self._resolve_profile(config, config.recording_profile)
            command = commands.build_create_timer(info, profile_uuid, config)
            logger.info("Using '%s' endpoint for channel ID: %s.", command.endpoint, info.channel_id)
            await self._send(
                config,
                command,
                f"Failed to create timer for program '{info.name}' on channel ID: '{info.channel_id}'",
            )
            logger.info("Successfully created timer for program '%s' on channel ID: %s.", info.name, info.channel_id)

        await write_or_raise(f"create timer for program '{info.name}' on channel ID {info.channel_id}", operation)

    async def update_timer(self, info: TimerInfo) -> None:
        config = self._current_config()

        async def operation() -> None:
            command = commands.build_update_timer(info)
            logger.info("Updating timer with ID: %s.", info.id)
            await self._send(config, command, f"Failed to update timer with ID: {info.id}")
            logger.info("Successfully updated timer with ID: %s.", info.id)

        await write_or_raise(f"update timer with ID {info.id}", operation)

    async def cancel_timer(self, timer_id: str) -> None:
        config = self._current_config()

        async def operation() -> None:
            command = commands.build_cancel_timer(timer_id)
            logger.info("Sending cancel timer request to TVHeadend for timer ID: %s.", timer_id)
            await self._send(config, command, f"Failed to cancel timer with ID: {timer_id}")
            logger.info("Successfully canceled timer with ID: %s.", timer_id)

        await write_or_raise(f"cancel timer with ID {timer_id}", operation)

    async def get_new_timer_defaults(self, program: ProgramInfo | None = None) -> SeriesTimerInfo:
        """Suggest settings for a new recording rule, prefilled from a program if given"""
        config = self._current_config()
        logger.info("Generating default timer settings...")

        defaults = SeriesTimerInfo(
            id=str(uuid.uuid4()),
            channel_id=program.channel_id if program else "",
            name=program.name if program else "",
            overview=program.overview if program else "",
            record_new_only=True,
            record_any_time=True,
            record_any_channel=False,
            priority=config.priority,
            pre_padding_seconds=config.pre_padding_seconds,
            post_padding_seconds=config.post_padding_seconds,
            keep_until=KeepUntil.UNTIL_DELETED,
            days=list(DayOfWeek),
        )
        logger.info(
            "Default timer generated: ID=%s, Name=%s, ChannelId=%s",
            defaults.id,
            defaults.name,
            defaults.channel_id,
        )
        return defaults

    # ------------------------------------------------------------------
    # Series timers
    # ------------------------------------------------------------------

    async def get_series_timers(self) -> list[SeriesTimerInfo]:
        config = self._current_config()

        async def operation() -> list[SeriesTimerInfo]:
            text = await self._fetch(config, "api/dvr/autorec/grid", "series timers")
            series_timers = mappers.map_series_timers(mappers.parse_response(text, AutorecResponse))
            if not series_timers:
                logger.info("No series timers retrieved from TVHeadend.")
                return []
            logger.info("Successfully retrieved %s series timers from TVHeadend.", len(series_timers))
            return series_timers

        return await read_or_empty("series timers", operation, list)

    async def get_series_timer(self, series_timer_id: str) -> SeriesTimerInfo | None:
        for series_timer in await self.get_series_timers():
            if series_timer.id == series_timer_id:
                return series_timer
        return None

    async def create_series_timer(self, info: SeriesTimerInfo) -> None:
        config = self._current_config()

        async def operation() -> None:
            commands.validate_new_series_timer(info)
            profile_uuid = await self._resolve_profile(config, config.recording_profile)
            command = commands.build_create_series_timer(info, profile_uuid, config)
            logger.info("Using '%s' endpoint for channel ID: %s.", command.endpoint, info.channel_id)
            await self._send(
                config,
                command,
                f"Failed to create series timer for series '{info.name}' on channel ID: {info.channel_id}",
            )
            logger.info(
                "Successfully created series timer for series '%s' on channel ID: %s.",
                info.name,
                info.channel_id,
            )

        await write_or_raise(f"create series timer for series '{info.name}' on channel ID {info.channel_id}", operation)

    async def update_series_timer(self, info: SeriesTimerInfo) -> None:
        config = self._current_config()

        async def operation() -> None:
            command = commands.build_update_series_timer(info)
            logger.info("Updating series timer with ID: %s.", info.id)
            await self._send(config, command, f"Failed to update series timer with ID: {info.id}")
            logger.info("Successfully updated series timer with ID: %s.", info.id)

        await write_or_raise(f"update series timer with ID {info.id}", operation)

    async def cancel_series_timer(self, series_timer_id: str) -> None:
        config = self._current_config()

        async def operation() -> None:
            command = commands.build_cancel_series_timer(series_timer_id)
            logger.info("Sending cancel series timer request to TVHeadend for timer ID: %s.", series_timer_id)
            await self._send(config, command, f"Failed to cancel series timer with ID: {series_timer_id}")
            logger.info("Successfully canceled series timer with ID: %s.", series_timer_id)

        await write_or_raise(f"cancel series timer with ID {series_timer_id}", operation)

    async def get_recording_profile_uuid(self, profile_name: str) -> str:
        """
        Resolve a recording profile name to its TVHeadend UUID

        Raises:
            InvalidRequestError: If profile_name is blank
            RecordingProfileError: If no profile matches
        """
        config = self._current_config()

        async def operation() -> str:
            return await self._resolve_profile(config, profile_name)

        return await write_or_raise("map recording profile", operation)

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def _build_stream_url(self, config: TvheadendSettings, channel_id: str) -> str:
        if not channel_id or not channel_id.strip():
            logger.error("Cannot generate stream URL: channel ID is empty")
            raise InvalidRequestError("Channel ID cannot be null or empty.")

        endpoint = f"stream/channel/{quote(channel_id, safe='')}?profile={quote(config.streaming_profile, safe='')}"
        stream_url = build_url(config, endpoint, AuthMode.URL)
        logger.info("Generated stream URL %s for channel ID %s", mask_sensitive_data(stream_url, config), channel_id)
        return stream_url

    @staticmethod
    def _build_media_source(
        config: TvheadendSettings,
        channel_id: str,
        stream_url: str,
        media_streams: list[MediaStream] | None = None,
    ) -> MediaSourceInfo:
        return MediaSourceInfo(
            id=channel_id,
            path=stream_url,
            is_remote=True,
            supports_direct_play=config.supports_direct_play,
            supports_direct_stream=config.supports_direct_stream,
            supports_transcoding=config.supports_transcoding,
            supports_probing=config.supports_probing,
            is_infinite_stream=config.is_infinite_stream,
            ignore_dts=config.ignore_dts,
            analyze_duration_ms=config.analyze_duration_ms,
            buffer_ms=config.buffer_ms,
            fallback_max_streaming_bitrate=config.fallback_max_streaming_bitrate,
            requires_opening=True,
            requires_closing=True,
            read_at_native_framerate=False,
            use_most_compatible_transcoding_profile=True,
            media_streams=media_streams or [],
        )

    async def get_channel_stream(self, channel_id: str, stream_id: str | None = None) -> MediaSourceInfo:
        """Media source for a channel; stream_id is part of the host contract and unused"""
        config = self._current_config()
        return self._build_media_source(config, channel_id, self._build_stream_url(config, channel_id))

    async def get_channel_stream_media_sources(self, channel_id: str) -> list[MediaSourceInfo]:
        """
        Media sources for a channel

        Stream layout is unknown until the player probes the stream, so one
        video and one audio stream with index -1 are announced.
        """
        config = self._current_config()
        media_streams = [
            MediaStream(type=MediaStreamType.VIDEO, index=-1, is_interlaced=True, real_frame_rate=50.0),
            MediaStream(type=MediaStreamType.AUDIO, index=-1),
        ]
        stream_url = self._build_stream_url(config, channel_id)
        return [self._build_media_source(config, channel_id, stream_url, media_streams)]

    async def close_live_stream(self, stream_id: str | None) -> None:
        if not stream_id or not stream_id.strip():
            logger.warning("Stream ID is null or empty. No action required.")
            return
        logger.info(
            "TVHeadend does not support closing live streams directly. No action taken for Stream ID: %s.",
            stream_id,
        )

    async def reset_tuner(self, tuner_id: str | None) -> None:
        if not tuner_id or not tuner_id.strip():
            logger.warning("Tuner ID is null or empty. No reset action required.")
            return
        logger.info(
            "TVHeadend does not require or support resetting tuners. No action taken for Tuner ID: %s.",
            tuner_id,
        )
