from datetime import datetime
import logging

from fastapi import APIRouter, HTTPException, Query, status

from tvheadend_livetv.dependencies import LiveTvServiceDep
from tvheadend_livetv.schemas import (
    ChannelInfo,
    MediaSourceInfo,
    ProgramInfo,
    SeriesTimerInfo,
    TimerInfo,
)


logger = logging.getLogger(__name__)

main_router = APIRouter()


@main_router.get("/")
async def root(service: LiveTvServiceDep) -> dict:
    """Root endpoint with service information"""
    return {
        "service": service.name,
        "home_page_url": service.home_page_url,
        "endpoints": {
            "channels": "/channels - Live TV channels",
            "programs": "/channels/{channel_id}/programs - EPG for a channel",
            "timers": "/timers - Scheduled recordings",
            "series_timers": "/series-timers - Recording rules",
            "health": "/health - Health check"
        }
    }


@main_router.get("/health")
async def health_check() -> dict:
    """Health check endpoint"""
    return {"status": "ok"}


@main_router.get("/channels", response_model=list[ChannelInfo])
async def get_channels(service: LiveTvServiceDep) -> list[ChannelInfo]:
    return await service.get_channels()


@main_router.get("/channels/{channel_id}/programs", response_model=list[ProgramInfo])
async def get_programs(
    channel_id: str,
    service: LiveTvServiceDep,
    start_date: datetime = Query(..., description="ISO8601 start of the guide window"),
    end_date: datetime = Query(..., description="ISO8601 end of the guide window"),
) -> list[ProgramInfo]:
    """
    Get EPG programs for a channel

    Returns programs ending no later than end_date. start_date is accepted
    but not applied as a filter.
    """
    return await service.get_programs(channel_id, start_date, end_date)


@main_router.get("/channels/{channel_id}/stream", response_model=MediaSourceInfo)
async def get_channel_stream(channel_id: str, service: LiveTvServiceDep) -> MediaSourceInfo:
    return await service.get_channel_stream(channel_id)


@main_router.get("/channels/{channel_id}/media-sources", response_model=list[MediaSourceInfo])
async def get_channel_media_sources(channel_id: str, service: LiveTvServiceDep) -> list[MediaSourceInfo]:
    return await service.get_channel_stream_media_sources(channel_id)


@main_router.delete("/streams/{stream_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_live_stream(stream_id: str, service: LiveTvServiceDep) -> None:
    await service.close_live_stream(stream_id)


@main_router.post("/tuners/{tuner_id}/reset", status_code=status.HTTP_204_NO_CONTENT)
async def reset_tuner(tuner_id: str, service: LiveTvServiceDep) -> None:
    await service.reset_tuner(tuner_id)


@main_router.get("/content-types")
async def get_content_types(service: LiveTvServiceDep) -> dict[int, str]:
    return await service.get_content_types()


@main_router.get("/channel-tags")
async def get_channel_tags(service: LiveTvServiceDep) -> dict[str, str]:
    return await service.get_channel_tags()


@main_router.get("/timers", response_model=list[TimerInfo])
async def get_timers(service: LiveTvServiceDep) -> list[TimerInfo]:
    return await service.get_timers()


@main_router.post("/timers", status_code=status.HTTP_201_CREATED)
async def create_timer(info: TimerInfo, service: LiveTvServiceDep) -> dict:
    """
    Schedule a single recording

    With program_id set the recording is created from the EPG event,
    otherwise from channel_id, start_date and end_date.
    """
    await service.create_timer(info)
    return {"status": "created"}


@main_router.post("/timers/defaults", response_model=SeriesTimerInfo)
async def get_new_timer_defaults(
    service: LiveTvServiceDep,
    program: ProgramInfo | None = None,
) -> SeriesTimerInfo:
    return await service.get_new_timer_defaults(program)


@main_router.get("/timers/{timer_id}", response_model=TimerInfo)
async def get_timer(timer_id: str, service: LiveTvServiceDep) -> TimerInfo:
    timer = await service.get_timer(timer_id)
    if timer is None:
        raise HTTPException(status_code=404, detail=f"Timer {timer_id} not found")
    return timer


@main_router.put("/timers/{timer_id}")
async def update_timer(timer_id: str, info: TimerInfo, service: LiveTvServiceDep) -> dict:
    """Update padding of a recording; other fields are left unchanged upstream"""
    await service.update_timer(info.model_copy(update={"id": timer_id}))
    return {"status": "updated"}


@main_router.delete("/timers/{timer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_timer(timer_id: str, service: LiveTvServiceDep) -> None:
    await service.cancel_timer(timer_id)


@main_router.get("/series-timers", response_model=list[SeriesTimerInfo])
async def get_series_timers(service: LiveTvServiceDep) -> list[SeriesTimerInfo]:
    return await service.get_series_timers()


@main_router.post("/series-timers", status_code=status.HTTP_201_CREATED)
async def create_series_timer(info: SeriesTimerInfo, service: LiveTvServiceDep) -> dict:
    await service.create_series_timer(info)
    return {"status": "created"}


@main_router.get("/series-timers/{series_timer_id}", response_model=SeriesTimerInfo)
async def get_series_timer(series_timer_id: str, service: LiveTvServiceDep) -> SeriesTimerInfo:
    series_timer = await service.get_series_timer(series_timer_id)
    if series_timer is None:
        raise HTTPException(status_code=404, detail=f"Series timer {series_timer_id} not found")
    return series_timer


@main_router.put("/series-timers/{series_timer_id}")
async def update_series_timer(
    series_timer_id: str,
    info: SeriesTimerInfo,
    service: LiveTvServiceDep,
) -> dict:
    await service.update_series_timer(info.model_copy(update={"id": series_timer_id}))
    return {"status": "updated"}


@main_router.delete("/series-timers/{series_timer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_series_timer(series_timer_id: str, service: LiveTvServiceDep) -> None:
    await service.cancel_series_timer(series_timer_id)
