import json
from datetime import datetime, timedelta, timezone

import pytest

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
)
from tvheadend_livetv.schemas import DayOfWeek, RecordingStatus
from tvheadend_livetv.services import mappers


START = 1704139200  # 2024-01-01 20:00 UTC
STOP = 1704142800  # 2024-01-01 21:00 UTC


def epg_event(**fields) -> dict:
    event = {
        "eventId": 42,
        "channelUuid": "abc",
        "channelName": "RTL2",
        "title": "News",
        "start": START,
        "stop": STOP,
    }
    event.update(fields)
    return event


class TestParseResponse:
    def test_null_fields_take_defaults(self):
        text = json.dumps({"entries": [{"uuid": "abc", "name": None, "number": None, "icon_public_url": None}]})
        response = mappers.parse_response(text, ChannelGridResponse)
        entry = response.entries[0]
        assert entry.name == ""
        assert entry.number == 0
        assert entry.icon_public_url == ""

    def test_total_count_alias(self):
        response = mappers.parse_response('{"entries": [], "totalCount": 7}', EpgEventsResponse)
        assert response.total == 7
        assert response.entries == []

    def test_missing_entries(self):
        assert mappers.parse_response("{}", ChannelGridResponse).entries == []

    def test_unknown_fields_are_ignored(self):
        response = mappers.parse_response('{"entries": [{"uuid": "x", "services": ["s1"]}]}', ChannelGridResponse)
        assert response.entries[0].uuid == "x"

    def test_only_mapped_fields_are_kept(self):
        text = json.dumps({"entries": [{
            "uuid": "abc",
            "name": "RTL2",
            "number": 101,
            "icon": "file:///picons/rtl2.png",
            "icon_public_url": "imagecache/14",
            "enabled": True,
            "tags": ["tag-1"],
        }]})
        entry = mappers.parse_response(text, ChannelGridResponse).entries[0]
        assert entry.model_dump() == {
            "uuid": "abc",
            "name": "RTL2",
            "number": 101,
            "icon_public_url": "imagecache/14",
        }


class TestChannels:
    def test_channel_with_cached_icon(self, settings):
        entry = ChannelGridEntry(uuid="abc", name="RTL2", number=101, icon_public_url="imagecache/14")
        channel = mappers.map_channel(entry, settings)
        assert channel.id == "abc"
        assert channel.name == "RTL2"
        assert channel.number == "101"
        assert channel.image_url == "http://tvh.local:9981/imagecache/14?auth=tok123"
        assert channel.has_image is True

    def test_channel_without_icon(self, settings):
        channel = mappers.map_channel(ChannelGridEntry(uuid="abc", name="RTL2", number=1), settings)
        assert channel.image_url is None
        assert channel.has_image is False

    @pytest.mark.parametrize("number, expected", [(101, "101"), (101.0, "101"), (5.1, "5.1"), (0, "0")])
    def test_channel_number_format(self, number, expected):
        assert mappers.format_channel_number(number) == expected


class TestPrograms:
    def test_program_fields(self, settings):
        entry = EpgEventEntry.model_validate(epg_event(
            description="Long text",
            summary="Short text",
            subtitle="Episode 1",
            genre=[16, 64],
            hd=1,
            ratingLabel="PG",
        ))
        program = mappers.map_program(entry, settings)
        assert program.id == "42"
        assert program.channel_id == "abc"
        assert program.name == "News"
        assert program.overview == "Long text"
        assert program.short_overview == "Short text"
        assert program.episode_title == "Episode 1"
        assert program.official_rating == "PG"
        assert program.start_date == datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)
        assert program.end_date == datetime(2024, 1, 1, 21, 0, tzinfo=timezone.utc)
        assert program.genres == ["Movie/Drama", "Sports"]
        assert program.is_hd is True
        assert program.is_movie is True
        assert program.is_sports is True
        assert program.is_news is False
        assert program.is_kids is False
        assert program.is_series is False

    def test_image_from_image_cache_gets_token(self, settings):
        entry = EpgEventEntry.model_validate(epg_event(image="imagecache/99"))
        assert mappers.resolve_program_image(entry, settings) == "http://tvh.local:9981/imagecache/99?auth=tok123"

    def test_external_image_is_used_as_is(self, settings):
        entry = EpgEventEntry.model_validate(epg_event(image="https://img.example/poster.jpg", channelIcon="imagecache/1"))
        assert mappers.resolve_program_image(entry, settings) == "https://img.example/poster.jpg"

    def test_channel_icon_is_fallback(self, settings):
        entry = EpgEventEntry.model_validate(epg_event(channelIcon="imagecache/1"))
        program = mappers.map_program(entry, settings)
        assert program.image_url == "http://tvh.local:9981/imagecache/1?auth=tok123"
        assert program.has_image is True

    def test_no_image(self, settings):
        program = mappers.map_program(EpgEventEntry.model_validate(epg_event()), settings)
        assert program.image_url is None
        assert program.has_image is False

    def test_programs_are_filtered_by_channel_and_window_end(self, settings):
        response = EpgEventsResponse.model_validate({"entries": [
            epg_event(eventId=1),
            epg_event(eventId=2, channelUuid="other"),
            epg_event(eventId=3, start=STOP, stop=STOP + 3600),
        ]})
        window_end = datetime(2024, 1, 1, 21, 0, tzinfo=timezone.utc)
        programs = mappers.map_programs(response, "abc", window_end - timedelta(hours=1), window_end, settings)
        assert [program.id for program in programs] == ["1"]

    def test_window_start_is_not_applied(self, settings):
        response = EpgEventsResponse.model_validate({"entries": [epg_event(eventId=1)]})
        window_start = datetime(2024, 1, 2, 0, 0, tzinfo=timezone.utc)
        programs = mappers.map_programs(response, "abc", window_start, window_start + timedelta(hours=6), settings)
        assert [program.id for program in programs] == ["1"]

    def test_naive_window_end_is_treated_as_utc(self, settings):
        response = EpgEventsResponse.model_validate({"entries": [epg_event(eventId=1)]})
        programs = mappers.map_programs(response, "abc", datetime(2024, 1, 1), datetime(2024, 1, 1, 21, 0), settings)
        assert len(programs) == 1


class TestTimers:
    @pytest.mark.parametrize("sched_status, expected", [
        ("scheduled", RecordingStatus.NEW),
        ("recording", RecordingStatus.IN_PROGRESS),
        ("completed", RecordingStatus.COMPLETED),
        ("completedError", RecordingStatus.ERROR),
        ("cancelled", RecordingStatus.CANCELLED),
        ("conflictedOk", RecordingStatus.CONFLICTED_OK),
        ("conflictedNotOk", RecordingStatus.CONFLICTED_NOT_OK),
        ("somethingNew", RecordingStatus.ERROR),
        ("", RecordingStatus.ERROR),
    ])
    def test_recording_status(self, sched_status, expected):
        assert mappers.map_recording_status(sched_status) == expected

    def test_timer_fields(self):
        entry = DvrEntry(
            uuid="t1",
            disp_title="Movie",
            disp_subtitle="Part 2",
            disp_description="Plot",
            channel="abc",
            start=START,
            stop=STOP,
            start_extra=2,
            stop_extra=5,
            pri=3,
            filename="/rec/movie.ts",
            genre=[16],
            enabled=True,
            noresched=True,
            duplicate=1,
            autorec="rule-1",
            parent="parent-1",
            sched_status="recording",
        )
        timer = mappers.map_timer(entry)
        assert timer.id == "t1"
        assert timer.name == "Movie"
        assert timer.episode_title == "Part 2"
        assert timer.overview == "Plot"
        assert timer.channel_id == "abc"
        assert timer.start_date == datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)
        assert timer.pre_padding_seconds == 120
        assert timer.post_padding_seconds == 300
        assert timer.priority == 3
        assert timer.recording_path == "/rec/movie.ts"
        assert timer.genres == ["Movie/Drama"]
        assert timer.tags == ["NoResched", "Enabled"]
        assert timer.is_repeat is True
        assert timer.series_timer_id == "rule-1"
        assert timer.show_id == "parent-1"
        assert timer.community_rating is None
        assert timer.status == RecordingStatus.IN_PROGRESS

    def test_first_aired_zero_means_unknown(self):
        assert mappers.map_timer(DvrEntry(uuid="t1", first_aired=0)).original_air_date is None

    def test_first_aired_is_converted(self):
        timer = mappers.map_timer(DvrEntry(uuid="t1", first_aired=START))
        assert timer.original_air_date == datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)


class TestSeriesTimers:
    def test_weekdays_are_iso_numbered(self):
        # TVHeadend numbers weekdays 1=Monday..7=Sunday; a zero-based cast onto
        # a Sunday-first enum would shift every day by one
        assert mappers.map_weekdays([1, 3, 7]) == [DayOfWeek.MONDAY, DayOfWeek.WEDNESDAY, DayOfWeek.SUNDAY]
        assert mappers.map_weekdays([1]) != [DayOfWeek.SUNDAY]
        assert [day.iso_number for day in DayOfWeek] == [1, 2, 3, 4, 5, 6, 7]
        assert DayOfWeek.from_iso(7) is DayOfWeek.SUNDAY

    def test_out_of_range_weekdays_are_discarded(self):
        assert mappers.map_weekdays([0, 2, 8]) == [DayOfWeek.TUESDAY]

    def test_series_timer_fields_and_placeholders(self):
        now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        entry = AutorecEntry(
            uuid="rule-1",
            name="Tatort",
            channel="abc",
            pri=2,
            comment="Sunday crime",
            weekdays=[7],
            start_extra=1,
            stop_extra=10,
        )
        series_timer = mappers.map_series_timer(entry, now)
        assert series_timer.id == "rule-1"
        assert series_timer.name == "Tatort"
        assert series_timer.channel_id == "abc"
        assert series_timer.priority == 2
        assert series_timer.overview == "Sunday crime"
        assert series_timer.days == [DayOfWeek.SUNDAY]
        assert series_timer.pre_padding_seconds == 60
        assert series_timer.post_padding_seconds == 600
        assert series_timer.record_new_only is False
        assert series_timer.record_any_time is True
        assert series_timer.record_any_channel is False
        assert series_timer.start_date == now
        assert series_timer.end_date == now + timedelta(hours=1)


class TestLookups:
    def test_content_types_and_tags(self):
        content_types = ContentTypeResponse.model_validate({"entries": [{"key": 16, "val": "Movie / Drama"}]})
        tags = ChannelTagResponse.model_validate({"entries": [{"key": "tag-1", "val": "HD"}]})
        assert mappers.map_content_types(content_types) == {16: "Movie / Drama"}
        assert mappers.map_channel_tags(tags) == {"tag-1": "HD"}

    def test_recording_profile_match_is_case_insensitive(self):
        response = DvrConfigResponse.model_validate({"entries": [
            {"uuid": "u1", "name": None},
            {"uuid": "u2", "name": "Default"},
        ]})
        assert mappers.find_recording_profile_uuid(response, "DEFAULT") == "u2"

    def test_recording_profile_not_found(self):
        response = DvrConfigResponse.model_validate({"entries": [{"uuid": "u1", "name": "Archive"}]})
        with pytest.raises(RecordingProfileError, match="No matching recording profile"):
            mappers.find_recording_profile_uuid(response, "default")

    def test_no_recording_profiles(self):
        with pytest.raises(RecordingProfileError, match="No recording profiles"):
            mappers.find_recording_profile_uuid(DvrConfigResponse(), "default")
