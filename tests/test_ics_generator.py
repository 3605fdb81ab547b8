from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from icalendar import Calendar

from villas.availability import BlockedInterval
from villas.utils.ics import generate

NOW = datetime(2025, 6, 1, 14, 30, 5, tzinfo=ZoneInfo("Europe/Paris"))


def uids(body):
    return [line for line in body.split("\r\n") if line.startswith("UID:")]


def test_three_day_block_renders_exclusive_dtend():
    body = generate("chalet-des-neiges", [
        BlockedInterval(date(2025, 6, 10), date(2025, 6, 12), "ical", "Occupied"),
    ], NOW)
    assert "DTSTART;VALUE=DATE:20250610\r\n" in body
    assert "DTEND;VALUE=DATE:20250613\r\n" in body


def test_document_wrapper_and_dtstamp_in_utc():
    body = generate("chalet-des-neiges", [
        BlockedInterval(date(2025, 12, 31), date(2025, 12, 31), "manual", "Blocked"),
    ], NOW)
    lines = body.split("\r\n")
    assert lines[:7] == [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Chalet Manager//Availability//FR",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "X-WR-CALNAME:Disponibilités - chalet-des-neiges",
        "X-WR-TIMEZONE:Europe/Paris",
    ]
    assert "DTSTAMP:20250601T123005Z" in lines
    assert "DTEND;VALUE=DATE:20260101" in lines
    assert body.endswith("END:VCALENDAR\r\n")
    assert lines.count("BEGIN:VEVENT") == 1


def test_uids_are_stable_and_distinct_per_source():
    intervals = [
        BlockedInterval(date(2025, 8, 1), date(2025, 8, 3), "ical", "Occupied"),
        BlockedInterval(date(2025, 8, 1), date(2025, 8, 3), "manual", "Maintenance"),
        BlockedInterval(date(2025, 9, 1), date(2025, 9, 1), "manual", "Blocked"),
    ]
    first = generate("chalet-des-neiges", intervals, NOW)
    second = generate("chalet-des-neiges", intervals, datetime(2025, 7, 1, tzinfo=timezone.utc))

    assert uids(first) == uids(second)
    assert len(set(uids(first))) == 3
    assert uids(first)[0] == "UID:chalet-des-neiges-ical-20250801-20250804@chalet-manager"


def test_uid_does_not_depend_on_position():
    a = BlockedInterval(date(2025, 8, 1), date(2025, 8, 3), "ical", "Occupied")
    b = BlockedInterval(date(2025, 9, 1), date(2025, 9, 2), "ical", "Occupied")
    assert uids(generate("v", [a, b], NOW))[1] == uids(generate("v", [b], NOW))[0]


def test_summary_is_escaped():
    body = generate("v", [
        BlockedInterval(date(2025, 8, 1), date(2025, 8, 1), "manual", "Travaux; peinture, sol\\mur\nfin"),
    ], NOW)
    assert "SUMMARY:Travaux\\; peinture\\, sol\\\\mur\\nfin\r\n" in body


def test_escaping_is_not_applied_twice():
    body = generate("v", [
        BlockedInterval(date(2025, 8, 1), date(2025, 8, 1), "manual", "a\\;b"),
        BlockedInterval(date(2025, 8, 2), date(2025, 8, 2), "manual", "x\r\ny"),
    ], NOW)
    assert "SUMMARY:a\\\\\\;b\r\n" in body
    assert "SUMMARY:x\\ny\r\n" in body


def test_long_comment_is_folded_to_75_octets():
    comment = "Travaux " + "x" * 112
    body = generate("chalet-des-neiges", [
        BlockedInterval(date(2025, 8, 1), date(2025, 8, 3), "manual", comment),
    ], NOW)

    assert [line for line in body.split("\r\n") if len(line.encode("utf-8")) > 75] == []
    event = Calendar.from_ical(body).walk("VEVENT")[0]
    assert str(event["summary"]) == comment
    assert str(event["uid"]) == "chalet-des-neiges-manual-20250801-20250804@chalet-manager"


def test_empty_feed_is_still_valid_calendar():
    body = generate("v", [], NOW)
    assert "BEGIN:VEVENT" not in body
    assert body.startswith("BEGIN:VCALENDAR\r\n")
    assert body.endswith("END:VCALENDAR\r\n")
