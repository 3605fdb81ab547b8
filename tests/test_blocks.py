from datetime import date

from villas.blocks import (
    ManualBlockedPeriod,
    resolve_blocked_periods,
    resolve_blocked_periods_for_year,
)


def test_last_comment_wins_on_overlap():
    result = resolve_blocked_periods_for_year(2025, [
        {"from": "2025-04-01", "to": "2025-04-10", "comment": "Travaux"},
        {"from": "2025-04-05", "to": "2025-04-06", "comment": "Famille"},
    ])
    assert result == [
        ManualBlockedPeriod(date(2025, 4, 1), date(2025, 4, 4), "Travaux"),
        ManualBlockedPeriod(date(2025, 4, 5), date(2025, 4, 6), "Famille"),
        ManualBlockedPeriod(date(2025, 4, 7), date(2025, 4, 10), "Travaux"),
    ]


def test_contiguous_periods_with_same_comment_are_merged():
    result = resolve_blocked_periods_for_year(2025, [
        {"from": "2025-04-01", "to": "2025-04-03", "comment": "Travaux"},
        {"from": "2025-04-04", "to": "2025-04-08", "comment": " Travaux "},
    ])
    assert result == [ManualBlockedPeriod(date(2025, 4, 1), date(2025, 4, 8), "Travaux")]


def test_entries_without_comment_or_valid_dates_are_ignored():
    result = resolve_blocked_periods_for_year(2025, [
        {"from": "2025-04-01", "to": "2025-04-03", "comment": "   "},
        {"from": "2025-04-01", "to": "2025-04-03"},
        {"from": "2025-04-03", "to": "2025-04-01", "comment": "Travaux"},
        {"from": "hier", "to": "2025-04-01", "comment": "Travaux"},
        None,
    ])
    assert result == []


def test_comment_is_truncated_to_120_characters():
    result = resolve_blocked_periods_for_year(2025, [
        {"from": "2025-04-01", "to": "2025-04-01", "comment": "a" * 200},
    ])
    assert result[0].comment == "a" * 120


def test_comment_cut_on_a_space_stays_idempotent():
    once = resolve_blocked_periods_for_year(2025, [
        {"from": "2025-04-01", "to": "2025-04-01", "comment": "c" * 119 + " fin"},
    ])
    assert once[0].comment == "c" * 119
    assert resolve_blocked_periods_for_year(2025, once) == once
    assert resolve_blocked_periods(once) == once


def test_year_scope_drops_other_years():
    periods = [{"from": "2025-12-30", "to": "2026-01-02", "comment": "Réveillon"}]
    assert resolve_blocked_periods_for_year(2025, periods) == [
        ManualBlockedPeriod(date(2025, 12, 30), date(2025, 12, 31), "Réveillon"),
    ]
    assert resolve_blocked_periods_for_year(2026, periods) == [
        ManualBlockedPeriod(date(2026, 1, 1), date(2026, 1, 2), "Réveillon"),
    ]


def test_multi_year_resolution_stitches_runs_across_new_year():
    result = resolve_blocked_periods([
        {"from": "2025-12-30", "to": "2026-01-02", "comment": "Réveillon"},
        {"from": "2025-06-01", "to": "2025-06-02", "comment": "Piscine"},
    ])
    assert result == [
        ManualBlockedPeriod(date(2025, 6, 1), date(2025, 6, 2), "Piscine"),
        ManualBlockedPeriod(date(2025, 12, 30), date(2026, 1, 2), "Réveillon"),
    ]


def test_multi_year_resolution_is_idempotent():
    once = resolve_blocked_periods([
        {"from": "2025-12-30", "to": "2026-01-02", "comment": "Réveillon"},
        {"from": "2026-01-01", "to": "2026-01-01", "comment": "Jour de l'an"},
    ])
    assert resolve_blocked_periods(once) == once
    assert len(once) == 3


def test_round_trip_through_document_store_shape():
    period = ManualBlockedPeriod(date(2025, 4, 1), date(2025, 4, 3), "Travaux")
    assert ManualBlockedPeriod.from_dict(period.to_dict()) == period
