"""Tests for the rating aggregation functions."""
from datetime import date

import pytest

from app.services.performance import (
    TrendTable,
    build_trend_table,
    combine_monthly_score,
    compute_rating_score,
    find_low_performers,
    is_low_performer,
    low_performers_csv,
    recent_months,
    round_half_up,
)

CRITERIA = [
    {"title": "Code Quality", "weight": 30},
    {"title": "Delivery", "weight": 50},
    {"title": "Communication", "weight": 20},
]


def rating(given_by, given_to, month, score):
    return {"given_by": given_by, "given_to": given_to, "month": month, "average_score": score}


def user(uid, name, role="developer"):
    return {"uid": uid, "name": name, "role": role}


# ============================================================
# compute_rating_score
# ============================================================

class TestComputeRatingScore:

    def test_all_tens_is_hundred(self):
        scores = {c["title"]: 10 for c in CRITERIA}
        assert compute_rating_score(scores, CRITERIA) == 100

    def test_all_omitted_is_zero(self):
        assert compute_rating_score({}, CRITERIA) == 0

    def test_all_zero_is_zero(self):
        assert compute_rating_score({c["title"]: 0 for c in CRITERIA}, CRITERIA) == 0

    def test_weighted_mix(self):
        # (8*30 + 6*50 + 10*20) / 10 / 100 * 100 = 74
        scores = {"Code Quality": 8, "Delivery": 6, "Communication": 10}
        assert compute_rating_score(scores, CRITERIA) == 74

    def test_omitted_criterion_contributes_zero(self):
        scores = {"Code Quality": 10, "Delivery": 10}
        assert compute_rating_score(scores, CRITERIA) == 80

    def test_weights_not_summing_to_hundred_are_proportions(self):
        criteria = [{"title": "A", "weight": 1}, {"title": "B", "weight": 3}]
        # (5*1 + 9*3) / 10 / 4 * 100 = 80
        assert compute_rating_score({"A": 5, "B": 9}, criteria) == 80

    def test_order_of_criteria_does_not_matter(self):
        scores = {"Code Quality": 7, "Delivery": 3, "Communication": 9}
        assert compute_rating_score(scores, CRITERIA) == compute_rating_score(scores, list(reversed(CRITERIA)))

    def test_rounds_half_up(self):
        criteria = [{"title": "A", "weight": 1}, {"title": "B", "weight": 3}]
        # (2*1 + 1*3) / 10 / 4 * 100 = 12.5
        assert compute_rating_score({"A": 2, "B": 1}, criteria) == 13

    def test_empty_criteria_is_zero(self):
        assert compute_rating_score({"A": 10}, []) == 0

    def test_result_is_an_int_in_range(self):
        for value in range(1, 11):
            score = compute_rating_score({c["title"]: value for c in CRITERIA}, CRITERIA)
            assert isinstance(score, int)
            assert 0 <= score <= 100

    def test_non_numeric_scores_are_ignored(self):
        assert compute_rating_score({"Code Quality": "ten"}, CRITERIA) == 0


# ============================================================
# combine_monthly_score
# ============================================================

class TestCombineMonthlyScore:

    ROLES = {"pm1": "project_manager", "pm2": "project_manager", "tl1": "team_lead", "adm": "admin"}

    def test_only_pm(self):
        assert combine_monthly_score([rating("pm1", "dev", "2024-01", 80)], self.ROLES) == 80

    def test_pm_and_tl_split_evenly(self):
        ratings = [rating("pm1", "dev", "2024-01", 80), rating("tl1", "dev", "2024-01", 60)]
        assert combine_monthly_score(ratings, self.ROLES) == 70

    def test_tier_is_averaged_before_split(self):
        ratings = [
            rating("pm1", "dev", "2024-01", 90),
            rating("pm2", "dev", "2024-01", 70),
            rating("tl1", "dev", "2024-01", 40),
        ]
        assert combine_monthly_score(ratings, self.ROLES) == 60

    def test_no_ratings_is_zero(self):
        assert combine_monthly_score([], self.ROLES) == 0

    def test_unknown_rater_is_skipped(self):
        ratings = [rating("ghost", "dev", "2024-01", 10), rating("tl1", "dev", "2024-01", 60)]
        assert combine_monthly_score(ratings, self.ROLES) == 60

    def test_role_comes_from_lookup_not_uid(self):
        roles = {"team_lead_lookalike": "project_manager", "tl1": "team_lead"}
        ratings = [
            rating("team_lead_lookalike", "dev", "2024-01", 100),
            rating("tl1", "dev", "2024-01", 50),
        ]
        assert combine_monthly_score(ratings, roles) == 75

    def test_admin_ratings_do_not_count(self):
        assert combine_monthly_score([rating("adm", "dev", "2024-01", 90)], self.ROLES) == 0

    def test_non_string_rater_is_skipped(self):
        ratings = [rating(["pm1"], "dev", "2024-01", 10), rating("tl1", "dev", "2024-01", 60)]
        assert combine_monthly_score(ratings, self.ROLES) == 60


# ============================================================
# recent_months / build_trend_table
# ============================================================

class TestRecentMonths:

    def test_most_recent_first(self):
        assert recent_months(3, date(2024, 6, 15)) == ["2024-06", "2024-05", "2024-04"]

    def test_year_rollover(self):
        assert recent_months(3, date(2024, 2, 15)) == ["2024-02", "2024-01", "2023-12"]

    def test_twelve_months(self):
        months = recent_months(12, date(2024, 1, 31))
        assert len(months) == 12
        assert months[0] == "2024-01"
        assert months[-1] == "2023-02"


class TestBuildTrendTable:

    MONTHS = ["2024-03", "2024-02", "2024-01"]

    def test_month_without_ratings_has_no_record(self):
        users = [user("u1", "Ann")]
        ratings = [rating("pm", "u1", "2024-03", 80)]
        table = build_trend_table(users, ratings, self.MONTHS)

        assert [(r.month, r.score) for r in table.records] == [("2024-03", 80.0)]
        assert not any(r.month == "2024-02" for r in table.records)

    def test_monthly_mean_rounded_to_one_decimal(self):
        users = [user("u1", "Ann")]
        ratings = [
            rating("pm", "u1", "2024-01", 70),
            rating("tl", "u1", "2024-01", 71),
            rating("x", "u1", "2024-01", 71),
        ]
        table = build_trend_table(users, ratings, self.MONTHS)
        assert table.records[0].score == 70.7

    def test_overall_average_uses_only_months_with_data(self):
        users = [user("u1", "Ann")]
        ratings = [rating("pm", "u1", "2024-03", 80), rating("pm", "u1", "2024-01", 60)]
        table = build_trend_table(users, ratings, self.MONTHS)
        assert table.overall_averages == {"u1": 70.0}

    def test_user_without_data_has_no_overall_average(self):
        table = build_trend_table([user("u1", "Ann"), user("u2", "Bob")], [rating("pm", "u1", "2024-03", 80)], self.MONTHS)
        assert "u2" not in table.overall_averages

    def test_dangling_and_malformed_ratings_are_skipped(self):
        users = [user("u1", "Ann")]
        ratings = [
            rating("pm", "deleted-user", "2024-03", 10),
            rating("pm", "u1", "2023-01", 10),
            rating("pm", "u1", "2024-03", None),
            {"given_to": "u1"},
            rating("pm", "u1", "2024-03", 90),
        ]
        table = build_trend_table(users, ratings, self.MONTHS)
        assert [(r.user_id, r.score) for r in table.records] == [("u1", 90.0)]

    def test_non_string_keys_are_skipped(self):
        users = [user("u1", "Ann"), user(["u2"], "Bob")]
        ratings = [
            rating("pm", ["u1"], "2024-03", 10),
            rating("pm", "u1", ["2024-03"], 10),
            rating("pm", {"uid": "u1"}, "2024-03", 10),
            rating("pm", "u1", "2024-03", 90),
        ]
        table = build_trend_table(users, ratings, self.MONTHS)
        assert [(r.user_id, r.score) for r in table.records] == [("u1", 90.0)]
        assert find_low_performers(users, table, 9.0) == []

    def test_admins_are_not_tracked(self):
        users = [user("a1", "Root", role="admin")]
        table = build_trend_table(users, [rating("pm", "a1", "2024-03", 50)], self.MONTHS)
        assert table.records == []

    def test_records_for_user(self):
        users = [user("u1", "Ann"), user("u2", "Bob")]
        ratings = [rating("pm", "u1", "2024-03", 80), rating("pm", "u2", "2024-02", 60)]
        table = build_trend_table(users, ratings, self.MONTHS)
        assert [r.name for r in table.for_user("u2")] == ["Bob"]


# ============================================================
# Low performers
# ============================================================

class TestLowPerformers:

    def table(self, averages):
        return TrendTable(months=["2024-03"], overall_averages=averages)

    def test_zero_average_is_excluded(self):
        assert not is_low_performer(0, 7.0)

    def test_just_below_threshold_is_included(self):
        assert is_low_performer(69.9, 7.0)

    def test_equal_to_threshold_is_excluded(self):
        assert not is_low_performer(70.0, 7.0)

    def test_find_low_performers(self):
        users = [user("u1", "Ann"), user("u2", "Bob"), user("u3", "Cy"), user("u4", "Di")]
        table = self.table({"u1": 55.0, "u2": 70.0, "u3": 0.0})

        performers = find_low_performers(users, table, 7.0)

        assert [p.uid for p in performers] == ["u1"]
        assert performers[0].average_score == 55.0

    def test_threshold_change_reuses_table(self):
        users = [user("u1", "Ann"), user("u2", "Bob")]
        table = self.table({"u1": 55.0, "u2": 75.0})

        assert [p.uid for p in find_low_performers(users, table, 5.0)] == []
        assert [p.uid for p in find_low_performers(users, table, 8.0)] == ["u1", "u2"]

    def test_csv_export(self):
        users = [user("u1", "Ann"), user("u2", "Bob")]
        performers = find_low_performers(users, self.table({"u1": 55.34, "u2": 61.0}), 7.0)

        lines = low_performers_csv(performers, 3).splitlines()

        assert lines == ["Name,Months,Average Score", "Ann,3,55.3", "Bob,3,61.0"]


@pytest.mark.parametrize("value,digits,expected", [(2.5, 0, 3), (70.65, 1, 70.7), (-0.4, 0, 0)])
def test_round_half_up(value, digits, expected):
    assert round_half_up(value, digits) == expected
