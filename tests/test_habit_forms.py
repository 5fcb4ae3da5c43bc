from __future__ import annotations

from datetime import date

import pytest

from lifetrack.blueprints.habits.forms import (
    FREQUENCY_ERROR,
    HabitForm,
    HabitUpdateForm,
    ToggleLogForm,
)
from lifetrack.models import FrequencyType, HabitType


class TestHabitForm:
    def test_defaults_to_daily_good_habit(self):
        form, errors = HabitForm.parse({"name": "  Stretch  "})

        assert errors == {}
        fields = form.to_fields()
        assert fields["name"] == "Stretch"
        assert fields["habit_type"] is HabitType.GOOD
        assert fields["frequency_type"] is FrequencyType.DAILY
        assert fields["frequency_value"] is None
        assert fields["frequency_days"] is None

    def test_name_is_required(self):
        form, errors = HabitForm.parse({"name": "   "})

        assert form is None
        assert "name" in errors

    def test_name_length_is_limited(self):
        _, errors = HabitForm.parse({"name": "x" * 101})

        assert "name" in errors

    def test_specific_days_from_form_string(self):
        form, errors = HabitForm.parse(
            {"name": "Gym", "frequency_type": "SPECIFIC_DAYS", "frequency_days": "5,1,3"}
        )

        assert errors == {}
        assert form.to_fields()["frequency_days"] == "1,3,5"

    def test_specific_days_require_at_least_one_day(self):
        form, errors = HabitForm.parse({"name": "Gym", "frequency_type": "SPECIFIC_DAYS"})

        assert form is None
        assert errors["__root__"] == [FREQUENCY_ERROR]

    def test_times_per_week_requires_a_count(self):
        _, errors = HabitForm.parse(
            {"name": "Read", "frequency_type": "TIMES_PER_WEEK", "frequency_value": ""}
        )

        assert errors["__root__"] == [FREQUENCY_ERROR]

    def test_times_per_week_count_is_bounded(self):
        _, errors = HabitForm.parse(
            {"name": "Read", "frequency_type": "TIMES_PER_WEEK", "frequency_value": "8"}
        )

        assert "frequency_value" in errors

    def test_irrelevant_frequency_fields_are_cleared(self):
        form, _ = HabitForm.parse(
            {
                "name": "Read",
                "frequency_type": "TIMES_PER_WEEK",
                "frequency_value": "3",
                "frequency_days": ["1", "2"],
            }
        )

        fields = form.to_fields()
        assert fields["frequency_value"] == 3
        assert fields["frequency_days"] is None

    def test_rejects_out_of_range_weekday(self):
        _, errors = HabitForm.parse(
            {"name": "Gym", "frequency_type": "SPECIFIC_DAYS", "frequency_days": [1, 7]}
        )

        assert "frequency_days" in errors

    def test_rejects_bad_colour(self):
        _, errors = HabitForm.parse({"name": "Gym", "color": "green"})

        assert errors["color"] == ["Invalid colour format (expected #RRGGBB)"]

    def test_rejects_unknown_frequency_type(self):
        _, errors = HabitForm.parse({"name": "Gym", "frequency_type": "HOURLY"})

        assert "frequency_type" in errors


class TestHabitUpdateForm:
    def test_only_submitted_fields_change(self):
        form, errors = HabitUpdateForm.parse({"name": "Renamed"})

        assert errors == {}
        assert form.to_changes() == {"name": "Renamed"}

    def test_switching_frequency_clears_other_fields(self):
        form, _ = HabitUpdateForm.parse({"frequency_type": "SPECIFIC_DAYS", "frequency_days": [3, 1]})

        assert form.to_changes() == {
            "frequency_type": FrequencyType.SPECIFIC_DAYS,
            "frequency_value": None,
            "frequency_days": "1,3",
        }

    def test_partial_frequency_is_validated(self):
        form, errors = HabitUpdateForm.parse({"frequency_type": "TIMES_PER_WEEK"})

        assert form is None
        assert errors["__root__"] == [FREQUENCY_ERROR]

    @pytest.mark.parametrize("field", ["name", "habit_type", "frequency_type"])
    def test_required_columns_cannot_be_cleared(self, field):
        form, errors = HabitUpdateForm.parse({field: None})

        assert form is None
        assert errors[field] == ["This field cannot be cleared."]

    def test_days_ignored_when_current_type_does_not_use_them(self):
        form, errors = HabitUpdateForm.parse(
            {"frequency_days": [1, 3]}, current_frequency_type=FrequencyType.DAILY
        )

        assert errors == {}
        assert form.to_changes(FrequencyType.DAILY) == {}

    def test_days_applied_when_current_type_uses_them(self):
        form, _ = HabitUpdateForm.parse(
            {"frequency_days": "5,2", "frequency_value": 4},
            current_frequency_type=FrequencyType.SPECIFIC_DAYS,
        )

        assert form.to_changes(FrequencyType.SPECIFIC_DAYS) == {"frequency_days": "2,5"}

    def test_clearing_days_of_current_type_is_rejected(self):
        form, errors = HabitUpdateForm.parse(
            {"frequency_days": []}, current_frequency_type=FrequencyType.SPECIFIC_DAYS
        )

        assert form is None
        assert errors["__root__"] == [FREQUENCY_ERROR]


class TestToggleLogForm:
    def test_parses_day_key(self):
        form, errors = ToggleLogForm.parse({"date": "2024-03-15"})

        assert errors == {}
        assert form.day == date(2024, 3, 15)

    def test_rejects_other_formats(self):
        for raw in ("15/03/2024", "2024-02-30", 20240315):
            form, errors = ToggleLogForm.parse({"date": raw})
            assert form is None
            assert "date" in errors
