"""Habit form definitions."""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Iterable, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from ...domain.calendar import parse_day_key
from ...domain.frequency import encode_frequency_days
from ...models.habit import FrequencyType, HabitType

_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

FREQUENCY_ERROR = "Invalid frequency configuration"


def structure_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Flatten pydantic errors into ``{field: [messages]}``."""

    structured: dict[str, list[str]] = {}
    for error in exc.errors(include_url=False):
        loc = error.get("loc", ())
        key = str(loc[0]) if loc else "__root__"
        message = error.get("msg", "Invalid value")
        structured.setdefault(key, []).append(message.removeprefix("Value error, "))
    return structured


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _split_days(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class _HabitFields(BaseModel):
    """Field rules shared by the create and update forms."""

    model_config = ConfigDict(str_strip_whitespace=True)

    description: Optional[str] = Field(default=None, max_length=500)
    color: Optional[str] = Field(default=None, description="Hex colour, e.g. #22c55e")
    icon: Optional[str] = Field(default=None, max_length=50)
    frequency_value: Optional[int] = Field(default=None, ge=1, le=7)
    frequency_days: Optional[list[int]] = Field(
        default=None, description="Weekdays 0=Sunday..6=Saturday"
    )

    @field_validator("description", "color", "icon", "frequency_value", mode="before")
    @classmethod
    def blank_as_missing(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _COLOR_PATTERN.match(value):
            raise ValueError("Invalid colour format (expected #RRGGBB)")
        return value

    @field_validator("frequency_days", mode="before")
    @classmethod
    def split_days(cls, value: str | Iterable[Any] | None) -> Any:
        """Accept "1,3,5" as well as lists of weekday numbers."""

        return _split_days(_blank_to_none(value))

    @field_validator("frequency_days")
    @classmethod
    def validate_days(cls, value: Optional[list[int]]) -> Optional[list[int]]:
        if value is None:
            return None
        for day in value:
            if not 0 <= day <= 6:
                raise ValueError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(value))

    @staticmethod
    def _frequency_is_valid(
        frequency_type: FrequencyType,
        frequency_value: Optional[int],
        frequency_days: Optional[list[int]],
    ) -> bool:
        if frequency_type is FrequencyType.TIMES_PER_WEEK:
            return frequency_value is not None and frequency_value >= 1
        if frequency_type is FrequencyType.SPECIFIC_DAYS:
            return bool(frequency_days)
        return True

    @staticmethod
    def _frequency_columns(
        frequency_type: FrequencyType,
        frequency_value: Optional[int],
        frequency_days: Optional[list[int]],
    ) -> dict[str, Any]:
        """Column values for the frequency; fields unused by the type are cleared."""

        return {
            "frequency_type": frequency_type,
            "frequency_value": (
                frequency_value if frequency_type is FrequencyType.TIMES_PER_WEEK else None
            ),
            "frequency_days": (
                encode_frequency_days(frequency_days)
                if frequency_type is FrequencyType.SPECIFIC_DAYS
                else None
            ),
        }


class HabitForm(_HabitFields):
    """Form model for creating a habit."""

    name: str = Field(min_length=1, max_length=100, description="Short label for the habit")
    habit_type: HabitType = Field(default=HabitType.GOOD)
    frequency_type: FrequencyType = Field(default=FrequencyType.DAILY)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Please provide a habit name.")
        return value

    @model_validator(mode="after")
    def ensure_frequency(self) -> "HabitForm":
        """Require a weekly count or a set of weekdays when the type needs one."""

        if not self._frequency_is_valid(
            self.frequency_type, self.frequency_value, self.frequency_days
        ):
            raise ValueError(FREQUENCY_ERROR)
        return self

    def to_fields(self) -> dict[str, Any]:
        """Column values for a new ``Habit`` row."""

        fields = {
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "icon": self.icon,
            "habit_type": self.habit_type,
        }
        fields.update(
            self._frequency_columns(
                self.frequency_type, self.frequency_value, self.frequency_days
            )
        )
        return fields

    @classmethod
    def parse(cls, payload: dict[str, Any]) -> tuple[Optional["HabitForm"], dict[str, list[str]]]:
        """Validate a raw payload, returning the form or structured errors."""

        try:
            return cls.model_validate(payload), {}
        except ValidationError as exc:
            return None, structure_errors(exc)


class HabitUpdateForm(_HabitFields):
    """Partial update: only submitted fields are validated and applied.

    Without a new ``frequency_type``, a submitted ``frequency_value`` or
    ``frequency_days`` only applies when the habit's current type reads it;
    otherwise it is dropped.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    habit_type: Optional[HabitType] = None
    frequency_type: Optional[FrequencyType] = None

    @field_validator("name", "habit_type", "frequency_type", mode="before")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("This field cannot be cleared.")
        return value

    @model_validator(mode="after")
    def ensure_frequency(self, info: ValidationInfo) -> "HabitUpdateForm":
        if self.frequency_type is not None:
            valid = self._frequency_is_valid(
                self.frequency_type, self.frequency_value, self.frequency_days
            )
        else:
            current = (info.context or {}).get("current_frequency_type")
            submitted = self.model_fields_set
            valid = True
            if current == FrequencyType.TIMES_PER_WEEK and "frequency_value" in submitted:
                valid = self.frequency_value is not None
            elif current == FrequencyType.SPECIFIC_DAYS and "frequency_days" in submitted:
                valid = bool(self.frequency_days)
        if not valid:
            raise ValueError(FREQUENCY_ERROR)
        return self

    def to_changes(self, current_frequency_type: Optional[FrequencyType] = None) -> dict[str, Any]:
        """Column changes for the submitted fields only."""

        changes = self.model_dump(
            exclude_unset=True, exclude={"frequency_value", "frequency_days"}
        )
        if self.frequency_type is not None:
            changes.update(
                self._frequency_columns(
                    self.frequency_type, self.frequency_value, self.frequency_days
                )
            )
            return changes

        submitted = self.model_fields_set
        if current_frequency_type == FrequencyType.TIMES_PER_WEEK and "frequency_value" in submitted:
            changes["frequency_value"] = self.frequency_value
        elif current_frequency_type == FrequencyType.SPECIFIC_DAYS and "frequency_days" in submitted:
            changes["frequency_days"] = encode_frequency_days(self.frequency_days)
        return changes

    @classmethod
    def parse(
        cls,
        payload: dict[str, Any],
        *,
        current_frequency_type: Optional[FrequencyType] = None,
    ) -> tuple[Optional["HabitUpdateForm"], dict[str, list[str]]]:
        try:
            form = cls.model_validate(
                payload, context={"current_frequency_type": current_frequency_type}
            )
            return form, {}
        except ValidationError as exc:
            return None, structure_errors(exc)


class ToggleLogForm(BaseModel):
    """A habit day to toggle, submitted as ``YYYY-MM-DD``."""

    model_config = ConfigDict(populate_by_name=True)

    day: date = Field(alias="date")

    @field_validator("day", mode="before")
    @classmethod
    def parse_day(cls, value: Any) -> Any:
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            raise ValueError("Invalid date format (expected YYYY-MM-DD)")
        return parse_day_key(value.strip())

    @classmethod
    def parse(cls, payload: dict[str, Any]) -> tuple[Optional["ToggleLogForm"], dict[str, list[str]]]:
        try:
            return cls.model_validate(payload), {}
        except ValidationError as exc:
            return None, structure_errors(exc)


__all__ = ["HabitForm", "HabitUpdateForm", "ToggleLogForm", "structure_errors"]
