#!/usr/bin/env python3
"""
🛡️ Input Validation Module for LetsFocus
Validates user input arriving through the control API:
- Session duration (1-60 minutes)
- Music volume (0-1 gain, clamped)
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Union

from ..constants import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES


@dataclass
class ValidationResult:
    """Result of input validation with value and error details."""
    is_valid: bool
    value: Any = None
    error: str = ""
    field_name: str = ""


class ValidationError(Exception):
    """Custom exception for validation errors."""

    def __init__(self, field_name: str, message: str):
        self.field_name = field_name
        self.message = message
        super().__init__(f"{field_name}: {message}")


class InputValidator:
    """Centralized input validation for LetsFocus user inputs."""

    MIN_DURATION = MIN_DURATION_MINUTES
    MAX_DURATION = MAX_DURATION_MINUTES
    MIN_VOLUME = 0.0
    MAX_VOLUME = 1.0

    @classmethod
    def validate_duration(cls, value: Union[str, int, None], field_name: str = "minutes") -> ValidationResult:
        """Validate a session duration in whole minutes."""
        if value is None or value == "":
            return ValidationResult(False, None, f"{field_name} is required", field_name)
        if isinstance(value, bool):
            return ValidationResult(False, None, f"{field_name} must be a whole number", field_name)

        try:
            if isinstance(value, float):
                if not value.is_integer():
                    raise ValueError
                duration = int(value)
            else:
                duration = int(str(value).strip())
        except (ValueError, TypeError):
            return ValidationResult(
                False, None,
                f"{field_name} must be a whole number between {cls.MIN_DURATION} and {cls.MAX_DURATION}",
                field_name
            )

        if duration < cls.MIN_DURATION or duration > cls.MAX_DURATION:
            return ValidationResult(
                False, None,
                f"{field_name} must be between {cls.MIN_DURATION} and {cls.MAX_DURATION} minutes",
                field_name
            )
        return ValidationResult(True, duration, "", field_name)

    @classmethod
    def validate_volume(cls, value: Union[str, float, int, None], field_name: str = "volume") -> ValidationResult:
        """Validate a playback gain; out-of-range numbers are clamped, not rejected."""
        if value is None or value == "" or isinstance(value, bool):
            return ValidationResult(False, None, f"{field_name} is required", field_name)

        try:
            volume = float(value)
        except (ValueError, TypeError):
            return ValidationResult(False, None, f"{field_name} must be a number between 0 and 1", field_name)
        if math.isnan(volume):
            return ValidationResult(False, None, f"{field_name} must be a number between 0 and 1", field_name)

        return ValidationResult(True, max(cls.MIN_VOLUME, min(cls.MAX_VOLUME, volume)), "", field_name)


def validate_duration_payload(form_data: Dict[str, Any]) -> int:
    """Validate the body of a set-duration request.

    Raises:
        ValidationError: If validation fails
    """
    result = InputValidator.validate_duration(form_data.get("minutes"), "minutes")
    if not result.is_valid:
        raise ValidationError(result.field_name, result.error)
    return result.value


def validate_volume_payload(form_data: Dict[str, Any]) -> float:
    """Validate the body of a set-volume request.

    Raises:
        ValidationError: If validation fails
    """
    result = InputValidator.validate_volume(form_data.get("volume"), "volume")
    if not result.is_valid:
        raise ValidationError(result.field_name, result.error)
    return result.value
