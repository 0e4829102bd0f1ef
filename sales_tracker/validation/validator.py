"""
Two-Stage Entry Validation

DESIGN DECISION: Payload validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Type checking (income/expense only)
- Required field presence
- Non-negative integer amount
- YYYY-MM-DD dates

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Implausibly large amounts
- These produce warnings only; the entry can still be saved

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the caller can decide.
"""

from datetime import date, timedelta
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from sales_tracker.config import AppSettings, get_settings
from sales_tracker.models.entry import (
    CreateEntry,
    UpdateEntry,
    ValidationIssue,
    ValidationResult,
)

Payload = Union[CreateEntry, UpdateEntry]


class EntryValidationError(ValueError):
    """A create/update payload failed schema validation."""

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Invalid payload: {messages}")


class EntryValidator:
    """
    Validates entry payloads through a two-stage pipeline.

    Stage 1: Schema validation (pydantic)
    Stage 2: Semantic validation (plausibility, warnings only)
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_schema(
        self,
        model: type[BaseModel],
        data: dict[str, Any],
    ) -> tuple[Optional[Payload], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (parsed_payload_or_None, list_of_issues)
        """
        try:
            return model.model_validate(data), []
        except ValidationError as e:
            issues = []
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"]) or "payload"
                issue_type = "missing" if error["type"] == "missing" else "invalid_value"
                issues.append(ValidationIssue(
                    field=location,
                    issue_type=issue_type,
                    message=f"{location}: {error['msg']}",
                    severity="error",
                ))
            return None, issues

    def _validate_semantic(self, payload: Payload) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Checks:
        - Entry date too far in the future
        - Suspiciously large amount
        """
        issues = []
        today = date.today()

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if payload.date and payload.date > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Entry date ({payload.date}) is in the future",
                severity="warning",
            ))

        if payload.amount and payload.amount > self._settings.max_entry_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({payload.amount:,}) seems unusually high",
                severity="warning",
            ))

        return issues

    def _validate(
        self,
        model: type[BaseModel],
        data: dict[str, Any],
    ) -> tuple[Optional[Payload], ValidationResult]:
        payload, issues = self._validate_schema(model, data)
        if payload is None:
            # Skip stage 2 if stage 1 fails
            return None, ValidationResult(
                schema_valid=False,
                semantic_valid=False,
                issues=issues,
            )

        issues = self._validate_semantic(payload)
        return payload, ValidationResult(
            schema_valid=True,
            semantic_valid=True,
            issues=issues,
        )

    def validate_create(
        self,
        data: dict[str, Any],
    ) -> tuple[Optional[CreateEntry], ValidationResult]:
        """Validate a creation payload."""
        return self._validate(CreateEntry, data)

    def validate_update(
        self,
        data: dict[str, Any],
    ) -> tuple[Optional[UpdateEntry], ValidationResult]:
        """Validate a partial update payload."""
        return self._validate(UpdateEntry, data)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if not result.issues:
            return "All details look good."

        lines = []
        for issue in result.issues:
            prefix = "Error" if issue.severity == "error" else "Check"
            lines.append(f"{prefix}: {issue.message}")
        return "\n".join(lines)
