"""
Core Data Models for Sales Tracker

These models define the schemas for every financial record that flows
through the system. They are designed to:
1. Reject malformed input before it reaches the analytics engine
2. Stay immutable once built (entries are snapshots of storage)
3. Be serializable for storage, logging and export

DESIGN DECISION: The amount is always stored as a non-negative magnitude.
The sign of an entry is derived at read time from its type, never stored.
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class EntryType(str, Enum):
    """
    Kind of financial entry.

    Only these two values are accepted. Anything else is rejected by
    model validation and never reaches the analytics engine.
    """
    INCOME = "income"
    EXPENSE = "expense"


class SortField(str, Enum):
    """
    Fields an entry listing may be ordered by.

    DESIGN DECISION: Sort keys are a closed set. Caller-supplied strings
    are resolved into this enum at the boundary, so no free text ever
    reaches an ordering clause.
    """
    TYPE = "type"
    AMOUNT = "amount"
    DATE = "date"
    CATEGORY = "category"
    CREATED_AT = "created_at"
    ID = "id"


# =============================================================================
# CORE ENTRY MODEL
# =============================================================================

class FinancialEntry(BaseModel):
    """
    A single income or expense record as held by storage.

    The id and created_at are assigned by the storage layer on creation.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: int = Field(
        ...,
        ge=1,
        description="Storage-assigned identifier"
    )
    type: EntryType = Field(
        ...,
        description="Income or expense"
    )
    amount: int = Field(
        ...,
        ge=0,
        description="Magnitude of the transaction (never negative)"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the transaction"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Free-form category label"
    )
    created_at: AwareDatetime = Field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc),
        description="When the entry was created; must carry a UTC offset"
    )


class AggregateStats(BaseModel):
    """
    Whole-set statistics over signed contributions.

    Only ever built for a non-empty set; an empty set has no statistics.
    """
    model_config = ConfigDict(frozen=True)

    sum: int
    average: float
    count: int = Field(ge=1)
    median: float
    percentile_90: float


class AggregatedEntry(BaseModel):
    """
    An entry annotated with the statistics of the result set it belongs to.

    Every row of one result set carries the same AggregateStats value.
    """
    model_config = ConfigDict(frozen=True)

    entry: FinancialEntry
    stats: AggregateStats


# =============================================================================
# QUERY MODELS
# =============================================================================

class DateRange(BaseModel):
    """Inclusive date window; a missing bound leaves that side open."""
    model_config = ConfigDict(frozen=True)

    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None

    @model_validator(mode='after')
    def validate_order(self) -> 'DateRange':
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("Range start cannot be after range end")
        return self

    @property
    def is_unbounded(self) -> bool:
        return self.date_from is None and self.date_to is None


# =============================================================================
# WRITE PAYLOADS
# =============================================================================

class CreateEntry(BaseModel):
    """Payload for creating a new entry."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    type: EntryType
    amount: int = Field(..., ge=0)
    date: dt.date
    category: str = Field(..., min_length=1, max_length=100)


class UpdateEntry(BaseModel):
    """
    Partial update payload.

    Fields left as None keep their stored value.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    type: Optional[EntryType] = None
    amount: Optional[int] = Field(default=None, ge=0)
    date: Optional[dt.date] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)

    @model_validator(mode='after')
    def require_some_field(self) -> 'UpdateEntry':
        if all(getattr(self, name) is None for name in type(self).model_fields):
            raise ValueError("Update must change at least one field")
        return self

    def apply_to(self, entry: FinancialEntry) -> FinancialEntry:
        """Return a copy of entry with the provided fields replaced."""
        changes = self.model_dump(exclude_none=True)
        return entry.model_copy(update=changes)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found in a payload."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage payload validation.

    Stage 1: Schema validation (types, required fields)
    Stage 2: Semantic validation (plausibility checks)
    """

    schema_valid: bool
    semantic_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.schema_valid and self.semantic_valid

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]

