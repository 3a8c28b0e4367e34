"""Canonical Pydantic models shared across specmodel modules.

The models fall into two groups:

**Validation records** -- produced by the validation engine and returned to
callers as plain data:
    :class:`ValidationProblemSeverity`, :class:`ValidationProblem` and
    :class:`RuleMetadata`.

**Configuration models** -- serialised as JSON in the user's config directory
and in project-local ``specmodel.json`` files:
    :class:`ValidationConfig`, :class:`OutputConfig` and :class:`GlobalConfig`.

All models use Pydantic v2. The configuration models use ``extra="allow"``
so that keys written by newer versions are preserved in ``model_extra``.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Validation records ---


class ValidationProblemSeverity(str, enum.Enum):
    """Severity of a reported problem.

    ``IGNORE`` is a configuration value: a rule whose effective severity is
    ``IGNORE`` does not report anything.
    """

    IGNORE = "ignore"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    ValidationProblemSeverity.IGNORE: 0,
    ValidationProblemSeverity.LOW: 1,
    ValidationProblemSeverity.MEDIUM: 2,
    ValidationProblemSeverity.HIGH: 3,
}


class ValidationProblem(BaseModel):
    """One rule violation found in a document.

    Problems are always returned as data, never raised.

    Example::

        ValidationProblem(
            error_code="R-003",
            node_path="/",
            property_name="openapi",
            message="Invalid OpenAPI version '3.0.9'.",
            severity=ValidationProblemSeverity.HIGH,
        )
    """

    model_config = ConfigDict(frozen=True)

    error_code: str
    node_path: str = Field(description="NodePath string of the offending node")
    property_name: Optional[str] = Field(
        default=None, description="Property of the node the problem concerns"
    )
    message: str
    severity: ValidationProblemSeverity
    context: dict[str, str] = Field(default_factory=dict)


class RuleMetadata(BaseModel):
    """Static description of a validation rule.

    ``applies_to`` maps a dialect name to the version families the rule is
    valid for. A version family is a ``major.minor`` prefix (``"3.0"``) or a
    bare major version (``"3"``).

    Example::

        RuleMetadata(
            code="INF-001",
            name="Missing API Title",
            category="Required Property",
            entity="Info",
            applies_to={"openapi": {"2.0", "3.0", "3.1"}, "asyncapi": {"2"}},
            message_template="API is missing a title.",
        )
    """

    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    category: str
    entity: str
    applies_to: dict[str, frozenset[str]]
    message_template: str
    default_severity: ValidationProblemSeverity = ValidationProblemSeverity.MEDIUM

    def format_message(self, context: dict[str, str]) -> str:
        """Fill ``{placeholders}`` in the message template from *context*."""
        try:
            return self.message_template.format(**context)
        except (KeyError, IndexError):
            return self.message_template


# --- Configuration models ---


class ValidationConfig(BaseModel):
    """Validation preferences stored in :class:`GlobalConfig`."""

    severity_overrides: dict[str, ValidationProblemSeverity] = Field(
        default_factory=dict,
        description="Per rule-code severity; 'ignore' silences a rule",
    )
    disabled_rules: list[str] = Field(
        default_factory=list, description="Rule codes that are never run"
    )
    isolate_rule_failures: bool = Field(
        default=True,
        description="Skip a rule that raises instead of aborting the whole pass",
    )
    resolve_remote_refs: bool = Field(
        default=False, description="Check external $ref targets over HTTP"
    )
    remote_timeout: float = Field(
        default=10.0, description="Timeout in seconds for remote reference checks"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specmodel/config.json``.

    Loaded and saved by :func:`~specmodel.config.load_global_config` and
    :func:`~specmodel.config.save_global_config`. See
    :func:`~specmodel.config.resolve_config` for the precedence chain.
    """

    model_config = ConfigDict(extra="allow")

    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
