"""
Scheduled job definitions.

A job is plain data: a unique name, a five-field cron expression and the
HTTP call to make when it fires. Scheduler clients turn it into whatever
the backend needs.
"""
from typing import Any

from pydantic import BaseModel, Field, field_validator

from marketplace.errors import ERROR_INVALID_CRON_EXPRESSION

SCHEDULED_BODY = {"scheduled": True}


def validate_cron_expression(expression: str) -> str:
    """Normalize whitespace and check there are exactly five fields."""
    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(ERROR_INVALID_CRON_EXPRESSION)
    return " ".join(fields)


def describe_cron(expression: str) -> str:
    """
    Human-readable description of common cron expressions.

    >>> describe_cron("0 * * * *")
    'Every hour (0 * * * *)'
    """
    minute, hour, day, month, weekday = expression.split()
    rest_wildcard = day == "*" and month == "*" and weekday == "*"

    if rest_wildcard and hour == "*":
        if minute == "0":
            text = "Every hour"
        elif minute == "*":
            text = "Every minute"
        elif minute.startswith("*/"):
            text = f"Every {minute[2:]} minutes"
        elif minute.isdigit():
            text = f"Every hour at minute {minute}"
        else:
            text = "Custom schedule"
    elif rest_wildcard and minute.isdigit() and hour.isdigit():
        text = f"Every day at {int(hour):02d}:{int(minute):02d} UTC"
    elif rest_wildcard and minute == "0" and hour.startswith("*/"):
        text = f"Every {hour[2:]} hours"
    else:
        text = "Custom schedule"
    return f"{text} ({expression})"


class HttpTarget(BaseModel):
    """Outbound POST the scheduler performs on every run."""
    url: str
    headers: dict[str, str] = {}
    body: dict[str, Any] = Field(default_factory=lambda: dict(SCHEDULED_BODY))

    @classmethod
    def with_bearer(cls, url: str, token: str) -> "HttpTarget":
        return cls(
            url=url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {token}",
            },
        )


class ScheduledJob(BaseModel):
    name: str = Field(min_length=1)
    cron_expression: str
    target: HttpTarget

    @field_validator("cron_expression")
    @classmethod
    def _check_cron(cls, v: str) -> str:
        return validate_cron_expression(v)

    def describe(self) -> str:
        return describe_cron(self.cron_expression)
