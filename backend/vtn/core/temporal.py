"""Temporal Primitives: ISO-8601 Duration, RFC 3339 timestamps, IntervalPeriod and Interval.

Invariants:
    - Duration equality is on the normalized magnitude: "P0Y0M0DT1H0M0S" == "PT1H" == "PT60M"
    - Normalization spreads fractional years, hours and minutes into the next unit down,
      then carries seconds->minutes->hours and months->years (fixed ratios only)
    - "PT0.5H" == "PT30M", "PT1.5M" == "PT1M30S", "P0.5Y" == "P6M"; days never carry
    - Every component is at most 10^18; larger text is a ParseError
    - Zero is never negative; canonical text of zero is "PT0S"
    - IntervalPeriod.duration None means unbounded, distinct from a zero Duration
    - randomize_start is preserved, never applied
    - An Interval without a period inherits its parent's; no period at all is valid

Design Decisions:
    - Decimal components: exact round-trip of fractional text such as "PT0.1S"
    - dateutil.relativedelta for calendar arithmetic of years/months/days
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import ROUND_FLOOR, Context, Decimal, localcontext

from dateutil.relativedelta import relativedelta

from vtn.core.domain_types import INT32_MAX, INT32_MIN
from vtn.core.errors import ParseError, ValidationError
from vtn.core.values_map import (
    ValuesMap, values_map_from_json, values_map_to_json,
)

_NUM = r"\d+(?:[.,]\d+)?"
_DURATION_PATTERN = re.compile(
    rf"^(?P<sign>[+-])?P"
    rf"(?:(?P<years>{_NUM})Y)?"
    rf"(?:(?P<months>{_NUM})M)?"
    rf"(?:(?P<weeks>{_NUM})W)?"
    rf"(?:(?P<days>{_NUM})D)?"
    rf"(?P<time>T"
    rf"(?:(?P<hours>{_NUM})H)?"
    rf"(?:(?P<minutes>{_NUM})M)?"
    rf"(?:(?P<seconds>{_NUM})S)?"
    rf")?$"
)
_TIMESTAMP_PATTERN = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})$"
)

_ZERO = Decimal(0)
_SIXTY = Decimal(60)
_TWELVE = Decimal(12)
_MAX_COMPONENT = Decimal(10) ** 18
# Wide enough that no bounded component loses its integer part while carrying
_CARRY_CONTEXT = Context(prec=64)
# Fractions of fixed-ratio units are spread into the next unit down
_SPREAD = (
    ("years", "months", _TWELVE),
    ("hours", "minutes", _SIXTY),
    ("minutes", "seconds", _SIXTY),
)


def _format_component(value: Decimal) -> str:
    return format(value.normalize(), "f")


@dataclass(frozen=True)
class Duration:
    """Signed ISO-8601 duration with a normalized, non-negative magnitude."""
    years: Decimal = _ZERO
    months: Decimal = _ZERO
    days: Decimal = _ZERO
    hours: Decimal = _ZERO
    minutes: Decimal = _ZERO
    seconds: Decimal = _ZERO
    negative: bool = False

    def __post_init__(self):
        fields = {
            name: Decimal(getattr(self, name))
            for name in ("years", "months", "days", "hours", "minutes", "seconds")
        }
        if not all(v.is_finite() for v in fields.values()):
            raise ValidationError("duration components must be finite", "duration")
        if any(v < 0 for v in fields.values()):
            raise ValidationError("duration components must be non-negative", "duration")
        if any(v > _MAX_COMPONENT for v in fields.values()):
            raise ValidationError("duration components must not exceed 10^18", "duration")

        with localcontext(_CARRY_CONTEXT):
            for high, low, ratio in _SPREAD:
                whole = fields[high].to_integral_value(rounding=ROUND_FLOOR)
                fields[low] += (fields[high] - whole) * ratio
                fields[high] = whole

            carry, fields["seconds"] = divmod(fields["seconds"], _SIXTY)
            fields["minutes"] += carry
            carry, fields["minutes"] = divmod(fields["minutes"], _SIXTY)
            fields["hours"] += carry
            carry, fields["months"] = divmod(fields["months"], _TWELVE)
            fields["years"] += carry

            for name, value in fields.items():
                object.__setattr__(self, name, value.normalize() if value else _ZERO)
        if self.is_zero:
            object.__setattr__(self, "negative", False)

    @property
    def is_zero(self) -> bool:
        return not any(
            (self.years, self.months, self.days,
             self.hours, self.minutes, self.seconds)
        )

    @classmethod
    def parse(cls, text: object, field: str = "duration") -> "Duration":
        """Parse ISO-8601 duration text. Raises ParseError on malformed input."""
        if not isinstance(text, str):
            raise ParseError(f"{field} must be an ISO 8601 duration string", str(text), field)
        match = _DURATION_PATTERN.match(text.strip())
        if not match:
            raise ParseError(f"{field} is not an ISO 8601 duration: {text!r}", text, field)
        parts = {
            name: Decimal(raw.replace(",", "."))
            for name, raw in match.groupdict().items()
            if name not in ("sign", "time") and raw is not None
        }
        has_time = any(k in parts for k in ("hours", "minutes", "seconds"))
        if not parts or (match.group("time") and not has_time):
            raise ParseError(f"{field} is not an ISO 8601 duration: {text!r}", text, field)
        weeks = parts.pop("weeks", _ZERO)
        parts["days"] = parts.get("days", _ZERO) + weeks * 7
        if any(v > _MAX_COMPONENT for v in parts.values()):
            raise ParseError(f"{field} component is out of range: {text!r}", text, field)
        return cls(negative=match.group("sign") == "-", **parts)

    def serialize(self) -> str:
        """Canonical compact text, e.g. "PT1H", "-P1DT30M", "PT0S"."""
        if self.is_zero:
            return "PT0S"
        date_part = "".join(
            f"{_format_component(v)}{unit}"
            for v, unit in ((self.years, "Y"), (self.months, "M"), (self.days, "D"))
            if v
        )
        time_part = "".join(
            f"{_format_component(v)}{unit}"
            for v, unit in ((self.hours, "H"), (self.minutes, "M"), (self.seconds, "S"))
            if v
        )
        text = "P" + date_part + (f"T{time_part}" if time_part else "")
        return f"-{text}" if self.negative else text

    def __str__(self) -> str:
        return self.serialize()

    def end_from(self, start: datetime) -> datetime:
        """start + self with calendar semantics for years and months."""
        whole_years = int(self.years)
        months = (self.years - whole_years) * _TWELVE + self.months
        whole_months = int(months)
        days = (months - whole_months) * 30 + self.days
        calendar = relativedelta(years=whole_years, months=whole_months)
        clock = timedelta(
            days=float(days), hours=float(self.hours),
            minutes=float(self.minutes), seconds=float(self.seconds),
        )
        if self.negative:
            return start - calendar - clock
        return start + calendar + clock


PT1H = Duration(hours=Decimal(1))
# An event that runs until it is deleted or modified
P9999Y = Duration(years=Decimal(9999))


# ─── Timestamps ──────────────────────────────────────────────────

def parse_timestamp(text: object, field: str = "timestamp") -> datetime:
    """Parse RFC 3339 text with explicit offset into an aware UTC datetime."""
    if isinstance(text, datetime):
        if text.tzinfo is None:
            raise ParseError(f"{field} must carry a UTC offset", text.isoformat(), field)
        return text.astimezone(timezone.utc)
    if not isinstance(text, str):
        raise ParseError(f"{field} must be an RFC 3339 string", str(text), field)
    match = _TIMESTAMP_PATTERN.match(text.strip())
    if not match:
        raise ParseError(f"{field} is not an RFC 3339 timestamp: {text!r}", text, field)
    offset = match.group("offset")
    offset = "+00:00" if offset in ("Z", "z") else offset
    fraction = match.group("fraction")
    normalized = match.group("base").replace("t", "T").replace(" ", "T")
    if fraction:
        normalized += "." + fraction[:6].ljust(6, "0")
    try:
        parsed = datetime.fromisoformat(normalized + offset)
    except ValueError as e:
        raise ParseError(f"{field} is not a valid timestamp: {e}", text, field) from e
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


# ─── IntervalPeriod & Interval ───────────────────────────────────

@dataclass(frozen=True)
class IntervalPeriod:
    """Temporal window: start plus optional duration (None = unbounded)."""
    start: datetime
    duration: Duration | None = None
    randomize_start: Duration | None = None

    def end(self) -> datetime | None:
        if self.duration is None:
            return None
        return self.duration.end_from(self.start)

    def contains(self, at: datetime) -> bool:
        end = self.end()
        return self.start <= at and (end is None or at < end)


@dataclass(frozen=True)
class Interval:
    """Caller-numbered window of payloads; id is not a sequence number."""
    id: int
    payloads: tuple[ValuesMap, ...] = ()
    interval_period: IntervalPeriod | None = None

    def effective_period(self, parent: IntervalPeriod | None) -> IntervalPeriod | None:
        """Own period, else the enclosing Event's or report resource's, else None."""
        return self.interval_period if self.interval_period is not None else parent


def interval_period_from_json(raw: object, field: str = "intervalPeriod") -> IntervalPeriod | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValidationError(f"{field} must be an object", field)
    if raw.get("start") is None:
        raise ValidationError(f"{field}.start is required", f"{field}.start")
    duration = raw.get("duration")
    randomize = raw.get("randomizeStart")
    return IntervalPeriod(
        start=parse_timestamp(raw["start"], f"{field}.start"),
        duration=None if duration is None else Duration.parse(duration, f"{field}.duration"),
        randomize_start=(
            None if randomize is None
            else Duration.parse(randomize, f"{field}.randomizeStart")
        ),
    )


def interval_period_to_json(period: IntervalPeriod | None) -> dict | None:
    if period is None:
        return None
    out: dict = {"start": format_timestamp(period.start)}
    if period.duration is not None:
        out["duration"] = period.duration.serialize()
    if period.randomize_start is not None:
        out["randomizeStart"] = period.randomize_start.serialize()
    return out


def interval_from_json(raw: object, field: str = "interval") -> Interval:
    if not isinstance(raw, dict):
        raise ValidationError(f"{field} must be an object", field)
    interval_id = raw.get("id")
    if isinstance(interval_id, bool) or not isinstance(interval_id, int):
        raise ValidationError(f"{field}.id must be an integer", f"{field}.id")
    if not INT32_MIN <= interval_id <= INT32_MAX:
        raise ValidationError(f"{field}.id must fit in 32 bits", f"{field}.id")
    payloads = raw.get("payloads")
    if not isinstance(payloads, list):
        raise ValidationError(f"{field}.payloads must be a list", f"{field}.payloads")
    return Interval(
        id=interval_id,
        payloads=tuple(
            values_map_from_json(p, f"{field}.payloads[{i}]")
            for i, p in enumerate(payloads)
        ),
        interval_period=interval_period_from_json(
            raw.get("intervalPeriod"), f"{field}.intervalPeriod",
        ),
    )


def interval_to_json(interval: Interval) -> dict:
    out: dict = {"id": interval.id}
    if interval.interval_period is not None:
        out["intervalPeriod"] = interval_period_to_json(interval.interval_period)
    out["payloads"] = [values_map_to_json(p) for p in interval.payloads]
    return out


def intervals_from_json(raw: object, field: str = "intervals") -> tuple[Interval, ...]:
    if not isinstance(raw, list):
        raise ValidationError(f"{field} is required and must be a list", field)
    return tuple(interval_from_json(item, f"{field}[{i}]") for i, item in enumerate(raw))
