"""
Form sanitization and validation for catalog submissions.

A submission is checked against an ordered tuple of rules. Every rule runs,
so a form with several bad fields reports all of them at once. Each rule
also produces the sanitized value that ends up on the candidate record,
whether or not the field passed.
"""
from datetime import datetime

from django.utils.dateparse import parse_date, parse_datetime
from django.utils.html import escape

from .exceptions import ValidationError


def normalize_multi(value):
    """Coerces a multi-valued form field to a list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _scalar(value):
    # A field posted more than once keeps its last value, like QueryDict.get
    if isinstance(value, (list, tuple)):
        return value[-1] if value else None
    return value


def parse_iso_date(value):
    """Returns the date for an ISO-8601 date or datetime string, else None."""
    try:
        parsed = parse_date(value) or parse_datetime(value)
    except ValueError:
        return None
    if isinstance(parsed, datetime):
        return parsed.date()
    return parsed


class Rule:
    field = None

    def apply(self, raw):
        """Returns ``(cleaned_value, error_message_or_None)``."""
        raise NotImplementedError


class Required(Rule):
    def __init__(self, field, message, min_length=1, max_length=None, length_message=None):
        self.field = field
        self.message = message
        self.min_length = min_length
        self.max_length = max_length
        self.length_message = length_message or message

    def apply(self, raw):
        raw = _scalar(raw)
        value = "" if raw is None else str(raw).strip()
        cleaned = escape(value)

        if not value:
            return cleaned, self.message
        if len(value) < self.min_length:
            return cleaned, self.length_message
        # The escaped form is what gets stored, so it has to fit the column
        if self.max_length is not None and len(cleaned) > self.max_length:
            return cleaned, self.length_message
        return cleaned, None


class OptionalDate(Rule):
    def __init__(self, field, message="Invalid date"):
        self.field = field
        self.message = message

    def apply(self, raw):
        raw = _scalar(raw)
        if not raw:
            return None, None

        parsed = parse_iso_date(str(raw).strip())
        if parsed is None:
            return escape(raw), self.message
        return parsed, None


class EscapedList(Rule):
    def __init__(self, field):
        self.field = field

    def apply(self, raw):
        return [escape(item) for item in normalize_multi(raw)], None


class Choice(Rule):
    def __init__(self, field, choices, message, default=None):
        self.field = field
        self.choices = tuple(choices)
        self.message = message
        self.default = default

    def apply(self, raw):
        raw = _scalar(raw)
        if not raw:
            return self.default, None

        cleaned = escape(str(raw).strip())
        if cleaned not in self.choices:
            return cleaned, self.message
        return cleaned, None


required = Required
optional_date = OptionalDate
escaped_list = EscapedList
choice = Choice


class ValidationResult:
    def __init__(self):
        self.cleaned = {}
        self.errors = []

    @property
    def is_valid(self):
        return not self.errors

    def add_error(self, field, message):
        self.errors.append(ValidationError(field, message))

    def has_error(self, field):
        return any(error.field == field for error in self.errors)


def validate(data, rules):
    """Runs every rule in order against the raw ``data`` mapping."""
    result = ValidationResult()
    for rule in rules:
        cleaned, message = rule.apply(data.get(rule.field))
        result.cleaned[rule.field] = cleaned
        if message is not None:
            result.add_error(rule.field, message)
    return result
