"""Per-document-type field patterns.

Each supported document type has a ``DocumentMatcher``: a fixed mapping from
field name to a regex whose single capture group is the field value. Dotted
field names (``employer.wages_tips_others``) nest the value in the parsed
output. Adding a document type means adding a matcher here or in a YAML
file, never touching the parser.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType

import yaml

from taxdoc.exceptions import MatcherConfigError, UnknownDocumentTypeError
from taxdoc.utils.logger import get_logger

logger = get_logger(__name__)

_PATTERN_FLAGS = re.IGNORECASE

# Amounts as printed on forms, e.g. "55,000.00".
_AMOUNT = r"([\d,]+\.\d{2})"

_W2_PATTERNS: dict[str, str] = {
    "employer.employer_identification_number": (
        r"employer(?:['’]s)?\s+identification\s+number\D{0,40}?(\d{2}\s?-\s?\d{7})"
    ),
    "employer.wages_tips_others": (
        r"wages,?\s+tips,?\s+other\s+comp(?:ensation|\.)?\D{0,40}?" + _AMOUNT
    ),
    "employer.federal_income_tax_withheld": (
        r"federal\s+income\s+tax\s+withheld\D{0,40}?" + _AMOUNT
    ),
    "employee_address": r"employee['’]?s\s+address(?:\s+and\s+zip\s+code)?[:\s]*([^\n]+)",
    "ssn": r"(?:SSN|social\s+security\s+number)\D{0,40}?(\d{3}\s?-\s?\d{2}\s?-\s?\d{4})",
    "bottom_lines": r"(form\s+W-?2\s+wage\s+and\s+tax\s+statement[^\n]*)",
}

_ADP_PATTERNS: dict[str, str] = {
    "company_code": r"company\s+code\s*:?\s*([A-Z0-9]{2,}[^\n]*)",
    "period_ending": r"period\s+ending\s*:?\s*(\d{1,2}/\d{1,2}/\d{2,4})",
    "pay_date": r"pay\s+date\s*:?\s*(\d{1,2}/\d{1,2}/\d{2,4})",
    "gross_pay": r"gross\s+pay\s*\$?\s*" + _AMOUNT,
    "net_pay": r"net\s+pay\s*\$?\s*" + _AMOUNT,
    "federal_income_tax": r"federal\s+income(?:\s+tax)?\s*-?\s*\$?" + _AMOUNT,
    "social_security_tax": r"social\s+security(?:\s+tax)?\s*-?\s*\$?" + _AMOUNT,
    "medicare_tax": r"medicare(?:\s+tax)?\s*-?\s*\$?" + _AMOUNT,
}


class DocumentType(StrEnum):
    """Built-in document types."""

    W2 = "w2"
    ADP = "adp"


@dataclass(frozen=True)
class DocumentMatcher:
    """Named set of single-group field patterns for one document type."""

    id: str
    patterns: Mapping[str, re.Pattern[str]]


def build_matcher(matcher_id: str, raw_patterns: Mapping[str, str]) -> DocumentMatcher:
    """Compile and validate a matcher definition.

    Args:
        matcher_id: Document type identifier, used as the output key.
        raw_patterns: Field name to regex source.

    Returns:
        A read-only ``DocumentMatcher``.

    Raises:
        MatcherConfigError: If the id or a field name is empty, a dotted
            field name has an empty segment or is the parent of another
            field, a pattern does not compile, or a pattern does not have
            exactly one capture group.
    """
    if not matcher_id or not isinstance(matcher_id, str):
        raise MatcherConfigError(f"Matcher id must be a non-empty string, got {matcher_id!r}")
    if not raw_patterns:
        raise MatcherConfigError(f"Matcher '{matcher_id}' has no patterns")

    compiled: dict[str, re.Pattern[str]] = {}
    for field_name, source in raw_patterns.items():
        if not field_name or not isinstance(field_name, str):
            raise MatcherConfigError(f"Matcher '{matcher_id}' has an invalid field name {field_name!r}")
        if not all(field_name.split(".")):
            raise MatcherConfigError(
                f"Field name '{matcher_id}.{field_name}' has an empty path segment"
            )
        if not isinstance(source, str):
            raise MatcherConfigError(f"Pattern for '{matcher_id}.{field_name}' must be a string")
        try:
            pattern = re.compile(source, _PATTERN_FLAGS)
        except re.error as exc:
            raise MatcherConfigError(
                f"Pattern for '{matcher_id}.{field_name}' does not compile: {exc}"
            ) from exc
        if pattern.groups != 1:
            raise MatcherConfigError(
                f"Pattern for '{matcher_id}.{field_name}' must have exactly one "
                f"capture group, found {pattern.groups}"
            )
        compiled[field_name] = pattern

    # A field cannot hold a value and nested fields at once.
    for field_name in compiled:
        prefix = field_name + "."
        nested = [other for other in compiled if other.startswith(prefix)]
        if nested:
            raise MatcherConfigError(
                f"Field '{matcher_id}.{field_name}' conflicts with nested field "
                f"'{matcher_id}.{nested[0]}'"
            )

    return DocumentMatcher(id=matcher_id, patterns=MappingProxyType(compiled))


class MatcherRegistry:
    """Read-only collection of document matchers in registration order.

    Args:
        matchers: Matchers to register. Ids must be unique.

    Raises:
        MatcherConfigError: On duplicate matcher ids.
    """

    def __init__(self, matchers: Iterable[DocumentMatcher]) -> None:
        self._matchers: dict[str, DocumentMatcher] = {}
        for matcher in matchers:
            if matcher.id in self._matchers:
                raise MatcherConfigError(f"Duplicate matcher id '{matcher.id}'")
            self._matchers[matcher.id] = matcher

    def __len__(self) -> int:
        return len(self._matchers)

    def __contains__(self, document_type_id: object) -> bool:
        return document_type_id in self._matchers

    def patterns_for(self, document_type_id: str) -> DocumentMatcher:
        """Return the matcher for a document type.

        Raises:
            UnknownDocumentTypeError: If no matcher has that id.
        """
        try:
            return self._matchers[str(document_type_id)]
        except KeyError:
            raise UnknownDocumentTypeError(str(document_type_id)) from None

    def all(self) -> tuple[DocumentMatcher, ...]:
        """Return every registered matcher."""
        return tuple(self._matchers.values())


_BUILTIN_DEFINITIONS: dict[str, dict[str, str]] = {
    DocumentType.W2.value: _W2_PATTERNS,
    DocumentType.ADP.value: _ADP_PATTERNS,
}


def default_registry() -> MatcherRegistry:
    """Return the built-in W-2 and ADP earnings statement matchers."""
    return MatcherRegistry(
        build_matcher(matcher_id, patterns)
        for matcher_id, patterns in _BUILTIN_DEFINITIONS.items()
    )


def load_registry(path: Path | None = None) -> MatcherRegistry:
    """Build the registry from the built-ins plus an optional YAML file.

    The YAML file maps matcher ids to ``{field: pattern}`` tables. An id
    that matches a built-in replaces it; any other id is appended.

    Args:
        path: YAML file with extra matcher definitions, or ``None``.

    Returns:
        The validated registry.

    Raises:
        MatcherConfigError: If the file is missing, malformed, or defines
            an invalid matcher.
    """
    definitions = dict(_BUILTIN_DEFINITIONS)

    if path is not None:
        if not path.exists():
            raise MatcherConfigError(f"Matcher file not found: {path}")
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise MatcherConfigError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise MatcherConfigError(f"{path} must map matcher ids to pattern tables")
        for matcher_id, patterns in data.items():
            if not isinstance(patterns, dict):
                raise MatcherConfigError(f"Matcher '{matcher_id}' in {path} must be a mapping")
            if matcher_id in definitions:
                logger.info("Overriding built-in matcher '%s' from %s", matcher_id, path)
            definitions[matcher_id] = patterns

    registry = MatcherRegistry(
        build_matcher(matcher_id, patterns) for matcher_id, patterns in definitions.items()
    )
    logger.info(
        "Loaded %d document matchers: %s",
        len(registry),
        ", ".join(m.id for m in registry.all()),
    )
    return registry
