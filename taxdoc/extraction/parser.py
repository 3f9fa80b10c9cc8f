"""Field extraction from OCR text.

Every registered matcher runs against the same text, so a document that
looks like two types yields output under both matcher ids; choosing between
them is left to the caller. Values are the raw captured text with no type
coercion or cross-field validation.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from taxdoc.utils.logger import get_logger

from .registry import DocumentMatcher

logger = get_logger(__name__)

NO_MATCH = "null"


def _set_path(target: dict[str, Any], dotted_name: str, value: str) -> None:
    *parents, leaf = dotted_name.split(".")
    for part in parents:
        target = target.setdefault(part, {})
    target[leaf] = value


def parse_ocr_result(
    document_text: str, matchers: Iterable[DocumentMatcher]
) -> dict[str, dict[str, Any]]:
    """Apply every matcher's patterns to the full document text.

    Only matched fields appear in the output; a field with no match is
    absent rather than ``None``. A match records the capture group exactly
    as found, so surrounding whitespace and empty captures are kept. Each
    attempt is logged with its value, or ``null`` when nothing matched.

    Args:
        document_text: OCR text of one document.
        matchers: Matchers to apply, usually ``MatcherRegistry.all()``.

    Returns:
        Sparse overlay keyed by matcher id, then field name.
    """
    results: dict[str, dict[str, Any]] = {}

    for matcher in matchers:
        logger.info("Parsing %s data", matcher.id)
        for field_name, pattern in matcher.patterns.items():
            match = pattern.search(document_text)
            value = match.group(1) if match else None
            # An optional group that did not take part is not a match.
            if value is None:
                logger.info("%s.%s: %s", matcher.id, field_name, NO_MATCH)
                continue
            _set_path(results.setdefault(matcher.id, {}), field_name, value)
            logger.info("%s.%s: %s", matcher.id, field_name, value)

    return results


@dataclass
class EmployerData:
    """Employer boxes of a W-2."""

    employer_identification_number: str | None = None
    wages_tips_others: str | None = None
    federal_income_tax_withheld: str | None = None


@dataclass
class ParsedData:
    """Typed view of a W-2 overlay; unmatched fields stay ``None``."""

    employer: EmployerData = field(default_factory=EmployerData)
    employee_address: str | None = None
    ssn: str | None = None
    bottom_lines: str | None = None

    @classmethod
    def from_overlay(cls, overlay: dict[str, Any]) -> "ParsedData":
        employer = overlay.get("employer", {})
        return cls(
            employer=EmployerData(
                employer_identification_number=employer.get("employer_identification_number"),
                wages_tips_others=employer.get("wages_tips_others"),
                federal_income_tax_withheld=employer.get("federal_income_tax_withheld"),
            ),
            employee_address=overlay.get("employee_address"),
            ssn=overlay.get("ssn"),
            bottom_lines=overlay.get("bottom_lines"),
        )
