"""Number templates for invoices and receipts

Templates use three placeholders: {YYYY} (4-digit year), {MM} (2-digit
month) and {SEQ} (sequence, left-padded to 4 digits).
"""

import re
from datetime import datetime
from typing import Optional
from src.domain.errors import ValidationError

YEAR_PLACEHOLDER = "{YYYY}"
MONTH_PLACEHOLDER = "{MM}"
SEQUENCE_PLACEHOLDER = "{SEQ}"
SEQUENCE_WIDTH = 4

TRAILING_SEQUENCE = re.compile(r"(\d{3,})$")


def validate_template(template: str) -> str:
    """Templates without {SEQ} would render the same number on every allocation"""
    if SEQUENCE_PLACEHOLDER not in template:
        raise ValidationError(
            "Number template must contain {SEQ}",
            reason=f"template={template}",
        )
    return template


def sequence_is_trailing(template: str) -> bool:
    return template.endswith(SEQUENCE_PLACEHOLDER)


def render_number(template: str, sequence: int, now: datetime) -> str:
    """Substitute placeholders, e.g. INV-{YYYY}-{MM}-{SEQ} -> INV-2024-05-0042"""
    return (
        template
        .replace(YEAR_PLACEHOLDER, f"{now.year:04d}")
        .replace(MONTH_PLACEHOLDER, f"{now.month:02d}")
        .replace(SEQUENCE_PLACEHOLDER, str(sequence).zfill(SEQUENCE_WIDTH))
    )


def extract_sequence(number: Optional[str]) -> Optional[int]:
    """Trailing run of at least 3 digits, or None when absent"""
    if not number:
        return None
    match = TRAILING_SEQUENCE.search(number)
    if match is None:
        return None
    return int(match.group(1))


def sequence_floor(template: str, latest_number: Optional[str]) -> int:
    """
    Sequence already consumed according to the latest issued number

    Only trusted when numbers end with {SEQ}; any other format falls back
    to the persisted counter alone (floor 0).
    """
    if not sequence_is_trailing(template):
        return 0
    return extract_sequence(latest_number) or 0
