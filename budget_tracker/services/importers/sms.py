"""
SMS Import

Pulls a suggested expense out of a pasted payment SMS.

CRITICAL: The result is a suggestion. The caller shows it to the user,
who can change every field before anything is committed.
"""

import re
from typing import Optional

import structlog

from budget_tracker.config import get_settings
from budget_tracker.models.expense import ExpenseCategory, SmsParseResult

logger = structlog.get_logger(__name__)


# Rs.500, Rs 500, INR 500, ₹500 ...
AMOUNT_PATTERN = re.compile(r"(?:Rs\.?|INR|₹)\s?(\d+(?:\.\d+)?)", re.IGNORECASE)

# Checked in order; the first group with a keyword in the text wins
CATEGORY_KEYWORDS: tuple[tuple[ExpenseCategory, tuple[str, ...]], ...] = (
    (ExpenseCategory.FOOD, ("food", "restaurant", "cafe")),
    (ExpenseCategory.TRAVEL, ("uber", "ola", "travel")),
    (ExpenseCategory.ENTERTAINMENT, ("movie", "netflix", "entertainment")),
    (ExpenseCategory.HOUSING, ("rent", "electricity", "water")),
)


def extract_amount(text: str) -> Optional[float]:
    """First currency amount in the text, or None."""
    match = AMOUNT_PATTERN.search(text)
    return float(match.group(1)) if match else None


def guess_category(text: str) -> ExpenseCategory:
    """Keyword-based category guess; OTHERS when nothing matches."""
    lower_text = text.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lower_text for keyword in keywords):
            return category
    return ExpenseCategory.OTHERS


def parse_sms(text: str, description_length: Optional[int] = None) -> SmsParseResult:
    """
    Suggest amount, category and description for an SMS.

    A missing (or zero) amount is not an error: the result carries an
    advisory message and the amount has to be entered by hand.
    """
    if description_length is None:
        description_length = get_settings().importing.sms_description_length

    if not text or not text.strip():
        return SmsParseResult(
            raw_text=text or "",
            message="Please enter SMS text",
        )

    amount = extract_amount(text)
    if not amount:
        logger.debug("sms_amount_not_found", length=len(text))
        return SmsParseResult(
            raw_text=text,
            message="Could not find amount in SMS. Please enter manually.",
        )

    return SmsParseResult(
        raw_text=text,
        amount=amount,
        category=guess_category(text),
        description=text[:description_length],
        message=f"Found amount: {amount:g}",
    )
