import logging
from typing import Iterable, Optional

from court_pricing.models import PriceRule, RuleType
from court_pricing.timeutils import is_valid_time_format, normalize_time, time_ranges_overlap

logger = logging.getLogger(__name__)

VALID_RULE_TYPES = [rt.value for rt in RuleType]


class RuleValidationError(ValueError):
    """Raised when a price rule has an invalid type/field combination."""


def validate_rule(rule: PriceRule):
    """Checks a rule against the field requirements of its type.

    Raises:
        RuleValidationError: describing the first problem found.
    """
    if rule.rule_type not in VALID_RULE_TYPES:
        raise RuleValidationError(f"Invalid ruleType. Must be one of: {', '.join(VALID_RULE_TYPES)}")

    if not is_valid_time_format(rule.start_time) or not is_valid_time_format(rule.end_time):
        raise RuleValidationError("Invalid time format. Use HH:MM format (00:00-23:59)")

    if normalize_time(rule.start_time) >= normalize_time(rule.end_time):
        raise RuleValidationError("startTime must be before endTime")

    if rule.price_cents < 0:
        raise RuleValidationError("priceCents must be a non-negative number")

    rule_type = RuleType(rule.rule_type)

    if rule_type == RuleType.SPECIFIC_DAY:
        if rule.day_of_week is None:
            raise RuleValidationError("dayOfWeek is required for SPECIFIC_DAY rules")
        if not 0 <= rule.day_of_week <= 6:
            raise RuleValidationError("dayOfWeek must be a number between 0 (Sunday) and 6 (Saturday)")
    elif rule.day_of_week is not None:
        raise RuleValidationError(f"dayOfWeek is not allowed for {rule_type.value} rules")

    if rule_type == RuleType.SPECIFIC_DATE:
        if rule.date is None:
            raise RuleValidationError("date is required for SPECIFIC_DATE rules")
    elif rule.date is not None:
        raise RuleValidationError(f"date is not allowed for {rule_type.value} rules")

    if rule_type == RuleType.HOLIDAY:
        if not rule.holiday_id:
            raise RuleValidationError("holidayId is required for HOLIDAY rules")
    elif rule.holiday_id is not None:
        raise RuleValidationError(f"holidayId is not allowed for {rule_type.value} rules")


def is_well_formed(rule: PriceRule) -> bool:
    try:
        validate_rule(rule)
    except RuleValidationError as e:
        logger.debug(f"Skipping malformed rule {rule.id}: {e}")
        return False
    return True


def _same_scope(a: PriceRule, b: PriceRule) -> bool:
    """Two rules compete for the same days when type and discriminator agree."""
    if a.rule_type != b.rule_type:
        return False
    if a.rule_type == RuleType.SPECIFIC_DAY:
        return a.day_of_week == b.day_of_week
    if a.rule_type == RuleType.SPECIFIC_DATE:
        return a.date == b.date
    if a.rule_type == RuleType.HOLIDAY:
        return a.holiday_id == b.holiday_id
    return True


def find_conflicting_rule(
    rules: Iterable[PriceRule],
    new_rule: PriceRule,
    exclude_rule_id: str | None = None,
) -> Optional[PriceRule]:
    """Finds an existing rule that would overlap with new_rule on the same days.

    Args:
        rules: Existing rules of the court or group
        new_rule: The rule about to be created or updated
        exclude_rule_id: Rule to ignore, e.g. the one being updated

    Returns:
        The first conflicting rule, or None
    """
    for rule in rules:
        if exclude_rule_id is not None and rule.id == exclude_rule_id:
            continue
        if not _same_scope(rule, new_rule) or not is_well_formed(rule):
            continue
        if time_ranges_overlap(new_rule.start_time, new_rule.end_time, rule.start_time, rule.end_time):
            logger.info(
                f"Rule conflicts with existing {rule.rule_type} rule ({rule.start_time}-{rule.end_time})"
            )
            return rule
    return None
