"""Court price resolution.

Rules are evaluated in tiers, highest precedence first:

    HOLIDAY > SPECIFIC_DATE > SPECIFIC_DAY > WEEKENDS / WEEKDAYS > ALL_DAYS

Within a tier the first rule whose window fully contains the requested slot
wins. If nothing matches, the default price of the active pricing source (the
court, or its group when group pricing is on) is used.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from court_pricing.models import Court, CourtGroup, HolidayDate, PriceRule, RuleType
from court_pricing.rules import is_well_formed
from court_pricing.timeutils import day_of_week, is_valid_time_format, parse_date, time_to_minutes

logger = logging.getLogger(__name__)

SATURDAY = 6
SUNDAY = 0

RuleTier = Tuple[RuleType, List[PriceRule]]


def active_pricing(court: Court, group: CourtGroup | None = None) -> Tuple[List[PriceRule], int]:
    """Returns the rule set and default price that apply to a court."""
    if not court.use_group_pricing or court.group_id is None:
        return court.price_rules, court.default_price_cents

    if group is None or group.id != court.group_id:
        logger.warning(
            f"Court {court.id} uses group pricing but group {court.group_id} was not supplied. "
            "Falling back to court-level rules."
        )
        return court.price_rules, court.default_price_cents

    return group.price_rules, group.default_price_cents


def holiday_matches(holiday: HolidayDate, target: date) -> bool:
    """Exact date match, or same month/day in any year for recurring holidays."""
    if holiday.recurring:
        return (holiday.date.month, holiday.date.day) == (target.month, target.day)
    return holiday.date == target


def matching_holidays(target: date | str, holidays: Iterable[HolidayDate] | None) -> List[HolidayDate]:
    target = parse_date(target)
    return [h for h in holidays or [] if holiday_matches(h, target)]


def _tie_break_key(rule: PriceRule):
    # Narrowest window first, then most recently created.
    width = time_to_minutes(rule.end_time) - time_to_minutes(rule.start_time)
    if rule.created_at is None:
        return (width, 1, 0.0)
    return (width, 0, -rule.created_at.timestamp())


def precedence_tiers(
    rules: Iterable[PriceRule],
    target: date | str,
    holidays: Iterable[HolidayDate] | None = None,
) -> List[RuleTier]:
    """Splits the well-formed rules that apply on a date into precedence tiers.

    Each tier is sorted by the tie-break order, so the first containing rule
    of the first tier that has one is the winner.
    """
    target = parse_date(target)
    weekday = day_of_week(target)
    holiday_ids = {h.id for h in matching_holidays(target, holidays)}
    day_kind = RuleType.WEEKENDS if weekday in (SATURDAY, SUNDAY) else RuleType.WEEKDAYS

    valid_rules = [r for r in rules if is_well_formed(r)]

    def of_type(rule_type: RuleType, predicate=lambda r: True) -> List[PriceRule]:
        selected = [r for r in valid_rules if r.rule_type == rule_type and predicate(r)]
        return sorted(selected, key=_tie_break_key)

    return [
        (RuleType.HOLIDAY, of_type(RuleType.HOLIDAY, lambda r: r.holiday_id in holiday_ids)),
        (RuleType.SPECIFIC_DATE, of_type(RuleType.SPECIFIC_DATE, lambda r: r.date == target)),
        (RuleType.SPECIFIC_DAY, of_type(RuleType.SPECIFIC_DAY, lambda r: r.day_of_week == weekday)),
        (day_kind, of_type(day_kind)),
        (RuleType.ALL_DAYS, of_type(RuleType.ALL_DAYS)),
    ]


def window_contains(rule: PriceRule, start_time: str, end_time: str) -> bool:
    """A rule matches only if its window fully contains the requested one."""
    return (
        time_to_minutes(rule.start_time) <= time_to_minutes(start_time)
        and time_to_minutes(rule.end_time) >= time_to_minutes(end_time)
    )


def _check_requested_window(start_time: str, end_time: str):
    if not is_valid_time_format(start_time) or not is_valid_time_format(end_time):
        raise ValueError(f"Invalid requested window {start_time}-{end_time}. Use HH:MM format")
    if time_to_minutes(start_time) >= time_to_minutes(end_time):
        raise ValueError(f"Requested start {start_time} must be before end {end_time}")


def resolve_rule(
    rules: Iterable[PriceRule],
    target: date | str,
    start_time: str,
    end_time: str,
    holidays: Iterable[HolidayDate] | None = None,
) -> Optional[PriceRule]:
    """Finds the winning rule for a slot, or None if the default price applies.

    Raises:
        ValueError: if the requested window is malformed.
    """
    _check_requested_window(start_time, end_time)

    for tier, tier_rules in precedence_tiers(rules, target, holidays):
        for rule in tier_rules:
            if window_contains(rule, start_time, end_time):
                logger.debug(f"Matched {tier.value} rule {rule.id} ({rule.start_time}-{rule.end_time})")
                return rule
    return None


def resolve_price(
    court: Court,
    target: date | str,
    start_time: str,
    end_time: str,
    group: CourtGroup | None = None,
    holidays: Iterable[HolidayDate] | None = None,
) -> int:
    """Resolves the price in cents for a court slot.

    Args:
        court: The court being booked
        target: Date of the slot (date or YYYY-MM-DD)
        start_time: Slot start in HH:MM format
        end_time: Slot end in HH:MM format
        group: The court's group, needed when the court uses group pricing
        holidays: The owning club's holiday dates

    Returns:
        Price in minor currency units
    """
    rules, default_price_cents = active_pricing(court, group)
    rule = resolve_rule(rules, target, start_time, end_time, holidays)
    if rule is None:
        return default_price_cents
    return rule.price_cents
