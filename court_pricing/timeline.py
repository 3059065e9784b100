import logging
from datetime import date
from typing import Iterable, List, Tuple

from court_pricing.models import BreakdownItem, Court, CourtGroup, HolidayDate, PriceBreakdown, PriceRule, PriceSegment
from court_pricing.resolver import active_pricing, precedence_tiers
from court_pricing.timeutils import is_valid_time_format, minutes_to_time, normalize_time, time_to_minutes

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

Range = Tuple[int, int]


def _uncovered_segments(start: int, end: int, covered: List[Range]) -> List[Range]:
    """Returns the parts of [start, end) not already claimed by a covered range."""
    uncovered = []
    current = start

    for range_start, range_end in sorted(covered):
        if current >= end:
            break
        if range_end <= current:
            continue
        if range_start > current:
            uncovered.append((current, min(range_start, end)))
        current = max(current, range_end)

    if current < end:
        uncovered.append((current, end))
    return uncovered


def _merge_contiguous(segments: List[PriceSegment]) -> List[PriceSegment]:
    """Merges neighbouring segments that share a price."""
    merged: List[PriceSegment] = []
    for segment in segments:
        if merged and merged[-1].price_cents == segment.price_cents and merged[-1].end == segment.start:
            merged[-1] = merged[-1].model_copy(update={"end": segment.end})
        else:
            merged.append(segment)
    return merged


def get_price_timeline_for_day(
    rules: Iterable[PriceRule],
    target: date | str,
    holidays: Iterable[HolidayDate] | None = None,
) -> List[PriceSegment]:
    """Builds the price timeline for one day.

    Rules claim time in precedence order; a lower-precedence rule only fills
    the gaps left by the ones before it.
    """
    covered: List[Range] = []
    segments: List[PriceSegment] = []

    for _, tier_rules in precedence_tiers(rules, target, holidays):
        for rule in tier_rules:
            rule_start = time_to_minutes(rule.start_time)
            rule_end = time_to_minutes(rule.end_time)
            for start, end in _uncovered_segments(rule_start, rule_end, covered):
                segments.append(
                    PriceSegment(start=minutes_to_time(start), end=minutes_to_time(end), price_cents=rule.price_cents)
                )
                covered.append((start, end))

    segments.sort(key=lambda s: time_to_minutes(s.start))
    return _merge_contiguous(segments)


def _prorate(hourly_cents: int, minutes: int) -> int:
    """Hourly rate times minutes, rounded half up to whole cents."""
    return (hourly_cents * minutes * 2 + 60) // 120


def get_price_breakdown(
    court: Court,
    target: date | str,
    start_time: str,
    duration_minutes: int,
    group: CourtGroup | None = None,
    holidays: Iterable[HolidayDate] | None = None,
) -> PriceBreakdown:
    """Prices a slot that may span several timeline segments.

    Rule prices are treated as hourly rates and charged per minute of overlap.
    Minutes not covered by any rule are charged at the default hourly rate.
    """
    if not is_valid_time_format(start_time):
        raise ValueError(f"Invalid start time {start_time}. Use HH:MM format")
    if duration_minutes <= 0:
        raise ValueError("duration_minutes must be positive")

    rules, default_price_cents = active_pricing(court, group)
    timeline = get_price_timeline_for_day(rules, target, holidays)

    slot_start = time_to_minutes(normalize_time(start_time))
    slot_end = slot_start + duration_minutes
    if slot_end > MINUTES_PER_DAY:
        raise ValueError(f"Slot starting at {start_time} must end by midnight")

    items: List[BreakdownItem] = []
    remaining_start = slot_start

    def add_item(start: int, end: int, hourly_cents: int):
        items.append(
            BreakdownItem(
                start=minutes_to_time(start),
                end=minutes_to_time(end),
                minutes=end - start,
                price_cents=_prorate(hourly_cents, end - start),
            )
        )

    for segment in timeline:
        segment_start = time_to_minutes(segment.start)
        segment_end = time_to_minutes(segment.end)

        if remaining_start >= slot_end or segment_start >= slot_end:
            break
        if segment_end <= remaining_start:
            continue

        # Gap before this segment falls back to the default rate
        if segment_start > remaining_start:
            add_item(remaining_start, segment_start, default_price_cents)
            remaining_start = segment_start

        overlap_end = min(slot_end, segment_end)
        add_item(remaining_start, overlap_end, segment.price_cents)
        remaining_start = overlap_end

    if remaining_start < slot_end:
        add_item(remaining_start, slot_end, default_price_cents)

    total = sum(item.price_cents for item in items)
    logger.debug(f"Breakdown for court {court.id} on {target} {start_time} (+{duration_minutes}m): {total}")
    return PriceBreakdown(total_price_cents=total, breakdown=items)


def get_prorated_price(
    court: Court,
    target: date | str,
    start_time: str,
    duration_minutes: int,
    group: CourtGroup | None = None,
    holidays: Iterable[HolidayDate] | None = None,
) -> int:
    return get_price_breakdown(court, target, start_time, duration_minutes, group, holidays).total_price_cents
