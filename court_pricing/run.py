import csv
import io
import logging
import re
import sys
from datetime import date, datetime, timedelta
from typing import List

import requests

from court_pricing import config, persist
from court_pricing.models import DayQuote, HolidayDate, PricingCatalog
from court_pricing.resolver import active_pricing, matching_holidays, resolve_rule
from court_pricing.timeline import get_price_timeline_for_day
from court_pricing.timeutils import day_of_week, is_valid_time_format, normalize_time

logger = logging.getLogger(__name__)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
TRUTHY = {"1", "true", "yes", "y", "x", "ja"}


def holiday_id_for(holiday_date: date, name: str) -> str:
    """Derives a holiday id from the row content so it survives row reordering."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f"csv-{holiday_date.isoformat()}-{slug}" if slug else f"csv-{holiday_date.isoformat()}"


def _parse_holiday_row(row: List[str], club_id: str | None) -> HolidayDate | None:
    """Parses a single CSV row into a HolidayDate object."""
    if not row:
        return None

    date_str = row[0].strip()

    if date_str.lower() in ["date", "datum", "day", "tag"]:
        logger.debug(f"Skipping header row: {row}")
        return None

    try:
        holiday_date = datetime.strptime(date_str, "%d.%m.%Y").date()
    except ValueError:
        logger.debug(f"Skipping row with invalid date format: {date_str}")
        return None

    name = row[1].strip() if len(row) > 1 else ""
    recurring = len(row) > 2 and row[2].strip().lower() in TRUTHY
    explicit_id = row[3].strip() if len(row) > 3 else ""

    return HolidayDate(
        id=explicit_id or holiday_id_for(holiday_date, name),
        club_id=club_id,
        date=holiday_date,
        recurring=recurring,
        name=name,
    )


def fetch_holidays(url: str, club_id: str | None = None) -> List[HolidayDate]:
    """Fetches extra club holidays from a Google Sheet CSV.

    Expected CSV format:
    Column A: Date in DD.MM.YYYY format
    Column B: Holiday name (optional)
    Column C: Recurring flag, e.g. "yes" (optional)
    Column D: Holiday id referenced by HOLIDAY rules (optional, derived
              from date and name when empty)
    """
    try:
        response = requests.get(url, timeout=config.REQUEST_TIMEOUT)
        response.raise_for_status()

        reader = csv.reader(io.StringIO(response.text))
        holidays = []
        for row in reader:
            holiday = _parse_holiday_row(row, club_id)
            if holiday:
                holidays.append(holiday)

        logger.info(f"Fetched {len(holidays)} holiday(s) from CSV")
        return holidays
    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to fetch holidays: {e}")
        return []


def format_cents(cents: int) -> str:
    return f"{cents / 100:.2f} {config.CURRENCY}"


def build_day_quote(catalog: PricingCatalog, target: date, start_time: str, end_time: str) -> DayQuote:
    """Resolves the slot price and the full-day timeline for one date."""
    rules, default_price_cents = active_pricing(catalog.court, catalog.group)
    rule = resolve_rule(rules, target, start_time, end_time, catalog.holidays)

    return DayQuote(
        date=target.isoformat(),
        day_of_week=day_of_week(target),
        holidays=[h.name or h.id for h in matching_holidays(target, catalog.holidays)],
        start_time=normalize_time(start_time),
        end_time=normalize_time(end_time),
        price_cents=rule.price_cents if rule else default_price_cents,
        rule_type=rule.rule_type if rule else None,
        timeline=get_price_timeline_for_day(rules, target, catalog.holidays),
    )


def print_quote_report(quote: DayQuote):
    """Prints the formatted quote for one day to stdout."""
    header = f"{quote.date} ({DAY_NAMES[quote.day_of_week]})"
    if quote.holidays:
        header += f" - Holiday: {', '.join(quote.holidays)}"
    print(f"\n--- Price Report for {header} ---")

    for segment in quote.timeline:
        print(f"[RULE]     {segment.start}-{segment.end}: {format_cents(segment.price_cents)}")

    source = quote.rule_type or "DEFAULT"
    print(f"Quote: {quote.start_time}-{quote.end_time} costs {format_cents(quote.price_cents)} ({source})")


def get_target_dates(start_date_arg: str | None, days_arg: int) -> List[date]:
    """Determines the list of dates to quote."""
    if start_date_arg:
        try:
            start_date = datetime.strptime(start_date_arg, "%Y-%m-%d").date()
        except ValueError:
            logger.error("Error: Start date must be in YYYY-MM-DD format.")
            sys.exit(1)
    else:
        start_date = date.today()

    if days_arg < 1:
        logger.error("Error: Number of days must be at least 1.")
        sys.exit(1)

    return [start_date + timedelta(days=i) for i in range(days_arg)]


def run(
    data_file: str | None = None,
    start_date: str | None = None,
    days: int = 7,
    start_time: str = "18:00",
    end_time: str = "19:00",
    report_file: str | None = None,
) -> List[DayQuote]:
    """Core orchestration logic. Loads the pricing data, quotes the slot on each
    target date, prints the report and saves it."""
    if not is_valid_time_format(start_time) or not is_valid_time_format(end_time):
        logger.error("Error: Slot times must be in HH:MM format.")
        sys.exit(1)
    if normalize_time(start_time) >= normalize_time(end_time):
        logger.error("Error: Slot start must be before slot end.")
        sys.exit(1)

    try:
        catalog = persist.load_catalog(data_file)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    if config.HOLIDAYS_CSV_URL:
        club_id = catalog.group.club_id if catalog.group else None
        extra = fetch_holidays(config.HOLIDAYS_CSV_URL, club_id)
        catalog = catalog.model_copy(update={"holidays": catalog.holidays + extra})

    target_dates = get_target_dates(start_date, days)
    logger.info(f"Quoting {start_time}-{end_time} for {len(target_dates)} day(s) on court {catalog.court.id}")

    quotes = [build_day_quote(catalog, d, start_time, end_time) for d in target_dates]
    for quote in quotes:
        print_quote_report(quote)

    persist.save_report(quotes, report_file)
    return quotes
