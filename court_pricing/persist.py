import json
import logging
import os
from datetime import datetime, timezone
from typing import Dict, List

from pydantic import ValidationError

from court_pricing import config
from court_pricing.models import Court, CourtGroup, HolidayDate, PriceRule, PricingCatalog

logger = logging.getLogger(__name__)


def ensure_data_dir(path: str):
    """Ensures the directory of the given file exists."""
    directory = os.path.dirname(path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory)


def _parse_rules(raw_rules: List[Dict], owner: str) -> List[PriceRule]:
    """Validates rules one by one, skipping entries that cannot be parsed."""
    rules = []
    for raw in raw_rules or []:
        try:
            rules.append(PriceRule.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping invalid price rule for {owner}: {e.error_count()} error(s) in {raw}")
    return rules


def _parse_holidays(raw_holidays: List[Dict]) -> List[HolidayDate]:
    holidays = []
    for raw in raw_holidays or []:
        try:
            holidays.append(HolidayDate.model_validate(raw))
        except ValidationError as e:
            logger.warning(f"Skipping invalid holiday: {e.error_count()} error(s) in {raw}")
    return holidays


def load_catalog(path: str | None = None) -> PricingCatalog:
    """Loads a court, its group and the club holidays from a JSON data file.

    Expected format (camelCase keys, as exported by the booking platform):
    {"court": {..., "priceRules": [...]}, "group": {... } | null, "holidays": [...]}
    """
    path = path or config.PRICING_DATA_FILE
    if not os.path.exists(path):
        raise FileNotFoundError(f"Pricing data file not found: {path}")

    try:
        with open(path, "r") as f:
            data: Dict = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Pricing data file {path} is not valid JSON: {e}") from e
    except OSError as e:
        raise ValueError(f"Pricing data file {path} could not be read: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Pricing data file {path} must contain a JSON object")
    if not isinstance(data.get("court"), dict):
        raise ValueError(f"Pricing data file {path} has no 'court' entry")
    if data.get("group") is not None and not isinstance(data["group"], dict):
        raise ValueError(f"Pricing data file {path} has an invalid 'group' entry")

    court_data = dict(data["court"])
    court_rules = _parse_rules(court_data.pop("priceRules", court_data.pop("price_rules", [])), "court")
    court = Court.model_validate({**court_data, "priceRules": court_rules})

    group = None
    if data.get("group"):
        group_data = dict(data["group"])
        group_rules = _parse_rules(group_data.pop("priceRules", group_data.pop("price_rules", [])), "group")
        group = CourtGroup.model_validate({**group_data, "priceRules": group_rules})

    holidays = _parse_holidays(data.get("holidays", []))

    logger.info(
        f"Loaded court {court.id} with {len(court.price_rules)} rule(s), "
        f"{len(group.price_rules) if group else 0} group rule(s), {len(holidays)} holiday(s) from {path}"
    )
    return PricingCatalog(court=court, group=group, holidays=holidays)


def save_report(quotes: List, path: str | None = None):
    """Saves the quote report to a JSON file."""
    path = path or config.REPORT_FILE
    ensure_data_dir(path)
    try:
        serialized = [q.model_dump(mode="json", by_alias=True) if hasattr(q, "model_dump") else q for q in quotes]
        data = {"last_updated": datetime.now(timezone.utc).isoformat(), "quotes": serialized}
        with open(path, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Saved report to {path}")
    except IOError as e:
        logger.error(f"Failed to save report: {e}")
