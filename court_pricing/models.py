import datetime as dt
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RuleType(str, Enum):
    SPECIFIC_DAY = "SPECIFIC_DAY"
    SPECIFIC_DATE = "SPECIFIC_DATE"
    WEEKDAYS = "WEEKDAYS"
    WEEKENDS = "WEEKENDS"
    ALL_DAYS = "ALL_DAYS"
    HOLIDAY = "HOLIDAY"


class CamelModel(BaseModel):
    """Accepts both camelCase (as stored by the booking platform) and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PriceRule(CamelModel):
    id: str | None = None
    rule_type: str  # one of RuleType; unknown values are kept so they can be skipped
    day_of_week: int | None = None  # 0 = Sunday ... 6 = Saturday
    date: dt.date | None = None
    holiday_id: str | None = None
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    price_cents: int
    created_at: dt.datetime | None = None


class HolidayDate(CamelModel):
    id: str
    club_id: str | None = None
    date: dt.date
    recurring: bool = False
    name: str = ""


class Court(CamelModel):
    id: str
    group_id: str | None = None
    use_group_pricing: bool = False
    default_price_cents: int
    sport_type: str | None = None
    price_rules: List[PriceRule] = Field(default_factory=list)


class CourtGroup(CamelModel):
    id: str
    club_id: str | None = None
    default_price_cents: int
    price_rules: List[PriceRule] = Field(default_factory=list)


class PricingCatalog(CamelModel):
    court: Court
    group: CourtGroup | None = None
    holidays: List[HolidayDate] = Field(default_factory=list)


class PriceSegment(CamelModel):
    start: str
    end: str
    price_cents: int


class BreakdownItem(CamelModel):
    start: str
    end: str
    minutes: int
    price_cents: int


class PriceBreakdown(CamelModel):
    total_price_cents: int
    breakdown: List[BreakdownItem]


class DayQuote(CamelModel):
    date: str  # ISO format YYYY-MM-DD
    day_of_week: int
    holidays: List[str]
    start_time: str
    end_time: str
    price_cents: int
    rule_type: str | None = None  # None when the default price applied
    timeline: List[PriceSegment]
