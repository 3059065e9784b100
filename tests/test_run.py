from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests

from court_pricing import run
from court_pricing.models import Court, CourtGroup, HolidayDate, PriceRule, PricingCatalog


@pytest.fixture
def catalog():
    return PricingCatalog(
        court=Court(
            id="court-1",
            group_id="group-1",
            use_group_pricing=True,
            default_price_cents=4000,
        ),
        group=CourtGroup(
            id="group-1",
            club_id="club-1",
            default_price_cents=3500,
            price_rules=[
                PriceRule(rule_type="WEEKENDS", start_time="08:00", end_time="22:00", price_cents=6000),
                PriceRule(rule_type="HOLIDAY", holiday_id="xmas", start_time="08:00", end_time="22:00", price_cents=9000),
            ],
        ),
        holidays=[HolidayDate(id="xmas", date=date(2024, 12, 25), recurring=True, name="Christmas")],
    )


@patch("court_pricing.run.requests.get")
def test_fetch_holidays_success(mock_get):
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.text = "Date,Name,Recurring\n25.12.2025,Christmas,yes\n01.09.2025,Club opening\ngarbage,x"
    mock_response.raise_for_status.return_value = None
    mock_get.return_value = mock_response

    holidays = run.fetch_holidays("http://fake.url", club_id="club-1")

    assert len(holidays) == 2
    assert holidays[0].date == date(2025, 12, 25)
    assert holidays[0].name == "Christmas"
    assert holidays[0].recurring is True
    assert holidays[0].club_id == "club-1"
    assert holidays[1].recurring is False
    assert holidays[0].id != holidays[1].id


@patch("court_pricing.run.requests.get")
def test_fetch_holidays_failure(mock_get):
    mock_get.side_effect = requests.exceptions.ConnectionError("Network error")
    assert run.fetch_holidays("http://fake.url") == []


@patch("court_pricing.run.requests.get")
def test_fetch_holidays_ids_survive_inserted_rows(mock_get):
    """Holiday ids come from row content, so rules keep pointing at the same holiday."""
    mock_response = MagicMock()
    mock_response.raise_for_status.return_value = None
    mock_get.return_value = mock_response

    mock_response.text = "Date,Name\n25.12.2025,Christmas"
    before = {h.name: h.id for h in run.fetch_holidays("http://fake.url")}

    mock_response.text = "Date,Name\n01.05.2025,Labour Day\n25.12.2025,Christmas"
    after_holidays = run.fetch_holidays("http://fake.url")
    after = {h.name: h.id for h in after_holidays}

    assert before["Christmas"] == after["Christmas"] == "csv-2025-12-25-christmas"
    assert after["Labour Day"] != after["Christmas"]

    court = Court(
        id="court-1",
        default_price_cents=4000,
        price_rules=[
            PriceRule(
                rule_type="HOLIDAY", holiday_id=before["Christmas"], start_time="08:00", end_time="22:00", price_cents=9000
            )
        ],
    )
    catalog = PricingCatalog(court=court, holidays=after_holidays)
    assert run.build_day_quote(catalog, date(2025, 12, 25), "10:00", "11:00").price_cents == 9000
    assert run.build_day_quote(catalog, date(2025, 5, 1), "10:00", "11:00").price_cents == 4000


@patch("court_pricing.run.requests.get")
def test_fetch_holidays_uses_explicit_id_column(mock_get):
    mock_response = MagicMock()
    mock_response.raise_for_status.return_value = None
    mock_response.text = "25.12.2025,Christmas,yes,xmas\n26.12.2025,Boxing Day,yes,"
    mock_get.return_value = mock_response

    holidays = run.fetch_holidays("http://fake.url")

    assert [h.id for h in holidays] == ["xmas", "csv-2025-12-26-boxing-day"]


def test_build_day_quote_on_holiday(catalog):
    quote = run.build_day_quote(catalog, date(2025, 12, 25), "10:00", "11:00")

    assert quote.price_cents == 9000
    assert quote.rule_type == "HOLIDAY"
    assert quote.holidays == ["Christmas"]
    assert quote.day_of_week == 4
    assert [(s.start, s.end, s.price_cents) for s in quote.timeline] == [("08:00", "22:00", 9000)]


def test_build_day_quote_falls_back_to_group_default(catalog):
    quote = run.build_day_quote(catalog, date(2025, 6, 3), "9:00", "10:00")

    assert quote.price_cents == 3500
    assert quote.rule_type is None
    assert quote.start_time == "09:00"
    assert quote.timeline == []


def test_get_target_dates():
    dates = run.get_target_dates("2025-06-01", 3)
    assert dates == [date(2025, 6, 1), date(2025, 6, 2), date(2025, 6, 3)]


def test_get_target_dates_invalid_start_exits():
    with pytest.raises(SystemExit):
        run.get_target_dates("01.06.2025", 3)


def test_format_cents():
    with patch("court_pricing.run.config.CURRENCY", "EUR"):
        assert run.format_cents(4050) == "40.50 EUR"


@patch("court_pricing.run.config.HOLIDAYS_CSV_URL", None)
@patch("court_pricing.run.persist.save_report")
@patch("court_pricing.run.persist.load_catalog")
def test_run_quotes_each_day(mock_load, mock_save, catalog, capsys):
    mock_load.return_value = catalog

    quotes = run.run(data_file="pricing.json", start_date="2025-06-06", days=2, start_time="10:00", end_time="11:00")

    mock_load.assert_called_once_with("pricing.json")
    assert [q.price_cents for q in quotes] == [3500, 6000]
    mock_save.assert_called_once_with(quotes, None)

    out = capsys.readouterr().out
    assert "Price Report for 2025-06-07 (Saturday)" in out
    assert "costs 60.00" in out


@patch("court_pricing.run.config.HOLIDAYS_CSV_URL", "http://fake.url")
@patch("court_pricing.run.fetch_holidays")
@patch("court_pricing.run.persist.save_report")
@patch("court_pricing.run.persist.load_catalog")
def test_run_merges_remote_holidays(mock_load, mock_save, mock_fetch, catalog):
    mock_load.return_value = catalog
    mock_fetch.return_value = [HolidayDate(id="csv-2025-06-09-whit-monday", date=date(2025, 6, 9), name="Whit Monday")]
    catalog.group.price_rules.append(
        PriceRule(rule_type="HOLIDAY", holiday_id="csv-2025-06-09-whit-monday", start_time="08:00", end_time="22:00", price_cents=7700)
    )

    quotes = run.run(start_date="2025-06-09", days=1, start_time="10:00", end_time="11:00")

    mock_fetch.assert_called_once_with("http://fake.url", "club-1")
    assert quotes[0].price_cents == 7700
    assert quotes[0].holidays == ["Whit Monday"]


@patch("court_pricing.run.persist.load_catalog")
def test_run_missing_data_file_exits(mock_load):
    mock_load.side_effect = FileNotFoundError("Pricing data file not found: x.json")
    with pytest.raises(SystemExit):
        run.run(data_file="x.json")


def test_run_data_file_is_directory_exits(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        run.run(data_file=str(tmp_path))
    assert exc_info.value.code == 1


def test_run_invalid_slot_exits():
    with pytest.raises(SystemExit):
        run.run(start_time="19:00", end_time="18:00")
