from unittest.mock import MagicMock, patch

from court_pricing import cli


@patch("court_pricing.cli.run.run")
@patch("court_pricing.cli.parse_arguments")
def test_main_calls_run(mock_args, mock_run):
    mock_args.return_value = MagicMock(
        data="pricing.json",
        start_date="2025-01-01",
        days=5,
        start="10:00",
        end="11:30",
        report=None,
        verbose=True,
    )

    cli.main()

    mock_run.assert_called_once_with(
        data_file="pricing.json",
        start_date="2025-01-01",
        days=5,
        start_time="10:00",
        end_time="11:30",
        report_file=None,
    )


def test_parse_arguments_defaults():
    args = cli.parse_arguments([])
    assert args.days == 7
    assert args.start == "18:00"
    assert args.end == "19:00"
    assert args.data is None
    assert args.verbose is False
