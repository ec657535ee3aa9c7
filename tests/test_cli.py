"""Tests for the command-line interface."""

import json
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from guestpulse import cli
from guestpulse.core.models import DateRange, Property
from guestpulse.services.aggregator import GooglePlacesFeed
from guestpulse.services.review_service import ReviewService


@pytest.fixture
def cli_service(monkeypatch, static_feed, sample_reviews):
    """Route the CLI to an in-memory service instead of live sources."""
    service = ReviewService([static_feed("hostaway", sample_reviews)])
    monkeypatch.setattr(cli, "build_review_service", lambda settings: service)
    return service


def filter_args(**overrides):
    values = dict(rating=None, channel=None, category=None, approved=None, search=None,
                  start_date=None, end_date=None)
    values.update(overrides)
    return SimpleNamespace(**values)


def test_build_filter_spec():
    """Flags map onto the same filter the dashboard query parameters produce."""
    spec = cli.build_filter_spec(filter_args(rating="5", channel="airbnb", approved="true", search="views"))

    assert spec.ratings == frozenset({5})
    assert spec.channels == frozenset({"airbnb"})
    assert spec.is_approved is True
    assert spec.search_term == "views"
    assert spec.date_range is None


def test_build_filter_spec_half_open_range():
    """A single date bound leaves the other end open."""
    spec = cli.build_filter_spec(filter_args(start_date="2024-01-01"))
    assert spec.date_range == DateRange("2024-01-01", "9999-12-31")


def test_reviews_command(cli_service, capsys):
    """Filtered reviews are listed with a count header."""
    cli.main(["reviews", "--rating", "5"])

    out = capsys.readouterr().out
    assert "Showing 2 of 4 reviews" in out
    assert "[4]" in out and "[1]" in out
    assert "[2]" not in out


def test_reviews_command_writes_json(cli_service, tmp_path):
    """The JSON export holds the sorted listing in a success envelope."""
    path = tmp_path / "reviews.json"
    cli.main(["reviews", "--sort", "rating", "--direction", "asc", "--out", str(path)])

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["success"] is True
    assert [r["rating"] for r in data["data"]["reviews"]] == [3, 4, 5, 5]
    assert data["meta"]["degraded"] is False
    assert "exportTimestamp" in data["meta"]


def test_stats_command(cli_service, capsys):
    """Stats are printed for the whole collection."""
    cli.main(["stats"])

    out = capsys.readouterr().out
    assert "Total reviews: 4" in out
    assert "Average rating: 4.3/5" in out


def test_export_command(cli_service, tmp_path):
    """The CSV export holds a header and the filtered rows."""
    path = tmp_path / "reviews.csv"
    cli.main(["export", "--out", str(path), "--channel", "booking"])

    lines = path.read_text(encoding="utf-8").split("\n")
    assert lines[0].startswith("ID,Guest Name,Rating")
    assert len(lines) == 2
    assert lines[1].startswith("2,")


def test_property_command(cli_service, capsys):
    """Published reviews for one listing are shown."""
    cli.main(["property", "2"])

    out = capsys.readouterr().out
    assert "1 published reviews for listing 2" in out
    assert "[4]" in out


def test_invalid_filter_exits_with_error_envelope(cli_service, capsys):
    """A bad filter exits 1 with a 400 envelope."""
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["reviews", "--rating", "five"])

    assert exc_info.value.code == 1
    envelope = json.loads(capsys.readouterr().out)
    assert envelope["status"] == 400
    assert envelope["rejectedFields"] == ["rating"]


def test_no_command_prints_help(capsys):
    """No subcommand prints usage."""
    cli.main([])
    assert "usage" in capsys.readouterr().out.lower()


def test_reviews_json_records_filters(cli_service, tmp_path):
    """The exported meta carries the filters that produced the listing."""
    path = tmp_path / "reviews.json"
    cli.main(["reviews", "--rating", "5", "--channel", "direct,airbnb", "--out", str(path)])

    meta = json.loads(path.read_text(encoding="utf-8"))["meta"]
    assert meta["filters"] == {"rating": [5], "channel": ["airbnb", "direct"]}


def test_property_command_summarizes_stats(cli_service, capsys):
    """The property view opens with average, distribution and category counts."""
    cli.main(["property", "1"])

    out = capsys.readouterr().out
    assert "2 published reviews for listing 1" in out
    assert "Average rating: 4.5/5" in out
    assert "Rating distribution: 5★ 1, 4★ 1, 3★ 0, 2★ 0, 1★ 0" in out
    assert "Categories: location 1, overall 1" in out


@pytest.fixture
def google_client():
    client = Mock()
    client.is_configured.return_value = True
    client.configuration_info.return_value = {"isConfigured": True, "requirements": ["API key"]}
    client.get_place_reviews.return_value = [{"author_name": "Jane Doe", "rating": 4, "text": "Nice place"}]
    return client


@pytest.fixture
def google_service(monkeypatch, google_client):
    """Route the CLI to a service with a mocked Google feed."""
    properties = [Property(id="1", name="Downtown Luxury Loft", address="123 Main St", city="New York")]
    service = ReviewService([GooglePlacesFeed(google_client, properties)])
    monkeypatch.setattr(cli, "build_review_service", lambda settings: service)
    return service


def test_google_command(google_service, capsys):
    """Google reviews for one property are listed."""
    cli.main(["google", "1"])

    out = capsys.readouterr().out
    assert "1 Google reviews for Downtown Luxury Loft" in out
    assert "[google-1-0]" in out


def test_google_command_writes_json(google_service, tmp_path):
    """The JSON export carries the property, reviews and configuration."""
    path = tmp_path / "google.json"
    cli.main(["google", "1", "--out", str(path)])

    data = json.loads(path.read_text(encoding="utf-8"))["data"]
    assert data["property"]["id"] == "1"
    assert data["count"] == 1
    assert data["configuration"]["isConfigured"] is True


def test_google_command_not_configured(google_service, google_client, capsys):
    """An unconfigured client prints its requirements instead of reviews."""
    google_client.is_configured.return_value = False
    google_client.configuration_info.return_value = {"isConfigured": False, "requirements": ["API key"]}

    cli.main(["google", "1"])

    out = capsys.readouterr().out
    assert "Google Places API is not configured" in out
    assert "  - API key" in out
    google_client.get_place_reviews.assert_not_called()


def test_google_command_unknown_property(google_service, capsys):
    """An unknown property exits with a 404 envelope."""
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["google", "99"])

    assert exc_info.value.code == 1
    assert json.loads(capsys.readouterr().out)["status"] == 404
