from datetime import date

from tradegauge.models import EarningsEvent, EarningsProximity, MacroEvent


def test_macro_event_extracts_clock_time():
    event = MacroEvent(title="CPI", date="2025-01-15", time="08:30 ET")

    assert event.time == "08:30"
    assert event.describe() == "CPI on 2025-01-15 08:30"


def test_macro_event_without_time():
    event = MacroEvent(title="Retail Sales", date=date(2025, 1, 16))

    assert event.time is None
    assert event.describe() == "Retail Sales on 2025-01-16"
    assert event.sort_key == "2025-01-16"


def test_earnings_session_is_lowercased():
    event = EarningsEvent(date="2025-01-30", session=" AMC ")

    assert event.session == "amc"
    assert EarningsEvent(date="2025-01-30", session="").session is None


def test_earnings_proximity_text():
    assert EarningsProximity(days_away=0, label="today", session="bmo").text == "today (bmo)"
    assert EarningsProximity(days_away=3, label="soon", session="amc").text == "in 3 day(s) (amc)"
    assert EarningsProximity(days_away=12, label="upcoming").text == "in ~12 day(s)"
    assert EarningsProximity().text == "none"


def test_earnings_proximity_flags():
    today = EarningsProximity(days_away=0, label="today")
    soon = EarningsProximity(days_away=4, label="soon")
    upcoming = EarningsProximity(days_away=20, label="upcoming")

    assert today.same_day and today.within_week
    assert not soon.same_day and soon.within_week
    assert not upcoming.within_week
