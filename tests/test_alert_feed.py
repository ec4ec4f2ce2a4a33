from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pygeoengine.models.alert import Alert, AlertKind
from pygeoengine.state.alerts import AlertFeed


def _alert(alert_id: int, kind: AlertKind = AlertKind.ENTER) -> Alert:
    return Alert(
        id=alert_id,
        title=Alert.title_for(kind),
        body=f"truck-{alert_id} in Depot",
        timestamp=datetime(2026, 1, 1, tzinfo=UTC) + timedelta(seconds=alert_id),
        kind=kind,
    )


def test_feed_keeps_four_most_recent_first() -> None:
    feed = AlertFeed()

    for alert_id in range(1, 8):
        feed.push(_alert(alert_id))

    assert [a.id for a in feed.alerts()] == [7, 6, 5, 4]
    assert len(feed) == 4


def test_eviction_is_count_based_not_time_based() -> None:
    feed = AlertFeed(capacity=2)
    # Pushed out of timestamp order on purpose.
    feed.push(_alert(50))
    feed.push(_alert(10))
    feed.push(_alert(30))

    assert [a.id for a in feed.alerts()] == [30, 10]


def test_dismiss_removes_by_id_from_any_position() -> None:
    feed = AlertFeed()
    for alert_id in (1, 2, 3):
        feed.push(_alert(alert_id))

    assert feed.dismiss(2) is True
    assert [a.id for a in feed.alerts()] == [3, 1]
    assert feed.dismiss(2) is False

    feed.clear()
    assert feed.alerts() == ()


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        AlertFeed(capacity=0)


def test_alert_titles() -> None:
    assert _alert(1, AlertKind.ENTER).title == "Entry"
    assert _alert(1, AlertKind.EXIT).title == "Exit"


def test_capacity_is_reported() -> None:
    assert AlertFeed().capacity == 4
    assert AlertFeed(capacity=2).capacity == 2
