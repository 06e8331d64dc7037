"""
Industry insight persistence tests.

Guards against:
1. next_update drifting from last_updated + 7 days on create or refresh
2. A duplicate industry insert discarding the caller's other pending changes
3. Refreshes leaving stale fields behind
"""
from datetime import datetime, timedelta

import pytest

from sensai.errors import NotFoundError, StorageConflictError
from sensai.models.industry_insight import IndustryInsight
from sensai.models.user import User
from sensai.services.insight_generator import parse_insights
from sensai.services.insight_store import InsightStore, next_update_after

from fakes import insight_json


def _payload(**kwargs):
    return parse_insights("any", insight_json(fenced=False, **kwargs))


def test_next_update_is_seven_days_later():
    moment = datetime(2026, 3, 1, 12, 30)
    assert next_update_after(moment) == datetime(2026, 3, 8, 12, 30)


def test_create_sets_refresh_window(db):
    now = datetime(2026, 1, 4, 0, 0)

    insight = InsightStore(db).create("Healthcare", _payload(), now=now)
    db.commit()

    stored = db.query(IndustryInsight).filter_by(industry="Healthcare").one()
    assert stored.id == insight.id
    assert stored.last_updated == now
    assert stored.next_update - stored.last_updated == timedelta(days=7)
    assert stored.demand_level == "HIGH"
    assert len(stored.salary_ranges) >= 5


def test_duplicate_create_conflicts_without_losing_pending_work(db):
    store = InsightStore(db)
    store.create("Healthcare", _payload())
    db.commit()

    db.add(User(external_user_id="user_1", email="one@example.com"))
    with pytest.raises(StorageConflictError):
        store.create("Healthcare", _payload(demand="low"))
    db.commit()

    assert db.query(User).filter_by(external_user_id="user_1").count() == 1
    assert db.query(IndustryInsight).count() == 1
    assert store.find_by_industry("Healthcare").demand_level == "HIGH"


def test_update_overwrites_every_field(db):
    store = InsightStore(db)
    store.create("Retail", _payload(), now=datetime(2025, 1, 1))
    db.commit()

    later = datetime(2025, 2, 1, 9, 0)
    store.update("Retail", _payload(demand="low", outlook="negative", growth=-3.5), now=later)
    db.commit()

    stored = store.find_by_industry("Retail")
    assert stored.demand_level == "LOW"
    assert stored.market_outlook == "NEGATIVE"
    assert stored.growth_rate == -3.5
    assert stored.last_updated == later
    assert stored.next_update == later + timedelta(days=7)


def test_update_missing_industry_raises(db):
    with pytest.raises(NotFoundError):
        InsightStore(db).update("Nowhere", _payload())


def test_list_industries_sorted(db):
    store = InsightStore(db)
    for industry in ("Tech", "Agriculture", "Media"):
        store.create(industry, _payload())
    db.commit()

    assert store.list_industries() == ["Agriculture", "Media", "Tech"]
