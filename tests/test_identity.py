from datetime import datetime, timedelta, timezone

import pytest

from models.AuthSession import AuthSession
from models.Follow import Follow
from models.Member import Member
from schemas import ActorRef
from services import follows as follow_service
from services.errors import NotAMember
from services.identity import get_active_identity, list_user_organizations, switch_active_identity


def _session(db, user_id, active_organization_id=None):
    session = AuthSession(
        id=f"s-{user_id}",
        token=f"token-{user_id}",
        user_id=user_id,
        active_organization_id=active_organization_id,
        expires_at=datetime.now(timezone.utc) + timedelta(days=1),
    )
    db.add(session)
    db.commit()
    return session


def test_personal_identity_by_default(seed):
    session = _session(seed, "u1")
    assert get_active_identity(seed, session) == ActorRef.user("u1")


def test_organization_identity_when_member(seed):
    session = _session(seed, "u1", "org1")
    assert get_active_identity(seed, session) == ActorRef.organization("org1")


def test_falls_back_to_personal_without_membership(seed):
    session = _session(seed, "u2", "org1")
    assert get_active_identity(seed, session) == ActorRef.user("u2")


def test_falls_back_after_membership_removed(seed):
    db = seed
    session = _session(db, "u1", "org1")
    db.query(Member).filter(Member.user_id == "u1").delete()
    db.commit()

    assert get_active_identity(db, session) == ActorRef.user("u1")


def test_switch_and_switch_back(seed):
    db = seed
    session = _session(db, "u1")

    switch_active_identity(db, session, "org1")
    assert session.active_organization_id == "org1"
    assert get_active_identity(db, session) == ActorRef.organization("org1")

    switch_active_identity(db, session, None)
    assert session.active_organization_id is None
    assert get_active_identity(db, session) == ActorRef.user("u1")


def test_rejected_switch_leaves_session_unchanged(seed):
    db = seed
    session = _session(db, "u2")

    with pytest.raises(NotAMember):
        switch_active_identity(db, session, "org1")

    db.refresh(session)
    assert session.active_organization_id is None
    assert get_active_identity(db, session) == ActorRef.user("u2")


def test_switch_does_not_touch_follow_edges(seed):
    db = seed
    follow_service.follow(db, ActorRef.user("u1"), ActorRef.user("u2"))
    before = [(f.follower_id, f.target_id, f.created_at) for f in db.query(Follow).all()]
    session = _session(db, "u1")

    switch_active_identity(db, session, "org1")
    switch_active_identity(db, session, None)

    assert [(f.follower_id, f.target_id, f.created_at) for f in db.query(Follow).all()] == before


def test_list_user_organizations(seed):
    assert [org.id for org in list_user_organizations(seed, "u1")] == ["org1"]
    assert list_user_organizations(seed, "u2") == []
