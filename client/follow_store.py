"""
Optimistic follow state for one signed-in client.

Every follow control goes through the same cycle:

    Idle(following=b) -> Pending(displayed=not b) -> Idle(not b) on success
                                                  -> Idle(b)     on failure

Actions taken while a control is Pending are coalesced into one queued intent,
sent after the in-flight request settles. Each request carries the store epoch
it was issued under; switching identity or tearing down the view bumps the
epoch, and responses from an older epoch are dropped without touching any
state. Mutations also name the identity they were issued as, so the server
refuses a follow that arrives after the session switched identity.
"""
import enum
import logging
from typing import Callable, Dict, Optional

from client.api import ApiError, LinkBDClient, Unauthenticated
from client.cache import QueryCache, query_keys
from schemas import ActorKind, ActorRef, FollowCounts, SessionRead

logger = logging.getLogger("linkbd.client")

COUNTS_STALE_TIME = 120.0
STATUS_STALE_TIME = 300.0


def _log_notification(level: str, message: str):
    logger.log(logging.ERROR if level == "error" else logging.INFO, message)


class FollowState(str, enum.Enum):
    IDLE = "idle"
    PENDING = "pending"


class FollowControl:
    """Follow button state for one target, as seen by the store's acting identity."""

    def __init__(self, store: "FollowStore", target: ActorRef, following: bool):
        self.store = store
        self.target = target
        # identity the control was created under; sent with every mutation
        self.follower = store.acting_identity
        self.following = following
        self.state = FollowState.IDLE
        self.epoch = store.epoch
        self.detached = False
        self._queued: Optional[bool] = None

    @property
    def is_pending(self) -> bool:
        return self.state is FollowState.PENDING

    @property
    def intended(self) -> bool:
        """The state the user last asked for, including a queued action."""
        return self._queued if self._queued is not None else self.following

    async def toggle(self) -> bool:
        return await self.set_following(not self.intended)

    async def set_following(self, desired: bool) -> bool:
        if self.detached:
            return self.following
        if self.is_pending:
            self._queued = desired
            return self.following
        if desired != self.following:
            await self._run(desired)
        return self.following

    async def _run(self, desired: bool):
        while True:
            previous = self.following
            self.state = FollowState.PENDING
            self.following = desired
            try:
                settled = await self.store._send(self, desired, previous)
            finally:
                self.state = FollowState.IDLE

            queued, self._queued = self._queued, None
            if not settled or self.detached or queued is None or queued == self.following:
                return
            desired = queued


class FollowStore:
    def __init__(
        self,
        api: LinkBDClient,
        cache: Optional[QueryCache] = None,
        notify: Optional[Callable[[str, str], None]] = None,
    ):
        self.api = api
        self.cache = cache if cache is not None else QueryCache()
        self.notify = notify or _log_notification
        self.epoch = 0
        self.session: Optional[SessionRead] = None
        self._controls: Dict[ActorRef, FollowControl] = {}

    @property
    def acting_identity(self) -> Optional[ActorRef]:
        return self.session.acting_identity if self.session else None

    async def refresh_session(self) -> Optional[SessionRead]:
        try:
            self.session = await self.api.get_session()
        except Unauthenticated:
            self.session = None
        return self.session

    def reset_view(self):
        """Drop every control and cached query; in-flight responses become stale."""
        self.epoch += 1
        for control in self._controls.values():
            control.detached = True
        self._controls.clear()
        self.cache.clear()

    async def switch_identity(self, organization_id: Optional[str]) -> SessionRead:
        """
        Act as `organization_id` (or the personal account with None).

        A rejected switch raises and leaves the store untouched.
        """
        session = await self.api.set_active_organization(organization_id)
        self.reset_view()
        self.session = session
        return session

    def can_follow(self, target: ActorRef) -> bool:
        return self.session is not None and target != self.acting_identity

    # --- Queries ---

    async def use_follow_status(self, target_kind: ActorKind, target_id: str) -> Optional[FollowControl]:
        """
        Control for following `target_id`, or None when no control may be shown
        (signed out, or the target is the acting identity itself).
        """
        target = ActorRef(kind=target_kind, id=target_id)
        if not self.can_follow(target):
            return None

        control = self._controls.get(target)
        if control is not None:
            return control

        key = query_keys.follow_status(target)
        while True:
            epoch = self.epoch
            following = self.cache.get(key)
            if following is None:
                following = await self.api.get_follow_status(target)
            if epoch == self.epoch:
                break
            if not self.can_follow(target):
                return None

        self.cache.set(key, following, STATUS_STALE_TIME)
        return self._controls.setdefault(target, FollowControl(self, target, following))

    def peek_follow_status(self, target: ActorRef) -> Optional[bool]:
        control = self._controls.get(target)
        if control is not None:
            return control.following
        return self.cache.get(query_keys.follow_status(target))

    async def use_follower_counts(
        self,
        user_id: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> FollowCounts:
        if bool(user_id) == bool(organization_id):
            raise ValueError("Must provide exactly one of user_id or organization_id")
        actor = ActorRef.user(user_id) if user_id else ActorRef.organization(organization_id)

        key = query_keys.counts(actor)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        epoch = self.epoch
        counts = await self.api.get_follower_counts(actor)
        if epoch == self.epoch:
            self.cache.set(key, counts, COUNTS_STALE_TIME)
        return counts

    # --- Mutations ---

    def use_follow(self):
        """Mutation taking (target_id, target_type, action) with action 'follow' or 'unfollow'."""
        async def mutate(target_id: str, target_type: ActorKind, action: str) -> Optional[FollowControl]:
            if action not in ("follow", "unfollow"):
                raise ValueError(f"Unknown follow action: {action}")
            control = await self.use_follow_status(target_type, target_id)
            if control is None:
                return None
            await control.set_following(action == "follow")
            return control

        return mutate

    async def _send(self, control: FollowControl, desired: bool, previous: bool) -> bool:
        action = "follow" if desired else "unfollow"
        target = control.target
        try:
            result = await self.api.toggle_follow(target.id, target.kind, action, follower=control.follower)
        except ApiError as exc:
            if control.epoch != self.epoch:
                logger.debug("Discarding failed %s of %s from epoch %s", action, target, control.epoch)
                return False
            control.following = previous
            self.notify("error", exc.message)
            return False
        except BaseException:
            if control.epoch == self.epoch:
                control.following = previous
            raise

        if control.epoch != self.epoch:
            logger.debug("Discarding %s of %s from epoch %s", action, target, control.epoch)
            return False

        control.following = result.is_following
        self.cache.set(query_keys.follow_status(target), result.is_following, STATUS_STALE_TIME)
        self._invalidate_dependents(result.follower, target)
        self.notify("success", "Following" if desired else "Unfollowed")
        return True

    def _invalidate_dependents(self, follower: ActorRef, target: ActorRef):
        self.cache.invalidate(query_keys.counts(target))
        self.cache.invalidate(query_keys.counts(follower))
        self.cache.invalidate(query_keys.followers(target))
        self.cache.invalidate(query_keys.following(follower))
        # following changes affect feed content
        self.cache.invalidate(query_keys.FEED)
