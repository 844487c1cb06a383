"""
Behavior Store

Holds app behavior, content behavior, content preferences and keyword rules.

Rows are immutable pydantic models replaced on every write. Writers go through
``update_app`` / ``update_content`` which run the read-modify-write under a
per-key lock, so two writers to the same key never lose an increment while
writers to different keys never wait on each other.

When a state path is given the whole store is snapshotted to JSON after each
write (default: ~/.triage/behavior_state.json).
"""

import json
import logging
import threading
from pathlib import Path
from typing import Callable, Dict, Hashable, List, Optional, Tuple

from pydantic import ValidationError

from ..common.errors import InvalidKeywordRule
from ..common.schemas import (
    AppBehaviorState,
    Category,
    ContentBehaviorState,
    ContentPreference,
    ContentType,
    KeywordRule,
    KeywordType,
    active_rules,
    now_ms,
)

logger = logging.getLogger("triage.learning.store")

ContentKey = Tuple[str, str]


class BehaviorStore:
    """
    Keyed storage for behavior rows with single-writer-per-key updates.

    Workflow:
    1. The processor gets-or-creates rows and scores against them
    2. Interactions are applied with ``update_app`` / ``update_content``
    3. The updater periodically recomputes every row in place
    4. An external retention policy calls ``delete_*``
    """

    def __init__(self, state_path: Optional[Path] = None):
        """
        Initialize the store.

        Args:
            state_path: JSON snapshot file; None keeps everything in memory
        """
        self._state_path = Path(state_path) if state_path else None
        self._apps: Dict[str, AppBehaviorState] = {}
        self._contents: Dict[ContentKey, ContentBehaviorState] = {}
        self._preferences: Dict[ContentKey, ContentPreference] = {}
        self._keywords: Dict[str, KeywordRule] = {}

        self._lock = threading.Lock()  # guards the dicts and the lock registry
        self._key_locks: Dict[Hashable, threading.Lock] = {}
        self._save_lock = threading.Lock()

        self.load()

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    def key_lock(self, key: Hashable) -> threading.Lock:
        """Lock serializing writers for one key, created on first use"""
        with self._lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    # ------------------------------------------------------------------
    # App behavior
    # ------------------------------------------------------------------

    def get_app(self, app_id: str) -> Optional[AppBehaviorState]:
        with self._lock:
            return self._apps.get(app_id)

    def get_or_create_app(self, app_id: str) -> AppBehaviorState:
        with self.key_lock(("app", app_id)):
            with self._lock:
                row = self._apps.get(app_id)
                if row is not None:
                    return row
                row = self._apps[app_id] = AppBehaviorState(app_id=app_id)
        self._persist()
        return row

    def list_apps(self) -> List[AppBehaviorState]:
        with self._lock:
            return list(self._apps.values())

    def update_app(
        self,
        app_id: str,
        fn: Callable[[AppBehaviorState], AppBehaviorState],
        create: bool = True,
    ) -> Optional[AppBehaviorState]:
        """
        Replace the app row with ``fn(current)`` under the app's key lock.

        With ``create=False`` a missing row is left missing and None is returned.
        """
        with self.key_lock(("app", app_id)):
            with self._lock:
                current = self._apps.get(app_id)
            if current is None:
                if not create:
                    return None
                current = AppBehaviorState(app_id=app_id)
            updated = fn(current)
            with self._lock:
                self._apps[app_id] = updated
        self._persist()
        return updated

    def lock_app(self, app_id: str, category: Category) -> AppBehaviorState:
        return self.update_app(
            app_id,
            lambda row: row.model_copy(update={"is_locked": True, "locked_category": Category(category)}),
        )

    def unlock_app(self, app_id: str) -> AppBehaviorState:
        return self.update_app(
            app_id,
            lambda row: row.model_copy(update={"is_locked": False, "locked_category": None}),
        )

    def set_custom_base_score(self, app_id: str, score: Optional[int]) -> AppBehaviorState:
        # Validate through the model so out-of-range scores are rejected
        def apply(row: AppBehaviorState) -> AppBehaviorState:
            return AppBehaviorState.model_validate({**row.model_dump(), "custom_base_score": score})

        return self.update_app(app_id, apply)

    def reset_app(self, app_id: str) -> AppBehaviorState:
        """Forget learned behavior for an app, keeping manual overrides"""
        def apply(row: AppBehaviorState) -> AppBehaviorState:
            return AppBehaviorState(
                app_id=app_id,
                is_locked=row.is_locked,
                locked_category=row.locked_category,
                custom_base_score=row.custom_base_score,
            )

        return self.update_app(app_id, apply)

    def delete_app(self, app_id: str) -> bool:
        with self.key_lock(("app", app_id)):
            with self._lock:
                removed = self._apps.pop(app_id, None) is not None
        if removed:
            self._persist()
        return removed

    # ------------------------------------------------------------------
    # Content behavior
    # ------------------------------------------------------------------

    def get_content(self, app_id: str, content_id: str) -> Optional[ContentBehaviorState]:
        with self._lock:
            return self._contents.get((app_id, content_id))

    def get_or_create_content(
        self,
        app_id: str,
        content_id: str,
        content_type: ContentType = ContentType.GENERIC,
    ) -> ContentBehaviorState:
        key = (app_id, content_id)
        with self.key_lock(("content",) + key):
            with self._lock:
                row = self._contents.get(key)
                if row is not None:
                    return row
                row = self._contents[key] = ContentBehaviorState(
                    app_id=app_id, content_id=content_id, content_type=content_type
                )
        self._persist()
        return row

    def list_contents(self, app_id: Optional[str] = None) -> List[ContentBehaviorState]:
        with self._lock:
            rows = list(self._contents.values())
        if app_id is not None:
            rows = [r for r in rows if r.app_id == app_id]
        return rows

    def update_content(
        self,
        app_id: str,
        content_id: str,
        fn: Callable[[ContentBehaviorState], ContentBehaviorState],
        content_type: ContentType = ContentType.GENERIC,
        create: bool = True,
    ) -> Optional[ContentBehaviorState]:
        """Replace the content row with ``fn(current)`` under its key lock (see ``update_app``)."""
        key = (app_id, content_id)
        with self.key_lock(("content",) + key):
            with self._lock:
                current = self._contents.get(key)
            if current is None:
                if not create:
                    return None
                current = ContentBehaviorState(
                    app_id=app_id, content_id=content_id, content_type=content_type
                )
            updated = fn(current)
            with self._lock:
                self._contents[key] = updated
        self._persist()
        return updated

    def delete_content(self, app_id: str, content_id: str) -> bool:
        key = (app_id, content_id)
        with self.key_lock(("content",) + key):
            with self._lock:
                removed = self._contents.pop(key, None) is not None
        if removed:
            self._persist()
        return removed

    # ------------------------------------------------------------------
    # Content preferences
    # ------------------------------------------------------------------

    def get_preference(self, app_id: str, content_id: str) -> Optional[ContentPreference]:
        with self._lock:
            return self._preferences.get((app_id, content_id))

    def get_or_create_preference(
        self,
        app_id: str,
        content_id: str,
        content_type: ContentType = ContentType.GENERIC,
    ) -> ContentPreference:
        key = (app_id, content_id)
        with self.key_lock(("preference",) + key):
            with self._lock:
                row = self._preferences.get(key)
                if row is not None:
                    return row
                row = self._preferences[key] = ContentPreference(
                    app_id=app_id, content_id=content_id, content_type=content_type
                )
        self._persist()
        return row

    def list_preferences(self, app_id: Optional[str] = None) -> List[ContentPreference]:
        with self._lock:
            rows = list(self._preferences.values())
        if app_id is not None:
            rows = [r for r in rows if r.app_id == app_id]
        return rows

    def _update_preference(
        self,
        app_id: str,
        content_id: str,
        changes: dict,
        content_type: ContentType = ContentType.GENERIC,
    ) -> ContentPreference:
        key = (app_id, content_id)
        with self.key_lock(("preference",) + key):
            with self._lock:
                current = self._preferences.get(key) or ContentPreference(
                    app_id=app_id, content_id=content_id, content_type=content_type
                )
            updated = ContentPreference.model_validate(
                {**current.model_dump(), **changes, "last_updated": now_ms()}
            )
            with self._lock:
                self._preferences[key] = updated
        self._persist()
        return updated

    def set_preference(
        self,
        app_id: str,
        content_id: str,
        score: int,
        content_type: ContentType = ContentType.GENERIC,
    ) -> ContentPreference:
        """
        Set the manual preference for a sender/channel.

        Raises:
            pydantic.ValidationError: score outside [-20, 20]
        """
        return self._update_preference(
            app_id, content_id, {"preference_score": score, "content_type": content_type}, content_type
        )

    def lock_preference(self, app_id: str, content_id: str) -> ContentPreference:
        return self._update_preference(app_id, content_id, {"is_locked": True})

    def unlock_preference(self, app_id: str, content_id: str) -> ContentPreference:
        return self._update_preference(app_id, content_id, {"is_locked": False})

    def delete_preference(self, app_id: str, content_id: str) -> bool:
        key = (app_id, content_id)
        with self.key_lock(("preference",) + key):
            with self._lock:
                removed = self._preferences.pop(key, None) is not None
        if removed:
            self._persist()
        return removed

    # ------------------------------------------------------------------
    # Keyword rules
    # ------------------------------------------------------------------

    def list_keywords(self) -> List[KeywordRule]:
        with self._lock:
            return list(self._keywords.values())

    def active_keywords(self) -> List[KeywordRule]:
        return active_rules(self.list_keywords())

    def add_keyword(self, keyword: str, type: KeywordType, score_modifier: int) -> KeywordRule:
        """
        Add a custom keyword rule.

        Raises:
            InvalidKeywordRule: blank keyword, duplicate, or modifier out of range
        """
        try:
            rule = KeywordRule(keyword=keyword, type=type, score_modifier=score_modifier)
        except ValidationError as e:
            raise InvalidKeywordRule(str(e)) from e

        with self.key_lock(("keywords",)):
            with self._lock:
                if rule.keyword in self._keywords:
                    raise InvalidKeywordRule(f"Keyword already exists: {rule.keyword}")
                self._keywords[rule.keyword] = rule
        self._persist()
        logger.info("Added %s keyword '%s' (%+d)", rule.type.value, rule.keyword, rule.score_modifier)
        return rule

    def set_keyword_active(self, keyword: str, is_active: bool) -> Optional[KeywordRule]:
        key = keyword.strip().lower()
        with self.key_lock(("keywords",)):
            with self._lock:
                rule = self._keywords.get(key)
                if rule is None:
                    return None
                rule = self._keywords[key] = rule.model_copy(update={"is_active": is_active})
        self._persist()
        return rule

    def remove_keyword(self, keyword: str) -> bool:
        key = keyword.strip().lower()
        with self.key_lock(("keywords",)):
            with self._lock:
                removed = self._keywords.pop(key, None) is not None
        if removed:
            self._persist()
        return removed

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Load the snapshot from disk; a missing or unreadable file starts empty"""
        if self._state_path is None or not self._state_path.exists():
            return

        try:
            with open(self._state_path) as f:
                data = json.load(f)

            apps = [AppBehaviorState.model_validate(d) for d in data.get("apps", [])]
            contents = [ContentBehaviorState.model_validate(d) for d in data.get("contents", [])]
            preferences = [ContentPreference.model_validate(d) for d in data.get("preferences", [])]
            keywords = [KeywordRule.model_validate(d) for d in data.get("keywords", [])]
        except (json.JSONDecodeError, IOError, ValidationError, AttributeError) as e:
            logger.warning("Failed to load behavior state from %s: %s", self._state_path, e)
            return

        with self._lock:
            self._apps = {r.app_id: r for r in apps}
            self._contents = {(r.app_id, r.content_id): r for r in contents}
            self._preferences = {(r.app_id, r.content_id): r for r in preferences}
            self._keywords = {r.keyword: r for r in keywords}

        logger.info(
            "Loaded behavior state: %d apps, %d contents, %d preferences, %d keywords",
            len(apps), len(contents), len(preferences), len(keywords),
        )

    def save(self) -> None:
        """Write the snapshot to disk"""
        if self._state_path is None:
            return

        with self._lock:
            data = {
                "apps": [r.model_dump(mode="json") for r in self._apps.values()],
                "contents": [r.model_dump(mode="json") for r in self._contents.values()],
                "preferences": [r.model_dump(mode="json") for r in self._preferences.values()],
                "keywords": [r.model_dump(mode="json") for r in self._keywords.values()],
            }

        with self._save_lock:
            self._state_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._state_path, "w") as f:
                json.dump(data, f, indent=2)

    def _persist(self) -> None:
        if self._state_path is not None:
            self.save()

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "apps": len(self._apps),
                "contents": len(self._contents),
                "preferences": len(self._preferences),
                "keywords": len(self._keywords),
            }
