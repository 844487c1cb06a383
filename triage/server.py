"""
Triage Server

FastAPI service that scores notifications and learns from how the user reacts.

Endpoints:
- GET /health: Health check
- POST /notifications/score: Score one notification
- POST /notifications/interactions: Record opened/dismissed/ignored
- GET /apps/{app_id}/behavior: Learned behavior, explanation and suggestions
- PUT /apps/{app_id}/lock: Lock an app to a category
- DELETE /apps/{app_id}/lock: Remove the lock
- PUT /apps/{app_id}/content/{content_id}/preference: Set a manual preference
- GET /keywords, POST /keywords, DELETE /keywords/{keyword}: Keyword rules
- POST /behavior/recalculate: Run the behavior updater now

With learning enabled the updater also runs every
``learning.recalculate_interval_hours`` in a background task.

Pipeline:
1. Extract sender/channel identity
2. Score with app weight, preference, keywords, frequency and learned behavior
3. Optionally ask the advisory classifier for a second opinion
4. Count the notification for later learning
"""

import asyncio
import logging
from dataclasses import asdict
from typing import Optional
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .common.catalog import CUSTOM_KEYWORD_MODIFIER_LIMIT, PREFERENCE_MAX_SCORE
from .common.config import load_config, TriageConfig, ensure_directories
from .common.errors import InvalidKeywordRule
from .common.schemas import Category, ContentType, KeywordType, NotificationEvent
from .classifier.advisory import AdvisoryClassifier
from .classifier.pipeline import NotificationProcessor
from .classifier.reconciler import AdvisoryReconciler
from .learning.learner import BehaviorLearner
from .learning.store import BehaviorStore
from .learning.updater import BehaviorUpdater

logger = logging.getLogger("triage.server")


# Global state
config: Optional[TriageConfig] = None
store: Optional[BehaviorStore] = None
processor: Optional[NotificationProcessor] = None
updater: Optional[BehaviorUpdater] = None
learner = BehaviorLearner()
advisory_ready = False


def init_components(cfg: TriageConfig) -> None:
    """Build store, processor and updater from a config"""
    global config, store, processor, updater, advisory_ready

    config = cfg
    store = BehaviorStore(Path(cfg.state_path) if cfg.state_path else None)
    stats = store.get_stats()
    print(f"[Triage] Behavior state: {stats['apps']} apps, {stats['contents']} contents, {stats['keywords']} keywords")

    reconciler = None
    advisory_ready = False
    if cfg.advisory.enabled:
        classifier = AdvisoryClassifier.from_config(cfg.llm, cfg.advisory)
        if classifier.is_available:
            reconciler = AdvisoryReconciler(classifier)
            advisory_ready = True
            print(f"[Triage] Advisory classifier ready ({cfg.llm.provider})")
        else:
            print("[Triage] Advisory classifier unavailable (heuristic only)")
    else:
        print("[Triage] Advisory classifier disabled")

    processor = NotificationProcessor(
        store,
        reconciler=reconciler,
        preference_hint=cfg.advisory.preference_hint,
    )

    if cfg.learning.enabled:
        updater = BehaviorUpdater(store, learner)
    else:
        updater = None
        print("[Triage] Behavior learning disabled")


async def recalculate_periodically(interval_seconds: float) -> None:
    """Run the behavior updater every ``interval_seconds`` until cancelled"""
    while True:
        await asyncio.sleep(interval_seconds)
        if updater is None:
            continue
        try:
            await asyncio.to_thread(updater.run_once)
        except Exception as e:
            logger.warning("Scheduled behavior update failed: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup"""
    print("[Triage] Starting up...")

    ensure_directories()
    init_components(load_config())

    scheduler = None
    if updater is not None and config.learning.recalculate_interval_hours > 0:
        hours = config.learning.recalculate_interval_hours
        scheduler = asyncio.create_task(recalculate_periodically(hours * 3600))
        print(f"[Triage] Behavior recalculation every {hours}h")

    print("[Triage] Ready to score notifications")

    yield

    print("[Triage] Shutting down...")
    if scheduler:
        scheduler.cancel()
    if store:
        store.save()


app = FastAPI(
    title="Triage",
    description="Notification importance scoring with behavior learning",
    version="0.1.0",
    lifespan=lifespan
)


# =============================================================================
# Request Models
# =============================================================================

class NotificationRequest(BaseModel):
    """Notification to score"""
    app_id: str = Field(min_length=1)
    app_name: str = ""
    title: Optional[str] = None
    text: Optional[str] = None
    sub_text: Optional[str] = None
    big_text: Optional[str] = None
    posted_at: int = 0
    received_at: int = 0


class InteractionRequest(BaseModel):
    """User reaction to a notification"""
    app_id: str = Field(min_length=1)
    content_id: Optional[str] = None
    kind: str  # "opened", "dismissed", "ignored"
    time_to_action_ms: int = Field(default=0, ge=0)


class PreferenceRequest(BaseModel):
    preference_score: int = Field(ge=-PREFERENCE_MAX_SCORE, le=PREFERENCE_MAX_SCORE)
    content_type: ContentType = ContentType.GENERIC
    is_locked: Optional[bool] = None


class LockRequest(BaseModel):
    category: Category


class KeywordRequest(BaseModel):
    keyword: str
    type: KeywordType
    score_modifier: int = Field(ge=-CUSTOM_KEYWORD_MODIFIER_LIMIT, le=CUSTOM_KEYWORD_MODIFIER_LIMIT)


def _require_ready() -> None:
    if processor is None or store is None:
        raise HTTPException(status_code=503, detail="Triage not initialized")


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "triage",
        "initialized": processor is not None,
        "advisory_available": advisory_ready,
        "state": store.get_stats() if store else None,
    }


@app.post("/notifications/score")
def score_notification(request: NotificationRequest):
    """Score a notification (sync: the advisory call blocks)"""
    _require_ready()

    result = processor.process(NotificationEvent(**request.model_dump()))

    return {
        "app_id": request.app_id,
        "content_id": result.identity.content_id,
        "content_type": result.identity.content_type.value,
        "score": result.final_score,
        "category": result.category.value,
        "breakdown": asdict(result.breakdown),
        "advisory": {
            "outcome": result.reconcile.outcome,
            "original_score": result.reconcile.original_score,
            "reason": result.reconcile.reason,
        },
    }


@app.post("/notifications/interactions")
async def record_interaction(request: InteractionRequest):
    """Record how the user reacted to a notification"""
    _require_ready()

    try:
        app_row, content_row = processor.record_interaction(
            request.app_id, request.content_id, request.kind, request.time_to_action_ms
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {
        "status": "recorded",
        "app": app_row.model_dump(mode="json"),
        "content": content_row.model_dump(mode="json") if content_row else None,
    }


@app.get("/apps/{app_id}/behavior")
async def get_app_behavior(app_id: str):
    """Learned behavior for an app and its senders/channels"""
    _require_ready()

    row = store.get_app(app_id)
    if row is None:
        raise HTTPException(status_code=404, detail="App not found")

    return {
        "app": row.model_dump(mode="json"),
        "explanation": learner.explain_adjustment(row),
        "suggest_auto_silence": learner.should_suggest_auto_silence(row),
        "suggest_upgrade": learner.should_suggest_upgrade(row),
        "spammy": learner.is_spammy(row),
        "high_engagement": learner.has_high_engagement(row),
        "contents": [
            {
                **content.model_dump(mode="json"),
                "explanation": learner.explain_adjustment(content),
                "ignored": learner.is_ignored(content),
                "high_engagement": learner.has_high_engagement(content),
            }
            for content in store.list_contents(app_id)
        ],
        "preferences": [p.model_dump(mode="json") for p in store.list_preferences(app_id)],
    }


@app.put("/apps/{app_id}/lock")
async def lock_app(app_id: str, request: LockRequest):
    """Pin an app's notifications to a category"""
    _require_ready()
    row = store.lock_app(app_id, request.category)
    return {"status": "locked", "app_id": app_id, "category": row.locked_category.value}


@app.delete("/apps/{app_id}/lock")
async def unlock_app(app_id: str):
    _require_ready()
    if store.get_app(app_id) is None:
        raise HTTPException(status_code=404, detail="App not found")
    store.unlock_app(app_id)
    return {"status": "unlocked", "app_id": app_id}


@app.put("/apps/{app_id}/content/{content_id}/preference")
async def set_preference(app_id: str, content_id: str, request: PreferenceRequest):
    """Set the manual preference for a sender/channel"""
    _require_ready()

    row = store.set_preference(app_id, content_id, request.preference_score, request.content_type)
    if request.is_locked is True:
        row = store.lock_preference(app_id, content_id)
    elif request.is_locked is False:
        row = store.unlock_preference(app_id, content_id)

    return row.model_dump(mode="json")


@app.get("/keywords")
async def list_keywords():
    _require_ready()
    rules = store.list_keywords()
    return {
        "count": len(rules),
        "keywords": [r.model_dump(mode="json") for r in rules],
    }


@app.post("/keywords", status_code=201)
async def add_keyword(request: KeywordRequest):
    """Add a custom keyword rule"""
    _require_ready()

    try:
        rule = store.add_keyword(request.keyword, request.type, request.score_modifier)
    except InvalidKeywordRule as e:
        raise HTTPException(status_code=400, detail=str(e))

    return rule.model_dump(mode="json")


@app.delete("/keywords/{keyword}")
async def delete_keyword(keyword: str):
    _require_ready()

    if not store.remove_keyword(keyword):
        raise HTTPException(status_code=404, detail="Keyword not found")

    return {"status": "deleted", "keyword": keyword.strip().lower()}


@app.post("/behavior/recalculate")
def recalculate_behavior():
    """Run the behavior updater over every row now"""
    _require_ready()
    if updater is None:
        raise HTTPException(status_code=409, detail="Behavior learning is disabled")
    return asdict(updater.run_once())


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server():
    """Run the Triage server"""
    import uvicorn

    config = load_config()

    print(f"[Triage] Starting server on {config.server.host}:{config.server.port}")
    uvicorn.run(
        "triage.server:app",
        host=config.server.host,
        port=config.server.port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
