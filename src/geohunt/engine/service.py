"""
Service wiring.

`HuntService` owns every long-lived object of one running game (store, index,
evaluator, engine, log buffer, timings) and is built once per process. The index
is empty until `start()` runs the first refresh; the API calls it before accepting
traffic.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from geohunt.catalog.loader import apply_seed, load_seed
from geohunt.config.settings import Settings
from geohunt.core.env import resolve_project_path
from geohunt.core.logging import LogBuffer
from geohunt.core.perf import PerfMonitor
from geohunt.engine.answers import AnswerEngine
from geohunt.engine.geo_index import GeoIndex
from geohunt.engine.proximity import ProximityEvaluator
from geohunt.engine.target_finder import TargetFinder
from geohunt.stores.base import TeamStore
from geohunt.stores.json_file import JsonFileStore
from geohunt.stores.memory import InMemoryStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> InMemoryStore | JsonFileStore:
    """Create the configured store backend, applying the seed file if one is set."""
    timeout = settings.store.timeout_seconds
    if settings.store.backend == "json":
        store: InMemoryStore | JsonFileStore = JsonFileStore(
            resolve_project_path(settings.store.path), timeout_seconds=timeout
        )
    else:
        store = InMemoryStore(timeout_seconds=timeout)

    # A json store persists across restarts; only seed it explicitly (`geohunt seed`).
    if settings.store.seed_path and isinstance(store, InMemoryStore):
        seed = load_seed(settings.store.seed_path, default_points=settings.game.default_points)
        apply_seed(store, seed)
        logger.info(
            "Seeded memory store: %s question(s), %s team(s)", len(seed.questions), len(seed.teams)
        )
    return store


@dataclass
class HuntService:
    settings: Settings
    store: InMemoryStore | JsonFileStore
    rng: random.Random = field(default_factory=random.Random)
    log_buffer: LogBuffer | None = None
    perf: PerfMonitor = field(default_factory=PerfMonitor)

    def __post_init__(self) -> None:
        self.proximity = ProximityEvaluator(self.settings.game.radius_m)
        self.index = GeoIndex(self.store)
        self.finder = TargetFinder(self.index, self.proximity)
        self.engine = AnswerEngine(
            index=self.index,
            proximity=self.proximity,
            teams=self.store,
            questions=self.store,
            game=self.settings.game,
            rng=self.rng,
        )
        if self.log_buffer is None:
            self.log_buffer = LogBuffer(self.settings.app.log_buffer_size)

    def start(self) -> int:
        """Build the initial index; raises RefreshError if it cannot be built."""
        return self.index.refresh()


def build_service(settings: Settings, *, store=None, rng: random.Random | None = None) -> HuntService:
    return HuntService(
        settings=settings,
        store=store if store is not None else build_store(settings),
        rng=rng or random.Random(),
    )


def leaderboard(teams: TeamStore) -> list[dict]:
    """Team standings ordered by points (desc), then name."""
    ranked = sorted(teams.list_teams(), key=lambda t: (-t.points, t.display_name().lower(), t.id))
    return [
        {"id": t.id, "name": t.display_name(), "points": t.points, "solved": len(t.answered_questions)}
        for t in ranked
    ]
