"""Construct the enabled feature modules and register their patterns."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from core.config import DEFAULT_RATE_LIMITS, RateLimitRule
from core.dispatch import DispatchRegistry
from core.pending import PendingActionStore
from core.plugins import PluginFilter
from core.ports import BackupStore, ChatPort, FactStore, KarmaStore
from core.rate_limit import RateLimiter
from features.base import Feature
from features.conversions import ConversionsFeature
from features.factoids import FactoidsFeature
from features.help import HelpFeature
from features.karma import KarmaFeature

LOGGER = logging.getLogger(__name__)

# Load order is also the order the router delivers messages in.
AVAILABLE_FEATURES = ("help", "karma", "factoids", "conversions")


def load_features(
    plugins: PluginFilter,
    registry: DispatchRegistry,
    chat: ChatPort,
    *,
    facts: FactStore,
    karma: KarmaStore,
    backups: BackupStore,
    pending: PendingActionStore,
    limiter: Optional[RateLimiter] = None,
    rate_limits: Optional[Dict[str, RateLimitRule]] = None,
    bot_username: Optional[str] = None,
) -> List[Feature]:
    """Build every enabled feature and register its rules with ``registry``."""

    limits = rate_limits or DEFAULT_RATE_LIMITS
    factories = {
        "help": lambda: HelpFeature(chat, bot_username=bot_username),
        "karma": lambda: KarmaFeature(chat, karma, limiter=limiter, limit=limits.get("karma")),
        "factoids": lambda: FactoidsFeature(
            chat,
            facts,
            pending,
            backups,
            limiter=limiter,
            limit=limits.get("factoids"),
        ),
        "conversions": lambda: ConversionsFeature(chat),
    }

    features: List[Feature] = []
    for name in AVAILABLE_FEATURES:
        if not plugins.is_enabled(name):
            LOGGER.info("Plugin %s disabled", name)
            continue
        feature = factories[name]()
        feature.setup(registry)
        features.append(feature)

    LOGGER.info("%s plugins loaded, %s patterns registered", len(features), len(registry))
    return features
