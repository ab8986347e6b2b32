from __future__ import annotations

import logging

from societybills.exceptions import ConfigNotFoundError
from societybills.models.billing_config import BillingConfig
from societybills.periods import parse_period

logger = logging.getLogger(__name__)


def resolve(configs: list[BillingConfig], period: str) -> BillingConfig:
    """Pick the config with the latest ``effective_from`` not after the period start.

    Configs sharing the winning date resolve to the one saved last (latest in
    ``configs``).
    """
    period_start = parse_period(period)
    selected: BillingConfig | None = None
    for config in configs:
        if config.effective_from > period_start:
            continue
        if selected is None or config.effective_from >= selected.effective_from:
            selected = config
    if selected is None:
        logger.warning("No billing config effective for period=%s (candidates=%d)", period, len(configs))
        raise ConfigNotFoundError(period)
    logger.debug("Resolved config effective_from=%s for period=%s", selected.effective_from, period)
    return selected


def latest(configs: list[BillingConfig]) -> BillingConfig | None:
    selected: BillingConfig | None = None
    for config in configs:
        if selected is None or config.effective_from >= selected.effective_from:
            selected = config
    return selected
