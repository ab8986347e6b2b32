from __future__ import annotations

import logging

from societybills.constants import now as _now
from societybills.engine import audit_trail, config_resolver
from societybills.exceptions import ConfigNotFoundError, DuplicateConfigError, PermissionDeniedError, ValidationError
from societybills.models.actor import Actor
from societybills.models.audit_log import AuditEventType
from societybills.models.billing_config import BillingConfig
from societybills.notifications.dispatch import NotificationDispatcher
from societybills.repositories.base import BillingConfigRepository
from societybills.services.audit_service import AuditService

logger = logging.getLogger(__name__)

CONFIG_LINK = "/dashboard/admin/billing-config"


class BillingConfigService:
    def __init__(
        self,
        repo: BillingConfigRepository,
        audit_service: AuditService | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self.repo = repo
        self.audit_service = audit_service
        self.dispatcher = dispatcher

    @staticmethod
    def _validate(config: BillingConfig) -> None:
        if not config.flat_types or any(not flat_type.strip() for flat_type in config.flat_types):
            raise ValidationError("All flat types are required.")
        missing = config.missing_rates()
        if missing:
            label, flat_type = missing[0]
            raise ValidationError(f"Amount for {label} ({flat_type}) required")

    def save_config(self, society_id: str, config: BillingConfig, actor: Actor) -> BillingConfig:
        """Store a new config version. Versions are never edited in place."""
        if not actor.can_edit:
            raise PermissionDeniedError(f"Actor {actor.id} may not change billing configs")
        if not society_id:
            raise ValidationError("societyId is required")
        self._validate(config)

        existing = self.repo.list_by_society(society_id)
        if any(cfg.effective_from == config.effective_from for cfg in existing):
            logger.warning(
                "Config save rejected: society=%s already has effective_from=%s", society_id, config.effective_from
            )
            raise DuplicateConfigError(config.effective_from.isoformat())

        config = config.model_copy(update={"id": "", "society_id": society_id, "updated_at": _now(), "audit_trail": []})
        config.audit_trail = audit_trail.record_created(
            [], actor, "Billing config created.", after=audit_trail.snapshot(config)
        )
        created = self.repo.create(config)
        logger.info(
            "Billing config created: id=%s society=%s effective_from=%s",
            created.id,
            society_id,
            created.effective_from,
        )

        if self.audit_service is not None:
            self.audit_service.safe_log(
                AuditEventType.BILLING_CONFIG_CREATE,
                actor=actor,
                society_id=society_id,
                entity_type="billing_config",
                entity_id=created.id,
                new_state=audit_trail.snapshot(created),
            )
        if self.dispatcher is not None:
            self.dispatcher.notify_admins(
                society_id,
                "billing",
                "Billing Configuration Changed",
                "The billing configuration has been updated.",
                CONFIG_LINK,
            )
        return created

    def list_configs(self, society_id: str) -> list[BillingConfig]:
        result = self.repo.list_by_society(society_id)
        logger.debug("Listed %d billing configs for society=%s", len(result), society_id)
        return result

    def get_config(self, society_id: str, period: str | None = None) -> BillingConfig | None:
        """Config effective for ``period``, or the latest version when no period is given."""
        configs = self.list_configs(society_id)
        if period is None:
            return config_resolver.latest(configs)
        try:
            return config_resolver.resolve(configs, period)
        except ConfigNotFoundError:
            return None
