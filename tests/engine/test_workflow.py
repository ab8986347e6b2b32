from datetime import datetime, timedelta

import pytest

from societybills.constants import APP_TZ
from societybills.engine import workflow
from societybills.exceptions import InvalidTransitionError, PermissionDeniedError
from societybills.models.actor import SYSTEM_ACTOR
from societybills.models.bill import ApprovalStatus
from tests.conftest import ADMIN, EDITOR, RESIDENT

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=APP_TZ)


class TestAllowedTransitions:
    def test_draft(self):
        assert workflow.allowed_transitions(ApprovalStatus.DRAFT) == [ApprovalStatus.PENDING_APPROVAL]

    def test_pending(self):
        assert set(workflow.allowed_transitions(ApprovalStatus.PENDING_APPROVAL)) == {
            ApprovalStatus.APPROVED,
            ApprovalStatus.REJECTED,
        }

    @pytest.mark.parametrize("status", [ApprovalStatus.REJECTED, ApprovalStatus.PUBLISHED])
    def test_terminal(self, status):
        assert workflow.allowed_transitions(status) == []


class TestTransition:
    def test_full_path_appends_history(self):
        history = workflow.seed_history(EDITOR, T0, "Bill generated as draft.")
        history = workflow.transition(ApprovalStatus.DRAFT, history, ApprovalStatus.PENDING_APPROVAL, EDITOR, at=T0)
        history = workflow.transition(
            ApprovalStatus.PENDING_APPROVAL, history, ApprovalStatus.APPROVED, ADMIN, notes="ok", at=T0
        )
        history = workflow.transition(ApprovalStatus.APPROVED, history, ApprovalStatus.PUBLISHED, EDITOR, at=T0)

        assert [entry.status for entry in history] == [
            ApprovalStatus.DRAFT,
            ApprovalStatus.PENDING_APPROVAL,
            ApprovalStatus.APPROVED,
            ApprovalStatus.PUBLISHED,
        ]
        assert history[2].changed_by == ADMIN.id
        assert history[2].notes == "ok"

    def test_does_not_mutate_input(self):
        history = workflow.seed_history(EDITOR, T0)
        workflow.transition(ApprovalStatus.DRAFT, history, ApprovalStatus.PENDING_APPROVAL, EDITOR, at=T0)
        assert len(history) == 1

    def test_draft_to_approved_is_invalid(self):
        with pytest.raises(InvalidTransitionError):
            workflow.transition(ApprovalStatus.DRAFT, [], ApprovalStatus.APPROVED, ADMIN)

    def test_published_is_terminal(self):
        with pytest.raises(InvalidTransitionError):
            workflow.transition(ApprovalStatus.PUBLISHED, [], ApprovalStatus.DRAFT, ADMIN)

    def test_editor_cannot_approve(self):
        with pytest.raises(PermissionDeniedError):
            workflow.transition(ApprovalStatus.PENDING_APPROVAL, [], ApprovalStatus.APPROVED, EDITOR)

    def test_system_cannot_approve(self):
        with pytest.raises(PermissionDeniedError):
            workflow.transition(ApprovalStatus.PENDING_APPROVAL, [], ApprovalStatus.REJECTED, SYSTEM_ACTOR)

    def test_resident_cannot_submit(self):
        with pytest.raises(PermissionDeniedError):
            workflow.transition(ApprovalStatus.DRAFT, [], ApprovalStatus.PENDING_APPROVAL, RESIDENT)

    def test_timestamp_never_goes_backwards(self):
        history = workflow.seed_history(EDITOR, T0)
        history = workflow.transition(
            ApprovalStatus.DRAFT, history, ApprovalStatus.PENDING_APPROVAL, EDITOR, at=T0 - timedelta(hours=1)
        )
        assert history[-1].changed_at == T0
