"""Permission evaluator: plan entitlement AND role allowance.

A role may perform an action under a plan only when the plan has an enabled
``plan_action_permissions`` row for it *and* the role has an allowed
``role_action_permissions`` row for the same plan. The plan check runs first
and a missing or disabled plan row ends evaluation: the allowance table is not
read. Role priority is never consulted.

Lookup failures are logged and reported as a deny; nothing raised by the
database reaches the caller.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.exceptions import EvaluationFailure
from backend.models import PlanActionPermission, RoleActionPermission

logger = logging.getLogger("saas_permissions.evaluator")


def _plan_entitlement(db: Session, plan_id: int, action_id: int) -> Optional[bool]:
    try:
        return db.query(PlanActionPermission.enabled).filter(
            PlanActionPermission.plan_id == plan_id,
            PlanActionPermission.action_id == action_id,
        ).scalar()
    except SQLAlchemyError as e:
        raise EvaluationFailure(f"plan entitlement lookup failed: {e}") from e


def _role_allowance(db: Session, plan_id: int, role_id: int, action_id: int) -> Optional[bool]:
    try:
        return db.query(RoleActionPermission.allowed).filter(
            RoleActionPermission.plan_id == plan_id,
            RoleActionPermission.role_id == role_id,
            RoleActionPermission.action_id == action_id,
        ).scalar()
    except SQLAlchemyError as e:
        raise EvaluationFailure(f"role allowance lookup failed: {e}") from e


def is_action_enabled_for_plan(db: Session, plan_id: int, action_id: int) -> bool:
    """Plan-only half of the check, for feature gates that ignore the role."""
    try:
        return bool(_plan_entitlement(db, plan_id, action_id))
    except EvaluationFailure:
        logger.exception(
            "Plan entitlement check failed (plan=%s action=%s); denying", plan_id, action_id,
        )
        _reset_session(db)
        return False


def evaluate_permission(db: Session, plan_id: int, role_id: int, action_id: int) -> Optional[bool]:
    """Evaluate without collapsing failures: ``None`` means the lookup failed.

    The failure has already been logged and the session reset. Callers that
    cache decisions must not store a ``None`` outcome as a deny.
    """
    try:
        if not _plan_entitlement(db, plan_id, action_id):
            logger.debug("Denied: action %s not entitled by plan %s", action_id, plan_id)
            return False
        allowed = bool(_role_allowance(db, plan_id, role_id, action_id))
    except EvaluationFailure:
        logger.exception(
            "Permission check failed (plan=%s role=%s action=%s); denying",
            plan_id, role_id, action_id,
        )
        _reset_session(db)
        return None

    if not allowed:
        logger.debug("Denied: role %s not allowed action %s in plan %s", role_id, action_id, plan_id)
    return allowed


def can_role_perform_action_in_plan(db: Session, plan_id: int, role_id: int, action_id: int) -> bool:
    """Return True only if the plan entitles the action and the role is allowed it."""
    return bool(evaluate_permission(db, plan_id, role_id, action_id))


def _reset_session(db: Session) -> None:
    """Roll back the caller's session after a failed lookup.

    This discards everything pending in that session, not just the failed
    statement. Run permission checks before staging writes, or on a session
    that holds none.
    """
    try:
        db.rollback()
    except SQLAlchemyError:
        logger.warning("Session rollback after failed permission lookup also failed")
