"""
Plan execution — applies a WritePlan to a vault client, one step at a time.

A rename is two independent vault calls with no transaction around them. The
new secret is written first and the old one deleted only after the vault has
acknowledged the write, so a failure in between leaves the secret present
under its new name. That half-done state is reported as PartialPlanFailure;
nothing is retried here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from vaultexplorer.secrets.errors import PartialPlanFailure
from vaultexplorer.secrets.models import (
    DeleteSecret,
    SecretAttributes,
    SecretRecord,
    SetSecret,
    UpdateSecret,
    WriteOperation,
    WritePlan,
)

logger = logging.getLogger(__name__)


class VaultClient(Protocol):
    """The subset of a vault client a plan needs."""

    def set_secret(
        self,
        name: str,
        value: str,
        *,
        tags: Mapping[str, str],
        content_type: str,
        attributes: SecretAttributes,
    ) -> SecretRecord: ...

    def update_secret(
        self,
        name: str,
        *,
        tags: Mapping[str, str],
        content_type: str | None,
        attributes: SecretAttributes,
    ) -> SecretRecord: ...

    def delete_secret(self, name: str) -> None: ...


@dataclass
class PlanResult:
    """Outcome of a fully applied plan."""

    plan: WritePlan
    record: SecretRecord | None = None  # secret as written; None for a pure delete
    completed: list[WriteOperation] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)


def _apply(client: VaultClient, op: WriteOperation) -> SecretRecord | None:
    if isinstance(op, SetSecret):
        return client.set_secret(
            op.name,
            op.raw_value,
            tags=op.tags,
            content_type=op.content_type,
            attributes=op.attributes,
        )
    if isinstance(op, UpdateSecret):
        return client.update_secret(
            op.name, tags=op.tags, content_type=op.content_type, attributes=op.attributes
        )
    if isinstance(op, DeleteSecret):
        client.delete_secret(op.name)
        return None
    raise TypeError(f"Unknown write operation: {op!r}")


def execute_plan(client: VaultClient, plan: WritePlan) -> PlanResult:
    """Run every operation of ``plan`` in order.

    Raises:
        PartialPlanFailure: a later step failed after an earlier one was applied.
        Exception: whatever the client raised, if the first step failed (nothing was written).
    """
    result = PlanResult(plan=plan)
    for step, op in enumerate(plan.operations, start=1):
        logger.info("Plan %s step %d/%d: %s %s", plan.action, step, len(plan), op.kind, op.name)
        try:
            record = _apply(client, op)
        except Exception as e:
            if not result.completed:
                logger.warning("Plan %s failed before any change: %s", plan.action, e)
                raise
            logger.error(
                "Plan %s left partially applied: %s %s failed: %s",
                plan.action,
                op.kind,
                op.name,
                e,
            )
            raise PartialPlanFailure(list(result.completed), op, result.record, e) from e

        result.completed.append(op)
        if record is not None:
            result.record = record
        if isinstance(op, DeleteSecret):
            result.deleted.append(op.name)
    return result
