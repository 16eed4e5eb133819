"""
Workflows Module - Business Logic Coordination
==============================================

The scheduled supply update: fetch, merge, roll up, validate, persist.
"""

from stablecoin_supply.orchestration.workflows.update_workflow import (
    SupplyUpdateWorkflow,
    WorkflowResult,
)

__all__ = [
    "SupplyUpdateWorkflow",
    "WorkflowResult",
]
