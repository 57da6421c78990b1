"""Blueprint module - Census syncs as code.

Declare syncs in YAML, plan them against the live workspace, apply, and
import existing syncs into a blueprint.
"""

from ..models import BlueprintMetadata, SyncBlueprint, SyncSpec
from .serialization import load_blueprint, save_blueprint
from .engine import PlanAction, PlanResult, apply_blueprint, import_sync, plan_blueprint, read_sync
from .diff import compute_plan, diff_sync, render_plan

__all__ = [
    "BlueprintMetadata",
    "SyncBlueprint",
    "SyncSpec",
    "load_blueprint",
    "save_blueprint",
    "PlanAction",
    "PlanResult",
    "apply_blueprint",
    "import_sync",
    "plan_blueprint",
    "read_sync",
    "compute_plan",
    "diff_sync",
    "render_plan",
]
