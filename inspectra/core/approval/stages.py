"""Approval stage lists.

A stage list is an ordered tuple of approver assignments. Lists are
treated as values: every edit returns a new tuple with stage indexes
renumbered from zero.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple


def normalize_id(value: Any) -> Optional[str]:
    """Coerce a user identifier to its canonical string form.

    Stored documents mix numeric and string ids; both compare equal
    after normalization. Empty values map to None.
    """
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class ApprovalStage:
    """One step of an approval chain, bound to a single approver."""

    stage_index: int
    role_name: str
    approver_id: Optional[str]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], position: int = 0) -> "ApprovalStage":
        # Older documents carry a 1-based "stage" instead of "stageIndex"
        if "stageIndex" in data:
            index = int(data["stageIndex"])
        elif "stage" in data:
            index = int(data["stage"]) - 1
        else:
            index = position
        return cls(
            stage_index=index,
            role_name=data.get("roleName", ""),
            approver_id=normalize_id(data.get("approverId")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stageIndex": self.stage_index,
            "roleName": self.role_name,
            "approverId": self.approver_id,
        }


StageList = Tuple[ApprovalStage, ...]


def parse_stages(raw: Optional[Iterable[Dict[str, Any]]]) -> StageList:
    """Parse stored stages, ordered by stage index."""
    stages = [ApprovalStage.from_dict(item, position) for position, item in enumerate(raw or [])]
    return tuple(sorted(stages, key=lambda s: s.stage_index))


def dump_stages(stages: Iterable[ApprovalStage]) -> List[Dict[str, Any]]:
    return [stage.to_dict() for stage in stages]


def renumber(stages: Iterable[ApprovalStage]) -> StageList:
    return tuple(replace(stage, stage_index=i) for i, stage in enumerate(stages))


def add_stage(stages: StageList, role_name: str, approver_id: Any) -> StageList:
    """Append a stage at the end of the chain."""
    approver = normalize_id(approver_id)
    if not role_name or not approver:
        raise ValueError("A stage needs both a role name and an approver")
    return renumber(list(stages) + [ApprovalStage(len(stages), role_name, approver)])


def remove_stage(stages: StageList, stage_index: int) -> StageList:
    """Drop a stage and close the gap it leaves."""
    _check_index(stages, stage_index)
    return renumber(s for s in stages if s.stage_index != stage_index)


def set_stage_approver(stages: StageList, stage_index: int, approver_id: Any) -> StageList:
    _check_index(stages, stage_index)
    approver = normalize_id(approver_id)
    if not approver:
        raise ValueError("Approver is required")
    return tuple(
        replace(s, approver_id=approver) if s.stage_index == stage_index else s
        for s in stages
    )


def build_review_stages(reviewer_id: Any, approver_id: Any) -> StageList:
    """Two-stage chain used when approvers are assigned to a batch of reports."""
    stages: StageList = ()
    stages = add_stage(stages, "Reviewer", reviewer_id)
    return add_stage(stages, "Approver", approver_id)


def _check_index(stages: StageList, stage_index: int) -> None:
    if not any(s.stage_index == stage_index for s in stages):
        raise IndexError(f"No stage with index {stage_index}")
