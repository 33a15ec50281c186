"""
Solver configuration

Heuristic and propagation switches are bundled in an immutable value that is
passed to every solve() call, so two searches never share mutable flags.
"""
from dataclasses import dataclass, replace
from typing import Dict, Optional


@dataclass(frozen=True)
class SolverConfig:
    """Heuristics, propagation and budget for one search"""
    use_mrv: bool = False               # Minimum Remaining Values
    use_degree: bool = False            # Degree heuristic (tie-break under MRV)
    use_lcv: bool = False               # Least Constraining Value
    use_forward_checking: bool = False
    use_arc_consistency: bool = False   # AC-3 worklist propagation
    time_limit_ms: Optional[int] = None

    # Shuffle value order when LCV is off (used for puzzle generation)
    randomize: bool = False
    seed: Optional[int] = None

    # Restore changes from an undo trail instead of copying the grid per node
    use_trail: bool = False

    @property
    def propagates(self) -> bool:
        return self.use_forward_checking or self.use_arc_consistency

    def with_changes(self, **changes) -> "SolverConfig":
        return replace(self, **changes)

    def describe(self) -> str:
        """Short label such as 'MRV+Degree+FC'"""
        parts = []
        if self.use_mrv:
            parts.append("MRV")
        if self.use_degree:
            parts.append("Degree")
        if self.use_lcv:
            parts.append("LCV")
        if self.use_forward_checking:
            parts.append("FC")
        if self.use_arc_consistency:
            parts.append("AC3")
        return "+".join(parts) if parts else "BT Simple"


# Strong pruning for filling an empty board; AC-3 is too costly there
GENERATION_CONFIG = SolverConfig(
    use_mrv=True,
    use_degree=True,
    use_forward_checking=True,
    randomize=True,
)

HINT_CONFIG = SolverConfig(use_mrv=True, use_forward_checking=True)

COMPARISON_PRESETS: Dict[str, SolverConfig] = {
    "BT Simple": SolverConfig(),
    "MRV": SolverConfig(use_mrv=True),
    "MRV+FC": SolverConfig(use_mrv=True, use_forward_checking=True),
    "MRV+LCV": SolverConfig(use_mrv=True, use_lcv=True),
    "MRV+AC3": SolverConfig(use_mrv=True, use_arc_consistency=True),
}
