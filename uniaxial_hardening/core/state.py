"""状態変数（履歴変数）の管理.

1軸硬化材料の return mapping で更新される内部変数を保持する。
収束済み（committed）状態と試行（trial）状態を分けて持ち、
試行状態は常に収束済み状態 + 新しい歪みから再計算される。
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class HardeningState:
    """1軸硬化材料の履歴変数.

    Attributes:
        eps_p: 塑性歪み
        alpha: 累積塑性歪み（等方硬化内部変数、単調非減少）
    """

    eps_p: float = 0.0
    alpha: float = 0.0

    def copy(self) -> HardeningState:
        """深いコピーを返す."""
        return HardeningState(eps_p=self.eps_p, alpha=self.alpha)


@dataclass
class TrialState:
    """試行状態.

    set_trial_strain ごとに収束済み状態から再計算される。

    Attributes:
        strain: 全歪み
        stress: 応力
        tangent: consistent tangent
        history: 試行履歴変数
    """

    strain: float = 0.0
    stress: float = 0.0
    tangent: float = 0.0
    history: HardeningState = field(default_factory=HardeningState)

    def copy(self) -> TrialState:
        """深いコピーを返す."""
        return TrialState(
            strain=self.strain,
            stress=self.stress,
            tangent=self.tangent,
            history=self.history.copy(),
        )
