"""メソッド戻り値の型定義.

return mapping と感度計算の結果を NamedTuple で定義する。
"""

from __future__ import annotations

from typing import NamedTuple

from uniaxial_hardening.core.state import HardeningState


class ReturnMappingResult(NamedTuple):
    """Return mapping の結果.

    Attributes:
        stress: 応力
        tangent: consistent tangent
        state_new: 更新後の履歴変数（弾性時は入力状態のコピー）
        plastic: 塑性修正が行われたか
        d_gamma: consistency parameter（弾性時 0）
    """

    stress: float
    tangent: float
    state_new: HardeningState
    plastic: bool
    d_gamma: float = 0.0


class HistorySensitivity(NamedTuple):
    """1つの勾配番号に対する履歴変数の感度.

    Attributes:
        eps_p: 塑性歪みの感度
        alpha: 硬化変数の感度
    """

    eps_p: float
    alpha: float


class ElasticPredictor(NamedTuple):
    """弾性予測子（return mapping の Step 1-2）.

    Attributes:
        stress: 弾性試行応力 E * (strain - eps_p_c)
        xi: 背応力を差し引いた相対応力
        f: 降伏関数値
        plastic: 塑性修正が必要か
    """

    stress: float
    xi: float
    f: float
    plastic: bool

    @property
    def sign(self) -> float:
        """相対応力の符号（0 は +1 とする）."""
        return -1.0 if self.xi < 0.0 else 1.0
