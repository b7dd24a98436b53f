"""歪み経路試験: コアデータクラス・経路生成.

1軸材料に歪み履歴を与え、応力・接線・感度の履歴を記録する
材料点試験の共通データ構造を定義する。
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from uniaxial_hardening.materials.parameters import PARAMETER_NAMES, resolve_parameter


# ---------------------------------------------------------------------------
# 試験コンフィグ
# ---------------------------------------------------------------------------
@dataclass
class StrainPathConfig:
    """歪み経路試験の定義.

    Attributes:
        E: ヤング率
        sigma_y: 初期降伏応力
        strain_path: 全歪みの履歴 (n_steps,)
        H_iso: 等方硬化係数
        H_kin: 移動硬化係数
        tag: 材料番号
        sensitivity_parameters: 感度を追跡するパラメータ名。
            並び順が勾配番号になる（例: ("E", "sigmaY")）。
        auto_resize: 感度配列の自動拡張
    """

    E: float
    sigma_y: float
    strain_path: np.ndarray
    H_iso: float = 0.0
    H_kin: float = 0.0
    tag: int = 1
    sensitivity_parameters: tuple[str, ...] = ()
    auto_resize: bool = False

    def __post_init__(self) -> None:
        self.strain_path = np.asarray(self.strain_path, dtype=float)
        if self.strain_path.ndim != 1:
            raise ValueError("strain_path は1次元配列でなければなりません")
        if len(self.strain_path) == 0:
            raise ValueError("strain_path は1点以上必要")
        if self.E + self.H_iso + self.H_kin == 0.0:
            raise ValueError(
                f"E + H_iso + H_kin は 0 以外: E={self.E}, H_iso={self.H_iso}, H_kin={self.H_kin}"
            )
        self.sensitivity_parameters = tuple(self.sensitivity_parameters)
        seen = set()
        for name in self.sensitivity_parameters:
            which = resolve_parameter(name)
            if which is None:
                raise ValueError(f"未知のパラメータ名: {name}（対応: {PARAMETER_NAMES}）")
            if which in seen:
                raise ValueError(f"パラメータが重複しています: {name}")
            seen.add(which)

    @property
    def yield_strain(self) -> float:
        """初期降伏歪み sigma_y / E."""
        return self.sigma_y / self.E


# ---------------------------------------------------------------------------
# 試験結果
# ---------------------------------------------------------------------------
@dataclass
class StrainPathResult:
    """歪み経路試験の結果.

    各配列は (n_steps,)。感度は各ステップの収束時点（コミット前）の値。

    Attributes:
        config: 元の試験コンフィグ
        strain: 全歪み
        stress: 応力
        tangent: consistent tangent
        plastic_strain: コミット後の塑性歪み
        hardening: コミット後の硬化変数
        plastic: 塑性流動が生じたステップ
        stress_sensitivity: {パラメータ名: d(sigma)/d(theta)}
        tangent_sensitivity: {パラメータ名: d(D)/d(theta)}
    """

    config: StrainPathConfig
    strain: np.ndarray
    stress: np.ndarray
    tangent: np.ndarray
    plastic_strain: np.ndarray
    hardening: np.ndarray
    plastic: np.ndarray
    stress_sensitivity: dict[str, np.ndarray] = field(default_factory=dict)
    tangent_sensitivity: dict[str, np.ndarray] = field(default_factory=dict)

    @property
    def n_steps(self) -> int:
        return len(self.strain)

    @property
    def n_plastic(self) -> int:
        """塑性ステップ数."""
        return int(np.count_nonzero(self.plastic))

    @property
    def strain_work(self) -> float:
        """応力仕事 ∫ sigma d(eps)（台形則）.

        閉じた歪みサイクルでは1サイクルあたりの散逸エネルギーの総和になる。
        """
        if self.n_steps < 2:
            return 0.0
        return float(np.sum(0.5 * (self.stress[1:] + self.stress[:-1]) * np.diff(self.strain)))


# ---------------------------------------------------------------------------
# 歪み経路の生成
# ---------------------------------------------------------------------------
def generate_cyclic_strain_path(
    amplitude: float,
    n_cycles: int = 1,
    n_points: int = 10,
) -> np.ndarray:
    """0 から始まる対称三角波の歪み経路.

    1サイクル: 0 → +amplitude → -amplitude → 0

    Args:
        amplitude: 歪み振幅（正値）
        n_cycles: サイクル数
        n_points: 1/4 サイクルあたりの分割数

    Returns:
        (4 * n_points * n_cycles + 1,) 歪み配列
    """
    if amplitude <= 0:
        raise ValueError(f"amplitude は正値: {amplitude}")
    if n_cycles < 1 or n_points < 1:
        raise ValueError(f"n_cycles, n_points は1以上: n_cycles={n_cycles}, n_points={n_points}")

    rise = np.linspace(0.0, amplitude, n_points + 1)[1:]
    fall = np.linspace(amplitude, -amplitude, 2 * n_points + 1)[1:]
    back = np.linspace(-amplitude, 0.0, n_points + 1)[1:]
    cycle = np.concatenate([rise, fall, back])
    return np.concatenate([[0.0], np.tile(cycle, n_cycles)])
