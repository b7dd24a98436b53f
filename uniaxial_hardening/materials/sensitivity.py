"""直接微分法（DDM）による1軸硬化材料の感度計算.

closed-form の return mapping を、活性パラメータ theta について
そのまま微分する。符号 sign(xi) は歪みについて区分的に一定なので
定数として扱う。

  弾性試行応力:  d(sigma_e) = E' (eps - eps_p_c) + E (eps' - eps_p_c')
  背応力:        d(beta_c)  = H_kin' eps_p_c + H_kin eps_p_c'
  降伏関数:      f' = (d(sigma_e) - d(beta_c)) sign - sigma_y' - H_iso' alpha_c - H_iso alpha_c'
  塑性乗数:      dGamma' = (f' (E+H_kin+H_iso) - f (E'+H_kin'+H_iso')) / (E+H_kin+H_iso)^2
                 （f < 0 の帯では dGamma = 0 なので dGamma' = 0）
  応力:          sigma' = d(sigma_e) - dGamma' E sign - dGamma E' sign

履歴変数の感度（eps_p_c', alpha_c'）は勾配番号ごとに SensitivityHistory に
累積保持する。

参考文献:
  - Kleiber et al. (1997) "Parameter Sensitivity in Nonlinear Mechanics"
  - Conte et al. (2003) "Consistent finite-element response sensitivity analysis"
"""

from __future__ import annotations

import numpy as np

from uniaxial_hardening.core.results import ElasticPredictor, HistorySensitivity
from uniaxial_hardening.core.state import HardeningState
from uniaxial_hardening.materials.parameters import HardeningParameter, ParameterSeeds


class SensitivityHistory:
    """履歴変数感度の累積コンテナ.

    (2, n_grads) 配列で、行 0 が塑性歪み感度、行 1 が硬化変数感度、
    列が勾配番号に対応する。初回の commit_sensitivity で遅延確保される。

    サイズ規約:
      - get() は未確保・範囲外の列を 0 として読む。
      - accumulate() は範囲外の列を無視して False を返す。
      - resize() は列数を増やすのみ（既存の列は保持、新しい列は 0）。

    Args:
        n_grads: 初期列数（0 = 未確保）
    """

    def __init__(self, n_grads: int = 0) -> None:
        self._values: np.ndarray | None = None
        if n_grads > 0:
            self.allocate(n_grads)

    @property
    def is_allocated(self) -> bool:
        return self._values is not None

    @property
    def n_grads(self) -> int:
        """確保済みの列数."""
        return 0 if self._values is None else self._values.shape[1]

    @property
    def values(self) -> np.ndarray:
        """(2, n_grads) 配列のコピー."""
        if self._values is None:
            return np.zeros((2, 0))
        return self._values.copy()

    def allocate(self, n_grads: int) -> None:
        """(2, n_grads) のゼロ配列を確保する."""
        self._values = np.zeros((2, max(int(n_grads), 0)))

    def resize(self, n_grads: int) -> None:
        """列数を n_grads まで増やす."""
        if self._values is None:
            self.allocate(n_grads)
            return
        n_old = self._values.shape[1]
        if n_grads <= n_old:
            return
        grown = np.zeros((2, int(n_grads)))
        grown[:, :n_old] = self._values
        self._values = grown

    def contains(self, grad_index: int) -> bool:
        return 0 <= grad_index < self.n_grads

    def get(self, grad_index: int) -> HistorySensitivity:
        """勾配番号 grad_index の履歴感度を返す（範囲外は 0）."""
        if not self.contains(grad_index):
            return HistorySensitivity(eps_p=0.0, alpha=0.0)
        col = self._values[:, grad_index]
        return HistorySensitivity(eps_p=float(col[0]), alpha=float(col[1]))

    def accumulate(self, grad_index: int, d_eps_p: float, d_alpha: float) -> bool:
        """履歴感度に増分を加算する.

        Returns:
            加算したら True、範囲外で無視したら False
        """
        if not self.contains(grad_index):
            return False
        self._values[0, grad_index] += d_eps_p
        self._values[1, grad_index] += d_alpha
        return True

    def zero(self) -> None:
        """確保済みなら全要素を 0 にする（解放はしない）."""
        if self._values is not None:
            self._values[:] = 0.0


def _trial_stress_sensitivity(
    strain: float,
    committed: HardeningState,
    E: float,
    seeds: ParameterSeeds,
    hist: HistorySensitivity,
    strain_sensitivity: float,
) -> float:
    return seeds.E * (strain - committed.eps_p) + E * (strain_sensitivity - hist.eps_p)


def _d_gamma_sensitivity(
    predictor: ElasticPredictor,
    d_trial_stress: float,
    committed: HardeningState,
    *,
    E: float,
    H_iso: float,
    H_kin: float,
    seeds: ParameterSeeds,
    hist: HistorySensitivity,
) -> float:
    # 降伏面内側の帯では dGamma = 0 に切り捨てられる
    if predictor.f < 0.0:
        return 0.0
    sign = predictor.sign
    ehk = E + H_kin + H_iso
    d_back_stress = seeds.H_kin * committed.eps_p + H_kin * hist.eps_p
    d_f = (
        (d_trial_stress - d_back_stress) * sign
        - seeds.sigma_y
        - seeds.H_iso * committed.alpha
        - H_iso * hist.alpha
    )
    return (d_f * ehk - predictor.f * (seeds.E + seeds.H_kin + seeds.H_iso)) / (ehk * ehk)


def stress_sensitivity(
    predictor: ElasticPredictor,
    strain: float,
    committed: HardeningState,
    *,
    E: float,
    H_iso: float,
    H_kin: float,
    seeds: ParameterSeeds,
    hist: HistorySensitivity,
    strain_sensitivity: float = 0.0,
) -> float:
    """応力の感度 d(sigma)/d(theta).

    Args:
        predictor: 同じ歪み・収束済み状態に対する弾性予測子
        strain: 試行全歪み
        committed: 収束済み履歴変数
        E, H_iso, H_kin: 材料定数
        seeds: 活性パラメータに対する材料定数の陽な微分
        hist: 収束済み履歴変数の感度
        strain_sensitivity: 全歪みの感度（条件付き感度では 0）

    Returns:
        応力感度
    """
    d_trial = _trial_stress_sensitivity(strain, committed, E, seeds, hist, strain_sensitivity)
    if not predictor.plastic:
        return d_trial

    sign = predictor.sign
    d_gamma = max(predictor.f, 0.0) / (E + H_iso + H_kin)
    dd_gamma = _d_gamma_sensitivity(
        predictor, d_trial, committed, E=E, H_iso=H_iso, H_kin=H_kin, seeds=seeds, hist=hist
    )
    return d_trial - dd_gamma * E * sign - d_gamma * seeds.E * sign


def history_sensitivity_increment(
    predictor: ElasticPredictor,
    strain: float,
    committed: HardeningState,
    *,
    E: float,
    H_iso: float,
    H_kin: float,
    seeds: ParameterSeeds,
    hist: HistorySensitivity,
    strain_sensitivity: float,
) -> HistorySensitivity:
    """1ステップで生じる履歴変数感度の増分.

    弾性ステップでは履歴が変化しないため増分は 0。

    Returns:
        (d(eps_p) 増分, d(alpha) 増分)
    """
    if not predictor.plastic:
        return HistorySensitivity(eps_p=0.0, alpha=0.0)

    d_trial = _trial_stress_sensitivity(strain, committed, E, seeds, hist, strain_sensitivity)
    dd_gamma = _d_gamma_sensitivity(
        predictor, d_trial, committed, E=E, H_iso=H_iso, H_kin=H_kin, seeds=seeds, hist=hist
    )
    return HistorySensitivity(eps_p=dd_gamma * predictor.sign, alpha=dd_gamma)


def tangent_sensitivity(
    plastic: bool,
    active: HardeningParameter,
    *,
    E: float,
    H_iso: float,
    H_kin: float,
) -> float:
    """consistent tangent の感度.

    弾性: D = E → E に対してのみ 1。
    塑性: D = E H / (E + H),  H = H_kin + H_iso。降伏応力には依存しない。
    """
    if not plastic:
        return 1.0 if active == HardeningParameter.E else 0.0

    ehk = E + H_iso + H_kin
    h = H_kin + H_iso
    if active == HardeningParameter.E:
        return (ehk * h - E * h) / (ehk * ehk)
    if active in (HardeningParameter.H_KIN, HardeningParameter.H_ISO):
        return (ehk * E - E * h) / (ehk * ehk)
    return 0.0


def initial_tangent_sensitivity(active: HardeningParameter) -> float:
    """初期（弾性）接線の感度."""
    return 1.0 if active == HardeningParameter.E else 0.0
