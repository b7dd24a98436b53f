"""1次元弾塑性構成則（線形等方硬化 + 線形移動硬化）.

硬化がすべて線形なので return mapping は closed-form で解ける（局所反復なし）。
ホスト FE 解析から見た状態遷移（試行 → 収束 → コミット）と、
直接微分法（DDM）による感度計算を HardeningMaterial にまとめる。

Return mapping:
  sigma_e = E (eps - eps_p_c)
  xi      = sigma_e - H_kin eps_p_c
  f       = |xi| - (sigma_y + H_iso alpha_c)
  f <= -eps_mach E  → 弾性（sigma = sigma_e, D = E）
  それ以外          → dGamma = max(f, 0) / (E + H_iso + H_kin)
                      sigma  = sigma_e - dGamma E sign(xi)
                      D      = E (H_kin + H_iso) / (E + H_kin + H_iso)

参考文献:
  - Simo & Hughes (1998) "Computational Inelasticity", Ch.1
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

import numpy as np

from uniaxial_hardening.core.parameter import ParameterProtocol
from uniaxial_hardening.core.results import ElasticPredictor, ReturnMappingResult
from uniaxial_hardening.core.state import HardeningState, TrialState
from uniaxial_hardening.io.transfer import recv_self, send_self
from uniaxial_hardening.materials.parameters import (
    HardeningParameter,
    ParameterSeeds,
    parameter_from_id,
    resolve_parameter,
)
from uniaxial_hardening.materials.sensitivity import (
    SensitivityHistory,
    history_sensitivity_increment,
    initial_tangent_sensitivity,
    stress_sensitivity,
    tangent_sensitivity,
)
from uniaxial_hardening.output.report import PrintFlag, print_material

if TYPE_CHECKING:
    from uniaxial_hardening.io.transfer import ChannelProtocol

LOG = logging.getLogger(__name__)

DBL_EPSILON = float(np.finfo(float).eps)


@dataclass
class IsotropicHardening:
    """線形等方硬化パラメータ.

    降伏応力: sigma_y(alpha) = sigma_y0 + H_iso * alpha

    Attributes:
        sigma_y0: 初期降伏応力
        H_iso: 等方硬化係数
    """

    sigma_y0: float
    H_iso: float = 0.0

    def sigma_y(self, alpha: float) -> float:
        """降伏応力を返す."""
        return self.sigma_y0 + self.H_iso * alpha


@dataclass
class KinematicHardening:
    """線形移動硬化パラメータ.

    背応力: beta(eps_p) = H_kin * eps_p

    Attributes:
        H_kin: 移動硬化係数
    """

    H_kin: float = 0.0

    def back_stress(self, eps_p: float) -> float:
        """背応力を返す."""
        return self.H_kin * eps_p


def elastic_predictor(
    strain: float,
    state: HardeningState,
    E: float,
    iso: IsotropicHardening,
    kin: KinematicHardening,
) -> ElasticPredictor:
    """弾性試行応力と降伏判定.

    f <= -eps_mach * E を弾性とする。-eps_mach * E < f <= 0 の帯（降伏面の
    丸め誤差の幅）は塑性側に分類されるが、return mapping で dGamma = max(f, 0) / (E + H)
    と切り捨てるので応力・履歴は弾性解と一致する（接線は塑性側）。
    """
    sigma_trial = E * (strain - state.eps_p)
    xi_trial = sigma_trial - kin.back_stress(state.eps_p)
    f_trial = abs(xi_trial) - iso.sigma_y(state.alpha)
    return ElasticPredictor(
        stress=sigma_trial,
        xi=xi_trial,
        f=f_trial,
        plastic=f_trial > -DBL_EPSILON * E,
    )


def return_mapping(
    strain: float,
    state: HardeningState,
    E: float,
    iso: IsotropicHardening,
    kin: KinematicHardening,
) -> ReturnMappingResult:
    """Return mapping アルゴリズム（closed-form）.

    Args:
        strain: 全歪み epsilon
        state: 前ステップの収束した履歴変数（変更されない）
        E: ヤング率
        iso: 等方硬化パラメータ
        kin: 移動硬化パラメータ

    Returns:
        ReturnMappingResult: (応力, consistent tangent, 新状態, 塑性フラグ, dGamma)
    """
    pred = elastic_predictor(strain, state, E, iso, kin)

    if not pred.plastic:
        return ReturnMappingResult(
            stress=pred.stress,
            tangent=E,
            state_new=state.copy(),
            plastic=False,
        )

    H = iso.H_iso + kin.H_kin
    d_gamma = max(pred.f, 0.0) / (E + H)
    sign_xi = pred.sign

    state_new = HardeningState(
        eps_p=state.eps_p + d_gamma * sign_xi,
        alpha=state.alpha + d_gamma,
    )
    return ReturnMappingResult(
        stress=pred.stress - d_gamma * E * sign_xi,
        tangent=E * H / (E + H),
        state_new=state_new,
        plastic=True,
        d_gamma=d_gamma,
    )


def yield_function(
    stress: float,
    state: HardeningState,
    iso: IsotropicHardening,
    kin: KinematicHardening,
) -> float:
    """任意の応力・履歴変数に対する降伏関数値."""
    return abs(stress - kin.back_stress(state.eps_p)) - iso.sigma_y(state.alpha)


class HardeningMaterial:
    """線形等方 + 線形移動硬化の1軸材料.

    試行状態は常に「収束済み状態 + 新しい歪み」から再計算されるため、
    revert_to_last_commit は何もしない。ホストは1インスタンスへの呼び出しを
    直列化すること（内部ロックなし）。

    Args:
        tag: 材料番号
        E: ヤング率
        sigma_y: 初期降伏応力
        H_iso: 等方硬化係数
        H_kin: 移動硬化係数
        auto_resize: True なら範囲外の勾配番号で感度配列を拡張する
            （False: 範囲外の commit_sensitivity は無視）
        logger: 診断出力先（None = モジュールロガー）

    Note:
        E + H_iso + H_kin = 0 は呼び出し側の責任で避けること（検査しない）。
    """

    type_name = "HardeningMaterial"

    def __init__(
        self,
        tag: int,
        E: float,
        sigma_y: float,
        H_iso: float,
        H_kin: float,
        *,
        auto_resize: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self.tag = int(tag)
        self.db_tag = 0
        self.E = float(E)
        self.iso = IsotropicHardening(sigma_y0=float(sigma_y), H_iso=float(H_iso))
        self.kin = KinematicHardening(H_kin=float(H_kin))
        self.auto_resize = auto_resize
        self.logger = logger if logger is not None else LOG

        self.active_parameter = HardeningParameter.NONE
        self.sensitivity_history = SensitivityHistory()
        self.committed = HardeningState()
        self.trial = TrialState()
        self.revert_to_start()

    @classmethod
    def blank(cls, *, logger: logging.Logger | None = None) -> HardeningMaterial:
        """受信用の空インスタンス（tag = 0、全パラメータ 0）."""
        return cls(0, 0.0, 0.0, 0.0, 0.0, logger=logger)

    @property
    def sigma_y(self) -> float:
        return self.iso.sigma_y0

    @property
    def H_iso(self) -> float:
        return self.iso.H_iso

    @property
    def H_kin(self) -> float:
        return self.kin.H_kin

    # ------------------------------------------------------------------
    # 状態更新
    # ------------------------------------------------------------------

    def set_trial_strain(self, strain: float, strain_rate: float = 0.0) -> int:
        """試行歪みを設定し、試行応力・接線・履歴を更新する.

        直前の試行歪みと同じ（差が機械イプシロン未満）なら何もしない。
        収束判定で同じ反復値が繰り返し渡されるため。

        Args:
            strain: 全歪み
            strain_rate: 歪み速度（速度非依存のため未使用）

        Returns:
            0
        """
        if abs(self.trial.strain - strain) < DBL_EPSILON:
            return 0

        result = return_mapping(strain, self.committed, self.E, self.iso, self.kin)
        self.trial = TrialState(
            strain=strain,
            stress=result.stress,
            tangent=result.tangent,
            history=result.state_new,
        )
        return 0

    def get_strain(self) -> float:
        return self.trial.strain

    def get_stress(self) -> float:
        return self.trial.stress

    def get_tangent(self) -> float:
        return self.trial.tangent

    def get_initial_tangent(self) -> float:
        return self.E

    def commit_state(self) -> int:
        """試行履歴を収束済み履歴にコピーする."""
        self.committed = self.trial.history.copy()
        return 0

    def revert_to_last_commit(self) -> int:
        # 試行状態は次の set_trial_strain で収束済み状態から再計算される
        return 0

    def revert_to_start(self) -> int:
        """履歴・試行状態・感度を初期化する（生成直後の状態に戻す）."""
        self.committed = HardeningState()
        self.trial = TrialState(strain=0.0, stress=0.0, tangent=self.E)
        self.sensitivity_history.zero()
        return 0

    def get_copy(self) -> HardeningMaterial:
        """パラメータと収束済み・試行状態を複製した独立インスタンス.

        感度配列と活性パラメータは複製しない。
        """
        the_copy = HardeningMaterial(
            self.tag,
            self.E,
            self.sigma_y,
            self.H_iso,
            self.H_kin,
            auto_resize=self.auto_resize,
            logger=self.logger,
        )
        the_copy.committed = self.committed.copy()
        the_copy.trial = self.trial.copy()
        return the_copy

    # ------------------------------------------------------------------
    # パラメータ管理
    # ------------------------------------------------------------------

    def set_parameter(self, name: str, param: ParameterProtocol) -> int:
        """パラメータ名を解決し、パラメータ管理に登録する.

        Args:
            name: "sigmaY" | "fy" | "Fy" | "E" | "H_kin" | "Hkin" | "H_iso" | "Hiso"
            param: パラメータ管理

        Returns:
            param.add_object のステータス。未知の名前は -1。
        """
        which = resolve_parameter(name)
        if which is None:
            return -1
        param.set_value(self._parameter_value(which))
        return param.add_object(int(which), self)

    def update_parameter(self, parameter_id: int, value: float) -> int:
        """パラメータ値を上書きする（未知の ID は -1）."""
        which = parameter_from_id(parameter_id)
        if which == HardeningParameter.SIGMA_Y:
            self.iso.sigma_y0 = float(value)
        elif which == HardeningParameter.E:
            self.E = float(value)
        elif which == HardeningParameter.H_KIN:
            self.kin.H_kin = float(value)
        elif which == HardeningParameter.H_ISO:
            self.iso.H_iso = float(value)
        else:
            return -1
        return 0

    def activate_parameter(self, parameter_id: int) -> int:
        """微分対象パラメータを切り替える（0 = なし）."""
        self.active_parameter = parameter_from_id(parameter_id)
        return 0

    def _parameter_value(self, which: HardeningParameter) -> float:
        return {
            HardeningParameter.SIGMA_Y: self.sigma_y,
            HardeningParameter.E: self.E,
            HardeningParameter.H_KIN: self.H_kin,
            HardeningParameter.H_ISO: self.H_iso,
        }[which]

    # ------------------------------------------------------------------
    # 感度（DDM）
    # ------------------------------------------------------------------

    def _predictor(self) -> ElasticPredictor:
        return elastic_predictor(self.trial.strain, self.committed, self.E, self.iso, self.kin)

    def get_stress_sensitivity(self, grad_index: int, conditional: bool = False) -> float:
        """応力感度（歪み感度 = 0 とした条件付き感度）.

        直近の set_trial_strain と同じ分岐を、活性パラメータと
        勾配番号 grad_index の履歴感度について微分する。

        Args:
            grad_index: 勾配番号
            conditional: ホスト互換のための引数（未使用）
        """
        return stress_sensitivity(
            self._predictor(),
            self.trial.strain,
            self.committed,
            E=self.E,
            H_iso=self.H_iso,
            H_kin=self.H_kin,
            seeds=ParameterSeeds.for_parameter(self.active_parameter),
            hist=self.sensitivity_history.get(grad_index),
        )

    def get_tangent_sensitivity(self, grad_index: int) -> float:
        if self.active_parameter not in (
            HardeningParameter.E,
            HardeningParameter.H_KIN,
            HardeningParameter.H_ISO,
        ):
            return 0.0
        return tangent_sensitivity(
            self._predictor().plastic,
            self.active_parameter,
            E=self.E,
            H_iso=self.H_iso,
            H_kin=self.H_kin,
        )

    def get_initial_tangent_sensitivity(self, grad_index: int) -> float:
        return initial_tangent_sensitivity(self.active_parameter)

    def commit_sensitivity(
        self, strain_sensitivity: float, grad_index: int, num_grads: int
    ) -> int:
        """収束ステップの履歴変数感度を累積する.

        初回呼び出しで (2, num_grads) の感度配列を確保する。履歴感度は
        上書きではなく加算（+=）で更新する。同じ勾配番号に複数の寄与が
        入りうるため。

        Args:
            strain_sensitivity: ホストの大域感度解から得た全歪みの感度
            grad_index: 勾配番号
            num_grads: 勾配の総数

        Returns:
            0
        """
        shv = self.sensitivity_history
        if not shv.is_allocated:
            shv.allocate(num_grads)

        if not shv.contains(grad_index):
            if not self.auto_resize or grad_index < 0:
                self.logger.debug(
                    "%s %d: commit_sensitivity の勾配番号 %d が範囲外 (n_grads=%d) のため無視",
                    self.type_name,
                    self.tag,
                    grad_index,
                    shv.n_grads,
                )
                return 0
            shv.resize(max(num_grads, grad_index + 1))

        increment = history_sensitivity_increment(
            self._predictor(),
            self.trial.strain,
            self.committed,
            E=self.E,
            H_iso=self.H_iso,
            H_kin=self.H_kin,
            seeds=ParameterSeeds.for_parameter(self.active_parameter),
            hist=shv.get(grad_index),
            strain_sensitivity=strain_sensitivity,
        )
        shv.accumulate(grad_index, increment.eps_p, increment.alpha)
        return 0

    # ------------------------------------------------------------------
    # 転送・出力
    # ------------------------------------------------------------------

    def send_self(self, commit_tag: int, channel: ChannelProtocol) -> int:
        return send_self(self, commit_tag, channel, logger=self.logger)

    def recv_self(self, commit_tag: int, channel: ChannelProtocol) -> int:
        return recv_self(self, commit_tag, channel, logger=self.logger)

    def print_self(self, stream: TextIO, flag: PrintFlag = PrintFlag.MATERIAL) -> None:
        print_material(self, stream, flag)
