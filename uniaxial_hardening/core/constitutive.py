"""1軸構成則（材料モデル）の抽象インタフェース定義.

Protocol 定義:
  UniaxialMaterialProtocol: ホスト FE 解析から見た1軸材料の状態遷移。
  SensitivityMaterialProtocol: 直接微分法（DDM）による感度計算用。
  両者は独立。感度計算をしない材料は SensitivityMaterialProtocol を満たさなくてよい。

ホストの使い方:
  - 平衡反復中: set_trial_strain → get_stress / get_tangent（何度でも）
  - 収束後:     (感度計算) → commit_state
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uniaxial_hardening.core.parameter import ParameterProtocol


@runtime_checkable
class UniaxialMaterialProtocol(Protocol):
    """1軸材料の共通インタフェース.

    すべての操作は int のステータス（0 = 成功、負値 = 失敗）を返すか、
    副作用のない取得メソッドである。

    適合クラス例:
      - HardeningMaterial     線形等方 + 線形移動硬化
    """

    def set_trial_strain(self, strain: float, strain_rate: float = 0.0) -> int:
        """試行歪みを設定し、試行応力・接線を更新する."""
        ...

    def get_strain(self) -> float: ...

    def get_stress(self) -> float: ...

    def get_tangent(self) -> float: ...

    def get_initial_tangent(self) -> float: ...

    def commit_state(self) -> int: ...

    def revert_to_last_commit(self) -> int: ...

    def revert_to_start(self) -> int: ...

    def get_copy(self) -> UniaxialMaterialProtocol: ...


@runtime_checkable
class SensitivityMaterialProtocol(Protocol):
    """直接微分法（DDM）による感度計算インタフェース.

    ホスト側のパラメータ管理（Parameter）が set_parameter で ID を受け取り、
    activate_parameter で微分対象を切り替えながら感度を駆動する。

    Note:
      - get_stress_sensitivity は歪み感度を含まない「条件付き」感度を返す。
        全微分はホストが get_tangent() * (歪み感度) を加えて組み立てる。
      - commit_sensitivity はホストの大域感度ソルバーが求めた歪み感度を受け取り、
        履歴変数の感度を累積（+=）する。
    """

    def set_parameter(self, name: str, param: ParameterProtocol) -> int: ...

    def update_parameter(self, parameter_id: int, value: float) -> int: ...

    def activate_parameter(self, parameter_id: int) -> int: ...

    def get_stress_sensitivity(self, grad_index: int, conditional: bool = False) -> float: ...

    def get_tangent_sensitivity(self, grad_index: int) -> float: ...

    def get_initial_tangent_sensitivity(self, grad_index: int) -> float: ...

    def commit_sensitivity(
        self, strain_sensitivity: float, grad_index: int, num_grads: int
    ) -> int: ...
