"""uniaxial_hardening.core - 材料・パラメータの抽象インタフェース定義・戻り値型.

Protocol 階層:
  UniaxialMaterialProtocol: ホスト解析から見た1軸材料
  SensitivityMaterialProtocol: DDM 感度計算用
  ParameterProtocol: 感度解析の設計変数管理
"""

from uniaxial_hardening.core.constitutive import (
    SensitivityMaterialProtocol,
    UniaxialMaterialProtocol,
)
from uniaxial_hardening.core.parameter import Parameter, ParameterProtocol
from uniaxial_hardening.core.results import (
    ElasticPredictor,
    HistorySensitivity,
    ReturnMappingResult,
)
from uniaxial_hardening.core.state import HardeningState, TrialState

__all__ = [
    "UniaxialMaterialProtocol",
    "SensitivityMaterialProtocol",
    "ParameterProtocol",
    "Parameter",
    "HardeningState",
    "TrialState",
    "ElasticPredictor",
    "ReturnMappingResult",
    "HistorySensitivity",
]
