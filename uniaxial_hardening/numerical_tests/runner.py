"""歪み経路試験: 実行.

ホスト解析の代わりに HardeningMaterial を歪み制御で駆動する。
各ステップの手順はホスト FE 解析と同じ:

  1. set_trial_strain
  2. 感度（パラメータごと）: activate → 応力・接線感度 → commit_sensitivity
  3. commit_state

歪み制御なので全歪みの感度は 0 で、応力感度は条件付き感度そのものになる。
"""

from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np

from uniaxial_hardening.core.parameter import Parameter
from uniaxial_hardening.materials.hardening import HardeningMaterial
from uniaxial_hardening.materials.parameters import HardeningParameter, resolve_parameter
from uniaxial_hardening.numerical_tests.core import StrainPathConfig, StrainPathResult

LOG = logging.getLogger(__name__)

_CONFIG_FIELDS = {
    HardeningParameter.SIGMA_Y: "sigma_y",
    HardeningParameter.E: "E",
    HardeningParameter.H_KIN: "H_kin",
    HardeningParameter.H_ISO: "H_iso",
}


def build_material(
    config: StrainPathConfig,
    *,
    logger: logging.Logger | None = None,
) -> HardeningMaterial:
    """コンフィグから材料を生成する."""
    return HardeningMaterial(
        config.tag,
        config.E,
        config.sigma_y,
        config.H_iso,
        config.H_kin,
        auto_resize=config.auto_resize,
        logger=logger,
    )


def run_strain_path(
    config: StrainPathConfig,
    *,
    logger: logging.Logger | None = None,
) -> StrainPathResult:
    """歪み経路試験を実行する.

    Args:
        config: 試験コンフィグ
        logger: 診断出力先（None = モジュールロガー）

    Returns:
        StrainPathResult
    """
    log = logger if logger is not None else LOG
    material = build_material(config, logger=log)

    params: list[Parameter] = []
    for k, name in enumerate(config.sensitivity_parameters):
        # 名前は StrainPathConfig で検証済み
        param = Parameter(tag=k + 1, grad_index=k)
        material.set_parameter(name, param)
        params.append(param)
    n_grads = len(params)

    n = len(config.strain_path)
    stress = np.zeros(n)
    tangent = np.zeros(n)
    eps_p = np.zeros(n)
    alpha = np.zeros(n)
    plastic = np.zeros(n, dtype=bool)
    d_stress = {name: np.zeros(n) for name in config.sensitivity_parameters}
    d_tangent = {name: np.zeros(n) for name in config.sensitivity_parameters}

    for i, eps in enumerate(config.strain_path):
        material.set_trial_strain(float(eps))
        stress[i] = material.get_stress()
        tangent[i] = material.get_tangent()
        plastic[i] = material.trial.history.alpha > material.committed.alpha

        for k, (name, param) in enumerate(zip(config.sensitivity_parameters, params)):
            param.activate(True)
            d_stress[name][i] = material.get_stress_sensitivity(k)
            d_tangent[name][i] = material.get_tangent_sensitivity(k)
            material.commit_sensitivity(0.0, k, n_grads)
            param.activate(False)

        material.commit_state()
        eps_p[i] = material.committed.eps_p
        alpha[i] = material.committed.alpha
        log.debug(
            "step %d: strain=%.6e stress=%.6e tangent=%.6e plastic=%s",
            i,
            eps,
            stress[i],
            tangent[i],
            plastic[i],
        )

    result = StrainPathResult(
        config=config,
        strain=config.strain_path.copy(),
        stress=stress,
        tangent=tangent,
        plastic_strain=eps_p,
        hardening=alpha,
        plastic=plastic,
        stress_sensitivity=d_stress,
        tangent_sensitivity=d_tangent,
    )
    log.info(
        "strain path finished: tag=%d steps=%d plastic=%d alpha=%.6e",
        config.tag,
        result.n_steps,
        result.n_plastic,
        alpha[-1],
    )
    return result


def finite_difference_sensitivity(
    config: StrainPathConfig,
    name: str,
    rel_step: float = 1e-6,
) -> np.ndarray:
    """応力履歴のパラメータ感度を中心差分で求める（DDM の検証用）.

    Args:
        config: 試験コンフィグ
        name: パラメータ名
        rel_step: 相対摂動量（パラメータ値が 0 のときは絶対量）

    Returns:
        (n_steps,) d(sigma)/d(theta)
    """
    which = resolve_parameter(name)
    if which is None:
        raise ValueError(f"未知のパラメータ名: {name}")
    field_name = _CONFIG_FIELDS[which]
    base = getattr(config, field_name)
    h = rel_step * abs(base) if base != 0.0 else rel_step

    plus = replace(config, sensitivity_parameters=(), **{field_name: base + h})
    minus = replace(config, sensitivity_parameters=(), **{field_name: base - h})
    r_plus = run_strain_path(plus)
    r_minus = run_strain_path(minus)
    return (r_plus.stress - r_minus.stress) / (2.0 * h)
