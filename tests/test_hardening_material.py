"""1軸硬化材料（return mapping と状態遷移）のテスト.

テスト方針:
  構成則単体（return_mapping）:
    1. 降伏未満で弾性（応力、tangent、状態不変）
    2. 単調引張の bilinear 応答と consistent tangent
    3. consistent tangent の有限差分検証
    4. 塑性修正後の応力が降伏面上にある
    5. 入力 state が変更されない
  材料の状態遷移（HardeningMaterial）:
    6. 完全弾塑性の歪み列 0 → 0.003 → 0.006 → -0.003
    7. 同じ歪みの再設定は何も変えない
    8. 硬化変数の単調性
    9. revert_to_last_commit / revert_to_start
    10. get_copy の独立性
    11. Protocol 適合
"""

from __future__ import annotations

import numpy as np
import pytest

from uniaxial_hardening.core.constitutive import (
    SensitivityMaterialProtocol,
    UniaxialMaterialProtocol,
)
from uniaxial_hardening.core.state import HardeningState
from uniaxial_hardening.materials.hardening import (
    HardeningMaterial,
    IsotropicHardening,
    KinematicHardening,
    return_mapping,
    yield_function,
)
from uniaxial_hardening.numerical_tests.core import generate_cyclic_strain_path

# ===== テスト用パラメータ =====
E_MAT = 200_000.0  # MPa
SIGMA_Y0 = 250.0  # MPa
H_ISO = 1000.0  # 等方硬化係数
H_KIN = 5000.0  # 移動硬化係数


def _make_material(
    H_iso: float = H_ISO,
    H_kin: float = H_KIN,
    tag: int = 1,
) -> HardeningMaterial:
    """テスト用 HardeningMaterial を生成."""
    return HardeningMaterial(tag, E_MAT, SIGMA_Y0, H_iso, H_kin)


def _hardening(H_iso: float = H_ISO, H_kin: float = H_KIN):
    return IsotropicHardening(sigma_y0=SIGMA_Y0, H_iso=H_iso), KinematicHardening(H_kin=H_kin)


# ================================================================
# 構成則単体テスト
# ================================================================


class TestReturnMappingElastic:
    """降伏未満の弾性応答."""

    def test_elastic_stress_and_tangent(self):
        """降伏未満で sigma = E * eps, D = E."""
        iso, kin = _hardening()
        eps = 0.5 * SIGMA_Y0 / E_MAT
        result = return_mapping(eps, HardeningState(), E_MAT, iso, kin)
        assert result.stress == pytest.approx(E_MAT * eps)
        assert result.tangent == E_MAT
        assert not result.plastic
        assert result.d_gamma == 0.0

    def test_elastic_state_unchanged(self):
        """降伏未満で履歴変数が変化しない."""
        iso, kin = _hardening()
        state = HardeningState(eps_p=1e-4, alpha=2e-4)
        result = return_mapping(1e-4, state, E_MAT, iso, kin)
        assert result.state_new == state
        assert result.state_new is not state

    def test_input_state_not_mutated(self):
        """塑性ステップでも入力 state は変更されない."""
        iso, kin = _hardening()
        state = HardeningState()
        return_mapping(5.0 * SIGMA_Y0 / E_MAT, state, E_MAT, iso, kin)
        assert state.eps_p == 0.0
        assert state.alpha == 0.0


class TestReturnMappingPlastic:
    """降伏後の応答."""

    def test_monotonic_tension_bilinear(self):
        """単調引張: sigma = sigma_y + E_t (eps - eps_y)."""
        iso, kin = _hardening()
        eps_y = SIGMA_Y0 / E_MAT
        eps = 3.0 * eps_y
        result = return_mapping(eps, HardeningState(), E_MAT, iso, kin)

        H = H_ISO + H_KIN
        E_t = E_MAT * H / (E_MAT + H)
        assert result.plastic
        assert result.stress == pytest.approx(SIGMA_Y0 + E_t * (eps - eps_y), rel=1e-12)
        assert result.tangent == pytest.approx(E_t, rel=1e-12)

    def test_plastic_strain_and_hardening(self):
        """eps_p = dGamma sign, alpha = dGamma."""
        iso, kin = _hardening()
        eps = -3.0 * SIGMA_Y0 / E_MAT
        result = return_mapping(eps, HardeningState(), E_MAT, iso, kin)
        assert result.state_new.eps_p == pytest.approx(-result.d_gamma)
        assert result.state_new.alpha == pytest.approx(result.d_gamma)
        assert result.stress < 0.0

    @pytest.mark.parametrize("eps_factor", [1.5, 4.0, -2.0, -10.0])
    def test_stress_on_yield_surface(self, eps_factor):
        """塑性修正後の応力で降伏関数 = 0."""
        iso, kin = _hardening()
        state = HardeningState(eps_p=2e-4, alpha=5e-4)
        eps = eps_factor * SIGMA_Y0 / E_MAT + state.eps_p
        result = return_mapping(eps, state, E_MAT, iso, kin)
        assert result.plastic
        f = yield_function(result.stress, result.state_new, iso, kin)
        assert abs(f) < 1e-9 * SIGMA_Y0

    def test_consistent_tangent_fd(self):
        """consistent tangent の有限差分検証."""
        iso, kin = _hardening()
        state = HardeningState(eps_p=1e-4, alpha=1e-4)
        eps = 2.5 * SIGMA_Y0 / E_MAT

        h = 1e-8
        r_plus = return_mapping(eps + h, state, E_MAT, iso, kin)
        r_minus = return_mapping(eps - h, state, E_MAT, iso, kin)
        D_fd = (r_plus.stress - r_minus.stress) / (2.0 * h)

        result = return_mapping(eps, state, E_MAT, iso, kin)
        assert abs(result.tangent - D_fd) / abs(result.tangent) < 1e-5

    def test_perfect_plasticity_zero_tangent(self):
        """H_iso = H_kin = 0 で D = 0、応力 = ±sigma_y."""
        iso, kin = _hardening(H_iso=0.0, H_kin=0.0)
        result = return_mapping(4.0 * SIGMA_Y0 / E_MAT, HardeningState(), E_MAT, iso, kin)
        assert result.tangent == 0.0
        assert result.stress == pytest.approx(SIGMA_Y0)


# ================================================================
# 材料の状態遷移
# ================================================================


class TestElasticPerfectlyPlastic:
    """完全弾塑性: E=29000, sigmaY=60."""

    def test_strain_sequence(self):
        """0 → 0.003 → 0.006 → -0.003（各ステップでコミット）."""
        mat = HardeningMaterial(1, 29000.0, 60.0, 0.0, 0.0)
        expected_stress = [0.0, 60.0, 60.0, -60.0]
        expected_tangent = [29000.0, 0.0, 0.0, 0.0]
        for eps, sig, tan in zip([0.0, 0.003, 0.006, -0.003], expected_stress, expected_tangent):
            assert mat.set_trial_strain(eps) == 0
            assert mat.get_strain() == eps
            assert mat.get_stress() == pytest.approx(sig, abs=1e-9)
            assert mat.get_tangent() == pytest.approx(tan, abs=1e-9)
            assert mat.commit_state() == 0

    def test_unloading_is_elastic(self):
        """降伏後の除荷は弾性勾配."""
        mat = HardeningMaterial(1, 29000.0, 60.0, 0.0, 0.0)
        mat.set_trial_strain(0.006)
        mat.commit_state()
        mat.set_trial_strain(0.005)
        assert mat.get_tangent() == 29000.0
        assert mat.get_stress() == pytest.approx(60.0 - 29.0)


class TestTrialState:
    """試行状態の再計算."""

    def test_initial_state(self):
        """生成直後: 歪み・応力 0、tangent = E."""
        mat = _make_material()
        assert mat.get_strain() == 0.0
        assert mat.get_stress() == 0.0
        assert mat.get_tangent() == E_MAT
        assert mat.get_initial_tangent() == E_MAT

    def test_repeated_strain_is_noop(self):
        """同じ歪みを続けて設定しても状態は変わらない."""
        mat = _make_material()
        mat.set_trial_strain(3.0 * SIGMA_Y0 / E_MAT)
        before = mat.trial.copy()
        assert mat.set_trial_strain(3.0 * SIGMA_Y0 / E_MAT) == 0
        assert mat.trial == before

    def test_noop_compares_against_trial_strain(self):
        """短絡判定は収束済み歪みではなく直前の試行歪みと比較する."""
        mat = _make_material()
        mat.set_trial_strain(3.0 * SIGMA_Y0 / E_MAT)
        # 直前の試行と同じ値でも、パラメータ変更後は再計算されない
        mat.update_parameter(2, 2.0 * E_MAT)
        mat.set_trial_strain(3.0 * SIGMA_Y0 / E_MAT)
        E_t = E_MAT * (H_ISO + H_KIN) / (E_MAT + H_ISO + H_KIN)
        assert mat.get_tangent() == pytest.approx(E_t)

    def test_trial_recomputed_from_committed(self):
        """反復で歪みを変えても、結果は収束済み状態からの一回計算と同じ."""
        mat = _make_material()
        target = 4.0 * SIGMA_Y0 / E_MAT
        for eps in [2.0 * SIGMA_Y0 / E_MAT, 6.0 * SIGMA_Y0 / E_MAT, target]:
            mat.set_trial_strain(eps)

        fresh = _make_material()
        fresh.set_trial_strain(target)
        assert mat.get_stress() == pytest.approx(fresh.get_stress(), rel=1e-14)
        assert mat.trial.history == fresh.trial.history

    def test_elastic_branch_trial_history_equals_committed(self):
        """弾性分岐では試行履歴 = 収束済み履歴."""
        mat = _make_material()
        mat.set_trial_strain(3.0 * SIGMA_Y0 / E_MAT)
        mat.commit_state()
        mat.set_trial_strain(4.0 * SIGMA_Y0 / E_MAT)  # 塑性の試行
        mat.set_trial_strain(2.5 * SIGMA_Y0 / E_MAT)  # 除荷（弾性）
        assert mat.get_tangent() == E_MAT
        assert mat.trial.history == mat.committed

    def test_hardening_monotonic(self):
        """任意の歪み経路で alpha_trial >= alpha_committed."""
        mat = _make_material()
        path = generate_cyclic_strain_path(5.0 * SIGMA_Y0 / E_MAT, n_cycles=3, n_points=7)
        rng = np.random.default_rng(0)
        for eps in path:
            # 収束前の試行値を何度か挟む
            for trial in eps + 1e-4 * rng.standard_normal(2):
                mat.set_trial_strain(float(trial))
                assert mat.trial.history.alpha >= mat.committed.alpha
            mat.set_trial_strain(float(eps))
            assert mat.trial.history.alpha >= mat.committed.alpha
            mat.commit_state()

    @pytest.mark.parametrize(
        "E, sigma_y, H_iso, H_kin",
        [(29000.0, 60.0, 0.0, 0.0), (E_MAT, SIGMA_Y0, H_ISO, H_KIN)],
    )
    def test_hardening_monotonic_just_below_yield(self, E, sigma_y, H_iso, H_kin):
        """降伏歪みの数 ulp 手前（-eps_mach*E < f <= 0 の帯）でも履歴は戻らない."""
        mat = HardeningMaterial(1, E, sigma_y, H_iso, H_kin)
        eps = sigma_y / E
        for _ in range(41):
            mat.revert_to_start()
            mat.set_trial_strain(eps)
            assert mat.trial.history.alpha >= mat.committed.alpha
            assert mat.get_stress() == pytest.approx(E * eps, rel=1e-12)
            eps = float(np.nextafter(eps, 0.0))


class TestLifecycle:
    """コミット・リバート・コピー."""

    def test_revert_to_last_commit_is_noop(self):
        """revert_to_last_commit は状態を変えず、次の更新で収束済み状態から再計算される."""
        mat = _make_material()
        mat.set_trial_strain(3.0 * SIGMA_Y0 / E_MAT)
        trial = mat.trial.copy()
        assert mat.revert_to_last_commit() == 0
        assert mat.trial == trial
        assert mat.committed == HardeningState()

    def test_revert_to_start(self):
        """revert_to_start で生成直後の状態に戻る."""
        mat = _make_material()
        mat.set_trial_strain(3.0 * SIGMA_Y0 / E_MAT)
        mat.commit_state()
        mat.commit_sensitivity(0.0, 0, 2)
        assert mat.revert_to_start() == 0
        assert mat.committed == HardeningState()
        assert mat.trial.history == HardeningState()
        assert mat.get_strain() == 0.0
        assert mat.get_stress() == 0.0
        assert mat.get_tangent() == E_MAT
        assert mat.sensitivity_history.n_grads == 2
        assert np.all(mat.sensitivity_history.values == 0.0)

    def test_copy_has_same_state(self):
        """get_copy はパラメータ・収束済み・試行状態を複製する."""
        mat = _make_material(tag=7)
        mat.set_trial_strain(3.0 * SIGMA_Y0 / E_MAT)
        mat.commit_state()
        mat.set_trial_strain(3.5 * SIGMA_Y0 / E_MAT)

        cp = mat.get_copy()
        assert cp is not mat
        assert cp.tag == 7
        assert (cp.E, cp.sigma_y, cp.H_iso, cp.H_kin) == (E_MAT, SIGMA_Y0, H_ISO, H_KIN)
        assert cp.committed == mat.committed
        assert cp.trial == mat.trial
        assert not cp.sensitivity_history.is_allocated

    def test_copy_independence(self):
        """コピー後の更新は互いに影響しない."""
        mat = _make_material()
        mat.set_trial_strain(3.0 * SIGMA_Y0 / E_MAT)
        mat.commit_state()
        cp = mat.get_copy()
        snapshot = (cp.trial.copy(), cp.committed.copy(), cp.E)

        mat.set_trial_strain(-6.0 * SIGMA_Y0 / E_MAT)
        mat.commit_state()
        mat.update_parameter(2, 1.0)
        assert (cp.trial, cp.committed, cp.E) == snapshot

        cp.set_trial_strain(8.0 * SIGMA_Y0 / E_MAT)
        cp.commit_state()
        assert mat.get_strain() == pytest.approx(-6.0 * SIGMA_Y0 / E_MAT)
        assert mat.E == 1.0

    def test_blank_instance(self):
        """受信用の空インスタンス."""
        mat = HardeningMaterial.blank()
        assert mat.tag == 0
        assert (mat.E, mat.sigma_y, mat.H_iso, mat.H_kin) == (0.0, 0.0, 0.0, 0.0)


class TestProtocols:
    def test_uniaxial_protocol(self):
        assert isinstance(_make_material(), UniaxialMaterialProtocol)

    def test_sensitivity_protocol(self):
        assert isinstance(_make_material(), SensitivityMaterialProtocol)
