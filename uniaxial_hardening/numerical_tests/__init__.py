"""歪み経路試験フレームワーク.

1軸材料を歪み制御で駆動し、応力・接線・パラメータ感度の履歴を
記録・検証・出力する。ホスト FE 解析の代わりとして使う。
"""

from uniaxial_hardening.numerical_tests.core import (
    StrainPathConfig,
    StrainPathResult,
    generate_cyclic_strain_path,
)
from uniaxial_hardening.numerical_tests.csv_export import export_strain_path_csv
from uniaxial_hardening.numerical_tests.inp_input import parse_material_input
from uniaxial_hardening.numerical_tests.plotting import plot_stress_strain
from uniaxial_hardening.numerical_tests.runner import (
    build_material,
    finite_difference_sensitivity,
    run_strain_path,
)

__all__ = [
    "StrainPathConfig",
    "StrainPathResult",
    "generate_cyclic_strain_path",
    "build_material",
    "run_strain_path",
    "finite_difference_sensitivity",
    "export_strain_path_csv",
    "parse_material_input",
    "plot_stress_strain",
]
