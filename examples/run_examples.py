#!/usr/bin/env python3
"""uniaxial-hardening サンプル .inp ファイルの歪み経路試験実行スクリプト.

各サンプルの .inp ファイルを読み込み、歪み経路試験を実行して結果を表示する。
感度を指定したサンプルは DDM と中心差分の比較も出力する。

Usage:
    python examples/run_examples.py                 # 全サンプル実行
    python examples/run_examples.py perfectly       # 完全弾塑性のみ
    python examples/run_examples.py cyclic          # 繰返し硬化のみ
    python examples/run_examples.py cyclic --csv out  # CSV も出力
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import numpy as np

# プロジェクトルートを PYTHONPATH に追加
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from uniaxial_hardening.numerical_tests import (
    build_material,
    export_strain_path_csv,
    finite_difference_sensitivity,
    parse_material_input,
    run_strain_path,
)
from uniaxial_hardening.output import PrintFlag

EXAMPLES_DIR = Path(__file__).resolve().parent


def run_example(inp_name: str, csv_dir: Path | None = None) -> float | None:
    """1つの .inp を実行し、DDM と中心差分の最大相対誤差を返す."""
    print("=" * 60)
    print(inp_name)
    print("=" * 60)

    config = parse_material_input((EXAMPLES_DIR / inp_name).read_text(encoding="utf-8"))
    result = run_strain_path(config)

    print(f"  ステップ数: {result.n_steps}（塑性 {result.n_plastic}）")
    print(f"  応力仕事: {result.strain_work:.6e}")
    print("  step      strain          stress        tangent")
    for i in range(result.n_steps):
        mark = "*" if result.plastic[i] else " "
        print(
            f"  {i:4d}{mark} {result.strain[i]: .6e} {result.stress[i]: .6e} "
            f"{result.tangent[i]: .6e}"
        )

    worst = None
    for name in config.sensitivity_parameters:
        ddm = result.stress_sensitivity[name]
        fd = finite_difference_sensitivity(config, name)
        scale = max(np.max(np.abs(fd)), 1e-30)
        err = float(np.max(np.abs(ddm - fd)) / scale)
        worst = err if worst is None else max(worst, err)
        print(f"  d(sigma)/d({name}): 最終値 {ddm[-1]: .6e}, DDM-FD 相対誤差 {err:.2e}")

    if csv_dir is not None:
        files = export_strain_path_csv(result, csv_dir, prefix=Path(inp_name).stem + "_")
        for path in files.values():
            print(f"  出力: {path}")

    # 材料定義（JSON）
    build_material(config).print_self(sys.stdout, PrintFlag.JSON)
    print()
    print()
    return worst


def main():
    """メイン実行."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("uniaxial-hardening サンプル歪み経路試験")
    print("=" * 60)
    print()

    args = sys.argv[1:]
    csv_dir = None
    if "--csv" in args:
        idx = args.index("--csv")
        csv_dir = Path(args[idx + 1]) if idx + 1 < len(args) else Path("output")
        del args[idx : idx + 2]
    filter_key = args[0].lower() if args else None

    examples = ["perfectly_plastic.inp", "cyclic_hardening.inp"]

    errors = []
    for name in examples:
        if filter_key is None or filter_key in name:
            err = run_example(name, csv_dir)
            if err is not None:
                errors.append((name, err))

    if errors:
        print("-" * 60)
        print("DDM 検証まとめ:")
        for name, err in errors:
            status = "PASS" if err < 1e-4 else "CHECK"
            print(f"  {name}: 相対誤差 {err:.2e} [{status}]")
        print()


if __name__ == "__main__":
    main()
