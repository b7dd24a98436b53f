"""歪み経路試験: CSV出力."""

from __future__ import annotations

import csv
import io
from pathlib import Path

from uniaxial_hardening.numerical_tests.core import StrainPathResult


def export_strain_path_csv(
    result: StrainPathResult,
    output_dir: str | Path | None = None,
    prefix: str = "",
) -> dict[str, str]:
    """歪み経路試験結果をCSVファイルに出力する.

    出力ファイル:
    - {prefix}material_{tag}_summary.csv: サマリ情報
    - {prefix}material_{tag}_history.csv: ステップごとの応答・感度

    Args:
        result: 歪み経路試験結果
        output_dir: 出力ディレクトリ (None=文字列として返す)
        prefix: ファイル名プレフィックス

    Returns:
        dict: {ファイル種別: CSV文字列 or ファイルパス}
    """
    cfg = result.config
    name = f"material_{cfg.tag}"
    outputs = {}

    # --- サマリ CSV ---
    summary_rows = [
        ["項目", "値"],
        ["材料番号", str(cfg.tag)],
        ["ヤング率 E", f"{cfg.E:.6g}"],
        ["降伏応力 sigmaY", f"{cfg.sigma_y:.6g}"],
        ["等方硬化 Hiso", f"{cfg.H_iso:.6g}"],
        ["移動硬化 Hkin", f"{cfg.H_kin:.6g}"],
        ["ステップ数", str(result.n_steps)],
        ["塑性ステップ数", str(result.n_plastic)],
        ["最終塑性歪み", f"{result.plastic_strain[-1]:.10g}"],
        ["最終硬化変数", f"{result.hardening[-1]:.10g}"],
        ["応力仕事", f"{result.strain_work:.10g}"],
    ]
    if cfg.sensitivity_parameters:
        summary_rows.append(["感度パラメータ", " ".join(cfg.sensitivity_parameters)])

    outputs["summary"] = _write_csv(summary_rows, output_dir, f"{prefix}{name}_summary.csv")

    # --- 履歴 CSV ---
    header = ["step", "strain", "stress", "tangent", "eps_p", "alpha", "plastic"]
    for pname in cfg.sensitivity_parameters:
        header += [f"dstress_d{pname}", f"dtangent_d{pname}"]
    rows = [header]
    for i in range(result.n_steps):
        row = [
            str(i),
            f"{result.strain[i]:.10e}",
            f"{result.stress[i]:.10e}",
            f"{result.tangent[i]:.10e}",
            f"{result.plastic_strain[i]:.10e}",
            f"{result.hardening[i]:.10e}",
            "1" if result.plastic[i] else "0",
        ]
        for pname in cfg.sensitivity_parameters:
            row.append(f"{result.stress_sensitivity[pname][i]:.10e}")
            row.append(f"{result.tangent_sensitivity[pname][i]:.10e}")
        rows.append(row)

    outputs["history"] = _write_csv(rows, output_dir, f"{prefix}{name}_history.csv")

    return outputs


# ---------------------------------------------------------------------------
# CSV書き込みヘルパー
# ---------------------------------------------------------------------------
def _write_csv(
    rows: list[list[str]],
    output_dir: str | Path | None,
    filename: str,
) -> str:
    """CSV行データをファイルまたは文字列に書き出す.

    Args:
        rows: CSV行リスト
        output_dir: 出力ディレクトリ (None=文字列として返す)
        filename: ファイル名

    Returns:
        str: ファイルパス or CSV文字列
    """
    if output_dir is not None:
        out_path = Path(output_dir) / filename
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerows(rows)
        return str(out_path)
    else:
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerows(rows)
        return buf.getvalue()
