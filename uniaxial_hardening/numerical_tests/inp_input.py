"""歪み経路試験: Abaqusライクテキスト入力パーサー.

Abaqusの *KEYWORD 形式に準拠したテキストから StrainPathConfig を生成する。

サポートするキーワード:
  *MATERIAL, TAG=<n>
  *HARDENING
    <E>, <sigmaY>[, <Hiso>[, <Hkin>]]
  *STRAIN PATH
    <eps_0>, <eps_1>, ...   （複数行可、次のキーワードまで）
  *CYCLIC, AMPLITUDE=<a>, CYCLES=<n>, POINTS=<m>
  *SENSITIVITY, PARAMETER=<name>   （複数指定可）
  *AUTO RESIZE

使用例:
    *MATERIAL, TAG=1
    *HARDENING
     29000.0, 60.0, 0.0, 0.0
    *STRAIN PATH
     0.0, 0.003, 0.006, -0.003
    *SENSITIVITY, PARAMETER=sigmaY
"""

from __future__ import annotations

import re
from typing import Any

import numpy as np

from uniaxial_hardening.numerical_tests.core import (
    StrainPathConfig,
    generate_cyclic_strain_path,
)


def parse_material_input(text: str) -> StrainPathConfig:
    """Abaqusライクなテキスト入力から歪み経路試験コンフィグを生成する.

    Args:
        text: 入力テキスト（Abaqusライク形式）

    Returns:
        StrainPathConfig
    """
    lines = text.strip().splitlines()
    params: dict[str, Any] = {
        "tag": 1,
        "E": None,
        "sigma_y": None,
        "H_iso": 0.0,
        "H_kin": 0.0,
        "strain_path": None,
        "sensitivity_parameters": [],
        "auto_resize": False,
    }

    i = 0
    while i < len(lines):
        line = lines[i].strip()

        # コメント行・空行スキップ
        if not line or line.startswith("**"):
            i += 1
            continue

        upper = line.upper()

        if upper.startswith("*MATERIAL"):
            tag = _extract_param(line, "TAG")
            if tag:
                params["tag"] = int(tag)
            i += 1

        elif upper.startswith("*HARDENING"):
            i += 1
            if i < len(lines):
                vals = _parse_data_line(lines[i].strip())
                if len(vals) < 2:
                    raise ValueError("*HARDENING には E, sigmaY が必要です。")
                params["E"] = vals[0]
                params["sigma_y"] = vals[1]
                if len(vals) > 2:
                    params["H_iso"] = vals[2]
                if len(vals) > 3:
                    params["H_kin"] = vals[3]
                i += 1

        elif upper.startswith("*STRAIN PATH"):
            i += 1
            values: list[float] = []
            while i < len(lines) and not lines[i].strip().startswith("*"):
                values.extend(_parse_data_line(lines[i].strip()))
                i += 1
            params["strain_path"] = np.asarray(values, dtype=float)

        elif upper.startswith("*CYCLIC"):
            amplitude = _extract_param(line, "AMPLITUDE")
            if amplitude is None:
                raise ValueError("*CYCLIC には AMPLITUDE が必要です。")
            cycles = _extract_param(line, "CYCLES")
            points = _extract_param(line, "POINTS")
            params["strain_path"] = generate_cyclic_strain_path(
                float(amplitude),
                n_cycles=int(cycles) if cycles else 1,
                n_points=int(points) if points else 10,
            )
            i += 1

        elif upper.startswith("*SENSITIVITY"):
            name = _extract_param(line, "PARAMETER")
            if name is None:
                raise ValueError("*SENSITIVITY には PARAMETER が必要です。")
            params["sensitivity_parameters"].append(name)
            i += 1

        elif upper.startswith("*AUTO RESIZE"):
            params["auto_resize"] = True
            i += 1

        else:
            i += 1

    if params["E"] is None or params["sigma_y"] is None:
        raise ValueError("*HARDENING が必要です。")
    if params["strain_path"] is None:
        raise ValueError("*STRAIN PATH または *CYCLIC が必要です。")

    return StrainPathConfig(
        E=params["E"],
        sigma_y=params["sigma_y"],
        strain_path=params["strain_path"],
        H_iso=params["H_iso"],
        H_kin=params["H_kin"],
        tag=params["tag"],
        sensitivity_parameters=tuple(params["sensitivity_parameters"]),
        auto_resize=params["auto_resize"],
    )


# ---------------------------------------------------------------------------
# パーサーヘルパー
# ---------------------------------------------------------------------------
def _extract_param(line: str, param_name: str) -> str | None:
    """*KEYWORD, PARAM=VALUE 形式からパラメータ値を抽出する."""
    pattern = rf"{param_name}\s*=\s*([^,\s]+)"
    match = re.search(pattern, line, re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return None


def _parse_data_line(line: str) -> list[float]:
    """カンマ区切りのデータ行をパースする."""
    if not line or line.startswith("*"):
        return []
    parts = [p.strip() for p in line.split(",") if p.strip()]
    return [float(p) for p in parts]
