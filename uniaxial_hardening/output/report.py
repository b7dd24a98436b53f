"""材料定義の出力.

2つの形式を持つ（いずれも履歴変数は含まない）:
  - ラベル付き複数行テキスト（PrintFlag.MATERIAL）
  - JSON のキー／値形式（PrintFlag.JSON）
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

if TYPE_CHECKING:
    from uniaxial_hardening.materials.hardening import HardeningMaterial


class PrintFlag(Enum):
    """出力形式."""

    MATERIAL = "material"
    JSON = "json"


def format_material(material: HardeningMaterial) -> str:
    """ラベル付き複数行テキスト."""
    return (
        f"{material.type_name}, tag: {material.tag}\n"
        f"  E: {material.E:g}\n"
        f"  sigmaY: {material.sigma_y:g}\n"
        f"  Hiso: {material.H_iso:g}\n"
        f"  Hkin: {material.H_kin:g}\n"
    )


def material_to_dict(material: HardeningMaterial) -> dict[str, Any]:
    """JSON 出力用の辞書."""
    return {
        "name": material.tag,
        "type": material.type_name,
        "E": material.E,
        "fy": material.sigma_y,
        "Hiso": material.H_iso,
        "Hkin": material.H_kin,
    }


def format_material_json(material: HardeningMaterial, indent: str = "") -> str:
    """1行の JSON オブジェクト（先頭に indent を付ける）."""
    return indent + json.dumps(material_to_dict(material))


def print_material(
    material: HardeningMaterial,
    stream: TextIO,
    flag: PrintFlag = PrintFlag.MATERIAL,
) -> None:
    """指定形式でストリームに書き出す."""
    if flag == PrintFlag.MATERIAL:
        stream.write(format_material(material))
    elif flag == PrintFlag.JSON:
        stream.write(format_material_json(material))


def export_json(
    material: HardeningMaterial,
    output_dir: str | Path,
    *,
    filename: str | None = None,
    indent: int = 2,
) -> str:
    """材料定義を JSON ファイルにエクスポートする.

    Args:
        material: 材料
        output_dir: 出力ディレクトリ
        filename: 出力ファイル名（None = "material_<tag>.json"）
        indent: JSON インデント

    Returns:
        生成されたファイルパス
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    filepath = out / (filename or f"material_{material.tag}.json")

    with open(filepath, "w", encoding="utf-8") as fh:
        json.dump(material_to_dict(material), fh, indent=indent, ensure_ascii=False)

    return str(filepath)
