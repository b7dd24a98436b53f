"""硬化材料の設計変数（感度解析パラメータ）の定義.

パラメータ名の別名はここで一度だけ解決し、以後は HardeningParameter で扱う。
"""

from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple


class HardeningParameter(IntEnum):
    """微分対象パラメータ.

    値はパラメータ管理に登録する ID（0 = 微分対象なし）。
    """

    NONE = 0
    SIGMA_Y = 1
    E = 2
    H_KIN = 3
    H_ISO = 4


_ALIASES: dict[str, HardeningParameter] = {
    "sigmaY": HardeningParameter.SIGMA_Y,
    "fy": HardeningParameter.SIGMA_Y,
    "Fy": HardeningParameter.SIGMA_Y,
    "E": HardeningParameter.E,
    "H_kin": HardeningParameter.H_KIN,
    "Hkin": HardeningParameter.H_KIN,
    "H_iso": HardeningParameter.H_ISO,
    "Hiso": HardeningParameter.H_ISO,
}

PARAMETER_NAMES = tuple(_ALIASES)


def resolve_parameter(name: str) -> HardeningParameter | None:
    """パラメータ名（別名含む）を解決する.

    名前は大文字小文字を区別する（"fy" と "Fy" はどちらも有効だが "FY" は無効）。

    Returns:
        対応する HardeningParameter。未知の名前は None。
    """
    return _ALIASES.get(name)


def parameter_from_id(parameter_id: int) -> HardeningParameter:
    """パラメータ ID を HardeningParameter に変換する（範囲外は NONE）."""
    try:
        return HardeningParameter(parameter_id)
    except ValueError:
        return HardeningParameter.NONE


class ParameterSeeds(NamedTuple):
    """活性パラメータに対する各材料定数の陽な微分（0 or 1）."""

    sigma_y: float = 0.0
    E: float = 0.0
    H_kin: float = 0.0
    H_iso: float = 0.0

    @classmethod
    def for_parameter(cls, active: HardeningParameter) -> ParameterSeeds:
        return cls(
            sigma_y=1.0 if active == HardeningParameter.SIGMA_Y else 0.0,
            E=1.0 if active == HardeningParameter.E else 0.0,
            H_kin=1.0 if active == HardeningParameter.H_KIN else 0.0,
            H_iso=1.0 if active == HardeningParameter.H_ISO else 0.0,
        )
