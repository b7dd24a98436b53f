"""歪み経路試験: 応力-歪み曲線の描画."""

from __future__ import annotations

from typing import TYPE_CHECKING

from uniaxial_hardening.numerical_tests.core import StrainPathResult

if TYPE_CHECKING:
    from matplotlib.axes import Axes


def plot_stress_strain(
    result: StrainPathResult,
    ax: Axes | None = None,
    *,
    title: str | None = None,
    show_plastic: bool = True,
    figsize: tuple[float, float] = (6, 5),
) -> Axes:
    """応力-歪み履歴を matplotlib で描画する.

    Args:
        result: 歪み経路試験結果
        ax: matplotlib Axes（None なら新規作成）
        title: タイトル（None なら材料番号から自動生成）
        show_plastic: 塑性ステップをマーカーで強調する
        figsize: 図のサイズ

    Returns:
        matplotlib Axes
    """
    try:
        import matplotlib.pyplot as plt
    except ImportError as err:
        raise ImportError("matplotlib が必要です: pip install matplotlib") from err

    if ax is None:
        _, ax = plt.subplots(1, 1, figsize=figsize)

    ax.plot(result.strain, result.stress, "-", color="tab:blue", linewidth=1.5, label="stress")
    if show_plastic and result.n_plastic > 0:
        ax.plot(
            result.strain[result.plastic],
            result.stress[result.plastic],
            "o",
            color="tab:red",
            markersize=3,
            label="plastic",
        )

    ax.set_xlabel("strain")
    ax.set_ylabel("stress")
    ax.set_title(title if title is not None else f"HardeningMaterial {result.config.tag}")
    ax.grid(True, alpha=0.3)
    ax.legend()
    return ax
