"""パラメータ管理（感度解析の設計変数）のインタフェース.

ホスト側のパラメータ登録機構を表す。材料は set_parameter で自分の
パラメータ ID を登録し、以後の値更新・活性化は ID 経由で行われる。

  ParameterProtocol: 材料から見たパラメータ管理の最小インタフェース
  Parameter: プロセス内で完結する最小実装（ドライバー・テスト用）
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ParameterProtocol(Protocol):
    """材料から見たパラメータ管理."""

    def set_value(self, value: float) -> None:
        """現在のパラメータ値を通知する."""
        ...

    def add_object(self, parameter_id: int, obj: Any) -> int:
        """材料をパラメータ ID とともに登録する.

        Returns:
            0 = 成功、負値 = 失敗
        """
        ...


@dataclass
class Parameter:
    """プロセス内パラメータ.

    1つの設計変数に対し、登録された (parameter_id, 材料) の組を保持する。
    update() / activate() は登録先すべての材料に伝播する。

    Attributes:
        tag: パラメータ番号
        value: 現在値
        grad_index: 感度解析での勾配番号（-1 = 未割当）
        objects: 登録された (parameter_id, 材料) のリスト
    """

    tag: int
    value: float = 0.0
    grad_index: int = -1
    objects: list[tuple[int, Any]] = field(default_factory=list, repr=False)

    def set_value(self, value: float) -> None:
        self.value = float(value)

    def add_object(self, parameter_id: int, obj: Any) -> int:
        self.objects.append((int(parameter_id), obj))
        return 0

    def update(self, value: float) -> int:
        """値を更新し、登録材料の update_parameter を呼ぶ.

        Returns:
            0 = 全材料で成功、それ以外は最初の失敗ステータス
        """
        self.value = float(value)
        status = 0
        for parameter_id, obj in self.objects:
            res = obj.update_parameter(parameter_id, self.value)
            if res < 0 and status == 0:
                status = res
        return status

    def activate(self, active: bool) -> int:
        """登録材料の微分対象を切り替える（active=False で解除）."""
        for parameter_id, obj in self.objects:
            obj.activate_parameter(parameter_id if active else 0)
        return 0
