"""材料状態の転送（プロセス間通信）アダプタ.

材料の状態を固定長 11 要素の数値レコードに詰め、外部のチャネルで送受信する。

レコード配置:
  [0] tag   [1] E   [2] sigma_y   [3] H_iso   [4] H_kin   [5] 予約（未使用, 0）
  [6] eps_p_c   [7] alpha_c   [8] strain_t   [9] stress_t   [10] tangent_t

受信側は試行履歴を受信した収束済み履歴に一致させる
（送信前の収束済み／試行の差は破棄される）。
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

from uniaxial_hardening.core.state import HardeningState, TrialState

if TYPE_CHECKING:
    from uniaxial_hardening.materials.hardening import HardeningMaterial

LOG = logging.getLogger(__name__)

TRANSFER_RECORD_SIZE = 11
RESERVED_SLOT = 5


@runtime_checkable
class ChannelProtocol(Protocol):
    """数値ベクトルを送受信するチャネル.

    戻り値はいずれも 0 = 成功、負値 = 失敗。
    """

    def send_vector(self, db_tag: int, commit_tag: int, data: np.ndarray) -> int: ...

    def recv_vector(self, db_tag: int, commit_tag: int, data: np.ndarray) -> int:
        """data をその場で受信値で埋める."""
        ...


class MemoryChannel:
    """プロセス内チャネル.

    (db_tag, commit_tag) をキーに送信ベクトルのコピーを保持する。
    未送信のキーを受信すると -1 を返す。
    """

    def __init__(self) -> None:
        self._store: dict[tuple[int, int], np.ndarray] = {}

    def send_vector(self, db_tag: int, commit_tag: int, data: np.ndarray) -> int:
        self._store[(db_tag, commit_tag)] = np.array(data, dtype=float, copy=True)
        return 0

    def recv_vector(self, db_tag: int, commit_tag: int, data: np.ndarray) -> int:
        stored = self._store.get((db_tag, commit_tag))
        if stored is None or stored.shape != data.shape:
            return -1
        data[:] = stored
        return 0


def pack_state(material: HardeningMaterial) -> np.ndarray:
    """材料状態を転送レコードに詰める."""
    data = np.zeros(TRANSFER_RECORD_SIZE)
    data[0] = material.tag
    data[1] = material.E
    data[2] = material.sigma_y
    data[3] = material.H_iso
    data[4] = material.H_kin
    data[6] = material.committed.eps_p
    data[7] = material.committed.alpha
    data[8] = material.trial.strain
    data[9] = material.trial.stress
    data[10] = material.trial.tangent
    return data


def unpack_state(material: HardeningMaterial, data: np.ndarray) -> None:
    """転送レコードから材料状態を復元する.

    試行履歴は受信した収束済み履歴と同じ値にする。
    """
    material.tag = int(data[0])
    material.E = float(data[1])
    material.iso.sigma_y0 = float(data[2])
    material.iso.H_iso = float(data[3])
    material.kin.H_kin = float(data[4])
    material.committed = HardeningState(eps_p=float(data[6]), alpha=float(data[7]))
    material.trial = TrialState(
        strain=float(data[8]),
        stress=float(data[9]),
        tangent=float(data[10]),
        history=material.committed.copy(),
    )


def send_self(
    material: HardeningMaterial,
    commit_tag: int,
    channel: ChannelProtocol,
    *,
    logger: logging.Logger | None = None,
) -> int:
    """材料状態を送信する.

    Returns:
        チャネルのステータス（負値 = 失敗）
    """
    log = logger if logger is not None else LOG
    res = channel.send_vector(material.db_tag, commit_tag, pack_state(material))
    if res < 0:
        log.error("%s::send_self() - failed to send data", material.type_name)
    return res


def recv_self(
    material: HardeningMaterial,
    commit_tag: int,
    channel: ChannelProtocol,
    *,
    logger: logging.Logger | None = None,
) -> int:
    """材料状態を受信する.

    受信に失敗した場合は E と tag を 0 にして、半端な値が使われないようにする。
    呼び出し側はステータスを確認してから材料を使うこと。

    Returns:
        チャネルのステータス（負値 = 失敗）
    """
    log = logger if logger is not None else LOG
    data = np.zeros(TRANSFER_RECORD_SIZE)
    res = channel.recv_vector(material.db_tag, commit_tag, data)
    if res < 0:
        log.error("%s::recv_self() - failed to receive data", material.type_name)
        material.E = 0.0
        material.tag = 0
        return res

    unpack_state(material, data)
    return res
