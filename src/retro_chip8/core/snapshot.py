# retro_chip8/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令サイクルの結果（CPU状態、実行した命令、バスアクセス、
フレームバッファ、フォルト）を記録した不変のデータ構造を定義します。
レンダラへの情報提供と、ドライバによるフォルト判定に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from retro_chip8.core.state import CpuState
from retro_chip8.core.errors import Fault
from retro_chip8.transport.bus import BusAccessType, BusAccess

__all__ = ["Operation", "Metadata", "Snapshot", "Fault", "BusAccessType", "BusAccess"]

# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    デコードされた命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str # 例: "8124"
    mnemonic: str # 例: "ADD"
    operands: List[str] = field(default_factory=list) # 例: ["V1", "V2"]
    opcode: int = 0 # 生の命令語
    pattern: str = "" # 実行関数を引くためのキー。例: "8xy4"
    cycle_count: int = 1
    length: int = 2 # 命令のバイト長

    @property
    def text(self) -> str:
        if self.operands:
            return f"{self.mnemonic} {', '.join(self.operands)}"
        return self.mnemonic

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    """
    実行に関するメタデータ（累計サイクル数、命令の表示文字列など）を記録するデータクラス。
    """
    cycle_count: int
    symbol_info: Optional[str] = None # 例: "0x0200: LD V0, 0x0A"

# @intent:responsibility ある一時点におけるCPUとバスの状態と、そのサイクルの結果を不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    1サイクル実行後のCPU状態、実行した命令、フレームバッファの複製、フォルトを記録します。
    operation はフェッチまたはデコードでフォルトした場合 None になります。
    """
    # @intent:rationale stateは実行後の状態への参照であり、複製ではない。
    #                  framebuffer だけは bytes に複製し、後続サイクルの影響を受けないようにする。
    state: CpuState
    operation: Optional[Operation]
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
    framebuffer: bytes = b""
    fault: Optional[Fault] = None

    @property
    def ok(self) -> bool:
        return self.fault is None
