# retro_chip8/core/cpu.py
"""
Core Layer (抽象CPU)

1命令サイクル（フェッチ→デコード→実行）の流れだけを定義します。
命令ごとの意味はアーキテクチャ側の Instruction Layer が持ち、
実行中に発生した CpuFault は例外ではなく Snapshot.fault として呼び出し元に返します。
"""
from abc import ABC, abstractmethod
from typing import Optional, List, Dict

from retro_chip8.transport.bus import Bus
from retro_chip8.core.errors import CpuFault, Fault
from retro_chip8.core.snapshot import Snapshot, Operation, Metadata
from retro_chip8.core.state import CpuState, RegisterLayoutInfo

# @intent:responsibility 命令サイクルの駆動とフォルトの結果化を担う基底クラス。
class AbstractCpu(ABC):
    # @intent:pre-condition `bus` にはプログラムを格納したメモリがマップ済みであること。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._cycle_count: int = 0

    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """アーキテクチャ固有の初期状態（CpuStateの派生クラス）を返します。"""

    # @intent:responsibility 状態を初期値に戻します。バス上のメモリには触れません。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._cycle_count = 0

    def get_state(self) -> CpuState:
        return self._state

    def get_cycle_count(self) -> int:
        return self._cycle_count

    @abstractmethod
    def _fetch(self) -> int:
        """
        PCの位置から命令語を読み、PCを次の命令へ進めてから命令語を返します。
        読み出しに失敗した場合はPCを動かさずにフォルトを送出します。
        """

    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        """命令語を Operation に変換します。状態には触れません。"""

    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        """
        Operation を実行して状態を更新します。
        フォルトを送出するときは、何も書き換えていない状態のまま送出します。
        """

    @abstractmethod
    def _framebuffer_bytes(self) -> bytes:
        pass

    # @intent:responsibility 1命令を実行し、その結果を Snapshot として返します。
    # @intent:rationale 流れはここで固定し、各段の中身だけを派生クラスに任せる（Template Method）。
    def step(self) -> Snapshot:
        # 前サイクルの外で行われたアクセスは記録に含めない
        self._bus.get_and_clear_activity_log()
        initial_pc = self._state.pc
        opcode: Optional[int] = None
        operation: Optional[Operation] = None

        try:
            opcode = self._fetch()
            operation = self._decode(opcode)
            self._execute(operation)
        except CpuFault as e:
            fault = e.to_fault(initial_pc, opcode)
            return self._create_snapshot(initial_pc, operation, fault)

        self._cycle_count += operation.cycle_count
        return self._create_snapshot(initial_pc, operation)

    def _create_snapshot(self, initial_pc: int, operation: Optional[Operation],
                         fault: Optional[Fault] = None) -> Snapshot:
        text = operation.text if operation else "???"
        return Snapshot(
            state=self._state,
            operation=operation,
            metadata=Metadata(cycle_count=self._cycle_count, symbol_info=f"{initial_pc:#06x}: {text}"),
            bus_activity=self._bus.get_and_clear_activity_log(),
            framebuffer=self._framebuffer_bytes(),
            fault=fault,
        )

    # @intent:responsibility レンダラがCPUの内部構造を知らずに表示できるよう、レジスタ名と値の辞書を返します。
    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        """レジスタの表示グループと並び順を返します。"""

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        pass
