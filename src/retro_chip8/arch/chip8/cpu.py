# src/retro_chip8/arch/chip8/cpu.py
"""
CHIP-8 CPUエミュレーションの中心モジュール。
"""
import random
from typing import Dict, List, Optional

from retro_chip8.core.snapshot import Operation
from retro_chip8.core.cpu import AbstractCpu
from retro_chip8.core.state import RegisterLayoutInfo, RegisterInfo
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.arch.chip8.constants import (
    DEFAULT_STACK_LIMIT, MEMORY_SIZE, PROGRAM_START, REGISTER_COUNT, DrawPolicy,
)
from retro_chip8.arch.chip8.instructions import decode_opcode, execute_instruction, ExecutionContext

# @intent:responsibility CHIP-8 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行）を提供します。
class Chip8Cpu(AbstractCpu):
    """
    CHIP-8 CPUをエミュレートするクラス。
    fetch / decode / execute はフォルトを例外として送出し、step() はそれを Snapshot.fault に変換します。
    """
    def __init__(self, bus: Bus, stack_limit: int = DEFAULT_STACK_LIMIT,
                 draw_policy: DrawPolicy = DrawPolicy.WRAP, rng: Optional[random.Random] = None,
                 start_address: int = PROGRAM_START):
        if stack_limit <= 0:
            raise ValueError("stack_limit must be a positive integer.")
        if not 0 <= start_address < MEMORY_SIZE:
            raise ValueError(f"start_address {start_address:#06x} outside memory.")
        self._stack_limit = stack_limit
        # reset() 後もPCはプログラムのロード先から始まる
        self._start_address = start_address
        self._context = ExecutionContext(rng=rng if rng is not None else random.Random(), draw_policy=draw_policy)
        super().__init__(bus)

    def _create_initial_state(self) -> Chip8CpuState:
        return Chip8CpuState(pc=self._start_address, stack_limit=self._stack_limit)

    @property
    def draw_policy(self) -> DrawPolicy:
        return self._context.draw_policy

    # --- Instruction cycle ---

    # @intent:responsibility PCとPC+1の2バイトをビッグエンディアンで結合し、PCを2進めて返します。
    # @intent:post-condition 範囲外の場合は AddressOutOfBoundsError を送出し、PCは進めません。
    def fetch(self) -> int:
        pc = self._state.pc
        word = (self._bus.read(pc) << 8) | self._bus.read(pc + 1)
        self._state.pc = (pc + 2) & 0xFFFF
        return word

    def decode(self, word: int) -> Operation:
        return decode_opcode(word)

    # @intent:responsibility 命令語をデコードして実行します。
    def execute(self, word: int) -> Operation:
        operation = self.decode(word)
        self._execute(operation)
        return operation

    def _fetch(self) -> int:
        return self.fetch()

    def _decode(self, opcode: int) -> Operation:
        return self.decode(opcode)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus, self._context)

    # --- Render hand-off ---

    # @intent:responsibility レンダラ向けにフレームバッファの読み取り専用ビューを返します。
    def get_framebuffer(self) -> memoryview:
        return self._state.framebuffer_view()

    def _framebuffer_bytes(self) -> bytes:
        return bytes(self._state.framebuffer)

    # --- Inspection ---

    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        registers = {f"V{i:X}": s.v[i] for i in range(REGISTER_COUNT)}
        registers.update({"I": s.i, "PC": s.pc, "SP": s.sp, "DT": s.delay_timer, "ST": s.sound_timer})
        return registers

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [RegisterInfo(f"V{i:X}", 8) for i in range(REGISTER_COUNT)]),
            RegisterLayoutInfo("Pointers", [
                RegisterInfo("I", 16), RegisterInfo("PC", 16), RegisterInfo("SP", 8)
            ]),
            RegisterLayoutInfo("Timers", [RegisterInfo("DT", 8), RegisterInfo("ST", 8)]),
        ]

    # @intent:responsibility VFの最下位ビットをフラグとして公開します。
    def get_flag_state(self) -> Dict[str, bool]:
        return {"VF": bool(self._state.v[0xF] & 0x1)}
