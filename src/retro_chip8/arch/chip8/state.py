# src/retro_chip8/arch/chip8/state.py
"""
CHIP-8 CPU固有の状態定義。

メモリはバス側（transport.bus.RAM）が保持し、ここではレジスタ、I、PC、タイマー、
コールスタック、フレームバッファを保持します。全ての変更操作は不変条件を検査し、
違反する場合は状態を変更せずにフォルトを送出します。
"""
from dataclasses import dataclass, field
from typing import List

from retro_chip8.core.state import CpuState
from retro_chip8.core.errors import AddressOutOfBoundsError, StackOverflowError, StackUnderflowError
from retro_chip8.arch.chip8.constants import (
    MEMORY_SIZE, PROGRAM_START, REGISTER_COUNT, DEFAULT_STACK_LIMIT,
    DISPLAY_WIDTH, DISPLAY_HEIGHT,
)

# @intent:responsibility CHIP-8 CPUの全てのレジスタ（V0-VF, I, PC, タイマー）とスタック、フレームバッファを保持します。
@dataclass
class Chip8CpuState(CpuState):
    """
    CHIP-8 CPUの状態を保持するデータクラス。
    sp は常にコールスタックの深さと一致します。
    """
    pc: int = PROGRAM_START
    v: bytearray = field(default_factory=lambda: bytearray(REGISTER_COUNT))
    i: int = 0x0000
    delay_timer: int = 0x00
    sound_timer: int = 0x00
    stack: List[int] = field(default_factory=list)
    stack_limit: int = DEFAULT_STACK_LIMIT
    framebuffer: bytearray = field(default_factory=lambda: bytearray(DISPLAY_WIDTH * DISPLAY_HEIGHT))

    # --- Registers ---

    def read_register(self, index: int) -> int:
        self._check_register_index(index)
        return self.v[index]

    def write_register(self, index: int, value: int) -> None:
        self._check_register_index(index)
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Register value {value} is not an 8-bit value.")
        self.v[index] = value

    def set_index(self, value: int) -> None:
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"Index register value {value} is not a 16-bit value.")
        self.i = value

    @staticmethod
    def _check_register_index(index: int) -> None:
        if not 0 <= index < REGISTER_COUNT:
            raise ValueError(f"Register index {index} out of range V0-VF.")

    # --- Program counter ---

    # @intent:responsibility PCを指定アドレスに設定します。
    # @intent:post-condition アドレスがメモリ外の場合はPCを変更せず AddressOutOfBoundsError を送出します。
    def jump(self, address: int) -> None:
        if not 0 <= address < MEMORY_SIZE:
            raise AddressOutOfBoundsError(address, f"Program counter target {address:#06x} outside memory.")
        self.pc = address

    # @intent:responsibility 次の命令を1つ読み飛ばします (PC += 2)。
    def skip(self) -> None:
        self.jump(self.pc + 2)

    # --- Call stack ---

    def push(self, address: int) -> None:
        if len(self.stack) >= self.stack_limit:
            raise StackOverflowError(self.stack_limit)
        self.stack.append(address & 0xFFFF)
        self.sp = len(self.stack)

    def pop(self) -> int:
        if not self.stack:
            raise StackUnderflowError()
        address = self.stack.pop()
        self.sp = len(self.stack)
        return address

    # --- Timers ---

    def set_delay_timer(self, value: int) -> None:
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Timer value {value} is not an 8-bit value.")
        self.delay_timer = value

    def set_sound_timer(self, value: int) -> None:
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Timer value {value} is not an 8-bit value.")
        self.sound_timer = value

    # @intent:responsibility 0でないタイマーを1つ減らします。
    # @intent:rationale 減算の周期は外部ドライバの責務であり、インタプリタ自身はこのメソッドを呼びません。
    def tick_timers(self) -> None:
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    # --- Framebuffer ---

    @staticmethod
    def _pixel_offset(x: int, y: int) -> int:
        if not (0 <= x < DISPLAY_WIDTH and 0 <= y < DISPLAY_HEIGHT):
            raise AddressOutOfBoundsError(x + y * DISPLAY_WIDTH, f"Pixel ({x}, {y}) outside {DISPLAY_WIDTH}x{DISPLAY_HEIGHT} display.")
        return y * DISPLAY_WIDTH + x

    def get_pixel(self, x: int, y: int) -> int:
        return self.framebuffer[self._pixel_offset(x, y)]

    # @intent:responsibility 画素に1をXORし、既に点灯していた（衝突した）かどうかを返します。
    def xor_pixel(self, x: int, y: int) -> bool:
        offset = self._pixel_offset(x, y)
        collision = self.framebuffer[offset] == 1
        self.framebuffer[offset] ^= 1
        return collision

    def clear_display(self) -> None:
        self.framebuffer[:] = bytes(len(self.framebuffer))

    def framebuffer_view(self) -> memoryview:
        """レンダラ向けの読み取り専用ビュー。"""
        return memoryview(self.framebuffer).toreadonly()
