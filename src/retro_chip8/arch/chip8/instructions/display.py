# src/retro_chip8/arch/chip8/instructions/display.py
"""
表示命令（画面消去、スプライト描画）の実装。
"""
from retro_chip8.core.snapshot import Operation
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.arch.chip8.constants import (
    FLAG_REGISTER, DISPLAY_WIDTH, DISPLAY_HEIGHT, SPRITE_WIDTH, DrawPolicy,
)
from .base import ExecutionContext, InstructionFields, make_operation, fields_of

# --- CLS (00E0) ---
def decode_cls(word: int) -> Operation:
    return make_operation(word, "00E0", "CLS")

def execute_cls(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    state.clear_display()

# --- DRW Vx, Vy, n (Dxyn) ---
def decode_drw(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "Dxyn", "DRW", f"V{f.x:X}", f"V{f.y:X}", f"{f.n}")

# @intent:responsibility I から始まる n 行のスプライトを (Vx, Vy) にXOR描画し、VFに衝突の有無を設定します。
# @intent:pre-condition スプライトの全行を読み出してから画素を変更するため、範囲外読み出し時は画面もVFも変化しません。
def execute_drw(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    # VFが座標レジスタを兼ねる場合に備え、VFをクリアする前に座標を取り出す
    origin_x = state.v[f.x]
    origin_y = state.v[f.y]
    rows = [bus.read(state.i + row) for row in range(f.n)]

    if ctx.draw_policy is DrawPolicy.CLIP:
        origin_x %= DISPLAY_WIDTH
        origin_y %= DISPLAY_HEIGHT

    state.v[FLAG_REGISTER] = 0
    collision = False
    for row, sprite in enumerate(rows):
        y = origin_y + row
        for col in range(SPRITE_WIDTH):
            if not (sprite >> (SPRITE_WIDTH - 1 - col)) & 0x1:
                continue
            x = origin_x + col
            if ctx.draw_policy is DrawPolicy.CLIP:
                if x >= DISPLAY_WIDTH or y >= DISPLAY_HEIGHT:
                    continue
            else:
                x %= DISPLAY_WIDTH
                y %= DISPLAY_HEIGHT
            if state.xor_pixel(x, y):
                collision = True

    state.v[FLAG_REGISTER] = 1 if collision else 0
