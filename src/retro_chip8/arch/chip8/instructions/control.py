# src/retro_chip8/arch/chip8/instructions/control.py
"""
制御命令（ジャンプ、サブルーチン、条件スキップ）の実装。
"""
from retro_chip8.core.snapshot import Operation
from retro_chip8.core.errors import AddressOutOfBoundsError
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.arch.chip8.constants import MEMORY_SIZE
from .base import ExecutionContext, InstructionFields, make_operation, fields_of

# --- RET (00EE) ---
def decode_ret(word: int) -> Operation:
    return make_operation(word, "00EE", "RET")

# @intent:responsibility スタックから戻りアドレスをポップしてPCに設定します。空の場合は StackUnderflowError。
def execute_ret(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    state.pc = state.pop()

# --- JP nnn (1nnn) ---
def decode_jp(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "1nnn", "JP", f"0x{f.nnn:03X}")

def execute_jp(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    state.jump(fields_of(op).nnn)

# --- CALL nnn (2nnn) ---
def decode_call(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "2nnn", "CALL", f"0x{f.nnn:03X}")

# @intent:responsibility 戻りアドレス（フェッチ後のPC＝次の命令）をプッシュしてからジャンプします。
def execute_call(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    # state.pc は CPU.step のフェッチで既に次の命令を指している
    state.push(state.pc)
    state.pc = fields_of(op).nnn

# --- SE Vx, kk (3xkk) ---
def decode_se_imm(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "3xkk", "SE", f"V{f.x:X}", f"0x{f.kk:02X}")

def execute_se_imm(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    if state.v[f.x] == f.kk:
        state.skip()

# --- SNE Vx, kk (4xkk) ---
def decode_sne_imm(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "4xkk", "SNE", f"V{f.x:X}", f"0x{f.kk:02X}")

def execute_sne_imm(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    if state.v[f.x] != f.kk:
        state.skip()

# --- SE Vx, Vy (5xy0) ---
def decode_se_reg(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "5xy0", "SE", f"V{f.x:X}", f"V{f.y:X}")

def execute_se_reg(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    if state.v[f.x] == state.v[f.y]:
        state.skip()

# --- SNE Vx, Vy (9xy0) ---
def decode_sne_reg(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "9xy0", "SNE", f"V{f.x:X}", f"V{f.y:X}")

def execute_sne_reg(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    if state.v[f.x] != state.v[f.y]:
        state.skip()

# --- JP V0, nnn (Bnnn) ---
def decode_jp_offset(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "Bnnn", "JP", "V0", f"0x{f.nnn:03X}")

# @intent:responsibility PC = nnn + V0。結果がメモリ外ならPCを変更せずフォルトにします。
def execute_jp_offset(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    target = fields_of(op).nnn + state.v[0]
    if target >= MEMORY_SIZE:
        raise AddressOutOfBoundsError(target, f"Jump target {target:#06x} (nnn + V0) outside memory.")
    state.jump(target)
