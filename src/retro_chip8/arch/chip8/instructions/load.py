# src/retro_chip8/arch/chip8/instructions/load.py
"""
ロード命令（即値、レジスタ間、インデックス、乱数）の実装。
"""
from retro_chip8.core.snapshot import Operation
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.state import Chip8CpuState
from .base import ExecutionContext, InstructionFields, make_operation, fields_of

# --- LD Vx, kk (6xkk) ---
def decode_ld_imm(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "6xkk", "LD", f"V{f.x:X}", f"0x{f.kk:02X}")

def execute_ld_imm(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    state.v[f.x] = f.kk

# --- LD Vx, Vy (8xy0) ---
def decode_ld_reg(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "8xy0", "LD", f"V{f.x:X}", f"V{f.y:X}")

def execute_ld_reg(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    state.v[f.x] = state.v[f.y]

# --- LD I, nnn (Annn) ---
def decode_ld_index(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "Annn", "LD", "I", f"0x{f.nnn:03X}")

def execute_ld_index(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    state.set_index(fields_of(op).nnn)

# --- RND Vx, kk (Cxkk) ---
def decode_rnd(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "Cxkk", "RND", f"V{f.x:X}", f"0x{f.kk:02X}")

# @intent:responsibility 0-255の一様乱数とkkの論理積をVxに格納します。
def execute_rnd(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    state.v[f.x] = ctx.rng.randint(0, 0xFF) & f.kk
