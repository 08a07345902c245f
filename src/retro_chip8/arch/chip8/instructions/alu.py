# src/retro_chip8/arch/chip8/instructions/alu.py
"""
算術論理演算命令の実装。

VF はフラグレジスタを兼ねるため、フラグは必ず演算前の値から計算し、
結果をVxに書き込んだ後でVFに書き込みます（x == F の場合はフラグが残る）。
"""
from retro_chip8.core.snapshot import Operation
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.state import Chip8CpuState
from retro_chip8.arch.chip8.constants import FLAG_REGISTER
from .base import ExecutionContext, InstructionFields, make_operation, fields_of

def _decode_xy(word: int, pattern: str, mnemonic: str) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, pattern, mnemonic, f"V{f.x:X}", f"V{f.y:X}")

# --- ADD Vx, kk (7xkk) ---
def decode_add_imm(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "7xkk", "ADD", f"V{f.x:X}", f"0x{f.kk:02X}")

# @intent:responsibility 即値加算。8bitで折り返し、VFは変更しません。
def execute_add_imm(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    state.v[f.x] = (state.v[f.x] + f.kk) & 0xFF

# --- OR / AND / XOR (8xy1, 8xy2, 8xy3) ---
def decode_or(word: int) -> Operation:
    return _decode_xy(word, "8xy1", "OR")

def execute_or(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    state.v[f.x] |= state.v[f.y]

def decode_and(word: int) -> Operation:
    return _decode_xy(word, "8xy2", "AND")

def execute_and(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    state.v[f.x] &= state.v[f.y]

def decode_xor(word: int) -> Operation:
    return _decode_xy(word, "8xy3", "XOR")

def execute_xor(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    state.v[f.x] ^= state.v[f.y]

# --- ADD Vx, Vy (8xy4) ---
def decode_add_reg(word: int) -> Operation:
    return _decode_xy(word, "8xy4", "ADD")

# @intent:responsibility VF = 桁上がり。折り返し前の和が255を超えたら1。
def execute_add_reg(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    res = state.v[f.x] + state.v[f.y]
    state.v[f.x] = res & 0xFF
    state.v[FLAG_REGISTER] = 1 if res > 0xFF else 0

# --- SUB Vx, Vy (8xy5) ---
def decode_sub(word: int) -> Operation:
    return _decode_xy(word, "8xy5", "SUB")

# @intent:responsibility VF = NOT borrow。減算前に Vx >= Vy なら1。
def execute_sub(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    v1, v2 = state.v[f.x], state.v[f.y]
    state.v[f.x] = (v1 - v2) & 0xFF
    state.v[FLAG_REGISTER] = 1 if v1 >= v2 else 0

# --- SHR Vx (8xy6) ---
def decode_shr(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "8xy6", "SHR", f"V{f.x:X}")

# @intent:responsibility VF = シフト前のbit0。Vyは参照しません。
def execute_shr(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    v1 = state.v[f.x]
    state.v[f.x] = v1 >> 1
    state.v[FLAG_REGISTER] = v1 & 0x01

# --- SUBN Vx, Vy (8xy7) ---
def decode_subn(word: int) -> Operation:
    return _decode_xy(word, "8xy7", "SUBN")

# @intent:responsibility Vx = Vy - Vx。VF = 減算前に Vy >= Vx なら1。
def execute_subn(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    v1, v2 = state.v[f.x], state.v[f.y]
    state.v[f.x] = (v2 - v1) & 0xFF
    state.v[FLAG_REGISTER] = 1 if v2 >= v1 else 0

# --- SHL Vx (8xyE) ---
def decode_shl(word: int) -> Operation:
    f = InstructionFields.from_word(word)
    return make_operation(word, "8xyE", "SHL", f"V{f.x:X}")

# @intent:responsibility VF = シフト前のbit7。
def execute_shl(state: Chip8CpuState, bus: Bus, op: Operation, ctx: ExecutionContext) -> None:
    f = fields_of(op)
    v1 = state.v[f.x]
    state.v[f.x] = (v1 << 1) & 0xFF
    state.v[FLAG_REGISTER] = (v1 & 0x80) >> 7
