# src/retro_chip8/arch/chip8/instructions/__init__.py
"""
CHIP-8命令セット実装パッケージ。
"""
from retro_chip8.core.errors import UnsupportedOpcodeError
from retro_chip8.core.snapshot import Operation
from retro_chip8.transport.bus import Bus
from retro_chip8.arch.chip8.state import Chip8CpuState
from .base import ExecutionContext, InstructionFields
from .maps import DECODE_MAP, SYSTEM_DECODE_MAP, ALU_DECODE_MAP, EXECUTE_MAP

# @intent:responsibility CHIP-8の16bit命令語をデコードします。
# @intent:post-condition 未対応の命令語は UnsupportedOpcodeError を送出します。状態には触れません。
def decode_opcode(word: int) -> Operation:
    """
    命令語をデコードし、Operationオブジェクトを返します。
    """
    if not 0 <= word <= 0xFFFF:
        raise ValueError(f"Instruction word {word} is not a 16-bit value.")
    group = (word & 0xF000) >> 12
    if group == 0x0:
        decoder = SYSTEM_DECODE_MAP.get(word)
    elif group == 0x8:
        decoder = ALU_DECODE_MAP.get(word & 0x000F)
    else:
        decoder = DECODE_MAP.get(group)
    if decoder is None:
        raise UnsupportedOpcodeError(word)
    return decoder(word)

# @intent:responsibility デコードされたCHIP-8命令を実行します。
def execute_instruction(operation: Operation, state: Chip8CpuState, bus: Bus, ctx: ExecutionContext) -> None:
    """
    デコードされた命令を実行し、CPUの状態を変更します。
    """
    executor = EXECUTE_MAP.get(operation.pattern)
    if executor is None:
        raise UnsupportedOpcodeError(operation.opcode)
    executor(state, bus, operation, ctx)
