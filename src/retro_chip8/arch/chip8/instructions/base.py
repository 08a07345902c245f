# src/retro_chip8/arch/chip8/instructions/base.py
"""
CHIP-8命令実装用の共通ユーティリティ。
"""
import random
from dataclasses import dataclass, field
from typing import NamedTuple

from retro_chip8.core.snapshot import Operation
from retro_chip8.arch.chip8.constants import DrawPolicy

# @intent:data_structure 16bit命令語から切り出した標準のオペランドフィールド。
class InstructionFields(NamedTuple):
    nnn: int  # 12bit アドレス
    n: int    # 末尾4bit
    x: int    # 第1レジスタ選択子
    y: int    # 第2レジスタ選択子
    kk: int   # 8bit 即値

    @classmethod
    def from_word(cls, word: int) -> "InstructionFields":
        return cls(
            nnn=word & 0x0FFF,
            n=word & 0x000F,
            x=(word & 0x0F00) >> 8,
            y=(word & 0x00F0) >> 4,
            kk=word & 0x00FF,
        )

# @intent:responsibility 命令実行に必要な、状態以外の環境（乱数源、描画ポリシー）をまとめます。
@dataclass
class ExecutionContext:
    rng: random.Random = field(default_factory=random.Random)
    draw_policy: DrawPolicy = DrawPolicy.WRAP

# @intent:utility_function デコード関数が共通で使う Operation の生成処理。
def make_operation(word: int, pattern: str, mnemonic: str, *operands: str) -> Operation:
    return Operation(
        opcode_hex=f"{word:04X}",
        mnemonic=mnemonic,
        operands=list(operands),
        opcode=word,
        pattern=pattern,
    )

def fields_of(op: Operation) -> InstructionFields:
    return InstructionFields.from_word(op.opcode)
