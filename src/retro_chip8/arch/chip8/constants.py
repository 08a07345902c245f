# src/retro_chip8/arch/chip8/constants.py
"""
CHIP-8 マシンの固定パラメータ。
"""
from enum import Enum

MEMORY_SIZE = 4096       # 0x000-0xFFF
PROGRAM_START = 0x200    # プログラムイメージのロード開始アドレス (0x000-0x1FF は予約領域)
REGISTER_COUNT = 16      # V0-VF
FLAG_REGISTER = 0xF      # VF はフラグレジスタを兼ねる
DEFAULT_STACK_LIMIT = 16

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
SPRITE_WIDTH = 8

# @intent:constant スプライト座標が画面端を越えた場合の扱い。
class DrawPolicy(Enum):
    WRAP = "wrap"  # 画素単位で画面サイズの剰余を取る
    CLIP = "clip"  # 開始座標のみ剰余を取り、はみ出した画素は捨てる
