# src/retro_chip8/arch/chip8/instructions/maps.py
"""
命令語と命令実装のマッピング定義。

デコードは上位4bit（命令グループ）で引き、グループ0は命令語全体、
グループ8は末尾4bitで二段目の表を引きます。
"""
from . import load
from . import alu
from . import control
from . import display

# @intent:map グループ0: 命令語全体からデコード関数へのマッピング。0nnn (SYS) は未対応。
SYSTEM_DECODE_MAP = {
    0x00E0: display.decode_cls,
    0x00EE: control.decode_ret,
}

# @intent:map グループ8: 末尾4bitからデコード関数へのマッピング。
ALU_DECODE_MAP = {
    0x0: load.decode_ld_reg,
    0x1: alu.decode_or,
    0x2: alu.decode_and,
    0x3: alu.decode_xor,
    0x4: alu.decode_add_reg,
    0x5: alu.decode_sub,
    0x6: alu.decode_shr,
    0x7: alu.decode_subn,
    0xE: alu.decode_shl,
}

# @intent:map 命令グループ（上位4bit）からデコード関数へのマッピング。E, F グループは未対応。
DECODE_MAP = {
    0x1: control.decode_jp,
    0x2: control.decode_call,
    0x3: control.decode_se_imm,
    0x4: control.decode_sne_imm,
    0x5: control.decode_se_reg,
    0x6: load.decode_ld_imm,
    0x7: alu.decode_add_imm,
    0x9: control.decode_sne_reg,
    0xA: load.decode_ld_index,
    0xB: control.decode_jp_offset,
    0xC: load.decode_rnd,
    0xD: display.decode_drw,
}

# @intent:map Operation.pattern から実行関数へのマッピング。
EXECUTE_MAP = {
    # Display
    "00E0": display.execute_cls,
    "Dxyn": display.execute_drw,

    # Control
    "00EE": control.execute_ret,
    "1nnn": control.execute_jp,
    "2nnn": control.execute_call,
    "3xkk": control.execute_se_imm,
    "4xkk": control.execute_sne_imm,
    "5xy0": control.execute_se_reg,
    "9xy0": control.execute_sne_reg,
    "Bnnn": control.execute_jp_offset,

    # Load
    "6xkk": load.execute_ld_imm,
    "8xy0": load.execute_ld_reg,
    "Annn": load.execute_ld_index,
    "Cxkk": load.execute_rnd,

    # ALU
    "7xkk": alu.execute_add_imm,
    "8xy1": alu.execute_or,
    "8xy2": alu.execute_and,
    "8xy3": alu.execute_xor,
    "8xy4": alu.execute_add_reg,
    "8xy5": alu.execute_sub,
    "8xy6": alu.execute_shr,
    "8xy7": alu.execute_subn,
    "8xyE": alu.execute_shl,
}
