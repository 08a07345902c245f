# retro_chip8/core/state.py
"""
CPU状態の基底型と、レンダラ向けのレジスタ配置定義。
"""
from dataclasses import dataclass
from typing import List, NamedTuple

# @intent:responsibility どのアーキテクチャにも存在する最小限のレジスタ（PCとスタック深さ）を持ちます。
@dataclass
class CpuState:
    pc: int = 0
    sp: int = 0  # 派生クラスがスタックの深さと同期させる

class RegisterInfo(NamedTuple):
    """レジスタ名と表示上のビット幅。"""
    name: str
    width: int

# @intent:data_structure get_register_layout() が返す表示グループ（"General", "Timers" など）。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]
