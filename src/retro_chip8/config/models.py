from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from retro_chip8.arch.chip8.constants import PROGRAM_START, DEFAULT_STACK_LIMIT, DrawPolicy

class FaultPolicy(Enum):
    CONTINUE = "continue"  # ログに記録して次のフェッチへ進む
    HALT = "halt"          # ログに記録して実行を停止する

@dataclass
class RunnerConfig:
    cycles_per_second: int = 500  # 0 = 無制限
    timer_hz: int = 60
    fault_policy: FaultPolicy = FaultPolicy.CONTINUE
    max_cycles: Optional[int] = None
    max_consecutive_faults: int = 64  # 0 = 無制限

@dataclass
class DisplayConfig:
    enabled: bool = True
    on_char: str = "*"
    off_char: str = " "
    show_registers: bool = False

@dataclass
class SystemConfig:
    program: Optional[str] = None
    load_address: int = PROGRAM_START
    stack_limit: int = DEFAULT_STACK_LIMIT
    draw_policy: DrawPolicy = DrawPolicy.WRAP
    random_seed: Optional[int] = None
    runner: RunnerConfig = field(default_factory=RunnerConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
