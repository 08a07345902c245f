# retro_chip8/core/errors.py
"""
Core Layer (実行時フォルト)

命令サイクル中に発生し得るフォルトの種類と、それを表す例外クラスを定義します。
フォルトはサイクル単位で回復可能であり、ホストプロセスを終了させるものではありません。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

# @intent:responsibility フォルトの分類を定義します。閉じた集合であり、ドライバはこれを見て継続/停止を判断します。
class FaultKind(Enum):
    UNSUPPORTED_OPCODE = "UNSUPPORTED_OPCODE"
    ADDRESS_OUT_OF_BOUNDS = "ADDRESS_OUT_OF_BOUNDS"
    STACK_UNDERFLOW = "STACK_UNDERFLOW"
    STACK_OVERFLOW = "STACK_OVERFLOW"

# @intent:responsibility 1サイクル分のフォルト情報を不変に記録します。
@dataclass(frozen=True)
class Fault:
    """
    step() の結果としてドライバに返されるフォルト記録。
    """
    kind: FaultKind
    message: str
    pc: int                         # フォルトが発生した命令の先頭アドレス
    opcode: Optional[int] = None    # 生の16bit命令語（判明している場合）
    address: Optional[int] = None   # 範囲外アクセスのアドレス

# @intent:responsibility 全てのCPUフォルト例外の基底クラス。
class CpuFault(Exception):
    kind: FaultKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    # @intent:responsibility 例外を不変のFault記録に変換します。
    def to_fault(self, pc: int, opcode: Optional[int] = None) -> Fault:
        return Fault(kind=self.kind, message=self.message, pc=pc, opcode=opcode)

class UnsupportedOpcodeError(CpuFault):
    """デコード表のどの命令グループ/ニブルにも一致しなかった命令語。"""
    kind = FaultKind.UNSUPPORTED_OPCODE

    def __init__(self, opcode: int):
        super().__init__(f"Opcode not supported: 0x{opcode:04X}")
        self.opcode = opcode

    def to_fault(self, pc: int, opcode: Optional[int] = None) -> Fault:
        return Fault(kind=self.kind, message=self.message, pc=pc, opcode=self.opcode)

# @intent:rationale 既存のバス利用者が IndexError を捕捉していても動作するよう、IndexError も継承します。
class AddressOutOfBoundsError(CpuFault, IndexError):
    """フェッチ、メモリアクセス、PC計算がメモリ範囲外を指した。"""
    kind = FaultKind.ADDRESS_OUT_OF_BOUNDS

    def __init__(self, address: int, message: Optional[str] = None):
        super().__init__(message or f"Address {address:#06x} out of bounds.")
        self.address = address

    def to_fault(self, pc: int, opcode: Optional[int] = None) -> Fault:
        return Fault(kind=self.kind, message=self.message, pc=pc, opcode=opcode, address=self.address)

class StackUnderflowError(CpuFault):
    """空のコールスタックからのRET。"""
    kind = FaultKind.STACK_UNDERFLOW

    def __init__(self):
        super().__init__("Stack underflow: return with an empty call stack.")

class StackOverflowError(CpuFault):
    """コールスタックが上限に達した状態でのCALL。"""
    kind = FaultKind.STACK_OVERFLOW

    def __init__(self, limit: int):
        super().__init__(f"Stack overflow: call depth limit {limit} reached.")
        self.limit = limit
