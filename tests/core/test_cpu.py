# tests/core/test_cpu.py
"""
AbstractCpu のテンプレートメソッド step() のテスト。
"""
from typing import Dict, List

import pytest

from retro_chip8.core.state import CpuState, RegisterLayoutInfo, RegisterInfo
from retro_chip8.core.cpu import AbstractCpu
from retro_chip8.core.errors import FaultKind, UnsupportedOpcodeError
from retro_chip8.core.snapshot import Snapshot, Operation
from retro_chip8.transport.bus import Bus, RAM, BusAccessType

# @intent:test_suite 命令サイクルの流れ、サイクル数の加算、フォルトの結果化を検証します。

class ByteCodeCpu(AbstractCpu):
    """1バイト命令だけを持つ検証用CPU。0x00=NOP, 0x01=アドレス0x20へ0xFFを書く, それ以外は未対応。"""
    def __init__(self, bus: Bus, start: int):
        self._start = start
        super().__init__(bus)

    def _create_initial_state(self) -> CpuState:
        return CpuState(pc=self._start)

    def _fetch(self) -> int:
        word = self._bus.read(self._state.pc)
        self._state.pc += 1
        return word

    def _decode(self, opcode: int) -> Operation:
        names = {0x00: "NOP", 0x01: "POKE"}
        if opcode not in names:
            raise UnsupportedOpcodeError(opcode)
        operands = ["$20"] if opcode == 0x01 else []
        return Operation(opcode_hex=f"{opcode:02X}", mnemonic=names[opcode], operands=operands,
                         opcode=opcode, length=1)

    def _execute(self, operation: Operation) -> None:
        if operation.opcode == 0x01:
            self._bus.write(0x20, 0xFF)

    def _framebuffer_bytes(self) -> bytes:
        return b"\x00\x01"

    def get_register_map(self) -> Dict[str, int]:
        return {"PC": self._state.pc}

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [RegisterLayoutInfo("Pointers", [RegisterInfo("PC", 16)])]

    def get_flag_state(self) -> Dict[str, bool]:
        return {}

@pytest.fixture
def machine():
    bus = Bus()
    bus.register_device(0x00, 0xFF, RAM(0x100))
    return ByteCodeCpu(bus, start=0x10), bus

def test_step_runs_one_instruction(machine):
    cpu, bus = machine
    bus.load(0x10, b"\x01\x00")

    snapshot = cpu.step()

    assert isinstance(snapshot, Snapshot)
    assert snapshot.ok
    assert snapshot.state is cpu.get_state()
    assert cpu.get_state().pc == 0x11
    assert snapshot.metadata.cycle_count == 1
    assert snapshot.metadata.symbol_info == "0x0010: POKE $20"
    assert snapshot.framebuffer == b"\x00\x01"
    assert [(a.address, a.access_type) for a in snapshot.bus_activity] == [
        (0x10, BusAccessType.READ),
        (0x20, BusAccessType.WRITE),
    ]

def test_step_excludes_accesses_made_between_cycles(machine):
    cpu, bus = machine
    bus.write(0x10, 0x00)
    snapshot = cpu.step()
    assert [a.address for a in snapshot.bus_activity] == [0x10]

def test_reset_restores_initial_state(machine):
    cpu, _ = machine
    cpu.step()
    assert cpu.get_cycle_count() == 1
    cpu.reset()
    assert cpu.get_state().pc == 0x10
    assert cpu.get_cycle_count() == 0

# @intent:test_case_fault フォルトは例外ではなく Snapshot.fault として返ることを検証します。
def test_decode_fault_is_returned(machine):
    cpu, bus = machine
    bus.write(0x10, 0x7E)

    snapshot = cpu.step()

    assert not snapshot.ok
    assert snapshot.operation is None
    assert snapshot.fault.kind is FaultKind.UNSUPPORTED_OPCODE
    assert (snapshot.fault.pc, snapshot.fault.opcode) == (0x10, 0x7E)
    assert snapshot.metadata.cycle_count == 0
    assert snapshot.metadata.symbol_info == "0x0010: ???"
    # フェッチ済みなので次のサイクルは次の命令から
    assert cpu.get_state().pc == 0x11

def test_fetch_fault_keeps_pc():
    bus = Bus()
    bus.register_device(0x00, 0x0F, RAM(0x10))
    cpu = ByteCodeCpu(bus, start=0x10)

    snapshot = cpu.step()

    assert snapshot.fault.kind is FaultKind.ADDRESS_OUT_OF_BOUNDS
    assert snapshot.fault.address == 0x10
    assert snapshot.fault.opcode is None
    assert cpu.get_state().pc == 0x10

def test_register_queries(machine):
    cpu, _ = machine
    assert cpu.get_register_map() == {"PC": 0x10}
    assert [r.name for r in cpu.get_register_layout()[0].registers] == ["PC"]
    assert cpu.get_flag_state() == {}
