# tests/runtime/test_runner.py
"""
retro_chip8.runtime.runnerモジュールの単体テスト。
"""
import logging

import pytest

from retro_chip8.transport.bus import Bus, RAM
from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.config.models import RunnerConfig, FaultPolicy
from retro_chip8.core.errors import FaultKind
from retro_chip8.runtime.runner import Chip8Runner

# @intent:test_suite 実行ドライバのフォルト方針、タイマー減算、ペーシングを検証します。

LOOP = b"\x12\x00"  # 0x200: JP 0x200

class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

class RecordingRenderer:
    def __init__(self):
        self.snapshots = []

    def render(self, snapshot):
        self.snapshots.append(snapshot)

@pytest.fixture
def make_runner():
    def _make(program: bytes = LOOP, **config_kwargs):
        bus = Bus()
        bus.register_device(0x0000, 0x0FFF, RAM(0x1000))
        bus.load(0x200, program)
        cpu = Chip8Cpu(bus)
        config_kwargs.setdefault("cycles_per_second", 0)
        clock = FakeClock()
        renderer = RecordingRenderer()
        runner = Chip8Runner(cpu, RunnerConfig(**config_kwargs), renderer, clock=clock, sleep=clock.sleep)
        return runner, cpu, renderer, clock
    return _make

def test_run_stops_at_max_cycles(make_runner):
    runner, cpu, renderer, _ = make_runner(max_cycles=10)
    summary = runner.run()
    assert summary.cycles == 10
    assert summary.faults == 0
    assert not summary.halted_on_fault
    assert not runner.running
    assert len(renderer.snapshots) == 10
    assert cpu.get_state().pc == 0x200

# @intent:test_case_policy HALT方針では最初のフォルトで停止することを検証します。
def test_halt_policy_stops_on_first_fault(make_runner):
    runner, cpu, _, _ = make_runner(b"\x60\x01\xF0\x0A", fault_policy=FaultPolicy.HALT, max_cycles=100)
    summary = runner.run()
    assert summary.cycles == 2
    assert summary.halted_on_fault
    assert summary.last_fault.kind is FaultKind.UNSUPPORTED_OPCODE
    assert summary.last_fault.pc == 0x202
    assert cpu.get_state().v[0] == 1

def test_continue_policy_keeps_running(make_runner):
    # 0x200: 未対応, 0x202: JP 0x202
    runner, _, _, _ = make_runner(b"\xE0\x9E\x12\x02", max_cycles=5)
    summary = runner.run()
    assert summary.cycles == 5
    assert summary.faults == 1
    assert not summary.halted_on_fault

def test_consecutive_fault_cap(make_runner):
    # ゼロ埋めのメモリは 0x0000 (未対応) の連続になる
    runner, _, _, _ = make_runner(b"", max_consecutive_faults=3, max_cycles=100)
    summary = runner.run()
    assert summary.cycles == 3
    assert summary.faults == 3
    assert summary.halted_on_fault

def test_consecutive_fault_cap_disabled(make_runner):
    runner, _, _, _ = make_runner(b"", max_consecutive_faults=0, max_cycles=50)
    summary = runner.run()
    assert summary.faults == 50
    assert not summary.halted_on_fault

@pytest.mark.parametrize("cps, hz, cycles, expected", [
    (60, 60, 4, 6),
    (120, 60, 10, 5),
    (500, 60, 25, 7),
    (0, 60, 25, 7),
])
def test_timers_tick_at_configured_ratio(make_runner, cps, hz, cycles, expected):
    runner, cpu, _, _ = make_runner(cycles_per_second=cps, timer_hz=hz, max_cycles=cycles)
    cpu.get_state().set_delay_timer(10)
    cpu.get_state().set_sound_timer(10)
    runner.run()
    assert cpu.get_state().delay_timer == expected
    assert cpu.get_state().sound_timer == expected

def test_timers_disabled(make_runner):
    runner, cpu, _, _ = make_runner(timer_hz=0, max_cycles=20)
    cpu.get_state().set_delay_timer(5)
    runner.run()
    assert cpu.get_state().delay_timer == 5

def test_run_paces_cycles(make_runner):
    runner, _, _, clock = make_runner(cycles_per_second=100, max_cycles=4)
    runner.run()
    assert clock.sleeps == pytest.approx([0.01] * 4)

def test_unthrottled_run_never_sleeps(make_runner):
    runner, _, _, clock = make_runner(max_cycles=4)
    runner.run()
    assert clock.sleeps == []

def test_stop_from_renderer(make_runner):
    runner, _, renderer, _ = make_runner(max_cycles=None)

    base_render = renderer.render
    def render_and_stop(snapshot):
        base_render(snapshot)
        if len(renderer.snapshots) == 3:
            runner.stop()
    renderer.render = render_and_stop

    summary = runner.run()
    assert summary.cycles == 3

def test_fault_is_logged_once(make_runner, caplog):
    runner, _, _, _ = make_runner(b"\xE0\x9E\x12\x02", max_cycles=3)
    with caplog.at_level(logging.DEBUG):
        runner.run()
    fault_records = [r for r in caplog.records if "UNSUPPORTED_OPCODE" in r.getMessage()]
    assert len(fault_records) == 1
    assert fault_records[0].levelno == logging.WARNING
    assert fault_records[0].name == "retro_chip8.runtime.runner"
