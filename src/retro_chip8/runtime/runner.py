# retro_chip8/runtime/runner.py
"""
実行ドライバモジュール。

CPUを一定のサイクルレートで繰り返し step() し、タイマーの減算、フォルト方針の適用、
レンダラへのフレームバッファ受け渡しを行います。コア自身はタイミングを一切持たないため、
これらは全てこの外部ドライバの責務です。
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.core.errors import Fault
from retro_chip8.core.snapshot import Snapshot
from retro_chip8.config.models import RunnerConfig, FaultPolicy

logger = logging.getLogger(__name__)

# @intent:responsibility step() ごとに Snapshot を受け取るレンダラのインターフェース。
class Renderer(Protocol):
    def render(self, snapshot: Snapshot) -> None:
        ...

# @intent:responsibility 実行終了時の要約を記録します。
@dataclass(frozen=True)
class RunSummary:
    cycles: int            # 実行を試みたサイクル数（フォルトを含む）
    faults: int
    halted_on_fault: bool
    last_fault: Optional[Fault] = None

class Chip8Runner:
    """
    CPUを駆動する外部ドライバ。
    timer_hz / cycles_per_second の比率で、実行サイクル数からタイマー減算の時期を決めます。
    """
    def __init__(self, cpu: Chip8Cpu, config: Optional[RunnerConfig] = None,
                 renderer: Optional[Renderer] = None,
                 clock: Callable[[], float] = time.perf_counter,
                 sleep: Callable[[float], None] = time.sleep):
        self._cpu = cpu
        self._config = config or RunnerConfig()
        self._renderer = renderer
        self._clock = clock
        self._sleep = sleep
        self._running = False
        self._cycles = 0
        self._faults = 0
        self._consecutive_faults = 0
        self._timer_accumulator = 0
        self._last_fault: Optional[Fault] = None
        self._halted_on_fault = False

    @property
    def running(self) -> bool:
        return self._running

    # @intent:responsibility 実行ループに停止を要求します。現在のサイクル完了後に停止します。
    def stop(self) -> None:
        self._running = False

    # @intent:responsibility 1サイクルを実行し、タイマー、フォルト方針、描画を処理します。
    def run_cycle(self) -> Snapshot:
        snapshot = self._cpu.step()
        self._cycles += 1
        self._tick_timers()

        if snapshot.fault is not None:
            self._handle_fault(snapshot.fault)
        else:
            self._consecutive_faults = 0
            logger.debug("%s", snapshot.metadata.symbol_info)

        if self._renderer is not None:
            self._renderer.render(snapshot)
        return snapshot

    # @intent:rationale タイマーはサイクル数に対して timer_hz / cycles_per_second の割合で減算する。
    #                  cycles_per_second が 0（無制限）の場合は1サイクルを1/500秒とみなす。
    def _tick_timers(self) -> None:
        if self._config.timer_hz <= 0:
            return
        rate = self._config.cycles_per_second or RunnerConfig.cycles_per_second
        self._timer_accumulator += self._config.timer_hz
        while self._timer_accumulator >= rate:
            self._timer_accumulator -= rate
            self._cpu.get_state().tick_timers()

    def _handle_fault(self, fault: Fault) -> None:
        self._faults += 1
        self._consecutive_faults += 1
        self._last_fault = fault

        if self._config.fault_policy is FaultPolicy.HALT:
            logger.error("Halting on %s at %#06x: %s", fault.kind.value, fault.pc, fault.message)
            self._halted_on_fault = True
            self.stop()
            return

        logger.warning("%s at %#06x: %s", fault.kind.value, fault.pc, fault.message)
        limit = self._config.max_consecutive_faults
        if limit and self._consecutive_faults >= limit:
            logger.error("Halting after %d consecutive faults", self._consecutive_faults)
            self._halted_on_fault = True
            self.stop()

    # @intent:responsibility 停止要求、フォルトによる停止、max_cycles のいずれかまで実行を続けます。
    def run(self) -> RunSummary:
        self._running = True
        max_cycles = self._config.max_cycles
        period = 1.0 / self._config.cycles_per_second if self._config.cycles_per_second > 0 else 0.0
        logger.info("Run started (%s cycles/s)", self._config.cycles_per_second or "unthrottled")

        next_deadline = self._clock()
        try:
            while self._running:
                if max_cycles is not None and self._cycles >= max_cycles:
                    break
                self.run_cycle()
                if period:
                    next_deadline += period
                    delay = next_deadline - self._clock()
                    if delay > 0:
                        self._sleep(delay)
                    else:
                        # 遅れを取り戻そうとして連続実行しないよう、基準時刻をリセットする
                        next_deadline = self._clock()
        finally:
            self._running = False

        summary = self.summary()
        logger.info("Run finished after %d cycles (%d faults)", summary.cycles, summary.faults)
        return summary

    def summary(self) -> RunSummary:
        return RunSummary(
            cycles=self._cycles,
            faults=self._faults,
            halted_on_fault=self._halted_on_fault,
            last_fault=self._last_fault,
        )
