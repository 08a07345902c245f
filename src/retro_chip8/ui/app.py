# retro_chip8/ui/app.py
"""
コマンドラインアプリケーションのエントリポイント。
設定を読み込み、システムを構築し、ドライバを起動します。
"""
import argparse
import logging
import sys
from typing import List, Optional

from retro_chip8.arch.chip8.constants import DrawPolicy
from retro_chip8.config.builder import SystemBuilder
from retro_chip8.config.loader import ConfigLoader
from retro_chip8.config.models import SystemConfig, FaultPolicy
from retro_chip8.runtime.runner import Chip8Runner
from retro_chip8.ui.terminal import TerminalRenderer

logger = logging.getLogger(__name__)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="retro-chip8", description="CHIP-8 virtual machine")
    parser.add_argument("program", nargs="?", help="raw program image to load at the load address")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--hz", type=int, metavar="N", help="instructions per second (0 = unthrottled)")
    parser.add_argument("--max-cycles", type=int, metavar="N", help="stop after N cycles")
    parser.add_argument("--halt-on-fault", action="store_true", help="stop on the first fault")
    parser.add_argument("--seed", type=int, help="seed for the RND instruction")
    parser.add_argument("--clip", action="store_true", help="clip sprites at the screen edge instead of wrapping")
    parser.add_argument("--no-display", action="store_true", help="do not render the framebuffer")
    parser.add_argument("--show-registers", action="store_true", help="print registers below the display")
    parser.add_argument("--debug", action="store_true", help="enable verbose debug logging")
    return parser

# @intent:responsibility コマンドライン引数で設定値を上書きします。
def apply_arguments(config: SystemConfig, args: argparse.Namespace) -> SystemConfig:
    if args.program:
        config.program = args.program
    if args.hz is not None:
        config.runner.cycles_per_second = args.hz
    if args.max_cycles is not None:
        config.runner.max_cycles = args.max_cycles
    if args.halt_on_fault:
        config.runner.fault_policy = FaultPolicy.HALT
    if args.seed is not None:
        config.random_seed = args.seed
    if args.clip:
        config.draw_policy = DrawPolicy.CLIP
    if args.no_display:
        config.display.enabled = False
    if args.show_registers:
        config.display.show_registers = True
    return config

def main(argv: Optional[List[str]] = None) -> int:
    """
    アプリケーションのメイン関数。終了コードを返します。
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()
        config = apply_arguments(config, args)
        if config.runner.cycles_per_second < 0:
            raise ValueError("--hz must not be negative")
        if not config.program:
            parser.error("no program given (pass a ROM path or set 'program' in the config)")
        cpu, _ = SystemBuilder().build_system(config)
    except (OSError, ValueError) as e:
        logger.error("%s", e)
        return 2

    renderer = None
    if config.display.enabled:
        renderer = TerminalRenderer(
            on_char=config.display.on_char,
            off_char=config.display.off_char,
            register_source=cpu.get_register_map if config.display.show_registers else None,
        )

    runner = Chip8Runner(cpu, config.runner, renderer)
    try:
        summary = runner.run()
    except KeyboardInterrupt:
        runner.stop()
        summary = runner.summary()
        logger.info("Interrupted after %d cycles", summary.cycles)

    return 1 if summary.halted_on_fault else 0

if __name__ == '__main__':
    sys.exit(main())
