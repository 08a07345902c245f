import logging
import random
from typing import Tuple

from retro_chip8.transport.bus import Bus, RAM
from retro_chip8.arch.chip8.cpu import Chip8Cpu
from retro_chip8.arch.chip8.constants import MEMORY_SIZE
from retro_chip8.loader.loader import ProgramLoader
from .models import SystemConfig

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、Bus、RAM、CPUを生成・接続し、プログラムをロードします。
class SystemBuilder:
    def __init__(self, loader: ProgramLoader = None):
        self._loader = loader or ProgramLoader()

    def build_system(self, config: SystemConfig) -> Tuple[Chip8Cpu, Bus]:
        bus = Bus()
        bus.register_device(0x0000, MEMORY_SIZE - 1, RAM(MEMORY_SIZE))

        rng = random.Random(config.random_seed)
        cpu = Chip8Cpu(bus, stack_limit=config.stack_limit, draw_policy=config.draw_policy, rng=rng,
                       start_address=config.load_address)
        cpu.reset()
        logger.debug(
            "Built CHIP-8 system: start=%#06x stack_limit=%d draw_policy=%s seed=%s",
            config.load_address, config.stack_limit, config.draw_policy.value, config.random_seed,
        )

        if config.program:
            self._loader.load_file(config.program, bus, config.load_address)

        return cpu, bus
