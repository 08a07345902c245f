import yaml
from enum import Enum
from typing import Dict, Any, Optional, Type

from retro_chip8.arch.chip8.constants import MEMORY_SIZE, DrawPolicy
from .models import SystemConfig, RunnerConfig, DisplayConfig, FaultPolicy

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r') as f:
            return self._parse_config(self._safe_load(f))

    def load_from_string(self, text: str) -> SystemConfig:
        return self._parse_config(self._safe_load(text))

    # @intent:post-condition YAMLの構文エラーは ValueError として報告します。
    def _safe_load(self, stream: Any) -> Any:
        try:
            data = yaml.safe_load(stream)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML configuration: {e}") from e
        return {} if data is None else data

    def _section(self, data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = data.get(name)
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise ValueError(f"Configuration section '{name}' must be a mapping.")
        return section

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be a mapping.")
        defaults = SystemConfig()

        runner_data = self._section(data, "runner")
        runner = RunnerConfig(
            cycles_per_second=self._parse_int(runner_data.get("cycles_per_second", RunnerConfig.cycles_per_second)),
            timer_hz=self._parse_int(runner_data.get("timer_hz", RunnerConfig.timer_hz)),
            fault_policy=self._parse_enum(FaultPolicy, runner_data.get("fault_policy", "continue"), "fault_policy"),
            max_cycles=self._parse_optional_int(runner_data.get("max_cycles")),
            max_consecutive_faults=self._parse_int(
                runner_data.get("max_consecutive_faults", RunnerConfig.max_consecutive_faults)
            ),
        )

        display_data = self._section(data, "display")
        display = DisplayConfig(
            enabled=bool(display_data.get("enabled", True)),
            on_char=str(display_data.get("on_char", DisplayConfig.on_char)),
            off_char=str(display_data.get("off_char", DisplayConfig.off_char)),
            show_registers=bool(display_data.get("show_registers", False)),
        )

        config = SystemConfig(
            program=data.get("program"),
            load_address=self._parse_int(data.get("load_address", defaults.load_address)),
            stack_limit=self._parse_int(data.get("stack_limit", defaults.stack_limit)),
            draw_policy=self._parse_enum(DrawPolicy, data.get("draw_policy", "wrap"), "draw_policy"),
            random_seed=self._parse_optional_int(data.get("random_seed")),
            runner=runner,
            display=display,
        )
        self._validate(config)
        return config

    def _validate(self, config: SystemConfig) -> None:
        if not 0 <= config.load_address < MEMORY_SIZE:
            raise ValueError(f"load_address {config.load_address:#06x} outside memory.")
        if config.stack_limit <= 0:
            raise ValueError(f"stack_limit must be positive: {config.stack_limit}")
        if config.runner.cycles_per_second < 0:
            raise ValueError(f"cycles_per_second must not be negative: {config.runner.cycles_per_second}")
        if config.runner.timer_hz < 0:
            raise ValueError(f"timer_hz must not be negative: {config.runner.timer_hz}")
        if len(config.display.on_char) != 1 or len(config.display.off_char) != 1:
            raise ValueError("on_char and off_char must be single characters.")

    def _parse_enum(self, enum_type: Type[Enum], value: Any, name: str) -> Any:
        if isinstance(value, enum_type):
            return value
        try:
            return enum_type(str(value).lower())
        except ValueError:
            choices = ", ".join(member.value for member in enum_type)
            raise ValueError(f"Invalid {name} '{value}' (expected one of: {choices})")

    def _parse_optional_int(self, value: Any) -> Optional[int]:
        if value is None:
            return None
        return self._parse_int(value)

    def _parse_int(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Invalid integer format: {value}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            if value.lower().startswith("0x"):
                return int(value, 16)
            return int(value)
        raise ValueError(f"Invalid integer format: {value}")
