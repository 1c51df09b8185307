import os
import yaml
from typing import Dict, Any, Optional
from .models import SystemConfig, ProgramImage, CpuInitialState, ConsoleConfig, RunConfig

class ConfigLoader:
    def load_from_file(self, path: str) -> SystemConfig:
        with open(path, 'r', encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        config = self._parse_config(data)
        config.base_dir = os.path.dirname(os.path.abspath(path))
        return config

    def _parse_config(self, data: Dict[str, Any]) -> SystemConfig:
        if not isinstance(data, dict):
            raise ValueError("System config must be a mapping.")
        arch = data.get("architecture", "LC3")

        # Parse Programs
        programs = []
        for program_data in data.get("programs", []):
            path = program_data.get("path")
            words = [self._parse_int(w) for w in program_data.get("words", [])]
            origin = self._parse_optional_int(program_data.get("origin"))
            if path is None and origin is None:
                raise ValueError("Inline program words require an 'origin'.")
            programs.append(ProgramImage(
                path=path,
                origin=origin,
                words=words,
                symbols=program_data.get("symbols")
            ))

        # Parse Initial State
        initial_state_data = data.get("initial_state", {})
        initial_state = CpuInitialState(
            pc=self._parse_int(initial_state_data.get("pc", CpuInitialState.pc)),
            registers={name.upper(): self._parse_int(value)
                       for name, value in initial_state_data.get("registers", {}).items()}
        )

        console_data = data.get("console", {})
        console = ConsoleConfig(
            in_prompt=console_data.get("in_prompt", ConsoleConfig.in_prompt),
            halt_message=console_data.get("halt_message", ConsoleConfig.halt_message)
        )

        run_data = data.get("run", {})
        run = RunConfig(max_steps=self._parse_optional_int(run_data.get("max_steps")))

        return SystemConfig(
            architecture=arch,
            programs=programs,
            initial_state=initial_state,
            console=console,
            run=run
        )

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
            text = value.strip()
            if text.lower().startswith("0x"):
                return int(text, 16)
            # LC-3アセンブリ表記の16進数 (x3000)
            if text[:1] in ("x", "X"):
                return int(text[1:], 16)
            return int(text)
        raise ValueError(f"Invalid integer format: {value}")
