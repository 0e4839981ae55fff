"""Application configuration management."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class AppConfig:
    """Persistent application configuration."""
    default_shots: int = 512
    temperature_k: float = 0.015
    extra_noise: float = 0.0
    per_gate_noise_scale: float = 0.25
    step_delay_ms: int = 700
    history_length: int = 120
    strict_gates: bool = True
    recent_files: list[str] = field(default_factory=list)

    _config_dir: Path = field(
        default_factory=lambda: Path.home() / ".qubit_lab",
        repr=False)

    @property
    def config_path(self) -> Path:
        return self._config_dir / "config.json"

    def to_dict(self) -> dict:
        return {
            "default_shots": self.default_shots,
            "temperature_k": self.temperature_k,
            "extra_noise": self.extra_noise,
            "per_gate_noise_scale": self.per_gate_noise_scale,
            "step_delay_ms": self.step_delay_ms,
            "history_length": self.history_length,
            "strict_gates": self.strict_gates,
            "recent_files": self.recent_files[-10:],  # Keep last 10
        }

    def save(self):
        self._config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, config_dir: Path | str | None = None) -> AppConfig:
        config = cls() if config_dir is None else cls(_config_dir=Path(config_dir))
        if config.config_path.exists():
            try:
                with open(config.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
                for key, value in data.items():
                    if hasattr(config, key) and not key.startswith('_'):
                        setattr(config, key, value)
            except (ValueError, OSError):
                logger.warning("Could not read %s; using defaults",
                               config.config_path, exc_info=True)
        return config

    def add_recent_file(self, filepath: str):
        if filepath in self.recent_files:
            self.recent_files.remove(filepath)
        self.recent_files.insert(0, filepath)
        self.recent_files = self.recent_files[:10]
