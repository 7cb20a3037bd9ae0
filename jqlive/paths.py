from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class JqlivePaths:
    """Centralizes filesystem paths for jqlive state."""

    root: Path = field(default_factory=Path.home)

    @property
    def config_dir(self) -> Path:
        return self.root / ".jqlive"

    @property
    def config_file(self) -> Path:
        return self.config_dir / "jqlive.json"

    @property
    def logs_dir(self) -> Path:
        return self.config_dir / "logs"
