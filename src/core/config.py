"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

GROUP_MATCH_FIRST = "first"
GROUP_MATCH_STRICT = "strict"


@dataclass(frozen=True)
class ChannelConfig:
    """Channel gateway settings."""

    timeout_seconds: float = 30.0
    pairing_timeout_seconds: float = 120.0
    group_match: str = GROUP_MATCH_FIRST

    def __post_init__(self) -> None:
        if self.group_match not in {GROUP_MATCH_FIRST, GROUP_MATCH_STRICT}:
            raise ValueError(f"Unsupported group_match policy: {self.group_match}")


@dataclass(frozen=True)
class StorageConfig:
    """Project repository selection."""

    backend: str = "memory"
    path: str = "sitewire.db"
