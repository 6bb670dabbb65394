"""
System Shuffler settings and the names the generated plugin uses at runtime.
"""

from dataclasses import dataclass

from esgen.errors import ConfigError
from esgen.permutation import MASK64

PLUGIN_NAME = "System Shuffler"
PLUGIN_VERSION = "0.4.0"

# Condition variables kept in the player's save
INSTALLED = "System Shuffler: Installed"
CURRENT_PRESET = "System Shuffler: Current Preset"
LAST_SHUFFLE_DAY = "System Shuffler: Last Shuffle Day"

RESTORE_PREFIX = "System Shuffler: Restore Preset"
ACTIVATE_PREFIX = "System Shuffler: Activate Preset"

MISSION_PREFIX = "zzzzz"


def restore_event_name(preset: int) -> str:
    return f"{RESTORE_PREFIX} {preset}"


def activate_event_name(preset: int) -> str:
    return f"{ACTIVATE_PREFIX} {preset}"


def side_event_name(main_event: str, story_event: str) -> str:
    """Name of the event holding a story event's edits for one preset."""
    return f"{main_event}: {story_event}"


def event_flag(event_name: str) -> str:
    """The condition the game sets once an event has fired."""
    return f"event: {event_name}"


def shadow_variable(preset: int, story_event: str) -> str:
    """Tracks which story event the preset's side delta was applied for."""
    return event_flag(side_event_name(activate_event_name(preset), story_event))


def _check_range(name: str, value, low: int, high: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise ConfigError(f"{name} must be between {low} and {high}, got {value}")


@dataclass(frozen=True)
class SystemShufflerConfig:
    """
    User settings for one generated plugin.

    Attributes:
        seed: base PRNG seed; preset k is shuffled with (seed + k) mod 2**64
        max_presets: number of shuffled presets (preset 0 is always the
            unshuffled universe)
        shuffle_chance: percent chance to reshuffle on every landing
        fixed_shuffle_days: reshuffle at least this often, 0 disables
        shuffle_once_on_install: reshuffle on the first landing after install
    """
    seed: int = 0
    max_presets: int = 10
    shuffle_chance: int = 0
    fixed_shuffle_days: int = 0
    shuffle_once_on_install: bool = False

    def __post_init__(self):
        _check_range("seed", self.seed, 0, MASK64)
        _check_range("max_presets", self.max_presets, 0, 255)
        _check_range("shuffle_chance", self.shuffle_chance, 0, 100)
        _check_range("fixed_shuffle_days", self.fixed_shuffle_days, 0, 255)
        if not isinstance(self.shuffle_once_on_install, bool):
            raise ConfigError(
                f"shuffle_once_on_install must be a boolean, got {self.shuffle_once_on_install!r}")

    @property
    def presets(self) -> range:
        """Every preset index, identity preset included."""
        return range(self.max_presets + 1)

    @property
    def triggers_enabled(self) -> bool:
        return (self.shuffle_chance > 0
                or self.fixed_shuffle_days > 0
                or self.shuffle_once_on_install)

    def preset_seed(self, preset: int) -> int:
        return (self.seed + preset) & MASK64
