"""
Morph Presets Library - Pre-configured morph settings
Allows users to switch frame counts and palette staging with a single flag
"""

import yaml
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field, asdict, fields

from .palette import DEFAULT_PALETTE_SIZE
from .sdf import DEFAULT_ALPHA_THRESHOLD, SDF_METHODS


# ============================================================================
# Morph Configuration
# ============================================================================

@dataclass
class MorphConfig:
    """Configuration for a morph sequence"""

    # Asset analysis
    palette_size: int = DEFAULT_PALETTE_SIZE
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD
    sdf_method: str = "edt"

    # Timing
    frame_count: int = 15
    fps: int = 20

    # Palette staging: source palette up to from_palette_fraction of the
    # frames, union palette up to union_palette_fraction, target after that
    from_palette_fraction: float = 0.4
    union_palette_fraction: float = 0.6

    # Direction
    reverse: bool = False

    def validate(self) -> 'MorphConfig':
        """Raise ValueError on out-of-range settings, return self otherwise"""
        if self.palette_size < 1:
            raise ValueError(f"palette_size must be >= 1, got {self.palette_size}")
        if not 0 <= self.alpha_threshold <= 255:
            raise ValueError(f"alpha_threshold must be 0-255, got {self.alpha_threshold}")
        if self.sdf_method not in SDF_METHODS:
            raise ValueError(f"sdf_method must be one of {SDF_METHODS}, got {self.sdf_method!r}")
        if self.frame_count < 2:
            raise ValueError(f"frame_count must be >= 2, got {self.frame_count}")
        if self.fps < 1:
            raise ValueError(f"fps must be >= 1, got {self.fps}")
        if not 0.0 <= self.from_palette_fraction <= self.union_palette_fraction <= 1.0:
            raise ValueError(
                "palette fractions must satisfy 0 <= from_palette_fraction "
                f"<= union_palette_fraction <= 1, got {self.from_palette_fraction} "
                f"and {self.union_palette_fraction}"
            )
        return self

    @property
    def from_palette_until(self) -> int:
        """Last frame (1-based) quantized to the source palette"""
        return round(self.frame_count * self.from_palette_fraction)

    @property
    def union_palette_until(self) -> int:
        """Last frame (1-based) quantized to the union palette"""
        return round(self.frame_count * self.union_palette_fraction)

    @property
    def frame_duration_ms(self) -> int:
        return int(1000 / self.fps)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MorphConfig':
        """Create from dictionary, ignoring unknown keys"""
        # Short names used in hand-written YAML
        if 'frames' in data and 'frame_count' not in data:
            data = {**data, 'frame_count': data['frames']}
        if 'colors' in data and 'palette_size' not in data:
            data = {**data, 'palette_size': data['colors']}

        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_fields}

        return cls(**filtered)

    def merged(self, overrides: Dict[str, Any]) -> 'MorphConfig':
        """Copy with the non-None overrides applied"""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return MorphConfig.from_dict(data)


def load_config(path: str | Path) -> MorphConfig:
    """Load a MorphConfig from a YAML file"""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    return MorphConfig.from_dict(data).validate()


# ============================================================================
# Presets
# ============================================================================

@dataclass
class MorphPreset:
    """A named morph configuration"""

    name: str
    description: str = ""
    config: MorphConfig = field(default_factory=MorphConfig)
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization"""
        data = {'description': self.description, **self.config.to_dict()}
        if self.tags:
            data['tags'] = list(self.tags)
        return data

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> 'MorphPreset':
        return cls(
            name=name,
            description=data.get('description', ''),
            config=MorphConfig.from_dict(data).validate(),
            tags=list(data.get('tags', []))
        )


BUILTIN_PRESETS: Dict[str, Dict[str, Any]] = {
    'default': {
        'description': 'Reference morph: 15 frames at 20 fps, six-color palettes',
        'tags': ['balanced'],
    },
    'quick': {
        'description': 'Short 8-frame morph for UI feedback and small sprites',
        'frame_count': 8,
        'fps': 16,
        'tags': ['fast'],
    },
    'smooth': {
        'description': 'Long 30-frame morph with a wider union stage',
        'frame_count': 30,
        'fps': 30,
        'from_palette_fraction': 0.35,
        'union_palette_fraction': 0.65,
        'tags': ['slow', 'smooth'],
    },
    'hard_swap': {
        'description': 'No union stage: palette flips at the halfway frame',
        'from_palette_fraction': 0.5,
        'union_palette_fraction': 0.5,
        'tags': ['retro'],
    },
    'rich': {
        'description': 'Twelve-color palettes for detailed sprites',
        'palette_size': 12,
        'tags': ['detailed'],
    },
}


class PresetManager:
    """
    Manages built-in and user presets.

    User presets live as YAML files in a directory; a file holds either one
    preset (named after the file) or a ``presets:`` mapping of several.
    """

    def __init__(self, user_presets_dir: Optional[Path] = None):
        """
        Initialize preset manager.

        Args:
            user_presets_dir: Directory for user presets (default: ~/.sprite-morph/presets)
        """
        self.user_presets_dir = Path(user_presets_dir) if user_presets_dir else (
            Path.home() / '.sprite-morph' / 'presets'
        )

        self._builtin: Dict[str, MorphPreset] = {}
        self._user: Dict[str, MorphPreset] = {}

        self._load_builtin_presets()
        self._load_user_presets()

    def _load_builtin_presets(self) -> None:
        for name, data in BUILTIN_PRESETS.items():
            self._builtin[name] = MorphPreset.from_dict(name, data)

    def _load_user_presets(self) -> None:
        """Load user-defined presets from YAML files"""
        if not self.user_presets_dir.is_dir():
            return

        for yaml_file in sorted(self.user_presets_dir.glob('*.yaml')):
            try:
                with open(yaml_file, 'r') as f:
                    data = yaml.safe_load(f)

                if isinstance(data, dict):
                    if 'presets' in data:
                        for name, preset_data in data['presets'].items():
                            self._user[name] = MorphPreset.from_dict(name, preset_data)
                    else:
                        name = yaml_file.stem
                        self._user[name] = MorphPreset.from_dict(name, data)
            except (OSError, yaml.YAMLError, ValueError, TypeError) as e:
                print(f"Warning: Could not load preset file {yaml_file}: {e}")

    def get(self, name: str) -> Optional[MorphPreset]:
        """
        Get a preset by name.
        User presets override built-in presets with same name.
        """
        return self._user.get(name) or self._builtin.get(name)

    def exists(self, name: str) -> bool:
        return name in self._user or name in self._builtin

    def list_all(self) -> List[str]:
        """List all preset names"""
        return sorted(set(self._builtin) | set(self._user))

    def list_by_tag(self, tag: str) -> List[str]:
        matches = []
        for name, preset in {**self._builtin, **self._user}.items():
            if tag.lower() in [t.lower() for t in preset.tags]:
                matches.append(name)
        return sorted(matches)

    def save_preset(self, preset: MorphPreset, filename: Optional[str] = None) -> Path:
        """Save a preset to the user presets directory"""
        self.user_presets_dir.mkdir(parents=True, exist_ok=True)
        path = self.user_presets_dir / f"{filename or preset.name}.yaml"

        with open(path, 'w') as f:
            yaml.safe_dump(preset.to_dict(), f, default_flow_style=False, sort_keys=False)

        self._user[preset.name] = preset
        return path


_manager: Optional[PresetManager] = None


def get_preset_manager() -> PresetManager:
    """Get the shared preset manager"""
    global _manager
    if _manager is None:
        _manager = PresetManager()
    return _manager


def get_preset(name: str) -> MorphConfig:
    """Config of a named preset; raises ValueError for unknown names"""
    preset = get_preset_manager().get(name)
    if preset is None:
        raise ValueError(
            f"Unknown preset: {name} (available: {', '.join(get_preset_manager().list_all())})"
        )
    return preset.config
