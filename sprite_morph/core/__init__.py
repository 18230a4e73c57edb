"""
Sprite Morph - Core Engine
"""

from .palette import (
    # Color type
    RGBA, TRANSPARENT, DEFAULT_PALETTE_SIZE,
    # Ranking & union
    rank_palette, union_palettes,
    # Quantization
    nearest_color_in_palette, quantize_to_palette,
)
from .sdf import (
    # Constants
    DEFAULT_ALPHA_THRESHOLD, OUTSIDE_DISTANCE, BOUNDARY_DISTANCE, SDF_METHODS,
    # Silhouette & boundary
    extract_silhouette, detect_boundary, boundary_points,
    # Distance fields
    build_sdf, generate_sdf,
)
from .parser import SpriteAsset, SpriteParser
from .exporter import SpriteExporter
from .presets import (
    MorphConfig, MorphPreset, PresetManager,
    BUILTIN_PRESETS, load_config, get_preset, get_preset_manager,
)
from .morph import (
    # Layout
    canvas_size_for, anchor_offset, composite_sprite,
    # Rendering
    render_frame, frame_times, select_palette,
    render_sequence, render_ping_pong,
)

__all__ = [
    'RGBA', 'TRANSPARENT', 'DEFAULT_PALETTE_SIZE',
    'rank_palette', 'union_palettes',
    'nearest_color_in_palette', 'quantize_to_palette',
    'DEFAULT_ALPHA_THRESHOLD', 'OUTSIDE_DISTANCE', 'BOUNDARY_DISTANCE', 'SDF_METHODS',
    'extract_silhouette', 'detect_boundary', 'boundary_points',
    'build_sdf', 'generate_sdf',
    'SpriteAsset', 'SpriteParser', 'SpriteExporter',
    'MorphConfig', 'MorphPreset', 'PresetManager',
    'BUILTIN_PRESETS', 'load_config', 'get_preset', 'get_preset_manager',
    'canvas_size_for', 'anchor_offset', 'composite_sprite',
    'render_frame', 'frame_times', 'select_palette',
    'render_sequence', 'render_ping_pong',
]
