"""Central configuration for Theory Atlas.

Avoids global constants scattered across modules. Import from this module.
"""

from dataclasses import dataclass, field
import os


@dataclass(frozen=True)
class LayoutConfig:
    node_width: float = float(os.getenv('NODE_WIDTH', '180'))
    node_height: float = float(os.getenv('NODE_HEIGHT', '56'))
    level_gap: float = float(os.getenv('LEVEL_GAP', '80'))
    node_gap: float = float(os.getenv('NODE_GAP', '24'))
    margin: float = float(os.getenv('LAYOUT_MARGIN', '20'))


@dataclass(frozen=True)
class AppConfig:
    content_dir: str = os.getenv('CONTENT_DIR', 'content')
    output_dir: str = os.getenv('OUTPUT_DIR', 'dist')
    site_base: str = os.getenv('SITE_BASE', '/')
    diary_file: str = os.getenv('DIARY_FILE', 'data/diary-entries.json')
    log_dir: str = os.getenv('LOG_DIR', 'logs')
    layout: LayoutConfig = field(default_factory=LayoutConfig)


CONFIG = AppConfig()
