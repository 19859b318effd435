"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    
    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text(f"""
detection:
  backend: "dfs"
  channel_order: "bgr"

regions:
  file: null
  required: false

storage:
  result_dir: "{(tmp_path / 'results').as_posix()}"
  write_binarized: true

log_path: "{(tmp_path / 'logs' / 'test.log').as_posix()}"
log_level: "INFO"
""")
    
    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "detection": {
            "backend": "dfs",
            "channel_order": "bgr",
        },
        "regions": {
            "file": None,
            "required": False,
        },
        "storage": {
            "result_dir": "results",
            "write_binarized": True,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def frame_factory():
    """
    Build BGR frames with solid squares on a black background.

    squares: list of (x, y, side, (b, g, r)).
    """
    def make(squares=(), height=40, width=60):
        frame = np.zeros((height, width, 3), dtype=np.uint8)
        for x, y, side, bgr in squares:
            frame[y:y + side, x:x + side] = bgr
        return frame
    return make
