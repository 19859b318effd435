"""
Command-line entry point for the centroid tracker.

Tracks a colored object through a video, one sample per second, and writes
its position per second plus (optionally) time spent in named regions.

Usage:
    python src/main.py video <input_video> <hex_target_color> <threshold> <task_id> [--areas-file PATH]
    python src/main.py image <input_image> <hex_target_color> <threshold> [--output-dir DIR]

Video mode writes "<basename>_<task_id>.csv" to the result directory
(storage.result_dir, overridden by the RESULT_PATH environment variable).
With regions, rows gain a region column and "<basename>_<task_id>_summary.txt"
is written when there is something to report.

Image mode writes binarized.png and groups.csv ("size,x,y" per group,
largest first) and prints the largest group's centroid.
"""

import argparse
import copy
import logging
import os
import sys
from typing import Any, Dict, List, Optional, Tuple

import yaml

from analytics.regions import load_regions, load_regions_or_warn
from detection import GROUP_FINDER_BACKENDS, ColorBinarizer, create_group_finder
from detection.binarizer import parse_hex_color, validate_threshold
from models.config import Config
from models.errors import InvalidInputError, TrackerError
from observation import ImageFileSource, OpenCVSourceConfig, create_source_from_path
from ops.logging import setup_logging
from pipeline.engine import run_job
from storage.results import ResultWriter, result_paths, write_binarized_image, write_groups_csv

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        # Finally apply explicit config_path if it's not the local override file itself
        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def with_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill in built-in defaults for anything the config files leave out."""
    return _deep_merge(Config().to_dict(), copy.deepcopy(config))


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['detection', 'storage', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    detection = config.get('detection')
    if not isinstance(detection, dict):
        return False, "detection must be a mapping"
    backend = detection.get('backend', 'dfs')
    if backend not in GROUP_FINDER_BACKENDS:
        return False, f"detection.backend must be one of: {', '.join(GROUP_FINDER_BACKENDS)}"
    if detection.get('channel_order', 'bgr') not in ('bgr', 'rgb'):
        return False, "detection.channel_order must be one of: bgr, rgb"

    regions = config.get('regions', {}) or {}
    if not isinstance(regions, dict):
        return False, "regions must be a mapping"
    if regions.get('file') is not None and not isinstance(regions['file'], str):
        return False, "regions.file must be a string path"
    if not isinstance(regions.get('required', False), bool):
        return False, "regions.required must be a boolean"

    storage = config.get('storage')
    if not isinstance(storage, dict):
        return False, "storage must be a mapping"
    if not isinstance(storage.get('result_dir'), str) or not storage.get('result_dir'):
        return False, "storage.result_dir must be a non-empty string"
    if not isinstance(storage.get('write_binarized', True), bool):
        return False, "storage.write_binarized must be a boolean"

    if not isinstance(config['log_path'], str):
        return False, "log_path must be a string"
    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def resolve_result_dir(config: Dict[str, Any]) -> str:
    """RESULT_PATH takes precedence over storage.result_dir."""
    env_dir = os.environ.get("RESULT_PATH")
    if env_dir and env_dir.strip():
        return env_dir
    return config["storage"]["result_dir"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Color centroid tracker')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--backend', choices=sorted(GROUP_FINDER_BACKENDS),
                        help='Connected-group backend (overrides config)')
    parser.add_argument('--log-level', choices=VALID_LOG_LEVELS,
                        help='Log level (overrides config)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    video = subparsers.add_parser('video', help='Track the target color through a video')
    video.add_argument('input', help='Input video file')
    video.add_argument('color', help='Target color as 6-digit hex (e.g. FF0000)')
    video.add_argument('threshold', help='Color distance threshold (0-255)')
    video.add_argument('task_id', help='Identifier used in the output file names')
    video.add_argument('--areas-file', type=str, default=None,
                       help='YAML/JSON region declarations (overrides config)')
    video.add_argument('--result-dir', type=str, default=None,
                       help='Output directory (overrides config and RESULT_PATH)')

    image = subparsers.add_parser('image', help='Summarize the groups in a single image')
    image.add_argument('input', help='Input image file')
    image.add_argument('color', help='Target color as 6-digit hex (e.g. FF0000)')
    image.add_argument('threshold', help='Color distance threshold (0-255)')
    image.add_argument('--output-dir', type=str, default=None,
                       help='Directory for binarized.png and groups.csv')
    return parser


def run_video(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    detection = config["detection"]
    regions_cfg = config.get("regions", {}) or {}
    areas_file = args.areas_file or regions_cfg.get("file")

    warning = None
    if areas_file and regions_cfg.get("required", False):
        regions = load_regions(areas_file)
    else:
        regions, warning = load_regions_or_warn(areas_file)
        if warning:
            print(f"WARNING: {warning}", file=sys.stderr)

    result_dir = args.result_dir or resolve_result_dir(config)
    csv_path, summary_path = result_paths(result_dir, args.input, args.task_id)
    writer = ResultWriter(csv_path, summary_path)

    result = run_job(
        create_source_from_path(args.input),
        args.color,
        args.threshold,
        regions=regions,
        writer=writer,
        backend=detection.get("backend", "dfs"),
        channel_order=detection.get("channel_order", "bgr"),
    )
    if warning:
        result.regions_degraded = True
        result.warnings.append(warning)

    print(f"Processing complete. Output: {os.path.basename(csv_path)}")
    if result.summary_path:
        print(f"Summary written: {os.path.basename(result.summary_path)}")
    if result.interrupted:
        print("Processing interrupted; results cover the seconds processed so far.", file=sys.stderr)
        return 130
    return 0


def run_image(args: argparse.Namespace, config: Dict[str, Any]) -> int:
    detection = config["detection"]
    binarizer = ColorBinarizer.from_hex(
        args.color, args.threshold, channel_order=detection.get("channel_order", "bgr")
    )
    finder = create_group_finder(detection.get("backend", "dfs"))

    with ImageFileSource(OpenCVSourceConfig.from_path(args.input)) as source:
        frame_data = source.read_at(0)
    grid = binarizer.binarize(frame_data.frame)
    groups = finder.find_connected_groups(grid)

    output_dir = args.output_dir or resolve_result_dir(config)
    os.makedirs(output_dir, exist_ok=True)
    if config["storage"].get("write_binarized", True):
        write_binarized_image(os.path.join(output_dir, "binarized.png"), grid)
    groups_path = os.path.join(output_dir, "groups.csv")
    count = write_groups_csv(groups_path, groups)
    logging.info(f"Wrote {count} groups to {groups_path}")

    if groups:
        print(f"{groups[0].x},{groups[0].y}")
    else:
        print("no groups found")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main application function."""
    args = build_parser().parse_args(argv)

    config = with_defaults(load_config(args.config))
    if args.backend:
        config["detection"]["backend"] = args.backend
    if args.log_level:
        config["log_level"] = args.log_level

    is_valid, error = validate_config(config)
    if not is_valid:
        print(f"Invalid configuration: {error}", file=sys.stderr)
        return 1

    setup_logging(config["log_path"], config["log_level"])

    try:
        parse_hex_color(args.color)
        validate_threshold(args.threshold)
    except InvalidInputError as e:
        print(f"Error parsing color or threshold: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == 'video':
            return run_video(args, config)
        return run_image(args, config)
    except InvalidInputError as e:
        logging.error(f"Invalid input ({e.reason}): {e}")
        return 1
    except TrackerError as e:
        logging.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
