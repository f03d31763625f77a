from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import numpy as np

from pyanomap.models import get_preset, list_presets, preset_info
from pyanomap.postprocess.strategy import PostprocessConfig, postprocess
from pyanomap.reporting.timing import StageTimer
from pyanomap.results import ResultItem, result_to_jsonable
from pyanomap.utils.jsonable import to_jsonable
from pyanomap.visualization import (
    DrawContext,
    Style,
    canvas_from_image,
    draw_result,
    new_canvas,
    save_canvas,
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyanomap-render",
        description="Postprocess saved engine outputs and optionally render heatmap overlays.",
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--preset", default=None, choices=list_presets(), help="Model preset name")
    mode.add_argument("--list-presets", action="store_true", help="List available preset names")
    mode.add_argument(
        "--preset-info",
        default=None,
        choices=list_presets(),
        help="Show output tensor roles and postprocess settings of a preset",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="When used with --list-presets/--preset-info, output JSON instead of text",
    )
    parser.add_argument(
        "--outputs",
        action="append",
        default=None,
        help=(
            "Saved output tensors: one .npz (arrays in file order) or repeated .npy files "
            "in output order"
        ),
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional JSON/YAML file overriding postprocess fields of the preset",
    )
    parser.add_argument("--edge-ignore-px", type=int, default=None, help="Override edge-ignore width")
    parser.add_argument("--n-jobs", type=int, default=None, help="Postprocess items on N threads")
    parser.add_argument("--save-jsonl", default=None, help="Optional JSONL output path")
    parser.add_argument(
        "--save-overlays",
        default=None,
        help="Optional directory; renders each item's heatmaps to <dir>/<index>.png",
    )
    parser.add_argument(
        "--image",
        action="append",
        default=None,
        help="Background image per item (repeatable); a single image is reused for all items",
    )
    parser.add_argument(
        "--canvas-size",
        default=None,
        help="Blank canvas size WxH when no --image is given (defaults to the heatmap size)",
    )
    parser.add_argument("--colormap", default=None, help="OpenCV colormap name, e.g. jet, turbo")
    parser.add_argument("--alpha", type=int, default=None, help="Heatmap fill alpha (0..255)")
    parser.add_argument("--timing", action="store_true", help="Include timing in the log output")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def load_outputs(paths: list[str]) -> list[np.ndarray]:
    """Load output tensors from one ``.npz`` archive or several ``.npy`` files."""

    if len(paths) == 1 and Path(paths[0]).suffix.lower() == ".npz":
        with np.load(paths[0]) as archive:
            return [np.asarray(archive[name], dtype=np.float32) for name in archive.files]

    tensors: list[np.ndarray] = []
    for raw in paths:
        path = Path(raw)
        if path.suffix.lower() != ".npy":
            raise ValueError(f"Expected .npy files (or a single .npz), got {str(path)!r}")
        tensors.append(np.asarray(np.load(path), dtype=np.float32))
    return tensors


def _parse_size(text: str) -> tuple[int, int]:
    try:
        w_text, h_text = str(text).lower().split("x", 1)
        w, h = int(w_text), int(h_text)
    except ValueError as exc:
        raise ValueError(f"--canvas-size must look like WxH, got {text!r}") from exc
    if w <= 0 or h <= 0:
        raise ValueError(f"--canvas-size must be positive, got {text!r}")
    return w, h


def _resolve_config(args: argparse.Namespace) -> PostprocessConfig:
    from pyanomap.config import load_config

    config = get_preset(args.preset).postprocess
    if args.config is not None:
        overrides = load_config(args.config)
        overrides.pop("preset", None)
        nested = overrides.pop("postprocess", None)
        if isinstance(nested, dict):
            overrides.update(nested)
        config = config.with_(**overrides)
    if args.edge_ignore_px is not None:
        config = config.with_edge_ignore(int(args.edge_ignore_px))
    return config


def _canvas_for(args: argparse.Namespace, index: int, result: ResultItem) -> np.ndarray:
    images = args.image or []
    if images:
        source = images[0] if len(images) == 1 else images[index]
        return canvas_from_image(source)
    if args.canvas_size is not None:
        w, h = _parse_size(args.canvas_size)
        return new_canvas(w, h, (0, 0, 0, 255))
    if result.heatmaps:
        first = result.heatmaps[0]
        return new_canvas(first.width, first.height, (0, 0, 0, 255))
    return new_canvas(1, 1, (0, 0, 0, 255))


def _build_context(args: argparse.Namespace) -> DrawContext:
    if args.colormap is None and args.alpha is None:
        return DrawContext()
    if args.colormap is not None:
        style = Style.from_colormap_name(args.colormap, alpha=args.alpha)
    else:
        style = Style(color_fill_alpha=args.alpha)
    return DrawContext(heatmap_style=style)


def _print_preset_info(info: dict[str, Any], *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(to_jsonable(info), sort_keys=True))
        return
    print(f"Preset: {info.get('name')}")
    tags = info.get("tags", [])
    if tags:
        print(f"Tags: {', '.join(str(t) for t in tags)}")
    meta = info.get("metadata", {})
    if meta:
        print("Metadata:")
        for k in sorted(meta):
            print(f"  {k}: {meta[k]}")
    print("Postprocess:")
    for k, v in info.get("postprocess", {}).items():
        print(f"  {k}: {v}")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.timing:
        logging.basicConfig(level=logging.INFO)

    try:
        if bool(args.list_presets):
            names = list_presets()
            if bool(args.json):
                print(json.dumps(names, sort_keys=True))
            else:
                for name in names:
                    print(name)
            return 0

        if args.preset_info is not None:
            _print_preset_info(preset_info(str(args.preset_info)), as_json=bool(args.json))
            return 0

        if not args.outputs:
            raise ValueError("--outputs is required to postprocess a preset")

        config = _resolve_config(args)
        outputs = load_outputs(list(args.outputs))
        timing = StageTimer(label=str(args.preset))
        results = postprocess(outputs, config, timing=timing, n_jobs=args.n_jobs)

        images = args.image or []
        if len(images) > 1 and len(images) != len(results):
            raise ValueError(
                f"Got {len(images)} --image values for {len(results)} result item(s); "
                "pass one image or one per item."
            )

        overlay_paths: list[str | None] = [None] * len(results)
        if args.save_overlays is not None:
            out_dir = Path(args.save_overlays)
            ctx = _build_context(args)
            with timing.stage("render"):
                for i, result in enumerate(results):
                    canvas = _canvas_for(args, i, result)
                    draw_result(result, ctx, canvas)
                    overlay_paths[i] = str(save_canvas(canvas, out_dir / f"{i:06d}.png"))

        records: list[dict[str, Any]] = []
        for i, result in enumerate(results):
            record = result_to_jsonable(result)
            record["index"] = int(i)
            if result.heatmaps:
                record["heatmap_confidences"] = [h.confidence for h in result.heatmaps]
            if overlay_paths[i] is not None:
                record["overlay"] = overlay_paths[i]
            records.append(to_jsonable(record))

        if args.save_jsonl is not None:
            out_path = Path(args.save_jsonl)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            with out_path.open("w", encoding="utf-8") as f:
                for record in records:
                    f.write(json.dumps(record, sort_keys=True))
                    f.write("\n")
        else:
            for record in records:
                print(json.dumps(record, sort_keys=True))

        if args.timing:
            timing.summary()
        return 0
    except Exception as exc:  # noqa: BLE001 - CLI boundary
        print(f"error: {exc}", file=sys.stderr)
        print(f"context: preset={args.preset!r}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
