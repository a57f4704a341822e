"""
Command-line interface for offline attention analysis.
"""

import argparse
import json
import sys
from pathlib import Path

from attentionscope.config import EngineConfig, load_config
from attentionscope.pipeline import AttentionPipeline


def _print_summary(manifest: dict) -> None:
    frames = manifest["frames"]
    labels = manifest["metadata"]["channel_labels"]

    print("\n--- Manifest Summary ---")
    print(json.dumps(manifest["metadata"], indent=2))

    if not frames:
        return

    # Mean attention share per channel across the track
    totals = [0.0] * len(labels)
    for frame in frames:
        for i, channel in enumerate(frame["channels"]):
            totals[i] += channel["attention"]
    print("\nMean attention:")
    for label, total in zip(labels, totals):
        print(f"  {label:<12} {total / len(frames):.3f}")

    last = frames[-1]["harmony"]
    print(
        f"\nFinal harmony: pitch {last['pitch']:.1f} Hz, "
        f"consonance {last['consonance']:.3f}, tension {last['tension']:.3f}"
    )


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="attentionscope",
        description="Derive per-band attention and harmony signals from an audio file",
    )

    parser.add_argument(
        "input",
        type=Path,
        help="Input audio file (wav, mp3, flac)",
    )

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output manifest file path (default: <input>_attention.json)",
    )

    parser.add_argument(
        "-f", "--fps",
        type=int,
        default=60,
        help="Analysis frames per second (default: 60)",
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Engine configuration JSON (default: built-in reference channels)",
    )

    parser.add_argument(
        "--format",
        choices=["json", "numpy"],
        default="json",
        help="Output format (default: json)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output",
    )

    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print manifest summary to stdout",
    )

    args = parser.parse_args(argv)

    if args.fps <= 0:
        parser.error(f"--fps must be positive, got {args.fps}")

    # Validate input
    if not args.input.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        return 1

    if args.config is not None:
        try:
            config = load_config(args.config)
        except (OSError, ValueError, TypeError) as e:
            print(f"Error: Invalid configuration {args.config}: {e}", file=sys.stderr)
            return 1
    else:
        config = EngineConfig()

    # Determine output path
    output_path = args.output
    if output_path is None:
        suffix = ".npz" if args.format == "numpy" else ".json"
        output_path = args.input.with_name(f"{args.input.stem}_attention{suffix}")

    pipeline = AttentionPipeline(config=config, target_fps=args.fps)

    if not args.quiet:
        print(f"Processing: {args.input}")
        print(f"Channels: {len(config.channels)}, FPS: {args.fps}")

    result = pipeline.process(
        args.input,
        output_path=output_path,
        format=args.format,
    )

    if not args.quiet:
        print(f"Duration: {result['duration']:.2f}s")
        print(f"Frames: {result['n_frames']}")
        print(f"Output: {result['output_path']}")

    if args.summary:
        _print_summary(result["manifest"])

    return 0


if __name__ == "__main__":
    sys.exit(main())
