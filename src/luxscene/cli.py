"""Command line interface for exporting declarative scene descriptions.

Example:
    luxscene export scenes/studio.yaml -o out/studio
    luxscene export scenes/studio.yaml -o studio --archive out/studio.zip --in-memory-meshes
    luxscene validate scenes/studio.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .exceptions import LuxSceneError
from .export import ExportOptions, export_graph
from .loader import build_scene
from .mesh_streams import configure_in_memory_meshes
from .utils.config import load_config
from .utils.paths import resolve_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="luxscene", description="Compile scene descriptions to renderer files.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    export = subparsers.add_parser("export", help="Build a scene and write its files.")
    export.add_argument("description", help="YAML or JSON scene description.")
    export.add_argument(
        "-o",
        "--output",
        required=True,
        help="Output name without extension, e.g. out/scene (writes out/scene.lxs, ...).",
    )
    export.add_argument(
        "--inline",
        action="store_true",
        help="Embed materials, geometry and volumes in the manifest instead of companion files.",
    )
    export.add_argument("--archive", help="Write everything into this zip file instead of loose files.")
    export.add_argument(
        "--in-memory-meshes",
        action="store_true",
        help="Buffer mesh payloads and export them with the scene files (implied by --archive).",
    )
    export.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")

    validate = subparsers.add_parser("validate", help="Validate and build a scene without writing files.")
    validate.add_argument("description", help="YAML or JSON scene description.")
    validate.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        description = load_config(resolve_path(args.description, must_exist=True))
        graph = build_scene(description)
        if args.command == "validate":
            print(f"Scene description is valid: {args.description}")
            return 0

        if args.in_memory_meshes or args.archive:
            configure_in_memory_meshes(graph)
        options = ExportOptions(base_path=args.output, split=not args.inline, archive=args.archive)
        exported = export_graph(graph, options)
    except (LuxSceneError, OSError, ValueError) as exc:
        print(f"Failed to {args.command} scene: {exc}", file=sys.stderr)
        return 1

    destination = args.archive or args.output
    print(f"Exported {sum(1 for e in exported.values() if e.exportable)} files to: {destination}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
