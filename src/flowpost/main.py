"""
Command Line Runner
===================
Loads a mesh from disk and runs a few engine operations on it.

Why is this file needed?
------------------------
It acts as the composition root outside of a host binding. It:
1. Sets up logging (console, DEBUG with --verbose).
2. Instantiates the engine over a fresh session.
3. Prints the requested results and writes the optional glTF scene.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from flowpost.engine import MeshEngine
from flowpost.errors import FlowPostError
from flowpost.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flowpost", description="Post-process a CFD mesh (.vtu).")
    parser.add_argument("mesh", type=Path, help="VTK XML unstructured grid file")
    parser.add_argument("--scene", type=Path, help="write the glTF scene of the active representation")
    parser.add_argument(
        "--cut",
        type=float,
        nargs=6,
        metavar=("OX", "OY", "OZ", "NX", "NY", "NZ"),
        help="cut the grid with the plane through O with normal N",
    )
    parser.add_argument("--integrate", metavar="FIELD", help="integrate FIELD over the whole grid")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    engine = MeshEngine()
    try:
        n_cells = engine.load_mesh(args.mesh.read_bytes())
        print(f"cells: {n_cells}")

        if args.integrate:
            values = engine.integrate(args.integrate, "grid")
            print(f"integral of {args.integrate}: {' '.join(f'{v:.6g}' for v in values)}")

        if args.cut:
            engine.cut(args.cut[:3], args.cut[3:])
        else:
            engine.extract_surface()

        if args.scene:
            args.scene.write_text(engine.export_scene(), encoding="utf-8")
            print(f"scene: {args.scene}")
    except (FlowPostError, OSError) as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
