from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
import sys

from vglang_device import render_document
from vglang_dsl import render_log
from vglang_ir import VglangError, instructions_to_dicts
from vglang_runtime import build_device, build_graphic, load_document_manifest

LOGGER = logging.getLogger("vglang")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="vglang")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a document folder (vglang.toml + entrypoint).")
    render.add_argument("doc_dir", type=Path)
    render.add_argument("--device", choices=["svg", "png"], default=None, help="Override the manifest device.")
    render.add_argument("--out", type=Path, default=None, help="Output file. Default: manifest `output`, else stdout.")
    render.add_argument(
        "--frame",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Register value for this execution; repeatable.",
    )

    dump = sub.add_parser("dump-ir", help="Print the document's instruction log as JSON.")
    dump.add_argument("doc_dir", type=Path)
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "render":
            return _render(args.doc_dir, args.device, args.out, _parse_frame(args.frame))
        if args.command == "dump-ir":
            return _dump_ir(args.doc_dir)
    except VglangError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (FileNotFoundError, ValueError) as exc:
        print(f"[config] {exc}", file=sys.stderr)
        return 1
    except TypeError as exc:
        # Raised by drawing when the entrypoint returns something that is not a graphic.
        print(f"[config] document is not drawable: {exc}", file=sys.stderr)
        return 1
    raise RuntimeError(f"unsupported command: {args.command}")


def _render(doc_dir: Path, device_name: str | None, out: Path | None, frame: dict[str, object]) -> int:
    manifest = load_document_manifest(doc_dir)
    graphic = build_graphic(doc_dir, manifest)
    device = build_device(manifest, device_name)
    LOGGER.debug("rendering %s via %s with frame %s", manifest.document_id, device.name, sorted(frame))
    result = asyncio.run(render_document(graphic, device, frame=frame))
    if not result.ok:
        print(str(result.error), file=sys.stderr)
        return 1
    if out is None and manifest.output is not None and device_name in (None, manifest.device):
        out = doc_dir / manifest.output
    if out is None:
        if isinstance(result.output, bytes):
            print("[config] binary output requires --out", file=sys.stderr)
            return 1
        sys.stdout.write(result.output)
        sys.stdout.write("\n")
        return 0
    if isinstance(result.output, bytes):
        out.write_bytes(result.output)
    else:
        out.write_text(result.output, encoding="utf-8")
    print(f"rendered {manifest.document_id}: instructions={result.instruction_count} out={out}")
    return 0


def _dump_ir(doc_dir: Path) -> int:
    manifest = load_document_manifest(doc_dir)
    log = render_log(build_graphic(doc_dir, manifest))
    print(json.dumps(instructions_to_dicts(log), indent=2))
    return 0


def _parse_frame(items: list[str]) -> dict[str, object]:
    frame: dict[str, object] = {}
    for item in items:
        name, sep, raw = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"--frame expects NAME=VALUE, got `{item}`")
        frame[name] = _parse_frame_value(raw)
    return frame


def _parse_frame_value(raw: str) -> object:
    for kind in (int, float):
        try:
            return kind(raw)
        except ValueError:
            continue
    return raw


if __name__ == "__main__":
    raise SystemExit(main())
