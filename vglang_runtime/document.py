from __future__ import annotations

from dataclasses import dataclass, field
import importlib.util
import logging
from pathlib import Path
import tomllib
from typing import Any, Callable, Mapping

from vglang_device.device import Device
from vglang_device.pipeline import RenderResult, render_document
from vglang_raster.device import RasterDevice, RasterDeviceConfig
from vglang_svg.device import SvgDevice, SvgDeviceConfig

LOGGER = logging.getLogger(__name__)

MANIFEST_NAME = "vglang.toml"
DEVICE_NAMES = ("svg", "png")


@dataclass(frozen=True)
class DocumentManifest:
    document_id: str
    entrypoint: str
    device: str = "svg"
    output: str | None = None
    svg: Mapping[str, Any] = field(default_factory=dict)
    raster: Mapping[str, Any] = field(default_factory=dict)
    registers: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.document_id.strip():
            raise ValueError("document_id must be non-empty")
        if self.device not in DEVICE_NAMES:
            raise ValueError(f"device must be one of: {', '.join(DEVICE_NAMES)}")
        _parse_entrypoint(self.entrypoint)


def load_document_manifest(doc_dir: str | Path) -> DocumentManifest:
    doc_path = Path(doc_dir)
    manifest_path = doc_path / MANIFEST_NAME
    if not manifest_path.exists():
        raise FileNotFoundError(f"document manifest not found: {manifest_path}")
    with manifest_path.open("rb") as f:
        raw = tomllib.load(f)
    try:
        document_id = str(raw["document_id"])
        entrypoint = str(raw["entrypoint"])
    except KeyError as exc:
        raise ValueError(f"manifest missing required field: {exc.args[0]}") from exc
    return DocumentManifest(
        document_id=document_id,
        entrypoint=entrypoint,
        device=str(raw.get("device", "svg")),
        output=_coerce_optional_str(raw.get("output"), "output"),
        svg=_coerce_table(raw.get("svg", {}), "svg"),
        raster=_coerce_table(raw.get("raster", {}), "raster"),
        registers=_coerce_table(raw.get("registers", {}), "registers"),
    )


def load_entrypoint(doc_dir: str | Path, entrypoint: str) -> Callable[[], Any]:
    """Import `module:symbol` from the document directory and return the symbol."""
    module_name, symbol_name = _parse_entrypoint(entrypoint)
    module = _load_module_from_doc_dir(Path(doc_dir).resolve(), module_name)
    symbol = getattr(module, symbol_name, None)
    if symbol is None:
        raise ValueError(f"entrypoint symbol not found: {symbol_name}")
    if not callable(symbol):
        raise ValueError(f"entrypoint symbol is not callable: {symbol_name}")
    return symbol


def build_device(manifest: DocumentManifest, device: str | None = None) -> Device:
    name = device or manifest.device
    if name == "svg":
        return SvgDevice(SvgDeviceConfig.from_mapping(manifest.svg, manifest.registers))
    if name == "png":
        return RasterDevice(RasterDeviceConfig.from_mapping(manifest.raster, manifest.registers))
    raise ValueError(f"unknown device: {name}")


def build_graphic(doc_dir: str | Path, manifest: DocumentManifest) -> Any:
    build = load_entrypoint(doc_dir, manifest.entrypoint)
    graphic = build()
    LOGGER.debug("document `%s` built %s", manifest.document_id, type(graphic).__name__)
    return graphic


async def render_document_dir(
    doc_dir: str | Path,
    *,
    device: str | None = None,
    frame: Mapping[str, Any] | None = None,
) -> RenderResult:
    manifest = load_document_manifest(doc_dir)
    graphic = build_graphic(doc_dir, manifest)
    return await render_document(graphic, build_device(manifest, device), frame=frame)


def _coerce_optional_str(value: object, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string if provided")
    return value


def _coerce_table(value: object, field_name: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table")
    return dict(value)


def _parse_entrypoint(entrypoint: str) -> tuple[str, str]:
    if ":" not in entrypoint:
        raise ValueError("entrypoint must use `module:symbol` format")
    module_name, symbol_name = entrypoint.split(":", 1)
    module_name = module_name.strip()
    symbol_name = symbol_name.strip()
    if not module_name or not symbol_name:
        raise ValueError("entrypoint must include non-empty module and symbol")
    return module_name, symbol_name


def _load_module_from_doc_dir(doc_dir: Path, module_name: str):
    module_path = doc_dir.joinpath(*module_name.split(".")).with_suffix(".py")
    if not module_path.exists():
        raise ValueError(f"entrypoint module file not found: {module_name}")
    unique_name = f"vglang_document_{abs(hash((str(doc_dir), module_name)))}"
    spec = importlib.util.spec_from_file_location(unique_name, module_path)
    if spec is None or spec.loader is None:
        raise ValueError(f"unable to load entrypoint module: {module_name}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise ValueError(f"unable to import entrypoint module `{module_name}`: {exc}") from exc
    return module
