from .document import (
    DocumentManifest,
    build_device,
    build_graphic,
    load_document_manifest,
    load_entrypoint,
    render_document_dir,
)

__all__ = [
    "DocumentManifest",
    "build_device",
    "build_graphic",
    "load_document_manifest",
    "load_entrypoint",
    "render_document_dir",
]
