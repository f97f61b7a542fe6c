"""Per-company export of the conversation and ticket record."""

from .assembler import ExportAssembler, ExportDocument, export_filename

__all__ = ["ExportAssembler", "ExportDocument", "export_filename"]
