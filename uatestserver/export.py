"""
EPICS database export for the bulk variables.

Writes one ``ai`` record per bulk variable so an EPICS IOC using the
OPCUA device support can connect to ManyObjects. The output depends only
on the arguments, never on a running server.
"""

from typing import TextIO

from .errors import ExportIOFailure
from .logging import log_info


DEFAULT_EXPORT_PATH = "testServer.db"

RECORD_TEMPLATE = (
    "record(ai,{name}) {{\n"
    "  field(DESC,\"{name}\")\n"
    "  field(SCAN,\"I/O Intr\")\n"
    "  field(PINI,YES)\n"
    "  field(TSE, -2)\n"
    "  field(DTYP,OPCUA)\n"
    "  field(DISS,INVALID)\n"
    "  field(INP,\"{link}\")\n"
    "}}\n"
)


def format_record(record_name: str, link: str) -> str:
    """Render a single ai record."""
    return RECORD_TEMPLATE.format(name=record_name, link=link)


class ExportEmitter:
    """
    Emits EPICS records for ManyObjects.

    Record i is named ``ManyObjects:var{i}`` and links to
    ``{namespace_index}:ManyObjects.var{i}``, counting from 0.
    """

    def __init__(self, namespace_index: int = 2):
        self.namespace_index = namespace_index

    def record_name(self, index: int) -> str:
        return f"ManyObjects:var{index}"

    def link(self, index: int) -> str:
        return f"{self.namespace_index}:ManyObjects.var{index}"

    def emit(self, count: int, stream: TextIO) -> int:
        """
        Write ``count`` records to ``stream``.

        Returns:
            Number of records written
        """
        for i in range(count):
            stream.write(format_record(self.record_name(i), self.link(i)))
        return max(count, 0)

    def write_file(self, count: int, path: str = DEFAULT_EXPORT_PATH) -> int:
        """
        Write the records to a file, replacing it.

        Raises:
            ExportIOFailure: If the file cannot be opened or written
        """
        log_info(f"Writing EPICS database {path}")
        try:
            with open(path, "w", encoding="utf-8") as f:
                written = self.emit(count, f)
        except OSError as e:
            raise ExportIOFailure(f"Failed to write {path}: {e}") from e
        log_info(f"Wrote {written} records to {path}")
        return written
