"""
Input/Output Adapters (VTK XML)
Decodes and encodes grids and polygon surfaces to the string buffers exchanged
with the remote viewer.
"""
from __future__ import annotations

import logging
import os
import tempfile
import uuid
from typing import Union

import pyvista as pv
from vtkmodules.vtkIOXML import (
    vtkXMLPolyDataReader,
    vtkXMLPolyDataWriter,
    vtkXMLUnstructuredGridReader,
    vtkXMLUnstructuredGridWriter,
)

from flowpost import config
from flowpost.errors import DecodeError

logger = logging.getLogger(__name__)

Buffer = Union[str, bytes, bytearray, memoryview]


class ErrorObserver:
    """Collects the messages of VTK ``ErrorEvent`` s emitted by an algorithm."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        # Makes VTK pass the message string as third argument
        self.CallDataType = "string0"

    def __call__(self, caller, event, message) -> None:
        self.messages.append(str(message).strip())

    def attach(self, algorithm) -> ErrorObserver:
        algorithm.AddObserver("ErrorEvent", self)
        return self

    @property
    def failed(self) -> bool:
        return bool(self.messages)


def _as_payload(buffer: Buffer) -> Union[str, bytes]:
    # Raw appended XML data is not valid UTF-8, bytes are handed to VTK as is
    if isinstance(buffer, str):
        return buffer
    return bytes(buffer)


def _read_string(reader, buffer: Buffer, kind: str):
    payload = _as_payload(buffer)
    if not payload.strip():
        raise DecodeError(f"{kind} buffer is empty.")

    observer = ErrorObserver().attach(reader)
    reader.ReadFromInputStringOn()
    if isinstance(payload, bytes):
        reader.SetInputString(payload, len(payload))
    else:
        reader.SetInputString(payload)
    reader.Update()

    if observer.failed:
        msg = f"Failed to decode {kind} buffer."
        logger.error(f"{msg} {observer.messages[0]}")
        raise DecodeError(msg, {"vtk": observer.messages[0], "bytes": len(payload)})

    return reader.GetOutput()


def _write_string(writer, dataset) -> str:
    writer.SetInputData(dataset)
    writer.WriteToOutputStringOn()
    writer.Write()
    return writer.GetOutputString()


def decode_grid(buffer: Buffer) -> pv.UnstructuredGrid:
    """Decode a VTK XML unstructured grid (.vtu) into a new pyvista grid."""
    output = _read_string(vtkXMLUnstructuredGridReader(), buffer, "grid")
    grid = pv.UnstructuredGrid()
    grid.deep_copy(output)
    logger.debug(f"Decoded grid with {grid.n_cells} cells and {grid.n_points} points.")
    return grid


def encode_grid(grid: pv.UnstructuredGrid) -> str:
    return _write_string(vtkXMLUnstructuredGridWriter(), grid)


def decode_polydata(buffer: Buffer) -> pv.PolyData:
    """Decode a VTK XML polygon surface (.vtp)."""
    output = _read_string(vtkXMLPolyDataReader(), buffer, "surface")
    poly = pv.PolyData()
    poly.deep_copy(output)
    return poly


def encode_polydata(poly: pv.PolyData) -> str:
    return _write_string(vtkXMLPolyDataWriter(), poly)


def grid_to_polydata(grid: pv.UnstructuredGrid) -> str:
    """Serialize the boundary surface of a grid as .vtp."""
    surface = grid.extract_surface(pass_pointid=False, pass_cellid=False, algorithm=config.SURFACE_ALGORITHM)
    return encode_polydata(surface)


def stl_to_vtp(buffer: Buffer) -> str:
    """
    Converts an ASCII or binary STL buffer to a .vtp string.

    The STL reader only reads from disk, so the buffer goes through a
    temporary file that is always removed afterwards.
    """
    data = buffer.encode("utf-8") if isinstance(buffer, str) else bytes(buffer)
    if not data.strip():
        raise DecodeError("STL buffer is empty.")

    temp_path = os.path.join(tempfile.gettempdir(), f"surface_{uuid.uuid4().hex}.stl")
    try:
        with open(temp_path, "wb") as f:
            f.write(data)
        logger.debug(f"Reading STL through temp file: {temp_path}")
        try:
            surface = pv.read(temp_path)
        except Exception as e:
            logger.error(f"Failed to read STL buffer: {e}")
            raise DecodeError("Failed to decode STL buffer.", {"error": str(e)}) from e
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)

    if surface.n_points == 0:
        raise DecodeError("STL buffer contains no triangles.", {"bytes": len(data)})

    return encode_polydata(surface)
