"""
CSV logging of composite fluid forces.

Buffers data in memory and writes in batches to minimize I/O overhead.
Implements context manager protocol for safe resource handling.
"""
from __future__ import annotations

import csv
from collections.abc import Sequence
from pathlib import Path
from typing import Any, TextIO

from hydrolab.hydrodynamics.accumulator import ForceAccumulator
from hydrolab.solids.compound import CompositeBody

VALID_FIELDS = tuple(ForceAccumulator.SHORT_NAMES)


class ForceLogger:
    """
    Buffered CSV logger for per-composite fluid forces.

    One row per call to ``log``: the time followed by the x, y, z
    components of every selected accumulator field of every composite.
    Columns are named ``<composite>.<field>_<component>``, e.g.
    ``auv.Fb_z``.

    Parameters
    ----------
    filepath : str | Path
        Output CSV file path
    buffer_size : int
        Number of rows to buffer before writing
    fields : list[str] | None
        Accumulator fields to log. Default: all of
        "Fb", "Tb" (buoyancy), "Fds", "Tds" (linear drag),
        "Fdp", "Tdp" (quadratic drag).

    Examples
    --------
    >>> with ForceLogger("forces.csv", fields=["Fb", "Fdp"]) as logger:
    ...     for step in range(n):
    ...         auv.compute_fluid_forces(settings, ocean)
    ...         logger.log(step * dt, [auv])
    """

    def __init__(
        self,
        filepath: str | Path,
        buffer_size: int = 1000,
        fields: list[str] | None = None
    ) -> None:
        self.filepath = Path(filepath)
        self.buffer_size = buffer_size
        self.fields = list(fields) if fields is not None else list(VALID_FIELDS)

        invalid = set(self.fields) - set(VALID_FIELDS)
        if invalid:
            raise ValueError(
                f"Invalid fields: {sorted(invalid)}. Valid options: {list(VALID_FIELDS)}"
            )

        self._buffer: list[list[str]] = []
        self._file: TextIO | None = None
        self._writer: Any = None
        self._header_written = False

        self.filepath.parent.mkdir(parents=True, exist_ok=True)

    def __enter__(self) -> ForceLogger:
        self._file = open(self.filepath, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _write_header(self, bodies: Sequence[CompositeBody]) -> None:
        hdr = ["t"]
        for b in bodies:
            for field in self.fields:
                hdr.extend(f"{b.name}.{field}_{c}" for c in "xyz")
        self._writer.writerow(hdr)
        self._file.flush()
        self._header_written = True

    def log(self, t: float, bodies: Sequence[CompositeBody]) -> None:
        """
        Append the last computed fluid forces of ``bodies`` at time ``t``.

        Opens the file on first call if not used as a context manager.
        The set of bodies must not change between calls.
        """
        if self._file is None:
            self.__enter__()
        if not self._header_written:
            self._write_header(bodies)

        row = [f"{t:.10f}"]
        for b in bodies:
            values = b.fluid_forces.as_dict()
            for field in self.fields:
                row.extend(f"{v:.10e}" for v in values[field])
        self._buffer.append(row)

        if len(self._buffer) >= self.buffer_size:
            self.flush()

    def flush(self) -> None:
        """Write buffered rows to disk and clear the buffer."""
        if self._writer and self._buffer:
            self._writer.writerows(self._buffer)
            if self._file:
                self._file.flush()
            self._buffer.clear()

    def close(self) -> None:
        """Flush remaining data and close file."""
        self.flush()
        if self._file:
            self._file.close()
            self._file = None
            self._writer = None
