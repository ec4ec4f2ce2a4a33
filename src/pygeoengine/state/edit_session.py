"""Polygon drawing and reshaping state machine.

States::

    IDLE --start_drawing--> DRAWING
    IDLE | DRAWING | EDITING --begin_edit--> EDITING
    DRAWING | EDITING --submit / cancel--> IDLE

Saving is a two-phase protocol.  :meth:`PolygonEditSession.commit`
validates the vertices and returns a :class:`FinishedGeometry`; the
naming step that follows (owned by the view) hands that artifact and a
name to :meth:`PolygonEditSession.submit`, which performs the store
round trip.  A commit artifact becomes stale as soon as the session is
edited or cancelled, so a late confirmation can never save geometry the
operator has since changed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from pygeoengine._constants import MIN_POLYGON_VERTICES
from pygeoengine.exceptions import GeoValidationError
from pygeoengine.geometry import LatLng, close_ring, open_ring, require_vertices
from pygeoengine.models.geofence import Geofence

_logger = logging.getLogger(__name__)


class EditMode(StrEnum):
    IDLE = "idle"
    DRAWING = "drawing"
    EDITING = "editing"


class GeofenceWriter(Protocol):
    """The subset of :class:`GeofenceStore` a commit needs."""

    async def create(self, name: str, ring_lat_lng: Sequence[LatLng]) -> None: ...

    async def update(self, geofence_id: str, name: str, ring_lat_lng: Sequence[LatLng] | None) -> None: ...


@dataclass(frozen=True)
class EditState:
    """Read-only snapshot of the session for the view layer."""

    mode: EditMode
    target_id: str | None
    vertices: tuple[LatLng, ...]
    revision: int

    @property
    def is_active(self) -> bool:
        return self.mode is not EditMode.IDLE


@dataclass(frozen=True)
class FinishedGeometry:
    """Validated geometry awaiting a name."""

    target_id: str | None
    vertices: tuple[LatLng, ...]
    revision: int

    @property
    def ring_lat_lng(self) -> list[LatLng]:
        """The vertices as a closed ring."""
        return close_ring(self.vertices)

    @property
    def is_new(self) -> bool:
        return self.target_id is None


class PolygonEditSession:
    """Owns the transient vertex list while a polygon is drawn or reshaped.

    Vertex order is preserved through every operation and is never
    corrected; only the vertex count is validated, not simplicity.
    """

    def __init__(self) -> None:
        self._mode = EditMode.IDLE
        self._target_id: str | None = None
        self._vertices: list[LatLng] = []
        self._revision = 0

    @property
    def mode(self) -> EditMode:
        return self._mode

    @property
    def target_id(self) -> str | None:
        return self._target_id

    @property
    def vertices(self) -> tuple[LatLng, ...]:
        return tuple(self._vertices)

    @property
    def revision(self) -> int:
        return self._revision

    def state(self) -> EditState:
        return EditState(
            mode=self._mode,
            target_id=self._target_id,
            vertices=tuple(self._vertices),
            revision=self._revision,
        )

    def is_editing(self, geofence_id: str) -> bool:
        """Whether the stored zone *geofence_id* is currently being reshaped."""
        return self._mode is EditMode.EDITING and self._target_id == geofence_id

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _bump(self) -> None:
        self._revision += 1

    def _reset(self) -> None:
        self._mode = EditMode.IDLE
        self._target_id = None
        self._vertices = []
        self._bump()

    def _require_active(self) -> None:
        if self._mode is EditMode.IDLE:
            raise GeoValidationError("no polygon is being drawn or edited")

    def start_drawing(self) -> None:
        if self._mode is not EditMode.IDLE:
            raise GeoValidationError(f"cannot start drawing while {self._mode}")
        self._mode = EditMode.DRAWING
        self._target_id = None
        self._vertices = []
        self._bump()
        _logger.debug("Drawing started")

    def begin_edit(self, geofence: Geofence) -> None:
        """Reshape *geofence*, seeding the vertices from its stored ring.

        Any drawing or edit in progress is discarded.
        """
        self._mode = EditMode.EDITING
        self._target_id = geofence.id
        self._vertices = open_ring(geofence.ring_lat_lng)
        self._bump()
        _logger.debug("Editing geofence id=%s vertices=%d", geofence.id, len(self._vertices))

    def cancel(self) -> None:
        """Discard everything and return to IDLE, whatever the current mode."""
        if self._mode is not EditMode.IDLE:
            _logger.debug("Edit cancelled mode=%s vertices=%d", self._mode, len(self._vertices))
        self._reset()

    # ------------------------------------------------------------------
    # Vertex operations
    # ------------------------------------------------------------------

    def add_vertex(self, point: LatLng) -> None:
        self._require_active()
        self._vertices.append((float(point[0]), float(point[1])))
        self._bump()

    def move_vertex(self, index: int, point: LatLng) -> None:
        """Replace the vertex at *index*, keeping its position in the ring."""
        self._require_active()
        if not 0 <= index < len(self._vertices):
            raise IndexError(f"vertex index {index} out of range for {len(self._vertices)} vertices")
        self._vertices[index] = (float(point[0]), float(point[1]))
        self._bump()

    def remove_vertex(self, index: int) -> None:
        """Delete the vertex at *index*.

        Raises
        ------
        GeoValidationError
            If the removal would leave fewer than 3 vertices; the vertices
            are left unchanged.
        """
        self._require_active()
        if not 0 <= index < len(self._vertices):
            raise IndexError(f"vertex index {index} out of range for {len(self._vertices)} vertices")
        if len(self._vertices) - 1 < MIN_POLYGON_VERTICES:
            raise GeoValidationError(f"at least {MIN_POLYGON_VERTICES} points required")
        del self._vertices[index]
        self._bump()

    # ------------------------------------------------------------------
    # Two-phase commit
    # ------------------------------------------------------------------

    def commit(self) -> FinishedGeometry:
        """Validate the current vertices and return them for naming.

        The session itself is left unchanged.
        """
        self._require_active()
        require_vertices(self._vertices)
        return FinishedGeometry(
            target_id=self._target_id,
            vertices=tuple(self._vertices),
            revision=self._revision,
        )

    async def submit(self, finished: FinishedGeometry, name: str, store: GeofenceWriter) -> None:
        """Save *finished* under *name* and return to IDLE.

        Calls ``store.create`` for new polygons and ``store.update`` for
        reshaped ones.  If the store call fails the session is kept so
        the operator can retry.  If the operator started another edit
        while the call was in flight, that edit is left alone.

        Raises
        ------
        GeoValidationError
            If *finished* no longer matches the session.
        GeoTransportError
            If the store round trip fails.
        """
        if self._mode is EditMode.IDLE or finished.revision != self._revision:
            raise GeoValidationError("geometry changed since it was committed")

        if finished.target_id is None:
            await store.create(name, finished.ring_lat_lng)
        else:
            await store.update(finished.target_id, name, finished.ring_lat_lng)

        if self._revision == finished.revision:
            self._reset()
        else:
            _logger.debug("Session moved on while saving; keeping revision=%d", self._revision)
