from __future__ import annotations

import json

import pytest
from conftest import FakeGeoBackend, polygon

from pygeoengine import GeoConfig, GeoConsole, Notification, NotificationLevel
from pygeoengine.exceptions import GeoError
from pygeoengine.state.edit_session import EditMode

SQUARE = polygon((10, 10), (20, 10), (20, 20), (10, 20), (10, 10))


@pytest.fixture
def notes() -> list[Notification]:
    return []


@pytest.fixture
def console(backend: FakeGeoBackend, notes: list[Notification]) -> GeoConsole:
    config = GeoConfig(stream_enabled=False, search_radius=1_000.0)
    return GeoConsole(config, transport=backend, on_notification=notes.append)


def _messages(notes: list[Notification]) -> list[tuple[str, NotificationLevel]]:
    return [(n.message, n.level) for n in notes]


@pytest.mark.asyncio
async def test_start_loads_drivers_and_zones(console: GeoConsole, backend: FakeGeoBackend) -> None:
    backend.drivers = [
        {"id": "d1", "device_id": "truck-1", "latitude": 28.6, "longitude": -106.0, "heading": 90},
        {"device_id": "truck-2", "latitude": 28.7, "longitude": -106.1},
        {"device_id": "", "latitude": 0, "longitude": 0},
    ]
    backend.zones["z1"] = {"name": "Depot", "geojson": SQUARE}

    async with console:
        await console.start()

    _method, endpoint, _payload = backend.calls[0]
    assert endpoint == "/drivers/nearby"
    assert [d.device_id for d in console.registry.drivers()] == ["truck-1", "truck-2"]
    assert [g.id for g in console.geofences.geofences()] == ["z1"]
    assert not console.is_streaming


@pytest.mark.asyncio
async def test_start_with_null_driver_data(console: GeoConsole, backend: FakeGeoBackend) -> None:
    await console.start()

    assert len(console.registry) == 0


@pytest.mark.asyncio
async def test_start_failure_is_notified_and_not_raised(
    console: GeoConsole, backend: FakeGeoBackend, notes: list[Notification]
) -> None:
    backend.failures.add(("GET", "/drivers/nearby"))
    backend.zones["z1"] = {"name": "Depot", "geojson": SQUARE}

    await console.start()

    assert _messages(notes) == [("Could not load drivers", NotificationLevel.ERROR)]
    assert len(console.geofences) == 1


@pytest.mark.asyncio
async def test_select_driver_loads_route(console: GeoConsole, backend: FakeGeoBackend) -> None:
    backend.drivers = [{"device_id": "truck-1", "latitude": 28.6, "longitude": -106.0}]
    backend.routes["truck-1"] = [[-106.0, 28.6], [-106.1, 28.7]]
    await console.start()

    route = await console.select_driver("truck-1")

    assert route == ((28.6, -106.0), (28.7, -106.1))
    snapshot = console.snapshot()
    assert snapshot.selected_device_id == "truck-1"
    assert snapshot.route == route

    console.clear_selection()
    assert console.snapshot().route == ()
    assert console.snapshot().selected_device_id is None


@pytest.mark.asyncio
async def test_route_failure_keeps_selection_with_empty_route(
    console: GeoConsole, backend: FakeGeoBackend, notes: list[Notification]
) -> None:
    backend.failures.add(("GET", "/drivers/truck-1/route"))

    route = await console.select_driver("truck-1")

    assert route == ()
    assert console.registry.selected == "truck-1"
    assert notes == []


@pytest.mark.asyncio
async def test_draw_and_save_new_zone(
    console: GeoConsole, backend: FakeGeoBackend, notes: list[Notification]
) -> None:
    assert console.start_drawing()
    for point in [(28.0, -106.0), (28.0, -105.0), (29.0, -105.0)]:
        console.editor.add_vertex(point)
    assert console.suggested_name() == ""

    assert await console.save_geometry("North lot")

    (zone,) = console.geofences.geofences()
    assert zone.name == "North lot"
    stored = json.loads(backend.zones[zone.id]["geojson"])["coordinates"][0]
    assert stored[0] == [-106.0, 28.0]
    assert stored[-1] == stored[0]
    assert console.editor.mode is EditMode.IDLE
    assert _messages(notes) == [("Zone created", NotificationLevel.SUCCESS)]


@pytest.mark.asyncio
async def test_save_with_two_points_is_rejected_without_request(
    console: GeoConsole, backend: FakeGeoBackend, notes: list[Notification]
) -> None:
    console.start_drawing()
    console.editor.add_vertex((0.0, 0.0))
    console.editor.add_vertex((0.0, 1.0))

    assert not await console.save_geometry("Tiny")

    assert backend.calls == []
    assert _messages(notes) == [("at least 3 points required", NotificationLevel.ERROR)]
    assert console.editor.mode is EditMode.DRAWING


@pytest.mark.asyncio
async def test_save_failure_keeps_drawing(
    console: GeoConsole, backend: FakeGeoBackend, notes: list[Notification]
) -> None:
    backend.failures.add(("POST", "/geofences"))
    console.start_drawing()
    for point in [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0)]:
        console.editor.add_vertex(point)

    assert not await console.save_geometry("Yard")

    assert _messages(notes) == [("Error saving zone", NotificationLevel.ERROR)]
    assert console.editor.mode is EditMode.DRAWING
    assert len(console.editor.vertices) == 3


@pytest.mark.asyncio
async def test_edit_existing_zone_hides_it_from_snapshot(
    console: GeoConsole, backend: FakeGeoBackend, notes: list[Notification]
) -> None:
    backend.zones["z1"] = {"name": "Depot", "geojson": SQUARE}
    backend.zones["z2"] = {"name": "Yard", "geojson": SQUARE}
    await console.refresh_geofences()

    assert console.begin_edit("z1")
    assert console.suggested_name() == "Depot"
    snapshot = console.snapshot()
    assert [g.id for g in snapshot.geofences] == ["z2"]
    assert snapshot.edit.mode is EditMode.EDITING
    assert len(snapshot.edit.vertices) == 4

    console.editor.move_vertex(0, (11.0, 11.0))
    assert await console.save_geometry("Depot")

    assert backend.count("PUT", "/geofences/z1") == 1
    assert [g.id for g in console.snapshot().geofences] == ["z1", "z2"]
    assert _messages(notes) == [("Zone updated", NotificationLevel.SUCCESS)]


@pytest.mark.asyncio
async def test_begin_edit_unknown_zone(console: GeoConsole, notes: list[Notification]) -> None:
    await console.refresh_geofences()

    assert not console.begin_edit("missing")
    assert _messages(notes) == [("Zone no longer exists", NotificationLevel.ERROR)]
    assert console.editor.mode is EditMode.IDLE


@pytest.mark.asyncio
async def test_rename_sends_name_only(console: GeoConsole, backend: FakeGeoBackend) -> None:
    backend.zones["z1"] = {"name": "Depot", "geojson": SQUARE}
    await console.refresh_geofences()

    assert await console.rename_geofence("z1", "Depot East")

    put = [payload for method, _endpoint, payload in backend.calls if method == "PUT"]
    assert put == [{"name": "Depot East"}]
    zone = console.geofences.get("z1")
    assert zone is not None and zone.name == "Depot East"


@pytest.mark.asyncio
async def test_rename_to_blank_is_rejected(
    console: GeoConsole, backend: FakeGeoBackend, notes: list[Notification]
) -> None:
    backend.zones["z1"] = {"name": "Depot", "geojson": SQUARE}
    await console.refresh_geofences()

    assert not await console.rename_geofence("z1", "  ")

    assert backend.count("PUT", "/geofences/z1") == 0
    assert notes[0].level is NotificationLevel.ERROR


@pytest.mark.asyncio
async def test_delete_zone_being_edited_cancels_edit(
    console: GeoConsole, backend: FakeGeoBackend, notes: list[Notification]
) -> None:
    backend.zones["z1"] = {"name": "Depot", "geojson": SQUARE}
    await console.refresh_geofences()
    console.begin_edit("z1")

    assert await console.delete_geofence("z1")

    assert len(console.geofences) == 0
    assert console.editor.mode is EditMode.IDLE
    assert _messages(notes) == [("Zone deleted", NotificationLevel.SUCCESS)]


@pytest.mark.asyncio
async def test_delete_failure_is_notified(
    console: GeoConsole, backend: FakeGeoBackend, notes: list[Notification]
) -> None:
    assert not await console.delete_geofence("missing")

    assert _messages(notes) == [("Error deleting zone", NotificationLevel.ERROR)]


def test_stream_frames_reach_snapshot(console: GeoConsole) -> None:
    console.dispatcher.dispatch('{"type": "LOCATION_UPDATE", "device_id": "truck-5", "latitude": 1, "longitude": 2}')
    console.dispatcher.dispatch('{"type": "GEOFENCE_EVENT", "event": "ENTER", "device_id": "truck-5", "zone_name": "Depot"}')

    snapshot = console.snapshot()
    assert [m.driver.device_id for m in snapshot.drivers] == ["truck-5"]
    (alert,) = snapshot.alerts
    assert alert.body == "truck-5 in Depot"

    assert console.dismiss_alert(alert.id)
    assert console.snapshot().alerts == ()


def test_notification_callback_errors_are_contained(backend: FakeGeoBackend) -> None:
    def _broken(_note: Notification) -> None:
        raise RuntimeError("ui gone")

    console = GeoConsole(GeoConfig(stream_enabled=False), transport=backend, on_notification=_broken)

    assert not console.begin_edit("missing")


def test_geofences_requires_initialization() -> None:
    console = GeoConsole(GeoConfig(stream_enabled=False))

    with pytest.raises(GeoError):
        _ = console.geofences


@pytest.mark.asyncio
async def test_saved_zone_is_not_resubmitted_when_refresh_fails(
    console: GeoConsole, backend: FakeGeoBackend, notes: list[Notification]
) -> None:
    backend.failures.add(("GET", "/geofences"))
    console.start_drawing()
    for point in [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0)]:
        console.editor.add_vertex(point)

    assert await console.save_geometry("Depot")
    assert not await console.save_geometry("Depot")

    assert backend.count("POST", "/geofences") == 1
    assert len(backend.zones) == 1
    assert console.editor.mode is EditMode.IDLE
    assert _messages(notes)[:2] == [
        ("Zone created", NotificationLevel.SUCCESS),
        ("Zone list could not be refreshed", NotificationLevel.ERROR),
    ]

    backend.failures.clear()
    assert await console.refresh_geofences()
    assert [g.name for g in console.snapshot().geofences] == ["Depot"]
