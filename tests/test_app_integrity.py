import pytest
from fastapi.routing import APIRoute

from main import app


EXPECTED_ROUTES = {
    ("GET", "/qrcodes/public/{qr_id}"),
    ("GET", "/qrcodes/landing/{qr_id}"),
    ("POST", "/qrcodes/{qr_id}/scan"),
    ("GET", "/qrcodes/redirect/{qr_id}"),
    ("POST", "/qrcodes"),
    ("GET", "/qrcodes"),
    ("GET", "/qrcodes/{slug}"),
    ("PATCH", "/qrcodes/{slug}"),
    ("DELETE", "/qrcodes/{slug}"),
    ("GET", "/qrcodes/{slug}/image.png"),
    ("POST", "/api/orders"),
    ("GET", "/api/orders"),
    ("GET", "/api/orders/stats"),
    ("GET", "/api/orders/{order_id}"),
    ("PATCH", "/api/orders/{order_id}/status"),
    ("PATCH", "/api/orders/{order_id}/notes"),
    ("DELETE", "/api/orders/{order_id}"),
}


def test_all_expected_routes_are_registered():
    registered = {
        (method, route.path)
        for route in app.routes
        if isinstance(route, APIRoute)
        for method in route.methods
    }
    missing = EXPECTED_ROUTES - registered
    assert not missing, f"Fehlende Routen: {missing}"


@pytest.mark.asyncio
async def test_static_get_routes_answer(client):
    """
    Ruft alle GET-Routen ohne Parameter auf.
    Geschützte Routen müssen 401 liefern, alle anderen 200/204.
    """
    failed = []
    for route in app.routes:
        if not isinstance(route, APIRoute) or "GET" not in route.methods:
            continue
        if "{" in route.path:
            continue

        response = await client.get(route.path)
        expected = {401} if route.path.startswith(("/api/orders", "/qrcodes")) else {200, 204}
        if response.status_code not in expected:
            failed.append((route.path, response.status_code))

    assert not failed, f"Fehlerhafte Routen: {failed}"


def test_no_debug_routes_are_exposed():
    paths = {route.path for route in app.routes if isinstance(route, APIRoute)}
    assert "/debug/routes" not in paths
    assert not any(path.startswith("/.well-known") for path in paths)
    assert {p for p in paths if not p.startswith(("/qrcodes", "/api/orders"))} == {"/health"}
