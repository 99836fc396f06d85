"""Admin HTTP surface for manual inspection and debugging.

Thin pass-throughs to :class:`FleetTracker`; nothing here mutates Gateway
lists.
"""

from __future__ import annotations

from aiohttp import web

from regionsync.tracker import FleetTracker

TRACKER_KEY = web.AppKey("tracker", FleetTracker)

_ENDPOINTS = [
    "GET /track?registration=9V-SGC - track single aircraft",
    "GET /state - view all aircraft states",
    "GET /state?registration=9V-SGC - view single aircraft state",
    "GET /fleet - view fleet config",
    "GET /clear-state - clear all stored state",
    "GET /clear-state?registration=9V-SGC - clear single aircraft state",
]


async def _track(request: web.Request) -> web.Response:
    registration = request.query.get("registration")
    if not registration:
        return web.json_response({"error": "Please provide registration parameter"}, status=400)
    tracker = request.app[TRACKER_KEY]
    return web.json_response(await tracker.track(registration))


async def _state(request: web.Request) -> web.Response:
    tracker = request.app[TRACKER_KEY]
    registration = request.query.get("registration")
    if registration:
        state = await tracker.get_state(registration)
        if state is None:
            return web.json_response({"message": "No state found"})
        return web.json_response(state.model_dump(mode="json"))
    states = await tracker.get_all_states()
    return web.json_response([s.model_dump(mode="json") for s in states])


async def _fleet(request: web.Request) -> web.Response:
    return web.json_response(request.app[TRACKER_KEY].fleet.to_list())


async def _clear_state(request: web.Request) -> web.Response:
    tracker = request.app[TRACKER_KEY]
    registration = request.query.get("registration")
    if registration:
        await tracker.clear_state(registration)
        return web.json_response({"cleared": registration})
    await tracker.clear_all_states()
    return web.json_response({"cleared": "all"})


async def _index(_request: web.Request) -> web.Response:
    return web.json_response({"endpoints": _ENDPOINTS})


def create_app(tracker: FleetTracker) -> web.Application:
    """Build the admin application around an initialized *tracker*."""
    app = web.Application()
    app[TRACKER_KEY] = tracker
    app.router.add_get("/track", _track)
    app.router.add_get("/state", _state)
    app.router.add_get("/fleet", _fleet)
    app.router.add_get("/clear-state", _clear_state)
    app.router.add_get("/{tail:.*}", _index)
    return app
