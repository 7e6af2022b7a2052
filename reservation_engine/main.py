from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from reservation_engine.config import Settings, configure_logging
from reservation_engine.db import Store
from reservation_engine.errors import ReservationError
from reservation_engine.messagebus import MessageBus
from reservation_engine.notifications import Notifier
from routers import reservations, rooms


def create_app(settings: Settings | None = None, store: Store | None = None, bus: MessageBus | None = None) -> FastAPI:
    """Build the HTTP app. A store passed in is owned by the caller and not disposed here."""
    settings = settings or Settings.from_env()
    app = FastAPI(title="Municipal Room Booking API", version="0.1.0")

    app.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
    app.include_router(rooms.router, prefix="/rooms", tags=["rooms"])

    @app.exception_handler(ReservationError)
    async def reservation_error_handler(request: Request, exc: ReservationError):
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.on_event("startup")
    def on_startup():
        configure_logging(settings.log_level)
        app.state.store = store or Store.from_settings(settings)
        if bus is None:
            app.state.bus = MessageBus()
            Notifier().register(app.state.bus)
        else:
            app.state.bus = bus
        if settings.skip_db_init:
            return
        app.state.store.init_db()

    @app.on_event("shutdown")
    def on_shutdown():
        if store is None:
            app.state.store.dispose()

    @app.get("/")
    def root():
        return {"ok": True, "service": "room-booking"}

    return app


app = create_app()
