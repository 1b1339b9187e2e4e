from functools import partial
from typing import Optional, Sequence

from anyio import TASK_STATUS_IGNORED, Event, create_task_group
from anyio.abc import TaskStatus
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from hypercorn.asyncio import serve
from hypercorn.config import Config

from .api import invalid_body_handler
from .api import router as api_router
from .lifespan import Lifespan
from .middleware import add_middleware


class Server(object):
    def __init__(
        self,
        cors_origins: Sequence[str] = ("*",),
        lifespan: Optional[Lifespan] = None,
    ) -> None:
        if lifespan is not None:
            self._app = FastAPI(lifespan=lifespan.run)
        else:
            self._app = FastAPI()
        self._app.include_router(api_router)
        self._app.add_exception_handler(RequestValidationError, invalid_body_handler)  # type: ignore
        add_middleware(self._app, cors_origins)

        self._shutdown_event: Optional[Event] = None

    async def start(
        self,
        host: str,
        port: int,
        access_log: bool = True,
        *,
        task_status: TaskStatus[None] = TASK_STATUS_IGNORED,
    ):
        assert self._shutdown_event is None, "Server has already been started."

        self._shutdown_event = Event()
        config = Config()
        config.bind = [f"{host}:{port}"]
        if access_log:
            config.accesslog = "-"
        config.errorlog = "-"

        try:
            async with create_task_group() as tg:
                serve_func = partial(serve, self._app, config, shutdown_trigger=self._shutdown_event.wait)  # type: ignore
                tg.start_soon(serve_func)
                task_status.started()
        finally:
            self._shutdown_event = None

    def stop(self) -> None:
        assert self._shutdown_event is not None, "Server has not been started."
        self._shutdown_event.set()

    @property
    def app(self):
        return self._app
