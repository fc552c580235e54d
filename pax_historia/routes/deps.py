"""Request-scoped access to the process runtime."""

from typing import Annotated

from fastapi import Depends, Request

from pax_historia.runtime import Runtime


def get_runtime(request: Request) -> Runtime:
    return request.app.state.runtime


RuntimeDep = Annotated[Runtime, Depends(get_runtime)]
