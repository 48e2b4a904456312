# marketplace/errors.py
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession


class ValidationError(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=400, detail=message)

class Unauthorized(HTTPException):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(status_code=401, detail=message, headers={"WWW-Authenticate": "Bearer"})

class Forbidden(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=403, detail=message)

class NotFound(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=404, detail=message)

class InternalError(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=500, detail=message)


def first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    # drop the "body"/"query"/"path" prefix
    loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
    msg = err.get("msg", "Invalid value")
    return f"{'.'.join(loc)}: {msg}" if loc else msg


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": first_error_message(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


@asynccontextmanager
async def store_errors(db: AsyncSession, tag: str):
    """
    One try-scope per handler: classified HTTP errors pass through,
    constraint violations become 400, anything else becomes 500.
    """
    try:
        yield
    except StarletteHTTPException:
        raise
    except IntegrityError as e:
        await db.rollback()
        print(f"[{tag}] integrity error: {e.orig}")
        raise ValidationError(f"Constraint violated: {e.orig}") from e
    except Exception as e:
        await db.rollback()
        print(f"[{tag}] ERROR: {e!r}")
        raise InternalError(str(e)) from e
