from logging import Logger

import inject
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from culqi_backend.config.models import AppConfig
from culqi_backend.culqi.errors import ErrorCode, GatewayError

from .responses import ErrorResponse


class ExceptionHandlers:
    @staticmethod
    def load_handlers(app: FastAPI) -> None:
        @app.exception_handler(RequestValidationError)
        @inject.autoparams()
        async def validation_exception_handler(
            request: Request,
            exc: RequestValidationError,
            logger: Logger,
        ) -> JSONResponse:
            errors = [
                {
                    "field": ".".join(str(part) for part in error["loc"][1:]),
                    "message": error["msg"],
                    "type": error["type"],
                }
                for error in exc.errors()
            ]
            logger.error(msg=f"Request validation failed: 400 - {errors}")

            return ErrorResponse(
                status_code=HTTP_400_BAD_REQUEST,
                error={
                    "code": ErrorCode.VALIDATION_ERROR.value,
                    "message": "Error en los datos enviados",
                    "retryable": False,
                    "details": jsonable_encoder(errors),
                },
            )

        @app.exception_handler(GatewayError)
        @inject.autoparams()
        async def gateway_exception_handler(
            request: Request,
            exc: GatewayError,
            logger: Logger,
            app_config: AppConfig,
        ) -> JSONResponse:
            logger.error(
                msg=f"Gateway error on {request.method} {request.url.path}: {exc.status_code} - {exc.code.value} - {exc.message}"
            )

            # Validation details describe the caller's own input and are always returned
            include_details = (
                app_config.exposes_error_details
                or exc.code == ErrorCode.VALIDATION_ERROR
            )

            return ErrorResponse(
                status_code=exc.status_code,
                error=jsonable_encoder(exc.to_dict(include_details=include_details)),
            )

        @app.exception_handler(Exception)
        @inject.autoparams()
        async def general_exception_handler(
            request: Request, exc: Exception, logger: Logger
        ) -> JSONResponse:
            logger.exception(
                msg=f"Unhandled exception on {request.method} {request.url.path}",
                exc_info=exc,
            )

            return ErrorResponse(
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
                error={
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "Internal Server Error",
                    "retryable": False,
                },
            )
