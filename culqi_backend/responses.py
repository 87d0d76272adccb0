from typing import Any

from fastapi.responses import JSONResponse


class ErrorResponse(JSONResponse):
    def __init__(self, status_code: int, error: dict[str, Any]) -> None:
        super().__init__(
            content={"success": False, "error": error}, status_code=status_code
        )
