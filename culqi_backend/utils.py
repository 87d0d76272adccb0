import os
from typing import Any, Type, TypeVar

import inject
from fastapi import Depends

T = TypeVar("T")


def root_path(*args: str) -> str:
    """
    Returns the absolute path of the project root joined with the given parts.
    """
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    return os.path.abspath(os.path.join(project_root, *args))


def resolve_instance(cls: Type[T]) -> Any:
    """
    FastAPI dependency that resolves an instance from the inject container at request time.
    """
    return Depends(lambda: inject.instance(cls))
