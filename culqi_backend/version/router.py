from fastapi import APIRouter

from culqi_backend.utils import resolve_instance
from culqi_backend.version.models import VersionInfo

router = APIRouter()


@router.get("/", response_model=VersionInfo)
def get_version(
    version_info: VersionInfo = resolve_instance(VersionInfo),
) -> VersionInfo:
    return version_info
