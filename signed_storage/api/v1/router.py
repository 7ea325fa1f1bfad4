from fastapi import APIRouter, Depends

from signed_storage.api.v1.objects import router as objects_router
from signed_storage.dependencies.auth import require_api_token

router = APIRouter(dependencies=[Depends(require_api_token)])
router.include_router(objects_router)
