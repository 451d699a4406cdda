"""
방문 등록 API 라우트
"""
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from kiosk.database import get_db
from kiosk.dependencies import get_crm, get_photo_storage
from kiosk.schemas.visit import VisitCreate, VisitCreatedResponse
from kiosk.services.crm import CrmClient, dispatch_visit
from kiosk.services.visit_service import VisitService
from kiosk.storage.photos import PhotoStorage

router = APIRouter(
    prefix="/api/visits",
    tags=["Visits"]
)


@router.post("", response_model=VisitCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_visit(
        visit_data: VisitCreate,
        background_tasks: BackgroundTasks,
        db: Session = Depends(get_db),
        storage: PhotoStorage = Depends(get_photo_storage),
        crm: CrmClient = Depends(get_crm)
):
    """
    방문 등록
    - CRM 전송은 응답 이후 백그라운드에서 한 번만 시도합니다.
    """
    visit, photo_url = VisitService.record_visit(db, storage, visit_data)

    background_tasks.add_task(dispatch_visit, crm, VisitService.build_crm_payload(visit))

    return {
        "id": visit.id,
        "photo_url": photo_url
    }
