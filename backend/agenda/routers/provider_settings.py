# backend/agenda/routers/provider_settings.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import Identity, get_identity, require_provider
from ..database import get_db
from ..schemas.provider_settings import ProviderSettingsRead, ProviderSettingsUpdate
from ..services.provider_settings import get_settings, upsert_settings

router = APIRouter(prefix="/providers", tags=["provider_settings"])


@router.get("/{provider_id}/settings", response_model=ProviderSettingsRead)
def read_settings(provider_id: int, db: Session = Depends(get_db)):
    return get_settings(db, provider_id)


@router.put("/{provider_id}/settings", response_model=ProviderSettingsRead)
def save_settings(
    provider_id: int,
    data: ProviderSettingsUpdate,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    require_provider(identity, provider_id)
    return upsert_settings(db, provider_id, data.model_dump(exclude_unset=True))
