# backend/agenda/routers/availability_rules.py
# PUT replaces the whole set. There is no PATCH and no per-rule DELETE.

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import Identity, get_identity, require_provider
from ..database import get_db
from ..schemas.availability_rules import AvailabilityRuleRead, AvailabilityRulesReplace
from ..services.availability_rules import list_rules, replace_rules
from ..services.provider_settings import get_settings

router = APIRouter(prefix="/providers", tags=["availability_rules"])


@router.get("/{provider_id}/availability_rules", response_model=list[AvailabilityRuleRead])
def read_rules(provider_id: int, db: Session = Depends(get_db)):
    get_settings(db, provider_id)
    return list_rules(db, provider_id)


@router.put("/{provider_id}/availability_rules", response_model=list[AvailabilityRuleRead])
def save_rules(
    provider_id: int,
    data: AvailabilityRulesReplace,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    require_provider(identity, provider_id)
    return replace_rules(db, provider_id, [r.model_dump() for r in data.rules])
