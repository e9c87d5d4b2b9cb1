from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from gymdesk.core.database import get_db
from gymdesk.models.tenant import Tenant
from gymdesk.routers.deps import require_staff
from gymdesk.services.subscription_service import subscription_stats

router = APIRouter(prefix="/api/tenants", tags=["tenants"])


@router.get("/{tenant_id}/subscription-stats")
async def tenant_subscription_stats(tenant_id: int, db: Session = Depends(get_db), user=Depends(require_staff)):
    """Subscription row counts by status"""
    if user.role != "SUPER_ADMIN" and user.tenant_id != tenant_id:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    if not db.query(Tenant).filter(Tenant.id == tenant_id).first():
        raise HTTPException(status_code=404, detail="Tenant not found")
    return subscription_stats(db, tenant_id)
