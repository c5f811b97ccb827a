from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from signage_cms.api.deps import require_customer_id
from signage_cms.db import get_db
from signage_cms.errors import ConflictError, NotFoundError
from signage_cms.models.customer import Customer
from signage_cms.schemas.directory import CustomerIn, CustomerOut

router = APIRouter(prefix="/customers", tags=["customers"])


@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerIn, db: Session = Depends(get_db)):
    subdomain = payload.subdomain.strip().lower()
    if db.query(Customer).filter(Customer.subdomain == subdomain).first():
        raise ConflictError("Subdomain already in use")
    customer = Customer(name=payload.name.strip(), subdomain=subdomain, is_active=True)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(
    customer_id: int,
    tenant_id: int = Depends(require_customer_id),
    db: Session = Depends(get_db),
):
    customer = db.get(Customer, customer_id)
    if not customer or customer.id != tenant_id:
        raise NotFoundError("Customer not found")
    return customer
