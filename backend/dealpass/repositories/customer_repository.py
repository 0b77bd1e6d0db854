from uuid import UUID

from sqlalchemy.orm import Session

from dealpass.models.customer import Customer
from dealpass.schemas.customer import CustomerCreate


class CustomerRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, customer_id: UUID, organization_id: UUID | None = None) -> Customer | None:
        query = self.db.query(Customer).filter(Customer.id == customer_id)
        if organization_id is not None:
            query = query.filter(Customer.organization_id == organization_id)
        return query.first()

    def get_by_stripe_customer_id(self, stripe_customer_id: str) -> Customer | None:
        return (
            self.db.query(Customer)
            .filter(Customer.stripe_customer_id == stripe_customer_id)
            .first()
        )

    def create(self, data: CustomerCreate, organization_id: UUID) -> Customer:
        customer = Customer(**data.model_dump(), organization_id=organization_id)
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def set_stripe_customer_id(self, customer: Customer, stripe_customer_id: str) -> Customer:
        customer.stripe_customer_id = stripe_customer_id  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(customer)
        return customer
