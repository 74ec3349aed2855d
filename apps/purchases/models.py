# ORM models live in the infrastructure layer; Django discovers them here.
from apps.purchases.infrastructure.persistence.models import PurchaseRecord  # noqa: F401
