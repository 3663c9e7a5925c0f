# tests/helpers.py
import uuid
from datetime import date

from sqlalchemy.orm import Session

from myhood.core.security import GLOBAL_ADMIN, create_access_token
from myhood.models.association import Association
from myhood.models.field import Field
from myhood.models.user import User
from myhood.schemas.association import AssociationCreate
from myhood.schemas.field import FieldCreate
from myhood.schemas.user import UserCreate
from myhood.services.associations import create_association
from myhood.services.fields import create_field
from myhood.services.users import create_user


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def user_payload(**overrides) -> dict:
    payload = {
        "name": "Maria Silva",
        "birthday": "1990-05-17",
        "address": "Rua A nr 1",
        "email": f"user_{uuid.uuid4().hex[:8]}@example.com",
        "uses_whatsapp": True,
    }
    payload.update(overrides)
    return payload


def association_payload(**overrides) -> dict:
    payload = {
        "name": "Associação Vila Nova",
        "neighborhood": "Vila Nova",
        "country": "Brasil",
        "state": "SP",
        "address": "Praça Central 10",
    }
    payload.update(overrides)
    return payload


def make_user(db: Session, **overrides) -> User:
    user = create_user(db, UserCreate.model_validate(user_payload(**overrides)))
    db.commit()
    db.refresh(user)
    return user


def make_association(db: Session, *, founder: User | None = None, **overrides) -> Association:
    association = create_association(
        db,
        AssociationCreate.model_validate(association_payload(**overrides)),
        founder_id=founder.id if founder else None,
    )
    db.commit()
    db.refresh(association)
    return association


# 하루 1회, 최대 60분, 06:00(UTC) 이후 당일 예약 가능
DAILY_RULES = {
    "reservations_start_at_time_utc": "06:00:00",
    "max_duration_minutes": 60,
    "max_reservations_per_period": 1,
    "reservation_period": "Daily",
}


def field_payload(**overrides) -> dict:
    payload = {
        "name": "Quadra de areia",
        "description": "Beach tennis",
        "reservation_rules": DAILY_RULES,
        "latitude": "-16.42",
        "longitude": "-39.07",
    }
    payload.update(overrides)
    return payload


def make_field(db: Session, association: Association, **overrides) -> Field:
    field = create_field(
        db, association_id=association.id, data=FieldCreate.model_validate(field_payload(**overrides))
    )
    db.commit()
    db.refresh(field)
    return field


def token_for(user: User, *roles: str) -> str:
    return create_access_token(str(user.id), email=user.email, roles=list(roles))


def global_admin_token(email: str = "root@example.com") -> str:
    return create_access_token(None, email=email, roles=[GLOBAL_ADMIN])


D = date.fromisoformat
