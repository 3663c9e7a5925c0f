# Base.metadata에 모든 테이블을 등록하기 위한 import
from myhood.models.user import User  # noqa: F401
from myhood.models.association import Association  # noqa: F401
from myhood.models.relations import AssociationAdmin, AssociationTreasurer, UserAssociation  # noqa: F401
from myhood.models.transaction import Transaction  # noqa: F401
from myhood.models.field import Field, FieldReservation  # noqa: F401
