from sqlalchemy import select, update
from sqlalchemy.orm import Session

from marketplace.data.models.address import AddressModel


class AddressRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_address(self, address_id: int) -> AddressModel | None:
        return self.db.get(AddressModel, address_id)

    def list_addresses(self, user_id: int):
        return self.db.execute(
            select(AddressModel)
            .where(AddressModel.user_id == user_id)
            .order_by(AddressModel.is_default.desc(), AddressModel.id)
        ).scalars().all()

    def add_address(self, address: AddressModel) -> AddressModel:
        self.db.add(address)
        self.db.flush()
        return address

    def delete_address(self, address: AddressModel) -> None:
        self.db.delete(address)
        self.db.flush()

    def clear_default(self, user_id: int) -> None:
        self.db.execute(
            update(AddressModel)
            .where(AddressModel.user_id == user_id, AddressModel.is_default.is_(True))
            .values(is_default=False)
            .execution_options(synchronize_session="fetch")
        )
