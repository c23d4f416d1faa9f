from sqlalchemy.orm import Session

from marketplace.data.models.address import AddressModel
from marketplace.data.unit_of_work import unit_of_work
from marketplace.domain.errors import Conflict, NotFound
from marketplace.repos.address_repo import AddressRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class AddressService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = AddressRepo(db)
        self.orders = OrderRepo(db)

    def list_addresses(self, user_id: int):
        return self.repo.list_addresses(user_id)

    def create_address(self, user_id: int, payload) -> AddressModel:
        with unit_of_work(self.db):
            # pierwszy adres zawsze domyslny
            is_default = payload.is_default or not self.repo.list_addresses(user_id)
            if is_default:
                self.repo.clear_default(user_id)

            data = payload.model_dump(exclude={"is_default"})
            address = self.repo.add_address(AddressModel(user_id=user_id, is_default=is_default, **data))

        logger.info(f"Address {address.id} created for user {user_id}")
        return self.repo.get_address(address.id)

    def set_default(self, user_id: int, address_id: int) -> AddressModel:
        with unit_of_work(self.db):
            address = self._owned(user_id, address_id)
            self.repo.clear_default(user_id)
            address.is_default = True

        return self.repo.get_address(address_id)

    def delete_address(self, user_id: int, address_id: int) -> None:
        with unit_of_work(self.db):
            address = self._owned(user_id, address_id)
            if self.orders.count_orders_using_address(address_id):
                raise Conflict("Cannot delete address that is used in orders")
            self.repo.delete_address(address)

        logger.info(f"Address {address_id} deleted")

    def _owned(self, user_id: int, address_id: int) -> AddressModel:
        address = self.repo.get_address(address_id)
        if not address or address.user_id != user_id:
            raise NotFound("Address not found")
        return address

    def update_address(self, user_id: int, address_id: int, payload) -> AddressModel:
        with unit_of_work(self.db):
            address = self._owned(user_id, address_id)

            if payload.is_default and not address.is_default:
                self.repo.clear_default(user_id)

            for name, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
                setattr(address, name, value)

        logger.info(f"Address {address_id} updated")
        return self.repo.get_address(address_id)
