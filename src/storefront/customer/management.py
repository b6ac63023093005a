"""Address book management for customers."""

from protean.exceptions import ValidationError

from storefront.customer.address import Address
from storefront.persistence import get_store
from storefront.persistence.unit_of_work import DataStore
from storefront.shared.result import DataResult, ErrorKind, Result

_EDITABLE_FIELDS = (
    "title",
    "address_line1",
    "address_line2",
    "city",
    "district",
    "postal_code",
    "country",
    "address_type",
)


class AddressManager:
    def __init__(self, store: DataStore | None = None) -> None:
        self._store = store or get_store()

    def add_address(self, user_id: str, **fields) -> DataResult[Address]:
        try:
            address = Address(user_id=user_id, **fields)
        except ValidationError as exc:
            return DataResult.fail_from(Result.from_validation_error(exc))

        with self._store.begin() as uow:
            uow.addresses.add(address)
            result = uow.commit()

        if result.failed:
            return DataResult.fail_from(result)
        return DataResult.ok(address, "Address added")

    def get_address(self, address_id) -> DataResult[Address]:
        with self._store.begin() as uow:
            address = uow.addresses.get_by_id(address_id)

        if address is None:
            return DataResult.fail(ErrorKind.NOT_FOUND, f"Address '{address_id}' not found")
        return DataResult.ok(address)

    def list_addresses(self, user_id: str) -> DataResult[list[Address]]:
        with self._store.begin() as uow:
            return DataResult.ok(uow.addresses.get_all(user_id=user_id))

    def update_address(self, address_id, **fields) -> DataResult[Address]:
        unknown = set(fields) - set(_EDITABLE_FIELDS)
        if unknown:
            return DataResult.fail(
                ErrorKind.VALIDATION_FAILURE,
                f"Cannot update address fields: {', '.join(sorted(unknown))}",
            )

        with self._store.begin() as uow:
            address = uow.addresses.get_by_id(address_id)
            if address is None:
                return DataResult.fail(ErrorKind.NOT_FOUND, f"Address '{address_id}' not found")

            try:
                for field_name, value in fields.items():
                    setattr(address, field_name, value)
            except ValidationError as exc:
                return DataResult.fail_from(Result.from_validation_error(exc))

            uow.addresses.update(address)
            result = uow.commit()

        if result.failed:
            return DataResult.fail_from(result)
        return DataResult.ok(address, "Address updated")

    def delete_address(self, address_id) -> Result:
        with self._store.begin() as uow:
            if not uow.addresses.soft_delete(address_id):
                return Result.fail(ErrorKind.NOT_FOUND, f"Address '{address_id}' not found")
            return uow.commit()

    def set_default(self, user_id: str, address_id) -> Result:
        """Make one of the user's addresses the default and clear the flag on the rest."""
        with self._store.begin() as uow:
            addresses = uow.addresses.get_all(user_id=user_id)
            if not any(str(address.id) == str(address_id) for address in addresses):
                return Result.fail(ErrorKind.NOT_FOUND, f"Address '{address_id}' not found for user '{user_id}'")

            for address in addresses:
                is_default = str(address.id) == str(address_id)
                if address.is_default != is_default:
                    address.is_default = is_default
                    uow.addresses.update(address)

            return uow.commit()
