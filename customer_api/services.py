"""Service layer that applies the API's validation and conflict rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from .domain import Customer, Invoice, PhoneNumber, PhoneType
from .errors import Conflict, InternalFailure, NotFound, ValidationFailure
from .repository import AppDatabase, InvalidRecordError
from .validation import (
    collect_errors,
    invoice_number_errors,
    phone_type_errors,
    positive_id_errors,
)

logger = logging.getLogger(__name__)

LIST_CUSTOMERS_HINT = (
    "Verify the customer ID is correct or use GET /api/customers to list all customers"
)


@dataclass(slots=True)
class InvoiceDraft:
    """Invoice data supplied by a caller before an id is assigned."""

    invoice_number: str
    invoice_date: datetime
    amount: Decimal = Decimal("0")


@dataclass(slots=True)
class PhoneNumberDraft:
    """Phone number data supplied by a caller before an id is assigned."""

    type: str
    number: str = ""


class CustomerService:
    """Facade that exposes the customer, invoice and phone number use-cases.

    Checks run in a fixed order: field rules, then existence of referenced
    records, then uniqueness, and only then the repository mutation. Every
    refusal is raised as an :class:`~customer_api.errors.ApiProblem`.
    """

    def __init__(self, database: Optional[AppDatabase] = None) -> None:
        self.database = database or AppDatabase()

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------
    def list_customers(self) -> List[Customer]:
        customers = self.database.list_customers()
        logger.debug("Returned %d customers", len(customers))
        return customers

    def get_customer(self, customer_id: int) -> Customer:
        customer = self.database.find_customer(customer_id)
        if customer is None:
            raise NotFound(
                "Customer Not Found",
                f"Customer with ID {customer_id} does not exist in the system.",
                customerId=customer_id,
                suggestion=LIST_CUSTOMERS_HINT,
            )
        return customer

    def list_customer_invoices(self, customer_id: int) -> List[Invoice]:
        self._require_customer(
            customer_id,
            "Cannot retrieve invoices for non-existent customer.",
            suggestion=LIST_CUSTOMERS_HINT,
        )
        return self.database.list_invoices_by_customer(customer_id)

    def create_customer(
        self,
        name: Optional[str],
        email: Optional[str],
        *,
        invoices: Sequence[InvoiceDraft] = (),
        phone_numbers: Sequence[PhoneNumberDraft] = (),
    ) -> Customer:
        errors: Dict[str, List[str]] = {}
        for index, draft in enumerate(invoices):
            messages = invoice_number_errors(draft.invoice_number)
            if messages:
                errors[f"invoices[{index}].invoiceNumber"] = messages
        for index, phone in enumerate(phone_numbers):
            messages = phone_type_errors(phone.type)
            if messages:
                errors[f"phoneNumbers[{index}].type"] = messages
        if errors:
            raise self._validation_failed(errors)

        conflicts = self.database.duplicate_customer_fields(name, email)
        if conflicts:
            raise self._duplicate_customer(
                conflicts,
                name,
                email,
                detail_prefix=(
                    "A customer with the provided {fields} already exists in the system."
                ),
                id_key="existingCustomerId",
                suggestion=(
                    "Use PUT /api/customers/{id} to update the existing customer "
                    "or provide a different name/email"
                ),
            )

        seen: Dict[str, int] = {}
        for index, draft in enumerate(invoices):
            if draft.invoice_number in seen:
                raise Conflict(
                    "Invoice Number Already Exists",
                    f"Invoice number '{draft.invoice_number}' appears more than once "
                    "in the request. Invoice numbers must be unique across all customers.",
                    invoiceNumber=draft.invoice_number,
                )
            seen[draft.invoice_number] = index
            self._ensure_invoice_number_free(draft.invoice_number)

        candidate = Customer(
            id=0,
            name=name,
            email=email,
            invoices=[
                Invoice(
                    id=0,
                    invoice_number=draft.invoice_number,
                    customer_id=0,
                    invoice_date=draft.invoice_date,
                    amount=draft.amount,
                )
                for draft in invoices
            ],
            phone_numbers=[
                PhoneNumber(id=0, customer_id=0, type=PhoneType(phone.type), number=phone.number)
                for phone in phone_numbers
            ],
        )
        try:
            created = self.database.insert_customer(candidate)
        except InvalidRecordError as exc:
            raise ValidationFailure(
                "Failed to Create Customer",
                "Failed to create customer due to internal validation. "
                "Ensure all required fields are provided and valid.",
            ) from exc
        logger.info(
            "Created customer %d (name=%r, email=%r) with %d invoices and %d phone numbers",
            created.id,
            created.name,
            created.email,
            len(created.invoices),
            len(created.phone_numbers),
        )
        return created

    def update_customer(
        self, customer_id: int, name: Optional[str], email: Optional[str]
    ) -> Customer:
        if customer_id <= 0:
            raise ValidationFailure(
                "Invalid Customer ID",
                f"Customer ID must be greater than 0. Provided value: {customer_id}",
                errors={"id": positive_id_errors(customer_id)},
                customerId=customer_id,
            )
        if self.database.find_customer(customer_id) is None:
            raise NotFound(
                "Customer Not Found",
                f"Customer with ID {customer_id} does not exist. "
                "Cannot update non-existent customer.",
                customerId=customer_id,
                suggestion="Use POST to create a new customer or verify the customer ID is correct",
            )

        conflicts = self.database.duplicate_customer_fields(name, email, exclude_id=customer_id)
        if conflicts:
            raise self._duplicate_customer(
                conflicts,
                name,
                email,
                detail_prefix=(
                    f"Cannot update customer {customer_id}. A different customer "
                    "with the provided {fields} already exists."
                ),
                id_key="conflictingCustomerId",
                suggestion=(
                    "Provide a different name/email that doesn't conflict with existing customers"
                ),
                customerId=customer_id,
            )

        if not self.database.update_customer(
            customer_id, Customer(id=customer_id, name=name, email=email)
        ):
            raise InternalFailure(
                "Failed to Update Customer",
                f"An error occurred while attempting to update customer {customer_id}.",
                customerId=customer_id,
            )
        updated = self.get_customer(customer_id)
        logger.info(
            "Updated customer %d (name=%r, email=%r)", customer_id, updated.name, updated.email
        )
        return updated

    def delete_customer(self, customer_id: int) -> None:
        customer = self.database.find_customer(customer_id)
        if customer is None:
            raise NotFound(
                "Customer Not Found",
                f"Customer with ID {customer_id} does not exist or has already been deleted.",
                customerId=customer_id,
            )
        if not self.database.delete_customer(customer_id):
            raise InternalFailure(
                "Failed to Delete Customer",
                f"An error occurred while attempting to delete customer {customer_id}. "
                "The customer exists but could not be removed.",
                customerId=customer_id,
                customerName=customer.name,
            )
        logger.info(
            "Deleted customer %d along with %d invoices and %d phone numbers",
            customer_id,
            len(customer.invoices),
            len(customer.phone_numbers),
        )

    # ------------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------------
    def list_invoices(self) -> List[Invoice]:
        return self.database.list_invoices()

    def get_invoice(self, customer_id: int, invoice_number: str) -> Invoice:
        invoice = self.database.find_invoice(invoice_number)
        if invoice is None or invoice.customer_id != customer_id:
            raise NotFound(
                "Invoice Not Found",
                f"Invoice with number '{invoice_number}' for customer {customer_id} "
                "does not exist.",
                customerId=customer_id,
                invoiceNumber=invoice_number,
                suggestion="Verify the invoice number and customer ID are correct",
            )
        return invoice

    def list_invoices_for_customer(self, customer_id: int) -> List[Invoice]:
        self._require_customer(
            customer_id,
            "Cannot retrieve invoices for non-existent customer.",
            suggestion="Verify the customer ID is correct or create the customer first",
        )
        return self.database.list_invoices_by_customer(customer_id)

    def create_invoice(
        self,
        customer_id: int,
        invoice_number: str,
        invoice_date: datetime,
        amount: Decimal,
    ) -> Invoice:
        errors = collect_errors(
            invoiceNumber=invoice_number_errors(invoice_number),
            customerId=positive_id_errors(customer_id),
        )
        if errors:
            raise self._validation_failed(
                errors, invoiceNumber=invoice_number, customerId=customer_id
            )

        if self.database.find_customer(customer_id) is None:
            raise NotFound(
                "Customer Not Found",
                f"Customer with ID {customer_id} does not exist. "
                "Please provide a valid customer ID.",
                errors={"customerId": [f"Customer with ID {customer_id} not found"]},
                customerId=customer_id,
            )

        self._ensure_invoice_number_free(invoice_number)

        try:
            created = self.database.insert_invoice(
                Invoice(
                    id=0,
                    invoice_number=invoice_number,
                    customer_id=customer_id,
                    invoice_date=invoice_date,
                    amount=amount,
                )
            )
        except InvalidRecordError as exc:
            raise ValidationFailure(
                "Failed to Create Invoice",
                "Failed to create invoice due to internal validation. "
                "Ensure all required fields are provided and valid.",
                invoiceNumber=invoice_number,
                customerId=customer_id,
            ) from exc
        logger.info(
            "Created invoice %d (%s) for customer %d with amount %s",
            created.id,
            created.invoice_number,
            created.customer_id,
            created.amount,
        )
        return created

    def delete_invoice(self, invoice_number: str) -> None:
        if not (invoice_number or "").strip():
            raise ValidationFailure(
                "Invalid Invoice Number",
                "Invoice number is required and cannot be null, empty, or whitespace.",
                errors={"invoiceNumber": ["Invoice number is required"]},
            )
        invoice = self.database.find_invoice(invoice_number)
        if invoice is None:
            raise NotFound(
                "Invoice Not Found",
                f"Invoice with number '{invoice_number}' does not exist "
                "or has already been deleted.",
                invoiceNumber=invoice_number,
            )
        if not self.database.delete_invoice(invoice_number):
            raise InternalFailure(
                "Failed to Delete Invoice",
                f"An error occurred while attempting to delete invoice '{invoice_number}'. "
                "The invoice exists but could not be removed.",
                invoiceNumber=invoice_number,
                invoiceId=invoice.id,
            )
        logger.info("Deleted invoice %s (id %d)", invoice_number, invoice.id)

    def delete_invoices_for_customer(self, customer_id: int) -> int:
        self._require_positive_customer_id(customer_id)
        self._require_customer(
            customer_id,
            "Cannot delete invoices for non-existent customer.",
            suggestion="Verify the customer ID is correct",
        )
        invoice_count = len(self.database.list_invoices_by_customer(customer_id))
        if not self.database.delete_invoices_by_customer(customer_id):
            raise InternalFailure(
                "Failed to Delete Invoices",
                f"An error occurred while attempting to delete invoices for customer {customer_id}.",
                customerId=customer_id,
                invoiceCount=invoice_count,
            )
        logger.info("Deleted %d invoices for customer %d", invoice_count, customer_id)
        return invoice_count

    # ------------------------------------------------------------------
    # Phone numbers
    # ------------------------------------------------------------------
    def list_phone_numbers(self) -> List[PhoneNumber]:
        return self.database.list_phone_numbers()

    def get_phone_number(self, phone_id: int) -> PhoneNumber:
        phone = self.database.find_phone_number(phone_id)
        if phone is None:
            raise NotFound(
                "Phone Number Not Found",
                f"Phone number with ID {phone_id} does not exist in the system.",
                phoneNumberId=phone_id,
                suggestion=(
                    "Verify the phone number ID is correct or use GET /api/phonenumbers "
                    "to list all phone numbers"
                ),
            )
        return phone

    def list_phone_numbers_for_customer(self, customer_id: int) -> List[PhoneNumber]:
        self._require_customer(
            customer_id,
            "Cannot retrieve phone numbers for non-existent customer.",
            suggestion="Verify the customer ID is correct or create the customer first",
        )
        return self.database.list_phone_numbers_by_customer(customer_id)

    def create_phone_number(self, customer_id: int, phone_type: str, number: str) -> PhoneNumber:
        errors = collect_errors(
            type=phone_type_errors(phone_type),
            customerId=positive_id_errors(customer_id),
        )
        if errors:
            raise self._validation_failed(errors, customerId=customer_id)

        if self.database.find_customer(customer_id) is None:
            raise NotFound(
                "Customer Not Found",
                f"Customer with ID {customer_id} does not exist. "
                "Phone numbers must be associated with an existing customer.",
                errors={"customerId": [f"Customer with ID {customer_id} not found"]},
                customerId=customer_id,
                suggestion="Create the customer first or use a valid customer ID",
            )

        try:
            created = self.database.insert_phone_number(
                PhoneNumber(id=0, customer_id=customer_id, type=PhoneType(phone_type), number=number)
            )
        except InvalidRecordError as exc:
            raise ValidationFailure(
                "Failed to Create Phone Number",
                "Failed to create phone number due to internal validation. "
                "Ensure all required fields are provided and valid.",
                customerId=customer_id,
            ) from exc
        logger.info(
            "Created phone number %d (%s: %s) for customer %d",
            created.id,
            created.type.value,
            created.number,
            created.customer_id,
        )
        return created

    def delete_phone_number(self, phone_id: int) -> None:
        if phone_id <= 0:
            raise ValidationFailure(
                "Invalid Phone Number ID",
                f"Phone number ID must be greater than 0. Provided value: {phone_id}",
                errors={"id": positive_id_errors(phone_id, "Phone number ID")},
                phoneNumberId=phone_id,
            )
        phone = self.database.find_phone_number(phone_id)
        if phone is None:
            raise NotFound(
                "Phone Number Not Found",
                f"Phone number with ID {phone_id} does not exist or has already been deleted.",
                phoneNumberId=phone_id,
            )
        if not self.database.delete_phone_number(phone_id):
            raise InternalFailure(
                "Failed to Delete Phone Number",
                f"An error occurred while attempting to delete phone number {phone_id}. "
                "The phone number exists but could not be removed.",
                phoneNumberId=phone_id,
                phoneNumber=phone.number,
                customerId=phone.customer_id,
            )
        logger.info("Deleted phone number %d for customer %d", phone_id, phone.customer_id)

    def delete_phone_numbers_for_customer(self, customer_id: int) -> int:
        self._require_positive_customer_id(customer_id)
        self._require_customer(
            customer_id,
            "Cannot delete phone numbers for non-existent customer.",
            suggestion="Verify the customer ID is correct",
        )
        phone_count = len(self.database.list_phone_numbers_by_customer(customer_id))
        if not self.database.delete_phone_numbers_by_customer(customer_id):
            raise InternalFailure(
                "Failed to Delete Phone Numbers",
                f"An error occurred while attempting to delete phone numbers for customer {customer_id}.",
                customerId=customer_id,
                phoneNumberCount=phone_count,
            )
        logger.info("Deleted %d phone numbers for customer %d", phone_count, customer_id)
        return phone_count

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _require_customer(self, customer_id: int, reason: str, *, suggestion: str) -> Customer:
        customer = self.database.find_customer(customer_id)
        if customer is None:
            raise NotFound(
                "Customer Not Found",
                f"Customer with ID {customer_id} does not exist. {reason}",
                customerId=customer_id,
                suggestion=suggestion,
            )
        return customer

    @staticmethod
    def _require_positive_customer_id(customer_id: int) -> None:
        if customer_id <= 0:
            raise ValidationFailure(
                "Invalid Customer ID",
                f"Customer ID must be greater than 0. Provided value: {customer_id}",
                errors={"customerId": positive_id_errors(customer_id)},
                customerId=customer_id,
            )

    def _ensure_invoice_number_free(self, invoice_number: str) -> None:
        existing = self.database.find_invoice(invoice_number)
        if existing is not None:
            raise Conflict(
                "Invoice Number Already Exists",
                f"Invoice with number '{invoice_number}' already exists. "
                "Invoice numbers must be unique across all customers.",
                invoiceNumber=invoice_number,
                existingInvoiceId=existing.id,
                existingCustomerId=existing.customer_id,
            )

    @staticmethod
    def _validation_failed(errors: Dict[str, List[str]], **extensions: object) -> ValidationFailure:
        return ValidationFailure(
            "Validation Failed",
            "One or more validation errors occurred. "
            "Please review the 'errors' property for details.",
            errors=errors,
            errorCount=len(errors),
            **extensions,
        )

    @staticmethod
    def _duplicate_customer(
        conflicts: Dict[str, int],
        name: Optional[str],
        email: Optional[str],
        *,
        detail_prefix: str,
        id_key: str,
        suggestion: str,
        **extensions: object,
    ) -> Conflict:
        fields = list(conflicts)
        provided = {"name": name, "email": email}
        details = " ".join(
            f"Customer with {field} '{provided[field]}' already exists (ID: {conflicts[field]})"
            for field in fields
        )
        return Conflict(
            "Duplicate Customer",
            f"{detail_prefix.format(fields=' and/or '.join(fields))} {details}",
            duplicateFields=fields,
            providedName=name or "",
            providedEmail=email or "",
            suggestion=suggestion,
            **{id_key: conflicts[fields[0]]},
            **extensions,
        )


__all__ = [
    "CustomerService",
    "InvoiceDraft",
    "PhoneNumberDraft",
]
