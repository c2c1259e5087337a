"""Pydantic models for the Mangopay resources handled by the client.

Field names follow the remote wire format (``PascalCase``) so that a decoded
payload maps onto a model without aliases, and unknown fields sent by the
API are preserved (``extra="allow"``) rather than dropped.

The models fall into three groups:

**Value objects** -- :class:`Money`, :class:`PostalAddress`.

**Entities** -- subclasses of :class:`EntityBase`: users, wallets,
transactions (pay-ins, pay-outs, refunds), bank accounts, cards, card
registrations, card pre-authorizations, deposits and recurring pay-in
registrations. Each entity declares the fields the server assigns in
``read_only_fields``; :meth:`~mangoclient.api.Api.build_request_data`
leaves them out of write payloads.

**Variant details** -- objects nested inside a pay-in (payment and
execution details), a pay-out (mean of payment details) or a bank account
(account details). The API represents those variants as a flat JSON object
discriminated by a type field; the client models them as a base entity
holding a nested variant, and the dispatcher flattens the variant when
serializing.
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, SerializeAsAny


@runtime_checkable
class Serializable(Protocol):
    """Anything that can produce its own write payload."""

    def to_request_data(self) -> dict[str, Any]:
        ...


class ModelBase(BaseModel):
    """Common configuration for every model: keep unknown fields, skip ``None`` on output."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_request_data(self) -> dict[str, Any]:
        """Return the model's own serialized form (``None`` values omitted)."""
        return self.model_dump(mode="json", exclude_none=True)


# --- Value objects ---


class Money(ModelBase):
    """An amount in the currency's minor unit (cents for EUR)."""

    Currency: Optional[str] = None
    Amount: Optional[int] = None


class PostalAddress(ModelBase):
    AddressLine1: Optional[str] = None
    AddressLine2: Optional[str] = None
    City: Optional[str] = None
    Region: Optional[str] = None
    PostalCode: Optional[str] = None
    Country: Optional[str] = None


# --- Entities ---


class EntityBase(ModelBase):
    """Base class for every resource that has a server-assigned ``Id``."""

    read_only_fields: ClassVar[tuple[str, ...]] = ("Id", "CreationDate")

    Id: Optional[str] = None
    Tag: Optional[str] = None
    CreationDate: Optional[int] = None

    @classmethod
    def read_only_properties(cls) -> list[str]:
        """Return the read-only field names declared along the class hierarchy."""
        names: list[str] = []
        for klass in reversed(cls.__mro__):
            for name in vars(klass).get("read_only_fields", ()):
                if name not in names:
                    names.append(name)
        return names


class User(EntityBase):
    """Fields shared by natural and legal users.

    ``PersonType`` selects the creation endpoint and is fixed by the
    subclass, so it never travels in the request body.
    """

    read_only_fields: ClassVar[tuple[str, ...]] = ("PersonType", "KYCLevel")

    PersonType: Optional[str] = None
    Email: Optional[str] = None
    KYCLevel: Optional[str] = None
    TermsAndConditionsAccepted: Optional[bool] = None
    UserCategory: Optional[str] = None


class UserNatural(User):
    PersonType: Optional[str] = "NATURAL"
    FirstName: Optional[str] = None
    LastName: Optional[str] = None
    Address: Optional[PostalAddress] = None
    Birthday: Optional[int] = None
    Nationality: Optional[str] = None
    CountryOfResidence: Optional[str] = None
    Occupation: Optional[str] = None
    IncomeRange: Optional[str] = None


class UserLegal(User):
    PersonType: Optional[str] = "LEGAL"
    Name: Optional[str] = None
    LegalPersonType: Optional[str] = None
    HeadquartersAddress: Optional[PostalAddress] = None
    LegalRepresentativeFirstName: Optional[str] = None
    LegalRepresentativeLastName: Optional[str] = None
    LegalRepresentativeEmail: Optional[str] = None
    LegalRepresentativeBirthday: Optional[int] = None
    LegalRepresentativeNationality: Optional[str] = None
    LegalRepresentativeCountryOfResidence: Optional[str] = None
    CompanyNumber: Optional[str] = None


class Wallet(EntityBase):
    read_only_fields: ClassVar[tuple[str, ...]] = ("Balance", "FundsType")

    Owners: Optional[list[str]] = None
    Description: Optional[str] = None
    Currency: Optional[str] = None
    Balance: Optional[Money] = None
    FundsType: Optional[str] = None


class Transaction(EntityBase):
    """Money movement between wallets; base of pay-ins, pay-outs and refunds."""

    read_only_fields: ClassVar[tuple[str, ...]] = (
        "CreditedFunds",
        "Status",
        "ResultCode",
        "ResultMessage",
        "ExecutionDate",
        "Type",
        "Nature",
    )

    AuthorId: Optional[str] = None
    CreditedUserId: Optional[str] = None
    DebitedFunds: Optional[Money] = None
    CreditedFunds: Optional[Money] = None
    Fees: Optional[Money] = None
    Status: Optional[str] = None
    ResultCode: Optional[str] = None
    ResultMessage: Optional[str] = None
    ExecutionDate: Optional[int] = None
    Type: Optional[str] = None
    Nature: Optional[str] = None
    DebitedWalletId: Optional[str] = None
    CreditedWalletId: Optional[str] = None


# --- Pay-in variants ---


class PayInPaymentDetails(ModelBase):
    """Base of the pay-in payment variants; ``payment_type`` is the wire discriminator."""

    payment_type: ClassVar[str] = ""


class PayInPaymentDetailsCard(PayInPaymentDetails):
    payment_type: ClassVar[str] = "CARD"

    CardType: Optional[str] = None
    CardId: Optional[str] = None
    StatementDescriptor: Optional[str] = None


class PayInPaymentDetailsBankWire(PayInPaymentDetails):
    payment_type: ClassVar[str] = "BANK_WIRE"

    DeclaredDebitedFunds: Optional[Money] = None
    DeclaredFees: Optional[Money] = None
    WireReference: Optional[str] = None


class PayInPaymentDetailsDirectDebit(PayInPaymentDetails):
    payment_type: ClassVar[str] = "DIRECT_DEBIT"

    DirectDebitType: Optional[str] = None
    MandateId: Optional[str] = None
    StatementDescriptor: Optional[str] = None


class PayInPaymentDetailsPreAuthorized(PayInPaymentDetails):
    payment_type: ClassVar[str] = "PREAUTHORIZED"

    PreauthorizationId: Optional[str] = None


class PayInPaymentDetailsPayPal(PayInPaymentDetails):
    payment_type: ClassVar[str] = "PAYPAL"

    ShippingAddress: Optional[dict[str, Any]] = None
    PaypalBuyerAccountEmail: Optional[str] = None
    StatementDescriptor: Optional[str] = None


class PayInPaymentDetailsPayconiq(PayInPaymentDetails):
    payment_type: ClassVar[str] = "PAYCONIQ"

    Country: Optional[str] = None


class PayInPaymentDetailsMbway(PayInPaymentDetails):
    payment_type: ClassVar[str] = "MBWAY"

    PhoneNumber: Optional[str] = None
    StatementDescriptor: Optional[str] = None


class PayInExecutionDetails(ModelBase):
    execution_type: ClassVar[str] = ""


class PayInExecutionDetailsWeb(PayInExecutionDetails):
    execution_type: ClassVar[str] = "WEB"

    ReturnURL: Optional[str] = None
    TemplateURL: Optional[str] = None
    Culture: Optional[str] = None
    SecureMode: Optional[str] = None


class PayInExecutionDetailsDirect(PayInExecutionDetails):
    execution_type: ClassVar[str] = "DIRECT"

    SecureModeReturnURL: Optional[str] = None
    SecureMode: Optional[str] = None
    IpAddress: Optional[str] = None
    BrowserInfo: Optional[dict[str, Any]] = None
    Billing: Optional[dict[str, Any]] = None
    Shipping: Optional[dict[str, Any]] = None


class PayIn(Transaction):
    """A pay-in. Either flat (as returned by the API) or with nested details.

    When ``PaymentDetails``/``ExecutionDetails`` are set, their fields are
    inlined into the request body and the pay-in endpoint is chosen from
    their ``payment_type``/``execution_type``.
    """

    read_only_fields: ClassVar[tuple[str, ...]] = ("RedirectURL", "SecureModeRedirectURL")

    PaymentType: Optional[str] = None
    ExecutionType: Optional[str] = None
    PaymentDetails: Optional[SerializeAsAny[PayInPaymentDetails]] = None
    ExecutionDetails: Optional[SerializeAsAny[PayInExecutionDetails]] = None
    RedirectURL: Optional[str] = None
    SecureModeRedirectURL: Optional[str] = None


# --- Pay-out ---


class PayOutPaymentDetails(ModelBase):
    payment_type: ClassVar[str] = ""


class PayOutPaymentDetailsBankWire(PayOutPaymentDetails):
    payment_type: ClassVar[str] = "BANK_WIRE"

    BankAccountId: Optional[str] = None
    BankWireRef: Optional[str] = None
    PayoutModeRequested: Optional[str] = None


class PayOut(Transaction):
    PaymentType: Optional[str] = None
    MeanOfPaymentDetails: Optional[SerializeAsAny[PayOutPaymentDetails]] = None


class Refund(Transaction):
    read_only_fields: ClassVar[tuple[str, ...]] = (
        "InitialTransactionId",
        "InitialTransactionType",
        "RefundReason",
    )

    InitialTransactionId: Optional[str] = None
    InitialTransactionType: Optional[str] = None
    RefundReason: Optional[dict[str, Any]] = None


# --- Bank accounts ---


class BankAccountDetails(ModelBase):
    """Base of the bank account variants; ``account_type`` is the path segment and ``Type``."""

    account_type: ClassVar[str] = ""


class BankAccountDetailsIBAN(BankAccountDetails):
    account_type: ClassVar[str] = "IBAN"

    IBAN: Optional[str] = None
    BIC: Optional[str] = None


class BankAccountDetailsGB(BankAccountDetails):
    account_type: ClassVar[str] = "GB"

    AccountNumber: Optional[str] = None
    SortCode: Optional[str] = None


class BankAccountDetailsUS(BankAccountDetails):
    account_type: ClassVar[str] = "US"

    AccountNumber: Optional[str] = None
    ABA: Optional[str] = None
    DepositAccountType: Optional[str] = None


class BankAccountDetailsCA(BankAccountDetails):
    account_type: ClassVar[str] = "CA"

    BankName: Optional[str] = None
    InstitutionNumber: Optional[str] = None
    BranchCode: Optional[str] = None
    AccountNumber: Optional[str] = None


class BankAccountDetailsOTHER(BankAccountDetails):
    account_type: ClassVar[str] = "OTHER"

    Country: Optional[str] = None
    BIC: Optional[str] = None
    AccountNumber: Optional[str] = None


class BankAccount(EntityBase):
    read_only_fields: ClassVar[tuple[str, ...]] = ("UserId", "Type", "Active")

    UserId: Optional[str] = None
    Type: Optional[str] = None
    OwnerName: Optional[str] = None
    OwnerAddress: Optional[PostalAddress] = None
    Active: Optional[bool] = None
    Details: Optional[SerializeAsAny[BankAccountDetails]] = None


# --- Cards ---


class Card(EntityBase):
    read_only_fields: ClassVar[tuple[str, ...]] = (
        "ExpirationDate",
        "Alias",
        "CardProvider",
        "CardType",
        "Country",
        "Product",
        "BankCode",
        "Currency",
        "Validity",
        "UserId",
        "Fingerprint",
    )

    ExpirationDate: Optional[str] = None
    Alias: Optional[str] = None
    CardProvider: Optional[str] = None
    CardType: Optional[str] = None
    Country: Optional[str] = None
    Product: Optional[str] = None
    BankCode: Optional[str] = None
    Active: Optional[bool] = None
    Currency: Optional[str] = None
    Validity: Optional[str] = None
    UserId: Optional[str] = None
    Fingerprint: Optional[str] = None


class CardRegistration(EntityBase):
    read_only_fields: ClassVar[tuple[str, ...]] = (
        "AccessKey",
        "PreregistrationData",
        "CardRegistrationURL",
        "CardId",
        "ResultCode",
        "ResultMessage",
        "Status",
    )

    UserId: Optional[str] = None
    Currency: Optional[str] = None
    CardType: Optional[str] = None
    AccessKey: Optional[str] = None
    PreregistrationData: Optional[str] = None
    CardRegistrationURL: Optional[str] = None
    RegistrationData: Optional[str] = None
    CardId: Optional[str] = None
    ResultCode: Optional[str] = None
    ResultMessage: Optional[str] = None
    Status: Optional[str] = None


class CardPreAuthorization(EntityBase):
    read_only_fields: ClassVar[tuple[str, ...]] = (
        "Status",
        "ResultCode",
        "ResultMessage",
        "SecureModeNeeded",
        "SecureModeRedirectURL",
        "ExpirationDate",
        "PayInId",
    )

    AuthorId: Optional[str] = None
    DebitedFunds: Optional[Money] = None
    Status: Optional[str] = None
    PaymentStatus: Optional[str] = None
    ResultCode: Optional[str] = None
    ResultMessage: Optional[str] = None
    ExecutionType: Optional[str] = None
    SecureMode: Optional[str] = None
    CardId: Optional[str] = None
    SecureModeNeeded: Optional[bool] = None
    SecureModeRedirectURL: Optional[str] = None
    SecureModeReturnURL: Optional[str] = None
    ExpirationDate: Optional[int] = None
    PayInId: Optional[str] = None
    IpAddress: Optional[str] = None
    BrowserInfo: Optional[dict[str, Any]] = None
    Billing: Optional[dict[str, Any]] = None


class Deposit(EntityBase):
    """A card deposit pre-authorization (``/deposit-preauthorizations``)."""

    read_only_fields: ClassVar[tuple[str, ...]] = (
        "Status",
        "ResultCode",
        "ResultMessage",
        "SecureModeRedirectURL",
        "SecureModeNeeded",
        "ExpirationDate",
        "PayinsLinked",
        "CardInfo",
    )

    AuthorId: Optional[str] = None
    DebitedFunds: Optional[Money] = None
    Status: Optional[str] = None
    PaymentStatus: Optional[str] = None
    PayinsLinked: Optional[dict[str, Any]] = None
    ResultCode: Optional[str] = None
    ResultMessage: Optional[str] = None
    CardId: Optional[str] = None
    SecureModeReturnURL: Optional[str] = None
    SecureModeRedirectURL: Optional[str] = None
    SecureModeNeeded: Optional[bool] = None
    ExpirationDate: Optional[int] = None
    PaymentType: Optional[str] = None
    ExecutionType: Optional[str] = None
    StatementDescriptor: Optional[str] = None
    Culture: Optional[str] = None
    IpAddress: Optional[str] = None
    BrowserInfo: Optional[dict[str, Any]] = None
    Billing: Optional[dict[str, Any]] = None
    Shipping: Optional[dict[str, Any]] = None
    CardInfo: Optional[dict[str, Any]] = None


class RecurringPayInRegistration(EntityBase):
    read_only_fields: ClassVar[tuple[str, ...]] = (
        "Status",
        "ResultCode",
        "ResultMessage",
        "CurrentState",
        "RecurringType",
        "TotalAmount",
        "CycleNumber",
    )

    AuthorId: Optional[str] = None
    CardId: Optional[str] = None
    CreditedUserId: Optional[str] = None
    CreditedWalletId: Optional[str] = None
    FirstTransactionDebitedFunds: Optional[Money] = None
    FirstTransactionFees: Optional[Money] = None
    NextTransactionDebitedFunds: Optional[Money] = None
    NextTransactionFees: Optional[Money] = None
    Billing: Optional[dict[str, Any]] = None
    Shipping: Optional[dict[str, Any]] = None
    EndDate: Optional[int] = None
    Frequency: Optional[str] = None
    FixedNextAmount: Optional[bool] = None
    FractionedPayment: Optional[bool] = None
    FreeCycles: Optional[int] = None
    MigrationMode: Optional[bool] = None
    Status: Optional[str] = None
    ResultCode: Optional[str] = None
    ResultMessage: Optional[str] = None
    CurrentState: Optional[dict[str, Any]] = None
    RecurringType: Optional[str] = None
    TotalAmount: Optional[Money] = None
    CycleNumber: Optional[int] = None
