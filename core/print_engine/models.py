"""
Input records for the print engine.

The records are assembled by the data layer and handed over fully
populated. Field names accept both camelCase (as produced by the API
layer) and snake_case. All records are frozen for the duration of a render.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DocumentKind(str, Enum):
    """Document types produced by the engine"""
    JOB_SHEET = "job_sheet"
    INVOICE = "invoice"
    ESTIMATE = "estimate"

    @property
    def file_prefix(self) -> str:
        return {
            DocumentKind.JOB_SHEET: "jobsheet",
            DocumentKind.INVOICE: "invoice",
            DocumentKind.ESTIMATE: "estimate",
        }[self]

    @property
    def category(self) -> str:
        """Storage sub-directory and URL segment"""
        return f"{self.file_prefix}s"


class PaperFormat(str, Enum):
    """Physical paper formats"""
    A4 = "a4"
    A5 = "a5"
    THERMAL = "thermal"      # 3 inch roll
    THERMAL_2 = "thermal-2"  # 2 inch roll

    @classmethod
    def from_key(cls, key: Optional[str]) -> "PaperFormat":
        """Parse a format key. Unknown keys fall back to A4."""
        if isinstance(key, cls):
            return key
        normalized = (key or "").strip().lower()
        if normalized == "thermal-3":
            return cls.THERMAL
        try:
            return cls(normalized)
        except ValueError:
            return cls.A4

    @property
    def is_thermal(self) -> bool:
        return self in (PaperFormat.THERMAL, PaperFormat.THERMAL_2)


class JobSheetCopy(str, Enum):
    CUSTOMER = "customer"
    OFFICE = "office"
    BOTH = "both"


class InvoiceCopy(str, Enum):
    ORIGINAL = "original"
    DUPLICATE = "duplicate"
    CUSTOMER = "customer"


class EstimateCopy(str, Enum):
    CUSTOMER = "customer"
    OFFICE = "office"


COPY_TYPES = {
    DocumentKind.JOB_SHEET: JobSheetCopy,
    DocumentKind.INVOICE: InvoiceCopy,
    DocumentKind.ESTIMATE: EstimateCopy,
}


class Record(BaseModel):
    """Base for all input records"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# ============ Shared parties ============

class Company(Record):
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    logo: Optional[str] = None
    gst: Optional[str] = None


class Branch(Record):
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class Customer(Record):
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    whatsapp_number: Optional[str] = None
    gstin: Optional[str] = None


class Person(Record):
    name: str


# ============ Job sheet ============

class JobSheetService(Record):
    ticket_number: str
    created_at: datetime
    device_model: str
    device_imei: Optional[str] = Field(default=None, alias="deviceIMEI")
    device_password: Optional[str] = None
    device_pattern: Optional[str] = None
    device_condition: Optional[str] = None
    intake_notes: Optional[str] = None
    issue: Optional[str] = None
    diagnosis: Optional[str] = None
    estimated_cost: float = 0.0
    labour_charge: float = 0.0
    extra_spare_amount: float = 0.0
    actual_cost: Optional[float] = None
    discount: float = 0.0
    advance_payment: float = 0.0
    is_warranty_repair: bool = False
    warranty_reason: Optional[str] = None
    is_repeated_service: bool = False
    previous_service_ticket: Optional[str] = None
    data_warranty_accepted: bool = False
    status: Optional[str] = None


class CustomerDevice(Record):
    brand_name: Optional[str] = None
    model_name: Optional[str] = None
    color: Optional[str] = None
    imei: Optional[str] = None


class NamedTag(Record):
    """Accessory, damage condition or fault"""
    name: str


class TaggedPart(Record):
    part_name: str
    part_number: Optional[str] = None
    quantity: float = 1
    unit_price: float = 0.0
    total_price: float = 0.0
    fault_tag: Optional[str] = None


class ExtraSparePart(TaggedPart):
    is_approved: bool = False
    approval_method: Optional[str] = None
    approval_note: Optional[str] = None


class JobSheetTemplate(Record):
    terms_and_conditions: Optional[str] = None
    footer_text: Optional[str] = None
    show_company_logo: bool = True
    show_contact_details: bool = True
    show_customer_signature: bool = True
    show_authorized_signature: bool = True


class JobSheetRecord(Record):
    job_sheet_number: str
    service: JobSheetService
    customer: Customer
    customer_device: Optional[CustomerDevice] = None
    accessories: List[NamedTag] = Field(default_factory=list)
    damage_conditions: List[NamedTag] = Field(default_factory=list)
    faults: List[NamedTag] = Field(default_factory=list)
    tagged_parts: List[TaggedPart] = Field(default_factory=list)
    extra_spare_parts: List[ExtraSparePart] = Field(default_factory=list)
    branch: Branch
    company: Company
    technician: Optional[Person] = None
    created_by: Optional[Person] = None
    template: JobSheetTemplate = Field(default_factory=JobSheetTemplate)

    @property
    def number(self) -> str:
        return self.job_sheet_number

    @property
    def is_repeat(self) -> bool:
        return self.service.is_repeated_service


# ============ Invoice ============

class InvoiceService(Record):
    ticket_number: str
    created_at: datetime
    device_model: str
    issue: Optional[str] = None
    diagnosis: Optional[str] = None
    actual_cost: Optional[float] = None
    estimated_cost: float = 0.0
    labour_charge: float = 0.0
    advance_payment: float = 0.0
    completed_at: Optional[datetime] = None
    is_repeated_service: bool = False


class InvoicePart(Record):
    part_name: str
    quantity: float = 1
    unit_price: float = 0.0
    total_price: float = 0.0


class Payment(Record):
    amount: float
    payment_method: str
    transaction_id: Optional[str] = None
    created_at: datetime


class InvoiceRecord(Record):
    invoice_number: str
    invoice_date: datetime
    service: InvoiceService
    customer: Customer
    branch: Branch
    company: Company
    parts: List[InvoicePart] = Field(default_factory=list)
    payments: List[Payment] = Field(default_factory=list)
    total_amount: float = 0.0
    paid_amount: float = 0.0
    balance_amount: float = 0.0
    discount: float = 0.0
    cgst_rate: Optional[float] = None
    sgst_rate: Optional[float] = None
    payment_status: str = "PENDING"

    @property
    def number(self) -> str:
        return self.invoice_number

    @property
    def is_repeat(self) -> bool:
        return self.service.is_repeated_service


# ============ Estimate ============

class EstimateService(Record):
    ticket_number: str
    device_model: str
    issue: Optional[str] = None


class EstimateItem(Record):
    description: str
    quantity: float = 1
    unit_price: float = 0.0
    amount: float = 0.0


class EstimateRecord(Record):
    estimate_number: str
    estimate_date: datetime
    valid_until: Optional[datetime] = None
    customer: Customer
    service: Optional[EstimateService] = None
    items: List[EstimateItem] = Field(default_factory=list)
    subtotal: float = 0.0
    tax_amount: float = 0.0
    total_amount: float = 0.0
    notes: Optional[str] = None
    branch: Branch
    company: Company

    @property
    def number(self) -> str:
        return self.estimate_number

    @property
    def is_repeat(self) -> bool:
        return False
