# backend/app/models.py
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Dict, Any, Literal
from enum import Enum


class DocumentType(str, Enum):
    """Document types produced by the classification/extraction service."""
    RENT_ROLL = "rent_roll"
    OPERATING_BUDGET = "operating_budget"
    BROKER_SALES_COMPARABLES = "broker_sales_comparables"
    BROKER_LEASE_COMPARABLES = "broker_lease_comparables"
    BROKER_LISTING = "broker_listing"
    OFFERING_MEMO = "offering_memo"
    LEASE_AGREEMENT = "lease_agreement"
    FINANCIAL_STATEMENTS = "financial_statements"
    # Legacy types for backward compatibility
    COMPARABLE_SALES = "comparable_sales"
    FINANCIAL_STATEMENT = "financial_statement"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, tag: Any) -> Optional["DocumentType"]:
        """Return the member for `tag`, or None when the tag is not recognized."""
        if isinstance(tag, cls):
            return tag
        if not isinstance(tag, str):
            return None
        return cls._value2member_map_.get(tag)


# ---------- Export request models ----------
class ExtractedRecord(BaseModel):
    """Tagged record handed over by the extraction service.

    `document_type` is kept as a plain string: tags outside DocumentType are
    valid input and are exported through the generic fallback sheet.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    document_type: str = Field(..., alias="documentType", min_length=1)
    # propertyName, propertyAddress, totalSquareFeet, totalUnits, extractedDate,
    # extractionTimestamp, pdfFileName, documentId ... (all optional)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    data: Dict[str, Any]

    @field_validator("metadata", mode="before")
    @classmethod
    def _metadata_default(cls, v):
        return {} if v is None else v

    @property
    def known_type(self) -> Optional[DocumentType]:
        return DocumentType.parse(self.document_type)


class ExportOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    format: Literal["xlsx"] = "xlsx"
    include_metadata: bool = Field(True, alias="includeMetadata")
    include_raw_data: bool = Field(False, alias="includeRawData")


class ExportRequest(BaseModel):
    """Body of POST /api/export."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    extracted_data: ExtractedRecord = Field(..., alias="extractedData")
    options: Optional[ExportOptions] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
