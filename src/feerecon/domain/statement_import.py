"""Statement import domain service.

Ties the pipeline together: decode the statement, resolve a column
mapping, normalize rows into transactions, then reconcile each
transaction against the invoice ledger inside its own atomic unit.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from feerecon.database.base import Database
from feerecon.domain.column_detection import DetectionResult, detect_columns
from feerecon.domain.entities import (
    BalanceSnapshot,
    BatchResult,
    ColumnMapping,
    MappingProfile,
    ProcessedTransaction,
    ResultCategory,
    SourceKind,
    Transaction,
)
from feerecon.domain.errors import DomainError, PersistenceFailure, ValidationError
from feerecon.domain.mapping_profile import MappingProfileService
from feerecon.domain.matching import InvoiceMatcher
from feerecon.domain.normalizer import ParseResult, parse_rows
from feerecon.domain.pdf_assembly import parse_lines
from feerecon.domain.reconciliation import apply_payment
from feerecon.domain.source_reader import CSVSource, PDFSource, open_source

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 5

# PDF statements have no header row; assembled lines expose these fields.
PDF_HEADERS = ["Date", "Description", "Amount", "Reference"]
PDF_MAPPING = ColumnMapping(date="Date", description="Description", amount="Amount", reference="Reference")


@dataclass
class AnalysisResult:
    """What a statement looks like before it is processed."""

    kind: SourceKind
    headers: list[str]
    sample_rows: list[dict[str, str]]
    detection: DetectionResult
    total_rows: int
    saved_profile: Optional[MappingProfile] = None
    profiles: list[MappingProfile] = field(default_factory=list)

    @property
    def confidence(self) -> int:
        return self.detection.confidence

    @property
    def needs_manual_mapping(self) -> bool:
        return self.detection.needs_manual_mapping

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "headers": self.headers,
            "sample_rows": self.sample_rows,
            "auto_detected_mapping": self.detection.roles,
            "confidence": self.confidence,
            "needs_manual_mapping": self.needs_manual_mapping,
            "total_rows": self.total_rows,
            "saved_profile": self.saved_profile.name if self.saved_profile else None,
            "profiles": [p.name for p in self.profiles],
        }


class StatementImportService:
    """Service for analyzing and reconciling bank statements."""

    def __init__(self, db: Database):
        """Initialize statement import service.

        Args:
            db: Database instance
        """
        self.db = db
        self.profile_service = MappingProfileService(db)
        self.matcher = InvoiceMatcher(db)

    def analyze(
        self, data: bytes, kind: SourceKind | str, sample_size: int = SAMPLE_SIZE
    ) -> AnalysisResult:
        """Inspect a statement and propose a column mapping.

        Args:
            data: Raw statement bytes
            kind: "csv" or "pdf"
            sample_size: Number of sample rows to return

        Returns:
            AnalysisResult with headers, sample rows and the detected mapping

        Raises:
            ValidationError: If the kind is unsupported
            MalformedInputError: If the statement cannot be read
        """
        source = open_source(data, kind)
        profiles = self.profile_service.list_profiles()

        if isinstance(source, PDFSource):
            parsed = parse_lines(source)
            samples = [_pdf_sample(txn) for txn in parsed.transactions[:sample_size]]
            detection = DetectionResult(
                roles={k: v for k, v in PDF_MAPPING.roles().items() if v},
                confidence=100,
                mapping=PDF_MAPPING,
            )
            return AnalysisResult(
                kind=SourceKind.PDF,
                headers=list(PDF_HEADERS),
                sample_rows=samples,
                detection=detection,
                total_rows=parsed.total_rows,
                profiles=profiles,
            )

        samples = []
        total_rows = 0
        for _, row in source:
            total_rows += 1
            if len(samples) < sample_size:
                samples.append(row)

        return AnalysisResult(
            kind=SourceKind.CSV,
            headers=source.headers,
            sample_rows=samples,
            detection=detect_columns(source.headers),
            total_rows=total_rows,
            saved_profile=self.profile_service.find_by_headers(source.headers),
            profiles=profiles,
        )

    def process_with_mapping(
        self,
        data: bytes,
        kind: SourceKind | str,
        mapping: Optional[ColumnMapping] = None,
        save_as: Optional[str] = None,
        bank_name: Optional[str] = None,
        uploaded_by: Optional[int] = None,
        profile: Optional[str] = None,
        filename: Optional[str] = None,
        make_default: bool = False,
    ) -> BatchResult:
        """Reconcile every payment in a statement.

        For CSV statements the mapping is, in order of preference: the
        explicit ``mapping``, the saved ``profile`` by name, a saved profile
        whose header signature matches, or auto-detection. When detection
        finds no usable mapping, the default profile is used if the file has
        all of its columns. PDF statements ignore mappings.

        Args:
            data: Raw statement bytes
            kind: "csv" or "pdf"
            mapping: Explicit column mapping
            save_as: Save the mapping used under this profile name
            bank_name: Bank name stored with a saved profile
            uploaded_by: ID of the user running the upload
            profile: Name of a saved profile to use
            filename: Original file name, for the upload log
            make_default: Mark the profile saved with ``save_as`` as the default

        Returns:
            BatchResult with one entry per extracted transaction

        Raises:
            ValidationError: If no usable mapping can be resolved
            NotFoundError: If the named profile does not exist
            MalformedInputError: If the statement cannot be read
        """
        source = open_source(data, kind)

        if isinstance(source, PDFSource):
            parsed = parse_lines(source)
        else:
            mapping, used_profile = self._resolve_mapping(source, mapping, profile)
            _check_columns(mapping, source.headers)
            parsed = parse_rows(source, mapping)
            if used_profile is not None:
                self.profile_service.record_use(used_profile)
            if save_as:
                self.profile_service.save(
                    save_as,
                    mapping,
                    bank_name=bank_name,
                    created_by=uploaded_by,
                    headers=source.headers,
                    is_default=True if make_default else None,
                )

        result = self.reconcile_all(parsed, uploaded_by=uploaded_by)
        self._log_upload(filename or f"statement.{source.kind.value}", result, uploaded_by)
        return result

    def reconcile_all(self, parsed: ParseResult, uploaded_by: Optional[int] = None) -> BatchResult:
        """Reconcile parsed transactions one at a time, in statement order."""
        result = BatchResult(skipped_rows=parsed.skipped, rejected_rows=list(parsed.rejected))
        for txn in parsed.transactions:
            result.add(self.reconcile_transaction(txn, uploaded_by=uploaded_by))
        logger.info("Processed statement: %s", result.summary())
        return result

    def reconcile_transaction(
        self, txn: Transaction, uploaded_by: Optional[int] = None
    ) -> ProcessedTransaction:
        """Classify and apply one transaction in its own atomic unit.

        Failures roll back the unit and are reported in the errors bucket
        so the rest of the batch still runs.
        """
        try:
            with self.db.atomic():
                return self._reconcile(txn, uploaded_by)
        except DomainError as e:
            log = logger.error if isinstance(e, PersistenceFailure) else logger.warning
            log("Failed to reconcile %s (%s): %s", txn.reference, txn.amount, e, exc_info=True)
            return ProcessedTransaction(transaction=txn, category=ResultCategory.ERROR, reason=str(e))

    def _reconcile(self, txn: Transaction, uploaded_by: Optional[int]) -> ProcessedTransaction:
        existing = self.db.find_existing_transaction(txn.reference, txn.amount, txn.date)
        if existing is not None:
            logger.info("Duplicate transaction %s %s on %s", txn.reference, txn.amount, txn.date)
            return ProcessedTransaction(
                transaction=txn,
                category=ResultCategory.DUPLICATE,
                invoice_id=existing.invoice_id,
                record_id=existing.id,
                reason=f"Already recorded as transaction {existing.id}",
            )

        match = self.matcher.match(txn.reference)
        if match is None:
            record_id = self.db.create_transaction_record(
                reference_number=txn.reference,
                amount=txn.amount,
                payment_date=txn.date,
                status=ResultCategory.UNMATCHED,
                description=txn.description,
                uploaded_by=uploaded_by,
            )
            logger.info("No open invoice for reference %s", txn.reference)
            return ProcessedTransaction(
                transaction=txn,
                category=ResultCategory.UNMATCHED,
                record_id=record_id,
                reason="No open invoice matches the reference",
            )

        invoice = match.invoice
        before = BalanceSnapshot.of(invoice)
        category, after = apply_payment(invoice, txn.amount)
        self.db.update_invoice_balance(
            invoice.id,
            status=after.status,
            amount_paid=after.amount_paid,
            outstanding_balance=after.outstanding_balance,
            overpaid_amount=after.overpaid_amount,
        )
        record_id = self.db.create_transaction_record(
            reference_number=txn.reference,
            amount=txn.amount,
            payment_date=txn.date,
            status=category,
            description=txn.description,
            invoice_id=invoice.id,
            match_strategy=match.strategy,
            needs_review=match.needs_review,
            uploaded_by=uploaded_by,
        )
        logger.info(
            "%s: %s paid %s to invoice %s via %s match",
            category.value,
            txn.reference,
            txn.amount,
            invoice.reference_number,
            match.strategy,
        )
        return ProcessedTransaction(
            transaction=txn,
            category=category,
            invoice_id=invoice.id,
            invoice_reference=invoice.reference_number,
            match_strategy=match.strategy,
            needs_review=match.needs_review,
            before=before,
            after=after,
            record_id=record_id,
        )

    def _resolve_mapping(
        self,
        source: CSVSource,
        mapping: Optional[ColumnMapping],
        profile: Optional[str],
    ) -> tuple[ColumnMapping, Optional[str]]:
        """Return the mapping to use and the profile name it came from."""
        if mapping is not None:
            return mapping, None
        if profile:
            return self.profile_service.get_profile(profile).mapping, profile

        saved = self.profile_service.find_by_headers(source.headers)
        if saved is not None:
            logger.info("Using saved mapping profile '%s' for these headers", saved.name)
            return saved.mapping, saved.name

        detection = detect_columns(source.headers)
        if detection.mapping is None:
            default = self.profile_service.find_default()
            if default is not None and _has_columns(default.mapping, source.headers):
                logger.info("Falling back to default mapping profile '%s'", default.name)
                return default.mapping, default.name
            raise ValidationError(
                "Could not detect a usable column mapping "
                f"(confidence {detection.confidence}%); provide one explicitly"
            )
        if detection.needs_manual_mapping:
            logger.warning(
                "Using auto-detected mapping with low confidence (%d%%)", detection.confidence
            )
        return detection.mapping, None

    def _log_upload(self, filename: str, result: BatchResult, uploaded_by: Optional[int]) -> None:
        try:
            with self.db.atomic():
                self.db.create_upload_log(filename, result.summary(), uploaded_by=uploaded_by)
        except PersistenceFailure:
            logger.exception("Could not write upload log for %s", filename)


def _missing_columns(mapping: ColumnMapping, headers: list[str]) -> list[str]:
    return [column for column in mapping.roles().values() if column and column not in headers]


def _has_columns(mapping: ColumnMapping, headers: list[str]) -> bool:
    return not _missing_columns(mapping, headers)


def _check_columns(mapping: ColumnMapping, headers: list[str]) -> None:
    missing = _missing_columns(mapping, headers)
    if missing:
        raise ValidationError(f"Statement is missing mapped column(s): {', '.join(missing)}")


def _pdf_sample(txn: Transaction) -> dict[str, str]:
    return {
        "Date": txn.date.isoformat(),
        "Description": txn.description,
        "Amount": str(txn.amount),
        "Reference": txn.reference,
    }
