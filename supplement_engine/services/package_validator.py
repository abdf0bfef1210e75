"""Completeness checks run before a supplement package is sent."""
from decimal import Decimal
from typing import List

from supplement_engine.knowledge import checklist_completion, items_for_code, next_incomplete_items
from supplement_engine.models.scope import LineItem
from supplement_engine.models.supplement import SupplementPackage, ValidationResult
from supplement_engine.utils.logging import get_logger
from supplement_engine.utils.money import ZERO, quantize_money

logger = get_logger(__name__)

CENT = Decimal("0.01")
HALF_CENT = Decimal("0.005")


def _label(item: LineItem) -> str:
    return f"Line {item.line_number} ({item.code or 'no code'}: {item.description})"


class PackageValidator:
    """Checks a package for required fields, consistency and citation coverage.

    Errors block sending. Warnings never do. Validation has no side effects,
    so validating the same package twice gives the same result.
    """

    def validate(self, package: SupplementPackage) -> ValidationResult:
        errors = self._validate_identity(package) + self._validate_line_items(package)
        warnings = (
            self._warn_identity(package)
            + self._warn_line_items(package)
            + self._warn_defense_notes(package)
            + self._warn_photos(package)
        )

        result = ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
        logger.info(
            "Package validated",
            claim_number=package.claim_ref.claim_number,
            is_valid=result.is_valid,
            errors=len(errors),
            warnings=len(warnings),
        )
        return result

    def _validate_identity(self, package: SupplementPackage) -> List[str]:
        errors = []
        if not (package.claim_ref.claim_number or "").strip():
            errors.append("Claim number is required")
        if not (package.insured.name or "").strip():
            errors.append("Insured name is required")
        if not (package.insured.property_address or "").strip():
            errors.append("Property address is required")
        return errors

    def _validate_line_items(self, package: SupplementPackage) -> List[str]:
        if not package.line_items:
            return ["At least one line item is required"]
        errors = []
        line_total = sum((item.rcv for item in package.line_items), ZERO)
        if abs(package.total_supplement_rcv - line_total) > CENT:
            errors.append(
                f"Supplement total {quantize_money(package.total_supplement_rcv)} does not match the sum of "
                f"line items {quantize_money(line_total)}"
            )
        return errors

    def _warn_identity(self, package: SupplementPackage) -> List[str]:
        if not (package.claim_ref.carrier or "").strip():
            return ["Carrier name is missing"]
        return []

    def _warn_line_items(self, package: SupplementPackage) -> List[str]:
        warnings = []
        for item in package.line_items:
            if not item.citation_id:
                warnings.append(f"{_label(item)} has no code citation")
            elif package.citation(item.citation_id) is None:
                warnings.append(f"{_label(item)} cites {item.citation_id}, which is not attached to the package")
            if item.rcv == 0:
                warnings.append(f"{_label(item)} is priced at 0")
                continue
            expected = quantize_money(item.quantity * item.unit_price)
            tolerance = max(CENT, item.quantity * HALF_CENT)
            if abs(item.rcv - expected) > tolerance:
                warnings.append(
                    f"{_label(item)} RCV {quantize_money(item.rcv)} does not equal quantity x unit price "
                    f"({expected})"
                )
        return warnings

    def _warn_defense_notes(self, package: SupplementPackage) -> List[str]:
        if not package.line_items:
            return []
        if not package.defense_notes:
            return ["No defense notes included - supplement may be denied"]
        return [
            f"{_label(item)} has no defense note"
            for item in package.line_items
            if package.defense_note_for(item.line_number) is None
        ]

    def _warn_photos(self, package: SupplementPackage) -> List[str]:
        if not package.photos:
            return ["No photos are attached to the supplement"]
        warnings = []
        completion = checklist_completion(package.photos, required_only=True)
        if completion.missing:
            titles = [item.title for item in next_incomplete_items(package.photos, required_only=True)]
            warnings.append(
                f"Photo checklist {completion.completed}/{completion.total} required shots "
                f"({completion.percentage}%); next: {', '.join(titles)}"
            )
        for item in package.line_items:
            shots = items_for_code(item.code)
            if shots and not any(shot.satisfied_by(photo) for shot in shots for photo in package.photos):
                warnings.append(f"{_label(item)} has no supporting photo ({shots[0].title})")
        return warnings


_validator = PackageValidator()


def validate_package(package: SupplementPackage) -> ValidationResult:
    """Validate a supplement package; see ``PackageValidator``."""
    return _validator.validate(package)
