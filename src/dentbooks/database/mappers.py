"""Mapper functions to convert SQLAlchemy rows into domain entities.

This layer isolates the conversion logic so the services never depend on
the table layout.
"""

import json

from dentbooks.domain import entities as domain
from dentbooks.database.models import (
    Category as ORMCategory,
    Collection as ORMCollection,
    Practice as ORMPractice,
    Production as ORMProduction,
    Reconciliation as ORMReconciliation,
    Setting as ORMSetting,
    TaxEvent as ORMTaxEvent,
    Transaction as ORMTransaction,
)


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        type=domain.TransactionType(orm_category.type),
        created_at=orm_category.created_at,
    )


def practice_to_domain(orm_practice: ORMPractice) -> domain.Practice:
    """Convert SQLAlchemy Practice model to domain Practice entity."""
    return domain.Practice(
        id=orm_practice.id,
        name=orm_practice.name,
        address=orm_practice.address,
        city=orm_practice.city,
        state=orm_practice.state,
        zip_code=orm_practice.zip_code,
        tax_id=orm_practice.tax_id,
        is_active=orm_practice.is_active,
        created_at=orm_practice.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        amount=orm_transaction.amount,
        type=domain.TransactionType(orm_transaction.type),
        category_id=orm_transaction.category_id,
        practice_id=orm_transaction.practice_id,
        status=domain.TransactionStatus(orm_transaction.status),
        reconciled=orm_transaction.reconciled,
        payment_method=orm_transaction.payment_method,
        note=orm_transaction.note,
        created_at=orm_transaction.created_at,
    )


def production_to_domain(orm_production: ORMProduction) -> domain.Production:
    """Convert SQLAlchemy Production model to domain Production entity."""
    return domain.Production(
        id=orm_production.id,
        date=orm_production.date,
        practice_id=orm_production.practice_id,
        patient_id=orm_production.patient_id,
        amount=orm_production.amount,
        created_at=orm_production.created_at,
    )


def collection_to_domain(orm_collection: ORMCollection) -> domain.Collection:
    """Convert SQLAlchemy Collection model to domain Collection entity."""
    return domain.Collection(
        id=orm_collection.id,
        date=orm_collection.date,
        practice_id=orm_collection.practice_id,
        production_id=orm_collection.production_id,
        amount=orm_collection.amount,
        payment_method=orm_collection.payment_method,
        created_at=orm_collection.created_at,
    )


def reconciliation_to_domain(orm_reconciliation: ORMReconciliation) -> domain.Reconciliation:
    """Convert SQLAlchemy Reconciliation model to domain Reconciliation entity."""
    return domain.Reconciliation(
        id=orm_reconciliation.id,
        practice_id=orm_reconciliation.practice_id,
        month=orm_reconciliation.month,
        year=orm_reconciliation.year,
        bank_balance=orm_reconciliation.bank_balance,
        book_balance=orm_reconciliation.book_balance,
        difference=orm_reconciliation.difference,
        status=domain.ReconciliationStatus(orm_reconciliation.status),
        created_at=orm_reconciliation.created_at,
    )


def tax_event_to_domain(orm_event: ORMTaxEvent) -> domain.TaxEvent:
    """Convert SQLAlchemy TaxEvent model to domain TaxEvent entity."""
    return domain.TaxEvent(
        id=orm_event.id,
        quarter=orm_event.quarter,
        year=orm_event.year,
        type=orm_event.type,
        due_date=orm_event.due_date,
        amount=orm_event.amount,
        paid_date=orm_event.paid_date,
        note=orm_event.note,
        created_at=orm_event.created_at,
    )


def setting_to_domain(orm_setting: ORMSetting) -> domain.Setting:
    """Convert SQLAlchemy Setting model to domain Setting entity."""
    value = json.loads(orm_setting.value) if orm_setting.value is not None else None
    return domain.Setting(key=orm_setting.key, value=value)
