"""Commission and payout ledger services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from uuid import UUID

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import Q, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.config import MarketplaceConfig
from shared.application.uow import DjangoUnitOfWork, run_in_unit_of_work
from shared.domain.exceptions import AuthorizationError, NotFoundError, StateError, ValidationError
from shared.domain.value_objects import Money, Principal, quantize_money

from .domain.ledger import Accrual, Payout, available_profit
from .models import Earning, Payout as PayoutModel
from .repositories import DjangoPayoutRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

ADMIN_ACCOUNTS = Q(role="admin") | Q(is_staff=True) | Q(is_superuser=True)


@dataclass(frozen=True)
class LedgerBalance:
    earned: Decimal
    reserved: Decimal
    available: Decimal
    currency: str


def _total(queryset, field: str) -> Decimal:
    value = queryset.aggregate(total=Sum(field))["total"]
    return quantize_money(value) if value is not None else ZERO


class CommissionLedger:
    """
    Owner balances and the payout workflow

    Owners withdraw the net of their completed bookings. Administrators
    withdraw from the platform pool: all commission ever captured.
    """

    def __init__(self, payout_repo: DjangoPayoutRepository | None = None, config: MarketplaceConfig | None = None):
        self.payout_repo = payout_repo or DjangoPayoutRepository()
        self._config = config

    @property
    def config(self) -> MarketplaceConfig:
        return self._config or MarketplaceConfig.from_settings()

    # --- accrual --------------------------------------------------------------

    def accrue(self, *, booking_id: UUID, owner_id: int, spa_id: int, accrual: Accrual) -> Earning:
        """
        Record what a completed booking earned

        Only the completion handler calls this, inside its own transaction.
        """
        if Earning.objects.filter(booking_id=booking_id).exists():
            raise StateError(f"Booking {booking_id} has already been accrued", booking_id=str(booking_id))
        earning = Earning.objects.create(
            booking_id=booking_id,
            owner_id=owner_id,
            spa_id=spa_id,
            gross_amount=accrual.gross.amount,
            commission_rate=accrual.commission_rate,
            commission_amount=accrual.commission.amount,
            net_amount=accrual.net.amount,
            currency=accrual.gross.currency,
        )
        logger.info(
            f"Accrued booking {booking_id}: gross {accrual.gross.amount}, "
            f"commission {accrual.commission.amount} @ {accrual.commission_rate}, net {accrual.net.amount} "
            f"for owner {owner_id}"
        )
        return earning

    # --- balances -------------------------------------------------------------

    def owner_balance(self, owner_id: int) -> LedgerBalance:
        earned = _total(Earning.objects.filter(owner_id=owner_id), "net_amount")
        reserved = _total(
            PayoutModel.objects.filter(owner_id=owner_id, status__in=PayoutModel.RESERVING),
            "amount",
        )
        return LedgerBalance(earned, reserved, available_profit(earned, reserved), self.config.currency)

    def platform_balance(self) -> LedgerBalance:
        earned = _total(Earning.objects.all(), "commission_amount")
        admin_ids = get_user_model().objects.filter(ADMIN_ACCOUNTS).values("pk")
        reserved = _total(
            PayoutModel.objects.filter(owner_id__in=admin_ids, status__in=PayoutModel.RESERVING),
            "amount",
        )
        return LedgerBalance(earned, reserved, available_profit(earned, reserved), self.config.currency)

    def available_profit(self, owner_id: int) -> Decimal:
        return self.owner_balance(owner_id).available

    def balance_for(self, principal: Principal) -> LedgerBalance:
        if principal.is_admin:
            return self.platform_balance()
        if principal.is_owner:
            return self.owner_balance(principal.user_id)
        raise AuthorizationError("Only spa owners and administrators have a balance")

    # --- payouts ----------------------------------------------------------------

    def request_payout(self, principal: Principal, amount, notes: str = "") -> Payout:
        """
        Reserve ``amount`` of the caller's available profit

        The caller's account row (all admin rows, in id order, for the platform
        pool) is locked before the balance is re-derived, so two concurrent
        requests against the same funds are serialized and the second sees
        the first one's reservation.
        """
        if not (principal.is_owner or principal.is_admin):
            raise AuthorizationError("Only spa owners and administrators can request payouts")
        value = self._parse_amount(amount)
        config = self.config
        logger.info(f"Payout request by {principal.role.value} {principal.user_id}: {value}")

        def operation(uow: DjangoUnitOfWork) -> Payout:
            self._lock_accounts(principal)
            account = get_user_model().objects.get(pk=principal.user_id)
            if not account.has_bank_account():
                raise ValidationError("Link a bank account before requesting a payout", field="bank_account")
            balance = self.balance_for(principal)
            payout = Payout.request(
                owner_id=principal.user_id,
                amount=Money(value, config.currency),
                available=balance.available,
                notes=notes,
            )
            uow.collect_events(payout)
            self.payout_repo.save(payout)
            return payout

        payout = run_in_unit_of_work(operation, attempts=config.transaction_retries)
        logger.info(f"Payout {payout.id} requested by {principal.user_id} for {payout.amount.amount}")
        return payout

    def review(self, principal: Principal, payout_id: UUID, approved: bool, notes: str = "") -> Payout:
        self._require_admin(principal)

        def operation(uow: DjangoUnitOfWork) -> Payout:
            payout = self._get_locked(payout_id)
            payout.review(principal.user_id, approved, notes, now=timezone.now())
            uow.collect_events(payout)
            self.payout_repo.save(payout)
            return payout

        payout = run_in_unit_of_work(operation, attempts=self.config.transaction_retries)
        logger.info(f"Payout {payout_id} {payout.status.value} by admin {principal.user_id}")
        return payout

    def complete(self, principal: Principal, payout_id: UUID, notes: str = "") -> Payout:
        self._require_admin(principal)

        def operation(uow: DjangoUnitOfWork) -> Payout:
            payout = self._get_locked(payout_id)
            payout.complete(notes, now=timezone.now())
            uow.collect_events(payout)
            self.payout_repo.save(payout)
            return payout

        payout = run_in_unit_of_work(operation, attempts=self.config.transaction_retries)
        logger.info(f"Payout {payout_id} completed by admin {principal.user_id}")
        return payout

    def payouts_visible_to(self, principal: Principal):
        queryset = PayoutModel.objects.select_related("owner")
        if principal.is_admin:
            return queryset
        return queryset.filter(owner_id=principal.user_id)

    # --- helpers ----------------------------------------------------------------

    @staticmethod
    def _parse_amount(amount) -> Decimal:
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError):
            raise ValidationError("Payout amount must be a number", field="amount") from None
        if not value.is_finite() or value <= 0:
            raise ValidationError("Payout amount must be positive", field="amount")
        if value != quantize_money(value):
            raise ValidationError("Payout amount has more than two decimal places", field="amount")
        return value

    @staticmethod
    def _require_admin(principal: Principal) -> None:
        if not principal.is_admin:
            raise AuthorizationError("Only administrators can review payouts")

    @staticmethod
    def _lock_accounts(principal: Principal) -> None:
        users = get_user_model().objects.select_for_update()
        if principal.is_admin:
            locked = users.filter(ADMIN_ACCOUNTS | Q(pk=principal.user_id)).order_by("pk")
        else:
            locked = users.filter(pk=principal.user_id)
        list(locked.values_list("pk", flat=True))

    def _get_locked(self, payout_id: UUID) -> Payout:
        payout = self.payout_repo.get(payout_id, lock=True)
        if payout is None:
            raise NotFoundError(f"Payout {payout_id} not found", payout_id=str(payout_id))
        return payout
