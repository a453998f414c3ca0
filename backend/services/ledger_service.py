"""Token balances and the append-only transaction ledger."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from models import Profile, TokenTransaction
from schemas.wager import TransactionType
from utils.errors import InsufficientBalanceError, NotFoundError

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Moves tokens between the house escrow and user profiles.

    Balances are only changed with a single relative UPDATE so concurrent
    settlements never lose a write. Every movement is paired with a
    TokenTransaction row; the caller owns the commit.
    """

    async def get_profile(self, db: AsyncSession, user_id: UUID) -> Optional[Profile]:
        """Fetch a profile by user ID."""
        result = await db.execute(select(Profile).where(Profile.id == user_id))
        return result.scalar_one_or_none()

    async def ensure_profile(
        self,
        db: AsyncSession,
        user_id: UUID,
        display_name: Optional[str] = None,
    ) -> Profile:
        """Get the profile, creating it with the starting balance if missing."""
        profile = await self.get_profile(db, user_id)
        if profile:
            if display_name and not profile.display_name:
                profile.display_name = display_name
            return profile

        profile = Profile(
            id=user_id,
            display_name=display_name,
            token_balance=settings.sportsbook.initial_token_balance,
        )
        db.add(profile)
        await db.flush()
        logger.info(
            f"Created profile {user_id} with {profile.token_balance} tokens"
        )
        return profile

    async def get_balance(self, db: AsyncSession, user_id: UUID) -> int:
        """Current balance read straight from the table."""
        result = await db.execute(
            select(Profile.token_balance).where(Profile.id == user_id)
        )
        balance = result.scalar_one_or_none()
        if balance is None:
            raise NotFoundError(f"Profile {user_id} not found")
        return balance

    async def adjust_balance(
        self,
        db: AsyncSession,
        user_id: UUID,
        amount: int,
        require_funds: bool = False,
    ) -> int:
        """
        Atomically add ``amount`` (negative to debit) to a balance.

        With ``require_funds`` a debit that would overdraw the balance
        matches no row and raises InsufficientBalanceError.

        Returns:
            The balance after the update.
        """
        stmt = (
            update(Profile)
            .where(Profile.id == user_id)
            .values(token_balance=Profile.token_balance + amount)
            .execution_options(synchronize_session=False)
        )
        if require_funds and amount < 0:
            stmt = stmt.where(Profile.token_balance >= -amount)

        result = await db.execute(stmt)
        if result.rowcount == 0:
            balance = await self.get_balance(db, user_id)
            raise InsufficientBalanceError(
                f"Insufficient balance: {balance} < {-amount} tokens"
            )

        return await self.get_balance(db, user_id)

    async def record_transaction(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        league_id: UUID,
        amount: int,
        type: TransactionType,
        bet_id: Optional[UUID] = None,
        description: Optional[str] = None,
    ) -> TokenTransaction:
        """Append a ledger entry."""
        entry = TokenTransaction(
            user_id=user_id,
            league_id=league_id,
            bet_id=bet_id,
            amount=amount,
            type=TransactionType(type).value,
            description=description,
        )
        db.add(entry)
        await db.flush()
        return entry

    async def post(
        self,
        db: AsyncSession,
        *,
        user_id: UUID,
        league_id: UUID,
        amount: int,
        type: TransactionType,
        bet_id: Optional[UUID] = None,
        description: Optional[str] = None,
        require_funds: bool = False,
    ) -> int:
        """Adjust a balance and record the matching transaction."""
        balance = await self.adjust_balance(
            db, user_id, amount, require_funds=require_funds
        )
        await self.record_transaction(
            db,
            user_id=user_id,
            league_id=league_id,
            amount=amount,
            type=type,
            bet_id=bet_id,
            description=description,
        )
        logger.debug(
            f"Ledger {TransactionType(type).value}: {amount:+d} -> {user_id} "
            f"(balance {balance})"
        )
        return balance

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: UUID,
        league_id: Optional[UUID] = None,
        limit: int = 100,
    ) -> list[TokenTransaction]:
        """Ledger history for a user, newest first."""
        query = select(TokenTransaction).where(TokenTransaction.user_id == user_id)
        if league_id is not None:
            query = query.where(TokenTransaction.league_id == league_id)
        query = query.order_by(TokenTransaction.created_at.desc()).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())


# Singleton instance
ledger_service = LedgerService()
