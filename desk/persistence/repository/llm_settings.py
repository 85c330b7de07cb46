"""PostgreSQL implementation of LLM settings repository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from desk.domain.model import UserLlmSettings
from desk.domain.repository import LlmSettingsRepository
from desk.domain.value import UserId
from desk.persistence.mappers import llm_settings_to_dict, row_to_llm_settings
from desk.persistence.tables import user_llm_settings_table


class PostgresLlmSettingsRepository(LlmSettingsRepository):
    """PostgreSQL implementation of LlmSettingsRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_user_id(self, user_id: UserId) -> Optional[UserLlmSettings]:
        """Find a user's settings."""
        stmt = select(user_llm_settings_table).where(
            user_llm_settings_table.c.user_id == user_id
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_llm_settings(dict(row)) if row else None

    async def save(self, settings: UserLlmSettings) -> UserLlmSettings:
        """Upsert a user's settings on ``user_id``."""
        values = llm_settings_to_dict(settings)
        stmt = insert(user_llm_settings_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[user_llm_settings_table.c.user_id],
            set_={
                "provider": stmt.excluded.provider,
                "model": stmt.excluded.model,
                "openai_api_key_enc": stmt.excluded.openai_api_key_enc,
                "anthropic_api_key_enc": stmt.excluded.anthropic_api_key_enc,
                "google_api_key_enc": stmt.excluded.google_api_key_enc,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(user_llm_settings_table)
        result = await self.session.execute(stmt)
        row = result.mappings().one()
        await self.session.flush()
        return row_to_llm_settings(dict(row))
