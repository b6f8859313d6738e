from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

import app.core.database as db_module
from app.core.database import ApiToken, ContactInfo
from app.core.exceptions import NotFoundError
from app.core.security import API_TOKEN_PREFIX, generate_api_token, get_token_prefix, hash_api_token
from app.services.activity.visibility import Viewer


class AuthService:
    def __init__(self, session_factory: async_sessionmaker | None = None):
        self._session_factory = session_factory or db_module.async_session

    async def get_or_create_contact(
        self, email: str, roles: int = 0, first_name: str = "", last_name: str = ""
    ) -> ContactInfo:
        async with self._session_factory() as session:
            result = await session.execute(select(ContactInfo).where(ContactInfo.email == email))
            contact = result.scalar_one_or_none()
            if contact is None:
                contact = ContactInfo(email=email, roles=roles, first_name=first_name, last_name=last_name)
                session.add(contact)
                await session.commit()
                await session.refresh(contact)
            return contact

    async def load_viewer(self, contact_id: int) -> Viewer:
        async with self._session_factory() as session:
            contact = await session.get(ContactInfo, contact_id)
        if contact is None or contact.disabled:
            raise NotFoundError(f"Contact {contact_id} not found.")
        return Viewer(contact_id=contact.contact_id, roles=contact.roles)

    async def create_token(self, contact_id: int, label: str) -> tuple[str, ApiToken]:
        """Create a new API token. Returns (raw_token, token_row). The raw token is only available at creation time."""
        raw_token = generate_api_token()
        token_row = ApiToken(
            token_hash=hash_api_token(raw_token),
            token_prefix=get_token_prefix(raw_token),
            label=label,
            contact_id=contact_id,
            is_active=True,
        )
        async with self._session_factory() as session:
            session.add(token_row)
            await session.commit()
            await session.refresh(token_row)
        return raw_token, token_row

    async def revoke_token(self, token_identifier: str) -> bool:
        """Revoke a token by prefix or full token. Returns True if found and revoked."""
        async with self._session_factory() as session:
            if token_identifier.startswith(API_TOKEN_PREFIX) and len(token_identifier) > 20:
                result = await session.execute(
                    select(ApiToken).where(
                        ApiToken.token_hash == hash_api_token(token_identifier),
                        ApiToken.is_active == True,  # noqa: E712
                    )
                )
            else:
                result = await session.execute(
                    select(ApiToken).where(
                        ApiToken.token_prefix == token_identifier,
                        ApiToken.is_active == True,  # noqa: E712
                    )
                )

            token_row = result.scalars().first()
            if token_row is None:
                return False

            token_row.is_active = False
            await session.commit()
            return True
