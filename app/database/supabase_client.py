from supabase import create_client, Client, ClientOptions
from app.config import settings
import logging

logger = logging.getLogger(__name__)


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        """Anonymous client: RLS evaluates every query as the `anon` role."""
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Use in operator scripts only."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def new_client(cls) -> Client:
        """Uncached anonymous client for sign-in/sign-up, which store a session on the client."""
        return create_client(settings.supabase_url, settings.supabase_key)

    @classmethod
    def for_access_token(cls, access_token: str) -> Client:
        """Fresh client whose PostgREST and Storage requests carry the caller's JWT.

        The caller owns the client and hands it to close() when done.
        """
        options = ClientOptions(headers={"Authorization": f"Bearer {access_token}"})
        return create_client(settings.supabase_url, settings.supabase_key, options=options)

    @classmethod
    def close(cls, client: Client) -> None:
        """Release the HTTP connection pool held by a per-request client."""
        try:
            client.postgrest.session.close()
        except Exception as e:
            logger.warning(f"Failed to close Supabase client session: {e}")


def get_supabase() -> Client:
    return SupabaseClient.get_client()


def get_session_supabase() -> Client:
    return SupabaseClient.new_client()
