"""OAuth infrastructure provider for multi-provider authentication."""

from dishka import Scope, provide

from desk.adapter.google.client import GoogleOAuthClient
from desk.domain.service.auth_service import OAuthClient
from desk.domain.value import AuthProvider
from desk.util.di.base import ProviderBase


class OAuthAggregatorProvider(ProviderBase):
    """Provider that aggregates all OAuth clients into a dictionary."""

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_oauth_clients(
        self, google_oauth_client: GoogleOAuthClient
    ) -> dict[AuthProvider, OAuthClient]:
        """Provide dictionary of all OAuth clients by provider.

        Args:
            google_oauth_client: Google OAuth client (specific type)

        Returns:
            Dictionary mapping AuthProvider to OAuthClient
        """
        return {AuthProvider.GOOGLE: google_oauth_client}
