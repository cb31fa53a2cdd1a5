"""Resolution of client model ids into provider-routable models."""

import logging

from sqlalchemy.exc import SQLAlchemyError

from routerchat.conf.config import Config
from routerchat.src.data_classes import ResolvedModel
from routerchat.src.services.errors import MisconfiguredProviderError, ModelNotFoundError
from routerchat.src.services.store import CatalogStore, SettingsStore

logger = logging.getLogger(__name__)


class ModelResolver:
    """Maps a catalog model id to a provider model string and the API credential.

    Inactive models still resolve, so conversations that already use a
    deactivated model keep working.
    """

    def __init__(
        self,
        catalog_store: CatalogStore,
        settings_store: SettingsStore,
        api_key_setting: str = Config.OPENROUTER_API_KEY_SETTING,
    ):
        self.catalog_store = catalog_store
        self.settings_store = settings_store
        self.api_key_setting = api_key_setting

    def resolve(self, model_id: str) -> ResolvedModel:
        """Resolve a client-supplied model id.

        Args:
            model_id: Internal catalog id sent by the client

        Returns:
            ResolvedModel with provider model string and credential

        Raises:
            ModelNotFoundError: If the model is unknown or the catalog is unreachable
            MisconfiguredProviderError: If no provider credential is configured
        """
        try:
            model = self.catalog_store.get_model(model_id)
        except SQLAlchemyError as e:
            logger.error(f"Model catalog lookup failed: {str(e)}")
            raise ModelNotFoundError()
        if model is None:
            logger.info(f"Unknown model id requested: {model_id}")
            raise ModelNotFoundError()

        try:
            api_key = self.settings_store.get_setting(self.api_key_setting)
        except SQLAlchemyError as e:
            logger.error(f"Settings lookup failed: {str(e)}")
            raise MisconfiguredProviderError()
        if not api_key:
            logger.error(f"Provider credential '{self.api_key_setting}' is not configured")
            raise MisconfiguredProviderError()

        return ResolvedModel(
            model_id=model.id,
            provider_model_id=model.provider_model_id,
            api_key=api_key,
        )
