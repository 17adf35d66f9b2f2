import logging

from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)


class BioConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bio'
    verbose_name = "Medical bio pages"

    def ready(self):
        from bio.services.cipher import CipherConfig, FieldCipher
        from bio.services.codec import MedicalDataCodec

        secret = getattr(settings, 'FIELD_ENCRYPTION_SECRET', '')
        if not secret:
            raise ImproperlyConfigured(
                "FIELD_ENCRYPTION_SECRET must be set; medical fields cannot be encrypted without it"
            )
        config = CipherConfig(secret=secret, salt=getattr(settings, 'FIELD_ENCRYPTION_SALT', 'salt'))
        self.codec = MedicalDataCodec(FieldCipher(config))
        logger.debug("field cipher key derived")
